import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output with compiler/IO internals
NOISY_LOGGERS = ("numba", "PIL", "urllib3")


def setup_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configures the "rasteredit" logger. Calling it again only changes the level.

    Records go to stderr by default so they interleave with CLI progress and
    never mix with data written to stdout.
    """
    logger = logging.getLogger("rasteredit")
    logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Sub-logger under the "rasteredit" namespace. Module __name__ values are
    already namespaced and are used as-is.
    """
    if not name:
        return logging.getLogger("rasteredit")
    if name == "rasteredit" or name.startswith("rasteredit."):
        return logging.getLogger(name)
    return logging.getLogger(f"rasteredit.{name}")
