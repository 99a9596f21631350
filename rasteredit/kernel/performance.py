import csv
import functools
import os
import time
from typing import Any, Callable, TypeVar

from typing_extensions import ParamSpec

from rasteredit.kernel.system.config import APP_CONFIG
from rasteredit.kernel.system.logging import get_logger

logger = get_logger("perf")

P = ParamSpec("P")
R = TypeVar("R")

PERF_LOG_HEADER = ["timestamp", "function", "duration_ms", "image_shape"]


def init_perf_log(log_path: str) -> None:
    dirname = os.path.dirname(log_path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)

    if not os.path.exists(log_path):
        with open(log_path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(PERF_LOG_HEADER)


def log_to_csv(function_name: str, duration_ms: float, shape: Any) -> None:
    log_path = APP_CONFIG.perf_log_path
    if not log_path:
        return
    try:
        init_perf_log(log_path)
        with open(log_path, "a", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    time.strftime("%Y-%m-%d %H:%M:%S"),
                    function_name,
                    f"{duration_ms:.3f}",
                    str(shape),
                ]
            )
    except OSError as e:
        logger.error(f"Failed to log perf stats: {e}")


def _find_shape(args: tuple, kwargs: dict) -> Any:
    for arg in list(args) + list(kwargs.values()):
        if hasattr(arg, "shape"):
            return getattr(arg, "shape")
    return "N/A"


def time_function(func: Callable[P, R]) -> Callable[P, R]:
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        result = func(*args, **kwargs)
        duration_ms = (time.perf_counter() - start) * 1000

        shape = _find_shape(args, kwargs)
        logger.debug(f"PERF: {func.__name__} took {duration_ms:.3f}ms (shape: {shape})")
        log_to_csv(func.__name__, duration_ms, shape)
        return result

    return wrapper
