import csv
import io
import logging
import os

import numpy as np

import rasteredit
from rasteredit.kernel import performance
from rasteredit.kernel.performance import PERF_LOG_HEADER, init_perf_log, time_function
from rasteredit.kernel.system.config import APP_CONFIG, OVERLAY_PRESETS
from rasteredit.kernel.system.logging import get_logger, setup_logging
from rasteredit.kernel.validation import validate_int


def test_version_is_read_from_file():
    version_file = os.path.join(os.path.dirname(rasteredit.__file__), "VERSION")
    with open(version_file) as f:
        assert rasteredit.__version__ == f.read().strip()


def test_get_logger_namespacing():
    assert get_logger("perf").name == "rasteredit.perf"
    assert get_logger("rasteredit.services.rendering.engine").name == "rasteredit.services.rendering.engine"
    assert get_logger().name == "rasteredit"


def test_setup_logging_is_idempotent():
    logger = setup_logging(level=logging.INFO)
    n_handlers = len(logger.handlers)

    logger = setup_logging(level=logging.DEBUG)
    assert len(logger.handlers) == n_handlers
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_time_function_preserves_result_and_name(caplog):
    @time_function
    def double(arr):
        return arr * 2

    setup_logging(level=logging.DEBUG)
    arr = np.ones((3, 4), dtype=np.float32)
    with caplog.at_level(logging.DEBUG, logger="rasteredit.perf"):
        res = double(arr)

    assert double.__name__ == "double"
    np.testing.assert_array_equal(res, arr * 2)
    assert any("PERF: double" in r.getMessage() and "(3, 4)" in r.getMessage() for r in caplog.records)


def test_perf_csv_written_when_configured(tmp_path, monkeypatch):
    log_path = str(tmp_path / "perf" / "perf.csv")
    monkeypatch.setattr(APP_CONFIG, "perf_log_path", log_path)

    @time_function
    def noop(x):
        return x

    noop(np.zeros((2, 2)))
    noop(np.zeros((5, 1)))

    with open(log_path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == PERF_LOG_HEADER
    assert [r[1] for r in rows[1:]] == ["noop", "noop"]
    assert rows[2][3] == "(5, 1)"


def test_perf_csv_skipped_by_default(tmp_path, monkeypatch):
    monkeypatch.setattr(APP_CONFIG, "perf_log_path", None)
    called = []
    monkeypatch.setattr(performance, "init_perf_log", lambda p: called.append(p))

    time_function(lambda: 1)()
    assert called == []


def test_init_perf_log_keeps_existing_file(tmp_path):
    log_path = tmp_path / "perf.csv"
    log_path.write_text("existing\n")
    init_perf_log(str(log_path))
    assert log_path.read_text() == "existing\n"


def test_app_config_defaults():
    assert 1 <= APP_CONFIG.default_jpeg_quality <= 100
    assert APP_CONFIG.filename_pattern == "edited_image"
    assert APP_CONFIG.default_export_dir.startswith(APP_CONFIG.user_dir)
    assert set(OVERLAY_PRESETS) == {"none", "gradient", "pattern"}


def test_validate_int_handles_non_finite():
    assert validate_int(float("inf"), 3) == 3
    assert validate_int(float("-inf")) == 0
    assert validate_int(float("nan"), 7) == 7
    assert validate_int("12") == 12
    assert validate_int(None, 5) == 5


def test_setup_logging_quiets_third_party_debug():
    setup_logging(level=logging.DEBUG)
    assert logging.getLogger("numba").level == logging.WARNING
    assert logging.getLogger("PIL").level == logging.WARNING


def test_setup_logging_writes_to_given_stream():
    logger = logging.getLogger("rasteredit")
    saved = list(logger.handlers)
    for h in saved:
        logger.removeHandler(h)
    try:
        stream = io.StringIO()
        setup_logging(level=logging.INFO, stream=stream)
        get_logger("tests").info("hello")
        assert "INFO     rasteredit.tests: hello" in stream.getvalue()
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
        for h in saved:
            logger.addHandler(h)
