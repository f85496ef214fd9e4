import logging

import pytest

from launchdeck.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_repeated_setup_does_not_duplicate_handlers(tmp_path):
    setup_logging("DEBUG")
    setup_logging("DEBUG")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1


def test_file_handler_writes_under_logs_dir(tmp_path):
    log_file = tmp_path / "logs" / "launchdeck.log"
    setup_logging(logging.INFO, log_file)

    logging.getLogger("launchdeck.test").info("hello from the test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "INFO - launchdeck.test - hello from the test" in log_file.read_text(encoding="utf-8")


def test_unknown_level_falls_back_to_info():
    setup_logging("NOT-A-LEVEL")
    assert logging.getLogger().level == logging.INFO


def test_console_output_goes_to_stderr(capsys):
    setup_logging(logging.INFO)

    logging.getLogger("launchdeck.test").warning("console check")

    captured = capsys.readouterr()
    assert "WARNING - launchdeck.test - console check" in captured.err
    assert captured.out == ""
