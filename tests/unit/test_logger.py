"""Unit tests for logging setup."""

import logging

from utils.logger import ROOT_LOGGER_NAME, get_logger, setup_logging


def _close_handlers():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()


def test_setup_logging_writes_debug_to_file(tmp_path):
    log_file = setup_logging(tmp_path)
    try:
        get_logger("core.analysis").debug("CRS already aligned: EPSG:27700")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        assert log_file.parent == tmp_path
        assert log_file.name.startswith("greenspace_")
        content = log_file.read_text(encoding="utf-8")
        assert "greenspace.core.analysis - DEBUG - CRS already aligned" in content
    finally:
        _close_handlers()


def test_repeated_setup_does_not_duplicate_handlers(tmp_path):
    try:
        setup_logging(tmp_path)
        setup_logging(tmp_path)
        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 2
    finally:
        _close_handlers()


def test_module_loggers_nest_under_root():
    assert get_logger("vector_io.load_input").name == "greenspace.vector_io.load_input"
