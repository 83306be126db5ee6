"""Package logger setup."""

import logging

import pytest

from galaxyho.logging_config import ColorFormatter, setup_logging


@pytest.fixture(autouse=True)
def _reset_handlers():
    yield
    logger = logging.getLogger("galaxyho")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_setup_attaches_console_handler():
    logger = setup_logging(logging.DEBUG)
    assert logger.name == "galaxyho"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_repeated_setup_does_not_stack_handlers():
    setup_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1


def test_file_handler_writes_plain_text(tmp_path):
    log_file = tmp_path / "logs" / "galaxyho.log"
    logger = setup_logging(logging.INFO, log_file=log_file)
    logging.getLogger("galaxyho.models.galaxy").info("placed %d stars", 100)
    for handler in logger.handlers:
        handler.flush()
    text = log_file.read_text()
    assert "placed 100 stars" in text
    assert "\033[" not in text


def test_color_formatter_restores_level_name():
    record = logging.LogRecord("galaxyho", logging.WARNING, __file__, 1, "hi", None, None)
    out = ColorFormatter("%(levelname)s %(message)s", use_color=True).format(record)
    assert "\033[33m" in out
    assert record.levelname == "WARNING"
