import logging

import pytest

from adaptive_chunking.logging_config import (
    ROOT_LOGGER,
    get_logger,
    level_from_flags,
    setup_logging,
)


@pytest.fixture
def package_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_setup_logging_with_file(tmp_path, package_logger):
    log_file = tmp_path / "logs" / "chunking.log"
    logger = setup_logging(level=logging.DEBUG, log_file=log_file)

    assert logger is package_logger
    assert len(logger.handlers) == 2

    # Repeated setup replaces handlers instead of stacking them
    first_handlers = list(logger.handlers)
    setup_logging(level=logging.DEBUG, log_file=log_file)
    assert len(logger.handlers) == 2
    assert not set(first_handlers) & set(logger.handlers)

    get_logger("test").info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "adaptive_chunking.test - INFO - hello" in log_file.read_text(encoding="utf-8")


def test_setup_logging_level_and_format(tmp_path, package_logger):
    log_file = tmp_path / "chunking.log"
    setup_logging(level=logging.WARNING, log_file=log_file, format_string="%(levelname)s|%(message)s")

    get_logger("service").info("hidden")
    get_logger("service").warning("shown")
    for handler in package_logger.handlers:
        handler.flush()

    assert log_file.read_text(encoding="utf-8") == "WARNING|shown\n"


@pytest.mark.parametrize("verbose, quiet, expected", [
    (False, False, logging.INFO),
    (True, False, logging.DEBUG),
    (False, True, logging.WARNING),
    (True, True, logging.DEBUG),
])
def test_level_from_flags(verbose, quiet, expected):
    assert level_from_flags(verbose, quiet) == expected


def test_get_logger_names():
    assert get_logger("cli").name == "adaptive_chunking.cli"
    assert get_logger("adaptive_chunking.service").name == "adaptive_chunking.service"
