"""
Unit tests for setup_logger().
"""

import logging

import pytest

from transactional_io.utils import setup_logger


@pytest.fixture
def logger_name(request):
    name = f"transactional_io.test.{request.node.name}"
    yield name
    for handler in list(logging.getLogger(name).handlers):
        logging.getLogger(name).removeHandler(handler)
        handler.close()


class TestSetupLogger:
    """Test console and file handler setup."""

    def test_level_by_name(self, logger_name):
        logger = setup_logger(logger_name, level="debug")

        assert logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in logger.handlers)

    def test_unknown_level(self, logger_name):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logger(logger_name, level="LOUD")

    def test_repeated_setup_replaces_handlers(self, logger_name):
        setup_logger(logger_name)
        logger = setup_logger(logger_name)

        assert len(logger.handlers) == 1

    def test_log_file(self, logger_name, tmp_path):
        log_file = tmp_path / "logs" / "transactions.log"
        logger = setup_logger(logger_name, log_file=log_file)

        logger.info("Committed transaction on settings.xml")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "Committed transaction on settings.xml" in log_file.read_text()
