"""Unit tests for structured logging."""

import logging

from cronlock.utils.logging import (
    LOGGER_NAME,
    ContextLogger,
    enable_debug_logging,
    get_default_logger,
    setup_logger,
)


class TestContextLogger:
    """Unit tests for ContextLogger."""

    def test_job_context_comes_first(self):
        """Test the job name leads the rendered context."""
        logger = get_default_logger().with_context(pid=42).for_job("backup")
        rendered = logger._format_context({"lock": "backup.lck"})

        assert logger.job_name == "backup"
        assert rendered == "job=backup, pid=42, lock=backup.lck"

    def test_none_values_are_dropped(self):
        """Test unset context values are left out."""
        logger = get_default_logger("report")

        assert logger._format_context({"environment": None}) == "job=report"

    def test_without_job(self):
        """Test a logger not bound to a job."""
        logger = get_default_logger()

        assert logger.job_name is None
        assert logger._format_context({"pid": 1}) == "pid=1"

    def test_records_carry_context(self, caplog):
        """Test emitted records hold the rendered context."""
        logger = ContextLogger(logging.getLogger(LOGGER_NAME)).for_job("backup")

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            logger.info("Job launched", pid=4242)

        record = caplog.records[-1]
        assert record.getMessage() == "Job launched"
        assert record.context == "job=backup, pid=4242"

    def test_error_with_traceback(self, caplog):
        """Test exc_info is passed through on errors."""
        logger = get_default_logger("backup")

        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.error("Job runner failed", exc_info=True)

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.exc_info is not None


class TestSetupLogger:
    """Unit tests for logger setup."""

    def test_single_handler(self):
        """Test repeated setup does not stack handlers."""
        logger = setup_logger("cronlock-test-setup")
        setup_logger("cronlock-test-setup")

        assert len(logger.handlers) == 1

    def test_enable_debug_logging(self):
        """Test debug mode lowers the logger and its handlers."""
        logger = setup_logger("cronlock-test-debug")

        enable_debug_logging("cronlock-test-debug")

        assert logger.level == logging.DEBUG
        assert all(handler.level == logging.DEBUG for handler in logger.handlers)
