"""Tests for file logging setup."""
import logging

from timewarden.core import logger as tw_logger


class TestFileLogging:
    """File logging never stops a command from running."""

    def test_writes_to_requested_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(tw_logger, "_file_logging_configured", False)
        log_file = tmp_path / "logs" / "timewarden.log"
        root = logging.getLogger("timewarden")
        before = list(root.handlers)

        try:
            tw_logger.setup_file_logging(log_file=str(log_file))
            assert "logging initialized" in log_file.read_text()
        finally:
            for handler in root.handlers[len(before):]:
                handler.close()
            root.handlers = before

    def test_unwritable_fallback_keeps_console_logging(self, tmp_path, monkeypatch):
        def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(tw_logger, "_file_logging_configured", False)
        monkeypatch.setattr(tw_logger.logging, "FileHandler", refuse)
        root = logging.getLogger("timewarden")
        before = list(root.handlers)

        tw_logger.setup_file_logging(log_file=str(tmp_path / "timewarden.log"))

        assert root.handlers == before
        assert tw_logger._file_logging_configured is True
