"""Unified logging for Timewarden with console and file output."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

console = Console()

# Log file configuration
LOG_DIR = Path("/var/log/timewarden")
LOG_FILE = LOG_DIR / "timewarden.log"
FALLBACK_LOG_FILE = Path("/tmp/timewarden.log")

_file_logging_configured = False


def setup_file_logging(log_file: str = None, verbose: bool = False):
    """Set up file logging for scheduled maintenance runs.

    Args:
        log_file: Path to log file (defaults to /var/log/timewarden/timewarden.log)
        verbose: Enable debug-level logging

    Note:
        Falls back to /tmp when the log directory is not writable.
    """
    global _file_logging_configured

    if _file_logging_configured:
        return

    target_log_file = Path(log_file) if log_file else LOG_FILE

    try:
        target_log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target_log_file)
    except PermissionError:
        target_log_file = FALLBACK_LOG_FILE
        try:
            file_handler = logging.FileHandler(target_log_file)
        except OSError as e:
            _file_logging_configured = True
            get_logger(__name__).warning(f"File logging disabled, cannot open {target_log_file}: {e}")
            return

    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger("timewarden")
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if verbose:
        for name, existing in logging.root.manager.loggerDict.items():
            if name.startswith("timewarden.") and isinstance(existing, logging.Logger):
                existing.setLevel(logging.DEBUG)

    _file_logging_configured = True

    root_logger.info(f"Timewarden logging initialized: {target_log_file}")


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance with console output.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger with Rich console handler
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger
