"""Privilege checks for commands that change the host."""
from timewarden.core.logger import get_logger

logger = get_logger(__name__)

ROOT_REQUIRED_MESSAGE = "This script must be run as root or with sudo."


class PrivilegeError(Exception):
    """Raised when a host-changing command runs without root."""
    pass


def require_root(system) -> None:
    """Fail fast unless running as root.

    Mock mode skips the check since nothing on the host is changed.

    Raises:
        PrivilegeError: If the effective user is not root
    """
    if system.mock:
        logger.debug("MOCK: Skipping root check")
        return
    if not system.is_root():
        raise PrivilegeError(ROOT_REQUIRED_MESSAGE)


def warn_if_not_root(system) -> bool:
    """Log a warning for read-only commands that may see less without root.

    Returns:
        True if running as root
    """
    if system.is_root():
        return True
    logger.warning("Not running as root. Some checks may fail.")
    return False
