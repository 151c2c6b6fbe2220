"""Check live time settings against the expected configuration.

Each check is a single read-and-compare. Drift and file problems are
reported as failed checks, never raised, so one bad check does not stop
the others from running.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from timewarden.core.config import TimeSyncConfig
from timewarden.core.logger import get_logger
from timewarden.core.system import SyncStatus, SystemBackend
from timewarden.core import timesyncd

logger = get_logger(__name__)


class CheckStatus(Enum):
    """Outcome of a single validation check."""
    PASS = "pass"
    FAIL = "fail"


class CheckError:
    """Kinds of failure a check can report."""

    CONFIG_DRIFT = "ConfigDrift"
    MISSING_FILE = "MissingFile"
    UNREADABLE = "Unreadable"


@dataclass
class CheckResult:
    name: str
    title: str
    status: CheckStatus
    message: str
    expected: Any = None
    actual: Any = None
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS


@dataclass
class ValidationReport:
    """All check results from one validator pass."""

    results: List[CheckResult] = field(default_factory=list)
    status: Optional[SyncStatus] = None

    @property
    def failed(self) -> List[CheckResult]:
        return [result for result in self.results if not result.passed]

    @property
    def error_count(self) -> int:
        return len(self.failed)

    @property
    def exit_code(self) -> int:
        return 0 if self.error_count == 0 else 1


def _check(name, title, passed, pass_message, fail_message, expected=None, actual=None,
           error=CheckError.CONFIG_DRIFT) -> CheckResult:
    if passed:
        return CheckResult(name, title, CheckStatus.PASS, pass_message, expected, actual)
    return CheckResult(name, title, CheckStatus.FAIL, fail_message, expected, actual, error)


class Validator:
    """Validates timezone, NTP config, daemon state and clock sync."""

    def __init__(self, config: TimeSyncConfig, system: SystemBackend):
        self.config = config
        self.system = system

    def check_timezone(self, status: Optional[SyncStatus] = None) -> CheckResult:
        status = status or self.system.query_sync_status()
        expected = self.config.timezone
        actual = status.timezone
        return _check(
            "timezone",
            "Timezone configuration",
            actual == expected,
            f"Timezone is correctly set to {expected}",
            f"Timezone is {actual or 'unknown'} (should be {expected})",
            expected,
            actual,
        )

    def check_ntp_config_present(self) -> CheckResult:
        path = self.config.timesyncd_conf
        line = self.config.ntp_line
        title = "NTP server configuration"

        try:
            text = timesyncd.read_config(path)
        except OSError as e:
            return _check(
                "ntp_config", title, False, "", f"{path} could not be read: {e.strerror or e}",
                line, None, CheckError.UNREADABLE,
            )
        if text is None:
            return _check(
                "ntp_config", title, False, "", f"{path} not found",
                line, None, CheckError.MISSING_FILE,
            )

        return _check(
            "ntp_config",
            title,
            line in text,
            "Custom NTP servers are configured",
            "Custom NTP servers not found in configuration",
            line,
            line if line in text else None,
        )

    def check_daemon_active(self) -> CheckResult:
        daemon = self.config.daemon
        active = self.system.is_daemon_active(daemon)
        return _check(
            "daemon_active",
            f"{daemon} service",
            active,
            f"{daemon} service is active",
            f"{daemon} service is not active",
            True,
            active,
        )

    def check_daemon_enabled(self) -> CheckResult:
        daemon = self.config.daemon
        enabled = self.system.is_daemon_enabled(daemon)
        return _check(
            "daemon_enabled",
            f"{daemon} service",
            enabled,
            f"{daemon} service is enabled",
            f"{daemon} service is not enabled",
            True,
            enabled,
        )

    def check_synchronized(self, status: Optional[SyncStatus] = None) -> CheckResult:
        status = status or self.system.query_sync_status()
        return _check(
            "synchronized",
            "Time synchronization status",
            status.synchronized,
            "System clock is synchronized",
            "System clock is not synchronized",
            True,
            status.synchronized,
        )

    def check_ntp_service_state(self, status: Optional[SyncStatus] = None) -> CheckResult:
        status = status or self.system.query_sync_status()
        return _check(
            "ntp_service",
            "Time synchronization status",
            status.ntp_service_active,
            "NTP service is active",
            "NTP service is not active",
            "active",
            status.ntp_service,
        )

    def run(self) -> ValidationReport:
        """Run every check once, in a fixed order."""
        status = self.system.query_sync_status()
        report = ValidationReport(status=status)
        report.results = [
            self.check_timezone(status),
            self.check_ntp_config_present(),
            self.check_daemon_active(),
            self.check_daemon_enabled(),
            self.check_synchronized(status),
            self.check_ntp_service_state(status),
        ]

        for result in report.failed:
            logger.debug(f"Check {result.name} failed ({result.error}): {result.message}")
        logger.debug(f"Validation finished with {report.error_count} error(s)")
        return report


def remediation_commands(config: TimeSyncConfig) -> List[str]:
    """Commands an operator runs as root to fix a failed validation."""
    return [
        f"timedatectl set-timezone {config.timezone}",
        f"echo '{config.ntp_line}' >> {config.timesyncd_conf}",
        f"systemctl enable {config.daemon}",
        f"systemctl restart {config.daemon}",
        "timedatectl set-ntp true",
    ]
