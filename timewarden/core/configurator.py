"""Apply the expected timezone and NTP servers to the host."""
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from timewarden.core.config import ErrorPolicy, NtpWriteMode, TimeSyncConfig, ntp_line
from timewarden.core.logger import get_logger
from timewarden.core.safety import require_root
from timewarden.core.system import OSCommandError, SystemBackend
from timewarden.core import timesyncd

logger = get_logger(__name__)


class StepStatus:
    """Outcome of a configuration step."""

    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    name: str
    status: str
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.OK


@dataclass
class ConfigureReport:
    """Per-step results of a configurator run."""

    steps: List[StepResult] = field(default_factory=list)
    status_output: Optional[str] = None

    def add(self, step: StepResult) -> None:
        self.steps.append(step)

    @property
    def failed(self) -> List[StepResult]:
        return [step for step in self.steps if step.status == StepStatus.FAILED]

    @property
    def skipped(self) -> List[StepResult]:
        return [step for step in self.steps if step.status == StepStatus.SKIPPED]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed or self.skipped else 0


class Configurator:
    """Brings timezone and NTP settings to the expected values, then applies them.

    Steps run in a fixed order. A failing step is logged and, depending on
    `config.on_error`, either the remaining steps still run (continue) or are
    recorded as skipped (halt).
    """

    def __init__(
        self,
        config: TimeSyncConfig,
        system: SystemBackend,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.config = config
        self.system = system
        self._cancel = cancel_event or threading.Event()
        self.last_status_output: Optional[str] = None

    def require_elevated_privileges(self) -> None:
        require_root(self.system)

    def set_timezone(self, timezone: Optional[str] = None) -> None:
        timezone = timezone or self.config.timezone
        logger.info(f"Setting timezone to {timezone}...")
        self.system.set_timezone(timezone)

    def append_ntp_servers(self, servers: Optional[Iterable[str]] = None) -> bool:
        """Write the NTP= line for `servers` (default: configured servers).

        In append mode every call adds another line. In upsert mode the
        line is replaced in place, so repeated calls leave one copy.

        Returns:
            True if the config file changed
        """
        servers = list(servers) if servers is not None else self.config.ntp_servers
        line = ntp_line(servers)
        path = self.config.timesyncd_conf
        logger.info(f"Setting custom NTP servers ({', '.join(servers)})...")

        if self.system.mock:
            logger.info(f"MOCK: Would write '{line}' to {path}")
            return False

        if self.config.ntp_write_mode == NtpWriteMode.APPEND:
            timesyncd.append_line(path, line)
            return True

        changed = timesyncd.upsert_line(path, line)
        if not changed:
            logger.info(f"{path} already contains '{line}'")
        return changed

    def restart_and_enable_daemon(self) -> None:
        daemon = self.config.daemon
        logger.info(f"Restarting and enabling {daemon}...")
        self.system.restart_daemon(daemon)
        self.system.enable_daemon(daemon)

    def force_resync(self) -> bool:
        """Turn NTP on, wait, and restart the daemon again to trigger a sync.

        Returns:
            False if the wait was cancelled before the second restart
        """
        self.system.set_ntp(True)

        delay = self.config.resync_delay
        if delay > 0:
            logger.info(f"Waiting {delay:g}s before forcing another sync...")
            if self._cancel.wait(delay):
                # a cancel aborts one wait; later resyncs run normally
                self._cancel.clear()
                logger.warning("Forced resync cancelled")
                return False

        self.system.restart_daemon(self.config.daemon)

        output = self.system.timesync_status()
        if output is None:
            output = self.system.query_sync_status().raw
        self.last_status_output = output
        logger.info("Current time sync status:")
        for line in output.splitlines():
            logger.info(f"  {line.strip()}")
        return True

    def cancel(self) -> None:
        """Abort a pending resync wait."""
        self._cancel.set()

    def steps(self, force_resync: bool = False) -> List[Tuple[str, Callable]]:
        steps = [
            ("timezone", self.set_timezone),
            ("ntp-servers", self.append_ntp_servers),
            ("daemon", self.restart_and_enable_daemon),
        ]
        if force_resync:
            steps.append(("resync", self.force_resync))
        return steps

    def run(self, force_resync: bool = False) -> ConfigureReport:
        """Run every configuration step.

        Raises:
            PrivilegeError: Before any step runs, when not root
        """
        self.require_elevated_privileges()

        report = ConfigureReport()
        halted = False

        for name, action in self.steps(force_resync):
            if halted:
                report.add(StepResult(name, StepStatus.SKIPPED, "skipped after earlier failure"))
                continue

            try:
                outcome = action()
            except (OSCommandError, OSError) as e:
                logger.error(f"Step '{name}' failed: {e}")
                report.add(StepResult(name, StepStatus.FAILED, str(e)))
                if self.config.on_error == ErrorPolicy.HALT:
                    halted = True
                continue

            if name == "resync" and outcome is False:
                report.add(StepResult(name, StepStatus.SKIPPED, "cancelled during wait"))
                continue

            report.add(StepResult(name, StepStatus.OK))

        report.status_output = self.last_status_output
        if not report.failed:
            logger.info(
                f"Time settings applied: {self.config.timezone}, {self.config.ntp_line}"
            )
        return report
