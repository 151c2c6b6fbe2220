"""Host access for time settings: timedatectl, systemctl and friends.

Everything that touches the live host goes through SystemBackend so the
configurator and validator can run against a fake command runner in tests.
Query helpers never raise; host-changing helpers raise OSCommandError.
"""
import os
import re
import subprocess
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from timewarden.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Outcome of a single host command."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class OSCommandError(Exception):
    """Raised when a host-changing command exits non-zero."""

    def __init__(self, result: CommandResult):
        self.result = result
        message = f"Command failed (exit {result.returncode}): {' '.join(result.args)}"
        detail = (result.stderr or result.stdout).strip()
        if detail:
            message += f"\n{detail}"
        super().__init__(message)


@dataclass
class SyncStatus:
    """Time settings as reported by `timedatectl status`."""

    timezone: Optional[str] = None
    synchronized: bool = False
    ntp_service: Optional[str] = None
    raw: str = field(default="", repr=False)

    @property
    def ntp_service_active(self) -> bool:
        return self.ntp_service == "active"

    @classmethod
    def parse(cls, output: str) -> "SyncStatus":
        """Parse timedatectl output.

        Handles both current ("System clock synchronized: yes") and older
        ("NTP synchronized: yes") systemd wording.
        """
        timezone = re.search(r"Time zone:\s+(\S+)", output)
        synchronized = re.search(r"synchronized:\s+(\w+)", output)
        ntp_service = re.search(r"NTP service:\s+(\w+)", output)

        return cls(
            timezone=timezone.group(1) if timezone else None,
            synchronized=bool(synchronized) and synchronized.group(1) == "yes",
            ntp_service=ntp_service.group(1) if ntp_service else None,
            raw=output,
        )


RunCmd = Callable[[List[str]], CommandResult]


def mock_from_env() -> bool:
    """True when TIMEWARDEN_MOCK is 1 or true."""
    return os.environ.get("TIMEWARDEN_MOCK", "").strip().lower() in ("1", "true")


class SystemBackend:
    """Narrow interface to the host's time and service management."""

    def __init__(
        self,
        run_cmd: Optional[RunCmd] = None,
        mock: Optional[bool] = None,
        geteuid: Optional[Callable[[], int]] = None,
    ):
        if mock is None:
            mock = mock_from_env()
        self.mock = mock
        self.run_cmd = run_cmd or self._run
        self._geteuid = geteuid or os.geteuid

    # -----------------------------
    #  Command execution
    # -----------------------------
    def run(self, args: Sequence[str]) -> CommandResult:
        """Run a read-only command. Never raises."""
        cmd = list(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        return self.run_cmd(cmd)

    def execute(self, args: Sequence[str]) -> CommandResult:
        """Run a host-changing command.

        Raises:
            OSCommandError: If the command exits non-zero
        """
        cmd = list(args)
        if self.mock:
            logger.info(f"MOCK: Would run {' '.join(cmd)}")
            return CommandResult(cmd, 0)

        result = self.run(cmd)
        if not result.ok:
            raise OSCommandError(result)
        return result

    @staticmethod
    def _run(cmd: List[str]) -> CommandResult:
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            return CommandResult(cmd, 127, "", str(e))
        return CommandResult(cmd, completed.returncode, completed.stdout, completed.stderr)

    def is_root(self) -> bool:
        return self._geteuid() == 0

    # -----------------------------
    #  Timezone and sync status
    # -----------------------------
    def set_timezone(self, timezone: str) -> None:
        self.execute(["timedatectl", "set-timezone", timezone])

    def get_timezone(self) -> Optional[str]:
        return self.query_sync_status().timezone

    def set_ntp(self, enabled: bool = True) -> None:
        self.execute(["timedatectl", "set-ntp", "true" if enabled else "false"])

    def query_sync_status(self) -> SyncStatus:
        result = self.run(["timedatectl", "status"])
        if not result.ok:
            logger.debug(f"timedatectl status failed: {result.stderr.strip()}")
        return SyncStatus.parse(result.stdout)

    def timesync_status(self) -> Optional[str]:
        """Return `timedatectl timesync-status` output, or None where unsupported."""
        result = self.run(["timedatectl", "timesync-status"])
        if not result.ok:
            return None
        return result.stdout

    # -----------------------------
    #  Service manager
    # -----------------------------
    def restart_daemon(self, unit: str) -> None:
        self.execute(["systemctl", "restart", unit])

    def enable_daemon(self, unit: str) -> None:
        self.execute(["systemctl", "enable", unit])

    def is_daemon_active(self, unit: str) -> bool:
        return self.run(["systemctl", "is-active", "--quiet", unit]).ok

    def is_daemon_enabled(self, unit: str) -> bool:
        return self.run(["systemctl", "is-enabled", "--quiet", unit]).ok

    def query_daemon_status(self, unit: str) -> str:
        return self.run(["systemctl", "status", unit]).stdout
