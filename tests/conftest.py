"""Shared test fixtures for Timewarden tests."""
from typing import Dict, List, Optional

import pytest

from timewarden.core.config import TimeSyncConfig
from timewarden.core.system import CommandResult, SystemBackend

EXPECTED_LINE = "NTP=192.168.1.103 192.168.9.7 192.168.9.3"


def timedatectl_output(timezone="America/New_York", synchronized="yes", ntp_service="active"):
    return (
        "               Local time: Sat 2026-10-17 09:15:02 EDT\n"
        "           Universal time: Sat 2026-10-17 13:15:02 UTC\n"
        "                 RTC time: Sat 2026-10-17 13:15:02\n"
        f"                Time zone: {timezone} (EDT, -0400)\n"
        f"System clock synchronized: {synchronized}\n"
        f"              NTP service: {ntp_service}\n"
        "          RTC in local TZ: no\n"
    )


class FakeHost:
    """Command runner that answers like a systemd host and records every call."""

    def __init__(self, timezone="America/New_York", synchronized="yes", ntp_service="active",
                 active=True, enabled=True, timesync_status: Optional[str] = "Server: 192.168.1.103\n"):
        self.timezone = timezone
        self.synchronized = synchronized
        self.ntp_service = ntp_service
        self.active = active
        self.enabled = enabled
        self.timesync = timesync_status
        self.link_state: Dict[str, str] = {}
        self.failing: List[str] = []
        self.calls: List[List[str]] = []

    def fail(self, *prefix: str) -> None:
        """Make commands starting with `prefix` exit 1."""
        self.failing.append(" ".join(prefix))

    def __call__(self, cmd: List[str]) -> CommandResult:
        self.calls.append(cmd)
        joined = " ".join(cmd)

        if any(joined.startswith(prefix) for prefix in self.failing):
            return CommandResult(cmd, 1, "", f"{cmd[0]}: failed")

        if cmd[:2] == ["timedatectl", "status"]:
            return CommandResult(cmd, 0, timedatectl_output(
                self.timezone, self.synchronized, self.ntp_service))
        if cmd[:2] == ["timedatectl", "timesync-status"]:
            if self.timesync is None:
                return CommandResult(cmd, 1, "", "Unknown command verb timesync-status.")
            return CommandResult(cmd, 0, self.timesync)
        if cmd[:2] == ["timedatectl", "set-timezone"]:
            self.timezone = cmd[2]
            return CommandResult(cmd, 0)
        if cmd[:2] == ["systemctl", "is-active"]:
            return CommandResult(cmd, 0 if self.active else 3)
        if cmd[:2] == ["systemctl", "is-enabled"]:
            return CommandResult(cmd, 0 if self.enabled else 1)
        if cmd[:3] == ["ip", "link", "show"]:
            state = self.link_state.get(cmd[3], "DOWN")
            return CommandResult(cmd, 0, f"2: {cmd[3]}: <BROADCAST,MULTICAST> mtu 1500 state {state} mode DEFAULT\n")
        return CommandResult(cmd, 0)

    def ran(self, *prefix: str) -> bool:
        return any(call[:len(prefix)] == list(prefix) for call in self.calls)

    def count(self, *prefix: str) -> int:
        return sum(1 for call in self.calls if call[:len(prefix)] == list(prefix))


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def system(fake_host):
    """SystemBackend running as root against the fake host."""
    return SystemBackend(run_cmd=fake_host, mock=False, geteuid=lambda: 0)


@pytest.fixture
def conf_file(tmp_path):
    """A stock timesyncd.conf with only commented defaults."""
    path = tmp_path / "timesyncd.conf"
    path.write_text(
        "#  This file is part of systemd.\n"
        "\n"
        "[Time]\n"
        "#NTP=\n"
        "#FallbackNTP=ntp.ubuntu.com\n"
    )
    return path


@pytest.fixture
def config(tmp_path, conf_file):
    return TimeSyncConfig(
        timesyncd_conf=conf_file,
        resync_delay=0,
        interfaces_file=tmp_path / "interfaces",
    )
