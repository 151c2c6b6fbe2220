"""Tests for package updates and local address listing."""
import socket
from collections import namedtuple
from unittest.mock import patch

import pytest

from timewarden.core.maintenance import PackageUpdater, local_addresses
from timewarden.core.system import OSCommandError, SystemBackend

from conftest import FakeHost

snicaddr = namedtuple("snicaddr", "family address netmask broadcast ptp")


class TestPackageUpdater:
    def test_apt_sequence(self):
        host = FakeHost()
        PackageUpdater(SystemBackend(run_cmd=host, mock=False)).update()

        apt_calls = [call[call.index("apt-get") + 1] for call in host.calls]
        assert apt_calls == ["update", "full-upgrade", "autoremove", "clean", "autoclean"]
        assert all(call[:2] == ["env", "DEBIAN_FRONTEND=noninteractive"] for call in host.calls)
        assert "Dpkg::Options::=--force-confold" in host.calls[1]
        assert not host.ran("snap")

    def test_stops_at_first_failure(self):
        host = FakeHost()
        host.fail("env DEBIAN_FRONTEND=noninteractive apt-get update")

        with pytest.raises(OSCommandError):
            PackageUpdater(SystemBackend(run_cmd=host, mock=False)).update()

        assert len(host.calls) == 1

    def test_snap_failure_is_warning(self):
        host = FakeHost()
        host.fail("snap", "refresh")

        PackageUpdater(SystemBackend(run_cmd=host, mock=False)).update(snap=True)

        assert host.ran("snap", "refresh")


def test_local_addresses_skip_loopback_and_link_local():
    interfaces = {
        "lo": [
            snicaddr(socket.AF_INET, "127.0.0.1", None, None, None),
            snicaddr(socket.AF_INET6, "::1", None, None, None),
        ],
        "eth0": [
            snicaddr(socket.AF_INET, "192.168.1.50", None, None, None),
            snicaddr(socket.AF_INET6, "fe80::1%eth0", None, None, None),
            snicaddr(socket.AF_INET6, "fd00::50", None, None, None),
            snicaddr(socket.AF_PACKET, "aa:bb:cc:dd:ee:ff", None, None, None),
        ],
    }
    with patch("timewarden.core.maintenance.psutil.net_if_addrs", return_value=interfaces):
        assert local_addresses() == ["192.168.1.50", "fd00::50"]
