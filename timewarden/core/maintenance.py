"""Scheduled host maintenance around the time sync job: packages and addresses."""
import ipaddress
import socket
from enum import Enum
from typing import List

import psutil

from timewarden.core.logger import get_logger
from timewarden.core.system import OSCommandError, SystemBackend

logger = get_logger(__name__)

# Keep locally modified config files during upgrades
DPKG_KEEP_CONFIG = [
    "-o", "Dpkg::Options::=--force-confdef",
    "-o", "Dpkg::Options::=--force-confold",
]
NONINTERACTIVE = ["env", "DEBIAN_FRONTEND=noninteractive"]


class HostProfile(str, Enum):
    """Kind of home-lab host the maintenance job runs on."""

    PROXMOX = "proxmox"
    K8S = "k8s"
    DOCKER = "docker"


class PackageUpdater:
    """Non-interactive apt upgrade, stopping at the first failing apt command."""

    def __init__(self, system: SystemBackend):
        self.system = system

    def apt_commands(self) -> List[List[str]]:
        apt = NONINTERACTIVE + ["apt-get"]
        return [
            apt + ["update", "-y"],
            apt + [
                "full-upgrade", "-y",
                "--allow-downgrades", "--allow-remove-essential", "--allow-change-held-packages",
            ] + DPKG_KEEP_CONFIG,
            apt + ["autoremove", "-y"],
            apt + ["clean", "-y"],
            apt + ["autoclean", "-y"],
        ]

    def update(self, snap: bool = False) -> None:
        """Update system packages.

        Raises:
            OSCommandError: From the first apt command that fails
        """
        logger.info("Updating system packages...")
        for cmd in self.apt_commands():
            self.system.execute(cmd)

        if snap:
            try:
                self.system.execute(["snap", "refresh"])
            except OSCommandError as e:
                logger.warning(f"Failed to refresh snap packages: {e}")


def local_addresses() -> List[str]:
    """Non-loopback, non-link-local addresses of this host."""
    addresses = []
    for _, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            try:
                ip = ipaddress.ip_address(addr.address.split("%")[0])
            except ValueError:
                continue
            if ip.is_loopback or ip.is_link_local:
                continue
            addresses.append(str(ip))
    return addresses
