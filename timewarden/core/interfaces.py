"""Bring up ifupdown interfaces that are declared `auto` but are down."""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

from timewarden.core.logger import get_logger
from timewarden.core.system import OSCommandError, SystemBackend

logger = get_logger(__name__)

AUTO_STANZA = re.compile(r"^\s*auto\s+(.+)$")


class InterfaceOutcome:
    """What happened to an interface during bring-up."""

    ALREADY_UP = "already-up"
    BROUGHT_UP = "brought-up"
    FAILED = "failed"


@dataclass
class InterfaceResult:
    name: str
    outcome: str
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome != InterfaceOutcome.FAILED


def parse_auto_interfaces(text: str, prefix: str = "e") -> List[str]:
    """Names from `auto` stanzas starting with `prefix`, de-duplicated and sorted."""
    names = set()
    for line in text.splitlines():
        match = AUTO_STANZA.match(line)
        if not match:
            continue
        for name in match.group(1).split():
            if name.startswith("#"):
                break
            if name.startswith(prefix):
                names.add(name)
    return sorted(names)


class InterfaceManager:
    """Checks link state with `ip link` and runs `ifup` for interfaces that are down."""

    def __init__(self, system: SystemBackend, interfaces_file: Path, prefix: str = "e"):
        self.system = system
        self.interfaces_file = Path(interfaces_file)
        self.prefix = prefix

    def discover(self) -> List[str]:
        if not self.interfaces_file.exists():
            logger.info(f"{self.interfaces_file} not found, no interfaces to bring up")
            return []
        return parse_auto_interfaces(self.interfaces_file.read_text(), self.prefix)

    def is_up(self, interface: str) -> bool:
        result = self.system.run(["ip", "link", "show", interface])
        return result.ok and "state UP" in result.stdout

    def bring_up(self, interface: str) -> InterfaceResult:
        if self.is_up(interface):
            logger.info(f"Interface {interface} is already up.")
            return InterfaceResult(interface, InterfaceOutcome.ALREADY_UP)

        try:
            self.system.execute(["ifup", interface])
        except OSCommandError as e:
            logger.error(f"Failed to bring up interface: {interface}")
            return InterfaceResult(interface, InterfaceOutcome.FAILED, str(e))

        logger.info(f"Successfully brought up interface: {interface}")
        return InterfaceResult(interface, InterfaceOutcome.BROUGHT_UP)

    def bring_up_all(self) -> List[InterfaceResult]:
        interfaces = self.discover()
        if not interfaces:
            logger.info(f"No interfaces starting with '{self.prefix}' found.")
            return []
        return [self.bring_up(interface) for interface in interfaces]
