"""Expected time settings shared by the configurator and the validator."""
import os
import re
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_NTP_SERVERS = ("192.168.1.103", "192.168.9.7", "192.168.9.3")
DEFAULT_TIMESYNCD_CONF = "/etc/systemd/timesyncd.conf"
DEFAULT_DAEMON = "systemd-timesyncd"
DEFAULT_RESYNC_DELAY = 5.0
DEFAULT_INTERFACES_FILE = "/etc/network/interfaces"
DEFAULT_INTERFACE_PREFIX = "e"


class ConfigValidationError(Exception):
    """Raised when a timewarden.yml file cannot be used."""
    pass


class ErrorPolicy(str, Enum):
    """What the configurator does after a failed step."""

    CONTINUE = "continue"
    HALT = "halt"


class NtpWriteMode(str, Enum):
    """How the NTP= line is written to timesyncd.conf."""

    UPSERT = "upsert"
    APPEND = "append"


@dataclass
class TimeSyncConfig:
    """Runtime configuration for time sync operations.

    Attributes:
        timezone: Expected timezone (default: America/New_York)
        ntp_servers: Ordered NTP server list written to timesyncd.conf
        timesyncd_conf: Path of the time daemon's config file
        daemon: systemd unit of the time daemon
        resync_delay: Seconds to wait between the two restarts of a forced resync
        on_error: Continue or halt after a failed configuration step
        ntp_write_mode: Replace the NTP= line in place, or append like the old cron scripts
        interfaces_file: ifupdown interface definitions
        interface_prefix: Only interfaces starting with this prefix are brought up
    """

    timezone: str = DEFAULT_TIMEZONE
    ntp_servers: List[str] = field(default_factory=lambda: list(DEFAULT_NTP_SERVERS))
    timesyncd_conf: Path = Path(DEFAULT_TIMESYNCD_CONF)
    daemon: str = DEFAULT_DAEMON
    resync_delay: float = DEFAULT_RESYNC_DELAY
    on_error: ErrorPolicy = ErrorPolicy.CONTINUE
    ntp_write_mode: NtpWriteMode = NtpWriteMode.UPSERT
    interfaces_file: Path = Path(DEFAULT_INTERFACES_FILE)
    interface_prefix: str = DEFAULT_INTERFACE_PREFIX

    def __post_init__(self):
        self.ntp_servers = list(self.ntp_servers)
        self.timesyncd_conf = Path(self.timesyncd_conf)
        self.interfaces_file = Path(self.interfaces_file)
        self.resync_delay = float(self.resync_delay)
        self.on_error = ErrorPolicy(self.on_error)
        self.ntp_write_mode = NtpWriteMode(self.ntp_write_mode)

    @property
    def ntp_line(self) -> str:
        """The exact line expected in timesyncd.conf."""
        return ntp_line(self.ntp_servers)

    def with_overrides(self, **overrides: Any) -> "TimeSyncConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timesyncd_conf"] = str(self.timesyncd_conf)
        data["interfaces_file"] = str(self.interfaces_file)
        data["on_error"] = self.on_error.value
        data["ntp_write_mode"] = self.ntp_write_mode.value
        return data

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TimeSyncConfig":
        """Load settings from a YAML file, validated against TimeSyncSettings.

        A missing or empty file yields the defaults.

        Raises:
            ConfigValidationError: If the YAML is malformed or a value is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            return cls()

        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Could not parse {config_path}: {e}") from e

        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigValidationError(
                f"{config_path} must contain a mapping of settings, got {type(raw).__name__}"
            )

        return cls._validated(raw, str(config_path))

    @classmethod
    def _validated(cls, data: Dict[str, Any], source: str) -> "TimeSyncConfig":
        from pydantic import ValidationError

        from timewarden.models.settings import TimeSyncSettings

        try:
            settings = TimeSyncSettings(**data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid settings in {source}:\n{e}") from e

        return cls(**settings.model_dump())

    def apply_env(self) -> "TimeSyncConfig":
        """Overlay environment variables on this config.

        Environment variables:
            TIMEWARDEN_TIMEZONE: Expected timezone
            TIMEWARDEN_NTP_SERVERS: Server list, separated by spaces or commas
            TIMEWARDEN_TIMESYNCD_CONF: Path of timesyncd.conf
            TIMEWARDEN_RESYNC_DELAY: Forced resync delay in seconds
            TIMEWARDEN_ON_ERROR: continue or halt
            TIMEWARDEN_NTP_WRITE_MODE: upsert or append
        """
        overrides = {
            key: value
            for key, value in (
                ("timezone", _env("TIMEWARDEN_TIMEZONE")),
                ("ntp_servers", _env("TIMEWARDEN_NTP_SERVERS")),
                ("timesyncd_conf", _env("TIMEWARDEN_TIMESYNCD_CONF")),
                ("resync_delay", _env("TIMEWARDEN_RESYNC_DELAY")),
                ("on_error", _env("TIMEWARDEN_ON_ERROR")),
                ("ntp_write_mode", _env("TIMEWARDEN_NTP_WRITE_MODE")),
            )
            if value is not None
        }
        if not overrides:
            return self

        if "ntp_servers" in overrides:
            overrides["ntp_servers"] = split_servers(overrides["ntp_servers"])
        return self._validated({**self.as_dict(), **overrides}, "TIMEWARDEN_* environment")

    @classmethod
    def from_env(cls) -> "TimeSyncConfig":
        """Create config from defaults plus environment variables."""
        return cls().apply_env()


def ntp_line(servers: List[str]) -> str:
    """Build the timesyncd NTP= line for an ordered server list."""
    return "NTP=" + " ".join(servers)


def split_servers(value: str) -> List[str]:
    return [item for item in re.split(r"[\s,]+", value.strip()) if item]


def _env(name: str) -> Optional[str]:
    """Environment value, with blank values treated as unset."""
    value = os.getenv(name, "").strip()
    return value or None


def load_config(config_path: Optional[Union[str, Path]] = None) -> TimeSyncConfig:
    """Build the effective config: defaults, then the YAML file, then environment."""
    base = TimeSyncConfig.from_file(config_path) if config_path else TimeSyncConfig()
    return base.apply_env()


_config: Optional[TimeSyncConfig] = None


def get_config() -> TimeSyncConfig:
    """Get the global time sync configuration (created from environment if not set)."""
    global _config
    if _config is None:
        _config = TimeSyncConfig.from_env()
    return _config


def set_config(config: Optional[TimeSyncConfig]):
    """Set the global time sync configuration."""
    global _config
    _config = config
