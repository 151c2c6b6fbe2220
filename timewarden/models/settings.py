"""Schema for timewarden.yml."""
import re
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timewarden.core.config import (
    DEFAULT_DAEMON,
    DEFAULT_INTERFACE_PREFIX,
    DEFAULT_INTERFACES_FILE,
    DEFAULT_NTP_SERVERS,
    DEFAULT_RESYNC_DELAY,
    DEFAULT_TIMESYNCD_CONF,
    DEFAULT_TIMEZONE,
)

# IANA zone names: "UTC", "America/New_York", "America/Argentina/Buenos_Aires", "Etc/GMT+5"
TIMEZONE_PATTERN = re.compile(r'^[A-Za-z0-9_+\-]+(/[A-Za-z0-9_+\-]+)*$')
# Hostname, IPv4 or IPv6, optionally with a :port suffix
SERVER_PATTERN = re.compile(r'^[A-Za-z0-9.\-:\[\]_]+$')
UNIT_PATTERN = re.compile(r'^[A-Za-z0-9@._\-]+$')


class TimeSyncSettings(BaseModel):
    """Settings accepted in timewarden.yml.

    Example:
        timezone: America/New_York
        ntp_servers:
          - 192.168.1.103
          - 192.168.9.7
          - 192.168.9.3
        on_error: halt
    """

    model_config = ConfigDict(extra='forbid')

    timezone: str = DEFAULT_TIMEZONE
    ntp_servers: List[str] = Field(default_factory=lambda: list(DEFAULT_NTP_SERVERS), min_length=1)
    timesyncd_conf: str = DEFAULT_TIMESYNCD_CONF
    daemon: str = DEFAULT_DAEMON
    resync_delay: float = Field(DEFAULT_RESYNC_DELAY, ge=0)
    on_error: Literal["continue", "halt"] = "continue"
    ntp_write_mode: Literal["upsert", "append"] = "upsert"
    interfaces_file: str = DEFAULT_INTERFACES_FILE
    interface_prefix: str = DEFAULT_INTERFACE_PREFIX

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        """Validate the timezone looks like an IANA zone name."""
        if not TIMEZONE_PATTERN.match(v):
            raise ValueError(
                f"Timezone '{v}' is not a valid zone name (e.g. America/New_York, UTC)"
            )
        return v

    @field_validator('ntp_servers')
    @classmethod
    def validate_ntp_servers(cls, v):
        """Validate each server is a single host token."""
        for server in v:
            if not server or not SERVER_PATTERN.match(server):
                raise ValueError(
                    f"NTP server '{server}' must be a hostname or IP address without spaces"
                )
        return v

    @field_validator('daemon')
    @classmethod
    def validate_daemon(cls, v):
        if not UNIT_PATTERN.match(v):
            raise ValueError(f"Daemon '{v}' is not a valid systemd unit name")
        return v

    @field_validator('timesyncd_conf', 'interfaces_file')
    @classmethod
    def validate_absolute(cls, v):
        """Validate config file paths are absolute."""
        if not v.startswith('/'):
            raise ValueError(f"Path must be absolute (start with /). Got: {v}")
        return v
