"""Runtime settings for the Hue bridge SDK.

Settings have sensible defaults and can be overridden from environment
variables:
- HUE_BRIDGE_ADDRESS / HUE_USERNAME: bridge to use from the CLI
- HUE_DISCOVERY_ATTEMPTS: SSDP rounds before discovery gives up (1-4)
- HUE_REQUEST_TIMEOUT / HUE_DESCRIPTION_TIMEOUT: HTTP timeouts in seconds
- HUE_GRANT_WAIT: seconds to wait for the link button press
- HUE_DEVICE_TYPE: devicetype sent with create-user requests
- HUE_AUTO_SYNC: per-light refresh interval in seconds (0 disables)

Nothing is written back; credentials only live as long as the process.
"""

import os
from dataclasses import dataclass
from datetime import timedelta

from core.errors import ConfigurationError

DEFAULT_DEVICE_TYPE = 'hue_control#python'


@dataclass
class HueSettings:
    """Tunable values shared by discovery, authentication and sync."""
    bridge_address: str | None = None
    username: str | None = None
    discovery_attempts: int = 3
    request_timeout: float = 5.0
    description_timeout: float = 5.0
    grant_wait_seconds: float = 30.0
    device_type: str = DEFAULT_DEVICE_TYPE
    auto_sync_interval: timedelta | None = None


def _number(environ, key: str, convert, default):
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return convert(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {key}: {raw!r}") from e


def load_settings(environ=None) -> HueSettings:
    """Build settings from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        HueSettings with environment overrides applied

    Raises:
        ConfigurationError: If a numeric variable can not be parsed
    """
    if environ is None:
        environ = os.environ

    auto_sync = _number(environ, 'HUE_AUTO_SYNC', float, None)

    return HueSettings(
        bridge_address=environ.get('HUE_BRIDGE_ADDRESS') or None,
        username=environ.get('HUE_USERNAME') or None,
        discovery_attempts=_number(environ, 'HUE_DISCOVERY_ATTEMPTS', int, 3),
        request_timeout=_number(environ, 'HUE_REQUEST_TIMEOUT', float, 5.0),
        description_timeout=_number(environ, 'HUE_DESCRIPTION_TIMEOUT', float, 5.0),
        grant_wait_seconds=_number(environ, 'HUE_GRANT_WAIT', float, 30.0),
        device_type=environ.get('HUE_DEVICE_TYPE') or DEFAULT_DEVICE_TYPE,
        # 0 means "never refresh automatically"
        auto_sync_interval=timedelta(seconds=auto_sync) if auto_sync else None,
    )
