"""Type definitions for the Hue bridge SDK.

Enums for the light state values the bridge exchanges as strings, and
TypedDict definitions for the JSON payloads, improving type safety and IDE
autocompletion.
"""

from enum import Enum
from typing import TypedDict

from core.errors import CommError, ValidationError


class ColorMode(Enum):
    """Which colour setting of a light is currently authoritative."""
    HS = 'hs'
    CT = 'ct'
    XY = 'xy'

    @classmethod
    def from_api(cls, value: str) -> 'ColorMode':
        """Decode the bridge's colormode string (case-insensitive).

        Raises:
            CommError: If the bridge reports an unknown mode
        """
        try:
            return cls(str(value).lower())
        except ValueError:
            raise CommError(f"Unknown color mode {value!r}") from None


class Effect(Enum):
    """Dynamic light effects."""
    NONE = 'none'
    COLORLOOP = 'colorloop'

    @classmethod
    def from_api(cls, value: str) -> 'Effect':
        try:
            return cls(value)
        except ValueError:
            raise CommError(f"Unknown effect {value!r}") from None

    @classmethod
    def coerce(cls, value: 'Effect | str') -> 'Effect':
        """Accept an Effect or its API name from callers."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown effect {value!r}") from None


class Alert(Enum):
    """Alert (breathe) effects. Write-only, never reported back."""
    NONE = 'none'
    SELECT = 'select'
    LSELECT = 'lselect'

    @classmethod
    def coerce(cls, value: 'Alert | str') -> 'Alert':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown alert {value!r}") from None


class StatePayload(TypedDict, total=False):
    """Body of a light state / group action PUT."""
    on: bool
    bri: int
    hue: int
    sat: int
    xy: list[float]
    ct: int
    effect: str
    alert: str
    transitiontime: int


class BridgeErrorPayload(TypedDict, total=False):
    """The ``error`` object of a failed bridge request."""
    type: int
    address: str
    description: str


class CacheInfo(TypedDict):
    """Summary returned by core.cache.get_cache_info()."""
    synced: bool
    last_full_sync: str | None
    counts: dict[str, int]
    stale_lights: list[int]
