"""Light control interface and the Light entity.

LightCapable is the common set of state setters shared by single lights,
bridge groups and client-side virtual groups, so they can be controlled
interchangeably. BridgeEntity implements the request handling shared by the
two kinds that live on the bridge (Light and Group): a setter either sends
one PUT right away or, inside a transaction, adds the field to the pending
payload.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from core.errors import ValidationError
from core.transactions import PENDING, state_transaction
from models.types import Alert, ColorMode, Effect
from models.utils import check_bool, check_int_range, check_name, check_xy

HUE_RED = 0
HUE_RED_2 = 65535
HUE_GREEN = 25500
HUE_BLUE = 46920

MAX_NAME_LENGTH = 32


class LightCapable(ABC):
    """Anything whose light state can be set: a light, group or virtual group."""

    HUE_RED = HUE_RED
    HUE_RED_2 = HUE_RED_2
    HUE_GREEN = HUE_GREEN
    HUE_BLUE = HUE_BLUE

    def __init__(self, bridge, id: int):
        if not isinstance(id, int) or isinstance(id, bool) or id < 0:
            raise ValidationError("id has to be a non-negative integer")
        if bridge is None:
            raise ValidationError("bridge may not be None")
        self.bridge = bridge
        self.id = id
        # Units of 100ms, None uses the bridge default
        self.transition_time: int | None = None

    @property
    @abstractmethod
    def name(self) -> str | None: ...

    @abstractmethod
    def set_name(self, name: str): ...

    @abstractmethod
    def set_on(self, on: bool): ...

    @abstractmethod
    def set_brightness(self, brightness: int): ...

    @abstractmethod
    def set_hue(self, hue: int): ...

    @abstractmethod
    def set_saturation(self, saturation: int): ...

    @abstractmethod
    def set_xy(self, x: float, y: float): ...

    @abstractmethod
    def set_color_temperature(self, color_temperature: int): ...

    @abstractmethod
    def set_effect(self, effect: Effect): ...

    @abstractmethod
    def set_alert(self, alert: Alert): ...

    @abstractmethod
    def state_change_transaction(self, transition_time: int | None, changes):
        """Apply all changes made by ``changes()`` with one request per light/group.

        Args:
            transition_time: Transition time for the change in units of 100ms
            changes: Callable making the state changes
        """


class BridgeEntity(LightCapable):
    """Shared request handling for entities that exist on the bridge."""

    @property
    @abstractmethod
    def state_path(self) -> str:
        """Path (below /api/<user>) that accepts state PUTs."""

    @abstractmethod
    def apply_state(self, state: dict):
        """Update the cached fields after the bridge confirmed a state change."""

    @abstractmethod
    def resync(self):
        """Reload this entity from the bridge, discarding cached changes."""

    def _state_change(self, param: str, value) -> bool:
        """Send one state field, or add it to the open transaction.

        Returns:
            True if a request was sent, False if the change was queued
        """
        pending = PENDING.get(self)
        if pending is not None:
            pending[param] = value
            return False

        body = {}
        if self.transition_time is not None:
            body['transitiontime'] = self.transition_time
        body[param] = value
        self.bridge.checked_success_request('PUT', self.state_path, body)
        self.apply_state({param: value})
        return True

    def commit_state(self, payload: dict):
        """Send a transaction payload in one request."""
        self.bridge.checked_success_request('PUT', self.state_path, payload)
        self.apply_state(payload)

    def set_on(self, on: bool):
        self._state_change('on', check_bool('on', on))

    def set_brightness(self, brightness: int):
        self._state_change('bri', check_int_range('Brightness', brightness, 0, 255))

    def set_hue(self, hue: int):
        self._state_change('hue', check_int_range('Hue', hue, 0, 65535))

    def set_saturation(self, saturation: int):
        self._state_change('sat', check_int_range('Saturation', saturation, 0, 255))

    def set_xy(self, x: float, y: float):
        self._state_change('xy', list(check_xy(x, y)))

    def set_color_temperature(self, color_temperature: int):
        self._state_change('ct', check_int_range('ColorTemperature', color_temperature, 153, 500))

    def set_effect(self, effect: Effect):
        self._state_change('effect', Effect.coerce(effect).value)

    def set_alert(self, alert: Alert):
        self._state_change('alert', Alert.coerce(alert).value)

    def state_change_transaction(self, transition_time: int | None, changes):
        with state_transaction(self, transition_time):
            changes()

    def transaction(self, transition_time: int | None = None):
        """Context manager form of state_change_transaction().

        Example:
            with light.transaction(transition_time=4):
                light.set_hue(HUE_BLUE)
                light.set_brightness(200)
        """
        return state_transaction(self, transition_time)


def color_mode_for(state: dict) -> ColorMode | None:
    """Colour mode a state change puts a light into (xy beats ct beats hs)."""
    if 'xy' in state:
        return ColorMode.XY
    if 'ct' in state:
        return ColorMode.CT
    if 'hue' in state or 'sat' in state:
        return ColorMode.HS
    return None


class Light(BridgeEntity):
    """A single light connected to a bridge.

    Instances are created by the bridge when it syncs; query them with
    HueBridge.get_lights() or HueBridge.get_light(id). State reads refresh
    the light from the bridge first if its auto_sync_interval has passed.
    """

    def __init__(self, bridge, id: int, auto_sync_interval: timedelta | None = None):
        super().__init__(bridge, id)
        self.auto_sync_interval = auto_sync_interval
        self.last_sync: datetime | None = None
        self.syncing = False

        self._name: str | None = None
        self._on = False
        self._brightness = 0
        self._hue = 0
        self._saturation = 0
        self._xy = (0.0, 0.0)
        self._color_temperature = 0
        self._color_mode: ColorMode | None = None
        self._effect = Effect.NONE

    @property
    def state_path(self) -> str:
        return f"/lights/{self.id}/state"

    def is_stale(self, now: datetime | None = None) -> bool:
        """True if the auto-sync interval has passed since the last sync."""
        if not self.auto_sync_interval:
            return False
        if self.last_sync is None:
            return True
        return (now or datetime.now()) - self.last_sync > self.auto_sync_interval

    def _ensure_fresh(self):
        if not self.syncing and self.is_stale():
            self.sync()

    def sync(self):
        """Reload this light's name and state from the bridge."""
        self.bridge.sync_light(self)

    def resync(self):
        self.sync()

    @property
    def name(self) -> str | None:
        self._ensure_fresh()
        return self._name

    def set_name(self, name: str):
        """Rename the light on the bridge (at most 32 characters)."""
        name = check_name(name, MAX_NAME_LENGTH)
        response = self.bridge.checked_success_request('PUT', f"/lights/{self.id}", {'name': name})
        success = response[0].get('success', {}) if response else {}
        self._name = success.get(f"/lights/{self.id}/name", name) if isinstance(success, dict) else name

    def _current_xy(self) -> tuple[float, float]:
        pending = PENDING.get(self)
        if pending is not None and 'xy' in pending:
            return tuple(pending['xy'])
        return self.xy

    def set_x(self, x: float):
        """Set the CIE x coordinate and keep the current y."""
        self.set_xy(x, self._current_xy()[1])

    def set_y(self, y: float):
        """Set the CIE y coordinate and keep the current x."""
        self.set_xy(self._current_xy()[0], y)

    @property
    def on(self) -> bool:
        self._ensure_fresh()
        return self._on

    @property
    def brightness(self) -> int:
        self._ensure_fresh()
        return self._brightness

    @property
    def hue(self) -> int:
        self._ensure_fresh()
        return self._hue

    @property
    def saturation(self) -> int:
        self._ensure_fresh()
        return self._saturation

    @property
    def xy(self) -> tuple[float, float]:
        self._ensure_fresh()
        return self._xy

    @property
    def color_temperature(self) -> int:
        self._ensure_fresh()
        return self._color_temperature

    @property
    def color_mode(self) -> ColorMode | None:
        self._ensure_fresh()
        return self._color_mode

    @property
    def effect(self) -> Effect:
        self._ensure_fresh()
        return self._effect

    def apply_state(self, state: dict):
        if 'on' in state:
            self._on = state['on']
        if 'bri' in state:
            self._brightness = state['bri']
        if 'hue' in state:
            self._hue = state['hue']
        if 'sat' in state:
            self._saturation = state['sat']
        if 'xy' in state:
            self._xy = (float(state['xy'][0]), float(state['xy'][1]))
        if 'ct' in state:
            self._color_temperature = state['ct']
        if 'effect' in state:
            self._effect = Effect(state['effect'])
        mode = color_mode_for(state)
        if mode is not None:
            self._color_mode = mode

    def __repr__(self):
        return f"<Light {self.id} {self._name!r}>"

    def __str__(self):
        if self._color_mode == ColorMode.CT:
            colour = f"CT:{self._color_temperature}"
        elif self._color_mode == ColorMode.HS:
            colour = f"HS:{self._hue}/{self._saturation}"
        elif self._color_mode == ColorMode.XY:
            colour = f"XY:{self._xy[0]}/{self._xy[1]}"
        else:
            colour = ""
        return f"{self.id}({self._name})[{'ON' if self._on else 'OFF'},{colour}]"
