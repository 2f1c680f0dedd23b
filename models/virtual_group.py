"""Client-side groups of lights.

A virtual group lives entirely in this process. It is registered with a
bridge only so it can be looked up like a regular group; its members may be
lights, bridge groups or other virtual groups from any bridge. Virtual
groups are not saved on the bridge.
"""

from core.errors import ValidationError
from models.light import LightCapable
from models.types import Alert, Effect
from models.utils import check_bool, check_int_range, check_xy


class VirtualGroup(LightCapable):
    """An ordered set of light-capable members controlled together.

    Setters are forwarded to each direct member, so every member handles
    the change as if it had been called directly.
    """

    def __init__(self, bridge, id: int, name: str = '', *lights: LightCapable):
        """Create a virtual group and register it with bridge.

        Args:
            bridge: Bridge to register the group with
            id: Id, unique among the virtual groups of that bridge
            name: Free-form name (any length)
            *lights: Initial members

        Raises:
            ValidationError: If the id is already used on the bridge or an
                initial member is rejected; the group is not registered then
        """
        super().__init__(bridge, id)
        self._name = name or ''
        self.lights: list[LightCapable] = []
        if id in bridge.virtual_groups:
            raise ValidationError(f"There is already a virtual group with id {id} on {bridge}")
        for light in lights:
            self.add(light)
        bridge.virtual_groups[id] = self

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str):
        self._name = name or ''

    def get_lights(self) -> list[LightCapable]:
        return list(self.lights)

    def get_light(self, light_id: int) -> LightCapable | None:
        """Any member with the given id.

        Ids are only unique per bridge and entity type, so there may be
        several; see get_lights_by_id().
        """
        for light in self.lights:
            if light.id == light_id:
                return light
        return None

    def get_lights_by_id(self, light_id: int) -> list[LightCapable]:
        return [light for light in self.lights if light.id == light_id]

    def get_light_ids(self) -> list[int]:
        return sorted({light.id for light in self.lights})

    def add(self, light: LightCapable) -> bool:
        """Add a member.

        Returns:
            True if the group changed, False if light was already a member

        Raises:
            ValidationError: If light is not light-capable or the addition
                would make this group (indirectly) contain itself
        """
        if not isinstance(light, LightCapable):
            raise ValidationError(f"{light!r} can not be controlled as a light")
        if light is self:
            raise ValidationError("Can not add a virtual group to itself")
        if self._reachable_from(light):
            raise ValidationError(
                f"Adding {light!r} would result in a circular reference because it references {self!r}")
        if any(member is light for member in self.lights):
            return False
        self.lights.append(light)
        return True

    def remove(self, light: LightCapable) -> bool:
        for i, member in enumerate(self.lights):
            if member is light:
                del self.lights[i]
                return True
        return False

    def _reachable_from(self, start: LightCapable) -> bool:
        """Walk the membership graph below start looking for this group."""
        stack = [start]
        visited = set()
        while stack:
            node = stack.pop()
            if id(node) in visited or not isinstance(node, VirtualGroup):
                continue
            visited.add(id(node))
            for member in node.lights:
                if member is self:
                    return True
                stack.append(member)
        return False

    def collect_real(self) -> list[LightCapable]:
        """Members that live on a bridge, depth first, each only once."""
        result = []
        seen = set()

        def visit(node):
            if isinstance(node, VirtualGroup):
                for member in node.lights:
                    visit(member)
            elif id(node) not in seen:
                seen.add(id(node))
                result.append(node)

        visit(self)
        return result

    def set_on(self, on: bool):
        check_bool('on', on)
        for light in self.get_lights():
            light.set_on(on)

    def set_brightness(self, brightness: int):
        check_int_range('Brightness', brightness, 0, 255)
        for light in self.get_lights():
            light.set_brightness(brightness)

    def set_hue(self, hue: int):
        check_int_range('Hue', hue, 0, 65535)
        for light in self.get_lights():
            light.set_hue(hue)

    def set_saturation(self, saturation: int):
        check_int_range('Saturation', saturation, 0, 255)
        for light in self.get_lights():
            light.set_saturation(saturation)

    def set_xy(self, x: float, y: float):
        check_xy(x, y)
        for light in self.get_lights():
            light.set_xy(x, y)

    def set_color_temperature(self, color_temperature: int):
        check_int_range('ColorTemperature', color_temperature, 153, 500)
        for light in self.get_lights():
            light.set_color_temperature(color_temperature)

    def set_effect(self, effect: Effect):
        effect = Effect.coerce(effect)
        for light in self.get_lights():
            light.set_effect(effect)

    def set_alert(self, alert: Alert):
        alert = Alert.coerce(alert)
        for light in self.get_lights():
            light.set_alert(alert)

    def state_change_transaction(self, transition_time: int | None, changes):
        """Open a transaction on every real member, then run changes.

        Transactions are opened in reverse visiting order; the innermost one
        commits first, so requests go out in the same order as calling the
        setters without a transaction would send them.
        """
        pending = self.collect_real()
        pending.reverse()
        self._transaction_on(pending, transition_time, changes)

    def _transaction_on(self, pending: list[LightCapable], transition_time: int | None, changes):
        if not pending:
            changes()
            return
        current = pending.pop(0)
        current.state_change_transaction(
            transition_time, lambda: self._transaction_on(pending, transition_time, changes))

    def __repr__(self):
        return f"<VirtualGroup {self.id} {self._name!r}>"

    def __str__(self):
        return f"{self.id}({self._name})[{','.join(str(light) for light in self.lights)}]"
