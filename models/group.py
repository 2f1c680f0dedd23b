"""Groups of lights defined on the bridge.

By convention group 0 always exists and contains every light of the
bridge. Creating, deleting or changing the members of a group is not
supported by the bridge API version modelled here, so apart from renaming,
groups are read as the bridge reports them. See models.virtual_group for a
client-side alternative.
"""

from core.errors import UnsupportedOperationError, ValidationError
from models.light import MAX_NAME_LENGTH, BridgeEntity, Light
from models.utils import check_name

ALL_LIGHTS_GROUP_ID = 0


class Group(BridgeEntity):
    """A light group stored on the bridge.

    State changes go to the group's action endpoint in one request, and a
    confirmed change is copied into the cached state of every member light.
    """

    def __init__(self, bridge, id: int, lights: dict[int, Light] | None = None):
        super().__init__(bridge, id)
        self._name: str | None = None
        # Group 0 shares the bridge's own light table
        self.lights: dict[int, Light] = lights if lights is not None else {}

    @property
    def state_path(self) -> str:
        return f"/groups/{self.id}/action"

    @property
    def name(self) -> str | None:
        return self._name

    def set_name(self, name: str):
        """Rename the group on the bridge (at most 32 characters)."""
        if self.id == ALL_LIGHTS_GROUP_ID:
            raise UnsupportedOperationError("The implicit group 0 can not be renamed")
        name = check_name(name, MAX_NAME_LENGTH)
        response = self.bridge.checked_success_request('PUT', f"/groups/{self.id}", {'name': name})
        success = response[0].get('success', {}) if response else {}
        self._name = success.get(f"/groups/{self.id}/name", name) if isinstance(success, dict) else name

    def get_lights(self) -> list[Light]:
        return [self.lights[light_id] for light_id in sorted(self.lights)]

    def get_light(self, light_id: int) -> Light | None:
        return self.lights.get(light_id)

    def get_light_ids(self) -> list[int]:
        return sorted(self.lights)

    def _check_same_bridge(self, light: Light):
        if light.bridge is not self.bridge:
            raise ValidationError("A group can only contain lights from the same bridge")

    def add(self, light: Light) -> bool:
        """Add a light to this group.

        Adding to group 0 is a no-op since it already holds every light.

        Raises:
            ValidationError: If the light belongs to another bridge
            UnsupportedOperationError: For any other group
        """
        self._check_same_bridge(light)
        if self.id == ALL_LIGHTS_GROUP_ID:
            return False
        raise UnsupportedOperationError("Changing group members is not supported by version 1.0 of the Hue API")

    def remove(self, light: Light) -> bool:
        """Remove a light from this group. Never supported, see add()."""
        self._check_same_bridge(light)
        if self.id == ALL_LIGHTS_GROUP_ID:
            raise ValidationError("It is not allowed to remove a light from the implicit group")
        raise UnsupportedOperationError("Changing group members is not supported by version 1.0 of the Hue API")

    def apply_state(self, state: dict):
        for light in self.lights.values():
            light.apply_state(state)

    def resync(self):
        # Member lights received optimistic updates, so reload everything
        self.bridge.sync()

    def __repr__(self):
        return f"<Group {self.id} {self._name!r}>"

    def __str__(self):
        return f"{self.id}({self._name})[{','.join(str(i) for i in self.get_light_ids())}]"
