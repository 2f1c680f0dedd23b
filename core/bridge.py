"""HueBridge class for managing Hue Bridge API interactions.

This module contains the client-side handle of one bridge. It owns the
transport, the authentication state and the cached Light, Group and
VirtualGroup objects, and delegates the heavier lifting to core.auth
(handshake), core.cache (sync) and core.discovery (finding bridges).
"""

import logging
from datetime import datetime

from core import auth, cache
from core.config import HueSettings
from core.errors import CommError, NotAuthenticatedError
from core.transport import BridgeTransport
from models.group import ALL_LIGHTS_GROUP_ID, Group
from models.light import Light
from models.utils import check_name
from models.virtual_group import VirtualGroup

logger = logging.getLogger(__name__)


class HueBridge:
    """A Philips Hue bridge reachable over the local network (API v1).

    A bridge is either found with HueBridge.discover() or created for a
    known address with HueBridge.from_address(). Nothing is persisted: the
    username has to be supplied again (or re-granted) in every process.

    The entity cache (lights, groups and virtual_groups) is held in plain
    dicts and must only be used from one thread at a time.
    """

    def __init__(self, base_url: str, username: str | None = None, udn: str | None = None,
                 settings: HueSettings | None = None, transport: BridgeTransport | None = None):
        """Initialise HueBridge.

        Args:
            base_url: Bridge base URL, e.g. "http://10.0.0.5/"
            username: Username to authenticate with later (optional)
            udn: UPnP device id, set when found by discovery
            settings: HueSettings (defaults used if omitted)
            transport: Transport to use (created from base_url if omitted)
        """
        self.settings = settings or HueSettings()
        self.transport = transport or BridgeTransport(base_url, timeout=self.settings.request_timeout)
        self.udn = udn
        self._username = auth.validate_credential(username)
        self.authenticated = False
        self.initial_sync_done = False
        self.last_full_sync: datetime | None = None
        self.scan_active = False

        self.name: str | None = None
        self.lights: dict[int, Light] = {}
        self.groups: dict[int, Group] = {}
        self.virtual_groups: dict[int, VirtualGroup] = {}

        # Always present and always containing every light of this bridge
        all_lights = Group(self, ALL_LIGHTS_GROUP_ID, self.lights)
        all_lights._name = 'All lights'
        self.groups[ALL_LIGHTS_GROUP_ID] = all_lights

    @classmethod
    def from_address(cls, address: str, username: str | None = None,
                     settings: HueSettings | None = None) -> 'HueBridge':
        """Get a bridge for a known IP address or host name without discovery."""
        return cls(f"http://{address}/", username, settings=settings)

    @staticmethod
    def discover(attempts: int | None = None, settings: HueSettings | None = None):
        """Find bridges on the local network. See core.discovery.discover()."""
        from core.discovery import discover

        settings = settings or HueSettings()
        return discover(attempts if attempts is not None else settings.discovery_attempts, settings=settings)

    @property
    def base_url(self) -> str:
        return self.transport.base_url

    @property
    def username(self) -> str | None:
        return self._username

    @username.setter
    def username(self, username: str | None):
        """Set the username. A different username drops the authenticated flag."""
        username = auth.validate_credential(username)
        self.authenticated = self.authenticated and auth.equal_enough(self._username, username)
        self._username = username

    def is_authenticated(self) -> bool:
        return self.authenticated

    def authenticate(self, username: str | None = None, wait_for_grant: bool = False) -> bool:
        """Authenticate with username (or the current one). See core.auth.authenticate()."""
        return auth.authenticate(self, username if username is not None else self._username, wait_for_grant)

    def sync(self):
        """Reload config, lights and groups from the bridge.

        Raises:
            NotAuthenticatedError: If not authenticated
            CommError: If the sync fails
        """
        if not self.is_authenticated():
            raise NotAuthenticatedError("Need to authenticate first.")
        cache.complete_sync(self, self._username)

    def sync_light(self, light: Light):
        cache.sync_light(self, light)

    def check_auth_and_sync(self):
        cache.check_auth_and_sync(self)

    def get_cache_info(self):
        return cache.get_cache_info(self)

    def request(self, method: str, path: str, body: dict | None = None) -> list[dict]:
        """Send a request below /api/<username>.

        Raises:
            NotAuthenticatedError: If not authenticated
            CommError: If the request fails
        """
        self.check_auth_and_sync()
        return self.transport.request(method, f"/api/{self._username}{path}", body)

    def checked_success_request(self, method: str, path: str, body: dict | None = None) -> list[dict]:
        """Send a request and require every response entry to be a success.

        Raises:
            CommError: Carrying the bridge's error object if any entry is not a success
        """
        response = self.request(method, path, body)
        if not response:
            raise CommError("Empty response")
        for entry in response:
            if 'success' not in entry:
                raise CommError.from_payload(entry.get('error', entry))
        return response

    def get_name(self) -> str | None:
        self.check_auth_and_sync()
        return self.name

    def set_name(self, name: str):
        """Rename the bridge (4-16 characters)."""
        name = check_name(name, 16, min_length=4)
        self.checked_success_request('PUT', '/config', {'name': name})
        self.name = name

    def get_lights(self) -> list[Light]:
        self.check_auth_and_sync()
        return [self.lights[light_id] for light_id in sorted(self.lights)]

    def get_light(self, light_id: int) -> Light | None:
        self.check_auth_and_sync()
        return self.lights.get(light_id)

    def get_light_ids(self) -> list[int]:
        self.check_auth_and_sync()
        return sorted(self.lights)

    def get_groups(self) -> list[Group]:
        self.check_auth_and_sync()
        return [self.groups[group_id] for group_id in sorted(self.groups)]

    def get_group(self, group_id: int) -> Group | None:
        self.check_auth_and_sync()
        return self.groups.get(group_id)

    def get_group_ids(self) -> list[int]:
        self.check_auth_and_sync()
        return sorted(self.groups)

    def get_virtual_groups(self) -> list[VirtualGroup]:
        return [self.virtual_groups[group_id] for group_id in sorted(self.virtual_groups)]

    def get_virtual_group(self, group_id: int) -> VirtualGroup | None:
        return self.virtual_groups.get(group_id)

    def get_virtual_group_ids(self) -> list[int]:
        return sorted(self.virtual_groups)

    def search_for_new_lights(self):
        """Start a scan for new lights (runs about a minute on the bridge)."""
        self.checked_success_request('POST', '/lights')
        self.scan_active = True
        logger.info("Started search for new lights on %s", self.base_url)

    def is_scan_active(self) -> bool:
        """Whether the last get_new_lights() saw a search still running."""
        return self.scan_active

    def get_new_lights(self) -> list[Light]:
        """Lights found by the last scan.

        An empty list can mean no scan has run, nothing was found, or a scan
        is still active; check scan_active afterwards.
        """
        response = self.request('GET', '/lights/new')
        if not response:
            raise CommError("Empty response")
        found = dict(response[0])
        if 'error' in found:
            raise CommError.from_payload(found['error'])
        self.scan_active = found.pop('lastscan', None) == 'active'

        result = []
        for key, data in found.items():
            try:
                light_id = int(key)
            except ValueError:
                continue
            light = self.lights.get(light_id)
            if light is None:
                light = Light(self, light_id, auto_sync_interval=self.settings.auto_sync_interval)
                self.lights[light_id] = light
            light._name = data.get('name', light._name) if isinstance(data, dict) else light._name
            self.sync_light(light)
            result.append(light)
        return result

    def __repr__(self):
        return f"<HueBridge {self.base_url} {self.udn}>"

    def __str__(self):
        name = f"{self.name}@" if self.initial_sync_done else "<Unsynced Hue Bridge>@"
        return f"{name}{self.base_url}#{self.udn}"
