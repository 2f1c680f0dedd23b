"""Lazy synchronisation of cached bridge state.

The bridge holds the authoritative state. These functions pull it into the
Light and Group objects a HueBridge caches:
- complete_sync: one GET of the full datastore (config, lights, groups)
- check_auth_and_sync: guard run by every cache accessor
- sync_light: refresh a single light (used by auto-sync and rollback)
- get_cache_info: summary of what is cached and how fresh it is

Existing Light/Group objects are updated in place so references held by
callers stay valid. Malformed payloads raise CommError; recovery is never
guessed.
"""

import logging
from datetime import datetime

from core.errors import CommError, NotAuthenticatedError
from models.group import ALL_LIGHTS_GROUP_ID, Group
from models.light import Light
from models.types import CacheInfo, ColorMode, Effect

logger = logging.getLogger(__name__)


def check_auth_and_sync(bridge):
    """Fail fast if unauthenticated, and make sure a full sync has happened.

    Raises:
        NotAuthenticatedError: If the bridge is not authenticated
        CommError: If the initial sync fails
    """
    if not bridge.is_authenticated():
        raise NotAuthenticatedError("Need to authenticate first.")
    if not bridge.initial_sync_done:
        complete_sync(bridge, bridge.username)


def _raise_for_error(entries: list[dict]):
    for entry in entries:
        if 'error' in entry:
            raise CommError.from_payload(entry['error'])


def complete_sync(bridge, username: str):
    """Fetch the whole datastore with username and update the cache.

    On success the bridge's username is set to the one used and
    initial_sync_done becomes True.

    Raises:
        CommError: If the request fails, the bridge reports an error, or the
            response lacks config/lights/groups or can not be parsed
    """
    response = bridge.transport.request('GET', f"/api/{username.strip()}")
    if not response:
        raise CommError("Empty response")
    _raise_for_error(response)

    datastore = response[0]
    if not all(key in datastore for key in ('config', 'lights', 'groups')):
        raise CommError("Incomplete response. Missing at least one of config/lights/groups")

    parse_config(bridge, datastore['config'])
    parse_lights(bridge, datastore['lights'])
    parse_groups(bridge, datastore['groups'])

    bridge.username = username
    bridge.initial_sync_done = True
    bridge.last_full_sync = datetime.now()
    logger.debug("Synced %s: %d lights, %d groups", bridge.base_url, len(bridge.lights), len(bridge.groups))


def parse_config(bridge, config: dict):
    try:
        bridge.name = config['name']
    except (KeyError, TypeError) as e:
        raise CommError("Config result parsing failed. Probably some unexpected format?") from e


def parse_light(light: Light, data: dict):
    """Copy one light's JSON representation into the Light object.

    Only fields present in ``state`` are updated; lights without colour
    support report no hue/xy/ct/colormode.
    """
    light._name = data['name']
    state = data.get('state', {})
    if 'on' in state:
        light._on = bool(state['on'])
    if 'bri' in state:
        light._brightness = int(state['bri'])
    if 'hue' in state:
        light._hue = int(state['hue'])
    if 'sat' in state:
        light._saturation = int(state['sat'])
    if 'xy' in state:
        x, y = state['xy']
        light._xy = (float(x), float(y))
    if 'ct' in state:
        light._color_temperature = int(state['ct'])
    if 'colormode' in state:
        light._color_mode = ColorMode.from_api(state['colormode'])
    if 'effect' in state:
        light._effect = Effect.from_api(state['effect'])
    light.last_sync = datetime.now()


def parse_lights(bridge, lights_json: dict) -> list[int]:
    """Create or update cached lights from a ``lights`` object.

    Returns:
        The light ids found in the payload
    """
    ids = []
    for key, data in lights_json.items():
        try:
            light_id = int(key)
            light = bridge.lights.get(light_id)
            if light is None:
                light = Light(bridge, light_id, auto_sync_interval=bridge.settings.auto_sync_interval)
                bridge.lights[light_id] = light
            parse_light(light, data)
        except CommError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise CommError("Lights result parsing failed. Probably some unexpected format?") from e
        ids.append(light_id)
    return ids


def parse_groups(bridge, groups_json: dict):
    """Create or update cached groups from a ``groups`` object.

    Every light a group lists must already be known to the bridge.
    """
    for key, data in groups_json.items():
        try:
            group_id = int(key)
            name = data['name']
            light_ids = [int(light_id) for light_id in data['lights']]
        except (KeyError, TypeError, ValueError) as e:
            raise CommError("Groups result parsing failed. Probably some unexpected format?") from e

        members = {}
        for light_id in light_ids:
            light = bridge.lights.get(light_id)
            if light is None:
                raise CommError(f"Can not find light with id {light_id}")
            members[light_id] = light

        group = bridge.groups.get(group_id)
        if group is None:
            group = Group(bridge, group_id)
            bridge.groups[group_id] = group
        group._name = name
        if group_id != ALL_LIGHTS_GROUP_ID:
            group.lights.clear()
            group.lights.update(members)


def sync_light(bridge, light: Light):
    """Reload a single light from the bridge."""
    # Guard against the refresh being triggered again while it runs
    if light.syncing:
        return
    light.syncing = True
    try:
        response = bridge.request('GET', f"/lights/{light.id}")
        if not response:
            raise CommError("Empty response")
        _raise_for_error(response)
        parse_light(light, response[0])
    except (KeyError, TypeError, ValueError) as e:
        raise CommError("Light result parsing failed. Probably some unexpected format?") from e
    finally:
        light.syncing = False


def get_cache_info(bridge) -> CacheInfo:
    """Get information about the cached bridge state without syncing.

    Returns:
        Dict with keys: synced, last_full_sync, counts, stale_lights
    """
    now = datetime.now()
    return {
        'synced': bridge.initial_sync_done,
        'last_full_sync': bridge.last_full_sync.isoformat() if bridge.last_full_sync else None,
        'counts': {
            'lights': len(bridge.lights),
            'groups': len(bridge.groups),
            'virtual_groups': len(bridge.virtual_groups),
        },
        'stale_lights': sorted(light_id for light_id, light in bridge.lights.items() if light.is_stale(now)),
    }
