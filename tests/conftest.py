"""Pytest configuration and fixtures for Hue bridge tests."""

import copy

import pytest

from core.bridge import HueBridge
from core.errors import CommError

BRIDGE_URL = 'http://10.0.0.5/'
USERNAME = 'aaaaaaaaaaaaaaaaaaaaaa'


class FakeTransport:
    """Stands in for BridgeTransport and records every request.

    Responses are scripted per (method, path), replacing any earlier
    script. Each request takes the next response; the last one is
    repeated. A scripted exception is raised instead of returned.
    Unscripted PUTs answer with one success entry per body field, like
    the bridge does.
    """

    def __init__(self, base_url: str = BRIDGE_URL):
        self.base_url = base_url
        self.requests: list[tuple[str, str, dict | None]] = []
        self.responses: dict[tuple[str, str], list] = {}

    def respond(self, method: str, path: str, *responses):
        self.responses[(method, path)] = list(responses)

    def request(self, method: str, path: str, body: dict | None = None) -> list[dict]:
        self.requests.append((method, path, copy.deepcopy(body)))
        queue = self.responses.get((method, path))
        if not queue:
            if method == 'PUT' and body:
                return [{'success': {f"{path}/{key}": value}} for key, value in body.items()]
            raise CommError(f"No fixture response for {method} {path}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def requests_for(self, method: str, path: str | None = None) -> list[tuple[str, str, dict | None]]:
        return [r for r in self.requests if r[0] == method and (path is None or r[1] == path)]

    def clear(self):
        self.requests.clear()


def make_datastore() -> dict:
    """Full state document as returned by GET /api/<username>."""
    return {
        'config': {'name': 'Philips hue', 'apiversion': '1.16.0'},
        'lights': {
            '1': {
                'name': 'Hallway',
                'type': 'Extended color light',
                'state': {'on': True, 'bri': 200, 'hue': 10000, 'sat': 254, 'xy': [0.5, 0.4],
                          'ct': 250, 'colormode': 'hs', 'effect': 'none', 'alert': 'none',
                          'reachable': True},
            },
            '2': {
                'name': 'Desk',
                'type': 'Extended color light',
                'state': {'on': False, 'bri': 1, 'hue': 46920, 'sat': 100, 'xy': [0.1691, 0.0441],
                          'ct': 153, 'colormode': 'XY', 'effect': 'colorloop', 'alert': 'none',
                          'reachable': True},
            },
            '5': {
                'name': 'Bedroom',
                'type': 'Extended color light',
                'state': {'on': True, 'bri': 100, 'hue': 0, 'sat': 0, 'xy': [0.3, 0.3],
                          'ct': 300, 'colormode': 'ct', 'effect': 'none', 'alert': 'none',
                          'reachable': True},
            },
        },
        'groups': {
            '1': {'name': 'Living room', 'lights': ['1', '2'], 'type': 'LightGroup'},
        },
    }


def unauthorised_user_error(username: str = USERNAME) -> list[dict]:
    return [{'error': {'type': 1, 'address': f"/api/{username}", 'description': 'unauthorized user'}}]


def link_button_error() -> list[dict]:
    return [{'error': {'type': 101, 'address': '', 'description': 'link button not pressed'}}]


@pytest.fixture
def datastore():
    return make_datastore()


@pytest.fixture
def transport(datastore):
    """Transport that accepts USERNAME and serves the datastore."""
    fake = FakeTransport()
    fake.respond('GET', f"/api/{USERNAME}", [datastore])
    return fake


@pytest.fixture
def bridge(transport):
    """Authenticated and synced bridge backed by the fake transport."""
    hue_bridge = HueBridge(BRIDGE_URL, udn='uuid:2f402f80-da50-11e1-9b23-001788255acc', transport=transport)
    assert hue_bridge.authenticate(USERNAME)
    transport.clear()
    return hue_bridge


@pytest.fixture
def other_bridge():
    """A second synced bridge with its own lights."""
    fake = FakeTransport('http://10.0.0.6/')
    fake.respond('GET', f"/api/{USERNAME}", [make_datastore()])
    hue_bridge = HueBridge('http://10.0.0.6/', transport=fake)
    assert hue_bridge.authenticate(USERNAME)
    fake.clear()
    return hue_bridge
