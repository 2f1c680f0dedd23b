"""Tests for HueBridge operations not covered elsewhere (core/bridge.py)."""

import pytest

from core.bridge import HueBridge
from core.config import HueSettings
from core.errors import CommError, NotAuthenticatedError, ValidationError
from core.transport import BridgeTransport
from tests.conftest import BRIDGE_URL, USERNAME, FakeTransport


class TestConstruction:
    """Test creating bridges."""

    def test_from_address(self):
        bridge = HueBridge.from_address('10.0.0.5', f" {USERNAME} ")
        assert bridge.base_url == 'http://10.0.0.5/'
        assert bridge.username == USERNAME
        assert not bridge.is_authenticated()
        assert isinstance(bridge.transport, BridgeTransport)

    def test_settings_timeout_reaches_transport(self):
        bridge = HueBridge.from_address('hue.local', settings=HueSettings(request_timeout=9.0))
        assert bridge.transport.timeout == 9.0

    def test_invalid_username(self):
        with pytest.raises(ValidationError):
            HueBridge.from_address('10.0.0.5', 'bad')

    def test_group_zero_always_exists(self):
        bridge = HueBridge(BRIDGE_URL, transport=FakeTransport())
        assert 0 in bridge.groups
        assert bridge.groups[0].lights is bridge.lights

    def test_str_does_not_sync(self):
        transport = FakeTransport()
        bridge = HueBridge(BRIDGE_URL, udn='uuid:abc', transport=transport)
        assert str(bridge) == '<Unsynced Hue Bridge>@http://10.0.0.5/#uuid:abc'
        assert transport.requests == []

    def test_str_after_sync(self, bridge):
        assert str(bridge) == 'Philips hue@http://10.0.0.5/#uuid:2f402f80-da50-11e1-9b23-001788255acc'


class TestRequests:
    """Test request helpers."""

    def test_request_prefixes_username(self, bridge, transport):
        transport.respond('GET', f"/api/{USERNAME}/config", [{'name': 'Philips hue'}])
        assert bridge.request('GET', '/config') == [{'name': 'Philips hue'}]
        assert transport.requests == [('GET', f"/api/{USERNAME}/config", None)]

    def test_request_requires_authentication(self):
        transport = FakeTransport()
        bridge = HueBridge(BRIDGE_URL, USERNAME, transport=transport)
        with pytest.raises(NotAuthenticatedError):
            bridge.request('GET', '/config')
        assert transport.requests == []

    def test_checked_request_empty_response(self, bridge, transport):
        transport.respond('PUT', f"/api/{USERNAME}/config", [])
        with pytest.raises(CommError, match='Empty response'):
            bridge.checked_success_request('PUT', '/config', {'name': 'Hue'})

    def test_checked_request_carries_error(self, bridge, transport):
        error = {'type': 7, 'address': '/config/name', 'description': 'invalid value, x, for parameter, name'}
        transport.respond('PUT', f"/api/{USERNAME}/config", [{'error': error}])
        with pytest.raises(CommError) as excinfo:
            bridge.checked_success_request('PUT', '/config', {'name': 'x'})
        assert excinfo.value.error == error

    def test_sync_requires_authentication(self):
        bridge = HueBridge(BRIDGE_URL, transport=FakeTransport())
        with pytest.raises(NotAuthenticatedError):
            bridge.sync()


class TestBridgeName:
    """Test renaming the bridge."""

    def test_rename(self, bridge, transport):
        bridge.set_name(' Upstairs ')
        assert transport.requests == [('PUT', f"/api/{USERNAME}/config", {'name': 'Upstairs'})]
        assert bridge.get_name() == 'Upstairs'

    @pytest.mark.parametrize('name', ['Hue', 'x' * 17])
    def test_length_limits(self, bridge, transport, name):
        with pytest.raises(ValidationError):
            bridge.set_name(name)
        assert transport.requests == []


class TestNewLights:
    """Test searching for new lights."""

    def test_search(self, bridge, transport):
        transport.respond('POST', f"/api/{USERNAME}/lights", [
            {'success': {'/lights': 'Searching for new devices'}}])

        bridge.search_for_new_lights()

        assert transport.requests == [('POST', f"/api/{USERNAME}/lights", None)]
        assert bridge.is_scan_active()

    def test_new_lights(self, bridge, transport):
        transport.respond('GET', f"/api/{USERNAME}/lights/new", [
            {'7': {'name': 'Hue Lamp 7'}, 'lastscan': '2012-10-29T12:00:00'}])
        transport.respond('GET', f"/api/{USERNAME}/lights/7", [
            {'name': 'Hue Lamp 7', 'state': {'on': True, 'bri': 254, 'colormode': 'ct', 'ct': 366}}])

        lights = bridge.get_new_lights()

        assert [light.id for light in lights] == [7]
        assert bridge.get_light(7) is lights[0]
        assert lights[0].color_temperature == 366
        assert not bridge.is_scan_active()
        assert 7 in bridge.get_group(0).get_light_ids()

    def test_scan_still_active(self, bridge, transport):
        transport.respond('GET', f"/api/{USERNAME}/lights/new", [{'lastscan': 'active'}])
        assert bridge.get_new_lights() == []
        assert bridge.is_scan_active()

    def test_known_light_is_updated_not_replaced(self, bridge, transport):
        hallway = bridge.get_light(1)
        transport.respond('GET', f"/api/{USERNAME}/lights/new", [{'1': {'name': 'Hallway'}, 'lastscan': 'none'}])
        transport.respond('GET', f"/api/{USERNAME}/lights/1", [{'name': 'Hallway', 'state': {'bri': 4}}])

        assert bridge.get_new_lights() == [hallway]
        assert hallway.brightness == 4


class TestListings:
    """Test id and entity listings."""

    def test_virtual_groups_do_not_need_sync(self):
        bridge = HueBridge(BRIDGE_URL, transport=FakeTransport())
        assert bridge.get_virtual_groups() == []
        assert bridge.get_virtual_group(1) is None

    def test_sorted_lists(self, bridge):
        assert [light.id for light in bridge.get_lights()] == [1, 2, 5]
        assert [group.id for group in bridge.get_groups()] == [0, 1]
        assert bridge.get_light(99) is None
        assert bridge.get_group(99) is None
