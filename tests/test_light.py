"""Tests for the Light entity and its setters (models/light.py)."""

import pytest

from core.errors import CommError, ValidationError
from models.light import HUE_BLUE, HUE_GREEN, HUE_RED, HUE_RED_2, Light, LightCapable, color_mode_for
from models.types import Alert, ColorMode, Effect
from tests.conftest import USERNAME


def state_path(light_id):
    return f"/api/{USERNAME}/lights/{light_id}/state"


class TestConstruction:
    """Test Light creation checks."""

    def test_negative_id(self, bridge):
        with pytest.raises(ValidationError):
            Light(bridge, -1)

    def test_non_integer_id(self, bridge):
        with pytest.raises(ValidationError):
            Light(bridge, '3')

    def test_missing_bridge(self):
        with pytest.raises(ValidationError):
            Light(None, 3)

    def test_is_light_capable(self, bridge):
        assert isinstance(bridge.get_light(1), LightCapable)

    def test_colour_constants(self):
        assert (HUE_RED, HUE_GREEN, HUE_BLUE, HUE_RED_2) == (0, 25500, 46920, 65535)
        assert Light.HUE_BLUE == HUE_BLUE


class TestSetters:
    """Test single field state changes."""

    def test_set_hue_switches_colour_mode(self, bridge, transport):
        """Light 5 starts in ct mode; one hue change is one PUT with only the hue."""
        bedroom = bridge.get_light(5)
        assert bedroom.color_mode == ColorMode.CT
        assert bedroom.color_temperature == 300

        bedroom.set_hue(100)

        assert transport.requests == [('PUT', state_path(5), {'hue': 100})]
        assert bedroom.color_mode == ColorMode.HS
        assert bedroom.hue == 100

    @pytest.mark.parametrize('setter, args, field, value', [
        ('set_on', (False,), 'on', False),
        ('set_brightness', (0,), 'bri', 0),
        ('set_brightness', (255,), 'bri', 255),
        ('set_hue', (HUE_BLUE,), 'hue', HUE_BLUE),
        ('set_saturation', (255,), 'sat', 255),
        ('set_xy', (0.0, 1.0), 'xy', [0.0, 1.0]),
        ('set_color_temperature', (153,), 'ct', 153),
        ('set_color_temperature', (500,), 'ct', 500),
        ('set_effect', (Effect.COLORLOOP,), 'effect', 'colorloop'),
        ('set_effect', ('none',), 'effect', 'none'),
        ('set_alert', (Alert.LSELECT,), 'alert', 'lselect'),
    ])
    def test_one_request_per_setter(self, bridge, transport, setter, args, field, value):
        light = bridge.get_light(1)
        getattr(light, setter)(*args)
        assert transport.requests == [('PUT', state_path(1), {field: value})]

    @pytest.mark.parametrize('setter, args', [
        ('set_brightness', (-1,)),
        ('set_brightness', (256,)),
        ('set_hue', (-1,)),
        ('set_hue', (65536,)),
        ('set_saturation', (-1,)),
        ('set_saturation', (256,)),
        ('set_xy', (-0.1, 0.5)),
        ('set_xy', (0.5, 1.1)),
        ('set_color_temperature', (152,)),
        ('set_color_temperature', (501,)),
        ('set_on', ('yes',)),
        ('set_brightness', (12.5,)),
        ('set_effect', ('sparkle',)),
        ('set_alert', ('blink',)),
    ])
    def test_out_of_range_sends_nothing(self, bridge, transport, setter, args):
        light = bridge.get_light(1)
        with pytest.raises(ValidationError):
            getattr(light, setter)(*args)
        assert transport.requests == []

    def test_cached_fields_follow_confirmed_changes(self, bridge):
        desk = bridge.get_light(2)
        desk.set_on(True)
        desk.set_brightness(99)
        desk.set_color_temperature(400)
        desk.set_effect(Effect.NONE)

        assert desk.on
        assert desk.brightness == 99
        assert desk.color_temperature == 400
        assert desk.color_mode == ColorMode.CT
        assert desk.effect == Effect.NONE

    def test_xy_switches_colour_mode(self, bridge):
        bedroom = bridge.get_light(5)
        bedroom.set_xy(0.2, 0.7)
        assert bedroom.xy == (0.2, 0.7)
        assert bedroom.color_mode == ColorMode.XY

    def test_single_coordinate_keeps_the_other(self, bridge, transport):
        desk = bridge.get_light(2)
        desk.set_x(0.3)
        desk.set_y(0.5)
        assert transport.requests == [
            ('PUT', state_path(2), {'xy': [0.3, 0.0441]}),
            ('PUT', state_path(2), {'xy': [0.3, 0.5]}),
        ]
        assert desk.xy == (0.3, 0.5)

    def test_single_coordinates_in_one_transaction(self, bridge, transport):
        desk = bridge.get_light(2)
        with desk.transaction():
            desk.set_x(0.3)
            desk.set_y(0.5)
        assert transport.requests == [('PUT', state_path(2), {'xy': [0.3, 0.5]})]

    def test_single_coordinate_is_checked(self, bridge, transport):
        with pytest.raises(ValidationError):
            bridge.get_light(2).set_y(1.5)
        assert transport.requests == []

    def test_transition_time_is_sent(self, bridge, transport):
        light = bridge.get_light(1)
        light.transition_time = 20
        light.set_brightness(10)
        assert transport.requests == [('PUT', state_path(1), {'transitiontime': 20, 'bri': 10})]

    def test_failed_change_keeps_cached_value(self, bridge, transport):
        transport.respond('PUT', state_path(1), [{'error': {
            'type': 201, 'address': '/lights/1/state/bri',
            'description': 'parameter, bri, is not modifiable. Device is set to off.'}}])
        light = bridge.get_light(1)

        with pytest.raises(CommError) as excinfo:
            light.set_brightness(10)

        assert excinfo.value.error_type == 201
        assert light.brightness == 200

    def test_partial_success_is_failure(self, bridge, transport):
        transport.respond('PUT', state_path(1), [
            {'success': {'/lights/1/state/on': True}},
            {'error': {'type': 7, 'address': '/lights/1/state/hue', 'description': 'invalid value'}},
        ])
        with pytest.raises(CommError, match='invalid value'):
            bridge.get_light(1).set_on(True)

    def test_transport_failure_is_comm_error(self, bridge, transport):
        transport.respond('PUT', state_path(1), CommError('PUT failed: connection refused'))
        with pytest.raises(CommError, match='connection refused'):
            bridge.get_light(1).set_on(False)


class TestSetName:
    """Test renaming lights."""

    def test_rename(self, bridge, transport):
        transport.respond('PUT', f"/api/{USERNAME}/lights/1", [{'success': {'/lights/1/name': 'Front door'}}])
        light = bridge.get_light(1)

        light.set_name('  Front door ')

        assert transport.requests == [('PUT', f"/api/{USERNAME}/lights/1", {'name': 'Front door'})]
        assert light.name == 'Front door'

    def test_name_too_long(self, bridge, transport):
        with pytest.raises(ValidationError):
            bridge.get_light(1).set_name('x' * 33)
        assert transport.requests == []


class TestColourModeFor:
    """Test which mode a state change selects."""

    def test_priority(self):
        assert color_mode_for({'hue': 1, 'ct': 200, 'xy': [0.1, 0.1]}) == ColorMode.XY
        assert color_mode_for({'hue': 1, 'ct': 200}) == ColorMode.CT
        assert color_mode_for({'sat': 1}) == ColorMode.HS
        assert color_mode_for({'bri': 1}) is None


class TestRendering:
    """Test str() and repr()."""

    def test_str(self, bridge):
        assert str(bridge.get_light(5)) == '5(Bedroom)[ON,CT:300]'
        assert str(bridge.get_light(1)) == '1(Hallway)[ON,HS:10000/254]'
        assert str(bridge.get_light(2)) == '2(Desk)[OFF,XY:0.1691/0.0441]'

    def test_repr(self, bridge):
        assert repr(bridge.get_light(5)) == "<Light 5 'Bedroom'>"
