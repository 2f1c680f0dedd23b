"""
Control commands for direct manipulation of lights.

Includes power, brightness, colour, effect, alert and renaming.
"""

import click
from core.errors import HueError
from models.types import Alert, Effect
from models.utils import get_bridge, resolve_light


def _light_or_report(bridge, light_name: str):
    light = resolve_light(bridge, light_name)
    if light is None:
        click.echo(f"Error: Light '{light_name}' not found.")
        click.echo()
    return light


@click.command()
@click.argument('light_name')
@click.option('--on/--off', default=True, help='Turn light on or off')
def power_command(light_name: str, on: bool):
    """Turn a light ON or OFF.

    LIGHT_NAME can be the light's name or its id.

    \b
    Examples:
      hue-control power "Bedroom" --on
      hue-control power 3 --off
    """
    bridge = get_bridge()
    if not bridge:
        return

    light = _light_or_report(bridge, light_name)
    if not light:
        return

    status = "ON" if on else "OFF"
    try:
        light.set_on(on)
        click.echo(f"✓ {light.name} turned {status}")
    except HueError as e:
        click.echo(f"✗ Failed to turn {light.name} {status}: {e}")


@click.command()
@click.argument('light_name')
@click.argument('brightness', type=click.IntRange(0, 255))
@click.option('--transition', '-T', type=click.IntRange(0, 65535), help='Transition time in units of 100ms')
def brightness_command(light_name: str, brightness: int, transition: int | None):
    """Set brightness of a light (0-255), switching it on.

    \b
    Examples:
      hue-control brightness "Bedroom" 200
      hue-control brightness "Bedroom" 50 -T 20
    """
    bridge = get_bridge()
    if not bridge:
        return

    light = _light_or_report(bridge, light_name)
    if not light:
        return

    try:
        with light.transaction(transition):
            light.set_on(True)
            light.set_brightness(brightness)
        click.echo(f"✓ {light.name} brightness set to {brightness}/255")
    except HueError as e:
        click.echo(f"✗ Failed to set brightness: {e}")


@click.command()
@click.argument('light_name')
@click.option('--hue', '-u', type=click.IntRange(0, 65535), help='Hue value (0-65535)')
@click.option('--sat', '-s', type=click.IntRange(0, 255), help='Saturation (0-255)')
@click.option('--ct', '-t', type=click.IntRange(153, 500), help='Colour temperature (153-500 mireds)')
@click.option('--xy', type=(click.FloatRange(0.0, 1.0), click.FloatRange(0.0, 1.0)), help='CIE x and y (0.0-1.0)')
@click.option('--transition', '-T', type=click.IntRange(0, 65535), help='Transition time in units of 100ms')
def colour_command(light_name: str, hue: int | None, sat: int | None, ct: int | None,
                   xy: tuple[float, float] | None, transition: int | None):
    """Set colour or temperature of a light.

    All given values are sent to the bridge in one request.

    \b
    Examples:
      hue-control colour "Bedroom" -u 10000 -s 254
      hue-control colour "Bedroom" --ct 300
      hue-control colour "Bedroom" --xy 0.31 0.33 -T 10
    """
    if hue is None and sat is None and ct is None and xy is None:
        click.echo("Error: Please specify --hue/-u and --sat/-s, --ct/-t or --xy")
        return

    bridge = get_bridge()
    if not bridge:
        return

    light = _light_or_report(bridge, light_name)
    if not light:
        return

    try:
        with light.transaction(transition):
            light.set_on(True)
            if hue is not None:
                light.set_hue(hue)
            if sat is not None:
                light.set_saturation(sat)
            if ct is not None:
                light.set_color_temperature(ct)
            if xy is not None:
                light.set_xy(*xy)
        click.echo(f"✓ {light.name} colour updated")
    except HueError as e:
        click.echo(f"✗ Failed to set colour: {e}")


@click.command()
@click.argument('light_name')
@click.argument('effect', type=click.Choice([effect.value for effect in Effect]))
def effect_command(light_name: str, effect: str):
    """Set the dynamic effect of a light (none or colorloop)."""
    bridge = get_bridge()
    if not bridge:
        return

    light = _light_or_report(bridge, light_name)
    if not light:
        return

    try:
        light.set_effect(Effect(effect))
        click.echo(f"✓ {light.name} effect set to {effect}")
    except HueError as e:
        click.echo(f"✗ Failed to set effect: {e}")


@click.command()
@click.argument('light_name')
@click.argument('alert', type=click.Choice([alert.value for alert in Alert]), default=Alert.SELECT.value)
def alert_command(light_name: str, alert: str):
    """Make a light blink once (select) or for 15 seconds (lselect)."""
    bridge = get_bridge()
    if not bridge:
        return

    light = _light_or_report(bridge, light_name)
    if not light:
        return

    try:
        light.set_alert(Alert(alert))
        click.echo(f"✓ Alert '{alert}' sent to {light.name}")
    except HueError as e:
        click.echo(f"✗ Failed to send alert: {e}")


@click.command()
@click.argument('light_name')
@click.argument('new_name')
def rename_light_command(light_name: str, new_name: str):
    """Rename a light on the bridge (at most 32 characters)."""
    bridge = get_bridge()
    if not bridge:
        return

    light = _light_or_report(bridge, light_name)
    if not light:
        return

    old_name = light.name
    try:
        light.set_name(new_name)
        click.echo(f"✓ Renamed '{old_name}' to '{light.name}'")
    except HueError as e:
        click.echo(f"✗ Failed to rename light: {e}")
