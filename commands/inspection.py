"""
Inspection commands for viewing the bridge: lights, groups and status.

All data comes from one full sync made when the bridge is opened.
"""

import click
from core.errors import HueError
from models.light import Light
from models.types import ColorMode
from models.utils import get_bridge


def describe_colour(light: Light) -> str:
    """Short text for a light's active colour setting."""
    mode = light.color_mode
    if mode == ColorMode.CT:
        return f"{light.color_temperature} mireds"
    if mode == ColorMode.HS:
        return f"hue {light.hue} sat {light.saturation}"
    if mode == ColorMode.XY:
        x, y = light.xy
        return f"xy {x:.4f},{y:.4f}"
    return ''


@click.command(name='list')
def list_lights_command():
    """List all lights with their state."""
    bridge = get_bridge()
    if not bridge:
        return

    try:
        lights = bridge.get_lights()
        if not lights:
            click.echo("No lights found.")
            return

        rows = [(str(light.id), light.name or 'Unnamed', 'ON' if light.on else 'OFF',
                 str(light.brightness), describe_colour(light)) for light in lights]

        click.secho(f"\n=== Lights ({len(rows)}) ===", fg='cyan', bold=True)
        click.echo()

        headers = ('ID', 'Name', 'State', 'Bri', 'Colour')
        widths = [max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(headers)]

        header = "  " + "  ".join(f"{h:<{w}}" for h, w in zip(headers, widths))
        click.echo(click.style(header, fg='white', bold=True))
        click.echo(click.style("  " + "─" * (sum(widths) + 2 * (len(widths) - 1)), fg='white', dim=True))
        for row in rows:
            line = "  " + "  ".join(f"{value:<{w}}" for value, w in zip(row, widths))
            click.echo(line)
        click.echo()

    except HueError as e:
        click.echo(f"Error listing lights: {e}")


@click.command()
def groups_command():
    """List all groups with their lights."""
    bridge = get_bridge()
    if not bridge:
        return

    try:
        groups = bridge.get_groups()

        click.secho(f"\n=== Groups ({len(groups)}) ===", fg='cyan', bold=True)
        click.echo()

        col_name = max(max((len(group.name or '') for group in groups), default=0), len("Group Name"))
        header = f"  {'ID':>3}  {'Group Name':<{col_name}}  Lights"
        click.echo(click.style(header, fg='white', bold=True))
        click.echo(click.style("  " + "─" * (col_name + 15), fg='white', dim=True))

        for group in groups:
            light_ids = ','.join(str(light_id) for light_id in group.get_light_ids())
            click.echo(f"  {group.id:>3}  {group.name or 'Unnamed':<{col_name}}  {light_ids}")
        click.echo()

    except HueError as e:
        click.echo(f"Error listing groups: {e}")


@click.command()
def status_command():
    """Get bridge status and a summary of what is cached."""
    bridge = get_bridge()
    if not bridge:
        return

    try:
        click.secho("\n=== Bridge Status ===\n", fg='cyan', bold=True)
        info = bridge.get_cache_info()
        lights = bridge.get_lights()

        items = [("name", bridge.get_name() or ''),
                 ("address", bridge.base_url),
                 ("lights", str(info['counts']['lights'])),
                 ("lights on", str(sum(1 for light in lights if light.on))),
                 ("groups", str(info['counts']['groups'])),
                 ("last sync", info['last_full_sync'] or 'never')]

        max_label_len = max(len(label) for label, _ in items)
        for label, value in items:
            click.echo(f"  {label:<{max_label_len}} : {value}")
        click.echo()

    except HueError as e:
        click.echo(f"Error getting status: {e}\n")
