"""
Bridge commands: discovery, authentication, renaming and light search.
"""

import click
from core.bridge import HueBridge
from core.config import load_settings
from core.errors import HueError
from models.utils import get_bridge


@click.command()
@click.option('--attempts', '-a', type=click.IntRange(1, 4), help='Search rounds before giving up (default: HUE_DISCOVERY_ATTEMPTS or 3)')
def discover_command(attempts: int | None):
    """Find Hue bridges on the local network (SSDP).

    \b
    Examples:
      hue-control discover
      hue-control discover -a 4
    """
    settings = load_settings()
    click.echo("Searching for Hue bridges...")
    try:
        result = HueBridge.discover(attempts, settings=settings)
    except HueError as e:
        click.echo(f"✗ Discovery failed: {e}")
        return

    if not result.bridges:
        click.echo(f"No bridges found after {result.attempts} attempt(s).")
        if result.last_error:
            click.echo(f"Last error: {result.last_error}")
        click.echo()
        return

    click.secho(f"✓ Found {len(result.bridges)} bridge(s):", fg='green')
    for bridge in result.bridges:
        click.echo(f"  • {bridge.base_url}  {click.style(bridge.udn or '', dim=True)}")
    click.echo()


@click.command()
@click.argument('address', required=False)
@click.option('--username', '-u', help='Username to use or register (default: HUE_USERNAME)')
@click.option('--wait/--no-wait', default=True, help='Wait for the link button to be pressed (default: wait)')
def authenticate_command(address: str | None, username: str | None, wait: bool):
    """Authenticate with a bridge, registering a new username if needed.

    Press the link button on the bridge when asked. ADDRESS defaults to
    HUE_BRIDGE_ADDRESS.

    \b
    Examples:
      hue-control authenticate 192.168.1.10
      hue-control authenticate -u my-existing-username --no-wait
    """
    settings = load_settings()
    address = address or settings.bridge_address
    if not address:
        click.echo("Error: Give a bridge address or set HUE_BRIDGE_ADDRESS.")
        click.echo("Run 'discover' to find bridges.")
        return

    try:
        bridge = HueBridge.from_address(address, settings=settings)
        if wait:
            click.echo(f"Press the link button on the bridge at {address} "
                       f"(waiting up to {settings.grant_wait_seconds:g}s)...")
        if not bridge.authenticate(username or settings.username, wait_for_grant=wait):
            click.secho("✗ Not authorised. Press the link button and try again.", fg='red')
            return
    except HueError as e:
        click.echo(f"✗ Authentication failed: {e}")
        return

    click.secho(f"✓ Authenticated with {bridge.name} ({address})", fg='green')
    click.echo()
    click.echo("Use these settings for the other commands:")
    click.echo(f"  export HUE_BRIDGE_ADDRESS={address}")
    click.echo(f"  export HUE_USERNAME={bridge.username}")
    click.echo()


@click.command()
@click.argument('name')
def rename_bridge_command(name: str):
    """Rename the bridge (4-16 characters)."""
    bridge = get_bridge()
    if not bridge:
        return

    old_name = bridge.get_name()
    try:
        bridge.set_name(name)
        click.echo(f"✓ Renamed bridge '{old_name}' to '{bridge.get_name()}'")
    except HueError as e:
        click.echo(f"✗ Failed to rename bridge: {e}")


@click.command()
def search_lights_command():
    """Start a search for new lights (takes about a minute).

    Run 'new-lights' afterwards to see what was found.
    """
    bridge = get_bridge()
    if not bridge:
        return

    try:
        bridge.search_for_new_lights()
        click.echo("✓ Searching for new lights. Check 'new-lights' in about a minute.")
    except HueError as e:
        click.echo(f"✗ Failed to start search: {e}")


@click.command()
def new_lights_command():
    """Show lights found by the last search."""
    bridge = get_bridge()
    if not bridge:
        return

    try:
        lights = bridge.get_new_lights()
    except HueError as e:
        click.echo(f"✗ Failed to get new lights: {e}")
        return

    if bridge.is_scan_active():
        click.echo("A search is still running.")
    if not lights:
        click.echo("No new lights found.")
        return
    click.echo(f"New lights ({len(lights)}):")
    for light in lights:
        click.echo(f"  [{light.id}] {light.name}")
