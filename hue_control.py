#!/usr/bin/env python3
"""
Hue Control CLI
Find and authenticate with Philips Hue bridges and control their lights.
"""

import logging

import click

from commands.setup import ColouredGroup, help_command
from commands.bridge import (
    discover_command,
    authenticate_command,
    rename_bridge_command,
    search_lights_command,
    new_lights_command
)
from commands.inspection import list_lights_command, groups_command, status_command
from commands.control import (
    power_command,
    brightness_command,
    colour_command,
    effect_command,
    alert_command,
    rename_light_command
)


@click.group(
    cls=ColouredGroup,
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 999  # Very wide to prevent wrapping on wide terminals
    }
)
@click.option('-v', '--verbose', is_flag=True, help='Log requests and discovery details')
@click.version_option(version='0.1.0', prog_name='Hue Control')
def cli(verbose: bool):
    """Hue Control CLI - Find Philips Hue bridges and control their lights.

Settings: HUE_BRIDGE_ADDRESS and HUE_USERNAME select the bridge.
Run 'discover' to find a bridge and 'authenticate' to get a username.

Use 'help' for a quick reference of all commands.
Use 'COMMAND -h' or 'COMMAND --help' for detailed help on a specific command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


# Register help command
cli.add_command(help_command)

# Register bridge commands
cli.add_command(discover_command, name='discover')
cli.add_command(authenticate_command, name='authenticate')
cli.add_command(rename_bridge_command, name='rename-bridge')
cli.add_command(search_lights_command, name='search-lights')
cli.add_command(new_lights_command, name='new-lights')

# Register inspection commands
cli.add_command(list_lights_command)  # Uses 'list' name defined in decorator
cli.add_command(groups_command, name='groups')
cli.add_command(status_command, name='status')

# Register control commands
cli.add_command(power_command, name='power')
cli.add_command(brightness_command, name='brightness')
cli.add_command(colour_command, name='colour')
cli.add_command(effect_command, name='effect')
cli.add_command(alert_command, name='alert')
cli.add_command(rename_light_command, name='rename-light')


if __name__ == '__main__':
    cli()
