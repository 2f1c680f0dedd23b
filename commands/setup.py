"""The help command and the click group used by hue-control.

ColouredGroup prints --help in the same sections as the help command and
answers unknown commands with close matches.
"""

from dataclasses import dataclass

import click
from models.utils import find_similar_strings


@dataclass(frozen=True)
class CommandSection:
    """Represents a section in the help command."""
    name: str
    commands: list[tuple[str, str]]


COMMAND_SECTIONS = [
    CommandSection(
        name="BRIDGE",
        commands=[
            ("discover", "Find bridges on the local network"),
            ("authenticate [address]", "Get a username (press the link button)"),
            ("status", "Bridge overview and cache summary"),
            ("rename-bridge <name>", "Rename the bridge (4-16 characters)"),
        ]
    ),
    CommandSection(
        name="LIGHTS & GROUPS",
        commands=[
            ("list", "List lights with state and colour"),
            ("groups", "List groups and their lights"),
            ("search-lights", "Start a search for new lights"),
            ("new-lights", "Show lights found by the last search"),
            ("rename-light <light> <name>", "Rename a light"),
        ]
    ),
    CommandSection(
        name="CONTROL",
        commands=[
            ("power <light> [--on/--off]", "Turn light on/off"),
            ("brightness <light> <0-255>", "Set brightness"),
            ("colour <light> [options]", "Set hue/saturation, temperature or xy"),
            ("effect <light> <effect>", "Start or stop the colour loop"),
            ("alert <light> [select|lselect]", "Blink a light"),
        ]
    ),
]

FLAGS = [
    ("-u, --hue", "Hue value (0-65535)"),
    ("-s, --sat", "Saturation (0-255)"),
    ("-t, --ct", "Colour temperature (153-500)"),
    ("-T, --transition", "Transition time (100ms units)"),
]


class ColouredGroup(click.Group):
    """Click group whose --help lists commands by section and suggests fixes for typos."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            name = args[0] if args else ''
            if 'No such command' not in str(e) or not name:
                raise
            suggestions = find_similar_strings(name, self._visible_commands(ctx), limit=3)
            if not suggestions:
                raise
            message = f"Error: No such command '{name}'.\n\n"
            message += click.style("Did you mean one of these?\n", fg='yellow')
            message += ''.join(click.style(f"  • {s}\n", fg='green') for s in suggestions)
            raise click.UsageError(message) from None

    def _visible_commands(self, ctx) -> list[str]:
        names = []
        for name in self.list_commands(ctx):
            command = self.get_command(ctx, name)
            if command is not None and not command.hidden:
                names.append(name)
        return names

    def _sectioned(self, ctx) -> list[tuple[str, list[str]]]:
        """Visible command names grouped like the help command; unlisted ones go last."""
        remaining = self._visible_commands(ctx)
        sections = []
        for section in COMMAND_SECTIONS:
            names = [usage.split()[0] for usage, _ in section.commands]
            names = [name for name in names if name in remaining]
            remaining = [name for name in remaining if name not in names]
            if names:
                sections.append((section.name, names))
        if remaining:
            sections.append(("OTHER", remaining))
        return sections

    def format_usage(self, ctx, formatter):
        formatter.write_paragraph()
        formatter.write_text(click.style('Usage: ', fg='cyan', bold=True)
                             + f"{ctx.command_path} [OPTIONS] COMMAND [ARGS]...")

    def format_commands(self, ctx, formatter):
        sections = self._sectioned(ctx)
        if not sections:
            return
        width = max(len(name) for _, names in sections for name in names) + 2
        for title, names in sections:
            formatter.write_paragraph()
            formatter.write_text(click.style(title, fg='yellow', bold=True))
            with formatter.indentation():
                for name in names:
                    short_help = self.get_command(ctx, name).get_short_help_str(limit=60)
                    formatter.write_text(click.style(name.ljust(width), fg='green') + short_help)


def _echo_row(name: str, desc: str, colour: str):
    click.echo("  ", nl=False)
    click.secho(name, fg=colour, nl=False)
    click.echo(" " * (36 - len(name)) + "  " + desc)


@click.command(name='help')
def help_command():
    """Display help and common commands."""
    click.echo()
    click.secho("Hue Control - Quick Reference", fg='cyan', bold=True)
    click.echo()

    for section in COMMAND_SECTIONS:
        click.secho(section.name, fg='yellow', bold=True)
        for cmd, desc in section.commands:
            _echo_row(cmd, desc, 'green')
        click.echo()

    click.secho("SHORT FLAGS (available where applicable)", fg='yellow', bold=True)
    for flag, desc in FLAGS:
        _echo_row(flag, desc, 'cyan')
    click.echo()

    click.secho("SETTINGS (environment variables)", fg='yellow', bold=True)
    _echo_row("HUE_BRIDGE_ADDRESS", "Bridge IP address or host name", 'cyan')
    _echo_row("HUE_USERNAME", "Username from 'authenticate'", 'cyan')
    click.echo()

    click.secho("For detailed help on any command:", fg='cyan')
    click.echo(f"  hue-control {click.style('<command> -h', fg='white', bold=True)}")
    click.echo()
