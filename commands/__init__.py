"""CLI command modules.

This package contains:
- bridge: Bridge commands (discover, authenticate, rename-bridge, search-lights, new-lights)
- inspection: Inspection commands (list, groups, status)
- control: Direct control commands (power, brightness, colour, effect, alert, rename-light)
- setup: Help command and the coloured Click group
"""
