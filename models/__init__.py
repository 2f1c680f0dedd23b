"""Data models and utility functions.

This package contains:
- light: LightCapable interface and the Light entity
- group: Groups stored on the bridge
- virtual_group: Client-side groups of lights
- types: Enums and TypedDicts for bridge payloads
- utils: Validation helpers, fuzzy matching and CLI helpers
"""
