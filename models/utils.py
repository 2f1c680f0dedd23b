"""Utility functions for the Hue bridge SDK.

This module contains helper functions used across the application:
- check_range / check_xy / check_bool: setter input validation
- check_name: length validation for names stored on the bridge
- similarity_score: Fuzzy score used for typo and name suggestions
- find_similar_strings: Find similar strings using fuzzy matching
- find_light_by_name: Case-insensitive light lookup on a bridge
- resolve_light: Light lookup by id or name for CLI arguments
- get_bridge: Helper to create an authenticated bridge for CLI commands
"""

import click

from core.errors import HueError, ValidationError


def check_range(name: str, value, low, high):
    """Validate that a numeric setter argument lies within [low, high].

    Raises:
        ValidationError: If value is not a number or out of range
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < low or value > high:
        raise ValidationError(f"{name} must be between {low}-{high}")
    return value


def check_int_range(name: str, value, low: int, high: int) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    return check_range(name, value, low, high)


def check_xy(x, y) -> tuple[float, float]:
    """Validate a CIE xy coordinate pair."""
    for value in (x, y):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
            raise ValidationError("A cie coordinate must be between 0.0-1.0")
    return float(x), float(y)


def check_bool(name: str, value) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be True or False, got {value!r}")
    return value


def check_name(name: str | None, max_length: int, min_length: int = 0) -> str:
    """Validate a name that will be stored on the bridge.

    Returns:
        The name without leading or trailing whitespace
    """
    if name is None or not min_length <= len(name.strip()) <= max_length:
        raise ValidationError(
            f"Name (without leading or trailing whitespace) has to be "
            f"{min_length}-{max_length} characters long")
    return name.strip()


def similarity_score(s1: str, s2: str) -> int:
    """Calculate similarity score between two strings.

    Used for command typo suggestions and light name matching.

    Args:
        s1: First string to compare
        s2: Second string to compare

    Returns:
        Similarity score:
        - 100: Exact match (case-insensitive)
        - 80: Prefix match
        - 60: Substring match
        - 0-50: Character sequence match (proportional to matching characters)
        - 0: No match
    """
    s1_lower = s1.lower()
    s2_lower = s2.lower()

    # Exact match
    if s1_lower == s2_lower:
        return 100

    # Prefix match
    if s2_lower.startswith(s1_lower) or s1_lower.startswith(s2_lower):
        return 80

    # Contains match
    if s1_lower in s2_lower or s2_lower in s1_lower:
        return 60

    # Character sequence matching
    matches = 0
    j = 0
    for char in s1_lower:
        while j < len(s2_lower):
            if s2_lower[j] == char:
                matches += 1
                j += 1
                break
            j += 1

    if matches > 0:
        score = int((matches / max(len(s1_lower), len(s2_lower))) * 50)
        return score if score > 20 else 0

    return 0


def find_similar_strings(target: str, candidates: list[str], limit: int = 5) -> list[str]:
    """Find similar strings using simple similarity scoring.

    Args:
        target: The string to match against
        candidates: List of candidate strings to search
        limit: Maximum number of results to return

    Returns:
        List of similar strings, sorted by similarity score (most similar first)
    """
    scored = [(candidate, similarity_score(target, candidate)) for candidate in candidates]

    filtered = [(c, s) for c, s in scored if s > 0]
    sorted_matches = sorted(filtered, key=lambda x: x[1], reverse=True)

    return [c for c, s in sorted_matches[:limit]]


def find_light_by_name(bridge, name: str):
    """Get a light by name (case-insensitive), or None."""
    for light in bridge.get_lights():
        if (light.name or '').lower() == name.lower():
            return light
    return None


def resolve_light(bridge, name_or_id: str):
    """Find a light by id (all digits) or by name.

    Prints suggestions for similar light names when nothing matches.
    """
    if name_or_id.strip().isdigit():
        light = bridge.get_light(int(name_or_id))
        if light is not None:
            return light

    light = find_light_by_name(bridge, name_or_id)
    if light is None:
        names = [light.name for light in bridge.get_lights() if light.name]
        suggestions = find_similar_strings(name_or_id, names, limit=3)
        if suggestions:
            click.echo(f"Did you mean: {', '.join(suggestions)}?")
    return light


def get_bridge(settings=None):
    """Create an authenticated, synced bridge from the configured address/username.

    Prints an error and returns None when the bridge is not configured or
    authentication fails, so commands can simply return.

    Args:
        settings: HueSettings to use (loaded from the environment if omitted)

    Returns:
        An authenticated HueBridge, or None
    """
    # Import here to avoid circular dependency (core.bridge imports models)
    from core.bridge import HueBridge
    from core.config import load_settings

    settings = settings or load_settings()
    if not settings.bridge_address or not settings.username:
        click.echo("Error: Set HUE_BRIDGE_ADDRESS and HUE_USERNAME first.", err=True)
        click.echo("Run 'discover' to find bridges and 'authenticate' to get a username.", err=True)
        return None

    try:
        bridge = HueBridge.from_address(settings.bridge_address, settings=settings)
        if not bridge.authenticate(settings.username, wait_for_grant=False):
            click.echo(f"Error: Username is not authorised on {settings.bridge_address}.", err=True)
            return None
    except HueError as e:
        click.echo(f"Error connecting to bridge at {settings.bridge_address}: {e}", err=True)
        return None

    return bridge
