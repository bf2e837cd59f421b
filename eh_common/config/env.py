"""Parsing for ``EH_*`` environment overrides.

Every parser returns None for an unset variable so callers can fall back
to their own defaults.
"""

from __future__ import annotations

_TRUTHY = {"1", "true", "yes", "on"}


def parse_bool_env(value: str | None) -> bool | None:
    """True for 1/true/yes/on (any case), False for anything else."""
    if value is None:
        return None
    return value.strip().lower() in _TRUTHY


def parse_float_env(value: str | None) -> float | None:
    """Parse a float; unparsable input counts as unset."""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_str_env(value: str | None) -> str | None:
    """Return a stripped string, or None for unset/blank values."""
    if value is None:
        return None
    value = value.strip()
    return value or None
