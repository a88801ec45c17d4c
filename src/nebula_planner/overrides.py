"""Per-date schedule overrides keyed by YYYY-MM-DD."""
from nebula_planner.calendar_utils import date_key
from nebula_planner.models import NO_SCHOOL, DAY_TYPES


def set_override(overrides: dict, day, kind: str) -> dict:
    """Force a day to 'a' or 'b'; 'none' removes the override. Returns a new mapping."""
    if kind not in DAY_TYPES:
        raise ValueError(f"Invalid day type: {kind!r}")
    updated = dict(overrides)
    key = date_key(day)
    if kind == NO_SCHOOL:
        updated.pop(key, None)
    else:
        updated[key] = kind
    return updated


def get_override(overrides: dict, day) -> str | None:
    return overrides.get(date_key(day))


def clear_override(overrides: dict, day) -> dict:
    return set_override(overrides, day, NO_SCHOOL)


def clean_overrides(raw: dict) -> dict:
    """Keep only well-formed YYYY-MM-DD keys with a known day type from persisted data."""
    cleaned = {}
    for key, kind in raw.items():
        if kind in DAY_TYPES and isinstance(key, str) and len(key) == 10:
            cleaned[key] = kind
    return cleaned
