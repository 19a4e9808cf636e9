"""
Helpers for coercing loosely-structured model output into clean values.
"""

from typing import Any


def clean_str_list(value: Any) -> list[str]:
    """Coerce a value into a list[str], dropping null/empty/non-string items."""
    if not value or not isinstance(value, list):
        return []

    cleaned: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        s = item.strip()
        if s:
            cleaned.append(s)
    return cleaned


def clean_dict_list(value: Any) -> list[dict[str, Any]]:
    """Coerce a value into a list[dict], dropping non-dicts."""
    if not value or not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def clamp_number(value: Any, low: float, high: float, default: float) -> float:
    """Coerce a value to a float within [low, high], or the default."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return min(max(number, low), high)


def first_str(data: dict[str, Any], *keys: str, default: str = "") -> str:
    """Get the first non-empty string value among several keys."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return default
