"""Utility functions for strata-config."""

import json
import re
from collections.abc import Callable
from typing import Any

from .exceptions import ConfigValidationError

ArrayMerge = Callable[[list[Any], list[Any]], list[Any]]

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def empty_config() -> dict[str, Any]:
    """Return the skeleton every configuration document starts from."""
    return {"profiles": {}, "defaults": {}, "plugins": [], "secure": []}


def backfill_config(properties: dict[str, Any]) -> dict[str, Any]:
    """Add any missing skeleton keys to a configuration document in place."""
    for key, value in empty_config().items():
        if properties.get(key) is None:
            properties[key] = value
    return properties


def deep_merge(
    base: dict[str, Any],
    overlay: dict[str, Any],
    array_merge: ArrayMerge | None = None,
) -> dict[str, Any]:
    """Deep merge two dictionaries with overlay precedence.

    Recursively merges nested dictionaries. Non-dict values in overlay
    completely replace corresponding values in base, except lists when an
    ``array_merge`` strategy is supplied.

    Args:
        base: Base dictionary
        overlay: Overlay dictionary (takes precedence)
        array_merge: Optional callable combining ``(base_list, overlay_list)``

    Returns:
        New merged dictionary (base and overlay are not modified)

    Examples:
        >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
        >>> overlay = {"b": {"c": 20}, "e": 5}
        >>> deep_merge(base, overlay)
        {'a': 1, 'b': {'c': 20, 'd': 3}, 'e': 5}

        >>> deep_merge({"a": [1, 2]}, {"a": [2, 3]}, array_merge=union_list)
        {'a': [1, 2, 3]}
    """
    result = base.copy()

    for key, value in overlay.items():
        current = result.get(key)
        if key in result and isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value, array_merge)
        elif array_merge is not None and isinstance(current, list) and isinstance(value, list):
            result[key] = array_merge(current, value)
        else:
            result[key] = value

    return result


def union_list(target: list[Any], source: list[Any]) -> list[Any]:
    """Append items of ``source`` missing from ``target``, keeping order.

    Examples:
        >>> union_list(["a", "b"], ["b", "c", "c"])
        ['a', 'b', 'c']
    """
    result = list(target)
    for item in source:
        if item not in result:
            result.append(item)
    return result


def split_path(path: str) -> list[str]:
    return path.split(".")


def get_path(obj: Any, path: str | list[str], default: Any = None) -> Any:
    """Read the value at a dotted path, or ``default`` when any segment is missing."""
    segments = split_path(path) if isinstance(path, str) else path
    for segment in segments:
        if not isinstance(obj, dict) or segment not in obj:
            return default
        obj = obj[segment]
    return obj


def set_path(obj: dict[str, Any], path: str | list[str], value: Any) -> None:
    """Set the value at a dotted path, creating intermediate objects."""
    segments = split_path(path) if isinstance(path, str) else path
    for segment in segments[:-1]:
        if not isinstance(obj.get(segment), dict):
            obj[segment] = {}
        obj = obj[segment]
    obj[segments[-1]] = value


def unset_path(obj: dict[str, Any], path: str | list[str]) -> bool:
    """Remove the value at a dotted path.

    Returns:
        True if a value was removed
    """
    segments = split_path(path) if isinstance(path, str) else path
    for segment in segments[:-1]:
        obj = obj.get(segment) if isinstance(obj, dict) else None
        if obj is None:
            return False
    if isinstance(obj, dict) and segments[-1] in obj:
        del obj[segments[-1]]
        return True
    return False


def coerce_value(value: Any) -> Any:
    """Coerce a command-line string to a boolean or integer.

    ``"true"``/``"false"`` become booleans and numeric-looking strings become
    integers. Fractional strings are truncated (``"3.14"`` -> ``3``) and
    leading zeros are lost (``"007"`` -> ``7``). Non-string values are
    returned unchanged.

    Examples:
        >>> coerce_value("2"), coerce_value("false"), coerce_value("abc")
        (2, False, 'abc')
    """
    if value == "true":
        return True
    if value == "false":
        return False
    if isinstance(value, str) and _NUMERIC.match(value):
        leading = _LEADING_INT.match(value)
        if leading:
            return int(leading.group(1))
    return value


def parse_json_value(text: str) -> Any:
    """Parse a JSON value supplied by a user.

    Raises:
        ConfigValidationError: If ``text`` is not valid JSON
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"could not parse JSON value: {e}") from e
