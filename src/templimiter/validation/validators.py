"""
Validation functions for raw configuration values.

Every validator takes the raw value as loaded from TOML together with the
dotted key it came from, and raises a CONFIG ``LimiterError`` naming that
key when the value is unusable.
"""

from typing import Any, FrozenSet, List, Optional, Set, Tuple

from ..models.config import IdSet
from .exceptions import config_error


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        LimiterError: CONFIG if validation fails
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise config_error("must be an integer", field_name=field_name, value=value)
    if value < min_value:
        raise config_error(f"must be >= {min_value}", field_name=field_name, value=value)
    if max_value is not None and value > max_value:
        raise config_error(f"must be <= {max_value}", field_name=field_name, value=value)
    return value


def validate_temperature(value: Any, field_name: str) -> int:
    """Validate a temperature in millidegrees Celsius."""
    return validate_positive_integer(value, min_value=0, field_name=field_name)


def validate_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise config_error("must be a boolean", field_name=field_name, value=value)
    return value


def validate_string(value: Any, field_name: str) -> str:
    """Validate a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        raise config_error("must be a non-empty string", field_name=field_name, value=value)
    return value


def _require_list(value: Any, field_name: str) -> List[Any]:
    if not isinstance(value, list):
        raise config_error("must be a list", field_name=field_name, value=value)
    return value


def _parse_range_str(entry: str, field_name: str) -> Tuple[int, int]:
    """Parse an inclusive ``"low-high"`` range string."""
    low_str, sep, high_str = entry.partition("-")
    try:
        if not sep:
            raise ValueError(entry)
        low, high = int(low_str), int(high_str)
    except ValueError:
        raise config_error(
            "range entries must look like 'low-high'", field_name=field_name, value=entry
        )
    if low > high:
        raise config_error("range start is above range end", field_name=field_name, value=entry)
    return low, high


def validate_id_set(value: Any, field_name: str) -> IdSet:
    """
    Validate a list of ids, where each entry is an integer or a range string.

    Examples:
        >>> validate_id_set([1, 5, "100-199"], "whitelist.pid")
        IdSet(values=frozenset({1, 5}), ranges=((100, 199),))
    """
    values: Set[int] = set()
    ranges: List[Tuple[int, int]] = []
    for i, entry in enumerate(_require_list(value, field_name)):
        entry_name = f"{field_name}[{i}]"
        if isinstance(entry, bool):
            raise config_error("must be an integer or range", field_name=entry_name, value=entry)
        if isinstance(entry, int):
            values.add(entry)
        elif isinstance(entry, str):
            ranges.append(_parse_range_str(entry, entry_name))
        else:
            raise config_error("must be an integer or range", field_name=entry_name, value=entry)
    return IdSet(values=frozenset(values), ranges=tuple(ranges))


def validate_char_set(value: Any, field_name: str) -> FrozenSet[str]:
    """Validate a list of single-character process state codes."""
    chars = set()
    for i, entry in enumerate(_require_list(value, field_name)):
        if not isinstance(entry, str) or len(entry) != 1:
            raise config_error(
                "must be a single character", field_name=f"{field_name}[{i}]", value=entry
            )
        chars.add(entry)
    return frozenset(chars)


def validate_pattern_list(value: Any, field_name: str) -> Tuple[str, ...]:
    """Validate a list of command-name patterns (``*`` is the only wildcard)."""
    patterns = []
    for i, entry in enumerate(_require_list(value, field_name)):
        patterns.append(validate_string(entry, f"{field_name}[{i}]"))
    return tuple(patterns)
