"""
Typed parsing of scalar values read from text files.

Each parser converts a piece of text into one scalar kind and then writes
the value back out; if the result does not reproduce the input exactly the
text is rejected. This keeps values such as ``"007"``, ``"1e3"`` or
``"12abc"`` from being silently reinterpreted.
"""

from .exceptions import type_conversion_error

_TRUE_SPELLINGS = {"true": True, "1": True}
_FALSE_SPELLINGS = {"false": False, "0": False}


def parse_int(text: str) -> int:
    """
    Parse a signed decimal integer.

    Raises:
        LimiterError: TYPE_CONVERSION if the text is not a canonical integer
    """
    stripped = text.strip()
    try:
        value = int(stripped)
    except ValueError:
        raise type_conversion_error(text, "int", "not an integer")
    if str(value) != stripped:
        raise type_conversion_error(text, "int", "value does not round-trip")
    return value


def parse_unsigned(text: str) -> int:
    """Parse a non-negative decimal integer."""
    value = parse_int(text)
    if value < 0:
        raise type_conversion_error(text, "unsigned int", "value is negative")
    return value


def parse_float(text: str) -> float:
    """
    Parse a floating point number.

    ``"0.5"`` and ``"12.0"`` are accepted; ``"12"``, ``"0.50"`` and
    ``"1e3"`` are rejected because they do not survive ``str(float(text))``.
    """
    stripped = text.strip()
    try:
        value = float(stripped)
    except ValueError:
        raise type_conversion_error(text, "float", "not a number")
    if str(value) != stripped:
        raise type_conversion_error(text, "float", "value does not round-trip")
    return value


def parse_bool(text: str) -> bool:
    """Parse ``true``/``false`` or ``1``/``0``."""
    stripped = text.strip()
    if stripped in _TRUE_SPELLINGS:
        return True
    if stripped in _FALSE_SPELLINGS:
        return False
    raise type_conversion_error(text, "bool", "expected one of true, false, 1, 0")


def parse_char(text: str) -> str:
    """Parse exactly one non-whitespace character."""
    stripped = text.strip()
    if len(stripped) != 1:
        raise type_conversion_error(text, "char", "expected exactly one character")
    return stripped
