"""
String pattern matching and tokenizing helpers.
"""

import re
from functools import lru_cache
from typing import Iterable, List, Pattern


@lru_cache(maxsize=512)
def _compile_pattern(pattern: str) -> Pattern[str]:
    # '*' is the only wildcard; everything else is literal.
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")), re.DOTALL)


def matches_pattern(pattern: str, text: str) -> bool:
    """Match ``text`` against a pattern where ``*`` matches any run of characters.

    A pattern without ``*`` must equal the text exactly. Matching is anchored
    at both ends.

    Examples:
        >>> matches_pattern("systemd*", "systemd-journal")
        True
        >>> matches_pattern("systemd*", "mysystemd")
        False
    """
    if "*" not in pattern:
        return pattern == text
    return _compile_pattern(pattern).fullmatch(text) is not None


def pattern_list_contains(patterns: Iterable[str], text: str) -> bool:
    """Return True if any pattern in ``patterns`` matches ``text``."""
    return any(matches_pattern(pattern, text) for pattern in patterns)


def split_tokens(text: str) -> List[str]:
    """Split on runs of whitespace, dropping empty tokens."""
    return text.split()
