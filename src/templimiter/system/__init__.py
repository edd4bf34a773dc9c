"""
System interaction utilities.

This module provides the thin layer between the control loop and the
kernel interfaces it relies on:

- Scalar file collections for sysfs thermal and cpufreq attributes
- Process filesystem reading and SIGSTOP/SIGCONT delivery
- Command-name pattern matching used by the whitelist
"""

# Scalar file access
from .files import FileCollection, ScalarFile

# Pattern matching
from .patterns import matches_pattern, pattern_list_contains, split_tokens

# Process filesystem
from .procfs import ProcFilesystem, parse_stat_line

__all__ = [
    # Files
    "FileCollection",
    "ScalarFile",
    # Patterns
    "matches_pattern",
    "pattern_list_contains",
    "split_tokens",
    # Procfs
    "ProcFilesystem",
    "parse_stat_line",
]
