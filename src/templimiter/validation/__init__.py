"""
Validation and error handling for the templimiter package.

This module provides the error taxonomy shared by every component, the
typed text parsers used when reading sysfs and procfs files, and the
validators applied to raw configuration values.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorKind,
    ErrorSeverity,
    LimiterError,
    argument_error,
    config_error,
    handle_cli_error,
    handle_config_error,
    handle_error,
    internal_error,
    io_error,
    type_conversion_error,
)

# Typed text parsing
from .conversions import (
    parse_bool,
    parse_char,
    parse_float,
    parse_int,
    parse_unsigned,
)

__all__ = [
    # Core functionality
    "ErrorKind",
    "ErrorSeverity",
    "LimiterError",
    "argument_error",
    "config_error",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "internal_error",
    "io_error",
    "type_conversion_error",
    # Parsers
    "parse_bool",
    "parse_char",
    "parse_float",
    "parse_int",
    "parse_unsigned",
]
