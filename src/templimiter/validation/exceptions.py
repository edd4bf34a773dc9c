"""
Error taxonomy and error handling helpers.

Every failure raised by templimiter is a ``LimiterError`` tagged with an
``ErrorKind``. Callers decide how to react by switching on ``error.kind``
rather than on the exception class, and each kind knows how to render
itself for the log.
"""

import logging
import sys
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(Enum):
    """The kinds of failure the daemon distinguishes between."""
    CONFIG = "ConfigError"
    IO = "IOError"
    INTERNAL = "InternalError"
    TYPE_CONVERSION = "TypeConversionError"
    ARGUMENT = "ArgumentError"


class LimiterError(Exception):
    """
    The single exception type raised by templimiter.

    Structured fields are optional and only the ones meaningful for a kind
    are filled in (e.g. ``path`` and ``operation`` for IO errors,
    ``field_name`` and ``value`` for configuration errors).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        field_name: Optional[str] = None,
        value: Any = None,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        expected_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field_name = field_name
        self.value = value
        self.path = path
        self.operation = operation
        self.expected_type = expected_type

    def render(self) -> str:
        """Format the error for the log using the formatter for its kind."""
        return _FORMATTERS[self.kind](self)

    def __str__(self) -> str:
        return self.render()


def _format_config(error: LimiterError) -> str:
    if error.field_name is None:
        return f"ConfigError: {error.message}"
    return f"ConfigError: <{error.field_name}> = {error.value!r}: {error.message}"


def _format_io(error: LimiterError) -> str:
    operation = error.operation or "access"
    return f"IOError: could not {operation} {error.path}: {error.message}"


def _format_internal(error: LimiterError) -> str:
    return f"InternalError: {error.message}"


def _format_type_conversion(error: LimiterError) -> str:
    return (
        f"TypeConversionError: cannot convert {error.value!r} "
        f"to {error.expected_type}: {error.message}"
    )


def _format_argument(error: LimiterError) -> str:
    if error.field_name is None:
        return f"ArgumentError: {error.message}"
    return f"ArgumentError: argument '{error.field_name}' = {error.value!r}: {error.message}"


_FORMATTERS: Dict[ErrorKind, Callable[[LimiterError], str]] = {
    ErrorKind.CONFIG: _format_config,
    ErrorKind.IO: _format_io,
    ErrorKind.INTERNAL: _format_internal,
    ErrorKind.TYPE_CONVERSION: _format_type_conversion,
    ErrorKind.ARGUMENT: _format_argument,
}


# Constructors, one per kind

def config_error(message: str, field_name: Optional[str] = None, value: Any = None) -> LimiterError:
    """Invalid or contradictory settings."""
    return LimiterError(ErrorKind.CONFIG, message, field_name=field_name, value=value)


def io_error(path: Union[str, Any], operation: str, message: str = "") -> LimiterError:
    """A read or write against a file failed."""
    return LimiterError(
        ErrorKind.IO, message or "operation failed", path=str(path), operation=operation
    )


def internal_error(message: str) -> LimiterError:
    """An invariant the daemon maintains itself has been violated."""
    return LimiterError(ErrorKind.INTERNAL, message)


def type_conversion_error(value: Any, expected_type: str, message: str) -> LimiterError:
    """A value read as text could not be parsed into its scalar type."""
    return LimiterError(
        ErrorKind.TYPE_CONVERSION, message, value=value, expected_type=expected_type
    )


def argument_error(message: str, field_name: Optional[str] = None, value: Any = None) -> LimiterError:
    """A helper API was called with an argument it cannot accept."""
    return LimiterError(ErrorKind.ARGUMENT, message, field_name=field_name, value=value)


_LOG_LEVELS: Dict[ErrorSeverity, int] = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log ``error`` under ``context`` and, by default, raise it again.

    Args:
        error: The exception being handled
        context: What was being done when it happened
        severity: How loudly to log it; strings are matched case-insensitively
        reraise: Raise ``error`` after logging
        logger: Logger to write to instead of this module's
    """
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())
    level = _LOG_LEVELS[severity]
    with_traceback = severity in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)

    (logger or globals()['logger']).log(
        level, f"Error in {context}: {error}", exc_info=error if with_traceback else None
    )

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Log a configuration failure; see handle_error."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(
    error: Exception,
    context: str,
    exit_code: int = 1,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log a fatal error and terminate the process.

    ``LimiterError`` instances are written under a fatal-error header with
    their rendered form; anything else is reported as an unknown exception
    together with its traceback.
    """
    effective_logger = logger or globals()['logger']

    if isinstance(error, LimiterError):
        effective_logger.critical(
            f"templimiter has encountered a fatal error:\n{error.render()}\n(while {context})"
        )
    else:
        effective_logger.critical(
            f"templimiter has encountered an unknown exception:\n"
            f"{type(error).__name__}: {error}\n(while {context})",
            exc_info=error,
        )

    sys.exit(exit_code)
