"""
Unit tests for the error taxonomy and error handling helpers.
"""

import logging

import pytest

from templimiter.validation import (
    ErrorKind,
    ErrorSeverity,
    LimiterError,
    argument_error,
    config_error,
    handle_cli_error,
    handle_error,
    internal_error,
    io_error,
    type_conversion_error,
)


@pytest.mark.unit
class TestLimiterError:
    """Test cases for error construction and rendering."""

    def test_constructors_set_kind(self):
        """Test that every constructor tags the error with its kind."""
        assert config_error("bad").kind is ErrorKind.CONFIG
        assert io_error("/tmp/x", "read").kind is ErrorKind.IO
        assert internal_error("broken").kind is ErrorKind.INTERNAL
        assert type_conversion_error("x", "int", "nope").kind is ErrorKind.TYPE_CONVERSION
        assert argument_error("bad").kind is ErrorKind.ARGUMENT

    def test_config_error_names_field(self):
        """Test that configuration errors name the offending key and value."""
        rendered = str(config_error("must be >= 1", field_name="general.min_sleep_ms", value=0))
        assert rendered == "ConfigError: <general.min_sleep_ms> = 0: must be >= 1"

    def test_io_error_names_path_and_operation(self):
        """Test that IO errors name the path and the failed operation."""
        error = io_error("/sys/foo/temp", "read", "No such file or directory")
        assert error.path == "/sys/foo/temp"
        assert error.render() == "IOError: could not read /sys/foo/temp: No such file or directory"

    def test_type_conversion_error_rendering(self):
        """Test the rendering of conversion failures."""
        error = type_conversion_error("007", "int", "value does not round-trip")
        assert "'007'" in error.render()
        assert "to int" in error.render()

    def test_is_an_exception(self):
        """Test that LimiterError can be raised and caught normally."""
        with pytest.raises(LimiterError):
            raise internal_error("invariant violated")


@pytest.mark.unit
class TestErrorHandlers:
    """Test cases for the logging error handlers."""

    def test_handle_error_logs_and_reraises(self, caplog):
        """Test that handle_error logs under the given context and re-raises."""
        error = config_error("bad value")
        with caplog.at_level(logging.ERROR):
            with pytest.raises(LimiterError):
                handle_error(error, "testing", severity=ErrorSeverity.ERROR)
        assert "Error in testing" in caplog.text

    def test_handle_error_without_reraise(self, caplog):
        """Test that handle_error can log without raising."""
        with caplog.at_level(logging.WARNING):
            handle_error(ValueError("x"), "testing", severity="warning", reraise=False)
        assert "Error in testing: x" in caplog.text

    def test_handle_cli_error_fatal_limiter_error(self, caplog):
        """Test the fatal error header and exit status for LimiterError."""
        with caplog.at_level(logging.CRITICAL):
            with pytest.raises(SystemExit) as exc_info:
                handle_cli_error(internal_error("bad stat line"), "temperature control")
        assert exc_info.value.code == 1
        assert "templimiter has encountered a fatal error:" in caplog.text
        assert "InternalError: bad stat line" in caplog.text

    def test_handle_cli_error_unknown_exception(self, caplog):
        """Test that foreign exceptions are reported as unknown."""
        with caplog.at_level(logging.CRITICAL):
            with pytest.raises(SystemExit) as exc_info:
                handle_cli_error(RuntimeError("boom"), "startup", exit_code=3)
        assert exc_info.value.code == 3
        assert "templimiter has encountered an unknown exception:" in caplog.text
        assert "RuntimeError: boom" in caplog.text
