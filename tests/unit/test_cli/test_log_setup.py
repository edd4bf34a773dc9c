"""
Unit tests for logging setup.
"""

import logging
import re

import pytest

from templimiter.cli.log_setup import TimestampedFormatter, configure_logging, write_banner
from templimiter.validation import ErrorKind, LimiterError

LINE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{4} \[(\w+)\] ")


@pytest.fixture
def restore_root_logger():
    """Put back whatever handlers pytest had installed on the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(message, level=logging.INFO):
    return logging.LogRecord("templimiter.test", level, __file__, 1, message, None, None)


@pytest.mark.unit
class TestTimestampedFormatter:
    """Test cases for the per-line timestamp formatter."""

    def test_single_line(self):
        """Test the timestamp and level prefix."""
        line = TimestampedFormatter().format(_record("Throttling CPU."))
        match = LINE_PREFIX.match(line)
        assert match is not None
        assert match.group(1) == "INFO"
        assert line.endswith("Throttling CPU.")

    def test_every_line_is_prefixed(self):
        """Test that multi-line messages are prefixed line by line."""
        message = "templimiter has encountered a fatal error:\nIOError: could not read x: gone"
        lines = TimestampedFormatter().format(_record(message, logging.CRITICAL)).splitlines()
        assert len(lines) == 2
        for line in lines:
            match = LINE_PREFIX.match(line)
            assert match is not None
            assert match.group(1) == "CRITICAL"


@pytest.mark.unit
class TestConfigureLogging:
    """Test cases for handler installation."""

    def test_file_handler_only(self, temp_dir, restore_root_logger):
        """Test that the log file is created along with missing directories."""
        log_file = temp_dir / "nested" / "templimiter.log"
        handlers = configure_logging(log_file, debug=False)

        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.FileHandler)
        assert logging.getLogger().level == logging.INFO

        logging.getLogger("templimiter.test").info("Dethrottling CPU.")
        handlers[0].flush()
        assert "[INFO] Dethrottling CPU." in log_file.read_text()

    def test_debug_adds_console(self, temp_dir, restore_root_logger):
        """Test that debug mode echoes to the console."""
        handlers = configure_logging(temp_dir / "templimiter.log", debug=True)
        assert len(handlers) == 2
        assert logging.getLogger().level == logging.DEBUG

    def test_unopenable_log_file(self, temp_dir, restore_root_logger):
        """Test that a log path that cannot be opened raises an IO error."""
        blocker = temp_dir / "file"
        blocker.write_text("")
        with pytest.raises(LimiterError) as exc_info:
            configure_logging(blocker / "templimiter.log")
        assert exc_info.value.kind is ErrorKind.IO


@pytest.mark.unit
class TestBanner:
    """Test cases for the startup banner."""

    def test_banner_is_boxed(self, caplog):
        """Test that the banner names the version inside a box."""
        with caplog.at_level(logging.INFO):
            write_banner("0.1.1", logging.getLogger("templimiter.test"))
        lines = caplog.records[-1].getMessage().splitlines()
        assert lines[1] == "|   Starting Templimiter 0.1.1   |"
        assert lines[0] == lines[2]
        assert len(lines[0]) == len(lines[1])
