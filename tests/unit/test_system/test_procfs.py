"""
Unit tests for process filesystem parsing and signal delivery.
"""

import signal
from unittest.mock import Mock, patch

import psutil
import pytest

from templimiter.system import ProcFilesystem, parse_stat_line
from templimiter.validation import ErrorKind, LimiterError

STAT_LINE = (
    "1234 (my (weird) prog) R 1 1234 1234 34817 1234 4194304 "
    "120 0 0 0 250 50 7 3 20 -5 1 0 5000 1000000 200\n"
)


@pytest.mark.unit
class TestParseStatLine:
    """Test cases for stat line parsing."""

    def test_fields(self):
        """Test that every used field lands in the right place."""
        stat = parse_stat_line(1234, STAT_LINE)
        assert stat.pid == 1234
        assert stat.comm == "my (weird) prog"
        assert stat.state == "R"
        assert stat.ppid == 1
        assert stat.pgrp == 1234
        assert stat.session == 1234
        assert stat.tty_nr == 34817
        assert stat.tpgid == 1234
        assert stat.flags == 4194304
        assert stat.utime == 250
        assert stat.stime == 50
        assert stat.cutime == 7
        assert stat.cstime == 3
        assert stat.nice == -5
        assert stat.cpu_ticks == 310

    def test_comm_with_spaces(self):
        """Test that spaces in the command name do not shift fields."""
        stat = parse_stat_line(5, STAT_LINE.replace("my (weird) prog", "Web Content"))
        assert stat.comm == "Web Content"
        assert stat.state == "R"

    @pytest.mark.parametrize("comm", ["a\rb", "a\x0cb", "a\x0bb", "a\x1cb", "a\x85b", "a b"])
    def test_comm_with_line_break_like_characters(self, comm):
        """Test that only '\\n' ends a record; other separators stay in the name."""
        stat = parse_stat_line(1234, STAT_LINE.replace("my (weird) prog", comm))
        assert stat.comm == comm
        assert stat.cpu_ticks == 310

    def test_multiple_lines_rejected(self):
        """Test that a stat record must be exactly one line."""
        with pytest.raises(LimiterError) as exc_info:
            parse_stat_line(1234, STAT_LINE + STAT_LINE)
        assert exc_info.value.kind is ErrorKind.INTERNAL

    def test_short_line_rejected(self):
        """Test that a truncated record is rejected."""
        with pytest.raises(LimiterError) as exc_info:
            parse_stat_line(1, "1 (init) S 0 1 1 0 -1\n")
        assert exc_info.value.kind is ErrorKind.INTERNAL

    def test_bad_number_rejected(self):
        """Test that non-numeric fields raise a conversion error."""
        with pytest.raises(LimiterError) as exc_info:
            parse_stat_line(1234, STAT_LINE.replace(" 250 ", " x "))
        assert exc_info.value.kind is ErrorKind.TYPE_CONVERSION


@pytest.mark.unit
class TestProcFilesystem:
    """Test cases for reading a fake /proc."""

    def test_pids_are_numeric_and_sorted(self, fake_proc):
        """Test that only numeric entries are listed."""
        fake_proc.add_process(30)
        fake_proc.add_process(4)
        (fake_proc.root / "self").mkdir()
        assert ProcFilesystem(fake_proc.root).pids() == [4, 30]

    def test_pids_missing_root(self, temp_dir):
        """Test that an unlistable root raises an IO error."""
        with pytest.raises(LimiterError) as exc_info:
            ProcFilesystem(temp_dir / "absent").pids()
        assert exc_info.value.kind is ErrorKind.IO

    def test_read_stat(self, fake_proc):
        """Test reading one process record."""
        fake_proc.add_process(42, comm="cc1plus", ticks=900, nice=5)
        stat = ProcFilesystem(fake_proc.root).read_stat(42)
        assert stat.comm == "cc1plus"
        assert stat.cpu_ticks == 900
        assert stat.nice == 5

    @pytest.mark.parametrize("comm", ["a\rb", "a\x0cb", "a\x0bb", "a\x1cb"])
    def test_read_stat_keeps_carriage_returns(self, fake_proc, comm):
        """Test that a name set through prctl with odd characters is read verbatim."""
        fake_proc.add_process(200, comm=comm, ticks=40)
        stat = ProcFilesystem(fake_proc.root).read_stat(200)
        assert stat.comm == comm
        assert stat.cpu_ticks == 40

    def test_read_stat_of_vanished_process(self, fake_proc):
        """Test that a vanished process surfaces as an IO error."""
        with pytest.raises(LimiterError) as exc_info:
            ProcFilesystem(fake_proc.root).read_stat(77)
        assert exc_info.value.kind is ErrorKind.IO

    def test_system_cpu_ticks(self, fake_proc):
        """Test that user, nice, system and idle ticks are summed."""
        (fake_proc.root / "stat").write_text("cpu  10 20 30 40 50 60\ncpu0 1 2 3 4 5 6\n")
        assert ProcFilesystem(fake_proc.root).system_cpu_ticks() == 100

    def test_system_cpu_ticks_without_cpu_line(self, fake_proc):
        """Test that a missing aggregate line is an internal error."""
        (fake_proc.root / "stat").write_text("intr 1\n")
        with pytest.raises(LimiterError) as exc_info:
            ProcFilesystem(fake_proc.root).system_cpu_ticks()
        assert exc_info.value.kind is ErrorKind.INTERNAL


@pytest.mark.unit
class TestSignalDelivery:
    """Test cases for SIGSTOP/SIGCONT delivery through psutil."""

    @patch("templimiter.system.procfs.psutil.Process")
    def test_send_stop(self, mock_process, fake_proc):
        """Test that SIGSTOP is sent to the right pid."""
        assert ProcFilesystem(fake_proc.root).send_stop(42) is True
        mock_process.assert_called_once_with(42)
        mock_process.return_value.send_signal.assert_called_once_with(signal.SIGSTOP)

    @patch("templimiter.system.procfs.psutil.Process")
    def test_send_continue(self, mock_process, fake_proc):
        """Test that SIGCONT is sent to the right pid."""
        assert ProcFilesystem(fake_proc.root).send_continue(42) is True
        mock_process.return_value.send_signal.assert_called_once_with(signal.SIGCONT)

    @patch("templimiter.system.procfs.psutil.Process")
    def test_vanished_process(self, mock_process, fake_proc):
        """Test that a process that already exited is reported as not signalled."""
        mock_process.side_effect = psutil.NoSuchProcess(42)
        assert ProcFilesystem(fake_proc.root).send_stop(42) is False

    @patch("templimiter.system.procfs.psutil.Process")
    def test_access_denied(self, mock_process, fake_proc, caplog):
        """Test that permission failures are logged and reported."""
        mock_process.return_value = Mock()
        mock_process.return_value.send_signal.side_effect = psutil.AccessDenied(42)
        assert ProcFilesystem(fake_proc.root).send_stop(42) is False
        assert "Permission denied sending SIGSTOP to process 42" in caplog.text
