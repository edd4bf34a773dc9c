"""
Process filesystem access and signal delivery.

This module reads the per-process ``stat`` records and the aggregate CPU
counters from ``/proc`` (or another root, for testing), and delivers
SIGSTOP/SIGCONT through psutil.
"""

import logging
import signal
from pathlib import Path
from typing import List, Union

import psutil

from ..models.process import ProcessStat
from ..validation.conversions import parse_char, parse_int, parse_unsigned
from ..validation.exceptions import internal_error, io_error

logger = logging.getLogger(__name__)

# Number of fields expected after the "(comm)" field of a stat line, up to and including nice.
_STAT_FIELDS_AFTER_COMM = 17


def parse_stat_line(pid: int, text: str) -> ProcessStat:
    """Parse the contents of a /proc/<pid>/stat file.

    The command name is taken from between the first ``(`` and the last
    ``)`` so names containing spaces or parentheses parse correctly.

    Args:
        pid: The pid the stat file belongs to (used in error messages).
        text: The full file contents.

    Returns:
        The parsed ProcessStat.

    Raises:
        LimiterError: INTERNAL if the record is not exactly one well-formed
            newline-terminated line, TYPE_CONVERSION if a numeric field does
            not parse.
    """
    # Only '\n' separates records; comm may contain '\r', '\x0c' and friends.
    lines = text.rstrip("\n").split("\n")
    if len(lines) != 1:
        raise internal_error(
            f"/proc/{pid}/stat contains {len(lines)} lines; expected exactly one."
        )
    line = lines[0]
    open_idx = line.find("(")
    close_idx = line.rfind(")")
    if open_idx < 0 or close_idx < open_idx:
        raise internal_error(f"/proc/{pid}/stat has no parenthesised command name.")

    comm = line[open_idx + 1:close_idx]
    fields = line[close_idx + 1:].split()
    if len(fields) < _STAT_FIELDS_AFTER_COMM:
        raise internal_error(
            f"/proc/{pid}/stat has {len(fields)} fields after the command name; "
            f"expected at least {_STAT_FIELDS_AFTER_COMM}."
        )

    return ProcessStat(
        pid=pid,
        comm=comm,
        state=parse_char(fields[0]),
        ppid=parse_int(fields[1]),
        pgrp=parse_int(fields[2]),
        session=parse_int(fields[3]),
        tty_nr=parse_int(fields[4]),
        tpgid=parse_int(fields[5]),
        flags=parse_unsigned(fields[6]),
        utime=parse_unsigned(fields[11]),
        stime=parse_unsigned(fields[12]),
        cutime=parse_unsigned(fields[13]),
        cstime=parse_unsigned(fields[14]),
        nice=parse_int(fields[16]),
    )


class ProcFilesystem:
    """
    Reader for a proc filesystem rooted at ``root``.
    """

    def __init__(self, root: Union[str, Path] = "/proc"):
        self.root = Path(root)

    def pids(self) -> List[int]:
        """
        List the pids of all currently running processes.

        Raises:
            LimiterError: IO if the root directory cannot be listed
        """
        try:
            names = [entry.name for entry in self.root.iterdir()]
        except OSError as e:
            raise io_error(self.root, "list", str(e))
        return sorted(int(name) for name in names if name.isdigit())

    def read_stat(self, pid: int) -> ProcessStat:
        """
        Read and parse the stat record of one process.

        Raises:
            LimiterError: IO if the process has gone away (the stat file
                cannot be read), INTERNAL/TYPE_CONVERSION if it is malformed
        """
        path = self.root / str(pid) / "stat"
        try:
            with open(path, encoding="utf-8", errors="replace", newline="") as f:
                text = f.read()
        except OSError as e:
            raise io_error(path, "read", str(e))
        return parse_stat_line(pid, text)

    def system_cpu_ticks(self) -> int:
        """
        Sum the user, nice, system and idle ticks of the aggregate ``cpu`` line.

        Raises:
            LimiterError: IO if the file cannot be read, INTERNAL if it has no cpu line
        """
        path = self.root / "stat"
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise io_error(path, "read", str(e))
        for line in lines:
            tokens = line.split()
            if tokens and tokens[0] == "cpu":
                if len(tokens) < 5:
                    raise internal_error(f"{path} cpu line has too few counters: {line!r}")
                return sum(parse_unsigned(token) for token in tokens[1:5])
        raise internal_error(f"{path} does not contain an aggregate cpu line.")

    def send_stop(self, pid: int) -> bool:
        return self._send_signal(pid, signal.SIGSTOP)

    def send_continue(self, pid: int) -> bool:
        return self._send_signal(pid, signal.SIGCONT)

    def _send_signal(self, pid: int, sig: signal.Signals) -> bool:
        """
        Deliver ``sig`` to ``pid`` without waiting for any acknowledgement.

        Returns:
            True if the signal was handed to the kernel, False if the target
            no longer exists or may not be signalled.
        """
        try:
            psutil.Process(pid).send_signal(sig)
            return True
        except psutil.NoSuchProcess:
            logger.debug(f"Process {pid} exited before {sig.name} could be delivered")
        except psutil.AccessDenied:
            logger.warning(f"Permission denied sending {sig.name} to process {pid}")
        return False
