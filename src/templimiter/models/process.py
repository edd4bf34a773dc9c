"""
Process accounting data models.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..validation.exceptions import internal_error


@dataclass(frozen=True)
class ProcessStat:
    """
    The fields of one /proc/<pid>/stat line that the daemon uses.
    """

    pid: int
    comm: str
    state: str
    ppid: int
    pgrp: int
    session: int
    tty_nr: int
    tpgid: int
    flags: int
    utime: int
    stime: int
    cutime: int
    cstime: int
    nice: int

    @property
    def cpu_ticks(self) -> int:
        """User plus kernel time of the process and its reaped children."""
        return self.utime + self.stime + self.cutime + self.cstime


@dataclass
class ProcessRecord:
    """
    One observed OS process and its CPU-usage history.

    The usage fraction only exists once the process has been sampled twice
    while not whitelisted. Reading ``usage`` before that is a programming
    error and raises an INTERNAL ``LimiterError``.
    """

    pid: int
    comm: str = ""
    state: str = ""
    ppid: int = 0
    pgrp: int = 0
    session: int = 0
    tty_nr: int = 0
    tpgid: int = 0
    flags: int = 0
    nice: int = 0
    # Cumulative CPU ticks at the latest sample.
    cpu_ticks: int = 0
    # Cumulative process and system-wide ticks at the previous sample.
    prev_cpu_ticks: int = 0
    prev_system_ticks: int = 0
    exists: bool = False
    whitelisted: bool = False
    # Set while this daemon holds the process in SIGSTOP.
    stopped: bool = False
    _has_first_sample: bool = field(default=False, init=False, repr=False)
    _usage: Optional[float] = field(default=None, init=False, repr=False)

    @property
    def has_usage(self) -> bool:
        return self._usage is not None

    @property
    def usage(self) -> float:
        if self._usage is None:
            raise internal_error(
                f"Attempted to access cpu usage of pid {self.pid} before it was calculated."
            )
        return self._usage

    def apply_stat(self, stat: ProcessStat) -> None:
        """Copy the latest stat fields into the record and mark it as existing."""
        self.comm = stat.comm
        self.state = stat.state
        self.ppid = stat.ppid
        self.pgrp = stat.pgrp
        self.session = stat.session
        self.tty_nr = stat.tty_nr
        self.tpgid = stat.tpgid
        self.flags = stat.flags
        self.nice = stat.nice
        self.cpu_ticks = stat.cpu_ticks
        self.exists = True

    def record_sample(self, system_ticks: int) -> None:
        """
        Fold the latest cpu_ticks into the usage history.

        The first sample only stores the baseline; every later sample
        computes ``delta process ticks / delta system ticks``. A zero system
        delta (two samples within one clock tick) yields 0.0.
        """
        if not self._has_first_sample:
            self._has_first_sample = True
        else:
            system_delta = system_ticks - self.prev_system_ticks
            process_delta = self.cpu_ticks - self.prev_cpu_ticks
            self._usage = process_delta / system_delta if system_delta > 0 else 0.0
        self.prev_cpu_ticks = self.cpu_ticks
        self.prev_system_ticks = system_ticks

    def clear_history(self) -> None:
        """Forget all usage history, e.g. while the process is whitelisted."""
        self.prev_cpu_ticks = 0
        self.prev_system_ticks = 0
        self._has_first_sample = False
        self._usage = None

    @property
    def label(self) -> str:
        return f"pid {self.pid} ({self.comm})"
