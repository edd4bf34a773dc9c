"""
Per-process CPU accounting.

The ``ProcessTable`` tracks every live process (other than whitelisted
ones, which are tracked but never accumulate history) and estimates each
process's share of total CPU time between two consecutive refreshes.
"""

import logging
from typing import Dict, List, Optional

from ..models.config import Whitelist
from ..models.process import ProcessRecord
from ..system.procfs import ProcFilesystem
from ..validation.exceptions import ErrorKind, LimiterError

logger = logging.getLogger(__name__)


class ProcessTable:
    """
    The set of observed processes, keyed by pid.

    Records are long-lived: the same ``ProcessRecord`` object represents a
    pid for as long as its stat file keeps existing, so references held
    elsewhere (e.g. by the suspension actuator) see every update.
    """

    def __init__(self, procfs: ProcFilesystem, whitelist: Whitelist):
        self.procfs = procfs
        self.whitelist = whitelist
        self._records: Dict[int, ProcessRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, pid: int) -> bool:
        return pid in self._records

    def get(self, pid: int) -> Optional[ProcessRecord]:
        return self._records.get(pid)

    def records(self) -> List[ProcessRecord]:
        return list(self._records.values())

    def refresh(self) -> None:
        """
        Re-scan the process list and take one CPU sample of every process.

        New pids get a record, every record is re-read and re-evaluated
        against the whitelist, and records whose stat file has disappeared
        are dropped.

        Raises:
            LimiterError: for anything other than a single process vanishing
        """
        for pid in self.procfs.pids():
            if pid not in self._records:
                self._records[pid] = ProcessRecord(pid=pid)

        system_ticks = self.procfs.system_cpu_ticks()
        for record in self._records.values():
            self._sample(record, system_ticks)

        gone = [pid for pid, record in self._records.items() if not record.exists]
        for pid in gone:
            del self._records[pid]
        if gone:
            logger.debug(f"Dropped {len(gone)} exited processes: {gone}")

    def _sample(self, record: ProcessRecord, system_ticks: int) -> None:
        try:
            stat = self.procfs.read_stat(record.pid)
        except LimiterError as e:
            if e.kind is ErrorKind.IO:
                record.exists = False
                return
            raise

        record.apply_stat(stat)
        record.whitelisted = self.whitelist.matches(record)
        if record.whitelisted:
            record.clear_history()
        else:
            record.record_sample(system_ticks)
