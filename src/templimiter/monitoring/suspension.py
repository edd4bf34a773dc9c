"""
Process suspension (SIGSTOP) and resumption (SIGCONT).
"""

import logging
from typing import Dict, List

from ..models.process import ProcessRecord
from ..system.procfs import ProcFilesystem
from .process_table import ProcessTable

logger = logging.getLogger(__name__)


class SuspensionActuator:
    """
    Chooses which processes to stop or resume and signals them.

    Stopping ranks eligible processes by CPU usage and picks the heaviest
    (stepwise) or all of them (batch). Resuming picks the lightest stopped
    process (stepwise) or all of them (batch). The two directions are
    configured independently.
    """

    def __init__(
        self,
        table: ProcessTable,
        procfs: ProcFilesystem,
        stepwise_stop: bool = True,
        stepwise_cont: bool = False,
    ):
        self.table = table
        self.procfs = procfs
        self.stepwise_stop = stepwise_stop
        self.stepwise_cont = stepwise_cont
        # Processes this daemon has stopped and not yet resumed, keyed by pid.
        self._stopped: Dict[int, ProcessRecord] = {}

    @property
    def stopped(self) -> List[ProcessRecord]:
        return list(self._stopped.values())

    def has_stopped(self) -> bool:
        return bool(self._stopped)

    def candidates(self) -> List[ProcessRecord]:
        """Processes that may be sent SIGSTOP right now."""
        return [
            record
            for record in self.table.records()
            if record.exists and record.has_usage and not record.whitelisted and not record.stopped
        ]

    def stop(self) -> List[ProcessRecord]:
        """
        Refresh the process table and stop the selected candidate(s).

        In stepwise mode a candidate that cannot be signalled is passed over
        in favour of the next heaviest one.

        Returns:
            The records that were sent SIGSTOP.
        """
        self.table.refresh()
        self._forget_exited()

        candidates = sorted(self.candidates(), key=lambda r: r.usage, reverse=True)
        stopped = []
        for record in candidates:
            logger.info(f"Sending SIGSTOP to {record.label}")
            if not self.procfs.send_stop(record.pid):
                continue
            record.stopped = True
            self._stopped[record.pid] = record
            stopped.append(record)
            if self.stepwise_stop:
                break
        return stopped

    def resume(self) -> List[ProcessRecord]:
        """
        Refresh the process table and resume the selected stopped process(es).

        Does nothing, not even a refresh, when nothing is stopped.

        Returns:
            The records that were sent SIGCONT.
        """
        if not self._stopped:
            return []
        self.table.refresh()
        self._forget_exited()

        targets = self.stopped
        if not targets:
            return []
        if self.stepwise_cont:
            # Records without a usage figure (e.g. whitelisted since being stopped) go first.
            targets = [min(targets, key=lambda r: (r.has_usage, r.usage if r.has_usage else 0.0))]

        resumed = []
        for record in targets:
            logger.info(f"Sending SIGCONT to {record.label}")
            self.procfs.send_continue(record.pid)
            record.stopped = False
            del self._stopped[record.pid]
            resumed.append(record)
        return resumed

    def _forget_exited(self) -> None:
        exited = [pid for pid, record in self._stopped.items() if not record.exists]
        for pid in exited:
            logger.debug(f"Stopped process {self._stopped[pid].label} has exited")
            del self._stopped[pid]
