"""
CPU frequency ceiling actuation.

The actuator moves each domain's scaling_max_freq ceiling one ladder step
(or straight to the cpuinfo extreme when no ladder is available) and
remembers what it wrote so that changes made by other programs can be
noticed.
"""

import logging
from typing import List, Optional, Sequence

from ..models.frequency import FrequencyDomain
from ..system.files import FileCollection
from ..validation.exceptions import internal_error

logger = logging.getLogger(__name__)


class FrequencyActuator:
    """
    Lowers and raises the per-domain frequency ceilings.

    Args:
        ceiling_files: The writable scaling_max_freq files, one per domain.
        domains: Domain data, in the same order as ``ceiling_files``.
    """

    def __init__(self, ceiling_files: FileCollection[int], domains: Sequence[FrequencyDomain]):
        if len(ceiling_files) != len(domains):
            raise internal_error(
                f"{len(ceiling_files)} scaling_max_freq files but {len(domains)} frequency "
                "domains. This should have been prevented by the configuration checks."
            )
        self.ceiling_files = ceiling_files
        self.domains = list(domains)
        # Last value written per domain; None until this actuator writes it.
        self.expected_ceilings: List[Optional[int]] = [None] * len(self.domains)

    def read_ceilings(self) -> List[int]:
        """Read the live ceiling of every domain."""
        ceilings = self.ceiling_files.read()
        if len(ceilings) != len(self.domains):
            raise internal_error(
                f"Read {len(ceilings)} ceilings for {len(self.domains)} frequency domains."
            )
        return ceilings

    def is_throttled(self, ceilings: Optional[Sequence[int]] = None) -> bool:
        """True if any domain's ceiling is below its top frequency."""
        ceilings = self.read_ceilings() if ceilings is None else ceilings
        return any(cur < domain.top for cur, domain in zip(ceilings, self.domains))

    def has_room_to_throttle(self, ceilings: Optional[Sequence[int]] = None) -> bool:
        """True if any domain's ceiling is above its floor frequency."""
        ceilings = self.read_ceilings() if ceilings is None else ceilings
        return any(cur > domain.floor for cur, domain in zip(ceilings, self.domains))

    def throttle(self) -> bool:
        """
        Lower every domain one step.

        Returns:
            True if at least one ceiling was written.
        """
        ceilings = self.read_ceilings()
        if not self.has_room_to_throttle(ceilings):
            return False

        logger.info("Throttling CPU.")
        wrote = False
        for current, domain in zip(ceilings, self.domains):
            if domain.ladder:
                target = domain.next_lower(current)
            else:
                target = domain.min_freq if current > domain.min_freq else None
            if target is not None:
                self._write(domain, target)
                wrote = True
        return wrote

    def dethrottle(self) -> bool:
        """
        Raise every domain one step.

        Returns:
            True if at least one ceiling was written.
        """
        ceilings = self.read_ceilings()
        if not self.is_throttled(ceilings):
            return False

        logger.info("Dethrottling CPU.")
        wrote = False
        for current, domain in zip(ceilings, self.domains):
            if domain.ladder:
                target = domain.next_higher(current)
            else:
                target = domain.max_freq if current < domain.max_freq else None
            if target is not None:
                self._write(domain, target)
                wrote = True
        return wrote

    def detect_external_change(self, ceilings: Optional[Sequence[int]] = None) -> bool:
        """
        Compare live ceilings with the values this actuator last wrote.

        A mismatch means another program changed a ceiling. Expectations are
        cleared once a mismatch has been reported.
        """
        ceilings = self.read_ceilings() if ceilings is None else ceilings
        changed = [
            domain.index
            for cur, expected, domain in zip(ceilings, self.expected_ceilings, self.domains)
            if expected is not None and cur != expected
        ]
        if changed:
            logger.warning(
                f"Frequency ceilings of domains {changed} were changed outside templimiter."
            )
            self.expected_ceilings = [None] * len(self.domains)
            return True
        return False

    def _write(self, domain: FrequencyDomain, frequency: int) -> None:
        self.ceiling_files.overwrite(domain.index, frequency)
        self.expected_ceilings[domain.index] = frequency
        logger.debug(f"Set frequency ceiling of domain {domain.index} to {frequency}")
