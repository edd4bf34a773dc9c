"""
CPU frequency domain model.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class FrequencyDomain:
    """
    One writable scaling_max_freq ceiling and the frequencies it may take.

    When ``ladder`` is set the domain steps through those discrete values
    (ascending); otherwise it jumps straight between ``min_freq`` and
    ``max_freq``. Frequencies are in kHz, as exposed by cpufreq.
    """

    # Position of the ceiling file in the ceiling file collection.
    index: int
    min_freq: int
    max_freq: int
    ladder: Optional[Tuple[int, ...]] = None

    @property
    def floor(self) -> int:
        return self.ladder[0] if self.ladder else self.min_freq

    @property
    def top(self) -> int:
        return self.ladder[-1] if self.ladder else self.max_freq

    def next_lower(self, current: int) -> Optional[int]:
        """Greatest ladder value strictly below ``current``, or None at the floor."""
        lower = [freq for freq in self.ladder or () if freq < current]
        return max(lower) if lower else None

    def next_higher(self, current: int) -> Optional[int]:
        """Least ladder value strictly above ``current``, or None at the top."""
        higher = [freq for freq in self.ladder or () if freq > current]
        return min(higher) if higher else None

    @classmethod
    def from_ladder(cls, index: int, frequencies) -> "FrequencyDomain":
        ladder = tuple(sorted(set(frequencies)))
        return cls(index=index, min_freq=ladder[0], max_freq=ladder[-1], ladder=ladder)
