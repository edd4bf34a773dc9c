"""
The temperature control loop.

Each iteration reads the hottest thermal sensor, compares it against the
configured thresholds and hands off to the frequency and suspension
actuators. Both concerns are evaluated independently; within one
iteration throttling is attempted before stopping and dethrottling before
resuming.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..models.config import AppConfig
from ..system.files import FileCollection
from ..validation.exceptions import internal_error
from .frequency import FrequencyActuator
from .suspension import SuspensionActuator

logger = logging.getLogger(__name__)


@dataclass
class IterationOutcome:
    """
    What one pass of the control loop observed and did.
    """

    # Hottest sensor reading, in millidegrees.
    temperature: int
    throttled: bool = False
    dethrottled: bool = False
    stopped: List[int] = field(default_factory=list)
    resumed: List[int] = field(default_factory=list)
    # Throttling was due but held back by the external-change cooldown.
    throttle_suppressed: bool = False


class ControlLoop:
    """
    Closed-loop thermal governor.

    Args:
        config: Validated application configuration.
        thermal_files: Sensor files reporting millidegrees, one value each.
        frequency: Frequency actuator; required when throttling is enabled.
        suspension: Suspension actuator; required when SIGSTOP is enabled.
        sleep: Called with the inter-iteration delay in seconds.
    """

    def __init__(
        self,
        config: AppConfig,
        thermal_files: FileCollection[int],
        frequency: Optional[FrequencyActuator] = None,
        suspension: Optional[SuspensionActuator] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not config.throttle.enabled and not config.sigstop.enabled:
            raise internal_error(
                "Neither throttling nor SIGSTOP operations are enabled. This should "
                "have been prevented by the configuration checks."
            )
        if config.throttle.enabled and frequency is None:
            raise internal_error("Throttling is enabled but no frequency actuator was provided.")
        if config.sigstop.enabled and suspension is None:
            raise internal_error("SIGSTOP is enabled but no suspension actuator was provided.")

        self.config = config
        self.thermal_files = thermal_files
        self.frequency = frequency if config.throttle.enabled else None
        self.suspension = suspension if config.sigstop.enabled else None
        self._sleep = sleep
        self._cooldown_remaining = 0
        self.iterations = 0

    def read_temperature(self) -> int:
        """Return the hottest reading across all thermal sensors."""
        return self.thermal_files.max_value()

    def run_once(self) -> IterationOutcome:
        """Run a single sense-decide-act pass without sleeping."""
        temperature = self.read_temperature()
        outcome = IterationOutcome(temperature=temperature)
        throttle_cfg = self.config.throttle
        stop_cfg = self.config.sigstop

        throttle_allowed = self._throttle_allowed() if self.frequency else False

        if self.frequency and temperature > throttle_cfg.temp_throttle:
            if throttle_allowed:
                outcome.throttled = self.frequency.throttle()
            else:
                outcome.throttle_suppressed = True
        if self.suspension and temperature > stop_cfg.temp_stop:
            outcome.stopped = [record.pid for record in self.suspension.stop()]

        if self.frequency and temperature < throttle_cfg.temp_dethrottle:
            outcome.dethrottled = self.frequency.dethrottle()
        if self.suspension and temperature < stop_cfg.temp_cont and self.suspension.has_stopped():
            outcome.resumed = [record.pid for record in self.suspension.resume()]

        self.iterations += 1
        return outcome

    def run(self, max_iterations: Optional[int] = None) -> None:
        """
        Loop until an error propagates (or ``max_iterations`` passes have run).

        The only blocking point is the sleep between iterations.
        """
        delay = self.config.general.min_sleep_ms / 1000.0
        logger.debug(
            f"Control loop started: throttle={self.frequency is not None}, "
            f"sigstop={self.suspension is not None}, interval={delay}s"
        )
        while max_iterations is None or self.iterations < max_iterations:
            self.run_once()
            self._sleep(delay)

    def _throttle_allowed(self) -> bool:
        cooldown = self.config.throttle.external_change_cooldown
        if cooldown <= 0:
            return True
        if self._cooldown_remaining > 0:
            self._cooldown_remaining -= 1
            return False
        if self.frequency.detect_external_change():
            logger.warning(f"Holding off throttling for {cooldown} iterations.")
            self._cooldown_remaining = cooldown - 1
            return False
        return True
