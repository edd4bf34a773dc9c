"""
Temperature monitoring and response.

This package holds the daemon's core: the control loop, the frequency and
suspension actuators it drives, and the per-process CPU accounting the
suspension actuator ranks processes by.
"""

from .control_loop import ControlLoop, IterationOutcome
from .frequency import FrequencyActuator
from .process_table import ProcessTable
from .suspension import SuspensionActuator

__all__ = [
    "ControlLoop",
    "FrequencyActuator",
    "IterationOutcome",
    "ProcessTable",
    "SuspensionActuator",
]
