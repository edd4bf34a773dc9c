"""
Data models for the templimiter daemon.

Configuration Models:
- Validated settings for throttling, suspension, logging and file matchers
- The process whitelist and its id sets

Runtime Models:
- Per-process accounting records and parsed stat lines
- CPU frequency domains (min/max or discrete ladder)
"""

# Configuration models
from .config import (
    AppConfig,
    GeneralConfig,
    IdSet,
    MatcherConfig,
    StopConfig,
    ThrottleConfig,
    Whitelist,
)

# Runtime models
from .frequency import FrequencyDomain
from .process import ProcessRecord, ProcessStat

__all__ = [
    # Configuration
    "AppConfig",
    "GeneralConfig",
    "IdSet",
    "MatcherConfig",
    "StopConfig",
    "ThrottleConfig",
    "Whitelist",
    # Runtime
    "FrequencyDomain",
    "ProcessRecord",
    "ProcessStat",
]
