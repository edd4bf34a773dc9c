"""
Configuration data models.

This module contains the validated, immutable settings loaded from the
TOML configuration file, including the process whitelist.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, FrozenSet, Tuple

from ..system.patterns import pattern_list_contains

if TYPE_CHECKING:
    from .process import ProcessRecord


DEFAULT_WHITELIST_COMM: Tuple[str, ...] = (
    "dnsmasq", "systemd", "(sd-pam)", "startx", "xinit", "Xorg",
    "dbus-daemon", "rtkit-daemon", "at-spi-bus-laun", "at-spi2-registr",
    "wpa_supplicant", "dhcpcd", "systemd-journal", "lvmetad",
    "systemd-udevd", "upowerd", "systemd-timesyn", "systemd-machine",
    "firewalld", "systemd-logind", "polkitd", "haveged",
    "systemd-resolve", "systemd-network",
)


@dataclass(frozen=True)
class IdSet:
    """
    A set of integer ids made of individual values and inclusive ranges.
    """

    values: FrozenSet[int] = frozenset()
    ranges: Tuple[Tuple[int, int], ...] = ()

    def __contains__(self, item: int) -> bool:
        if item in self.values:
            return True
        return any(low <= item <= high for low, high in self.ranges)

    def with_value(self, item: int) -> "IdSet":
        return IdSet(values=self.values | {item}, ranges=self.ranges)


@dataclass(frozen=True)
class Whitelist:
    """
    Criteria exempting a process from SIGSTOP.

    A process is whitelisted when it matches *any* criterion.
    """

    # Command-name patterns; '*' is the only wildcard.
    comm: Tuple[str, ...] = DEFAULT_WHITELIST_COMM
    pid: IdSet = field(default_factory=IdSet)
    state: FrozenSet[str] = frozenset()
    ppid: IdSet = field(default_factory=IdSet)
    pgrp: IdSet = field(default_factory=IdSet)
    session: IdSet = field(default_factory=IdSet)
    tty_nr: IdSet = field(default_factory=IdSet)
    tpgid: IdSet = field(default_factory=IdSet)
    flags: IdSet = field(default_factory=IdSet)
    # Processes with a nice value strictly below this are whitelisted.
    max_nice: int = -21

    def matches(self, record: "ProcessRecord") -> bool:
        # Strict comparison on nice is intentional, see DESIGN.md.
        return (
            record.nice < self.max_nice
            or record.pid in self.pid
            or record.state in self.state
            or record.ppid in self.ppid
            or record.pgrp in self.pgrp
            or record.session in self.session
            or record.tty_nr in self.tty_nr
            or record.tpgid in self.tpgid
            or record.flags in self.flags
            or pattern_list_contains(self.comm, record.comm)
        )


@dataclass(frozen=True)
class MatcherConfig:
    """
    Glob patterns used to locate sensor and frequency files, loaded from `[matchers]`.
    """

    thermal: str = "/sys/devices/virtual/thermal/thermal_zone*/temp"
    scaling_max_freq: str = "/sys/devices/system/cpu/cpu*/cpufreq/scaling_max_freq"
    cpuinfo_max_freq: str = "/sys/devices/system/cpu/cpu*/cpufreq/cpuinfo_max_freq"
    cpuinfo_min_freq: str = "/sys/devices/system/cpu/cpu*/cpufreq/cpuinfo_min_freq"
    scaling_available_frequencies: str = (
        "/sys/devices/system/cpu/cpu*/cpufreq/scaling_available_frequencies"
    )
    # Root of the process filesystem.
    proc_root: Path = Path("/proc")


@dataclass(frozen=True)
class GeneralConfig:
    """
    Settings from `[general]`.
    """

    log_file_path: Path = Path("/var/log/templimiter.log")
    # Time to wait between temperature checks, in milliseconds.
    min_sleep_ms: int = 500


@dataclass(frozen=True)
class ThrottleConfig:
    """
    CPU frequency throttling settings from `[throttle]`. Temperatures are in millidegrees.
    """

    enabled: bool = True
    # Step through scaling_available_frequencies instead of jumping to cpuinfo min/max.
    use_scaling_available: bool = False
    temp_throttle: int = 66000
    temp_dethrottle: int = 60000
    # Iterations to hold off throttling after a ceiling was changed by someone else; 0 disables.
    external_change_cooldown: int = 0


@dataclass(frozen=True)
class StopConfig:
    """
    Process suspension settings from `[sigstop]`. Temperatures are in millidegrees.
    """

    enabled: bool = False
    stepwise_stop: bool = True
    stepwise_cont: bool = False
    temp_stop: int = 70000
    temp_cont: int = 66000


@dataclass(frozen=True)
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    general: GeneralConfig
    throttle: ThrottleConfig
    sigstop: StopConfig
    whitelist: Whitelist
    matchers: MatcherConfig
