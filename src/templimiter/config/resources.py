"""
Startup discovery of the sysfs and procfs files the daemon operates on.

Everything here runs once, before the control loop starts, and turns the
glob patterns from ``[matchers]`` into concrete file collections and
frequency domains. Any inconsistency is reported as a CONFIG error since
it can only be fixed by adjusting the matchers or the enabled modes.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from ..models.config import AppConfig, MatcherConfig
from ..models.frequency import FrequencyDomain
from ..system.files import FileCollection, ScalarFile
from ..system.patterns import split_tokens
from ..system.procfs import ProcFilesystem
from ..validation.conversions import parse_int
from ..validation.exceptions import ErrorKind, LimiterError, config_error

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class LimiterResources:
    """
    The files and handles resolved from the configuration.

    ``ceiling_files`` and ``domains`` are only set when throttling is
    enabled; ``procfs`` only when SIGSTOP is enabled.
    """

    thermal_files: FileCollection[int]
    ceiling_files: Optional[FileCollection[int]] = None
    domains: Optional[List[FrequencyDomain]] = None
    procfs: Optional[ProcFilesystem] = None


def _collect(pattern: str, parser: Callable[[str], T], key: str) -> FileCollection[T]:
    try:
        return FileCollection.from_pattern(pattern, parser)
    except LimiterError as e:
        if e.kind is ErrorKind.ARGUMENT:
            raise config_error("no files match this pattern", field_name=key, value=pattern)
        raise


def _find(pattern: str, parser: Callable[[str], T]) -> Optional[FileCollection[T]]:
    try:
        return FileCollection.from_pattern(pattern, parser)
    except LimiterError as e:
        if e.kind is ErrorKind.ARGUMENT:
            return None
        raise


def _read_ladders(ladder_files: FileCollection[int]) -> List[List[int]]:
    ladders = []
    for scalar_file in ladder_files.files:
        frequencies = [
            parse_int(token)
            for line in scalar_file.read_lines()
            for token in split_tokens(line)
        ]
        if not frequencies:
            raise config_error(
                "scaling_available_frequencies file lists no frequencies",
                field_name="matchers.scaling_available_frequencies",
                value=str(scalar_file.path),
            )
        ladders.append(frequencies)
    return ladders


def _ladder_domains(matchers: MatcherConfig, ceiling_count: int) -> Optional[List[FrequencyDomain]]:
    ladder_files = _find(matchers.scaling_available_frequencies, parse_int)
    if ladder_files is None:
        logger.warning(
            "scaling_available_frequencies files not found; "
            "falling back to cpuinfo_min_freq and cpuinfo_max_freq"
        )
        return None

    if len(ladder_files) != ceiling_count:
        raise config_error(
            f"found {len(ladder_files)} scaling_available_frequencies files but "
            f"{ceiling_count} scaling_max_freq files",
            field_name="matchers.scaling_available_frequencies",
            value=matchers.scaling_available_frequencies,
        )
    return [
        FrequencyDomain.from_ladder(index, frequencies)
        for index, frequencies in enumerate(_read_ladders(ladder_files))
    ]


def _min_max_domains(matchers: MatcherConfig, ceiling_count: int) -> List[FrequencyDomain]:
    max_files = _collect(matchers.cpuinfo_max_freq, parse_int, "matchers.cpuinfo_max_freq")
    min_files = _collect(matchers.cpuinfo_min_freq, parse_int, "matchers.cpuinfo_min_freq")
    max_freqs = max_files.read()
    min_freqs = min_files.read()

    for key, pattern, values in (
        ("matchers.cpuinfo_max_freq", matchers.cpuinfo_max_freq, max_freqs),
        ("matchers.cpuinfo_min_freq", matchers.cpuinfo_min_freq, min_freqs),
    ):
        if len(values) != ceiling_count:
            raise config_error(
                f"found {len(values)} values but {ceiling_count} scaling_max_freq files",
                field_name=key,
                value=pattern,
            )

    return [
        FrequencyDomain(index=index, min_freq=low, max_freq=high)
        for index, (low, high) in enumerate(zip(min_freqs, max_freqs))
    ]


def _check_proc_stat(proc_root: Path) -> None:
    stat_file = ScalarFile(proc_root / "stat", str)
    try:
        lines = stat_file.read_lines()
    except LimiterError as e:
        raise config_error(
            f"process filesystem is not readable: {e}",
            field_name="matchers.proc_root",
            value=str(proc_root),
        )
    if not lines:
        raise config_error(
            f"{stat_file.path} is empty", field_name="matchers.proc_root", value=str(proc_root)
        )


def resolve_resources(config: AppConfig) -> LimiterResources:
    """
    Locate every file the enabled modes need and build the frequency domains.

    Args:
        config: Validated application configuration

    Returns:
        The resolved LimiterResources

    Raises:
        LimiterError: CONFIG if a required file set is missing or the file
            sets are inconsistent with each other
    """
    matchers = config.matchers
    resources = LimiterResources(
        thermal_files=_collect(matchers.thermal, parse_int, "matchers.thermal")
    )
    logger.info(f"Monitoring {len(resources.thermal_files)} thermal sensors")

    if config.throttle.enabled:
        ceiling_files = _collect(
            matchers.scaling_max_freq, parse_int, "matchers.scaling_max_freq"
        )
        domains = None
        if config.throttle.use_scaling_available:
            domains = _ladder_domains(matchers, len(ceiling_files))
        if domains is None:
            domains = _min_max_domains(matchers, len(ceiling_files))
        resources.ceiling_files = ceiling_files
        resources.domains = domains
        logger.info(
            f"Controlling {len(domains)} frequency domains "
            f"({'ladder' if domains[0].ladder else 'min/max'} mode)"
        )

    if config.sigstop.enabled:
        _check_proc_stat(matchers.proc_root)
        resources.procfs = ProcFilesystem(matchers.proc_root)

    return resources
