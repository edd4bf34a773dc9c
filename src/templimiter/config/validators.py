"""
Configuration validation utilities.

This module turns the raw TOML tables into the immutable configuration
models, applying defaults for missing keys and enforcing the cross-field
rules between thresholds.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import (
    AppConfig,
    GeneralConfig,
    MatcherConfig,
    StopConfig,
    ThrottleConfig,
    Whitelist,
)
from ..validation.exceptions import config_error
from ..validation.validators import (
    validate_bool,
    validate_char_set,
    validate_id_set,
    validate_pattern_list,
    validate_positive_integer,
    validate_string,
    validate_temperature,
)

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ("general", "throttle", "sigstop", "whitelist", "matchers")

_ID_SET_KEYS = ("pid", "ppid", "pgrp", "session", "tty_nr", "tpgid", "flags")


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        raise config_error("must be a table", field_name=name, value=section)
    return section


def _warn_unknown_keys(section: Dict[str, Any], name: str, known) -> None:
    for key in section:
        if key not in known:
            logger.warning(f"Ignoring unknown configuration key: {name}.{key}")


def validate_general_config(general: Dict[str, Any]) -> GeneralConfig:
    """
    Validate the `[general]` table.

    Raises:
        LimiterError: CONFIG if validation fails
    """
    defaults = GeneralConfig()
    _warn_unknown_keys(general, "general", ("log_file_path", "min_sleep_ms"))

    log_file_path = validate_string(
        general.get("log_file_path", str(defaults.log_file_path)),
        field_name="general.log_file_path",
    )
    min_sleep_ms = validate_positive_integer(
        general.get("min_sleep_ms", defaults.min_sleep_ms),
        min_value=1,
        field_name="general.min_sleep_ms",
    )
    return GeneralConfig(log_file_path=Path(log_file_path), min_sleep_ms=min_sleep_ms)


def validate_throttle_config(throttle: Dict[str, Any]) -> ThrottleConfig:
    """
    Validate the `[throttle]` table.

    Threshold ordering is only checked when throttling is enabled.

    Raises:
        LimiterError: CONFIG if validation fails
    """
    defaults = ThrottleConfig()
    _warn_unknown_keys(
        throttle,
        "throttle",
        (
            "enabled",
            "use_scaling_available",
            "temp_throttle",
            "temp_dethrottle",
            "external_change_cooldown",
        ),
    )

    config = ThrottleConfig(
        enabled=validate_bool(throttle.get("enabled", defaults.enabled), "throttle.enabled"),
        use_scaling_available=validate_bool(
            throttle.get("use_scaling_available", defaults.use_scaling_available),
            "throttle.use_scaling_available",
        ),
        temp_throttle=validate_temperature(
            throttle.get("temp_throttle", defaults.temp_throttle), "throttle.temp_throttle"
        ),
        temp_dethrottle=validate_temperature(
            throttle.get("temp_dethrottle", defaults.temp_dethrottle), "throttle.temp_dethrottle"
        ),
        external_change_cooldown=validate_positive_integer(
            throttle.get("external_change_cooldown", defaults.external_change_cooldown),
            min_value=0,
            field_name="throttle.external_change_cooldown",
        ),
    )

    if config.enabled and config.temp_throttle < config.temp_dethrottle:
        raise config_error(
            f"the throttle temperature ({config.temp_throttle}) must not be lower than "
            f"the dethrottle temperature ({config.temp_dethrottle})",
            field_name="throttle.temp_throttle",
            value=config.temp_throttle,
        )
    return config


def validate_stop_config(sigstop: Dict[str, Any]) -> StopConfig:
    """
    Validate the `[sigstop]` table.

    Threshold ordering is only checked when SIGSTOP is enabled.

    Raises:
        LimiterError: CONFIG if validation fails
    """
    defaults = StopConfig()
    _warn_unknown_keys(
        sigstop,
        "sigstop",
        ("enabled", "stepwise_stop", "stepwise_cont", "temp_stop", "temp_cont"),
    )

    config = StopConfig(
        enabled=validate_bool(sigstop.get("enabled", defaults.enabled), "sigstop.enabled"),
        stepwise_stop=validate_bool(
            sigstop.get("stepwise_stop", defaults.stepwise_stop), "sigstop.stepwise_stop"
        ),
        stepwise_cont=validate_bool(
            sigstop.get("stepwise_cont", defaults.stepwise_cont), "sigstop.stepwise_cont"
        ),
        temp_stop=validate_temperature(
            sigstop.get("temp_stop", defaults.temp_stop), "sigstop.temp_stop"
        ),
        temp_cont=validate_temperature(
            sigstop.get("temp_cont", defaults.temp_cont), "sigstop.temp_cont"
        ),
    )

    if config.enabled and config.temp_stop < config.temp_cont:
        raise config_error(
            f"the SIGSTOP temperature ({config.temp_stop}) must not be lower than "
            f"the SIGCONT temperature ({config.temp_cont})",
            field_name="sigstop.temp_stop",
            value=config.temp_stop,
        )
    return config


def validate_whitelist_config(whitelist: Dict[str, Any], own_pid: int) -> Whitelist:
    """
    Validate the `[whitelist]` table.

    The daemon's own pid is always added to the pid whitelist so that it
    can never stop itself.

    Args:
        whitelist: Raw whitelist table
        own_pid: The pid of the running daemon

    Raises:
        LimiterError: CONFIG if validation fails
    """
    defaults = Whitelist()
    _warn_unknown_keys(
        whitelist, "whitelist", ("comm", "state", "max_nice") + _ID_SET_KEYS
    )

    id_sets = {
        key: validate_id_set(whitelist[key], f"whitelist.{key}")
        for key in _ID_SET_KEYS
        if key in whitelist
    }
    id_sets["pid"] = id_sets.get("pid", defaults.pid).with_value(own_pid)

    comm = defaults.comm
    if "comm" in whitelist:
        comm = validate_pattern_list(whitelist["comm"], "whitelist.comm")

    state = defaults.state
    if "state" in whitelist:
        state = validate_char_set(whitelist["state"], "whitelist.state")

    max_nice = whitelist.get("max_nice", defaults.max_nice)
    if isinstance(max_nice, bool) or not isinstance(max_nice, int):
        raise config_error("must be an integer", field_name="whitelist.max_nice", value=max_nice)

    return Whitelist(comm=comm, state=state, max_nice=max_nice, **id_sets)


def validate_matcher_config(matchers: Dict[str, Any]) -> MatcherConfig:
    """
    Validate the `[matchers]` table of file glob patterns.

    Raises:
        LimiterError: CONFIG if validation fails
    """
    defaults = MatcherConfig()
    keys = (
        "thermal",
        "scaling_max_freq",
        "cpuinfo_max_freq",
        "cpuinfo_min_freq",
        "scaling_available_frequencies",
    )
    _warn_unknown_keys(matchers, "matchers", keys + ("proc_root",))

    patterns = {
        key: validate_string(matchers.get(key, getattr(defaults, key)), f"matchers.{key}")
        for key in keys
    }
    proc_root = validate_string(
        matchers.get("proc_root", str(defaults.proc_root)), "matchers.proc_root"
    )
    return MatcherConfig(proc_root=Path(proc_root), **patterns)


def validate_app_config(raw: Dict[str, Any], own_pid: int) -> AppConfig:
    """
    Validate a parsed configuration file and build the application configuration.

    Args:
        raw: The parsed TOML document
        own_pid: The pid of the running daemon, injected into the pid whitelist

    Returns:
        Validated AppConfig instance

    Raises:
        LimiterError: CONFIG if any value is invalid, if both throttling and
            SIGSTOP are disabled, or if an enabled mode's thresholds are inverted
    """
    for name in raw:
        if name not in KNOWN_SECTIONS:
            logger.warning(f"Ignoring unknown configuration section: [{name}]")

    config = AppConfig(
        general=validate_general_config(_section(raw, "general")),
        throttle=validate_throttle_config(_section(raw, "throttle")),
        sigstop=validate_stop_config(_section(raw, "sigstop")),
        whitelist=validate_whitelist_config(_section(raw, "whitelist"), own_pid),
        matchers=validate_matcher_config(_section(raw, "matchers")),
    )

    if not config.throttle.enabled and not config.sigstop.enabled:
        raise config_error(
            "neither throttling nor SIGSTOP is enabled; enable at least one of "
            "throttle.enabled and sigstop.enabled"
        )
    return config
