"""
Process-wide access to the templimiter configuration.

The configuration file is read and validated on first use and the
resulting ``AppConfig`` is kept for the lifetime of the daemon. The CLI
may point the loader at another file before that first use.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig
from ..validation.exceptions import ErrorSeverity, handle_config_error
from .loader import load_main_config
from .validators import validate_app_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/usr/local/etc/conf.d/templimiter.toml")

# Loaded configuration, None until get_config() has succeeded.
_CONFIG: Optional[AppConfig] = None

# File get_config() reads; replaced by --config or by tests.
_CONFIG_FILE_PATH = DEFAULT_CONFIG_PATH


def set_config_path(config_path: Path) -> None:
    """
    Point the loader at another configuration file.

    Args:
        config_path: Path to a templimiter TOML file

    Note:
        A configuration that was already loaded is dropped, so the next
        get_config() reads the new file.
    """
    global _CONFIG, _CONFIG_FILE_PATH
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.debug(f"Configuration file is now {config_path}")


def get_config_path() -> Path:
    """Return the path the configuration is (or will be) loaded from."""
    return _CONFIG_FILE_PATH


def clear_config_cache() -> None:
    """Drop the loaded configuration; the next get_config() reads the file again."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Dropped loaded configuration")


def _load_config(config_path: Path, own_pid: int) -> AppConfig:
    try:
        app_config = validate_app_config(load_main_config(config_path), own_pid)
    except Exception as e:
        handle_config_error(
            error=e,
            context=f"loading {config_path}",
            severity=ErrorSeverity.ERROR,
            reraise=False,
            logger=logger,
        )
        raise

    logger.info(
        f"Loaded configuration: throttle={app_config.throttle.enabled}, "
        f"sigstop={app_config.sigstop.enabled}"
    )
    return app_config


def get_config(own_pid: Optional[int] = None) -> AppConfig:
    """
    Return the daemon configuration, reading the file on first use.

    Args:
        own_pid: Pid to exempt from SIGSTOP; defaults to the current process.
            Only used by the call that actually reads the file.

    Returns:
        The shared AppConfig instance

    Raises:
        LimiterError: CONFIG if the file is missing, malformed or invalid
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH, os.getpid() if own_pid is None else own_pid)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> Dict[str, Any]:
    """
    Summarize where the configuration comes from and which modes it enables.
    """
    loaded = _CONFIG
    return {
        "config_loaded": loaded is not None,
        "config_path": str(_CONFIG_FILE_PATH),
        "throttle_enabled": loaded.throttle.enabled if loaded else None,
        "sigstop_enabled": loaded.sigstop.enabled if loaded else None,
    }
