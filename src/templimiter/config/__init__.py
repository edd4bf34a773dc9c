"""
Configuration management for the templimiter package.

This module provides a clean interface for loading, validating, and accessing
the TOML configuration, plus the startup discovery of the files the
configuration points at.
"""

# Main configuration interface
from .manager import (
    DEFAULT_CONFIG_PATH,
    clear_config_cache,
    get_config,
    get_config_info,
    get_config_path,
    is_config_loaded,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import load_main_config, load_toml_file
from .resources import LimiterResources, resolve_resources
from .validators import validate_app_config

__all__ = [
    # Main interface
    "DEFAULT_CONFIG_PATH",
    "get_config",
    "get_config_path",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Resource discovery
    "LimiterResources",
    "resolve_resources",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_app_config",
]
