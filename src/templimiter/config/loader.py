"""
Configuration file loading utilities.

This module handles the low-level loading and parsing of the TOML
configuration file.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation.exceptions import config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        LimiterError: CONFIG if the file is missing, unreadable or malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.is_file():
        raise config_error(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise config_error(f"{description} {file_path} is not valid TOML: {e}")
    except OSError as e:
        raise config_error(f"{description} {file_path} could not be read: {e}")


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Load the templimiter configuration file."""
    return load_toml_file(config_path, "templimiter configuration file")
