"""
Command-line interface for the templimiter package.

This module provides the main CLI entry point for the daemon.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
