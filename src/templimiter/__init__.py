"""
Templimiter: a CPU temperature governor for Linux.

The daemon watches the thermal sensors exposed in sysfs and, whenever the
hottest one crosses a configured threshold, lowers the cpufreq ceiling
of every CPU and/or stops the process using the most CPU time. Once the
temperature drops back below the lower thresholds, it undoes both.

The package is organized into specialized modules:
- config: Configuration loading, validation and file discovery
- models: Data structures and type definitions
- validation: Error taxonomy, typed text parsing and value validators
- system: Sysfs file collections, procfs access and signal delivery
- monitoring: The control loop and its actuators
- cli: Command-line interface and logging setup

Usage:
    From command line:
        templimiter [-d] [-c CONFIG]
        python -m templimiter [-d] [-c CONFIG]
"""

__version__ = "0.1.1"

__all__ = [
    "__version__",
]
