"""
Command-line interface for the templimiter daemon.

This module parses the command line, loads the configuration, discovers
the sensor, cpufreq and process files, wires up the control loop and runs
it until the process is terminated or a fatal error occurs.
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..config import get_config, get_config_path, resolve_resources, set_config_path
from ..config.resources import LimiterResources
from ..models.config import AppConfig
from ..monitoring import ControlLoop, FrequencyActuator, ProcessTable, SuspensionActuator
from ..validation import handle_cli_error
from .log_setup import configure_bootstrap_logging, configure_logging, write_banner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="templimiter",
        description=(
            "Keep CPU temperature in check by lowering the cpufreq ceiling "
            "and, if configured, by stopping the heaviest processes."
        ),
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Log at debug level and echo the log to the console.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"Templimiter {__version__}",
    )
    parser.add_argument(
        "-w",
        "--which-conf",
        action="store_true",
        help="Print the path of the configuration file that would be used and exit.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help=f"Configuration file to use instead of {get_config_path()}.",
    )
    return parser


def build_control_loop(config: AppConfig, resources: LimiterResources) -> ControlLoop:
    """
    Wire the actuators for the enabled modes into a control loop.
    """
    frequency = None
    if config.throttle.enabled:
        frequency = FrequencyActuator(resources.ceiling_files, resources.domains)

    suspension = None
    if config.sigstop.enabled:
        table = ProcessTable(resources.procfs, config.whitelist)
        suspension = SuspensionActuator(
            table,
            resources.procfs,
            stepwise_stop=config.sigstop.stepwise_stop,
            stepwise_cont=config.sigstop.stepwise_cont,
        )

    return ControlLoop(config, resources.thermal_files, frequency=frequency, suspension=suspension)


def _handle_termination(signum, frame) -> None:
    logger.info(f"Signal {signal.strsignal(signum)} received. Exiting.")
    sys.exit(0)


def install_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _handle_termination)
    signal.signal(signal.SIGTERM, _handle_termination)


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for templimiter.

    Raises:
        SystemExit: with status 0 on SIGINT/SIGTERM, 1 on any fatal error
    """
    args = build_parser().parse_args(argv)

    if args.config is not None:
        set_config_path(args.config)
    if args.which_conf:
        print(get_config_path())
        return

    configure_bootstrap_logging(args.debug)
    install_signal_handlers()

    try:
        config = get_config()
    except Exception as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    try:
        configure_logging(config.general.log_file_path, args.debug)
    except Exception as e:
        handle_cli_error(error=e, context="log file setup", exit_code=1, logger=logger)

    write_banner(__version__, logger)

    try:
        resources = resolve_resources(config)
        loop = build_control_loop(config, resources)
    except Exception as e:
        handle_cli_error(error=e, context="resource discovery", exit_code=1, logger=logger)

    try:
        loop.run()
    except Exception as e:
        handle_cli_error(error=e, context="temperature control", exit_code=1, logger=logger)
