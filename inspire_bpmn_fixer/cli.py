"""
Command-line entry point for the BPM Inspire BPMN fixer.

Usage:
    inspire-bpmn-fixer PATH [--config FILE] [--log-level LEVEL]

PATH can be a directory of .bpmn files or a single .bpmn file. Fixed files
are written to a "fixed" folder next to the input files.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from inspire_bpmn_fixer.config.settings import FixerConfig, LOG_LEVELS, load_config
from inspire_bpmn_fixer.errors import BPMNFixerError, ConfigurationError
from inspire_bpmn_fixer.runner import run_fixer

logger = logging.getLogger("inspire_bpmn_fixer")

USAGE = (
    "Invalid argument count. Usage: \"inspire-bpmn-fixer [PATH]\" "
    "where PATH can be a directory of .bpmn files or a single .bpmn file."
)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inspire-bpmn-fixer",
        description="Fix BPM Inspire BPMN exports for Camunda Platform 7",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Directory of .bpmn files or a single .bpmn file",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON or YAML file overriding the default fixer settings",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging level (default: from config, INFO)",
    )
    return parser


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger.setLevel(level)


def build_config(config_path: Optional[Path]) -> FixerConfig:
    """
    Load the fixer configuration, or the defaults if no file was given.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if config_path is None:
        return FixerConfig().validate()
    try:
        return load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error while loading config {config_path}: {e}", config_path) from e


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the fixer and return the process exit code.

    Returns:
        0 on success (also when no files were found or the usage was
        wrong), 1 on any fatal error
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level or "INFO")

    if len(args.paths) != 1:
        logger.info(USAGE)
        return 0

    try:
        config = build_config(args.config)
        if args.log_level is None:
            logger.setLevel(config.log_level.upper())
        result = run_fixer(args.paths[0], config)
    except BPMNFixerError as e:
        logger.error(str(e))
        return 1

    if result.files_processed:
        logger.debug(result.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
