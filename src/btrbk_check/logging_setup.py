# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# btrbk-check/src/btrbk_check/logging_setup.py

import sys
from typing import Final

from loguru import logger

VERBOSITY_LEVELS: Final = ("WARNING", "INFO", "DEBUG")


def is_rsync_record(record) -> bool:
    return record["extra"].get("rsync", False)


def console_level(verbose: int) -> str:
    return VERBOSITY_LEVELS[max(0, min(verbose, len(VERBOSITY_LEVELS) - 1))]


def setup_logging(verbose: int = 0, print_diffs: bool = False) -> None:
    """Setup loguru logging for btrbk-check.

    Configures:
    - Console output on stderr: WARNING+ by default, INFO+ with -v,
      DEBUG+ with -v -v
    - Raw rsync output (diff lines annotated with their classification)
      on stderr, only if print_diffs is set

    stdout is left to the transaction log and diff counts.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level(verbose),
        format="<level>{level}</level>: {message}",
        filter=lambda record: not is_rsync_record(record)
    )

    if print_diffs:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format="{message}",
            filter=is_rsync_record,
            colorize=False
        )
