# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# Copyright (C) 2026 HRDAG https://hrdag.org
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program; if not, see <https://www.gnu.org/licenses/>.
#
# ------
# btrbk-check/src/btrbk_check/parser.py

"""Parser and classifier for `rsync --itemize-changes` output.

rsync prints one line per differing entry: an 11 character flag code, a
space, and the path. An empty line marks the start of the trailing
statistics block (`--info=stats2`), after which nothing is classified.
"""

import re
from typing import Final, Iterable

from loguru import logger

from .exceptions import ParseError
from .types import (
    BLANK_LINE,
    FLAGS_WIDTH,
    BlankLine,
    ChangeRecord,
    CheckPolicy,
    ClassificationResult,
)

# records bound with rsync=True carry raw rsync output for the mirror sink
rsync_log = logger.bind(rsync=True)

ITEMIZE_LINE: Final = re.compile(r"^(.{%d}) (.*)$" % FLAGS_WIDTH, re.DOTALL)

ROOT_TIMESTAMP_FLAGS: Final = ".d..t......"
ROOT_PATH: Final = "./"
NEW_DIR_FLAGS: Final = "cd+++++++++"


def parse_line(line: str) -> ChangeRecord | BlankLine:
    """Parse one line of itemized output (without its trailing newline)."""
    if line == "":
        return BLANK_LINE
    m = ITEMIZE_LINE.match(line)
    if m is None:
        raise ParseError(line)
    return ChangeRecord(flags=m.group(1), path=m.group(2))


def classify(record: ChangeRecord, policy: CheckPolicy) -> ClassificationResult:
    """Decide whether a change record is a real difference.

    The root folder timestamp rule is checked before the new directory rule.
    """
    if (policy.ignore_root_folder_timestamp
            and record.flags == ROOT_TIMESTAMP_FLAGS
            and record.path == ROOT_PATH):
        # snapshot creation touches the root folder mtime
        return ClassificationResult("IGNORE", "ignore_root_folder_timestamp")
    if policy.ignore_dirs and record.flags == NEW_DIR_FLAGS:
        # nested subvolumes show up as new empty directories
        return ClassificationResult("IGNORE", "ignore_dirs")
    return ClassificationResult("DIFF")


class StatsBlockDetector:
    """Tracks whether the stream has entered the trailing stats block."""

    def __init__(self):
        self.in_stats = False

    def feed(self, line: str) -> bool:
        """Return True if `line` belongs to the stats block.

        The blank line that opens the block is itself part of it.
        """
        if not self.in_stats and line == "":
            self.in_stats = True
            return True
        return self.in_stats


class DiffCounter:
    """Streaming tally of real differences in itemized output."""

    def __init__(self, policy: CheckPolicy):
        self.policy = policy
        self.count = 0
        self.ignored = 0
        self.parse_errors = 0
        self.stats = StatsBlockDetector()

    def _mirror(self, text: str) -> None:
        if self.policy.mirror_enabled:
            rsync_log.info(text)

    def feed(self, line: str) -> ClassificationResult | None:
        """Consume one line; returns its classification if it was a change."""
        was_in_stats = self.stats.in_stats
        if self.stats.feed(line):
            self._mirror(line if was_in_stats else "RSYNC dump-stats")
            return None

        try:
            record = parse_line(line)
        except ParseError as e:
            self.parse_errors += 1
            logger.error(str(e))
            return None

        result = classify(record, self.policy)
        if result.counted:
            self.count += 1
            result = ClassificationResult("DIFF", count=self.count)
            self._mirror(f"{record} # DIFF count={self.count}")
        else:
            self.ignored += 1
            self._mirror(f"{record} # IGNORE reason={result.reason}")
        return result

    def feed_all(self, lines: Iterable[str]) -> int:
        for line in lines:
            self.feed(line.rstrip("\n"))
        return self.count


def count_diffs(lines: Iterable[str], policy: CheckPolicy | None = None) -> int:
    """Count real differences in an iterable of itemized output lines."""
    return DiffCounter(policy or CheckPolicy()).feed_all(lines)
