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
# btrbk-check/src/btrbk_check/__init__.py

"""Checksum verification of btrbk snapshot/backup pairs with rsync."""

from .aggregate import RunAggregator, run_checks
from .exceptions import (
    BtrbkCheckError,
    ConfigurationError,
    InventoryError,
    ParseError,
)
from .parser import classify, count_diffs, parse_line, DiffCounter
from .runner import VerificationRun, resolve_rsh, verify_pair
from .tlog import TransactionLog
from .types import (
    AggregateResult,
    ChangeRecord,
    CheckPolicy,
    ClassificationResult,
    Pair,
    RunOutcome,
    TransactionEntry,
)

__version__ = "0.1.0"

__all__ = [
    "RunAggregator",
    "run_checks",
    "BtrbkCheckError",
    "ConfigurationError",
    "InventoryError",
    "ParseError",
    "classify",
    "count_diffs",
    "parse_line",
    "DiffCounter",
    "VerificationRun",
    "resolve_rsh",
    "verify_pair",
    "TransactionLog",
    "AggregateResult",
    "ChangeRecord",
    "CheckPolicy",
    "ClassificationResult",
    "Pair",
    "RunOutcome",
    "TransactionEntry",
]
