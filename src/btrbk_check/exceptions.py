# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# btrbk-check/src/btrbk_check/exceptions.py

"""
btrbk-check exception classes.

Only ConfigurationError and InventoryError abort a run. Per-pair subprocess
failures are reported as RunOutcome status "error", not raised.
"""


class BtrbkCheckError(Exception):
    """Base exception for all btrbk-check errors."""
    pass


class ParseError(BtrbkCheckError):
    """Raised when an rsync output line is not an itemized change line."""

    def __init__(self, line: str):
        super().__init__(f"parse rsync line (ignored): {line}")
        self.line = line


class ConfigurationError(BtrbkCheckError):
    """Raised when a remote shell spec cannot be parsed."""
    pass


class InventoryError(BtrbkCheckError):
    """Raised when the btrbk inventory listing fails."""
    pass
