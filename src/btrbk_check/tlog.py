# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# btrbk-check/src/btrbk_check/tlog.py

"""Transaction log in the same line format as the btrbk transaction log."""

from datetime import datetime
from typing import Callable

from .types import Pair, TransactionEntry, TransactionStatus


def timestamp() -> str:
    """Current local time, e.g. 2026-10-19T09:30:00+02:00."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


class TransactionLog:
    """Append-only log of pair lifecycle events.

    If `echo` is given, each line is written through it as it is appended.
    """

    def __init__(self, echo: Callable[[str], None] | None = None,
                 dry_run: bool = False, tool: str = "rsync"):
        self.echo = echo
        self.dry_run = dry_run
        self.tool = tool
        self._entries: list[TransactionEntry] = []

    @property
    def entries(self) -> tuple[TransactionEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, status: TransactionStatus, pair: Pair) -> TransactionEntry:
        if self.dry_run and status == "starting":
            status = "dryrun_starting"
        entry = TransactionEntry(
            timestamp=timestamp(),
            status=status,
            dest=pair.dest,
            src=pair.src,
            tool=self.tool,
        )
        self._entries.append(entry)
        if self.echo is not None:
            self.echo(str(entry))
        return entry

    def replay(self) -> str:
        lines = ["", "TRANSACTION LOG", "---------------"]
        lines.extend(str(e) for e in self._entries)
        return "\n".join(lines)
