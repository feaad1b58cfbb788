# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# btrbk-check/src/btrbk_check/types.py

"""Type definitions for snapshot/backup verification."""

from dataclasses import dataclass, field
from typing import Final, Literal


Verdict = Literal["DIFF", "IGNORE"]
IgnoreReason = Literal["ignore_root_folder_timestamp", "ignore_dirs"]
OutcomeStatus = Literal["success", "fail", "error", "skipped"]
TransactionStatus = Literal[
    "starting", "dryrun_starting", "success", "fail", "ERROR"
]
Scope = Literal["latest", "all"]
RunState = Literal[
    "INIT", "SHELL_RESOLVED", "STARTED", "DIFFING", "CLASSIFIED", "LOGGED"
]

FLAGS_WIDTH: Final = 11


@dataclass(frozen=True)
class CheckPolicy:
    """Policy flags threaded through classification and each run."""
    ignore_dirs: bool = True
    ignore_root_folder_timestamp: bool = True
    dry_run: bool = False
    verbose: int = 0
    print_diffs: bool = False
    stats: bool = False
    ignore_acls: bool = False
    ignore_xattrs: bool = False
    ssh_identity: str | None = None
    scope: Scope = "latest"
    rsync_bin: str = "rsync"
    btrbk_bin: str = "btrbk"

    @property
    def mirror_enabled(self) -> bool:
        return self.print_diffs or self.verbose >= 2


@dataclass(frozen=True)
class Pair:
    """One snapshot to backup correspondence."""
    source_path: str
    dest_path: str
    source_host: str | None = None
    dest_host: str | None = None
    source_rsh: str | None = None

    @property
    def src(self) -> str:
        if self.source_host:
            return f"{self.source_host}:{self.source_path}"
        return self.source_path

    @property
    def dest(self) -> str:
        if self.dest_host:
            return f"{self.dest_host}:{self.dest_path}"
        return self.dest_path


@dataclass(frozen=True)
class ChangeRecord:
    """A single itemized change line: flags plus relative path."""
    flags: str
    path: str

    def __str__(self) -> str:
        return f"{self.flags} {self.path}"


@dataclass(frozen=True)
class BlankLine:
    """Empty line separating itemized output from the stats block."""


BLANK_LINE: Final = BlankLine()


@dataclass(frozen=True)
class ClassificationResult:
    """Classification of a change record."""
    verdict: Verdict
    reason: IgnoreReason | None = None
    count: int | None = None

    @property
    def counted(self) -> bool:
        return self.verdict == "DIFF"


@dataclass(frozen=True)
class TransactionEntry:
    """One lifecycle record, in btrbk transaction log format."""
    timestamp: str
    status: TransactionStatus
    dest: str
    src: str
    tool: str = "rsync"

    def __str__(self) -> str:
        return (f"{self.timestamp} check-{self.tool} {self.status} "
                f"{self.dest} {self.src} - -")


@dataclass(frozen=True)
class RunOutcome:
    """Terminal result of verifying one pair."""
    pair: Pair
    status: OutcomeStatus
    diff_count: int | None = None
    exit_code: int | None = None
    command: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.status in ("fail", "error")


@dataclass(frozen=True)
class AggregateResult:
    """Result of verifying a sequence of pairs."""
    total_pairs: int
    exit_status: int
    outcomes: tuple[RunOutcome, ...] = field(default_factory=tuple)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)
