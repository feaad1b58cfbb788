# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/fixtures/snapshot_pair.py
"""Snapshot/backup directory pairs for tests against the real rsync.

These are plain directories, not btrfs subvolumes, so no sudo is needed.
A nested subvolume is imitated by an empty directory on the backup side.
"""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from btrbk_check.types import Pair


@dataclass
class SnapshotPairEnvironment:
    """Container for the snapshot and backup paths of one pair."""

    snapshot: Path
    backup: Path

    @property
    def pair(self) -> Pair:
        return Pair(source_path=str(self.snapshot), dest_path=str(self.backup))


def create_snapshot_pair(
    root: Path,
    setup_func: Callable[[Path], None],
    modify_func: Callable[[Path], None] | None = None,
) -> SnapshotPairEnvironment:
    """
    Create a snapshot directory and an identical backup copy.

    Args:
        root: Directory to create `snapshot/` and `backup/` in
        setup_func: Function to create content in the snapshot
        modify_func: Function to apply changes to the backup after copying

    Returns:
        SnapshotPairEnvironment with both paths
    """
    snapshot = root / "snapshot"
    backup = root / "backup"
    snapshot.mkdir()
    setup_func(snapshot)
    shutil.copytree(snapshot, backup, symlinks=True)
    if modify_func is not None:
        modify_func(backup)
        # keep the root folder timestamp in sync unless the test changes it
        st = snapshot.stat()
        os.utime(backup, ns=(st.st_atime_ns, st.st_mtime_ns))
    return SnapshotPairEnvironment(snapshot=snapshot, backup=backup)
