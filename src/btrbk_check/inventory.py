# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# btrbk-check/src/btrbk_check/inventory.py

"""Snapshot/backup pairs from `btrbk list --format=raw`.

Each raw line is a sequence of shell-quoted key=value tokens, e.g.

    format="latest" snapshot_path="/mnt/btr_pool/home.20261019" target_path="/mnt/backup/home.20261019" source_host=""

Lines are tokenized with shlex and never evaluated.
"""

import shlex
import subprocess
from typing import Final, Iterable, Iterator

from loguru import logger

from .exceptions import InventoryError
from .types import CheckPolicy, Pair

LIST_SUBCOMMANDS: Final = {"latest": "latest", "all": "backups"}


def decode_raw_line(line: str) -> dict[str, str]:
    """Split one raw line into its key=value fields."""
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        raise InventoryError(f"Cannot decode btrbk list line: {line!r}") from e
    fields = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep:
            fields[key] = value
    return fields


def pair_from_fields(fields: dict[str, str]) -> Pair:
    return Pair(
        source_path=fields.get("snapshot_path", ""),
        dest_path=fields.get("target_path", ""),
        source_host=fields.get("source_host") or None,
        dest_host=fields.get("target_host") or None,
        source_rsh=fields.get("source_rsh") or None,
    )


def decode_pairs(lines: Iterable[str]) -> Iterator[Pair]:
    for line in lines:
        line = line.strip()
        if not line:
            continue
        logger.debug(f"... [btrbk list]: {line}")
        yield pair_from_fields(decode_raw_line(line))


def list_command(policy: CheckPolicy, btrbk_args: Iterable[str] = ()) -> list[str]:
    return [policy.btrbk_bin, "list", LIST_SUBCOMMANDS[policy.scope],
            "--format=raw", *btrbk_args]


def list_pairs(policy: CheckPolicy,
               btrbk_args: Iterable[str] = ()) -> Iterator[Pair]:
    """Stream pairs from btrbk while it runs.

    Raises:
        InventoryError: if btrbk cannot be started or exits non-zero.
    """
    cmd = list_command(policy, btrbk_args)
    logger.info(f"Resolving {LIST_SUBCOMMANDS[policy.scope]}")
    logger.debug(f"### {shlex.join(cmd)}")
    try:
        proc = subprocess.Popen(cmd, stdin=subprocess.DEVNULL,
                                stdout=subprocess.PIPE, text=True,
                                encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise InventoryError(f"Failed to run {cmd[0]}: {e}") from e

    with proc:
        yield from decode_pairs(proc.stdout)
        returncode = proc.wait()
    if returncode != 0:
        raise InventoryError(
            f"{shlex.join(cmd)} failed with exit status {returncode}")
