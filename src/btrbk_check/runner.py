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
# btrbk-check/src/btrbk_check/runner.py

"""Verification of a single snapshot/backup pair with rsync.

Compares files and attributes by checksum, using rsync with options
`-i -n -c -a --delete --numeric-ids -H -A -X`. Nothing is copied: `-n`
makes rsync report what it would change, and every reported change that
is not expected noise counts as a difference.

WARNING: depending on the hardware this may eat all CPU and use high
bandwidth. Pairs are checked one at a time; wrap the process in nice(1)
or ionice(1) if needed.
"""

import re
import shlex
import subprocess
from typing import Final, Sequence

from loguru import logger

from .exceptions import ConfigurationError
from .parser import DiffCounter, rsync_log
from .tlog import TransactionLog, timestamp
from .types import CheckPolicy, Pair, RunOutcome, RunState


RSYNC_ARGS: Final = (
    "-i", "-n", "-c", "-a", "--delete", "--numeric-ids", "-H", "-A", "-X"
)
STATS_ARG: Final = "--info=stats2"

# empty output through the same pipeline, nothing is transferred
DRYRUN_COMMAND: Final = ("cat", "/dev/null")

# btrbk sets source_rsh="ssh [flags...] ssh_user@ssh_host"
RSH_TARGET: Final = re.compile(r"(.*) ([a-z0-9_-]+)@([a-zA-Z0-9.-]+)$")

# shell convention for "command not found"
LAUNCH_FAILED: Final = 127


def resolve_rsh(rsh: str | None, ssh_identity: str | None = None) -> str | None:
    """Rewrite a btrbk remote shell command into an rsync `-e` argument.

    "ssh [flags...] user@host" becomes "ssh [flags...] -l user"; rsync gets
    the host from the source address. With an ssh identity the given rsh
    is replaced entirely, since rsync needs root on the target.

    Raises:
        ConfigurationError: if the rsh has no trailing user@host.
    """
    if not rsh:
        return None
    if ssh_identity:
        return f"ssh -q -i {ssh_identity} -l root"
    m = RSH_TARGET.search(rsh)
    if m is None:
        raise ConfigurationError(f"failed to parse source_rsh: {rsh}")
    return f"{m.group(1)} -l {m.group(2)}"


def rsync_args(policy: CheckPolicy) -> list[str]:
    args = list(RSYNC_ARGS)
    if policy.stats:
        args.append(STATS_ARG)
    if policy.ignore_acls:
        args.remove("-A")
    if policy.ignore_xattrs:
        args.remove("-X")
    return args


def build_command(pair: Pair, policy: CheckPolicy,
                  rsh: str | None = None) -> list[str]:
    """Build the rsync command comparing `pair.src` to `pair.dest`."""
    cmd = [policy.rsync_bin] + rsync_args(policy)
    if rsh:
        cmd += ["-e", rsh]
    cmd += [f"{pair.src}/", f"{pair.dest}/"]
    return cmd


class VerificationRun:
    """Verify one pair: INIT -> SHELL_RESOLVED -> STARTED -> DIFFING ->
    CLASSIFIED -> LOGGED.

    A ConfigurationError from the remote shell rewrite propagates; every
    other failure ends in an "error" outcome.
    """

    def __init__(self, pair: Pair, policy: CheckPolicy, tlog: TransactionLog):
        self.pair = pair
        self.policy = policy
        self.tlog = tlog
        self.state: RunState = "INIT"
        self.rsh: str | None = None
        self.command: tuple[str, ...] = ()
        self.exit_code: int | None = None
        self.diff_count: int | None = None

    def _skip_notice(self) -> str | None:
        if not self.pair.source_path:
            return f"Skipping backup (no correlated snapshot): {self.pair.dest}"
        if not self.pair.dest_path:
            return f"Skipping snapshot (no correlated backup): {self.pair.src}"
        return None

    def _diff(self, argv: Sequence[str]) -> tuple[int, int | None]:
        """Run `argv` and stream its stdout through a DiffCounter."""
        counter = DiffCounter(self.policy)
        try:
            proc = subprocess.Popen(
                list(argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
            )
        except OSError as e:
            logger.error(f"Failed to launch {argv[0]}: {e}")
            return LAUNCH_FAILED, None

        self.state = "DIFFING"
        count = None
        with proc:
            try:
                count = counter.feed_all(proc.stdout)
            except OSError as e:
                logger.error(f"Failed to read output of {argv[0]}: {e}")
            exit_code = proc.wait()

        if counter.parse_errors:
            logger.warning(
                f"{counter.parse_errors} unparsed rsync lines for {self.pair.dest}")
        return exit_code, count

    def execute(self) -> RunOutcome:
        notice = self._skip_notice()
        if notice is not None:
            logger.info(notice)
            self.state = "LOGGED"
            return RunOutcome(self.pair, "skipped")

        self.rsh = resolve_rsh(self.pair.source_rsh, self.policy.ssh_identity)
        self.state = "SHELL_RESOLVED"
        self.command = tuple(build_command(self.pair, self.policy, self.rsh))
        argv = DRYRUN_COMMAND if self.policy.dry_run else self.command

        self.tlog.append("starting", self.pair)
        self.state = "STARTED"
        logger.debug(f"### {shlex.join(self.command)}")
        if not self.policy.dry_run:
            rsync_log.info(f"RSYNC start {timestamp()} {shlex.join(argv)}")

        self.exit_code, self.diff_count = self._diff(argv)
        self.state = "CLASSIFIED"
        if not self.policy.dry_run:
            rsync_log.info(f"RSYNC end {timestamp()}")

        if self.exit_code != 0 or self.diff_count is None:
            logger.error(f"Command execution failed (status={self.exit_code}): "
                         f"{shlex.join(argv)}")
            self.tlog.append("ERROR", self.pair)
            status = "error"
        elif self.diff_count > 0:
            logger.warning(f"CHECK FAILED ({self.diff_count} diffs): "
                           f"{self.pair.dest}")
            self.tlog.append("fail", self.pair)
            status = "fail"
        else:
            logger.info(f"CHECK PASSED ({self.diff_count} diffs)")
            self.tlog.append("success", self.pair)
            status = "success"

        self.state = "LOGGED"
        return RunOutcome(
            pair=self.pair,
            status=status,
            diff_count=self.diff_count,
            exit_code=self.exit_code,
            command=self.command,
        )


def verify_pair(pair: Pair, policy: CheckPolicy | None = None,
                tlog: TransactionLog | None = None) -> RunOutcome:
    """Verify a single pair and return its outcome."""
    policy = policy or CheckPolicy()
    tlog = tlog if tlog is not None else TransactionLog(dry_run=policy.dry_run)
    return VerificationRun(pair, policy, tlog).execute()
