# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# btrbk-check/src/btrbk_check/aggregate.py

"""Run verification over a sequence of pairs and merge exit statuses."""

from typing import Callable, Iterable

from loguru import logger

from .runner import VerificationRun
from .tlog import TransactionLog
from .types import AggregateResult, CheckPolicy, Pair, RunOutcome


class RunAggregator:
    """Verify pairs one after another; a failing pair never stops the run.

    The aggregator owns the transaction log. When `print_diffs` is set the
    log is replayed through `echo` once the run finishes, including when
    it is aborted by a configuration or inventory error.
    """

    def __init__(self, policy: CheckPolicy | None = None,
                 echo: Callable[[str], None] | None = None):
        self.policy = policy or CheckPolicy()
        self.echo = echo
        self.tlog = TransactionLog(echo=echo, dry_run=self.policy.dry_run)
        self.outcomes: list[RunOutcome] = []
        self.exit_status = 0

    def verify(self, pair: Pair) -> RunOutcome:
        outcome = VerificationRun(pair, self.policy, self.tlog).execute()
        self.outcomes.append(outcome)
        if outcome.failed:
            self.exit_status = 1
        return outcome

    def result(self) -> AggregateResult:
        return AggregateResult(
            total_pairs=len(self.outcomes),
            exit_status=self.exit_status,
            outcomes=tuple(self.outcomes),
        )

    def run(self, pairs: Iterable[Pair]) -> AggregateResult:
        try:
            for pair in pairs:
                self.verify(pair)
        finally:
            self._finish()
        return self.result()

    def _finish(self) -> None:
        logger.debug(f"Checked {len(self.outcomes)} pairs, "
                     f"exit status {self.exit_status}")
        if self.policy.mirror_enabled and self.echo is not None:
            self.echo(self.tlog.replay())


def run_checks(pairs: Iterable[Pair], policy: CheckPolicy | None = None,
               echo: Callable[[str], None] | None = None) -> AggregateResult:
    """Verify all `pairs` in the order given."""
    return RunAggregator(policy, echo=echo).run(pairs)
