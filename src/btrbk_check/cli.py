# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# btrbk-check/src/btrbk_check/cli.py

"""Command line interface for btrbk-check.

Examples:

    btrbk-check check -p /mnt/btr_pool 2> /tmp/rsync_fail.log
        check latest backups matching the "/mnt/btr_pool" btrbk filter

    btrbk-check check -n -v -v
        print detailed log and the commands that would run, without
        executing rsync

    btrbk-check check --all
        check ALL backups; this re-checks all files for each backup

    btrbk-check check --ssh-identity /etc/btrbk/ssh/id_ed25519
        use "ssh -q -i /etc/btrbk/ssh/id_ed25519 -l root" as rsync rsh
"""

from contextlib import closing
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .aggregate import RunAggregator
from .exceptions import BtrbkCheckError
from .inventory import list_pairs
from .logging_setup import setup_logging
from .parser import count_diffs
from .types import AggregateResult, CheckPolicy

app = typer.Typer(help="Check btrbk snapshot/backup pairs using rsync checksums")
console = Console(stderr=True)

STATUS_STYLES = {
    "success": "green",
    "fail": "red",
    "error": "bold red",
    "skipped": "yellow",
}


@app.command(context_settings={"allow_extra_args": True,
                               "ignore_unknown_options": True})
def check(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", "-n",
                                 help="Do not execute rsync, only log"),
    all_backups: bool = typer.Option(False, "--all",
                                     help="Check all backups, not only the latest"),
    stats: bool = typer.Option(False, "--stats",
                               help="Print rsync statistics (--info=stats2)"),
    ssh_identity: Optional[str] = typer.Option(
        None, "--ssh-identity",
        help="Use this ssh identity as root for rsync rsh "
             "(overrides all btrbk ssh_* options)"),
    strict: bool = typer.Option(False, "--strict",
                                help="Do not ignore new dirs or root folder timestamp"),
    ignore_acls: bool = typer.Option(False, "--ignore-acls",
                                     help="Do not compare ACLs"),
    ignore_xattrs: bool = typer.Option(False, "--ignore-xattrs",
                                       help="Do not compare extended attributes"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True,
                                help="Increase verbosity (-v -v implies --print)"),
    print_diffs: bool = typer.Option(False, "--print", "-p",
                                     help="Print all rsync diffs to stderr"),
) -> None:
    """Verify latest btrbk snapshot/backup pairs.

    Remaining arguments are passed to `btrbk list` (options and filters).
    """
    print_diffs = print_diffs or verbose >= 2
    setup_logging(verbose, print_diffs)

    policy = CheckPolicy(
        ignore_dirs=not strict,
        ignore_root_folder_timestamp=not strict,
        dry_run=dry_run,
        verbose=verbose,
        print_diffs=print_diffs,
        stats=stats,
        ignore_acls=ignore_acls,
        ignore_xattrs=ignore_xattrs,
        ssh_identity=ssh_identity,
        scope="all" if all_backups else "latest",
    )

    aggregator = RunAggregator(policy, echo=typer.echo)
    try:
        with closing(list_pairs(policy, ctx.args)) as pairs:
            result = aggregator.run(pairs)
    except BtrbkCheckError as e:
        logger.error(str(e))
        if verbose >= 1:
            _print_results(aggregator.result())
        raise typer.Exit(1)

    if verbose >= 1:
        _print_results(result)
    raise typer.Exit(result.exit_status)


@app.command()
def count(
    strict: bool = typer.Option(False, "--strict",
                                help="Do not ignore new dirs or root folder timestamp"),
    print_diffs: bool = typer.Option(False, "--print", "-p",
                                     help="Print annotated diffs to stderr"),
) -> None:
    """Count differences in `rsync -i` output read from stdin.

    Only the count is printed on stdout.
    """
    setup_logging(0, print_diffs)
    policy = CheckPolicy(
        ignore_dirs=not strict,
        ignore_root_folder_timestamp=not strict,
        print_diffs=print_diffs,
    )
    stdin = typer.get_text_stream("stdin", errors="surrogateescape")
    typer.echo(count_diffs(stdin, policy))


def _print_results(result: AggregateResult) -> None:
    """Print a per-pair table and totals to stderr."""
    table = Table(title="btrbk-check results")
    table.add_column("Status")
    table.add_column("Diffs", justify="right")
    table.add_column("Snapshot", style="cyan")
    table.add_column("Backup", style="green")

    for outcome in result.outcomes:
        style = STATUS_STYLES[outcome.status]
        diffs = "" if outcome.diff_count is None else str(outcome.diff_count)
        table.add_row(f"[{style}]{outcome.status}[/{style}]", diffs,
                      Text(outcome.pair.src), Text(outcome.pair.dest))

    console.print(table)
    console.print(
        f"{result.total_pairs} pairs: {result.count('success')} passed, "
        f"{result.count('fail')} failed, {result.count('error')} errors, "
        f"{result.count('skipped')} skipped",
        markup=False)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
