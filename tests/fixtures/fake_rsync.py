# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/fixtures/fake_rsync.py
"""Stand-in executables for rsync and btrbk.

The generated script prints the given lines verbatim, records its argv
to `<name>.argv` next to itself, and exits with the given status.
"""

import stat
from pathlib import Path
from typing import Iterable


def make_fake_command(directory: Path, lines: Iterable[str] = (),
                      exit_code: int = 0, name: str = "rsync") -> Path:
    script = directory / name
    output = directory / f"{name}.out"
    argv_file = directory / f"{name}.argv"
    output.write_text("".join(f"{line}\n" for line in lines))
    script.write_text(
        "#!/bin/sh\n"
        f"printf '%s\\n' \"$@\" > '{argv_file}'\n"
        f"cat '{output}'\n"
        f"exit {exit_code}\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def recorded_argv(script: Path) -> list[str] | None:
    """argv the fake command was last called with, or None if never run."""
    argv_file = script.parent / f"{script.name}.argv"
    if not argv_file.exists():
        return None
    return argv_file.read_text().splitlines()


def make_dispatch_command(directory: Path,
                          cases: dict[str, tuple[Iterable[str], int]],
                          name: str = "rsync") -> Path:
    """Fake command whose output depends on its last argument.

    `cases` maps the last argument (the rsync destination) to the lines
    to print and the exit status. Every call appends the last argument to
    `<name>.calls`. Unknown destinations exit 99.
    """
    script = directory / name
    calls = directory / f"{name}.calls"
    branches = []
    for i, (last_arg, (lines, exit_code)) in enumerate(cases.items()):
        output = directory / f"{name}.{i}.out"
        output.write_text("".join(f"{line}\n" for line in lines))
        branches.append(f"  '{last_arg}') cat '{output}'; exit {exit_code};;\n")
    script.write_text(
        "#!/bin/sh\n"
        "for last; do :; done\n"
        f"printf '%s\\n' \"$last\" >> '{calls}'\n"
        "case \"$last\" in\n"
        + "".join(branches) +
        "esac\n"
        "exit 99\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def recorded_calls(script: Path) -> list[str]:
    calls = script.parent / f"{script.name}.calls"
    if not calls.exists():
        return []
    return calls.read_text().splitlines()
