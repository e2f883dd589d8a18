"""Package list rendering for CLI output."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import asdict
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from cargomelos.commands.list import PackageInfo


def print_packages(
    console: Console,
    packages: Sequence[PackageInfo],
    *,
    long: bool = False,
    show_private: bool = False,
    json_output: bool = False,
) -> None:
    """Print packages one per line, or as a JSON array.

    Args:
        console: Console to print to.
        packages: Packages in display order.
        long: Also show version and location.
        show_private: Mark private packages.
        json_output: Print a JSON array instead.
    """
    if json_output:
        console.print_json(json.dumps([asdict(p) for p in packages]))
        return

    if not packages:
        return

    table = Table(box=None, show_header=False, pad_edge=False)
    table.add_column("Name")
    if long:
        table.add_column("Version", style="green")
        table.add_column("Path", style="bright_black")
    if show_private:
        table.add_column("Private")

    for pkg in packages:
        row = [pkg.name]
        if long:
            row += [f"v{pkg.version}", pkg.location]
        if show_private:
            row.append("([red]PRIVATE[/red])" if pkg.private else "")
        table.add_row(*row)

    console.print(table)
