from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from family_graph.cli.utils import load_state
from family_graph.registry import check_invariants

console = Console()


def check_command(
    store: Optional[Path] = typer.Option(None, "--store", "-s", help="Person store (JSON)"),
):
    """
    List consistency violations; exits 1 when there are any.
    """
    _, state = load_state(store)
    violations = check_invariants(state.registry)

    if not violations:
        console.print(f"[green]OK[/green] {len(state.registry)} person(s), no violations")
        return

    table = Table(title="Invariant Violations")
    table.add_column("Kind", style="bold red")
    table.add_column("Person")
    table.add_column("Field")
    table.add_column("Value")
    for v in violations:
        table.add_row(v.kind, v.person_id, v.field, v.value or "")

    console.print(table)
    raise typer.Exit(code=1)
