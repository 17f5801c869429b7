from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from family_graph.cli.utils import load_state
from family_graph.config import get_config
from family_graph.layout import LayoutOptions, safe_build_layout
from family_graph.registry import check_invariants

console = Console()


def stats_command(
    store: Optional[Path] = typer.Option(None, "--store", "-s", help="Person store (JSON)"),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable rich logging",
    ),
):
    """
    Show summary statistics for a person store.
    """
    _, state = load_state(store, verbose=verbose)
    people = list(state.registry)

    couples = {tuple(sorted((p.id, p.spouse))) for p in people if p.spouse}
    layout = safe_build_layout(state.registry, LayoutOptions.from_config(get_config()))

    table = Table(title="Family Graph Statistics")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")

    table.add_row("People", str(len(people)))
    table.add_row("Couples", str(len(couples)))
    table.add_row("With two parents", str(sum(1 for p in people if p.parent_a and p.parent_b)))
    table.add_row("Without parents", str(sum(1 for p in people if not p.parents)))
    table.add_row("Generations", str(max((n.depth for n in layout.nodes), default=0)))
    table.add_row("Invariant violations", str(len(check_invariants(state.registry))))

    console.print(table)
