from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from family_graph.cli.utils import load_state
from family_graph.config import get_config
from family_graph.core.context import ImportContext
from family_graph.core.pipeline import ImportPipeline
from family_graph.extraction.client import HttpExtractor, StaticExtractor
from family_graph.logging import get_logger

console = Console()
log = get_logger("cli.import")


def import_command(
    text_file: Path = typer.Argument(..., exists=True, readable=True, help="Free text describing family members"),
    store: Optional[Path] = typer.Option(
        None,
        "--store",
        "-s",
        help="Person store (JSON); defaults to paths.store from the config",
    ),
    candidates: Optional[Path] = typer.Option(
        None,
        "--candidates",
        "-c",
        exists=True,
        readable=True,
        help="Use a saved extraction response instead of calling the service",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable rich logging",
    ),
):
    """
    Extract people from text and merge them into the store.
    """
    cfg = get_config()
    repo, state = load_state(store, verbose=verbose)

    if candidates is not None:
        extractor = StaticExtractor(candidates.read_text(encoding="utf-8"))
    else:
        extractor = HttpExtractor.from_config(cfg)

    ctx = ImportContext(
        config=cfg,
        logger=log,
        extractor=extractor,
        repository=repo,
    )
    outcome = ImportPipeline(ctx).run_sync(state, text_file.read_text(encoding="utf-8"))

    if not outcome.applied:
        console.print("[yellow]No candidates extracted; store unchanged.[/yellow]")
        for err in ctx.errors:
            console.print(f"[red]{err}[/red]")
        return

    table = Table(title="Import")
    table.add_column("Result", style="bold")
    table.add_column("Count", justify="right")

    table.add_row("Candidates", str(outcome.candidates))
    table.add_row("Created", str(len(outcome.created)))
    table.add_row("Updated", str(len(outcome.updated)))
    table.add_row("Explicit links", str(outcome.explicit_changes))
    table.add_row("Inferred links", str(outcome.inferred_changes))
    table.add_row("Unresolved names", str(len(outcome.unresolved)))

    console.print(table)
    if verbose and outcome.unresolved:
        console.log("Unresolved: " + ", ".join(outcome.unresolved))
