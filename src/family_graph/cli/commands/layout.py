from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from family_graph.cli.utils import load_state, write_json
from family_graph.config import get_config
from family_graph.core.exceptions import InvalidStructureError
from family_graph.exporter import build_layout_dict
from family_graph.layout import LayoutOptions, build_layout

console = Console(stderr=True)


def layout_command(
    store: Optional[Path] = typer.Option(None, "--store", "-s", help="Person store (JSON)"),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Write output to file instead of stdout",
    ),
    pretty: bool = typer.Option(
        False,
        "--pretty",
        help="Pretty-print JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable rich logging",
    ),
):
    """
    Compute the positioned tree and write it as JSON (stdout by default).
    """
    _, state = load_state(store, verbose=verbose)

    try:
        layout = build_layout(state.registry, LayoutOptions.from_config(get_config()))
    except InvalidStructureError as exc:
        console.print(f"[red]Invalid structure:[/red] {exc}")
        raise typer.Exit(code=2)

    if verbose:
        console.log(f"Laid out {len(layout.nodes)} node(s), {len(layout.edges)} edge(s)")

    write_json(build_layout_dict(layout), out=out, pretty=pretty)
