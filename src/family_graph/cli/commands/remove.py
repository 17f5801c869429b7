from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from family_graph.cli.utils import load_state
from family_graph.core.exceptions import PersonNotFoundError
from family_graph.registry import DeletionPolicy

console = Console()


def remove_command(
    person_id: str = typer.Argument(..., help="Identifier of the person to delete"),
    store: Optional[Path] = typer.Option(None, "--store", "-s", help="Person store (JSON)"),
    legacy: bool = typer.Option(
        False,
        "--legacy",
        help="Remove the person only, leaving references to it in place",
    ),
):
    """
    Delete a person and (by default) clear every reference to them.
    """
    repo, state = load_state(store)
    state.deletion_policy = DeletionPolicy.LEGACY if legacy else DeletionPolicy.REPAIR

    try:
        state.delete_member(person_id)
    except PersonNotFoundError:
        console.print(f"[red]No person with id {person_id}[/red]")
        raise typer.Exit(code=1)

    repo.save(state.registry)
    console.print(f"Removed {person_id} ({state.deletion_policy.value})")
