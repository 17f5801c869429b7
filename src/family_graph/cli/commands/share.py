from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from family_graph.cli.utils import load_state, write_json
from family_graph.core.exceptions import ShareDecodeError
from family_graph.persistence.share import build_share_link, decode_share, encode_share, token_from_link

console = Console(stderr=True)

share_app = typer.Typer(help="Encode and decode share links", add_completion=False)


@share_app.command("encode")
def encode_command(
    store: Optional[Path] = typer.Option(None, "--store", "-s", help="Person store (JSON)"),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="Print a full link on this URL instead of the bare token",
    ),
):
    """
    Print a share token (or link) for the stored tree.
    """
    _, state = load_state(store)
    if base_url:
        print(build_share_link(base_url, state.registry))
    else:
        print(encode_share(state.registry))


@share_app.command("decode")
def decode_command(
    token: str = typer.Argument(..., help="Share token or full share link"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the person list to a file"),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print JSON"),
):
    """
    Decode a share token or link into the person list.
    """
    try:
        if "://" in token or "?" in token:
            token = token_from_link(token)
        registry = decode_share(token)
    except ShareDecodeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    write_json(registry.to_list(), out=out, pretty=pretty)
