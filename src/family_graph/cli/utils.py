from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from family_graph.config import get_config
from family_graph.core.state import TreeState
from family_graph.persistence.repository import JsonFileRepository

console = Console()


def open_repository(store: Optional[Path]) -> JsonFileRepository:
    """
    Repository for ``--store``, or the configured store path.
    """
    if store is not None:
        return JsonFileRepository(store)
    return JsonFileRepository.from_config(get_config())


def load_state(store: Optional[Path], *, verbose: bool = False) -> tuple[JsonFileRepository, TreeState]:
    repo = open_repository(store)
    state = TreeState(registry=repo.load())
    if verbose:
        console.log(f"Loaded {len(state.registry)} person(s) from {repo.path}")
    return repo, state


def write_json(
    data: Any,
    *,
    out: Path | None,
    pretty: bool,
):
    """
    Write JSON to stdout or file.
    """
    if pretty:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
    else:
        payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)

    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload, encoding="utf-8")
    else:
        print(payload)
