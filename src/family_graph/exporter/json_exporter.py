"""
json_exporter.py
Structured JSON exporter for layouts and person sets.

This exporter:
- Converts dataclasses and objects to dictionaries (NOT strings)
- Emits person records in their wire format
- Is deterministic: same input, same bytes
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any, Dict

from family_graph.layout.builder import TreeLayout
from family_graph.logging import get_logger
from family_graph.registry.entities import Person, PersonRegistry

log = get_logger("json_exporter")


def _to_json_compatible(obj: Any) -> Any:
    """
    Recursively convert objects into JSON-compatible structures.

    Rules:
    - Primitives pass through
    - Person -> wire-format dict
    - dataclasses -> dict (recursively)
    - dict -> dict (recursively)
    - list / tuple / set -> list (recursively)
    - Anything else -> str(obj)
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if isinstance(obj, Person):
        return obj.to_dict()

    if isinstance(obj, PersonRegistry):
        return obj.to_list()

    if is_dataclass(obj):
        return {f.name: _to_json_compatible(getattr(obj, f.name)) for f in fields(obj)}

    if isinstance(obj, dict):
        return {str(k): _to_json_compatible(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [_to_json_compatible(v) for v in obj]

    return str(obj)


def build_layout_dict(layout: TreeLayout) -> Dict[str, Any]:
    """
    Convert a layout into a JSON-safe dict:

        {
          "nodes": [{"id", "x", "y", "depth", "parent_id", "borrowed", "person"}],
          "edges": [{"kind", "source", "target", "source_xy", "target_xy"}],
          "positions": {id: [x, y]},
        }
    """
    return {
        "nodes": [_to_json_compatible(n) for n in layout.nodes],
        "edges": [_to_json_compatible(e) for e in layout.edges],
        "positions": _to_json_compatible(layout.positions),
    }


def serialize_layout_to_json_string(layout: TreeLayout, indent: int | None = 2) -> str:
    return json.dumps(build_layout_dict(layout), indent=indent, ensure_ascii=False)


def export_layout_json(layout: TreeLayout, output_path: str | Path, indent: int | None = 2) -> None:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    log.info(
        "Exporting layout JSON to: %s (nodes=%d, edges=%d)",
        output_path,
        len(layout.nodes),
        len(layout.edges),
    )

    json_str = serialize_layout_to_json_string(layout, indent=indent)

    with output_path.open("w", encoding="utf-8") as f:
        f.write(json_str)

    size_bytes = output_path.stat().st_size
    log.info("JSON export complete. size=%d bytes", size_bytes)
