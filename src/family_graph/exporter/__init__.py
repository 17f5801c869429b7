"""
Exporter package.

Re-exports the JSON export entry points used by the CLI.
"""

from __future__ import annotations

from .json_exporter import build_layout_dict, export_layout_json, serialize_layout_to_json_string

__all__ = [
    "build_layout_dict",
    "export_layout_json",
    "serialize_layout_to_json_string",
]
