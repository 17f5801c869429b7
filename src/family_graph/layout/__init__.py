"""
Hierarchical layout: single-root tree placement plus auxiliary edges.
"""

from family_graph.layout.builder import (
    PRIMARY,
    ROOT_ID,
    SECONDARY,
    SPOUSE,
    LayoutEdge,
    LayoutNode,
    LayoutOptions,
    TreeLayout,
    build_layout,
    build_structure,
    primary_parent,
    safe_build_layout,
)
from family_graph.layout.tidy_tree import tidy_tree

__all__ = [
    "PRIMARY",
    "ROOT_ID",
    "SECONDARY",
    "SPOUSE",
    "LayoutEdge",
    "LayoutNode",
    "LayoutOptions",
    "TreeLayout",
    "build_layout",
    "build_structure",
    "primary_parent",
    "safe_build_layout",
    "tidy_tree",
]
