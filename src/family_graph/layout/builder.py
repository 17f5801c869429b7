"""
Hierarchy layout builder.

Projects the two-parent + spouse graph onto a single-parent tree under one
synthetic root, positions it with the tidy tree algorithm, then rebuilds the
links a single-parent tree cannot carry:

  - secondary parent edges (the parent slot not used for placement)
  - spousal edges (one per couple)

An edge is emitted only when both endpoints were placed, so stale references
degrade to a missing edge. A cyclic parent chain raises InvalidStructureError.
The layout is a pure function of the person set and is rebuilt in full on
every change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import networkx as nx

from family_graph.core.exceptions import InvalidStructureError
from family_graph.layout.tidy_tree import tidy_tree
from family_graph.logging import get_logger
from family_graph.registry.entities import Person, PersonRegistry

log = get_logger("layout")

ROOT_ID = "__root__"

PRIMARY = "primary"
SECONDARY = "secondary"
SPOUSE = "spouse"


# ======================================================================
# DATA MODELS
# ======================================================================

@dataclass
class LayoutOptions:
    node_width: float = 280.0
    level_height: float = 350.0
    # Distances in node widths between neighbours with the same / a
    # different primary parent.
    sibling_separation: float = 1.4
    cousin_separation: float = 2.0

    @classmethod
    def from_config(cls, cfg) -> "LayoutOptions":
        section = cfg.layout
        defaults = cls()
        return cls(
            node_width=float(section.get("node_width", defaults.node_width)),
            level_height=float(section.get("level_height", defaults.level_height)),
            sibling_separation=float(section.get("sibling_separation", defaults.sibling_separation)),
            cousin_separation=float(section.get("cousin_separation", defaults.cousin_separation)),
        )


@dataclass
class LayoutNode:
    id: str
    x: float
    y: float
    depth: int
    parent_id: Optional[str]
    borrowed: bool
    person: Person


@dataclass
class LayoutEdge:
    kind: str
    source: str
    target: str
    source_xy: Tuple[float, float]
    target_xy: Tuple[float, float]


@dataclass
class TreeLayout:
    nodes: List[LayoutNode] = field(default_factory=list)
    edges: List[LayoutEdge] = field(default_factory=list)
    positions: Dict[str, Tuple[float, float]] = field(default_factory=dict)

    def node(self, person_id: str) -> Optional[LayoutNode]:
        for n in self.nodes:
            if n.id == person_id:
                return n
        return None

    def edges_of(self, kind: str) -> List[LayoutEdge]:
        return [e for e in self.edges if e.kind == kind]

    @property
    def is_empty(self) -> bool:
        return not self.nodes


# ======================================================================
# PRIMARY PARENT
# ======================================================================

def _slot_parent(person: Person, registry: PersonRegistry, exclude: str) -> Optional[str]:
    for ref in (person.parent_a, person.parent_b):
        if ref and ref != exclude and ref in registry:
            return ref
    return None


def primary_parent(person: Person, registry: PersonRegistry) -> Tuple[Optional[str], bool]:
    """
    Parent used to place ``person`` in the tree, and whether it was borrowed.

    Slot A, then slot B. A person without a resolvable parent borrows their
    spouse's so the couple sits on one generation. None means the root.
    """
    own = _slot_parent(person, registry, person.id)
    if own is not None:
        return own, False

    if person.spouse and person.spouse != person.id:
        spouse = registry.get(person.spouse)
        if spouse is not None:
            borrowed = _slot_parent(spouse, registry, person.id)
            if borrowed is not None:
                return borrowed, True

    return None, False


# ======================================================================
# STRUCTURE
# ======================================================================

def build_structure(registry: PersonRegistry) -> nx.DiGraph:
    """
    Single-parent tree as a directed graph (parent -> child) under ROOT_ID.

    Node attributes: ``borrowed`` marks a placement taken from the spouse.
    Raises InvalidStructureError when the primary-parent chain loops.
    """
    graph = nx.DiGraph()
    graph.add_node(ROOT_ID)
    for p in registry:
        graph.add_node(p.id, borrowed=False)

    for p in registry:
        parent, borrowed = primary_parent(p, registry)
        graph.nodes[p.id]["borrowed"] = borrowed
        graph.add_edge(parent or ROOT_ID, p.id)

    if len(registry) and not nx.is_arborescence(graph):
        try:
            cycle = [u for u, _ in nx.find_cycle(graph)]
        except nx.NetworkXNoCycle:
            cycle = []
        raise InvalidStructureError(
            f"Parent chain does not form a tree (cycle: {' -> '.join(cycle) or 'unknown'})",
            cycle=cycle,
        )
    return graph


# ======================================================================
# LAYOUT
# ======================================================================

def _edge(kind: str, source: str, target: str, positions: Dict[str, Tuple[float, float]]) -> Optional[LayoutEdge]:
    if source == target:
        return None
    a = positions.get(source)
    b = positions.get(target)
    if a is None or b is None:
        return None
    return LayoutEdge(kind=kind, source=source, target=target, source_xy=a, target_xy=b)


def build_layout(registry: PersonRegistry, options: Optional[LayoutOptions] = None) -> TreeLayout:
    """Positioned nodes plus primary, secondary-parent and spousal edges."""
    opts = options or LayoutOptions()
    if not len(registry):
        return TreeLayout()

    graph = build_structure(registry)
    parent_of: Dict[str, str] = {child: parent for parent, child in graph.edges()}

    def separation(a: str, b: str) -> float:
        if parent_of.get(a) == parent_of.get(b):
            return opts.sibling_separation
        return opts.cousin_separation

    placed = tidy_tree(ROOT_ID, graph.successors, separation)

    layout = TreeLayout()
    for p in registry:
        units, depth = placed[p.id]
        x = units * opts.node_width
        y = depth * opts.level_height
        parent = parent_of[p.id]
        layout.positions[p.id] = (x, y)
        layout.nodes.append(
            LayoutNode(
                id=p.id,
                x=x,
                y=y,
                depth=depth,
                parent_id=None if parent == ROOT_ID else parent,
                borrowed=graph.nodes[p.id]["borrowed"],
                person=p,
            )
        )

    for n in layout.nodes:
        if n.parent_id is None or n.borrowed:
            continue
        edge = _edge(PRIMARY, n.parent_id, n.id, layout.positions)
        if edge is not None:
            layout.edges.append(edge)

    for p in registry:
        if not (p.parent_a and p.parent_b):
            continue
        used = parent_of[p.id]
        secondary = p.parent_b if used == p.parent_a else p.parent_a
        if secondary == used:
            continue
        edge = _edge(SECONDARY, secondary, p.id, layout.positions)
        if edge is not None:
            layout.edges.append(edge)

    seen = set()
    for p in registry:
        if not p.spouse or p.spouse == p.id:
            continue
        pair = tuple(sorted((p.id, p.spouse)))
        if pair in seen:
            continue
        seen.add(pair)
        edge = _edge(SPOUSE, p.id, p.spouse, layout.positions)
        if edge is not None:
            layout.edges.append(edge)

    log.debug(
        "Layout: %d node(s), %d edge(s), depth=%d",
        len(layout.nodes), len(layout.edges),
        max((n.depth for n in layout.nodes), default=0),
    )
    return layout


def safe_build_layout(registry: PersonRegistry, options: Optional[LayoutOptions] = None) -> TreeLayout:
    """``build_layout``, or an empty layout when the structure is invalid."""
    try:
        return build_layout(registry, options)
    except InvalidStructureError as exc:
        log.error("Layout failed: %s", exc)
        return TreeLayout()
