"""
Tidy tree layout (Buchheim, Jünger & Leipert's linear-time refinement of
Walker's algorithm).

Positions are returned in separation units on the x axis and as depth on
the y axis; callers scale them to their node size. The same separation
semantics as d3-hierarchy's ``tree()`` apply: ``separation(a, b)`` is the
minimum distance between two horizontally adjacent nodes.
"""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple

Separation = Callable[[Hashable, Hashable], float]


class _Walker:
    __slots__ = ("key", "parent", "children", "i", "A", "a", "z", "m", "c", "s", "t", "x", "depth")

    def __init__(self, key: Hashable, i: int):
        self.key = key
        self.parent: Optional[_Walker] = None
        self.children: List[_Walker] = []
        self.i = i
        self.A: Optional[_Walker] = None   # default ancestor
        self.a: _Walker = self             # ancestor
        self.z = 0.0                       # prelim
        self.m = 0.0                       # mod
        self.c = 0.0                       # change
        self.s = 0.0                       # shift
        self.t: Optional[_Walker] = None   # thread
        self.x = 0.0
        self.depth = 0


def _next_left(v: _Walker) -> Optional[_Walker]:
    return v.children[0] if v.children else v.t


def _next_right(v: _Walker) -> Optional[_Walker]:
    return v.children[-1] if v.children else v.t


def _move_subtree(wm: _Walker, wp: _Walker, shift: float) -> None:
    change = shift / (wp.i - wm.i)
    wp.c -= change
    wp.s += shift
    wm.c += change
    wp.z += shift
    wp.m += shift


def _execute_shifts(v: _Walker) -> None:
    shift = 0.0
    change = 0.0
    for w in reversed(v.children):
        w.z += shift
        w.m += shift
        change += w.c
        shift += w.s + change


def _next_ancestor(vim: _Walker, v: _Walker, ancestor: _Walker) -> _Walker:
    return vim.a if vim.a.parent is v.parent else ancestor


def _apportion(v: _Walker, w: Optional[_Walker], ancestor: _Walker, separation: Separation) -> _Walker:
    if w is None:
        return ancestor

    vip = vop = v
    vim = w
    vom = vip.parent.children[0]
    sip = vip.m
    sop = vop.m
    sim = vim.m
    som = vom.m

    while True:
        vim = _next_right(vim)
        vip = _next_left(vip)
        if vim is None or vip is None:
            break
        vom = _next_left(vom)
        vop = _next_right(vop)
        vop.a = v
        shift = vim.z + sim - vip.z - sip + separation(vim.key, vip.key)
        if shift > 0:
            _move_subtree(_next_ancestor(vim, v, ancestor), v, shift)
            sip += shift
            sop += shift
        sim += vim.m
        sip += vip.m
        som += vom.m
        sop += vop.m

    if vim is not None and _next_right(vop) is None:
        vop.t = vim
        vop.m += sim - sop
    if vip is not None and _next_left(vom) is None:
        vom.t = vip
        vom.m += sip - som
        ancestor = v
    return ancestor


def _first_walk(v: _Walker, separation: Separation) -> None:
    siblings = v.parent.children
    w = siblings[v.i - 1] if v.i else None
    if v.children:
        _execute_shifts(v)
        midpoint = (v.children[0].z + v.children[-1].z) / 2
        if w is not None:
            v.z = w.z + separation(v.key, w.key)
            v.m = v.z - midpoint
        else:
            v.z = midpoint
    elif w is not None:
        v.z = w.z + separation(v.key, w.key)
    v.parent.A = _apportion(v, w, v.parent.A or siblings[0], separation)


def _second_walk(v: _Walker) -> None:
    v.x = v.z + v.parent.m
    v.m += v.parent.m


def tidy_tree(
    root: Hashable,
    children: Callable[[Hashable], Iterable[Hashable]],
    separation: Separation,
) -> Dict[Hashable, Tuple[float, int]]:
    """
    Lay out the tree reachable from ``root``.

    ``children(key)`` yields child keys left to right. Returns
    ``{key: (x, depth)}`` with the root at x = 0. Traversals are iterative,
    so deep chains do not hit the recursion limit. The caller guarantees the
    structure is a tree.
    """
    top = _Walker(root, 0)
    sentinel = _Walker(None, 0)
    sentinel.children = [top]
    top.parent = sentinel

    # Pre-order build; records visiting order for both walks.
    pre_order: List[_Walker] = []
    stack = [top]
    while stack:
        node = stack.pop()
        pre_order.append(node)
        for i, key in enumerate(children(node.key)):
            child = _Walker(key, i)
            child.parent = node
            child.depth = node.depth + 1
            node.children.append(child)
        stack.extend(node.children)

    # Reversed pre-order (children pushed left to right) is a left-to-right
    # post-order: every left sibling's subtree precedes the right sibling.
    for node in reversed(pre_order):
        _first_walk(node, separation)

    sentinel.m = -top.z

    stack = [top]
    while stack:
        node = stack.pop()
        _second_walk(node)
        stack.extend(node.children)

    return {node.key: (node.x, node.depth) for node in pre_order}
