"""Breadth-first reachability over control edges."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from nodeflow.core.graph import Edge, effective_kind
from nodeflow.core.kinds import EdgeKind


def control_adjacency(edges: Iterable[Edge]) -> dict[str, list[str]]:
    """Map each node id to its control successors, in edge order.

    Edges whose effective kind is not control are ignored.
    """
    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        if effective_kind(edge) is not EdgeKind.CONTROL:
            continue
        adjacency.setdefault(edge.source, []).append(edge.target)
    return adjacency


def reachable_from(starts: Iterable[str], adjacency: dict[str, list[str]]) -> list[str]:
    """Return node ids reachable from ``starts`` in breadth-first visit order.

    Start ids are included. Each id appears once.
    """
    visited: set[str] = set()
    order: list[str] = []
    queue = deque(starts)
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        order.append(current)
        queue.extend(adjacency.get(current, ()))
    return order


def reachable(entry_id: str, edges: Iterable[Edge]) -> set[str]:
    """Return every node id reachable from ``entry_id`` via control edges."""
    return set(reachable_from((entry_id,), control_adjacency(edges)))


__all__ = ["control_adjacency", "reachable", "reachable_from"]
