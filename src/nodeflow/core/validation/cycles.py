"""Control-flow cycle detection.

``find_cycle`` reports the first cycle in node declaration order, for
messages. ``cyclic_nodes`` classifies every node that lies on some cycle, for
the variable resolver, which also runs ``cyclic_members`` over variable
dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from nodeflow.core.graph import Edge, Node
from nodeflow.core.validation.reachability import control_adjacency


def find_cycle(nodes: Iterable[Node], edges: Iterable[Edge]) -> list[str] | None:
    """Return the first control-flow cycle as ``[a, b, ..., a]``, or ``None``.

    Depth-first search starts from each node in declaration order; successors
    are followed in edge order. The first node seen twice on the current path
    closes the cycle, so the result is stable for a given snapshot.
    """
    adjacency = control_adjacency(edges)
    done: set[str] = set()

    for node in nodes:
        if node.id in done:
            continue
        cycle = _search_from(node.id, adjacency, done)
        if cycle is not None:
            return cycle
    return None


def _search_from(root: str, adjacency: dict[str, list[str]], done: set[str]) -> list[str] | None:
    # Iterative DFS: path holds the ids on the stack, frames their successor cursors.
    path: list[str] = [root]
    on_path: set[str] = {root}
    frames: list[tuple[str, int]] = [(root, 0)]

    while frames:
        node_id, cursor = frames[-1]
        successors = adjacency.get(node_id, ())
        if cursor >= len(successors):
            frames.pop()
            path.pop()
            on_path.discard(node_id)
            done.add(node_id)
            continue

        frames[-1] = (node_id, cursor + 1)
        nxt = successors[cursor]
        if nxt in on_path:
            start = path.index(nxt)
            return path[start:] + [nxt]
        if nxt in done:
            continue
        path.append(nxt)
        on_path.add(nxt)
        frames.append((nxt, 0))

    return None


def cyclic_nodes(node_ids: Iterable[str], edges: Iterable[Edge]) -> set[str]:
    """Return the ids of nodes that lie on at least one control-flow cycle."""
    return cyclic_members(node_ids, control_adjacency(edges))


def cyclic_members(node_ids: Iterable[str], adjacency: Mapping[str, Sequence[str]]) -> set[str]:
    """Return the ids reachable from ``node_ids`` that lie on a cycle of ``adjacency``.

    Uses Tarjan's strongly connected components; an id is cyclic when its
    component has more than one member or it is its own successor.
    """
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    result: set[str] = set()
    counter = 0

    for root in node_ids:
        if root in index_of:
            continue
        work: list[tuple[str, int]] = [(root, 0)]
        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)

        while work:
            node_id, cursor = work[-1]
            successors = adjacency.get(node_id, ())
            if cursor < len(successors):
                work[-1] = (node_id, cursor + 1)
                nxt = successors[cursor]
                if nxt not in index_of:
                    index_of[nxt] = lowlink[nxt] = counter
                    counter += 1
                    stack.append(nxt)
                    on_stack.add(nxt)
                    work.append((nxt, 0))
                elif nxt in on_stack:
                    lowlink[node_id] = min(lowlink[node_id], index_of[nxt])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node_id])
            if lowlink[node_id] != index_of[node_id]:
                continue

            component: list[str] = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                component.append(member)
                if member == node_id:
                    break
            if len(component) > 1 or node_id in adjacency.get(node_id, ()):
                result.update(component)

    return result


__all__ = ["cyclic_members", "cyclic_nodes", "find_cycle"]
