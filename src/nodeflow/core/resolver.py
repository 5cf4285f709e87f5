"""Static variable value preview.

Walks the execution graph from the Entry node, collects the assignment nodes
that can run for each declared variable and classifies what the variable
statically resolves to:

- ``resolved``: one value can be determined.
- ``ambiguous``: reachable assignments disagree, so branch order decides.
- ``unknown``: an assignment sits on or behind a control-flow cycle, its
  input cannot be traced to a value, or variables feed each other in a loop.

The resolver is a pure function of the graph and declarations; nothing is
cached between calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pyrsistent import PMap, freeze, pmap, thaw

from nodeflow.core.catalog import DEFAULT_CATALOG, NodeCatalog
from nodeflow.core.graph import Edge, Graph, Node, VariableDeclaration, effective_kind, port_key
from nodeflow.core.kinds import EdgeKind, NodeKind
from nodeflow.core.validation.cycles import cyclic_members, cyclic_nodes
from nodeflow.core.validation.reachability import control_adjacency, reachable_from

ResolutionStatus = Literal["resolved", "ambiguous", "unknown"]


@dataclass(frozen=True)
class VariableResolution:
    """Statically determined value of one variable.

    Attributes:
        current_value: Resolved value, or the declared default when none is known.
        status: ``resolved``, ``ambiguous`` or ``unknown``.
        source_node_id: Assignment node that produced the value, when exactly
            one reachable assignment exists.
        candidates: Reachable assignment node ids in execution order.
    """

    current_value: Any
    status: ResolutionStatus
    source_node_id: str | None = None
    candidates: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentValue": thaw(self.current_value),
            "sourceNodeId": self.source_node_id,
            "status": self.status,
        }


@dataclass(frozen=True)
class _Candidate:
    value: Any
    status: ResolutionStatus


_VALUE_PORT_SUFFIXES = ("value-in", "value")


def _is_value_input(node: Node, port_id: str | None) -> bool:
    """True if a data edge arriving at ``port_id`` feeds the assigned value."""
    if port_id is None:
        return True
    port = node.input_port(port_id)
    if port is not None:
        return not port.is_control
    return any(port_id == s or port_id.endswith(f"-{s}") for s in _VALUE_PORT_SUFFIXES)


class _Resolver:
    """Internal resolver state, one instance per resolve_variables() call."""

    __slots__ = (
        "_assignments",
        "_catalog",
        "_entangled",
        "_has_entry",
        "_memo",
        "_nodes",
        "_tainted",
        "_value_inputs",
        "_variables",
        "_visiting",
    )

    def __init__(
        self, graph: Graph, variables: Iterable[VariableDeclaration], catalog: NodeCatalog
    ) -> None:
        self._catalog = catalog
        self._nodes = graph.node_index()
        self._variables: dict[str, VariableDeclaration] = {}
        for variable in variables:
            self._variables.setdefault(variable.id, variable)
        self._memo: dict[str, VariableResolution] = {}
        self._visiting: set[str] = set()

        entries = [node.id for node in graph.nodes if node.kind is NodeKind.ENTRY]
        self._has_entry = bool(entries)
        adjacency = control_adjacency(graph.edges)
        order = reachable_from(entries, adjacency)

        # Nodes on a cycle, and everything they lead to, have no static order.
        cyclic = cyclic_nodes(order, graph.edges)
        tainted_roots = [node_id for node_id in order if node_id in cyclic]
        self._tainted = set(reachable_from(tainted_roots, adjacency))

        self._assignments: dict[str, list[Node]] = {}
        for node_id in order:
            node = self._nodes.get(node_id)
            if node is None or node.kind is not NodeKind.VARIABLE_ASSIGN:
                continue
            variable_id = node.variable_id
            if variable_id is not None:
                self._assignments.setdefault(variable_id, []).append(node)

        self._value_inputs: dict[str, list[Edge]] = {}
        for edge in graph.edges:
            if effective_kind(edge) is not EdgeKind.DATA:
                continue
            target = self._nodes.get(edge.target)
            if target is None or target.kind is not NodeKind.VARIABLE_ASSIGN:
                continue
            if _is_value_input(target, port_key(edge)[1]):
                self._value_inputs.setdefault(target.id, []).append(edge)

        # Variables whose values feed each other have no static order either.
        dependencies = self._dependencies()
        self._entangled = cyclic_members(dependencies, dependencies)

    def _dependencies(self) -> dict[str, list[str]]:
        """Map each declared variable to the variables its assignments read."""
        dependencies: dict[str, list[str]] = {}
        for variable_id, nodes in self._assignments.items():
            if variable_id not in self._variables:
                continue
            if any(node.id in self._tainted for node in nodes):
                continue
            for node in nodes:
                feeds = self._value_inputs.get(node.id, [])
                if len(feeds) != 1:
                    continue
                source = self._nodes.get(feeds[0].source)
                if source is None or not self._catalog.is_variable(source):
                    continue
                if source.variable_id is not None:
                    dependencies.setdefault(variable_id, []).append(source.variable_id)
        return dependencies

    # -- variable classification -------------------------------------------

    def resolve(self, variable_id: str) -> VariableResolution:
        cached = self._memo.get(variable_id)
        if cached is not None:
            return cached

        variable = self._variables.get(variable_id)
        if variable is None:
            return VariableResolution(None, "unknown")
        default = freeze(variable.default_value)
        if variable_id in self._visiting:
            # Dependency loops are classified up front; this only stops recursion.
            return VariableResolution(default, "unknown")

        self._visiting.add(variable_id)
        try:
            result = self._classify(variable, default)
        finally:
            self._visiting.discard(variable_id)
        self._memo[variable_id] = result
        return result

    def _classify(self, variable: VariableDeclaration, default: Any) -> VariableResolution:
        if not self._has_entry:
            return VariableResolution(default, "unknown")

        nodes = self._assignments.get(variable.id, [])
        if not nodes:
            return VariableResolution(default, "resolved")

        candidate_ids = tuple(node.id for node in nodes)
        if any(node_id in self._tainted for node_id in candidate_ids):
            return VariableResolution(default, "unknown", candidates=candidate_ids)
        if variable.id in self._entangled:
            return VariableResolution(default, "unknown", candidates=candidate_ids)

        produced = [self._produced(node, default) for node in nodes]
        if len(produced) == 1:
            only = produced[0]
            return VariableResolution(only.value, only.status, candidate_ids[0], candidate_ids)

        settled = [c.value for c in produced if c.status == "resolved"]
        conflicting = any(value != settled[0] for value in settled[1:])
        if conflicting or any(c.status == "ambiguous" for c in produced):
            return VariableResolution(produced[0].value, "ambiguous", candidates=candidate_ids)
        if any(c.status == "unknown" for c in produced):
            return VariableResolution(default, "unknown", candidates=candidate_ids)
        return VariableResolution(settled[0], "resolved", candidates=candidate_ids)

    # -- assignment values -------------------------------------------------

    def _produced(self, node: Node, default: Any) -> _Candidate:
        """Value an assignment node writes: data input, then override, then default."""
        feeds = self._value_inputs.get(node.id, [])
        if len(feeds) > 1:
            return _Candidate(default, "ambiguous")
        if feeds:
            return self._trace(feeds[0], default)

        present, value = node.override_value
        if present:
            return _Candidate(freeze(value), "resolved")
        return _Candidate(default, "resolved")

    def _trace(self, edge: Edge, default: Any) -> _Candidate:
        source = self._nodes.get(edge.source)
        if source is None:
            return _Candidate(default, "unknown")

        source_variable = source.variable_id
        if not self._catalog.is_variable(source) or source_variable is None:
            # Computed values need evaluation, which preview does not do.
            return _Candidate(default, "unknown")
        upstream = self.resolve(source_variable)
        if upstream.status == "unknown":
            return _Candidate(default, "unknown")
        return _Candidate(upstream.current_value, upstream.status)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_variables(
    graph: Graph,
    variables: Iterable[VariableDeclaration],
    *,
    catalog: NodeCatalog = DEFAULT_CATALOG,
) -> PMap:
    """Resolve the statically known value of every declared variable.

    Returns an immutable mapping of variable id to :class:`VariableResolution`
    with one entry per declaration; a variable is never omitted.

    ``catalog`` decides which data sources are variable nodes whose value can
    be followed upstream.
    """
    if not isinstance(graph, Graph):
        raise TypeError(f"resolve_variables() expects a Graph, got {type(graph).__name__}")
    declared = tuple(variables)
    resolver = _Resolver(graph, declared, catalog)
    return pmap({variable.id: resolver.resolve(variable.id) for variable in declared})


def resolution_to_dict(resolutions: Mapping[str, VariableResolution]) -> dict[str, Any]:
    """Convert resolver output into plain serializable records."""
    return {variable_id: record.to_dict() for variable_id, record in resolutions.items()}


__all__ = [
    "ResolutionStatus",
    "VariableResolution",
    "resolution_to_dict",
    "resolve_variables",
]
