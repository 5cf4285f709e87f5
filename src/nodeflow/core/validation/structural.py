"""Structural validation for blueprint graphs.

Checks that a graph is a legal program before any code is generated from it:
one Entry, at least one Exit, legal control/data edges, full reachability
and no control-flow cycles. Every violation becomes an issue; nothing is
raised for a malformed graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from nodeflow.core.catalog import DEFAULT_CATALOG, NodeCatalog
from nodeflow.core.graph import Edge, Graph, Node, effective_kind, port_key
from nodeflow.core.kinds import EdgeKind, NodeKind
from nodeflow.core.validation.cycles import find_cycle
from nodeflow.core.validation.reachability import reachable

# ---------------------------------------------------------------------------
# Public types
# ---------------------------------------------------------------------------

IssueSeverity = Literal["error", "warning"]

# ---------------------------------------------------------------------------
# Issue codes
# ---------------------------------------------------------------------------

GRAPH_EMPTY = "GRAPH_EMPTY"
ENTRY_MISSING = "ENTRY_MISSING"
ENTRY_MULTIPLE = "ENTRY_MULTIPLE"
EXIT_MISSING = "EXIT_MISSING"
EDGE_MISSING_NODE = "EDGE_MISSING_NODE"
EDGE_SELF_LOOP = "EDGE_SELF_LOOP"
CONTROL_FROM_EXIT = "CONTROL_FROM_EXIT"
CONTROL_INTO_ENTRY = "CONTROL_INTO_ENTRY"
DATA_TOUCHES_ENTRY = "DATA_TOUCHES_ENTRY"
DATA_FROM_EXIT = "DATA_FROM_EXIT"
NO_CONTROL_FLOW = "NO_CONTROL_FLOW"
EDGE_DUPLICATE = "EDGE_DUPLICATE"
ENTRY_HAS_INCOMING = "ENTRY_HAS_INCOMING"
ENTRY_NO_OUTGOING = "ENTRY_NO_OUTGOING"
EXIT_HAS_OUTGOING = "EXIT_HAS_OUTGOING"
EXIT_NO_INCOMING = "EXIT_NO_INCOMING"
NODE_UNREACHABLE = "NODE_UNREACHABLE"
CONTROL_CYCLE = "CONTROL_CYCLE"
DATA_VARIABLE_TO_VARIABLE = "DATA_VARIABLE_TO_VARIABLE"


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    severity: IssueSeverity
    message: str
    nodes: tuple[str, ...] = ()
    edges: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
        }
        if self.nodes:
            record["nodes"] = list(self.nodes)
        if self.edges:
            record["edges"] = list(self.edges)
        return record


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate_graph`.

    ``errors`` and ``warnings`` hold the issue messages in rule order;
    ``issues`` holds the same findings with codes and node/edge ids.
    """

    ok: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    def summary(self) -> str:
        parts: list[str] = []
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warning(s)")
        if not parts:
            return "No findings."
        return ", ".join(parts) + "."

    def codes(self) -> tuple[str, ...]:
        return tuple(issue.code for issue in self.issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


# ---------------------------------------------------------------------------
# Validator implementation
# ---------------------------------------------------------------------------


class _Validator:
    """Internal validator state, one instance per validate_graph() call."""

    __slots__ = ("_catalog", "_graph", "_issues", "_nodes")

    def __init__(self, graph: Graph, catalog: NodeCatalog) -> None:
        self._graph = graph
        self._catalog = catalog
        self._nodes = graph.node_index()
        self._issues: list[ValidationIssue] = []

    def _push(
        self,
        code: str,
        severity: IssueSeverity,
        message: str,
        *,
        nodes: tuple[str, ...] | list[str] = (),
        edges: tuple[str, ...] | list[str] = (),
    ) -> None:
        self._issues.append(
            ValidationIssue(code, severity, message, nodes=tuple(nodes), edges=tuple(edges))
        )

    # -- public entry point ------------------------------------------------

    def run(self) -> ValidationResult:
        graph = self._graph
        entries = graph.nodes_of_kind(NodeKind.ENTRY)
        exits = graph.nodes_of_kind(NodeKind.EXIT)

        self._check_entry_count(entries)
        if not exits:
            self._push(EXIT_MISSING, "error", "Graph has no Exit node.")

        legal, control, data = self._classify_edges()

        if len(graph.nodes) > 1 and not control:
            self._push(NO_CONTROL_FLOW, "error", "Graph has no control-flow connections.")

        self._check_duplicates(legal)

        entry = entries[0] if len(entries) == 1 else None
        if entry is not None:
            self._check_entry_edges(entry, control)
        for exit_node in exits:
            self._check_exit_edges(exit_node, control)

        if entry is not None and control:
            self._check_reachability(entry, control)

        cycle = find_cycle(graph.nodes, control)
        if cycle is not None:
            self._push(
                CONTROL_CYCLE,
                "error",
                f"Control-flow cycle detected: {' -> '.join(cycle)}.",
                nodes=cycle,
            )

        self._check_variable_links(data)
        return self._result()

    def _result(self) -> ValidationResult:
        errors = tuple(i.message for i in self._issues if i.severity == "error")
        warnings = tuple(i.message for i in self._issues if i.severity == "warning")
        return ValidationResult(
            ok=not errors, errors=errors, warnings=warnings, issues=tuple(self._issues)
        )

    # -- entry / exit invariants -------------------------------------------

    def _check_entry_count(self, entries: list[Node]) -> None:
        if not entries:
            self._push(ENTRY_MISSING, "error", "Graph has no Entry node.")
        elif len(entries) > 1:
            self._push(
                ENTRY_MULTIPLE,
                "error",
                f"Found {len(entries)} Entry nodes; only one Entry node allowed.",
                nodes=[node.id for node in entries],
            )

    def _check_entry_edges(self, entry: Node, control: list[Edge]) -> None:
        if any(edge.target == entry.id for edge in control):
            self._push(
                ENTRY_HAS_INCOMING,
                "error",
                f'Entry node "{entry.label}" cannot have incoming control edges.',
                nodes=[entry.id],
            )
        if not any(edge.source == entry.id for edge in control):
            self._push(
                ENTRY_NO_OUTGOING,
                "warning",
                f'Entry node "{entry.label}" has no outgoing control edges.',
                nodes=[entry.id],
            )

    def _check_exit_edges(self, exit_node: Node, control: list[Edge]) -> None:
        if any(edge.source == exit_node.id for edge in control):
            self._push(
                EXIT_HAS_OUTGOING,
                "error",
                f'Exit node "{exit_node.label}" cannot have outgoing control edges.',
                nodes=[exit_node.id],
            )
        if not any(edge.target == exit_node.id for edge in control):
            self._push(
                EXIT_NO_INCOMING,
                "warning",
                f'Exit node "{exit_node.label}" has no incoming control edges.',
                nodes=[exit_node.id],
            )

    # -- edge legality -----------------------------------------------------

    def _classify_edges(self) -> tuple[list[Edge], list[Edge], list[Edge]]:
        """Split legal edges by effective kind, reporting illegal ones.

        Returns ``(legal, control, data)``, each in declaration order.
        """
        legal: list[Edge] = []
        control: list[Edge] = []
        data: list[Edge] = []

        for position, edge in enumerate(self._graph.edges, start=1):
            source = self._nodes.get(edge.source)
            target = self._nodes.get(edge.target)
            if source is None or target is None:
                self._push(
                    EDGE_MISSING_NODE,
                    "error",
                    f"Edge #{position} ({edge.id}) references missing nodes.",
                    edges=[edge.id],
                )
                continue

            if edge.is_self_loop:
                self._push(
                    EDGE_SELF_LOOP,
                    "error",
                    f"Edge {edge.id} creates a self-loop on {edge.source}.",
                    edges=[edge.id],
                    nodes=[edge.source],
                )
                continue

            legal.append(edge)
            match effective_kind(edge):
                case EdgeKind.CONTROL:
                    control.append(edge)
                    self._check_control_edge(edge, source, target)
                case EdgeKind.DATA:
                    data.append(edge)
                    self._check_data_edge(edge, source, target)

        return legal, control, data

    def _check_control_edge(self, edge: Edge, source: Node, target: Node) -> None:
        if source.kind is NodeKind.EXIT:
            self._push(
                CONTROL_FROM_EXIT,
                "error",
                f"Control edge {edge.source} -> {edge.target} cannot start from "
                f'Exit node "{source.label}".',
                edges=[edge.id],
                nodes=[source.id],
            )
        if target.kind is NodeKind.ENTRY:
            self._push(
                CONTROL_INTO_ENTRY,
                "error",
                f"Control edge {edge.source} -> {edge.target} cannot target "
                f'Entry node "{target.label}".',
                edges=[edge.id],
                nodes=[target.id],
            )

    def _check_data_edge(self, edge: Edge, source: Node, target: Node) -> None:
        if source.kind is NodeKind.ENTRY or target.kind is NodeKind.ENTRY:
            self._push(
                DATA_TOUCHES_ENTRY,
                "error",
                f"Data edge {edge.source} -> {edge.target} cannot involve Entry nodes.",
                edges=[edge.id],
                nodes=[source.id, target.id],
            )
        if source.kind is NodeKind.EXIT:
            self._push(
                DATA_FROM_EXIT,
                "error",
                f"Data edge {edge.source} -> {edge.target} cannot originate from Exit nodes.",
                edges=[edge.id],
                nodes=[source.id],
            )

    def _check_duplicates(self, edges: list[Edge]) -> None:
        seen: set[tuple[str, str, EdgeKind, str | None, str | None]] = set()
        for edge in edges:
            kind = effective_kind(edge)
            source_port, target_port = port_key(edge)
            signature = (edge.source, edge.target, kind, source_port, target_port)
            if signature in seen:
                self._push(
                    EDGE_DUPLICATE,
                    "warning",
                    f"Duplicate edge {edge.source} -> {edge.target} ({kind.value}).",
                    edges=[edge.id],
                )
            else:
                seen.add(signature)

    # -- graph-wide checks -------------------------------------------------

    def _check_reachability(self, entry: Node, control: list[Edge]) -> None:
        visited = reachable(entry.id, control)
        unreachable = [
            node
            for node in self._graph.nodes
            if node.kind is not NodeKind.ENTRY
            and node.id not in visited
            and not self._is_pure_data(node)
        ]
        if unreachable:
            labels = ", ".join(node.label or node.id for node in unreachable)
            self._push(
                NODE_UNREACHABLE,
                "error",
                f"Unreachable nodes: {labels}.",
                nodes=[node.id for node in unreachable],
            )

    def _is_pure_data(self, node: Node) -> bool:
        return self._catalog.is_variable(node) and not node.has_control_ports

    def _check_variable_links(self, data: list[Edge]) -> None:
        for edge in data:
            source = self._nodes[edge.source]
            target = self._nodes[edge.target]
            if not (self._catalog.is_variable(source) and self._catalog.is_variable(target)):
                continue
            if self._catalog.is_read_into_write(source, target):
                continue
            self._push(
                DATA_VARIABLE_TO_VARIABLE,
                "warning",
                f"Data edge {edge.source} -> {edge.target} connects two Variable nodes.",
                edges=[edge.id],
                nodes=[source.id, target.id],
            )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_graph(graph: Graph, *, catalog: NodeCatalog = DEFAULT_CATALOG) -> ValidationResult:
    """Validate the structure of a blueprint graph.

    Rules are evaluated in a fixed order and all violations are collected.
    An empty graph short-circuits with a single error. Warnings never make
    the result fail; ``ok`` is true exactly when there are no errors.

    ``catalog`` supplies node categories and the recognized variable
    read-into-write pairings.
    """
    if not isinstance(graph, Graph):
        raise TypeError(f"validate_graph() expects a Graph, got {type(graph).__name__}")

    if not graph.nodes:
        message = "Graph must contain at least one node."
        return ValidationResult(
            ok=False,
            errors=(message,),
            issues=(ValidationIssue(GRAPH_EMPTY, "error", message),),
        )

    return _Validator(graph, catalog).run()


__all__ = [
    "CONTROL_CYCLE",
    "CONTROL_FROM_EXIT",
    "CONTROL_INTO_ENTRY",
    "DATA_FROM_EXIT",
    "DATA_TOUCHES_ENTRY",
    "DATA_VARIABLE_TO_VARIABLE",
    "EDGE_DUPLICATE",
    "EDGE_MISSING_NODE",
    "EDGE_SELF_LOOP",
    "ENTRY_HAS_INCOMING",
    "ENTRY_MISSING",
    "ENTRY_MULTIPLE",
    "ENTRY_NO_OUTGOING",
    "EXIT_HAS_OUTGOING",
    "EXIT_MISSING",
    "EXIT_NO_INCOMING",
    "GRAPH_EMPTY",
    "IssueSeverity",
    "NODE_UNREACHABLE",
    "NO_CONTROL_FLOW",
    "ValidationIssue",
    "ValidationResult",
    "validate_graph",
]
