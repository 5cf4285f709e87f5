"""Immutable graph model for blueprint programs.

A Graph is a snapshot handed in by the editor: analysis passes read it and
never change it. Nodes and edges keep their declaration order, which is the
deterministic tie-break for every traversal.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, cast

from pyrsistent import PMap, PRecord, pmap, pvector_field

from nodeflow.core.kinds import DataKind, EdgeKind, NodeKind, PortDirection

# ---------------------------------------------------------------------------
# Ports and nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Port:
    """One connection point on a node.

    Attributes:
        id: Port identifier, unique within its node.
        data_kind: ``DataKind.CONTROL`` for execution ports, a data kind otherwise.
        direction: Whether edges arrive at or leave from this port.
        variable_id: Declared variable a Get/Assign port is bound to, if any.
    """

    id: str
    data_kind: DataKind = DataKind.ANY
    direction: PortDirection = PortDirection.INPUT
    variable_id: str | None = None

    @property
    def is_control(self) -> bool:
        return self.data_kind.is_control


@dataclass(frozen=True)
class Node:
    """A single operation or value in the graph.

    Attributes:
        id: Unique node identifier.
        kind: Structural role (entry, exit, variable read, ...).
        label: Display label, used in messages.
        type_name: Catalog type name (``"Branch"``, ``"Add"``, ...).
        inputs: Input ports in declaration order.
        outputs: Output ports in declaration order.
        properties: Immutable per-node settings such as ``variable_id``.
    """

    id: str
    kind: NodeKind
    label: str = ""
    type_name: str = "Custom"
    inputs: tuple[Port, ...] = ()
    outputs: tuple[Port, ...] = ()
    properties: PMap = field(default_factory=pmap)

    @property
    def ports(self) -> tuple[Port, ...]:
        return self.inputs + self.outputs

    @property
    def has_control_ports(self) -> bool:
        return any(port.is_control for port in self.ports)

    @property
    def variable_id(self) -> str | None:
        """Variable this node reads or writes, from properties first, then ports."""
        value = self.properties.get("variable_id")
        if isinstance(value, str) and value:
            return value
        for port in self.ports:
            if port.variable_id:
                return port.variable_id
        return None

    @property
    def override_value(self) -> tuple[bool, Any]:
        """Return ``(present, value)`` for a manual input override."""
        if self.properties.get("input_value_is_override") is not True:
            return False, None
        if "input_value" not in self.properties:
            return False, None
        return True, self.properties["input_value"]

    def input_port(self, port_id: str) -> Port | None:
        for port in self.inputs:
            if port.id == port_id:
                return port
        return None

    def output_port(self, port_id: str) -> Port | None:
        for port in self.outputs:
            if port.id == port_id:
                return port
        return None


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LegacyEdge:
    """Lower-level edge snapshot nested inside edges from older records."""

    id: str
    source: str
    target: str
    source_port: str | None = None
    target_port: str | None = None
    kind: EdgeKind | None = None


@dataclass(frozen=True)
class Edge:
    """Directed link from an output port to an input port.

    ``kind`` is ``None`` when the record did not state one; use
    :func:`effective_kind` to read the kind that analysis applies.
    """

    id: str
    source: str
    target: str
    source_port: str | None = None
    target_port: str | None = None
    kind: EdgeKind | None = None
    legacy: LegacyEdge | None = None

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


def effective_kind(edge: Edge) -> EdgeKind:
    """Return the kind an edge is analyzed as.

    Resolution has two steps. The edge's own kind wins. Otherwise the nested
    legacy snapshot's kind applies. Anything else is a control edge.
    """
    if edge.kind is not None:
        return edge.kind
    return _legacy_kind(edge)


def _legacy_kind(edge: Edge) -> EdgeKind:
    if edge.legacy is not None and edge.legacy.kind is not None:
        return edge.legacy.kind
    return EdgeKind.CONTROL


def port_key(edge: Edge) -> tuple[str | None, str | None]:
    """Return ``(source_port, target_port)``, falling back to the legacy snapshot."""
    source_port = edge.source_port
    target_port = edge.target_port
    if edge.legacy is not None:
        if source_port is None:
            source_port = edge.legacy.source_port
        if target_port is None:
            target_port = edge.legacy.target_port
    return source_port, target_port


# ---------------------------------------------------------------------------
# Graph and variables
# ---------------------------------------------------------------------------


class Graph(PRecord):
    """Immutable snapshot of a blueprint graph.

    Attributes:
        nodes: Nodes in declaration order.
        edges: Edges in declaration order.
    """

    nodes = pvector_field(Node)
    edges = pvector_field(Edge)

    @classmethod
    def of(cls, nodes: Iterable[Node], edges: Iterable[Edge] = ()) -> Graph:
        """Build a Graph from plain sequences."""
        return cls(nodes=list(nodes), edges=list(edges))

    @classmethod
    def default(cls) -> Graph:
        """Starter graph: Entry -> Operation -> Exit."""
        start = Node(
            id="node-start",
            kind=NodeKind.ENTRY,
            label="Start",
            type_name="Start",
            outputs=(Port("exec-out", DataKind.CONTROL, PortDirection.OUTPUT),),
        )
        func = Node(
            id="node-func",
            kind=NodeKind.OPERATION,
            label="Function",
            type_name="Function",
            inputs=(Port("exec-in", DataKind.CONTROL, PortDirection.INPUT),),
            outputs=(Port("exec-out", DataKind.CONTROL, PortDirection.OUTPUT),),
        )
        end = Node(
            id="node-end",
            kind=NodeKind.EXIT,
            label="End",
            type_name="End",
            inputs=(Port("exec-in", DataKind.CONTROL, PortDirection.INPUT),),
        )
        edges = (
            Edge("edge-1", "node-start", "node-func", "exec-out", "exec-in", EdgeKind.CONTROL),
            Edge("edge-2", "node-func", "node-end", "exec-out", "exec-in", EdgeKind.CONTROL),
        )
        return cls.of((start, func, end), edges)

    def node_index(self) -> dict[str, Node]:
        """Map node ids to nodes; the first node with a given id wins."""
        index: dict[str, Node] = {}
        for node in self.nodes:
            index.setdefault(node.id, node)
        return index

    def nodes_of_kind(self, kind: NodeKind) -> list[Node]:
        return [node for node in self.nodes if node.kind is kind]

    def with_edge(self, edge: Edge) -> Graph:
        """Return a new graph with ``edge`` appended. Original unchanged."""
        return cast(Graph, self.set(edges=self.edges.append(edge)))


@dataclass(frozen=True)
class VariableDeclaration:
    """A declared program variable.

    Attributes:
        id: Variable identifier referenced by Get/Assign nodes.
        name: Display name.
        data_kind: Declared data kind.
        default_value: Value before any assignment (frozen).
    """

    id: str
    name: str
    data_kind: DataKind = DataKind.ANY
    default_value: Any = None


__all__ = [
    "Edge",
    "Graph",
    "LegacyEdge",
    "Node",
    "Port",
    "VariableDeclaration",
    "effective_kind",
    "port_key",
]
