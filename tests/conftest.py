"""Pytest configuration and test helpers."""

from typing import Any

from pyrsistent import pmap

from nodeflow.core import DataKind, Edge, EdgeKind, Graph, Node, NodeKind, Port, PortDirection

EXEC_IN = Port("exec-in", DataKind.CONTROL, PortDirection.INPUT)
EXEC_OUT = Port("exec-out", DataKind.CONTROL, PortDirection.OUTPUT)

_UNSET: Any = object()


def entry(node_id: str = "start", label: str = "Start") -> Node:
    return Node(node_id, NodeKind.ENTRY, label, "Start", outputs=(EXEC_OUT,))


def exit_node(node_id: str = "end", label: str = "End") -> Node:
    return Node(node_id, NodeKind.EXIT, label, "End", inputs=(EXEC_IN,))


def operation(node_id: str, label: str | None = None) -> Node:
    """Function node with one control input and one control output."""
    return Node(
        node_id,
        NodeKind.OPERATION,
        label if label is not None else node_id,
        "Function",
        inputs=(EXEC_IN,),
        outputs=(EXEC_OUT,),
    )


def get_var(node_id: str, variable_id: str, data_kind: DataKind = DataKind.ANY) -> Node:
    """Variable read node: a single data output, no control ports."""
    return Node(
        node_id,
        NodeKind.VARIABLE_GET,
        f"Get {variable_id}",
        "GetVariable",
        outputs=(Port("value-out", data_kind, PortDirection.OUTPUT),),
        properties=pmap({"variable_id": variable_id}),
    )


def variable_node(node_id: str, variable_id: str | None = None) -> Node:
    """Coarse Variable node as written by older records."""
    properties = pmap({"variable_id": variable_id}) if variable_id else pmap()
    return Node(
        node_id,
        NodeKind.VARIABLE,
        node_id,
        "Variable",
        outputs=(Port("value-out", DataKind.ANY, PortDirection.OUTPUT),),
        properties=properties,
    )


def set_var(
    node_id: str,
    variable_id: str,
    value: Any = _UNSET,
    *,
    data_kind: DataKind = DataKind.ANY,
) -> Node:
    """Variable assignment node; ``value`` becomes a manual input override.

    Without ``value`` the node writes its data input, or the variable's
    default when nothing is connected.
    """
    properties: dict[str, Any] = {"variable_id": variable_id}
    if value is not _UNSET:
        properties["input_value"] = value
        properties["input_value_is_override"] = True
    return Node(
        node_id,
        NodeKind.VARIABLE_ASSIGN,
        f"Set {variable_id}",
        "SetVariable",
        inputs=(EXEC_IN, Port("value-in", data_kind, PortDirection.INPUT)),
        outputs=(EXEC_OUT, Port("value-out", data_kind, PortDirection.OUTPUT)),
        properties=pmap(properties),
    )


def control(
    edge_id: str,
    source: str,
    target: str,
    source_port: str = "exec-out",
    target_port: str = "exec-in",
) -> Edge:
    return Edge(edge_id, source, target, source_port, target_port, EdgeKind.CONTROL)


def data(
    edge_id: str,
    source: str,
    target: str,
    source_port: str = "value-out",
    target_port: str = "value-in",
) -> Edge:
    return Edge(edge_id, source, target, source_port, target_port, EdgeKind.DATA)


def chain(*node_ids: str, prefix: str = "c") -> list[Edge]:
    """Control edges linking ``node_ids`` in order, named ``c1``, ``c2``, ..."""
    return [
        control(f"{prefix}{position}", source, target)
        for position, (source, target) in enumerate(zip(node_ids, node_ids[1:]), start=1)
    ]


def graph(nodes: list[Node], edges: list[Edge] | tuple[Edge, ...] = ()) -> Graph:
    return Graph.of(nodes, edges)
