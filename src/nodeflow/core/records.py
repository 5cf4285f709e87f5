"""Load graph snapshots from plain records.

The editor persists graphs as JSON-shaped mappings. Two layouts exist:

- Blueprint records: edges use ``sourceNode``/``sourcePort``/``targetNode``/
  ``targetPort`` and nodes carry their fine type and ports directly.
- Legacy records: nodes have a coarse ``type`` (``Start``, ``End``,
  ``Function``, ``Variable``, ``Custom``) and edges use ``source``/``target``.
  Either may nest the blueprint record (``blueprintNode``/``blueprintEdge``),
  which then supplies the fine type, ports and edge snapshot.

camelCase and snake_case keys are both accepted.
"""

from __future__ import annotations

import re
import warnings
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pyrsistent import freeze

from nodeflow.core.catalog import DEFAULT_CATALOG, LEGACY_TYPE_KINDS, NodeCatalog
from nodeflow.core.graph import Edge, Graph, LegacyEdge, Node, Port, VariableDeclaration
from nodeflow.core.kinds import DataKind, EdgeKind, NodeKind, PortDirection


class GraphRecordError(ValueError):
    """Raised when a graph or variable record cannot be loaded."""

    def __init__(self, message: str, where: str) -> None:
        super().__init__(f"{where}: {message}")
        self.where = where
        self.message = message


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _lookup(record: Mapping[str, Any], *names: str) -> Any:
    """Return the first present key among ``names`` and their snake_case forms."""
    for name in names:
        for key in (name, _snake(name)):
            if key in record:
                return record[key]
    return None


def _as_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise GraphRecordError(f"expected a mapping, got {type(value).__name__}", where)
    return value


def _as_sequence(value: Any, where: str) -> Sequence[Any]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise GraphRecordError(f"expected a list, got {type(value).__name__}", where)
    return value


def _require_id(record: Mapping[str, Any], where: str) -> str:
    value = record.get("id")
    if not isinstance(value, str) or not value:
        raise GraphRecordError("missing 'id'", where)
    return value


def _optional_text(value: Any, where: str, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise GraphRecordError(f"{field_name!r} must be a string", where)
    return value


def _edge_kind(value: Any, where: str) -> EdgeKind | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise GraphRecordError("'kind' must be a string", where)
    try:
        return EdgeKind.parse(value)
    except ValueError as exc:
        raise GraphRecordError(str(exc), where) from exc


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


def _load_ports(items: Any, direction: PortDirection, where: str) -> tuple[Port, ...]:
    ports: list[Port] = []
    for position, item in enumerate(_as_sequence(items, where)):
        port_where = f"{where} port #{position}"
        record = _as_mapping(item, port_where)
        data_kind = DataKind.parse(_lookup(record, "dataType", "dataKind"))
        variable_id = _optional_text(_lookup(record, "variableId"), port_where, "variableId")
        ports.append(Port(_require_id(record, port_where), data_kind, direction, variable_id))
    return tuple(ports)


def _load_properties(value: Any, where: str) -> Any:
    if value is None:
        return freeze({})
    record = _as_mapping(value, f"{where} properties")
    return freeze({_snake(str(key)): item for key, item in record.items()})


def _node_kind(type_name: str, node_id: str, catalog: NodeCatalog) -> tuple[str, NodeKind]:
    spec = catalog.get(type_name)
    if spec is not None:
        return type_name, spec.kind
    legacy = LEGACY_TYPE_KINDS.get(type_name)
    if legacy is not None:
        return type_name, legacy
    warnings.warn(
        f"Unknown node type {type_name!r} on node {node_id!r}; loading it as Custom.",
        RuntimeWarning,
        stacklevel=4,
    )
    return "Custom", NodeKind.CUSTOM


def _load_node(item: Any, position: int, catalog: NodeCatalog) -> Node:
    where = f"Node #{position}"
    record = _as_mapping(item, where)
    node_id = _require_id(record, where)
    where = f"Node {node_id!r}"

    nested = _lookup(record, "blueprintNode")
    detail = _as_mapping(nested, f"{where} blueprintNode") if nested is not None else record

    raw_type = _lookup(detail, "type") or record.get("type") or "Custom"
    if not isinstance(raw_type, str):
        raise GraphRecordError("'type' must be a string", where)
    type_name, kind = _node_kind(raw_type, node_id, catalog)

    if "inputs" in detail or "outputs" in detail:
        inputs = _load_ports(detail.get("inputs"), PortDirection.INPUT, where)
        outputs = _load_ports(detail.get("outputs"), PortDirection.OUTPUT, where)
    else:
        spec = catalog.get(type_name)
        inputs = spec.inputs if spec is not None else ()
        outputs = spec.outputs if spec is not None else ()

    label = _lookup(detail, "customLabel") or record.get("label") or detail.get("label") or ""
    properties = _lookup(detail, "properties")
    if properties is None:
        properties = record.get("properties")

    return Node(
        id=node_id,
        kind=kind,
        label=str(label),
        type_name=type_name,
        inputs=inputs,
        outputs=outputs,
        properties=_load_properties(properties, where),
    )


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------


def _load_legacy_edge(item: Any, where: str) -> LegacyEdge:
    record = _as_mapping(item, f"{where} blueprintEdge")
    source = _lookup(record, "sourceNode", "source")
    target = _lookup(record, "targetNode", "target")
    if not isinstance(source, str) or not isinstance(target, str):
        raise GraphRecordError("blueprintEdge needs source and target nodes", where)
    return LegacyEdge(
        id=str(record.get("id", "")),
        source=source,
        target=target,
        source_port=_optional_text(_lookup(record, "sourcePort"), where, "sourcePort"),
        target_port=_optional_text(_lookup(record, "targetPort"), where, "targetPort"),
        kind=_edge_kind(record.get("kind"), where),
    )


def _load_edge(item: Any, position: int) -> Edge:
    where = f"Edge #{position}"
    record = _as_mapping(item, where)
    edge_id = _require_id(record, where)
    where = f"Edge {edge_id!r}"

    nested = _lookup(record, "blueprintEdge")
    legacy = _load_legacy_edge(nested, where) if nested is not None else None

    source = _lookup(record, "sourceNode", "source")
    target = _lookup(record, "targetNode", "target")
    if source is None and legacy is not None:
        source = legacy.source
    if target is None and legacy is not None:
        target = legacy.target
    if not isinstance(source, str) or not isinstance(target, str):
        raise GraphRecordError("missing source or target node", where)

    return Edge(
        id=edge_id,
        source=source,
        target=target,
        source_port=_optional_text(_lookup(record, "sourcePort"), where, "sourcePort"),
        target_port=_optional_text(_lookup(record, "targetPort"), where, "targetPort"),
        kind=_edge_kind(record.get("kind"), where),
        legacy=legacy,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def graph_from_records(
    record: Mapping[str, Any], *, catalog: NodeCatalog = DEFAULT_CATALOG
) -> Graph:
    """Build a :class:`Graph` from a ``{"nodes": [...], "edges": [...]}`` record.

    Node types are looked up in ``catalog``; nodes saved without ports get the
    catalog's default port layout. Unknown types load as ``Custom`` with a
    ``RuntimeWarning``.

    Raises:
        GraphRecordError: If the record, a node or an edge is malformed.
    """
    record = _as_mapping(record, "Graph")
    # _node_kind warns with stacklevel=4, so no comprehension frames in between.
    nodes: list[Node] = []
    for position, item in enumerate(_as_sequence(record.get("nodes"), "Graph nodes")):
        nodes.append(_load_node(item, position, catalog))
    edges: list[Edge] = []
    for position, item in enumerate(_as_sequence(record.get("edges"), "Graph edges")):
        edges.append(_load_edge(item, position))
    return Graph.of(nodes, edges)


def variables_from_records(items: Iterable[Any]) -> tuple[VariableDeclaration, ...]:
    """Build variable declarations from ``{"id", "name", "dataType", "defaultValue"}`` records.

    A record without a default value starts at its data kind's zero value.
    """
    declarations: list[VariableDeclaration] = []
    for position, item in enumerate(items):
        where = f"Variable #{position}"
        record = _as_mapping(item, where)
        variable_id = _require_id(record, where)
        data_kind = DataKind.parse(_lookup(record, "dataType", "dataKind"))
        default = _lookup(record, "defaultValue")
        if default is None:
            default = data_kind.zero_value()
        declarations.append(
            VariableDeclaration(
                id=variable_id,
                name=str(record.get("name") or variable_id),
                data_kind=data_kind,
                default_value=freeze(default),
            )
        )
    return tuple(declarations)


__all__ = ["GraphRecordError", "graph_from_records", "variables_from_records"]
