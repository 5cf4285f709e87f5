"""Tests for loading graphs and variables from plain records."""

from __future__ import annotations

import pytest
from pyrsistent import pvector

from nodeflow.core import (
    DataKind,
    EdgeKind,
    GraphRecordError,
    NodeKind,
    effective_kind,
    graph_from_records,
    resolve_variables,
    validate_graph,
    variables_from_records,
)


def _blueprint_edge(
    edge_id, source, target, kind="execution", source_port="exec-out", target_port="exec-in"
):
    return {
        "id": edge_id,
        "sourceNode": source,
        "sourcePort": source_port,
        "targetNode": target,
        "targetPort": target_port,
        "kind": kind,
    }


BLUEPRINT_RECORD = {
    "nodes": [
        {"id": "start", "label": "Start", "type": "Start"},
        {
            "id": "set-x",
            "label": "Set x",
            "type": "SetVariable",
            "properties": {"variableId": "x", "inputValue": 5, "inputValueIsOverride": True},
        },
        {"id": "end", "label": "End", "type": "End"},
    ],
    "edges": [
        _blueprint_edge("e1", "start", "set-x"),
        _blueprint_edge("e2", "set-x", "end"),
    ],
}


# Legacy layout: coarse node types with the blueprint record nested inside.
LEGACY_RECORD = {
    "nodes": [
        {
            "id": "start",
            "label": "Start",
            "type": "Start",
            "blueprintNode": {
                "type": "Start",
                "outputs": [{"id": "exec-out", "dataType": "execution"}],
            },
        },
        {
            "id": "get-var",
            "label": "Get",
            "type": "Variable",
            "blueprintNode": {
                "type": "GetVariable",
                "outputs": [{"id": "value-out", "dataType": "int32"}],
            },
        },
        {
            "id": "set-var",
            "label": "Set",
            "type": "Variable",
            "blueprintNode": {
                "type": "SetVariable",
                "inputs": [
                    {"id": "exec-in", "dataType": "execution"},
                    {"id": "value-in", "dataType": "int32"},
                ],
                "outputs": [{"id": "exec-out", "dataType": "execution"}],
            },
        },
        {
            "id": "end",
            "label": "End",
            "type": "End",
            "blueprintNode": {
                "type": "End",
                "inputs": [{"id": "exec-in", "dataType": "execution"}],
            },
        },
    ],
    "edges": [
        {
            "id": "e1",
            "source": "start",
            "target": "set-var",
            "kind": "execution",
            "blueprintEdge": _blueprint_edge("e1", "start", "set-var"),
        },
        {
            "id": "e2",
            "source": "get-var",
            "target": "set-var",
            "blueprintEdge": _blueprint_edge(
                "e2", "get-var", "set-var", "data", "value-out", "value-in"
            ),
        },
        {
            "id": "e3",
            "source": "set-var",
            "target": "end",
            "kind": "execution",
            "blueprintEdge": _blueprint_edge("e3", "set-var", "end"),
        },
    ],
}


# ---------------------------------------------------------------------------
# Blueprint layout
# ---------------------------------------------------------------------------


class TestBlueprintLayout:
    def test_loads_and_validates(self):
        graph = graph_from_records(BLUEPRINT_RECORD)
        assert [node.kind for node in graph.nodes] == [
            NodeKind.ENTRY,
            NodeKind.VARIABLE_ASSIGN,
            NodeKind.EXIT,
        ]
        assert all(edge.kind is EdgeKind.CONTROL for edge in graph.edges)
        assert validate_graph(graph).ok

    def test_missing_ports_come_from_catalog(self):
        node = graph_from_records(BLUEPRINT_RECORD).nodes[1]
        assert [port.id for port in node.inputs] == ["exec-in", "value"]
        assert node.inputs[0].is_control
        assert node.has_control_ports

    def test_properties_are_normalized(self):
        node = graph_from_records(BLUEPRINT_RECORD).nodes[1]
        assert node.variable_id == "x"
        assert node.override_value == (True, 5)

    def test_resolves_override(self):
        graph = graph_from_records(BLUEPRINT_RECORD)
        variables = variables_from_records([{"id": "x", "name": "x", "dataType": "int32"}])
        record = resolve_variables(graph, variables)["x"]
        assert record.current_value == 5
        assert record.source_node_id == "set-x"

    def test_snake_case_keys(self):
        record = {
            "nodes": [{"id": "a", "type": "Start"}, {"id": "b", "type": "End"}],
            "edges": [
                {
                    "id": "e",
                    "source_node": "a",
                    "source_port": "exec-out",
                    "target_node": "b",
                    "target_port": "exec-in",
                    "kind": "control",
                }
            ],
        }
        edge = graph_from_records(record).edges[0]
        assert (edge.source, edge.source_port, edge.target, edge.target_port) == (
            "a",
            "exec-out",
            "b",
            "exec-in",
        )

    def test_edge_kind_absent_stays_unset(self):
        record = {
            "nodes": [{"id": "a", "type": "Start"}, {"id": "b", "type": "End"}],
            "edges": [{"id": "e", "source": "a", "target": "b"}],
        }
        edge = graph_from_records(record).edges[0]
        assert edge.kind is None
        assert effective_kind(edge) is EdgeKind.CONTROL

    def test_custom_label_wins(self):
        record = {"nodes": [{"id": "a", "type": "Function", "label": "F", "customLabel": "Mine"}]}
        assert graph_from_records(record).nodes[0].label == "Mine"


# ---------------------------------------------------------------------------
# Legacy layout
# ---------------------------------------------------------------------------


class TestLegacyLayout:
    def test_nested_node_supplies_fine_type(self):
        graph = graph_from_records(LEGACY_RECORD)
        by_id = graph.node_index()
        assert by_id["get-var"].kind is NodeKind.VARIABLE_GET
        assert by_id["get-var"].type_name == "GetVariable"
        assert by_id["set-var"].kind is NodeKind.VARIABLE_ASSIGN
        assert by_id["get-var"].outputs[0].data_kind is DataKind.INT32

    def test_nested_edge_supplies_kind_and_ports(self):
        edge = graph_from_records(LEGACY_RECORD).edges[1]
        assert edge.kind is None
        assert edge.legacy is not None
        assert effective_kind(edge) is EdgeKind.DATA
        assert edge.legacy.target_port == "value-in"

    def test_get_into_set_validates_cleanly(self):
        result = validate_graph(graph_from_records(LEGACY_RECORD))
        assert result.ok
        assert result.warnings == ()

    def test_coarse_type_without_nested_record(self):
        record = {"nodes": [{"id": "v", "type": "Variable", "label": "Speed"}]}
        node = graph_from_records(record).nodes[0]
        assert node.kind is NodeKind.VARIABLE
        assert not node.has_control_ports


# ---------------------------------------------------------------------------
# Unknown types and malformed records
# ---------------------------------------------------------------------------


def test_unknown_type_loads_as_custom():
    with pytest.warns(RuntimeWarning, match="Unknown node type 'Teleport'"):
        graph = graph_from_records({"nodes": [{"id": "t", "type": "Teleport"}]})
    node = graph.nodes[0]
    assert node.kind is NodeKind.CUSTOM
    assert node.type_name == "Custom"


def test_unknown_type_warning_points_at_caller():
    with pytest.warns(RuntimeWarning) as caught:
        graph_from_records({"nodes": [{"id": "t", "type": "Teleport"}]})
    assert caught[0].filename == __file__


@pytest.mark.parametrize(
    ("record", "message"),
    [
        ({"nodes": [{"type": "Start"}]}, "missing 'id'"),
        ({"nodes": ["start"]}, "expected a mapping"),
        ({"nodes": "start"}, "expected a list"),
        ({"edges": [{"id": "e", "source": "a"}]}, "missing source or target"),
        ({"edges": [{"id": "e", "source": "a", "target": "b", "kind": "wire"}]}, "edge kind"),
        ({"nodes": [{"id": "a", "type": "Start", "inputs": [{"dataType": "int32"}]}]}, "port #0"),
    ],
)
def test_malformed_records_rejected(record, message):
    with pytest.raises(GraphRecordError, match=message):
        graph_from_records(record)


def test_record_error_is_value_error():
    with pytest.raises(ValueError):
        graph_from_records([])


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------


class TestVariables:
    def test_explicit_default(self):
        (variable,) = variables_from_records(
            [{"id": "v1", "name": "Counter", "dataType": "int32", "defaultValue": 3}]
        )
        assert variable.name == "Counter"
        assert variable.data_kind is DataKind.INT32
        assert variable.default_value == 3

    @pytest.mark.parametrize(
        ("data_type", "expected"),
        [("bool", False), ("int64", 0), ("string", ""), ("vector", pvector([0, 0, 0]))],
    )
    def test_missing_default_uses_zero_value(self, data_type, expected):
        (variable,) = variables_from_records([{"id": "v", "dataType": data_type}])
        assert variable.default_value == expected
        assert variable.name == "v"

    def test_list_default_is_frozen(self):
        (variable,) = variables_from_records(
            [{"id": "v", "data_type": "array", "default_value": [1, 2]}]
        )
        assert variable.default_value == pvector([1, 2])

    def test_missing_id_rejected(self):
        with pytest.raises(GraphRecordError, match="Variable #1"):
            variables_from_records([{"id": "ok"}, {"name": "broken"}])
