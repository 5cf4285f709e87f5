"""Tests for the immutable graph model and kind enums."""

from __future__ import annotations

import pytest
from pyrsistent import pmap, pvector

from nodeflow.core import (
    DataKind,
    Edge,
    EdgeKind,
    Graph,
    LegacyEdge,
    Node,
    NodeCategory,
    NodeKind,
    Port,
    PortDirection,
    effective_kind,
)
from nodeflow.core.graph import port_key
from tests.conftest import control, entry, exit_node, operation, set_var

# ---------------------------------------------------------------------------
# Effective edge kind
# ---------------------------------------------------------------------------


class TestEffectiveKind:
    def test_explicit_kind_wins(self):
        legacy = LegacyEdge("e", "a", "b", kind=EdgeKind.CONTROL)
        edge = Edge("e", "a", "b", kind=EdgeKind.DATA, legacy=legacy)
        assert effective_kind(edge) is EdgeKind.DATA

    def test_legacy_kind_used_when_edge_has_none(self):
        edge = Edge("e", "a", "b", legacy=LegacyEdge("e", "a", "b", kind=EdgeKind.DATA))
        assert edge.kind is None
        assert effective_kind(edge) is EdgeKind.DATA

    def test_defaults_to_control(self):
        assert effective_kind(Edge("e", "a", "b")) is EdgeKind.CONTROL

    def test_legacy_without_kind_defaults_to_control(self):
        edge = Edge("e", "a", "b", legacy=LegacyEdge("e", "a", "b"))
        assert effective_kind(edge) is EdgeKind.CONTROL

    def test_port_key_falls_back_to_legacy_ports(self):
        legacy = LegacyEdge("e", "a", "b", source_port="exec-out", target_port="exec-in")
        edge = Edge("e", "a", "b", target_port="other-in", legacy=legacy)
        assert port_key(edge) == ("exec-out", "other-in")

    def test_self_loop(self):
        assert Edge("e", "a", "a").is_self_loop
        assert not Edge("e", "a", "b").is_self_loop


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class TestNode:
    def test_control_ports_detected(self):
        assert operation("a").has_control_ports
        node = Node("v", NodeKind.VARIABLE, outputs=(Port("value", DataKind.INT32),))
        assert not node.has_control_ports

    def test_variable_id_from_properties(self):
        assert set_var("s", "counter").variable_id == "counter"

    def test_variable_id_from_port(self):
        port = Port("value-out", DataKind.INT32, PortDirection.OUTPUT, variable_id="speed")
        node = Node("g", NodeKind.VARIABLE_GET, outputs=(port,))
        assert node.variable_id == "speed"

    def test_variable_id_missing(self):
        assert operation("a").variable_id is None

    def test_override_requires_flag(self):
        node = Node("s", NodeKind.VARIABLE_ASSIGN, properties=pmap({"input_value": 3}))
        assert node.override_value == (False, None)

    def test_override_present(self):
        assert set_var("s", "x", 0).override_value == (True, 0)

    def test_port_lookup_by_direction(self):
        node = set_var("s", "x")
        assert node.input_port("value-in") is not None
        assert node.input_port("value-out") is None
        assert node.output_port("exec-out") is not None


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


class TestGraph:
    def test_default_graph_shape(self):
        graph = Graph.default()
        assert [node.id for node in graph.nodes] == ["node-start", "node-func", "node-end"]
        assert [node.kind for node in graph.nodes] == [
            NodeKind.ENTRY,
            NodeKind.OPERATION,
            NodeKind.EXIT,
        ]
        assert [(e.source, e.target) for e in graph.edges] == [
            ("node-start", "node-func"),
            ("node-func", "node-end"),
        ]
        assert all(e.kind is EdgeKind.CONTROL for e in graph.edges)

    def test_node_index_first_wins(self):
        first = operation("a", "First")
        second = operation("a", "Second")
        graph = Graph.of([first, second])
        assert graph.node_index()["a"].label == "First"

    def test_nodes_of_kind_keeps_declaration_order(self):
        graph = Graph.of([exit_node("e2"), entry(), exit_node("e1")])
        assert [n.id for n in graph.nodes_of_kind(NodeKind.EXIT)] == ["e2", "e1"]

    def test_with_edge_leaves_original_unchanged(self):
        graph = Graph.of([entry(), exit_node()])
        extended = graph.with_edge(control("c1", "start", "end"))
        assert len(graph.edges) == 0
        assert len(extended.edges) == 1

    def test_rejects_wrong_element_types(self):
        with pytest.raises(TypeError):
            Graph.of(["not a node"])


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------


class TestKinds:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("control", EdgeKind.CONTROL), ("execution", EdgeKind.CONTROL), ("data", EdgeKind.DATA)],
    )
    def test_edge_kind_parse(self, text, expected):
        assert EdgeKind.parse(text) is expected

    def test_edge_kind_parse_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unknown edge kind"):
            EdgeKind.parse("signal")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("execution", DataKind.CONTROL),
            ("control", DataKind.CONTROL),
            ("int32", DataKind.INT32),
            ("pointer", DataKind.OBJECT),
            ("class", DataKind.OBJECT),
            ("quaternion", DataKind.ANY),
            (None, DataKind.ANY),
        ],
    )
    def test_data_kind_parse(self, text, expected):
        assert DataKind.parse(text) is expected

    def test_zero_values(self):
        assert DataKind.BOOL.zero_value() is False
        assert DataKind.DOUBLE.zero_value() == 0
        assert DataKind.STRING.zero_value() == ""
        assert DataKind.VECTOR.zero_value() == pvector([0, 0, 0])
        assert DataKind.OBJECT.zero_value() is None

    def test_kind_categories(self):
        assert NodeKind.ENTRY.category is NodeCategory.FLOW
        assert NodeKind.OPERATION.category is NodeCategory.FUNCTION
        assert NodeKind.VARIABLE_GET.category is NodeCategory.VARIABLE
        assert NodeKind.CUSTOM.category is NodeCategory.OTHER

    def test_binds_variable(self):
        assert NodeKind.VARIABLE_ASSIGN.binds_variable
        assert not NodeKind.EXIT.binds_variable
