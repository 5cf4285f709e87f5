"""Tests for control-flow reachability."""

from nodeflow.core import Edge, LegacyEdge, reachable
from nodeflow.core.kinds import EdgeKind
from nodeflow.core.validation import control_adjacency, reachable_from
from tests.conftest import control, data


def test_follows_control_edges():
    edges = [control("c1", "start", "a"), control("c2", "a", "b")]
    assert reachable("start", edges) == {"start", "a", "b"}


def test_entry_alone():
    assert reachable("start", []) == {"start"}


def test_data_edges_do_not_extend_reach():
    edges = [control("c1", "start", "a"), data("d1", "a", "b")]
    assert reachable("start", edges) == {"start", "a"}


def test_legacy_data_kind_is_honoured():
    legacy = Edge("e1", "start", "a", legacy=LegacyEdge("e1", "start", "a", kind=EdgeKind.DATA))
    assert reachable("start", [legacy]) == {"start"}


def test_edge_without_kind_counts_as_control():
    assert reachable("start", [Edge("e1", "start", "a")]) == {"start", "a"}


def test_survives_cycles():
    edges = [control("c1", "start", "a"), control("c2", "a", "b"), control("c3", "b", "a")]
    assert reachable("start", edges) == {"start", "a", "b"}


def test_breadth_first_order():
    edges = [
        control("c1", "a", "b"),
        control("c2", "a", "c"),
        control("c3", "b", "d"),
        control("c4", "c", "d"),
        control("c5", "d", "e"),
    ]
    assert reachable_from(["a"], control_adjacency(edges)) == ["a", "b", "c", "d", "e"]


def test_several_starts():
    edges = [control("c1", "s1", "a"), control("c2", "s2", "b")]
    assert reachable_from(["s1", "s2"], control_adjacency(edges)) == ["s1", "s2", "a", "b"]


def test_adjacency_keeps_edge_order():
    edges = [control("c1", "a", "c"), data("d1", "a", "x"), control("c2", "a", "b")]
    assert control_adjacency(edges) == {"a": ["c", "b"]}
