"""
Tests for expansion helpers, visible edges and edge routing.

Run with:
    python -m pytest lineage_map/engine/tests/test_visibility.py -v
"""

import sys
from pathlib import Path

import pytest

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from lineage_map.engine.models import Graph, Node, Edge, NodeKind, EdgeKind, LayoutOptions, Position
from lineage_map.engine.processor import (
    auto_expand_tables, toggle_expansion, visible_nodes, visible_edges,
    route_edge, route_edges, assign_levels, compute_positions,
)


def build_graph(tables, field_edges):
    """tables: {table_id: [field ids]}, field_edges: [(source, target)]"""
    nodes = []
    for table_id, field_ids in tables.items():
        nodes.append(Node(table_id, NodeKind.TABLE, table_id))
        for field_id in field_ids:
            nodes.append(Node(field_id, NodeKind.FIELD, field_id, table_id=table_id))
    edges = [Edge(f"e{i}", s, t, EdgeKind.FIELD_TO_FIELD) for i, (s, t) in enumerate(field_edges, 1)]
    return Graph(nodes, edges)


def sample_graph():
    graph = build_graph({"T1": ["f1", "f2"], "T2": ["f3"], "T3": ["f4"]}, [("f1", "f3"), ("f2", "ghost")])
    graph.edges.append(Edge("t1", "T3", "T2", EdgeKind.TABLE_TO_TABLE))
    return graph


def test_auto_expand_connected_tables():
    assert auto_expand_tables(sample_graph()) == {"T1", "T2"}
    assert auto_expand_tables(Graph()) == set()


def test_toggle_expansion_returns_new_set():
    expanded = {"T1"}

    opened = toggle_expansion(expanded, "T2")
    closed = toggle_expansion(opened, "T1")

    assert opened == frozenset({"T1", "T2"})
    assert closed == frozenset({"T2"})
    assert expanded == {"T1"}


def test_visible_nodes():
    graph = sample_graph()

    assert visible_nodes(graph, set()) == ["T1", "T2", "T3"]
    assert visible_nodes(graph, {"T1"}) == ["T1", "f1", "f2", "T2", "T3"]


def test_field_edges_need_both_tables_expanded():
    graph = sample_graph()

    assert [e.id for e in visible_edges(graph, {"T1"})] == ["t1"]
    assert [e.id for e in visible_edges(graph, {"T1", "T2"})] == ["e1", "t1"]


def test_inferred_edges_added_once():
    graph = sample_graph()
    graph.edges.append(Edge("t2", "T1", "T2", EdgeKind.TABLE_TO_TABLE))
    graph.nodes.append(Node("f5", NodeKind.FIELD, "f5", table_id="T3"))
    graph.edges.append(Edge("e9", "f3", "f5", EdgeKind.FIELD_TO_FIELD))

    edges = visible_edges(graph, set(), include_inferred=True)

    # T1->T2 is declared, so only T2->T3 comes from inference
    assert [e.id for e in edges] == ["t1", "t2", "T2->T3"]


def test_route_edge_geometry():
    route = route_edge(Position(0, 100), Position(250, 60), 300, LayoutOptions())

    assert route.start == (150, 110)
    assert route.ctrl1 == (250, 110)
    assert route.ctrl2 == (150, 70)
    assert route.end == (250, 70)
    assert route.to_path() == "M 150.0,110.0 C 250.0,110.0 150.0,70.0 250.0,70.0"


def test_table_route_uses_table_height():
    route = route_edge(Position(0, 0), Position(250, 0), 250, LayoutOptions(), EdgeKind.TABLE_TO_TABLE)

    assert route.start == (150, 20)
    assert route.end == (250, 20)
    assert route.ctrl1[0] == pytest.approx(150 + 250 / 3)


def test_route_edges_use_table_distance():
    graph = build_graph({"T1": ["f1"], "T2": ["f2"]}, [("f1", "f2")])
    graph.edges.append(Edge("dangling", "f1", "nowhere", EdgeKind.FIELD_TO_FIELD))
    expanded = {"T1", "T2"}
    positions = compute_positions(graph, assign_levels(graph), expanded)

    routes = route_edges(graph, positions, graph.edges)

    assert list(routes) == ["e1"]
    route = routes["e1"]
    assert route.start == (positions["f1"].x + 150, positions["f1"].y + 10)
    assert route.end == (positions["f2"].x, positions["f2"].y + 10)
    assert route.ctrl1[0] - route.start[0] == pytest.approx(250 / 3)
