"""
Tests for level assignment.

Run with:
    python -m pytest lineage_map/engine/tests/test_levels.py -v
"""

import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from lineage_map.engine.models import Graph, Node, Edge, NodeKind, EdgeKind
from lineage_map.engine.processor import infer_table_edges, assign_levels


def build_graph(tables, field_edges):
    """tables: {table_id: [field ids]}, field_edges: [(source, target)]"""
    nodes = []
    for table_id, field_ids in tables.items():
        nodes.append(Node(table_id, NodeKind.TABLE, table_id))
        for field_id in field_ids:
            nodes.append(Node(field_id, NodeKind.FIELD, field_id, table_id=table_id))
    edges = [Edge(f"e{i}", s, t, EdgeKind.FIELD_TO_FIELD) for i, (s, t) in enumerate(field_edges, 1)]
    return Graph(nodes, edges)


def assert_monotonic(graph, levels):
    """level(A) <= level(B) for every inferred A -> B; equality only inside a cycle group."""
    cyclic = {t for cycle in levels.cycles for t in cycle.tables}
    for edge in infer_table_edges(graph):
        source_level = levels.level_of(edge.source)
        target_level = levels.level_of(edge.target)
        assert source_level <= target_level, edge.id
        if source_level == target_level:
            assert edge.source in cyclic and edge.target in cyclic, edge.id


def test_two_tables():
    graph = build_graph({"T1": ["f1", "f2"], "T2": ["f3"]}, [("f1", "f3")])

    levels = assign_levels(graph)

    assert levels.level_of("T1") == 0
    assert levels.level_of("T2") == 1
    assert levels["T2"].dependencies == {"T1"}
    assert levels["T1"].dependencies == set()
    assert levels.cycles == []
    assert levels.depth == 2

    print("test_two_tables: PASSED")


def test_three_table_cycle():
    """A -> B -> C -> A coalesces into level 0."""
    graph = build_graph(
        {"A": ["a1"], "B": ["b1"], "C": ["c1"]},
        [("a1", "b1"), ("b1", "c1"), ("c1", "a1")],
    )

    levels = assign_levels(graph)

    assert [levels.level_of(t) for t in ("A", "B", "C")] == [0, 0, 0]
    assert len(levels.cycles) == 1
    assert levels.cycles[0].level == 0
    assert levels.cycles[0].tables == ["A", "B", "C"]
    assert "coalesced into level 0" in levels.cycles[0].message
    assert_monotonic(graph, levels)

    print("test_three_table_cycle: PASSED")


def test_diamond():
    graph = build_graph(
        {"D": ["d1"], "C": ["c1"], "B": ["b1"], "A": ["a1"]},
        [("a1", "b1"), ("a1", "c1"), ("b1", "d1"), ("c1", "d1")],
    )

    levels = assign_levels(graph)

    assert levels.level_of("A") == 0
    assert levels.level_of("B") == 1
    assert levels.level_of("C") == 1
    assert levels.level_of("D") == 2
    assert levels["D"].dependencies == {"B", "C"}
    # Within a level, tables keep node order
    assert levels.by_level() == {0: ["A"], 1: ["C", "B"], 2: ["D"]}
    assert list(levels) == ["A", "C", "B", "D"]
    assert_monotonic(graph, levels)

    print("test_diamond: PASSED")


def test_unconnected_tables_on_level_zero():
    graph = build_graph({"T1": ["f1"], "T2": [], "T3": ["f3"]}, [("f1", "f3")])

    levels = assign_levels(graph)

    assert levels.by_level() == {0: ["T1", "T2"], 1: ["T3"]}

    print("test_unconnected_tables_on_level_zero: PASSED")


def test_cycle_behind_acyclic_prefix():
    """Tables downstream of a cycle are forced onto the cycle's level."""
    graph = build_graph(
        {"X": ["x1"], "A": ["a1", "a2"], "B": ["b1"], "Z": ["z1"]},
        [("x1", "a1"), ("a2", "b1"), ("b1", "a1"), ("b1", "z1")],
    )

    levels = assign_levels(graph)

    assert levels.level_of("X") == 0
    assert levels.level_of("A") == 1
    assert levels.level_of("B") == 1
    assert levels.level_of("Z") == 1
    assert levels.cycles[0].tables == ["A", "B", "Z"]
    assert_monotonic(graph, levels)

    print("test_cycle_behind_acyclic_prefix: PASSED")


def test_every_table_assigned_once():
    graph = build_graph(
        {"A": ["a1"], "B": ["b1"], "C": ["c1"], "D": ["d1"], "E": []},
        [("a1", "b1"), ("b1", "c1"), ("c1", "b1"), ("a1", "d1")],
    )
    graph.nodes.append(Node("A", NodeKind.TABLE, "duplicate A"))

    levels = assign_levels(graph)

    assert sorted(levels) == ["A", "B", "C", "D", "E"]
    assert len(levels) == 5
    assert_monotonic(graph, levels)

    print("test_every_table_assigned_once: PASSED")


def test_precomputed_inferred_edges():
    graph = build_graph({"T1": ["f1"], "T2": ["f2"]}, [("f1", "f2")])
    inferred = infer_table_edges(graph)

    assert assign_levels(graph, inferred).to_dict() == assign_levels(graph).to_dict()

    print("test_precomputed_inferred_edges: PASSED")


def test_empty_graph():
    levels = assign_levels(Graph())

    assert len(levels) == 0
    assert levels.depth == 0
    assert levels.by_level() == {}

    print("test_empty_graph: PASSED")


def run_all_tests():
    """Run all tests."""
    tests = [
        test_two_tables,
        test_three_table_cycle,
        test_diamond,
        test_unconnected_tables_on_level_zero,
        test_cycle_behind_acyclic_prefix,
        test_every_table_assigned_once,
        test_precomputed_inferred_edges,
        test_empty_graph,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            print(f"{test.__name__}: FAILED - {e}")
            failed += 1

    print(f"Results: {len(tests) - failed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
