"""
Expansion state helpers and visible node/edge selection.

The presentation layer owns the expansion set; these functions only read
it and return new values.
"""

from typing import FrozenSet, Iterable, List, Optional, Set

from ..models.enums import EdgeKind
from ..models.dataclasses import Edge, Graph
from .relationships import infer_table_edges


def auto_expand_tables(graph: Graph) -> Set[str]:
    """
    Tables to open on first render: owners of fields that take part in an
    edge whose both endpoints exist.
    """
    index = graph.node_index()
    expanded = set()

    for edge in graph.edges:
        source = index.get(edge.source)
        target = index.get(edge.target)
        if source is None or target is None:
            continue

        for node in (source, target):
            if not node.is_field or not node.table_id:
                continue
            owner = index.get(node.table_id)
            if owner is not None and owner.is_table:
                expanded.add(owner.id)

    return expanded


def toggle_expansion(expanded_tables: Iterable[str], table_id: str) -> FrozenSet[str]:
    """New expansion set with ``table_id`` flipped."""
    expanded = set(expanded_tables)
    if table_id in expanded:
        expanded.discard(table_id)
    else:
        expanded.add(table_id)
    return frozenset(expanded)


def visible_nodes(graph: Graph, expanded_tables: Iterable[str]) -> List[str]:
    """Ids of every table plus the fields of expanded tables, node order."""
    expanded = frozenset(expanded_tables)
    index = graph.node_index()
    visible = []

    for node_id, node in index.items():
        if node.is_table:
            visible.append(node_id)
        elif node.table_id in expanded:
            owner = index.get(node.table_id)
            if owner is not None and owner.is_table:
                visible.append(node_id)

    return visible


def visible_edges(graph: Graph, expanded_tables: Iterable[str],
                  include_inferred: bool = False,
                  inferred_edges: Optional[List[Edge]] = None) -> List[Edge]:
    """
    Edges to draw for the current expansion state.

    Field edges need both endpoint fields visible. Table edges need both
    endpoints to be tables. With ``include_inferred`` the inferred table
    edges are appended, skipping pairs already declared.
    """
    index = graph.node_index()
    shown = set(visible_nodes(graph, expanded_tables))
    result = []
    table_keys = set()

    for edge in graph.edges:
        source = index.get(edge.source)
        target = index.get(edge.target)
        if source is None or target is None:
            continue

        if edge.kind == EdgeKind.FIELD_TO_FIELD:
            if source.is_field and target.is_field and edge.source in shown and edge.target in shown:
                result.append(edge)
        elif source.is_table and target.is_table:
            if edge.key not in table_keys:
                table_keys.add(edge.key)
                result.append(edge)

    if include_inferred:
        if inferred_edges is None:
            inferred_edges = infer_table_edges(graph)
        for edge in inferred_edges:
            if edge.key not in table_keys:
                table_keys.add(edge.key)
                result.append(edge)

    return result
