"""
Infer table-to-table relationships from field-level lineage.

A field edge whose endpoints live in different tables implies that the
target table depends on the source table.
"""

from typing import List
import logging

from ..models.enums import EdgeKind
from ..models.dataclasses import Edge, Graph


logger = logging.getLogger(__name__)


def infer_table_edges(graph: Graph) -> List[Edge]:
    """
    Derive one table edge per distinct (source table, target table) pair.

    Output order follows the first field edge producing each pair. Dangling
    endpoints and intra-table dependencies are skipped, never reported.

    Args:
        graph: Lineage graph

    Returns:
        Inferred TABLE_TO_TABLE edges, id ``"<source>-><target>"``
    """
    index = graph.node_index()
    seen = set()
    inferred = []

    for edge in graph.edges:
        if edge.kind != EdgeKind.FIELD_TO_FIELD:
            continue

        source_table = _owning_table(index, edge.source)
        target_table = _owning_table(index, edge.target)

        if source_table is None or target_table is None:
            logger.debug(f"Skipping edge {edge.id}: endpoint does not resolve to a table")
            continue

        if source_table == target_table:
            continue

        relation_key = f"{source_table}->{target_table}"
        if relation_key in seen:
            continue
        seen.add(relation_key)

        inferred.append(Edge(
            id=relation_key,
            source=source_table,
            target=target_table,
            kind=EdgeKind.TABLE_TO_TABLE,
        ))

    return inferred


def _owning_table(index, field_id: str):
    """Table id owning a field, or None when the field or its table is missing."""
    node = index.get(field_id)
    if node is None or not node.is_field or not node.table_id:
        return None

    table = index.get(node.table_id)
    if table is None or not table.is_table:
        return None

    return table.id
