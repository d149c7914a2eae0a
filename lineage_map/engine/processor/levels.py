"""
Assign tables to dependency-ordered horizontal levels.

Kahn-style layering: every round takes all unprocessed tables whose
dependencies are already placed and puts them on the current level. When a
round finds nothing while tables remain, those tables sit on (or behind) a
cycle; they are all forced onto the current level and reported as a
``CyclicDependency``.
"""

from typing import Dict, List, Optional, Set
import logging

from ..models.dataclasses import Edge, Graph, TableLevel, CyclicDependency, LevelAssignment
from .relationships import infer_table_edges


logger = logging.getLogger(__name__)


def assign_levels(graph: Graph, inferred_edges: Optional[List[Edge]] = None) -> LevelAssignment:
    """
    Layer the graph's tables by their inferred dependencies.

    Args:
        graph: Lineage graph
        inferred_edges: Table edges from ``infer_table_edges``; computed when omitted

    Returns:
        LevelAssignment in assignment order (level ascending, table order within a level)
    """
    if inferred_edges is None:
        inferred_edges = infer_table_edges(graph)

    table_ids = [table.id for table in graph.tables()]

    # An inferred edge A -> B means B depends on A
    dependencies: Dict[str, Set[str]] = {table_id: set() for table_id in table_ids}
    for edge in inferred_edges:
        if edge.target in dependencies and edge.source in dependencies:
            dependencies[edge.target].add(edge.source)

    result = LevelAssignment()
    processed: Set[str] = set()
    current_level = 0

    while len(processed) < len(table_ids):
        frontier = [
            table_id for table_id in table_ids
            if table_id not in processed
            and all(dep in processed for dep in dependencies[table_id])
        ]

        if not frontier:
            # Nothing is ready: the rest depends on a cycle
            frontier = [table_id for table_id in table_ids if table_id not in processed]
            cycle = CyclicDependency(level=current_level, tables=list(frontier))
            result.cycles.append(cycle)
            logger.warning(cycle.message)

        for table_id in frontier:
            result.levels[table_id] = TableLevel(
                table_id=table_id,
                level=current_level,
                dependencies=set(dependencies[table_id]),
            )
            processed.add(table_id)

        current_level += 1

    return result
