"""
Turn level assignment and expansion state into diagram coordinates.

Levels become columns, left to right. Tables of a level are stacked top to
bottom and the whole stack is centered vertically against the tallest level.
Fields of an expanded table are listed directly below its header.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional
import logging

from ..models.dataclasses import Graph, LayoutOptions, LevelAssignment, Node, Position


logger = logging.getLogger(__name__)

FALLBACK_POSITION = Position(0.0, 0.0)


def compute_positions(graph: Graph,
                      levels: LevelAssignment,
                      expanded_tables: Iterable[str] = (),
                      options: Optional[LayoutOptions] = None) -> Dict[str, Position]:
    """
    Compute a position for every node of the graph.

    Args:
        graph: Lineage graph
        levels: Output of ``assign_levels`` for this graph
        expanded_tables: Ids of tables showing their fields (not modified)
        options: Layout parameters (defaults when omitted)

    Returns:
        Dict node id -> Position, in graph node order. Nodes the layout does
        not reach (orphan fields, collapsed fields, malformed nodes) get (0, 0).
    """
    options = options or LayoutOptions()
    expanded = frozenset(expanded_tables)
    index = graph.node_index()

    fields_by_table = _fields_by_table(graph)

    def table_height(table_id: str) -> float:
        return _stack_height(fields_by_table, table_id, expanded, options)

    # Group tables by level, ignoring ids that are not tables of this graph
    tables_by_level: Dict[int, List[str]] = {}
    for level, table_ids in levels.by_level().items():
        present = [t for t in table_ids if t in index and index[t].is_table]
        if present:
            tables_by_level[level] = present

    level_extents = {
        level: sum(table_height(t) + options.vertical_padding for t in table_ids)
        for level, table_ids in tables_by_level.items()
    }
    max_extent = max(level_extents.values(), default=0.0)

    placed: Dict[str, Position] = {}

    for level, table_ids in tables_by_level.items():
        level_x = level * (options.table_width + options.level_padding)
        current_y = (max_extent - level_extents[level]) / 2

        for table_id in table_ids:
            table_y = current_y + options.vertical_padding
            placed[table_id] = Position(level_x, table_y)

            if table_id in expanded:
                for i, field_node in enumerate(fields_by_table.get(table_id, [])):
                    placed[field_node.id] = Position(
                        level_x,
                        table_y + options.table_height + i * options.field_step,
                    )

            current_y += table_height(table_id) + options.vertical_padding

    positions = {}
    for node in graph.nodes:
        if node.id in positions:
            continue
        if node.id not in placed:
            logger.debug(f"No layout position for {node.id}, using fallback")
        positions[node.id] = placed.get(node.id, FALLBACK_POSITION)

    return positions


def _fields_by_table(graph: Graph) -> Dict[str, List[Node]]:
    """Fields per owning table id, node order, first occurrence of an id only."""
    seen = set()
    grouped: Dict[str, List[Node]] = {}
    for node in graph.nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        if node.is_field and node.table_id:
            grouped.setdefault(node.table_id, []).append(node)
    return grouped


def effective_height(graph: Graph, table_id: str, expanded_tables: Iterable[str] = (),
                     options: Optional[LayoutOptions] = None) -> float:
    """Height a table occupies in its level, header plus listed fields."""
    return _stack_height(_fields_by_table(graph), table_id, frozenset(expanded_tables),
                         options or LayoutOptions())


def _stack_height(fields_by_table: Dict[str, List[Node]], table_id: str,
                  expanded: FrozenSet[str], options: LayoutOptions) -> float:
    if table_id not in expanded:
        return options.table_height
    return options.table_height + len(fields_by_table.get(table_id, [])) * options.field_step
