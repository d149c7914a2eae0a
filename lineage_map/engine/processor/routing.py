"""
Curve geometry for visible edges.

Every edge leaves the right side of its source row and enters the left side
of its target row. Control points sit a third of the table-to-table distance
away from each end, so all edges between the same pair of tables bend alike.
"""

from typing import Dict, Iterable, Optional

from ..models.enums import EdgeKind
from ..models.dataclasses import Edge, EdgeRoute, Graph, LayoutOptions, Position


def route_edge(source_pos: Position, target_pos: Position, horizontal_distance: float,
               options: Optional[LayoutOptions] = None,
               kind: EdgeKind = EdgeKind.FIELD_TO_FIELD) -> EdgeRoute:
    """Cubic curve from the source node's right edge to the target node's left edge."""
    options = options or LayoutOptions()
    row_height = options.field_height if kind == EdgeKind.FIELD_TO_FIELD else options.table_height

    start = (source_pos.x + options.table_width, source_pos.y + row_height / 2)
    end = (target_pos.x, target_pos.y + row_height / 2)

    curve_offset = horizontal_distance / 3
    ctrl1 = (start[0] + curve_offset, start[1])
    ctrl2 = (end[0] - curve_offset, end[1])

    return EdgeRoute(start=start, ctrl1=ctrl1, ctrl2=ctrl2, end=end)


def route_edges(graph: Graph, positions: Dict[str, Position], edges: Iterable[Edge],
                options: Optional[LayoutOptions] = None) -> Dict[str, EdgeRoute]:
    """
    Routes for the given (visible) edges, keyed by edge id.

    Edges with an endpoint lacking a position, or a field whose table has no
    position, are skipped.
    """
    options = options or LayoutOptions()
    index = graph.node_index()
    routes = {}

    for edge in edges:
        source_pos = positions.get(edge.source)
        target_pos = positions.get(edge.target)
        if source_pos is None or target_pos is None:
            continue

        if edge.kind == EdgeKind.FIELD_TO_FIELD:
            source_table = _table_position(index, positions, edge.source)
            target_table = _table_position(index, positions, edge.target)
            if source_table is None or target_table is None:
                continue
            distance = target_table.x - source_table.x
        else:
            distance = target_pos.x - source_pos.x

        routes[edge.id] = route_edge(source_pos, target_pos, distance, options, edge.kind)

    return routes


def _table_position(index, positions: Dict[str, Position], field_id: str) -> Optional[Position]:
    node = index.get(field_id)
    if node is None or not node.table_id:
        return None
    return positions.get(node.table_id)
