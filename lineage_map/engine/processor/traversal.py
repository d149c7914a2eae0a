"""
Related-field closures for interactive highlighting.

Starting from a focal field, follow field-to-field edges upstream (towards
sources), downstream (towards targets) or both ways, and collect every field
reached. Cycles are fine: each field is expanded once.
"""

from collections import defaultdict, deque
from typing import Dict, Iterable, List, Set, Union

from ..models.enums import EdgeKind, TraversalDirection
from ..models.dataclasses import Graph


def related_fields(graph: Graph, focal_field_id: str,
                   direction: Union[TraversalDirection, str] = TraversalDirection.BOTH) -> Set[str]:
    """
    Collect the fields connected to ``focal_field_id``.

    Args:
        graph: Lineage graph
        focal_field_id: Field under focus; always part of the result
        direction: upstream, downstream or both

    Returns:
        Set of field ids including the focal id
    """
    direction = TraversalDirection(direction)

    upstream: Dict[str, List[str]] = defaultdict(list)
    downstream: Dict[str, List[str]] = defaultdict(list)
    for edge in graph.edges:
        if edge.kind != EdgeKind.FIELD_TO_FIELD:
            continue
        upstream[edge.target].append(edge.source)
        downstream[edge.source].append(edge.target)

    neighbours = []
    if direction in (TraversalDirection.UPSTREAM, TraversalDirection.BOTH):
        neighbours.append(upstream)
    if direction in (TraversalDirection.DOWNSTREAM, TraversalDirection.BOTH):
        neighbours.append(downstream)

    related = {focal_field_id}
    queue = deque([focal_field_id])

    while queue:
        current = queue.popleft()
        for adjacency in neighbours:
            for next_id in adjacency.get(current, ()):
                if next_id not in related:
                    related.add(next_id)
                    queue.append(next_id)

    return related


def highlighted_edges(graph: Graph, related: Iterable[str]) -> List[str]:
    """Ids of field edges whose both endpoints are in the related set, edge order."""
    related = set(related)
    return [
        edge.id for edge in graph.edges
        if edge.kind == EdgeKind.FIELD_TO_FIELD
        and edge.source in related and edge.target in related
    ]
