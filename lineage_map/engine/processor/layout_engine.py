"""
One-call layout for the presentation layer.

Every call recomputes the full result from the graph and the caller's view
state (expanded tables, focal field). Nothing is kept between calls, so a
caller swapping results never sees a half-updated layout.
"""

from typing import Iterable, Optional, Union
import logging

from ..models.enums import TraversalDirection
from ..models.dataclasses import Graph, LayoutOptions, LayoutResult
from .relationships import infer_table_edges
from .levels import assign_levels
from .positions import compute_positions
from .traversal import related_fields, highlighted_edges
from .visibility import auto_expand_tables, visible_nodes, visible_edges
from .routing import route_edges
from .transformation_validator import TransformationValidator


logger = logging.getLogger(__name__)


class LayoutEngine:
    """Compute positions, relationships, highlights and warnings for a lineage graph."""

    def __init__(self, options: Optional[LayoutOptions] = None,
                 direction: Union[TraversalDirection, str] = TraversalDirection.BOTH,
                 extractor=None,
                 include_inferred: bool = False):
        """
        Initialize the engine.

        Args:
            options: Layout parameters (defaults when omitted)
            direction: Default traversal direction for related fields
            extractor: Reference extractor for transformation validation
            include_inferred: Also report inferred table edges as visible edges
        """
        self.options = options or LayoutOptions()
        self.direction = TraversalDirection(direction)
        self.validator = TransformationValidator(extractor)
        self.include_inferred = include_inferred

    def layout(self, graph: Graph,
               expanded_tables: Optional[Iterable[str]] = None,
               focal_field_id: Optional[str] = None) -> LayoutResult:
        """
        Lay out the graph.

        Args:
            graph: Lineage graph
            expanded_tables: Tables showing their fields; None opens every
                table with connected fields
            focal_field_id: Field under focus, or None for no highlighting

        Returns:
            Complete LayoutResult
        """
        if expanded_tables is None:
            expanded = auto_expand_tables(graph)
        else:
            expanded = set(expanded_tables)

        inferred = infer_table_edges(graph)
        levels = assign_levels(graph, inferred)
        positions = compute_positions(graph, levels, expanded, self.options)

        edges = visible_edges(graph, expanded, self.include_inferred, inferred)
        routes = route_edges(graph, positions, edges, self.options)

        result = LayoutResult(
            inferred_edges=inferred,
            levels=levels,
            positions=positions,
            expanded_tables=expanded,
            visible_nodes=visible_nodes(graph, expanded),
            visible_edges=edges,
            routes=routes,
            validation_errors=self.validator.validate(graph),
        )

        if focal_field_id is not None:
            result.focal_field_id = focal_field_id
            result.related_fields = self.related(graph, focal_field_id)
            result.highlighted_edges = highlighted_edges(graph, result.related_fields)

        logger.debug(f"Layout: {len(graph.nodes)} nodes, {levels.depth} levels, "
                     f"{len(expanded)} expanded, {len(result.validation_errors)} invalid fields")

        return result

    def related(self, graph: Graph, focal_field_id: str,
                direction: Optional[Union[TraversalDirection, str]] = None):
        """Related fields using the engine's default direction unless overridden."""
        return related_fields(graph, focal_field_id, direction or self.direction)

    def validate(self, graph: Graph):
        """Transformation validation errors per field."""
        return self.validator.validate(graph)
