"""Lineage layout engine: models, contracts, loaders, algorithms and writers."""

from .models import Graph, Node, Edge, NodeKind, EdgeKind, TraversalDirection, LayoutOptions
from .processor import (
    infer_table_edges, assign_levels, compute_positions, related_fields,
    validate_transformations, LayoutEngine,
)

__all__ = [
    "Graph",
    "Node",
    "Edge",
    "NodeKind",
    "EdgeKind",
    "TraversalDirection",
    "LayoutOptions",
    "infer_table_edges",
    "assign_levels",
    "compute_positions",
    "related_fields",
    "validate_transformations",
    "LayoutEngine",
]
