"""Data models and enums for the lineage layout engine."""

from .enums import NodeKind, EdgeKind, TraversalDirection, TokenKind
from .dataclasses import (
    Node, Edge, Graph, Position, LayoutOptions, TableLevel,
    CyclicDependency, LevelAssignment, EdgeRoute, LayoutResult,
)

__all__ = [
    "NodeKind",
    "EdgeKind",
    "TraversalDirection",
    "TokenKind",
    "Node",
    "Edge",
    "Graph",
    "Position",
    "LayoutOptions",
    "TableLevel",
    "CyclicDependency",
    "LevelAssignment",
    "EdgeRoute",
    "LayoutResult",
]
