"""Layout, relationship inference, traversal and validation algorithms."""

from .relationships import infer_table_edges
from .levels import assign_levels
from .positions import compute_positions, effective_height
from .traversal import related_fields, highlighted_edges
from .expression_tokenizer import (
    Token, ExpressionTokenizer, PrefixDigitsConvention, KnownIdConvention,
    FieldReferenceExtractor,
)
from .transformation_validator import (
    TransformationValidator, TransformationParseError, SqlReferenceExtractor,
    validate_transformations,
)
from .visibility import auto_expand_tables, toggle_expansion, visible_nodes, visible_edges
from .routing import route_edge, route_edges
from .layout_engine import LayoutEngine

__all__ = [
    "infer_table_edges",
    "assign_levels",
    "compute_positions",
    "effective_height",
    "related_fields",
    "highlighted_edges",
    "Token",
    "ExpressionTokenizer",
    "PrefixDigitsConvention",
    "KnownIdConvention",
    "FieldReferenceExtractor",
    "TransformationValidator",
    "TransformationParseError",
    "SqlReferenceExtractor",
    "validate_transformations",
    "auto_expand_tables",
    "toggle_expansion",
    "visible_nodes",
    "visible_edges",
    "route_edge",
    "route_edges",
    "LayoutEngine",
]
