"""Enumerations for lineage graph data types."""

from enum import Enum


class NodeKind(str, Enum):
    """Kind of node in a lineage graph."""
    TABLE = "table"     # Dataset / table
    FIELD = "field"     # Column owned by exactly one table


class EdgeKind(str, Enum):
    """Kind of edge in a lineage graph."""
    TABLE_TO_TABLE = "table-table"  # Structural edge (declared or inferred)
    FIELD_TO_FIELD = "field-field"  # Transformation dependency (target computed from source)


class TraversalDirection(str, Enum):
    """Which way to follow edges when collecting related fields."""
    UPSTREAM = "upstream"       # Towards sources (where does this come from)
    DOWNSTREAM = "downstream"   # Towards targets (impact analysis)
    BOTH = "both"               # Whole connected lineage


class TokenKind(str, Enum):
    """Token classes produced by the expression tokenizer."""
    IDENTIFIER = "IDENTIFIER"   # Possibly dotted name (TABLE.FIELD, f1)
    NUMBER = "NUMBER"           # Numeric literal
    STRING = "STRING"           # Quoted string literal
    SYMBOL = "SYMBOL"           # Operator / punctuation
