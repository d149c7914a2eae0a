"""Contract definitions and validation for lineage graph input."""

from .validator import (
    validate_input, validate_graph_dict, validate_dataframe,
    graph_from_dict, check_integrity, normalize_columns, find_mapping_sheet,
    GraphContractError,
)

__all__ = [
    "validate_input",
    "validate_graph_dict",
    "validate_dataframe",
    "graph_from_dict",
    "check_integrity",
    "normalize_columns",
    "find_mapping_sheet",
    "GraphContractError",
]
