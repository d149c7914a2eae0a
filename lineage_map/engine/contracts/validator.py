"""
Validate lineage graph input against the contract.

Shape problems (missing keys, unknown kinds) are programming errors and
raise ``GraphContractError``. Referential problems (dangling edges, fields
without a table) are data-quality issues: ``check_integrity`` reports them
as warnings and the engine skips them at the point of use.
"""

from pathlib import Path
from typing import Dict, List, Optional
import json
import logging

import pandas as pd

from ..models.dataclasses import Graph, NODE_KIND_VARIANTS, EDGE_KIND_VARIANTS, _normalize_kind


logger = logging.getLogger(__name__)


class GraphContractError(Exception):
    """Raised when input doesn't conform to the graph contract."""
    pass


# Contract definition
REQUIRED_NODE_KEYS = ["id", "name"]
REQUIRED_EDGE_KEYS = ["id", "source", "target"]
KIND_KEYS = ["kind", "type"]

# Mapping sheet columns after variant normalization
REQUIRED_MAPPING_COLUMNS = ["source_table", "dest_table"]
OPTIONAL_MAPPING_COLUMNS = ["source_field", "dest_field", "transformation", "object_name"]

# Lowercase header variants -> internal name
COLUMN_VARIANTS = {
    # Source table variants
    "source table": "source_table",
    "source_table": "source_table",
    "sourcetable": "source_table",
    "src_table": "source_table",
    # Source field variants
    "source field": "source_field",
    "source_field": "source_field",
    "sourcefield": "source_field",
    "source column": "source_field",
    "source_column": "source_field",
    "src_field": "source_field",
    "src_column": "source_field",
    # Destination table variants
    "dest table": "dest_table",
    "dest_table": "dest_table",
    "desttable": "dest_table",
    "destination table": "dest_table",
    "destination_table": "dest_table",
    "target table": "dest_table",
    "target_table": "dest_table",
    # Destination field variants
    "dest field": "dest_field",
    "dest_field": "dest_field",
    "destfield": "dest_field",
    "destination field": "dest_field",
    "destination_field": "dest_field",
    "target field": "dest_field",
    "target_field": "dest_field",
    "target column": "dest_field",
    "target_column": "dest_field",
    # Rules/transformation variants
    "rules": "transformation",
    "rule": "transformation",
    "transformation": "transformation",
    "expression": "transformation",
    "derived_expression": "transformation",
    "derived expression": "transformation",
    # Object name variants
    "object name": "object_name",
    "object_name": "object_name",
    "object": "object_name",
}

DEFAULT_SHEET_PATTERN = "mapping"


def validate_input(path: Path, sheet: Optional[str] = None) -> bool:
    """
    Validate input file conforms to the lineage contract.

    Args:
        path: Path to input file (json graph, xlsx or csv mapping sheet)
        sheet: Sheet name pattern for Excel, as for the mapping loader

    Raises:
        GraphContractError: If input is invalid

    Returns:
        True if valid
    """
    path = Path(path)

    if not path.exists():
        raise GraphContractError(f"Input file not found: {path}")

    suffix = path.suffix.lower()

    if suffix == ".json":
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise GraphContractError(f"Cannot read JSON: {e}")
        return validate_graph_dict(data)
    elif suffix in (".xlsx", ".xls"):
        try:
            xl = pd.ExcelFile(path)
            df = pd.read_excel(xl, sheet_name=find_mapping_sheet(xl.sheet_names, sheet))
        except Exception as e:
            raise GraphContractError(f"Cannot read Excel: {e}")
        return validate_dataframe(normalize_columns(df))
    elif suffix == ".csv":
        try:
            df = pd.read_csv(path)
        except Exception as e:
            raise GraphContractError(f"Cannot read CSV: {e}")
        return validate_dataframe(normalize_columns(df))
    else:
        raise GraphContractError(f"Unsupported file format: {suffix}")


def validate_graph_dict(data) -> bool:
    """
    Validate a plain-data graph document.

    Raises:
        GraphContractError: If the document is not Graph-shaped

    Returns:
        True if valid
    """
    if not isinstance(data, dict):
        raise GraphContractError(f"Graph must be an object, got {type(data).__name__}")

    for key in ("nodes", "edges"):
        if key not in data:
            raise GraphContractError(f"Graph missing '{key}' key")
        if not isinstance(data[key], list):
            raise GraphContractError(f"Graph '{key}' must be a list")

    for i, node in enumerate(data["nodes"]):
        _check_entry(node, f"Node {i}", REQUIRED_NODE_KEYS, NODE_KIND_VARIANTS)
        for key in ("tableId", "table_id", "transformation"):
            value = node.get(key)
            if value is not None and not isinstance(value, str):
                raise GraphContractError(f"Node {i} '{key}' must be a string")

    for i, edge in enumerate(data["edges"]):
        _check_entry(edge, f"Edge {i}", REQUIRED_EDGE_KEYS, EDGE_KIND_VARIANTS)

    return True


def _check_entry(entry, label: str, required: List[str], kind_variants: Dict):
    if not isinstance(entry, dict):
        raise GraphContractError(f"{label} must be an object")

    for key in required:
        if key not in entry:
            raise GraphContractError(f"{label} missing key: {key}")
        if not isinstance(entry[key], str):
            raise GraphContractError(f"{label} '{key}' must be a string")

    kind = next((entry[k] for k in KIND_KEYS if k in entry), None)
    if kind is None:
        raise GraphContractError(f"{label} missing key: kind")
    try:
        _normalize_kind(kind, kind_variants)
    except ValueError:
        raise GraphContractError(f"{label} has invalid kind: {kind!r}")


def graph_from_dict(data) -> Graph:
    """Validate a graph document and build the Graph."""
    validate_graph_dict(data)
    return Graph.from_dict(data)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename mapping sheet headers to internal names; unknown headers are kept."""
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]

    rename_map = {}
    for col in df.columns:
        col_lower = col.lower()
        if col_lower in COLUMN_VARIANTS:
            rename_map[col] = COLUMN_VARIANTS[col_lower]

    return df.rename(columns=rename_map)


def find_mapping_sheet(sheet_names: List[str], pattern: Optional[str] = None) -> str:
    """First sheet whose name contains the pattern, else the first sheet."""
    pattern = (pattern or DEFAULT_SHEET_PATTERN).lower()
    for name in sheet_names:
        if pattern in name.lower():
            return name
    return sheet_names[0]


def validate_dataframe(df) -> bool:
    """
    Validate a mapping DataFrame has the required columns.

    Column names must already be normalized (see ``normalize_columns``).

    Raises:
        GraphContractError: If a required column is missing

    Returns:
        True if valid
    """
    missing = [c for c in REQUIRED_MAPPING_COLUMNS if c not in df.columns]
    if missing:
        raise GraphContractError(f"Missing required columns: {missing}")

    return True


def check_integrity(graph: Graph) -> List[str]:
    """
    Report referential inconsistencies without raising.

    Returns:
        List of warning strings, in node then edge order
    """
    warnings = []
    index = graph.node_index()

    seen = set()
    for node in graph.nodes:
        if node.id in seen:
            warnings.append(f"Duplicate node id \"{node.id}\" (first occurrence wins)")
            continue
        seen.add(node.id)

        if node.is_table:
            if node.table_id is not None:
                warnings.append(f"Table \"{node.id}\" has a table id \"{node.table_id}\"")
            if node.transformation:
                warnings.append(f"Table \"{node.id}\" has a transformation; only fields use one")
        elif not node.table_id:
            warnings.append(f"Field \"{node.id}\" has no table")
        else:
            owner = index.get(node.table_id)
            if owner is None or not owner.is_table:
                warnings.append(f"Field \"{node.id}\" references unknown table \"{node.table_id}\"")

    edge_ids = set()
    for edge in graph.edges:
        if edge.id in edge_ids:
            warnings.append(f"Duplicate edge id \"{edge.id}\"")
        edge_ids.add(edge.id)

        for endpoint in (edge.source, edge.target):
            if endpoint not in index:
                warnings.append(f"Edge \"{edge.id}\" references unknown node \"{endpoint}\"")

    for warning in warnings:
        logger.debug(warning)

    return warnings
