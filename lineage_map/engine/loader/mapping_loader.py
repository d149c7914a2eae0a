"""
Build lineage graphs from mapping sheets (Excel / CSV).

One row per source field -> destination field mapping, as exported by the
SQL lineage tooling or maintained by hand:
- source table / source field
- destination table / destination field
- rules (transformation expression of the destination field)
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging

import pandas as pd

from ..models.enums import NodeKind, EdgeKind
from ..models.dataclasses import Edge, Graph, Node
from ..contracts.validator import (
    OPTIONAL_MAPPING_COLUMNS, find_mapping_sheet, normalize_columns, validate_dataframe,
)


logger = logging.getLogger(__name__)


NAME_COLUMNS = ["source_table", "source_field", "dest_table", "dest_field"]


class MappingLoader:
    """Load mapping sheets and turn them into a table/field graph."""

    def __init__(self):
        self.mappings: pd.DataFrame = pd.DataFrame()
        self.skipped_rows: List[int] = []

    def load(self, path: Path, sheet: Optional[str] = None) -> Graph:
        """
        Load a mapping file.

        Args:
            path: Path to .xlsx/.xls/.csv mapping sheet
            sheet: Sheet name pattern for Excel (default: first sheet
                whose name contains "mapping", else the first sheet)

        Returns:
            Graph with upper-cased table ids and ``TABLE.FIELD`` field ids
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Mapping file not found: {path}")

        logger.info(f"Loading mappings: {path}")

        suffix = path.suffix.lower()
        if suffix in (".xlsx", ".xls"):
            df = self._read_excel(path, sheet)
        elif suffix == ".csv":
            df = pd.read_csv(path, dtype=str)
        else:
            raise ValueError(f"Unsupported mapping format: {suffix}")

        self.mappings = self.normalize(df)
        logger.info(f"  Loaded {len(self.mappings)} mappings")

        return self.build_graph(self.mappings)

    def _read_excel(self, path: Path, sheet: Optional[str]) -> pd.DataFrame:
        xl = pd.ExcelFile(path)
        return pd.read_excel(xl, sheet_name=find_mapping_sheet(xl.sheet_names, sheet), dtype=str)

    @staticmethod
    def normalize(df: pd.DataFrame) -> pd.DataFrame:
        """Rename header variants, fill optional columns, upper-case names."""
        df = normalize_columns(df)

        validate_dataframe(df)

        for col in OPTIONAL_MAPPING_COLUMNS:
            if col not in df.columns:
                df[col] = ""

        # Names compare case-insensitively; rules keep their spelling
        for col in NAME_COLUMNS:
            df[col] = df[col].fillna("").astype(str).str.strip().str.upper()
        df["transformation"] = df["transformation"].fillna("").astype(str).str.strip()

        return df

    def build_graph(self, df: pd.DataFrame) -> Graph:
        """Build tables, fields and edges from normalized mapping rows."""
        tables: Dict[str, List[str]] = {}
        rules: Dict[str, str] = {}
        edges: List[Edge] = []
        edge_keys = set()
        self.skipped_rows = []

        def add_table(table: str):
            tables.setdefault(table, [])

        def add_field(table: str, column: str) -> str:
            add_table(table)
            field_id = f"{table}.{column}"
            if field_id not in tables[table]:
                tables[table].append(field_id)
            return field_id

        def add_edge(source: str, target: str, kind: EdgeKind):
            key: Tuple[str, str] = (source, target)
            if key in edge_keys:
                return
            edge_keys.add(key)
            edges.append(Edge(id=f"{source}->{target}", source=source, target=target, kind=kind))

        for row_number, row in enumerate(df.itertuples(index=False), start=1):
            src_table, src_field = row.source_table, row.source_field
            dst_table, dst_field = row.dest_table, row.dest_field

            if not dst_table:
                logger.warning(f"Row {row_number}: no destination table, skipped")
                self.skipped_rows.append(row_number)
                continue

            add_table(dst_table)
            if src_table:
                add_table(src_table)

            dst_id = add_field(dst_table, dst_field) if dst_field else None
            src_id = add_field(src_table, src_field) if src_table and src_field else None

            if src_id and dst_id:
                add_edge(src_id, dst_id, EdgeKind.FIELD_TO_FIELD)
            elif src_table and not src_field and not dst_field:
                add_edge(src_table, dst_table, EdgeKind.TABLE_TO_TABLE)

            # First non-empty rule per destination field wins
            if dst_id and row.transformation and dst_id not in rules:
                rules[dst_id] = row.transformation

        nodes = []
        for table, field_ids in tables.items():
            nodes.append(Node(id=table, kind=NodeKind.TABLE, name=table))
            for field_id in field_ids:
                nodes.append(Node(
                    id=field_id,
                    kind=NodeKind.FIELD,
                    name=field_id[len(table) + 1:],
                    table_id=table,
                    transformation=rules.get(field_id),
                ))

        logger.info(f"  Built {len(tables)} tables, {len(nodes) - len(tables)} fields, {len(edges)} edges")
        return Graph(nodes=nodes, edges=edges)
