"""
Excel writer for layout results.

Produces a workbook with:
- Positions (every node with level, visibility and coordinates)
- Levels (table levels and dependencies)
- Inferred_edges
- Validation (one row per transformation warning)
- Summary
"""

from pathlib import Path
from datetime import datetime
import logging

import pandas as pd

from ..models.dataclasses import Graph, LayoutResult


logger = logging.getLogger(__name__)

POSITION_COLUMNS = ["node_id", "kind", "name", "table_id", "level", "visible", "x", "y"]
LEVEL_COLUMNS = ["table_id", "level", "dependencies", "cyclic"]
EDGE_COLUMNS = ["edge_id", "source_table", "target_table"]
VALIDATION_COLUMNS = ["field_id", "error"]


class ExcelWriter:
    """Write layout results to Excel."""

    def __init__(self, output_dir: Path):
        """
        Initialize the writer.

        Args:
            output_dir: Directory for output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write(self, result: LayoutResult, graph: Graph, name: str = "lineage") -> Path:
        """
        Write layout to an Excel workbook.

        Args:
            result: Layout result for ``graph``
            graph: The graph that was laid out
            name: Base name for the file

        Returns:
            Path to written file
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = self.output_dir / f"{name}_layout_{timestamp}.xlsx"

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            self._build_positions_df(result, graph).to_excel(writer, sheet_name="Positions", index=False)
            self._build_levels_df(result).to_excel(writer, sheet_name="Levels", index=False)
            self._build_edges_df(result).to_excel(writer, sheet_name="Inferred_edges", index=False)
            self._build_validation_df(result).to_excel(writer, sheet_name="Validation", index=False)
            self._build_summary_df(result, graph).to_excel(writer, sheet_name="Summary", index=False)

        logger.info(f"Written: {output_path}")
        return output_path

    def _build_positions_df(self, result: LayoutResult, graph: Graph) -> pd.DataFrame:
        """Build the Positions DataFrame, sorted by x, y then id."""
        visible = set(result.visible_nodes)
        index = graph.node_index()
        rows = []

        for node_id, pos in result.positions.items():
            node = index[node_id]
            table_id = node.id if node.is_table else node.table_id
            rows.append({
                "node_id": node_id,
                "kind": node.kind.value,
                "name": node.name,
                "table_id": node.table_id or "",
                "level": result.levels.level_of(table_id) if table_id else None,
                "visible": "Y" if node_id in visible else "N",
                "x": pos.x,
                "y": pos.y,
            })

        df = pd.DataFrame(rows, columns=POSITION_COLUMNS)
        if df.empty:
            return df

        return df.sort_values(["x", "y", "node_id"], kind="stable").reset_index(drop=True)

    def _build_levels_df(self, result: LayoutResult) -> pd.DataFrame:
        cyclic = {t for cycle in result.levels.cycles for t in cycle.tables}
        rows = [{
            "table_id": entry.table_id,
            "level": entry.level,
            "dependencies": ", ".join(sorted(entry.dependencies)),
            "cyclic": "Y" if entry.table_id in cyclic else "N",
        } for entry in result.levels.values()]

        return pd.DataFrame(rows, columns=LEVEL_COLUMNS)

    def _build_edges_df(self, result: LayoutResult) -> pd.DataFrame:
        rows = [{
            "edge_id": edge.id,
            "source_table": edge.source,
            "target_table": edge.target,
        } for edge in result.inferred_edges]

        return pd.DataFrame(rows, columns=EDGE_COLUMNS)

    def _build_validation_df(self, result: LayoutResult) -> pd.DataFrame:
        rows = []
        for field_id in sorted(result.validation_errors):
            for error in result.validation_errors[field_id]:
                rows.append({"field_id": field_id, "error": error})

        return pd.DataFrame(rows, columns=VALIDATION_COLUMNS)

    def _build_summary_df(self, result: LayoutResult, graph: Graph) -> pd.DataFrame:
        rows = [
            {"metric": "Tables", "value": len(graph.tables())},
            {"metric": "Fields", "value": len(graph.fields())},
            {"metric": "Edges", "value": len(graph.edges)},
            {"metric": "Inferred Table Edges", "value": len(result.inferred_edges)},
            {"metric": "", "value": ""},
            {"metric": "Levels", "value": result.levels.depth},
            {"metric": "Cyclic Groups", "value": len(result.levels.cycles)},
            {"metric": "Expanded Tables", "value": ", ".join(sorted(result.expanded_tables))},
            {"metric": "", "value": ""},
            {"metric": "Fields With Warnings", "value": len(result.validation_errors)},
            {"metric": "Warnings", "value": sum(len(v) for v in result.validation_errors.values())},
        ]
        if result.focal_field_id is not None:
            rows.append({"metric": "", "value": ""})
            rows.append({"metric": "Focal Field", "value": result.focal_field_id})
            rows.append({"metric": "Related Fields", "value": ", ".join(sorted(result.related_fields))})

        return pd.DataFrame(rows)
