"""
Load lineage graph documents (JSON).
"""

from pathlib import Path
from typing import Dict, List
import json
import logging

from ..models.dataclasses import Graph
from ..contracts.validator import GraphContractError, graph_from_dict, check_integrity


logger = logging.getLogger(__name__)


class GraphFileLoader:
    """Load and check JSON graph documents."""

    def __init__(self):
        self.warnings: List[str] = []

    def load_file(self, path: Path) -> Graph:
        """
        Load a graph from a JSON file.

        Args:
            path: Path to ``{"nodes": [...], "edges": [...]}`` document

        Raises:
            FileNotFoundError: If the file does not exist
            GraphContractError: If the document is not Graph-shaped

        Returns:
            Graph
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Graph file not found: {path}")

        logger.info(f"Loading graph: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except ValueError as e:
                raise GraphContractError(f"Cannot read JSON {path}: {e}")

        return self.load_dict(data)

    def load_dict(self, data: Dict) -> Graph:
        """Build a graph from an already parsed document."""
        graph = graph_from_dict(data)

        self.warnings = check_integrity(graph)
        for warning in self.warnings:
            logger.warning(warning)

        logger.info(f"Loaded {len(graph.nodes)} nodes, {len(graph.edges)} edges")
        return graph
