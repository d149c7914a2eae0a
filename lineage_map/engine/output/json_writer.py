"""
JSON writer for layout results.
"""

from pathlib import Path
import json
import logging

from ..models.dataclasses import LayoutResult


logger = logging.getLogger(__name__)


class JsonWriter:
    """Write a LayoutResult as a JSON document."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write(self, result: LayoutResult, name: str = "lineage") -> Path:
        output_path = self.output_dir / f"{name}_layout.json"

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)

        logger.info(f"Written: {output_path}")
        return output_path
