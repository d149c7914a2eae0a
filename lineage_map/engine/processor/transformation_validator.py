"""
Cross-check declared transformation expressions against field edges.

A field's transformation should reference exactly the fields that feed it.
Mismatches in either direction are collected as warnings per field; nothing
is raised to the caller.
"""

from collections import defaultdict
from typing import Dict, List, Optional
import logging

from sqlglot import exp, parse_one
from sqlglot.errors import ParseError, TokenError

from ..models.enums import EdgeKind
from ..models.dataclasses import Graph
from .expression_tokenizer import FieldReferenceExtractor, PrefixDigitsConvention


logger = logging.getLogger(__name__)


class TransformationParseError(ValueError):
    """Raised by an extractor when an expression cannot be parsed."""
    pass


class SqlReferenceExtractor:
    """Extract column references from SQL-style expressions with SQLGlot."""

    def __init__(self, dialect: Optional[str] = None):
        """
        Args:
            dialect: SQL dialect for parsing (default: SQLGlot's generic dialect)
        """
        self.dialect = dialect

    def extract(self, text: str) -> List[str]:
        try:
            ast = parse_one(text, dialect=self.dialect)
        except (ParseError, TokenError) as e:
            raise TransformationParseError(str(e))

        references = []
        for column in ast.find_all(exp.Column):
            name = f"{column.table}.{column.name}" if column.table else column.name
            if name and name not in references:
                references.append(name)

        # find_all walks breadth first; report in source order
        references.sort(key=lambda ref: _source_offset(text, ref))
        return references


def _source_offset(text: str, reference: str) -> int:
    offset = text.find(reference)
    return offset if offset != -1 else len(text)


class TransformationValidator:
    """Validate per-field transformation expressions against incoming edges."""

    def __init__(self, extractor=None):
        """
        Args:
            extractor: Object with ``extract(text) -> List[str]``
                (default: letters+digits references, limited to the prefixes
                of the validated graph's field ids)
        """
        self.extractor = extractor

    def validate(self, graph: Graph) -> Dict[str, List[str]]:
        """
        Validate every field carrying a transformation.

        Returns:
            Dict field id -> ordered error strings; valid fields are absent
        """
        extractor = self.extractor or FieldReferenceExtractor(
            convention=PrefixDigitsConvention.from_ids(n.id for n in graph.nodes if n.is_field)
        )

        incoming: Dict[str, List[str]] = defaultdict(list)
        for edge in graph.edges:
            if edge.kind != EdgeKind.FIELD_TO_FIELD:
                continue
            if edge.source not in incoming[edge.target]:
                incoming[edge.target].append(edge.source)

        errors: Dict[str, List[str]] = {}
        seen = set()

        for node in graph.nodes:
            if not node.is_field or node.id in seen:
                continue
            seen.add(node.id)

            if not node.transformation or not node.transformation.strip():
                continue

            field_errors = self._validate_field(
                extractor, node.id, node.transformation, incoming.get(node.id, [])
            )
            if field_errors:
                errors[node.id] = field_errors

        if errors:
            logger.info(f"Transformation mismatches on {len(errors)} field(s)")

        return errors

    def _validate_field(self, extractor, field_id: str, transformation: str,
                        sources: List[str]) -> List[str]:
        try:
            references = extractor.extract(transformation)
        except TransformationParseError as e:
            return [f"Transformation of \"{field_id}\" could not be parsed: {e}"]

        field_errors = []

        for ref in references:
            if ref not in sources:
                field_errors.append(
                    f"Field \"{ref}\" is used in transformation but has no edge connecting to \"{field_id}\""
                )

        for source in sources:
            if source not in references:
                field_errors.append(
                    f"Field \"{source}\" has an edge but isn't used in the transformation"
                )

        return field_errors


def validate_transformations(graph: Graph, extractor=None) -> Dict[str, List[str]]:
    """Module-level shortcut for ``TransformationValidator(extractor).validate(graph)``."""
    return TransformationValidator(extractor).validate(graph)
