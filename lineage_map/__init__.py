"""Layout and relationship inference for table/field lineage diagrams."""

__version__ = "1.0.0"
