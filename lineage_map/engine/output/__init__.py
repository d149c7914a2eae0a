"""Writers for layout results."""

from .excel_writer import ExcelWriter
from .json_writer import JsonWriter

__all__ = ["ExcelWriter", "JsonWriter"]
