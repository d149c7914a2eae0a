"""Loaders for input files."""

from .graph_loader import GraphFileLoader
from .mapping_loader import MappingLoader

__all__ = ["GraphFileLoader", "MappingLoader"]
