"""Data classes for lineage graph and layout structures."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .enums import NodeKind, EdgeKind


@dataclass
class Node:
    """A table or a field in the lineage graph."""
    id: str
    kind: NodeKind
    name: str
    table_id: Optional[str] = None
    transformation: Optional[str] = None

    def __post_init__(self):
        self.kind = NodeKind(self.kind)

    @property
    def is_table(self) -> bool:
        return self.kind == NodeKind.TABLE

    @property
    def is_field(self) -> bool:
        return self.kind == NodeKind.FIELD

    def to_dict(self) -> Dict:
        data = {"id": self.id, "kind": self.kind.value, "name": self.name}
        if self.table_id is not None:
            data["tableId"] = self.table_id
        if self.transformation is not None:
            data["transformation"] = self.transformation
        return data


@dataclass
class Edge:
    """A single lineage relationship (source → target)."""
    id: str
    source: str
    target: str
    kind: EdgeKind

    def __post_init__(self):
        self.kind = EdgeKind(self.kind)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.source, self.target)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "kind": self.kind.value,
        }


@dataclass
class Graph:
    """
    Complete lineage graph.

    Node and edge order is insertion order and matters: every "first
    occurrence wins" rule in the engine depends on it. The graph is owned
    by the caller and treated as read-only by the engine.
    """
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def node_index(self) -> Dict[str, Node]:
        """Map node id to node; the first node wins on duplicate ids."""
        index: Dict[str, Node] = {}
        for node in self.nodes:
            if node.id not in index:
                index[node.id] = node
        return index

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def tables(self) -> List[Node]:
        """Table nodes in node order, without duplicate ids."""
        seen = set()
        tables = []
        for node in self.nodes:
            if node.is_table and node.id not in seen:
                seen.add(node.id)
                tables.append(node)
        return tables

    def fields(self) -> List[Node]:
        return [n for n in self.nodes if n.is_field]

    def to_dict(self) -> Dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Graph":
        """
        Build a graph from plain data.

        Accepts camelCase or snake_case keys and ``kind`` or ``type``.
        Shape is not checked here; use ``contracts.graph_from_dict`` for
        untrusted input.
        """
        nodes = []
        for raw in data["nodes"]:
            nodes.append(Node(
                id=raw["id"],
                kind=_normalize_kind(raw.get("kind", raw.get("type")), NODE_KIND_VARIANTS),
                name=raw.get("name", raw["id"]),
                table_id=raw.get("tableId", raw.get("table_id")),
                transformation=raw.get("transformation"),
            ))

        edges = []
        for raw in data["edges"]:
            edges.append(Edge(
                id=raw["id"],
                source=raw["source"],
                target=raw["target"],
                kind=_normalize_kind(raw.get("kind", raw.get("type")), EDGE_KIND_VARIANTS),
            ))

        return cls(nodes=nodes, edges=edges)


# Lowercase, separator-free spellings -> kind
NODE_KIND_VARIANTS = {
    "table": NodeKind.TABLE,
    "field": NodeKind.FIELD,
    "column": NodeKind.FIELD,
}

EDGE_KIND_VARIANTS = {
    "tabletable": EdgeKind.TABLE_TO_TABLE,
    "tabletotable": EdgeKind.TABLE_TO_TABLE,
    "fieldfield": EdgeKind.FIELD_TO_FIELD,
    "fieldtofield": EdgeKind.FIELD_TO_FIELD,
}


def _normalize_kind(value, variants: Dict):
    """Resolve a kind spelling ('Table', 'field-field', 'FieldToField', ...)."""
    if value is None:
        raise ValueError("Missing kind")
    key = str(value).lower().replace("-", "").replace("_", "").replace(" ", "")
    if key not in variants:
        raise ValueError(f"Unknown kind: {value!r}")
    return variants[key]


@dataclass(frozen=True)
class Position:
    """Top-left corner of a node in diagram coordinates."""
    x: float
    y: float

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y}


@dataclass
class LayoutOptions:
    """Layout parameters; all values must be positive."""
    table_width: float = 150.0
    table_height: float = 40.0
    field_height: float = 20.0
    field_spacing: float = 4.0
    level_padding: float = 100.0
    vertical_padding: float = 50.0

    def __post_init__(self):
        for name in OPTION_NAMES:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Layout option {name} must be a number, got {value!r}")
            if value <= 0:
                raise ValueError(f"Layout option {name} must be positive, got {value!r}")
            setattr(self, name, float(value))

    @property
    def field_step(self) -> float:
        """Vertical distance between consecutive fields of a table."""
        return self.field_height + self.field_spacing

    @classmethod
    def from_dict(cls, data: Dict) -> "LayoutOptions":
        """Build options from camelCase or snake_case keys; unknown keys are rejected."""
        values = {}
        for key, value in data.items():
            name = OPTION_VARIANTS.get(key.lower().replace("_", ""))
            if name is None:
                raise ValueError(f"Unknown layout option: {key}")
            values[name] = value
        return cls(**values)

    def merged(self, overrides: Dict) -> "LayoutOptions":
        """Copy with the non-None entries of ``overrides`` applied."""
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return LayoutOptions(**values)

    def to_dict(self) -> Dict:
        return {name: getattr(self, name) for name in OPTION_NAMES}


OPTION_NAMES = [
    "table_width",
    "table_height",
    "field_height",
    "field_spacing",
    "level_padding",
    "vertical_padding",
]

# "tablewidth" -> "table_width", covers tableWidth / table_width / TABLE_WIDTH
OPTION_VARIANTS = {name.replace("_", ""): name for name in OPTION_NAMES}


@dataclass
class TableLevel:
    """Level assigned to one table plus the tables it depends on."""
    table_id: str
    level: int
    dependencies: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict:
        return {
            "id": self.table_id,
            "level": self.level,
            "dependencies": sorted(self.dependencies),
        }


@dataclass
class CyclicDependency:
    """Tables force-assigned to one level because their dependencies never resolved."""
    level: int
    tables: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (f"Cyclic table dependency among {', '.join(self.tables)}; "
                f"coalesced into level {self.level}")

    def to_dict(self) -> Dict:
        return {"level": self.level, "tables": list(self.tables), "message": self.message}


@dataclass
class LevelAssignment:
    """
    Result of level assignment.

    Reads like a mapping ``table_id -> TableLevel`` in assignment order.
    ``cycles`` lists every group coalesced by the cycle-breaking fallback.
    """
    levels: Dict[str, TableLevel] = field(default_factory=dict)
    cycles: List[CyclicDependency] = field(default_factory=list)

    def __getitem__(self, table_id: str) -> TableLevel:
        return self.levels[table_id]

    def __contains__(self, table_id) -> bool:
        return table_id in self.levels

    def __iter__(self) -> Iterator[str]:
        return iter(self.levels)

    def __len__(self) -> int:
        return len(self.levels)

    def items(self):
        return self.levels.items()

    def values(self):
        return self.levels.values()

    def level_of(self, table_id: str) -> Optional[int]:
        entry = self.levels.get(table_id)
        return entry.level if entry else None

    def by_level(self) -> Dict[int, List[str]]:
        """Table ids grouped per level, levels ascending, assignment order within a level."""
        grouped: Dict[int, List[str]] = {}
        for entry in self.levels.values():
            grouped.setdefault(entry.level, []).append(entry.table_id)
        return {level: grouped[level] for level in sorted(grouped)}

    @property
    def depth(self) -> int:
        """Number of levels (horizontal depth of the diagram)."""
        if not self.levels:
            return 0
        return max(entry.level for entry in self.levels.values()) + 1

    def to_dict(self) -> Dict:
        return {
            "levels": [entry.to_dict() for entry in self.levels.values()],
            "cycles": [cycle.to_dict() for cycle in self.cycles],
        }


@dataclass(frozen=True)
class EdgeRoute:
    """Cubic curve for one visible edge: start, two control points, end."""
    start: Tuple[float, float]
    ctrl1: Tuple[float, float]
    ctrl2: Tuple[float, float]
    end: Tuple[float, float]

    def to_path(self) -> str:
        """SVG path data."""
        return (f"M {self.start[0]},{self.start[1]} "
                f"C {self.ctrl1[0]},{self.ctrl1[1]} "
                f"{self.ctrl2[0]},{self.ctrl2[1]} "
                f"{self.end[0]},{self.end[1]}")

    def to_dict(self) -> Dict:
        return {
            "start": list(self.start),
            "ctrl1": list(self.ctrl1),
            "ctrl2": list(self.ctrl2),
            "end": list(self.end),
        }


@dataclass
class LayoutResult:
    """Everything the presentation layer needs for one render."""
    inferred_edges: List[Edge] = field(default_factory=list)
    levels: LevelAssignment = field(default_factory=LevelAssignment)
    positions: Dict[str, Position] = field(default_factory=dict)
    expanded_tables: Set[str] = field(default_factory=set)
    visible_nodes: List[str] = field(default_factory=list)
    visible_edges: List[Edge] = field(default_factory=list)
    routes: Dict[str, EdgeRoute] = field(default_factory=dict)
    validation_errors: Dict[str, List[str]] = field(default_factory=dict)
    focal_field_id: Optional[str] = None
    related_fields: Set[str] = field(default_factory=set)
    highlighted_edges: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "inferred_edges": [e.to_dict() for e in self.inferred_edges],
            "levels": self.levels.to_dict(),
            "positions": {node_id: pos.to_dict() for node_id, pos in self.positions.items()},
            "expanded_tables": sorted(self.expanded_tables),
            "visible_nodes": list(self.visible_nodes),
            "visible_edges": [e.to_dict() for e in self.visible_edges],
            "routes": {edge_id: route.to_dict() for edge_id, route in self.routes.items()},
            "validation_errors": {k: list(v) for k, v in self.validation_errors.items()},
            "focal_field_id": self.focal_field_id,
            "related_fields": sorted(self.related_fields),
            "highlighted_edges": list(self.highlighted_edges),
        }
