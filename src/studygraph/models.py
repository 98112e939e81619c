"""
Core data models for note-derived diagrams.

These models define the canonical schema for a diagram descriptor as the
analysis service returns it:
- Nodes with an id, a label and an optional hierarchy level
- Edges connecting nodes (using source/target naming convention)
- Positions in the fixed 600x400 logical canvas

Field Naming Convention:
- Edges use `source` and `target` internally
- The descriptor wire format uses `from`/`to`; both are accepted on input
  and `to_json_dict()` writes `from`/`to` back out
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field, model_validator


# Logical canvas, shared by the layout engine, the renderer and drag clamping
CANVAS_WIDTH = 600
CANVAS_HEIGHT = 400
CANVAS_PADDING = 60
NODE_RADIUS = 25
ARROW_RESERVE = 8  # Extra trim at the destination end for the arrowhead
DRAG_INSET = NODE_RADIUS + 5


class DiagramType(str, Enum):
    """Structural kinds of diagram; each selects a layout rule."""
    BINARY_TREE = "binary-tree"
    TREE = "tree"
    GRAPH = "graph"
    DIRECTED = "directed"
    FLOWCHART = "flowchart"
    LINKED_LIST = "linked-list"


HIERARCHICAL_TYPES = frozenset({DiagramType.BINARY_TREE.value, DiagramType.TREE.value})

DIRECTIONAL_TYPES = frozenset({
    DiagramType.DIRECTED.value,
    DiagramType.FLOWCHART.value,
    DiagramType.LINKED_LIST.value,
})


def _type_value(diagram_type: "str | DiagramType") -> str:
    if isinstance(diagram_type, DiagramType):
        return diagram_type.value
    return diagram_type


def is_directional(diagram_type: "str | DiagramType") -> bool:
    """Check whether edges of this diagram type render with arrowheads."""
    return _type_value(diagram_type) in DIRECTIONAL_TYPES


def is_hierarchical(diagram_type: "str | DiagramType") -> bool:
    """Check whether this diagram type is laid out in level rows."""
    return _type_value(diagram_type) in HIERARCHICAL_TYPES


class Position(BaseModel):
    """A point in logical canvas coordinates. Replaced, never mutated."""
    model_config = {"frozen": True}

    x: float
    y: float


PositionMap = dict[str, Position]


class Node(BaseModel):
    """A node in the diagram. Immutable for the diagram's lifetime."""
    model_config = {"frozen": True}

    id: str
    label: str = ""
    level: Optional[int] = None  # Only meaningful for tree / binary-tree

    @property
    def effective_level(self) -> int:
        """Level used for layout (absent means 0)."""
        return self.level if self.level is not None else 0


class Edge(BaseModel):
    """
    An edge connecting two nodes.

    Uses `source` and `target` as canonical field names.
    Accepts `from`/`to` on input, which is what the descriptor carries.
    """
    model_config = {"frozen": True}

    source: str  # Source node ID
    target: str  # Target node ID
    label: str = ""

    @model_validator(mode='before')
    @classmethod
    def convert_wire_fields(cls, data: Any) -> Any:
        """Convert 'from'/'to' fields to 'source'/'target'."""
        if isinstance(data, dict):
            data = dict(data)
            # 'from' is a Python keyword
            if 'from' in data and 'source' not in data:
                data['source'] = data.pop('from')
            if 'from_node' in data and 'source' not in data:
                data['source'] = data.pop('from_node')
            if 'to' in data and 'target' not in data:
                data['target'] = data.pop('to')
            if 'to_node' in data and 'target' not in data:
                data['target'] = data.pop('to_node')
            if data.get('label') is None:
                data.pop('label', None)
        return data

    def to_json_dict(self) -> dict:
        """Convert to the descriptor's JSON shape."""
        result = {"from": self.source, "to": self.target}
        if self.label:
            result["label"] = self.label
        return result


class GraphDiagram(BaseModel):
    """
    A diagram descriptor: the structural description of one visualization.

    `type` is kept as a plain string so that a descriptor with a kind the
    layout engine does not know still loads; it falls back to the circular
    layout.
    """
    title: str = "Untitled Diagram"
    type: str = DiagramType.GRAPH.value
    description: Optional[str] = None
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    @property
    def directional(self) -> bool:
        return is_directional(self.type)

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(n))."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with descriptor field names."""
        result = {
            "title": self.title,
            "type": self.type,
            "nodes": [n.model_dump(exclude_none=True) for n in self.nodes],
            "edges": [e.to_json_dict() for e in self.edges],
        }
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_json_dict(cls, data: dict) -> "GraphDiagram":
        """
        Create a GraphDiagram from a descriptor dict.

        Raises:
            ValidationError: If the descriptor or any node/edge is malformed
        """
        if not isinstance(data, dict):
            return cls.model_validate(data)
        return cls.model_validate({
            "title": data.get('title') or "Untitled Diagram",
            "type": data.get('type') or DiagramType.GRAPH.value,
            "description": data.get('description'),
            "nodes": data.get('nodes') or [],
            "edges": data.get('edges') or [],
        })


ANALYSIS_DIAGRAMS_KEY = "graphDiagrams"


def diagrams_from_analysis(payload: dict) -> list[GraphDiagram]:
    """
    Extract the diagram descriptors from an analysis result payload.

    Args:
        payload: The JSON object returned by the analysis service

    Returns:
        List of descriptors (empty when the notes produced none)

    Raises:
        ValueError: If `graphDiagrams` is not a list, or an entry is
            malformed (raised as a pydantic ValidationError)
    """
    raw = payload.get(ANALYSIS_DIAGRAMS_KEY) or []
    if not isinstance(raw, list):
        raise ValueError(f"'{ANALYSIS_DIAGRAMS_KEY}' must be a list of diagram descriptors")
    return [GraphDiagram.from_json_dict(item) for item in raw]


def positions_to_dict(positions: PositionMap) -> dict[str, dict[str, float]]:
    """Convert a position map to plain JSON."""
    return {node_id: {"x": p.x, "y": p.y} for node_id, p in positions.items()}


# --- API Request/Response Models ---

class PointerRequest(BaseModel):
    """A pointer event in screen coordinates."""
    x: float
    y: float


class ViewportRequest(BaseModel):
    """Where the logical canvas is drawn on screen."""
    left: float = 0.0
    top: float = 0.0
    width: float = CANVAS_WIDTH
    height: float = CANVAS_HEIGHT
