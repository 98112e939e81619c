"""
Edge geometry - trimming edge lines to node boundaries.

Shared by the static SVG renderer and the interactive controller so that
both draw the same segments for the same positions.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .models import ARROW_RESERVE, NODE_RADIUS, Position

if TYPE_CHECKING:
    from .models import GraphDiagram, PositionMap

logger = logging.getLogger(__name__)

# Edge labels sit this far above the segment midpoint
LABEL_LIFT = 8


@dataclass
class EdgeSegment:
    """A drawable edge line, already trimmed to the node circles."""
    source: str
    target: str
    x1: float
    y1: float
    x2: float
    y2: float
    directional: bool = False
    label: str = ""

    @property
    def label_anchor(self) -> tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2 - LABEL_LIFT)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "from": self.source,
            "to": self.target,
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "directional": self.directional,
        }
        if self.label:
            result["label"] = self.label
            result["label_x"], result["label_y"] = self.label_anchor
        return result


def trim_edge(
    start: Position,
    end: Position,
    directional: bool,
    radius: float = NODE_RADIUS,
    arrow_reserve: float = ARROW_RESERVE
) -> Optional[tuple[float, float, float, float]]:
    """
    Offset both ends of a centre-to-centre line onto the node boundaries.

    Args:
        start: Centre of the source node
        end: Centre of the destination node
        directional: Reserve room for an arrowhead at the destination
        radius: Node radius
        arrow_reserve: Extra trim at the destination when directional

    Returns:
        (x1, y1, x2, y2), or None when the centres coincide
    """
    dx = end.x - start.x
    dy = end.y - start.y
    distance = math.hypot(dx, dy)
    if distance == 0:
        return None

    ux = dx / distance
    uy = dy / distance
    end_trim = radius + (arrow_reserve if directional else 0)

    return (
        start.x + ux * radius,
        start.y + uy * radius,
        end.x - ux * end_trim,
        end.y - uy * end_trim,
    )


def resolve_edges(
    diagram: "GraphDiagram",
    positions: "PositionMap"
) -> list[EdgeSegment]:
    """
    Build the drawable segment list for a diagram at the given positions.

    Edges whose endpoints are missing from the position map, and edges
    between coincident centres, are left out; the rest are unaffected.

    Args:
        diagram: The diagram descriptor
        positions: Current node positions

    Returns:
        List of EdgeSegment objects in descriptor edge order
    """
    directional = diagram.directional
    segments: list[EdgeSegment] = []

    for edge in diagram.edges:
        start = positions.get(edge.source)
        end = positions.get(edge.target)
        if start is None or end is None:
            logger.debug("Skipping edge %s -> %s: dangling endpoint", edge.source, edge.target)
            continue

        trimmed = trim_edge(start, end, directional)
        if trimmed is None:
            continue

        x1, y1, x2, y2 = trimmed
        segments.append(EdgeSegment(
            source=edge.source,
            target=edge.target,
            x1=x1,
            y1=y1,
            x2=x2,
            y2=y2,
            directional=directional,
            label=edge.label,
        ))

    return segments
