"""SVG renderer using drawsvg."""

from typing import Optional, TYPE_CHECKING

import drawsvg as draw

from .geometry import resolve_edges
from .layout import compute_layout
from .models import CANVAS_HEIGHT, CANVAS_WIDTH, NODE_RADIUS

if TYPE_CHECKING:
    from .models import GraphDiagram, PositionMap


PRIMARY_COLOR = "#6366f1"
LABEL_COLOR = "#ffffff"
EDGE_LABEL_COLOR = "#64748b"
BACKGROUND = "#f8fafc"
MAX_LABEL_CHARS = 6


def truncate_label(label: str, max_chars: int = MAX_LABEL_CHARS) -> str:
    """Shorten a node label to fit inside its circle."""
    if len(label) > max_chars:
        return label[:max_chars] + "…"
    return label


def _arrowhead() -> draw.Marker:
    # Tip sits on the line end; the body extends back along the line
    marker = draw.Marker(-9, -3.5, 1, 3.5, orient="auto")
    marker.append(draw.Lines(-9, -3.5, 1, 0, -9, 3.5, close=True, fill=PRIMARY_COLOR))
    return marker


def render_drawing(
    diagram: "GraphDiagram",
    positions: Optional["PositionMap"] = None
) -> draw.Drawing:
    """
    Draw a diagram on the logical canvas.

    Args:
        diagram: The diagram descriptor
        positions: Node positions; the computed layout when omitted

    Returns:
        The drawsvg Drawing
    """
    if positions is None:
        positions = compute_layout(diagram.nodes, diagram.type)

    d = draw.Drawing(CANVAS_WIDTH, CANVAS_HEIGHT)
    d.append(draw.Rectangle(0, 0, CANVAS_WIDTH, CANVAS_HEIGHT, fill=BACKGROUND, rx=8))

    arrow = _arrowhead() if diagram.directional else None

    # Edges first so node circles cover the line ends
    for segment in resolve_edges(diagram, positions):
        line_args = {"stroke": PRIMARY_COLOR, "stroke_width": 2}
        if arrow is not None:
            line_args["marker_end"] = arrow
        d.append(draw.Line(segment.x1, segment.y1, segment.x2, segment.y2, **line_args))

        if segment.label:
            label_x, label_y = segment.label_anchor
            d.append(draw.Text(
                segment.label, 12, label_x, label_y,
                fill=EDGE_LABEL_COLOR,
                text_anchor="middle",
            ))

    for node in diagram.nodes:
        pos = positions.get(node.id)
        if pos is None:
            continue
        d.append(draw.Circle(pos.x, pos.y, NODE_RADIUS, fill=PRIMARY_COLOR))
        d.append(draw.Text(
            truncate_label(node.label), 12, pos.x, pos.y,
            fill=LABEL_COLOR,
            text_anchor="middle",
            dominant_baseline="middle",
            font_weight="500",
        ))

    return d


def render_svg(
    diagram: "GraphDiagram",
    positions: Optional["PositionMap"] = None
) -> str:
    """Render a diagram to SVG markup."""
    return render_drawing(diagram, positions).as_svg()
