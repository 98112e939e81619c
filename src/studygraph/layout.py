"""
Layout algorithms for diagram nodes.

Each diagram type has a natural reading order, and the layout rule makes it
legible without a force-directed solver:
- Linked list: a single horizontal row in list order
- Tree / binary tree: one row per level, top to bottom
- Graph / directed / flowchart: a circle, clockwise from the top

All layout functions are pure: they return a fresh position map and never
touch the nodes they are given.
"""

import math
from collections import defaultdict
from typing import TYPE_CHECKING

from .models import (
    CANVAS_HEIGHT,
    CANVAS_PADDING,
    CANVAS_WIDTH,
    DiagramType,
    Position,
    PositionMap,
)

if TYPE_CHECKING:
    from .models import Node


# Nudges tree rows off the top padding boundary
LEVEL_ROW_OFFSET = 30
# Extra inset of the circle inside the padded area
CIRCLE_INSET = 20


def _slot_centers(count: int, width: float, padding: float) -> list[float]:
    """X coordinates of `count` equal slots across the usable width."""
    slot_width = (width - 2 * padding) / max(count, 1)
    return [padding + slot_width * i + slot_width / 2 for i in range(count)]


def linked_list_layout(
    nodes: list["Node"],
    width: float = CANVAS_WIDTH,
    height: float = CANVAS_HEIGHT,
    padding: float = CANVAS_PADDING
) -> PositionMap:
    """
    Arrange nodes on one horizontal line at the vertical centre.

    Input order defines list order and is preserved left to right.

    Args:
        nodes: Nodes in list order
        width: Canvas width
        height: Canvas height
        padding: Margin kept free on each side

    Returns:
        Mapping of node id to position
    """
    positions: PositionMap = {}
    xs = _slot_centers(len(nodes), width, padding)
    for node, x in zip(nodes, xs):
        positions[node.id] = Position(x=x, y=height / 2)
    return positions


def level_layout(
    nodes: list["Node"],
    width: float = CANVAS_WIDTH,
    height: float = CANVAS_HEIGHT,
    padding: float = CANVAS_PADDING
) -> PositionMap:
    """
    Arrange nodes in rows by their `level` (missing level is 0).

    The usable height is split into one band per level up to the deepest
    level present. Within a row nodes keep their input order and share the
    width equally, scoped to that row's node count.

    Args:
        nodes: Nodes to arrange
        width: Canvas width
        height: Canvas height
        padding: Margin kept free on each side

    Returns:
        Mapping of node id to position
    """
    positions: PositionMap = {}
    if not nodes:
        return positions

    levels: dict[int, list["Node"]] = defaultdict(list)
    for node in nodes:
        levels[node.effective_level].append(node)

    level_keys = sorted(levels)
    max_level = max(max(level_keys), 0)
    level_height = (height - 2 * padding) / max(max_level + 1, 1)

    for level in level_keys:
        row = levels[level]
        y = padding + level * level_height + LEVEL_ROW_OFFSET
        for node, x in zip(row, _slot_centers(len(row), width, padding)):
            positions[node.id] = Position(x=x, y=y)

    return positions


def circular_layout(
    nodes: list["Node"],
    width: float = CANVAS_WIDTH,
    height: float = CANVAS_HEIGHT,
    padding: float = CANVAS_PADDING
) -> PositionMap:
    """
    Arrange nodes evenly on a circle, starting at the top and going clockwise.

    Args:
        nodes: Nodes to arrange
        width: Canvas width
        height: Canvas height
        padding: Margin kept free on each side

    Returns:
        Mapping of node id to position
    """
    positions: PositionMap = {}
    angle_step = 2 * math.pi / max(len(nodes), 1)
    center_x = width / 2
    center_y = height / 2
    radius = min(width, height) / 2 - padding - CIRCLE_INSET

    for i, node in enumerate(nodes):
        angle = angle_step * i - math.pi / 2
        positions[node.id] = Position(
            x=center_x + radius * math.cos(angle),
            y=center_y + radius * math.sin(angle),
        )

    return positions


LAYOUT_STRATEGIES = {
    DiagramType.LINKED_LIST.value: linked_list_layout,
    DiagramType.TREE.value: level_layout,
    DiagramType.BINARY_TREE.value: level_layout,
}


def layout_strategy_name(diagram_type: "str | DiagramType") -> str:
    """Name of the layout rule a diagram type uses."""
    if isinstance(diagram_type, DiagramType):
        diagram_type = diagram_type.value
    strategy = LAYOUT_STRATEGIES.get(diagram_type, circular_layout)
    return strategy.__name__.removesuffix("_layout")


def compute_layout(
    nodes: list["Node"],
    diagram_type: "str | DiagramType",
    width: float = CANVAS_WIDTH,
    height: float = CANVAS_HEIGHT,
    padding: float = CANVAS_PADDING
) -> PositionMap:
    """
    Compute a deterministic position for every node of a diagram.

    Total over any node list: unknown diagram types use the circular layout
    and an empty node list gives an empty map.

    Args:
        nodes: The diagram's nodes, in descriptor order
        diagram_type: One of the DiagramType values
        width: Canvas width
        height: Canvas height
        padding: Margin kept free on each side

    Returns:
        Mapping of node id to position, one entry per distinct id
    """
    if isinstance(diagram_type, DiagramType):
        diagram_type = diagram_type.value
    strategy = LAYOUT_STRATEGIES.get(diagram_type, circular_layout)
    return strategy(nodes, width=width, height=height, padding=padding)
