"""
studygraph - Layout, interactive positioning and rendering for diagrams
generated from study notes.

This package is the single source of truth for diagram geometry, used by
the backend API and the command line tool alike.
"""

from .models import (
    # Enums
    DiagramType,
    # Core models
    Node,
    Edge,
    Position,
    PositionMap,
    GraphDiagram,
    # Helpers
    is_directional,
    is_hierarchical,
    diagrams_from_analysis,
    positions_to_dict,
)

from .layout import compute_layout, linked_list_layout, level_layout, circular_layout
from .geometry import EdgeSegment, trim_edge, resolve_edges
from .transform import ScreenTransform
from .positioning import (
    DragPhase,
    PointerEvent,
    PointerHub,
    PointerCapture,
    PositioningController,
)
from .validation import validate_diagram, validation_summary, ValidationIssue, IssueSeverity
from .analysis import summarize_diagram, find_connected_components
from .render import render_svg
from .export import export_html

__all__ = [
    # Enums
    "DiagramType",
    # Models
    "Node",
    "Edge",
    "Position",
    "PositionMap",
    "GraphDiagram",
    "is_directional",
    "is_hierarchical",
    "diagrams_from_analysis",
    "positions_to_dict",
    # Layout
    "compute_layout",
    "linked_list_layout",
    "level_layout",
    "circular_layout",
    # Geometry
    "EdgeSegment",
    "trim_edge",
    "resolve_edges",
    "ScreenTransform",
    # Positioning
    "DragPhase",
    "PointerEvent",
    "PointerHub",
    "PointerCapture",
    "PositioningController",
    # Validation
    "validate_diagram",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
    # Analysis
    "summarize_diagram",
    "find_connected_components",
    # Output
    "render_svg",
    "export_html",
]
