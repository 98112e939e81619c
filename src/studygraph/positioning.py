"""
Interactive positioning - live node positions with drag-to-reposition.

This module implements:
- A document-level pointer hub (the global move/up/cancel listeners)
- Scoped pointer capture: listeners exist only while a drag is active
- A per-diagram controller that owns a mutable copy of the computed layout

The drag state machine:
- IDLE: no listeners registered on the hub
- DRAGGING(node, offset): pointer-down on a node captures the hub; every
  move writes `pointer - offset`, clamped to the canvas, for that node only
- pointerup or pointercancel (anywhere in the document) returns to IDLE and
  releases the capture
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from .geometry import EdgeSegment, resolve_edges
from .layout import compute_layout
from .models import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DRAG_INSET,
    GraphDiagram,
    Position,
    PositionMap,
)
from .transform import ScreenTransform

logger = logging.getLogger(__name__)


POINTER_MOVE = "pointermove"
POINTER_UP = "pointerup"
POINTER_CANCEL = "pointercancel"
POINTER_EVENTS = (POINTER_MOVE, POINTER_UP, POINTER_CANCEL)

# Drag clamp box
MIN_X = DRAG_INSET
MAX_X = CANVAS_WIDTH - DRAG_INSET
MIN_Y = DRAG_INSET
MAX_Y = CANVAS_HEIGHT - DRAG_INSET


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in screen coordinates."""
    x: float = 0.0
    y: float = 0.0


PointerHandler = Callable[[PointerEvent], None]


class CoordinateMapper(Protocol):
    def to_logical(self, x: float, y: float) -> Position: ...


class PointerHub:
    """
    Document-wide pointer listener registry.

    Events are dispatched here regardless of which diagram (if any) is under
    the pointer, so a drag that ends outside the canvas still sees the up.
    """

    def __init__(self):
        self._listeners: dict[str, list[PointerHandler]] = defaultdict(list)

    def add_listener(self, event_type: str, handler: PointerHandler):
        if event_type not in POINTER_EVENTS:
            raise ValueError(f"Unknown pointer event: {event_type}")
        self._listeners[event_type].append(handler)

    def remove_listener(self, event_type: str, handler: PointerHandler):
        handlers = self._listeners.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(h) for h in self._listeners.values())

    def dispatch(self, event_type: str, event: PointerEvent) -> int:
        """
        Deliver an event to every current listener.

        Returns:
            Number of handlers invoked
        """
        # Copy: handlers may release their capture while we iterate
        handlers = list(self._listeners.get(event_type, []))
        for handler in handlers:
            handler(event)
        return len(handlers)


class PointerCapture:
    """
    Scoped acquisition of the document-level drag listeners.

    Registers move, up and cancel handlers on construction; `release()`
    removes them and is safe to call more than once.
    """

    def __init__(
        self,
        hub: PointerHub,
        on_move: PointerHandler,
        on_end: PointerHandler
    ):
        self._hub = hub
        self._handlers = {
            POINTER_MOVE: on_move,
            POINTER_UP: on_end,
            POINTER_CANCEL: on_end,
        }
        self._active = True
        for event_type, handler in self._handlers.items():
            hub.add_listener(event_type, handler)

    @property
    def active(self) -> bool:
        return self._active

    def release(self):
        if not self._active:
            return
        self._active = False
        for event_type, handler in self._handlers.items():
            self._hub.remove_listener(event_type, handler)

    def __enter__(self) -> "PointerCapture":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragState:
    """An active drag: the node and the pointer offset held for its duration."""
    node_id: str
    offset_x: float
    offset_y: float


def clamp_position(x: float, y: float) -> Position:
    """Clamp each axis independently to the drag box."""
    return Position(
        x=min(max(x, MIN_X), MAX_X),
        y=min(max(y, MIN_Y), MAX_Y),
    )


class PositioningController:
    """
    Owns the live positions of one diagram instance.

    Seeded from the layout engine; mutated only by drags on this instance;
    `reset()` recomputes the layout. Two controllers never share a map, even
    when built from the same descriptor.
    """

    def __init__(
        self,
        diagram: GraphDiagram,
        transform: Optional[CoordinateMapper] = None,
        hub: Optional[PointerHub] = None
    ):
        self._diagram = diagram
        self._transform: CoordinateMapper = transform or ScreenTransform.identity()
        self._hub = hub if hub is not None else PointerHub()
        self._positions: PositionMap = compute_layout(diagram.nodes, diagram.type)
        self._drag: Optional[DragState] = None
        self._capture: Optional[PointerCapture] = None
        self._on_change_callbacks: list[Callable[[], None]] = []

    # --- Properties ---

    @property
    def diagram(self) -> GraphDiagram:
        return self._diagram

    @property
    def hub(self) -> PointerHub:
        return self._hub

    @property
    def positions(self) -> PositionMap:
        """A copy of the current position map."""
        return dict(self._positions)

    @property
    def phase(self) -> DragPhase:
        return DragPhase.DRAGGING if self._drag else DragPhase.IDLE

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def dragging_node(self) -> Optional[str]:
        return self._drag.node_id if self._drag else None

    @property
    def drag_state(self) -> Optional[DragState]:
        return self._drag

    def position_of(self, node_id: str) -> Optional[Position]:
        return self._positions.get(node_id)

    def set_transform(self, transform: CoordinateMapper):
        """Swap the coordinate mapper, e.g. after the surface was resized."""
        self._transform = transform

    # --- Change Callbacks ---

    def on_change(self, callback: Callable[[], None]):
        """Register a callback for position changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        for callback in self._on_change_callbacks:
            callback()

    # --- Drag State Machine ---

    def pointer_down(self, node_id: str, screen_x: float, screen_y: float) -> bool:
        """
        Start dragging a node.

        Args:
            node_id: The node under the pointer
            screen_x: Pointer x in screen coordinates
            screen_y: Pointer y in screen coordinates

        Returns:
            True if a drag started; False for an unknown node or when a
            drag is already active on this hub
        """
        current = self._positions.get(node_id)
        if current is None:
            logger.debug("Ignoring pointer-down on unknown node %s", node_id)
            return False
        # One pointer: any live capture on the shared hub blocks a new drag
        if self._drag is not None or self._hub.listener_count(POINTER_UP):
            return False

        pointer = self._transform.to_logical(screen_x, screen_y)
        self._drag = DragState(
            node_id=node_id,
            offset_x=pointer.x - current.x,
            offset_y=pointer.y - current.y,
        )
        self._capture = PointerCapture(self._hub, self._handle_move, self._handle_end)
        return True

    def _handle_move(self, event: PointerEvent):
        drag = self._drag
        if drag is None or drag.node_id not in self._positions:
            return

        pointer = self._transform.to_logical(event.x, event.y)
        self._positions[drag.node_id] = clamp_position(
            pointer.x - drag.offset_x,
            pointer.y - drag.offset_y,
        )
        self._notify_change()

    def _handle_end(self, event: PointerEvent):
        self.end_drag()

    def end_drag(self) -> bool:
        """
        Return to IDLE and release the document listeners.

        Returns:
            True if a drag was active
        """
        capture, self._capture = self._capture, None
        was_dragging = self._drag is not None
        self._drag = None
        if capture is not None:
            capture.release()
        return was_dragging

    # --- Reset / Lifecycle ---

    def reset(self) -> PositionMap:
        """
        Discard all drag mutations by recomputing the layout.

        An active drag is ended first so the next move cannot write into
        the fresh map.
        """
        self.end_drag()
        self._positions = compute_layout(self._diagram.nodes, self._diagram.type)
        self._notify_change()
        return self.positions

    def close(self):
        """Release anything held on the document hub."""
        self.end_drag()

    # --- Rendering Output ---

    def edge_segments(self) -> list[EdgeSegment]:
        """Trimmed edge segments at the current positions."""
        return resolve_edges(self._diagram, self._positions)
