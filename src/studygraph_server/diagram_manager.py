"""
Diagram Manager - Live diagram instances for the interactive API.

This module implements:
- A registry of diagram instances, each with its own PositioningController
- One shared PointerHub standing in for the document, so pointer moves and
  ups are routed without naming a diagram
- Per-instance viewports (screen-to-logical transforms)
- Change callbacks for real-time sync
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from studygraph import config
from studygraph.models import GraphDiagram, diagrams_from_analysis, positions_to_dict
from studygraph.positioning import (
    POINTER_CANCEL,
    POINTER_MOVE,
    POINTER_UP,
    PointerEvent,
    PointerHub,
    PositioningController,
)
from studygraph.transform import ScreenTransform

logger = logging.getLogger(__name__)


def generate_instance_id() -> str:
    """Generate a unique diagram instance ID."""
    return f"dg-{uuid.uuid4().hex[:8]}"


@dataclass
class DiagramInstance:
    """A diagram on screen: descriptor, live positions and viewport."""
    id: str
    controller: PositioningController
    transform: ScreenTransform = field(default_factory=ScreenTransform.identity)

    @property
    def diagram(self) -> GraphDiagram:
        return self.controller.diagram

    def to_json_dict(self) -> dict:
        return {
            "id": self.id,
            "diagram": self.diagram.to_json_dict(),
            "positions": positions_to_dict(self.controller.positions),
            "edges": [s.to_dict() for s in self.controller.edge_segments()],
            "phase": self.controller.phase.value,
            "dragging": self.controller.dragging_node,
        }


class DiagramManager:
    """
    Manages the diagram instances of one document.

    Every instance gets its own controller (and so its own position map);
    all controllers share the manager's hub, which only ever holds the
    listeners of the one active drag.
    """

    def __init__(self, max_instances: int = config.MAX_INSTANCES):
        self._instances: dict[str, DiagramInstance] = {}
        self._hub = PointerHub()
        self._max_instances = max_instances
        self._on_change_callbacks: list[Callable[[str], None]] = []

    # --- Properties ---

    @property
    def hub(self) -> PointerHub:
        return self._hub

    @property
    def instance_count(self) -> int:
        return len(self._instances)

    @property
    def active_drag(self) -> Optional[tuple[str, str]]:
        """(instance_id, node_id) of the drag in progress, if any."""
        for instance in self._instances.values():
            if instance.controller.is_dragging:
                return instance.id, instance.controller.dragging_node
        return None

    # --- Change Callbacks ---

    def on_change(self, callback: Callable[[str], None]):
        """Register a callback receiving the id of the changed instance. Idempotent."""
        if callback not in self._on_change_callbacks:
            self._on_change_callbacks.append(callback)

    def _notify_change(self, instance_id: str):
        for callback in self._on_change_callbacks:
            try:
                callback(instance_id)
            except Exception:
                logger.exception("Change callback failed for %s", instance_id)

    # --- Instances ---

    def load_diagram(self, diagram: GraphDiagram) -> DiagramInstance:
        """Create a new instance for a descriptor."""
        if len(self._instances) >= self._max_instances:
            raise ValueError(f"Too many open diagrams (limit {self._max_instances})")

        instance_id = generate_instance_id()
        controller = PositioningController(diagram, hub=self._hub)
        instance = DiagramInstance(id=instance_id, controller=controller)
        controller.set_transform(instance.transform)
        controller.on_change(lambda: self._notify_change(instance_id))
        self._instances[instance_id] = instance

        logger.info(
            "Loaded diagram %s '%s' (%s, %d nodes, %d edges)",
            instance_id, diagram.title, diagram.type, len(diagram.nodes), len(diagram.edges),
        )
        self._notify_change(instance_id)
        return instance

    def load_analysis(self, payload: dict) -> list[DiagramInstance]:
        """Create one instance per diagram in an analysis result."""
        diagrams = diagrams_from_analysis(payload)
        if len(self._instances) + len(diagrams) > self._max_instances:
            raise ValueError(f"Too many open diagrams (limit {self._max_instances})")
        return [self.load_diagram(d) for d in diagrams]

    def get_instance(self, instance_id: str) -> Optional[DiagramInstance]:
        return self._instances.get(instance_id)

    def list_instances(self) -> list[DiagramInstance]:
        return list(self._instances.values())

    def close_instance(self, instance_id: str) -> bool:
        """Discard an instance, releasing any drag it holds."""
        instance = self._instances.pop(instance_id, None)
        if instance is None:
            return False
        instance.controller.close()
        logger.info("Closed diagram %s", instance_id)
        return True

    def set_viewport(
        self,
        instance_id: str,
        left: float,
        top: float,
        width: float,
        height: float
    ) -> Optional[DiagramInstance]:
        """Record where an instance's canvas is drawn on screen."""
        instance = self._instances.get(instance_id)
        if instance is None:
            return None
        instance.transform = ScreenTransform.fit_viewbox(left, top, width, height)
        instance.controller.set_transform(instance.transform)
        return instance

    # --- Pointer Input ---

    def pointer_down(
        self,
        instance_id: str,
        node_id: str,
        x: float,
        y: float
    ) -> Optional[bool]:
        """
        Press on a node of an instance.

        Returns:
            None for an unknown instance, otherwise whether a drag started
        """
        instance = self._instances.get(instance_id)
        if instance is None:
            return None
        return instance.controller.pointer_down(node_id, x, y)

    def pointer_move(self, x: float, y: float) -> int:
        """Document-level move; returns the number of listeners reached."""
        return self._hub.dispatch(POINTER_MOVE, PointerEvent(x=x, y=y))

    def pointer_up(self, x: float = 0.0, y: float = 0.0) -> int:
        return self._hub.dispatch(POINTER_UP, PointerEvent(x=x, y=y))

    def pointer_cancel(self) -> int:
        """The pointer left the window mid-drag."""
        return self._hub.dispatch(POINTER_CANCEL, PointerEvent())

    def reset(self, instance_id: str) -> Optional[DiagramInstance]:
        """Restore an instance to its computed layout."""
        instance = self._instances.get(instance_id)
        if instance is None:
            return None
        instance.controller.reset()
        return instance

    # --- State ---

    def get_state(self) -> dict:
        """Get the full state of all instances."""
        drag = self.active_drag
        return {
            "instances": [i.to_json_dict() for i in self._instances.values()],
            "active_drag": {"instance_id": drag[0], "node_id": drag[1]} if drag else None,
            "listeners": self._hub.listener_count(),
        }


# Global instance
diagram_manager = DiagramManager()
