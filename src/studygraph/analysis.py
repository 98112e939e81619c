"""
Diagram analysis - Structural summary of a diagram descriptor.

Counts what a diagram card shows (nodes, edges), how many edges actually
render at the computed layout, and the connectivity of the graph.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .geometry import resolve_edges
from .layout import compute_layout, layout_strategy_name
from .models import is_hierarchical

if TYPE_CHECKING:
    from .models import GraphDiagram


@dataclass
class ConnectedComponent:
    """A connected component in the diagram graph."""
    node_ids: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass
class NodeConnectionInfo:
    """Connection information for a single node."""
    node_id: str
    label: str
    incoming: int = 0
    outgoing: int = 0

    @property
    def total(self) -> int:
        return self.incoming + self.outgoing


@dataclass
class DiagramSummary:
    """Summary of a diagram's structure."""
    title: str
    type: str
    layout: str
    directional: bool
    total_nodes: int
    total_edges: int
    rendered_edges: int
    nodes_by_level: dict[int, int]
    connected_components: int
    most_connected_nodes: list[NodeConnectionInfo]
    orphan_count: int

    @property
    def dropped_edges(self) -> int:
        return self.total_edges - self.rendered_edges

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "type": self.type,
            "layout": self.layout,
            "directional": self.directional,
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "rendered_edges": self.rendered_edges,
            "dropped_edges": self.dropped_edges,
            "nodes_by_level": {str(k): v for k, v in self.nodes_by_level.items()},
            "connected_components": self.connected_components,
            "most_connected_nodes": [
                {
                    "id": n.node_id,
                    "label": n.label,
                    "connections": n.total,
                    "incoming": n.incoming,
                    "outgoing": n.outgoing
                }
                for n in self.most_connected_nodes
            ],
            "orphan_count": self.orphan_count
        }


def find_connected_components(diagram: "GraphDiagram") -> list[ConnectedComponent]:
    """
    Find the connected components of the diagram using BFS.

    Edges are treated as undirected; edges with a missing endpoint are
    ignored.

    Args:
        diagram: The diagram to analyze

    Returns:
        List of ConnectedComponent objects, in first-node order
    """
    node_ids = list(dict.fromkeys(n.id for n in diagram.nodes))
    adjacency: dict[str, set[str]] = {nid: set() for nid in node_ids}

    for edge in diagram.edges:
        if edge.source in adjacency and edge.target in adjacency:
            adjacency[edge.source].add(edge.target)
            adjacency[edge.target].add(edge.source)

    visited: set[str] = set()
    components: list[ConnectedComponent] = []

    for start_node in node_ids:
        if start_node in visited:
            continue

        component_nodes: list[str] = []
        queue = [start_node]
        while queue:
            current = queue.pop(0)
            if current in visited:
                continue
            visited.add(current)
            component_nodes.append(current)
            queue.extend(n for n in adjacency[current] if n not in visited)

        components.append(ConnectedComponent(node_ids=component_nodes))

    return components


def calculate_node_connections(diagram: "GraphDiagram") -> dict[str, NodeConnectionInfo]:
    """Incoming/outgoing edge counts per node."""
    connections: dict[str, NodeConnectionInfo] = {}
    for node in diagram.nodes:
        connections[node.id] = NodeConnectionInfo(node_id=node.id, label=node.label)

    for edge in diagram.edges:
        if edge.source in connections:
            connections[edge.source].outgoing += 1
        if edge.target in connections:
            connections[edge.target].incoming += 1

    return connections


def summarize_diagram(diagram: "GraphDiagram", top_n: int = 5) -> DiagramSummary:
    """
    Generate a summary of a diagram.

    Args:
        diagram: The diagram to summarize
        top_n: Number of top connected nodes to include

    Returns:
        DiagramSummary object
    """
    positions = compute_layout(diagram.nodes, diagram.type)
    rendered = resolve_edges(diagram, positions)

    level_counts: dict[int, int] = defaultdict(int)
    if is_hierarchical(diagram.type):
        for node in diagram.nodes:
            level_counts[node.effective_level] += 1

    connections = calculate_node_connections(diagram)
    sorted_by_connections = sorted(
        connections.values(),
        key=lambda x: x.total,
        reverse=True
    )
    most_connected = [n for n in sorted_by_connections[:top_n] if n.total > 0]
    orphan_count = sum(1 for n in connections.values() if n.total == 0)

    return DiagramSummary(
        title=diagram.title,
        type=diagram.type,
        layout=layout_strategy_name(diagram.type),
        directional=diagram.directional,
        total_nodes=len(diagram.nodes),
        total_edges=len(diagram.edges),
        rendered_edges=len(rendered),
        nodes_by_level=dict(sorted(level_counts.items())),
        connected_components=len(find_connected_components(diagram)),
        most_connected_nodes=most_connected,
        orphan_count=orphan_count
    )
