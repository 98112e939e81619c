"""
Pytest configuration and fixtures.

Provides sample descriptors for each diagram type and a FastAPI test client
bound to a fresh DiagramManager per test.
"""
import pytest
from fastapi.testclient import TestClient

from studygraph.models import GraphDiagram
from studygraph_server.diagram_manager import DiagramManager
from studygraph_server.main import app, get_manager


@pytest.fixture
def linked_list_descriptor() -> dict:
    return {
        "title": "Singly linked list",
        "type": "linked-list",
        "nodes": [
            {"id": "a", "label": "Head"},
            {"id": "b", "label": "Middle"},
            {"id": "c", "label": "Tail"},
        ],
        "edges": [
            {"from": "a", "to": "b", "label": "next"},
            {"from": "b", "to": "c", "label": "next"},
        ],
    }


@pytest.fixture
def tree_descriptor() -> dict:
    return {
        "title": "Binary search tree",
        "type": "tree",
        "description": "Insertion order 8, 3, 10, 1",
        "nodes": [
            {"id": "root", "label": "8", "level": 0},
            {"id": "l", "label": "3", "level": 1},
            {"id": "r", "label": "10", "level": 1},
            {"id": "ll", "label": "1", "level": 2},
        ],
        "edges": [
            {"from": "root", "to": "l"},
            {"from": "root", "to": "r"},
            {"from": "l", "to": "ll"},
        ],
    }


@pytest.fixture
def graph_descriptor() -> dict:
    return {
        "title": "Cycle",
        "type": "graph",
        "nodes": [
            {"id": "n0", "label": "A"},
            {"id": "n1", "label": "B"},
            {"id": "n2", "label": "C"},
            {"id": "n3", "label": "D"},
        ],
        "edges": [
            {"from": "n0", "to": "n1"},
            {"from": "n1", "to": "n2"},
            {"from": "n2", "to": "n3"},
            {"from": "n3", "to": "ghost"},
        ],
    }


@pytest.fixture
def tree_diagram(tree_descriptor) -> GraphDiagram:
    return GraphDiagram.from_json_dict(tree_descriptor)


@pytest.fixture
def graph_diagram(graph_descriptor) -> GraphDiagram:
    return GraphDiagram.from_json_dict(graph_descriptor)


@pytest.fixture
def linked_list_diagram(linked_list_descriptor) -> GraphDiagram:
    return GraphDiagram.from_json_dict(linked_list_descriptor)


@pytest.fixture
def manager() -> DiagramManager:
    return DiagramManager(max_instances=5)


@pytest.fixture
def client(manager):
    """Test client whose routes use the per-test manager."""
    app.dependency_overrides[get_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()
