from studygraph.export import export_html
from studygraph.layout import compute_layout
from studygraph.models import Edge, GraphDiagram, Node, Position
from studygraph.render import render_svg, truncate_label


def test_truncate_label():
    assert truncate_label("Queue") == "Queue"
    assert truncate_label("Stack!") == "Stack!"
    assert truncate_label("Dijkstra") == "Dijkst…"


def test_svg_has_one_circle_per_positioned_node(tree_diagram):
    svg = render_svg(tree_diagram)
    assert svg.count("<circle") == 4
    assert 'viewBox="0 0 600 400"' in svg


def test_arrowheads_only_for_directional_types(linked_list_diagram, tree_diagram):
    assert "<marker" in render_svg(linked_list_diagram)
    assert "<marker" not in render_svg(tree_diagram)


def test_svg_labels_are_truncated_and_escaped():
    diagram = GraphDiagram(
        type="graph",
        nodes=[Node(id="a", label="<b>"), Node(id="b", label="Adjacency")],
        edges=[Edge(source="a", target="b")],
    )
    svg = render_svg(diagram)

    assert "Adjace…" in svg
    assert "Adjacency" not in svg
    assert "<b>" not in svg


def test_svg_uses_given_positions(graph_diagram):
    positions = compute_layout(graph_diagram.nodes, graph_diagram.type)
    positions["n0"] = Position(x=123, y=321)
    svg = render_svg(graph_diagram, positions)
    assert 'cx="123' in svg


def test_export_contains_tables(tree_diagram):
    doc = export_html(tree_diagram)

    assert doc.startswith("<!DOCTYPE html>")
    assert "<h1>Binary search tree</h1>" in doc
    assert '<p class="description">Insertion order 8, 3, 10, 1</p>' in doc
    assert "<td>root</td><td>8</td><td>0</td>" in doc
    assert "<td>root</td><td>l</td><td>-</td>" in doc


def test_export_marks_missing_levels_and_escapes(linked_list_diagram):
    diagram = linked_list_diagram.model_copy(update={"title": "A <list> & more"})
    doc = export_html(diagram)

    assert "<td>a</td><td>Head</td><td>-</td>" in doc
    assert "<td>a</td><td>b</td><td>next</td>" in doc
    assert "A &lt;list&gt; &amp; more" in doc
    assert "description" not in doc.split("<body>")[1]
