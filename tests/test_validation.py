from studygraph.analysis import find_connected_components, summarize_diagram
from studygraph.models import Edge, GraphDiagram, Node
from studygraph.validation import IssueSeverity, validate_diagram, validation_summary


def _messages(issues, severity):
    return [i.message for i in issues if i.severity == severity]


def test_clean_tree_has_no_issues(tree_diagram):
    issues = validate_diagram(tree_diagram)
    assert issues == []
    assert validation_summary(issues)["valid"] is True


def test_empty_diagram_is_info():
    issues = validate_diagram(GraphDiagram(title="Empty", type="tree"))
    assert len(issues) == 1
    assert issues[0].severity == IssueSeverity.INFO


def test_dangling_edge_is_a_warning(graph_diagram):
    issues = validate_diagram(graph_diagram)
    warnings = _messages(issues, IssueSeverity.WARNING)

    assert warnings == ["Edge references non-existent target node: ghost"]
    assert issues[0].to_dict()["edge_index"] == 3
    assert validation_summary(issues)["valid"] is True


def test_duplicate_ids_self_loops_and_duplicate_edges():
    diagram = GraphDiagram(
        type="directed",
        nodes=[Node(id="a"), Node(id="a"), Node(id="b")],
        edges=[
            Edge(source="a", target="b"),
            Edge(source="a", target="b"),
            Edge(source="b", target="b"),
        ],
    )
    issues = validate_diagram(diagram)
    summary = validation_summary(issues)

    assert _messages(issues, IssueSeverity.ERROR) == ["Duplicate node id: a"]
    assert summary["valid"] is False
    assert summary["warnings"] == 2


def test_unknown_type_and_ignored_levels():
    diagram = GraphDiagram(type="mindmap", nodes=[Node(id="a", level=1)])
    issues = validate_diagram(diagram)

    assert any("Unknown diagram type" in m for m in _messages(issues, IssueSeverity.WARNING))
    assert any("Levels are ignored" in m for m in _messages(issues, IssueSeverity.INFO))


def test_connected_components(graph_diagram):
    diagram = graph_diagram.model_copy(update={"nodes": graph_diagram.nodes + [Node(id="lonely")]})
    components = find_connected_components(diagram)

    assert [c.size for c in components] == [4, 1]
    assert components[1].node_ids == ["lonely"]


def test_summary_counts_rendered_edges(graph_diagram):
    summary = summarize_diagram(graph_diagram)

    assert summary.total_nodes == 4
    assert summary.total_edges == 4
    assert summary.rendered_edges == 3
    assert summary.dropped_edges == 1
    assert summary.layout == "circular"
    assert summary.directional is False
    assert summary.nodes_by_level == {}


def test_summary_levels_for_trees(tree_diagram):
    data = summarize_diagram(tree_diagram).to_dict()

    assert data["layout"] == "level"
    assert data["nodes_by_level"] == {"0": 1, "1": 2, "2": 1}
    assert data["orphan_count"] == 0
    assert data["most_connected_nodes"][0]["id"] in {"root", "l"}
