import pytest

from studygraph.models import GraphDiagram


def test_load_creates_independent_instances(manager, graph_diagram):
    first = manager.load_diagram(graph_diagram)
    second = manager.load_diagram(graph_diagram)

    assert first.id != second.id
    assert first.id.startswith("dg-")
    assert manager.instance_count == 2

    untouched = second.controller.positions
    assert manager.pointer_down(first.id, "n0", 300, 80) is True
    manager.pointer_move(100, 100)
    manager.pointer_up()

    assert first.controller.positions != untouched
    assert second.controller.positions == untouched


def test_document_pointer_events_reach_only_the_active_drag(manager, graph_diagram, tree_diagram):
    graph = manager.load_diagram(graph_diagram)
    manager.load_diagram(tree_diagram)

    assert manager.pointer_move(1, 1) == 0
    manager.pointer_down(graph.id, "n1", 420, 200)
    assert manager.active_drag == (graph.id, "n1")
    assert manager.pointer_move(400, 210) == 1
    assert manager.pointer_up(-50, -50) == 1
    assert manager.active_drag is None
    assert manager.hub.listener_count() == 0


def test_one_drag_at_a_time_across_instances(manager, graph_diagram):
    first = manager.load_diagram(graph_diagram)
    second = manager.load_diagram(graph_diagram)
    untouched = second.controller.position_of("n1")

    assert manager.pointer_down(first.id, "n0", 300, 80) is True
    assert manager.pointer_down(second.id, "n1", 420, 200) is False
    assert manager.hub.listener_count() == 3

    manager.pointer_move(100, 100)
    assert first.controller.position_of("n0").x == pytest.approx(100)
    assert second.controller.position_of("n1") == untouched
    assert manager.active_drag == (first.id, "n0")

    # Once released, the other instance can drag
    manager.pointer_up()
    assert manager.pointer_down(second.id, "n1", 420, 200) is True


def test_pointer_cancel_terminates_drag(manager, graph_diagram):
    instance = manager.load_diagram(graph_diagram)
    manager.pointer_down(instance.id, "n0", 300, 80)

    assert manager.pointer_cancel() == 1
    assert not instance.controller.is_dragging


def test_viewport_changes_pointer_mapping(manager, graph_diagram):
    instance = manager.load_diagram(graph_diagram)
    manager.set_viewport(instance.id, left=0, top=0, width=1200, height=800)

    # Screen (600, 160) is logical (300, 80): right on n0
    manager.pointer_down(instance.id, "n0", 600, 160)
    manager.pointer_move(700, 160)
    manager.pointer_up()

    p = instance.controller.position_of("n0")
    assert (p.x, p.y) == pytest.approx((350, 80))


def test_reset_and_close(manager, graph_diagram):
    instance = manager.load_diagram(graph_diagram)
    original = instance.controller.positions
    manager.pointer_down(instance.id, "n0", 300, 80)
    manager.pointer_move(50, 50)

    manager.reset(instance.id)
    assert instance.controller.positions == original
    assert manager.hub.listener_count() == 0

    manager.pointer_down(instance.id, "n0", 300, 80)
    assert manager.close_instance(instance.id) is True
    assert manager.hub.listener_count() == 0
    assert manager.get_instance(instance.id) is None
    assert manager.close_instance(instance.id) is False


def test_unknown_instance_returns_none(manager):
    assert manager.pointer_down("dg-missing", "n0", 0, 0) is None
    assert manager.reset("dg-missing") is None
    assert manager.set_viewport("dg-missing", 0, 0, 600, 400) is None


def test_instance_limit(manager, tree_diagram):
    for _ in range(5):
        manager.load_diagram(tree_diagram)
    with pytest.raises(ValueError):
        manager.load_diagram(tree_diagram)


def test_load_analysis(manager, tree_descriptor, linked_list_descriptor):
    instances = manager.load_analysis({"graphDiagrams": [tree_descriptor, linked_list_descriptor]})
    assert [i.diagram.type for i in instances] == ["tree", "linked-list"]


def test_change_callbacks_receive_instance_id(manager, graph_diagram):
    seen = []
    manager.on_change(seen.append)
    instance = manager.load_diagram(graph_diagram)

    manager.pointer_down(instance.id, "n0", 300, 80)
    manager.pointer_move(310, 90)

    assert seen == [instance.id, instance.id]


def test_failing_callback_does_not_break_drag(manager, graph_diagram):
    def broken(instance_id):
        raise RuntimeError("listener crashed")

    manager.on_change(broken)
    instance = manager.load_diagram(graph_diagram)
    manager.pointer_down(instance.id, "n0", 300, 80)
    manager.pointer_move(310, 90)

    assert instance.controller.position_of("n0").x == pytest.approx(310)


def test_state_snapshot(manager):
    diagram = GraphDiagram.from_json_dict({
        "title": "Pair",
        "type": "directed",
        "nodes": [{"id": "a", "label": "A"}, {"id": "b", "label": "B"}],
        "edges": [{"from": "a", "to": "b"}, {"from": "a", "to": "nowhere"}],
    })
    instance = manager.load_diagram(diagram)
    manager.pointer_down(instance.id, "a", 180, 200)

    state = manager.get_state()
    assert state["active_drag"] == {"instance_id": instance.id, "node_id": "a"}
    assert state["listeners"] == 3

    data = state["instances"][0]
    assert data["phase"] == "dragging"
    assert set(data["positions"]) == {"a", "b"}
    assert len(data["edges"]) == 1
    assert data["edges"][0]["directional"] is True


def test_registering_a_callback_twice_fires_it_once(manager, graph_diagram):
    seen = []
    manager.on_change(seen.append)
    manager.on_change(seen.append)

    instance = manager.load_diagram(graph_diagram)
    assert seen == [instance.id]
