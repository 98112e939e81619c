import json

import pytest

from studygraph.cli import main


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data))
    return str(path)


def _run(capsys, argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code, capsys.readouterr().out


def test_layout_command(tmp_path, capsys, linked_list_descriptor):
    path = _write(tmp_path, "list.json", linked_list_descriptor)
    code, out = _run(capsys, ["layout", path])

    data = json.loads(out)
    assert code == 0
    assert data["status"] == "ok"
    assert [data["positions"][i]["y"] for i in "abc"] == [200, 200, 200]
    assert len(data["edges"]) == 2


def test_layout_from_analysis_index(tmp_path, capsys, tree_descriptor, graph_descriptor):
    path = _write(tmp_path, "analysis.json", {"graphDiagrams": [tree_descriptor, graph_descriptor]})
    code, out = _run(capsys, ["layout", path, "--analysis", "--index", "1"])

    assert code == 0
    assert json.loads(out)["type"] == "graph"


def test_analysis_index_out_of_range(tmp_path, capsys, tree_descriptor):
    path = _write(tmp_path, "analysis.json", {"graphDiagrams": [tree_descriptor]})
    code, out = _run(capsys, ["layout", path, "--analysis", "--index", "3"])

    assert code == 1
    assert json.loads(out)["status"] == "error"


def test_missing_file(capsys, tmp_path):
    code, out = _run(capsys, ["validate", str(tmp_path / "nope.json")])
    assert code == 1
    assert "File not found" in json.loads(out)["error"]


def test_invalid_json(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    code, out = _run(capsys, ["summarize", str(path)])
    assert code == 1
    assert "Invalid JSON" in json.loads(out)["error"]


def test_render_to_file(tmp_path, capsys, tree_descriptor):
    path = _write(tmp_path, "tree.json", tree_descriptor)
    target = tmp_path / "tree.svg"
    code, out = _run(capsys, ["render", path, "-o", str(target)])

    assert code == 0
    assert json.loads(out)["file_path"] == str(target)
    assert target.read_text().count("<circle") == 4


def test_export_to_stdout(tmp_path, capsys, tree_descriptor):
    path = _write(tmp_path, "tree.json", tree_descriptor)
    code, out = _run(capsys, ["export", path])

    assert code == 0
    assert "<h1>Binary search tree</h1>" in out


def test_validate_command(tmp_path, capsys, graph_descriptor):
    path = _write(tmp_path, "graph.json", graph_descriptor)
    code, out = _run(capsys, ["validate", path])

    data = json.loads(out)
    assert data["summary"]["warnings"] == 1
    assert data["issues"][0]["edge_index"] == 3


def test_malformed_analysis_reports_error(tmp_path, capsys):
    path = _write(tmp_path, "analysis.json", {"graphDiagrams": ["oops"]})
    code, out = _run(capsys, ["layout", path, "--analysis"])

    assert code == 1
    assert "Invalid diagram descriptor" in json.loads(out)["error"]


def test_non_list_analysis_reports_error(tmp_path, capsys, tree_descriptor):
    path = _write(tmp_path, "analysis.json", {"graphDiagrams": tree_descriptor})
    code, out = _run(capsys, ["layout", path, "--analysis"])

    assert code == 1
    assert "must be a list" in json.loads(out)["error"]
