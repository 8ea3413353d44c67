import json
import numpy as np
from typer.testing import CliRunner
from thinplatekit.cli import app
from thinplatekit.io.points import load_model

runner = CliRunner()

def _text(res):
    # undo rich line wrapping
    return " ".join(res.output.split())

def _points(tmp_path, src, dst, name="pts.json"):
    p = tmp_path / name
    p.write_text(json.dumps({"src": src, "dst": dst}))
    return p

def test_fit_project_warp(tmp_path):
    pts = _points(tmp_path, [[0,0],[1,0],[0,1]], [[1,2],[2,2],[1,3]])
    model = tmp_path / "model.json"
    res = runner.invoke(app, ["fit", str(pts), "--save", str(model)])
    assert res.exit_code == 0, res.output
    assert load_model(model).n == 3

    res = runner.invoke(app, ["project", str(model), "10", "--", "-5"])
    assert res.exit_code == 0, res.output
    out = json.loads(res.output.strip())
    assert np.allclose([out["x"], out["y"]], [11, -3])

    query = tmp_path / "q.yaml"
    query.write_text("- [0.5, 0.5]\n- [2, 3]\n")
    dest = tmp_path / "warped.json"
    res = runner.invoke(app, ["warp", str(model), str(query), "--out", str(dest)])
    assert res.exit_code == 0, res.output
    assert np.allclose(json.loads(dest.read_text()), [[1.5, 2.5], [3, 5]])

    res = runner.invoke(app, ["warp", str(model), str(query)])
    lines = [json.loads(l) for l in res.output.strip().splitlines()]
    assert len(lines) == 2 and np.isclose(lines[1]["y"], 5)

def test_fit_reports_degenerate_input(tmp_path):
    pts = _points(tmp_path, [[0,0],[1,0],[2,0]], [[0,0],[1,0],[2,0]])
    res = runner.invoke(app, ["fit", str(pts), "--save", str(tmp_path / "m.json")])
    assert res.exit_code == 1
    assert "singular" in _text(res)
    assert not (tmp_path / "m.json").exists()

def test_fit_reports_too_few_points(tmp_path):
    pts = _points(tmp_path, [[0,0],[1,0]], [[0,0],[1,0]])
    res = runner.invoke(app, ["fit", str(pts), "--save", str(tmp_path / "m.json")])
    assert res.exit_code == 1
    assert "at least 3" in _text(res)

def _model_file(tmp_path):
    pts = _points(tmp_path, [[0,0],[1,0],[0,1]], [[1,2],[2,2],[1,3]])
    model = tmp_path / "model.json"
    assert runner.invoke(app, ["fit", str(pts), "--save", str(model)]).exit_code == 0
    return model

def test_fit_reports_malformed_json(tmp_path):
    pts = tmp_path / "broken.json"
    pts.write_text('{"src": [[0, 0], ')
    res = runner.invoke(app, ["fit", str(pts), "--save", str(tmp_path / "m.json")])
    assert res.exit_code == 1
    assert "cannot parse" in _text(res)

def test_fit_reports_malformed_yaml(tmp_path):
    pts = tmp_path / "broken.yaml"
    pts.write_text("src: [[0, 0], [1, 0]\ndst: :\n")
    res = runner.invoke(app, ["fit", str(pts), "--save", str(tmp_path / "m.json")])
    assert res.exit_code == 1
    assert "cannot parse" in _text(res)

def test_fit_reports_ragged_pairs(tmp_path):
    pts = _points(tmp_path, [[0,0],[1,0,5],[0,1]], [[0,0],[1,0],[0,1]])
    res = runner.invoke(app, ["fit", str(pts), "--save", str(tmp_path / "m.json")])
    assert res.exit_code == 1
    assert "[x, y]" in _text(res)

def test_project_reports_model_that_is_a_list(tmp_path):
    model = tmp_path / "model.json"
    model.write_text("[[0, 0], [1, 1]]")
    res = runner.invoke(app, ["project", str(model), "1", "2"])
    assert res.exit_code == 1
    assert "expected a model mapping" in _text(res)

def test_warp_reports_non_finite_model(tmp_path):
    model = _model_file(tmp_path)
    data = json.loads(model.read_text())
    data["model"]["weights"][0][0] = None
    model.write_text(json.dumps(data))
    query = tmp_path / "q.json"
    query.write_text("[[0, 0]]")
    res = runner.invoke(app, ["warp", str(model), str(query)])
    assert res.exit_code == 1
    assert "NaN" in _text(res)

def test_missing_config_is_reported(tmp_path):
    model = _model_file(tmp_path)
    res = runner.invoke(app, ["project", str(model), "1", "2", "--config", str(tmp_path / "absent.yaml")])
    assert res.exit_code == 1
    assert "settings file not found" in _text(res)
