from __future__ import annotations

import json

import httpx
import pytest

from archflow.core.builtins.connectors import HttpxREST
from archflow.core.cli import main

from conftest import edge, node


@pytest.fixture(autouse=True)
def _fast_env(monkeypatch):
    monkeypatch.setenv("ARCHFLOW_DEFAULT_SPEED_MS", "0")
    monkeypatch.setenv("ARCHFLOW_POLL_INTERVAL_MS", "5")
    monkeypatch.delenv("ARCHFLOW_PLUGIN_PATHS", raising=False)
    monkeypatch.delenv("ARCHFLOW_SETTINGS_MODULE", raising=False)


def _write_graph(tmp_path, doc: dict):
    p = tmp_path / "graph.json"
    p.write_text(json.dumps(doc), encoding="utf-8")
    return p


def test_cli_simulate_prints_steps(tmp_path, capsys):
    graph = _write_graph(
        tmp_path,
        {"nodes": [node("a", "Source", dummy='{"x":5}'), node("b", "Wrap", kind="aggregate")], "edges": [edge("a", "b")]},
    )
    rc = main(["simulate", "--graph", str(graph)])
    out = capsys.readouterr().out
    assert rc == 0
    lines = out.strip().splitlines()
    assert lines[0] == '[Source] {"x":5} -> {"x":5}'
    assert lines[1] == '[Wrap] {"x":5} -> {"aggregated":true,"data":[{"x":5}],"count":1}'
    assert lines[2].startswith("COMPLETED: 2 steps, 0 errors")


def test_cli_simulate_json(tmp_path, capsys):
    graph = _write_graph(tmp_path, {"nodes": [node("a", "A", dummy="[1,2]", kind="aggregate")], "edges": []})
    rc = main(["simulate", "--graph", str(graph), "--speed", "0", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert payload["steps"][0]["nodeId"] == "a"
    assert payload["steps"][0]["outputData"] == {"aggregated": True, "data": [1, 2], "count": 2}
    assert payload["summary"]["status"] == "COMPLETED"
    assert payload["summary"]["step_count"] == 1


def test_cli_simulate_marks_error_outputs(tmp_path, capsys, monkeypatch):
    def unavailable(self):
        if self._async is None:
            self._async = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
        return self._async

    monkeypatch.setattr(HttpxREST, "async_client", unavailable)
    graph = _write_graph(
        tmp_path,
        {"nodes": [node("a", "Call", kind="api-call", api={"enabled": True, "url": "https://api.test/x"})], "edges": []},
    )
    rc = main(["simulate", "--graph", str(graph)])
    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith("! [Call]")
    assert "1 errors" in out
    assert '"_status":503' in out


def test_cli_simulate_invalid_graph_exits_2(tmp_path, capsys):
    graph = tmp_path / "graph.json"
    graph.write_text("[]", encoding="utf-8")
    rc = main(["simulate", "--graph", str(graph)])
    assert rc == 2
    assert "INVALID" in capsys.readouterr().err


def test_cli_validate_ok_and_warnings(tmp_path, capsys):
    graph = _write_graph(tmp_path, {"nodes": [node("a"), node("b")], "edges": [edge("a", "b"), edge("b", "a")]})
    rc = main(["validate", "--graph", str(graph)])
    out = capsys.readouterr().out
    assert rc == 0
    assert "OK:" in out
    assert "semantic:no_start_nodes" in out


def test_cli_validate_json_and_exitcode(tmp_path, capsys):
    graph = _write_graph(tmp_path, {"nodes": [node("a"), node("a")], "edges": []})
    rc = main(["validate", "--graph", str(graph), "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == 2
    assert payload["ok"] is False
    assert payload["errors"][0]["code"] == "semantic:duplicate_node_id"


def test_cli_transforms_lists_builtins(capsys):
    rc = main(["transforms"])
    kinds = capsys.readouterr().out.split()
    assert rc == 0
    for k in ("passthrough", "add-timestamp", "filter", "transform", "aggregate", "api-call"):
        assert k in kinds
