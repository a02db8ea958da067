from __future__ import annotations

import asyncio
import datetime as dt
import time

import httpx

from archflow.core.registry.transforms import list_transformations
from archflow.core.spec import TRANSFORMATION_TYPES
from archflow.core.transformation import resolve_kind, transform_data


def _run(coro):
    return asyncio.run(coro)


def test_builtin_kinds_are_registered():
    assert set(TRANSFORMATION_TYPES) <= set(list_transformations())


def test_passthrough_returns_equal_copy():
    data = {"x": 5}
    out = _run(transform_data(data, "passthrough"))
    assert out == {"x": 5}
    assert out is not data


def test_missing_or_unknown_kind_falls_back_to_passthrough():
    assert resolve_kind(None) == "passthrough"
    assert resolve_kind("no-such-kind") == "passthrough"
    assert _run(transform_data({"a": 1}, None)) == {"a": 1}
    assert _run(transform_data([1, 2], "no-such-kind")) == [1, 2]


def test_add_timestamp_stamps_inside_call_window():
    before = int(time.time() * 1000)
    out = _run(transform_data({"a": 1}, "add-timestamp"))
    after = int(time.time() * 1000)

    assert out["a"] == 1
    assert before <= out["processedAt"] <= after
    assert out["timestamp"].endswith("Z")
    parsed = dt.datetime.fromisoformat(out["timestamp"].replace("Z", "+00:00"))
    assert abs(round(parsed.timestamp() * 1000) - out["processedAt"]) <= 1


def test_add_timestamp_wraps_non_object_input():
    out = _run(transform_data([1, 2], "add-timestamp"))
    assert out["value"] == [1, 2]
    assert "timestamp" in out and "processedAt" in out


def test_add_timestamp_on_null_input_only_stamps():
    out = _run(transform_data(None, "add-timestamp"))
    assert sorted(out) == ["processedAt", "timestamp"]


def test_filter_drops_only_null_and_empty_string():
    data = {"a": None, "b": "", "c": 0, "d": False, "e": [], "f": "x"}
    assert _run(transform_data(data, "filter")) == {"c": 0, "d": False, "e": [], "f": "x"}


def test_filter_leaves_non_objects_alone():
    assert _run(transform_data([None, ""], "filter")) == [None, ""]
    assert _run(transform_data("text", "filter")) == "text"


def test_transform_wraps_input_with_meta():
    out = _run(transform_data({"a": 1}, "transform"))
    assert out == {"original": {"a": 1}, "transformed": True, "meta": {"version": "1.0", "engine": "archflow"}}


def test_aggregate_wraps_single_values_and_keeps_lists():
    assert _run(transform_data({"a": 1}, "aggregate")) == {"aggregated": True, "data": [{"a": 1}], "count": 1}
    assert _run(transform_data([1, 2, 3], "aggregate")) == {"aggregated": True, "data": [1, 2, 3], "count": 3}


def test_disabled_api_call_returns_input_without_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async def go():
        from archflow.core.context import RunContext
        from archflow.core.runtime.settings import Settings

        ctx = RunContext(settings=Settings(), run_id="t", http_options={"transport": httpx.MockTransport(handler)})
        try:
            a = await transform_data({"a": 1}, "api-call", {"enabled": False, "url": "https://example.test"}, ctx=ctx)
            b = await transform_data({"a": 1}, "api-call", None, ctx=ctx)
            return a, b
        finally:
            await ctx.aclose()

    a, b = _run(go())
    assert a == {"a": 1}
    assert b == {"a": 1}
    assert calls == []
