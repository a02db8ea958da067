from pathlib import Path

import sys

# Allow running tests without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

import pytest
from archflow.core.runtime.settings import Settings


@pytest.fixture()
def settings():
    # No per-node delay and a tight poll so pause/stop tests stay fast.
    return Settings(
        default_speed_ms=0,
        poll_interval_ms=5,
        plugin_paths=[],
        plugin_strict=True,
        log_level="INFO",
    )


def node(node_id: str, label: str | None = None, *, kind: str | None = None, dummy: str | None = None, api: dict | None = None) -> dict:
    """Graph node dict in the exported (camelCase) document shape."""
    data: dict = {"label": label or node_id}
    if kind is not None:
        data["transformationType"] = kind
    if dummy is not None:
        data["dummyData"] = dummy
    if api is not None:
        data["apiConfig"] = api
    return {"id": node_id, "position": {"x": 0, "y": 0}, "data": data}


def edge(source: str, target: str) -> dict:
    return {"id": f"{source}-{target}", "source": source, "target": target}
