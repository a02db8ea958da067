from __future__ import annotations

import inspect

import pytest


@pytest.mark.contract
def test_public_api_exports_exist():
    import archflow.core.api as api

    for name in api.__all__:
        assert hasattr(api, name), name


@pytest.mark.contract
def test_package_root_exposes_runner_factory():
    import archflow.core as core
    from archflow.core.runner import create_simulation_runner

    assert core.create_simulation_runner is create_simulation_runner
    params = list(inspect.signature(create_simulation_runner).parameters)
    assert params[:4] == ["nodes", "edges", "speed", "callbacks"]


@pytest.mark.contract
def test_callbacks_contract():
    from archflow.core.api import SimulationCallbacks

    fields = set(inspect.signature(SimulationCallbacks).parameters)
    assert fields == {"on_node_enter", "on_node_process", "on_complete", "is_paused", "is_stopped"}


@pytest.mark.contract
def test_transformation_contract():
    from archflow.core.api import Transformation

    assert inspect.iscoroutinefunction(Transformation.apply)
    assert list(inspect.signature(Transformation.__init__).parameters) == ["self", "kind", "api_config", "ctx"]


@pytest.mark.contract
def test_rest_connector_contract():
    from archflow.core.api import get_connector, list_connectors

    assert "rest:httpx" in list_connectors()
    cls = get_connector("rest", "httpx")
    for attr in ("async_client", "request", "aclose"):
        assert hasattr(cls, attr), attr
    assert inspect.iscoroutinefunction(cls.request)
    assert inspect.iscoroutinefunction(cls.aclose)


@pytest.mark.contract
def test_connector_protocol_includes_request():
    from archflow.core.api import ConnectorBase, get_connector

    assert inspect.iscoroutinefunction(ConnectorBase.request)
    params = list(inspect.signature(ConnectorBase.request).parameters)
    assert params == ["self", "method", "url", "headers", "content", "follow_redirects"]
    assert list(inspect.signature(get_connector("rest", "httpx").request).parameters) == params
