"""Public, stable API surface for archflow.

If you're writing plugins or embedding the simulator in your own codebase,
import from **`archflow.core.api`**.

Everything outside this package is considered internal and may change without
notice, even in minor releases.
"""

from __future__ import annotations

# Connector contracts
from archflow.core.connectors.base import ConnectorBase, ConnectorInit
# Runtime context
from archflow.core.context import RunContext, new_run_id
# Common exceptions
from archflow.core.exception import ConnectorError, PluginError, SimulationError, SpecError
# Graph helpers
from archflow.core.graph import find_start_nodes, get_outgoing_edges, load_graph_dict, load_graph_file
# HTTP execution
from archflow.core.http import execute_api_call, is_error_output
# Observability
from archflow.core.observability import MetricsSink, RunSummary
# Registries (transformations/connectors)
from archflow.core.registry.connectors import get_connector, has_connector, list_connectors, register_connector
from archflow.core.registry.transforms import get_transformation, list_transformations, register_transformation
# Interpolation
from archflow.core.resolution import interpolate
# Simulation
from archflow.core.runner import SimulationCallbacks, SimulationRunner, create_simulation_runner, parse_node_data
# Settings
from archflow.core.runtime.settings import Settings, load_settings
# Graph document (Pydantic models)
from archflow.core.spec import (
    ApiConfigSpec,
    ComponentSpec,
    EdgeSpec,
    GraphDocumentSpec,
    NodeDataSpec,
    NodeSpec,
    SimulationState,
    SimulationStep,
)
from archflow.core.state import SimulationSession
from archflow.core.transformation import transform_data
# Transformation contract
from archflow.core.transforms.base import Transformation
from archflow.core.validation import validate_graph_dict, validate_graph_file

__all__ = [
    # simulation
    "create_simulation_runner",
    "SimulationRunner",
    "SimulationCallbacks",
    "SimulationSession",
    "parse_node_data",
    # transformations
    "Transformation",
    "transform_data",
    "execute_api_call",
    "is_error_output",
    "interpolate",
    # context
    "RunContext",
    "new_run_id",
    # settings
    "Settings",
    "load_settings",
    # spec
    "ApiConfigSpec",
    "ComponentSpec",
    "NodeDataSpec",
    "NodeSpec",
    "EdgeSpec",
    "GraphDocumentSpec",
    "SimulationStep",
    "SimulationState",
    # graph
    "find_start_nodes",
    "get_outgoing_edges",
    "load_graph_dict",
    "load_graph_file",
    "validate_graph_dict",
    "validate_graph_file",
    # observability
    "MetricsSink",
    "RunSummary",
    # connectors
    "ConnectorBase",
    "ConnectorInit",
    # exceptions
    "ConnectorError",
    "PluginError",
    "SimulationError",
    "SpecError",
    # registries
    "register_transformation",
    "get_transformation",
    "list_transformations",
    "register_connector",
    "get_connector",
    "has_connector",
    "list_connectors",
]
