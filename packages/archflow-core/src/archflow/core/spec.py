from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

TransformationType = Literal["passthrough", "add-timestamp", "filter", "transform", "aggregate", "api-call"]
ApiCallType = Literal["fetch", "send", "both"]
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
ComponentCategory = Literal["compute", "storage", "network", "clients", "cloud", "messaging", "api"]

TRANSFORMATION_TYPES: tuple[str, ...] = ("passthrough", "add-timestamp", "filter", "transform", "aggregate", "api-call")


class _CamelModel(BaseModel):
    # Documents arrive camelCase from the canvas; python code uses snake_case names.
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Nodes / Edges
# ---------------------------------------------------------------------------


class ApiConfigSpec(_CamelModel):
    """HTTP call attached to an ``api-call`` node.

    ``type`` and ``response_mapping`` are accepted for document compatibility
    but are not consulted when the call is executed.
    """

    enabled: bool = False
    type: ApiCallType = "fetch"
    method: HttpMethod = "GET"
    url: str = ""
    headers: Optional[Dict[str, str]] = None
    body: Optional[str] = None
    response_mapping: Optional[str] = Field(default=None, alias="responseMapping")


class ComponentSpec(_CamelModel):
    """Palette entry the node was created from. Opaque to the engine."""

    id: str
    name: str
    category: Optional[ComponentCategory] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon_url: Optional[str] = Field(default=None, alias="iconUrl")


class NodeDataSpec(_CamelModel):
    label: str = ""
    component: Optional[ComponentSpec] = None
    description: Optional[str] = None
    dummy_data: Optional[str] = Field(default=None, alias="dummyData")
    # Kept as a plain string: unknown kinds (and plugin kinds) reach the
    # dispatcher, which falls back to passthrough.
    transformation_type: Optional[str] = Field(default=None, alias="transformationType")
    custom_transform: Optional[str] = Field(default=None, alias="customTransform")
    api_config: Optional[ApiConfigSpec] = Field(default=None, alias="apiConfig")


class PositionSpec(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeSpec(_CamelModel):
    id: str
    position: PositionSpec = Field(default_factory=PositionSpec)
    data: NodeDataSpec = Field(default_factory=NodeDataSpec)


class EdgeDataSpec(_CamelModel):
    label: Optional[str] = None
    animated: Optional[bool] = None


class EdgeSpec(_CamelModel):
    id: Optional[str] = None
    source: str
    target: str
    label: Optional[str] = None
    data: Optional[EdgeDataSpec] = None


class GraphDocumentSpec(_CamelModel):
    """The plain JSON document written by the diagram exporter."""

    version: str = "1.0"
    exported_at: Optional[str] = Field(default=None, alias="exportedAt")
    nodes: List[NodeSpec] = Field(default_factory=list)
    edges: List[EdgeSpec] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Simulation records
# ---------------------------------------------------------------------------


class SimulationStep(_CamelModel):
    node_id: str = Field(alias="nodeId")
    node_name: str = Field(alias="nodeName")
    input_data: Any = Field(default=None, alias="inputData")
    output_data: Any = Field(default=None, alias="outputData")
    timestamp: int

    def as_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class SimulationState(_CamelModel):
    """Advisory UI state. Owned by the caller, never by the runner."""

    is_running: bool = Field(default=False, alias="isRunning")
    is_paused: bool = Field(default=False, alias="isPaused")
    current_node_id: Optional[str] = Field(default=None, alias="currentNodeId")
    steps: List[SimulationStep] = Field(default_factory=list)
    speed: int = 1000


__all__ = [
    # enums
    "TransformationType",
    "TRANSFORMATION_TYPES",
    "ApiCallType",
    "HttpMethod",
    "ComponentCategory",
    # graph
    "ApiConfigSpec",
    "ComponentSpec",
    "NodeDataSpec",
    "PositionSpec",
    "NodeSpec",
    "EdgeDataSpec",
    "EdgeSpec",
    "GraphDocumentSpec",
    # simulation
    "SimulationStep",
    "SimulationState",
]
