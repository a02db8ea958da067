from __future__ import annotations

import abc
from typing import Any, Optional

from archflow.core.spec import ApiConfigSpec

PASSTHROUGH = "passthrough"


def shallow_copy(data: Any) -> Any:
    """Copy dicts/lists one level deep; scalars are returned unchanged."""
    if isinstance(data, dict):
        return dict(data)
    if isinstance(data, list):
        return list(data)
    return data


class Transformation(abc.ABC):
    """Per-node transformation.

    Instances are created per node visit; ``apply`` receives the node's input
    and returns its output. Implementations should not mutate ``data``.
    """

    def __init__(self, kind: str, api_config: Optional[ApiConfigSpec] = None, ctx=None):
        self.kind = kind
        self.api_config = api_config
        self.ctx = ctx

    @abc.abstractmethod
    async def apply(self, data: Any) -> Any:
        raise NotImplementedError
