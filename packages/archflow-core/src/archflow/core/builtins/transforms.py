from __future__ import annotations

import datetime as _dt
import logging
from typing import Any, Dict

from archflow.core.http import execute_api_call
from archflow.core.registry.transforms import register_transformation
from archflow.core.transforms.base import Transformation, shallow_copy

log = logging.getLogger("archflow.core.builtin.transforms")

TRANSFORM_META = {"version": "1.0", "engine": "archflow"}


@register_transformation("passthrough")
class Passthrough(Transformation):
    """Forward the input (dicts/lists shallow-copied)."""

    async def apply(self, data: Any) -> Any:
        return shallow_copy(data)


@register_transformation("add-timestamp")
class AddTimestamp(Transformation):
    """Stamp the input with ``timestamp`` (ISO-8601, UTC) and ``processedAt`` (epoch ms).

    ``None`` stamps an empty object; other non-dict input is wrapped as
    ``{"value": input}`` first.
    """

    async def apply(self, data: Any) -> Dict[str, Any]:
        now = _dt.datetime.now(_dt.timezone.utc)
        if data is None:
            base: Dict[str, Any] = {}
        else:
            base = dict(data) if isinstance(data, dict) else {"value": data}
        base["timestamp"] = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        base["processedAt"] = int(now.timestamp() * 1000)
        return base


@register_transformation("filter")
class Filter(Transformation):
    """Drop keys whose value is None or the empty string. 0, False and [] are kept."""

    async def apply(self, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {k: v for k, v in data.items() if v is not None and not (isinstance(v, str) and v == "")}


@register_transformation("transform")
class MarkTransformed(Transformation):
    async def apply(self, data: Any) -> Dict[str, Any]:
        return {
            "original": shallow_copy(data),
            "transformed": True,
            "meta": dict(TRANSFORM_META),
        }


@register_transformation("aggregate")
class Aggregate(Transformation):
    async def apply(self, data: Any) -> Dict[str, Any]:
        items = list(data) if isinstance(data, list) else [shallow_copy(data)]
        return {"aggregated": True, "data": items, "count": len(items)}


@register_transformation("api-call")
class ApiCall(Transformation):
    """Live HTTP request described by the node's api config.

    Disabled (or missing) config forwards the input without touching the
    network. Failures come back as ``_error`` objects, never as exceptions.
    """

    async def apply(self, data: Any) -> Any:
        if self.api_config is None or not self.api_config.enabled:
            return shallow_copy(data)
        client = self.ctx.http() if self.ctx is not None else None
        return await execute_api_call(self.api_config, data, client=client)
