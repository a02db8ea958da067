from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

# Ensure built-in transformations are registered even when this module is used standalone.
from archflow.core import builtins as _builtins  # noqa: F401
from archflow.core.registry.transforms import get_transformation, has_transformation
from archflow.core.spec import ApiConfigSpec
from archflow.core.transforms.base import PASSTHROUGH

log = logging.getLogger("archflow.core.transformation")


def resolve_kind(kind: Optional[str]) -> str:
    """Map a node's transformation type to a registered kind (unknown -> passthrough)."""
    if kind and has_transformation(kind):
        return kind
    if kind:
        log.debug("unknown transformation type=%s; using %s", kind, PASSTHROUGH)
    return PASSTHROUGH


async def transform_data(
    input_data: Any,
    kind: Optional[str],
    api_config: ApiConfigSpec | Mapping[str, Any] | None = None,
    *,
    ctx=None,
) -> Any:
    """Apply the transformation registered for ``kind`` to ``input_data``.

    Exceptions raised by a transformation are not caught here; the built-ins
    never raise (HTTP failures are returned as ``_error`` objects).
    """
    if api_config is not None and not isinstance(api_config, ApiConfigSpec):
        api_config = ApiConfigSpec.model_validate(api_config)
    resolved = resolve_kind(kind)
    TransformCls = get_transformation(resolved)
    inst = TransformCls(resolved, api_config=api_config, ctx=ctx)
    return await inst.apply(input_data)
