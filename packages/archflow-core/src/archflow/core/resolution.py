"""Lenient ``$input`` template interpolation.

Allowed tokens:
- {{$input}}
- {{$input.PATH}}

Where:
- PATH = SEGMENT(.SEGMENT)*, SEGMENT = [A-Za-z0-9_]+
- Spaces are allowed inside braces (e.g. {{  $input.user.id  }})

Unlike a strict resolver, nothing here raises: a token whose path cannot be
walked is left in the output exactly as written, so a half-configured node
still produces a request instead of aborting the simulation.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Mapping, Sequence

log = logging.getLogger("archflow.core.resolution")

_INPUT_TOKEN_RE = re.compile(r"\{\{\s*\$input(?:\.([A-Za-z0-9_.]+))?\s*\}\}")


def to_json_text(value: Any) -> str:
    """Compact JSON text (same separators a browser's JSON.stringify uses)."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def loads_json(text: str) -> Any:
    """``json.loads`` without the NaN/Infinity extensions (strict JSON only)."""
    return json.loads(text, parse_constant=_reject_constant)


def to_text(value: Any) -> str:
    """String conversion for scalars, JSON-flavoured.

    bool -> true/false, None -> null, integral floats drop the trailing ``.0``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
    return str(value)


def _is_container(value: Any) -> bool:
    return isinstance(value, Mapping) or (isinstance(value, Sequence) and not isinstance(value, (str, bytes)))


def _render_value(value: Any) -> str:
    if value is None or _is_container(value):
        return to_json_text(value)
    return to_text(value)


def _lookup_path(root: Any, path: str) -> tuple[bool, Any]:
    cur: Any = root
    for part in path.split("."):
        if isinstance(cur, Mapping) and part in cur:
            cur = cur[part]
        elif _is_container(cur) and not isinstance(cur, Mapping) and part.isdigit() and int(part) < len(cur):
            cur = cur[int(part)]
        else:
            return False, None
    return True, cur


def interpolate(template: str | None, input_data: Any) -> str | None:
    """Replace ``{{$input...}}`` tokens in ``template`` using ``input_data``.

    >>> interpolate("{{$input.a}}-{{$input.b}}", {"a": 1, "b": "x"})
    '1-x'
    >>> interpolate("{{$input.b.c}}", {"a": 1})
    '{{$input.b.c}}'
    """
    if not template:
        return template

    def _sub(m: re.Match) -> str:
        path = m.group(1)
        if not path:
            return _render_value(input_data)
        found, value = _lookup_path(input_data, path)
        if not found:
            log.debug("unresolved interpolation token left as-is token=%s", m.group(0))
            return m.group(0)
        return _render_value(value)

    return _INPUT_TOKEN_RE.sub(_sub, template)
