"""HTTP execution for ``api-call`` nodes.

Every failure is folded into the returned value instead of being raised:

- non-2xx:   {"_error": True, "_status", "_statusText", "_input"}
- exception: {"_error": True, "_message", "_input"}

so the runner records the failure as that node's output and keeps
propagating it downstream.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import httpx

from archflow.core.resolution import interpolate, to_json_text, to_text
from archflow.core.spec import ApiConfigSpec

log = logging.getLogger("archflow.core.http")

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
DEFAULT_HEADERS = {"Content-Type": "application/json"}


def is_falsy(value: Any) -> bool:
    """JSON-value falsiness: None, False, 0, NaN and "" (empty containers are truthy)."""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    if isinstance(value, str):
        return value == ""
    return False


def is_error_output(value: Any) -> bool:
    return isinstance(value, Mapping) and value.get("_error") is True


def build_headers(api_config: ApiConfigSpec) -> dict[str, str]:
    headers = dict(DEFAULT_HEADERS)
    headers.update(api_config.headers or {})
    return headers


def build_request_body(body_template: Optional[str], input_data: Any) -> Optional[str]:
    if not body_template:
        return None if is_falsy(input_data) else to_json_text(input_data)
    # Sent as-is whether or not the rendered text is valid JSON.
    return interpolate(body_template, input_data)


def build_url(api_config: ApiConfigSpec, input_data: Any) -> str:
    url = interpolate(api_config.url, input_data) or ""
    if api_config.method == "GET" and isinstance(input_data, Mapping) and not api_config.body:
        params = []
        for key, value in input_data.items():
            if value is None:
                continue
            if isinstance(value, (Mapping, list, tuple)):
                params.append((str(key), to_json_text(value)))
            else:
                params.append((str(key), to_text(value)))
        query = urlencode(params)
        if query:
            url += ("&" if "?" in url else "?") + query
    return url


async def _send(client: Any, method: str, url: str, headers: dict, content: Optional[str]) -> httpx.Response:
    if client is not None:
        return await client.request(method, url, headers=headers, content=content, follow_redirects=True)
    async with httpx.AsyncClient(follow_redirects=True) as c:
        return await c.request(method, url, headers=headers, content=content)


def _normalize_response(response: httpx.Response, input_data: Any) -> Any:
    if not response.is_success:
        return {
            "_error": True,
            "_status": response.status_code,
            "_statusText": response.reason_phrase,
            "_input": input_data,
        }
    content_type = response.headers.get("content-type") or ""
    if "application/json" in content_type:
        return response.json()
    return {"_response": response.text, "_status": response.status_code}


async def execute_api_call(api_config: ApiConfigSpec | Mapping[str, Any] | None, input_data: Any, *, client: Any = None) -> Any:
    """Perform the configured request and return its (normalized) result.

    ``client`` is anything with an awaitable
    ``request(method, url, headers=, content=, follow_redirects=)``
    returning an ``httpx.Response``: an ``httpx.AsyncClient`` or the run's
    ``rest:httpx`` connector. Without one, a throwaway client is opened.
    """
    if api_config is None:
        return input_data
    if not isinstance(api_config, ApiConfigSpec):
        api_config = ApiConfigSpec.model_validate(api_config)
    if not api_config.enabled or not api_config.url:
        return input_data

    method = api_config.method
    try:
        headers = build_headers(api_config)
        content = build_request_body(api_config.body, input_data) if method in BODY_METHODS else None
        url = build_url(api_config, input_data)

        log.debug("api call method=%s url=%s", method, url)
        response = await _send(client, method, url, headers, content)
        result = _normalize_response(response, input_data)
        if is_error_output(result):
            log.info("api call returned status=%s method=%s url=%s", response.status_code, method, url)
        return result
    except Exception as e:
        log.warning("api call failed method=%s url=%s", method, api_config.url, exc_info=True)
        return {
            "_error": True,
            "_message": str(e) or "API call failed",
            "_input": input_data,
        }
