from __future__ import annotations

import logging
from typing import Any

import httpx

from archflow.core.connectors.base import ConnectorInit
from archflow.core.exception import ConnectorError
from archflow.core.registry.connectors import register_connector

log = logging.getLogger("archflow.core.builtin.connectors")


def _opt(options: dict, *keys: str, default=None):
    cur = options
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


class _Base:
    """Small concrete base for built-in connectors (keeps init consistent)."""

    def __init__(self, init: ConnectorInit):
        self.name = init.name
        self.kind = init.kind
        self.driver = init.driver
        self.config = init.config or {}
        self.options = init.options or {}
        self.ctx = init.ctx

    async def aclose(self) -> None:
        return None


@register_connector("rest", "httpx")
class HttpxREST(_Base):
    """
    REST connector backed by httpx.AsyncClient.

    One client per simulation run; every api-call node of the run shares it.

    Options:
      - timeout: float seconds (default: settings.http_timeout or 30)
      - verify_ssl: bool (default: settings.http_verify_ssl or True)
      - transport: an httpx transport to mount instead of the network one
    """

    def __init__(self, init: ConnectorInit):
        super().__init__(init)
        self._async: httpx.AsyncClient | None = None

    def _settings_value(self, name: str, default: Any) -> Any:
        settings = getattr(self.ctx, "settings", None)
        return getattr(settings, name, default) if settings is not None else default

    def _timeout(self) -> float:
        return float(_opt(self.options, "timeout", default=self._settings_value("http_timeout", 30.0)) or 30.0)

    def _verify_ssl(self) -> bool:
        return bool(_opt(self.options, "verify_ssl", default=self._settings_value("http_verify_ssl", True)))

    def async_client(self) -> httpx.AsyncClient:
        if self._async is None:
            kwargs: dict[str, Any] = {
                "timeout": self._timeout(),
                "verify": self._verify_ssl(),
                # Redirects resolve to the final response.
                "follow_redirects": True,
            }
            transport = self.options.get("transport")
            if transport is not None:
                kwargs["transport"] = transport
            log.debug(f"opening http client name={self.name} timeout={kwargs['timeout']} verify={kwargs['verify']}")
            self._async = httpx.AsyncClient(**kwargs)
        return self._async

    async def aclose(self) -> None:
        try:
            if self._async is not None:
                await self._async.aclose()
        finally:
            self._async = None

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict | None = None,
        content: str | bytes | None = None,
        follow_redirects: bool = True,
    ) -> httpx.Response:
        """Single request, no retries. Transport failures surface as ConnectorError."""
        try:
            return await self.async_client().request(
                method=method, url=url, headers=headers, content=content, follow_redirects=follow_redirects
            )
        except httpx.HTTPError as e:
            raise ConnectorError(f"REST request failed: {method} {url}: {e}") from e
