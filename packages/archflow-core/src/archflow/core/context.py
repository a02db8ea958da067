from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict

# Ensure the built-in rest:httpx connector is registered.
from archflow.core import builtins as _builtins  # noqa: F401
from archflow.core.exception import ConnectorError
from archflow.core.registry.connectors import create_connector
from archflow.core.runtime.settings import Settings

HTTP_CONNECTOR = "http"


@dataclass
class RunContext:
    settings: Settings
    run_id: str
    connectors: Dict[str, Any] = field(default_factory=dict)
    # Options for the lazily created http connector (timeout, verify_ssl, transport).
    http_options: Dict[str, Any] = field(default_factory=dict)
    log: logging.Logger = field(default_factory=lambda: logging.getLogger("archflow.core.context"))

    def connector(self, name: str) -> Any:
        if name not in self.connectors:
            raise ConnectorError(f"Connector not configured for this run: {name}. Loaded: {sorted(self.connectors)}")
        return self.connectors[name]

    def http(self) -> Any:
        """Run-scoped ``rest:httpx`` connector, created on first use."""
        if HTTP_CONNECTOR not in self.connectors:
            self.connectors[HTTP_CONNECTOR] = create_connector(
                name=HTTP_CONNECTOR,
                kind="rest",
                driver="httpx",
                options=dict(self.http_options),
                ctx=self,
            )
        return self.connector(HTTP_CONNECTOR)

    async def aclose(self) -> None:
        # Best-effort close of run-scoped connectors.
        for name, conn in list(self.connectors.items()):
            try:
                await conn.aclose()
            except Exception:
                self.log.warning(f"failed closing connector {name}; continuing", exc_info=True)
        self.connectors.clear()


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]
