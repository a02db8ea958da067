from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class ConnectorBase(Protocol):
    """
    Public connector contract.

    A connector is a thin, run-scoped wrapper around a concrete transport
    (here: an HTTP client). ``api-call`` nodes send through ``request``, which
    returns an ``httpx.Response``.

    Connectors should:
      - be safe to instantiate multiple times
      - not mutate global state
      - honor timeouts from settings/options
      - release their transport in aclose()
    """

    name: str
    kind: str
    driver: str
    config: Dict[str, Any]
    options: Dict[str, Any]

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str] | None = None,
        content: str | bytes | None = None,
        follow_redirects: bool = True,
    ) -> Any: ...

    async def aclose(self) -> None: ...


@dataclass
class ConnectorInit:
    name: str
    kind: str
    driver: str
    config: Dict[str, Any]
    options: Dict[str, Any]
    ctx: Any | None = None
