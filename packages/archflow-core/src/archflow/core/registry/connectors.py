from __future__ import annotations

from typing import Any, Dict, Type

from archflow.core.connectors.base import ConnectorBase, ConnectorInit


def _key(kind: str, driver: str) -> str:
    return f"{kind}:{driver}"


class ConnectorRegistry:
    """Connector classes keyed by ``kind:driver``.

    Built-ins register ``rest:httpx``; a plugin can register another REST
    driver (for example one with retries) and point a run context at it.
    """

    def __init__(self) -> None:
        self._by_key: Dict[str, Type] = {}

    def register(self, kind: str, driver: str):
        def deco(cls):
            self._by_key[_key(kind, driver)] = cls
            return cls
        return deco

    def get(self, kind: str, driver: str) -> Type:
        try:
            return self._by_key[_key(kind, driver)]
        except KeyError:
            raise KeyError(f"Unknown connector: {_key(kind, driver)}. Loaded: {self.list()}") from None

    def has(self, kind: str, driver: str) -> bool:
        return _key(kind, driver) in self._by_key

    def list(self) -> list[str]:
        return sorted(self._by_key)

    def create(self, *, name: str, kind: str, driver: str, options: dict | None = None, config: dict | None = None, ctx: Any = None) -> ConnectorBase:
        cls = self.get(kind, driver)
        return cls(ConnectorInit(name=name, kind=kind, driver=driver, config=dict(config or {}), options=dict(options or {}), ctx=ctx))


REGISTRY = ConnectorRegistry()


def register_connector(kind: str, driver: str):
    return REGISTRY.register(kind, driver)


def get_connector(kind: str, driver: str) -> Type:
    return REGISTRY.get(kind, driver)


def has_connector(kind: str, driver: str) -> bool:
    return REGISTRY.has(kind, driver)


def list_connectors() -> list[str]:
    return REGISTRY.list()


def create_connector(*, name: str, kind: str, driver: str, options: dict | None = None, config: dict | None = None, ctx: Any = None) -> ConnectorBase:
    return REGISTRY.create(name=name, kind=kind, driver=driver, options=options, config=config, ctx=ctx)
