from __future__ import annotations

from archflow.core.connectors.base import ConnectorBase, ConnectorInit

__all__ = ["ConnectorBase", "ConnectorInit"]
