"""Built-in connectors and transformations (registered on import)."""

from __future__ import annotations

from archflow.core.builtins import connectors as _connectors  # noqa: F401
from archflow.core.builtins import transforms as _transforms  # noqa: F401
