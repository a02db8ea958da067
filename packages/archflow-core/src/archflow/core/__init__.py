"""archflow core package.

Public entrypoints:
- archflow.core.api: stable API surface for integrations/plugins
- archflow.core.create_simulation_runner: build a single-use runner over a node graph

Internal modules may change without notice.
"""

from __future__ import annotations

# Strict architecture enforcement (default ON; set ARCHFLOW_STRICT_ARCH=0 to disable).
from archflow.core._architecture_guard import assert_architecture as _assert_architecture

_assert_architecture()

from archflow.core.runner import create_simulation_runner

__all__ = ["create_simulation_runner"]
