"""Centralized customized exceptions for Archflow.

All project-specific exceptions live in this module; the import-time
architecture guard rejects exception classes defined anywhere else.

Internal code should prefer explicit imports:

    from archflow.core.exception import SpecError

Note that the simulation engine itself never raises for data problems: bad
seed JSON, unresolvable template tokens and HTTP failures are all turned into
ordinary output values. These exceptions cover misuse and invalid documents.
"""

from __future__ import annotations

__all__ = [
    "SpecError",
    "SimulationError",
    "ConnectorError",
    "PluginError",
]


class SpecError(ValueError):
    """Raised when a graph document is invalid (schema or shape)."""


class SimulationError(RuntimeError):
    """Raised when a simulation runner is misused (e.g. run twice)."""


class ConnectorError(RuntimeError):
    """Base error for connector failures."""


class PluginError(RuntimeError):
    """Raised when a plugin (entry point or file) fails to load in strict mode."""
