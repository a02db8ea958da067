from __future__ import annotations

import os
from importlib import import_module
from typing import List

from pydantic import BaseModel, Field


class Settings(BaseModel):
    # Defaults are static. Use load_settings(env=...) to read from an env snapshot.
    log_level: str = "INFO"

    # Observability
    # - log_format: "text" (default) or "json". When json, archflow logs emit a single JSON
    #   object per line, suitable for log aggregation.
    log_format: str = "text"

    # Optional metrics sink module (exposes METRICS: MetricsSink)
    metrics_module: str | None = None

    # Simulation pacing
    # - default_speed_ms: delay per node when the caller does not pass a speed
    # - poll_interval_ms: how often a paused run re-checks is_paused()/is_stopped()
    default_speed_ms: int = 1000
    poll_interval_ms: int = 100

    # HTTP (api-call transformations)
    http_timeout: float = 30.0
    http_verify_ssl: bool = True

    plugin_paths: List[str] = Field(default_factory=list)
    plugin_strict: bool = True

    @classmethod
    def from_env(cls, env: dict[str, str], overrides: dict | None = None) -> "Settings":
        """Build Settings from an explicit env snapshot (does not read os.environ)."""
        def g(key: str, default: str | None = None) -> str | None:
            return env.get(key, default)  # type: ignore[return-value]

        data = {
            "log_level": g("ARCHFLOW_LOG_LEVEL", "INFO"),
            "log_format": g("ARCHFLOW_LOG_FORMAT", "text"),
            "metrics_module": g("ARCHFLOW_METRICS_MODULE") or None,
            "default_speed_ms": int(g("ARCHFLOW_DEFAULT_SPEED_MS", "1000") or 1000),
            "poll_interval_ms": int(g("ARCHFLOW_POLL_INTERVAL_MS", "100") or 100),
            "http_timeout": float(g("ARCHFLOW_HTTP_TIMEOUT", "30") or 30),
            "http_verify_ssl": (g("ARCHFLOW_HTTP_VERIFY_SSL", "true") or "true").lower() == "true",
            "plugin_paths": [p for p in (g("ARCHFLOW_PLUGIN_PATHS", "") or "").split(",") if p],
            "plugin_strict": (g("ARCHFLOW_PLUGIN_STRICT", "true") or "true").lower() == "true",
        }
        if overrides:
            data.update(overrides)
        return cls(**data)


def load_settings(overrides: dict | None = None, *, env: dict[str, str] | None = None) -> Settings:
    """Load settings from (1) env snapshot, (2) optional settings module, (3) explicit overrides.

    If env is not provided, we build a snapshot from os.environ.
    """
    env2 = {k: str(v) for k, v in os.environ.items()} if env is None else env
    s = Settings.from_env(env2)
    mod = env2.get("ARCHFLOW_SETTINGS_MODULE")
    if mod:
        m = import_module(mod)
        data = getattr(m, "SETTINGS", {})
        if not isinstance(data, dict):
            raise TypeError("ARCHFLOW_SETTINGS_MODULE must expose SETTINGS: dict")
        s = s.model_copy(update=data)
    if overrides:
        s = s.model_copy(update=overrides)
    return s
