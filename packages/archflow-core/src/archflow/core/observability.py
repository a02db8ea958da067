from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, Dict, Optional

from archflow.core.http import is_error_output
from archflow.core.runtime.settings import Settings

log = logging.getLogger("archflow.core.observability")

RUN_COMPLETED = "COMPLETED"
RUN_STOPPED = "STOPPED"
RUN_FAILED = "FAILED"


class MetricsSink:
    """Optional metrics sink.

    Users can provide a module via ARCHFLOW_METRICS_MODULE exposing METRICS: MetricsSink.
    This is intentionally tiny: it gives production users a stable hook point without
    forcing a dependency on any metrics stack.
    """

    def on_run_start(self, *, run_id: str, node_count: int) -> None:  # pragma: no cover
        return None

    def on_run_end(self, *, run_id: str, summary: dict) -> None:  # pragma: no cover
        return None

    def on_node_enter(self, *, run_id: str, node_id: str) -> None:  # pragma: no cover
        return None

    def on_node_process(self, *, run_id: str, node_id: str, transformation: str, error: bool, duration_ms: int) -> None:  # pragma: no cover
        return None


def load_metrics_sink(settings: Settings) -> MetricsSink:
    mod = settings.metrics_module
    if not mod:
        return MetricsSink()
    m = import_module(mod)
    sink = getattr(m, "METRICS", None)
    if sink is None:
        raise AttributeError(f"{mod} must expose METRICS")
    return sink


def _now_ms() -> int:
    return int(time.time() * 1000)


def _dur_ms(t0: float, t1: float) -> int:
    return int((t1 - t0) * 1000)


def configure_logging(settings: Settings) -> None:
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    if (settings.log_format or "text").lower() == "json":
        # JSON payload already includes timestamp; keep formatter minimal.
        fmt = "%(message)s"
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=fmt,
    )


def log_event(logger: logging.Logger, *, settings: Settings, level: int, event: str, **fields: Any) -> None:
    """Emit an event log.

    - text format: one-liner `event key=value ...`
    - json format: one JSON object per line
    """
    if settings.log_format.lower() == "json":
        payload = {"ts_ms": _now_ms(), "event": event, **fields}
        logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
        return

    parts = [event]
    for k, v in fields.items():
        parts.append(f"{k}={v}")
    logger.log(level, " ".join(parts))


@dataclass
class NodeSummary:
    node_id: str
    node_name: str
    transformation: str
    error: bool
    duration_ms: int


@dataclass
class RunSummary:
    run_id: str
    status: str
    duration_ms: int
    nodes: list[NodeSummary] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def step_count(self) -> int:
        return len(self.nodes)

    @property
    def error_count(self) -> int:
        return sum(1 for n in self.nodes if n.error)

    def as_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "step_count": self.step_count,
            "error_count": self.error_count,
            "error": self.error,
            "nodes": [
                {
                    "node_id": n.node_id,
                    "node_name": n.node_name,
                    "transformation": n.transformation,
                    "error": n.error,
                    "duration_ms": n.duration_ms,
                }
                for n in self.nodes
            ],
        }


class SimulationObserver:
    """Collects per-node timings for one simulation run and emits the end-of-run summary.

    A node visited more than once (fan-in, cycles) gets one entry per visit.
    """

    def __init__(self, *, settings: Settings, logger: logging.Logger, run_id: str):
        self.settings = settings
        self.logger = logger
        self.run_id = run_id
        self._t_run0: float | None = None
        self._node_t0: dict[str, float] = {}
        self._nodes: list[NodeSummary] = []
        self._error: Optional[str] = None
        self.metrics = load_metrics_sink(settings)

    def run_start(self, *, node_count: int, edge_count: int, start_nodes: list[str], speed: int) -> None:
        self._t_run0 = time.perf_counter()
        log_event(self.logger, settings=self.settings, level=logging.INFO, event="run_start", run_id=self.run_id,
                  nodes=node_count, edges=edge_count, start_nodes=start_nodes, speed_ms=speed)
        if not start_nodes and node_count:
            log_event(self.logger, settings=self.settings, level=logging.WARNING, event="no_start_nodes",
                      run_id=self.run_id, reason="every node has an incoming edge")
        try:
            self.metrics.on_run_start(run_id=self.run_id, node_count=node_count)
        except Exception:
            # Metrics must never break the run.
            log.warning("SimulationObserver.run_start metrics failed", exc_info=True)

    def node_enter(self, *, node_id: str) -> None:
        self._node_t0[node_id] = time.perf_counter()
        log_event(self.logger, settings=self.settings, level=logging.DEBUG, event="node_enter", run_id=self.run_id, node_id=node_id)
        try:
            self.metrics.on_node_enter(run_id=self.run_id, node_id=node_id)
        except Exception:
            log.warning("SimulationObserver.node_enter metrics failed", exc_info=True)

    def node_process(self, *, node_id: str, node_name: str, transformation: str, output: Any) -> None:
        t0 = self._node_t0.pop(node_id, None)
        dur = _dur_ms(t0, time.perf_counter()) if t0 is not None else 0
        error = is_error_output(output)
        self._nodes.append(NodeSummary(node_id=node_id, node_name=node_name, transformation=transformation, error=error, duration_ms=dur))
        log_event(self.logger, settings=self.settings, level=logging.WARNING if error else logging.INFO, event="node_process",
                  run_id=self.run_id, node_id=node_id, node_name=node_name, transformation=transformation, error=error, duration_ms=dur)
        try:
            self.metrics.on_node_process(run_id=self.run_id, node_id=node_id, transformation=transformation, error=error, duration_ms=dur)
        except Exception:
            log.warning("SimulationObserver.node_process metrics failed", exc_info=True)

    def run_failed(self, *, error: BaseException) -> None:
        self._error = f"{type(error).__name__}: {error}"
        self.logger.error(f"Simulation failed run_id={self.run_id}: {self._error}", exc_info=error)

    def run_end(self, *, status: str) -> RunSummary:
        t0 = self._t_run0
        dur = _dur_ms(t0, time.perf_counter()) if t0 is not None else 0
        summary = RunSummary(run_id=self.run_id, status=status, duration_ms=dur, nodes=list(self._nodes), error=self._error)
        log_event(self.logger, settings=self.settings, level=logging.INFO, event="run_summary", **summary.as_dict())
        try:
            self.metrics.on_run_end(run_id=self.run_id, summary=summary.as_dict())
        except Exception:
            log.warning("SimulationObserver.run_end metrics failed", exc_info=True)
        return summary
