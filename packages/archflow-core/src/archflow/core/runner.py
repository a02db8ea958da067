from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from archflow.core.context import RunContext, new_run_id
from archflow.core.exception import SimulationError
from archflow.core.graph import as_edges, as_nodes, find_start_nodes, get_outgoing_edges, index_nodes
from archflow.core.observability import RUN_COMPLETED, RUN_FAILED, RUN_STOPPED, RunSummary, SimulationObserver
from archflow.core.resolution import loads_json
from archflow.core.runtime.settings import Settings, load_settings
from archflow.core.spec import EdgeSpec, NodeSpec
from archflow.core.transformation import resolve_kind, transform_data

log = logging.getLogger("archflow.core.runner")


def _noop(*_args: Any) -> None:
    return None


def _never() -> bool:
    return False


@dataclass
class SimulationCallbacks:
    """Observer hooks for one run.

    ``is_paused``/``is_stopped`` are polled by the runner, so the caller can
    flip its own state without calling back into the runner. Any hook may be
    a coroutine function.
    """

    on_node_enter: Callable[[str], Any] = _noop
    on_node_process: Callable[[str, str, Any, Any], Any] = _noop
    on_complete: Callable[[], Any] = _noop
    is_paused: Callable[[], Any] = _never
    is_stopped: Callable[[], Any] = _never


async def _call(fn: Callable, *args: Any) -> Any:
    res = fn(*args)
    if inspect.isawaitable(res):
        res = await res
    return res


def parse_node_data(dummy_data: Optional[str]) -> Any:
    """Seed value of a start node.

    Parsed JSON when possible, ``{"raw": text}`` for unparsable text and
    ``{"_empty": True}`` when nothing is configured.
    """
    if not dummy_data:
        return {"_empty": True}
    try:
        return loads_json(dummy_data)
    except ValueError:
        return {"raw": dummy_data}


class SimulationRunner:
    """Single-use depth-first propagation of data through a node graph.

    Idle -> Running (optionally paused) -> Completed | Stopped | Failed.

    Nodes are visited in depth-first pre-order following the edge list order.
    A node reached through several incoming edges is processed once per
    incoming activation, each time with that predecessor's output. Pause and
    stop are cooperative: they take effect at the per-node delay and before
    each visit, never in the middle of a transformation.
    """

    def __init__(
        self,
        nodes: Iterable[NodeSpec | dict],
        edges: Iterable[EdgeSpec | dict],
        speed: Optional[int],
        callbacks: Any,
        *,
        settings: Settings | None = None,
        ctx: RunContext | None = None,
    ):
        self.settings = settings or (ctx.settings if ctx is not None else load_settings())
        self.nodes: List[NodeSpec] = as_nodes(nodes)
        self.edges: List[EdgeSpec] = as_edges(edges)
        self.speed = int(self.settings.default_speed_ms if speed is None else speed)
        self.callbacks = callbacks if callbacks is not None else SimulationCallbacks()

        self._owns_ctx = ctx is None
        self.ctx = ctx or RunContext(settings=self.settings, run_id=new_run_id())
        if self._owns_ctx:
            self.ctx.log = logging.getLogger(f"archflow.simulation.{self.ctx.run_id}")

        self._by_id: Dict[str, NodeSpec] = index_nodes(self.nodes)
        self._outgoing: Dict[str, List[EdgeSpec]] = {n.id: get_outgoing_edges(n.id, self.edges) for n in self.nodes}
        self._stopped = False
        self._started = False
        self.summary: RunSummary | None = None

    @property
    def run_id(self) -> str:
        return self.ctx.run_id

    def stop(self) -> None:
        log.debug("stop requested run_id=%s", self.run_id)
        self._stopped = True

    async def _is_stopped(self) -> bool:
        if self._stopped:
            return True
        return bool(await _call(self.callbacks.is_stopped))

    async def _delay(self, ms: int) -> None:
        await asyncio.sleep(max(ms, 0) / 1000)
        poll = max(self.settings.poll_interval_ms, 1) / 1000
        while not await self._is_stopped():
            if not await _call(self.callbacks.is_paused):
                return
            await asyncio.sleep(poll)

    async def _process(self, node: NodeSpec, input_data: Any, observer: SimulationObserver) -> Any:
        observer.node_enter(node_id=node.id)
        await _call(self.callbacks.on_node_enter, node.id)
        await self._delay(self.speed)

        kind = node.data.transformation_type
        output = await transform_data(input_data, kind, node.data.api_config, ctx=self.ctx)

        observer.node_process(node_id=node.id, node_name=node.data.label, transformation=resolve_kind(kind), output=output)
        await _call(self.callbacks.on_node_process, node.id, node.data.label, input_data, output)
        return output

    async def _traverse(self, start: NodeSpec, seed: Any, observer: SimulationObserver) -> None:
        # Explicit stack of (node, input); children pushed in reverse so they pop in edge order.
        stack: List[Tuple[NodeSpec, Any]] = [(start, seed)]
        while stack:
            node, input_data = stack.pop()
            if await self._is_stopped():
                return
            output = await self._process(node, input_data, observer)
            children = []
            for edge in self._outgoing.get(node.id, []):
                target = self._by_id.get(edge.target)
                if target is not None:
                    children.append((target, output))
            stack.extend(reversed(children))

    async def run(self) -> None:
        if self._started:
            raise SimulationError(f"Simulation runner already used run_id={self.run_id}; create a new runner")
        self._started = True

        observer = SimulationObserver(settings=self.settings, logger=self.ctx.log, run_id=self.run_id)
        start_nodes = find_start_nodes(self.nodes, self.edges)
        observer.run_start(
            node_count=len(self.nodes),
            edge_count=len(self.edges),
            start_nodes=[n.id for n in start_nodes],
            speed=self.speed,
        )

        status = RUN_FAILED
        try:
            for node in start_nodes:
                if await self._is_stopped():
                    break
                await self._traverse(node, parse_node_data(node.data.dummy_data), observer)

            if await self._is_stopped():
                status = RUN_STOPPED
            else:
                status = RUN_COMPLETED
                await _call(self.callbacks.on_complete)
        except Exception as e:
            status = RUN_FAILED
            observer.run_failed(error=e)
            raise
        finally:
            self.summary = observer.run_end(status=status)
            if self._owns_ctx:
                await self.ctx.aclose()


def create_simulation_runner(
    nodes: Iterable[NodeSpec | dict],
    edges: Iterable[EdgeSpec | dict],
    speed: Optional[int],
    callbacks: Any,
    *,
    settings: Settings | None = None,
    ctx: RunContext | None = None,
) -> SimulationRunner:
    return SimulationRunner(nodes, edges, speed, callbacks, settings=settings, ctx=ctx)
