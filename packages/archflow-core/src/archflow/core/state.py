from __future__ import annotations

import logging
import time
from typing import Any, Iterable, List, Optional

from archflow.core.http import is_error_output
from archflow.core.runner import SimulationCallbacks, SimulationRunner, create_simulation_runner
from archflow.core.runtime.settings import Settings
from archflow.core.spec import EdgeSpec, NodeSpec, SimulationState, SimulationStep

log = logging.getLogger("archflow.core.state")


def _now_ms() -> int:
    return int(time.time() * 1000)


class SimulationSession:
    """Caller-side simulation state plus the callbacks that keep it current.

    The runner never owns this state: it reports through the callbacks built
    by :meth:`callbacks` and polls ``is_paused``/``is_stopped`` back from it.
    Pausing, resuming and stopping are therefore plain state flips.
    """

    def __init__(self, *, speed: int = 1000, settings: Settings | None = None):
        self.state = SimulationState(speed=speed)
        self.settings = settings
        self.runner: Optional[SimulationRunner] = None

    # -- actions ----------------------------------------------------------

    def start(self) -> None:
        self.state.is_running = True
        self.state.is_paused = False
        self.state.current_node_id = None
        self.state.steps = []

    def pause(self) -> None:
        self.state.is_paused = True

    def resume(self) -> None:
        self.state.is_paused = False

    def stop(self) -> None:
        self.state.is_running = False
        self.state.is_paused = False
        self.state.current_node_id = None

    def add_step(self, step: SimulationStep) -> None:
        self.state.steps = [*self.state.steps, step]

    def set_current_node(self, node_id: Optional[str]) -> None:
        self.state.current_node_id = node_id

    def set_speed(self, speed: int) -> None:
        self.state.speed = int(speed)

    def clear_steps(self) -> None:
        self.state.steps = []

    # -- queries ----------------------------------------------------------

    @property
    def steps(self) -> List[SimulationStep]:
        return list(self.state.steps)

    def error_steps(self) -> List[SimulationStep]:
        return [s for s in self.state.steps if is_error_output(s.output_data)]

    # -- runner wiring ----------------------------------------------------

    def callbacks(self) -> SimulationCallbacks:
        def on_node_process(node_id: str, node_name: str, input_data: Any, output_data: Any) -> None:
            self.add_step(
                SimulationStep(
                    node_id=node_id,
                    node_name=node_name,
                    input_data=input_data,
                    output_data=output_data,
                    timestamp=_now_ms(),
                )
            )

        def on_complete() -> None:
            self.set_current_node(None)
            self.stop()

        return SimulationCallbacks(
            on_node_enter=self.set_current_node,
            on_node_process=on_node_process,
            on_complete=on_complete,
            is_paused=lambda: self.state.is_paused,
            is_stopped=lambda: not self.state.is_running,
        )

    async def simulate(self, nodes: Iterable[NodeSpec | dict], edges: Iterable[EdgeSpec | dict], *, ctx=None) -> List[SimulationStep]:
        """Start the session and run a fresh runner over the graph at the session speed."""
        nodes = list(nodes)
        if not nodes:
            log.info("nothing to simulate: graph has no nodes")
            return []
        self.start()
        self.runner = create_simulation_runner(nodes, edges, self.state.speed, self.callbacks(), settings=self.settings, ctx=ctx)
        try:
            await self.runner.run()
        finally:
            # A failed run never reaches on_complete; leave the session idle.
            if self.state.is_running:
                self.stop()
        return self.steps
