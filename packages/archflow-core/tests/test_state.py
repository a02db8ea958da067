from __future__ import annotations

import asyncio
import time

from archflow.core.runner import create_simulation_runner
from archflow.core.spec import SimulationStep
from archflow.core.state import SimulationSession

from conftest import edge, node


def test_session_actions_flip_state():
    s = SimulationSession(speed=500)
    assert s.state.speed == 500
    assert not s.state.is_running

    s.add_step(SimulationStep(node_id="x", node_name="X", timestamp=1))
    s.set_current_node("x")
    s.start()
    assert s.state.is_running and not s.state.is_paused
    assert s.steps == []
    assert s.state.current_node_id is None

    s.pause()
    assert s.state.is_paused
    s.resume()
    assert not s.state.is_paused

    s.set_current_node("n1")
    s.stop()
    assert not s.state.is_running
    assert not s.state.is_paused
    assert s.state.current_node_id is None

    s.set_speed(250)
    assert s.state.speed == 250


def test_simulate_records_steps(settings):
    s = SimulationSession(speed=0, settings=settings)
    before = int(time.time() * 1000)
    steps = asyncio.run(
        s.simulate(
            [node("a", "Source", dummy='{"x":5}'), node("b", "Wrap", kind="transform")],
            [edge("a", "b")],
        )
    )
    assert [st.node_id for st in steps] == ["a", "b"]
    assert steps[0].node_name == "Source"
    assert steps[0].input_data == {"x": 5}
    assert steps[1].output_data["original"] == {"x": 5}
    assert all(st.timestamp >= before for st in steps)
    assert steps[0].as_dict()["nodeId"] == "a"
    # Completion leaves the session idle.
    assert not s.state.is_running
    assert s.state.current_node_id is None
    assert s.runner.summary.step_count == 2


def test_simulate_empty_graph_is_a_no_op(settings):
    s = SimulationSession(speed=0, settings=settings)
    assert asyncio.run(s.simulate([], [])) == []
    assert s.runner is None
    assert not s.state.is_running


def test_session_pause_and_stop_drive_the_runner(settings):
    s = SimulationSession(speed=0, settings=settings)
    s.start()
    cbs = s.callbacks()
    enter = cbs.on_node_enter

    def enter_and_pause(node_id):
        enter(node_id)
        s.pause()

    cbs.on_node_enter = enter_and_pause
    runner = create_simulation_runner([node("a"), node("b")], [edge("a", "b")], s.state.speed, cbs, settings=settings)

    async def go():
        task = asyncio.create_task(runner.run())
        await asyncio.sleep(0.03)
        held = (s.state.current_node_id, len(s.steps))
        s.stop()
        await asyncio.wait_for(task, timeout=2)
        return held

    held = asyncio.run(go())
    assert held == ("a", 0)
    # The entered node still finishes; nothing after it runs.
    assert [st.node_id for st in s.steps] == ["a"]
    assert cbs.is_stopped()
    assert runner.summary.status == "STOPPED"


def test_error_steps_filters_error_outputs():
    s = SimulationSession()
    s.add_step(SimulationStep(node_id="a", node_name="A", output_data={"ok": 1}, timestamp=1))
    s.add_step(SimulationStep(node_id="b", node_name="B", output_data={"_error": True, "_status": 500}, timestamp=2))
    assert [st.node_id for st in s.error_steps()] == ["b"]
    s.clear_steps()
    assert s.steps == []
