"""Tests for the timer-driven host runner."""

import asyncio
import contextlib
import io
import random

import pytest

from brainpmm.config import Config, ConfigValidationError
from brainpmm.engine import PMMEngine
from brainpmm.randomness import ScriptedRandom
from brainpmm.runner import RunnerBusyError, SimulationRunner
from brainpmm.schemas import BrainConfig, EmotionComponent, Sender, TickMode


FAST = {TickMode.INFERENCE: 0.0, TickMode.TRAINING: 0.0}


def make_runner(**kwargs) -> SimulationRunner:
    config = kwargs.pop(
        "config",
        BrainConfig(start_mem_slots=4, max_mem_slots=16, expansion_threshold=0.5,
                    thought_dim=4, workspace_dim=4),
    )
    kwargs.setdefault("engine", PMMEngine(rng=random.Random(8)))
    kwargs.setdefault("tick_intervals", FAST)
    kwargs.setdefault("verbose", False)
    return SimulationRunner(config, **kwargs)


def test_step_replaces_snapshot_and_notifies_listeners():
    seen = []
    runner = make_runner(tick_listeners=[lambda tick, prev, new: seen.append((tick, prev.tick, new.tick))])
    initial = runner.state

    new_state = runner.step()

    assert runner.state is new_state
    assert initial.tick == 0
    assert seen == [(1, 0, 1)]


def test_failing_listener_does_not_stop_ticks():
    def broken(tick, prev, new):
        raise RuntimeError("boom")

    runner = make_runner(tick_listeners=[broken])
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        runner.step()
        runner.step()

    assert runner.state.tick == 2
    assert "Tick listener failed: boom" in buffer.getvalue()


@pytest.mark.asyncio
async def test_run_stops_after_num_ticks():
    runner = make_runner()

    final = await runner.run(num_ticks=5)

    assert final.tick == 5
    assert runner.is_running is False


@pytest.mark.asyncio
async def test_pause_from_listener_stops_timer_loop():
    runner = make_runner()

    def pause_at_three(tick, prev, new):
        if tick == 3:
            runner.pause()

    runner.tick_listeners.append(pause_at_three)
    await runner.run()

    assert runner.state.tick == 3


@pytest.mark.asyncio
async def test_second_loop_is_rejected_while_running():
    runner = make_runner(tick_intervals={TickMode.INFERENCE: 0.01, TickMode.TRAINING: 0.01})

    task = asyncio.create_task(runner.run(num_ticks=50))
    await asyncio.sleep(0)

    with pytest.raises(RunnerBusyError):
        await runner.run(num_ticks=1)

    runner.pause()
    await task
    assert runner.state.tick < 50


@pytest.mark.asyncio
async def test_run_resumes_immediately_after_pause():
    runner = make_runner(tick_intervals={TickMode.INFERENCE: 0.05, TickMode.TRAINING: 0.05})

    task = asyncio.create_task(runner.run())
    await asyncio.sleep(0.01)
    runner.pause()
    ticks_before = runner.state.tick

    final = await runner.run(num_ticks=1)

    assert final.tick == ticks_before + 1
    assert (await task).tick == final.tick
    assert runner.is_running is False


@pytest.mark.asyncio
async def test_run_resumes_after_reset_and_apply_config():
    runner = make_runner(tick_intervals={TickMode.INFERENCE: 0.05, TickMode.TRAINING: 0.05})

    first = asyncio.create_task(runner.run())
    await asyncio.sleep(0.01)
    runner.reset()
    assert (await runner.run(num_ticks=1)).tick == 1

    second = asyncio.create_task(runner.run())
    await asyncio.sleep(0.01)
    runner.apply_config(BrainConfig(start_mem_slots=8, max_mem_slots=32, expansion_threshold=0.7))
    final = await runner.run(num_ticks=2)

    assert final.tick == 2
    assert final.memory_capacity == 8
    await asyncio.gather(first, second)


@pytest.mark.asyncio
async def test_cancelling_run_from_outside_propagates():
    runner = make_runner(tick_intervals={TickMode.INFERENCE: 0.05, TickMode.TRAINING: 0.05})

    task = asyncio.create_task(runner.run())
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert runner.is_running is False


@pytest.mark.asyncio
async def test_run_returns_without_sleeping_after_last_tick():
    runner = make_runner(tick_intervals={TickMode.INFERENCE: 5.0, TickMode.TRAINING: 5.0})

    final = await asyncio.wait_for(runner.run(num_ticks=1), timeout=1.0)

    assert final.tick == 1


@pytest.mark.asyncio
async def test_training_mode_reports_metrics():
    runner = make_runner()
    runner.set_mode(TickMode.TRAINING)

    await runner.run(num_ticks=3)

    assert runner.state.training_metrics is not None
    assert runner.state.training_metrics.step == 3
    assert runner.tick_interval == FAST[TickMode.TRAINING]


def test_set_mode_pauses():
    runner = make_runner()
    runner.is_running = True

    runner.set_mode(TickMode.TRAINING)

    assert runner.is_running is False
    assert runner.mode is TickMode.TRAINING


def test_reset_clears_flags_and_state():
    runner = make_runner()
    runner.toggle_stress()
    runner.step()
    runner.is_running = True

    state = runner.reset()

    assert state.tick == 0
    assert runner.stress is False
    assert runner.is_running is False


def test_apply_config_rejection_leaves_run_untouched():
    runner = make_runner()
    runner.step()
    config_before = runner.config
    state_before = runner.state

    with pytest.raises(ConfigValidationError, match="Start Memory"):
        runner.apply_config(BrainConfig(start_mem_slots=10, max_mem_slots=5, expansion_threshold=0.5))

    assert runner.config is config_before
    assert runner.state is state_before


def test_apply_config_resets_with_new_shape():
    runner = make_runner()
    runner.set_stress(True)
    runner.step()

    state = runner.apply_config(BrainConfig(start_mem_slots=8, max_mem_slots=32, expansion_threshold=0.7))

    assert state.memory_capacity == 8
    assert state.tick == 0
    assert runner.stress is False


def test_manual_operations_update_current_snapshot():
    runner = make_runner(engine=PMMEngine(rng=ScriptedRandom([0.2])))

    assert runner.can_force_expand()
    runner.force_expand()
    assert runner.state.memory_capacity == 8

    runner.state = runner.state.model_copy(
        update={"memory_slots": (0.5,) + runner.state.memory_slots[1:]}
    )
    runner.flush_slots([0])
    assert runner.state.memory_slots[0] == 0.0

    runner.send_message("hello")
    assert runner.state.chat_history[-1].sender is Sender.AI

    runner.override_emotion(EmotionComponent.VALENCE, -2.0)
    assert runner.state.emotion_vector.valence == -1.0


def test_decode_slot_uses_live_usage():
    runner = make_runner()
    runner.state = runner.state.model_copy(update={"memory_slots": (0.0, 0.7, 0.0, 0.0)})

    assert runner.decode_slot(1).confidence == 0.7
    assert runner.decode_slot(99).confidence == 0.0


def test_verbose_step_prints_tick_summary(monkeypatch):
    monkeypatch.setenv("BRAINPMM_NO_COLOR", "1")
    monkeypatch.setattr(Config, "LOG_LEVEL", "INFO")
    runner = make_runner(verbose=True)

    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        runner.force_expand()
        runner.step()

    output = buffer.getvalue()
    assert "[•] [Tick 1] pressure" in output
    assert "slots 8" in output


def test_quiet_runner_prints_nothing():
    runner = make_runner(verbose=False)

    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        runner.step()

    assert buffer.getvalue() == ""
