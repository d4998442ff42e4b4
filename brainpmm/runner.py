"""
Host-side simulation runner.

Plays the role the dashboard shell plays around the engine:
- holds the active BrainConfig and the current snapshot
- drives ticks from an asyncio timer (period depends on mode) or one at a time
- owns the run/pause and stress flags
- routes manual operations to the engine and swaps in the result

Ticks never overlap. ``run()`` refuses to start a second timer loop while
one is running, ``pause()`` cancels the sleeping loop outright, and each
tick's result replaces the snapshot in a single assignment, so readers only
ever observe complete snapshots.
"""

import asyncio
from typing import Callable, Dict, Iterable, List, Optional

from .config import Config, validate_config
from .engine import PMMEngine, can_expand
from .emotion import mood_label
from .logging_utils import (
    log_deterministic,
    log_error,
    log_info,
    log_success,
    log_training,
)
from .schemas import (
    BrainConfig,
    DecodedMemory,
    EmotionComponent,
    SimulationState,
    TickMode,
)

TickListener = Callable[[int, SimulationState, SimulationState], None]


class RunnerBusyError(RuntimeError):
    """Raised when a timer loop is started while another one is active."""

    def __init__(self) -> None:
        super().__init__(
            "Simulation is already running. Call pause() before starting a new "
            "timer loop."
        )


class SimulationRunner:
    """
    Timer-driven host for a PMMEngine.

    Fully decoupled - accepts the engine and config as parameters.
    No rendering, no file I/O.
    """

    def __init__(
        self,
        config: Optional[BrainConfig] = None,
        *,
        engine: Optional[PMMEngine] = None,
        mode: TickMode = TickMode.INFERENCE,
        tick_intervals: Optional[Dict[TickMode, float]] = None,
        tick_listeners: Optional[List[TickListener]] = None,
        verbose: Optional[bool] = None,
    ):
        """Initialize the runner and build the first snapshot.

        Args:
            config: BrainConfig for the run (defaults to Config.default_brain_config())
            engine: Optional PMMEngine (defaults to one with an unseeded RNG)
            mode: Initial tick mode
            tick_intervals: Optional per-mode timer periods in seconds
            tick_listeners: Optional callables invoked after each tick with
                (tick, previous_state, new_state)
            verbose: Print per-tick console output (defaults to Config.VERBOSE)

        Raises:
            ConfigValidationError: If ``config`` is rejected.
        """
        self.config = config or Config.default_brain_config()
        if engine is None:
            engine = PMMEngine()
            engine.emotion_engine.set_learning_rate(Config.EMOTION_LEARNING_RATE)
        self.engine = engine
        self.mode = TickMode(mode)
        self.tick_intervals: Dict[TickMode, float] = {
            TickMode.INFERENCE: Config.INFERENCE_TICK_SECONDS,
            TickMode.TRAINING: Config.TRAINING_TICK_SECONDS,
        }
        if tick_intervals:
            self.tick_intervals.update(tick_intervals)
        self.tick_listeners = tick_listeners or []
        self.verbose = Config.VERBOSE if verbose is None else verbose

        self.state: SimulationState = self.engine.initialize(self.config)
        self.is_running = False
        self.stress = False
        self._loop_task: Optional["asyncio.Future[None]"] = None
        self._paused_task: Optional["asyncio.Future[None]"] = None

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    @property
    def tick_interval(self) -> float:
        """Timer period for the current mode."""
        return self.tick_intervals[self.mode]

    def step(self) -> SimulationState:
        """Run exactly one tick and return the new snapshot."""
        previous_state = self.state
        new_state = self.engine.tick(previous_state, self.config, self.mode, self.stress)
        self.state = new_state

        if self.verbose:
            self._print_tick_summary(new_state)

        # Listener failures are reported but never stop the run.
        for listener in self.tick_listeners:
            try:
                listener(new_state.tick, previous_state, new_state)
            except Exception as exc:
                log_error(f"[Listener] Tick listener failed: {exc}")

        return new_state

    async def run(self, num_ticks: Optional[int] = None) -> SimulationState:
        """Tick on the mode's timer until paused or ``num_ticks`` have run.

        Args:
            num_ticks: Stop after this many ticks (None runs until pause())

        Returns:
            The snapshot current when the loop exits

        Raises:
            RunnerBusyError: If another timer loop is running and has not
                been paused.
        """
        if self.is_running:
            raise RunnerBusyError()

        self.is_running = True
        if self.verbose:
            log_info(f"[Runner] Starting {self.mode.value} loop ({self.tick_interval}s period)")

        loop_task = asyncio.ensure_future(self._tick_loop(num_ticks))
        self._loop_task = loop_task
        try:
            await loop_task
        except asyncio.CancelledError:
            # pause() cancels the sleeping loop; any other cancellation is the caller's.
            if self._paused_task is not loop_task:
                raise
        finally:
            if self._loop_task is loop_task:
                self.is_running = False
                self._loop_task = None

        return self.state

    async def _tick_loop(self, num_ticks: Optional[int]) -> None:
        ticks_completed = 0
        while self.is_running and (num_ticks is None or ticks_completed < num_ticks):
            self.step()
            ticks_completed += 1
            # No trailing sleep once the requested ticks are done.
            if num_ticks is not None and ticks_completed >= num_ticks:
                break
            await asyncio.sleep(self.tick_interval)

    def pause(self) -> None:
        """Stop scheduling ticks. The tick in progress (if any) completes.

        The sleeping timer loop is cancelled right away, so ``run()`` may be
        called again immediately.
        """
        self.is_running = False
        loop_task = self._loop_task
        if loop_task is not None and not loop_task.done():
            self._paused_task = loop_task
            self._loop_task = None
            loop_task.cancel()

    def set_mode(self, mode: TickMode) -> None:
        """Switch between inference and training; always pauses."""
        self.mode = TickMode(mode)
        self.pause()

    def set_stress(self, enabled: bool) -> None:
        self.stress = enabled

    def toggle_stress(self) -> bool:
        self.stress = not self.stress
        return self.stress

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> SimulationState:
        """Pause, re-initialize from the active config and clear the stress flag."""
        self.pause()
        self.state = self.engine.initialize(self.config)
        self.stress = False
        return self.state

    def apply_config(self, config: BrainConfig) -> SimulationState:
        """Validate and adopt ``config``, then reset.

        Raises:
            ConfigValidationError: If ``config`` is rejected. The active
                config and snapshot are left exactly as they were.
        """
        validate_config(config)
        self.config = config
        return self.reset()

    # ------------------------------------------------------------------
    # Manual operations
    # ------------------------------------------------------------------

    def flush_slots(self, indices: Iterable[int]) -> SimulationState:
        self.state = self.engine.flush_slots(self.state, indices)
        return self.state

    def force_expand(self) -> SimulationState:
        self.state = self.engine.force_expand(self.state, self.config)
        return self.state

    def can_force_expand(self) -> bool:
        return can_expand(self.state, self.config)

    def send_message(self, text: str) -> SimulationState:
        self.state = self.engine.send_message(self.state, text)
        return self.state

    def override_emotion(self, component: EmotionComponent, value: float) -> SimulationState:
        self.state = self.engine.override_emotion(self.state, component, value)
        return self.state

    def decode_slot(self, index: int) -> DecodedMemory:
        """Decode slot ``index`` using its live usage (0.0 if out of range)."""
        slots = self.state.memory_slots
        usage = slots[index] if 0 <= index < len(slots) else 0.0
        return self.engine.decode_slot(index, usage)

    # ------------------------------------------------------------------
    # Console output
    # ------------------------------------------------------------------

    def _print_tick_summary(self, state: SimulationState) -> None:
        log_deterministic(
            f"[Tick {state.tick}] pressure {state.current_pressure * 100:.0f}% | "
            f"slots {state.memory_capacity} | action {state.last_action.value} | "
            f"mood {mood_label(state.emotion_vector).value}"
        )
        if state.is_expanding:
            log_success(f"[Expansion] Capacity now {state.memory_capacity} slots")
        if state.training_metrics is not None:
            metrics = state.training_metrics
            log_training(
                f"[Distill] step {metrics.step} loss {metrics.total_loss:.4f} "
                f"(act {metrics.loss_act:.2f}, val {metrics.loss_val:.2f}, "
                f"emo {metrics.loss_emo:.2f}, ws {metrics.loss_ws:.2f})"
            )
