"""
Tick state machine for the self-expanding memory module.

Fully decoupled from rendering and timers. The host owns the current
snapshot and hands it in; every operation returns a new snapshot.

Each tick runs:
1. Perturb slot usage (decay every slot, then write a few random slots)
2. Recompute pressure (fraction of slots above the activity epsilon)
3. Double capacity once if pressure crossed the threshold
4. Smooth emotion toward the new pressure targets
5. Advance thought/workspace/value recurrences and pick an action
6. (training) Score outputs against a mock teacher
7. Append pressure history and log lines, increment the tick counter

Capacity policy: expansion doubles capacity only when the doubled value still
fits under ``max_mem_slots``. Capacity therefore always equals
``start_mem_slots * 2**k`` and never exceeds the ceiling, at the cost of
leaving headroom unused when the ceiling is not a power-of-two multiple of
the start size.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence, Tuple
from uuid import uuid4

from .buffers import DEFAULT_CAPACITY, RingBuffer, push_bounded
from .chat import ChatEngine
from .config import validate_config
from .decoder import decode_slot
from .emotion import EmotionEngine, clamp_unit, override_component
from .randomness import RandomSource, pick, pick_index, symmetric_noise
from .schemas import (
    AGENT_ACTIONS,
    ActionLabel,
    BrainConfig,
    ChatMessage,
    DecodedMemory,
    EmotionComponent,
    EmotionVector,
    PressureSample,
    Sender,
    SimulationState,
    TickMode,
)
from .training import LossEstimator, MockMindTeacher

# Slot dynamics
ACTIVITY_EPSILON = 0.05
TRAINING_ACTIVITY_EPSILON = 0.01
SLOT_DECAY = 0.02
MAX_RANDOM_WRITES = 3
STRESS_EXTRA_WRITES = 5
TRAINING_WRITE_INCREMENT = 0.3

# Recurrence noise amplitudes
THOUGHT_NOISE = 0.25
WORKSPACE_NOISE = 0.1
WORKSPACE_RECURRENCE = 0.1
VALUE_NOISE = 0.5

# Log cadence
AMBIENT_EVENT_CHANCE = 0.1
LOSS_LOG_EVERY = 10
AI_REPLY_DELAY = timedelta(milliseconds=100)

AMBIENT_EVENTS: Tuple[str, ...] = (
    "[MEM] Re-indexing...",
    "[VISION] Object tracking stable",
    "[PLAN] Updating thought vector",
    "[PMM] Garbage collection",
)

BOOT_LOG = "[SYSTEM] Cortex Initialized."
BOOT_CHAT = "Neural link established. Terminal active."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_pressure(slots: Sequence[float], epsilon: float = ACTIVITY_EPSILON) -> float:
    """Fraction of ``slots`` with usage strictly above ``epsilon``."""
    if not slots:
        return 0.0
    active = sum(1 for usage in slots if usage > epsilon)
    return active / len(slots)


def can_expand(state: SimulationState, config: BrainConfig) -> bool:
    """True when doubling capacity stays within ``max_mem_slots``."""
    return state.memory_capacity * 2 <= config.max_mem_slots


def format_slot_address(index: int) -> str:
    """Render a slot index the way the grid labels it (``0x002A``)."""
    return f"0x{index:04X}"


def _grow(slots: Sequence[float], capacity: int) -> Tuple[float, ...]:
    return tuple(slots) + (0.0,) * (capacity - len(slots))


class CortexOutputs(NamedTuple):
    """Per-tick outputs of the simulated network heads."""

    emotion: EmotionVector
    thought: Tuple[float, ...]
    workspace: Tuple[float, ...]
    value: float
    action: ActionLabel


class PMMEngine:
    """Owns the transition functions and the collaborators they use.

    All randomness goes through ``rng``. When the collaborators are not
    supplied they are built around the same source, so passing
    ``random.Random(seed)`` makes a whole run reproducible.
    """

    def __init__(
        self,
        *,
        rng: Optional[RandomSource] = None,
        emotion_engine: Optional[EmotionEngine] = None,
        chat_engine: Optional[ChatEngine] = None,
        teacher: Optional[MockMindTeacher] = None,
        loss_estimator: Optional[LossEstimator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.emotion_engine = emotion_engine or EmotionEngine(rng=self.rng)
        self.chat_engine = chat_engine or ChatEngine(rng=self.rng)
        self.teacher = teacher or MockMindTeacher(rng=self.rng)
        self.loss_estimator = loss_estimator or LossEstimator(rng=self.rng)
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, config: BrainConfig) -> SimulationState:
        """Build a fresh snapshot for ``config``.

        Raises:
            ConfigValidationError: If ``config`` fails validation.
        """
        validate_config(config)
        boot_message = ChatMessage(
            id="init-1",
            sender=Sender.SYSTEM,
            text=BOOT_CHAT,
            timestamp=self.clock(),
        )
        return SimulationState(
            tick=0,
            memory_capacity=config.start_mem_slots,
            memory_slots=(0.0,) * config.start_mem_slots,
            current_pressure=0.0,
            # Pre-filled so the chart starts with a full window
            pressure_history=tuple(
                PressureSample(tick=0, pressure=0.0) for _ in range(DEFAULT_CAPACITY)
            ),
            thought_vector=(0.0,) * config.thought_dim,
            workspace_vector=(0.0,) * config.workspace_dim,
            workspace_hidden=(0.0,) * config.workspace_dim,
            value_estimate=0.0,
            emotion_vector=EmotionVector(),
            last_action=ActionLabel.BOOT_SEQUENCE,
            logs=(BOOT_LOG,),
            chat_history=(boot_message,),
            is_expanding=False,
            training_metrics=None,
        )

    def tick(
        self,
        state: SimulationState,
        config: BrainConfig,
        mode: TickMode | str = TickMode.INFERENCE,
        stress: bool = False,
    ) -> SimulationState:
        """Advance ``state`` by one tick.

        ``stress`` floods memory with extra high-usage writes; it only
        applies to inference ticks.
        """
        if TickMode(mode) is TickMode.TRAINING:
            return self._training_tick(state, config)
        return self._inference_tick(state, config, stress)

    # ------------------------------------------------------------------
    # Tick variants
    # ------------------------------------------------------------------

    def _inference_tick(
        self, state: SimulationState, config: BrainConfig, stress: bool
    ) -> SimulationState:
        tick = state.tick + 1
        logs = RingBuffer(state.logs)

        slots = [max(0.0, usage - SLOT_DECAY) for usage in state.memory_slots]
        write_count = pick_index(self.rng, MAX_RANDOM_WRITES)
        if stress:
            write_count += STRESS_EXTRA_WRITES
        for _ in range(write_count):
            slots[pick_index(self.rng, len(slots))] = 1.0

        pressure = compute_pressure(slots, ACTIVITY_EPSILON)

        capacity = state.memory_capacity
        is_expanding = False
        if pressure > config.expansion_threshold and can_expand(state, config):
            capacity *= 2
            is_expanding = True
            logs.push(f"[SYSTEM] CRITICAL PRESSURE {pressure * 100:.0f}%")
            logs.push(f"[SYSTEM] EXPANDING PMM: {state.memory_capacity} -> {capacity} SLOTS")

        outputs = self._forward(state, pressure, is_expanding)

        if not stress and self.rng.random() < AMBIENT_EVENT_CHANCE:
            logs.push(pick(self.rng, AMBIENT_EVENTS))

        return state.model_copy(
            update={
                "tick": tick,
                "memory_capacity": capacity,
                "memory_slots": _grow(slots, capacity),
                "current_pressure": pressure,
                "pressure_history": push_bounded(
                    state.pressure_history, PressureSample(tick=tick, pressure=pressure)
                ),
                "thought_vector": outputs.thought,
                "workspace_vector": outputs.workspace,
                "workspace_hidden": outputs.workspace,
                "value_estimate": outputs.value,
                "emotion_vector": outputs.emotion,
                "last_action": outputs.action,
                "logs": logs.to_tuple(),
                "is_expanding": is_expanding,
                "training_metrics": None,
            }
        )

    def _training_tick(self, state: SimulationState, config: BrainConfig) -> SimulationState:
        tick = state.tick + 1
        logs = RingBuffer(state.logs)

        targets = self.teacher.predict(workspace_dim=len(state.workspace_vector))

        slots = [max(0.0, usage - SLOT_DECAY) for usage in state.memory_slots]
        write_index = pick_index(self.rng, len(slots))
        slots[write_index] = min(1.0, slots[write_index] + TRAINING_WRITE_INCREMENT)

        pressure = compute_pressure(slots, TRAINING_ACTIVITY_EPSILON)

        capacity = state.memory_capacity
        is_expanding = False
        if pressure > config.expansion_threshold and can_expand(state, config):
            capacity *= 2
            is_expanding = True
            logs.push(
                f"[TRAINER] Pressure {pressure * 100:.1f}% > "
                f"{config.expansion_threshold * 100:.0f}%"
            )
            logs.push(f"[TRAINER] Expanding Memory: {state.memory_capacity} -> {capacity}")

        outputs = self._forward(state, pressure, is_expanding)

        metrics = self.loss_estimator.evaluate(
            step=tick,
            action=outputs.action,
            value=outputs.value,
            emotion=outputs.emotion,
            workspace=outputs.workspace,
            targets=targets,
        )

        if tick % LOSS_LOG_EVERY == 0:
            logs.push(
                f"[TRAINER] Step {tick}: Loss {metrics.total_loss:.4f} "
                f"(Act {metrics.loss_act:.2f}, Val {metrics.loss_val:.2f})"
            )

        return state.model_copy(
            update={
                "tick": tick,
                "memory_capacity": capacity,
                "memory_slots": _grow(slots, capacity),
                "current_pressure": pressure,
                "pressure_history": push_bounded(
                    state.pressure_history, PressureSample(tick=tick, pressure=pressure)
                ),
                "thought_vector": outputs.thought,
                "workspace_vector": outputs.workspace,
                "workspace_hidden": outputs.workspace,
                "value_estimate": outputs.value,
                "emotion_vector": outputs.emotion,
                "last_action": outputs.action,
                "logs": logs.to_tuple(),
                "is_expanding": is_expanding,
                "training_metrics": metrics,
            }
        )

    def _forward(
        self, state: SimulationState, pressure: float, is_expanding: bool
    ) -> CortexOutputs:
        emotion = self.emotion_engine.predict(state.emotion_vector, pressure, is_expanding)

        thought = tuple(
            clamp_unit(math.tanh(v + symmetric_noise(self.rng, THOUGHT_NOISE)))
            for v in state.thought_vector
        )

        hidden = state.workspace_hidden
        if len(hidden) != len(state.workspace_vector):
            hidden = (0.0,) * len(state.workspace_vector)
        workspace = tuple(
            clamp_unit(
                math.tanh(
                    v + h * WORKSPACE_RECURRENCE + symmetric_noise(self.rng, WORKSPACE_NOISE)
                )
            )
            for v, h in zip(state.workspace_vector, hidden)
        )

        value = clamp_unit(
            math.tanh(state.value_estimate + symmetric_noise(self.rng, VALUE_NOISE))
        )
        action = pick(self.rng, AGENT_ACTIONS)

        return CortexOutputs(
            emotion=emotion,
            thought=thought,
            workspace=workspace,
            value=value,
            action=action,
        )

    # ------------------------------------------------------------------
    # Manual operations
    # ------------------------------------------------------------------

    def flush_slots(self, state: SimulationState, indices: Iterable[int]) -> SimulationState:
        """Zero the given slots and log one summary line.

        Out-of-range indices (including negative ones) are skipped and a
        repeated index counts once. If nothing was flushed the same snapshot
        is returned.
        """
        capacity = len(state.memory_slots)
        flushed: List[int] = sorted({i for i in indices if 0 <= i < capacity})
        if not flushed:
            return state

        slots = list(state.memory_slots)
        for index in flushed:
            slots[index] = 0.0

        if len(flushed) == 1:
            message = f"[MANUAL] Flushed memory slot {format_slot_address(flushed[0])}"
        else:
            message = f"[MANUAL] Bulk flushed {len(flushed)} memory slots"

        return state.model_copy(
            update={
                "memory_slots": tuple(slots),
                "logs": push_bounded(state.logs, message),
            }
        )

    def force_expand(self, state: SimulationState, config: BrainConfig) -> SimulationState:
        """Double capacity on demand; no-op at the ceiling."""
        if not can_expand(state, config):
            return state

        capacity = state.memory_capacity * 2
        return state.model_copy(
            update={
                "memory_capacity": capacity,
                "memory_slots": _grow(state.memory_slots, capacity),
                "logs": push_bounded(
                    state.logs,
                    "[MANUAL] Override: Force Expansion Triggered.",
                    f"[SYSTEM] Hot-swap complete. New Capacity: {capacity} slots.",
                ),
                "is_expanding": True,
            }
        )

    def send_message(self, state: SimulationState, text: str) -> SimulationState:
        """Append the user's message and the generated reply."""
        sent_at = self.clock()
        reply = self.chat_engine.generate_response(
            text,
            state.emotion_vector,
            state.current_pressure,
            state.last_action,
        )
        user_message = ChatMessage(
            id=f"u-{uuid4().hex[:12]}",
            sender=Sender.USER,
            text=text,
            timestamp=sent_at,
        )
        ai_message = ChatMessage(
            id=f"ai-{uuid4().hex[:12]}",
            sender=Sender.AI,
            text=reply,
            timestamp=sent_at + AI_REPLY_DELAY,
        )
        return state.model_copy(
            update={"chat_history": state.chat_history + (user_message, ai_message)}
        )

    def override_emotion(
        self, state: SimulationState, component: EmotionComponent | str, value: float
    ) -> SimulationState:
        """Set one emotion axis directly (clamped to [-1, 1])."""
        emotion = override_component(state.emotion_vector, component, value)
        return state.model_copy(update={"emotion_vector": emotion})

    def decode_slot(self, index: int, usage: float) -> DecodedMemory:
        """Read-only decode of one slot, stamped with the engine clock."""
        return decode_slot(index, usage, observed_at=self.clock())
