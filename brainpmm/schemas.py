"""
Pydantic schemas for the brainpmm simulation.

All data structures exchanged between the engine and its host are defined here.

Design Philosophy:
- Snapshots are frozen values; every transition returns a new one
- Sequences are stored as tuples so a past snapshot can never be edited
- Enumerations are ``str`` enums so snapshots serialize to plain JSON
- Field constraints encode the numeric bounds the dashboard relies on
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enumerations
# ============================================================================


class TickMode(str, Enum):
    """Which transition variant a tick runs."""

    INFERENCE = "INFERENCE"
    TRAINING = "TRAINING"


class Sender(str, Enum):
    """Author of a chat transcript entry."""

    USER = "USER"
    AI = "AI"
    SYSTEM = "SYSTEM"


class ActionLabel(str, Enum):
    """Closed set of actions the simulated agent can report.

    ``BOOT_SEQUENCE`` only appears on a freshly initialized snapshot; ticks
    always pick from ``AGENT_ACTIONS``.
    """

    BOOT_SEQUENCE = "BOOT_SEQUENCE"
    IDLE = "IDLE"
    MOVE_FORWARD = "MOVE_FORWARD"
    TURN_LEFT = "TURN_LEFT"
    TURN_RIGHT = "TURN_RIGHT"
    ATTACK = "ATTACK"
    DEFEND = "DEFEND"
    INTERACT = "INTERACT"
    USE_ITEM = "USE_ITEM"
    RELOAD = "RELOAD"
    JUMP = "JUMP"
    CROUCH = "CROUCH"
    SCAN_AREA = "SCAN_AREA"


AGENT_ACTIONS: Tuple[ActionLabel, ...] = tuple(
    action for action in ActionLabel if action is not ActionLabel.BOOT_SEQUENCE
)


class EmotionComponent(str, Enum):
    """Axis of the VAD affect model."""

    VALENCE = "valence"
    AROUSAL = "arousal"
    DOMINANCE = "dominance"


class MemoryType(str, Enum):
    """Category of decoded slot content."""

    SENSORY = "SENSORY"
    SPATIAL = "SPATIAL"
    ENTITY = "ENTITY"
    INTENT = "INTENT"


# ============================================================================
# Configuration
# ============================================================================


class BrainConfig(BaseModel):
    """Shape of one simulation run.

    Immutable for the lifetime of a run. Cross-field rules (start <= max,
    threshold range) are checked by ``brainpmm.config.validate_config`` so a
    host can hold an unvalidated draft while the user edits it.
    """

    model_config = ConfigDict(frozen=True)

    obs_dim: int = Field(96, description="Observation vector width")
    thought_dim: int = Field(32, ge=0, description="Thought vector width")
    workspace_dim: int = Field(64, ge=0, description="Workspace vector width")
    start_mem_slots: int = Field(256, description="Slot count after a reset")
    max_mem_slots: int = Field(2048, description="Capacity ceiling for expansion")
    expansion_threshold: float = Field(
        0.85, description="Pressure above which capacity doubles"
    )


# ============================================================================
# Snapshot Building Blocks
# ============================================================================


class EmotionVector(BaseModel):
    """Valence-Arousal-Dominance affect triple, each axis in [-1, 1]."""

    model_config = ConfigDict(frozen=True)

    valence: float = Field(0.0, ge=-1.0, le=1.0, description="-1 negative to 1 positive")
    arousal: float = Field(0.0, ge=-1.0, le=1.0, description="-1 calm to 1 excited")
    dominance: float = Field(0.0, ge=-1.0, le=1.0, description="-1 submissive to 1 dominant")

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.valence, self.arousal, self.dominance)


class PressureSample(BaseModel):
    """One point of the pressure chart."""

    model_config = ConfigDict(frozen=True)

    tick: int = Field(..., ge=0)
    pressure: float = Field(..., ge=0.0, le=1.0)


class ChatMessage(BaseModel):
    """Chat transcript entry.

    Timestamps are strictly increasing within one exchange so sorting the
    transcript by timestamp reproduces insertion order.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique message identifier")
    sender: Sender = Field(..., description="USER, AI or SYSTEM")
    text: str = Field(..., description="Message body")
    timestamp: datetime = Field(..., description="When the message was recorded")
    variant: Literal["default", "alert", "success"] = Field(
        "default", description="Display hint for the transcript renderer"
    )


class TrainingMetrics(BaseModel):
    """Synthetic distillation telemetry (training mode only)."""

    model_config = ConfigDict(frozen=True)

    step: int = Field(0, ge=0)
    total_loss: float = Field(0.0, ge=0.0)
    loss_act: float = Field(0.0, ge=0.0, description="Action mismatch penalty")
    loss_val: float = Field(0.0, ge=0.0, description="Squared value error")
    loss_emo: float = Field(0.0, ge=0.0, description="VAD mean squared error")
    loss_ws: float = Field(0.0, ge=0.0, description="Workspace mean squared error")


class TeacherTargets(BaseModel):
    """Synthetic ground truth produced by the mock teacher for one tick."""

    model_config = ConfigDict(frozen=True)

    action: ActionLabel
    value: float = Field(..., ge=-1.0, le=1.0)
    emotion: EmotionVector
    workspace: Tuple[float, ...]


class DecodedMemory(BaseModel):
    """Display-only interpretation of a single memory slot."""

    model_config = ConfigDict(frozen=True)

    type: MemoryType
    concepts: Tuple[str, str] = Field(..., description="Primary and secondary concept")
    vector: Tuple[float, ...] = Field(..., description="Synthetic embedding")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Live slot usage")
    age: int = Field(..., ge=0, description="Simulated ticks since the slot was written")
    observed_at: Optional[datetime] = Field(None, description="When the slot was inspected")


# ============================================================================
# Simulation Snapshot
# ============================================================================


class SimulationState(BaseModel):
    """Complete state of the memory module at one tick.

    SimulationState is a value: it is frozen and every sequence is a tuple.
    The tick transition and the manual operations build a successor with
    ``model_copy(update=...)`` instead of editing this one, so a renderer
    holding an older snapshot never sees it change underneath it.

    Invariants maintained by the engine:
    - ``len(memory_slots) == memory_capacity``
    - ``memory_capacity`` is ``start_mem_slots * 2**k`` and never shrinks
    - ``pressure_history`` and ``logs`` hold at most 20 entries
    - emotion components stay within [-1, 1]
    """

    model_config = ConfigDict(frozen=True)

    tick: int = Field(0, ge=0, description="Monotonic tick counter")
    memory_capacity: int = Field(..., ge=1, description="Current slot count")
    memory_slots: Tuple[float, ...] = Field(..., description="Per-slot usage in [0, 1]")
    current_pressure: float = Field(0.0, ge=0.0, le=1.0, description="Fraction of active slots")
    pressure_history: Tuple[PressureSample, ...] = Field(default_factory=tuple)
    thought_vector: Tuple[float, ...] = Field(default_factory=tuple)
    workspace_vector: Tuple[float, ...] = Field(default_factory=tuple)
    # Recurrence memory for the workspace update; tracks the last workspace
    # output but is kept separate so a host can perturb one without the other.
    workspace_hidden: Tuple[float, ...] = Field(default_factory=tuple)
    value_estimate: float = Field(0.0, ge=-1.0, le=1.0, description="Value head output")
    emotion_vector: EmotionVector = Field(default_factory=EmotionVector)
    last_action: ActionLabel = Field(ActionLabel.BOOT_SEQUENCE)
    logs: Tuple[str, ...] = Field(default_factory=tuple)
    chat_history: Tuple[ChatMessage, ...] = Field(default_factory=tuple)
    is_expanding: bool = Field(False, description="True only on the tick that expanded")
    training_metrics: Optional[TrainingMetrics] = Field(
        None, description="Present only after a training tick"
    )
