"""
brainpmm - tick engine for a self-expanding memory module simulation.

Drives a dashboard that visualizes a simulated memory module whose capacity
doubles under load, with an emotion model, canned chat replies and synthetic
distillation telemetry.

No rendering, no file I/O, no global state.
All randomness and timing dependencies are injected by the host.
"""

__version__ = "0.1.0"

# Main components
from .engine import PMMEngine, can_expand, compute_pressure
from .runner import SimulationRunner, RunnerBusyError

# Configuration
from .config import Config, ConfigValidationError, validate_config

# Collaborators
from .buffers import RingBuffer, push_bounded
from .chat import ChatEngine, Tone, tone_for
from .decoder import decode_slot
from .emotion import EmotionEngine, MoodLabel, mood_label
from .randomness import RandomSource, ScriptedRandom
from .training import LossEstimator, MockMindTeacher

# Core schemas
from .schemas import (
    ActionLabel,
    AGENT_ACTIONS,
    BrainConfig,
    ChatMessage,
    DecodedMemory,
    EmotionComponent,
    EmotionVector,
    MemoryType,
    PressureSample,
    Sender,
    SimulationState,
    TeacherTargets,
    TickMode,
    TrainingMetrics,
)

__all__ = [
    # Main components
    "PMMEngine",
    "SimulationRunner",
    "RunnerBusyError",
    "can_expand",
    "compute_pressure",
    # Configuration
    "Config",
    "ConfigValidationError",
    "validate_config",
    # Collaborators
    "RingBuffer",
    "push_bounded",
    "ChatEngine",
    "Tone",
    "tone_for",
    "decode_slot",
    "EmotionEngine",
    "MoodLabel",
    "mood_label",
    "RandomSource",
    "ScriptedRandom",
    "LossEstimator",
    "MockMindTeacher",
    # Schemas
    "ActionLabel",
    "AGENT_ACTIONS",
    "BrainConfig",
    "ChatMessage",
    "DecodedMemory",
    "EmotionComponent",
    "EmotionVector",
    "MemoryType",
    "PressureSample",
    "Sender",
    "SimulationState",
    "TeacherTargets",
    "TickMode",
    "TrainingMetrics",
]
