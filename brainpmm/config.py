"""
brainpmm Configuration

Loads configuration from environment variables with sensible defaults, and
validates the per-run BrainConfig before a host accepts it.
"""

import os
from dotenv import load_dotenv

from .schemas import BrainConfig

# Load .env file if it exists
load_dotenv()


class ConfigValidationError(ValueError):
    """Raised when a BrainConfig is rejected before a run starts.

    The running configuration and snapshot are never touched when this is
    raised; callers surface ``str(exc)`` to the user and keep going.
    """

    def __init__(self, message: str, *, config: BrainConfig) -> None:
        self.config = config
        super().__init__(message)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration loaded from environment variables."""

    # Default memory module shape (applied on reset when no config is given)
    OBS_DIM: int = int(os.getenv("BRAINPMM_OBS_DIM", "96"))
    THOUGHT_DIM: int = int(os.getenv("BRAINPMM_THOUGHT_DIM", "32"))
    WORKSPACE_DIM: int = int(os.getenv("BRAINPMM_WORKSPACE_DIM", "64"))
    START_MEM_SLOTS: int = int(os.getenv("BRAINPMM_START_MEM_SLOTS", "256"))
    MAX_MEM_SLOTS: int = int(os.getenv("BRAINPMM_MAX_MEM_SLOTS", "2048"))
    EXPANSION_THRESHOLD: float = float(os.getenv("BRAINPMM_EXPANSION_THRESHOLD", "0.85"))

    # Emotion dynamics
    EMOTION_LEARNING_RATE: float = float(os.getenv("BRAINPMM_EMOTION_LEARNING_RATE", "0.1"))

    # Timer periods in seconds. Training runs faster so the loss curve moves.
    INFERENCE_TICK_SECONDS: float = float(os.getenv("BRAINPMM_INFERENCE_TICK_SECONDS", "0.5"))
    TRAINING_TICK_SECONDS: float = float(os.getenv("BRAINPMM_TRAINING_TICK_SECONDS", "0.2"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    VERBOSE: bool = _env_bool("BRAINPMM_VERBOSE")

    @classmethod
    def default_brain_config(cls) -> BrainConfig:
        """Build the BrainConfig used when the host has not supplied one."""
        return BrainConfig(
            obs_dim=cls.OBS_DIM,
            thought_dim=cls.THOUGHT_DIM,
            workspace_dim=cls.WORKSPACE_DIM,
            start_mem_slots=cls.START_MEM_SLOTS,
            max_mem_slots=cls.MAX_MEM_SLOTS,
            expansion_threshold=cls.EXPANSION_THRESHOLD,
        )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "brainpmm Configuration:",
            f"  Memory Slots: {cls.START_MEM_SLOTS} -> {cls.MAX_MEM_SLOTS}",
            f"  Expansion Threshold: {cls.EXPANSION_THRESHOLD:.2f}",
            f"  Thought/Workspace Dims: {cls.THOUGHT_DIM}/{cls.WORKSPACE_DIM}",
            f"  Emotion Learning Rate: {cls.EMOTION_LEARNING_RATE}",
            f"  Tick Periods: {cls.INFERENCE_TICK_SECONDS}s inference, "
            f"{cls.TRAINING_TICK_SECONDS}s training",
        ]
        return "\n".join(lines)


def validate_config(config: BrainConfig) -> None:
    """Reject a BrainConfig that cannot drive a run.

    Checks run in a fixed order and the first failure wins, so the user
    always sees one actionable message.

    Raises:
        ConfigValidationError: If the start slot count exceeds the ceiling,
            the threshold is outside [0.1, 0.99], or the start slot count is
            not positive.
    """
    if config.start_mem_slots > config.max_mem_slots:
        raise ConfigValidationError(
            "Start Memory cannot be greater than Max Memory.", config=config
        )
    if config.expansion_threshold < 0.1 or config.expansion_threshold > 0.99:
        raise ConfigValidationError(
            "Threshold must be between 0.1 and 0.99.", config=config
        )
    if config.start_mem_slots < 1:
        raise ConfigValidationError("Memory slots must be positive.", config=config)
