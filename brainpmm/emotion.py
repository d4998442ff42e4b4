"""Emotion dynamics for the memory module.

The module's affect is a Valence-Arousal-Dominance triple that drifts toward
a target set by memory pressure:

- high pressure pulls valence down and arousal up
- an expansion tick snaps the dominance target to 1.0
- dominance moves at half the learning rate of the other two axes

Each tick applies exponential smoothing plus a little symmetric noise and
clamps every axis back into [-1, 1]. A categorical mood label is derived from
the triple for display.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .randomness import RandomSource, symmetric_noise
from .schemas import EmotionComponent, EmotionVector

DEFAULT_LEARNING_RATE = 0.1
MIN_LEARNING_RATE = 0.01
MAX_LEARNING_RATE = 1.0
NOISE_AMPLITUDE = 0.025


class MoodLabel(str, Enum):
    """Display label for a region of VAD space."""

    PANIC = "PANIC / STRESS"
    EUPHORIC = "EUPHORIC"
    CONTENT = "CONTENT"
    DEPRESSED = "DEPRESSED"
    CONFIDENT = "CONFIDENT"
    LETHARGIC = "LETHARGIC"
    NEUTRAL = "NEUTRAL / OBSERVING"


# Evaluated top to bottom; first match wins.
MOOD_RULES: List[Tuple[Callable[[EmotionVector], bool], MoodLabel]] = [
    (lambda e: e.arousal > 0.6 and e.valence < -0.2, MoodLabel.PANIC),
    (lambda e: e.arousal > 0.5 and e.valence > 0.5, MoodLabel.EUPHORIC),
    (lambda e: e.valence > 0.6 and e.arousal < 0.0, MoodLabel.CONTENT),
    (lambda e: e.valence < -0.6, MoodLabel.DEPRESSED),
    (lambda e: e.dominance > 0.7, MoodLabel.CONFIDENT),
    (lambda e: e.arousal < -0.6, MoodLabel.LETHARGIC),
]


def clamp_unit(value: float) -> float:
    """Clamp to [-1, 1]."""
    return max(-1.0, min(1.0, value))


def mood_label(emotion: EmotionVector) -> MoodLabel:
    """Return the first matching mood, or NEUTRAL."""
    for predicate, label in MOOD_RULES:
        if predicate(emotion):
            return label
    return MoodLabel.NEUTRAL


def override_component(
    emotion: EmotionVector, component: EmotionComponent | str, value: float
) -> EmotionVector:
    """Set one axis directly, bypassing smoothing.

    Raises:
        ValueError: If ``component`` is not a VAD axis name.
    """
    axis = EmotionComponent(component)
    return emotion.model_copy(update={axis.value: clamp_unit(float(value))})


class EmotionEngine:
    """Smooths the VAD triple toward pressure-driven targets."""

    def __init__(
        self,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.learning_rate = DEFAULT_LEARNING_RATE
        self.set_learning_rate(learning_rate)

    def set_learning_rate(self, rate: float) -> None:
        """Clamp ``rate`` into [0.01, 1.0] and use it for future ticks."""
        self.learning_rate = max(MIN_LEARNING_RATE, min(MAX_LEARNING_RATE, rate))

    @staticmethod
    def targets(pressure: float, is_expanding: bool) -> Tuple[float, float, float]:
        """Raw (valence, arousal, dominance) targets before smoothing."""
        target_valence = 1.0 - pressure * 2.0
        target_arousal = pressure * 2.0 - 1.0
        target_dominance = 1.0 if is_expanding else 0.5 - pressure
        return target_valence, target_arousal, target_dominance

    def predict(
        self, previous: EmotionVector, pressure: float, is_expanding: bool
    ) -> EmotionVector:
        """Advance ``previous`` one tick toward the pressure targets."""
        target_valence, target_arousal, target_dominance = self.targets(
            pressure, is_expanding
        )
        dominance_rate = self.learning_rate * 0.5

        return EmotionVector(
            valence=self._step(previous.valence, target_valence, self.learning_rate),
            arousal=self._step(previous.arousal, target_arousal, self.learning_rate),
            dominance=self._step(previous.dominance, target_dominance, dominance_rate),
        )

    def _step(self, current: float, target: float, rate: float) -> float:
        smoothed = current + (target - current) * rate
        return clamp_unit(smoothed + symmetric_noise(self.rng, NOISE_AMPLITUDE))
