"""Synthetic distillation telemetry.

In training mode a mock teacher emits random "ground truth" every tick and
the engine scores the module's outputs against it. The numbers only feed the
dashboard's loss panel; nothing here changes how actions, values or emotions
are produced.
"""

from __future__ import annotations

import math
import random
from typing import Optional, Sequence

from .randomness import RandomSource, pick
from .schemas import AGENT_ACTIONS, ActionLabel, EmotionVector, TeacherTargets, TrainingMetrics

MATCH_LOSS = 0.1
MATCH_JITTER = 0.1
MISMATCH_LOSS = 1.5
MISMATCH_JITTER = 1.0

VALUE_WEIGHT = 0.5
EMOTION_WEIGHT = 0.3
WORKSPACE_WEIGHT = 0.3


def mean_squared_error(predicted: Sequence[float], target: Sequence[float]) -> float:
    """MSE over paired entries; 0.0 for empty input.

    Raises:
        ValueError: If the sequences differ in length.
    """
    if len(predicted) != len(target):
        raise ValueError(
            f"Cannot compare vectors of width {len(predicted)} and {len(target)}"
        )
    if not predicted:
        return 0.0
    return sum((p - t) ** 2 for p, t in zip(predicted, target)) / len(predicted)


class MockMindTeacher:
    """Produces random targets shaped like the module's outputs."""

    def __init__(self, workspace_dim: int = 64, rng: Optional[RandomSource] = None) -> None:
        self.workspace_dim = workspace_dim
        self.rng = rng or random.Random()

    def _squashed(self) -> float:
        return math.tanh((self.rng.random() - 0.5) * 2.0)

    def predict(self, workspace_dim: Optional[int] = None) -> TeacherTargets:
        """Draw one set of targets.

        ``workspace_dim`` overrides the constructor width so the target
        always matches the snapshot being scored.
        """
        width = self.workspace_dim if workspace_dim is None else workspace_dim
        action = pick(self.rng, AGENT_ACTIONS)
        value = self.rng.random() * 2.0 - 1.0
        emotion = EmotionVector(
            valence=self._squashed(),
            arousal=self._squashed(),
            dominance=self._squashed(),
        )
        workspace = tuple(self._squashed() for _ in range(width))
        return TeacherTargets(action=action, value=value, emotion=emotion, workspace=workspace)


class LossEstimator:
    """Scores one tick's outputs against teacher targets."""

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self.rng = rng or random.Random()

    def action_loss(self, predicted: ActionLabel, target: ActionLabel) -> float:
        if predicted == target:
            return MATCH_LOSS + self.rng.random() * MATCH_JITTER
        return MISMATCH_LOSS + self.rng.random() * MISMATCH_JITTER

    def evaluate(
        self,
        *,
        step: int,
        action: ActionLabel,
        value: float,
        emotion: EmotionVector,
        workspace: Sequence[float],
        targets: TeacherTargets,
    ) -> TrainingMetrics:
        loss_act = self.action_loss(action, targets.action)
        loss_val = (value - targets.value) ** 2
        loss_emo = mean_squared_error(emotion.as_tuple(), targets.emotion.as_tuple())
        loss_ws = mean_squared_error(workspace, targets.workspace)
        total = (
            loss_act
            + VALUE_WEIGHT * loss_val
            + EMOTION_WEIGHT * loss_emo
            + WORKSPACE_WEIGHT * loss_ws
        )
        return TrainingMetrics(
            step=step,
            total_loss=total,
            loss_act=loss_act,
            loss_val=loss_val,
            loss_emo=loss_emo,
            loss_ws=loss_ws,
        )
