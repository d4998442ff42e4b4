"""Tests for the VAD emotion dynamics."""

import random

import pytest

from brainpmm.emotion import (
    EmotionEngine,
    MoodLabel,
    mood_label,
    override_component,
)
from brainpmm.randomness import ScriptedRandom
from brainpmm.schemas import EmotionComponent, EmotionVector


@pytest.mark.parametrize("pressure", [0.0, 0.25, 0.5, 0.75, 1.0])
def test_targets_follow_pressure(pressure):
    valence, arousal, dominance = EmotionEngine.targets(pressure, is_expanding=False)

    assert valence == 1.0 - 2.0 * pressure
    assert arousal == 2.0 * pressure - 1.0
    assert dominance == 0.5 - pressure


def test_expansion_pins_dominance_target():
    _, _, dominance = EmotionEngine.targets(0.9, is_expanding=True)
    assert dominance == 1.0


def test_predict_smooths_toward_target_without_noise():
    # 0.5 maps to zero noise
    engine = EmotionEngine(learning_rate=0.2, rng=ScriptedRandom([0.5]))

    result = engine.predict(EmotionVector(), pressure=1.0, is_expanding=False)

    assert result.valence == pytest.approx(-0.2)
    assert result.arousal == pytest.approx(0.2)
    # Dominance uses half the learning rate: 0 + (-0.5 - 0) * 0.1
    assert result.dominance == pytest.approx(-0.05)


def test_predict_stays_clamped_under_repeated_extremes():
    engine = EmotionEngine(learning_rate=1.0, rng=random.Random(3))
    emotion = EmotionVector(valence=-1.0, arousal=1.0, dominance=1.0)

    for _ in range(200):
        emotion = engine.predict(emotion, pressure=1.0, is_expanding=True)
        for value in emotion.as_tuple():
            assert -1.0 <= value <= 1.0


def test_learning_rate_is_clamped():
    engine = EmotionEngine(learning_rate=5.0)
    assert engine.learning_rate == 1.0

    engine.set_learning_rate(0.0)
    assert engine.learning_rate == 0.01


def test_override_clamps_and_bypasses_smoothing():
    emotion = EmotionVector(valence=0.1, arousal=0.2, dominance=0.3)

    updated = override_component(emotion, EmotionComponent.AROUSAL, 4.2)
    assert updated.arousal == 1.0
    assert updated.valence == 0.1
    assert updated.dominance == 0.3

    updated = override_component(updated, "valence", -3)
    assert updated.valence == -1.0


def test_override_rejects_unknown_component():
    with pytest.raises(ValueError):
        override_component(EmotionVector(), "curiosity", 0.5)


@pytest.mark.parametrize(
    "emotion, expected",
    [
        (EmotionVector(valence=-0.5, arousal=0.9), MoodLabel.PANIC),
        (EmotionVector(valence=0.8, arousal=0.7), MoodLabel.EUPHORIC),
        (EmotionVector(valence=0.8, arousal=-0.3), MoodLabel.CONTENT),
        (EmotionVector(valence=-0.8, arousal=0.0), MoodLabel.DEPRESSED),
        (EmotionVector(dominance=0.9), MoodLabel.CONFIDENT),
        (EmotionVector(arousal=-0.9), MoodLabel.LETHARGIC),
        (EmotionVector(), MoodLabel.NEUTRAL),
    ],
)
def test_mood_label_regions(emotion, expected):
    assert mood_label(emotion) is expected


def test_mood_label_first_match_wins():
    # Matches both PANIC and DEPRESSED; PANIC is listed first.
    emotion = EmotionVector(valence=-0.9, arousal=0.9)
    assert mood_label(emotion) is MoodLabel.PANIC
