"""Unit tests for the snapshot building blocks."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from brainpmm.schemas import (
    AGENT_ACTIONS,
    ActionLabel,
    ChatMessage,
    EmotionVector,
    Sender,
    SimulationState,
)


def test_emotion_vector_rejects_out_of_range():
    with pytest.raises(ValidationError):
        EmotionVector(valence=1.5)


def test_snapshot_is_frozen():
    state = SimulationState(memory_capacity=2, memory_slots=(0.0, 0.0))

    with pytest.raises(ValidationError):
        state.tick = 5


def test_model_copy_leaves_original_untouched():
    state = SimulationState(memory_capacity=2, memory_slots=(0.0, 0.5))

    updated = state.model_copy(update={"memory_slots": (1.0, 0.5), "tick": 1})

    assert state.memory_slots == (0.0, 0.5)
    assert state.tick == 0
    assert updated.memory_slots == (1.0, 0.5)


def test_agent_actions_exclude_boot_sequence():
    assert ActionLabel.BOOT_SEQUENCE not in AGENT_ACTIONS
    assert len(AGENT_ACTIONS) == 12


def test_chat_message_serializes_enum_values():
    message = ChatMessage(
        id="u-1",
        sender=Sender.USER,
        text="hello",
        timestamp=datetime(2160, 1, 1, tzinfo=timezone.utc),
    )

    dumped = message.model_dump(mode="json")

    assert dumped["sender"] == "USER"
    assert dumped["variant"] == "default"
