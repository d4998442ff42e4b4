"""Tests for the bounded FIFO used by pressure history and logs."""

import pytest

from brainpmm.buffers import RingBuffer, push_bounded


def test_ring_buffer_evicts_oldest_first():
    buffer = RingBuffer(capacity=3)
    assert buffer.push("a") is None
    assert buffer.push("b") is None
    assert buffer.push("c") is None

    evicted = buffer.push("d")

    assert evicted == "a"
    assert buffer.to_tuple() == ("b", "c", "d")
    assert len(buffer) == 3


def test_ring_buffer_seeded_past_capacity_keeps_newest():
    buffer = RingBuffer(range(25), capacity=20)
    assert buffer.to_tuple() == tuple(range(5, 25))


def test_push_bounded_does_not_touch_source():
    original = tuple(f"line {i}" for i in range(20))

    updated = push_bounded(original, "line 20", "line 21")

    assert len(updated) == 20
    assert updated[0] == "line 2"
    assert updated[-2:] == ("line 20", "line 21")
    assert original[0] == "line 0"


def test_ring_buffer_rejects_zero_capacity():
    with pytest.raises(ValueError):
        RingBuffer(capacity=0)
