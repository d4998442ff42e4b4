"""Tests for deterministic slot decoding."""

from datetime import datetime, timezone

from brainpmm.decoder import CONCEPTS, VECTOR_WIDTH, decode_slot, pseudo_random


def test_decode_depends_only_on_index_for_content():
    first = decode_slot(42, 0.1)
    second = decode_slot(42, 0.95)

    assert first.type == second.type
    assert first.concepts == second.concepts
    assert first.vector == second.vector
    assert first.age == second.age
    assert first.confidence == 0.1
    assert second.confidence == 0.95


def test_decode_concepts_come_from_type_vocabulary():
    for index in range(64):
        decoded = decode_slot(index, 0.5)
        vocabulary = CONCEPTS[decoded.type]
        assert decoded.concepts[0] in vocabulary
        assert decoded.concepts[1] in vocabulary
        assert len(decoded.vector) == VECTOR_WIDTH
        assert all(0.0 <= v < 1.0 for v in decoded.vector)


def test_decode_clamps_confidence_and_records_observation_time():
    observed = datetime(2160, 3, 21, 10, 0, 0, tzinfo=timezone.utc)

    decoded = decode_slot(3, 1.7, observed_at=observed)

    assert decoded.confidence == 1.0
    assert decoded.observed_at == observed


def test_pseudo_random_is_stable_unit_interval():
    values = [pseudo_random(seed) for seed in range(0, 5000, 37)]
    assert values == [pseudo_random(seed) for seed in range(0, 5000, 37)]
    assert all(0.0 <= v < 1.0 for v in values)
