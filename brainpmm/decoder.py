"""Slot content decoder.

Maps a slot index to display-only "decoded" content. Everything except
``confidence`` is derived from a sine-hash seeded on the index, so inspecting
the same slot twice always reads the same concepts until it is flushed and
rewritten.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, Optional, Tuple

from .schemas import DecodedMemory, MemoryType

VECTOR_WIDTH = 8
SEED_STRIDE = 1337
MAX_SIMULATED_AGE = 1000

MEMORY_TYPES: Tuple[MemoryType, ...] = tuple(MemoryType)

CONCEPTS: Dict[MemoryType, Tuple[str, ...]] = {
    MemoryType.SENSORY: (
        "Loud Noise",
        "Flash of Light",
        "Smell of Smoke",
        "Vibration",
        "Temperature Drop",
    ),
    MemoryType.SPATIAL: (
        "Blocked Path",
        "Open Area",
        "High Elevation",
        "Corner",
        "Narrow Corridor",
    ),
    MemoryType.ENTITY: (
        "Goblin Scavenger",
        "Player Character",
        "Unknown NPC",
        "Loot Chest",
        "Trap Mechanism",
    ),
    MemoryType.INTENT: (
        "Attack Target",
        "Flee to Cover",
        "Patrol Route",
        "Interact with Object",
        "Idle/Wait",
    ),
}


def pseudo_random(seed: float) -> float:
    """Deterministic value in [0, 1) for ``seed``."""
    x = math.sin(seed) * 10000.0
    return x - math.floor(x)


def _scaled(seed: float, size: int) -> int:
    return min(int(pseudo_random(seed) * size), size - 1)


def decode_slot(
    index: int, usage: float, observed_at: Optional[datetime] = None
) -> DecodedMemory:
    """Decode the slot at ``index``.

    Args:
        index: Slot index; the only input to the content hash
        usage: Live slot usage, reported as confidence (clamped to [0, 1])
        observed_at: When the host inspected the slot

    Returns:
        DecodedMemory with type, two concepts (possibly identical), an
        8-wide synthetic vector, confidence and a simulated age.
    """
    seed = index * SEED_STRIDE
    memory_type = MEMORY_TYPES[_scaled(seed, len(MEMORY_TYPES))]

    vocabulary = CONCEPTS[memory_type]
    primary = vocabulary[_scaled(seed + 1, len(vocabulary))]
    secondary = vocabulary[_scaled(seed + 2, len(vocabulary))]

    vector = tuple(pseudo_random(seed + i + 10) for i in range(VECTOR_WIDTH))

    return DecodedMemory(
        type=memory_type,
        concepts=(primary, secondary),
        vector=vector,
        confidence=max(0.0, min(1.0, usage)),
        age=int(pseudo_random(seed + 50) * MAX_SIMULATED_AGE),
        observed_at=observed_at,
    )
