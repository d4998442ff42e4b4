"""Injectable random sources.

Every stochastic draw in the engine goes through a ``RandomSource`` so a run
can be made reproducible. ``random.Random`` already satisfies the protocol;
``ScriptedRandom`` replays a fixed sequence for tests.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything that yields uniform floats in ``[0, 1)``."""

    def random(self) -> float:  # pragma: no cover - protocol
        ...


class ScriptedRandom:
    """Replays ``values`` in order, cycling when exhausted."""

    def __init__(self, values: Iterable[float]) -> None:
        self.values = list(values)
        if not self.values:
            raise ValueError("ScriptedRandom needs at least one value")
        for value in self.values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Scripted value {value!r} outside [0, 1)")
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


def pick_index(rng: RandomSource, size: int) -> int:
    """Uniform index in ``range(size)``."""
    if size <= 0:
        raise ValueError("size must be >= 1")
    return min(int(rng.random() * size), size - 1)


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    """Uniform choice from a non-empty sequence."""
    return items[pick_index(rng, len(items))]


def symmetric_noise(rng: RandomSource, amplitude: float) -> float:
    """Uniform noise in ``[-amplitude, amplitude)``."""
    return (rng.random() - 0.5) * 2.0 * amplitude
