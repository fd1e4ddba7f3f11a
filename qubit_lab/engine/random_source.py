"""Random sources used for measurement sampling.

Anything with a ``random() -> float`` method returning values in [0, 1)
can drive a measurement; ``numpy.random.Generator`` is the default.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    def random(self) -> float:
        ...


def default_rng(seed: int | None = None) -> np.random.Generator:
    return np.random.default_rng(seed)


def resolve_rng(*candidates: RandomSource | None) -> RandomSource:
    """First non-None candidate, else a fresh unseeded generator."""
    for rng in candidates:
        if rng is not None:
            return rng
    return np.random.default_rng()


class ScriptedRandom:
    """Replays a fixed sequence of uniform draws, for deterministic runs.

    Raises IndexError once the script is exhausted unless ``cycle`` is set.
    """

    def __init__(self, values: Iterable[float], cycle: bool = False):
        self._values = [float(v) for v in values]
        for v in self._values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Scripted draws must lie in [0, 1), got {v}")
        self._cycle = cycle
        self._pos = 0

    @property
    def consumed(self) -> int:
        return self._pos

    def random(self) -> float:
        if self._pos >= len(self._values):
            if not self._cycle or not self._values:
                raise IndexError("ScriptedRandom exhausted")
            self._pos = 0
        value = self._values[self._pos]
        self._pos += 1
        return value
