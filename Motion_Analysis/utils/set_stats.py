"""Whole-set form score accumulator."""


class SetScoreStats:
    """Running mean of every score added since the last reset. Unbounded window."""

    def __init__(self):
        self._total, self._count = 0.0, 0

    def add(self, value: float):
        self._total += value
        self._count += 1

    @property
    def mean(self) -> float:
        return self._total / self._count if self._count > 0 else 0.0

    @property
    def count(self) -> int:
        return self._count

    def reset(self):
        self._total, self._count = 0.0, 0
