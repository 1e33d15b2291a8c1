"""Bounded risk accumulator driven by accepted violations."""

from __future__ import annotations

from typing import Optional


class RiskMeter:
    """Saturating counter in ``[0, maximum]``.  It never decays; only
    ``reset()`` (a new session) brings it back to zero."""

    def __init__(self, step: int = 15, maximum: int = 100) -> None:
        self.step = step
        self.maximum = maximum
        self._value = 0

    def bump(self, amount: Optional[int] = None) -> int:
        inc = self.step if amount is None else amount
        self._value = max(0, min(self.maximum, self._value + inc))
        return self._value

    def reset(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value
