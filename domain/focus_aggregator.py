"""Rolling focus ratio with a fixed-length stability trend."""

from __future__ import annotations

from collections import deque
from typing import Optional


class FocusAggregator:
    """Counts observed vs. compliant frames.

    Every *sample_every* frames the current ratio is pushed into a FIFO of
    *capacity* slots.  The FIFO starts filled with zeros so its length never
    changes; pushing evicts the oldest value.  The consistency score is the
    ratio at the moment of the last sample.
    """

    def __init__(self, sample_every: int = 30, capacity: int = 20) -> None:
        if sample_every < 1 or capacity < 1:
            raise ValueError("sample_every and capacity must be >= 1")
        self.sample_every = sample_every
        self.capacity = capacity

        self.frames_active = 0
        self.frames_focused = 0
        self._history: deque[float] = deque([0.0] * capacity, maxlen=capacity)
        self._consistency = 0.0
        self._last_sampled_at = 0  # frames_active value of the last sample

    def on_frame(self, is_compliant: bool) -> None:
        self.frames_active += 1
        if is_compliant:
            self.frames_focused += 1

    def current_ratio(self) -> float:
        if self.frames_active == 0:
            return 0.0
        return 100.0 * self.frames_focused / self.frames_active

    def sample_if_due(self) -> Optional[float]:
        """Push and return a sample when the frame count hits the cadence."""
        if self.frames_active == 0 or self.frames_active % self.sample_every != 0:
            return None
        if self._last_sampled_at == self.frames_active:
            return None
        sample = self.current_ratio()
        self._history.append(sample)
        self._consistency = sample
        self._last_sampled_at = self.frames_active
        return sample

    @property
    def history(self) -> list[float]:
        return list(self._history)

    @property
    def consistency(self) -> float:
        return self._consistency
