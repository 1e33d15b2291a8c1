"""Loudness level from an analyser's byte frequency bins."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def audio_level(frequency_bins: Sequence[float] | np.ndarray) -> float:
    """Mean bin magnitude (0-255 scale for byte bins); 0 for an empty frame."""
    bins = np.asarray(frequency_bins, dtype=np.float64)
    if bins.size == 0:
        return 0.0
    return float(bins.mean())
