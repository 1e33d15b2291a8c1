"""Head-pose heuristic: landmark geometry → discrete distraction verdict."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from domain.models import DistractionVerdict
from vision.landmarks import (
    CHIN,
    FOREHEAD,
    LEFT_EYE_OUTER,
    NOSE_TIP,
    RIGHT_EYE_OUTER,
    as_landmark_array,
    has_required_points,
)


@dataclass(frozen=True)
class GazeThresholds:
    horizontal_min: float = 0.35
    horizontal_max: float = 0.65
    depth_max: float = 0.35
    vertical_min: float = 0.35
    vertical_max: float = 0.65


DEFAULT_THRESHOLDS = GazeThresholds()


def gaze_ratios(landmarks: np.ndarray) -> tuple[float, float, float]:
    """Return ``(rx, ry, rz)``; a zero denominator yields ``inf``.

    rx: nose position between the outer eye corners (0.5 = centred)
    ry: nose position between forehead and chin
    rz: depth difference of the eye corners relative to eye span
    """
    left = landmarks[LEFT_EYE_OUTER]
    right = landmarks[RIGHT_EYE_OUTER]
    nose = landmarks[NOSE_TIP]
    forehead = landmarks[FOREHEAD]
    chin = landmarks[CHIN]

    eye_span = float(right[0] - left[0])
    face_height = float(chin[1] - forehead[1])

    if eye_span == 0.0:
        rx = rz = float("inf")
    else:
        rx = float(nose[0] - left[0]) / eye_span
        rz = abs(float(left[2] - right[2])) / eye_span
    ry = float("inf") if face_height == 0.0 else float(nose[1] - forehead[1]) / face_height
    return rx, ry, rz


def classify(landmarks, thresholds: GazeThresholds = DEFAULT_THRESHOLDS) -> DistractionVerdict:
    """Classify one face.

    Horizontal or depth deviation wins over vertical deviation.  Degenerate
    geometry never raises: a collapsed eye span (or a face too short to hold
    the eye corners) reads as SIDE_GAZE, a collapsed face height as DESK_GAZE.
    """
    lms = as_landmark_array(landmarks)
    if not has_required_points(lms):
        return DistractionVerdict.SIDE_GAZE

    rx, ry, rz = gaze_ratios(lms)
    t = thresholds

    # NaN compares False everywhere, so test "inside" and negate
    horizontal_ok = t.horizontal_min <= rx <= t.horizontal_max
    depth_ok = rz <= t.depth_max
    if not (horizontal_ok and depth_ok):
        return DistractionVerdict.SIDE_GAZE

    if not ry <= t.vertical_max:
        return DistractionVerdict.DESK_GAZE
    if ry < t.vertical_min:
        return DistractionVerdict.HIGH_GAZE
    return DistractionVerdict.NONE
