"""Convert landmark-provider output into the ``(N, 3)`` arrays the engine reads.

The provider (MediaPipe FaceMesh / FaceLandmarker) hands out one list of
``NormalizedLandmark`` objects per detected face.  Recorded streams store the
same data as ``[x, y, z]`` triples or ``{"x":, "y":, "z":}`` dicts.  All of
these are accepted here so the classifier only ever sees float arrays.
"""

from __future__ import annotations

from typing import Any, Iterable

import numpy as np

# MediaPipe face-mesh indices used by the gaze classifier
LEFT_EYE_OUTER = 33
RIGHT_EYE_OUTER = 263
NOSE_TIP = 1
FOREHEAD = 10
CHIN = 152

_MIN_POINTS = max(LEFT_EYE_OUTER, RIGHT_EYE_OUTER, NOSE_TIP, FOREHEAD, CHIN) + 1


def _point_xyz(p: Any) -> tuple[float, float, float]:
    if isinstance(p, dict):
        return float(p["x"]), float(p["y"]), float(p.get("z", 0.0))
    if hasattr(p, "x") and hasattr(p, "y"):
        return float(p.x), float(p.y), float(getattr(p, "z", 0.0) or 0.0)
    xs = list(p)
    z = float(xs[2]) if len(xs) > 2 else 0.0
    return float(xs[0]), float(xs[1]), z


def as_landmark_array(points: Any) -> np.ndarray:
    """Return a float64 array of shape ``(N, 3)`` for one face."""
    if isinstance(points, np.ndarray):
        arr = np.asarray(points, dtype=np.float64)
        if arr.ndim == 2 and arr.shape[1] == 2:
            arr = np.hstack([arr, np.zeros((arr.shape[0], 1))])
        return arr
    return np.array([_point_xyz(p) for p in points], dtype=np.float64).reshape(-1, 3)


def as_face_list(faces: Iterable[Any] | None) -> list[np.ndarray]:
    """Convert a per-frame sequence of faces; ``None`` means no face."""
    if faces is None:
        return []
    return [as_landmark_array(f) for f in faces]


def has_required_points(landmarks: np.ndarray) -> bool:
    return landmarks.ndim == 2 and landmarks.shape[0] >= _MIN_POINTS
