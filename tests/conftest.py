import numpy as np
import pytest
from hypothesis import settings

from vision.landmarks import CHIN, FOREHEAD, LEFT_EYE_OUTER, NOSE_TIP, RIGHT_EYE_OUTER

# CI profile: more examples for thorough testing
settings.register_profile("ci", max_examples=200)
settings.register_profile("dev", max_examples=100)
settings.load_profile("dev")

_EYE_L_X, _EYE_R_X = 0.4, 0.6
_FOREHEAD_Y, _CHIN_Y = 0.2, 0.8


def build_face(rx: float = 0.5, ry: float = 0.5, rz: float = 0.0, n_points: int = 468) -> np.ndarray:
    """Landmark array whose nose/eye geometry produces the given ratios."""
    lms = np.full((n_points, 3), 0.5, dtype=np.float64)
    span = _EYE_R_X - _EYE_L_X
    height = _CHIN_Y - _FOREHEAD_Y
    lms[LEFT_EYE_OUTER] = (_EYE_L_X, 0.4, rz * span)
    lms[RIGHT_EYE_OUTER] = (_EYE_R_X, 0.4, 0.0)
    lms[FOREHEAD] = (0.5, _FOREHEAD_Y, 0.0)
    lms[CHIN] = (0.5, _CHIN_Y, 0.0)
    lms[NOSE_TIP] = (_EYE_L_X + rx * span, _FOREHEAD_Y + ry * height, 0.0)
    return lms


@pytest.fixture
def make_face():
    return build_face
