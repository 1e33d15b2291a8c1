"""Tests for the landmark-ratio gaze classifier."""

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from domain.gaze_classifier import GazeThresholds, classify, gaze_ratios
from domain.models import DistractionVerdict, LandmarkPoint
from vision.landmarks import LEFT_EYE_OUTER, RIGHT_EYE_OUTER, FOREHEAD, CHIN

from conftest import build_face

_outside_band = st.one_of(
    st.floats(min_value=-2.0, max_value=0.34),
    st.floats(min_value=0.66, max_value=3.0),
)
_any_ry = st.floats(min_value=-2.0, max_value=3.0)
_inside_band = st.floats(min_value=0.40, max_value=0.60)


def test_centred_face_is_compliant(make_face):
    assert classify(make_face()) == DistractionVerdict.NONE


def test_ratios_match_geometry(make_face):
    rx, ry, rz = gaze_ratios(make_face(rx=0.25, ry=0.7, rz=0.1))
    assert rx == pytest.approx(0.25)
    assert ry == pytest.approx(0.7)
    assert rz == pytest.approx(0.1)


@given(rx=_outside_band, ry=_any_ry)
def test_horizontal_deviation_always_side_gaze(rx, ry):
    assert classify(build_face(rx=rx, ry=ry)) == DistractionVerdict.SIDE_GAZE


@given(rz=st.floats(min_value=0.40, max_value=2.0), ry=_any_ry)
def test_depth_deviation_always_side_gaze(rz, ry):
    assert classify(build_face(rx=0.5, ry=ry, rz=rz)) == DistractionVerdict.SIDE_GAZE


@given(rx=_inside_band, rz=st.floats(min_value=0.0, max_value=0.30), ry=st.floats(min_value=0.66, max_value=3.0))
def test_low_nose_is_desk_gaze(rx, rz, ry):
    assert classify(build_face(rx=rx, ry=ry, rz=rz)) == DistractionVerdict.DESK_GAZE


@given(rx=_inside_band, rz=st.floats(min_value=0.0, max_value=0.30), ry=st.floats(min_value=-2.0, max_value=0.34))
def test_high_nose_is_high_gaze(rx, rz, ry):
    assert classify(build_face(rx=rx, ry=ry, rz=rz)) == DistractionVerdict.HIGH_GAZE


@given(
    x=st.floats(min_value=0.0, max_value=1.0),
    ry=_any_ry,
    nose_x=st.floats(min_value=0.0, max_value=1.0),
)
def test_zero_eye_span_never_compliant(x, ry, nose_x):
    lms = build_face(ry=ry)
    lms[LEFT_EYE_OUTER, 0] = x
    lms[RIGHT_EYE_OUTER, 0] = x
    lms[1, 0] = nose_x
    assert classify(lms) == DistractionVerdict.SIDE_GAZE


def test_zero_face_height_reads_as_desk_gaze(make_face):
    lms = make_face()
    lms[CHIN, 1] = lms[FOREHEAD, 1]
    assert classify(lms) == DistractionVerdict.DESK_GAZE


def test_side_gaze_wins_over_vertical(make_face):
    assert classify(make_face(rx=0.9, ry=0.9)) == DistractionVerdict.SIDE_GAZE
    assert classify(make_face(rx=0.1, ry=0.1)) == DistractionVerdict.SIDE_GAZE


def test_truncated_landmark_set_fails_safe():
    assert classify(np.zeros((10, 3))) == DistractionVerdict.SIDE_GAZE
    assert classify([]) == DistractionVerdict.SIDE_GAZE


def test_custom_thresholds(make_face):
    wide = GazeThresholds(horizontal_min=0.1, horizontal_max=0.9)
    face = make_face(rx=0.8)
    assert classify(face) == DistractionVerdict.SIDE_GAZE
    assert classify(face, wide) == DistractionVerdict.NONE


def test_accepts_point_objects(make_face):
    points = [LandmarkPoint(*row) for row in make_face(ry=0.8)]
    assert classify(points) == DistractionVerdict.DESK_GAZE
