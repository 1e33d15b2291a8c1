"""Tests for the rolling focus ratio and stability buffer."""

import pytest

from domain.focus_aggregator import FocusAggregator


def test_empty_ratio_is_zero():
    agg = FocusAggregator()
    assert agg.current_ratio() == 0.0
    assert agg.sample_if_due() is None


def test_ratio_tracks_compliant_frames():
    agg = FocusAggregator(sample_every=30)
    for i in range(10):
        agg.on_frame(i % 4 != 0)  # frames 0, 4, 8 distracted
        assert agg.frames_focused <= agg.frames_active
    assert agg.frames_active == 10
    assert agg.frames_focused == 7
    assert agg.current_ratio() == pytest.approx(70.0)


def test_sample_only_on_cadence():
    agg = FocusAggregator(sample_every=5, capacity=4)
    samples = []
    for _ in range(12):
        agg.on_frame(True)
        s = agg.sample_if_due()
        if s is not None:
            samples.append(s)
    assert samples == [100.0, 100.0]
    # Asking twice at the same frame count does not push twice
    agg.on_frame(False)
    agg.on_frame(False)
    agg.on_frame(False)
    assert agg.sample_if_due() is not None
    assert agg.sample_if_due() is None


def test_history_length_is_constant():
    agg = FocusAggregator(sample_every=1, capacity=20)
    assert len(agg.history) == 20
    for i in range(50):
        agg.on_frame(i % 2 == 0)
        agg.sample_if_due()
        assert len(agg.history) == 20


def test_oldest_sample_evicted():
    agg = FocusAggregator(sample_every=1, capacity=3)
    pushed = []
    for compliant in (True, False, False, True):
        agg.on_frame(compliant)
        pushed.append(agg.sample_if_due())
    # capacity + 1 pushes: the first (100.0) is gone, the newest is last
    assert agg.history == pytest.approx(pushed[1:])
    assert 100.0 not in agg.history
    assert agg.history[-1] == pytest.approx(50.0)


def test_consistency_equals_ratio_at_sample_time():
    agg = FocusAggregator(sample_every=4)
    for compliant in (True, True, True, False):
        agg.on_frame(compliant)
    agg.sample_if_due()
    assert agg.consistency == pytest.approx(75.0)
    agg.on_frame(False)
    # Not yet re-sampled
    assert agg.consistency == pytest.approx(75.0)
    assert agg.current_ratio() == pytest.approx(60.0)


def test_invalid_sizes_rejected():
    with pytest.raises(ValueError):
        FocusAggregator(sample_every=0)
    with pytest.raises(ValueError):
        FocusAggregator(capacity=0)
