"""Tests for the queue-serialised session controller."""

import json
import threading

import pytest

from app.config import Config
from app.controller import Controller


@pytest.fixture
def controller(tmp_path):
    # Long tick interval: the ticker never fires during a test
    cfg = Config(runs_dir=str(tmp_path / "runs"), tick_interval_s=3600.0)
    ctl = Controller(cfg)
    yield ctl
    if ctl.is_active:
        ctl.stop_session()


def test_inputs_require_session(controller):
    with pytest.raises(RuntimeError):
        controller.submit_frame([])
    with pytest.raises(RuntimeError):
        controller.stop_session()


def test_double_start_rejected(controller):
    controller.start_session(now=0.0)
    with pytest.raises(RuntimeError):
        controller.start_session(now=1.0)


def test_session_round_trip(controller, make_face):
    alerts = []
    controller.on_alert = alerts.append
    session_dir = controller.start_session(now=0.0)

    controller.submit_frame([make_face()], now=0.5)
    controller.submit_frame([make_face(rx=0.9)], now=1.0)
    controller.submit_frame([make_face(rx=0.9)], now=2.0)
    controller.submit_audio(frequency_bins=[120] * 64, now=6.0)
    controller.submit_visibility("window-blurred", now=11.0)
    record = controller.stop_session(now=12.0)

    assert controller.is_active is False
    assert record["violations"] == 3
    assert record["risk_index"] == 45
    assert record["tab_violations"] == 1
    assert record["duration"] == 12.0
    assert len(alerts) == 3
    assert controller.poll_result() is not None

    saved = json.loads((session_dir / "session_record.json").read_text())
    assert saved["violations"] == 3
    lines = (session_dir / "violations.csv").read_text().strip().splitlines()
    assert len(lines) == 4  # header + 3


def test_concurrent_submitters_are_serialised(controller, make_face):
    controller.start_session(now=0.0)
    face = make_face(rx=0.9)

    def feed(offset):
        for i in range(50):
            controller.submit_frame([face], now=offset + i * 0.01)

    threads = [threading.Thread(target=feed, args=(k * 0.001,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    record = controller.stop_session(now=1.0)

    # All 200 frames land inside one cooldown window
    assert record["violations"] == 1
    assert record["frames_active"] == 200


def test_timer_commands_go_through_queue(controller, make_face):
    controller.start_session(now=0.0)
    controller.toggle_timer()
    controller.submit_frame([make_face(rx=0.0)], now=5.0)
    controller.reset_timer()
    record = controller.stop_session(now=6.0)
    assert record["violations"] == 0


def test_audio_needs_level_or_bins(controller):
    controller.start_session(now=0.0)
    with pytest.raises(ValueError):
        controller.submit_audio()


def test_malformed_frame_does_not_stop_worker(controller, make_face):
    controller.start_session(now=0.0)
    controller.submit_frame([[{"x": 0.5}]], now=1.0)  # point without "y"
    controller.submit_frame([make_face(rx=0.9)], now=2.0)
    record = controller.stop_session(now=3.0)
    assert record["violations"] == 1
    assert record["frames_active"] == 1


def test_snapshot_file_matches_record(controller, make_face):
    session_dir = controller.start_session(now=0.0)
    controller.submit_frame([make_face()], now=11.0)
    record = controller.stop_session(now=12.0)
    snap = json.loads((session_dir / "snapshot.json").read_text())
    assert snap["elapsed_s"] == record["duration"] == 12.0
    assert snap["clock"] == record["clock"] == "00:12"
