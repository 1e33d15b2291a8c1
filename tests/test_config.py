"""Tests for configuration persistence."""

from app.config import Config
from app.controller import build_engine
from domain.gaze_classifier import GazeThresholds


def test_missing_file_gives_defaults(tmp_path):
    cfg = Config.load(tmp_path / "nope.json")
    assert cfg.cooldown_ms == 4000.0
    assert cfg.focus_seconds == 1500
    assert "cell phone" in cfg.forbidden_categories


def test_round_trip_and_unknown_keys(tmp_path):
    path = tmp_path / "config.json"
    cfg = Config(cooldown_ms=2500.0, risk_step=20)
    cfg.save(path)
    path.write_text(path.read_text().replace("{", '{\n  "not_a_field": 1,', 1))
    loaded = Config.load(path)
    assert loaded.cooldown_ms == 2500.0
    assert loaded.risk_step == 20
    assert not hasattr(loaded, "not_a_field")


def test_corrupt_file_falls_back(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert Config.load(path) == Config()


def test_engine_built_from_config():
    cfg = Config(vertical_max=0.8, cooldown_ms=1000.0, risk_step=50, focus_seconds=60)
    assert cfg.gaze_thresholds() == GazeThresholds(vertical_max=0.8)
    eng = build_engine(cfg)
    assert eng.gate.cooldown_ms == 1000.0
    assert eng.gate.risk is eng.risk
    assert eng.risk.step == 50
    assert eng.timer.seconds_remaining == 60
