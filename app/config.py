"""Application-wide configuration with typed fields and sane defaults."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from domain.gaze_classifier import GazeThresholds

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path("config.json")


@dataclass
class Config:
    # Gaze classifier (ratios of nose position / eye-depth to face geometry)
    horizontal_min: float = 0.35
    horizontal_max: float = 0.65
    depth_max: float = 0.35
    vertical_min: float = 0.35
    vertical_max: float = 0.65

    # Violation gate
    cooldown_ms: float = 4000.0    # at most one violation per window
    risk_step: int = 15
    risk_max: int = 100

    # Focus aggregator
    sample_every_frames: int = 30
    history_capacity: int = 20

    # Interval timer
    focus_seconds: int = 25 * 60
    break_seconds: int = 5 * 60
    tick_interval_s: float = 1.0

    # Object / audio inputs
    forbidden_categories: list[str] = field(
        default_factory=lambda: ["cell phone", "laptop", "tablet", "book"]
    )
    min_object_score: float = 0.5
    audio_threshold: float = 40.0  # mean byte-frequency bin level

    # Session output
    runs_dir: str = "runs"

    def gaze_thresholds(self) -> GazeThresholds:
        return GazeThresholds(
            horizontal_min=self.horizontal_min,
            horizontal_max=self.horizontal_max,
            depth_max=self.depth_max,
            vertical_min=self.vertical_min,
            vertical_max=self.vertical_max,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Optional[Path] = None) -> None:
        with open(path or _CONFIG_PATH, "w", encoding="utf-8") as fh:
            json.dump(asdict(self), fh, indent=2)
        logger.debug("Config saved.")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        path = path or _CONFIG_PATH
        if not path.exists():
            return cls()
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
            cfg = cls()
            for k, v in data.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
            logger.debug("Config loaded from %s", path)
            return cfg
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not load config (%s); using defaults.", exc)
            return cls()
