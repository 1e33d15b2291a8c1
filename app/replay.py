"""Drive a session engine from a recorded JSON-lines event stream.

One JSON object per line::

    {"type": "frame", "t": 12.40, "faces": [[[x, y, z], ...]], "objects": [...]}
    {"type": "audio", "t": 13.00, "level": 52.0}        # or "bins": [...]
    {"type": "visibility", "t": 14.2, "event": "window-blurred"}
    {"type": "tick", "count": 1}
    {"type": "timer", "action": "toggle"}               # or "reset"

``t`` is in seconds on the recording's monotonic clock.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from app.config import Config
from app.controller import build_engine
from domain.session_engine import SessionEngine
from storage.session_writer import SessionWriter
from vision.audio import audio_level

logger = logging.getLogger(__name__)


def apply_event(engine: SessionEngine, event: dict[str, Any], default_t: float = 0.0) -> Any:
    """Feed one decoded event into *engine*; unknown types are skipped."""
    kind = event.get("type")
    t = float(event.get("t", default_t))

    if kind == "frame":
        return engine.on_frame(event.get("faces") or [], event.get("objects") or [], t)
    if kind == "audio":
        level = event.get("level")
        if level is None:
            level = audio_level(event.get("bins") or [])
        return engine.on_audio_sample(float(level), t)
    if kind == "visibility":
        return engine.on_visibility_event(event.get("event"), t)
    if kind == "tick":
        switch = None
        for _ in range(int(event.get("count", 1))):
            switch = engine.tick() or switch
        return switch
    if kind == "timer":
        action = event.get("action")
        if action == "toggle":
            return engine.toggle_timer()
        if action == "reset":
            return engine.reset_timer()
        logger.warning("Unknown timer action %r", action)
        return None

    logger.warning("Skipping event of unknown type %r", kind)
    return None


def read_events(lines: Iterable[str]) -> Iterable[dict[str, Any]]:
    for n, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Line %d is not valid JSON (%s); skipped.", n, exc)
            continue
        if not isinstance(event, dict):
            logger.warning("Line %d is not an object; skipped.", n)
            continue
        yield event


def replay(
    lines: Iterable[str],
    config: Config,
    session_id: str = "replay",
    session_dir: Optional[Path] = None,
) -> dict[str, Any]:
    """Replay *lines* through a fresh engine and return the session record."""
    engine = build_engine(config)
    writer = SessionWriter(session_dir) if session_dir is not None else None
    if writer:
        engine.on_alert = writer.write_violation
        engine.on_focus_sample = lambda s: writer.write_focus_sample(engine.focus.frames_active, s)

    started = False
    last_t = 0.0
    for event in read_events(lines):
        t = float(event.get("t", last_t))
        if not started:
            engine.start(t)
            started = True
        apply_event(engine, event, t)
        last_t = t

    record = engine.export_record(session_id, now=last_t)
    if writer:
        writer.write_activity(engine.activity)
        writer.write_snapshot(engine.snapshot(last_t).to_dict())
        writer.write_record(record)
        writer.close()
    return record
