"""Derived session metrics and the exported session record."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from domain.models import SessionSnapshot, Violation


def attention_level(ratio: float) -> str:
    """Band the rolling focus ratio the way the live display colours it."""
    if ratio > 80:
        return "HIGH"
    if ratio > 50:
        return "MODERATE"
    return "LOW"


def format_clock(seconds: float) -> str:
    """``MM:SS``; minutes keep counting past 59."""
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


def violation_breakdown(violations: list[Violation]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for v in violations:
        key = v.reason.kind.value
        counts[key] = counts.get(key, 0) + 1
    return counts


def compute_session_record(
    session_id: str,
    snapshot: SessionSnapshot,
    violations: Optional[list[Violation]] = None,
    wall_time: Optional[float] = None,
) -> dict[str, Any]:
    """Return a flat dict suitable for JSON serialisation.

    ``session_id``, ``duration``, ``violations``, ``average_focus``,
    ``phase`` and ``timestamp`` are the export contract; the rest is extra
    detail for the debrief.
    """
    ts = datetime.fromtimestamp(wall_time, timezone.utc) if wall_time is not None else datetime.now(timezone.utc)
    return {
        "session_id": session_id,
        "duration": round(snapshot.elapsed_s, 3),
        "violations": snapshot.violations,
        "average_focus": round(snapshot.focus_ratio, 1),
        "phase": snapshot.phase.value,
        "timestamp": ts.isoformat(),
        "clock": snapshot.clock,
        "risk_index": snapshot.risk_index,
        "tab_violations": snapshot.tab_violations,
        "consistency": round(snapshot.consistency, 1),
        "attention_level": snapshot.attention_level,
        "frames_active": snapshot.frames_active,
        "frames_focused": snapshot.frames_focused,
        "violation_breakdown": violation_breakdown(violations or []),
    }
