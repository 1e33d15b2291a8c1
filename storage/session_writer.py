"""Safe, buffered writer for session data files."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any

from domain.models import ActivityEntry, Violation

logger = logging.getLogger(__name__)

_VIOLATION_FIELDS = ["timestamp", "reason", "detail", "count", "label"]
_FOCUS_FIELDS = ["frame", "focus_pct"]
_ACTIVITY_FIELDS = ["timestamp", "level", "message"]


class SessionWriter:
    """Creates a session directory and writes CSV/JSON files with line-buffering
    so the violation log survives a crash."""

    def __init__(self, session_dir: Path) -> None:
        self.session_dir = session_dir
        session_dir.mkdir(parents=True, exist_ok=True)

        # Open files in line-buffered mode (buffering=1 applies to text mode)
        self._vf = open(session_dir / "violations.csv", "w", newline="", buffering=1, encoding="utf-8")
        self._ff = open(session_dir / "focus.csv", "w", newline="", buffering=1, encoding="utf-8")

        self._vw = csv.DictWriter(self._vf, fieldnames=_VIOLATION_FIELDS)
        self._fw = csv.DictWriter(self._ff, fieldnames=_FOCUS_FIELDS)

        self._vw.writeheader()
        self._fw.writeheader()

        self._closed = False
        logger.info("SessionWriter opened at %s", session_dir)

    # ------------------------------------------------------------------
    # Write methods
    # ------------------------------------------------------------------

    def write_violation(self, v: Violation) -> None:
        if self._closed:
            return
        row = v.to_dict()
        row["timestamp"] = f"{v.timestamp:.6f}"
        if row["count"] is None:
            row["count"] = ""
        self._vw.writerow(row)

    def write_focus_sample(self, frame: int, focus_pct: float) -> None:
        if self._closed:
            return
        self._fw.writerow({"frame": frame, "focus_pct": f"{focus_pct:.2f}"})

    def write_activity(self, entries: list[ActivityEntry]) -> None:
        path = self.session_dir / "activity.csv"
        try:
            with open(path, "w", newline="", encoding="utf-8") as fh:
                w = csv.DictWriter(fh, fieldnames=_ACTIVITY_FIELDS)
                w.writeheader()
                for e in entries:
                    w.writerow({"timestamp": f"{e.timestamp:.6f}", "level": e.level, "message": e.message})
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)

    def write_record(self, record: dict[str, Any]) -> None:
        _write_json(self.session_dir / "session_record.json", record)

    def write_snapshot(self, snapshot: dict[str, Any]) -> None:
        _write_json(self.session_dir / "snapshot.json", snapshot)

    # ------------------------------------------------------------------
    # Close
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._vf.close()
        self._ff.close()
        logger.info("SessionWriter closed.")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _write_json(path: Path, data: Any) -> None:
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, default=str)
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
