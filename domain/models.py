"""Core data models for the focus sentinel engine."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class DistractionVerdict(str, Enum):
    NONE = "NONE"
    SIDE_GAZE = "SIDE_GAZE"
    DESK_GAZE = "DESK_GAZE"
    HIGH_GAZE = "HIGH_GAZE"


class AnomalyKind(str, Enum):
    GAZE_DEVIATION = "GAZE_DEVIATION"
    SIGNAL_LOST = "SIGNAL_LOST"
    MULTIPLE_FACES = "MULTIPLE_FACES"
    UNAUTHORIZED_OBJECT = "UNAUTHORIZED_OBJECT"
    VOCAL_DETECTION = "VOCAL_DETECTION"
    VISIBILITY_LOST = "VISIBILITY_LOST"


class TimerPhase(str, Enum):
    FOCUS = "FOCUS"
    BREAK = "BREAK"


class FrameStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    SECURITY_ALERT = "SECURITY_ALERT"
    LOST = "LOST"


@dataclass(frozen=True)
class LandmarkPoint:
    x: float  # 0-1 normalised to frame width
    y: float  # 0-1 normalised to frame height
    z: float = 0.0  # relative depth


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True)
class DetectedObject:
    category_name: str
    score: float
    bounding_box: Optional[BoundingBox] = None


@dataclass(frozen=True)
class AnomalyReason:
    """One detected anomaly; ``detail`` carries the object category or gaze
    verdict, ``count`` the running tab-violation number for visibility loss."""

    kind: AnomalyKind
    detail: str = ""
    count: Optional[int] = None

    @property
    def label(self) -> str:
        if self.kind == AnomalyKind.UNAUTHORIZED_OBJECT:
            return f"{self.kind.value}: {self.detail.upper()}"
        if self.kind == AnomalyKind.VISIBILITY_LOST and self.count is not None:
            return f"{self.kind.value} #{self.count}"
        return self.kind.value


@dataclass(frozen=True)
class Violation:
    reason: AnomalyReason
    timestamp: float  # monotonic seconds

    def to_dict(self) -> dict:
        return {
            "reason": self.reason.kind.value,
            "detail": self.reason.detail,
            "count": self.reason.count,
            "label": self.reason.label,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PhaseSwitch:
    new_phase: TimerPhase


@dataclass(frozen=True)
class ActivityEntry:
    timestamp: float
    message: str
    level: str = "info"  # "info", "success" or "alert"


@dataclass
class FrameResult:
    """Outcome of feeding one frame through the engine."""

    verdicts: list[DistractionVerdict]
    anomalies: list[AnomalyReason]
    compliant: bool
    status: FrameStatus
    accepted: list[Violation] = field(default_factory=list)
    focus_sample: Optional[float] = None


@dataclass
class SessionSnapshot:
    violations: int
    risk_index: int
    focus_ratio: float
    consistency: float
    attention_level: str
    phase: TimerPhase
    seconds_remaining: int
    timer_running: bool
    elapsed_s: float
    clock: str
    tab_violations: int
    frames_active: int
    frames_focused: int
    stability: list[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = dataclasses.asdict(self)
        data["phase"] = self.phase.value
        return data


class VisibilityEvent(str, Enum):
    WINDOW_BLURRED = "window-blurred"
    WINDOW_FOCUSED = "window-focused"
    DOCUMENT_HIDDEN = "document-hidden"
