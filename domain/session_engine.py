"""Per-frame orchestration of classifier, gate, risk, focus and timer."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from domain.focus_aggregator import FocusAggregator
from domain.gaze_classifier import DEFAULT_THRESHOLDS, GazeThresholds, classify
from domain.interval_timer import IntervalTimer
from domain.metrics import attention_level, compute_session_record, format_clock
from domain.models import (
    ActivityEntry,
    AnomalyKind,
    AnomalyReason,
    DistractionVerdict,
    FrameResult,
    FrameStatus,
    PhaseSwitch,
    SessionSnapshot,
    Violation,
    VisibilityEvent,
)
from domain.risk_meter import RiskMeter
from domain.violation_gate import ViolationGate
from vision.detections import parse_detections
from vision.landmarks import as_face_list

logger = logging.getLogger(__name__)

DEFAULT_FORBIDDEN = ("cell phone", "laptop", "tablet", "book")

# Never an unauthorised object, whatever the forbidden list says
_EXEMPT_CATEGORY = "person"

_LOSS_EVENTS = {VisibilityEvent.WINDOW_BLURRED, VisibilityEvent.DOCUMENT_HIDDEN}


class SessionEngine:
    """Owns all mutable state of one monitoring session.

    Inputs arrive as ``on_frame`` / ``on_audio_sample`` /
    ``on_visibility_event`` calls plus a once-per-second ``tick()``.  Each
    call runs to completion; the engine is not safe to call from several
    threads at once (``app.controller.Controller`` serialises access).
    """

    # Output signals (set by the host)
    on_alert: Optional[Callable[[Violation], None]] = None
    on_phase_switch: Optional[Callable[[PhaseSwitch], None]] = None
    on_focus_sample: Optional[Callable[[float], None]] = None

    def __init__(
        self,
        thresholds: GazeThresholds = DEFAULT_THRESHOLDS,
        gate: Optional[ViolationGate] = None,
        risk: Optional[RiskMeter] = None,
        focus: Optional[FocusAggregator] = None,
        timer: Optional[IntervalTimer] = None,
        forbidden_categories: Iterable[str] = DEFAULT_FORBIDDEN,
        min_object_score: float = 0.5,
        audio_threshold: float = 40.0,
    ) -> None:
        self.thresholds = thresholds
        if gate is None:
            self.risk = risk if risk is not None else RiskMeter()
            self.gate = ViolationGate(risk=self.risk)
        else:
            self.gate = gate
            self.risk = risk or gate.risk or RiskMeter()
            self.gate.risk = self.risk
        self.focus = focus if focus is not None else FocusAggregator()
        self.timer = timer if timer is not None else IntervalTimer()

        self.forbidden_categories = frozenset(c.lower() for c in forbidden_categories)
        self.min_object_score = min_object_score
        self.audio_threshold = audio_threshold

        self.tab_violations = 0
        self.started_at: Optional[float] = None
        self._last_now = 0.0
        self._activity: list[ActivityEntry] = []

        self.gate.set_on_violation(self._handle_violation)
        self.timer.set_on_phase_switch(self._handle_phase_switch)

    # ------------------------------------------------------------------
    # Lifecycle / timer control
    # ------------------------------------------------------------------

    def start(self, now: float) -> None:
        """Begin the session and start the focus countdown immediately."""
        self.started_at = now
        self._last_now = now
        self._log_activity("MONITORING_ENGAGED", "success")
        self.start_timer()

    def start_timer(self) -> None:
        if self.timer.running:
            return
        self.timer.start()
        self._log_activity(f"PHASE_{self.timer.phase.value}_START")

    def pause_timer(self) -> None:
        self.timer.pause()

    def toggle_timer(self) -> bool:
        if self.timer.running:
            self.pause_timer()
        else:
            self.start_timer()
        return self.timer.running

    def reset_timer(self) -> None:
        self.timer.reset()

    def tick(self) -> Optional[PhaseSwitch]:
        return self.timer.tick()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def on_frame(self, faces: Any, objects: Any, now: float) -> FrameResult:
        self._last_now = now
        face_arrays = as_face_list(faces)
        verdicts = [classify(f, self.thresholds) for f in face_arrays]

        anomalies: list[AnomalyReason] = []
        if not verdicts:
            anomalies.append(AnomalyReason(AnomalyKind.SIGNAL_LOST))
            status = FrameStatus.LOST
        else:
            for verdict in verdicts:
                if verdict != DistractionVerdict.NONE:
                    anomalies.append(AnomalyReason(AnomalyKind.GAZE_DEVIATION, detail=verdict.value))
            if len(verdicts) > 1:
                anomalies.append(AnomalyReason(AnomalyKind.MULTIPLE_FACES, count=len(verdicts)))
            status = FrameStatus.SECURITY_ALERT if anomalies else FrameStatus.COMPLIANT

        compliant = len(verdicts) == 1 and verdicts[0] == DistractionVerdict.NONE
        anomalies.extend(self._object_anomalies(objects))

        accepted: list[Violation] = []
        for reason in anomalies:
            violation = self._submit(reason, now)
            if violation is not None:
                accepted.append(violation)

        self.focus.on_frame(compliant)
        sample = self.focus.sample_if_due()
        if sample is not None:
            logger.debug("Focus sample: %.1f%%", sample)
            if self.on_focus_sample:
                self.on_focus_sample(sample)

        return FrameResult(
            verdicts=verdicts,
            anomalies=anomalies,
            compliant=compliant,
            status=status,
            accepted=accepted,
            focus_sample=sample,
        )

    def on_audio_sample(self, level: float, now: float) -> bool:
        self._last_now = now
        if level <= self.audio_threshold:
            return False
        return self._submit(AnomalyReason(AnomalyKind.VOCAL_DETECTION), now) is not None

    def on_visibility_event(self, event: Any, now: float) -> bool:
        self._last_now = now
        try:
            ev = VisibilityEvent(event)
        except ValueError:
            logger.warning("Ignoring unknown visibility event %r", event)
            return False
        if ev not in _LOSS_EVENTS:
            logger.debug("Visibility restored (%s)", ev.value)
            return False

        reason = AnomalyReason(
            AnomalyKind.VISIBILITY_LOST,
            detail=ev.value,
            count=self.tab_violations + 1,
        )
        if self._submit(reason, now) is None:
            return False
        self.tab_violations += 1
        return True

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def snapshot(self, now: Optional[float] = None) -> SessionSnapshot:
        t = self._last_now if now is None else now
        elapsed = 0.0 if self.started_at is None else max(0.0, t - self.started_at)
        ratio = self.focus.current_ratio()
        return SessionSnapshot(
            violations=self.gate.count,
            risk_index=self.risk.value,
            focus_ratio=ratio,
            consistency=self.focus.consistency,
            attention_level=attention_level(ratio),
            phase=self.timer.phase,
            seconds_remaining=self.timer.seconds_remaining,
            timer_running=self.timer.running,
            elapsed_s=elapsed,
            clock=format_clock(elapsed),
            tab_violations=self.tab_violations,
            frames_active=self.focus.frames_active,
            frames_focused=self.focus.frames_focused,
            stability=self.focus.history,
        )

    def export_record(
        self,
        session_id: str,
        now: Optional[float] = None,
        wall_time: Optional[float] = None,
    ) -> dict[str, Any]:
        return compute_session_record(session_id, self.snapshot(now), self.gate.log, wall_time)

    @property
    def violations(self) -> list[Violation]:
        return self.gate.log

    @property
    def activity(self) -> list[ActivityEntry]:
        return list(self._activity)

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _object_anomalies(self, objects: Any) -> list[AnomalyReason]:
        found: list[AnomalyReason] = []
        for obj in parse_detections(objects):
            category = obj.category_name.lower()
            if category == _EXEMPT_CATEGORY or category not in self.forbidden_categories:
                continue
            if obj.score < self.min_object_score:
                continue
            found.append(AnomalyReason(AnomalyKind.UNAUTHORIZED_OBJECT, detail=obj.category_name))
        return found

    def _submit(self, reason: AnomalyReason, now: float) -> Optional[Violation]:
        if self.gate.evaluate(reason, self.timer.phase, self.timer.running, now):
            return self.gate.latest
        return None

    def _handle_violation(self, violation: Violation) -> None:
        self._activity.append(ActivityEntry(violation.timestamp, violation.reason.label, "alert"))
        if self.on_alert:
            self.on_alert(violation)

    def _handle_phase_switch(self, event: PhaseSwitch) -> None:
        self._log_activity(f"PHASE_SWITCH: {event.new_phase.value}", "success")
        if self.on_phase_switch:
            self.on_phase_switch(event)

    def _log_activity(self, message: str, level: str = "info") -> None:
        self._activity.append(ActivityEntry(self._last_now, message, level))
