"""Session lifecycle controller – serialises all engine input on a worker thread."""

from __future__ import annotations

import logging
import queue
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from app.config import Config
from domain.focus_aggregator import FocusAggregator
from domain.interval_timer import IntervalTimer
from domain.models import FrameResult, PhaseSwitch, SessionSnapshot, Violation
from domain.risk_meter import RiskMeter
from domain.session_engine import SessionEngine
from domain.violation_gate import ViolationGate
from storage.session_writer import SessionWriter
from vision.audio import audio_level

logger = logging.getLogger(__name__)

_STOP = object()


def build_engine(config: Config) -> SessionEngine:
    """Wire a fresh engine from the configuration."""
    risk = RiskMeter(step=config.risk_step, maximum=config.risk_max)
    return SessionEngine(
        thresholds=config.gaze_thresholds(),
        gate=ViolationGate(cooldown_ms=config.cooldown_ms, risk=risk),
        risk=risk,
        focus=FocusAggregator(
            sample_every=config.sample_every_frames,
            capacity=config.history_capacity,
        ),
        timer=IntervalTimer(
            focus_seconds=config.focus_seconds,
            break_seconds=config.break_seconds,
        ),
        forbidden_categories=config.forbidden_categories,
        min_object_score=config.min_object_score,
        audio_threshold=config.audio_threshold,
    )


class Controller:
    """Owns the session engine and the session writer.

    Frames, audio levels, visibility events, timer commands and the 1 Hz tick
    all go through one FIFO queue drained by a single worker thread, so the
    gate's cooldown check-then-record never runs concurrently.  Frame results
    are pushed into a bounded queue the UI can poll.
    """

    # Signals (set by the UI); called on the worker thread
    on_alert: Optional[Callable[[Violation], None]] = None
    on_phase_switch: Optional[Callable[[PhaseSwitch], None]] = None

    def __init__(self, config: Config) -> None:
        self.config = config
        self.engine: Optional[SessionEngine] = None

        # Session state
        self._session_writer: Optional[SessionWriter] = None
        self._session_dir: Optional[Path] = None
        self._session_id: str = ""

        # Worker + ticker threads
        self._inbox: queue.Queue[Any] = queue.Queue()
        self._result_queue: queue.Queue[FrameResult] = queue.Queue(maxsize=5)
        self._lock = threading.Lock()
        self._worker_thread: Optional[threading.Thread] = None
        self._ticker_thread: Optional[threading.Thread] = None
        self._ticker_stop = threading.Event()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.engine is not None

    def start_session(self, now: Optional[float] = None) -> Path:
        if self.engine is not None:
            raise RuntimeError("Cannot start session: one is already running.")

        ts = datetime.now()
        session_id = ts.strftime("%Y-%m-%d_%H-%M-%S")
        session_dir = Path(self.config.runs_dir) / session_id

        engine = build_engine(self.config)
        self._session_writer = SessionWriter(session_dir)
        engine.on_alert = self._handle_alert
        engine.on_phase_switch = self._handle_phase_switch
        engine.on_focus_sample = self._handle_focus_sample
        engine.start(time.monotonic() if now is None else now)

        self.engine = engine
        self._session_dir = session_dir
        self._session_id = session_id
        self._inbox = queue.Queue()

        self._start_worker()
        self._start_ticker()
        logger.info("Session started: %s", session_id)
        return session_dir

    def stop_session(self, now: Optional[float] = None) -> dict[str, Any]:
        """Halt the ticker, drain pending input, export and discard the engine."""
        if self.engine is None:
            raise RuntimeError("Cannot stop session: none is running.")

        self._stop_ticker()
        self._stop_worker()

        engine = self.engine
        end = time.monotonic() if now is None else now
        record = engine.export_record(self._session_id, now=end, wall_time=time.time())
        if self._session_writer:
            self._session_writer.write_activity(engine.activity)
            self._session_writer.write_snapshot(engine.snapshot(end).to_dict())
            self._session_writer.write_record(record)
            self._session_writer.close()
            self._session_writer = None

        self.engine = None
        logger.info(
            "Session stopped.  Duration=%.1fs  Violations=%d  Risk=%d",
            record["duration"],
            record["violations"],
            record["risk_index"],
        )
        return record

    @property
    def session_dir(self) -> Optional[Path]:
        return self._session_dir

    # ------------------------------------------------------------------
    # Inputs (any thread)
    # ------------------------------------------------------------------

    def submit_frame(self, faces: Any, objects: Any = None, now: Optional[float] = None) -> None:
        t = time.monotonic() if now is None else now
        self._enqueue(lambda e: e.on_frame(faces, objects, t))

    def submit_audio(
        self,
        level: Optional[float] = None,
        frequency_bins: Any = None,
        now: Optional[float] = None,
    ) -> None:
        if level is None:
            if frequency_bins is None:
                raise ValueError("submit_audio needs a level or frequency bins")
            level = audio_level(frequency_bins)
        t = time.monotonic() if now is None else now
        lvl = float(level)
        self._enqueue(lambda e: e.on_audio_sample(lvl, t))

    def submit_visibility(self, event: str, now: Optional[float] = None) -> None:
        t = time.monotonic() if now is None else now
        self._enqueue(lambda e: e.on_visibility_event(event, t))

    def toggle_timer(self) -> None:
        self._enqueue(lambda e: e.toggle_timer())

    def reset_timer(self) -> None:
        self._enqueue(lambda e: e.reset_timer())

    def snapshot(self) -> SessionSnapshot:
        if self.engine is None:
            raise RuntimeError("No active session.")
        with self._lock:
            return self.engine.snapshot(time.monotonic())

    def poll_result(self) -> Optional[FrameResult]:
        """Non-blocking read from the result queue."""
        try:
            return self._result_queue.get_nowait()
        except queue.Empty:
            return None

    def _enqueue(self, fn: Callable[[SessionEngine], Any]) -> None:
        if self.engine is None:
            raise RuntimeError("No active session.")
        self._inbox.put(fn)

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _start_worker(self) -> None:
        self._worker_thread = threading.Thread(
            target=self._worker_loop, daemon=True, name="EngineWorker"
        )
        self._worker_thread.start()

    def _stop_worker(self) -> None:
        self._inbox.put(_STOP)
        if self._worker_thread:
            self._worker_thread.join(timeout=5.0)
            self._worker_thread = None

    def _worker_loop(self) -> None:
        engine = self.engine
        assert engine is not None

        while True:
            item = self._inbox.get()
            if item is _STOP:
                break
            try:
                with self._lock:
                    result = item(engine)
            except Exception:
                # skip the bad item, keep draining
                logger.exception("Engine input failed; skipped.")
                continue
            if isinstance(result, FrameResult):
                try:
                    self._result_queue.put_nowait(result)
                except queue.Full:
                    pass  # drop result – UI is slower than pipeline

    # ------------------------------------------------------------------
    # Ticker thread
    # ------------------------------------------------------------------

    def _start_ticker(self) -> None:
        self._ticker_stop.clear()
        self._ticker_thread = threading.Thread(
            target=self._ticker_loop, daemon=True, name="IntervalTicker"
        )
        self._ticker_thread.start()

    def _stop_ticker(self) -> None:
        self._ticker_stop.set()
        if self._ticker_thread:
            self._ticker_thread.join(timeout=2.0)
            self._ticker_thread = None

    def _ticker_loop(self) -> None:
        while not self._ticker_stop.wait(self.config.tick_interval_s):
            self._inbox.put(lambda e: e.tick())

    # ------------------------------------------------------------------
    # Engine signals
    # ------------------------------------------------------------------

    def _handle_alert(self, violation: Violation) -> None:
        if self._session_writer:
            self._session_writer.write_violation(violation)
        if self.on_alert:
            self.on_alert(violation)

    def _handle_phase_switch(self, event: PhaseSwitch) -> None:
        if self.on_phase_switch:
            self.on_phase_switch(event)

    def _handle_focus_sample(self, sample: float) -> None:
        if self._session_writer and self.engine is not None:
            self._session_writer.write_focus_sample(self.engine.focus.frames_active, sample)
