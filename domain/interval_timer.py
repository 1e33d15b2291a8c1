"""Focus/break countdown (Pomodoro-style) driven by an explicit 1 Hz tick."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from domain.models import PhaseSwitch, TimerPhase

logger = logging.getLogger(__name__)


class IntervalTimer:
    """Two-phase countdown that cycles FOCUS → BREAK → FOCUS … forever.

    The timer owns no clock.  Whoever hosts it calls ``tick()`` once per
    elapsed second; ticks while paused are ignored.
    """

    def __init__(self, focus_seconds: int = 1500, break_seconds: int = 300) -> None:
        self.focus_seconds = focus_seconds
        self.break_seconds = break_seconds

        self._phase = TimerPhase.FOCUS
        self._remaining = focus_seconds
        self._running = False
        self._on_phase_switch: Optional[Callable[[PhaseSwitch], None]] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._running = True

    def pause(self) -> None:
        self._running = False

    def toggle(self) -> bool:
        """Start if paused, pause if running; return the new running flag."""
        if self._running:
            self.pause()
        else:
            self.start()
        return self._running

    def reset(self) -> None:
        self.pause()
        self._remaining = self.duration_of(self._phase)

    def tick(self) -> Optional[PhaseSwitch]:
        if not self._running:
            return None
        self._remaining -= 1
        if self._remaining > 0:
            return None
        return self._switch()

    def duration_of(self, phase: TimerPhase) -> int:
        return self.focus_seconds if phase == TimerPhase.FOCUS else self.break_seconds

    def set_on_phase_switch(self, callback: Callable[[PhaseSwitch], None]) -> None:
        self._on_phase_switch = callback

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def seconds_remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _switch(self) -> PhaseSwitch:
        new_phase = TimerPhase.BREAK if self._phase == TimerPhase.FOCUS else TimerPhase.FOCUS
        self._phase = new_phase
        self._remaining = self.duration_of(new_phase)
        event = PhaseSwitch(new_phase=new_phase)
        logger.info("Phase switch → %s (%d s)", new_phase.value, self._remaining)
        if self._on_phase_switch:
            self._on_phase_switch(event)
        return event
