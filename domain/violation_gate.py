"""Phase gate and global cooldown that turn anomalies into recorded violations."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from domain.models import AnomalyReason, TimerPhase, Violation
from domain.risk_meter import RiskMeter

logger = logging.getLogger(__name__)


class ViolationGate:
    """Records at most one violation per cooldown window, and only while the
    interval timer is running in its FOCUS phase.

    The cooldown clock is shared by every anomaly kind.  Rejected anomalies
    leave no trace: no log entry, no risk bump, no callback.
    """

    def __init__(self, cooldown_ms: float = 4000.0, risk: Optional[RiskMeter] = None) -> None:
        self.cooldown_ms = cooldown_ms
        self.risk = risk

        self._log: list[Violation] = []
        self._last_accepted: Optional[float] = None  # monotonic
        self._on_violation: Optional[Callable[[Violation], None]] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(
        self,
        reason: AnomalyReason,
        phase: TimerPhase,
        running: bool,
        now: float,
    ) -> bool:
        """Return True when *reason* was recorded as a violation."""
        if phase != TimerPhase.FOCUS or not running:
            logger.debug("Gate closed (%s, running=%s): dropped %s", phase.value, running, reason.label)
            return False

        if self._last_accepted is not None:
            # Round off float noise so an exact cooldown gap stays inside the window
            elapsed_ms = round((now - self._last_accepted) * 1000.0, 6)
            if elapsed_ms <= self.cooldown_ms:
                logger.debug("Cooldown (%.0f ms): dropped %s", elapsed_ms, reason.label)
                return False

        self._accept(reason, now)
        return True

    def set_on_violation(self, callback: Callable[[Violation], None]) -> None:
        self._on_violation = callback

    @property
    def count(self) -> int:
        return len(self._log)

    @property
    def log(self) -> list[Violation]:
        return list(self._log)

    @property
    def latest(self) -> Optional[Violation]:
        return self._log[-1] if self._log else None

    @property
    def last_accepted(self) -> Optional[float]:
        return self._last_accepted

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _accept(self, reason: AnomalyReason, now: float) -> None:
        violation = Violation(reason=reason, timestamp=now)
        self._log.append(violation)
        self._last_accepted = now
        if self.risk is not None:
            self.risk.bump()
        logger.info(
            "Violation #%d: %s  (risk=%s)",
            len(self._log),
            reason.label,
            self.risk.value if self.risk is not None else "-",
        )
        if self._on_violation:
            self._on_violation(violation)
