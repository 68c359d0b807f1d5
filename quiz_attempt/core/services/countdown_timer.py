"""Once-per-second countdown driven by the Qt event loop."""

from __future__ import annotations

from collections.abc import Iterator
import logging

from PySide6.QtCore import QObject, QTimer, Signal

from quiz_attempt.constants.quiz_constants import TICK_INTERVAL_MS

logger = logging.getLogger(__name__)


def countdown_sequence(total_seconds: int) -> Iterator[int]:
    """Lazily yield the remaining seconds after each tick, ending at zero."""
    remaining = total_seconds
    while remaining > 0:
        remaining -= 1
        yield remaining


class CountdownTimer(QObject):
    """Counts down from a configured number of seconds and signals expiry exactly once.

    Ticks are delivered by a ``QTimer`` on the owning thread's event loop, so
    they interleave with other queued callbacks (network completions, user
    input) but never run concurrently with them. Ticks missed while the
    process is suspended are not caught up; callers derive elapsed time from
    ``configured_seconds - remaining``.
    """

    ticked = Signal(int)
    expired = Signal()

    def __init__(self, interval_ms: int = TICK_INTERVAL_MS, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)
        self._sequence: Iterator[int] | None = None
        self._configured_seconds: int = 0
        self._remaining: int = 0
        self._running: bool = False
        self._has_expired: bool = False

    def start(self, total_seconds: int) -> None:
        """Begin counting down. A running countdown cannot be restarted."""
        if self._running:
            raise RuntimeError("Countdown is already running.")
        if total_seconds < 0:
            raise ValueError("Countdown length must not be negative.")
        self._configured_seconds = total_seconds
        self._remaining = total_seconds
        self._sequence = countdown_sequence(total_seconds)
        self._has_expired = False
        self._running = True
        if total_seconds == 0:
            self._expire()
            return
        self._timer.start()
        logger.debug("Countdown started at %d seconds", total_seconds)

    def stop(self) -> None:
        """Cancel all pending ticks. Safe to call repeatedly."""
        self._running = False
        self._sequence = None
        self._timer.stop()

    def tick(self) -> None:
        """Advance the countdown by one second. Ticks after stop or expiry are ignored."""
        if not self._running or self._sequence is None:
            logger.debug("Ignoring tick on an inactive countdown")
            return
        try:
            self._remaining = next(self._sequence)
        except StopIteration:
            self._remaining = 0
        self.ticked.emit(self._remaining)
        if self._remaining == 0:
            self._expire()

    def _expire(self) -> None:
        self.stop()
        if self._has_expired:
            return
        self._has_expired = True
        logger.info("Countdown expired after %d seconds", self._configured_seconds)
        self.expired.emit()

    @property
    def remaining(self) -> int:
        return max(0, self._remaining)

    @property
    def configured_seconds(self) -> int:
        return self._configured_seconds

    def elapsed_seconds(self) -> int:
        return max(0, self._configured_seconds - self.remaining)

    def is_running(self) -> bool:
        return self._running

    def has_expired(self) -> bool:
        return self._has_expired
