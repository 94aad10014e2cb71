"""Timer-based debounce for recompute requests."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

log = logging.getLogger(__name__)


class Debouncer:
    """Run *callback* once after a quiet period.

    Scheduling again before the timer fires cancels the pending run, so only
    the most recent call goes through. Errors raised by *callback* are not
    handled here.
    """

    def __init__(self, callback: Callable[[], None]):
        self._callback = callback
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self, delay_ms: float) -> None:
        delay = max(delay_ms, 0) / 1000
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = threading.Timer(delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()
        log.debug("Recompute scheduled in %.3fs", delay)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A newer schedule() or cancel() won the race for the lock
            if generation != self._generation:
                return
            self._timer = None
        self._callback()
