"""Lifecycle state for one appearance of the host view."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from bs4 import Tag

from .config import Config
from .cycle import CycleResult, run_cycle
from .models import Aggregate, RecomputeRequested
from .scheduler import Debouncer

log = logging.getLogger(__name__)


class Session:
    """Owns the panel, anchor, pending timer and event subscription.

    Created when the host root shows up and disposed when it goes away.
    """

    def __init__(self, config: Config, *, dry_run: bool = False):
        self._config = config
        self._dry_run = dry_run
        self._lock = threading.Lock()
        self._debouncer: Debouncer | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self.panel: Tag | None = None
        self.anchor: Tag | None = None
        self.last_aggregate: Aggregate | None = None

    @property
    def active(self) -> bool:
        return self._debouncer is not None

    def init(self, subscribe: Callable[[Callable[[RecomputeRequested], None]], Callable[[], None]]) -> None:
        """Start receiving recompute requests from *subscribe*."""
        if self.active:
            return
        self._debouncer = Debouncer(self._do_cycle)
        self._unsubscribe = subscribe(self.handle)
        log.debug("Session started")

    def dispose(self) -> None:
        if self._debouncer is not None:
            self._debouncer.cancel()
            self._debouncer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.panel = None
        self.anchor = None
        log.debug("Session disposed")

    def handle(self, event: RecomputeRequested) -> None:
        debouncer = self._debouncer
        if debouncer is None:
            return
        delay_ms = 0 if event.immediate else self._config.debounce_ms
        log.debug("Recompute requested (%s)", event.reason)
        debouncer.schedule(delay_ms)

    def _do_cycle(self) -> None:
        try:
            with self._lock:
                result = run_cycle(self._config, self.panel, dry_run=self._dry_run)
                if result is not None:
                    self._remember(result)
            if result is not None and result.stale:
                self._retry()
        except Exception:
            log.error("Time division update failed", exc_info=True)

    def _retry(self) -> None:
        debouncer = self._debouncer
        if debouncer is not None:
            log.debug("Document changed during update, trying again")
            debouncer.schedule(self._config.debounce_ms)

    def _remember(self, result: CycleResult) -> None:
        self.panel = result.panel
        if result.anchor is not None:
            self.anchor = result.anchor
        self.last_aggregate = result.aggregate
