"""Watch the host document and turn its changes into recompute requests."""

from __future__ import annotations

import logging
import signal
import threading
import time
from collections.abc import Callable
from pathlib import Path

from bs4 import BeautifulSoup, Tag
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import Config
from .document import HostDocument
from .models import (
    REASON_ACTIVATED,
    REASON_MANUAL,
    REASON_MUTATION,
    REASON_REASSIGN,
    RecomputeRequested,
)
from .schema import HostSchema
from .session import Session

log = logging.getLogger(__name__)

# Quiet period before a burst of file events is read as one tick
_SETTLE_SECONDS = 0.25

INACTIVE = "inactive"
ACTIVE = "active"

Listener = Callable[[RecomputeRequested], None]


def _inside(node: Tag, selector: str) -> bool:
    for parent in node.parents:
        if isinstance(parent, BeautifulSoup):
            break
        if parent.css.match(selector):
            return True
    return False


class DocumentWatcher:
    """Observation state machine over successive snapshots of the host document.

    Every call to ``check`` is one observation tick: it emits at most one
    event no matter how much of the watched scope changed.
    """

    def __init__(
        self,
        schema: HostSchema | None = None,
        *,
        on_activate: Callable[[], None] | None = None,
        on_deactivate: Callable[[], None] | None = None,
    ):
        self.schema = schema or HostSchema()
        panel = f"#{self.schema.panel_id}"
        self._refresh_selector = f"{panel} a.btn-icon, {panel} a.btn-icon *"
        self.state = INACTIVE
        self._on_activate = on_activate
        self._on_deactivate = on_deactivate
        self._snapshot: str | None = None
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: RecomputeRequested) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    def check(self, document: HostDocument | None) -> None:
        """Compare *document* with the previous tick and emit what changed."""
        with self._lock:
            root_present = document is not None and document.root() is not None

            if self.state == INACTIVE:
                if not root_present:
                    return
                self.state = ACTIVE
                self._snapshot = document.scope_snapshot()
                log.info("Host view found, tracking time division")
                if self._on_activate is not None:
                    self._on_activate()
                self._emit(RecomputeRequested(REASON_ACTIVATED, immediate=True))
                return

            if not root_present:
                self.state = INACTIVE
                self._snapshot = None
                log.info("Host view gone, stopped tracking")
                if self._on_deactivate is not None:
                    self._on_deactivate()
                return

            snapshot = document.scope_snapshot()
            if snapshot is None:
                log.debug("Watch scope %s not present", self.schema.watch_scope_selector)
                return
            if snapshot == self._snapshot:
                return
            self._snapshot = snapshot
            self._emit(RecomputeRequested(REASON_MUTATION))

    def request_refresh(self) -> None:
        """Manual refresh: recompute right away, without waiting for a change."""
        if self.state != ACTIVE:
            return
        self._emit(RecomputeRequested(REASON_MANUAL, immediate=True))

    def dispatch_click(self, target: Tag) -> bool:
        """Route an interaction on *target*. Returns True if it requested a recompute."""
        if self.state != ACTIVE:
            return False
        if target.css.match(self._refresh_selector):
            self._emit(RecomputeRequested(REASON_MANUAL, immediate=True))
            return True
        # Only facilitator reassignment inside the planner matters
        if target.css.match(self.schema.reassign_selector) and _inside(target, self.schema.root_selector):
            self._emit(RecomputeRequested(REASON_REASSIGN))
            return True
        return False


class _DocumentEventHandler(FileSystemEventHandler):
    """Feeds host document changes on disk into a DocumentWatcher.

    A burst of events (a writer flushing in chunks, our own temp-file rename)
    collapses into one observation tick once the file has been quiet for
    ``_SETTLE_SECONDS``.
    """

    def __init__(self, config: Config, watcher: DocumentWatcher):
        super().__init__()
        self._config = config
        self._watcher = watcher
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def _is_document(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).name == self._config.document_path.name

    def _schedule_tick(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(_SETTLE_SECONDS, self._tick)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _tick(self) -> None:
        path = self._config.document_path
        try:
            if not path.exists():
                self._watcher.check(None)
                return
            document = HostDocument.load(path, self._config.schema)
            if document is None:
                # Unreadable is not the same as gone; wait for the next write
                return
            self._watcher.check(document)
        except Exception:
            log.error("Checking %s failed", path, exc_info=True)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory or not self._is_document(event.src_path):
            return
        log.debug("Host document modified, checking in %.1fs", _SETTLE_SECONDS)
        self._schedule_tick()

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory or not self._is_document(event.src_path):
            return
        self._schedule_tick()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Atomic saves land as a rename onto the document
        if event.is_directory or not self._is_document(event.dest_path):
            return
        self._schedule_tick()

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory or not self._is_document(event.src_path):
            return
        self._schedule_tick()


def watch(config: Config, *, dry_run: bool = False) -> None:
    """Keep the time division panel of the host document current. Blocks until interrupted.

    SIGUSR1 forces an immediate recompute.
    """
    doc_dir = config.document_path.parent

    if not doc_dir.exists():
        log.error("Document directory does not exist: %s", doc_dir)
        raise SystemExit(1)

    session: Session | None = None

    def _activate() -> None:
        nonlocal session
        session = Session(config, dry_run=dry_run)
        session.init(watcher.subscribe)

    def _deactivate() -> None:
        nonlocal session
        if session is not None:
            session.dispose()
            session = None

    watcher = DocumentWatcher(config.schema, on_activate=_activate, on_deactivate=_deactivate)

    log.info("Checking host document...")
    initial = HostDocument.load(config.document_path, config.schema)
    if initial is not None:
        watcher.check(initial)

    handler = _DocumentEventHandler(config, watcher)
    observer = Observer()
    observer.schedule(handler, str(doc_dir), recursive=False)

    stop_event = threading.Event()

    def _shutdown(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        log.info("Received %s, shutting down...", sig_name)
        stop_event.set()

    def _refresh(signum: int, frame: object) -> None:
        log.info("Refresh requested")
        watcher.request_refresh()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)
    if hasattr(signal, "SIGUSR1"):
        signal.signal(signal.SIGUSR1, _refresh)

    observer.start()
    log.info("Watching %s for changes (Ctrl+C to stop)", config.document_path)

    try:
        while not stop_event.is_set():
            time.sleep(1)
    finally:
        observer.stop()
        observer.join()
        handler.cancel()
        _deactivate()
        log.info("Watcher stopped")
