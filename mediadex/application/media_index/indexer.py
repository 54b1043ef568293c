"""
Media Indexer - orchestrates load cycles and live updates for one root.

State machine:
    IDLE --select_root--> LOADING --published--> READY
    READY --change signal / refresh--> LOADING --published--> READY
    any --select_root / dispose--> (watch cancelled, snapshot cleared)

Load cycles run on a worker pool and may overlap. Every cycle receives a
generation when it starts; publication is serialized and only a result
newer than the current snapshot, belonging to the current root selection,
is accepted. Older results are dropped.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from mediadex.core.config import IndexSettings
from mediadex.domain.exceptions import (
    MediaIndexError,
    NoRootSelectedError,
    RootNotFoundError,
    ScanIOError,
    WatchError,
)
from mediadex.domain.models import IndexerState, Snapshot
from mediadex.infrastructure.cache import ContentCache

from .file_watcher import ChangeStream, DirectoryWatcher
from .load_cycle import LoadCycle

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Snapshot], None]
ErrorListener = Callable[[MediaIndexError], None]


def _completed(value: Optional[Snapshot] = None) -> "Future[Optional[Snapshot]]":
    future: "Future[Optional[Snapshot]]" = Future()
    future.set_result(value)
    return future


class MediaIndexer:
    """
    Owns the current root, its snapshot and its watch subscription.

    Usage:
        with MediaIndexer() as indexer:
            indexer.subscribe(on_snapshot=render)
            indexer.select_root("/photos").result()
            ...
            indexer.refresh()

    Listeners run on worker or watch threads; they must not block for long.
    """

    def __init__(
        self,
        settings: Optional[IndexSettings] = None,
        cache: Optional[ContentCache] = None,
        watcher: Optional[DirectoryWatcher] = None,
        load_cycle: Optional[LoadCycle] = None,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize the indexer.

        Args:
            settings: Indexing settings; defaults apply when omitted
            cache: Content cache shared by all load cycles
            watcher: Filesystem watcher used after each selection
            load_cycle: Builds snapshots; created from settings and cache
            executor: Runs load cycles; a private thread pool by default
        """
        self.settings = settings or IndexSettings()
        self._cache = cache if cache is not None else ContentCache(
            max_entries=self.settings.cache_max_entries
        )
        self._load_cycle = load_cycle or LoadCycle(self.settings, self._cache)
        self._watcher = watcher or DirectoryWatcher(join_timeout=self.settings.watch_join_timeout)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="mediadex-load",
        )

        self._lock = threading.RLock()
        self._published = threading.Condition(self._lock)
        self._state = IndexerState.IDLE
        self._root: Optional[str] = None
        self._snapshot: Optional[Snapshot] = None
        self._last_error: Optional[MediaIndexError] = None
        self._selection = 0
        self._last_generation = 0
        self._published_generation = 0
        self._in_flight = 0
        self._stream: Optional[ChangeStream] = None
        self._disposed = False

        self._snapshot_listeners: List[SnapshotListener] = []
        self._error_listeners: List[ErrorListener] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> IndexerState:
        with self._lock:
            return self._state

    @property
    def root(self) -> Optional[str]:
        """Currently selected root, None if no root is selected."""
        with self._lock:
            return self._root

    @property
    def snapshot(self) -> Optional[Snapshot]:
        """Current snapshot, None while nothing has been published for the root."""
        with self._lock:
            return self._snapshot

    @property
    def last_error(self) -> Optional[MediaIndexError]:
        """Most recent error reported for the current selection."""
        with self._lock:
            return self._last_error

    @property
    def cache(self) -> ContentCache:
        return self._cache

    @property
    def is_watching(self) -> bool:
        with self._lock:
            return self._stream is not None and not self._stream.closed

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def select_root(self, path: str) -> "Future[Optional[Snapshot]]":
        """
        Make ``path`` the indexed root.

        The previous watch subscription is cancelled and the current
        snapshot cleared before the existence check. The load cycle runs on
        the worker pool; the returned future resolves to the published
        snapshot, or None if a newer result superseded it.

        Raises:
            RootNotFoundError: ``path`` is missing or not a directory. The
                indexer is left IDLE without a snapshot.
        """
        root = os.path.abspath(os.fspath(path))
        with self._lock:
            self._ensure_usable()
            self._selection += 1
            selection = self._selection
            stream, self._stream = self._stream, None
            self._root = None
            self._snapshot = None
            self._last_error = None
            self._in_flight = 0
            self._state = IndexerState.IDLE

        if stream is not None:
            stream.cancel()

        logger.info(f"Selecting root: {root}")
        if not os.path.isdir(root):
            error = RootNotFoundError(root)
            self._report_error(selection, error)
            raise error

        with self._lock:
            if selection != self._selection:
                return _completed()
            self._root = root
        return self._start_cycle(root, selection)

    def refresh(self) -> "Future[Optional[Snapshot]]":
        """
        Re-index the current root, as if a change had been observed.

        Raises:
            NoRootSelectedError: No root is selected.
        """
        with self._lock:
            self._ensure_usable()
            if self._root is None:
                raise NoRootSelectedError()
            root, selection = self._root, self._selection
        logger.info(f"Refresh requested for {root}")
        return self._start_cycle(root, selection)

    def dispose(self) -> None:
        """Cancel watching, drop the snapshot and release the cache. Idempotent."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._selection += 1
            stream, self._stream = self._stream, None
            self._root = None
            self._snapshot = None
            self._in_flight = 0
            self._state = IndexerState.IDLE
            self._snapshot_listeners.clear()
            self._error_listeners.clear()
            self._published.notify_all()

        if stream is not None:
            stream.cancel()
        self._watcher.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._cache.clear()
        logger.info("Media indexer disposed")

    def __enter__(self) -> "MediaIndexer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(
        self,
        on_snapshot: Optional[SnapshotListener] = None,
        on_error: Optional[ErrorListener] = None,
    ) -> Callable[[], None]:
        """
        Register publication and error callbacks.

        Returns:
            A function that removes the registered callbacks.
        """
        with self._lock:
            if on_snapshot is not None:
                self._snapshot_listeners.append(on_snapshot)
            if on_error is not None:
                self._error_listeners.append(on_error)

        def unsubscribe() -> None:
            with self._lock:
                if on_snapshot is not None and on_snapshot in self._snapshot_listeners:
                    self._snapshot_listeners.remove(on_snapshot)
                if on_error is not None and on_error in self._error_listeners:
                    self._error_listeners.remove(on_error)

        return unsubscribe

    def wait_for_snapshot(
        self,
        min_generation: int = 1,
        timeout: Optional[float] = None,
    ) -> Optional[Snapshot]:
        """
        Block until a snapshot with at least ``min_generation`` is current.

        Returns:
            The snapshot, or None on timeout or disposal.
        """
        def ready() -> bool:
            if self._disposed:
                return True
            return self._snapshot is not None and self._snapshot.generation >= min_generation

        with self._published:
            self._published.wait_for(ready, timeout=timeout)
            snapshot = self._snapshot
        if snapshot is not None and snapshot.generation >= min_generation:
            return snapshot
        return None

    # ------------------------------------------------------------------
    # Load cycles
    # ------------------------------------------------------------------

    def _ensure_usable(self) -> None:
        if self._disposed:
            raise RuntimeError("MediaIndexer has been disposed")

    def _start_cycle(self, root: str, selection: int) -> "Future[Optional[Snapshot]]":
        with self._lock:
            if self._disposed or selection != self._selection:
                return _completed()
            self._last_generation += 1
            generation = self._last_generation
            self._in_flight += 1
            self._state = IndexerState.LOADING
            logger.debug(f"Starting load cycle {generation} for {root}")
            return self._executor.submit(self._run_cycle, root, selection, generation)

    def _run_cycle(self, root: str, selection: int, generation: int) -> Optional[Snapshot]:
        try:
            snapshot = self._load_cycle.run(root, generation)
        except MediaIndexError as error:
            logger.error(f"Load cycle {generation} for {root} failed: {error}")
            self._finish_failed(selection, error)
            raise
        except OSError as e:
            error = ScanIOError(root, e)
            logger.error(f"Load cycle {generation} for {root} failed: {error}")
            self._finish_failed(selection, error)
            raise error from e
        except Exception as e:
            logger.exception(f"Load cycle {generation} for {root} crashed")
            error = ScanIOError(root, e)
            self._finish_failed(selection, error)
            raise error from e
        except BaseException:
            self._finish_failed(selection, None)
            raise

        if not self._publish(snapshot, selection):
            return None
        if self.settings.watch_enabled:
            self._ensure_watching(root, selection)
        return snapshot

    def _publish(self, snapshot: Snapshot, selection: int) -> bool:
        with self._published:
            current = not self._disposed and selection == self._selection
            if current:
                self._in_flight -= 1
            accepted = current and snapshot.generation > self._published_generation
            if accepted:
                self._snapshot = snapshot
                self._published_generation = snapshot.generation
                self._published.notify_all()
            if current:
                self._update_state()
            listeners = list(self._snapshot_listeners) if accepted else []

        if not accepted:
            logger.debug(
                f"Discarding load cycle {snapshot.generation} for {snapshot.root} "
                f"(current selection {self._selection}, published generation "
                f"{self._published_generation})"
            )
            return False

        logger.info(
            f"Published snapshot {snapshot.generation} for {snapshot.root}: "
            f"{snapshot.entry_count} entries in {len(snapshot.categories)} categories"
        )
        for listener in listeners:
            self._call_listener(listener, snapshot)
        return True

    def _finish_failed(self, selection: int, error: Optional[MediaIndexError]) -> None:
        with self._lock:
            if self._disposed or selection != self._selection:
                return
            self._in_flight -= 1
            self._update_state()
        if error is not None:
            self._report_error(selection, error)

    def _update_state(self) -> None:
        if self._root is None:
            self._state = IndexerState.IDLE
        elif self._in_flight > 0:
            self._state = IndexerState.LOADING
        elif self._snapshot is not None:
            self._state = IndexerState.READY
        else:
            self._state = IndexerState.IDLE

    # ------------------------------------------------------------------
    # Watching
    # ------------------------------------------------------------------

    def _ensure_watching(self, root: str, selection: int) -> None:
        with self._lock:
            if self._disposed or selection != self._selection or self._stream is not None:
                return
            stream = self._watcher.watch(root)
            self._stream = stream

        thread = threading.Thread(
            target=self._pump,
            args=(stream, root, selection),
            name=f"mediadex-watch-{selection}",
            daemon=True,
        )
        thread.start()

    def _pump(self, stream: ChangeStream, root: str, selection: int) -> None:
        """Start one load cycle per change signal until the stream ends."""
        try:
            for signal in stream:
                with self._lock:
                    if self._disposed or selection != self._selection:
                        return
                logger.debug(f"Change observed ({signal.event_type}): {signal.src_path}")
                self._start_cycle(root, selection)
        except WatchError as error:
            with self._lock:
                if self._stream is stream:
                    self._stream = None
            self._report_error(selection, error)

    # ------------------------------------------------------------------
    # Notification
    # ------------------------------------------------------------------

    def _report_error(self, selection: int, error: MediaIndexError) -> None:
        with self._lock:
            if self._disposed or selection != self._selection:
                return
            self._last_error = error
            listeners = list(self._error_listeners)
        for listener in listeners:
            self._call_listener(listener, error)

    @staticmethod
    def _call_listener(listener: Callable, value) -> None:
        try:
            listener(value)
        except Exception:
            logger.exception(f"Listener {listener!r} failed")
