"""
File Watcher Module

Turns watchdog filesystem notifications for a root into a cancellable
stream of change signals. Every created, modified, deleted or moved event
anywhere below the root produces exactly one signal; nothing is coalesced.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from mediadex.domain.exceptions import WatchError

logger = logging.getLogger(__name__)

# Open/close notifications are reads, not changes.
WATCHED_EVENT_TYPES = frozenset({
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
})


@dataclass(frozen=True)
class ChangeSignal:
    """One observed filesystem change below a watched root."""

    event_type: str
    src_path: str
    dest_path: Optional[str] = None
    is_directory: bool = False


_END = object()

_StreamItem = Union[ChangeSignal, WatchError, object]


class ChangeStream:
    """
    Stream of change signals for one watched root.

    Iterating blocks until the next signal and ends when the stream is
    cancelled. A failed subscription raises its WatchError once from the
    iterator (or from :meth:`get`) and then ends.
    """

    def __init__(self, root: str, join_timeout: float = 5.0):
        self.root = root
        self._join_timeout = join_timeout
        self._queue: "queue.Queue[_StreamItem]" = queue.Queue()
        self._lock = threading.Lock()
        self._cancelled = False
        self._finished = False
        self._error: Optional[WatchError] = None
        self._observer: Optional[BaseObserver] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def closed(self) -> bool:
        """True once the stream was cancelled or failed."""
        with self._lock:
            return self._cancelled or self._finished

    @property
    def error(self) -> Optional[WatchError]:
        """Terminal error of the subscription, if it failed."""
        return self._error

    def get(self, timeout: Optional[float] = None) -> Optional[ChangeSignal]:
        """
        Next signal, or None on timeout or when the stream has ended.

        Raises:
            WatchError: The subscription failed.
        """
        if self._cancelled:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _END:
            # Keep the end marker visible to other consumers.
            self._queue.put(_END)
            return None
        if isinstance(item, WatchError):
            raise item
        if self._cancelled:
            return None
        return item

    def __iter__(self) -> Iterator[ChangeSignal]:
        while True:
            signal = self.get()
            if signal is None:
                return
            yield signal

    def cancel(self) -> None:
        """Stop the subscription. Safe to call repeatedly."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            observer = self._observer
            self._observer = None
        self._queue.put(_END)
        if observer is not None:
            _stop_observer(observer, self._join_timeout)
            logger.info(f"Stopped watching {self.root}")

    def _attach(self, observer: BaseObserver) -> bool:
        """Hand the observer to the stream; False if the stream already ended."""
        with self._lock:
            if self._cancelled or self._finished:
                return False
            self._observer = observer
            return True

    def emit(self, signal: ChangeSignal) -> None:
        """Queue a signal for consumers; ignored once the stream has ended."""
        with self._lock:
            if self._cancelled or self._finished:
                return
            self._queue.put(signal)

    def fail(self, error: WatchError) -> None:
        """End the stream with a terminal error and stop its observer."""
        with self._lock:
            if self._cancelled or self._finished:
                return
            self._finished = True
            self._error = error
            observer = self._observer
            self._observer = None
            self._queue.put(error)
            self._queue.put(_END)
        logger.error(str(error))
        if observer is not None:
            _stop_observer(observer, self._join_timeout)


def _stop_observer(observer: BaseObserver, timeout: float) -> None:
    observer.stop()
    # Failures are reported from the observer's own dispatch thread.
    if threading.current_thread() is not observer and observer.is_alive():
        observer.join(timeout=timeout)


class ChangeEventHandler(FileSystemEventHandler):
    """Watchdog event handler forwarding change events to a stream."""

    def __init__(self, stream: ChangeStream):
        super().__init__()
        self.stream = stream
        self._root = os.path.normpath(stream.root)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in WATCHED_EVENT_TYPES:
            return

        src_path = os.fsdecode(event.src_path)
        dest_path = os.fsdecode(getattr(event, "dest_path", "") or "") or None
        logger.debug(f"{event.event_type}: {src_path}")
        self.stream.emit(ChangeSignal(
            event_type=event.event_type,
            src_path=src_path,
            dest_path=dest_path,
            is_directory=event.is_directory,
        ))

        if os.path.normpath(src_path) == self._root and event.event_type in (
            EVENT_TYPE_DELETED, EVENT_TYPE_MOVED
        ):
            self.stream.fail(WatchError(
                self.stream.root,
                FileNotFoundError(f"watched root was {event.event_type}"),
            ))


class DirectoryWatcher:
    """
    Watches one root directory at a time.

    Uses the watchdog library for efficient file system monitoring. Each
    call to :meth:`watch` cancels the previous subscription and starts a
    fresh observer.
    """

    def __init__(
        self,
        join_timeout: float = 5.0,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ):
        """
        Initialize the directory watcher.

        Args:
            join_timeout: Seconds to wait for an observer thread to stop
            observer_factory: Creates the watchdog observer
        """
        self._join_timeout = join_timeout
        self._observer_factory = observer_factory
        self._lock = threading.Lock()
        self._stream: Optional[ChangeStream] = None

    @property
    def is_running(self) -> bool:
        """Check if a subscription is active."""
        with self._lock:
            return self._stream is not None and not self._stream.closed

    @property
    def watched_root(self) -> Optional[str]:
        with self._lock:
            return self._stream.root if self._stream is not None else None

    def watch(self, root: str) -> ChangeStream:
        """
        Subscribe to changes below ``root``.

        Subscription failures are delivered as a terminal WatchError on
        the returned stream; they are not retried.
        """
        root = os.path.abspath(root)
        self.cancel()

        stream = ChangeStream(root, join_timeout=self._join_timeout)
        with self._lock:
            self._stream = stream

        if not os.path.isdir(root):
            stream.fail(WatchError(root, FileNotFoundError(f"no such directory: {root}")))
            return stream

        observer = self._observer_factory()
        if not stream._attach(observer):
            return stream

        try:
            observer.schedule(ChangeEventHandler(stream), root, recursive=True)
            observer.start()
        except Exception as e:
            stream.fail(WatchError(root, e))
            return stream

        logger.info(f"Watching path: {root} (recursive=True)")
        return stream

    def cancel(self) -> None:
        """Cancel the current subscription, if any. Idempotent."""
        with self._lock:
            stream = self._stream
            self._stream = None
        if stream is not None:
            stream.cancel()
