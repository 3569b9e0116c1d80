"""Signal handling for session cleanup and interrupt absorption."""

from __future__ import annotations

import logging
import queue
import signal
import sys
import threading
import types
from collections.abc import Iterable
from typing import Any, Protocol

from ssmhop.constants import EXIT_SIGTERM

logger = logging.getLogger(__name__)


class CleanupHandler(Protocol):
    """Protocol for objects that can tear down the active session."""

    def close(self) -> None:
        """Close the active session, if any."""
        ...


class CleanupInstanceManager:
    """Thread-safe holder for the cleanup handler used by signal handlers.

    A single lock guards both retrieval and invocation, so a handler cannot
    be swapped out between the check and the call.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._instance: CleanupHandler | None = None

    def set(self, instance: CleanupHandler | None) -> None:
        """Set the cleanup handler.

        Parameters
        ----------
        instance : CleanupHandler | None
            Handler closing the active session, or None to clear it
        """
        with self._lock:
            self._instance = instance

    def get(self) -> CleanupHandler | None:
        """Get the current cleanup handler."""
        with self._lock:
            return self._instance

    def cleanup_with_lock(self) -> None:
        """Invoke the registered handler while holding the lock."""
        with self._lock:
            instance = self._instance
            if instance is not None:
                instance.close()


_cleanup_manager = CleanupInstanceManager()


def setup_signal_handlers() -> None:
    """Register a SIGTERM handler that closes the active session and exits.

    SIGINT is left alone here: outside the transport process it raises
    KeyboardInterrupt, which unwinds through the executor's ``finally``.
    """

    def sigterm_handler(signum: int, frame: types.FrameType | None) -> None:
        """Handle SIGTERM signal."""
        logger.info("Termination requested, closing session...")
        _cleanup_manager.cleanup_with_lock()
        sys.exit(EXIT_SIGTERM)

    signal.signal(signal.SIGTERM, sigterm_handler)


def set_cleanup_instance(instance: CleanupHandler | None) -> None:
    """Set the handler invoked by the SIGTERM handler."""
    _cleanup_manager.set(instance)


def get_cleanup_instance() -> CleanupHandler | None:
    """Get the handler invoked by the SIGTERM handler."""
    return _cleanup_manager.get()


class InterruptAbsorber:
    """Discard interrupt signals for the lifetime of a ``with`` block.

    While active, the given signals are queued by a lightweight handler and
    drained by one worker thread that simply counts and drops them. Leaving
    the block sets the completion event, wakes the worker with a sentinel,
    joins it and restores the previous handlers on every exit path.
    ``SimpleQueue.put`` is reentrant, so the handler may interrupt the main
    thread while it is enqueueing the sentinel.

    Parameters
    ----------
    signals : Iterable[int]
        Signals to absorb (default: SIGINT)

    Attributes
    ----------
    absorbed : int
        Number of signals discarded so far
    """

    def __init__(self, signals: Iterable[int] = (signal.SIGINT,)) -> None:
        self.signals = tuple(signals)
        self.absorbed = 0
        self._queue: queue.SimpleQueue[int | None] = queue.SimpleQueue()
        self._done = threading.Event()
        self._previous: dict[int, Any] = {}
        self._thread: threading.Thread | None = None

    @property
    def finished(self) -> bool:
        """Whether the block has been left."""
        return self._done.is_set()

    @property
    def is_active(self) -> bool:
        """Whether the drain thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def _enqueue(self, signum: int, frame: types.FrameType | None) -> None:
        self._queue.put(signum)

    def _drain(self) -> None:
        for signum in iter(self._queue.get, None):
            self.absorbed += 1
            logger.debug("Ignored signal %s while transport is running", signum)

    def _install_handlers(self) -> None:
        try:
            for signum in self.signals:
                self._previous[signum] = signal.signal(signum, self._enqueue)
        except ValueError:
            logger.debug("Not on the main thread, interrupts will not be absorbed")
            self._restore_handlers()

    def _restore_handlers(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def __enter__(self) -> InterruptAbsorber:
        self._install_handlers()
        self._thread = threading.Thread(
            target=self._drain, name="interrupt-absorber", daemon=True
        )
        self._thread.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        try:
            self._done.set()
            self._queue.put(None)
            if self._thread is not None:
                self._thread.join()
        finally:
            self._restore_handlers()
