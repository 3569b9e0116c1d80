from __future__ import annotations

import logging
import threading

from ssmhop.core.models import SessionHandle
from ssmhop.providers.aws.session import SessionBroker
from ssmhop.providers.exceptions import ProviderError

logger = logging.getLogger(__name__)


class SessionCleanup:
    """Close the tracked session exactly once.

    Shared by the executor's ``finally`` block and the SIGTERM handler;
    whichever runs first performs the close, the other becomes a no-op.

    Parameters
    ----------
    cleanup_lock : threading.RLock | None
        Reentrant lock serializing close attempts (created if None); a
        signal handler may run while the main thread holds it
    """

    def __init__(self, cleanup_lock: threading.RLock | None = None) -> None:
        self.cleanup_lock = cleanup_lock or threading.RLock()
        self.broker: SessionBroker | None = None
        self.handle: SessionHandle | None = None
        self.close_attempts = 0

    def track(self, broker: SessionBroker, handle: SessionHandle) -> None:
        """Remember the session to close.

        Parameters
        ----------
        broker : SessionBroker
            Broker that opened the session
        handle : SessionHandle
            The open session
        """
        with self.cleanup_lock:
            self.broker = broker
            self.handle = handle

    def close(self) -> None:
        """Close the tracked session, logging failures instead of raising."""
        with self.cleanup_lock:
            broker, handle = self.broker, self.handle
            self.broker = None
            self.handle = None

            if broker is None or handle is None:
                return

            self.close_attempts += 1
            try:
                broker.close(handle)
            except ProviderError as e:
                logger.warning("Failed to delete session %s: %s", handle.session_id, e)
