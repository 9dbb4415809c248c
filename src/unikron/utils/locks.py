"""Single-flight guards for swap sessions.

Only one swap may run per session. Unlike a waiting lock, a second
attempt is rejected immediately instead of being queued behind the
first one.
"""

import asyncio
import logging
from typing import Optional

from unikron.errors import SwapInProgressError

logger = logging.getLogger(__name__)

# Lock registry: session_id -> asyncio.Lock
_session_locks: dict[str, asyncio.Lock] = {}


def get_session_lock(session_id: str) -> asyncio.Lock:
    """Get or create the lock for a swap session.

    Args:
        session_id: UI session identifier

    Returns:
        asyncio.Lock for the session
    """
    lock = _session_locks.get(session_id)
    if lock is None:
        lock = asyncio.Lock()
        _session_locks[session_id] = lock
    return lock


def drop_session_lock(session_id: str) -> None:
    """Forget the lock of a session that is no longer tracked."""
    _session_locks.pop(session_id, None)


def is_session_busy(session_id: str) -> bool:
    """Check whether a swap is currently running for the session."""
    lock = _session_locks.get(session_id)
    return bool(lock and lock.locked())


class SingleFlightGuard:
    """Context manager granting exclusive, non-waiting access to a session.

    Example:
        async with SingleFlightGuard(session_id, operation="swap"):
            await executor.run_steps(...)

    Raises:
        SwapInProgressError: if the session is already busy
    """

    def __init__(self, session_id: str, operation: str = "swap"):
        self.session_id = session_id
        self.operation = operation
        self._lock: Optional[asyncio.Lock] = None
        self._acquired = False

    async def __aenter__(self) -> "SingleFlightGuard":
        """Acquire the session lock or fail right away."""
        self._lock = get_session_lock(self.session_id)

        # No await between the check and the acquire, so nothing can
        # slip in on a single event loop.
        if self._lock.locked():
            logger.warning(
                f"Rejected {self.operation} for session {self.session_id}: already in flight"
            )
            raise SwapInProgressError()

        await self._lock.acquire()
        self._acquired = True
        logger.debug(f"Lock acquired for session {self.session_id}: {self.operation}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Release the lock."""
        if self._acquired and self._lock:
            self._lock.release()
            self._acquired = False
            logger.debug(f"Lock released for session {self.session_id}: {self.operation}")
        return False


def clear_session_locks() -> None:
    """Clear all session locks (useful for testing)."""
    _session_locks.clear()
