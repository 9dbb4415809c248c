"""Transaction tracking for swap feedback.

Holds the single "current" transaction of a session plus a bounded,
most-recent-first history for the transaction-history view. The swap
executor is the only writer; UIs read and subscribe.
"""

import logging
import time
import uuid
from collections import deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Callable, Optional

from unikron.errors import TrackerBusyError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 20


class TransactionStatus(str, Enum):
    """Lifecycle status of a tracked swap."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


def new_local_id() -> str:
    """Placeholder id used until the swap has a transaction hash."""
    return f"local-{uuid.uuid4().hex}"


@dataclass
class Transaction:
    """A tracked swap attempt."""

    id: str
    status: TransactionStatus
    request: dict = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    chain_id: Optional[int] = None
    tx_hash: Optional[str] = None
    output_amount: Optional[str] = None
    error: Optional[str] = None
    explorer_url: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


TrackerListener = Callable[[Transaction], object]


class TransactionTracker:
    """Single current-transaction slot with a capped history."""

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE):
        if history_size < 1:
            raise ValueError("history_size must be at least 1")
        self._current: Optional[Transaction] = None
        self._history: deque[Transaction] = deque(maxlen=history_size)
        self._listeners: list[TrackerListener] = []

    def current(self) -> Optional[Transaction]:
        """The transaction currently being shown, if any."""
        return self._current

    def history(self) -> list[Transaction]:
        """Tracked transactions, most recent first."""
        return list(self._history)

    def record(self, tx: Transaction) -> Transaction:
        """Make tx the current transaction and prepend it to the history.

        Raises:
            TrackerBusyError: the current transaction is still pending
        """
        if self._current is not None and self._current.is_pending:
            raise TrackerBusyError(
                f"Transaction {self._current.id} is still pending"
            )

        self._current = tx
        self._history.appendleft(tx)
        logger.debug(f"Tracking transaction {tx.id} ({tx.status.value})")
        self._notify(tx)
        return tx

    def update(
        self,
        tx_id: str,
        status: TransactionStatus,
        output_amount: Optional[str] = None,
        tx_hash: Optional[str] = None,
        error: Optional[str] = None,
        explorer_url: Optional[str] = None,
    ) -> Transaction:
        """Update the current transaction.

        Passing tx_hash re-keys a placeholder record to the broadcast hash.

        Raises:
            KeyError: tx_id is not the current transaction
        """
        tx = self._current
        if tx is None or tx.id != tx_id:
            raise KeyError(f"Transaction {tx_id} is not the current transaction")

        tx.status = status
        if tx_hash:
            tx.id = tx_hash
            tx.tx_hash = tx_hash
        if output_amount is not None:
            tx.output_amount = output_amount
        if error is not None:
            tx.error = error
        if explorer_url is not None:
            tx.explorer_url = explorer_url

        logger.debug(f"Transaction {tx.id} -> {status.value}")
        self._notify(tx)
        return tx

    def reset(self) -> None:
        """Clear the current slot (history is kept)."""
        self._current = None

    def subscribe(self, listener: TrackerListener) -> Callable[[], None]:
        """Call listener with every recorded or updated transaction."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, tx: Transaction) -> None:
        for listener in list(self._listeners):
            try:
                listener(tx)
            except Exception as e:
                logger.error(f"Transaction listener failed for {tx.id}: {e}")
