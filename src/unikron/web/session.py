"""Per-session swap state.

Every UI session owns its wallet adapter, transaction tracker and swap
executor. The aggregator client is shared by all sessions. Session ids
come from clients, so the registry is bounded: once full, the least
recently used idle session is evicted and its wallet closed.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from unikron.config import Settings, get_settings
from unikron.routing.pairs import PairSupportResolver
from unikron.routing.symbiosis import AggregatorClient
from unikron.utils.locks import drop_session_lock, is_session_busy
from unikron.wallet.base import WalletCapability
from unikron.wallet.factory import create_wallet
from unikron.web.services.swap_service import SwapExecutor
from unikron.web.services.transaction_tracker import TransactionTracker

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"

WalletFactory = Callable[[Settings], WalletCapability]


@dataclass
class Session:
    """Swap collaborators owned by one UI session."""

    session_id: str
    wallet: WalletCapability
    tracker: TransactionTracker
    executor: SwapExecutor

    @property
    def is_busy(self) -> bool:
        return self.executor.is_busy or is_session_busy(self.session_id)


class SessionRegistry:
    """Creates sessions on first use and keeps the most recently used ones."""

    def __init__(
        self,
        aggregator: AggregatorClient,
        settings: Optional[Settings] = None,
        wallet_factory: Optional[WalletFactory] = None,
        max_sessions: Optional[int] = None,
    ):
        self.aggregator = aggregator
        self.settings = settings or get_settings()
        self.resolver = PairSupportResolver(aggregator)
        self.max_sessions = max_sessions or self.settings.max_sessions
        self._wallet_factory = wallet_factory or create_wallet
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    async def get(self, session_id: str = DEFAULT_SESSION_ID) -> Session:
        """Get or create a session, evicting idle ones when full."""
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
            return session

        await self._evict_idle()

        # Another request may have created it while evicting
        session = self._sessions.get(session_id)
        if session is None:
            session = self._create(session_id)
            self._sessions[session_id] = session
        return session

    def _create(self, session_id: str) -> Session:
        wallet = self._wallet_factory(self.settings)
        tracker = TransactionTracker(history_size=self.settings.history_size)
        executor = SwapExecutor(
            aggregator=self.aggregator,
            wallet=wallet,
            tracker=tracker,
            resolver=self.resolver,
            settings=self.settings,
            session_id=session_id,
        )
        logger.info(f"Created session {session_id} with {wallet.name} wallet")
        return Session(session_id, wallet, tracker, executor)

    async def _evict_idle(self) -> None:
        """Make room for one more session, oldest idle sessions first."""
        for session_id in list(self._sessions):
            if len(self._sessions) < self.max_sessions:
                return
            session = self._sessions.get(session_id)
            if session is None or session.is_busy:
                continue
            del self._sessions[session_id]
            logger.info(f"Evicting idle session {session_id}")
            await self._close_session(session)

        if len(self._sessions) >= self.max_sessions:
            logger.warning(f"All {len(self._sessions)} sessions are busy; registry over capacity")

    async def _close_session(self, session: Session) -> None:
        session.executor.close()
        drop_session_lock(session.session_id)
        close = getattr(session.wallet, "close", None)
        if close is not None:
            await close()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def close(self) -> None:
        """Detach executors and close wallet connections."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await self._close_session(session)
