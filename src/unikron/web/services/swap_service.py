"""Swap execution state machine.

Drives one swap attempt through the aggregator and the connected wallet:

    IDLE -> CHECKING_SUPPORT -> CHECKING_BALANCE -> (APPROVING)?
         -> SUBMITTING -> AWAITING_CONFIRMATION -> CONFIRMED | REVERTED

Any non-terminal state may end in ERRORED. The aggregator builds the
transaction; the wallet signs and broadcasts it exactly as built. This
service never holds keys.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from unikron.chains import get_explorer_url, shorten_address
from unikron.config import Settings, get_settings
from unikron.errors import (
    ApprovalRevertError,
    InsufficientBalanceError,
    RemoteQuoteError,
    SwapError,
    SwapInProgressError,
    SwapRevertError,
    TrackerBusyError,
    UnsupportedPairError,
    ValidationError,
    WalletRejectionError,
    WalletStateInvalidatedError,
)
from unikron.routing.base import Quote, SwapRequest
from unikron.routing.pairs import PairSupportResolver
from unikron.routing.symbiosis import AggregatorClient, SwapQuoteData, build_swap_payload
from unikron.utils.locks import SingleFlightGuard
from unikron.utils.units import from_smallest_unit, parse_amount, to_smallest_unit
from unikron.wallet.base import (
    TransactionReceipt,
    TxPayload,
    WalletCapability,
    WalletEvent,
    decode_transfer_amount,
)
from unikron.web.services.transaction_tracker import (
    Transaction,
    TransactionStatus,
    TransactionTracker,
    new_local_id,
)

logger = logging.getLogger(__name__)


class SwapState(str, Enum):
    """States of a swap attempt."""

    IDLE = "idle"
    CHECKING_SUPPORT = "checking_support"
    CHECKING_BALANCE = "checking_balance"
    APPROVING = "approving"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"
    ERRORED = "errored"


TERMINAL_STATES = frozenset({SwapState.CONFIRMED, SwapState.REVERTED, SwapState.ERRORED})


class OutputSource(str, Enum):
    """Where a confirmed swap's output amount came from."""

    TRANSFER_LOG = "transfer_log"  # ERC-20 Transfer to the wallet in the receipt
    AGGREGATOR = "aggregator"  # amountOut of the built transaction
    QUOTE = "quote"  # caller's pre-submission quote
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SwapSuccess:
    """Swap confirmed on-chain."""

    output_amount: str
    tx_hash: str
    explorer_url: str
    output_source: OutputSource = OutputSource.UNKNOWN

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class SwapFailure:
    """Swap attempt ended without a confirmed swap."""

    reason: str
    code: str
    tx_hash: Optional[str] = None
    explorer_url: Optional[str] = None

    @property
    def success(self) -> bool:
        return False


SwapOutcome = Union[SwapSuccess, SwapFailure]


class SwapExecutor:
    """Runs swap attempts for one session.

    Only one attempt may be in flight per session; a concurrent call is
    rejected right away without touching the tracker or the state. No
    step is retried automatically.
    """

    def __init__(
        self,
        aggregator: AggregatorClient,
        wallet: WalletCapability,
        tracker: TransactionTracker,
        resolver: Optional[PairSupportResolver] = None,
        settings: Optional[Settings] = None,
        session_id: str = "default",
    ):
        self.aggregator = aggregator
        self.wallet = wallet
        self.tracker = tracker
        self.resolver = resolver or PairSupportResolver(aggregator)
        self.settings = settings or get_settings()
        self.session_id = session_id

        self._state = SwapState.IDLE
        self._transitions: list[SwapState] = [SwapState.IDLE]
        self._tx_id: Optional[str] = None
        self._tx_hash: Optional[str] = None
        self._invalidated: Optional[WalletEvent] = None
        self._unsubscribe = wallet.subscribe(self._on_wallet_event)

    @property
    def state(self) -> SwapState:
        return self._state

    @property
    def transitions(self) -> list[SwapState]:
        """States visited by the current (or last) attempt, in order."""
        return list(self._transitions)

    @property
    def is_busy(self) -> bool:
        return self._state != SwapState.IDLE and self._state not in TERMINAL_STATES

    def reset(self) -> None:
        """Return a finished executor to IDLE.

        Raises:
            SwapInProgressError: an attempt is still running
        """
        if self.is_busy:
            raise SwapInProgressError()
        self._state = SwapState.IDLE
        self._transitions = [SwapState.IDLE]
        self._tx_id = None
        self._tx_hash = None
        self._invalidated = None

    def close(self) -> None:
        """Stop listening to wallet events."""
        self._unsubscribe()

    async def execute(self, request: SwapRequest, quote: Optional[Quote] = None) -> SwapOutcome:
        """Run a swap attempt to a terminal state.

        Args:
            request: Swap to perform
            quote: Quote shown to the user, used as the last-resort output amount

        Returns:
            SwapSuccess or SwapFailure; never raises
        """
        try:
            async with SingleFlightGuard(self.session_id, operation="swap"):
                return await self._execute(request, quote)
        except SwapInProgressError as e:
            return SwapFailure(reason=e.message, code=e.code)

    async def _execute(self, request: SwapRequest, quote: Optional[Quote]) -> SwapOutcome:
        self.reset()
        logger.info(
            f"Swap {self.session_id}: {request.amount} {request.from_token} -> {request.to_token} "
            f"for {shorten_address(request.wallet_address)}"
        )

        try:
            amount_units = self._validate(request)
            return await self._run(request, quote, amount_units)
        except SwapError as e:
            return self._fail(request, e, e.message, e.code)
        except Exception as e:
            logger.error(f"Unexpected swap error in {self._state.value}: {type(e).__name__}: {e}", exc_info=True)
            return self._fail(request, e, str(e) or type(e).__name__, "unexpected_error")

    def _validate(self, request: SwapRequest) -> int:
        """Local precondition checks; no I/O.

        Returns:
            Input amount in from_token smallest units
        """
        if request.from_token.same_asset(request.to_token):
            raise ValidationError("cannot swap a token for itself")

        amount = parse_amount(request.amount)
        if amount is None or amount <= 0:
            raise ValidationError("amount must be greater than zero")

        if not request.wallet_address:
            raise ValidationError("wallet not connected")

        try:
            return to_smallest_unit(amount, request.from_token.decimals)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    async def _run(self, request: SwapRequest, quote: Optional[Quote], amount_units: int) -> SwapOutcome:
        from_token = request.from_token
        to_token = request.to_token
        chain_id = from_token.resolved_chain_id

        self._transition(SwapState.CHECKING_SUPPORT)
        supported = await self.resolver.is_supported(from_token, to_token, request.is_testnet)
        self._check_wallet()
        if not supported:
            raise UnsupportedPairError()

        self._transition(SwapState.CHECKING_BALANCE)
        await self._check_balance(request, amount_units)
        self._check_wallet()

        self._open_record(request)

        if not from_token.is_native:
            self._transition(SwapState.APPROVING)
            await self._approve(request, amount_units)
            self._check_wallet()

        self._transition(SwapState.SUBMITTING)
        swap_data = await self._build(request)
        self._check_wallet()

        tx = swap_data.tx
        tx_hash = await self.wallet.send_transaction(
            TxPayload(to=tx.to, data=tx.data, value=tx.value, gas_limit=tx.gas_limit)
        )
        explorer_url = get_explorer_url(chain_id, tx_hash, request.is_testnet)
        self.tracker.update(
            self._tx_id, TransactionStatus.PENDING, tx_hash=tx_hash, explorer_url=explorer_url
        )
        self._tx_id = tx_hash
        self._tx_hash = tx_hash
        logger.info(f"Swap {self.session_id}: broadcast {tx_hash}")

        # Once broadcast the swap is on its way; wallet changes no longer abort it.
        self._transition(SwapState.AWAITING_CONFIRMATION)
        receipt = await self.wallet.wait_for_receipt(tx_hash)
        if not receipt.succeeded:
            raise SwapRevertError(tx_hash=tx_hash)

        output_amount, output_source = self._resolve_output(request, receipt, swap_data, quote)
        self._transition(SwapState.CONFIRMED)
        self.tracker.update(tx_hash, TransactionStatus.SUCCESS, output_amount=output_amount)
        logger.info(
            f"Swap {self.session_id} confirmed: {output_amount} {to_token.symbol} "
            f"({output_source.value}) in block {receipt.block_number}"
        )
        return SwapSuccess(
            output_amount=output_amount,
            tx_hash=tx_hash,
            explorer_url=explorer_url,
            output_source=output_source,
        )

    async def _check_balance(self, request: SwapRequest, amount_units: int) -> None:
        try:
            balance = await self.wallet.get_balance(request.from_token, request.wallet_address)
        except Exception as e:
            # A failed query is not a verdict; the chain rejects real shortfalls later.
            logger.warning(f"Balance check failed, continuing: {type(e).__name__}: {e}")
            return

        if balance < amount_units:
            logger.info(f"Insufficient {request.from_token.symbol}: have {balance}, need {amount_units}")
            raise InsufficientBalanceError()

    def _open_record(self, request: SwapRequest) -> None:
        tx = Transaction(
            id=new_local_id(),
            status=TransactionStatus.PENDING,
            request=request.snapshot(),
            chain_id=request.from_token.resolved_chain_id,
        )
        self.tracker.record(tx)
        self._tx_id = tx.id

    async def _approve(self, request: SwapRequest, amount_units: int) -> None:
        spender = self.settings.approval_spender
        try:
            approval_hash = await self.wallet.approve(request.from_token.address, spender, amount_units)
        except WalletRejectionError as e:
            raise WalletRejectionError("approval failed") from e

        receipt = await self.wallet.wait_for_receipt(approval_hash)
        if not receipt.succeeded:
            raise ApprovalRevertError(tx_hash=approval_hash)
        logger.info(f"Approval {approval_hash} confirmed for {shorten_address(spender)}")

    async def _build(self, request: SwapRequest) -> SwapQuoteData:
        try:
            payload = build_swap_payload(
                request.from_token,
                request.to_token,
                request.amount,
                request.wallet_address,
                request.slippage,
            )
            return await self.aggregator.build_swap(payload, request.is_testnet)
        except RemoteQuoteError as e:
            logger.warning(f"Swap build failed: {e.message}")
            raise type(e)("quote/build failed", status_code=e.status_code) from e
        except ValueError as e:
            logger.warning(f"Swap build failed: {e}")
            raise RemoteQuoteError("quote/build failed") from e

    def _resolve_output(
        self,
        request: SwapRequest,
        receipt: TransactionReceipt,
        swap_data: SwapQuoteData,
        quote: Optional[Quote],
    ) -> tuple[str, OutputSource]:
        to_token = request.to_token
        token_address = None if to_token.is_native else to_token.address

        units = decode_transfer_amount(receipt, token_address, request.wallet_address)
        if units is not None:
            return from_smallest_unit(units, to_token.decimals), OutputSource.TRANSFER_LOG

        try:
            return from_smallest_unit(swap_data.amount_out.amount, to_token.decimals), OutputSource.AGGREGATOR
        except ValueError:
            logger.debug("Aggregator amountOut unusable, falling back to quote")

        if quote is not None and quote.has_amount:
            return quote.output_amount, OutputSource.QUOTE
        return "", OutputSource.UNKNOWN

    def _fail(self, request: SwapRequest, error: Exception, reason: str, code: str) -> SwapFailure:
        terminal = SwapState.REVERTED if isinstance(error, SwapRevertError) else SwapState.ERRORED
        self._transition(terminal)

        tx_hash = getattr(error, "tx_hash", None) or self._tx_hash
        chain_id = request.from_token.resolved_chain_id
        explorer_url = get_explorer_url(chain_id, tx_hash, request.is_testnet) if tx_hash else None

        current = self.tracker.current()
        try:
            if self._tx_id is not None and current is not None and current.id == self._tx_id:
                self.tracker.update(self._tx_id, TransactionStatus.ERROR, error=reason)
            else:
                self.tracker.record(
                    Transaction(
                        id=tx_hash or new_local_id(),
                        status=TransactionStatus.ERROR,
                        request=request.snapshot(),
                        chain_id=chain_id,
                        tx_hash=tx_hash,
                        error=reason,
                        explorer_url=explorer_url,
                    )
                )
        except (KeyError, TrackerBusyError) as e:
            logger.error(f"Could not record failed swap: {e}")

        logger.warning(f"Swap {self.session_id} {terminal.value}: {reason} ({code})")
        return SwapFailure(reason=reason, code=code, tx_hash=tx_hash, explorer_url=explorer_url)

    def _transition(self, state: SwapState) -> None:
        logger.debug(f"Swap {self.session_id}: {self._state.value} -> {state.value}")
        self._state = state
        self._transitions.append(state)

    def _check_wallet(self) -> None:
        if self._invalidated is not None:
            raise WalletStateInvalidatedError()

    def _on_wallet_event(self, event: WalletEvent) -> None:
        if self.is_busy:
            logger.warning(f"Swap {self.session_id}: wallet {event.type.value} during {self._state.value}")
            self._invalidated = event
        else:
            logger.info(f"Swap {self.session_id}: wallet {event.type.value} while idle")
