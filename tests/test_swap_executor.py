"""Tests for the swap execution state machine."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import WALLET, FakeAggregatorAPI, raise_timeout, swap_body
from unikron.assets import Token
from unikron.errors import SwapInProgressError, WalletError
from unikron.routing.base import Quote, QuoteSource, SwapRequest
from unikron.wallet.base import (
    ERC20_TRANSFER_TOPIC,
    TransactionReceipt,
    TxPayload,
    WalletCapability,
)
from unikron.wallet.dryrun import DryRunWallet
from unikron.web.services.swap_service import (
    OutputSource,
    SwapExecutor,
    SwapFailure,
    SwapState,
    SwapSuccess,
)
from unikron.web.services.transaction_tracker import TransactionStatus, TransactionTracker

EXECUTE_PATH = "/v1/swap/execute"
ROUTES_PATH = "/v1/tokens/routes"


def swap_request(from_token, to_token, amount="2", **kwargs) -> SwapRequest:
    kwargs.setdefault("wallet_address", WALLET)
    return SwapRequest(from_token=from_token, to_token=to_token, amount=amount, **kwargs)


def execute_api(response=None) -> FakeAggregatorAPI:
    return FakeAggregatorAPI().on("POST", EXECUTE_PATH, response or (200, swap_body()))


@pytest.fixture
def build_executor(make_aggregator, settings):
    """Build an executor over a fake API and a wallet (dry-run by default)."""

    def factory(api=None, wallet=None, session_id="test-session"):
        wallet = wallet or DryRunWallet(address=WALLET)
        tracker = TransactionTracker(history_size=settings.history_size)
        executor = SwapExecutor(
            make_aggregator(api or execute_api()),
            wallet,
            tracker,
            settings=settings,
            session_id=session_id,
        )
        return executor, wallet, tracker

    return factory


class BlockingWallet(DryRunWallet):
    """Dry-run wallet whose signing step waits until released."""

    def __init__(self):
        super().__init__(address=WALLET)
        self.signing = asyncio.Event()
        self.release = asyncio.Event()

    async def send_transaction(self, tx: TxPayload) -> str:
        self.signing.set()
        await self.release.wait()
        return await super().send_transaction(tx)


class ChainSwitchingWallet(DryRunWallet):
    """Dry-run wallet where the user switches chain during the balance check."""

    async def get_balance(self, token, address):
        self.switch_chain(42161)
        return await super().get_balance(token, address)


class TestSuccessfulSwaps:
    """Happy paths through the state machine."""

    @pytest.mark.asyncio
    async def test_native_swap(self, build_executor, eth, usdt):
        api = execute_api()
        executor, wallet, tracker = build_executor(api)

        outcome = await executor.execute(swap_request(eth, usdt, slippage=1))

        assert isinstance(outcome, SwapSuccess)
        assert outcome.success is True
        assert outcome.output_amount == "7000"
        assert outcome.output_source == OutputSource.AGGREGATOR
        assert outcome.explorer_url == f"https://etherscan.io/tx/{outcome.tx_hash}"
        assert executor.state == SwapState.CONFIRMED
        assert executor.transitions == [
            SwapState.IDLE,
            SwapState.CHECKING_SUPPORT,
            SwapState.CHECKING_BALANCE,
            SwapState.SUBMITTING,
            SwapState.AWAITING_CONFIRMATION,
            SwapState.CONFIRMED,
        ]
        assert wallet.approvals == []

        body = json.loads(api.calls[0].content)
        assert body["slippage"] == 1
        assert body["fromAmount"] == str(2 * 10**18)

        current = tracker.current()
        assert current.status == TransactionStatus.SUCCESS
        assert current.id == outcome.tx_hash
        assert current.tx_hash == outcome.tx_hash
        assert current.output_amount == "7000"
        assert current.explorer_url == outcome.explorer_url

    @pytest.mark.asyncio
    async def test_transaction_passed_verbatim(self, build_executor, eth, usdt):
        executor, wallet, _ = build_executor()

        await executor.execute(swap_request(eth, usdt))

        assert wallet.sent == [
            TxPayload(
                to="0x6571d6be3d8460CF5F7d6711Cd9961860029D05F",
                data="0xdeadbeef",
                value="2000000000000000000",
                gas_limit="350000",
            )
        ]

    @pytest.mark.asyncio
    async def test_erc20_swap_approves_first(self, build_executor, settings, usdt, eth):
        executor, wallet, _ = build_executor()

        outcome = await executor.execute(swap_request(usdt, eth, amount="2500"))

        assert outcome.success is True
        assert wallet.approvals == [(usdt.address, settings.approval_spender, 2_500_000_000)]
        assert executor.transitions == [
            SwapState.IDLE,
            SwapState.CHECKING_SUPPORT,
            SwapState.CHECKING_BALANCE,
            SwapState.APPROVING,
            SwapState.SUBMITTING,
            SwapState.AWAITING_CONFIRMATION,
            SwapState.CONFIRMED,
        ]

    @pytest.mark.asyncio
    async def test_output_from_transfer_log(self, build_executor, eth, usdt):
        executor, wallet, _ = build_executor()

        async def receipt_with_transfer(tx_hash):
            return TransactionReceipt(
                tx_hash=tx_hash,
                status=1,
                block_number=100,
                logs=[
                    {
                        "address": usdt.address.lower(),
                        "topics": [
                            ERC20_TRANSFER_TOPIC,
                            "0x" + "0" * 24 + "6571d6be3d8460cf5f7d6711cd9961860029d05f",
                            "0x" + "0" * 24 + WALLET[2:].lower(),
                        ],
                        "data": "0x" + format(6_990_000_000, "064x"),
                    }
                ],
            )

        wallet.wait_for_receipt = receipt_with_transfer

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.output_amount == "6990"
        assert outcome.output_source == OutputSource.TRANSFER_LOG

    @pytest.mark.asyncio
    async def test_output_falls_back_to_quote(self, build_executor, eth, usdt):
        api = execute_api((200, swap_body(amount_out="not-a-number")))
        executor, _, tracker = build_executor(api)
        quote = Quote(output_amount="6999.5", source=QuoteSource.REMOTE)

        outcome = await executor.execute(swap_request(eth, usdt), quote)

        assert outcome.output_amount == "6999.5"
        assert outcome.output_source == OutputSource.QUOTE
        assert tracker.current().output_amount == "6999.5"

    @pytest.mark.asyncio
    async def test_wallet_events_while_idle_are_ignored(self, build_executor, eth, usdt):
        executor, wallet, _ = build_executor()

        wallet.switch_account("0x2222222222222222222222222222222222222222")
        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.success is True


class TestValidation:
    """Local precondition failures."""

    @pytest.mark.asyncio
    async def test_same_token_rejected_without_io(self, build_executor, usdt):
        api = FakeAggregatorAPI()
        wallet = MagicMock(spec=WalletCapability)
        executor, _, tracker = build_executor(api, wallet=wallet)
        same = Token(
            symbol="USDT",
            name="Tether",
            decimals=6,
            network="ethereum",
            address=usdt.address.lower(),
        )

        outcome = await executor.execute(swap_request(usdt, same))

        assert isinstance(outcome, SwapFailure)
        assert outcome.code == "validation_error"
        assert api.calls == []
        wallet.get_balance.assert_not_called()
        wallet.approve.assert_not_called()
        wallet.send_transaction.assert_not_called()
        assert executor.transitions == [SwapState.IDLE, SwapState.ERRORED]
        assert tracker.current().status == TransactionStatus.ERROR

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "amount,wallet_address",
        [("0", WALLET), ("-1", WALLET), ("", WALLET), ("abc", WALLET), ("1", None), ("1", "")],
    )
    async def test_invalid_inputs(self, build_executor, eth, usdt, amount, wallet_address):
        api = FakeAggregatorAPI()
        executor, _, _ = build_executor(api)

        outcome = await executor.execute(
            swap_request(eth, usdt, amount=amount, wallet_address=wallet_address)
        )

        assert outcome.code == "validation_error"
        assert executor.state == SwapState.ERRORED
        assert api.calls == []

    @pytest.mark.asyncio
    async def test_too_precise_amount_rejected(self, build_executor, usdt, eth):
        outcome = await build_executor()[0].execute(swap_request(usdt, eth, amount="1.0000001"))

        assert outcome.code == "validation_error"


class TestFailures:
    """Failures at each step."""

    @pytest.mark.asyncio
    async def test_unsupported_pair(self, build_executor, pepe, link):
        api = FakeAggregatorAPI().on("GET", ROUTES_PATH, (200, []))
        wallet = DryRunWallet(address=WALLET)
        wallet.get_balance = AsyncMock(return_value=10**30)
        executor, _, tracker = build_executor(api, wallet=wallet)

        outcome = await executor.execute(swap_request(pepe, link))

        assert outcome.reason == "pair not supported"
        assert outcome.code == "unsupported_pair"
        wallet.get_balance.assert_not_called()
        assert tracker.current().status == TransactionStatus.ERROR

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, build_executor, eth, usdt):
        api = execute_api()
        wallet = DryRunWallet(address=WALLET, balances={"ETH": 10**18})
        executor, _, tracker = build_executor(api, wallet=wallet)

        outcome = await executor.execute(swap_request(eth, usdt, amount="2"))

        assert outcome.reason == "insufficient balance"
        assert outcome.code == "insufficient_balance"
        assert api.count(EXECUTE_PATH) == 0
        assert wallet.sent == []
        assert tracker.current().status == TransactionStatus.ERROR

    @pytest.mark.asyncio
    async def test_balance_query_failure_continues(self, build_executor, eth, usdt):
        """A failed balance query does not halt the swap."""
        executor, wallet, _ = build_executor()

        with patch.object(wallet, "get_balance", AsyncMock(side_effect=WalletError("rpc down"))):
            outcome = await executor.execute(swap_request(eth, usdt))

        assert SwapState.SUBMITTING in executor.transitions
        assert outcome.success is True

    @pytest.mark.asyncio
    async def test_approval_rejected(self, build_executor, usdt, eth):
        wallet = DryRunWallet(address=WALLET, reject_signatures=True)
        api = execute_api()
        executor, _, tracker = build_executor(api, wallet=wallet)

        outcome = await executor.execute(swap_request(usdt, eth, amount="10"))

        assert outcome.reason == "approval failed"
        assert outcome.code == "user_rejected"
        assert executor.state == SwapState.ERRORED
        assert api.count(EXECUTE_PATH) == 0
        current = tracker.current()
        assert current.status == TransactionStatus.ERROR
        assert current.error == "approval failed"

    @pytest.mark.asyncio
    async def test_approval_reverted(self, build_executor, usdt, eth):
        wallet = DryRunWallet(address=WALLET, revert_transactions=True)
        executor, _, _ = build_executor(wallet=wallet)

        outcome = await executor.execute(swap_request(usdt, eth, amount="10"))

        assert outcome.reason == "approval failed"
        assert outcome.code == "approval_reverted"
        assert outcome.tx_hash is not None
        assert outcome.explorer_url.endswith(outcome.tx_hash)

    @pytest.mark.asyncio
    async def test_build_failure(self, build_executor, eth, usdt):
        api = execute_api((500, {"message": "Route not found"}))
        executor, wallet, tracker = build_executor(api)

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.reason == "quote/build failed"
        assert outcome.code == "remote_quote_error"
        assert wallet.sent == []
        assert tracker.current().status == TransactionStatus.ERROR

    @pytest.mark.asyncio
    async def test_build_timeout(self, build_executor, eth, usdt):
        executor, _, _ = build_executor(execute_api(raise_timeout))

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.reason == "quote/build failed"
        assert outcome.code == "timeout"

    @pytest.mark.asyncio
    async def test_build_without_transaction(self, build_executor, eth, usdt):
        executor, _, _ = build_executor(execute_api((200, swap_body(with_tx=False))))

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.code == "remote_quote_error"

    @pytest.mark.asyncio
    async def test_signature_rejected(self, build_executor, eth, usdt):
        wallet = DryRunWallet(address=WALLET, reject_signatures=True)
        executor, _, tracker = build_executor(wallet=wallet)

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.reason == "user rejected"
        assert outcome.code == "user_rejected"
        assert outcome.tx_hash is None
        assert tracker.current().status == TransactionStatus.ERROR

    @pytest.mark.asyncio
    async def test_transaction_reverted(self, build_executor, eth, usdt):
        wallet = DryRunWallet(address=WALLET, revert_transactions=True)
        executor, _, tracker = build_executor(wallet=wallet)

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.reason == "transaction reverted"
        assert outcome.code == "transaction_reverted"
        assert executor.state == SwapState.REVERTED
        assert outcome.explorer_url == f"https://etherscan.io/tx/{outcome.tx_hash}"
        current = tracker.current()
        assert current.id == outcome.tx_hash
        assert current.status == TransactionStatus.ERROR

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, build_executor, eth, usdt):
        executor, wallet, tracker = build_executor()
        wallet.send_transaction = AsyncMock(side_effect=RuntimeError("kaboom"))

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.reason == "kaboom"
        assert outcome.code == "unexpected_error"
        assert executor.state == SwapState.ERRORED
        assert tracker.current().status == TransactionStatus.ERROR

    @pytest.mark.asyncio
    async def test_wallet_change_invalidates_swap(self, build_executor, eth, usdt):
        api = execute_api()
        executor, wallet, tracker = build_executor(api, wallet=ChainSwitchingWallet(address=WALLET))

        outcome = await executor.execute(swap_request(eth, usdt))

        assert outcome.reason == "user abandoned"
        assert outcome.code == "wallet_invalidated"
        assert api.count(EXECUTE_PATH) == 0
        assert tracker.current().status == TransactionStatus.ERROR


class TestExecutorLifecycle:
    """Re-entrancy, reset and tracker consistency."""

    @pytest.mark.asyncio
    async def test_second_execute_rejected_while_in_flight(self, build_executor, eth, usdt):
        wallet = BlockingWallet()
        executor, _, tracker = build_executor(wallet=wallet)

        first = asyncio.create_task(executor.execute(swap_request(eth, usdt)))
        await wallet.signing.wait()
        pending = tracker.current()
        pending_id = pending.id

        second = await executor.execute(swap_request(eth, usdt, amount="1"))

        assert isinstance(second, SwapFailure)
        assert second.code == "swap_in_progress"
        assert executor.state == SwapState.SUBMITTING
        assert executor.is_busy is True
        assert tracker.current() is pending
        assert pending.id == pending_id
        assert pending.status == TransactionStatus.PENDING
        assert len(tracker.history()) == 1

        wallet.release.set()
        outcome = await first

        assert outcome.success is True
        assert tracker.current().status == TransactionStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_reset_while_busy_rejected(self, build_executor, eth, usdt):
        wallet = BlockingWallet()
        executor, _, _ = build_executor(wallet=wallet)

        task = asyncio.create_task(executor.execute(swap_request(eth, usdt)))
        await wallet.signing.wait()

        with pytest.raises(SwapInProgressError):
            executor.reset()

        wallet.release.set()
        await task

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, build_executor, eth, usdt):
        wallet = DryRunWallet(address=WALLET, reject_signatures=True)
        executor, _, tracker = build_executor(wallet=wallet)

        failed = await executor.execute(swap_request(eth, usdt))
        executor.reset()
        assert executor.state == SwapState.IDLE
        assert executor.transitions == [SwapState.IDLE]

        wallet.reject_signatures = False
        retried = await executor.execute(swap_request(eth, usdt))

        assert failed.success is False
        assert retried.success is True
        assert [tx.status for tx in tracker.history()] == [
            TransactionStatus.SUCCESS,
            TransactionStatus.ERROR,
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "wallet_kwargs,amount",
        [
            ({}, "2"),
            ({"reject_signatures": True}, "2"),
            ({"revert_transactions": True}, "2"),
            ({"balances": {"ETH": 1}}, "2"),
            ({}, "0"),
        ],
    )
    async def test_tracker_never_left_pending(self, build_executor, eth, usdt, wallet_kwargs, amount):
        executor, _, tracker = build_executor(wallet=DryRunWallet(address=WALLET, **wallet_kwargs))

        await executor.execute(swap_request(eth, usdt, amount=amount))

        assert tracker.current().status in (TransactionStatus.SUCCESS, TransactionStatus.ERROR)
