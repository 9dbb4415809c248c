"""Pytest configuration and fixtures."""

import os
from typing import Callable, Optional, Union

import httpx
import pytest
import pytest_asyncio

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["WALLET_MODE"] = "dryrun"
os.environ["IS_TESTNET"] = "false"

from unikron.assets import Token
from unikron.config import Settings
from unikron.routing.symbiosis import AggregatorClient
from unikron.utils.locks import clear_session_locks

WALLET = "0x1111111111111111111111111111111111111111"

MAINNET_BASE = "https://api-v2.symbiosis.finance/crosschain"

ResponseSpec = Union[tuple[int, object], Callable[[httpx.Request], httpx.Response]]


class FakeAggregatorAPI:
    """httpx.MockTransport handler routing aggregator calls by path suffix."""

    def __init__(self):
        self.responses: dict[tuple[str, str], ResponseSpec] = {}
        self.calls: list[httpx.Request] = []

    def on(self, method: str, path: str, response: ResponseSpec) -> "FakeAggregatorAPI":
        self.responses[(method, path)] = response
        return self

    def count(self, path: str) -> int:
        return sum(1 for request in self.calls if request.url.path.endswith(path))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        for (method, path), response in self.responses.items():
            if request.method == method and request.url.path.endswith(path):
                if callable(response):
                    return response(request)
                status, body = response
                return httpx.Response(status, json=body)
        return httpx.Response(404, json={"message": "Not found"})


def raise_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def raise_connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def swap_body(amount_out: str = "7000000000", with_tx: bool = True, **extra) -> dict:
    """A /v1/swap/quote or /v1/swap/execute response body."""
    body = {
        "amountOut": {
            "amount": amount_out,
            "tokenAddress": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
            "tokenSymbol": "USDT",
            "tokenDecimals": 6,
        },
        "priceImpact": "0.12",
        "transactionFee": {
            "amount": "1500000",
            "tokenSymbol": "USDT",
            "tokenDecimals": 6,
            "usdValue": 1.5,
        },
        "route": [],
    }
    if with_tx:
        body["tx"] = {
            "to": "0x6571d6be3d8460CF5F7d6711Cd9961860029D05F",
            "data": "0xdeadbeef",
            "value": "2000000000000000000",
            "gasLimit": "350000",
        }
    body.update(extra)
    return body


@pytest.fixture(autouse=True)
def reset_locks():
    """Clear session locks before each test."""
    clear_session_locks()
    yield
    clear_session_locks()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, receipt_poll_interval=0.0, environment="test")


@pytest.fixture
def fake_api() -> FakeAggregatorAPI:
    return FakeAggregatorAPI()


@pytest_asyncio.fixture
async def make_aggregator(settings):
    """Build AggregatorClients backed by a fake API."""
    clients: list[AggregatorClient] = []

    def factory(api: Optional[FakeAggregatorAPI] = None) -> AggregatorClient:
        transport = httpx.MockTransport(api or FakeAggregatorAPI())
        client = AggregatorClient(settings, http_client=httpx.AsyncClient(transport=transport))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()


@pytest.fixture
def eth() -> Token:
    """Native ETH on Ethereum."""
    return Token(symbol="ETH", name="Ethereum", decimals=18, network="ethereum", chain_id=1, price=3500)


@pytest.fixture
def usdt() -> Token:
    return Token(
        symbol="USDT",
        name="Tether USD",
        decimals=6,
        network="ethereum",
        address="0xdAC17F958D2ee523a2206206994597C13D831ec7",
        chain_id=1,
        price=1,
    )


@pytest.fixture
def arb() -> Token:
    return Token(
        symbol="ARB",
        name="Arbitrum",
        decimals=18,
        network="arbitrum",
        address="0x912CE59144191C1204E64559FE8253a0e49E6548",
        chain_id=42161,
        price=1.2,
    )


@pytest.fixture
def pepe() -> Token:
    """Non-major token on Ethereum."""
    return Token(
        symbol="PEPE",
        name="Pepe",
        decimals=18,
        network="ethereum",
        address="0x6982508145454Ce325dDbE47a25d4ec3d2311933",
        chain_id=1,
        price=0.00001,
    )


@pytest.fixture
def link() -> Token:
    """Another non-major token on Ethereum."""
    return Token(
        symbol="LINK",
        name="Chainlink",
        decimals=18,
        network="ethereum",
        address="0x514910771AF9Ca656af840dff83E8264EcF986CA",
        chain_id=1,
        price=28,
    )
