"""Symbiosis cross-chain aggregator client.

Wraps the aggregator's public HTTP API:
- POST /v1/swap/quote       indicative quote
- POST /v1/swap/execute     chain-ready swap transaction
- GET  /v1/tokens/routes    route capability between two chains
- GET  /v1/tokens           token list for a chain
- GET  /v1/prices           USD prices for token addresses
- GET  /v1/networks         supported networks

API docs: https://docs.symbiosis.finance/developer-tools/symbiosis-api
"""

import logging
from decimal import Decimal
from typing import Any, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from unikron.assets import Token
from unikron.chains import shorten_address
from unikron.config import Settings, get_settings
from unikron.errors import AggregatorTimeoutError, RemoteQuoteError
from unikron.utils.units import to_smallest_unit

logger = logging.getLogger(__name__)


class AmountOut(BaseModel):
    """Output amount reported by the aggregator (smallest units)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    amount: str
    token_address: Optional[str] = Field(None, alias="tokenAddress")
    token_symbol: Optional[str] = Field(None, alias="tokenSymbol")
    token_decimals: Optional[int] = Field(None, alias="tokenDecimals")


class TransactionFee(BaseModel):
    """Protocol fee attached to a quote."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    amount: Optional[str] = None
    token_symbol: Optional[str] = Field(None, alias="tokenSymbol")
    token_decimals: Optional[int] = Field(None, alias="tokenDecimals")
    usd_value: Optional[Union[str, float]] = Field(None, alias="usdValue")


class SwapTx(BaseModel):
    """Opaque chain-ready transaction; fields are passed to the wallet as given."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    to: str
    data: str = "0x"
    value: Union[str, int] = "0"
    gas_limit: Optional[Union[str, int]] = Field(None, alias="gasLimit")


class SwapQuoteData(BaseModel):
    """Response body of /v1/swap/quote and /v1/swap/execute."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    amount_out: AmountOut = Field(..., alias="amountOut")
    price_impact: Optional[Union[str, float]] = Field(None, alias="priceImpact")
    transaction_fee: Optional[TransactionFee] = Field(None, alias="transactionFee")
    swap_id: Optional[str] = Field(None, alias="swapId")
    approve_to: Optional[str] = Field(None, alias="approveTo")
    route: list[Any] = Field(default_factory=list)
    tx: Optional[SwapTx] = None


def build_swap_payload(
    from_token: Token,
    to_token: Token,
    amount: Union[str, Decimal],
    wallet_address: str,
    slippage: float,
) -> dict:
    """Build the request body shared by quote and execute.

    Raises:
        ValueError: a token has no resolvable chain or the amount cannot
            be expressed in from_token's smallest units
    """
    from_chain_id = from_token.resolved_chain_id
    to_chain_id = to_token.resolved_chain_id
    if from_chain_id is None or to_chain_id is None:
        raise ValueError(f"Cannot resolve chain for {from_token} -> {to_token}")

    return {
        "fromTokenAddress": "" if from_token.is_native else from_token.address,
        "toTokenAddress": "" if to_token.is_native else to_token.address,
        "fromTokenChainId": from_chain_id,
        "toTokenChainId": to_chain_id,
        "fromAmount": str(to_smallest_unit(amount, from_token.decimals)),
        "slippage": slippage,
        "sender": wallet_address,
        "recipient": wallet_address,
    }


class AggregatorClient:
    """Async HTTP client for the aggregator.

    Every call is bounded by a timeout. Timeouts raise
    AggregatorTimeoutError; any other transport failure, non-2xx status
    or malformed body raises RemoteQuoteError.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize aggregator client.

        Args:
            settings: Application settings (defaults to cached settings)
            http_client: Pre-built client, mainly for tests
        """
        self.settings = settings or get_settings()
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.aggregator_timeout,
                headers={"Accept": "application/json"},
            )
        return self._http_client

    def base_url(self, is_testnet: bool = False) -> str:
        """Aggregator base URL for the selected environment."""
        return self.settings.get_aggregator_url(is_testnet)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body."""
        client = await self._get_client()
        timeout = timeout if timeout is not None else self.settings.aggregator_timeout

        try:
            response = await client.request(
                method, url, json=json, params=params, timeout=timeout
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Aggregator request timed out after {timeout}s: {method} {url}")
            raise AggregatorTimeoutError(
                f"Request timed out after {timeout:.0f} seconds. Please try again."
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Aggregator transport error: {method} {url}: {type(e).__name__}: {e}")
            raise RemoteQuoteError(f"Aggregator unreachable: {e}") from e

        if not response.is_success:
            message = self._error_message(response)
            logger.warning(f"Aggregator API error: {response.status_code} - {message}")
            raise RemoteQuoteError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteQuoteError("Malformed aggregator response") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Extract the `message` field of an error body, falling back to text."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        text = response.text.strip()
        return text or f"Aggregator returned {response.status_code} {response.reason_phrase}"

    @staticmethod
    def _parse_swap_data(data: Any) -> SwapQuoteData:
        try:
            return SwapQuoteData.model_validate(data)
        except PydanticValidationError as e:
            raise RemoteQuoteError(f"Malformed aggregator response: {e.error_count()} invalid field(s)") from e

    async def get_quote(self, payload: dict, is_testnet: bool = False) -> SwapQuoteData:
        """Request an indicative quote.

        Args:
            payload: Body built by build_swap_payload
            is_testnet: Use the testnet aggregator

        Returns:
            Parsed quote with amountOut in smallest units
        """
        url = f"{self.base_url(is_testnet)}/v1/swap/quote"
        logger.info(
            f"Requesting quote: {payload.get('fromAmount')} of {payload.get('fromTokenAddress') or 'native'} "
            f"({payload.get('fromTokenChainId')} -> {payload.get('toTokenChainId')}) "
            f"for {shorten_address(payload.get('sender'))}"
        )
        data = await self._request("POST", url, json=payload)
        return self._parse_swap_data(data)

    async def build_swap(self, payload: dict, is_testnet: bool = False) -> SwapQuoteData:
        """Request a chain-ready swap transaction.

        Raises:
            RemoteQuoteError: the call failed or the body has no `tx`
        """
        url = f"{self.base_url(is_testnet)}/v1/swap/execute"
        logger.info(
            f"Building swap transaction: {payload.get('fromTokenChainId')} -> "
            f"{payload.get('toTokenChainId')} slippage {payload.get('slippage')}%"
        )
        data = await self._request("POST", url, json=payload)
        swap_data = self._parse_swap_data(data)
        if swap_data.tx is None:
            raise RemoteQuoteError("Aggregator response did not include a transaction")
        return swap_data

    async def get_routes(
        self,
        from_chain_id: int,
        to_chain_id: int,
        is_testnet: bool = False,
    ) -> list:
        """Query which routes exist between two chains.

        Raises:
            RemoteQuoteError: transport failure, non-2xx or non-array body
        """
        url = f"{self.base_url(is_testnet)}/v1/tokens/routes"
        data = await self._request(
            "GET",
            url,
            params={"fromChainId": from_chain_id, "toChainId": to_chain_id},
            timeout=self.settings.routes_timeout,
        )
        if not isinstance(data, list):
            raise RemoteQuoteError("Routes response is not a list")
        return data

    async def get_tokens(self, chain_id: int, is_testnet: bool = False) -> list[dict]:
        """Fetch the aggregator's token list for a chain."""
        url = f"{self.base_url(is_testnet)}/v1/tokens"
        data = await self._request("GET", url, params={"chainId": chain_id})
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    async def get_prices(
        self,
        chain_id: int,
        addresses: list[str],
        is_testnet: bool = False,
    ) -> dict[str, Any]:
        """Fetch USD prices keyed by token address."""
        if not addresses:
            return {}
        url = f"{self.base_url(is_testnet)}/v1/prices"
        data = await self._request(
            "GET",
            url,
            params={"chainId": chain_id, "addresses": ",".join(addresses)},
        )
        return data if isinstance(data, dict) else {}

    async def get_networks(self, is_testnet: bool = False) -> list:
        """Get networks supported by the aggregator (empty list on failure)."""
        url = f"{self.base_url(is_testnet)}/v1/networks"
        try:
            data = await self._request("GET", url, timeout=self.settings.routes_timeout)
        except RemoteQuoteError as e:
            logger.error(f"Error fetching supported networks: {e}")
            return []
        return data if isinstance(data, list) else []

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
