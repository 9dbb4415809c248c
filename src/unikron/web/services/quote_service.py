"""Quote service with layered fallbacks.

Quotes come from the aggregator when a wallet is connected. Without a
wallet, or when the aggregator fails in any way, the service falls back
to a price-based estimate. The returned Quote says which tier produced
it so the UI can present estimates as lower confidence.
"""

import logging
from typing import Optional

from unikron.assets import Token
from unikron.config import Settings, get_settings
from unikron.errors import AggregatorTimeoutError, RemoteQuoteError
from unikron.routing.base import Quote, QuoteSource
from unikron.routing.pricing import RateCalculator
from unikron.routing.symbiosis import AggregatorClient, SwapQuoteData, build_swap_payload
from unikron.utils.units import from_smallest_unit, is_positive_amount

logger = logging.getLogger(__name__)


class QuoteService:
    """Resolves output quotes for prospective swaps. Never raises."""

    def __init__(
        self,
        aggregator: AggregatorClient,
        calculator: Optional[RateCalculator] = None,
        settings: Optional[Settings] = None,
    ):
        self.aggregator = aggregator
        self.calculator = calculator or RateCalculator()
        self.settings = settings or get_settings()

    async def get_quote(
        self,
        from_token: Token,
        to_token: Token,
        amount: str,
        wallet_address: Optional[str] = None,
        is_testnet: bool = False,
        slippage: Optional[float] = None,
    ) -> Quote:
        """Get a quote for swapping amount of from_token into to_token.

        Args:
            from_token: Token being sold
            to_token: Token being bought
            amount: Human decimal amount of from_token
            wallet_address: Connected wallet; no wallet means estimate only
            is_testnet: Use the testnet aggregator
            slippage: Percent (defaults to settings.default_slippage)

        Returns:
            Quote tagged REMOTE, CALCULATED or UNAVAILABLE
        """
        if not is_positive_amount(amount):
            return Quote(output_amount="", source=QuoteSource.UNAVAILABLE, fallback_reason="invalid amount")

        if not wallet_address:
            return self._fallback(from_token, to_token, amount, "wallet not connected")

        if slippage is None:
            slippage = self.settings.default_slippage

        try:
            payload = build_swap_payload(from_token, to_token, amount, wallet_address, slippage)
            data = await self.aggregator.get_quote(payload, is_testnet)
            return self._from_remote(data, to_token)
        except AggregatorTimeoutError as e:
            logger.warning(f"Remote quote timed out, using price estimate: {e}")
            return self._fallback(from_token, to_token, amount, "timeout")
        except RemoteQuoteError as e:
            logger.warning(f"Remote quote failed, using price estimate: {e}")
            return self._fallback(from_token, to_token, amount, e.message)
        except ValueError as e:
            logger.warning(f"Could not convert quote amounts, using price estimate: {e}")
            return self._fallback(from_token, to_token, amount, str(e))
        except Exception as e:
            logger.error(f"Unexpected quote error, using price estimate: {type(e).__name__}: {e}")
            return self._fallback(from_token, to_token, amount, "quote failed")

    def _from_remote(self, data: SwapQuoteData, to_token: Token) -> Quote:
        output = from_smallest_unit(data.amount_out.amount, to_token.decimals)

        fee_amount = fee_symbol = fee_usd = None
        fee = data.transaction_fee
        if fee is not None:
            fee_symbol = fee.token_symbol
            if fee.amount is not None and fee.token_decimals is not None:
                fee_amount = from_smallest_unit(fee.amount, fee.token_decimals)
            if fee.usd_value is not None:
                fee_usd = str(fee.usd_value)

        logger.info(f"Remote quote: {output} {to_token.symbol}")
        return Quote(
            output_amount=output,
            source=QuoteSource.REMOTE,
            price_impact=str(data.price_impact) if data.price_impact is not None else None,
            fee_amount=fee_amount,
            fee_symbol=fee_symbol,
            fee_usd=fee_usd,
        )

    def _fallback(self, from_token: Token, to_token: Token, amount: str, reason: str) -> Quote:
        try:
            output = self.calculator.estimate_output(from_token, to_token, amount)
        except Exception as e:
            logger.error(f"Price estimate failed: {e}")
            output = ""

        if not output:
            logger.info(f"No quote available for {from_token} -> {to_token} ({reason})")
            return Quote(output_amount="", source=QuoteSource.UNAVAILABLE, fallback_reason=reason)

        logger.info(f"Using calculated quote for {from_token} -> {to_token} ({reason})")
        return Quote(output_amount=output, source=QuoteSource.CALCULATED, fallback_reason=reason)
