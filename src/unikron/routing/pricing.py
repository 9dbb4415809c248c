"""Price-based fallback estimates.

These numbers are an order-of-magnitude display aid used when the
aggregator cannot quote. They are never used to authorize a trade.
"""

import logging
from decimal import Decimal, localcontext
from typing import Optional

from unikron.assets import Token
from unikron.utils.units import format_fixed, parse_amount

logger = logging.getLogger(__name__)

# Rendering precision when the target token's decimals are unknown
DEFAULT_OUTPUT_DECIMALS = 6

NEUTRAL_PRICE = Decimal("1")


class PriceOracle:
    """Resolves a token's fiat reference price."""

    def get_reference_price(self, token: Token) -> Decimal:
        """Return the carried reference price, or 1 for unpriced tokens.

        The 1.0 fallback keeps the calculator away from division by zero
        and yields a 1:1 rate for unpriced tokens; that rate is knowingly
        misleading and only ever shown as an estimate.
        """
        price = token.price
        if price is None:
            return NEUTRAL_PRICE
        try:
            value = Decimal(str(price))
        except ArithmeticError:
            return NEUTRAL_PRICE
        if not value.is_finite() or value <= 0:
            return NEUTRAL_PRICE
        return value


class RateCalculator:
    """Computes an indicative output amount from reference prices."""

    def __init__(self, oracle: Optional[PriceOracle] = None):
        self.oracle = oracle or PriceOracle()

    def estimate_output(self, from_token: Token, to_token: Token, amount: str) -> str:
        """Estimate how much to_token ``amount`` of from_token is worth.

        Args:
            from_token: Token being sold
            to_token: Token being bought
            amount: Human decimal amount of from_token

        Returns:
            Fixed-point string at to_token precision, or "" when the
            amount is empty, zero or unparsable.
        """
        value = parse_amount(amount)
        if value is None or value == 0:
            return ""

        from_price = self.oracle.get_reference_price(from_token)
        to_price = self.oracle.get_reference_price(to_token)

        with localcontext() as ctx:
            ctx.prec = 100
            output_usd = value * from_price
            output = output_usd / to_price

        decimals = to_token.decimals if to_token.decimals is not None else DEFAULT_OUTPUT_DECIMALS
        result = format_fixed(output, decimals)
        logger.debug(
            f"Estimated {amount} {from_token.symbol} -> {result} {to_token.symbol} "
            f"(prices {from_price}/{to_price})"
        )
        return result
