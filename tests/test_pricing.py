"""Tests for price-based fallback estimates."""

from decimal import Decimal

import pytest

from unikron.assets import Token
from unikron.routing.pricing import PriceOracle, RateCalculator


class TestPriceOracle:
    """Tests for PriceOracle."""

    def test_uses_token_price(self, eth):
        assert PriceOracle().get_reference_price(eth) == Decimal("3500")

    @pytest.mark.parametrize("price", [None, 0, -5, float("nan")])
    def test_unpriced_tokens_are_neutral(self, price):
        token = Token(symbol="XYZ", name="XYZ", decimals=18, network="ethereum", price=price)
        assert PriceOracle().get_reference_price(token) == Decimal("1")


class TestRateCalculator:
    """Tests for RateCalculator."""

    def test_eth_to_usdt(self, eth, usdt):
        """2 ETH at 3500 into USDT at 1."""
        assert RateCalculator().estimate_output(eth, usdt, "2") == "7000.000000"

    def test_huge_amount_still_estimates(self, eth, usdt):
        result = RateCalculator().estimate_output(eth, usdt, "1e95")
        assert result == "35" + "0" * 97 + ".000000"

    def test_empty_amount_returns_empty(self, eth, usdt):
        """Empty input gives an empty estimate, not "0"."""
        assert RateCalculator().estimate_output(eth, usdt, "") == ""

    @pytest.mark.parametrize("amount", ["0", "0.0", "-1", "abc"])
    def test_unusable_amounts_return_empty(self, eth, usdt, amount):
        assert RateCalculator().estimate_output(eth, usdt, amount) == ""

    def test_renders_at_target_precision(self, usdt, eth):
        result = RateCalculator().estimate_output(usdt, eth, "3500")
        assert result == "1.000000000000000000"

    def test_rounds_half_up(self, usdt):
        cheap = Token(symbol="CHEAP", name="Cheap", decimals=2, network="ethereum", price=3)
        # 1 USDT / 3 = 0.333.. -> 0.33 ; 5 USDT / 3 = 1.666.. -> 1.67
        assert RateCalculator().estimate_output(usdt, cheap, "1") == "0.33"
        assert RateCalculator().estimate_output(usdt, cheap, "5") == "1.67"

    def test_unpriced_target_uses_one_to_one_rate(self, usdt):
        unknown = Token(symbol="UNK", name="Unknown", decimals=6, network="ethereum")
        assert RateCalculator().estimate_output(usdt, unknown, "12.5") == "12.500000"

    def test_no_exponent_for_tiny_results(self, eth, pepe):
        result = RateCalculator().estimate_output(pepe, eth, "1")
        assert "e" not in result.lower()
        assert result.startswith("0.")
