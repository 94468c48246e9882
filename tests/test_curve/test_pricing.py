"""Tests for the fixed-point bonding curve pricing functions."""

import pytest

from datacurve.curve.models import PricingConstants
from datacurve.curve.pricing import (
    DEFAULT_PRICING,
    calculate_payment_required,
    calculate_purchase_amount,
    calculate_sale_return,
    current_price_scaled,
)
from datacurve.exceptions import InsufficientSupply, InvalidAmount

SUPPLIES = [0, 1, 2, 3, 7, 999, 1000, 123_456, 10**9, 2**32, 2**63, 2**64 - 1]
PAYMENTS = [0, 1, 7, 99, 100, 101, 12_345, 10**6, 10**12, 2**64 - 1]


class TestPricingConstants:
    def test_default_values(self) -> None:
        assert DEFAULT_PRICING.precision == 1_000_000
        assert DEFAULT_PRICING.initial_price_scaled == 100
        assert DEFAULT_PRICING.price_increase_scaled == 10


class TestCurrentPriceScaled:
    @pytest.mark.parametrize("supply", [0, 1, 1000, 2**32, 2**63])
    def test_linear_formula_exact(self, supply: int) -> None:
        assert current_price_scaled(supply) == 100 + supply * 10

    def test_known_values(self) -> None:
        assert current_price_scaled(0) == 100
        assert current_price_scaled(1) == 110
        assert current_price_scaled(1000) == 10_100
        assert current_price_scaled(2**63) == 92_233_720_368_547_758_180

    def test_beyond_u64_does_not_wrap(self) -> None:
        """Python ints never overflow; the product exceeds 2^64 exactly."""
        price = current_price_scaled(2**64)
        assert price == 184_467_440_737_095_516_260
        assert isinstance(price, int)

    def test_strictly_monotonic(self) -> None:
        previous = current_price_scaled(0)
        for supply in SUPPLIES[1:]:
            price = current_price_scaled(supply)
            assert price > previous
            previous = price

    def test_custom_constants(self) -> None:
        pricing = PricingConstants(precision=1000, initial_price_scaled=5, price_increase_scaled=2)
        assert current_price_scaled(10, pricing=pricing) == 25

    @pytest.mark.parametrize("supply", [-1, 1.5, "10", True, None])
    def test_rejects_non_uint(self, supply: object) -> None:
        with pytest.raises(InvalidAmount):
            current_price_scaled(supply)  # type: ignore[arg-type]


class TestCalculatePurchaseAmount:
    def test_rounding_on_non_exact_division(self) -> None:
        assert calculate_purchase_amount(0, 7) == 70_000
        # 7 * 1_000_000 / 130 = 53846.15... -> floor
        assert calculate_purchase_amount(3, 7) == 53_846

    def test_zero_payment_buys_nothing(self) -> None:
        assert calculate_purchase_amount(1000, 0) == 0

    def test_zero_price_returns_zero(self) -> None:
        free = PricingConstants(initial_price_scaled=0, price_increase_scaled=0)
        assert calculate_purchase_amount(0, 1_000_000, pricing=free) == 0

    def test_negative_payment_rejected(self) -> None:
        with pytest.raises(InvalidAmount):
            calculate_purchase_amount(0, -5)


class TestCalculatePaymentRequired:
    def test_priced_at_pre_trade_supply(self) -> None:
        # 70_000 tokens at price 100 cost exactly 7
        assert calculate_payment_required(0, 70_000) == 7
        # price at supply 1000 is 10_100
        assert calculate_payment_required(1000, 1000) == 10

    def test_floor_division(self) -> None:
        # 53_846 * 130 = 6_999_980 -> 6
        assert calculate_payment_required(3, 53_846) == 6

    @pytest.mark.parametrize("supply", SUPPLIES)
    @pytest.mark.parametrize("payment", PAYMENTS)
    def test_quote_never_exceeds_payment(self, supply: int, payment: int) -> None:
        tokens = calculate_purchase_amount(supply, payment)
        assert calculate_payment_required(supply, tokens) <= payment


class TestCalculateSaleReturn:
    def test_sell_more_than_supply_raises(self) -> None:
        with pytest.raises(InsufficientSupply) as exc_info:
            calculate_sale_return(5, 6)
        assert exc_info.value.supply == 5
        assert exc_info.value.token_amount == 6

    def test_sell_entire_supply(self) -> None:
        # supply after sale is 0, price 100: floor(5 * 100 / 1e6) = 0
        assert calculate_sale_return(5, 5) == 0

    def test_sell_entire_supply_with_zero_initial_price(self) -> None:
        pricing = PricingConstants(initial_price_scaled=0)
        assert calculate_sale_return(5, 5, pricing=pricing) == 0

    def test_priced_at_post_trade_supply(self) -> None:
        # after selling 100_000 of 1_000_000, price = 100 + 900_000 * 10
        assert calculate_sale_return(10**6, 10**5) == 10**5 * 9_000_100 // 10**6
        assert calculate_sale_return(10**6, 10**5) == 900_010

    def test_sell_zero(self) -> None:
        assert calculate_sale_return(100, 0) == 0

    def test_sell_from_empty_curve(self) -> None:
        with pytest.raises(InsufficientSupply):
            calculate_sale_return(0, 1)


class TestBuySellSpread:
    @pytest.mark.parametrize("supply", [1, 5, 1000, 10**6, 2**32, 2**63])
    @pytest.mark.parametrize("fraction", [1, 2, 10])
    def test_payment_required_at_least_sale_return(self, supply: int, fraction: int) -> None:
        tokens = max(1, supply // fraction)
        assert calculate_payment_required(supply, tokens) >= calculate_sale_return(supply, tokens)

    def test_spread_is_strict_for_large_trades(self) -> None:
        assert calculate_payment_required(10**6, 10**5) == 1_000_010
        assert calculate_sale_return(10**6, 10**5) == 900_010
