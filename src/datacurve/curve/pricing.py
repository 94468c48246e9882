"""Linear bonding curve pricing in fixed-point integer arithmetic.

Client-side replica of the on-chain pricing so callers can quote a trade
before submitting it. Results must agree bit-for-bit with the contract:
every operation is exact int arithmetic with floor division.

Buying quotes at the pre-trade supply; selling quotes at the post-trade
supply. The spread between the two is structural.

CRITICAL: Never use float here.
"""

from datacurve.curve.models import PricingConstants
from datacurve.exceptions import InsufficientSupply, InvalidAmount

DEFAULT_PRICING = PricingConstants()

# Move u64 arguments
U64_MAX = 2**64 - 1


def require_uint(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative, got {value}")


def current_price_scaled(supply: int, *, pricing: PricingConstants = DEFAULT_PRICING) -> int:
    """Instantaneous unit price at ``supply``, in 1/precision units."""
    require_uint("supply", supply)
    return pricing.initial_price_scaled + supply * pricing.price_increase_scaled


def calculate_purchase_amount(
    supply: int,
    payment_amount: int,
    *,
    pricing: PricingConstants = DEFAULT_PRICING,
) -> int:
    """Tokens received for ``payment_amount`` at the current price.

    Returns 0 if the price is 0 (only possible with custom constants).
    """
    require_uint("payment_amount", payment_amount)
    price = current_price_scaled(supply, pricing=pricing)
    if price == 0:
        return 0
    return payment_amount * pricing.precision // price


def calculate_payment_required(
    supply: int,
    token_amount: int,
    *,
    pricing: PricingConstants = DEFAULT_PRICING,
) -> int:
    """Estimated payment for ``token_amount`` tokens at the pre-trade price.

    This is a quote only; the ledger computes the authoritative amount.
    """
    require_uint("token_amount", token_amount)
    price = current_price_scaled(supply, pricing=pricing)
    return token_amount * price // pricing.precision


def calculate_sale_return(
    supply: int,
    token_amount_to_sell: int,
    *,
    pricing: PricingConstants = DEFAULT_PRICING,
) -> int:
    """Payment returned for selling ``token_amount_to_sell`` tokens.

    Priced at the supply remaining after the sale.

    Raises:
        InsufficientSupply: token_amount_to_sell exceeds supply.
    """
    require_uint("supply", supply)
    require_uint("token_amount_to_sell", token_amount_to_sell)
    if token_amount_to_sell > supply:
        raise InsufficientSupply(supply, token_amount_to_sell)

    supply_after_sale = supply - token_amount_to_sell
    price_at_sale_time = current_price_scaled(supply_after_sale, pricing=pricing)
    return token_amount_to_sell * price_at_sale_time // pricing.precision
