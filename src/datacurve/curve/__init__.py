"""Bonding curve pricing engine.

Pure fixed-point pricing functions, the ledger-backed state accessor, and
the engine that quotes prices and orchestrates buy/sell transactions.
"""

from datacurve.curve.engine import BondingCurveEngine
from datacurve.curve.models import CurveReference, CurveState, PricingConstants, TradeResult
from datacurve.curve.pricing import (
    DEFAULT_PRICING,
    calculate_payment_required,
    calculate_purchase_amount,
    calculate_sale_return,
    current_price_scaled,
)
from datacurve.curve.state import CurveStateReader

__all__ = [
    "DEFAULT_PRICING",
    "BondingCurveEngine",
    "CurveReference",
    "CurveState",
    "CurveStateReader",
    "PricingConstants",
    "TradeResult",
    "calculate_payment_required",
    "calculate_purchase_amount",
    "calculate_sale_return",
    "current_price_scaled",
]
