"""Bonding curve data models.

CRITICAL: Supplies, prices, and amounts are Python ints. Never route them
through float; the on-chain contract computes with exact u64/u128 integers.
"""

from dataclasses import dataclass
from typing import Any

from datacurve.exceptions import LedgerReadFailure


@dataclass(frozen=True)
class PricingConstants:
    """Fixed-point parameters of the linear curve.

    price(supply) = initial_price_scaled + supply * price_increase_scaled,
    expressed in units of 1 / precision.
    """

    precision: int = 1_000_000
    initial_price_scaled: int = 100
    price_increase_scaled: int = 10


@dataclass(frozen=True)
class CurveState:
    """Live state of one curve, fetched fresh from the ledger for every query."""

    curve_id: int
    total_supply_for_pricing: int

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> "CurveState":
        """Build from a ledger object's fields (u64 values arrive as decimal strings)."""
        return cls(
            curve_id=_parse_u64(fields, "curve_id"),
            total_supply_for_pricing=_parse_u64(fields, "total_supply_for_pricing"),
        )

    def to_response(self) -> dict[str, str]:
        return {
            "curveId": str(self.curve_id),
            "totalSupplyForPricing": str(self.total_supply_for_pricing),
        }


@dataclass(frozen=True)
class CurveReference:
    """Where a curve lives on the ledger. Persisted with its dataset."""

    package_id: str
    treasury_provider_id: str
    curve_object_id: str


@dataclass
class TradeResult:
    """Outcome of a confirmed buy or sell.

    ``event`` is the parsed confirmation event, or None when the
    transaction succeeded without emitting one for this curve; ``warning``
    then says so.
    """

    transaction_id: str
    event: dict[str, Any] | None = None
    warning: str | None = None

    def to_response(self, event_field: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": True,
            "transactionId": self.transaction_id,
            event_field: self.event,
        }
        if self.warning:
            body["warning"] = self.warning
        return body


def _parse_u64(fields: dict[str, Any], name: str) -> int:
    raw = fields.get(name)
    # bool is an int subclass; a JSON true/false is never a valid u64
    if isinstance(raw, bool) or not isinstance(raw, (int, str)):
        raise LedgerReadFailure(f"Curve field {name!r} missing or malformed: {raw!r}")
    try:
        value = int(raw)
    except ValueError as e:
        raise LedgerReadFailure(f"Curve field {name!r} is not an integer: {raw!r}") from e
    if value < 0:
        raise LedgerReadFailure(f"Curve field {name!r} is negative: {value}")
    return value
