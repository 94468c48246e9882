"""Bonding curve engine: quotes from the pricing replica, trades via the ledger.

Quotes read the live curve state and apply the pure functions in
datacurve.curve.pricing. Buys and sells never trust those functions: the
ledger executes the trade and computes the authoritative amounts, and the
engine only reports what the confirming event says.

The engine holds no mutable state. Concurrent requests against one curve
each re-read state; the ledger serializes the transactions.
"""

from __future__ import annotations

from datacurve.config import LedgerSettings
from datacurve.curve import pricing
from datacurve.curve.events import (
    TOKEN_PURCHASED,
    TOKEN_SOLD,
    find_created_curve_id,
    find_curve_event,
)
from datacurve.curve.models import CurveReference, CurveState, PricingConstants, TradeResult
from datacurve.curve.state import CurveStateReader
from datacurve.exceptions import ConfigurationMissing, InvalidAmount, LedgerTransactionFailure
from datacurve.ledger.client import LedgerClient
from datacurve.ledger.types import BONDING_CURVE_MODULE, MoveCall, TransactionResult
from datacurve.logging import get_logger

logger = get_logger(__name__)


class BondingCurveEngine:
    """Pricing queries and buy/sell orchestration for bonding curves.

    Args:
        ledger: Ledger client for transaction submission.
        reader: State accessor (shares the same ledger client).
        settings: Package and treasury provider identifiers.
        pricing_constants: Must match the deployed contract.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        reader: CurveStateReader,
        settings: LedgerSettings,
        pricing_constants: PricingConstants = pricing.DEFAULT_PRICING,
    ) -> None:
        self._ledger = ledger
        self._reader = reader
        self._settings = settings
        self._pricing = pricing_constants

    @property
    def can_submit(self) -> bool:
        """True when package, treasury provider and signing key are all configured."""
        return bool(
            self._settings.package_id
            and self._settings.treasury_provider_id
            and self._ledger.configured_for_submission
        )

    # ──────────────────────────────────────────────
    # Quotes
    # ──────────────────────────────────────────────

    async def get_info(self, curve_object_id: str) -> CurveState:
        _require_id("curve_object_id", curve_object_id)
        return await self._reader.read(curve_object_id)

    async def quote_current_price(self, curve_object_id: str) -> int:
        state = await self.get_info(curve_object_id)
        return pricing.current_price_scaled(
            state.total_supply_for_pricing, pricing=self._pricing
        )

    async def quote_purchase_amount(self, curve_object_id: str, payment_amount: int) -> int:
        pricing.require_uint("payment_amount", payment_amount)
        state = await self.get_info(curve_object_id)
        return pricing.calculate_purchase_amount(
            state.total_supply_for_pricing, payment_amount, pricing=self._pricing
        )

    async def quote_payment_required(self, curve_object_id: str, token_amount: int) -> int:
        pricing.require_uint("token_amount", token_amount)
        state = await self.get_info(curve_object_id)
        return pricing.calculate_payment_required(
            state.total_supply_for_pricing, token_amount, pricing=self._pricing
        )

    async def quote_sale_return(self, curve_object_id: str, token_amount_to_sell: int) -> int:
        pricing.require_uint("token_amount_to_sell", token_amount_to_sell)
        state = await self.get_info(curve_object_id)
        return pricing.calculate_sale_return(
            state.total_supply_for_pricing, token_amount_to_sell, pricing=self._pricing
        )

    # ──────────────────────────────────────────────
    # Transactions
    # ──────────────────────────────────────────────

    async def buy(self, curve_object_id: str, payment_amount: int) -> TradeResult:
        """Buy tokens on a curve with ``payment_amount``.

        Raises:
            InvalidAmount: Non-positive payment, payment above the u64
                range, or empty curve id.
            ConfigurationMissing: Submission identifiers or key absent.
            LedgerReadFailure: Curve state could not be read.
            LedgerTransactionFailure: Transaction reported failure.
        """
        _require_id("curve_object_id", curve_object_id)
        pricing.require_uint("payment_amount", payment_amount)
        if payment_amount == 0:
            raise InvalidAmount("payment_amount must be greater than zero")
        if payment_amount > pricing.U64_MAX:
            raise InvalidAmount(f"payment_amount must fit in a u64, got {payment_amount}")
        self._require_submission_config()

        state = await self._reader.read(curve_object_id)
        result = await self._submit("buy", [curve_object_id, str(payment_amount)])
        return self._confirm(result, TOKEN_PURCHASED, state, curve_object_id)

    async def sell(self, curve_object_id: str, token_holding_id: str) -> TradeResult:
        """Sell the token coin ``token_holding_id`` back to a curve.

        Raises the same errors as buy().
        """
        _require_id("curve_object_id", curve_object_id)
        _require_id("token_holding_id", token_holding_id)
        self._require_submission_config()

        state = await self._reader.read(curve_object_id)
        result = await self._submit("sell", [curve_object_id, token_holding_id])
        return self._confirm(result, TOKEN_SOLD, state, curve_object_id)

    async def create_curve(self) -> CurveReference:
        """Create a new curve on the ledger and return its reference.

        Raises:
            ConfigurationMissing: Submission identifiers or key absent.
            LedgerTransactionFailure: Transaction failed, or it emitted no
                NewCurveCreated event so the new object id is unknown.
        """
        self._require_submission_config()

        result = await self._submit("create_new_curve", [])
        if not result.succeeded:
            raise LedgerTransactionFailure(result.error or "unknown error", result.digest)

        curve_object_id = find_created_curve_id(result.events)
        if curve_object_id is None:
            raise LedgerTransactionFailure(
                "create_new_curve succeeded but emitted no NewCurveCreated event",
                result.digest,
            )

        logger.info("curve_created", curve_object_id=curve_object_id, digest=result.digest)
        return CurveReference(
            package_id=self._settings.package_id,
            treasury_provider_id=self._settings.treasury_provider_id,
            curve_object_id=curve_object_id,
        )

    async def _submit(self, function: str, arguments: list[str]) -> TransactionResult:
        call = MoveCall(
            package_id=self._settings.package_id,
            module=BONDING_CURVE_MODULE,
            function=function,
            arguments=[self._settings.treasury_provider_id, *arguments],
        )
        return await self._ledger.submit_move_call(call)

    def _confirm(
        self,
        result: TransactionResult,
        event_name: str,
        state: CurveState,
        curve_object_id: str,
    ) -> TradeResult:
        if not result.succeeded:
            logger.error(
                "curve_transaction_failed",
                event_name=event_name,
                curve_object_id=curve_object_id,
                digest=result.digest,
                error=result.error,
            )
            raise LedgerTransactionFailure(result.error or "unknown error", result.digest)

        payload = find_curve_event(result.events, event_name, state.curve_id, curve_object_id)
        if payload is None:
            logger.warning(
                "curve_event_not_found",
                event_name=event_name,
                curve_object_id=curve_object_id,
                digest=result.digest,
            )
            return TradeResult(
                transaction_id=result.digest,
                warning=f"Transaction succeeded but no {event_name} event was found for this curve",
            )

        logger.info(
            "curve_transaction_confirmed",
            event_name=event_name,
            curve_object_id=curve_object_id,
            digest=result.digest,
        )
        return TradeResult(transaction_id=result.digest, event=payload)

    def _require_submission_config(self) -> None:
        missing = [
            name
            for name, value in (
                ("SUI_PACKAGE_ID", self._settings.package_id),
                ("SUI_TREASURY_PROVIDER_ID", self._settings.treasury_provider_id),
            )
            if not value
        ]
        if not self._ledger.configured_for_submission:
            missing.append("SUI_PRIVATE_KEY")
        if missing:
            raise ConfigurationMissing(f"Missing ledger configuration: {', '.join(missing)}")


def _require_id(name: str, value: str) -> None:
    if not value or not value.strip():
        raise InvalidAmount(f"{name} must not be empty")
