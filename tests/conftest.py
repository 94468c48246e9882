"""Shared test fixtures for the datacurve service."""

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from datacurve.config import LedgerSettings
from datacurve.ledger.types import LedgerObject

PACKAGE_ID = "0xpkg"
TREASURY_ID = "0xtreasury"
CURVE_OBJECT_ID = "0xcurve"


def _make_curve_object(
    curve_id: int | str = 7,
    supply: int | str = 0,
    object_id: str = CURVE_OBJECT_ID,
) -> LedgerObject:
    return LedgerObject(
        object_id=object_id,
        type=f"{PACKAGE_ID}::bonding_curve_module::BondingCurve",
        fields={"curve_id": str(curve_id), "total_supply_for_pricing": str(supply)},
    )


@pytest.fixture
def make_curve_object() -> Callable[..., LedgerObject]:
    """Factory for ledger objects shaped like a bonding curve."""
    return _make_curve_object


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    """Ledger settings with package and treasury ids (signing handled by the mock)."""
    return LedgerSettings(
        rpc_url="http://sui.test",
        package_id=PACKAGE_ID,
        treasury_provider_id=TREASURY_ID,
    )


@pytest.fixture
def mock_ledger() -> AsyncMock:
    """LedgerClient mock able to submit, holding curve 7 at supply 0."""
    ledger = AsyncMock()
    ledger.configured_for_submission = True
    ledger.read_object = AsyncMock(return_value=_make_curve_object())
    return ledger
