"""Ledger client layer -- Sui JSON-RPC integration via httpx."""

from datacurve.ledger.client import LedgerClient
from datacurve.ledger.signer import SuiSigner
from datacurve.ledger.sui_client import SuiLedgerClient
from datacurve.ledger.types import (
    BONDING_CURVE_MODULE,
    LedgerEvent,
    LedgerObject,
    MoveCall,
    TransactionResult,
)

__all__ = [
    "BONDING_CURVE_MODULE",
    "LedgerClient",
    "LedgerEvent",
    "LedgerObject",
    "MoveCall",
    "SuiLedgerClient",
    "SuiSigner",
    "TransactionResult",
]
