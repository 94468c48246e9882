"""Ledger-facing type definitions.

Everything the curve engine needs from a ledger call is captured here so
that engine code never touches raw JSON-RPC payloads.
"""

from dataclasses import dataclass, field
from typing import Any

BONDING_CURVE_MODULE = "bonding_curve_module"


@dataclass(frozen=True)
class LedgerObject:
    """Content of a live ledger object."""

    object_id: str
    type: str
    fields: dict[str, Any]


@dataclass(frozen=True)
class MoveCall:
    """A single Move function invocation to submit as a transaction.

    Arguments are positional, matching the on-chain function signature:
    object ids as strings, u64 values as decimal strings.
    """

    package_id: str
    module: str
    function: str
    arguments: list[str]
    type_arguments: list[str] = field(default_factory=list)

    @property
    def target(self) -> str:
        return f"{self.package_id}::{self.module}::{self.function}"


@dataclass(frozen=True)
class LedgerEvent:
    """An event emitted by an executed transaction."""

    type: str
    parsed_json: dict[str, Any]


@dataclass
class TransactionResult:
    """Outcome of an executed transaction as reported by the ledger."""

    digest: str
    status: str  # "success" | "failure"
    error: str | None = None
    events: list[LedgerEvent] = field(default_factory=list)
    effects: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"
