"""Abstract ledger client interface.

Defines the contract for all ledger implementations.
Curve engine code depends only on this interface,
keeping Sui-specific details isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod

from datacurve.ledger.types import LedgerObject, MoveCall, TransactionResult


class LedgerClient(ABC):
    """Abstract base class for ledger API clients."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying transport."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying transport."""
        ...

    @property
    @abstractmethod
    def configured_for_submission(self) -> bool:
        """True when a signing key is available for transaction submission."""
        ...

    @abstractmethod
    async def read_object(self, object_id: str) -> LedgerObject:
        """Fetch the live content of an object.

        Raises:
            LedgerObjectNotFound: The ledger does not (yet) know the object.
            LedgerError: Any other RPC or transport failure.
        """
        ...

    @abstractmethod
    async def submit_move_call(self, call: MoveCall) -> TransactionResult:
        """Sign, submit, and await a Move call transaction.

        A transaction that executes but aborts is returned with
        status "failure"; it is not raised.

        Raises:
            ConfigurationMissing: No signing key is configured.
            LedgerError: The transaction could not be built or submitted.
        """
        ...
