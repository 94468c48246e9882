"""Custom exceptions for the datacurve service.

All engine, collaborator, and dataset exceptions live here to avoid
circular imports between modules. The HTTP layer maps each class to a
status code in datacurve.api.errors.
"""


class DataCurveError(Exception):
    """Base exception for all datacurve errors."""


class ConfigurationMissing(DataCurveError):
    """Raised when required ledger or storage identifiers/credentials are absent."""


class InvalidAmount(DataCurveError, ValueError):
    """Raised when a quantity or identifier fails validation before use."""


class InsufficientSupply(DataCurveError):
    """Raised when a sale would take more tokens than the curve's supply."""

    def __init__(self, supply: int, token_amount: int) -> None:
        self.supply = supply
        self.token_amount = token_amount
        super().__init__(
            f"Cannot sell {token_amount} tokens: curve supply is only {supply}"
        )


class LedgerError(DataCurveError):
    """Raised by ledger clients for RPC or transport failures."""


class LedgerObjectNotFound(LedgerError):
    """Raised when the ledger reports that an object does not exist (yet)."""


class LedgerReadFailure(DataCurveError):
    """Raised when curve state cannot be read, after retries where applicable."""


class LedgerTransactionFailure(DataCurveError):
    """Raised when a submitted transaction reports a non-success status."""

    def __init__(self, error: str, digest: str | None = None) -> None:
        self.error = error
        self.digest = digest
        super().__init__(error)


class StorageError(DataCurveError):
    """Raised when the blob store rejects or fails a request."""


class TrainingError(DataCurveError):
    """Raised when a model cannot be trained or used for prediction."""


class DatasetError(DataCurveError):
    """Raised when a dataset upload or lookup request is invalid."""


class DatasetNotFound(DatasetError):
    """Raised when no dataset matches the requested title."""
