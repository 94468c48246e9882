"""Trainer data models."""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

Criterion = Literal["gini", "entropy"]


@dataclass(frozen=True)
class Hyperparameters:
    """Decision tree hyperparameters accepted from API callers."""

    max_depth: int = 5
    min_samples_leaf: int = 1
    min_samples_split: int = 2
    criterion: Criterion = "gini"


@dataclass
class ModelInfo:
    """Summary of a trained model, persisted alongside dataset records."""

    file_id: str
    features: list[str]
    target: str
    hyperparameters: Hyperparameters
    trained_at: str
    num_examples: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PredictionResult:
    """Predictions for a batch of rows.

    ``accuracy`` is set only when every row carried the target column.
    """

    predictions: list[Any]
    accuracy: float | None = None
    labels: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
