"""Decision tree trainer over uploaded CSV datasets.

The last CSV column is the target; every other column is a numeric
feature. Trained models live in memory keyed by the dataset's blob file
id, so a process restart requires retraining before prediction.
"""

import io
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import pandas as pd
from sklearn.tree import DecisionTreeClassifier

from datacurve.exceptions import TrainingError
from datacurve.logging import get_logger
from datacurve.training.models import Hyperparameters, ModelInfo, PredictionResult

logger = get_logger(__name__)

RANDOM_STATE = 3


@dataclass
class _TrainedModel:
    classifier: DecisionTreeClassifier
    info: ModelInfo
    numeric_target: bool = False


def _validate(hyperparameters: Hyperparameters) -> None:
    if hyperparameters.criterion not in ("gini", "entropy"):
        raise TrainingError(f"Unsupported criterion: {hyperparameters.criterion!r}")
    if hyperparameters.max_depth < 1:
        raise TrainingError("max_depth must be at least 1")
    if hyperparameters.min_samples_leaf < 1:
        raise TrainingError("min_samples_leaf must be at least 1")
    if hyperparameters.min_samples_split < 2:
        raise TrainingError("min_samples_split must be at least 2")


def read_csv(content: bytes) -> pd.DataFrame:
    """Parse CSV bytes, dropping rows that are entirely empty."""
    try:
        frame = pd.read_csv(io.BytesIO(content), skipinitialspace=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise TrainingError(f"Could not parse CSV: {e}") from e
    return frame.dropna(how="all")


def _numeric_features(frame: pd.DataFrame, features: list[str]) -> pd.DataFrame:
    missing = [f for f in features if f not in frame.columns]
    if missing:
        raise TrainingError(f"Missing feature columns: {', '.join(missing)}")

    numeric = frame[features].apply(pd.to_numeric, errors="coerce")
    bad = [f for f in features if numeric[f].isna().any()]
    if bad:
        raise TrainingError(f"Non-numeric or empty values in feature columns: {', '.join(bad)}")
    return numeric


def _count_matches(predictions: list[Any], labels: pd.Series, numeric_target: bool) -> int:
    if numeric_target:
        values = pd.to_numeric(labels, errors="coerce").astype(float).tolist()
        # NaN never equals a prediction
        return sum(float(p) == v for p, v in zip(predictions, values))
    return sum(str(p) == str(l) for p, l in zip(predictions, labels.tolist()))


class DecisionTreeTrainer:
    """Fits and serves scikit-learn decision trees per dataset."""

    def __init__(self) -> None:
        self._models: dict[str, _TrainedModel] = {}

    def has_model(self, file_id: str) -> bool:
        return file_id in self._models

    def fit(
        self,
        file_id: str,
        content: bytes,
        hyperparameters: Hyperparameters = Hyperparameters(),
    ) -> ModelInfo:
        """Train a classifier on CSV ``content`` and register it under ``file_id``.

        Raises:
            TrainingError: Invalid hyperparameters, unparseable or empty
                data, no feature columns, no target values, or non-numeric
                features.
        """
        _validate(hyperparameters)
        frame = read_csv(content)
        if frame.empty:
            raise TrainingError("No valid data rows found in the CSV file")

        columns = [str(c) for c in frame.columns]
        frame.columns = columns
        target = columns[-1]
        features = columns[:-1]
        if not features:
            raise TrainingError("No feature columns found; the CSV needs at least two columns")

        frame = frame[frame[target].notna()]
        frame = frame[frame[target].astype(str).str.strip() != ""]
        if frame.empty:
            raise TrainingError(f'Target column "{target}" has no values')

        X = _numeric_features(frame, features)
        y = frame[target]
        is_bool = pd.api.types.is_bool_dtype(y)
        numeric_target = pd.api.types.is_numeric_dtype(y) and not is_bool
        # Blank target cells make pandas read integer labels as float
        if pd.api.types.is_float_dtype(y) and (y == y.round()).all():
            y = y.astype("int64")

        logger.info(
            "training_model",
            file_id=file_id,
            rows=len(frame),
            features=features,
            target=target,
            max_depth=hyperparameters.max_depth,
            criterion=hyperparameters.criterion,
        )

        classifier = DecisionTreeClassifier(
            max_depth=hyperparameters.max_depth,
            min_samples_leaf=hyperparameters.min_samples_leaf,
            min_samples_split=hyperparameters.min_samples_split,
            criterion=hyperparameters.criterion,
            random_state=RANDOM_STATE,
        )
        classifier.fit(X.to_numpy(), y.to_numpy())

        info = ModelInfo(
            file_id=file_id,
            features=features,
            target=target,
            hyperparameters=hyperparameters,
            trained_at=datetime.now(timezone.utc).isoformat(),
            num_examples=len(frame),
        )
        self._models[file_id] = _TrainedModel(
            classifier=classifier, info=info, numeric_target=numeric_target
        )
        logger.info("model_trained", file_id=file_id, num_examples=info.num_examples)
        return info

    def predict(self, file_id: str, rows: list[dict[str, Any]]) -> PredictionResult:
        """Predict the target for ``rows`` (dicts keyed by column name).

        When every row carries the target column, accuracy is the fraction
        of predictions equal to it. Numeric targets compare by value, so
        1, 1.0 and "1" all match; other targets compare as strings.
        """
        trained = self._models.get(file_id)
        if trained is None:
            raise TrainingError(f"No trained model found for file ID: {file_id}")
        if not rows:
            raise TrainingError("No rows to predict")

        frame = pd.DataFrame(rows)
        X = _numeric_features(frame, trained.info.features)
        predictions = trained.classifier.predict(X.to_numpy()).tolist()

        result = PredictionResult(predictions=predictions)
        target = trained.info.target
        if target in frame.columns and frame[target].notna().all():
            labels = frame[target].tolist()
            result.labels = labels
            correct = _count_matches(predictions, frame[target], trained.numeric_target)
            result.accuracy = correct / len(labels)

        logger.info(
            "model_predicted",
            file_id=file_id,
            rows=len(rows),
            accuracy=result.accuracy,
        )
        return result

    def predict_csv(self, file_id: str, content: bytes) -> PredictionResult:
        return self.predict(file_id, read_csv(content).to_dict(orient="records"))
