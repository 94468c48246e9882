"""Decision tree training via scikit-learn."""

from datacurve.training.models import Hyperparameters, ModelInfo, PredictionResult
from datacurve.training.trainer import DecisionTreeTrainer

__all__ = ["DecisionTreeTrainer", "Hyperparameters", "ModelInfo", "PredictionResult"]
