"""Predictors and the signal ensemble."""

from strategies.signals.agent import AgentPredictor
from strategies.signals.base import (
    Predictor,
    get_predictor_class,
    list_predictors,
    register_predictor,
)
from strategies.signals.ensemble import (
    EnsembleDecision,
    SignalEnsemble,
    clamp_confidence,
    position_size_for,
    vote_direction,
)
from strategies.signals.momentum import MomentumPredictor
from strategies.signals.trend import TrendPredictor
from strategies.signals.types import PredictorOutput

__all__ = [
    "Predictor",
    "PredictorOutput",
    "register_predictor",
    "get_predictor_class",
    "list_predictors",
    "TrendPredictor",
    "MomentumPredictor",
    "AgentPredictor",
    "SignalEnsemble",
    "EnsembleDecision",
    "vote_direction",
    "clamp_confidence",
    "position_size_for",
]
