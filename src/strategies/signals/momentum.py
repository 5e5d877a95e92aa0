"""Momentum predictor: RSI level plus position inside the Bollinger bands."""

from __future__ import annotations

from features.extractor import FeatureSnapshot
from features.technical_indicators import clamp
from strategies.signals.base import Predictor, register_predictor
from strategies.signals.types import PredictorOutput
from strategies.signals.utils import classify_direction


@register_predictor("momentum")
class MomentumPredictor(Predictor):
    """
    Deterministic stand-in for the attention model.

    Returns direction, confidence and a risk/reward ratio in [1.5, 2.5].
    """

    model_type = "Transformer"

    def __init__(
        self,
        rsi_weight: float = 0.6,
        direction_threshold: float = 0.15,
        base_confidence: float = 65.0,
        confidence_span: float = 20.0,
        base_risk_reward: float = 1.5,
    ) -> None:
        self.rsi_weight = rsi_weight
        self.direction_threshold = direction_threshold
        self.base_confidence = base_confidence
        self.confidence_span = confidence_span
        self.base_risk_reward = base_risk_reward

    def predict(self, snapshot: FeatureSnapshot) -> PredictorOutput:
        rsi_score = (snapshot.rsi - 50.0) / 50.0

        bands = snapshot.bollinger
        half_width = bands.upper - bands.middle
        if half_width > 0:
            band_score = clamp((snapshot.price - bands.middle) / half_width, -1.0, 1.0)
        else:
            band_score = 0.0

        score = clamp(
            self.rsi_weight * rsi_score + (1.0 - self.rsi_weight) * band_score, -1.0, 1.0
        )

        return PredictorOutput(
            model_type=self.model_type,
            direction=classify_direction(score, self.direction_threshold),
            confidence=self.base_confidence + self.confidence_span * abs(score),
            aux=self.base_risk_reward + abs(score),
            metadata={"score": score, "rsi_score": rsi_score, "band_score": band_score},
        )
