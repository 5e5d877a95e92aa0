"""Trend predictor: price vs EMA gap plus MACD line."""

from __future__ import annotations

from features.extractor import FeatureSnapshot
from features.technical_indicators import clamp, finite_or
from strategies.signals.base import Predictor, register_predictor
from strategies.signals.types import PredictorOutput
from strategies.signals.utils import classify_direction, linear_scale


@register_predictor("trend")
class TrendPredictor(Predictor):
    """
    Deterministic stand-in for the sequence model.

    Score in [-1, +1] = 0.7 * scaled(price/EMA gap) + 0.3 * scaled(MACD / price).
    Emits direction, confidence in [base, base + span] and an expected-return
    magnitude proportional to the score.
    """

    model_type = "LSTM"

    def __init__(
        self,
        gap_threshold: float = 0.001,
        direction_threshold: float = 0.1,
        base_confidence: float = 60.0,
        confidence_span: float = 25.0,
        max_expected_return: float = 0.02,
    ) -> None:
        self.gap_threshold = gap_threshold
        self.direction_threshold = direction_threshold
        self.base_confidence = base_confidence
        self.confidence_span = confidence_span
        self.max_expected_return = max_expected_return

    def predict(self, snapshot: FeatureSnapshot) -> PredictorOutput:
        price = snapshot.price
        gap = (price - snapshot.ema) / snapshot.ema if snapshot.ema > 0 else 0.0
        macd_rel = snapshot.macd.value / price if price > 0 else 0.0

        gap_score = linear_scale(finite_or(gap), self.gap_threshold, max_multiplier=4.0)
        macd_score = linear_scale(finite_or(macd_rel), self.gap_threshold, max_multiplier=4.0)
        score = clamp(0.7 * gap_score + 0.3 * macd_score, -1.0, 1.0)

        return PredictorOutput(
            model_type=self.model_type,
            direction=classify_direction(score, self.direction_threshold),
            confidence=self.base_confidence + self.confidence_span * abs(score),
            aux=abs(score) * self.max_expected_return,
            metadata={"score": score, "ema_gap": gap, "macd_rel": macd_rel},
        )
