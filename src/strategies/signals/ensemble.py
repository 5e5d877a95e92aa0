"""
Signal ensemble: majority vote of three predictors.

Policy:
- direction: buy if buy-votes > sell-votes, sell if the reverse, hold otherwise
- confidence: mean of the confidence-bearing predictors, clamped to [55, 95]
- position size: fixed staircase on confidence (<60 none, <70 low, <80 medium, else high)

The agent's size hint never overrides the staircase.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from core.types import Direction, PositionSize
from features.extractor import FeatureSnapshot
from features.technical_indicators import clamp, finite_or
from strategies.signals.base import Predictor, get_predictor_class
from strategies.signals.types import PredictorOutput

MIN_CONFIDENCE = 55.0
MAX_CONFIDENCE = 95.0


def vote_direction(votes: Iterable[Direction]) -> Direction:
    votes = list(votes)
    buy_votes = sum(1 for v in votes if v == "buy")
    sell_votes = sum(1 for v in votes if v == "sell")
    if buy_votes > sell_votes:
        return "buy"
    if sell_votes > buy_votes:
        return "sell"
    return "hold"


def clamp_confidence(value: float) -> float:
    return clamp(finite_or(value, MIN_CONFIDENCE), MIN_CONFIDENCE, MAX_CONFIDENCE)


def position_size_for(confidence: float) -> PositionSize:
    """Staircase mapping; `confidence` is clamped to [55, 95] first."""
    c = clamp_confidence(confidence)
    if c < 60:
        return "none"
    if c < 70:
        return "low"
    if c < 80:
        return "medium"
    return "high"


@dataclass(frozen=True)
class EnsembleDecision:
    direction: Direction
    confidence: float
    position_size: PositionSize
    predicted_reward: float
    risk_ratio: float
    outputs: tuple[PredictorOutput, ...]

    @property
    def votes(self) -> tuple[Direction, ...]:
        return tuple(o.direction for o in self.outputs)


class SignalEnsemble:
    """Combines trend, momentum and agent predictors into one decision."""

    def __init__(self, trend: Predictor, momentum: Predictor, agent: Predictor) -> None:
        self.trend = trend
        self.momentum = momentum
        self.agent = agent

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> SignalEnsemble:
        names = (cfg.get("signal", {}) or {}).get("predictors", {}) or {}
        return cls(
            trend=get_predictor_class(names.get("trend", "trend"))(),
            momentum=get_predictor_class(names.get("momentum", "momentum"))(),
            agent=get_predictor_class(names.get("agent", "agent"))(),
        )

    @property
    def predictors(self) -> tuple[Predictor, Predictor, Predictor]:
        return self.trend, self.momentum, self.agent

    def combine(self, snapshot: FeatureSnapshot) -> EnsembleDecision:
        # Exceptions from predictors propagate to the caller
        trend_out = self.trend.predict(snapshot)
        momentum_out = self.momentum.predict(snapshot)
        agent_out = self.agent.predict(snapshot)
        outputs = (trend_out, momentum_out, agent_out)

        scored = [
            out.confidence for p, out in zip(self.predictors, outputs) if p.has_confidence
        ]
        raw_confidence = sum(scored) / len(scored) if scored else MIN_CONFIDENCE
        confidence = clamp_confidence(raw_confidence)

        decision = EnsembleDecision(
            direction=vote_direction(o.direction for o in outputs),
            confidence=confidence,
            position_size=position_size_for(confidence),
            predicted_reward=finite_or(trend_out.aux),
            risk_ratio=finite_or(momentum_out.aux),
            outputs=outputs,
        )
        logger.debug(
            f"Ensemble votes={decision.votes} -> {decision.direction} "
            f"conf={confidence:.1f} size={decision.position_size} "
            f"(agent hint={agent_out.size_hint})"
        )
        return decision
