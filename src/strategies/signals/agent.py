"""
Agent predictor: greedy action over a fixed Q-table.

State = (volatility regime, RSI regime):
- volatility > 0.2 -> "high", else "low"
- RSI > 70 -> "overbought", RSI < 30 -> "oversold", else "neutral"

Actions are (direction, size) pairs. The size hint is decoupled from any
confidence score; the ensemble treats it as informational.
"""

from __future__ import annotations

import random

from core.types import POSITION_MULTIPLIERS, Direction, PositionSize
from features.extractor import FeatureSnapshot
from strategies.signals.base import Predictor, register_predictor
from strategies.signals.types import PredictorOutput

State = tuple[str, str]

ACTIONS: tuple[tuple[Direction, PositionSize], ...] = (
    ("buy", "low"),
    ("buy", "medium"),
    ("sell", "low"),
    ("sell", "medium"),
    ("hold", "none"),
)

# Q-values per state, aligned with ACTIONS
DEFAULT_Q_TABLE: dict[State, tuple[float, ...]] = {
    ("low", "oversold"): (6.0, 8.0, 1.0, 0.5, 3.0),
    ("high", "oversold"): (7.0, 4.0, 1.0, 0.5, 3.0),
    ("low", "overbought"): (1.0, 0.5, 6.0, 8.0, 3.0),
    ("high", "overbought"): (1.0, 0.5, 7.0, 4.0, 3.0),
    ("low", "neutral"): (2.0, 1.5, 2.0, 1.5, 5.0),
    ("high", "neutral"): (2.0, 1.0, 2.0, 1.0, 6.0),
}


def discretize(snapshot: FeatureSnapshot, vol_threshold: float = 0.2) -> State:
    vol = "high" if snapshot.volatility > vol_threshold else "low"
    if snapshot.rsi > 70:
        trend = "overbought"
    elif snapshot.rsi < 30:
        trend = "oversold"
    else:
        trend = "neutral"
    return vol, trend


@register_predictor("agent")
class AgentPredictor(Predictor):
    model_type = "Q-Learning"
    has_confidence = False

    def __init__(
        self,
        q_table: dict[State, tuple[float, ...]] | None = None,
        epsilon: float = 0.0,
        rng: random.Random | None = None,
        vol_threshold: float = 0.2,
    ) -> None:
        self.q_table = dict(q_table or DEFAULT_Q_TABLE)
        self.epsilon = epsilon
        self.rng = rng or random.Random(0)
        self.vol_threshold = vol_threshold

    def select_action(self, state: State) -> int:
        if self.epsilon > 0 and self.rng.random() < self.epsilon:
            return self.rng.randrange(len(ACTIONS))
        q_values = self.q_table.get(state)
        if q_values is None:
            return len(ACTIONS) - 1  # hold
        # max() keeps the first index on ties
        return max(range(len(ACTIONS)), key=lambda i: q_values[i])

    def predict(self, snapshot: FeatureSnapshot) -> PredictorOutput:
        state = discretize(snapshot, self.vol_threshold)
        idx = self.select_action(state)
        direction, size = ACTIONS[idx]
        q_values = self.q_table.get(state)
        q_value = q_values[idx] if q_values is not None else 0.0

        return PredictorOutput(
            model_type=self.model_type,
            direction=direction,
            confidence=q_value,
            aux=POSITION_MULTIPLIERS[size],
            size_hint=size,
            metadata={"state": state, "action": idx},
        )
