"""Common types for predictor outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.types import Direction, ModelType, PositionSize


@dataclass(frozen=True)
class PredictorOutput:
    """Vote emitted by one predictor for one feature snapshot."""

    model_type: ModelType
    direction: Direction  # "buy", "sell" or "hold"
    confidence: float  # 0..100 score, or unit-less Q-value for the agent
    aux: float  # expected return, risk/reward or size multiplier (predictor-specific)
    size_hint: PositionSize | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
