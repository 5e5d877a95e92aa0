"""Utility functions for predictor scoring."""

from __future__ import annotations

from core.types import Direction


def classify_direction(score: float, threshold: float) -> Direction:
    """
    Classify a score into a direction vote.

    Args:
        score: Signed score, positive = bullish
        threshold: Dead band around zero that maps to "hold"

    Returns:
        "buy", "sell" or "hold"
    """
    if score > threshold:
        return "buy"
    elif score < -threshold:
        return "sell"
    else:
        return "hold"


def linear_scale(value: float, threshold: float, max_multiplier: float = 3.0) -> float:
    """
    Scale a value linearly to [-1, +1] range.

    Args:
        value: Input value
        threshold: Reference threshold
        max_multiplier: How many thresholds = max signal

    Returns:
        Scaled value in [-1, +1]
    """
    max_value = threshold * max_multiplier
    if max_value <= 0:
        return 0.0

    if value >= max_value:
        return 1.0
    elif value <= -max_value:
        return -1.0
    else:
        return value / max_value
