"""
Core metrics package.

Trading performance metrics (Sharpe, drawdown, profit factor, etc.) computed
from closed trades and an equity curve.
"""

from __future__ import annotations

from .performance import (
    calculate_avg_win_loss,
    calculate_expectancy,
    calculate_max_drawdown,
    calculate_profit_factor,
    calculate_returns,
    calculate_sharpe,
    calculate_win_rate,
    compute_performance,
)

__all__ = [
    "calculate_returns",
    "calculate_sharpe",
    "calculate_max_drawdown",
    "calculate_profit_factor",
    "calculate_win_rate",
    "calculate_avg_win_loss",
    "calculate_expectancy",
    "compute_performance",
]
