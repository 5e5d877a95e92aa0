from __future__ import annotations

from datetime import datetime, timedelta, timezone
import math

import pytest

from core.metrics import (
    calculate_avg_win_loss,
    calculate_expectancy,
    calculate_max_drawdown,
    calculate_profit_factor,
    calculate_returns,
    calculate_sharpe,
    calculate_win_rate,
    compute_performance,
)
from core.types import EquityPoint, PerformanceMetrics, Signal, Trade

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _trade(i: int, pnl: float | None) -> Trade:
    sig = Signal(
        id=f"s{i}",
        timestamp=T0 + timedelta(minutes=i),
        asset="EURUSD",
        direction="buy",
        confidence=70.0,
        position_size="medium",
    )
    t = Trade(id=f"t{i}", signal=sig, entry_price=1.1, entry_time=sig.timestamp, size=50.0)
    if pnl is not None:
        t.close(exit_price=1.1, exit_time=sig.timestamp + timedelta(minutes=15), pnl=pnl)
    return t


def _curve(balances: list[float]) -> list[EquityPoint]:
    return [EquityPoint(T0 + timedelta(minutes=i), b) for i, b in enumerate(balances)]


def test_returns_handle_zero_balance():
    assert calculate_returns([100.0]) == []
    assert calculate_returns([100.0, 110.0, 0.0, 5.0]) == pytest.approx([0.1, -1.0, 0.0])


def test_sharpe_degenerate_cases():
    assert calculate_sharpe([]) == 0.0
    assert calculate_sharpe([0.01, 0.01, 0.01]) == 0.0


def test_sharpe_population_std():
    # media 0.01, std poblacional 0.01
    assert calculate_sharpe([0.0, 0.02]) == pytest.approx(math.sqrt(252))


def test_max_drawdown():
    dd, peak, trough = calculate_max_drawdown([100.0, 120.0, 90.0, 130.0])
    assert dd == pytest.approx(0.25)
    assert (peak, trough) == (1, 2)
    assert calculate_max_drawdown([100.0]) == (0.0, 0, 0)
    assert calculate_max_drawdown([100.0, 110.0, 120.0])[0] == 0.0


def test_win_rate_counts_breakeven_as_loss():
    rate, wins, losses = calculate_win_rate([10.0, -5.0, 0.0])
    assert rate == pytest.approx(100.0 / 3)
    assert (wins, losses) == (1, 2)
    assert calculate_win_rate([]) == (0.0, 0, 0)


def test_avg_win_loss_profit_factor_expectancy():
    avg_win, avg_loss = calculate_avg_win_loss([10.0, -5.0, 0.0])
    assert avg_win == pytest.approx(10.0)
    assert avg_loss == pytest.approx(2.5)
    assert calculate_profit_factor(avg_win, avg_loss) == pytest.approx(4.0)
    assert calculate_profit_factor(10.0, 0.0) == 0.0
    assert calculate_expectancy(avg_win, avg_loss, 100.0 / 3) == pytest.approx(10 / 3 - 2.5 * 2 / 3)


def test_compute_performance_empty():
    assert compute_performance([], _curve([10_000.0])) == PerformanceMetrics.empty()
    assert compute_performance([], []) == PerformanceMetrics.empty()


def test_compute_performance_ignores_open_trades():
    trades = [_trade(0, 10.0), _trade(1, -5.0), _trade(2, None)]
    m = compute_performance(trades, _curve([10_000.0, 10_010.0, 10_005.0]))

    assert m.total_trades == 2
    assert m.win_rate == pytest.approx(50.0)
    assert m.accuracy == m.win_rate
    assert m.total_pnl == pytest.approx(5.0)
    assert m.avg_win == pytest.approx(10.0)
    assert m.avg_loss == pytest.approx(5.0)
    assert m.profit_factor == pytest.approx(2.0)
    assert m.expectancy == pytest.approx(2.5)
    assert m.max_drawdown == pytest.approx(5.0 / 10_010.0 * 100)
    assert m.sharpe_ratio != 0.0


def test_compute_performance_cancelled_trades_ignored():
    t = _trade(0, None)
    t.cancel()
    m = compute_performance([t], _curve([10_000.0]))
    assert m == PerformanceMetrics.empty()


def test_max_drawdown_capped_at_100_percent():
    m = compute_performance([_trade(0, -20_000.0)], _curve([10_000.0, -10_000.0]))
    assert m.max_drawdown == 100.0
    assert m.win_rate == 0.0
