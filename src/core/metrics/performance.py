from __future__ import annotations

# -----------------------------------------------------------------------------
# Métricas de Performance para Trading (Sharpe, MaxDD, Profit Factor, etc.)
# -----------------------------------------------------------------------------

from collections.abc import Sequence
import math

from core.types import EquityPoint, PerformanceMetrics, Trade
from features.technical_indicators import finite_or

ANNUALIZATION = math.sqrt(252)


def calculate_returns(equity_curve: Sequence[float]) -> list[float]:
    """Calcula retornos porcentuales entre puntos consecutivos de equity."""
    if len(equity_curve) < 2:
        return []
    returns: list[float] = []
    for i in range(1, len(equity_curve)):
        if equity_curve[i - 1] == 0:
            returns.append(0.0)
        else:
            ret = (equity_curve[i] - equity_curve[i - 1]) / equity_curve[i - 1]
            returns.append(ret)
    return returns


def calculate_sharpe(returns: Sequence[float], annualization: float = ANNUALIZATION) -> float:
    """
    Sharpe Ratio = media / desviación estándar poblacional, anualizado por sqrt(252).

    Interpretación:
    - > 1.0: Bueno
    - > 2.0: Muy bueno
    - > 3.0: Excelente

    Devuelve 0 si no hay retornos o la desviación es 0.
    """
    if not returns:
        return 0.0
    mean_return = sum(returns) / len(returns)
    variance = sum((r - mean_return) ** 2 for r in returns) / len(returns)
    std_return = variance**0.5
    if std_return == 0:
        return 0.0
    return finite_or(mean_return / std_return * annualization)


def calculate_max_drawdown(equity_curve: Sequence[float]) -> tuple[float, int, int]:
    """
    Maximum Drawdown = Máxima pérdida desde peak hasta trough.

    Returns:
        (max_dd, peak_idx, trough_idx) con max_dd como fracción en [0, 1]
    """
    if not equity_curve or len(equity_curve) < 2:
        return 0.0, 0, 0

    peak = equity_curve[0]
    peak_idx = 0
    max_dd = 0.0
    max_dd_peak_idx = 0
    max_dd_trough_idx = 0

    for i, value in enumerate(equity_curve):
        if value > peak:
            peak = value
            peak_idx = i
        dd = (peak - value) / peak if peak > 0 else 0.0
        if dd > max_dd:
            max_dd = dd
            max_dd_peak_idx = peak_idx
            max_dd_trough_idx = i

    return min(max_dd, 1.0), max_dd_peak_idx, max_dd_trough_idx


def calculate_win_rate(trades_pnl: Sequence[float]) -> tuple[float, int, int]:
    """
    Win Rate = Winning Trades / Total Trades * 100

    Un trade con pnl == 0 no es ganador y cuenta en el lado perdedor.

    Returns:
        (win_rate_pct, num_wins, num_losses)
    """
    if not trades_pnl:
        return 0.0, 0, 0

    num_wins = sum(1 for pnl in trades_pnl if pnl > 0)
    num_losses = len(trades_pnl) - num_wins
    return num_wins / len(trades_pnl) * 100.0, num_wins, num_losses


def calculate_avg_win_loss(trades_pnl: Sequence[float]) -> tuple[float, float]:
    """
    Ganancia media de los ganadores y pérdida media (en valor absoluto) del resto.

    Returns:
        (avg_win, avg_loss)
    """
    winning_trades = [pnl for pnl in trades_pnl if pnl > 0]
    losing_trades = [pnl for pnl in trades_pnl if pnl <= 0]

    avg_win = sum(winning_trades) / len(winning_trades) if winning_trades else 0.0
    avg_loss = abs(sum(losing_trades) / len(losing_trades)) if losing_trades else 0.0

    return avg_win, avg_loss


def calculate_profit_factor(avg_win: float, avg_loss: float) -> float:
    """
    Profit Factor = avg_win / avg_loss (0 si no hay pérdida media).

    Interpretación:
    - > 1.0: Estrategia rentable
    - > 1.5: Buena
    - > 2.0: Excelente
    """
    if avg_loss <= 0:
        return 0.0
    return finite_or(avg_win / avg_loss)


def calculate_expectancy(avg_win: float, avg_loss: float, win_rate_pct: float) -> float:
    wr = win_rate_pct / 100.0
    return finite_or(avg_win * wr - avg_loss * (1.0 - wr))


def compute_performance(
    trades: Sequence[Trade], equity_curve: Sequence[EquityPoint]
) -> PerformanceMetrics:
    """
    Reduce los trades cerrados y la curva de equity a PerformanceMetrics.

    Se recalcula siempre desde cero; los trades abiertos o cancelados se ignoran.
    """
    closed_pnl = [float(t.pnl) for t in trades if t.status == "closed" and t.pnl is not None]
    balances = [p.balance for p in equity_curve]

    if not closed_pnl and len(balances) < 2:
        return PerformanceMetrics.empty()

    win_rate, _, _ = calculate_win_rate(closed_pnl)
    avg_win, avg_loss = calculate_avg_win_loss(closed_pnl)
    max_dd, _, _ = calculate_max_drawdown(balances)

    return PerformanceMetrics(
        accuracy=win_rate,
        win_rate=win_rate,
        sharpe_ratio=calculate_sharpe(calculate_returns(balances)),
        max_drawdown=finite_or(max_dd * 100.0),
        expectancy=calculate_expectancy(avg_win, avg_loss, win_rate),
        total_pnl=finite_or(sum(closed_pnl)),
        total_trades=len(closed_pnl),
        avg_win=finite_or(avg_win),
        avg_loss=finite_or(avg_loss),
        profit_factor=calculate_profit_factor(avg_win, avg_loss),
    )
