# src/core/backtest.py

"""
BacktestEngine: reproduce una lista de Signals contra barras históricas.

✅ Principios:
- NO hace I/O a disco (eso queda para report/CLI).
- Determinista: mismas señales + mismas barras + mismo balance -> mismos trades,
  misma curva de equity y mismas métricas.
- Estado por ejecución (balance, trades, equity): una ejecución a la vez por
  instancia. Una llamada reentrante mientras corre lanza RuntimeError.

Ciclo de vida: idle -> running -> finished (run() vuelve a empezar desde cero).

Reglas de simulación:
1. Balance = initial_balance; equity sembrada en el timestamp de la primera barra.
2. Señales en orden temporal; las `hold` se ignoran; el precio de entrada es el
   cierre de la barra más cercana estrictamente dentro de la tolerancia (1 min).
   Sin precio -> no hay trade (no es un error).
3. size = balance * multiplicador(position_size) * risk_fraction (1%).
   Por debajo de min_trade_size (10) no se abre.
4. Salida a signal.timestamp + holding (15 min) con la misma búsqueda; si no hay
   barra el trade queda abierto.
5. pnl = (exit - entry) / entry * size * (+1 buy, -1 sell). Cada cierre actualiza
   el balance y añade un punto de equity.
6. Al final se cierran a la fuerza los abiertos al último cierre, con
   size = balance * risk_fraction en ese momento.

📦 Uso típico:
    engine = BacktestEngine(BacktestConfig(initial_balance=10_000))
    result = engine.run(signals, bars)
    result.metrics.win_rate, result.equity_curve, result.trades
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Literal

from loguru import logger

from core.metrics.performance import compute_performance
from core.types import (
    POSITION_MULTIPLIERS,
    Direction,
    EquityPoint,
    PerformanceMetrics,
    Signal,
    Trade,
)
from data.bars import Bar, to_utc, validate_bars
from features.technical_indicators import finite_or

EngineState = Literal["idle", "running", "finished"]


# ----------------------------- #
#  Configuración y resultados
# ----------------------------- #


@dataclass
class BacktestConfig:
    """Parámetros del backtest.

    Args:
        initial_balance: Balance inicial de la cuenta.
        price_tolerance: Distancia máxima (exclusiva) entre un instante y la barra usada.
        holding_period: Tiempo de permanencia simulado de cada trade.
        min_trade_size: Tamaño mínimo para abrir un trade.
        risk_fraction: Fracción del balance arriesgada por trade a multiplicador 1.0.
        position_multipliers: Multiplicador por tamaño de posición.
    """

    initial_balance: float = 10_000.0
    price_tolerance: timedelta = timedelta(minutes=1)
    holding_period: timedelta = timedelta(minutes=15)
    min_trade_size: float = 10.0
    risk_fraction: float = 0.01
    position_multipliers: dict[str, float] = field(
        default_factory=lambda: dict(POSITION_MULTIPLIERS)
    )

    def __post_init__(self) -> None:
        if self.initial_balance < 0:
            raise ValueError("initial_balance no puede ser negativo.")
        if self.price_tolerance <= timedelta(0):
            raise ValueError("price_tolerance debe ser > 0.")
        if not 0 <= self.risk_fraction <= 1:
            raise ValueError("risk_fraction debe estar en [0, 1].")

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> BacktestConfig:
        section = cfg.get("backtest", {}) or {}
        return cls(
            initial_balance=float(section.get("initial_balance", 10_000.0)),
            price_tolerance=timedelta(seconds=float(section.get("price_tolerance_sec", 60))),
            holding_period=timedelta(minutes=float(section.get("holding_minutes", 15))),
            min_trade_size=float(section.get("min_trade_size", 10.0)),
            risk_fraction=float(section.get("risk_fraction", 0.01)),
        )


@dataclass
class BacktestResult:
    trades: list[Trade]
    equity_curve: list[EquityPoint]
    metrics: PerformanceMetrics
    skipped_hold: int = 0
    skipped_no_price: int = 0
    skipped_min_size: int = 0

    @property
    def final_balance(self) -> float:
        return self.equity_curve[-1].balance if self.equity_curve else 0.0


def calculate_pnl(direction: Direction, entry_price: float, exit_price: float, size: float) -> float:
    """((exit - entry) / entry) * size * (+1 buy, -1 sell). 0 si entry no es positivo."""
    if entry_price <= 0:
        return 0.0
    multiplier = 1.0 if direction == "buy" else -1.0
    return finite_or((exit_price - entry_price) / entry_price * size * multiplier)


# ----------------------------- #
#  Búsqueda de precios
# ----------------------------- #


class PriceIndex:
    """Índice ordenado de barras para buscar la más cercana a un instante."""

    def __init__(self, bars: Sequence[Bar]) -> None:
        self._bars = list(bars)
        self._ts = [b.timestamp for b in self._bars]

    def nearest(self, when: datetime, tolerance: timedelta) -> Bar | None:
        """Barra más cercana con |ts - when| < tolerance; en empate, la anterior."""
        if not self._bars:
            return None
        when = to_utc(when)
        i = bisect_left(self._ts, when)
        candidates = [j for j in (i - 1, i) if 0 <= j < len(self._bars)]
        best = min(candidates, key=lambda j: abs(self._ts[j] - when))
        if abs(self._ts[best] - when) < tolerance:
            return self._bars[best]
        return None


# ----------------------------- #
#  Engine
# ----------------------------- #


class BacktestEngine:
    def __init__(self, config: BacktestConfig | None = None) -> None:
        self.config = config or BacktestConfig()
        self.state: EngineState = "idle"
        self.balance: float = self.config.initial_balance
        self.trades: list[Trade] = []
        self.equity: list[EquityPoint] = []

    # -------- Utilidades internas --------
    def _trade_size(self, multiplier: float) -> float:
        return self.balance * multiplier * self.config.risk_fraction

    def _close(self, trade: Trade, price: float, when: datetime, size: float) -> None:
        pnl = calculate_pnl(trade.direction, trade.entry_price, price, size)
        trade.size = size
        trade.close(exit_price=price, exit_time=when, pnl=pnl)
        self.balance += pnl
        self.equity.append(EquityPoint(timestamp=trade.exit_time, balance=self.balance))

    def _close_open_trades(self, last_bar: Bar) -> int:
        n = 0
        for trade in self.trades:
            if not trade.is_open:
                continue
            size = self.balance * self.config.risk_fraction
            self._close(trade, last_bar.close, last_bar.timestamp, size)
            n += 1
        return n

    # -------- API pública --------
    def run(
        self,
        signals: Sequence[Signal],
        bars: Sequence[Bar],
        initial_balance: float | None = None,
    ) -> BacktestResult:
        if self.state == "running":
            raise RuntimeError("BacktestEngine ya está ejecutando un backtest en esta instancia.")
        if not bars:
            raise ValueError("Se necesitan barras de mercado para el backtest.")
        validate_bars(bars)

        self.state = "running"
        try:
            result = self._run(signals, bars, initial_balance)
        except Exception:
            self.state = "idle"
            raise
        self.state = "finished"
        return result

    run_backtest = run

    def _run(
        self,
        signals: Sequence[Signal],
        bars: Sequence[Bar],
        initial_balance: float | None,
    ) -> BacktestResult:
        cfg = self.config
        self.balance = float(cfg.initial_balance if initial_balance is None else initial_balance)
        self.trades = []
        self.equity = [EquityPoint(timestamp=bars[0].timestamp, balance=self.balance)]
        prices = PriceIndex(bars)

        skipped_hold = skipped_no_price = skipped_min_size = 0

        # sorted() es estable: señales con el mismo timestamp conservan su orden
        for i, signal in enumerate(sorted(signals, key=lambda s: s.timestamp)):
            if not signal.is_actionable:
                skipped_hold += 1
                continue

            entry_bar = prices.nearest(signal.timestamp, cfg.price_tolerance)
            if entry_bar is None:
                skipped_no_price += 1
                logger.debug(f"Sin precio para {signal.id} en {signal.timestamp.isoformat()}")
                continue

            multiplier = cfg.position_multipliers.get(signal.position_size, 0.0)
            size = self._trade_size(multiplier)
            if size < cfg.min_trade_size:
                skipped_min_size += 1
                logger.debug(f"{signal.id}: size={size:.2f} < mínimo {cfg.min_trade_size}")
                continue

            trade = Trade(
                id=f"trade_{i:05d}_{signal.id}",
                signal=signal,
                entry_price=entry_bar.close,
                entry_time=signal.timestamp,
                size=size,
            )
            self.trades.append(trade)

            exit_bar = prices.nearest(signal.timestamp + cfg.holding_period, cfg.price_tolerance)
            if exit_bar is not None:
                self._close(trade, exit_bar.close, exit_bar.timestamp, size)

        forced = self._close_open_trades(bars[-1])
        metrics = compute_performance(self.trades, self.equity)

        logger.info(
            f"Backtest: {len(self.trades)} trades ({forced} cierres forzados), "
            f"balance {self.equity[0].balance:.2f} -> {self.balance:.2f}, "
            f"win_rate={metrics.win_rate:.1f}% maxDD={metrics.max_drawdown:.2f}%"
        )
        return BacktestResult(
            trades=list(self.trades),
            equity_curve=list(self.equity),
            metrics=metrics,
            skipped_hold=skipped_hold,
            skipped_no_price=skipped_no_price,
            skipped_min_size=skipped_min_size,
        )
