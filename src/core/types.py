# src/core/types.py
"""
Tipos y estructuras comunes para la generación de señales y el backtest.
Las señales son inmutables; los trades tienen un ciclo de vida
open -> closed | cancelled y nunca se reabren.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
import math
from typing import Any, Literal, get_args

from data.bars import to_utc

# ------------------------------ Literales ---------------------------------

Direction = Literal["buy", "sell", "hold"]
PositionSize = Literal["none", "low", "medium", "high"]
ModelType = Literal["LSTM", "Transformer", "Q-Learning", "Manual", "Hybrid"]
TradeStatus = Literal["open", "closed", "cancelled"]

DIRECTIONS: tuple[str, ...] = get_args(Direction)
POSITION_SIZES: tuple[str, ...] = get_args(PositionSize)
MODEL_TYPES: tuple[str, ...] = get_args(ModelType)

# Fracción del riesgo por trade según el tamaño de posición
POSITION_MULTIPLIERS: dict[str, float] = {"none": 0.0, "low": 0.25, "medium": 0.5, "high": 1.0}


class TradeStateError(RuntimeError):
    """Transición ilegal en el ciclo de vida de un Trade."""


def _check_finite(name: str, value: float) -> float:
    v = float(value)
    if not math.isfinite(v):
        raise ValueError(f"{name} debe ser finito, recibido {value!r}")
    return v


# ------------------------------ Dataclasses -------------------------------


@dataclass(frozen=True)
class Signal:
    """
    Recomendación de trading generada por el ensemble (o manual).

    Se pasa por valor al backtest y a cualquier dispatcher.
    """

    id: str
    timestamp: datetime
    asset: str
    direction: Direction
    confidence: float
    position_size: PositionSize
    predicted_reward: float = 0.0
    risk_ratio: float = 0.0
    model_version: str = "v2.1.0"
    model_type: ModelType = "Hybrid"

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise ValueError(f"direction inválida: {self.direction!r}")
        if self.position_size not in POSITION_SIZES:
            raise ValueError(f"position_size inválido: {self.position_size!r}")
        if self.model_type not in MODEL_TYPES:
            raise ValueError(f"model_type inválido: {self.model_type!r}")
        confidence = _check_finite("confidence", self.confidence)
        if not 0.0 <= confidence <= 100.0:
            raise ValueError(f"confidence fuera de [0, 100]: {confidence}")
        object.__setattr__(self, "confidence", confidence)
        object.__setattr__(
            self, "predicted_reward", _check_finite("predicted_reward", self.predicted_reward)
        )
        object.__setattr__(self, "risk_ratio", _check_finite("risk_ratio", self.risk_ratio))
        object.__setattr__(self, "timestamp", to_utc(self.timestamp))

    @property
    def is_actionable(self) -> bool:
        return self.direction != "hold"

    def as_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        return d


@dataclass
class Trade:
    """Ejecución simulada de una Signal contra precios históricos."""

    id: str
    signal: Signal
    entry_price: float
    entry_time: datetime
    size: float
    exit_price: float | None = None
    exit_time: datetime | None = None
    pnl: float | None = None
    status: TradeStatus = "open"

    @property
    def direction(self) -> Direction:
        return self.signal.direction

    @property
    def is_win(self) -> bool | None:
        if self.pnl is None:
            return None
        return self.pnl > 0

    @property
    def is_open(self) -> bool:
        return self.status == "open"

    def close(self, exit_price: float, exit_time: datetime, pnl: float) -> None:
        if self.status != "open":
            raise TradeStateError(f"Trade {self.id} no está abierto (status={self.status})")
        self.exit_price = _check_finite("exit_price", exit_price)
        self.exit_time = to_utc(exit_time)
        self.pnl = _check_finite("pnl", pnl)
        self.status = "closed"

    def cancel(self) -> None:
        if self.status != "open":
            raise TradeStateError(f"Trade {self.id} no está abierto (status={self.status})")
        self.status = "cancelled"

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "signal_id": self.signal.id,
            "asset": self.signal.asset,
            "direction": self.direction,
            "position_size": self.signal.position_size,
            "entry_price": self.entry_price,
            "entry_time": self.entry_time.isoformat(),
            "size": self.size,
            "exit_price": self.exit_price,
            "exit_time": self.exit_time.isoformat() if self.exit_time else None,
            "pnl": self.pnl,
            "is_win": self.is_win,
            "status": self.status,
        }


@dataclass(frozen=True)
class EquityPoint:
    timestamp: datetime
    balance: float


@dataclass(frozen=True)
class PerformanceMetrics:
    accuracy: float
    win_rate: float
    sharpe_ratio: float
    max_drawdown: float
    expectancy: float
    total_pnl: float
    total_trades: int
    avg_win: float
    avg_loss: float
    profit_factor: float

    @classmethod
    def empty(cls) -> PerformanceMetrics:
        return cls(
            accuracy=0.0,
            win_rate=0.0,
            sharpe_ratio=0.0,
            max_drawdown=0.0,
            expectancy=0.0,
            total_pnl=0.0,
            total_trades=0,
            avg_win=0.0,
            avg_loss=0.0,
            profit_factor=0.0,
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = [
    "Direction",
    "PositionSize",
    "ModelType",
    "TradeStatus",
    "DIRECTIONS",
    "POSITION_SIZES",
    "MODEL_TYPES",
    "POSITION_MULTIPLIERS",
    "TradeStateError",
    "Signal",
    "Trade",
    "EquityPoint",
    "PerformanceMetrics",
]
