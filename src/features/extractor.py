# src/features/extractor.py
"""
Construcción de la foto de features a partir de una ventana de barras.

Uso:
    extractor = FeatureExtractor()
    snapshot = extractor.extract(bars)
    snapshot.rsi, snapshot.macd.histogram, snapshot.as_dict()

Sin estado mutable: una misma instancia puede usarse desde varias
peticiones de señal a la vez.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from data.bars import Bar, closes
from features.technical_indicators import (
    BollingerBands,
    MacdValue,
    bollinger_bands,
    ema,
    finite_or,
    macd,
    rsi,
    volatility,
)


@dataclass(frozen=True)
class FeatureSnapshot:
    price: float
    rsi: float
    macd: MacdValue
    ema: float
    bollinger: BollingerBands
    volatility: float
    volume: float
    price_change: float

    def as_dict(self) -> dict[str, float]:
        return {
            "price": self.price,
            "rsi": self.rsi,
            "macd": self.macd.value,
            "macd_signal": self.macd.signal,
            "macd_histogram": self.macd.histogram,
            "ema": self.ema,
            "bb_upper": self.bollinger.upper,
            "bb_middle": self.bollinger.middle,
            "bb_lower": self.bollinger.lower,
            "volatility": self.volatility,
            "volume": self.volume,
            "price_change": self.price_change,
        }


class FeatureExtractor:
    """Calcula un FeatureSnapshot sobre el sufijo de barras recibido."""

    def __init__(
        self,
        rsi_period: int = 14,
        ema_period: int = 20,
        bb_period: int = 20,
        macd_rolling_signal: bool = False,
    ) -> None:
        self.rsi_period = rsi_period
        self.ema_period = ema_period
        self.bb_period = bb_period
        self.macd_rolling_signal = macd_rolling_signal

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> FeatureExtractor:
        section = cfg.get("features", {}) or {}
        return cls(
            rsi_period=int(section.get("rsi_period", 14)),
            ema_period=int(section.get("ema_period", 20)),
            bb_period=int(section.get("bb_period", 20)),
            macd_rolling_signal=bool(section.get("macd_rolling_signal", False)),
        )

    def extract(self, bars: Sequence[Bar]) -> FeatureSnapshot:
        if not bars:
            raise ValueError("Se necesita al menos una barra para extraer features")

        prices = closes(bars)
        latest = bars[-1]
        price_change = latest.close - bars[-2].close if len(bars) >= 2 else 0.0

        return FeatureSnapshot(
            price=latest.close,
            rsi=rsi(prices, self.rsi_period),
            macd=macd(prices, rolling_signal=self.macd_rolling_signal),
            ema=ema(prices, self.ema_period),
            bollinger=bollinger_bands(prices, self.bb_period),
            volatility=volatility(prices),
            volume=finite_or(latest.volume),
            price_change=finite_or(price_change),
        )
