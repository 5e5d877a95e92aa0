# src/features/technical_indicators.py
"""
Indicadores técnicos puros sobre una serie ordenada de cierres.

Indicadores implementados:
- Medias: EMA (semilla = primer precio)
- Momentum: RSI, MACD
- Volatilidad: Bollinger Bands, volatilidad anualizada de log-retornos

Diseño:
- Funciones sin estado (numpy), seguras para llamar en paralelo.
- Totales: con datos insuficientes devuelven un valor neutro documentado,
  nunca lanzan ni devuelven NaN/Inf.

Valores por defecto con datos insuficientes:
- rsi -> 50.0 (menos de period+1 precios); 100.0 si la pérdida media es 0
- ema -> 0.0 (serie vacía)
- bollinger_bands -> bandas = precio (1 elemento), ceros (vacío)
- volatility -> 0.0 (menos de 2 precios)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math

import numpy as np

__all__ = [
    "MacdValue",
    "BollingerBands",
    "rsi",
    "ema",
    "ema_series",
    "macd",
    "bollinger_bands",
    "volatility",
    "clamp",
    "finite_or",
]

RSI_NEUTRAL = 50.0
RSI_MAX = 100.0
TRADING_DAYS = 252


@dataclass(frozen=True)
class MacdValue:
    value: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float

    @property
    def width(self) -> float:
        return self.upper - self.lower


# ==================== HELPERS ====================


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def finite_or(value: float, default: float = 0.0) -> float:
    """Devuelve `value` como float si es finito; si no, `default`."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    return v if math.isfinite(v) else default


def _as_array(prices: Sequence[float]) -> np.ndarray:
    return np.asarray(prices, dtype=float)


# ==================== INDICADORES ====================


def rsi(prices: Sequence[float], period: int = 14) -> float:
    """
    Relative Strength Index sobre exactamente los últimos `period` deltas.

    Con menos de `period + 1` precios devuelve 50 (neutral). Si la pérdida
    media es 0 el cociente no está definido y se devuelve 100.
    """
    arr = _as_array(prices)
    if period <= 0 or arr.size < period + 1:
        return RSI_NEUTRAL

    deltas = np.diff(arr[-(period + 1) :])
    avg_gain = float(np.clip(deltas, 0.0, None).sum()) / period
    avg_loss = float(np.clip(-deltas, 0.0, None).sum()) / period

    if avg_loss == 0:
        return RSI_MAX

    rs = avg_gain / avg_loss
    return finite_or(100.0 - (100.0 / (1.0 + rs)), RSI_NEUTRAL)


def ema_series(prices: Sequence[float], period: int) -> np.ndarray:
    """EMA para cada punto, sembrada con el primer elemento (no con SMA)."""
    arr = _as_array(prices)
    out = np.empty_like(arr)
    if arr.size == 0:
        return out
    k = 2.0 / (period + 1)
    out[0] = arr[0]
    for i in range(1, arr.size):
        out[i] = arr[i] * k + out[i - 1] * (1.0 - k)
    return out


def ema(prices: Sequence[float], period: int) -> float:
    """
    Exponential Moving Average del último punto.

    La semilla es el primer precio de la serie, no una SMA: en series cortas
    el valor es menos preciso que una EMA estándar. Es la regla de siembra
    intencionada. Serie vacía -> 0.0.
    """
    series = ema_series(prices, period)
    if series.size == 0:
        return 0.0
    return finite_or(series[-1])


def macd(
    prices: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal_period: int = 9,
    rolling_signal: bool = False,
) -> MacdValue:
    """
    MACD = EMA(fast) - EMA(slow).

    Por defecto la línea de señal es la EMA(signal_period) de la serie de un
    solo elemento [macd], es decir, igual al propio MACD (histograma 0).
    Con `rolling_signal=True` se usa la EMA rodante del histórico de MACD.
    """
    arr = _as_array(prices)
    if arr.size == 0:
        return MacdValue(0.0, 0.0, 0.0)

    if rolling_signal:
        line = ema_series(arr, fast) - ema_series(arr, slow)
        value = finite_or(line[-1])
        signal = ema(line, signal_period)
    else:
        value = finite_or(ema(arr, fast) - ema(arr, slow))
        signal = ema([value], signal_period)

    return MacdValue(value=value, signal=signal, histogram=finite_or(value - signal))


def bollinger_bands(
    prices: Sequence[float], period: int = 20, num_std: float = 2.0
) -> BollingerBands:
    """SMA y desviación estándar poblacional de los últimos `period` precios."""
    arr = _as_array(prices)
    if arr.size == 0:
        return BollingerBands(0.0, 0.0, 0.0)

    window = arr[-period:] if period > 0 else arr
    middle = finite_or(window.mean())
    std = finite_or(window.std(ddof=0))

    return BollingerBands(
        upper=middle + num_std * std,
        middle=middle,
        lower=middle - num_std * std,
    )


def volatility(prices: Sequence[float], periods_per_year: int = TRADING_DAYS) -> float:
    """
    Desviación estándar poblacional de los log-retornos de toda la serie,
    anualizada por sqrt(periods_per_year). Precios no positivos se ignoran.
    """
    arr = _as_array(prices)
    arr = arr[np.isfinite(arr) & (arr > 0)]
    if arr.size < 2:
        return 0.0

    log_returns = np.diff(np.log(arr))
    return finite_or(float(log_returns.std(ddof=0)) * math.sqrt(periods_per_year))
