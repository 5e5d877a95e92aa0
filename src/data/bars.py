# src/data/bars.py
"""
Velas OHLCV inmutables y conversiones con pandas.

Diseño:
- Trabajamos con `datetime` en UTC (naive se interpreta como UTC).
- Las secuencias deben venir ordenadas con timestamp estrictamente creciente;
  los consumidores asumen una cadencia aproximadamente uniforme (~1 minuto).
- No hace I/O: la lectura de CSV vive en `data.feeds.csv_feed`.

Funciones públicas:
- validate_bars(bars)
- bars_from_frame(df, ts_col="timestamp")
- bars_to_frame(bars)
- closes(bars)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import math

import pandas as pd

__all__ = ["Bar", "validate_bars", "bars_from_frame", "bars_to_frame", "closes", "to_utc"]

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


def to_utc(ts: datetime) -> datetime:
    """Normaliza un datetime a UTC (los naive se asumen UTC)."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class Bar:
    """
    Observación OHLCV de un intervalo fijo.

    Atributos
    ---------
    timestamp : datetime
        Apertura del intervalo (UTC).
    open, high, low, close : float
        Precios del intervalo.
    volume : float
        Volumen negociado.
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", to_utc(self.timestamp))
        for name in OHLCV_COLUMNS:
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"Bar.{name} no es finito: {value!r}")
            object.__setattr__(self, name, value)


def validate_bars(bars: Sequence[Bar]) -> None:
    """Lanza ValueError si los timestamps no son estrictamente crecientes."""
    for prev, cur in zip(bars, bars[1:]):
        if cur.timestamp <= prev.timestamp:
            raise ValueError(
                f"Barras desordenadas: {cur.timestamp.isoformat()} <= {prev.timestamp.isoformat()}"
            )


def closes(bars: Iterable[Bar]) -> list[float]:
    return [b.close for b in bars]


def bars_from_frame(df: pd.DataFrame, ts_col: str = "timestamp") -> list[Bar]:
    """
    Convierte un DataFrame OHLCV en una lista de Bar ordenada.

    - `ts_col` puede ser datetime, ISO8601 o epoch (segundos o ms).
    - Si falta `volume` se rellena con 0; si faltan open/high/low se usa `close`.
    """
    if df.empty:
        return []
    if ts_col not in df.columns:
        raise ValueError(f"Falta la columna temporal '{ts_col}'. Columnas: {list(df.columns)}")
    if "close" not in df.columns:
        raise ValueError(f"Falta la columna 'close'. Columnas: {list(df.columns)}")

    frame = df.copy()
    raw_ts = frame[ts_col]
    if pd.api.types.is_numeric_dtype(raw_ts):
        # epoch en ms si es muy grande
        unit = "ms" if float(raw_ts.abs().max()) > 10_000_000_000 else "s"
        frame[ts_col] = pd.to_datetime(raw_ts, unit=unit, utc=True)
    else:
        frame[ts_col] = pd.to_datetime(raw_ts, utc=True)

    for col in ("open", "high", "low"):
        if col not in frame.columns:
            frame[col] = frame["close"]
    if "volume" not in frame.columns:
        frame["volume"] = 0.0

    frame = frame.dropna(subset=[ts_col, "close"])
    for col in ("open", "high", "low"):
        frame[col] = frame[col].fillna(frame["close"])
    frame["volume"] = frame["volume"].fillna(0.0)
    frame = frame.sort_values(ts_col, kind="stable")
    frame = frame.drop_duplicates(subset=[ts_col], keep="last")

    return [
        Bar(
            timestamp=row[ts_col].to_pydatetime(),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=float(row["volume"]),
        )
        for _, row in frame.iterrows()
    ]


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """Lista de Bar -> DataFrame con columnas timestamp + OHLCV."""
    return pd.DataFrame(
        {
            "timestamp": [b.timestamp for b in bars],
            "open": [b.open for b in bars],
            "high": [b.high for b in bars],
            "low": [b.low for b in bars],
            "close": [b.close for b in bars],
            "volume": [b.volume for b in bars],
        }
    )
