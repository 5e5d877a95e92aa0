"""
Carga de barras OHLCV desde CSV para backtesting.

Convierte un CSV en una lista de `Bar`, tolerando variantes comunes de nombres
de columna (t/ts/timestamp/time/datetime y close/price/last/c).
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger
import pandas as pd

from data.bars import Bar, bars_from_frame
from data.feeds.base import MemoryFeed

TS_CANDIDATES = ["timestamp", "t", "ts", "time", "datetime", "ts_ms"]
PRICE_CANDIDATES = ["close", "price", "last", "c", "mid"]


def _pick_col(columns: list[str], wanted: str | None, candidates: list[str]) -> str | None:
    """Devuelve el nombre de la columna si existe; si no hay candidata, None."""
    if wanted:
        return wanted if wanted in columns else None
    for k in candidates:
        if k in columns:
            return k
    return None


def load_csv_bars(
    path: str | Path,
    ts_col: str | None = None,
    price_col: str | None = None,
) -> list[Bar]:
    """
    Lee un CSV de velas y devuelve `Bar` ordenadas por timestamp.

    Args:
        path: Ruta al archivo CSV.
        ts_col: Fuerza la columna temporal (por defecto se autodetecta).
        price_col: Fuerza la columna de cierre (por defecto se autodetecta).

    Raises:
        FileNotFoundError: Si el archivo no existe.
        ValueError: Si el CSV está vacío o faltan columnas mínimas.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"No existe el CSV de datos: {csv_path}")

    df = pd.read_csv(csv_path, on_bad_lines="skip")
    if df.empty:
        raise ValueError(f"CSV vacío: {csv_path}")

    columns = [str(c) for c in df.columns]
    ts_key = _pick_col(columns, ts_col, TS_CANDIDATES)
    price_key = _pick_col(columns, price_col, PRICE_CANDIDATES)
    if ts_key is None or price_key is None:
        raise ValueError(f"Faltan columnas requeridas (timestamp/close) en {csv_path}: {columns}")

    if price_key != "close":
        df = df.rename(columns={price_key: "close"})
    for col in ("open", "high", "low", "close", "volume"):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    bars = bars_from_frame(df, ts_col=ts_key)
    dropped = len(df) - len(bars)
    if dropped:
        logger.warning(f"{csv_path.name}: {dropped} filas descartadas (nulas o duplicadas)")
    logger.debug(f"{csv_path.name}: {len(bars)} barras cargadas")
    return bars


class CsvFeed(MemoryFeed):
    """Fuente de mercado respaldada por un CSV por activo."""

    def __init__(self, paths: dict[str, str | Path]) -> None:
        super().__init__()
        for asset, path in paths.items():
            self.load(asset, load_csv_bars(path))
