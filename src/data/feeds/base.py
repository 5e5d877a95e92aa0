"""
Contrato de fuente de datos de mercado.

El núcleo solo lee barras: nunca las modifica. Cualquier proveedor (CSV,
memoria, API) debe exponer `get_history` y `latest_price`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from data.bars import Bar, validate_bars


@runtime_checkable
class MarketDataSource(Protocol):
    def get_history(self, asset: str, limit: int | None = None) -> list[Bar]:
        """Devuelve las últimas `limit` barras (todas si None), en orden temporal."""

    def latest_price(self, asset: str) -> float:
        """Último cierre conocido, 0.0 si no hay datos."""


class MemoryFeed:
    """Fuente en memoria: un conjunto de barras por activo."""

    def __init__(self, data: dict[str, Sequence[Bar]] | None = None) -> None:
        self._data: dict[str, tuple[Bar, ...]] = {}
        for asset, bars in (data or {}).items():
            self.load(asset, bars)

    def load(self, asset: str, bars: Iterable[Bar]) -> None:
        series = tuple(bars)
        validate_bars(series)
        self._data[asset] = series

    def assets(self) -> list[str]:
        return sorted(self._data)

    def get_history(self, asset: str, limit: int | None = None) -> list[Bar]:
        series = self._data.get(asset, ())
        if limit is not None:
            if limit <= 0:
                return []
            series = series[-limit:]
        return list(series)

    def latest_price(self, asset: str) -> float:
        series = self._data.get(asset, ())
        return series[-1].close if series else 0.0
