"""Fuentes de datos de mercado (memoria, CSV)."""

from data.feeds.base import MarketDataSource, MemoryFeed
from data.feeds.csv_feed import CsvFeed, load_csv_bars

__all__ = ["MarketDataSource", "MemoryFeed", "CsvFeed", "load_csv_bars"]
