# src/features/__init__.py
"""
Feature engineering para los predictores.

Módulos:
- technical_indicators: Indicadores técnicos puros (RSI, EMA, MACD, Bollinger, volatilidad)
- extractor: FeatureSnapshot a partir de una ventana de barras
"""

from .extractor import FeatureExtractor, FeatureSnapshot
from .technical_indicators import (
    BollingerBands,
    MacdValue,
    bollinger_bands,
    ema,
    macd,
    rsi,
    volatility,
)

__all__ = [
    "FeatureExtractor",
    "FeatureSnapshot",
    "BollingerBands",
    "MacdValue",
    "bollinger_bands",
    "ema",
    "macd",
    "rsi",
    "volatility",
]
