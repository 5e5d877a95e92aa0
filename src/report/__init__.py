"""Volcado de resultados de backtest (CSV/JSON)."""
