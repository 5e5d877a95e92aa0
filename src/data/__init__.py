"""Barras de mercado y fuentes de datos."""

from data.bars import Bar, bars_from_frame, bars_to_frame, validate_bars

__all__ = ["Bar", "bars_from_frame", "bars_to_frame", "validate_bars"]
