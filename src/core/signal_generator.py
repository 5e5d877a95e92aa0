# src/core/signal_generator.py
"""
SignalGenerator: ventana de barras -> features -> ensemble -> Signal.

✅ Principios:
- Sin efectos secundarios: no despacha ni persiste (eso es del dispatcher/CLI).
- Sin estado mutable: varias peticiones pueden ejecutarse en paralelo.
- Un fallo de cualquier predictor aborta la llamada con PredictorError
  (sin reintentos ni valores por defecto); el llamador decide si reintenta.

📦 Uso típico:
    generator = SignalGenerator(FeatureExtractor(), SignalEnsemble(...))
    if len(bars) >= MIN_BARS:
        signal = generator.generate_signal(bars, "EURUSD")

    # Para backtests: una señal por cierre de ventana, sellada con la barra
    signals = generator.generate_signals(bars, "EURUSD", lookback=100)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any
import uuid

from loguru import logger

from core.types import Signal
from data.bars import Bar
from features.extractor import FeatureExtractor
from strategies.signals import SignalEnsemble

MIN_BARS = 50
MODEL_VERSION = "v2.1.0"


class PredictorError(RuntimeError):
    """Un predictor lanzó una excepción durante la generación de la señal."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_signal_id() -> str:
    return f"signal_{uuid.uuid4().hex[:12]}"


class SignalGenerator:
    def __init__(
        self,
        extractor: FeatureExtractor,
        ensemble: SignalEnsemble,
        model_version: str = MODEL_VERSION,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_signal_id,
    ) -> None:
        self.extractor = extractor
        self.ensemble = ensemble
        self.model_version = model_version
        self.clock = clock
        self.id_factory = id_factory

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> SignalGenerator:
        section = cfg.get("signal", {}) or {}
        return cls(
            extractor=FeatureExtractor.from_config(cfg),
            ensemble=SignalEnsemble.from_config(cfg),
            model_version=str(section.get("model_version", MODEL_VERSION)),
        )

    def generate_signal(
        self, bars: Sequence[Bar], asset: str, timestamp: datetime | None = None
    ) -> Signal:
        """
        Genera una Signal para `asset` con la ventana `bars`.

        Precondición del llamador: al menos MIN_BARS barras (no se comprueba aquí).
        """
        snapshot = self.extractor.extract(bars)
        try:
            decision = self.ensemble.combine(snapshot)
        except Exception as e:
            raise PredictorError(f"Fallo de predictor generando señal para {asset}: {e}") from e

        signal = Signal(
            id=self.id_factory(),
            timestamp=timestamp if timestamp is not None else self.clock(),
            asset=asset,
            direction=decision.direction,
            confidence=decision.confidence,
            position_size=decision.position_size,
            predicted_reward=decision.predicted_reward,
            risk_ratio=decision.risk_ratio,
            model_version=self.model_version,
            model_type="Hybrid",
        )
        logger.debug(
            f"Señal {signal.id} {asset} {signal.direction.upper()} "
            f"conf={signal.confidence:.1f} size={signal.position_size}"
        )
        return signal

    def generate_signals(
        self,
        bars: Sequence[Bar],
        asset: str,
        lookback: int = 100,
        min_bars: int = MIN_BARS,
        step: int = 1,
    ) -> list[Signal]:
        """
        Walk-forward: una señal por cada cierre de ventana con >= min_bars barras.

        Cada señal usa como máximo las últimas `lookback` barras disponibles en
        ese instante y se sella con el timestamp de la última barra.
        """
        if step <= 0:
            raise ValueError("step debe ser > 0")
        min_bars = max(1, min_bars)

        signals: list[Signal] = []
        for end in range(min_bars, len(bars) + 1, step):
            window = bars[max(0, end - lookback) : end]
            signals.append(self.generate_signal(window, asset, timestamp=window[-1].timestamp))

        logger.info(f"{asset}: {len(signals)} señales generadas sobre {len(bars)} barras")
        return signals
