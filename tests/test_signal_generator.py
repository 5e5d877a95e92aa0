from __future__ import annotations

from datetime import datetime, timedelta, timezone
import itertools
import math

import pytest

from core.signal_generator import MIN_BARS, PredictorError, SignalGenerator
from data.bars import Bar
from features.extractor import FeatureExtractor
from strategies.signals import (
    AgentPredictor,
    MomentumPredictor,
    Predictor,
    SignalEnsemble,
    TrendPredictor,
    position_size_for,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_bars(n: int = 60) -> list[Bar]:
    bars = []
    for i in range(n):
        c = 1.1 + 0.002 * math.sin(i / 5.0) + 0.0001 * i
        bars.append(Bar(T0 + timedelta(minutes=i), open=c, high=c, low=c, close=c, volume=5.0))
    return bars


def _generator(extractor=None, ensemble=None) -> SignalGenerator:
    counter = itertools.count(1)
    return SignalGenerator(
        extractor=extractor or FeatureExtractor(),
        ensemble=ensemble or SignalEnsemble(TrendPredictor(), MomentumPredictor(), AgentPredictor()),
        clock=lambda: NOW,
        id_factory=lambda: f"sig-{next(counter)}",
    )


class BrokenPredictor(Predictor):
    def predict(self, snapshot):
        raise ZeroDivisionError("boom")


class RecordingExtractor(FeatureExtractor):
    def __init__(self) -> None:
        super().__init__()
        self.window_sizes: list[int] = []

    def extract(self, bars):
        self.window_sizes.append(len(bars))
        return super().extract(bars)


def test_generate_signal_fields():
    sig = _generator().generate_signal(_make_bars(), "EURUSD")

    assert sig.id == "sig-1"
    assert sig.timestamp == NOW
    assert sig.asset == "EURUSD"
    assert sig.direction in {"buy", "sell", "hold"}
    assert 55.0 <= sig.confidence <= 95.0
    assert sig.position_size == position_size_for(sig.confidence)
    assert sig.model_version == "v2.1.0"
    assert sig.model_type == "Hybrid"
    assert 1.5 <= sig.risk_ratio <= 2.5
    assert sig.predicted_reward >= 0.0


def test_explicit_timestamp_wins_over_clock():
    bars = _make_bars()
    sig = _generator().generate_signal(bars, "EURUSD", timestamp=bars[-1].timestamp)
    assert sig.timestamp == bars[-1].timestamp


def test_generation_is_deterministic():
    bars = _make_bars()
    a = _generator().generate_signal(bars, "EURUSD")
    b = _generator().generate_signal(bars, "EURUSD")
    assert a == b


def test_predictor_failure_is_wrapped():
    gen = _generator(
        ensemble=SignalEnsemble(BrokenPredictor(), MomentumPredictor(), AgentPredictor())
    )
    with pytest.raises(PredictorError) as exc:
        gen.generate_signal(_make_bars(), "EURUSD")
    assert isinstance(exc.value.__cause__, ZeroDivisionError)


def test_generate_signals_walk_forward():
    bars = _make_bars(60)
    signals = _generator().generate_signals(bars, "EURUSD")

    assert MIN_BARS == 50
    assert len(signals) == 11
    assert [s.timestamp for s in signals] == [b.timestamp for b in bars[49:]]
    assert len({s.id for s in signals}) == 11


def test_generate_signals_step_and_lookback():
    extractor = RecordingExtractor()
    signals = _generator(extractor=extractor).generate_signals(
        _make_bars(60), "EURUSD", lookback=20, min_bars=50, step=5
    )
    assert len(signals) == 3  # cierres en 50, 55, 60
    assert extractor.window_sizes == [20, 20, 20]


def test_generate_signals_not_enough_bars():
    assert _generator().generate_signals(_make_bars(10), "EURUSD") == []


def test_generate_signals_rejects_bad_step():
    with pytest.raises(ValueError):
        _generator().generate_signals(_make_bars(), "EURUSD", step=0)


def test_from_config():
    gen = SignalGenerator.from_config(
        {"signal": {"model_version": "v9.9.9"}, "features": {"rsi_period": 7}}
    )
    assert gen.model_version == "v9.9.9"
    assert gen.extractor.rsi_period == 7
    sig = gen.generate_signal(_make_bars(), "GBPUSD")
    assert sig.id.startswith("signal_")
    assert sig.model_version == "v9.9.9"
