from __future__ import annotations

import math

import pytest

from features.extractor import FeatureSnapshot
from features.technical_indicators import BollingerBands, MacdValue
from strategies.signals import (
    Predictor,
    PredictorOutput,
    SignalEnsemble,
    clamp_confidence,
    position_size_for,
    vote_direction,
)

SNAPSHOT = FeatureSnapshot(
    price=1.0,
    rsi=50.0,
    macd=MacdValue(0.0, 0.0, 0.0),
    ema=1.0,
    bollinger=BollingerBands(1.0, 1.0, 1.0),
    volatility=0.0,
    volume=0.0,
    price_change=0.0,
)


class FixedPredictor(Predictor):
    def __init__(self, output: PredictorOutput, has_confidence: bool = True) -> None:
        self.output = output
        self.has_confidence = has_confidence

    def predict(self, snapshot):
        return self.output


class BrokenPredictor(Predictor):
    def predict(self, snapshot):
        raise RuntimeError("modelo caído")


def _out(direction, confidence, aux=0.0, size_hint=None, model_type="Manual"):
    return PredictorOutput(
        model_type=model_type,
        direction=direction,
        confidence=confidence,
        aux=aux,
        size_hint=size_hint,
    )


def _ensemble(trend, momentum, agent):
    return SignalEnsemble(
        trend=FixedPredictor(trend),
        momentum=FixedPredictor(momentum),
        agent=FixedPredictor(agent, has_confidence=False),
    )


@pytest.mark.parametrize(
    "votes,expected",
    [
        (["buy", "buy", "sell"], "buy"),
        (["buy", "sell", "sell"], "sell"),
        (["buy", "sell", "hold"], "hold"),
        (["hold", "hold", "hold"], "hold"),
        (["buy", "hold", "hold"], "buy"),
        (["sell", "hold", "hold"], "sell"),
    ],
)
def test_vote_direction(votes, expected):
    assert vote_direction(votes) == expected


@pytest.mark.parametrize(
    "confidence,size",
    [
        (59.9, "none"),
        (60.0, "low"),
        (69.9, "low"),
        (70.0, "medium"),
        (79.9, "medium"),
        (80.0, "high"),
        (95.0, "high"),
        (10.0, "none"),
        (120.0, "high"),
    ],
)
def test_position_size_staircase(confidence, size):
    assert position_size_for(confidence) == size


def test_clamp_confidence():
    assert clamp_confidence(10.0) == 55.0
    assert clamp_confidence(99.0) == 95.0
    assert clamp_confidence(72.5) == 72.5
    assert clamp_confidence(math.nan) == 55.0


def test_combine_majority_and_confidence_mean():
    ens = _ensemble(
        _out("buy", 90.0, aux=0.015),
        _out("buy", 70.0, aux=2.0),
        _out("sell", 8.0, aux=1.0, size_hint="medium"),
    )
    d = ens.combine(SNAPSHOT)

    assert d.direction == "buy"
    # el Q-value del agente no entra en la media
    assert d.confidence == pytest.approx(80.0)
    assert d.position_size == "high"
    assert d.predicted_reward == pytest.approx(0.015)
    assert d.risk_ratio == pytest.approx(2.0)
    assert d.votes == ("buy", "buy", "sell")


def test_agent_size_hint_does_not_override_staircase():
    ens = _ensemble(
        _out("sell", 60.0),
        _out("sell", 62.0),
        _out("sell", 8.0, aux=1.0, size_hint="high"),
    )
    d = ens.combine(SNAPSHOT)
    assert d.direction == "sell"
    assert d.confidence == pytest.approx(61.0)
    assert d.position_size == "low"


def test_combine_clamps_confidence():
    low = _ensemble(_out("buy", 20.0), _out("buy", 30.0), _out("buy", 1.0))
    high = _ensemble(_out("buy", 100.0), _out("buy", 100.0), _out("buy", 1.0))
    assert low.combine(SNAPSHOT).confidence == 55.0
    assert low.combine(SNAPSHOT).position_size == "none"
    assert high.combine(SNAPSHOT).confidence == 95.0


def test_tie_is_hold_even_with_high_confidence():
    ens = _ensemble(_out("buy", 95.0), _out("sell", 95.0), _out("hold", 5.0))
    d = ens.combine(SNAPSHOT)
    assert d.direction == "hold"
    assert d.position_size == "high"


def test_predictor_errors_propagate():
    ens = SignalEnsemble(
        trend=BrokenPredictor(),
        momentum=FixedPredictor(_out("buy", 70.0)),
        agent=FixedPredictor(_out("buy", 1.0), has_confidence=False),
    )
    with pytest.raises(RuntimeError, match="modelo caído"):
        ens.combine(SNAPSHOT)


def test_from_config_uses_registered_names():
    ens = SignalEnsemble.from_config({"signal": {"predictors": {"trend": "trend"}}})
    assert [p.name for p in ens.predictors] == ["trend", "momentum", "agent"]


def test_from_config_unknown_predictor():
    with pytest.raises(KeyError):
        SignalEnsemble.from_config({"signal": {"predictors": {"agent": "dqn"}}})
