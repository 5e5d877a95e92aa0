from __future__ import annotations

from datetime import datetime, timedelta, timezone

from core.dispatcher import SignalDispatcher, SignalSink
from core.types import Signal

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _signal(i: int) -> Signal:
    return Signal(
        id=f"s{i}",
        timestamp=T0 + timedelta(minutes=i),
        asset="EURUSD",
        direction="sell",
        confidence=65.0,
        position_size="low",
    )


def test_dispatcher_is_a_sink():
    assert isinstance(SignalDispatcher(), SignalSink)


def test_subscribers_receive_signals_and_can_unsubscribe():
    d = SignalDispatcher()
    got_a, got_b = [], []
    unsubscribe_a = d.subscribe(got_a.append)
    d.subscribe(got_b.append)
    assert d.subscriber_count == 2

    d.accept(_signal(1))
    unsubscribe_a()
    unsubscribe_a()  # segunda baja no hace nada
    d.dispatch(_signal(2))

    assert [s.id for s in got_a] == ["s1"]
    assert [s.id for s in got_b] == ["s1", "s2"]
    assert d.subscriber_count == 1


def test_failing_subscriber_does_not_block_others():
    d = SignalDispatcher()
    got = []

    def broken(signal):
        raise RuntimeError("canal caído")

    d.subscribe(broken)
    d.subscribe(got.append)
    d.accept(_signal(1))

    assert [s.id for s in got] == ["s1"]
    assert [s.id for s in d.recent()] == ["s1"]


def test_history_is_bounded_and_clearable():
    d = SignalDispatcher(history_size=3)
    for i in range(5):
        d.accept(_signal(i))

    assert [s.id for s in d.recent()] == ["s2", "s3", "s4"]
    assert [s.id for s in d.recent(2)] == ["s3", "s4"]
    assert d.recent(0) == []

    d.clear()
    assert d.recent() == []
