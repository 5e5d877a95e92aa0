# src/core/dispatcher.py
"""
Destino de señales generadas.

- `SignalSink`: contrato mínimo que consume el núcleo (`accept(signal)`).
- `SignalDispatcher`: implementación en proceso con suscriptores e histórico
  reciente. Un suscriptor que falla se registra en el log y no interrumpe al
  resto. La entrega a canales externos (chat, e-mail) queda fuera.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from loguru import logger

from core.types import Signal

Subscriber = Callable[[Signal], None]


@runtime_checkable
class SignalSink(Protocol):
    def accept(self, signal: Signal) -> None:
        """Recibe una señal ya construida."""


class SignalDispatcher:
    def __init__(self, history_size: int = 1000) -> None:
        self._subs: list[Subscriber] = []
        self._history: list[Signal] = []
        self.history_size = history_size

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Añade un suscriptor; devuelve una función para darlo de baja."""
        self._subs.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subs:
                self._subs.remove(callback)

        return _unsubscribe

    def accept(self, signal: Signal) -> None:
        self._history.append(signal)
        if len(self._history) > self.history_size:
            del self._history[: len(self._history) - self.history_size]

        for fn in list(self._subs):
            try:
                fn(signal)
            except Exception:
                logger.exception(f"Error notificando la señal {signal.id} a {fn!r}")

    dispatch = accept

    def recent(self, limit: int = 50) -> list[Signal]:
        if limit <= 0:
            return []
        return self._history[-limit:]

    def clear(self) -> None:
        self._history.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)
