"""
Predictor interface and name registry.

Every predictor maps a FeatureSnapshot to a PredictorOutput. Implementations
are registered by name so configuration can pick which one fills each slot
of the ensemble.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from core.types import ModelType
from features.extractor import FeatureSnapshot
from strategies.signals.types import PredictorOutput


class Predictor(ABC):
    name: ClassVar[str] = "predictor"
    model_type: ClassVar[ModelType] = "Manual"
    # False when `confidence` is not a 0..100 score (e.g. a Q-value)
    has_confidence: ClassVar[bool] = True

    @abstractmethod
    def predict(self, snapshot: FeatureSnapshot) -> PredictorOutput:
        """Score one snapshot."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


_REGISTRY: dict[str, type[Predictor]] = {}


def register_predictor(name: str):
    """
    Class decorator: @register_predictor("trend").
    """

    def _decorator(cls: type[Predictor]) -> type[Predictor]:
        _REGISTRY[name] = cls
        cls.name = name
        return cls

    return _decorator


def get_predictor_class(name: str) -> type[Predictor]:
    if name in _REGISTRY:
        return _REGISTRY[name]
    raise KeyError(f"Predictor no registrado: {name}")


def list_predictors() -> dict[str, type[Predictor]]:
    return dict(_REGISTRY)


__all__ = ["Predictor", "register_predictor", "get_predictor_class", "list_predictors"]
