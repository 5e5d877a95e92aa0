"""
Test that normalized imports (without 'src.' prefix) work correctly.

These tests validate that modules can be imported using the top-level
namespace when PYTHONPATH includes the src/ directory.
"""

from __future__ import annotations


def test_import_data_modules():
    """Test that data submodules can be imported."""
    from data import Bar, bars_from_frame, validate_bars
    from data.feeds import CsvFeed, MarketDataSource, MemoryFeed, load_csv_bars

    assert Bar is not None
    assert bars_from_frame is not None
    assert validate_bars is not None
    assert CsvFeed is not None
    assert MarketDataSource is not None
    assert MemoryFeed is not None
    assert load_csv_bars is not None


def test_import_features_modules():
    """Test that features can be imported."""
    from features import FeatureExtractor, FeatureSnapshot
    from features.technical_indicators import bollinger_bands, ema, macd, rsi, volatility

    assert FeatureExtractor is not None
    assert FeatureSnapshot is not None
    assert all(f is not None for f in (bollinger_bands, ema, macd, rsi, volatility))


def test_import_core_modules():
    """Test that core submodules can be imported."""
    from core.backtest import BacktestConfig, BacktestEngine, BacktestResult
    from core.dispatcher import SignalDispatcher, SignalSink
    from core.metrics import compute_performance
    from core.signal_generator import PredictorError, SignalGenerator
    from core.types import EquityPoint, PerformanceMetrics, Signal, Trade

    assert BacktestConfig is not None
    assert BacktestEngine is not None
    assert BacktestResult is not None
    assert SignalDispatcher is not None
    assert SignalSink is not None
    assert compute_performance is not None
    assert PredictorError is not None
    assert SignalGenerator is not None
    assert EquityPoint is not None
    assert PerformanceMetrics is not None
    assert Signal is not None
    assert Trade is not None


def test_import_strategies_modules():
    """Test that predictors register on import."""
    from strategies.signals import SignalEnsemble, list_predictors

    assert SignalEnsemble is not None
    assert {"trend", "momentum", "agent"} <= set(list_predictors())


def test_import_report_modules():
    from report.metrics_basic import write_run

    assert write_run is not None
