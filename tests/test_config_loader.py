from __future__ import annotations

import pytest

from core import config_loader
from core.config_loader import ENV_TO_CFG, get_config, get_nested, reload_config

VALID_YAML = """
environment:
  log_level: info
signal:
  asset: EURUSD
  model_version: v2.1.0
  lookback: 100
  min_bars: 50
backtest:
  initial_balance: 10000
data:
  path: data/bars.csv
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ENV_TO_CFG:
        monkeypatch.delenv(var, raising=False)
    # evitar que un .env local contamine los tests
    monkeypatch.setattr(config_loader, "load_dotenv", lambda **_: False)


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_yaml(tmp_path):
    cfg = get_config(_write(tmp_path, VALID_YAML))
    assert get_nested(cfg, "signal", "asset") == "EURUSD"
    assert get_nested(cfg, "backtest", "initial_balance") == 10000


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("ASSET", "GBPUSD")
    monkeypatch.setenv("INITIAL_BALANCE", "2500")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("MACD_ROLLING_SIGNAL", "true")
    cfg = get_config(_write(tmp_path, VALID_YAML))

    assert cfg["signal"]["asset"] == "GBPUSD"
    assert cfg["backtest"]["initial_balance"] == 2500.0
    assert cfg["environment"]["log_level"] == "DEBUG"
    assert cfg["features"]["macd_rolling_signal"] is True


def test_bad_numeric_override_keeps_yaml_value(tmp_path, monkeypatch):
    monkeypatch.setenv("LOOKBACK", "muchas")
    cfg = get_config(_write(tmp_path, VALID_YAML))
    assert cfg["signal"]["lookback"] == 100


def test_missing_keys_raise(tmp_path):
    with pytest.raises(ValueError, match="signal.asset"):
        get_config(_write(tmp_path, VALID_YAML.replace("  asset: EURUSD\n", "")))


def test_negative_balance_rejected(tmp_path):
    with pytest.raises(ValueError):
        get_config(_write(tmp_path, VALID_YAML.replace("10000", "-5")))


def test_non_mapping_root_rejected(tmp_path):
    with pytest.raises(ValueError):
        get_config(_write(tmp_path, "- a\n- b\n"))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_config(tmp_path / "nope.yaml")


def test_default_config_is_valid_and_cached():
    cfg = reload_config()
    assert get_nested(cfg, "signal", "predictors", "agent") == "agent"
    assert get_config() is cfg


def test_get_nested_default():
    assert get_nested({"a": {"b": 1}}, "a", "b") == 1
    assert get_nested({"a": {"b": 1}}, "a", "c", default="x") == "x"
    assert get_nested({"a": 1}, "a", "b") is None
