# tools/run_backtest.py
"""
Backtest de punta a punta sobre un CSV de velas:
CSV -> señales walk-forward del ensemble -> BacktestEngine -> métricas.

Uso típico:
  python tools/run_backtest.py --data data/bars.csv --asset EURUSD --out-dir runs/eurusd

Genera (si se pasa --out-dir):
  <out_dir>/trades.csv   -> un trade por fila
  <out_dir>/equity.csv   -> t, balance
  <out_dir>/summary.json -> métricas y descartes
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

# Asegurar que ./src está en sys.path antes de importar core.*
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from loguru import logger  # noqa: E402

from core.backtest import BacktestConfig, BacktestEngine  # noqa: E402
from core.config_loader import get_config, get_nested  # noqa: E402
from core.logger_config import init_logger  # noqa: E402
from core.signal_generator import SignalGenerator  # noqa: E402
from data.feeds.csv_feed import load_csv_bars  # noqa: E402
from report.metrics_basic import write_run  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Backtest del ensemble de señales sobre un CSV de velas OHLCV."
    )
    ap.add_argument("--data", help="CSV de velas (por defecto data.path de la config)")
    ap.add_argument("--asset", help="Activo a etiquetar en las señales (por defecto signal.asset)")
    ap.add_argument("--config", help="Ruta alternativa a config.yaml")
    ap.add_argument("--out-dir", help="Carpeta donde escribir trades/equity/summary")
    ap.add_argument("--initial-balance", type=float, help="Balance inicial")
    ap.add_argument("--lookback", type=int, help="Barras máximas por ventana de señal")
    ap.add_argument("--step", type=int, help="Generar una señal cada N barras")
    ap.add_argument("--log-level", help="DEBUG/INFO/WARNING")
    return ap


def run(args: argparse.Namespace) -> int:
    cfg = get_config(args.config) if args.config else get_config()
    init_logger(
        level=args.log_level or get_nested(cfg, "environment", "log_level"),
        log_dir=get_nested(cfg, "environment", "log_dir", default="data/logs"),
    )

    data_path = args.data or get_nested(cfg, "data", "path")
    asset = args.asset or get_nested(cfg, "signal", "asset")
    lookback = args.lookback or int(get_nested(cfg, "signal", "lookback", default=100))
    step = args.step or int(get_nested(cfg, "signal", "step", default=1))
    min_bars = int(get_nested(cfg, "signal", "min_bars", default=50))

    bars = load_csv_bars(data_path)
    if len(bars) < min_bars:
        logger.warning(f"Solo {len(bars)} barras (< {min_bars}): no se generan señales")

    generator = SignalGenerator.from_config(cfg)
    signals = generator.generate_signals(
        bars, asset, lookback=lookback, min_bars=min_bars, step=step
    )

    engine = BacktestEngine(BacktestConfig.from_config(cfg))
    result = engine.run(signals, bars, initial_balance=args.initial_balance)

    m = result.metrics
    print(f"== {asset} | {len(bars)} barras | {len(signals)} señales ==")
    print(f"  trades        : {m.total_trades}")
    print(f"  win rate      : {m.win_rate:.2f}%")
    print(f"  total pnl     : {m.total_pnl:.4f}")
    print(f"  sharpe        : {m.sharpe_ratio:.3f}")
    print(f"  max drawdown  : {m.max_drawdown:.3f}%")
    print(f"  profit factor : {m.profit_factor:.3f}")
    print(f"  expectancy    : {m.expectancy:.4f}")
    print(f"  final balance : {result.final_balance:.2f}")

    if args.out_dir:
        paths = write_run(args.out_dir, result)
        logger.info(f"Resultados escritos en {Path(args.out_dir).resolve()}")
        for name, path in paths.items():
            logger.debug(f"  {name}: {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    return run(build_parser().parse_args(argv))


if __name__ == "__main__":
    raise SystemExit(main())
