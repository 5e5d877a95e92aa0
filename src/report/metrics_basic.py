# src/report/metrics_basic.py

"""
metrics_basic.py: volcado a disco de los resultados de un backtest.

Escribe en un run_dir:
- trades.csv   -> un trade por fila (entrada, salida, pnl, estado)
- equity.csv   -> t, balance
- summary.json -> métricas + contadores de señales descartadas

API expuesta (usada por tools/run_backtest.py):
- to_dict(obj) -> Any
- trades_frame(trades) / equity_frame(points) -> pd.DataFrame
- write_run(run_dir, result) -> dict[str, Path]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, is_dataclass
from datetime import datetime
import json
from pathlib import Path
from typing import Any, Dict

import numpy as np
import pandas as pd

from core.backtest import BacktestResult
from core.types import EquityPoint, Trade


# ----------------------- Utilidades de serialización ----------------------- #
def _np_float(x: Any) -> float | None:
    if x is None:
        return None
    v = float(x)
    return None if np.isnan(v) or np.isinf(v) else v


def to_dict(obj: Any) -> Any:
    """Convierte np/pd/dataclasses/datetime a tipos nativos compatibles con JSON."""
    if obj is None or isinstance(obj, (str, bool, int)):
        return obj
    if isinstance(obj, (float, np.floating)):
        return _np_float(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, (datetime, pd.Timestamp)):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [to_dict(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (pd.Series, pd.Index)):
        return [to_dict(v) for v in obj.tolist()]
    if isinstance(obj, pd.DataFrame):
        return [to_dict(r) for r in obj.to_dict(orient="records")]
    if hasattr(obj, "as_dict"):
        return to_dict(obj.as_dict())
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_dict(asdict(obj))
    return str(obj)


# ------------------------------- Tablas ----------------------------------- #
TRADE_COLUMNS = [
    "id",
    "signal_id",
    "asset",
    "direction",
    "position_size",
    "entry_price",
    "entry_time",
    "size",
    "exit_price",
    "exit_time",
    "pnl",
    "is_win",
    "status",
]


def trades_frame(trades: Sequence[Trade]) -> pd.DataFrame:
    return pd.DataFrame([t.as_dict() for t in trades], columns=TRADE_COLUMNS)


def equity_frame(points: Sequence[EquityPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "t": [p.timestamp.isoformat() for p in points],
            "balance": [p.balance for p in points],
        }
    )


def summary(result: BacktestResult) -> Dict[str, Any]:
    issues = []
    if not result.trades:
        issues.append("no_trades")
    if len(result.equity_curve) <= 1:
        issues.append("flat_equity")
    return {
        "ok": True,
        "issues": issues,
        "metrics": to_dict(result.metrics),
        "start_balance": result.equity_curve[0].balance if result.equity_curve else None,
        "final_balance": result.final_balance,
        "equity_points": len(result.equity_curve),
        "skipped": {
            "hold": result.skipped_hold,
            "no_price": result.skipped_no_price,
            "min_size": result.skipped_min_size,
        },
    }


# --------------------------- Escritura de resultados ---------------------- #
def write_run(run_dir: str | Path, result: BacktestResult) -> Dict[str, Path]:
    """Escribe trades.csv, equity.csv y summary.json en run_dir."""
    run_path = Path(run_dir)
    run_path.mkdir(parents=True, exist_ok=True)

    trades_csv = run_path / "trades.csv"
    equity_csv = run_path / "equity.csv"
    summary_json = run_path / "summary.json"

    trades_frame(result.trades).to_csv(trades_csv, index=False)
    equity_frame(result.equity_curve).to_csv(equity_csv, index=False)
    with summary_json.open("w", encoding="utf-8") as f:
        json.dump(to_dict(summary(result)), f, ensure_ascii=False, indent=2)

    return {"trades": trades_csv, "equity": equity_csv, "summary": summary_json}
