# ============================================================
# check_system.py: Autodiagnóstico del generador de señales
# ------------------------------------------------------------
# Ejecuta tres checks:
#   1) Carga de configuración (YAML + .env overrides)
#   2) Logger central (consola y archivo con rotación)
#   3) Pipeline sintético: barras -> señales -> backtest
#
# Úsalo desde la raíz del proyecto:
#   python check_system.py
# ============================================================

from datetime import datetime, timedelta, timezone
import math
from pathlib import Path
import sys
import time

# Asegurar que ./src está en sys.path antes de importar core.*
PROJECT_ROOT = Path(__file__).parent
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from loguru import logger  # noqa: E402

from core.backtest import BacktestConfig, BacktestEngine  # noqa: E402
from core.config_loader import get_config, get_nested  # noqa: E402
from core.logger_config import init_logger  # noqa: E402
from core.signal_generator import SignalGenerator  # noqa: E402
from data.bars import Bar  # noqa: E402


def ok(msg: str) -> None:
    print(f"✅ {msg}")


def fail(msg: str, e: Exception) -> None:
    print(f"❌ {msg}\n   → {type(e).__name__}: {e}")


def check_config() -> bool:
    try:
        cfg = get_config()
        ok(
            f"Config cargada: log_level={cfg['environment']['log_level']}, "
            f"asset={cfg['signal']['asset']}, "
            f"model_version={cfg['signal']['model_version']}, "
            f"initial_balance={cfg['backtest']['initial_balance']}"
        )
        return True
    except Exception as e:
        fail("Fallo cargando configuración", e)
        return False


def check_logger() -> bool:
    try:
        log_file = init_logger()
        logger.info("Logger OK (info)")
        logger.debug("Logger OK (debug)")
        # Dar un respiro para que el handler (enqueue) escriba a disco
        time.sleep(0.05)
        if log_file is not None and log_file.exists() and log_file.stat().st_size > 0:
            ok(f"Logger escribe en archivo: {log_file}")
            return True
        raise FileNotFoundError(f"No se encontró {log_file} o está vacío")
    except Exception as e:
        fail("Fallo en logger", e)
        return False


def _synthetic_bars(n: int = 120) -> list[Bar]:
    t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        Bar(
            timestamp=t0 + timedelta(minutes=15 * i),
            open=1.10,
            high=1.10,
            low=1.10,
            close=1.10 + 0.002 * math.sin(i / 6.0),
            volume=100.0,
        )
        for i in range(n)
    ]


def check_pipeline() -> bool:
    try:
        cfg = get_config()
        bars = _synthetic_bars()
        min_bars = int(get_nested(cfg, "signal", "min_bars", default=50))
        signals = SignalGenerator.from_config(cfg).generate_signals(
            bars, "SYNTH", min_bars=min_bars
        )
        result = BacktestEngine(BacktestConfig.from_config(cfg)).run(signals, bars)
        ok(
            f"Pipeline OK: {len(signals)} señales, {len(result.trades)} trades, "
            f"balance final {result.final_balance:.2f}"
        )
        return True
    except Exception as e:
        fail("Fallo ejecutando el pipeline", e)
        return False


if __name__ == "__main__":
    print("=== Autodiagnóstico del generador de señales ===")
    all_ok = True
    all_ok &= check_config()
    all_ok &= check_logger()
    all_ok &= check_pipeline()
    print("================================================")
    print("✅ TODO OK" if all_ok else "❌ Hay fallos arriba; revisa mensajes.")
