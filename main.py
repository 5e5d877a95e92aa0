# ============================================================
# main.py: Punto de entrada del generador de señales
# ------------------------------------------------------------
# Arregla el problema de imports añadiendo /src al sys.path
# ANTES de importar módulos del paquete "core.*".
#
# Además:
#  - Carga .env pronto (LOG_LEVEL, ASSET, DATA_PATH, ...)
#  - Lee el histórico de velas, genera la última señal y la
#    entrega al dispatcher (un suscriptor que la registra en log)
# ============================================================

from pathlib import Path
import sys

# --- 1) AÑADIR ./src AL sys.path ANTES DE NADA ----------------
PROJECT_ROOT = Path(__file__).parent
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

# --- 2) CARGAR .env -------------------------------------------
from dotenv import load_dotenv  # noqa: E402 (import tardío por orden lógico)

load_dotenv()

# --- 3) IMPORTS DEL PROYECTO ----------------------------------
from loguru import logger  # noqa: E402

from core.config_loader import get_config, get_nested  # noqa: E402
from core.dispatcher import SignalDispatcher  # noqa: E402
from core.logger_config import init_logger  # noqa: E402
from core.signal_generator import SignalGenerator  # noqa: E402
from core.types import Signal  # noqa: E402
from data.feeds import CsvFeed  # noqa: E402


def log_signal(signal: Signal) -> None:
    logger.info(
        f"[{signal.asset}] {signal.direction.upper()} conf={signal.confidence:.1f} "
        f"size={signal.position_size} reward={signal.predicted_reward:.4f} "
        f"risk={signal.risk_ratio:.2f} ({signal.model_version})"
    )


def main() -> int:
    cfg = get_config()
    init_logger(
        level=get_nested(cfg, "environment", "log_level"),
        log_dir=get_nested(cfg, "environment", "log_dir", default="data/logs"),
    )

    asset = get_nested(cfg, "signal", "asset")
    lookback = int(get_nested(cfg, "signal", "lookback", default=100))
    min_bars = int(get_nested(cfg, "signal", "min_bars", default=50))

    feed = CsvFeed({asset: get_nested(cfg, "data", "path")})
    bars = feed.get_history(asset, limit=lookback)
    if len(bars) < min_bars:
        logger.warning(f"[{asset}] {len(bars)} barras disponibles, se necesitan {min_bars}")
        return 1

    dispatcher = SignalDispatcher()
    dispatcher.subscribe(log_signal)

    generator = SignalGenerator.from_config(cfg)
    signal = generator.generate_signal(bars, asset, timestamp=bars[-1].timestamp)
    dispatcher.accept(signal)
    logger.info(f"Último precio {asset}: {feed.latest_price(asset):.5f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
