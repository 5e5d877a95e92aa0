# ============================================================
# src/core/logger_config.py: Configuración central del logger
# ------------------------------------------------------------
# Este módulo define una función init_logger() que configura
# el logger global de Loguru según el argumento o la variable
# LOG_LEVEL del entorno (.env).
#
# El logger escribe en:
#   - Consola (colorizada, nivel configurable)
#   - Archivo de logs (rotación diaria en data/logs/)
#
# Los módulos de librería solo hacen `from loguru import logger`;
# la configuración de sinks es cosa de los puntos de entrada.
# ============================================================

import os
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


# ============================================================
# Función: init_logger
# ============================================================
def init_logger(
    level: str | None = None,
    log_dir: str | Path | None = "data/logs",
    file_name: str = "signals.log",
) -> Path | None:
    """
    Inicializa la configuración global del logger.
    Llama a esta función una sola vez al inicio del programa
    (main.py o tools/run_backtest.py).

    Devuelve la ruta del archivo de log, o None si log_dir es None.
    """

    # --- Nivel: argumento > .env > INFO ---
    load_dotenv()
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    # --- Eliminar configuración previa ---
    logger.remove()

    # --- Añadir salida a consola (colorizada) ---
    logger.add(sys.stderr, level=log_level, colorize=True, format=LOG_FORMAT)

    if log_dir is None:
        logger.info(f"Logger inicializado (nivel {log_level}, solo consola)")
        return None

    # --- Añadir salida a archivo (rotación diaria) ---
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file_path = log_path / file_name

    logger.add(
        sink=log_file_path,
        level=log_level,
        rotation="1 day",  # crea un archivo nuevo cada día
        retention="7 days",  # mantiene 7 días de logs
        enqueue=True,  # thread-safe
        backtrace=True,
        diagnose=False,
        format=LOG_FORMAT,
    )

    logger.info(f"Logger inicializado (nivel {log_level})")
    logger.debug(f"Logs guardados en: {log_file_path}")
    return log_file_path
