# ============================================================
# src/core/config_loader.py: Cargador central de configuración
# ------------------------------------------------------------
# OBJETIVO:
#   Leer la configuración del generador de señales y del backtest
#   desde un YAML (src/config/config.yaml) y aplicar "overrides"
#   desde variables de entorno (.env).
#
# CARACTERÍSTICAS:
#   - Cache interna (evita relecturas del archivo en cada import).
#   - Overrides vía .env (LOG_LEVEL, ASSET, DATA_PATH, ...).
#   - Validación mínima del esquema (claves imprescindibles).
#
# USO BÁSICO:
#   from core.config_loader import get_config, get_nested
#   cfg = get_config()
#   asset = get_nested(cfg, "signal", "asset")
#
# NOTA:
#   Este módulo NO configura logs (evita dependencia circular).
# ============================================================

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, MutableMapping, Optional

from dotenv import load_dotenv
import yaml

# ------------------------------------------------------------
# Constantes y cache interna
# ------------------------------------------------------------
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "config.yaml"

# Se invalida llamando a reload_config().
_CONFIG_CACHE: Optional[Dict[str, Any]] = None
_MISSING = object()


# ------------------------------------------------------------
# Utilidades internas de tipos / paths
# ------------------------------------------------------------
def _to_bool(value: Any, default: bool = False) -> bool:
    """
    Convierte una cadena/valor a booleano de forma robusta.
    Acepta: "true"/"false", "1"/"0", True/False, etc.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    return s in {"1", "true", "t", "yes", "y", "on"}


def _to_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: int) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _ensure_file_exists(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(f"No se encontró el archivo de configuración: {path.resolve()}")


def _deep_set(d: MutableMapping[str, Any], keys: Iterable[str], value: Any) -> None:
    """
    Asigna value en un diccionario anidado siguiendo la lista de 'keys'.
    Crea los nodos intermedios si no existen.
    """
    keys = list(keys)
    current = d
    for k in keys[:-1]:
        if k not in current or not isinstance(current[k], dict):
            current[k] = {}
        current = current[k]
    current[keys[-1]] = value


# ------------------------------------------------------------
# Carga YAML + overrides desde .env
# ------------------------------------------------------------
def _load_yaml_config(path: Path) -> Dict[str, Any]:
    _ensure_file_exists(path)
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"El YAML debe mapear a dict en la raíz. Archivo: {path}")
    return data


# Mapeo: ENV_VAR -> (ruta en config.yaml, conversor)
ENV_TO_CFG: Dict[str, tuple[tuple[str, ...], Callable[[Any, Any], Any]]] = {
    "LOG_LEVEL": (("environment", "log_level"), lambda raw, _: str(raw).upper()),
    "ASSET": (("signal", "asset"), lambda raw, _: str(raw)),
    "MODEL_VERSION": (("signal", "model_version"), lambda raw, _: str(raw)),
    "DATA_PATH": (("data", "path"), lambda raw, _: str(raw)),
    "INITIAL_BALANCE": (("backtest", "initial_balance"), lambda raw, cur: _to_float(raw, cur)),
    "LOOKBACK": (("signal", "lookback"), lambda raw, cur: _to_int(raw, cur)),
    "MACD_ROLLING_SIGNAL": (
        ("features", "macd_rolling_signal"),
        lambda raw, cur: _to_bool(raw, bool(cur)),
    ),
}


def _apply_env_overrides(cfg: Dict[str, Any]) -> None:
    """
    Aplica overrides de variables de entorno (.env) sobre el dict `cfg`.
    Mantén este mapeo corto y explícito para evitar sorpresas.
    """
    load_dotenv(override=False)

    for env_var, (path_keys, convert) in ENV_TO_CFG.items():
        if env_var not in os.environ:
            continue
        current = get_nested(cfg, *path_keys)
        _deep_set(cfg, path_keys, convert(os.environ[env_var], current))


# ------------------------------------------------------------
# Validación mínima del esquema (imprescindibles)
# ------------------------------------------------------------
def _validate_schema(cfg: Dict[str, Any]) -> None:
    """
    Valida que existan las secciones y claves mínimas y que los
    números críticos tengan sentido. Lanza ValueError si algo falla.
    """
    required_paths = [
        ("environment", "log_level"),
        ("signal", "asset"),
        ("signal", "model_version"),
        ("signal", "lookback"),
        ("signal", "min_bars"),
        ("backtest", "initial_balance"),
        ("data", "path"),
    ]

    missing: List[str] = []
    for path_keys in required_paths:
        if get_nested(cfg, *path_keys, default=_MISSING) is _MISSING:
            missing.append(".".join(path_keys))

    if missing:
        raise ValueError(
            "Faltan claves imprescindibles en config.yaml (o tras overrides): " + ", ".join(missing)
        )

    if _to_float(get_nested(cfg, "backtest", "initial_balance"), -1.0) < 0:
        raise ValueError("backtest.initial_balance debe ser un número >= 0")
    if _to_int(get_nested(cfg, "signal", "min_bars"), 0) < 1:
        raise ValueError("signal.min_bars debe ser >= 1")


# ------------------------------------------------------------
# API pública
# ------------------------------------------------------------
def get_config(path: Optional[Path | str] = None, use_cache: bool = True) -> Dict[str, Any]:
    """
    Devuelve la configuración como diccionario.
    - path: ruta alternativa al YAML (opcional).
    - use_cache: si True, reutiliza la última carga (más rápido).
    """
    global _CONFIG_CACHE
    if use_cache and path is None and _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    cfg = _load_yaml_config(cfg_path)
    _apply_env_overrides(cfg)
    _validate_schema(cfg)

    if path is None:
        _CONFIG_CACHE = cfg
    return cfg


def reload_config(path: Optional[Path | str] = None) -> Dict[str, Any]:
    """
    Fuerza la recarga del YAML y re-aplica overrides del .env.
    """
    global _CONFIG_CACHE
    _CONFIG_CACHE = None
    return get_config(path=path, use_cache=False)


def get_nested(cfg: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """
    Acceso seguro a valores anidados: get_nested(cfg, "signal", "asset")
    Devuelve `default` si no existe la ruta.
    """
    node: Any = cfg
    for k in keys:
        if not isinstance(node, dict) or k not in node:
            return default
        node = node[k]
    return node
