from __future__ import annotations

from loguru import logger
import pytest

from core.logger_config import init_logger


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger.remove()


def test_init_logger_console_only():
    assert init_logger(level="warning", log_dir=None) is None


def test_init_logger_writes_file(tmp_path):
    path = init_logger(level="DEBUG", log_dir=tmp_path / "logs")

    assert path == tmp_path / "logs" / "signals.log"
    logger.info("señal de prueba")
    logger.complete()
    assert "señal de prueba" in path.read_text(encoding="utf-8")
