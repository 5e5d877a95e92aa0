"""Core: tipos, generador de señales, backtest y métricas."""
