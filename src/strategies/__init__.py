# src/strategies/__init__.py
"""
Estrategias de señal.

Importar `strategies.signals` registra los predictores disponibles
(trend, momentum, agent) para que la configuración pueda elegirlos por nombre.
"""
