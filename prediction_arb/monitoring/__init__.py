"""
Monitoring and alerting for the arbitrage engine.
"""

from .alerts import AlertManager, AlertLevel
from .metrics import MetricsCollector

__all__ = ["AlertManager", "AlertLevel", "MetricsCollector"]
