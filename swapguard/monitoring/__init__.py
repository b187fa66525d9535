"""
Monitoring Module.

Metrics and alerts for a running guard.

Components:
- GuardMetricsCollector: Prometheus metrics fed from guard events
- AlertManager: Alert generation and delivery

Usage:
    from swapguard.monitoring import GuardMetricsCollector, AlertManager

    metrics = GuardMetricsCollector()
    metrics.attach(guard)

    alerts = AlertManager(clock=guard.clock)
    alerts.check_guard(guard)
"""

from .alerts import Alert, AlertLevel, AlertManager, AlertType
from .config import AlertConfig, MonitoringConfig
from .metrics_collector import GuardMetricsCollector

__all__ = [
    # Config
    "MonitoringConfig",
    "AlertConfig",
    # Alerts
    "AlertManager",
    "Alert",
    "AlertLevel",
    "AlertType",
    # Metrics
    "GuardMetricsCollector",
]
