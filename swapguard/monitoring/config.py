"""Monitoring module configuration."""

from dataclasses import dataclass


@dataclass
class MonitoringConfig:
    """
    Configuration for guard metrics.
    """

    enabled: bool = True
    prefix: str = "swapguard"

    # Prometheus exporter
    http_port: int = 9108
    serve_http: bool = False


@dataclass
class AlertConfig:
    """
    Configuration for alert rules.
    """

    # Expired trades nobody has cancelled yet
    expired_warning: int = 1
    expired_critical: int = 10

    # Pending trades (queue depth)
    pending_warning: int = 50
    pending_critical: int = 200

    # Any slippage failure leaves output stuck in custody
    slippage_failures_critical: int = 1

    # Cooldown (seconds of host time before a repeat alert)
    alert_cooldown_seconds: int = 60
