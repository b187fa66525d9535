"""
Alert System for Guard Monitoring.

Generates alerts when the guard needs attention:
- Expired trades that nobody has cancelled
- Pending queue growing (executors not keeping up)
- Slippage failures (output stuck in custody)
- Custody drift (guard balance does not match pending input)

Alert levels:
- INFO: Informational, no action needed
- WARNING: Attention needed, may require action
- CRITICAL: Immediate action required
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import logging

from swapguard.escrow.guard import SandwichGuard
from swapguard.pool.context import Clock, SystemClock

from .config import AlertConfig

logger = logging.getLogger(__name__)


class AlertLevel(Enum):
    """Alert severity levels."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertType(Enum):
    """Types of alerts."""
    EXPIRED = "expired"
    PENDING = "pending"
    SLIPPAGE = "slippage"
    CUSTODY = "custody"
    SYSTEM = "system"


@dataclass
class Alert:
    """A single alert."""
    timestamp: int  # Host time (unix seconds)
    level: AlertLevel
    alert_type: AlertType
    message: str
    currency: Optional[str] = None
    value: Optional[int] = None
    threshold: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "type": self.alert_type.value,
            "message": self.message,
            "currency": self.currency,
            "value": self.value,
            "threshold": self.threshold,
        }


class AlertManager:
    """
    Manages alert generation and delivery.

    Includes a cooldown per (type, currency) to prevent alert spam.

    Usage:
        alerts = AlertManager(config, clock=guard.clock)
        alerts.on_alert(lambda a: print(f"ALERT: {a.message}"))

        alerts.check_guard(guard)
    """

    def __init__(self, config: Optional[AlertConfig] = None, clock: Optional[Clock] = None):
        """
        Initialize alert manager.

        Args:
            config: Alert configuration
            clock: Time source for alert timestamps and cooldowns
        """
        self.config = config or AlertConfig()
        self.clock = clock or SystemClock()

        # Alert history
        self._alerts: deque[Alert] = deque(maxlen=500)

        # Cooldown tracking (alert_type:currency -> last_alert_time)
        self._cooldowns: dict[str, int] = {}

        # Callbacks
        self._callbacks: list[Callable[[Alert], None]] = []

    def on_alert(self, callback: Callable[[Alert], None]):
        """Register callback for alerts."""
        self._callbacks.append(callback)

    def _create_alert(
        self,
        level: AlertLevel,
        alert_type: AlertType,
        message: str,
        currency: Optional[str] = None,
        value: Optional[int] = None,
        threshold: Optional[int] = None,
    ) -> Optional[Alert]:
        """Create and dispatch alert if not in cooldown."""
        now = self.clock.now()

        cooldown_key = f"{alert_type.value}:{currency or 'global'}"
        last_alert = self._cooldowns.get(cooldown_key)

        if last_alert is not None and now - last_alert < self.config.alert_cooldown_seconds:
            return None

        alert = Alert(
            timestamp=now,
            level=level,
            alert_type=alert_type,
            message=message,
            currency=currency,
            value=value,
            threshold=threshold,
        )

        self._alerts.append(alert)
        self._cooldowns[cooldown_key] = now

        log_method = {
            AlertLevel.INFO: logger.info,
            AlertLevel.WARNING: logger.warning,
            AlertLevel.CRITICAL: logger.critical,
        }.get(level, logger.info)
        log_method(f"ALERT [{level.value.upper()}] {message}")

        for callback in self._callbacks:
            try:
                callback(alert)
            except Exception as e:
                logger.error(f"Alert callback error: {e}")

        return alert

    def check_expired(self, count: int) -> Optional[Alert]:
        """Check the number of expired, uncancelled trades."""
        if count >= self.config.expired_critical:
            return self._create_alert(
                level=AlertLevel.CRITICAL,
                alert_type=AlertType.EXPIRED,
                message=f"{count} expired trades awaiting owner cancellation",
                value=count,
                threshold=self.config.expired_critical,
            )
        elif count >= self.config.expired_warning:
            return self._create_alert(
                level=AlertLevel.WARNING,
                alert_type=AlertType.EXPIRED,
                message=f"{count} expired trades awaiting owner cancellation",
                value=count,
                threshold=self.config.expired_warning,
            )
        return None

    def check_pending(self, count: int) -> Optional[Alert]:
        """Check pending queue depth."""
        if count >= self.config.pending_critical:
            return self._create_alert(
                level=AlertLevel.CRITICAL,
                alert_type=AlertType.PENDING,
                message=f"Pending queue critical: {count} trades",
                value=count,
                threshold=self.config.pending_critical,
            )
        elif count >= self.config.pending_warning:
            return self._create_alert(
                level=AlertLevel.WARNING,
                alert_type=AlertType.PENDING,
                message=f"Pending queue elevated: {count} trades",
                value=count,
                threshold=self.config.pending_warning,
            )
        return None

    def check_slippage_failures(self, count: int) -> Optional[Alert]:
        """Any slippage failure strands output in custody."""
        if count >= self.config.slippage_failures_critical:
            return self._create_alert(
                level=AlertLevel.CRITICAL,
                alert_type=AlertType.SLIPPAGE,
                message=f"{count} trades finalized without settlement; output held in custody",
                value=count,
                threshold=self.config.slippage_failures_critical,
            )
        return None

    def check_custody(self, currency: str, balance: int, escrowed: int) -> Optional[Alert]:
        """
        Compare the guard's balance with the pending input it owes.

        A shortfall means owners cannot all be made whole; a surplus means
        funds are held that no pending record accounts for.
        """
        if balance < escrowed:
            return self._create_alert(
                level=AlertLevel.CRITICAL,
                alert_type=AlertType.CUSTODY,
                message=f"Custody shortfall in {currency}: holds {balance}, owes {escrowed}",
                currency=currency,
                value=balance,
                threshold=escrowed,
            )
        elif balance > escrowed:
            return self._create_alert(
                level=AlertLevel.WARNING,
                alert_type=AlertType.CUSTODY,
                message=f"Unaccounted {currency} in custody: {balance - escrowed}",
                currency=currency,
                value=balance,
                threshold=escrowed,
            )
        return None

    def check_guard(self, guard: SandwichGuard) -> list[Alert]:
        """Run every check against a guard's current state."""
        candidates = [
            self.check_expired(len(guard.expired_trades())),
            self.check_pending(len(guard.ledger.pending())),
            self.check_slippage_failures(guard.ledger.stats.slippage_failures),
        ]

        currencies = set(guard.vault.balances(guard.address))
        for trade in guard.ledger.pending():
            key = guard.engine.get_pool_key(trade.pool_id)
            currencies.add(key.currency_in(trade.direction))

        for currency in sorted(currencies):
            candidates.append(self.check_custody(
                currency,
                guard.escrow_balance(currency),
                guard.escrowed_amount(currency),
            ))

        return [a for a in candidates if a is not None]

    def system_alert(self, message: str, level: AlertLevel = AlertLevel.WARNING) -> Optional[Alert]:
        """Generate system alert."""
        return self._create_alert(
            level=level,
            alert_type=AlertType.SYSTEM,
            message=message,
        )

    def get_recent_alerts(self, count: int = 50) -> list[Alert]:
        """Get recent alerts."""
        return list(self._alerts)[-count:]

    def get_alerts_by_level(self, level: AlertLevel) -> list[Alert]:
        """Get alerts filtered by level."""
        return [a for a in self._alerts if a.level == level]

    def clear_cooldowns(self):
        """Clear all cooldowns."""
        self._cooldowns.clear()
