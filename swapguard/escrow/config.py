"""Escrow module configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GuardConfig:
    """
    Configuration for the sandwich guard.

    Fixed at deployment: the guard reads it but never mutates it.
    """

    # Classification
    threshold_bps: int = 100  # Trades above 1% of the sold-side reserve are escrowed

    # Execution window (seconds)
    min_delay: int = 24  # Earliest execution after submission
    window_length: int = 60  # Randomized offset range and eligible window width
    max_pending_time: int = 600  # Extra time the window stays open

    # Settlement
    executor_fee_bps: int = 30  # Share of output paid to whoever executes
    bps_denominator: int = 10_000

    def __post_init__(self):
        if not 0 < self.threshold_bps <= self.bps_denominator:
            raise ValueError(f"threshold_bps must be in (0, {self.bps_denominator}]")
        if self.min_delay < 0:
            raise ValueError("min_delay must be non-negative")
        if self.window_length <= 0:
            raise ValueError("window_length must be positive")
        if self.max_pending_time < 0:
            raise ValueError("max_pending_time must be non-negative")
        if not 0 <= self.executor_fee_bps < self.bps_denominator:
            raise ValueError(f"executor_fee_bps must be in [0, {self.bps_denominator})")

    @property
    def max_lifetime(self) -> int:
        """Longest possible gap between submission and expiry."""
        return self.min_delay + 2 * self.window_length - 1 + self.max_pending_time
