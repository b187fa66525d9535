"""Errors raised by the sandwich guard's operations."""

from typing import Optional


class SwapGuardError(Exception):
    """Base class for guard errors; carries the trade id when one applies."""

    def __init__(self, message: str, trade_id: Optional[str] = None):
        self.trade_id = trade_id
        self.message = message
        super().__init__(message)


class UnsupportedTradeShape(SwapGuardError):
    """Exact-output swaps cannot be escrowed."""

    def __init__(self, amount_specified: int):
        self.amount_specified = amount_specified
        super().__init__(f"Exact-output swaps are not supported (amount_specified={amount_specified})")


class NotFound(SwapGuardError):
    """No pending record with this id (never created, or already finalized)."""

    def __init__(self, trade_id: str):
        super().__init__(f"Pending trade not found: {trade_id}", trade_id)


class AlreadyFinalized(SwapGuardError):
    def __init__(self, trade_id: str):
        super().__init__(f"Trade already finalized: {trade_id}", trade_id)


class TooEarly(SwapGuardError):
    def __init__(self, trade_id: str, now: int, valid_after: int):
        self.now = now
        self.valid_after = valid_after
        super().__init__(
            f"Trade {trade_id} not executable before {valid_after} (now {now})", trade_id
        )


class Expired(SwapGuardError):
    def __init__(self, trade_id: str, now: int, valid_until: int):
        self.now = now
        self.valid_until = valid_until
        super().__init__(f"Trade {trade_id} expired at {valid_until} (now {now})", trade_id)


class SlippageExceeded(SwapGuardError):
    def __init__(self, trade_id: str, amount_out: int, min_amount_out: int):
        self.amount_out = amount_out
        self.min_amount_out = min_amount_out
        super().__init__(
            f"Trade {trade_id} output {amount_out} below minimum {min_amount_out}", trade_id
        )


class NotOwner(SwapGuardError):
    def __init__(self, trade_id: str, caller: str):
        self.caller = caller
        super().__init__(f"{caller} does not own trade {trade_id}", trade_id)


class TooSoon(SwapGuardError):
    """Cancellation is only allowed once the execution window has expired."""

    def __init__(self, trade_id: str, now: int, valid_until: int):
        self.now = now
        self.valid_until = valid_until
        super().__init__(
            f"Trade {trade_id} cannot be cancelled until after {valid_until} (now {now})", trade_id
        )
