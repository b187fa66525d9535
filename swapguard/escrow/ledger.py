"""
Pending-Trade Ledger - authoritative record of escrowed trades.

Keyed by trade id. Every record leaves PENDING exactly once, either to
EXECUTED or CANCELLED; the ledger refuses a second transition. The
nonce is the pending count used for id derivation and only ever grows.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from swapguard.pool.schemas import PendingTrade, TradeStatus

from .errors import AlreadyFinalized, NotFound

logger = logging.getLogger(__name__)


@dataclass
class LedgerStats:
    """Ledger statistics."""
    trades_created: int = 0
    trades_executed: int = 0
    trades_cancelled: int = 0
    slippage_failures: int = 0
    volume_escrowed: int = 0


class PendingTradeLedger:
    """
    Store of PendingTrade records.

    Usage:
        ledger = PendingTradeLedger()
        nonce = ledger.next_nonce()
        ledger.add(trade)
        ...
        ledger.finalize(trade.id, TradeStatus.EXECUTED, now)
    """

    def __init__(self):
        self._trades: dict[str, PendingTrade] = {}  # trade_id -> PendingTrade
        self._nonce = 0
        self.stats = LedgerStats()

    @property
    def nonce(self) -> int:
        """Number of trades ever paused."""
        return self._nonce

    def next_nonce(self) -> int:
        """Reserve the next nonce for id derivation."""
        nonce = self._nonce
        self._nonce += 1
        return nonce

    def add(self, trade: PendingTrade):
        if trade.id in self._trades:
            raise ValueError(f"Duplicate trade id: {trade.id}")
        if trade.amount_in <= 0:
            raise ValueError("amount_in must be positive")
        if trade.valid_after >= trade.valid_until:
            raise ValueError("valid_after must be before valid_until")

        self._trades[trade.id] = trade
        self.stats.trades_created += 1
        self.stats.volume_escrowed += trade.amount_in

    def get(self, trade_id: str) -> Optional[PendingTrade]:
        return self._trades.get(trade_id)

    def __contains__(self, trade_id: str) -> bool:
        return trade_id in self._trades

    def __len__(self) -> int:
        return len(self._trades)

    def finalize(
        self,
        trade_id: str,
        status: TradeStatus,
        now: Optional[int] = None,
    ) -> PendingTrade:
        """
        Move a pending record to a terminal status.

        Raises:
            NotFound: If no record exists
            AlreadyFinalized: If the record already left PENDING
        """
        if status is TradeStatus.PENDING:
            raise ValueError("finalize requires a terminal status")

        trade = self._trades.get(trade_id)
        if trade is None:
            raise NotFound(trade_id)
        if trade.executed:
            raise AlreadyFinalized(trade_id)

        trade.status = status
        trade.finalized_at = now

        if status is TradeStatus.EXECUTED:
            self.stats.trades_executed += 1
        else:
            self.stats.trades_cancelled += 1

        return trade

    def record_slippage_failure(self, trade_id: str):
        self.stats.slippage_failures += 1
        logger.warning(f"Trade {trade_id} finalized without settlement (slippage)")

    def pending(self) -> list[PendingTrade]:
        return [t for t in self._trades.values() if not t.executed]

    def executable(self, now: int) -> list[PendingTrade]:
        """Pending trades whose window is open at `now`, oldest window first."""
        trades = [t for t in self.pending() if t.in_window(now)]
        return sorted(trades, key=lambda t: t.valid_after)

    def expired(self, now: int) -> list[PendingTrade]:
        """Pending trades the owner may now cancel."""
        return [t for t in self.pending() if now > t.valid_until]

    def escrowed_amount(self, pool_id: Optional[str] = None) -> dict[str, int]:
        """Pending input per direction value, optionally for one pool."""
        totals: dict[str, int] = {}
        for trade in self.pending():
            if pool_id is not None and trade.pool_id != pool_id:
                continue
            key = trade.direction.value
            totals[key] = totals.get(key, 0) + trade.amount_in
        return totals

    def to_dataframe(self) -> pd.DataFrame:
        """All records as a DataFrame (amounts kept as Python ints)."""
        columns = [
            "id", "owner", "pool_id", "direction", "amount_in", "min_amount_out",
            "price_limit", "valid_after", "valid_until", "status",
            "created_at", "finalized_at",
        ]
        records = [t.to_dict() for t in self._trades.values()]
        return pd.DataFrame(records, columns=columns).astype(
            {"amount_in": object, "min_amount_out": object, "price_limit": object}
        )
