"""Cancellation Path - post-expiry refund of an unexecuted trade to its owner."""

import logging
from typing import Callable

from swapguard.pool.context import Clock
from swapguard.pool.engine import PoolEngine
from swapguard.pool.schemas import PendingTrade, TradeStatus
from swapguard.pool.vault import TokenVault

from .errors import AlreadyFinalized, NotFound, NotOwner, TooSoon
from .events import GuardEvent, SwapCancelled
from .ledger import PendingTradeLedger

logger = logging.getLogger(__name__)


class CancellationPath:
    """
    Lets the owner reclaim escrowed input once the window has expired.

    Cancellation is an escape hatch, never a way to pre-empt execution:
    it is refused while the window can still open or is open.
    """

    def __init__(
        self,
        pool_engine: PoolEngine,
        vault: TokenVault,
        ledger: PendingTradeLedger,
        clock: Clock,
        address: str,
        notify: Callable[[GuardEvent], None],
    ):
        self.pool_engine = pool_engine
        self.vault = vault
        self.ledger = ledger
        self.clock = clock
        self.address = address
        self.notify = notify

    def cancel(self, trade_id: str, caller: str) -> PendingTrade:
        """
        Cancel an expired trade and refund its input.

        Raises:
            NotFound: No record
            TooSoon: Window has not expired (checked for any caller)
            NotOwner: Caller is not the owner
            AlreadyFinalized: Already executed or cancelled
        """
        trade = self.ledger.get(trade_id)
        if trade is None:
            raise NotFound(trade_id)

        now = self.clock.now()
        if now <= trade.valid_until:
            raise TooSoon(trade_id, now, trade.valid_until)
        if caller != trade.owner:
            raise NotOwner(trade_id, caller)
        if trade.executed:
            raise AlreadyFinalized(trade_id)

        self.ledger.finalize(trade_id, TradeStatus.CANCELLED, now)

        key = self.pool_engine.get_pool_key(trade.pool_id)
        self.vault.transfer(key.currency_in(trade.direction), self.address, trade.owner, trade.amount_in)

        logger.info(f"Swap cancelled: {trade_id[:10]} refunded {trade.amount_in} to {trade.owner}")
        self.notify(SwapCancelled(id=trade_id))

        return trade
