"""
Execution Engine - settles escrowed trades once their window opens.

Anyone may trigger execution. Order of operations:
1. Eligibility checks (exists and pending, window open)
2. Finalize the record (before any external call)
3. Re-submit the trade to the pool as a fresh exact-input swap,
   settle the escrowed input and take the output
4. Slippage check against min_amount_out
5. Pay the owner (output minus executor fee) and the executor (fee),
   refund any input the price limit left unconsumed
"""

import logging
from dataclasses import dataclass
from typing import Callable

from swapguard.pool.context import Clock
from swapguard.pool.engine import PoolEngine
from swapguard.pool.errors import AlreadyUnlocked
from swapguard.pool.schemas import PendingTrade, PoolKey, SwapParams, TradeStatus
from swapguard.pool.vault import TokenVault

from .config import GuardConfig
from .errors import Expired, NotFound, SlippageExceeded, TooEarly
from .events import GuardEvent, SwapExecuted
from .ledger import PendingTradeLedger

logger = logging.getLogger(__name__)


@dataclass
class ExecutionReceipt:
    """Amounts moved by a successful execution."""
    trade_id: str
    executor: str
    amount_in: int  # Input consumed by the pool
    amount_out: int
    fee: int
    owner_amount: int
    refund: int  # Unconsumed input returned to the owner


class ExecutionEngine:
    """
    Executes pending trades inside their window.

    Usage:
        engine = ExecutionEngine(pool_engine, vault, ledger, config, clock,
                                 address="guard", notify=print)
        receipt = engine.execute(trade_id, caller="keeper")
    """

    def __init__(
        self,
        pool_engine: PoolEngine,
        vault: TokenVault,
        ledger: PendingTradeLedger,
        config: GuardConfig,
        clock: Clock,
        address: str,
        notify: Callable[[GuardEvent], None],
    ):
        self.pool_engine = pool_engine
        self.vault = vault
        self.ledger = ledger
        self.config = config
        self.clock = clock
        self.address = address
        self.notify = notify

    def check(self, trade_id: str) -> PendingTrade:
        """
        Verify a trade can execute now.

        Raises:
            NotFound: No record, or already finalized
            TooEarly: Window not yet open
            Expired: Window closed
            AlreadyUnlocked: Called from inside another unit of work
        """
        trade = self.ledger.get(trade_id)
        if trade is None or trade.executed:
            raise NotFound(trade_id)

        now = self.clock.now()
        if now < trade.valid_after:
            raise TooEarly(trade_id, now, trade.valid_after)
        if now > trade.valid_until:
            raise Expired(trade_id, now, trade.valid_until)

        # Settlement needs its own unlock; refuse here so the record stays pending
        if self.pool_engine.is_unlocked:
            raise AlreadyUnlocked()

        return trade

    def execute(self, trade_id: str, caller: str) -> ExecutionReceipt:
        """
        Execute a pending trade.

        Args:
            trade_id: Pending trade id
            caller: Executor, paid the executor fee

        Returns:
            ExecutionReceipt

        Raises:
            NotFound, TooEarly, Expired, AlreadyUnlocked: Record untouched, retry allowed
            SlippageExceeded: Record already finalized; funds stay in custody
        """
        trade = self.check(trade_id)

        # Finalize first: a re-entrant execute or cancel now fails closed
        self.ledger.finalize(trade_id, TradeStatus.EXECUTED, self.clock.now())

        key = self.pool_engine.get_pool_key(trade.pool_id)
        amount_in, amount_out = self.pool_engine.unlock(lambda: self._resubmit(trade, key))

        if amount_out < trade.min_amount_out:
            self.ledger.record_slippage_failure(trade_id)
            raise SlippageExceeded(trade_id, amount_out, trade.min_amount_out)

        fee = amount_out * self.config.executor_fee_bps // self.config.bps_denominator
        owner_amount = amount_out - fee
        refund = trade.amount_in - amount_in

        currency_out = key.currency_out(trade.direction)
        self.vault.transfer(currency_out, self.address, trade.owner, owner_amount)
        self.vault.transfer(currency_out, self.address, caller, fee)
        if refund:
            self.vault.transfer(key.currency_in(trade.direction), self.address, trade.owner, refund)

        logger.info(
            f"Swap executed: {trade_id[:10]} by {caller} out={amount_out} fee={fee}"
            + (f" refund={refund}" if refund else "")
        )

        self.notify(SwapExecuted(id=trade_id, executor=caller, amount_out=amount_out, fee=fee))

        return ExecutionReceipt(
            trade_id=trade_id,
            executor=caller,
            amount_in=amount_in,
            amount_out=amount_out,
            fee=fee,
            owner_amount=owner_amount,
            refund=refund,
        )

    def _resubmit(self, trade: PendingTrade, key: PoolKey) -> tuple[int, int]:
        """Swap the escrowed input and settle both legs with the pool."""
        params = SwapParams(
            zero_for_one=trade.direction.zero_for_one,
            amount_specified=-trade.amount_in,
            sqrt_price_limit_x96=trade.price_limit,
        )
        delta = self.pool_engine.swap(self.address, key, params, b"")

        amount_in = delta.amount_in(trade.direction)
        amount_out = delta.amount_out(trade.direction)

        self.pool_engine.settle(self.address, key.currency_in(trade.direction), amount_in)
        self.pool_engine.take(self.address, key.currency_out(trade.direction), amount_out)

        return amount_in, amount_out
