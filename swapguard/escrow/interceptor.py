"""
Swap Interceptor - runs before every swap on a guarded pool.

Flow for each swap request:
1. Re-submissions from the guard itself pass straight through
2. Exact-output requests are rejected
3. The trade is classified against the live large-trade threshold
4. Small trades pass through untouched
5. Large trades have their input claimed into the guard's custody first,
   then are recorded, scheduled and announced; the pool swaps nothing
"""

import logging
from typing import Callable

from swapguard.pool.context import Clock
from swapguard.pool.engine import PoolEngine
from swapguard.pool.errors import ManagerLocked
from swapguard.pool.schemas import (
    BeforeSwapResult,
    PendingTrade,
    PoolKey,
    SwapParams,
    decode_min_amount_out,
    derive_trade_id,
)
from swapguard.pricing.threshold import ThresholdEvaluator

from .errors import UnsupportedTradeShape
from .events import GuardEvent, SwapPaused
from .ledger import PendingTradeLedger
from .scheduling import DelayScheduler

logger = logging.getLogger(__name__)


class SwapInterceptor:
    """
    Classifies swap requests and escrows the large ones.

    Usage:
        interceptor = SwapInterceptor(engine, ledger, evaluator, scheduler, clock,
                                      address="guard", notify=print)
        result = interceptor.before_swap(sender, key, params, hook_data)
    """

    def __init__(
        self,
        engine: PoolEngine,
        ledger: PendingTradeLedger,
        evaluator: ThresholdEvaluator,
        scheduler: DelayScheduler,
        clock: Clock,
        address: str,
        notify: Callable[[GuardEvent], None],
    ):
        """
        Initialize interceptor.

        Args:
            engine: Pool engine the guard is attached to
            ledger: Pending-trade ledger
            evaluator: Large-trade threshold evaluator
            scheduler: Execution window scheduler
            clock: Host clock
            address: The guard's own account
            notify: Event sink
        """
        self.engine = engine
        self.ledger = ledger
        self.evaluator = evaluator
        self.scheduler = scheduler
        self.clock = clock
        self.address = address
        self.notify = notify

        self.swaps_seen = 0
        self.swaps_passed = 0
        self.swaps_paused = 0

    def before_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        hook_data: bytes,
    ) -> BeforeSwapResult:
        """
        Intercept a swap.

        Args:
            sender: Requester identity (becomes the trade owner)
            key: Pool key
            params: Swap parameters
            hook_data: Optional encoded min_amount_out

        Returns:
            Passthrough result, or a result claiming the whole input

        Raises:
            UnsupportedTradeShape: For exact-output requests
            ManagerLocked: Called outside the engine's unlock
        """
        # Settlement re-submits the escrowed trade through the pool
        if sender == self.address:
            return BeforeSwapResult.passthrough()

        if not self.engine.is_unlocked:
            raise ManagerLocked()

        self.swaps_seen += 1

        if params.amount_specified > 0:
            logger.warning(f"Rejected exact-output swap from {sender}")
            raise UnsupportedTradeShape(params.amount_specified)

        amount_in = -params.amount_specified
        direction = params.direction

        state = self.engine.get_pool_state(key.pool_id)
        classification = self.evaluator.classify(state, direction, amount_in)

        if not classification.is_large:
            self.swaps_passed += 1
            logger.debug(
                f"Swap from {sender} passes: {amount_in} <= threshold {classification.threshold}"
            )
            return BeforeSwapResult.passthrough()

        min_amount_out = decode_min_amount_out(hook_data)

        # The caller's input is already owed to the pool; claim it before any
        # ledger write so a failed claim leaves no record behind
        self.engine.take(self.address, key.currency_in(direction), amount_in)

        now = self.clock.now()
        nonce = self.ledger.next_nonce()
        trade_id = derive_trade_id(sender, key.pool_id, amount_in, now, nonce)
        window = self.scheduler.schedule(now, trade_id)

        trade = PendingTrade(
            id=trade_id,
            owner=sender,
            pool_id=key.pool_id,
            direction=direction,
            amount_in=amount_in,
            min_amount_out=min_amount_out,
            price_limit=params.sqrt_price_limit_x96,
            valid_after=window.valid_after,
            valid_until=window.valid_until,
            created_at=now,
        )
        self.ledger.add(trade)
        self.swaps_paused += 1

        logger.info(
            f"Swap paused: {trade_id[:10]} owner={sender} amount_in={amount_in} "
            f"threshold={classification.threshold} window=[{window.valid_after}, {window.valid_until}]"
        )

        self.notify(SwapPaused(
            id=trade_id,
            owner=sender,
            amount_in=amount_in,
            valid_after=window.valid_after,
            valid_until=window.valid_until,
        ))

        return BeforeSwapResult(specified_delta=amount_in)
