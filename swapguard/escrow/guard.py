"""
Sandwich Guard - hook attached to a pool that defers large swaps.

Wires together:
- SwapInterceptor (before_swap: classify and escrow)
- ExecutionEngine (execute: permissionless settlement in the window)
- CancellationPath (cancel: owner refund after expiry)
- PendingTradeLedger (records and nonce)

and fans guard events out to registered callbacks.
"""

import logging
from typing import Callable, Optional

from swapguard.pool.context import Clock, EntropySource
from swapguard.pool.engine import PoolEngine, SwapHook
from swapguard.pool.schemas import BeforeSwapResult, PendingTrade, PoolKey, SwapParams
from swapguard.pool.vault import TokenVault
from swapguard.pricing.threshold import ThresholdEvaluator

from .cancellation import CancellationPath
from .config import GuardConfig
from .events import GuardEvent
from .execution_engine import ExecutionEngine, ExecutionReceipt
from .interceptor import SwapInterceptor
from .ledger import PendingTradeLedger
from .scheduling import DelayScheduler

logger = logging.getLogger(__name__)


class SandwichGuard(SwapHook):
    """
    Pool hook that escrows large trades and releases them after a random delay.

    Usage:
        guard = SandwichGuard(engine, vault, GuardConfig())
        guard.on_event(lambda event: print(event))

        key = PoolKey("TKA", "TKB", 3000, hooks=guard)
        engine.initialize(key, sqrt_price_x96, liquidity)

        result = router.swap_exact_input("alice", key, Direction.ZERO_FOR_ONE, big_amount)
        # ... window opens ...
        guard.execute(result.trade_id, caller="keeper")
    """

    def __init__(
        self,
        engine: PoolEngine,
        vault: TokenVault,
        config: Optional[GuardConfig] = None,
        clock: Optional[Clock] = None,
        entropy: Optional[EntropySource] = None,
        address: str = "sandwich_guard",
    ):
        """
        Initialize guard.

        Args:
            engine: Pool engine the guard is attached to
            vault: Token vault holding the guard's custody
            config: Guard configuration
            clock: Host clock (defaults to the engine's clock)
            entropy: Entropy for delay randomization (defaults to a CSPRNG)
            address: The guard's own account
        """
        self.config = config or GuardConfig()
        self.engine = engine
        self.vault = vault
        self.clock = clock or engine.clock
        self.address = address

        self.ledger = PendingTradeLedger()
        self.evaluator = ThresholdEvaluator(
            threshold_bps=self.config.threshold_bps,
            bps_denominator=self.config.bps_denominator,
        )
        self.scheduler = DelayScheduler(self.config, entropy)

        self.interceptor = SwapInterceptor(
            engine,
            self.ledger,
            self.evaluator,
            self.scheduler,
            self.clock,
            address,
            self._notify,
        )
        self.executor = ExecutionEngine(
            engine, vault, self.ledger, self.config, self.clock, address, self._notify
        )
        self.cancellation = CancellationPath(
            engine, vault, self.ledger, self.clock, address, self._notify
        )

        # Callbacks
        self._event_callbacks: list[Callable[[GuardEvent], None]] = []

    def on_event(self, callback: Callable[[GuardEvent], None]):
        """Register callback for guard events."""
        self._event_callbacks.append(callback)

    def before_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        hook_data: bytes,
    ) -> BeforeSwapResult:
        return self.interceptor.before_swap(sender, key, params, hook_data)

    def execute(self, trade_id: str, caller: str) -> ExecutionReceipt:
        """Execute a pending trade; see ExecutionEngine.execute."""
        return self.executor.execute(trade_id, caller)

    def cancel(self, trade_id: str, caller: str) -> PendingTrade:
        """Cancel an expired trade; see CancellationPath.cancel."""
        return self.cancellation.cancel(trade_id, caller)

    def get_pending_trade(self, trade_id: str) -> Optional[PendingTrade]:
        return self.ledger.get(trade_id)

    def can_execute(self, trade_id: str) -> bool:
        """True if the trade exists, is pending and its window is open now."""
        trade = self.ledger.get(trade_id)
        if trade is None or trade.executed:
            return False
        return trade.in_window(self.clock.now())

    @property
    def pending_count(self) -> int:
        """Monotonic count of paused trades (the id-derivation nonce)."""
        return self.ledger.nonce

    def executable_trades(self) -> list[PendingTrade]:
        return self.ledger.executable(self.clock.now())

    def expired_trades(self) -> list[PendingTrade]:
        return self.ledger.expired(self.clock.now())

    def escrow_balance(self, currency: str) -> int:
        """Tokens of a currency currently in the guard's custody."""
        return self.vault.balance_of(self.address, currency)

    def escrowed_amount(self, currency: str) -> int:
        """Input of pending trades denominated in a currency."""
        total = 0
        for trade in self.ledger.pending():
            key = self.engine.get_pool_key(trade.pool_id)
            if key.currency_in(trade.direction) == currency:
                total += trade.amount_in
        return total

    def _notify(self, event: GuardEvent):
        """Notify event callbacks."""
        for callback in self._event_callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event callback error: {e}")
