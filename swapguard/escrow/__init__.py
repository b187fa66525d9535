"""
Escrow Module.

Interception, custody and delayed settlement of large swaps:
- Pending-trade ledger (records, nonce, lifecycle)
- Interceptor (classify and escrow in before_swap)
- Execution engine (settle in the randomized window)
- Cancellation path (owner refund after expiry)
- Keeper (permissionless executor loop)

Usage:
    from swapguard.escrow import SandwichGuard, GuardConfig

    guard = SandwichGuard(engine, vault, GuardConfig(threshold_bps=100))
    key = PoolKey("TKA", "TKB", 3000, hooks=guard)
    engine.initialize(key, sqrt_price_x96, liquidity)

    receipt = guard.execute(trade_id, caller="keeper")
"""

from .cancellation import CancellationPath
from .config import GuardConfig
from .errors import (
    AlreadyFinalized,
    Expired,
    NotFound,
    NotOwner,
    SlippageExceeded,
    SwapGuardError,
    TooEarly,
    TooSoon,
    UnsupportedTradeShape,
)
from .events import GuardEvent, SwapCancelled, SwapExecuted, SwapPaused, event_to_dict
from .execution_engine import ExecutionEngine, ExecutionReceipt
from .guard import SandwichGuard
from .interceptor import SwapInterceptor
from .keeper import ExecutionKeeper, KeeperStats
from .ledger import LedgerStats, PendingTradeLedger
from .scheduling import DelayScheduler, ExecutionWindow, derive_seed

__all__ = [
    # Config
    "GuardConfig",
    # Guard
    "SandwichGuard",
    "SwapInterceptor",
    "ExecutionEngine",
    "ExecutionReceipt",
    "CancellationPath",
    # Ledger
    "PendingTradeLedger",
    "LedgerStats",
    # Scheduling
    "DelayScheduler",
    "ExecutionWindow",
    "derive_seed",
    # Keeper
    "ExecutionKeeper",
    "KeeperStats",
    # Events
    "GuardEvent",
    "SwapPaused",
    "SwapExecuted",
    "SwapCancelled",
    "event_to_dict",
    # Errors
    "SwapGuardError",
    "UnsupportedTradeShape",
    "NotFound",
    "AlreadyFinalized",
    "TooEarly",
    "Expired",
    "SlippageExceeded",
    "NotOwner",
    "TooSoon",
]
