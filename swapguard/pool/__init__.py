"""
Pool Module.

The liquidity engine the guard is attached to, plus the pieces around it:
- Schemas (pool keys, swap params, balance deltas, pending trades)
- Concentrated-liquidity price math
- Token vault (balances and transfers)
- In-memory pool engine with hook dispatch and flash accounting
- Exact-input swap router
- Host clock and entropy sources

Usage:
    from swapguard.pool import InMemoryPoolEngine, TokenVault, PoolKey, SwapRouter

    vault = TokenVault()
    engine = InMemoryPoolEngine(vault, clock=ManualClock())
    engine.initialize(PoolKey("TKA", "TKB", 3000), sqrt_price_x96=Q96, liquidity=10**21)
"""

from .context import Clock, EntropySource, HostEntropy, ManualClock, SecureEntropy, SystemClock
from .engine import InMemoryPoolEngine, PoolEngine, SwapHook
from .errors import (
    AlreadyUnlocked,
    CurrencyNotSettled,
    InsufficientBalance,
    ManagerLocked,
    PoolAlreadyInitialized,
    PoolError,
    PoolNotInitialized,
    PriceLimitOutOfBounds,
)
from .router import SwapRouter, default_price_limit
from .schemas import (
    BalanceDelta,
    BeforeSwapResult,
    Direction,
    PendingTrade,
    PoolKey,
    PoolState,
    SwapParams,
    SwapResult,
    TradeStatus,
    decode_min_amount_out,
    derive_trade_id,
    encode_min_amount_out,
)
from .sqrt_price_math import (
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
    Q96,
    price_from_sqrt_price_x96,
    sqrt_price_x96_from_price,
)
from .vault import TokenVault

__all__ = [
    # Context
    "Clock",
    "SystemClock",
    "ManualClock",
    "EntropySource",
    "SecureEntropy",
    "HostEntropy",
    # Engine
    "PoolEngine",
    "InMemoryPoolEngine",
    "SwapHook",
    "SwapRouter",
    "default_price_limit",
    "TokenVault",
    # Errors
    "PoolError",
    "PoolNotInitialized",
    "PoolAlreadyInitialized",
    "PriceLimitOutOfBounds",
    "ManagerLocked",
    "AlreadyUnlocked",
    "CurrencyNotSettled",
    "InsufficientBalance",
    # Schemas
    "BalanceDelta",
    "BeforeSwapResult",
    "Direction",
    "PendingTrade",
    "PoolKey",
    "PoolState",
    "SwapParams",
    "SwapResult",
    "TradeStatus",
    "derive_trade_id",
    "encode_min_amount_out",
    "decode_min_amount_out",
    # Math
    "Q96",
    "MIN_SQRT_PRICE",
    "MAX_SQRT_PRICE",
    "sqrt_price_x96_from_price",
    "price_from_sqrt_price_x96",
]
