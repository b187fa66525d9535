"""Data schemas shared by the pool engine and the sandwich guard."""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Direction(Enum):
    """Which asset of the pair is being sold."""
    ZERO_FOR_ONE = "zero_for_one"  # Sell currency0, receive currency1
    ONE_FOR_ZERO = "one_for_zero"  # Sell currency1, receive currency0

    @property
    def zero_for_one(self) -> bool:
        return self is Direction.ZERO_FOR_ONE

    @classmethod
    def from_bool(cls, zero_for_one: bool) -> "Direction":
        return cls.ZERO_FOR_ONE if zero_for_one else cls.ONE_FOR_ZERO


class TradeStatus(Enum):
    """Lifecycle state of an escrowed trade."""
    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PoolKey:
    """Identifies a pool: the currency pair, its LP fee and the attached hook."""
    currency0: str
    currency1: str
    fee: int  # Pips (1e-6), e.g. 3000 = 0.30%
    hooks: Optional[Any] = field(default=None, compare=False)

    @property
    def hook_address(self) -> str:
        return getattr(self.hooks, "address", "") if self.hooks is not None else ""

    @property
    def pool_id(self) -> str:
        """Deterministic pool identifier."""
        payload = f"{self.currency0}|{self.currency1}|{self.fee}|{self.hook_address}"
        return "0x" + hashlib.sha256(payload.encode()).hexdigest()

    def currency_in(self, direction: Direction) -> str:
        return self.currency0 if direction.zero_for_one else self.currency1

    def currency_out(self, direction: Direction) -> str:
        return self.currency1 if direction.zero_for_one else self.currency0


@dataclass(frozen=True)
class PoolState:
    """Price and in-range liquidity of a pool at one instant."""
    pool_id: str
    sqrt_price_x96: int  # sqrt(currency1 / currency0) as Q64.96
    liquidity: int
    fee: int


@dataclass(frozen=True)
class SwapParams:
    """
    Parameters of a swap request.

    amount_specified follows the pool convention: negative is an exact
    input amount, positive an exact output amount.
    """
    zero_for_one: bool
    amount_specified: int
    sqrt_price_limit_x96: int

    @property
    def direction(self) -> Direction:
        return Direction.from_bool(self.zero_for_one)

    @property
    def is_exact_input(self) -> bool:
        return self.amount_specified < 0


@dataclass(frozen=True)
class BalanceDelta:
    """Signed balance change from the caller's point of view (negative = owed to the pool)."""
    amount0: int = 0
    amount1: int = 0

    def __add__(self, other: "BalanceDelta") -> "BalanceDelta":
        return BalanceDelta(self.amount0 + other.amount0, self.amount1 + other.amount1)

    def __sub__(self, other: "BalanceDelta") -> "BalanceDelta":
        return BalanceDelta(self.amount0 - other.amount0, self.amount1 - other.amount1)

    def amount_in(self, direction: Direction) -> int:
        """Input paid by the caller (positive number)."""
        return -self.amount0 if direction.zero_for_one else -self.amount1

    def amount_out(self, direction: Direction) -> int:
        """Output owed to the caller (positive number)."""
        return self.amount1 if direction.zero_for_one else self.amount0


@dataclass(frozen=True)
class BeforeSwapResult:
    """
    Hook response to a swap.

    specified_delta is the part of the specified (input) amount the hook
    consumed itself; the pool only swaps what is left.
    """
    specified_delta: int = 0
    unspecified_delta: int = 0

    @classmethod
    def passthrough(cls) -> "BeforeSwapResult":
        return cls()


@dataclass
class PendingTrade:
    """Escrowed large trade awaiting its execution window."""
    id: str
    owner: str
    pool_id: str
    direction: Direction
    amount_in: int
    min_amount_out: int
    price_limit: int
    valid_after: int  # Unix seconds
    valid_until: int  # Unix seconds
    status: TradeStatus = TradeStatus.PENDING
    created_at: Optional[int] = None
    finalized_at: Optional[int] = None

    @property
    def executed(self) -> bool:
        """Terminal flag: set once the trade is executed or cancelled."""
        return self.status is not TradeStatus.PENDING

    def in_window(self, now: int) -> bool:
        return self.valid_after <= now <= self.valid_until

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner": self.owner,
            "pool_id": self.pool_id,
            "direction": self.direction.value,
            "amount_in": self.amount_in,
            "min_amount_out": self.min_amount_out,
            "price_limit": self.price_limit,
            "valid_after": self.valid_after,
            "valid_until": self.valid_until,
            "status": self.status.value,
            "created_at": self.created_at,
            "finalized_at": self.finalized_at,
        }


@dataclass
class SwapResult:
    """Outcome of a router swap: either an immediate fill or a paused trade."""
    paused: bool
    amount_in: int
    amount_out: int
    delta: BalanceDelta
    trade_id: Optional[str] = None


def _word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def derive_trade_id(
    owner: str,
    pool_id: str,
    amount_in: int,
    timestamp: int,
    nonce: int,
) -> str:
    """
    Derive the identifier of a paused trade.

    Uses only public submission parameters, so a caller can rebuild the id
    from its own request and the guard's pending count before the swap.
    """
    hasher = hashlib.sha256()
    hasher.update(owner.encode())
    hasher.update(bytes.fromhex(pool_id.removeprefix("0x")))
    hasher.update(_word(amount_in))
    hasher.update(_word(timestamp))
    hasher.update(_word(nonce))
    return "0x" + hasher.hexdigest()


def encode_min_amount_out(min_amount_out: int) -> bytes:
    """Encode a slippage floor as hook data (32-byte big-endian word)."""
    if min_amount_out < 0:
        raise ValueError("min_amount_out must be non-negative")
    return _word(min_amount_out)


def decode_min_amount_out(hook_data: bytes) -> int:
    """Decode the slippage floor from hook data; empty data means no floor."""
    if not hook_data:
        return 0
    if len(hook_data) < 32:
        raise ValueError(f"hook data too short: {len(hook_data)} bytes")
    return int.from_bytes(hook_data[:32], "big")
