"""
Randomized Execution Window.

The delay before a paused trade can execute is unpredictable at request
time: a seed hashed from (submission time, fresh entropy, trade id) picks
an offset in [0, window_length). An attacker who cannot predict the
entropy cannot line up a back-run with the execution.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional

from swapguard.pool.context import EntropySource, SecureEntropy

from .config import GuardConfig


@dataclass(frozen=True)
class ExecutionWindow:
    """Bounds of the interval a paused trade may execute in."""
    valid_after: int
    valid_until: int
    offset: int


def derive_seed(timestamp: int, entropy: bytes, trade_id: str) -> int:
    hasher = hashlib.sha256()
    hasher.update(timestamp.to_bytes(32, "big"))
    hasher.update(entropy)
    hasher.update(bytes.fromhex(trade_id.removeprefix("0x")))
    return int.from_bytes(hasher.digest(), "big")


class DelayScheduler:
    """
    Computes execution windows for paused trades.

    valid_after = now + min_delay + offset
    valid_until = valid_after + window_length + max_pending_time
    """

    def __init__(self, config: GuardConfig, entropy: Optional[EntropySource] = None):
        self.config = config
        self.entropy = entropy or SecureEntropy()

    def schedule(self, now: int, trade_id: str) -> ExecutionWindow:
        seed = derive_seed(now, self.entropy.draw(), trade_id)
        offset = seed % self.config.window_length

        valid_after = now + self.config.min_delay + offset
        valid_until = valid_after + self.config.window_length + self.config.max_pending_time

        return ExecutionWindow(valid_after=valid_after, valid_until=valid_until, offset=offset)
