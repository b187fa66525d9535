"""
Host environment: time and randomness.

The guard never reads the wall clock or a random generator directly;
both are injected so simulations and tests can control them.
"""

import secrets
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union


class Clock(ABC):
    """Source of the current timestamp (unix seconds)."""

    @abstractmethod
    def now(self) -> int:
        ...


class SystemClock(Clock):
    """Wall-clock time."""

    def now(self) -> int:
        return int(time.time())


class ManualClock(Clock):
    """
    Clock that only moves when told to.

    Usage:
        clock = ManualClock(1_700_000_000)
        clock.advance(30)
    """

    def __init__(self, start: Optional[int] = None):
        self._now = int(time.time()) if start is None else int(start)

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int):
        if timestamp < self._now:
            raise ValueError("cannot move the clock backwards")
        self._now = int(timestamp)


class EntropySource(ABC):
    """Supplier of a value an adversary cannot predict at request time."""

    @abstractmethod
    def draw(self) -> bytes:
        ...


class SecureEntropy(EntropySource):
    """Fresh CSPRNG output per draw."""

    def __init__(self, num_bytes: int = 32):
        self.num_bytes = num_bytes

    def draw(self) -> bytes:
        return secrets.token_bytes(self.num_bytes)


class HostEntropy(EntropySource):
    """
    Entropy supplied by the host, e.g. a chain's random beacon.

    The beacon may return bytes or a non-negative integer.
    """

    def __init__(self, beacon: Callable[[], Union[bytes, int]]):
        self.beacon = beacon

    def draw(self) -> bytes:
        value = self.beacon()
        if isinstance(value, int):
            return value.to_bytes(32, "big")
        return bytes(value)
