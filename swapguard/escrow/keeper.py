"""
Execution Keeper - permissionless executor bot.

Polls the guard for trades whose window is open and executes them,
collecting the executor fee.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from swapguard.pool.errors import PoolError

from .errors import SwapGuardError
from .execution_engine import ExecutionReceipt
from .guard import SandwichGuard

logger = logging.getLogger(__name__)


@dataclass
class KeeperStats:
    """Keeper statistics."""
    polls: int = 0
    executions: int = 0
    failures: int = 0
    fees_earned: int = 0


class ExecutionKeeper:
    """
    Background loop that executes pending trades as soon as they are eligible.

    Usage:
        keeper = ExecutionKeeper(guard, address="keeper", poll_interval_seconds=1.0)
        await keeper.start()
        ...
        await keeper.stop()

    or drive it by hand:
        receipts = keeper.poll()
    """

    def __init__(
        self,
        guard: SandwichGuard,
        address: str,
        poll_interval_seconds: float = 1.0,
    ):
        """
        Initialize keeper.

        Args:
            guard: Guard to execute trades on
            address: Account that receives executor fees
            poll_interval_seconds: Delay between polls
        """
        self.guard = guard
        self.address = address
        self.poll_interval = poll_interval_seconds

        self.stats = KeeperStats()

        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Start background polling."""
        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Keeper {self.address} started")

    async def stop(self):
        """Stop background polling."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info(f"Keeper {self.address} stopped")

    def poll(self) -> list[ExecutionReceipt]:
        """Execute every trade whose window is open now."""
        self.stats.polls += 1
        receipts = []

        for trade in self.guard.executable_trades():
            try:
                receipt = self.guard.execute(trade.id, self.address)
            except (SwapGuardError, PoolError) as e:
                self.stats.failures += 1
                logger.warning(f"Keeper failed to execute {trade.id[:10]}: {e}")
                continue

            self.stats.executions += 1
            self.stats.fees_earned += receipt.fee
            receipts.append(receipt)

        return receipts

    async def _run(self):
        while self._running:
            try:
                self.poll()
                await asyncio.sleep(self.poll_interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Keeper loop error: {e}")
                await asyncio.sleep(self.poll_interval)
