"""
Unit tests for the pending-trade ledger.
"""

import pytest

from swapguard.escrow.errors import AlreadyFinalized, NotFound
from swapguard.escrow.ledger import PendingTradeLedger
from swapguard.pool.schemas import Direction, PendingTrade, TradeStatus


def make_trade(trade_id: str = "0x01", valid_after: int = 100, valid_until: int = 200, **kwargs) -> PendingTrade:
    values = dict(
        id=trade_id,
        owner="alice",
        pool_id="0xpool",
        direction=Direction.ZERO_FOR_ONE,
        amount_in=10**20,
        min_amount_out=0,
        price_limit=4295128740,
        valid_after=valid_after,
        valid_until=valid_until,
        created_at=0,
    )
    values.update(kwargs)
    return PendingTrade(**values)


class TestPendingTradeLedger:
    """Tests for PendingTradeLedger."""

    def test_nonce_is_monotonic(self):
        """next_nonce should hand out 0, 1, 2 ... and nonce should track it."""
        ledger = PendingTradeLedger()

        assert [ledger.next_nonce() for _ in range(3)] == [0, 1, 2]
        assert ledger.nonce == 3

    def test_add_and_get(self):
        """Added trades are retrievable by id."""
        ledger = PendingTradeLedger()
        trade = make_trade()
        ledger.add(trade)

        assert ledger.get("0x01") is trade
        assert "0x01" in ledger
        assert len(ledger) == 1
        assert ledger.stats.trades_created == 1
        assert ledger.stats.volume_escrowed == 10**20

    def test_get_missing(self):
        assert PendingTradeLedger().get("0xnope") is None

    def test_rejects_duplicate_id(self):
        """Ids are unique."""
        ledger = PendingTradeLedger()
        ledger.add(make_trade())

        with pytest.raises(ValueError):
            ledger.add(make_trade())

    def test_rejects_empty_window(self):
        """valid_after must precede valid_until."""
        with pytest.raises(ValueError):
            PendingTradeLedger().add(make_trade(valid_after=200, valid_until=200))

    def test_rejects_zero_amount(self):
        with pytest.raises(ValueError):
            PendingTradeLedger().add(make_trade(amount_in=0))

    def test_finalize_executed(self):
        """Finalizing sets status, timestamp and stats."""
        ledger = PendingTradeLedger()
        ledger.add(make_trade())

        trade = ledger.finalize("0x01", TradeStatus.EXECUTED, now=150)

        assert trade.executed
        assert trade.status is TradeStatus.EXECUTED
        assert trade.finalized_at == 150
        assert ledger.stats.trades_executed == 1

    def test_finalize_only_once(self):
        """A second transition is refused."""
        ledger = PendingTradeLedger()
        ledger.add(make_trade())
        ledger.finalize("0x01", TradeStatus.CANCELLED, now=300)

        with pytest.raises(AlreadyFinalized):
            ledger.finalize("0x01", TradeStatus.EXECUTED, now=301)

        assert ledger.get("0x01").status is TradeStatus.CANCELLED

    def test_finalize_missing(self):
        with pytest.raises(NotFound):
            PendingTradeLedger().finalize("0xnope", TradeStatus.EXECUTED)

    def test_finalize_requires_terminal_status(self):
        ledger = PendingTradeLedger()
        ledger.add(make_trade())

        with pytest.raises(ValueError):
            ledger.finalize("0x01", TradeStatus.PENDING)

    def test_executable_and_expired(self):
        """Queries partition pending trades by window."""
        ledger = PendingTradeLedger()
        ledger.add(make_trade("0x01", valid_after=100, valid_until=200))
        ledger.add(make_trade("0x02", valid_after=50, valid_until=120))
        ledger.add(make_trade("0x03", valid_after=300, valid_until=400))

        assert [t.id for t in ledger.executable(110)] == ["0x02", "0x01"]
        assert [t.id for t in ledger.expired(150)] == ["0x02"]
        assert ledger.executable(250) == []

    def test_finalized_trades_leave_queries(self):
        """Executed or cancelled trades are no longer pending."""
        ledger = PendingTradeLedger()
        ledger.add(make_trade("0x01"))
        ledger.add(make_trade("0x02"))
        ledger.finalize("0x01", TradeStatus.EXECUTED, now=150)

        assert [t.id for t in ledger.pending()] == ["0x02"]
        assert [t.id for t in ledger.executable(150)] == ["0x02"]

    def test_escrowed_amount_by_direction(self):
        """Pending input is summed per direction."""
        ledger = PendingTradeLedger()
        ledger.add(make_trade("0x01", amount_in=10))
        ledger.add(make_trade("0x02", amount_in=5))
        ledger.add(make_trade("0x03", amount_in=7, direction=Direction.ONE_FOR_ZERO))

        assert ledger.escrowed_amount() == {"zero_for_one": 15, "one_for_zero": 7}
        assert ledger.escrowed_amount(pool_id="0xother") == {}

    def test_record_slippage_failure(self):
        ledger = PendingTradeLedger()
        ledger.record_slippage_failure("0x01")
        assert ledger.stats.slippage_failures == 1

    def test_to_dataframe_keeps_exact_amounts(self):
        """Amounts beyond int64 survive as Python ints."""
        ledger = PendingTradeLedger()
        ledger.add(make_trade(amount_in=10**30))

        df = ledger.to_dataframe()

        assert len(df) == 1
        assert df.iloc[0]["amount_in"] == 10**30
        assert df.iloc[0]["status"] == "pending"
        assert df.iloc[0]["direction"] == "zero_for_one"
