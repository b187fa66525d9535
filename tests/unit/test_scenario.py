"""
Unit tests for scenario loading.
"""

import pandas as pd
import pytest

from swapguard.simulation.scenario import ScenarioError, load_scenario, normalize_scenario

BIG = 5 * 10**25


class TestNormalizeScenario:
    """Tests for normalize_scenario."""

    def test_defaults(self):
        """Optional columns are filled in."""
        df = pd.DataFrame({
            "timestamp": ["0"],
            "account": ["alice"],
            "action": ["swap"],
            "amount_in": ["1000"],
        })

        result = normalize_scenario(df)
        row = result.iloc[0]

        assert row["direction"] == "zero_for_one"
        assert row["amount_in"] == 1000
        assert row["min_amount_out"] is None
        assert row["trade_ref"] == ""
        assert result["timestamp"].dtype == "int64"

    def test_big_amounts_are_exact(self):
        """Amounts beyond int64 stay exact Python ints."""
        df = pd.DataFrame({
            "timestamp": ["0"],
            "account": ["alice"],
            "action": ["swap"],
            "amount_in": [str(BIG + 1)],
            "min_amount_out": [str(BIG)],
        })

        row = normalize_scenario(df).iloc[0]

        assert row["amount_in"] == BIG + 1
        assert isinstance(row["amount_in"], int)
        assert row["min_amount_out"] == BIG

    def test_missing_columns(self):
        with pytest.raises(ScenarioError, match="account"):
            normalize_scenario(pd.DataFrame({"timestamp": [0], "action": ["swap"]}))

    def test_unknown_action(self):
        df = pd.DataFrame({"timestamp": [0], "account": ["a"], "action": ["mint"]})
        with pytest.raises(ScenarioError, match="unknown action"):
            normalize_scenario(df)

    def test_unknown_direction(self):
        df = pd.DataFrame({
            "timestamp": [0], "account": ["a"], "action": ["swap"],
            "direction": ["sideways"], "amount_in": ["1"],
        })
        with pytest.raises(ScenarioError, match="direction"):
            normalize_scenario(df)

    def test_swap_requires_amount(self):
        df = pd.DataFrame({"timestamp": [0], "account": ["a"], "action": ["swap"]})
        with pytest.raises(ScenarioError, match="amount_in"):
            normalize_scenario(df)

    def test_negative_amount(self):
        df = pd.DataFrame({
            "timestamp": [0], "account": ["a"], "action": ["swap"], "amount_in": ["-5"],
        })
        with pytest.raises(ScenarioError, match="non-negative"):
            normalize_scenario(df)

    def test_execute_requires_trade_ref(self):
        df = pd.DataFrame({"timestamp": [90], "account": ["keeper"], "action": ["execute"]})
        with pytest.raises(ScenarioError, match="trade_ref"):
            normalize_scenario(df)


class TestLoadScenario:
    """Tests for load_scenario."""

    def test_from_csv(self, tmp_path):
        path = tmp_path / "scenario.csv"
        path.write_text(
            "timestamp,account,action,direction,amount_in,min_amount_out,trade_ref\n"
            f"0,alice,swap,zero_for_one,{BIG},,big\n"
            "0,bob,swap,one_for_zero,1000,,\n"
            "90,keeper,execute,,,,big\n"
        )

        df = load_scenario(path)

        assert list(df["action"]) == ["swap", "swap", "execute"]
        assert df.iloc[0]["amount_in"] == BIG
        assert df.iloc[1]["direction"] == "one_for_zero"
        assert df.iloc[2]["trade_ref"] == "big"
        assert df.iloc[2]["amount_in"] == 0

    def test_from_dataframe(self):
        df = pd.DataFrame({"timestamp": [5], "account": ["a"], "action": ["cancel"], "trade_ref": ["x"]})
        assert load_scenario(df).iloc[0]["timestamp"] == 5
