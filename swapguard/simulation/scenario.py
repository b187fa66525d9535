"""
Scenario files.

A scenario is a table of timed requests against one pool:

    timestamp,account,action,direction,amount_in,min_amount_out,trade_ref
    0,alice,swap,zero_for_one,50000000000000000000,,big
    0,bob,swap,one_for_zero,1000000000000000000,,
    90,keeper,execute,,,,big

timestamp is seconds from the simulation start. trade_ref labels a swap
so later execute/cancel rows can refer to the trade it paused. Amounts
are read as text and kept as Python ints, since pool amounts do not fit
in int64.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from swapguard.pool.schemas import Direction

REQUIRED_COLUMNS = ["timestamp", "account", "action"]
OPTIONAL_COLUMNS = ["direction", "amount_in", "min_amount_out", "trade_ref"]
ACTIONS = {"swap", "execute", "cancel"}


class ScenarioError(ValueError):
    """Malformed scenario table."""


def _parse_amount(value, column: str, row: int) -> Optional[int]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ScenarioError(f"row {row}: {column} is not a number: {text!r}")
    if amount != amount.to_integral_value() or amount < 0:
        raise ScenarioError(f"row {row}: {column} must be a non-negative integer: {text!r}")
    return int(amount)


def normalize_scenario(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate a scenario table and coerce its columns.

    Raises:
        ScenarioError: Missing columns, unknown actions, swaps without input
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ScenarioError(f"scenario missing columns: {', '.join(missing)}")

    df = df.copy()
    for column in OPTIONAL_COLUMNS:
        if column not in df.columns:
            df[column] = None

    records = []
    for i, row in enumerate(df.to_dict("records")):
        action = str(row["action"]).strip().lower()
        if action not in ACTIONS:
            raise ScenarioError(f"row {i}: unknown action {row['action']!r}")

        direction = str(row["direction"] or "").strip().lower()
        if direction in ("", "nan", "none"):
            direction = Direction.ZERO_FOR_ONE.value
        try:
            Direction(direction)
        except ValueError:
            raise ScenarioError(f"row {i}: unknown direction {row['direction']!r}")

        amount_in = _parse_amount(row["amount_in"], "amount_in", i)
        if action == "swap" and not amount_in:
            raise ScenarioError(f"row {i}: swap requires a positive amount_in")

        trade_ref = row["trade_ref"]
        if trade_ref is None or (isinstance(trade_ref, float) and pd.isna(trade_ref)):
            trade_ref = ""
        trade_ref = str(trade_ref).strip()
        if action != "swap" and not trade_ref:
            raise ScenarioError(f"row {i}: {action} requires a trade_ref")

        records.append({
            "timestamp": int(Decimal(str(row["timestamp"]).strip())),
            "account": str(row["account"]).strip(),
            "action": action,
            "direction": direction,
            "amount_in": amount_in or 0,
            "min_amount_out": _parse_amount(row["min_amount_out"], "min_amount_out", i),
            "trade_ref": trade_ref,
        })

    # object dtype keeps amounts as exact Python ints (and None) instead of float64
    result = pd.DataFrame(records, columns=REQUIRED_COLUMNS + OPTIONAL_COLUMNS, dtype=object)
    return result.astype({"timestamp": "int64"})


def load_scenario(source: Union[str, Path, pd.DataFrame]) -> pd.DataFrame:
    """Load a scenario from a CSV path or an existing DataFrame."""
    if isinstance(source, pd.DataFrame):
        return normalize_scenario(source)

    df = pd.read_csv(source, dtype=str, keep_default_na=False)
    return normalize_scenario(df)
