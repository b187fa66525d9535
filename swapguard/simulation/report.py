"""
Simulation Report Generation.

Summarises a SimulationResult and writes it out for analysis.

Formats:
- JSON: summary, config and guard events
- CSV / Parquet: per-request outcomes and ledger records
"""

import json
import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .runner import SimulationResult

logger = logging.getLogger(__name__)

# Columns holding token amounts; stored as text in Parquet since they overflow int64
AMOUNT_COLUMNS = ["amount_in", "amount_out", "fee", "refund", "min_amount_out", "price_limit"]


class SimulationReport:
    """
    Generates simulation reports in various formats.

    Usage:
        report = SimulationReport(result)
        print(report.summary())
        report.save("out/run.json")
        report.save("out/outcomes.parquet")
    """

    def __init__(self, result: SimulationResult):
        """
        Initialize report generator.

        Args:
            result: Simulation result to report on
        """
        self.result = result

    def summary(self) -> dict:
        """Headline numbers of the run."""
        outcomes = self.result.outcomes
        counts = self.result.status_counts()

        swaps = outcomes[outcomes["action"] == "swap"] if not outcomes.empty else outcomes
        n_swaps = len(swaps)
        n_paused = int((swaps["status"] == "paused").sum()) if n_swaps else 0

        executed = outcomes[outcomes["status"] == "executed"] if not outcomes.empty else outcomes
        fees = [int(f) for f in executed["fee"]] if len(executed) else []

        delays = self._execution_delays()

        return {
            "guarded": self.result.guarded,
            "events_processed": self.result.events_processed,
            "swaps": n_swaps,
            "filled": counts.get("filled", 0),
            "paused": n_paused,
            "executed": counts.get("executed", 0),
            "cancelled": counts.get("cancelled", 0),
            "failed": counts.get("failed", 0),
            "skipped": counts.get("skipped", 0),
            "pause_rate": n_paused / n_swaps if n_swaps else 0.0,
            "executor_fees": sum(fees),
            "mean_execution_delay": float(np.mean(delays)) if len(delays) else None,
            "max_execution_delay": int(np.max(delays)) if len(delays) else None,
            "final_price": self.result.final_price,
        }

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        config = self.result.config
        guard_config = self.result.guard_config
        pool_setup = self.result.pool_setup

        return {
            "config": {
                "start_time": config.start_time,
                "auto_execute": config.auto_execute,
                "execute_delay": config.execute_delay,
                "seed": config.seed,
            },
            "guard": {
                "threshold_bps": guard_config.threshold_bps,
                "min_delay": guard_config.min_delay,
                "window_length": guard_config.window_length,
                "max_pending_time": guard_config.max_pending_time,
                "executor_fee_bps": guard_config.executor_fee_bps,
            },
            "pool": {
                "currency0": pool_setup.currency0,
                "currency1": pool_setup.currency1,
                "fee_pips": pool_setup.fee_pips,
                "price": pool_setup.price,
                "liquidity": str(pool_setup.liquidity),
            },
            "summary": self.summary(),
            "final_sqrt_price_x96": str(self.result.final_sqrt_price_x96),
            "balances": {
                account: {currency: str(amount) for currency, amount in balances.items()}
                for account, balances in self.result.balances.items()
            },
            "events": [
                {k: str(v) if isinstance(v, int) and not isinstance(v, bool) else v for k, v in e.items()}
                for e in self.result.guard_events
            ],
        }

    def save(self, path: Union[str, Path]):
        """Save by file extension: .json, .csv or .parquet."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        suffix = path.suffix.lower()
        if suffix == ".json":
            self.save_json(path)
        elif suffix == ".csv":
            self.save_csv(path)
        elif suffix == ".parquet":
            self.save_parquet(path)
        else:
            raise ValueError(f"Unsupported report format: {path.suffix}")

        logger.info(f"Report saved to {path}")

    def save_json(self, path: Union[str, Path]):
        """Save report as JSON."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def save_csv(self, path: Union[str, Path]):
        """Save per-request outcomes as CSV; ledger records go next to it."""
        path = Path(path)
        self.result.outcomes.to_csv(path, index=False)
        if not self.result.trades.empty:
            self.result.trades.to_csv(path.with_name(f"{path.stem}_trades.csv"), index=False)

    def save_parquet(self, path: Union[str, Path]):
        """Save per-request outcomes as Parquet; ledger records go next to it."""
        path = Path(path)
        pq.write_table(self._to_arrow(self.result.outcomes), path, compression="snappy")
        if not self.result.trades.empty:
            trades_path = path.with_name(f"{path.stem}_trades.parquet")
            pq.write_table(self._to_arrow(self.result.trades), trades_path, compression="snappy")

    def _execution_delays(self) -> np.ndarray:
        trades = self.result.trades
        if trades.empty:
            return np.array([], dtype=np.int64)
        executed = trades[trades["status"] == "executed"]
        if executed.empty:
            return np.array([], dtype=np.int64)
        return (executed["finalized_at"].astype("int64") - executed["created_at"].astype("int64")).to_numpy()

    @staticmethod
    def _to_arrow(df: pd.DataFrame) -> pa.Table:
        df = df.copy()
        for column in df.columns:
            if column in AMOUNT_COLUMNS:
                df[column] = df[column].map(lambda v: None if v is None or pd.isna(v) else str(v))
        return pa.Table.from_pandas(df, preserve_index=False)
