"""
Threshold sweep - how much sandwich profit each threshold_bps setting prevents.

For every (threshold_bps, victim size) pair on the grid, plays the same
front-run / victim / back-run bundle against an unguarded and a guarded
pool and records the attacker's profit in both.

Usage:
    python scripts/sweep_thresholds.py --liquidity 1000000000000000000000 --output data/sweep.csv
"""

import logging
import os
from pathlib import Path
from typing import Optional

import click
import numpy as np
import pandas as pd
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from swapguard.escrow.config import GuardConfig
from swapguard.pricing.reserves import ReserveEstimator
from swapguard.pool.schemas import Direction
from swapguard.pool.sqrt_price_math import sqrt_price_x96_from_price
from swapguard.simulation.config import PoolSetup, SimulationConfig
from swapguard.simulation.sandwich import SandwichSimulator

load_dotenv()
logging.basicConfig(
    level=os.getenv("SWAPGUARD_LOG_LEVEL", "WARNING"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler("sweep.log"),
        logging.StreamHandler(),
    ],
)
logger = logging.getLogger(__name__)
console = Console()


def sweep(
    pool_setup: PoolSetup,
    base_config: GuardConfig,
    sim_config: SimulationConfig,
    thresholds_bps: np.ndarray,
    victim_fractions: np.ndarray,
    frontrun_ratio: float,
) -> pd.DataFrame:
    """
    Run the sandwich comparison over a grid.

    Args:
        pool_setup: Pool used for every run
        base_config: Guard parameters other than threshold_bps
        sim_config: Simulation settings (start time, seed, balances)
        thresholds_bps: threshold_bps values to try
        victim_fractions: Victim input as a fraction of the sold-side reserve
        frontrun_ratio: Front-run input as a multiple of the victim input

    Returns:
        One row per grid point
    """
    estimate = ReserveEstimator().from_price(
        sqrt_price_x96_from_price(pool_setup.price), pool_setup.liquidity
    )
    reserve = estimate.reserve_for(Direction.ZERO_FOR_ONE)

    rows = []
    for bps in thresholds_bps:
        guard_config = GuardConfig(
            threshold_bps=int(bps),
            min_delay=base_config.min_delay,
            window_length=base_config.window_length,
            max_pending_time=base_config.max_pending_time,
            executor_fee_bps=base_config.executor_fee_bps,
            bps_denominator=base_config.bps_denominator,
        )
        simulator = SandwichSimulator(pool_setup, guard_config, sim_config)

        for fraction in victim_fractions:
            victim_amount = max(1, int(reserve * fraction))
            frontrun_amount = max(1, int(victim_amount * frontrun_ratio))
            comparison = simulator.compare(victim_amount, frontrun_amount)

            rows.append({
                "threshold_bps": int(bps),
                "victim_fraction": float(fraction),
                "victim_amount": victim_amount,
                "frontrun_amount": frontrun_amount,
                "victim_paused": comparison.guarded.victim_paused,
                "frontrun_paused": comparison.guarded.frontrun_paused,
                "profit_unguarded": comparison.unguarded.attacker_profit,
                "profit_guarded": comparison.guarded.attacker_profit,
                "profit_prevented": comparison.profit_prevented,
            })

        logger.info(f"threshold_bps={int(bps)} done")

    return pd.DataFrame(rows)


@click.command()
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file")
@click.option("--liquidity", type=int, help="Pool liquidity (overrides config)")
@click.option("--min-bps", default=10, help="Smallest threshold_bps")
@click.option("--max-bps", default=500, help="Largest threshold_bps")
@click.option("--steps", default=8, help="Number of threshold values (log-spaced)")
@click.option("--frontrun-ratio", default=0.5, help="Front-run size relative to the victim")
@click.option("--output", "-o", type=click.Path(), help="CSV output path")
def main(
    config: Optional[str],
    liquidity: Optional[int],
    min_bps: int,
    max_bps: int,
    steps: int,
    frontrun_ratio: float,
    output: Optional[str],
):
    """Sweep threshold_bps against sandwich outcomes."""
    cfg = {}
    if config:
        with open(config) as f:
            cfg = yaml.safe_load(f) or {}

    pool_setup = PoolSetup(**cfg.get("pool", {}))
    if liquidity is not None:
        pool_setup.liquidity = liquidity

    thresholds = np.unique(np.geomspace(min_bps, max_bps, steps).round().astype(int))
    victim_fractions = np.array([0.0005, 0.002, 0.005, 0.01, 0.02, 0.05])

    console.print("[bold green]Sweeping thresholds[/bold green]")
    console.print(f"threshold_bps: {', '.join(str(t) for t in thresholds)}")

    with console.status("[bold green]Simulating..."):
        df = sweep(
            pool_setup,
            GuardConfig(**cfg.get("guard", {})),
            SimulationConfig(**cfg.get("simulation", {})),
            thresholds,
            victim_fractions,
            frontrun_ratio,
        )

    summary = df.groupby("threshold_bps").agg(
        paused=("victim_paused", "mean"),
        prevented=("profit_prevented", "sum"),
        guarded=("profit_guarded", "sum"),
    )

    table = Table(title="Sandwich Profit by Threshold")
    table.add_column("threshold_bps", style="cyan")
    table.add_column("Victims Paused", style="green")
    table.add_column("Profit Prevented", style="green")
    table.add_column("Residual Profit", style="red")

    for bps, row in summary.iterrows():
        table.add_row(
            str(bps),
            f"{row['paused']:.0%}",
            f"{row['prevented']:.6g}",
            f"{row['guarded']:.6g}",
        )

    console.print(table)

    output = output or os.path.join(os.getenv("SWAPGUARD_OUTPUT_DIR", "data/sweep"), "thresholds.csv")
    Path(output).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)
    console.print(f"Results saved to {output}")


if __name__ == "__main__":
    main()
