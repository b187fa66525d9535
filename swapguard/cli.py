"""
CLI entry point for swapguard.

Usage:
    swapguard threshold --price 1.0 --liquidity 1000000000000000000000
    swapguard simulate scenarios/example.csv --output data/simulation/example.json
    swapguard sandwich --victim 50000000000000000000 --frontrun 5000000000000000000
    swapguard inspect data/simulation/example_trades.csv --status pending
"""

import sys
from pathlib import Path
from typing import Optional

import click
import pandas as pd
import yaml
from rich.console import Console
from rich.table import Table

from swapguard.escrow.config import GuardConfig
from swapguard.escrow.errors import SwapGuardError
from swapguard.pool.errors import PoolError
from swapguard.pool.schemas import Direction
from swapguard.pool.sqrt_price_math import sqrt_price_x96_from_price
from swapguard.pricing.threshold import ThresholdEvaluator
from swapguard.simulation.config import PoolSetup, SimulationConfig

console = Console()


def load_config(path: Optional[str]) -> dict:
    """Read a YAML config file (sections: guard, pool, simulation, monitoring)."""
    if not path:
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _fail(message: str):
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version="0.1.0", prog_name="swapguard")
def cli():
    """swapguard - Sandwich protection for AMM pools by escrow and randomized delay."""
    pass


@cli.command()
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file")
@click.option("--price", type=float, help="Pool price (currency1 per currency0)")
@click.option("--liquidity", type=int, help="In-range liquidity")
@click.option("--bps", type=int, help="Large-trade threshold in basis points")
@click.option("--amount", "-a", type=int, multiple=True, help="Input amount to classify")
def threshold(
    config: Optional[str],
    price: Optional[float],
    liquidity: Optional[int],
    bps: Optional[int],
    amount: tuple,
):
    """Show the large-trade threshold for a pool."""
    cfg = load_config(config)
    pool_setup = PoolSetup(**cfg.get("pool", {}))
    if price is not None:
        pool_setup.price = price
    if liquidity is not None:
        pool_setup.liquidity = liquidity

    try:
        guard_config = GuardConfig(**cfg.get("guard", {}))
        evaluator = ThresholdEvaluator(
            threshold_bps=bps if bps is not None else guard_config.threshold_bps,
            bps_denominator=guard_config.bps_denominator,
        )
        estimate = evaluator.estimator.from_price(
            sqrt_price_x96_from_price(pool_setup.price), pool_setup.liquidity
        )
    except ValueError as e:
        _fail(str(e))

    table = Table(title=f"Large-Trade Threshold ({evaluator.threshold_bps} bps)")
    table.add_column("Direction", style="cyan")
    table.add_column("Sells", style="cyan")
    table.add_column("Reserve", style="green")
    table.add_column("Threshold", style="yellow")

    for direction in Direction:
        sold = pool_setup.currency0 if direction.zero_for_one else pool_setup.currency1
        reserve = estimate.reserve_for(direction)
        table.add_row(direction.value, sold, str(reserve), str(evaluator.threshold_for(reserve)))

    console.print(table)

    if not estimate.can_classify:
        console.print("[yellow]Pool has no liquidity: no trade is classified as large[/yellow]")

    if amount:
        results = Table(title="Classification")
        results.add_column("Amount", style="cyan")
        results.add_column("Direction", style="cyan")
        results.add_column("Utilisation (bps)", style="green")
        results.add_column("Large", style="yellow")

        for value in amount:
            for direction in Direction:
                c = evaluator.classify_estimate(estimate, direction, value)
                results.add_row(
                    str(value),
                    direction.value,
                    f"{c.utilisation_bps:.2f}",
                    "[red]yes[/red]" if c.is_large else "no",
                )

        console.print(results)


@cli.command()
@click.argument("scenario", type=click.Path(exists=True))
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file")
@click.option("--output", "-o", type=click.Path(), help="Report path (.json, .csv or .parquet)")
@click.option("--unguarded", is_flag=True, help="Run without the guard attached")
@click.option("--no-auto-execute", is_flag=True, help="Only execute trades the scenario executes")
def simulate(
    scenario: str,
    config: Optional[str],
    output: Optional[str],
    unguarded: bool,
    no_auto_execute: bool,
):
    """Replay a scenario CSV against a simulated pool."""
    from swapguard.monitoring.alerts import AlertManager
    from swapguard.monitoring.config import AlertConfig, MonitoringConfig
    from swapguard.monitoring.metrics_collector import GuardMetricsCollector
    from swapguard.simulation.report import SimulationReport
    from swapguard.simulation.runner import SimulationRunner
    from swapguard.simulation.scenario import ScenarioError

    cfg = load_config(config)
    sim_config = SimulationConfig(**cfg.get("simulation", {}))
    monitoring_config = MonitoringConfig(**cfg.get("monitoring", {}))
    if no_auto_execute:
        sim_config.auto_execute = False

    console.print("[bold green]Running Simulation[/bold green]")
    console.print(f"Scenario: {scenario}")
    console.print(f"Guard: {'off' if unguarded else 'on'}")

    try:
        runner = SimulationRunner(
            sim_config,
            PoolSetup(**cfg.get("pool", {})),
            GuardConfig(**cfg.get("guard", {})),
            guarded=not unguarded,
        )
    except (ValueError, PoolError) as e:
        _fail(str(e))

    guard = runner.pool.guard
    metrics = None
    alerts = None
    if guard is not None and monitoring_config.enabled:
        metrics = GuardMetricsCollector(prefix=monitoring_config.prefix)
        metrics.attach(guard)
        if monitoring_config.serve_http:
            metrics.serve(monitoring_config.http_port)
        alerts = AlertManager(AlertConfig(**cfg.get("alerts", {})), clock=guard.clock)

    try:
        with console.status("[bold green]Processing events..."):
            result = runner.run(scenario)
    except (ScenarioError, SwapGuardError) as e:
        _fail(str(e))

    report = SimulationReport(result)
    summary = report.summary()

    table = Table(title="Simulation Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Swaps", str(summary["swaps"]))
    table.add_row("Filled", str(summary["filled"]))
    table.add_row("Paused", str(summary["paused"]))
    table.add_row("Executed", str(summary["executed"]))
    table.add_row("Cancelled", str(summary["cancelled"]))
    table.add_row("Failed", str(summary["failed"]))
    table.add_row("Pause Rate", f"{summary['pause_rate']:.2%}")
    table.add_row("Executor Fees", str(summary["executor_fees"]))
    if summary["mean_execution_delay"] is not None:
        table.add_row("Mean Delay (s)", f"{summary['mean_execution_delay']:.1f}")
    table.add_row("Final Price", f"{summary['final_price']:.6f}")

    console.print(table)

    if metrics is not None:
        metrics.update_from_guard()
    if alerts is not None:
        for alert in alerts.check_guard(guard):
            style = "red" if alert.level.value == "critical" else "yellow"
            console.print(f"[{style}]{alert.level.value.upper()}: {alert.message}[/{style}]")

    if output:
        report.save(output)
        console.print(f"Report saved to {output}")


@cli.command()
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file")
@click.option("--victim", "victim_amount", type=int, required=True, help="Victim input amount")
@click.option("--frontrun", "frontrun_amount", type=int, required=True, help="Attacker front-run input")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in Direction]),
    default=Direction.ZERO_FOR_ONE.value,
    help="Victim trade direction",
)
@click.option("--min-out", type=int, help="Victim slippage floor")
def sandwich(
    config: Optional[str],
    victim_amount: int,
    frontrun_amount: int,
    direction: str,
    min_out: Optional[int],
):
    """Compare a sandwich attack with and without the guard."""
    from swapguard.simulation.sandwich import SandwichSimulator

    cfg = load_config(config)

    try:
        simulator = SandwichSimulator(
            PoolSetup(**cfg.get("pool", {})),
            GuardConfig(**cfg.get("guard", {})),
            SimulationConfig(**cfg.get("simulation", {})),
        )
        comparison = simulator.compare(victim_amount, frontrun_amount, Direction(direction), min_out)
    except (ValueError, SwapGuardError, PoolError) as e:
        _fail(str(e))

    table = Table(title="Sandwich Attack")
    table.add_column("Metric", style="cyan")
    table.add_column("Unguarded", style="red")
    table.add_column("Guarded", style="green")

    u, g = comparison.unguarded, comparison.guarded
    table.add_row("Front-run paused", str(u.frontrun_paused), str(g.frontrun_paused))
    table.add_row("Victim paused", str(u.victim_paused), str(g.victim_paused))
    table.add_row("Back-run executed", str(u.backrun_executed), str(g.backrun_executed))
    table.add_row("Victim output", str(u.victim_amount_out), str(g.victim_amount_out))
    table.add_row("Attacker profit", f"{u.attacker_profit:.6g}", f"{g.attacker_profit:.6g}")
    table.add_row("Executor fees", str(u.executor_fees), str(g.executor_fees))

    console.print(table)
    console.print(f"Profit prevented: {comparison.profit_prevented:.6g}")
    console.print(f"Victim improvement: {comparison.victim_improvement}")


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--status",
    type=click.Choice(["pending", "executed", "cancelled"]),
    help="Only show trades in this state",
)
@click.option("--limit", "-n", type=int, default=50, help="Maximum rows to show")
def inspect(path: str, status: Optional[str], limit: int):
    """Show pending-trade records saved by a simulation (CSV or Parquet)."""
    file_path = Path(path)
    if file_path.suffix.lower() == ".parquet":
        df = pd.read_parquet(file_path)
    else:
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False)

    required = {"id", "owner", "direction", "amount_in", "status", "valid_after", "valid_until"}
    missing = required - set(df.columns)
    if missing:
        _fail(f"not a trade ledger file, missing: {', '.join(sorted(missing))}")

    if status:
        df = df[df["status"] == status]

    table = Table(title=f"Trades ({len(df)})")
    table.add_column("ID", style="cyan")
    table.add_column("Owner")
    table.add_column("Direction")
    table.add_column("Amount In", style="green")
    table.add_column("Window")
    table.add_column("Status", style="yellow")

    for row in df.head(limit).to_dict("records"):
        table.add_row(
            str(row["id"])[:12],
            str(row["owner"]),
            str(row["direction"]),
            str(row["amount_in"]),
            f"[{row['valid_after']}, {row['valid_until']}]",
            str(row["status"]),
        )

    console.print(table)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
