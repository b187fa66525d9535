"""Simulation module configuration."""

from dataclasses import dataclass


@dataclass
class PoolSetup:
    """
    Initial state of the simulated pool.
    """

    currency0: str = "TOKEN0"
    currency1: str = "TOKEN1"
    fee_pips: int = 3000  # 0.30%

    # Starting price (currency1 per currency0) and in-range liquidity
    price: float = 1.0
    liquidity: int = 10**21


@dataclass
class SimulationConfig:
    """
    Configuration for scenario replay and sandwich simulations.
    """

    # Host time at scenario offset 0 (unix seconds)
    start_time: int = 1_700_000_000

    # Every account is funded with this much of both currencies on first use
    initial_balance: int = 10**24

    # Permissionless executor
    keeper_address: str = "keeper"
    auto_execute: bool = True  # Execute paused trades as soon as their window opens
    execute_delay: int = 0  # Seconds after valid_after the keeper waits

    # Attach the guard to the pool
    guarded: bool = True

    # Entropy seed for the delay randomization
    seed: int = 42

    # Output
    output_dir: str = "data/simulation"
