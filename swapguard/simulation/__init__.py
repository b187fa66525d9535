"""
Simulation Module.

Replays trading scenarios against an in-memory pool with the guard attached:
- Event-driven scenario replay with automatic keeper execution
- Sandwich attack comparison (with and without the guard)
- Reports as JSON, CSV or Parquet

Usage:
    from swapguard.simulation import SimulationRunner, SimulationReport, SimulationConfig

    runner = SimulationRunner(SimulationConfig())
    result = runner.run("scenarios/example.csv")

    report = SimulationReport(result)
    print(report.summary())
    report.save("data/simulation/example.json")
"""

from .config import PoolSetup, SimulationConfig
from .environment import SimulatedPool, build_pool
from .event_engine import Event, EventEngine, EventType
from .report import SimulationReport
from .runner import OUTCOME_COLUMNS, SimulationResult, SimulationRunner
from .sandwich import SandwichComparison, SandwichOutcome, SandwichSimulator
from .scenario import REQUIRED_COLUMNS, ScenarioError, load_scenario, normalize_scenario

__all__ = [
    # Config
    "PoolSetup",
    "SimulationConfig",
    # Environment
    "SimulatedPool",
    "build_pool",
    # Events
    "Event",
    "EventEngine",
    "EventType",
    # Scenario
    "REQUIRED_COLUMNS",
    "ScenarioError",
    "load_scenario",
    "normalize_scenario",
    # Runner
    "SimulationRunner",
    "SimulationResult",
    "OUTCOME_COLUMNS",
    # Sandwich
    "SandwichSimulator",
    "SandwichOutcome",
    "SandwichComparison",
    # Report
    "SimulationReport",
]
