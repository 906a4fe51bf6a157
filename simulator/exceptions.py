from __future__ import annotations

from typing import Dict, List


class SimulatorError(Exception):
    """Base class for simulator errors."""


class InvalidSimulationParameters(SimulatorError, ValueError):
    """Raised before any run starts when the requested sweep is not valid."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        detail = "; ".join(f"{k}: {', '.join(v)}" for k, v in errors.items())
        super().__init__(f"Invalid simulation parameters ({detail})")


class SimulationCancelled(SimulatorError):
    """Raised at a run boundary when the caller asked the sweep to stop."""

    def __init__(self, completed_runs: int, total_runs: int):
        self.completed_runs = completed_runs
        self.total_runs = total_runs
        super().__init__(f"Simulation cancelled after {completed_runs} of {total_runs} runs")
