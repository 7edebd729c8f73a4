"""
Simulation and stress configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidParameter

# Percentile levels of the fan chart
FAN_QUANTILES = (0.05, 0.50, 0.95)

# AR(1) coefficient is clamped to keep the process stationary
PHI_BOUND = 0.995

# Floor for uniform draws fed into Box-Muller (log(0) guard)
MIN_UNIFORM = 1e-12

# Advisory thresholds
RUNWAY_WARN_DAYS = 30
RUNWAY_OK_DAYS = 60
OVERDRAFT_OK_PROB = 0.10
OVERDRAFT_WARN_PROB = 0.30
OVERDRAFT_ALERT_PROB = 0.20
HHI_OK = 0.12
HHI_WARN = 0.20


@dataclass(frozen=True)
class SimulationParams:
    horizon_days: int = 60
    n_paths: int = 3000
    starting_cash: float = 12000.0
    seed: Optional[int] = None

    # coarse abort for large runs; None disables it
    timeout_s: Optional[float] = None

    def validate(self) -> None:
        if int(self.horizon_days) < 1:
            raise InvalidParameter(f"horizon_days must be >= 1, got {self.horizon_days}")
        if int(self.n_paths) < 1:
            raise InvalidParameter(f"n_paths must be >= 1, got {self.n_paths}")
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise InvalidParameter(f"timeout_s must be positive, got {self.timeout_s}")


@dataclass(frozen=True)
class StressParams:
    """
    Stress overlay applied to raw rows before daily aggregation.

    sales_pct scales inflows, costs_pct scales outflows (both in percent),
    dso_days (whole days, >= 0) delays the day each inflow is received.
    """

    sales_pct: float = 0.0
    costs_pct: float = 0.0
    dso_days: int = 0

    def __post_init__(self):
        if float(self.dso_days) < 0 or not float(self.dso_days).is_integer():
            raise InvalidParameter(f"dso_days must be a whole number of days >= 0, got {self.dso_days}")

    @property
    def inflow_factor(self) -> float:
        return 1.0 + float(self.sales_pct) / 100.0

    @property
    def outflow_factor(self) -> float:
        return 1.0 + float(self.costs_pct) / 100.0
