"""
Simulation runner — draws Monte Carlo cash paths and reduces them to fan + KPIs.

Two entry points:
  1. simulate():      fitted AR1Model + starting balance → SimulationResult
  2. run_cash_risk(): raw rows → aggregate → fit → simulate, in one call

Every call is a pure function of its inputs and the random source. Seeded
params give bit-identical paths; an unseeded run draws from fresh entropy.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pandas as pd

from core.config import FAN_QUANTILES, SimulationParams, StressParams
from data_prep.daily_flows import Rows, aggregate_daily_flows, closing_cash, customer_concentration
from distributions.ar1 import AR1Model, fit_ar1
from distributions.random_source import RandomSource, make_source
from pm.aggregator import percentile_fan
from pm.metrics import PathTailMetrics, RiskKPIs, compute_path_tail_metrics, compute_risk_kpis

from .paths import simulate_paths

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    paths: np.ndarray        # shape (n_paths, horizon_days)
    fan: pd.DataFrame        # day, date, p5, p50, p95
    kpis: RiskKPIs
    model: AR1Model
    params: SimulationParams
    last_cash: float

    # Filled by run_cash_risk
    daily: Optional[pd.DataFrame] = None
    concentration: Optional[Dict] = None

    def tail_metrics(self, alpha: float = 0.95) -> PathTailMetrics:
        return compute_path_tail_metrics(self.paths, self.last_cash, alpha=alpha)

    def summary(self) -> pd.DataFrame:
        """One-row table of the model and KPIs."""
        row = {"last_cash": self.last_cash, **self.model.to_dict(), **self.kpis.to_dict()}
        row["horizon_days"] = self.params.horizon_days
        row["n_paths"] = self.params.n_paths
        return pd.DataFrame([row])


def simulate(
    last_cash: Optional[float],
    model: AR1Model,
    params: SimulationParams,
    *,
    source: Optional[RandomSource] = None,
    as_of: Optional[pd.Timestamp] = None,
) -> SimulationResult:
    """
    Run the Monte Carlo simulation from a fitted model.

    Parameters
    ----------
    last_cash : float, optional
        Current balance the paths start from; params.starting_cash when None.
        Negative balances are valid (already overdrawn).
    model : AR1Model
        Fitted daily net-flow process
    params : SimulationParams
        horizon_days and n_paths must be >= 1 (InvalidParameter otherwise)
    source : RandomSource, optional
        Uniform source; defaults to make_source(params.seed)
    as_of : pd.Timestamp, optional
        Day before the first simulated day, for fan dates (today when omitted)
    """
    params.validate()
    start_cash = float(params.starting_cash if last_cash is None else last_cash)
    rng = source if source is not None else make_source(params.seed)
    deadline = time.monotonic() + params.timeout_s if params.timeout_s else None

    t0 = time.perf_counter()
    paths = simulate_paths(
        start_cash,
        model,
        int(params.n_paths),
        int(params.horizon_days),
        rng,
        deadline=deadline,
    )
    fan = percentile_fan(paths, FAN_QUANTILES, as_of=as_of)
    kpis = compute_risk_kpis(paths, fan)

    logger.info(
        "Simulated %d paths x %d days in %.2fs (%r): P(OD)=%.3f runway_p5=%s cfar=%.2f",
        params.n_paths,
        params.horizon_days,
        time.perf_counter() - t0,
        model,
        kpis.probability_overdraft,
        kpis.runway_days_p5,
        kpis.cfar,
    )
    return SimulationResult(
        paths=paths,
        fan=fan,
        kpis=kpis,
        model=model,
        params=params,
        last_cash=start_cash,
    )


def run_cash_risk(
    rows: Optional[Rows],
    params: Optional[SimulationParams] = None,
    *,
    stress: Optional[StressParams] = None,
    densify: bool = False,
    source: Optional[RandomSource] = None,
    as_of: Optional[pd.Timestamp] = None,
) -> SimulationResult:
    """
    Raw rows → daily net flow → AR(1) → Monte Carlo.

    The simulation starts from params.starting_cash plus all historical net
    flow. Fan dates follow the last historical day unless as_of is given.
    No rows (or none with a usable date) gives the zero model and a flat
    projection at params.starting_cash.
    """
    params = params or SimulationParams()
    if rows is not None and not isinstance(rows, pd.DataFrame):
        rows = pd.DataFrame(list(rows))
    daily = aggregate_daily_flows(rows, stress, densify=densify)
    if daily.empty:
        logger.warning("No usable rows; projecting a flat balance of %.2f", params.starting_cash)
    model = fit_ar1(daily)
    last_cash = closing_cash(daily, params.starting_cash)
    if as_of is None and not daily.empty:
        as_of = pd.Timestamp(daily["date"].iloc[-1])

    result = simulate(last_cash, model, params, source=source, as_of=as_of)
    result.daily = daily
    result.concentration = customer_concentration(rows)
    return result
