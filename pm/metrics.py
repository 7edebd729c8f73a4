"""
Risk KPIs from the simulated cash ensemble.

Canonical (fan-based) definitions, read off the p5/p50 bands:
  cfar                  = min over days of (p5 - p50)   (<= 0, shortfall vs median)
  expected_shortfall    = mean over days of (p5 - p50)
  probability_overdraft = share of paths below zero on any day
  runway_days_p5        = first 1-based day with p5 < 0, inf if none

The per-path view (terminal VaR / ES at a confidence level, runway from
each path's first overdraft day) is computed separately by
compute_path_tail_metrics. The two disagree numerically by construction;
it is reported alongside, never instead.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class RiskKPIs:
    cfar: float
    expected_shortfall: float
    probability_overdraft: float
    runway_days_p5: float  # math.inf when p5 never goes negative

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @property
    def has_finite_runway(self) -> bool:
        return math.isfinite(self.runway_days_p5)


@dataclass(frozen=True)
class PathTailMetrics:
    alpha: float
    var_loss: float        # -quantile(terminal change, 1 - alpha)
    es_loss: float         # -mean(terminal change in the tail)
    probability_overdraft: float
    runway_days_p5: float  # P5 of first-overdraft day among overdrafting paths

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def overdraft_mask(paths: np.ndarray) -> np.ndarray:
    """Boolean per path: cash below zero on at least one day."""
    arr = np.asarray(paths, dtype=float)
    if arr.ndim != 2 or arr.size == 0:
        return np.zeros(arr.shape[0] if arr.ndim == 2 else 0, dtype=bool)
    return (arr < 0).any(axis=1)


def compute_risk_kpis(paths: np.ndarray, fan: pd.DataFrame) -> RiskKPIs:
    """
    Derive the canonical KPIs from the path matrix and its percentile fan.

    Parameters
    ----------
    paths : np.ndarray
        Shape (n_paths, horizon_days)
    fan : pd.DataFrame
        Output of pm.aggregator.percentile_fan() with p5 and p50 columns
    """
    mask = overdraft_mask(paths)
    prob = float(mask.mean()) if len(mask) else 0.0

    p5 = fan["p5"].to_numpy(dtype=float) if "p5" in fan.columns else np.array([])
    p50 = fan["p50"].to_numpy(dtype=float) if "p50" in fan.columns else np.array([])

    below = np.flatnonzero(p5 < 0)
    runway = float(below[0] + 1) if len(below) else math.inf

    gap = p5 - p50
    gap = gap[np.isfinite(gap)]
    cfar = float(gap.min()) if len(gap) else 0.0
    es = float(gap.mean()) if len(gap) else 0.0

    return RiskKPIs(
        cfar=cfar,
        expected_shortfall=es,
        probability_overdraft=prob,
        runway_days_p5=runway,
    )


def first_overdraft_day(paths: np.ndarray) -> np.ndarray:
    """1-based first day each path goes below zero; 0 for paths that never do."""
    arr = np.asarray(paths, dtype=float)
    if arr.ndim != 2 or arr.size == 0:
        return np.zeros(arr.shape[0] if arr.ndim == 2 else 0, dtype=int)
    neg = arr < 0
    first = neg.argmax(axis=1) + 1
    return np.where(neg.any(axis=1), first, 0)


def compute_path_tail_metrics(
    paths: np.ndarray,
    starting_cash: float,
    *,
    alpha: float = 0.95,
) -> PathTailMetrics:
    """
    Per-path tail view of the same ensemble.

    var_loss / es_loss are positive numbers for losses of the terminal balance
    versus starting_cash at confidence alpha (linear-interpolated quantile).
    """
    arr = np.asarray(paths, dtype=float)
    if arr.ndim != 2 or arr.size == 0:
        return PathTailMetrics(alpha, 0.0, 0.0, 0.0, math.inf)

    change = arr[:, -1] - float(starting_cash)
    q = 1.0 - float(alpha)
    cutoff = float(np.quantile(change, q))
    tail = change[change <= cutoff]
    es_loss = -float(tail.mean()) if len(tail) else -cutoff

    days = first_overdraft_day(arr)
    hit = days[days > 0]
    runway = float(np.quantile(hit, 0.05)) if len(hit) else math.inf

    return PathTailMetrics(
        alpha=float(alpha),
        var_loss=-cutoff,
        es_loss=es_loss,
        probability_overdraft=float(len(hit)) / arr.shape[0],
        runway_days_p5=runway,
    )
