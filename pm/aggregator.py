"""
Reduce the simulated path ensemble into per-day percentile bands.

Instead of: "cash in 60 days ≈ 9,400" (one number, no context)
The reader gets: "p5 = 2,100 / p50 = 9,400 / p95 = 16,800" for every day.

Percentiles are nearest-rank order statistics (index = floor(q * (n-1)) of
the sorted day column, no interpolation), so p5 <= p50 <= p95 always holds.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from core.config import FAN_QUANTILES
from core.utils import horizon_dates, quantile_label


def nearest_rank_index(q: float, n: int) -> int:
    """Index of the q-quantile in a sorted array of length n (clamped to bounds)."""
    if n <= 0:
        return 0
    return int(min(max(np.floor(q * (n - 1)), 0), n - 1))


def percentile_fan(
    paths: np.ndarray,
    quantiles: Tuple[float, ...] = FAN_QUANTILES,
    *,
    as_of: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    """
    Per-day quantiles across paths.

    Parameters
    ----------
    paths : np.ndarray
        Shape (n_paths, horizon_days)
    quantiles : tuple of float
        Levels in [0, 1]; columns are labelled p5, p50, p95, ...
    as_of : pd.Timestamp, optional
        Day before the first horizon day (today when omitted)

    Returns
    -------
    DataFrame with columns: day (1-based), date, one column per quantile.
    An ensemble with zero paths gives NaN bands instead of raising.
    """
    arr = np.asarray(paths, dtype=float)
    if arr.ndim != 2:
        arr = arr.reshape(0, 0) if arr.size == 0 else arr.reshape(1, -1)
    n_paths, horizon = arr.shape

    out = pd.DataFrame({"day": np.arange(1, horizon + 1), "date": horizon_dates(horizon, as_of)})
    if n_paths == 0:
        for q in quantiles:
            out[quantile_label(q)] = np.nan
        return out

    srt = np.sort(arr, axis=0)
    for q in quantiles:
        out[quantile_label(q)] = srt[nearest_rank_index(q, n_paths), :]
    return out


def terminal_cash_summary(
    paths: np.ndarray,
    *,
    percentiles: Tuple[float, ...] = (0.01, 0.05, 0.25, 0.50, 0.75, 0.95, 0.99),
) -> Dict[str, object]:
    """
    Distribution summary of the cash balance on the last horizon day.

    Returns
    -------
    Dict with:
      "summary_table":          one-row table with mean/std/min/percentiles/max
      "terminal_distribution":  array of terminal balances (for histograms)
      "n_paths":                number of paths
    """
    arr = np.asarray(paths, dtype=float)
    values = arr[:, -1] if arr.ndim == 2 and arr.shape[1] > 0 else np.array([])
    values = values[np.isfinite(values)]

    rows = []
    if len(values) > 0:
        row = {
            "Metric": "Terminal Cash",
            "Mean": float(np.mean(values)),
            "Std Dev": float(np.std(values)),
            "Min": float(np.min(values)),
        }
        for p in percentiles:
            row[f"P{int(p * 100):02d}"] = float(np.percentile(values, p * 100))
        row["Max"] = float(np.max(values))
        rows.append(row)

    return {
        "summary_table": pd.DataFrame(rows),
        "terminal_distribution": values,
        "n_paths": int(arr.shape[0]) if arr.ndim == 2 else 0,
    }
