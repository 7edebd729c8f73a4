"""
AR(1) fit on the daily net-flow series.

    x_t = mu + phi * (x_{t-1} - mu) + sigma * eps_t,   eps_t ~ N(0, 1)

Method of moments / OLS, not maximum likelihood:
  mu    = sample mean
  phi   = Σ(x_t - mu)(x_{t-1} - mu) / Σ(x_{t-1} - mu)^2, clamped to ±0.995
          (0 when the denominator vanishes: fewer than 2 points or a flat series)
  sigma = sqrt(Σ resid_t^2 / max(1, n-1)), resid_t = x_t - mu - phi*(x_{t-1} - mu)

An empty series gives the zero model, which the simulator turns into a flat
projection.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.stats import norm

from core.config import FAN_QUANTILES, PHI_BOUND
from core.errors import InvalidParameter
from core.utils import horizon_dates, quantile_label


@dataclass(frozen=True)
class AR1Model:
    """Fitted mean, lag-1 coefficient and residual standard deviation."""
    mu: float = 0.0
    phi: float = 0.0
    sigma: float = 0.0

    def __post_init__(self):
        if not all(np.isfinite([self.mu, self.phi, self.sigma])):
            raise InvalidParameter(f"AR(1) parameters must be finite, got {self.to_dict()}")
        if abs(self.phi) > PHI_BOUND:
            raise InvalidParameter(f"phi must lie in [-{PHI_BOUND}, {PHI_BOUND}], got {self.phi}")
        if self.sigma < 0:
            raise InvalidParameter(f"sigma must be >= 0, got {self.sigma}")

    @property
    def is_deterministic(self) -> bool:
        return self.sigma == 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def __repr__(self) -> str:
        return f"AR1Model(mu={self.mu:.4f}, phi={self.phi:.4f}, sigma={self.sigma:.4f})"


def _as_array(series) -> np.ndarray:
    if isinstance(series, pd.DataFrame):
        series = series["net"]
    x = np.asarray(series, dtype=float).reshape(-1)
    return x[np.isfinite(x)]


def fit_ar1(series) -> AR1Model:
    """
    Fit AR(1) to a daily net-flow series.

    Parameters
    ----------
    series : sequence of float, np.ndarray, pd.Series, or a DataFrame with a "net" column
        Non-finite values are dropped.
    """
    x = _as_array(series)
    n = len(x)
    if n == 0:
        return AR1Model()

    # Flat series: exact mean, no autocorrelation, no noise
    if np.ptp(x) == 0.0:
        return AR1Model(mu=float(x[0]), phi=0.0, sigma=0.0)

    mu = float(np.mean(x))

    cur = x[1:] - mu
    lag = x[:-1] - mu
    den = float(np.dot(lag, lag))
    phi = float(np.clip(np.dot(cur, lag) / den, -PHI_BOUND, PHI_BOUND)) if den > 0 else 0.0

    resid = cur - phi * lag
    sigma = float(np.sqrt(np.dot(resid, resid) / max(1, n - 1)))
    return AR1Model(mu=mu, phi=phi, sigma=sigma)


def cumulative_variance(model: AR1Model, horizon_days: int) -> np.ndarray:
    """
    Variance of cumulative flow after t = 1..horizon_days days, process started at mu.

    S_t - t*mu = Σ_k sigma*eps * (1 - phi^k) / (1 - phi),  k = 1..t
    """
    k = np.arange(1, int(horizon_days) + 1, dtype=float)
    phi = float(model.phi)
    weights = (1.0 - np.power(phi, k)) / (1.0 - phi)
    return float(model.sigma) ** 2 * np.cumsum(weights ** 2)


def analytic_cash_bands(
    model: AR1Model,
    last_cash: float,
    horizon_days: int,
    *,
    quantiles: Tuple[float, ...] = FAN_QUANTILES,
    as_of: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    """
    Closed-form Gaussian quantiles of the simulated cash balance.

    The Monte Carlo fan converges to these bands as n_paths grows; useful as a
    cross-check and as a cheap preview before running the full simulation.
    """
    days = np.arange(1, int(horizon_days) + 1)
    mean = float(last_cash) + days * float(model.mu)
    sd = np.sqrt(cumulative_variance(model, horizon_days))

    out = pd.DataFrame({"day": days, "date": horizon_dates(int(horizon_days), as_of)})
    for q in quantiles:
        out[quantile_label(q)] = mean + norm.ppf(q) * sd
    return out

