"""
Distributions package — fit the daily net-flow process and supply randomness.

  1. ar1.py            — AR(1) estimator and closed-form cash bands
  2. random_source.py  — injectable uniform sources (seeded LCG, numpy)
"""

from .ar1 import AR1Model, fit_ar1, analytic_cash_bands, cumulative_variance
from .random_source import RandomSource, LCGSource, NumpySource, make_source

__all__ = [
    "AR1Model",
    "fit_ar1",
    "analytic_cash_bands",
    "cumulative_variance",
    "RandomSource",
    "LCGSource",
    "NumpySource",
    "make_source",
]
