"""
Monte Carlo path generation for the AR(1) cash process.

Each path starts at rest: x_prev = mu, cash = last_cash. Per day:
    z     = sqrt(-2 ln u1) * cos(2π u2)          (Box–Muller, u floored at 1e-12)
    flow  = mu + phi * (x_prev - mu) + sigma * z
    cash += flow

Uniforms are consumed path-major (path 0 day 0 u1, u2, path 0 day 1 u1, u2, ...),
so a seeded source reproduces the same matrix however the paths are blocked.
"""

from __future__ import annotations

import time
from typing import Optional

import numpy as np

from core.config import MIN_UNIFORM
from core.errors import SimulationTimeout
from distributions.ar1 import AR1Model
from distributions.random_source import RandomSource

# Paths drawn per block; the deadline is checked between blocks
BLOCK_PATHS = 512


def box_muller(source: RandomSource, n_paths: int, horizon_days: int) -> np.ndarray:
    """Standard normal draws of shape (n_paths, horizon_days)."""
    u = source.uniforms(2 * n_paths * horizon_days).reshape(n_paths, horizon_days, 2)
    u = np.maximum(u, MIN_UNIFORM)
    return np.sqrt(-2.0 * np.log(u[..., 0])) * np.cos(2.0 * np.pi * u[..., 1])


def step_paths(last_cash: float, model: AR1Model, z: np.ndarray) -> np.ndarray:
    """Run the AR(1) recursion over a block of normal draws; returns cumulative cash."""
    n_paths, horizon = z.shape
    mu, phi, sigma = float(model.mu), float(model.phi), float(model.sigma)

    out = np.empty((n_paths, horizon), dtype=float)
    cash = np.full(n_paths, float(last_cash))
    x_prev = np.full(n_paths, mu)
    for d in range(horizon):
        flow = mu + phi * (x_prev - mu) + sigma * z[:, d]
        x_prev = flow
        cash = cash + flow
        out[:, d] = cash
    return out


def simulate_paths(
    last_cash: float,
    model: AR1Model,
    n_paths: int,
    horizon_days: int,
    source: RandomSource,
    *,
    deadline: Optional[float] = None,
) -> np.ndarray:
    """
    Draw the full (n_paths, horizon_days) cash matrix.

    deadline is a time.monotonic() value; passing it raises SimulationTimeout
    once a block finishes after that instant.
    """
    paths = np.empty((int(n_paths), int(horizon_days)), dtype=float)
    for start in range(0, int(n_paths), BLOCK_PATHS):
        stop = min(start + BLOCK_PATHS, int(n_paths))
        z = box_muller(source, stop - start, int(horizon_days))
        paths[start:stop] = step_paths(last_cash, model, z)
        if deadline is not None and time.monotonic() > deadline and stop < n_paths:
            raise SimulationTimeout(
                f"Simulation aborted after {stop}/{n_paths} paths (time budget exceeded)."
            )
    return paths
