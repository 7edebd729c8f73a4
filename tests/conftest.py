from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Make project root importable when the package is not installed
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import SimulationParams  # noqa: E402
from distributions.ar1 import AR1Model  # noqa: E402


@pytest.fixture
def same_day_bank_rows():
    return [
        {"date": "2025-07-01", "inflow": 100.0, "outflow": 20.0},
        {"date": "2025-07-01", "inflow": 50.0, "outflow": 10.0},
    ]


@pytest.fixture
def sale_row():
    return {
        "date": "2025-07-01",
        "qty": 2,
        "unit_price": 10.0,
        "unit_cost": 4.0,
        "discount": 5.0,
        "shipping_fee": 3.0,
        "shipping_cost": 2.0,
    }


@pytest.fixture
def draining_model():
    return AR1Model(mu=-50.0, phi=0.3, sigma=20.0)


@pytest.fixture
def small_params():
    return SimulationParams(horizon_days=20, n_paths=400, starting_cash=1000.0, seed=7)


@pytest.fixture
def toy_paths():
    # 3 paths x 3 days
    return np.array(
        [
            [100.0, 50.0, -10.0],
            [100.0, 80.0, 60.0],
            [100.0, 90.0, 120.0],
        ]
    )


@pytest.fixture
def as_of():
    return pd.Timestamp("2025-08-15")
