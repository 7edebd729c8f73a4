from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from core.config import SimulationParams, StressParams
from core.errors import InvalidParameter, SimulationTimeout
from distributions.ar1 import AR1Model, analytic_cash_bands
from distributions.random_source import LCGSource
from engine.paths import box_muller
from engine.runner import run_cash_risk, simulate


class ConstantSource:
    """Always returns the same uniform."""

    def __init__(self, value: float):
        self.value = value

    def next(self) -> float:
        return self.value

    def uniforms(self, n: int) -> np.ndarray:
        return np.full(n, self.value)


def test_seeded_runs_are_bit_identical(draining_model, small_params):
    a = simulate(1000.0, draining_model, small_params)
    b = simulate(1000.0, draining_model, small_params)
    assert np.array_equal(a.paths, b.paths)
    assert a.kpis == b.kpis


def test_different_seeds_differ(draining_model, small_params):
    other = SimulationParams(horizon_days=20, n_paths=400, starting_cash=1000.0, seed=8)
    a = simulate(1000.0, draining_model, small_params)
    b = simulate(1000.0, draining_model, other)
    assert not np.array_equal(a.paths, b.paths)


def test_result_shapes(draining_model, small_params, as_of):
    res = simulate(1000.0, draining_model, small_params, as_of=as_of)
    assert res.paths.shape == (400, 20)
    assert list(res.fan.columns) == ["day", "date", "p5", "p50", "p95"]
    assert res.fan["day"].tolist() == list(range(1, 21))
    assert res.fan["date"].iloc[0] == pd.Timestamp("2025-08-16")


def test_percentiles_are_ordered():
    model = AR1Model(mu=3.0, phi=-0.4, sigma=250.0)
    res = simulate(0.0, model, SimulationParams(horizon_days=45, n_paths=777, seed=5))
    assert (res.fan["p5"] <= res.fan["p50"]).all()
    assert (res.fan["p50"] <= res.fan["p95"]).all()


def test_zero_variance_paths_are_exact():
    model = AR1Model(mu=-50.0, phi=0.0, sigma=0.0)
    res = simulate(1000.0, model, SimulationParams(horizon_days=30, n_paths=50, seed=1))
    expected = 1000.0 + (-50.0) * np.arange(1, 31)
    assert np.array_equal(res.paths, np.tile(expected, (50, 1)))
    assert res.kpis.probability_overdraft == 1.0
    assert res.kpis.runway_days_p5 == 21.0
    assert res.kpis.cfar == 0.0
    assert res.kpis.expected_shortfall == 0.0


def test_zero_variance_never_overdrawn():
    model = AR1Model(mu=10.0, phi=0.0, sigma=0.0)
    res = simulate(5.0, model, SimulationParams(horizon_days=10, n_paths=20))
    assert res.kpis.probability_overdraft == 0.0
    assert math.isinf(res.kpis.runway_days_p5)


def test_zero_model_is_flat_line():
    res = simulate(1234.5, AR1Model(), SimulationParams(horizon_days=7, n_paths=10))
    assert (res.paths == 1234.5).all()
    assert res.kpis.probability_overdraft == 0.0


@pytest.mark.parametrize(
    "params",
    [
        SimulationParams(horizon_days=0, n_paths=10),
        SimulationParams(horizon_days=10, n_paths=0),
        SimulationParams(horizon_days=-3, n_paths=-1),
    ],
)
def test_invalid_counts_rejected(params):
    with pytest.raises(InvalidParameter):
        simulate(100.0, AR1Model(), params)


def test_invalid_parameter_is_a_value_error():
    with pytest.raises(ValueError):
        simulate(100.0, AR1Model(), SimulationParams(horizon_days=0))


def test_negative_starting_cash_is_allowed():
    res = simulate(-500.0, AR1Model(mu=10.0), SimulationParams(horizon_days=5, n_paths=3))
    assert res.kpis.probability_overdraft == 1.0
    assert res.kpis.runway_days_p5 == 1.0


def test_last_cash_defaults_to_params():
    res = simulate(None, AR1Model(), SimulationParams(horizon_days=2, n_paths=2, starting_cash=77.0))
    assert res.last_cash == 77.0
    assert (res.paths == 77.0).all()


def test_injected_source_drives_draws():
    # u1 = u2 = 0.5 → z = sqrt(2 ln 2) * cos(pi)
    z = -math.sqrt(2.0 * math.log(2.0))
    model = AR1Model(mu=0.0, phi=0.0, sigma=1.0)
    res = simulate(0.0, model, SimulationParams(horizon_days=3, n_paths=4), source=ConstantSource(0.5))
    assert res.paths[:, 0] == pytest.approx(np.full(4, z))
    assert res.paths[:, 2] == pytest.approx(np.full(4, 3 * z))


def test_zero_uniform_is_floored():
    z = box_muller(ConstantSource(0.0), 2, 2)
    assert np.isfinite(z).all()


def test_box_muller_moments():
    z = box_muller(LCGSource(2024), 200, 100)
    assert z.mean() == pytest.approx(0.0, abs=0.03)
    assert z.std() == pytest.approx(1.0, abs=0.03)


def test_runway_monotone_in_starting_cash(draining_model):
    params = SimulationParams(horizon_days=40, n_paths=1000, seed=42)
    runways = [simulate(c, draining_model, params).kpis.runway_days_p5 for c in (200.0, 800.0, 1500.0, 3000.0)]
    assert runways == sorted(runways)


def test_end_to_end_short_horizon(draining_model):
    params = SimulationParams(horizon_days=10, n_paths=5000, seed=42)
    res = simulate(1000.0, draining_model, params)
    p50 = res.fan["p50"].to_numpy()

    steps = np.diff(np.concatenate([[1000.0], p50]))
    assert (steps < 0).all()
    assert steps.mean() == pytest.approx(-50.0, abs=5.0)
    assert p50[-1] == pytest.approx(500.0, abs=15.0)
    # ten days at -50/day cannot drain 1000
    assert res.kpis.probability_overdraft < 0.01
    assert math.isinf(res.kpis.runway_days_p5)


def test_end_to_end_depletion(draining_model):
    params = SimulationParams(horizon_days=30, n_paths=5000, seed=42)
    res = simulate(1000.0, draining_model, params)
    assert res.kpis.probability_overdraft > 0.9
    assert 10 <= res.kpis.runway_days_p5 <= 20
    assert res.kpis.cfar < 0
    assert res.kpis.cfar <= res.kpis.expected_shortfall <= 0


def test_fan_matches_analytic_bands():
    model = AR1Model(mu=10.0, phi=0.5, sigma=100.0)
    params = SimulationParams(horizon_days=20, n_paths=5000, seed=7)
    res = simulate(0.0, model, params)
    bands = analytic_cash_bands(model, 0.0, 20)
    sd = (bands["p95"] - bands["p50"]) / 1.6449
    for col in ("p5", "p50", "p95"):
        assert (np.abs(res.fan[col] - bands[col]) < 0.15 * sd + 1.0).all()


def test_timeout_aborts_large_run(draining_model):
    params = SimulationParams(horizon_days=50, n_paths=5000, seed=1, timeout_s=1e-9)
    with pytest.raises(SimulationTimeout):
        simulate(1000.0, draining_model, params)


def test_tail_metrics_from_result(draining_model):
    res = simulate(1000.0, draining_model, SimulationParams(horizon_days=30, n_paths=2000, seed=3))
    tail = res.tail_metrics(alpha=0.95)
    assert tail.var_loss > 0
    assert tail.es_loss >= tail.var_loss
    assert tail.probability_overdraft == pytest.approx(res.kpis.probability_overdraft)


def test_run_cash_risk_pipeline():
    rows = [{"date": f"2025-07-{d:02d}", "amount": a} for d, a in zip(range(1, 11), [120, -80, 30, -200, 90, 40, -60, 10, 70, -30])]
    params = SimulationParams(horizon_days=15, n_paths=300, starting_cash=1000.0, seed=9)
    res = run_cash_risk(rows, params)
    assert len(res.daily) == 10
    assert res.last_cash == pytest.approx(1000.0 + sum([120, -80, 30, -200, 90, 40, -60, 10, 70, -30]))
    assert res.fan["date"].iloc[0] == pd.Timestamp("2025-07-11")
    assert res.model.sigma > 0


def test_run_cash_risk_stress_lowers_median(sale_row):
    rows = [dict(sale_row, date=f"2025-07-{d:02d}", qty=2 + d % 3) for d in range(1, 21)]
    params = SimulationParams(horizon_days=10, n_paths=200, starting_cash=100.0, seed=4)
    base = run_cash_risk(rows, params)
    stressed = run_cash_risk(rows, params, stress=StressParams(sales_pct=-30, costs_pct=20))
    assert stressed.fan["p50"].iloc[-1] < base.fan["p50"].iloc[-1]


def test_run_cash_risk_without_rows_is_flat():
    res = run_cash_risk([], SimulationParams(horizon_days=5, n_paths=10, starting_cash=12000.0))
    assert res.daily.empty
    assert res.model == AR1Model()
    assert (res.paths == 12000.0).all()
    assert res.kpis.probability_overdraft == 0.0


def test_summary_table(draining_model, small_params):
    table = simulate(1000.0, draining_model, small_params).summary()
    assert len(table) == 1
    assert {"mu", "phi", "sigma", "cfar", "runway_days_p5", "n_paths"} <= set(table.columns)
