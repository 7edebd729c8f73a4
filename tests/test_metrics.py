from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from pm.aggregator import nearest_rank_index, percentile_fan, terminal_cash_summary
from pm.metrics import (
    compute_path_tail_metrics,
    compute_risk_kpis,
    first_overdraft_day,
    overdraft_mask,
)


def test_nearest_rank_index():
    assert nearest_rank_index(0.05, 100) == 4
    assert nearest_rank_index(0.5, 100) == 49
    assert nearest_rank_index(0.95, 100) == 94
    assert nearest_rank_index(1.0, 3) == 2
    assert nearest_rank_index(0.0, 3) == 0
    assert nearest_rank_index(0.5, 0) == 0


def test_percentile_fan_order_statistics(as_of):
    rng = np.random.default_rng(0)
    col = rng.permutation(100).astype(float)
    paths = np.column_stack([col, col * 2])
    fan = percentile_fan(paths, as_of=as_of)
    assert fan["p5"].tolist() == [4.0, 8.0]
    assert fan["p50"].tolist() == [49.0, 98.0]
    assert fan["p95"].tolist() == [94.0, 188.0]
    assert fan["date"].tolist() == [pd.Timestamp("2025-08-16"), pd.Timestamp("2025-08-17")]


def test_percentile_fan_single_path():
    fan = percentile_fan(np.array([[5.0, 6.0]]))
    assert fan["p5"].tolist() == fan["p95"].tolist() == [5.0, 6.0]


def test_percentile_fan_without_paths():
    fan = percentile_fan(np.empty((0, 4)))
    assert len(fan) == 4
    assert fan[["p5", "p50", "p95"]].isna().all().all()

    assert percentile_fan(np.empty((0, 0))).empty


def test_risk_kpis_on_toy_paths(toy_paths):
    fan = percentile_fan(toy_paths)
    assert fan["p5"].tolist() == [100.0, 50.0, -10.0]
    assert fan["p50"].tolist() == [100.0, 80.0, 60.0]

    kpis = compute_risk_kpis(toy_paths, fan)
    assert kpis.runway_days_p5 == 3.0
    assert kpis.cfar == pytest.approx(-70.0)
    assert kpis.expected_shortfall == pytest.approx(-100.0 / 3)
    assert kpis.probability_overdraft == pytest.approx(1 / 3)
    assert kpis.has_finite_runway


def test_risk_kpis_without_overdraft():
    paths = np.full((5, 4), 10.0)
    kpis = compute_risk_kpis(paths, percentile_fan(paths))
    assert math.isinf(kpis.runway_days_p5)
    assert kpis.probability_overdraft == 0.0
    assert kpis.cfar == 0.0
    assert not kpis.has_finite_runway


def test_risk_kpis_on_empty_ensemble():
    paths = np.empty((0, 3))
    kpis = compute_risk_kpis(paths, percentile_fan(paths))
    assert kpis.probability_overdraft == 0.0
    assert kpis.cfar == 0.0
    assert kpis.expected_shortfall == 0.0
    assert math.isinf(kpis.runway_days_p5)


def test_overdraft_helpers(toy_paths):
    assert overdraft_mask(toy_paths).tolist() == [True, False, False]
    assert first_overdraft_day(toy_paths).tolist() == [3, 0, 0]
    assert first_overdraft_day(np.empty((0, 2))).tolist() == []


def test_path_tail_metrics(toy_paths):
    tail = compute_path_tail_metrics(toy_paths, 100.0, alpha=0.5)
    # terminal change: -110, -40, +20
    assert tail.var_loss == pytest.approx(40.0)
    assert tail.es_loss == pytest.approx(75.0)
    assert tail.probability_overdraft == pytest.approx(1 / 3)
    assert tail.runway_days_p5 == 3.0


def test_path_tail_metrics_no_overdraft():
    paths = np.array([[10.0, 20.0], [10.0, 30.0]])
    tail = compute_path_tail_metrics(paths, 0.0)
    assert tail.probability_overdraft == 0.0
    assert math.isinf(tail.runway_days_p5)
    assert tail.var_loss < 0  # a gain at the tail quantile


def test_terminal_cash_summary(toy_paths):
    out = terminal_cash_summary(toy_paths)
    table = out["summary_table"]
    assert out["n_paths"] == 3
    assert table["Min"].iloc[0] == -10.0
    assert table["Max"].iloc[0] == 120.0
    assert table["P50"].iloc[0] == pytest.approx(60.0)
    assert terminal_cash_summary(np.empty((0, 3)))["summary_table"].empty
