"""
Daily net cash-flow aggregation from raw sales / banking rows.

Each row is turned into an (inflow, outflow) pair:
  - sale lines:     inflow  = max(0, qty*unit_price - discount) + shipping_fee
                    outflow = max(0, qty*unit_cost) + shipping_cost
  - banking rows:   inflow/outflow columns as-is, or a signed amount split
                    into its positive and negative parts

The stress overlay scales inflows and outflows and can delay the day an
inflow is received (DSO). Flows are then summed per calendar day into
net = Σinflow - Σoutflow, sorted ascending.

By default only days with activity are kept. densify=True fills every
calendar day between the first and last active day with net = 0, which
changes the AR(1) fit downstream (phi in particular).
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from core.config import StressParams
from core.schema import BANKING_COLUMNS, CUSTOMER_COLUMN, DATE_COLUMN, SALES_COLUMNS
from core.utils import to_calendar_day

from .loader import normalize_columns

logger = logging.getLogger(__name__)

Rows = Union[pd.DataFrame, Iterable[Mapping]]


def _as_frame(rows: Optional[Rows]) -> pd.DataFrame:
    if rows is None:
        return pd.DataFrame(columns=[DATE_COLUMN])
    if isinstance(rows, pd.DataFrame):
        return normalize_columns(rows)
    return normalize_columns(pd.DataFrame(list(rows)))


def _num(df: pd.DataFrame, col: str) -> pd.Series:
    """Numeric column with NaN/inf/missing coerced to 0."""
    if col not in df.columns:
        return pd.Series(0.0, index=df.index, dtype=float)
    s = pd.to_numeric(df[col], errors="coerce").astype(float)
    return s.where(np.isfinite(s), 0.0)


def compute_row_flows(rows: Optional[Rows]) -> pd.DataFrame:
    """
    Per-row inflow/outflow before any stress.

    Returns a DataFrame with columns: date, inflow, outflow (and customer when
    present). Rows with a missing or unparseable date are dropped.
    """
    df = _as_frame(rows)
    empty = pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"),
                          "inflow": pd.Series(dtype=float),
                          "outflow": pd.Series(dtype=float)})
    if DATE_COLUMN not in df.columns or df.empty:
        return empty

    days = to_calendar_day(df[DATE_COLUMN])
    days.index = df.index
    keep = days.notna()
    n_dropped = int((~keep).sum())
    if n_dropped:
        logger.debug("Dropped %d rows without a usable date", n_dropped)
    df = df.loc[keep]
    days = days.loc[keep]
    if df.empty:
        return empty

    # --- Sale lines ---
    sales_cols = [c for c in SALES_COLUMNS if c in df.columns]
    if sales_cols:
        is_sale = df[sales_cols].apply(pd.to_numeric, errors="coerce").notna().any(axis=1)
    else:
        is_sale = pd.Series(False, index=df.index)

    qty = _num(df, "qty").clip(lower=0.0)
    discount = _num(df, "discount").clip(lower=0.0)
    sale_in = (qty * _num(df, "unit_price") - discount).clip(lower=0.0) + _num(df, "shipping_fee")
    sale_out = (qty * _num(df, "unit_cost")).clip(lower=0.0) + _num(df, "shipping_cost")

    # --- Banking / payment rows ---
    direct_cols = [c for c in ("inflow", "outflow") if c in df.columns]
    if direct_cols:
        has_direct = df[direct_cols].apply(pd.to_numeric, errors="coerce").notna().any(axis=1)
    else:
        has_direct = pd.Series(False, index=df.index)

    amount = _num(df, "amount")
    bank_in = np.where(has_direct, _num(df, "inflow"), amount.clip(lower=0.0))
    bank_out = np.where(has_direct, _num(df, "outflow").abs(), (-amount).clip(lower=0.0))

    out = pd.DataFrame(
        {
            "date": days.values,
            "inflow": np.where(is_sale, sale_in, bank_in).astype(float),
            "outflow": np.where(is_sale, sale_out, bank_out).astype(float),
        },
        index=df.index,
    )
    if CUSTOMER_COLUMN in df.columns:
        out[CUSTOMER_COLUMN] = df[CUSTOMER_COLUMN]
    return out.reset_index(drop=True)


def aggregate_daily_flows(
    rows: Optional[Rows],
    stress: Optional[StressParams] = None,
    *,
    densify: bool = False,
) -> pd.DataFrame:
    """
    Aggregate raw rows into the daily net-flow series.

    Parameters
    ----------
    rows : DataFrame or iterable of dicts
        Sales lines and/or banking rows (see module docstring)
    stress : StressParams, optional
        sales_pct / costs_pct scaling and dso_days inflow delay
    densify : bool
        Fill calendar days without activity with net = 0

    Returns
    -------
    DataFrame with columns: date (midnight timestamps, strictly increasing), net
    """
    stress = stress or StressParams()
    flows = compute_row_flows(rows)
    if flows.empty:
        return pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"),
                             "net": pd.Series(dtype=float)})

    inflow = flows["inflow"] * stress.inflow_factor
    outflow = flows["outflow"] * stress.outflow_factor
    inflow_day = flows["date"] + pd.Timedelta(days=int(stress.dso_days))

    legs = pd.concat(
        [
            pd.DataFrame({"date": inflow_day, "net": inflow}),
            pd.DataFrame({"date": flows["date"], "net": -outflow}),
        ],
        ignore_index=True,
    )
    daily = legs.groupby("date", sort=True)["net"].sum()

    if densify and len(daily) > 1:
        full = pd.date_range(daily.index.min(), daily.index.max(), freq="D")
        daily = daily.reindex(full, fill_value=0.0)
        daily.index.name = "date"

    out = daily.reset_index()
    out.columns = ["date", "net"]
    logger.debug("Aggregated %d rows into %d days", len(flows), len(out))
    return out


def closing_cash(daily: pd.DataFrame, initial_cash: float) -> float:
    """Balance after all historical flows: the simulation's starting point."""
    if daily is None or daily.empty:
        return float(initial_cash)
    return float(initial_cash) + float(daily["net"].sum())


def customer_concentration(rows: Optional[Rows], *, top_n: int = 10) -> Dict:
    """
    Herfindahl–Hirschman index of inflows by customer.

    Computed over the top_n customers' shares of total inflow.
    Returns {"hhi": float, "shares": DataFrame[customer, share]}.
    """
    flows = compute_row_flows(rows)
    empty = {"hhi": 0.0, "shares": pd.DataFrame(columns=[CUSTOMER_COLUMN, "share"])}
    if CUSTOMER_COLUMN not in flows.columns:
        return empty

    named = flows.dropna(subset=[CUSTOMER_COLUMN])
    named = named[named[CUSTOMER_COLUMN].astype(str).str.strip() != ""]
    by_customer = named.groupby(CUSTOMER_COLUMN)["inflow"].sum()
    total = float(by_customer.sum())
    if total <= 0:
        return empty

    shares = (
        (by_customer / total)
        .sort_values(ascending=False)
        .head(top_n)
        .rename("share")
        .reset_index()
    )
    hhi = float((shares["share"] ** 2).sum())
    return {"hhi": hhi, "shares": shares}
