from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def _wall_clock(value):
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return pd.NaT
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def to_calendar_day(values) -> pd.Series:
    """
    Parse dates to midnight timestamps; unparseable values become NaT.

    Timezone-aware values keep their local wall-clock day. A column mixing
    offsets (e.g. across a DST change) or naive and aware values is parsed
    value by value.
    """
    series = pd.Series(values)
    try:
        parsed = pd.to_datetime(series, errors="coerce", format="mixed")
    except ValueError:
        parsed = None
    if parsed is None or not pd.api.types.is_datetime64_any_dtype(parsed):
        parsed = pd.to_datetime(series.map(_wall_clock), errors="coerce")
    elif parsed.dt.tz is not None:
        parsed = parsed.dt.tz_localize(None)
    return parsed.dt.normalize()


def horizon_dates(n_days: int, as_of: Optional[pd.Timestamp] = None) -> pd.DatetimeIndex:
    """
    The n_days calendar days following as_of (today when omitted).
    Day 1 of the horizon is the day after as_of.
    """
    start = pd.Timestamp.today() if as_of is None else pd.Timestamp(as_of)
    start = start.normalize()
    return pd.date_range(start + pd.Timedelta(days=1), periods=n_days, freq="D")


def quantile_label(q: float) -> str:
    """0.05 -> 'p5', 0.5 -> 'p50', 0.95 -> 'p95'."""
    return f"p{int(round(q * 100))}"
