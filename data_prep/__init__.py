"""
Data preparation — loading raw CSVs, validation, daily net-flow aggregation.
"""

from .loader import load_flow_csv, normalize_columns
from .daily_flows import (
    aggregate_daily_flows,
    closing_cash,
    compute_row_flows,
    customer_concentration,
)
from .validators import ValidationResult, validate_flow_rows
from .samples import build_sample_sales, build_sample_cash

__all__ = [
    "load_flow_csv",
    "normalize_columns",
    "aggregate_daily_flows",
    "closing_cash",
    "compute_row_flows",
    "customer_concentration",
    "ValidationResult",
    "validate_flow_rows",
    "build_sample_sales",
    "build_sample_cash",
]
