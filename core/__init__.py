"""
Core package — configuration, errors, column schema, and shared utilities.
No business logic lives here.
"""

from .config import SimulationParams, StressParams
from .errors import InvalidParameter, SimulationTimeout
from .schema import SALES_COLUMNS, BANKING_COLUMNS, COLUMN_ALIASES
from .utils import require_columns, to_calendar_day, horizon_dates, quantile_label

__all__ = [
    "SimulationParams",
    "StressParams",
    "InvalidParameter",
    "SimulationTimeout",
    "SALES_COLUMNS",
    "BANKING_COLUMNS",
    "COLUMN_ALIASES",
    "require_columns",
    "to_calendar_day",
    "horizon_dates",
    "quantile_label",
]
