"""
Data quality validation for raw flow rows before they are aggregated.

Catches problems early:
- No date column, or no column carrying money amounts
- Dates that cannot be parsed
- Negative quantities or prices
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pandas as pd

from core.schema import BANKING_COLUMNS, DATE_COLUMN, SALES_COLUMNS
from core.utils import to_calendar_day


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a row frame."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_flow_rows(rows: pd.DataFrame) -> ValidationResult:
    """
    Run all validation checks on a normalized row frame.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Schema checks ---
    if DATE_COLUMN not in rows.columns:
        result.errors.append(f"Missing required column: '{DATE_COLUMN}'.")
    sales_cols = [c for c in SALES_COLUMNS if c in rows.columns]
    bank_cols = [c for c in BANKING_COLUMNS if c in rows.columns]
    if not sales_cols and not bank_cols:
        result.errors.append(
            "No amount columns found — expected sales fields "
            f"{list(SALES_COLUMNS)} or banking fields {list(BANKING_COLUMNS)}."
        )
    if result.errors:
        return result  # can't continue without columns

    n = len(rows)
    if n == 0:
        result.errors.append("No rows (0 rows).")
        return result

    # --- Dates ---
    days = to_calendar_day(rows[DATE_COLUMN])
    n_bad = int(days.isna().sum())
    if n_bad == n:
        result.errors.append("No row has a parseable date.")
    elif n_bad > 0:
        result.warnings.append(f"{n_bad} rows have null/unparseable dates and will be dropped.")

    # --- Sales fields ---
    for col in ["qty", "unit_price", "unit_cost"]:
        if col in rows.columns:
            vals = pd.to_numeric(rows[col], errors="coerce")
            n_neg = int((vals < 0).sum())
            if n_neg > 0:
                result.warnings.append(f"{n_neg} rows have negative {col}.")

    # --- Rows carrying no money at all ---
    money_cols = [c for c in ("qty", "inflow", "outflow", "amount") if c in rows.columns]
    if money_cols:
        money = rows[money_cols].apply(pd.to_numeric, errors="coerce")
        n_empty = int(money.isna().all(axis=1).sum())
        if n_empty > 0:
            result.warnings.append(f"{n_empty} rows carry no quantity or amount.")

    return result
