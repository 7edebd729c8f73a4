"""
Load exported sales / bank CSVs into a normalized row frame.
"""

from __future__ import annotations

from typing import List

import pandas as pd

from core.schema import COLUMN_ALIASES


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with lower-cased headers, aliases mapped and duplicates coalesced."""
    if df.empty and len(df.columns) == 0:
        return df.copy()

    ren = {}
    for c in df.columns:
        key = str(c).strip().lower().replace(" ", "_")
        ren[c] = COLUMN_ALIASES.get(key, key)
    out = df.rename(columns=ren).copy()

    # "price" and "unit_price" can both exist in one export: keep the first non-null
    if out.columns.duplicated().any():
        new_cols: List[str] = []
        parts: List[pd.Series] = []
        seen: set[str] = set()
        cols = list(out.columns)
        for name in cols:
            if name in seen:
                continue
            idxs = [i for i, c in enumerate(cols) if c == name]
            s = out.iloc[:, idxs[0]]
            for j in idxs[1:]:
                s = s.combine_first(out.iloc[:, j])
            new_cols.append(name)
            parts.append(s)
            seen.add(name)
        out = pd.concat(parts, axis=1)
        out.columns = new_cols

    return out


def load_flow_csv(path: str, *, low_memory: bool = False) -> pd.DataFrame:
    """Load a sales or bank-statement CSV and normalize its headers."""
    return normalize_columns(pd.read_csv(path, low_memory=low_memory, skip_blank_lines=True))
