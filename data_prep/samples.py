"""
Deterministic demo datasets, used when no CSV is supplied.

  - build_sample_sales: café-style sale lines (qty, unit_price, unit_cost, customer)
  - build_sample_cash:  bank movements, signed amounts (+ receipts, - payments)

Both are driven by the seeded LCG, so a given seed always yields the same rows.
"""

from __future__ import annotations

import math
from typing import List

import pandas as pd

from distributions.random_source import LCGSource

# Sunday..Saturday multipliers
_WEEK_MUL = [0.82, 0.98, 1.05, 1.10, 1.12, 1.25, 0.88]

# name, unit price, unit cost, pick probability
_PRODUCTS = [
    ("Espresso", 2.40, 0.70, 0.22),
    ("Coffee", 3.20, 0.95, 0.18),
    ("Latte", 4.60, 1.45, 0.16),
    ("Croissant", 2.30, 0.90, 0.17),
    ("Sandwich", 6.90, 3.10, 0.15),
    ("Cookie", 1.90, 0.60, 0.07),
    ("Tea", 2.10, 0.45, 0.05),
]


def _sunday_index(day: pd.Timestamp) -> int:
    # pandas: Monday=0 .. Sunday=6
    return (day.dayofweek + 1) % 7


def build_sample_sales(
    *,
    start: str = "2025-07-01",
    days: int = 46,
    base_daily: int = 44,
    growth: float = 0.0035,
    customers_cap: int = 380,
    seed: int = 1337,
) -> pd.DataFrame:
    """Sale lines with a weekly profile, a mild trend and returning customers."""
    rnd = LCGSource(seed)
    cum_p = []
    acc = 0.0
    for *_, p in _PRODUCTS:
        acc += p
        cum_p.append(acc)

    known: List[int] = []
    next_customer = 2001
    order_id = 10001
    rows = []
    first = pd.Timestamp(start).normalize()

    for i in range(int(days)):
        day = first + pd.Timedelta(days=i)
        noise = 0.85 + rnd.next() * 0.3
        target = int(round(base_daily * _WEEK_MUL[_sunday_index(day)] * (1 + growth * i) * noise))

        for _ in range(target):
            r = rnd.next()
            idx = next((k for k, c in enumerate(cum_p) if r <= c), len(_PRODUCTS) - 1)
            name, price, cost, _p = _PRODUCTS[idx]

            r = rnd.next()
            qty = 1 if r < 0.6 else (2 if r < 0.92 else 3)

            if (rnd.next() < 0.35 and next_customer - 2001 < customers_cap) or not known:
                customer = next_customer
                known.append(customer)
                next_customer += 1
            else:
                pos = int(math.floor(math.pow(rnd.next(), 0.6) * len(known)))
                customer = known[min(pos, len(known) - 1)]

            rows.append({
                "date": day.strftime("%Y-%m-%d"),
                "order_id": order_id,
                "product": name,
                "qty": qty,
                "unit_price": price,
                "unit_cost": cost,
                "discount": 0.0,
                "shipping_fee": 0.0,
                "shipping_cost": 0.0,
                "customer": f"C{customer}",
            })
            order_id += 1

    return pd.DataFrame(rows)


def build_sample_cash(
    *,
    start: str = "2025-07-01",
    days: int = 46,
    base_in: float = 520.0,
    base_out: float = 540.0,
    seed: int = 909,
) -> pd.DataFrame:
    """Bank movements: 2-4 receipts and 2-3 payments per day, signed amounts."""
    rnd = LCGSource(seed)
    in_mul = [0.90, 0.95, 1.00, 1.00, 1.10, 1.25, 0.95]
    out_mul = [1.05, 1.00, 1.00, 1.05, 1.00, 1.00, 1.00]
    first = pd.Timestamp(start).normalize()
    rows = []
    tx_id = 1

    for i in range(int(days)):
        day = first + pd.Timedelta(days=i)
        dow = _sunday_index(day)
        n_in = 2 + int(rnd.next() * 3)
        n_out = 2 + int(rnd.next() * 2)

        for _ in range(n_in):
            amount = round(base_in * in_mul[dow] * (0.7 + rnd.next() * 0.8) / 10) * 10
            rows.append({"id": tx_id, "date": day.strftime("%Y-%m-%d"),
                         "amount": float(max(20, amount)), "kind": "in"})
            tx_id += 1
        for _ in range(n_out):
            amount = round(base_out * out_mul[dow] * (0.7 + rnd.next() * 0.7) / 10) * 10
            rows.append({"id": tx_id, "date": day.strftime("%Y-%m-%d"),
                         "amount": -float(max(15, amount)), "kind": "out"})
            tx_id += 1

    return pd.DataFrame(rows)
