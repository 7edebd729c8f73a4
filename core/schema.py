from __future__ import annotations

from typing import Dict, Tuple

DATE_COLUMN = "date"

# Sale-line fields; inflow/outflow are derived from these
SALES_COLUMNS: Tuple[str, ...] = (
    "qty",
    "unit_price",
    "unit_cost",
    "discount",
    "shipping_fee",
    "shipping_cost",
)

# Banking/payment fields; inflow/outflow are read directly or split from a signed amount
BANKING_COLUMNS: Tuple[str, ...] = (
    "inflow",
    "outflow",
    "amount",
)

CUSTOMER_COLUMN = "customer"

# Header variants seen in exported sales and bank CSVs (lower-cased before lookup)
COLUMN_ALIASES: Dict[str, str] = {
    "day": "date",
    "quantity": "qty",
    "quantité": "qty",
    "price": "unit_price",
    "unitprice": "unit_price",
    "cost": "unit_cost",
    "unitcost": "unit_cost",
    "remise": "discount",
    "frais_livraison": "shipping_fee",
    "cout_livraison": "shipping_cost",
    "cash_in": "inflow",
    "credit": "inflow",
    "cash_out": "outflow",
    "debit": "outflow",
    "value": "amount",
    "total": "amount",
    "client": "customer",
}
