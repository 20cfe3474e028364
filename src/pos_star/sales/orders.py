"""Order view: reconstruct customer orders from line-grain facts.

The source has no order key. An order is inferred as every fact line that
shares (transaction_date, transaction_time, store_id): all line items rung
up in the same store at the same recorded second are taken to be one
customer's purchase. Two distinct customers served at the identical second
in the same store cannot be told apart and are merged into one order; this
is a known limitation of the data, not something this module tries to undo.

The order view is never stored. It is a pure function of the fact table and
is recomputed by every consumer, so it cannot drift from the facts.

Order columns:
    transaction_date, transaction_time, store_id (key),
    order_revenue_cents, order_units, line_count
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from pos_star.sales.core import FactSales

logger = logging.getLogger(__name__)

ORDER_KEY = ["transaction_date", "transaction_time", "store_id"]

ORDER_COLUMNS = [*ORDER_KEY, "order_revenue_cents", "order_units", "line_count"]


def reconstruct_orders(facts: FactSales) -> pd.DataFrame:
    """Group fact lines into inferred orders.

    Sums are taken over exact integer cents; no rounding happens here.
    The result is sorted by the order key, so repeated calls on the same
    facts return identical frames.

    Args:
        facts: Line-grain fact table.

    Returns:
        DataFrame with ORDER_COLUMNS, one row per (date, time, store).

    """
    if facts.empty:
        return pd.DataFrame(
            {
                "transaction_date": pd.Series(dtype=object),
                "transaction_time": pd.Series(dtype=object),
                "store_id": pd.Series(dtype="int64"),
                "order_revenue_cents": pd.Series(dtype="int64"),
                "order_units": pd.Series(dtype="int64"),
                "line_count": pd.Series(dtype="int64"),
            }
        )

    orders = (
        facts.group_by(ORDER_KEY)
        .agg(
            order_revenue_cents=("revenue_cents", "sum"),
            order_units=("transaction_qty", "sum"),
            line_count=("transaction_id", "size"),
        )
        .reset_index()
    )
    orders = orders.astype(
        {"order_revenue_cents": "int64", "order_units": "int64", "line_count": "int64"}
    )
    logger.debug("Reconstructed %d orders from %d fact lines", len(orders), len(facts))
    return orders[ORDER_COLUMNS]
