"""Gold layer: Headline KPIs and order-level shape.

Reports:
    - kpi_summary: revenue, units, weighted price per unit, orders, AOV,
      units per order (one row)
    - basket_size_distribution: single-item vs multiple-item orders
    - grain_check: how many order keys carry more than one fact line
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pandas as pd

from pos_star.marts.base import frame_from_rows, money
from pos_star.sales.orders import reconstruct_orders
from pos_star.utils import divide, percent

if TYPE_CHECKING:
    from pos_star.config import PipelineConfig
    from pos_star.sales.core import StarSchema

logger = logging.getLogger(__name__)

SINGLE_ITEM = "Single Item"
MULTIPLE_ITEMS = "Multiple Items"


def kpi_summary(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Business-wide totals and averages.

    avg_price_per_unit is weighted (total revenue / total units), not a mean
    of unit prices. Averages over an empty fact table are None.
    """
    facts = schema.facts.frame
    orders = reconstruct_orders(schema.facts)

    total_revenue = money(facts["revenue_cents"].sum())
    total_units = int(facts["transaction_qty"].sum())
    total_orders = len(orders)
    order_revenue = money(orders["order_revenue_cents"].sum())
    order_units = int(orders["order_units"].sum())

    row = {
        "total_revenue": total_revenue,
        "total_units": total_units,
        "avg_price_per_unit": divide(total_revenue, total_units),
        "total_orders": total_orders,
        "avg_order_value": divide(order_revenue, total_orders),
        "avg_units_per_order": divide(order_units, total_orders),
    }
    return pd.DataFrame([row])


def basket_size_distribution(
    schema: StarSchema, config: PipelineConfig | None = None
) -> pd.DataFrame:
    """Split orders into single-item (1 unit) and multiple-item (> 1 unit).

    Both basket types are always reported, so the two counts add up to the
    total number of orders.
    """
    orders = reconstruct_orders(schema.facts)
    total = len(orders)
    single = int((orders["order_units"] == 1).sum())
    multiple = int((orders["order_units"] > 1).sum())
    if single + multiple != total:
        logger.warning("Basket split %d + %d does not cover %d orders", single, multiple, total)

    rows = [
        {"basket_type": SINGLE_ITEM, "total_orders": single, "order_share_pct": percent(single, total)},
        {
            "basket_type": MULTIPLE_ITEMS,
            "total_orders": multiple,
            "order_share_pct": percent(multiple, total),
        },
    ]
    return frame_from_rows(rows, ["basket_type", "total_orders", "order_share_pct"])


def grain_check(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Compare fact lines to reconstructed orders.

    multi_line_orders counts (date, time, store) keys holding more than one
    fact line: evidence that a fact row is one product, not one order.
    """
    orders = reconstruct_orders(schema.facts)
    row = {
        "fact_lines": len(schema.facts),
        "total_orders": len(orders),
        "multi_line_orders": int((orders["line_count"] > 1).sum()),
        "max_lines_per_order": int(orders["line_count"].max()) if not orders.empty else 0,
    }
    return pd.DataFrame([row])
