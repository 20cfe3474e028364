"""Gold layer: Store comparison reports.

Reports:
    - store_performance: revenue and order shares per store, with AOV
    - store_order_profile: AOV and units per order per store
    - store_morning_share: share of store revenue taken in the morning window
    - store_weekend_share: share of store revenue taken on weekends

Grand totals are computed once per report and passed into the per-store
share calculation.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from pos_star.config import PipelineConfig
from pos_star.marts.base import ascending, descending, frame_from_rows, money, order_frame
from pos_star.utils import divide, percent

if TYPE_CHECKING:
    from pos_star.sales.core import StarSchema

STORE_GROUP = ["store_id", "store_location"]


def _store_share_row(
    store: Any,
    grand_revenue: Decimal,
    grand_orders: int,
) -> dict[str, Any]:
    revenue = money(store.revenue_cents)
    return {
        "store_id": int(store.store_id),
        "store_location": store.store_location,
        "total_revenue": revenue,
        "revenue_share_pct": percent(revenue, grand_revenue),
        "total_orders": int(store.orders),
        "order_share_pct": percent(int(store.orders), grand_orders),
        "avg_order_value": divide(revenue, int(store.orders)),
    }


def store_performance(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Revenue, revenue share, orders, order share and AOV per store.

    Sorted by revenue (highest first), then store_id.
    """
    orders = order_frame(schema)
    grand_revenue = money(orders["order_revenue_cents"].sum())
    grand_orders = len(orders)

    per_store = (
        orders.groupby(STORE_GROUP)
        .agg(revenue_cents=("order_revenue_cents", "sum"), orders=("order_revenue_cents", "size"))
        .reset_index()
        .sort_values(["revenue_cents", "store_id"], ascending=[False, True])
    )
    rows = [
        _store_share_row(store, grand_revenue, grand_orders)
        for store in per_store.itertuples(index=False)
    ]
    return frame_from_rows(
        rows,
        [
            "store_id",
            "store_location",
            "total_revenue",
            "revenue_share_pct",
            "total_orders",
            "order_share_pct",
            "avg_order_value",
        ],
    )


def store_order_profile(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Average order value and average units per order for each store.

    Sorted by AOV (highest first), then store_id.
    """
    orders = order_frame(schema)
    per_store = (
        orders.groupby(STORE_GROUP)
        .agg(
            revenue_cents=("order_revenue_cents", "sum"),
            units=("order_units", "sum"),
            orders=("order_units", "size"),
        )
        .reset_index()
    )
    rows = [
        {
            "store_id": int(s.store_id),
            "store_location": s.store_location,
            "avg_order_value": divide(money(s.revenue_cents), int(s.orders)),
            "avg_units_per_order": divide(int(s.units), int(s.orders)),
        }
        for s in per_store.itertuples(index=False)
    ]
    rows.sort(key=lambda r: (descending(r["avg_order_value"]), r["store_id"]))
    return frame_from_rows(
        rows, ["store_id", "store_location", "avg_order_value", "avg_units_per_order"]
    )


def store_morning_share(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Revenue taken between the morning window hours (inclusive) per store.

    Sorted by morning share (highest first), then store_id.
    """
    config = config or PipelineConfig()
    start, end = config.morning_hours
    orders = order_frame(schema)
    in_window = orders["order_hour"].between(start, end)
    orders["morning_cents"] = np.where(in_window, orders["order_revenue_cents"], 0)

    per_store = (
        orders.groupby(STORE_GROUP)
        .agg(morning_cents=("morning_cents", "sum"), revenue_cents=("order_revenue_cents", "sum"))
        .reset_index()
    )
    rows = []
    for s in per_store.itertuples(index=False):
        morning, total = money(s.morning_cents), money(s.revenue_cents)
        rows.append(
            {
                "store_id": int(s.store_id),
                "store_location": s.store_location,
                "morning_revenue": morning,
                "total_revenue": total,
                "morning_share_pct": percent(morning, total),
            }
        )
    rows.sort(key=lambda r: (descending(r["morning_share_pct"]), r["store_id"]))
    return frame_from_rows(
        rows,
        ["store_id", "store_location", "morning_revenue", "total_revenue", "morning_share_pct"],
    )


def store_weekend_share(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Share of each store's revenue taken on weekend days.

    Sorted by weekend share (lowest first), then store_id.
    """
    config = config or PipelineConfig()
    orders = order_frame(schema)
    is_weekend = orders["weekday"].isin(list(config.weekend_days))
    orders["weekend_cents"] = np.where(is_weekend, orders["order_revenue_cents"], 0)

    per_store = (
        orders.groupby(STORE_GROUP)
        .agg(weekend_cents=("weekend_cents", "sum"), revenue_cents=("order_revenue_cents", "sum"))
        .reset_index()
    )
    rows = [
        {
            "store_id": int(s.store_id),
            "store_location": s.store_location,
            "weekend_revenue": money(s.weekend_cents),
            "total_revenue": money(s.revenue_cents),
            "weekend_share_pct": percent(money(s.weekend_cents), money(s.revenue_cents)),
        }
        for s in per_store.itertuples(index=False)
    ]
    rows.sort(key=lambda r: (ascending(r["weekend_share_pct"]), r["store_id"]))
    return frame_from_rows(
        rows,
        ["store_id", "store_location", "weekend_revenue", "total_revenue", "weekend_share_pct"],
    )
