"""Gold layer: Calendar and time-of-day reports over reconstructed orders.

Reports:
    - monthly_performance: revenue, orders, AOV per calendar month
    - weekday_performance: revenue, orders, AOV per weekday (Monday first)
    - day_type_performance: weekday vs weekend, normalised per day
    - hourly_performance: revenue, orders, AOV per hour of day
    - average_hourly_performance: per-hour averages across dates
    - hourly_store_revenue / hourly_store_orders: store x hour cross-tabs
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from pos_star.config import PipelineConfig
from pos_star.marts.base import frame_from_rows, money, order_frame, store_columns
from pos_star.utils import divide

if TYPE_CHECKING:
    from pos_star.sales.core import StarSchema

WEEKDAY = "Weekday"
WEEKEND = "Weekend"

PERFORMANCE_COLUMNS = ["total_revenue", "total_orders", "avg_order_value"]


def _performance(group: Any) -> dict[str, Any]:
    revenue = money(group.revenue_cents)
    return {
        "total_revenue": revenue,
        "total_orders": int(group.orders),
        "avg_order_value": divide(revenue, int(group.orders)),
    }


def _per_bucket(orders: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    return (
        orders.groupby(keys)
        .agg(revenue_cents=("order_revenue_cents", "sum"), orders=("order_revenue_cents", "size"))
        .reset_index()
    )


def monthly_performance(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Revenue, orders and AOV per calendar month ("YYYY-MM"), in month order."""
    per_month = _per_bucket(order_frame(schema), ["sales_month"])
    rows = [
        {"sales_month": m.sales_month, **_performance(m)}
        for m in per_month.itertuples(index=False)
    ]
    return frame_from_rows(rows, ["sales_month", *PERFORMANCE_COLUMNS])


def day_type(weekday: pd.Series, config: PipelineConfig) -> np.ndarray:
    """Classify weekday indices (Monday=0) as Weekday or Weekend."""
    return np.where(weekday.isin(list(config.weekend_days)), WEEKEND, WEEKDAY)


def weekday_performance(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Revenue, orders and AOV per day of week, Monday first."""
    config = config or PipelineConfig()
    per_day = _per_bucket(order_frame(schema), ["weekday", "weekday_name"])
    per_day["day_type"] = day_type(per_day["weekday"], config)
    rows = [
        {"weekday": d.weekday_name, "day_type": d.day_type, **_performance(d)}
        for d in per_day.itertuples(index=False)
    ]
    return frame_from_rows(rows, ["weekday", "day_type", *PERFORMANCE_COLUMNS])


def day_type_performance(
    schema: StarSchema, config: PipelineConfig | None = None
) -> pd.DataFrame:
    """Weekday vs weekend revenue and orders, averaged per calendar day.

    Days are the distinct dates that have at least one order.
    """
    config = config or PipelineConfig()
    orders = order_frame(schema)
    orders["day_type"] = day_type(orders["weekday"], config)
    per_type = (
        orders.groupby("day_type")
        .agg(
            number_of_days=("transaction_date", "nunique"),
            revenue_cents=("order_revenue_cents", "sum"),
            orders=("order_revenue_cents", "size"),
        )
        .reset_index()
    )
    rows = []
    for t in per_type.itertuples(index=False):
        revenue = money(t.revenue_cents)
        days = int(t.number_of_days)
        rows.append(
            {
                "day_type": t.day_type,
                "number_of_days": days,
                "total_revenue": revenue,
                "avg_revenue_per_day": divide(revenue, days),
                "avg_orders_per_day": divide(int(t.orders), days),
            }
        )
    return frame_from_rows(
        rows,
        ["day_type", "number_of_days", "total_revenue", "avg_revenue_per_day", "avg_orders_per_day"],
    )


def hourly_performance(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Revenue, orders and AOV per hour of day (0-23), in hour order."""
    per_hour = _per_bucket(order_frame(schema), ["order_hour"])
    rows = [
        {"order_hour": int(h.order_hour), **_performance(h)}
        for h in per_hour.itertuples(index=False)
    ]
    return frame_from_rows(rows, ["order_hour", *PERFORMANCE_COLUMNS])


def average_hourly_performance(
    schema: StarSchema, config: PipelineConfig | None = None
) -> pd.DataFrame:
    """Average revenue and orders for each hour, across the dates it occurs on.

    Two stages: orders are first totalled per (date, hour), then those
    per-day totals are averaged per hour. An hour that only trades on some
    dates is averaged over those dates only. avg_order_value is the ratio of
    the two averages, which equals hour revenue / hour orders.
    """
    per_day_hour = _per_bucket(order_frame(schema), ["transaction_date", "order_hour"])
    per_hour = (
        per_day_hour.groupby("order_hour")
        .agg(
            revenue_cents=("revenue_cents", "sum"),
            orders=("orders", "sum"),
            days=("transaction_date", "size"),
        )
        .reset_index()
    )
    rows = []
    for h in per_hour.itertuples(index=False):
        revenue, orders, days = money(h.revenue_cents), int(h.orders), int(h.days)
        rows.append(
            {
                "order_hour": int(h.order_hour),
                "avg_revenue_per_hour": divide(revenue, days),
                "avg_orders_per_hour": divide(orders, days),
                "avg_order_value": divide(revenue, orders),
            }
        )
    return frame_from_rows(
        rows, ["order_hour", "avg_revenue_per_hour", "avg_orders_per_hour", "avg_order_value"]
    )


def _hourly_store_fold(schema: StarSchema, suffix: str, value: str | None) -> pd.DataFrame:
    """Conditional sum per store over the fixed dim_store set, one row per hour.

    ``value`` names the order column to sum; None counts orders.
    """
    orders = order_frame(schema)
    hours = sorted(int(h) for h in orders["order_hour"].unique())
    result = pd.DataFrame({"order_hour": pd.Series(hours, dtype="int64")})

    for store_id, column in store_columns(schema.stores, suffix):
        in_store = orders["store_id"] == store_id
        amounts = orders[value] if value is not None else 1
        per_hour = (
            orders.assign(_v=np.where(in_store, amounts, 0)).groupby("order_hour")["_v"].sum()
        )
        result[column] = [int(per_hour.get(h, 0)) for h in hours]
    return result


def hourly_store_revenue(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Revenue per hour with one column per store (``<location>_revenue``)."""
    result = _hourly_store_fold(schema, "revenue", "order_revenue_cents")
    for column in result.columns[1:]:
        result[column] = result[column].map(money)
    return result


def hourly_store_orders(schema: StarSchema, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Order count per hour with one column per store (``<location>_orders``)."""
    return _hourly_store_fold(schema, "orders", None)
