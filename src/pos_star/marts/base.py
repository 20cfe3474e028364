"""Shared frames and helpers for the report marts.

Every mart starts from one of two frames, both rebuilt on each call:

- ``line_frame``: fact lines joined to both dimensions
- ``order_frame``: reconstructed orders joined to dim_store, with the
  calendar and clock buckets used by the time reports

Money stays in integer cents until a row is presented; presentation goes
through ``money`` and the ratio helpers in ``pos_star.utils``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable

import pandas as pd

from pos_star.sales.orders import reconstruct_orders
from pos_star.utils import cents_to_decimal, column_slug

if TYPE_CHECKING:
    from pos_star.sales.core import StarSchema


def money(cents: Any) -> Decimal:
    """Present integer cents (python or numpy) as a 2-decimal amount."""
    return cents_to_decimal(int(cents))


def line_frame(schema: StarSchema) -> pd.DataFrame:
    """Fact lines with store and product attributes."""
    facts = schema.facts.frame
    return facts.merge(schema.stores, on="store_id", how="left").merge(
        schema.products, on="product_id", how="left"
    )


def order_frame(schema: StarSchema) -> pd.DataFrame:
    """Reconstructed orders with store location and time buckets.

    Added columns: store_location, order_hour (0-23), weekday (Monday=0),
    weekday_name, sales_month ("YYYY-MM").
    """
    orders = reconstruct_orders(schema.facts).merge(schema.stores, on="store_id", how="left")
    dates = pd.to_datetime(orders["transaction_date"])
    orders["order_hour"] = orders["transaction_time"].map(lambda t: t.hour).astype("int64")
    orders["weekday"] = dates.dt.weekday.astype("int64")
    orders["weekday_name"] = dates.dt.day_name()
    orders["sales_month"] = dates.dt.strftime("%Y-%m")
    return orders


def descending(value: Decimal | None) -> tuple[bool, Decimal]:
    """Sort key placing larger values first and undefined values last."""
    if value is None:
        return (True, Decimal(0))
    return (False, -value)


def ascending(value: Decimal | None) -> tuple[bool, Decimal]:
    """Sort key placing smaller values first and undefined values last."""
    if value is None:
        return (True, Decimal(0))
    return (False, value)


def store_columns(stores: pd.DataFrame, suffix: str) -> list[tuple[int, str]]:
    """Fixed (store_id, column name) pairs for a store cross-tab.

    Columns are named after the location slug; a location shared by more
    than one store_id gets the id appended so column names stay unique.
    """
    ordered = stores.sort_values("store_id")
    slugs = [column_slug(loc) for loc in ordered["store_location"]]
    counts = pd.Series(slugs).value_counts()
    columns = []
    for store_id, slug in zip(ordered["store_id"], slugs):
        name = slug if counts[slug] == 1 else f"{slug}_{int(store_id)}"
        columns.append((int(store_id), f"{name}_{suffix}"))
    return columns


def frame_from_rows(rows: Iterable[dict[str, Any]], columns: list[str]) -> pd.DataFrame:
    """Build a report frame with a fixed column order, even when empty."""
    return pd.DataFrame.from_records(list(rows), columns=columns)
