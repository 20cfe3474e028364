"""Gold layer: Product and category reports.

Reports:
    - category_performance: revenue, share, units and unit price by category
    - top_products: overall product ranking by revenue
    - top_products_by_store: product ranking by revenue within each store

Ranking tie-break: revenue descending, then product_detail ascending, then
product_type ascending. Ranks run 1..n without gaps, so "top n" always
returns at most n rows per partition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from pos_star.config import PipelineConfig
from pos_star.marts.base import frame_from_rows, line_frame, money
from pos_star.utils import divide, percent

if TYPE_CHECKING:
    from pos_star.sales.core import StarSchema

PRODUCT_GROUP = ["product_detail", "product_type"]


def category_performance(
    schema: StarSchema, config: PipelineConfig | None = None
) -> pd.DataFrame:
    """Revenue, revenue share, units and weighted unit price per category.

    Sorted by revenue (highest first), then category name.
    """
    lines = line_frame(schema)
    grand_revenue = money(lines["revenue_cents"].sum())

    per_category = (
        lines.groupby("product_category")
        .agg(revenue_cents=("revenue_cents", "sum"), units=("transaction_qty", "sum"))
        .reset_index()
        .sort_values(["revenue_cents", "product_category"], ascending=[False, True])
    )
    rows = []
    for c in per_category.itertuples(index=False):
        revenue = money(c.revenue_cents)
        rows.append(
            {
                "product_category": c.product_category,
                "total_revenue": revenue,
                "revenue_share_pct": percent(revenue, grand_revenue),
                "total_units": int(c.units),
                "avg_price_per_unit": divide(revenue, int(c.units)),
            }
        )
    return frame_from_rows(
        rows,
        [
            "product_category",
            "total_revenue",
            "revenue_share_pct",
            "total_units",
            "avg_price_per_unit",
        ],
    )


def _rank(per_product: pd.DataFrame, partition: list[str]) -> pd.DataFrame:
    ranked = per_product.sort_values(
        [*partition, "revenue_cents", "product_detail", "product_type"],
        ascending=[True] * len(partition) + [False, True, True],
        kind="mergesort",
    )
    if partition:
        ranked["revenue_rank"] = ranked.groupby(partition).cumcount() + 1
    else:
        ranked["revenue_rank"] = range(1, len(ranked) + 1)
    return ranked


def top_products(
    schema: StarSchema,
    config: PipelineConfig | None = None,
    n: int | None = None,
) -> pd.DataFrame:
    """Top products by revenue, grouped by (product_detail, product_type).

    Args:
        schema: Star schema.
        config: Pipeline configuration; config.top_n_products is the default n.
        n: Number of products to return.

    """
    config = config or PipelineConfig()
    if n is None:
        n = config.top_n_products
    lines = line_frame(schema)
    per_product = (
        lines.groupby(PRODUCT_GROUP)
        .agg(revenue_cents=("revenue_cents", "sum"), units=("transaction_qty", "sum"))
        .reset_index()
    )
    ranked = _rank(per_product, [])
    ranked = ranked[ranked["revenue_rank"] <= n]

    rows = [
        {
            "revenue_rank": int(p.revenue_rank),
            "product_detail": p.product_detail,
            "product_type": p.product_type,
            "total_revenue": money(p.revenue_cents),
            "total_units": int(p.units),
            "avg_price_per_unit": divide(money(p.revenue_cents), int(p.units)),
        }
        for p in ranked.itertuples(index=False)
    ]
    return frame_from_rows(
        rows,
        [
            "revenue_rank",
            "product_detail",
            "product_type",
            "total_revenue",
            "total_units",
            "avg_price_per_unit",
        ],
    )


def top_products_by_store(
    schema: StarSchema,
    config: PipelineConfig | None = None,
    n: int | None = None,
) -> pd.DataFrame:
    """Top products by revenue within each store.

    Args:
        schema: Star schema.
        config: Pipeline configuration; config.top_n_per_store is the default n.
        n: Number of products to return per store.

    """
    config = config or PipelineConfig()
    if n is None:
        n = config.top_n_per_store
    lines = line_frame(schema)
    per_product = (
        lines.groupby(["store_id", "store_location", *PRODUCT_GROUP])
        .agg(revenue_cents=("revenue_cents", "sum"))
        .reset_index()
    )
    ranked = _rank(per_product, ["store_id"])
    ranked = ranked[ranked["revenue_rank"] <= n]

    rows = [
        {
            "store_id": int(p.store_id),
            "store_location": p.store_location,
            "revenue_rank": int(p.revenue_rank),
            "product_type": p.product_type,
            "product_detail": p.product_detail,
            "total_revenue": money(p.revenue_cents),
        }
        for p in ranked.itertuples(index=False)
    ]
    return frame_from_rows(
        rows,
        [
            "store_id",
            "store_location",
            "revenue_rank",
            "product_type",
            "product_detail",
            "total_revenue",
        ],
    )
