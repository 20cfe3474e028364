"""Tests for order reconstruction.

Orders are inferred from fact lines sharing (date, time, store).
"""

from collections.abc import Callable
from datetime import date, time

import pandas as pd

from pos_star.sales.api import run_pipeline
from pos_star.sales.core import StarSchema
from pos_star.sales.orders import ORDER_COLUMNS, reconstruct_orders


def test_two_lines_same_key_form_one_order(make_raw: Callable[..., pd.DataFrame]) -> None:
    """qty 2 x 3.00 and qty 1 x 4.00 at the same second and store: one 10.00 order."""
    raw = make_raw(
        [
            ("1", "2023-01-02", "07:06:11", "2", "5", "32", "3.00"),
            ("2", "2023-01-02", "07:06:11", "1", "5", "57", "4.00"),
        ]
    )
    schema = run_pipeline(raw).schema

    orders = reconstruct_orders(schema.facts)

    assert len(orders) == 1
    order = orders.iloc[0]
    assert order["order_revenue_cents"] == 1000
    assert order["order_units"] == 3
    assert order["line_count"] == 2


def test_order_key_and_columns(sample_schema: StarSchema) -> None:
    orders = reconstruct_orders(sample_schema.facts)

    assert list(orders.columns) == ORDER_COLUMNS
    assert len(orders) == 4
    first = orders.iloc[0]
    assert (first["transaction_date"], first["transaction_time"], first["store_id"]) == (
        date(2023, 1, 2),
        time(7, 6, 11),
        5,
    )


def test_same_time_different_store_is_two_orders(
    make_raw: Callable[..., pd.DataFrame],
) -> None:
    raw = make_raw(
        [
            ("1", "2023-01-02", "07:06:11", "1", "5", "32", "3.00"),
            ("2", "2023-01-02", "07:06:11", "1", "8", "32", "3.00"),
        ]
    )
    orders = reconstruct_orders(run_pipeline(raw).schema.facts)
    assert len(orders) == 2
    assert orders["line_count"].tolist() == [1, 1]


def test_revenue_and_units_are_conserved(sample_schema: StarSchema) -> None:
    facts = sample_schema.facts.frame
    orders = reconstruct_orders(sample_schema.facts)

    assert orders["order_revenue_cents"].sum() == facts["revenue_cents"].sum() == 2750
    assert orders["order_units"].sum() == facts["transaction_qty"].sum() == 8
    assert orders["line_count"].sum() == len(facts)


def test_reconstruction_is_idempotent(sample_schema: StarSchema) -> None:
    pd.testing.assert_frame_equal(
        reconstruct_orders(sample_schema.facts), reconstruct_orders(sample_schema.facts)
    )


def test_empty_facts(empty_schema: StarSchema) -> None:
    orders = reconstruct_orders(empty_schema.facts)
    assert orders.empty
    assert list(orders.columns) == ORDER_COLUMNS
