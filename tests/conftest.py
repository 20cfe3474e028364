"""Shared fixtures for pos_star tests.

The sample batch covers three stores and three products:

    tid  date        time      qty  store              product  price
    1    2023-01-02  07:06:11  2    5 Lower Manhattan  32       3.00
    2    2023-01-02  07:06:11  1    5 Lower Manhattan  57       4.00
    3    2023-01-02  08:15:00  1    8 Hell's Kitchen   32       3.00
    4    2023-01-07  09:30:00  3    3 Astoria          77       3.50
    5    2023-02-06  14:00:00  1    8 Hell's Kitchen   57       4.00

Lines 1 and 2 share (date, time, store) and form one order worth 10.00
with 3 units. Totals: revenue 27.50, 8 units, 4 orders.
"""

from collections.abc import Callable, Generator
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any

import pandas as pd
import pytest

from pos_star import DataPaths
from pos_star.sales.api import run_pipeline
from pos_star.sales.core import StarSchema
from pos_star.sales.raw import RAW_COLUMNS

PRODUCTS = {
    "32": ("Coffee", "Gourmet brewed coffee", "Ethiopia Rg"),
    "57": ("Tea", "Brewed Chai tea", "Spicy Eye Opener Chai Lg"),
    "77": ("Bakery", "Scone", "Oatmeal Scone"),
}

STORES = {"3": "Astoria", "5": "Lower Manhattan", "8": "Hell's Kitchen"}

SAMPLE_LINES = [
    ("1", "2023-01-02", "07:06:11", "2", "5", "32", "3.00"),
    ("2", "2023-01-02", "07:06:11", "1", "5", "57", "4.00"),
    ("3", "2023-01-02", "08:15:00", "1", "8", "32", "3.00"),
    ("4", "2023-01-07", "09:30:00", "3", "3", "77", "3.50"),
    ("5", "2023-02-06", "14:00:00", "1", "8", "57", "4.00"),
]


def raw_row(
    tid: str,
    day: str,
    at: str,
    qty: str,
    store_id: str,
    product_id: str,
    price: str,
    **overrides: str,
) -> dict[str, str]:
    """Build one raw record with dimension attributes looked up by key."""
    category, ptype, detail = PRODUCTS.get(product_id, ("Coffee", "Drip", "House"))
    row = {
        "transaction_id": tid,
        "transaction_date": day,
        "transaction_time": at,
        "transaction_qty": qty,
        "store_id": store_id,
        "store_location": STORES.get(store_id, "Somewhere"),
        "product_id": product_id,
        "unit_price": price,
        "product_category": category,
        "product_type": ptype,
        "product_detail": detail,
    }
    row.update(overrides)
    return row


def make_raw_frame(rows: list[dict[str, str]]) -> pd.DataFrame:
    """All-string raw frame in loader column order."""
    return pd.DataFrame.from_records(rows, columns=RAW_COLUMNS).astype(str)


@pytest.fixture
def make_raw() -> Callable[..., pd.DataFrame]:
    """Factory: build a raw frame from (tid, date, time, qty, store, product, price) tuples."""

    def _make(lines: list[tuple[str, ...]], **overrides: Any) -> pd.DataFrame:
        return make_raw_frame([raw_row(*line, **overrides) for line in lines])

    return _make


@pytest.fixture
def sample_raw() -> pd.DataFrame:
    """The documented five-line sample batch."""
    return make_raw_frame([raw_row(*line) for line in SAMPLE_LINES])


@pytest.fixture
def sample_schema(sample_raw: pd.DataFrame) -> StarSchema:
    """Star schema built from the sample batch."""
    return run_pipeline(sample_raw).schema


@pytest.fixture
def empty_schema() -> StarSchema:
    """Star schema built from a header-only batch."""
    return run_pipeline(make_raw_frame([])).schema


@pytest.fixture
def temp_paths() -> Generator[DataPaths, None, None]:
    """DataPaths rooted in a temporary directory."""
    with TemporaryDirectory() as tmpdir:
        yield DataPaths.from_root(Path(tmpdir))


def write_raw_file(path: Path, df: pd.DataFrame, delimiter: str = "|") -> Path:
    """Write a raw frame as a quoted, delimited export with a header row."""
    df.to_csv(path, sep=delimiter, index=False, quoting=1)
    return path


@pytest.fixture
def sample_file(sample_raw: pd.DataFrame, tmp_path: Path) -> Path:
    """The sample batch written as a pipe-delimited export."""
    return write_raw_file(tmp_path / "coffee_sales.csv", sample_raw)
