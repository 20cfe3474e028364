"""Silver layer: Core sales fact table (fact_sales) and the star schema.

The fact table is at line grain: one row per product sold within a
transaction, keyed by transaction_id and referencing dim_store and
dim_product. Revenue is derived here, once, as quantity x unit price in
exact integer cents; nothing downstream re-derives it.

Fact columns:
    transaction_id (PK), transaction_date, transaction_time, store_id (FK),
    product_id (FK), transaction_qty, unit_price_cents, revenue_cents

Persisted layout (silver directory):
    dim_store.csv, dim_product.csv, fact_sales.csv, _meta/star_schema.json
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Iterable

import pandas as pd

from pos_star.exceptions import ReferentialIntegrityError, UniquenessError
from pos_star.sales.cleaning_utils import to_cents, to_time
from pos_star.sales.dimensions import (
    PRODUCT_KEY,
    STORE_KEY,
    build_dimensions,
)
from pos_star.sales.metadata import StageMetadata, read_metadata, write_metadata
from pos_star.utils import cents_to_decimal, parse_date

if TYPE_CHECKING:
    from pandas.core.groupby import DataFrameGroupBy

    from pos_star.config import DataPaths

logger = logging.getLogger(__name__)

FACT_COLUMNS = [
    "transaction_id",
    "transaction_date",
    "transaction_time",
    "store_id",
    "product_id",
    "transaction_qty",
    "unit_price_cents",
    "revenue_cents",
]

STAGE_NAME = "star_schema"
STAGE_VERSION = "star_schema_v1"

DIM_STORE_FILE = "dim_store.csv"
DIM_PRODUCT_FILE = "dim_product.csv"
FACT_SALES_FILE = "fact_sales.csv"


class FactSales:
    """Immutable line-grain fact table.

    The underlying frame is never handed out: ``frame`` returns a copy, and
    ``group_by`` aggregations always produce new frames.
    """

    def __init__(self, frame: pd.DataFrame) -> None:
        self._frame = frame[FACT_COLUMNS].sort_values("transaction_id").reset_index(drop=True)
        self._by_id = self._frame.set_index("transaction_id", drop=False)

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return f"FactSales(rows={len(self)})"

    @property
    def empty(self) -> bool:
        return self._frame.empty

    @property
    def frame(self) -> pd.DataFrame:
        """A copy of the fact rows."""
        return self._frame.copy()

    def get(self, transaction_id: int) -> dict[str, Any]:
        """Return the fact row for a transaction_id.

        Raises:
            KeyError: If the transaction_id is not in the fact table.

        """
        if transaction_id not in self._by_id.index:
            raise KeyError(transaction_id)
        return self._by_id.loc[transaction_id].to_dict()

    def group_by(self, columns: str | Iterable[str]) -> DataFrameGroupBy:
        """Group fact rows by any combination of fact columns, sorted by key."""
        keys = [columns] if isinstance(columns, str) else list(columns)
        return self._frame.groupby(keys, sort=True)

    def to_table(self) -> pd.DataFrame:
        """External representation with 2-decimal unit_price and revenue."""
        table = self._frame.copy()
        table["unit_price"] = table.pop("unit_price_cents").map(cents_to_decimal)
        table["revenue"] = table.pop("revenue_cents").map(cents_to_decimal)
        return table


def _as_date(value: str | date) -> date:
    return parse_date(value) if isinstance(value, str) else value


@dataclass(frozen=True, eq=False)
class StarSchema:
    """Store dimension, product dimension and line-grain fact table.

    Attributes:
        stores: dim_store (store_id, store_location), one row per store_id.
        products: dim_product (product_id, product_category, product_type,
            product_detail), one row per product_id.
        facts: fact_sales.
    """

    stores: pd.DataFrame
    products: pd.DataFrame
    facts: FactSales

    def filter(
        self,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
        store_ids: Iterable[int] | None = None,
    ) -> StarSchema:
        """Return a schema whose facts are restricted to a date range and stores.

        Dates are inclusive. Dimensions are kept whole so that enumerated
        store sets stay fixed across filtered reports.
        """
        df = self.facts.frame
        if start_date is not None:
            df = df[df["transaction_date"] >= _as_date(start_date)]
        if end_date is not None:
            df = df[df["transaction_date"] <= _as_date(end_date)]
        if store_ids is not None:
            df = df[df["store_id"].isin(list(store_ids))]
        return StarSchema(stores=self.stores, products=self.products, facts=FactSales(df))


def check_fact_integrity(
    frame: pd.DataFrame,
    stores: pd.DataFrame,
    products: pd.DataFrame,
) -> None:
    """Validate the fact primary key and both foreign keys.

    Raises:
        UniquenessError: If transaction_id is duplicated.
        ReferentialIntegrityError: If store_id or product_id is null or not
            present in its dimension.

    """
    ids = frame["transaction_id"]
    duplicated = ids[ids.duplicated(keep=False)].unique().tolist()
    if duplicated:
        logger.error("Duplicate transaction_id values: %s", duplicated)
        raise UniquenessError("transaction_id", duplicated)

    for column, dim, key in (("store_id", stores, STORE_KEY), ("product_id", products, PRODUCT_KEY)):
        values = frame[column]
        nulls = values.isna()
        dangling = values[~nulls & ~values.isin(dim[key])].unique().tolist()
        offending: list[Any] = sorted(dangling)
        if nulls.any():
            offending.append(None)
        if offending:
            logger.error("Dangling %s values: %s", column, offending)
            raise ReferentialIntegrityError(column, offending)


def build_fact_sales(
    items: pd.DataFrame,
    stores: pd.DataFrame,
    products: pd.DataFrame,
) -> FactSales:
    """Build fact_sales from clean line items and the two dimensions.

    Args:
        items: Clean line items (see pos_star.sales.transform).
        stores: dim_store.
        products: dim_product.

    Returns:
        FactSales with revenue_cents = transaction_qty * unit_price_cents.

    Raises:
        UniquenessError: If transaction_id is not unique.
        ReferentialIntegrityError: If a store_id/product_id is null or unknown.

    """
    check_fact_integrity(items, stores, products)

    df = items.copy()
    df["revenue_cents"] = df["transaction_qty"].astype("int64") * df["unit_price_cents"].astype(
        "int64"
    )
    facts = FactSales(df)
    logger.info("Built fact_sales: %d rows", len(facts))
    return facts


def build_star_schema(items: pd.DataFrame) -> StarSchema:
    """Build both dimensions and the fact table from clean line items."""
    stores, products = build_dimensions(items)
    facts = build_fact_sales(items, stores, products)
    return StarSchema(stores=stores, products=products, facts=facts)


def write_star_schema(paths: DataPaths, schema: StarSchema, source: str = "") -> None:
    """Persist the star schema as CSVs in the silver directory.

    Args:
        paths: DataPaths configuration.
        schema: Star schema to write.
        source: Label of the raw input, recorded in the stage metadata.

    """
    paths.ensure_dirs()
    out = paths.clean_sales
    try:
        schema.stores.to_csv(out / DIM_STORE_FILE, index=False, encoding="utf-8")
        schema.products.to_csv(out / DIM_PRODUCT_FILE, index=False, encoding="utf-8")
        table = schema.facts.to_table()
        table["transaction_date"] = table["transaction_date"].map(lambda d: d.isoformat())
        table["transaction_time"] = table["transaction_time"].map(lambda t: t.isoformat())
        table.to_csv(out / FACT_SALES_FILE, index=False, encoding="utf-8")
    except Exception:
        write_metadata(
            out,
            StageMetadata(
                stage=STAGE_NAME,
                source=source,
                version=STAGE_VERSION,
                last_run=datetime.now().isoformat(),
                status="failed",
            ),
        )
        raise

    write_metadata(
        out,
        StageMetadata(
            stage=STAGE_NAME,
            source=source,
            version=STAGE_VERSION,
            last_run=datetime.now().isoformat(),
            status="ok",
            row_counts={
                "dim_store": len(schema.stores),
                "dim_product": len(schema.products),
                "fact_sales": len(schema.facts),
            },
        ),
    )
    logger.info("Wrote star schema to %s (%d facts)", out, len(schema.facts))


def load_star_schema(paths: DataPaths) -> StarSchema:
    """Load the persisted star schema without running the pipeline.

    Integrity of the fact keys is re-checked on load.

    Raises:
        FileNotFoundError: If the stage metadata is missing or not "ok".

    """
    src = paths.clean_sales
    meta = read_metadata(src, STAGE_NAME)
    if meta is None or meta.status != "ok":
        raise FileNotFoundError(
            f"Star schema not found in {src}. Use sales.api.run_pipeline() to build it."
        )

    stores = pd.read_csv(src / DIM_STORE_FILE, dtype={"store_location": str}, keep_default_na=False)
    products = pd.read_csv(src / DIM_PRODUCT_FILE, dtype=str, keep_default_na=False)
    products[PRODUCT_KEY] = products[PRODUCT_KEY].astype("int64")
    stores[STORE_KEY] = stores[STORE_KEY].astype("int64")

    table = pd.read_csv(src / FACT_SALES_FILE, dtype=str, keep_default_na=False)
    for col in ("transaction_id", "store_id", "product_id", "transaction_qty"):
        table[col] = table[col].astype("int64")
    table["transaction_date"] = pd.to_datetime(table["transaction_date"], format="%Y-%m-%d").dt.date
    table["transaction_time"] = table["transaction_time"].map(
        lambda v: to_time("transaction_time", v)
    )
    table["unit_price_cents"] = table["unit_price"].map(lambda v: to_cents("unit_price", v))
    table["revenue_cents"] = table["revenue"].map(lambda v: to_cents("revenue", v))
    for col in ("unit_price_cents", "revenue_cents"):
        table[col] = table[col].astype("int64")

    check_fact_integrity(table, stores, products)
    logger.info("Loaded star schema from %s (%d facts)", src, len(table))
    return StarSchema(stores=stores, products=products, facts=FactSales(table))
