"""Silver layer: Clean raw sales rows into typed line items.

This module turns the all-string bronze frame into the clean line-item
frame: one row per product sold within a transaction, every field cast,
trimmed and validated.

Rows with any unparseable field are rejected as a whole and reported (row
number, transaction_id as read, field, value, reason); nothing is dropped
silently. With ``abort_on_first_error`` the first ParseError is raised
instead.

Line-item columns:
    transaction_id, transaction_date, transaction_time, transaction_qty,
    store_id, store_location, product_id, unit_price_cents,
    product_category, product_type, product_detail
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import pandas as pd

from pos_star.config import PipelineConfig
from pos_star.exceptions import ParseError
from pos_star.sales.cleaning_utils import (
    is_blank,
    to_cents,
    to_date,
    to_quantity,
    to_text,
    to_time,
    to_unsigned,
)
from pos_star.sales.raw import RAW_COLUMNS, check_raw_columns

logger = logging.getLogger(__name__)

LINE_ITEM_COLUMNS = [
    "transaction_id",
    "transaction_date",
    "transaction_time",
    "transaction_qty",
    "store_id",
    "store_location",
    "product_id",
    "unit_price_cents",
    "product_category",
    "product_type",
    "product_detail",
]

REJECTED_COLUMNS = ["row_number", "transaction_id", "field", "value", "reason"]


@dataclass(frozen=True)
class CleanResult:
    """Output of the cleaning stage.

    Attributes:
        line_items: Clean line-item DataFrame (LINE_ITEM_COLUMNS).
        rejected: One row per failing field of a rejected raw row
            (REJECTED_COLUMNS). A raw row can appear more than once.
        input_rows: Number of raw rows read.
    """

    line_items: pd.DataFrame
    rejected: pd.DataFrame
    input_rows: int

    @property
    def rejected_rows(self) -> int:
        """Number of distinct raw rows rejected."""
        if self.rejected.empty:
            return 0
        return int(self.rejected["row_number"].nunique())

    def rejected_by_field(self) -> dict[str, int]:
        """Count of failures per raw field."""
        if self.rejected.empty:
            return {}
        return {str(k): int(v) for k, v in self.rejected["field"].value_counts().sort_index().items()}


def _field_parsers(config: PipelineConfig) -> list[tuple[str, str, Callable[[str, Any], Any]]]:
    """(raw field, output column, parser) triples in output column order."""
    return [
        ("transaction_id", "transaction_id", to_unsigned),
        ("transaction_date", "transaction_date", lambda f, v: to_date(f, v, config.date_formats)),
        ("transaction_time", "transaction_time", lambda f, v: to_time(f, v, config.time_formats)),
        ("transaction_qty", "transaction_qty", to_quantity),
        ("store_id", "store_id", to_unsigned),
        ("store_location", "store_location", lambda f, v: to_text(f, v, required=True)),
        ("product_id", "product_id", to_unsigned),
        ("unit_price", "unit_price_cents", to_cents),
        ("product_category", "product_category", to_text),
        ("product_type", "product_type", to_text),
        ("product_detail", "product_detail", to_text),
    ]


def clean_sales(raw: pd.DataFrame, config: PipelineConfig | None = None) -> CleanResult:
    """Cast, trim and validate raw sales rows.

    Args:
        raw: All-string DataFrame from the raw loader.
        config: Pipeline configuration (formats, abort behaviour).

    Returns:
        CleanResult with the clean line items and the rejected rows.

    Raises:
        DataQualityError: If required raw columns are missing.
        ParseError: On the first bad field, if config.abort_on_first_error.

    """
    config = config or PipelineConfig()
    check_raw_columns(raw)
    parsers = _field_parsers(config)

    records: list[dict[str, Any]] = []
    rejected: list[dict[str, Any]] = []

    for row_number, row in enumerate(raw[RAW_COLUMNS].itertuples(index=False, name=None), start=1):
        values = dict(zip(RAW_COLUMNS, row))
        record: dict[str, Any] = {}
        errors: list[ParseError] = []
        for raw_field, column, parser in parsers:
            try:
                record[column] = parser(raw_field, values[raw_field])
            except ParseError as e:
                located = ParseError(e.field, e.value, e.reason, row_number=row_number)
                if config.abort_on_first_error:
                    logger.error("Aborting cleaning: %s", located)
                    raise located from e
                errors.append(located)
        if errors:
            for e in errors:
                rejected.append(
                    {
                        "row_number": row_number,
                        "transaction_id": values["transaction_id"],
                        "field": e.field,
                        "value": e.value,
                        "reason": e.reason,
                    }
                )
        else:
            records.append(record)

    line_items = pd.DataFrame.from_records(records, columns=LINE_ITEM_COLUMNS)
    for col in ("transaction_id", "transaction_qty", "store_id", "product_id", "unit_price_cents"):
        line_items[col] = line_items[col].astype("int64")
    rejected_df = pd.DataFrame.from_records(rejected, columns=REJECTED_COLUMNS)

    result = CleanResult(line_items=line_items, rejected=rejected_df, input_rows=len(raw))
    if result.rejected_rows:
        logger.warning(
            "Rejected %d of %d raw rows: %s",
            result.rejected_rows,
            len(raw),
            result.rejected_by_field(),
        )
    logger.info("Cleaned %d line items from %d raw rows", len(line_items), len(raw))
    return result


def missing_value_report(raw: pd.DataFrame) -> pd.Series:
    """Count null or blank values per required raw field.

    Returns:
        Series indexed by field name (RAW_COLUMNS order) with integer counts.

    Raises:
        DataQualityError: If required raw columns are missing.

    """
    check_raw_columns(raw)
    counts = {col: int(raw[col].map(is_blank).astype(bool).sum()) for col in RAW_COLUMNS}
    return pd.Series(counts, name="missing", dtype="int64")
