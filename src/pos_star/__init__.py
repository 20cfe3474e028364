"""POS Star - star schema and sales reporting for retail point-of-sale data.

This package turns raw line-level POS exports into a star schema and
reports on it, across three layers:

- **Bronze (raw)**: delimited exports, one row per product per transaction
- **Silver (core)**: dim_store, dim_product and the line-grain fact_sales
- **Gold (marts)**: reports over facts and reconstructed orders

Module Structure:
    pos_star.sales: Raw loading, cleaning, dimensions, facts, orders
    pos_star.marts: Report functions and the report registry
    pos_star.qa: Validation report
    pos_star.config: DataPaths and PipelineConfig

Quick Start:
    >>> from pos_star import DataPaths
    >>> from pos_star.marts import run_report
    >>> from pos_star.sales import get_star_schema
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> schema = get_star_schema(paths)
    >>> print(run_report(schema, "kpi_summary"))
    >>> print(run_report(schema, "top_products_by_store"))

Grain Reference:
    - core: fact_sales - one product line within a transaction
    - orders: (transaction_date, transaction_time, store_id), derived
    - marts: one row per report bucket (store, month, hour, ...)
"""

__version__ = "0.1.0"

from pos_star.config import DataPaths, PipelineConfig
from pos_star.exceptions import (
    ConfigError,
    DataQualityError,
    DivisionUndefined,
    ETLError,
    PipelineError,
    PosStarError,
)

__all__ = [
    "ConfigError",
    "DataPaths",
    "DataQualityError",
    "DivisionUndefined",
    "ETLError",
    "PipelineConfig",
    "PipelineError",
    "PosStarError",
    "__version__",
]
