"""Sales domain module.

Builds a star schema from raw line-level POS exports:

- **dim_store**: one row per store_id with its location.
- **dim_product**: one row per product_id with category, type and detail.
- **fact_sales**: one row per product sold within a transaction, with
  revenue derived as quantity x unit price.

Orders are not stored. ``pos_star.sales.orders.reconstruct_orders`` derives
them from the fact table on demand.

Example:
    >>> from pos_star import DataPaths
    >>> from pos_star.sales import get_star_schema, run_pipeline
    >>> from pos_star.sales.raw import load_raw
    >>>
    >>> # In memory
    >>> result = run_pipeline(load_raw("coffee_sales.csv"))
    >>> print(result.report.summary)
    >>>
    >>> # From the bronze directory, persisted to silver
    >>> schema = get_star_schema(DataPaths.from_root("data"))
"""

from pos_star.sales.api import PipelineResult, get_star_schema, run_file_pipeline, run_pipeline

__all__ = ["PipelineResult", "get_star_schema", "run_file_pipeline", "run_pipeline"]
