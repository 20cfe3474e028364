"""Public API for the report marts.

Reports are looked up by name in ``REPORTS``. Every report takes the star
schema and the pipeline configuration and returns a new DataFrame; none of
them writes anything or mutates the schema.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable

import pandas as pd

from pos_star.config import PipelineConfig
from pos_star.exceptions import ConfigError
from pos_star.marts import kpis, products, stores, temporal

if TYPE_CHECKING:
    from pos_star.config import DataPaths
    from pos_star.sales.core import StarSchema

logger = logging.getLogger(__name__)

Report = Callable[["StarSchema", PipelineConfig], pd.DataFrame]

REPORTS: dict[str, Report] = {
    "kpi_summary": kpis.kpi_summary,
    "basket_size_distribution": kpis.basket_size_distribution,
    "grain_check": kpis.grain_check,
    "store_performance": stores.store_performance,
    "store_order_profile": stores.store_order_profile,
    "store_morning_share": stores.store_morning_share,
    "store_weekend_share": stores.store_weekend_share,
    "category_performance": products.category_performance,
    "top_products": products.top_products,
    "top_products_by_store": products.top_products_by_store,
    "monthly_performance": temporal.monthly_performance,
    "weekday_performance": temporal.weekday_performance,
    "day_type_performance": temporal.day_type_performance,
    "hourly_performance": temporal.hourly_performance,
    "average_hourly_performance": temporal.average_hourly_performance,
    "hourly_store_revenue": temporal.hourly_store_revenue,
    "hourly_store_orders": temporal.hourly_store_orders,
}


@dataclass
class ReportRun:
    """Output of running several reports.

    Attributes:
        results: Report name to DataFrame, for every report that succeeded.
        errors: Report name to error message, for every report that failed.
    """

    results: dict[str, pd.DataFrame] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _get_report(name: str) -> Report:
    try:
        return REPORTS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown report '{name}'. Available: {', '.join(sorted(REPORTS))}"
        ) from None


def run_report(
    schema: StarSchema,
    name: str,
    *,
    start_date: str | date | None = None,
    end_date: str | date | None = None,
    stores: Iterable[int] | None = None,
    config: PipelineConfig | None = None,
) -> pd.DataFrame:
    """Run one named report, optionally on a date range and store subset.

    Args:
        schema: Star schema.
        name: Key of REPORTS.
        start_date: Inclusive start date (YYYY-MM-DD or date).
        end_date: Inclusive end date (YYYY-MM-DD or date).
        stores: store_id values to keep. None keeps every store.
        config: Pipeline configuration.

    Returns:
        The report DataFrame.

    Raises:
        ConfigError: If the report name is unknown.

    """
    report = _get_report(name)
    config = config or PipelineConfig()
    if start_date is not None or end_date is not None or stores is not None:
        schema = schema.filter(start_date, end_date, stores)
    logger.debug("Running report %s on %d facts", name, len(schema.facts))
    return report(schema, config)


def run_reports(
    schema: StarSchema,
    names: Iterable[str] | None = None,
    *,
    start_date: str | date | None = None,
    end_date: str | date | None = None,
    stores: Iterable[int] | None = None,
    config: PipelineConfig | None = None,
) -> ReportRun:
    """Run several reports, isolating failures per report.

    A report that raises is recorded in ``ReportRun.errors`` and the rest
    still run.

    Args:
        schema: Star schema.
        names: Report names. None runs every report in REPORTS.
        start_date: Inclusive start date.
        end_date: Inclusive end date.
        stores: store_id values to keep.
        config: Pipeline configuration.

    Raises:
        ConfigError: If any report name is unknown (checked before running).

    """
    names = list(REPORTS) if names is None else list(names)
    for name in names:
        _get_report(name)

    config = config or PipelineConfig()
    if start_date is not None or end_date is not None or stores is not None:
        schema = schema.filter(start_date, end_date, stores)

    run = ReportRun()
    for name in names:
        try:
            run.results[name] = REPORTS[name](schema, config)
        except Exception as e:
            logger.warning("Report %s failed: %s", name, e)
            run.errors[name] = f"{type(e).__name__}: {e}"

    logger.info("Ran %d report(s), %d failed", len(names), len(run.errors))
    return run


def write_reports(paths: DataPaths, run: ReportRun) -> list[Path]:
    """Write each successful report as ``<name>.csv`` in the gold directory."""
    paths.ensure_dirs()
    written = []
    for name, df in run.results.items():
        out = paths.mart_sales / f"{name}.csv"
        df.to_csv(out, index=False, encoding="utf-8")
        written.append(out)
    logger.info("Wrote %d report(s) to %s", len(written), paths.mart_sales)
    return written
