"""Public API for the sales star schema.

This module provides the main entry points for building the star schema:

- ``run_pipeline``: in memory, raw DataFrame in, StarSchema out
- ``run_file_pipeline``: reads raw exports, builds, and persists the
  silver layer
- ``get_star_schema``: load the persisted schema, building it if needed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Callable, TypeVar

import pandas as pd

from pos_star.config import PipelineConfig
from pos_star.exceptions import DataQualityError, ParseError, PipelineError

if TYPE_CHECKING:
    from pos_star.config import DataPaths
    from pos_star.qa.api import ValidationReport
    from pos_star.sales.core import StarSchema
    from pos_star.sales.transform import CleanResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PipelineResult:
    """Output of a successful pipeline run.

    Attributes:
        schema: The star schema (dim_store, dim_product, fact_sales).
        clean: Cleaning output, including rejected rows.
        report: Validation report for the run.
    """

    schema: StarSchema
    clean: CleanResult
    report: ValidationReport


def _run_stage(stage: str, report: ValidationReport, fn: Callable[[], T]) -> T:
    """Run one stage, converting data quality failures into PipelineError."""
    try:
        return fn()
    except DataQualityError as e:
        if isinstance(e, ParseError):
            # abort_on_first_error: the failing row is the only one known rejected
            report.rejected_rows = 1
            report.rejected_by_field = {e.field: 1}
        report.failed_stage = stage
        report.integrity_violations.append(str(e))
        logger.error("Stage '%s' failed: %s", stage, e)
        raise PipelineError(stage, report, str(e)) from e


def run_pipeline(raw: pd.DataFrame, config: PipelineConfig | None = None) -> PipelineResult:
    """Build the star schema from raw sales rows, in memory.

    Stages run strictly in order (clean, dimensions, facts); each one
    consumes the previous stage's output and nothing is written to disk.

    Args:
        raw: All-string DataFrame from the raw loader.
        config: Pipeline configuration.

    Returns:
        PipelineResult with the schema, cleaning output and validation report.

    Raises:
        PipelineError: If a stage halts. ``stage`` names it and ``report``
            holds everything collected up to that point.

    """
    from pos_star.qa.api import ValidationReport
    from pos_star.sales.core import StarSchema, build_fact_sales
    from pos_star.sales.dimensions import build_dimensions
    from pos_star.sales.transform import clean_sales, missing_value_report

    config = config or PipelineConfig()
    report = ValidationReport(input_rows=len(raw))

    def _clean() -> CleanResult:
        report.record_missing(missing_value_report(raw))
        return clean_sales(raw, config)

    clean = _run_stage("clean", report, _clean)
    report.record_clean(raw, clean)

    items = clean.line_items
    stores, products = _run_stage("dimensions", report, lambda: build_dimensions(items))
    facts = _run_stage("facts", report, lambda: build_fact_sales(items, stores, products))

    schema = StarSchema(stores=stores, products=products, facts=facts)
    logger.info(
        "Pipeline complete: %d stores, %d products, %d facts (%d raw rows rejected)",
        len(stores),
        len(products),
        len(facts),
        report.rejected_rows,
    )
    return PipelineResult(schema=schema, clean=clean, report=report)


def run_file_pipeline(
    paths: DataPaths,
    source: str | Path | None = None,
    config: PipelineConfig | None = None,
) -> PipelineResult:
    """Read raw exports, build the star schema and persist it.

    Args:
        paths: DataPaths configuration.
        source: A raw export file. If None, every export in the bronze
            directory is read.
        config: Pipeline configuration.

    Returns:
        PipelineResult for the run.

    Raises:
        FileNotFoundError: If the raw input does not exist.
        PipelineError: If a stage halts.

    """
    from pos_star.qa.api import ValidationReport
    from pos_star.sales.core import write_star_schema
    from pos_star.sales.raw import load_raw, load_raw_directory, raw_files, source_fingerprint

    paths.ensure_dirs()
    if source is None:
        files = raw_files(paths)
        loader = partial(load_raw_directory, paths, config)
    else:
        files = [Path(source)]
        loader = partial(load_raw, source, config)

    raw = _run_stage("load", ValidationReport(), loader)
    label = source_fingerprint(files)
    result = run_pipeline(raw, config)
    write_star_schema(paths, result.schema, source=label)
    return result


def get_star_schema(
    paths: DataPaths,
    refresh: bool = False,
    config: PipelineConfig | None = None,
) -> StarSchema:
    """Return the persisted star schema, building it from bronze if needed.

    The schema is rebuilt when the exports in the bronze directory differ
    (by name, size or modification time) from the ones it was built from.
    With an empty bronze directory the persisted schema is loaded as is,
    whatever file it was built from.

    Args:
        paths: DataPaths configuration.
        refresh: If True, rebuild from the raw exports even if the silver
            layer is up to date.
        config: Pipeline configuration used when building.

    Raises:
        FileNotFoundError: If there is neither a persisted schema nor a raw
            export to build one from.

    """
    from pos_star.sales.core import STAGE_NAME, STAGE_VERSION, load_star_schema
    from pos_star.sales.metadata import should_run_stage
    from pos_star.sales.raw import raw_files, source_fingerprint

    files = raw_files(paths) if paths.raw_sales.exists() else []
    if not files and not refresh:
        return load_star_schema(paths)

    source = source_fingerprint(files)
    if refresh or should_run_stage(paths.clean_sales, STAGE_NAME, source, STAGE_VERSION):
        logger.info("Building star schema from %s", paths.raw_sales)
        return run_file_pipeline(paths, config=config).schema
    return load_star_schema(paths)
