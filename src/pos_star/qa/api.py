"""Public API for sales data validation.

This module builds the validation report that accompanies every pipeline
run. It works in memory on the raw DataFrame and never raises on bad data:
every problem found ends up in the report instead.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import pandas as pd

from pos_star.config import PipelineConfig
from pos_star.exceptions import DataQualityError
from pos_star.sales.dimensions import (
    PRODUCT_ATTRIBUTES,
    PRODUCT_KEY,
    STORE_ATTRIBUTES,
    STORE_KEY,
    find_dependency_violations,
)
from pos_star.sales.transform import clean_sales, missing_value_report

if TYPE_CHECKING:
    from pos_star.sales.transform import CleanResult

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Data quality findings for one batch of raw sales rows.

    Attributes:
        input_rows: Number of raw rows read.
        rejected_rows: Number of raw rows rejected by the cleaner.
        rejected_by_field: Failure count per raw field.
        missing_values: Null or blank count per required raw field.
        integrity_violations: Human-readable structural problems (dimension
            conflicts, duplicate keys, dangling foreign keys).
        failed_stage: Name of the stage that halted the pipeline, or None.
    """

    input_rows: int = 0
    rejected_rows: int = 0
    rejected_by_field: dict[str, int] = field(default_factory=dict)
    missing_values: dict[str, int] = field(default_factory=dict)
    integrity_violations: list[str] = field(default_factory=list)
    failed_stage: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True if no stage failed and no structural problem was found."""
        return self.failed_stage is None and not self.integrity_violations

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "input_rows": self.input_rows,
            "rejected_rows": self.rejected_rows,
            "accepted_rows": self.input_rows - self.rejected_rows,
            "rejected_by_field": dict(self.rejected_by_field),
            "missing_values_total": sum(self.missing_values.values()),
            "integrity_violations": len(self.integrity_violations),
            "failed_stage": self.failed_stage,
        }

    def record_clean(self, raw: pd.DataFrame, clean: CleanResult) -> None:
        """Fill in row counts and missing values from a cleaning run."""
        self.input_rows = clean.input_rows
        self.rejected_rows = clean.rejected_rows
        self.rejected_by_field = clean.rejected_by_field()
        self.record_missing(missing_value_report(raw))

    def record_missing(self, missing: pd.Series) -> None:
        """Store per-field blank counts from missing_value_report."""
        self.missing_values = {str(k): int(v) for k, v in missing.items()}


def integrity_violations(items: pd.DataFrame) -> list[str]:
    """Describe every structural problem in clean line items.

    Checks store and product functional dependencies and transaction_id
    uniqueness. Foreign keys cannot dangle at this point because both
    dimensions are derived from the same items.
    """
    violations = []
    for name, key, attributes in (
        ("store", STORE_KEY, STORE_ATTRIBUTES),
        ("product", PRODUCT_KEY, PRODUCT_ATTRIBUTES),
    ):
        conflicts = find_dependency_violations(items, key, attributes)
        for value, rows in conflicts.groupby(key, sort=True):
            variants = [tuple(r) for r in rows[attributes].itertuples(index=False, name=None)]
            violations.append(f"{name} {key}={value} has conflicting attributes: {variants}")

    ids = items["transaction_id"]
    duplicated = sorted(ids[ids.duplicated()].unique().tolist())
    if duplicated:
        violations.append(f"duplicate transaction_id values: {duplicated}")
    return violations


def validate_sales(raw: pd.DataFrame, config: PipelineConfig | None = None) -> ValidationReport:
    """Produce a validation report for raw sales rows without raising.

    The cleaner always runs in collect mode here, whatever the
    abort_on_first_error setting, so every bad row is counted.

    Args:
        raw: All-string DataFrame from the raw loader.
        config: Pipeline configuration (date/time formats).

    Returns:
        ValidationReport. If required columns are missing, failed_stage is
        "clean" and the problem is listed in integrity_violations.

    """
    config = dataclasses.replace(config or PipelineConfig(), abort_on_first_error=False)
    report = ValidationReport(input_rows=len(raw))

    try:
        clean = clean_sales(raw, config)
    except DataQualityError as e:
        logger.warning("Validation stopped at cleaning: %s", e)
        report.failed_stage = "clean"
        report.integrity_violations.append(str(e))
        return report

    report.record_clean(raw, clean)
    report.integrity_violations.extend(integrity_violations(clean.line_items))

    logger.info(
        "Validated %d raw rows: %d rejected, %d integrity violation(s)",
        report.input_rows,
        report.rejected_rows,
        len(report.integrity_violations),
    )
    return report
