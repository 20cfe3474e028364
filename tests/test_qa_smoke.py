"""Smoke tests for the validation report and pipeline error reporting."""

from collections.abc import Callable

import pandas as pd
import pytest

from pos_star.config import PipelineConfig
from pos_star.exceptions import DimensionIntegrityError, PipelineError
from pos_star.qa import ValidationReport, validate_sales
from pos_star.sales.api import run_pipeline


def test_qa_imports() -> None:
    """Test that QA API can be imported."""
    assert ValidationReport is not None
    assert callable(validate_sales)


def test_validate_clean_sample(sample_raw: pd.DataFrame) -> None:
    report = validate_sales(sample_raw)

    assert report.ok
    assert report.input_rows == 5
    assert report.rejected_rows == 0
    assert report.summary["accepted_rows"] == 5
    assert sum(report.missing_values.values()) == 0


def test_validate_collects_everything(make_raw: Callable[..., pd.DataFrame]) -> None:
    raw = pd.concat(
        [
            make_raw([("1", "2023-01-02", "07:00:00", "1", "5", "32", "3.00")]),
            make_raw(
                [("2", "2023-01-02", "07:00:00", "1", "5", "32", "3.00")],
                product_category="Tea",
            ),
            make_raw([("2", "2023-01-02", "08:00:00", "1", "8", "57", "4.00")]),
            make_raw([("4", "2023-01-02", "", "1", "8", "57", "4.00")]),
        ],
        ignore_index=True,
    )

    report = validate_sales(raw, PipelineConfig(abort_on_first_error=True))

    assert not report.ok
    assert report.failed_stage is None
    assert report.rejected_rows == 1
    assert report.rejected_by_field == {"transaction_time": 1}
    assert report.missing_values["transaction_time"] == 1
    assert len(report.integrity_violations) == 2
    assert any("product_id=32" in v for v in report.integrity_violations)
    assert any("duplicate transaction_id" in v for v in report.integrity_violations)


def test_validate_missing_columns_does_not_raise(sample_raw: pd.DataFrame) -> None:
    report = validate_sales(sample_raw.drop(columns=["store_id"]))

    assert report.failed_stage == "clean"
    assert "store_id" in report.integrity_violations[0]


def test_pipeline_error_carries_stage_and_report(
    make_raw: Callable[..., pd.DataFrame],
) -> None:
    raw = pd.concat(
        [
            make_raw([("1", "2023-01-02", "07:00:00", "1", "5", "32", "3.00")]),
            make_raw([("2", "2023-01-02", "07:00:00", "1", "5", "32", "abc")]),
            make_raw(
                [("3", "2023-01-02", "08:00:00", "1", "5", "32", "3.00")],
                product_category="Tea",
            ),
        ],
        ignore_index=True,
    )

    with pytest.raises(PipelineError) as exc_info:
        run_pipeline(raw)

    err = exc_info.value
    assert err.stage == "dimensions"
    assert isinstance(err.__cause__, DimensionIntegrityError)
    assert err.report.failed_stage == "dimensions"
    assert err.report.rejected_rows == 1
    assert err.report.rejected_by_field == {"unit_price": 1}


def test_pipeline_abort_reports_clean_stage(make_raw: Callable[..., pd.DataFrame]) -> None:
    raw = make_raw(
        [
            ("1", "2023-01-02", "07:00:00", "1", "5", "32", "abc"),
            ("2", "2023-01-02", "07:00:00", "1", "5", "32", ""),
        ]
    )

    with pytest.raises(PipelineError) as exc_info:
        run_pipeline(raw, PipelineConfig(abort_on_first_error=True))

    report = exc_info.value.report
    assert exc_info.value.stage == "clean"
    assert report.failed_stage == "clean"
    assert report.rejected_rows == 1
    assert report.rejected_by_field == {"unit_price": 1}
    assert report.missing_values["unit_price"] == 1
    assert report.summary["accepted_rows"] == 1
    assert report.summary["missing_values_total"] == 1


def test_pipeline_result_report(sample_raw: pd.DataFrame) -> None:
    result = run_pipeline(sample_raw)

    assert result.report.ok
    assert result.report.input_rows == 5
    assert len(result.clean.line_items) == 5
    assert len(result.schema.facts) == 5
