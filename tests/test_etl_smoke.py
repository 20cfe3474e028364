"""Smoke tests for the file pipeline and the command-line tool."""

import json
from collections.abc import Callable
from datetime import time
from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from pos_star import DataPaths, __version__
from pos_star.cli import main
from pos_star.exceptions import PipelineError
from pos_star.marts import run_reports, write_reports
from pos_star.qa import validate_sales
from pos_star.sales import get_star_schema, run_file_pipeline
from pos_star.sales.api import run_pipeline
from pos_star.sales.core import load_star_schema, write_star_schema
from pos_star.sales.metadata import read_metadata
from pos_star.sales.raw import RAW_COLUMNS, load_raw


def test_imports() -> None:
    assert __version__


def test_run_file_pipeline_persists(sample_file: Path, temp_paths: DataPaths) -> None:
    result = run_file_pipeline(temp_paths, source=sample_file)

    meta = read_metadata(temp_paths.clean_sales, "star_schema")
    assert meta is not None
    assert meta.status == "ok"
    assert meta.row_counts == {"dim_store": 3, "dim_product": 3, "fact_sales": 5}
    assert len(load_star_schema(temp_paths).facts) == len(result.schema.facts)


def test_get_star_schema_builds_then_loads(
    sample_raw: pd.DataFrame, temp_paths: DataPaths
) -> None:
    temp_paths.ensure_dirs()
    sample_raw.to_csv(temp_paths.raw_sales / "sales.csv", sep="|", index=False)

    built = get_star_schema(temp_paths)
    meta_before = read_metadata(temp_paths.clean_sales, "star_schema")
    loaded = get_star_schema(temp_paths)
    meta_after = read_metadata(temp_paths.clean_sales, "star_schema")

    assert meta_before is not None and meta_after is not None
    assert meta_before.last_run == meta_after.last_run
    pd.testing.assert_frame_equal(built.facts.frame, loaded.facts.frame)


def test_get_star_schema_keeps_schema_built_from_input_file(
    sample_file: Path, temp_paths: DataPaths
) -> None:
    run_file_pipeline(temp_paths, source=sample_file)
    meta_before = read_metadata(temp_paths.clean_sales, "star_schema")

    schema = get_star_schema(temp_paths)
    meta_after = read_metadata(temp_paths.clean_sales, "star_schema")

    assert len(schema.facts) == 5
    assert meta_before is not None and meta_after is not None
    assert meta_before.last_run == meta_after.last_run


def test_get_star_schema_rebuilds_on_new_export(
    sample_raw: pd.DataFrame, temp_paths: DataPaths
) -> None:
    temp_paths.ensure_dirs()
    sample_raw.iloc[:3].to_csv(temp_paths.raw_sales / "jan.csv", sep="|", index=False)
    assert len(get_star_schema(temp_paths).facts) == 3

    sample_raw.iloc[3:].to_csv(temp_paths.raw_sales / "feb.csv", sep="|", index=False)
    assert len(get_star_schema(temp_paths).facts) == 5

    meta = read_metadata(temp_paths.clean_sales, "star_schema")
    assert meta is not None
    assert "feb.csv" in meta.source and "jan.csv" in meta.source


def test_header_only_export(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("|".join(RAW_COLUMNS) + "\n")
    raw = load_raw(path)

    result = run_pipeline(raw)
    report = validate_sales(raw)
    kpis = run_reports(result.schema, ["kpi_summary"]).results["kpi_summary"].iloc[0]

    assert result.report.ok
    assert result.report.input_rows == 0
    assert result.report.missing_values == {col: 0 for col in RAW_COLUMNS}
    assert report.ok
    assert report.summary["accepted_rows"] == 0
    assert len(result.schema.facts) == 0
    assert kpis["total_revenue"] == Decimal("0.00")
    assert kpis["total_orders"] == 0
    assert kpis["avg_order_value"] is None


def test_fractional_seconds_survive_persistence(
    make_raw: Callable[..., pd.DataFrame], temp_paths: DataPaths
) -> None:
    raw = make_raw([("1", "2023-01-02", "07:06:11.250", "1", "5", "32", "3.00")])
    write_star_schema(temp_paths, run_pipeline(raw).schema, source="test")

    loaded = load_star_schema(temp_paths)

    assert loaded.facts.get(1)["transaction_time"] == time(7, 6, 11, 250000)


def test_load_stage_failure(tmp_path: Path, temp_paths: DataPaths) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("transaction_id|store_id\n1|5\n")

    with pytest.raises(PipelineError) as exc_info:
        run_file_pipeline(temp_paths, source=path)
    assert exc_info.value.stage == "load"


def test_write_reports(sample_file: Path, temp_paths: DataPaths) -> None:
    schema = run_file_pipeline(temp_paths, source=sample_file).schema
    run = run_reports(schema, ["kpi_summary", "store_performance"])

    written = write_reports(temp_paths, run)

    assert [p.name for p in written] == ["kpi_summary.csv", "store_performance.csv"]
    kpis = pd.read_csv(temp_paths.mart_sales / "kpi_summary.csv", dtype=str)
    assert kpis.loc[0, "total_revenue"] == "27.50"


class TestCli:
    """Tests for the pos-star command."""

    def test_run_and_report(
        self, sample_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        root = tmp_path / "data"

        code = main(
            ["run", "--input", str(sample_file), "--data-root", str(root), "--report", "all"]
        )
        assert code == 0
        assert (root / "c_processed" / "sales" / "top_products.csv").exists()

        code = main(["report", "--data-root", str(root), "--report", "kpi_summary"])
        out = capsys.readouterr().out
        assert code == 0
        assert "kpi_summary" in out
        assert "27.50" in out

    def test_validate(self, sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["validate", "--input", str(sample_file)])
        out = capsys.readouterr().out

        assert code == 0
        summary = json.loads(out[: out.rindex("}") + 1])
        assert summary["input_rows"] == 5

    def test_unknown_report_is_argument_error(self, sample_file: Path, tmp_path: Path) -> None:
        root = tmp_path / "data"
        assert main(["run", "--input", str(sample_file), "--data-root", str(root)]) == 0
        assert main(["report", "--data-root", str(root), "--report", "nope"]) == 2

    def test_bad_arguments(self) -> None:
        assert main(["frobnicate"]) == 2
        assert main(["run", "--delimiter", "||"]) == 2

    def test_report_without_schema_fails(self, tmp_path: Path) -> None:
        assert main(["report", "--data-root", str(tmp_path)]) == 1
