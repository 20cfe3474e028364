"""Tests for money, ratio and naming helpers and for configuration."""

from decimal import Decimal
from pathlib import Path

import numpy as np
import pytest

from pos_star.config import DataPaths, PipelineConfig
from pos_star.exceptions import ConfigError, DivisionUndefined
from pos_star.utils import cents_to_decimal, column_slug, divide, parse_date, percent


class TestMoney:
    def test_cents_to_decimal(self) -> None:
        assert cents_to_decimal(1050) == Decimal("10.50")
        assert str(cents_to_decimal(300)) == "3.00"
        assert str(cents_to_decimal(np.int64(5))) == "0.05"

    def test_divide_rounds_half_up(self) -> None:
        assert divide(Decimal("27.50"), 4) == Decimal("6.88")
        assert divide(1, 8) == Decimal("0.13")
        assert divide(2, 3) == Decimal("0.67")

    def test_divide_by_zero(self) -> None:
        assert divide(5, 0) is None
        with pytest.raises(DivisionUndefined):
            divide(5, 0, strict=True)

    def test_percent(self) -> None:
        assert percent(Decimal("3.00"), Decimal("7.00")) == Decimal("42.86")
        assert percent(1, 4) == Decimal("25.00")
        assert percent(0, 0) is None

    def test_float_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            divide(1.5, 2)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Lower Manhattan", "lower_manhattan"),
        ("Hell's Kitchen", "hells_kitchen"),
        ("Astoria", "astoria"),
        ("  ", "unknown"),
    ],
)
def test_column_slug(label: str, expected: str) -> None:
    assert column_slug(label) == expected


def test_parse_date() -> None:
    assert parse_date("2023-01-15").isoformat() == "2023-01-15"
    with pytest.raises(ValueError):
        parse_date("15/01/2023")


class TestConfig:
    def test_data_paths_layout(self, tmp_path: Path) -> None:
        paths = DataPaths.from_root(tmp_path)
        paths.ensure_dirs()

        assert paths.raw_sales == tmp_path / "a_raw" / "sales"
        assert paths.clean_sales == tmp_path / "b_clean" / "sales"
        assert paths.mart_sales == tmp_path / "c_processed" / "sales"
        assert paths.mart_sales.is_dir()

    def test_pipeline_config_defaults(self) -> None:
        config = PipelineConfig()
        assert config.delimiter == "|"
        assert config.weekend_days == (5, 6)
        assert config.morning_hours == (8, 10)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"delimiter": ""},
            {"weekend_days": (7,)},
            {"morning_hours": (10, 8)},
            {"top_n_products": 0},
            {"date_formats": ()},
        ],
    )
    def test_pipeline_config_rejects(self, kwargs: dict) -> None:
        with pytest.raises(ConfigError):
            PipelineConfig(**kwargs)
