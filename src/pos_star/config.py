"""Unified configuration for the POS star-schema pipeline.

This module provides the filesystem layout (DataPaths) and the tunable
pipeline settings (PipelineConfig) used across all layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pos_star.exceptions import ConfigError

# Raw export format
DEFAULT_DELIMITER = "|"
DEFAULT_QUOTECHAR = '"'

# Parse formats, tried in order
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d-%m-%Y")
TIME_FORMATS = ("%H:%M:%S", "%H:%M:%S.%f", "%H:%M")

# Weekday indices (Monday=0) treated as weekend
WEEKEND_DAYS = (5, 6)

# Morning peak window, inclusive hours
MORNING_HOURS = (8, 10)

# Ranking sizes
TOP_N_PRODUCTS = 10
TOP_N_PER_STORE = 3


@dataclass
class DataPaths:
    """All filesystem paths used by the pipeline.

    Attributes:
        data_root: Root directory for all data layers.

    Directory Structure:
        data_root/
        ├── a_raw/sales/        # Bronze: delimited POS line exports
        ├── b_clean/sales/      # Silver: dim_store, dim_product, fact_sales
        └── c_processed/sales/  # Gold: report tables
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths from a root directory.

        Examples:
            >>> paths = DataPaths.from_root("data")
            >>> paths.clean_sales
            PosixPath('data/b_clean/sales')

        """
        if isinstance(data_root, str):
            data_root = Path(data_root)
        return cls(data_root=data_root)

    @property
    def raw_sales(self) -> Path:
        """Bronze layer: raw line-level exports."""
        return self.data_root / "a_raw" / "sales"

    @property
    def clean_sales(self) -> Path:
        """Silver layer: star schema tables."""
        return self.data_root / "b_clean" / "sales"

    @property
    def mart_sales(self) -> Path:
        """Gold layer: report tables."""
        return self.data_root / "c_processed" / "sales"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [self.raw_sales, self.clean_sales, self.mart_sales]:
            path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for loading, cleaning and reporting.

    Attributes:
        delimiter: Field separator of the raw export.
        quotechar: Quote character of the raw export.
        date_formats: strptime formats accepted for transaction_date.
        time_formats: strptime formats accepted for transaction_time.
        abort_on_first_error: If True, the first ParseError aborts cleaning
            instead of rejecting the row.
        weekend_days: Weekday indices (Monday=0) classified as weekend.
        morning_hours: Inclusive (start, end) hours of the morning window.
        top_n_products: Size of the overall product ranking.
        top_n_per_store: Size of the per-store product ranking.
    """

    delimiter: str = DEFAULT_DELIMITER
    quotechar: str = DEFAULT_QUOTECHAR
    date_formats: tuple[str, ...] = DATE_FORMATS
    time_formats: tuple[str, ...] = TIME_FORMATS
    abort_on_first_error: bool = False
    weekend_days: tuple[int, ...] = WEEKEND_DAYS
    morning_hours: tuple[int, int] = MORNING_HOURS
    top_n_products: int = TOP_N_PRODUCTS
    top_n_per_store: int = TOP_N_PER_STORE

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ConfigError(f"delimiter must be a single character, got {self.delimiter!r}")
        if not self.date_formats or not self.time_formats:
            raise ConfigError("At least one date format and one time format are required")
        if any(d not in range(7) for d in self.weekend_days):
            raise ConfigError(f"weekend_days must be weekday indices 0-6, got {self.weekend_days}")
        start, end = self.morning_hours
        if not (0 <= start <= end <= 23):
            raise ConfigError(f"Invalid morning_hours window: {self.morning_hours}")
        if self.top_n_products < 1 or self.top_n_per_store < 1:
            raise ConfigError("Ranking sizes must be positive")
