"""Bronze layer: Raw line-level POS exports.

This module reads the delimited, quoted text export into an all-string
DataFrame. It applies no business logic: every cell stays a string, blank
cells stay empty strings, and the only check is that the required columns
are present.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from pos_star.exceptions import DataQualityError

if TYPE_CHECKING:
    from pos_star.config import DataPaths, PipelineConfig

logger = logging.getLogger(__name__)

RAW_COLUMNS = [
    "transaction_id",
    "transaction_date",
    "transaction_time",
    "transaction_qty",
    "store_id",
    "store_location",
    "product_id",
    "unit_price",
    "product_category",
    "product_type",
    "product_detail",
]


def check_raw_columns(df: pd.DataFrame) -> None:
    """Raise DataQualityError if any required raw column is missing."""
    missing = [col for col in RAW_COLUMNS if col not in df.columns]
    if missing:
        raise DataQualityError(
            f"Missing required columns in raw sales data: {missing}. Required: {RAW_COLUMNS}"
        )


def load_raw(path: str | Path, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Read a raw line-level export into an all-string DataFrame.

    The header row is consumed as column names. Column names are stripped
    and lower-cased so that minor header formatting differences are accepted.

    Args:
        path: Path to the delimited text file.
        config: Pipeline configuration (delimiter, quote character).

    Returns:
        DataFrame with at least the RAW_COLUMNS, all values as str.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataQualityError: If required columns are missing.

    """
    from pos_star.config import PipelineConfig

    config = config or PipelineConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raw sales file not found: {path}")

    df = pd.read_csv(
        path,
        sep=config.delimiter,
        quotechar=config.quotechar,
        dtype=str,
        keep_default_na=False,
        encoding="utf-8",
    )
    df.columns = [str(c).strip().lower() for c in df.columns]
    check_raw_columns(df)

    logger.info("Loaded %d raw rows from %s", len(df), path)
    return df


def raw_files(paths: DataPaths) -> list[Path]:
    """List raw export files in the bronze directory, sorted by name."""
    files = sorted(p for p in paths.raw_sales.glob("*") if p.suffix.lower() in (".csv", ".txt"))
    logger.debug("Found %d raw file(s) in %s", len(files), paths.raw_sales)
    return files


def source_fingerprint(files: list[Path]) -> str:
    """Identify a set of raw exports by name, size and modification time.

    Recorded in the stage metadata so that a changed, added or removed
    export marks the persisted star schema as stale.
    """
    parts = []
    for f in sorted(Path(p) for p in files):
        stat = f.stat()
        parts.append(f"{f.name}:{stat.st_size}:{stat.st_mtime_ns}")
    return ";".join(parts)


def load_raw_directory(paths: DataPaths, config: PipelineConfig | None = None) -> pd.DataFrame:
    """Read and concatenate every raw export in the bronze directory.

    Raises:
        FileNotFoundError: If the bronze directory holds no exports.

    """
    files = raw_files(paths)
    if not files:
        raise FileNotFoundError(f"No raw sales files found in {paths.raw_sales}")
    dfs = [load_raw(f, config) for f in files]
    if len(dfs) == 1:
        return dfs[0]
    return pd.concat(dfs, ignore_index=True)
