"""Domain-specific exceptions for the POS star-schema pipeline.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from PosStarError for easy catching.

Taxonomy:
    - ParseError: one field of one raw row could not be coerced (recoverable
      by rejecting the row).
    - DimensionIntegrityError, UniquenessError, ReferentialIntegrityError:
      structural failures that halt the stage and name the offending keys.
    - DivisionUndefined: a ratio metric over an empty group (non-fatal).
    - PipelineError: a pipeline stage failed; carries the validation report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from pos_star.qa.api import ValidationReport


class PosStarError(Exception):
    """Base exception for all POS star-schema pipeline errors.

    Users can catch this exception to handle any error raised by the package.
    """

    pass


class ConfigError(PosStarError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - An unknown report name is requested
    """

    pass


class DataQualityError(PosStarError):
    """Raised when data quality checks fail.

    This exception is raised when:
    - Required columns are missing from input data
    - A value or a table violates a declared constraint
    """

    pass


class ParseError(DataQualityError):
    """Raised when a raw field cannot be coerced to its target type.

    Attributes:
        field: Name of the raw field that failed.
        value: The offending raw value.
        reason: Short human-readable reason.
        row_number: 1-based data row number in the source, when known.
    """

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        row_number: int | None = None,
    ) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        self.row_number = row_number
        where = f" (row {row_number})" if row_number is not None else ""
        super().__init__(f"Cannot parse {field}={value!r}{where}: {reason}")


class DimensionIntegrityError(DataQualityError):
    """Raised when a dimension key maps to more than one descriptive tuple.

    Attributes:
        dimension: Dimension name ("store" or "product").
        keys: Sorted list of offending key values.
        conflicts: DataFrame of the distinct conflicting rows.
    """

    def __init__(self, dimension: str, keys: Iterable[Any], conflicts: Any = None) -> None:
        self.dimension = dimension
        self.keys = sorted(keys)
        self.conflicts = conflicts
        super().__init__(
            f"{dimension} dimension: {len(self.keys)} key(s) map to more than one "
            f"set of attributes: {self.keys}"
        )


class UniquenessError(DataQualityError):
    """Raised when a primary key is duplicated in the fact table.

    Attributes:
        column: Name of the key column.
        keys: Sorted list of duplicated key values.
    """

    def __init__(self, column: str, keys: Iterable[Any]) -> None:
        self.column = column
        self.keys = sorted(keys)
        super().__init__(f"Duplicate {column} values in fact table: {self.keys}")


class ReferentialIntegrityError(DataQualityError):
    """Raised when a fact foreign key is null or missing from its dimension.

    Attributes:
        column: Name of the foreign key column.
        keys: Offending key values (None stands for a null key).
    """

    def __init__(self, column: str, keys: Iterable[Any]) -> None:
        self.column = column
        self.keys = list(keys)
        super().__init__(f"Dangling {column} values in fact table: {self.keys}")


class DivisionUndefined(PosStarError):
    """Raised when a ratio metric is computed over an empty group."""

    pass


class ETLError(PosStarError):
    """Raised when an ETL pipeline stage fails."""

    pass


class PipelineError(ETLError):
    """Raised when the pipeline halts at a stage.

    Attributes:
        stage: Name of the stage that failed ("load", "clean", "dimensions",
            "facts").
        report: Validation report collected up to the failure.
    """

    def __init__(self, stage: str, report: ValidationReport, message: str) -> None:
        self.stage = stage
        self.report = report
        super().__init__(f"Pipeline failed at stage '{stage}': {message}")
