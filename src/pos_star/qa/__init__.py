"""QA module for sales data quality.

Example:
    >>> from pos_star.qa import validate_sales
    >>> from pos_star.sales.raw import load_raw
    >>>
    >>> raw = load_raw("data/a_raw/sales/coffee_sales.csv")
    >>> report = validate_sales(raw)
    >>> print(report.summary)
    >>> if not report.ok:
    ...     print(report.integrity_violations)

"""

from pos_star.qa.api import ValidationReport, validate_sales

__all__ = ["ValidationReport", "validate_sales"]
