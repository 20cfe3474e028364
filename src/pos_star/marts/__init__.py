"""Gold layer: reports over the sales star schema.

Each report is a pure function of a StarSchema. Orders are reconstructed
from the fact table on every call.

Example:
    >>> from pos_star import DataPaths
    >>> from pos_star.marts import run_report, run_reports
    >>> from pos_star.sales import get_star_schema
    >>>
    >>> schema = get_star_schema(DataPaths.from_root("data"))
    >>> kpis = run_report(schema, "kpi_summary")
    >>> june = run_report(schema, "store_performance", start_date="2023-06-01",
    ...                   end_date="2023-06-30")
    >>> run = run_reports(schema)
    >>> print(run.errors)
"""

from pos_star.marts.api import REPORTS, ReportRun, run_report, run_reports, write_reports

__all__ = ["REPORTS", "ReportRun", "run_report", "run_reports", "write_reports"]
