"""Example: Run sales reports over the persisted star schema

This example loads (or builds) the star schema and prints a few reports for
one month, then writes every report to the gold layer.

Prerequisites:
- Raw exports in data/a_raw/sales/, or a star schema already built with
  examples/sales_star_schema.py
"""

from pathlib import Path

from pos_star import DataPaths
from pos_star.marts import run_report, run_reports, write_reports
from pos_star.sales import get_star_schema

month_start = "2023-06-01"  # MODIFY AS NEEDED
month_end = "2023-06-30"  # MODIFY AS NEEDED

paths = DataPaths.from_root(Path("data"))
schema = get_star_schema(paths)

for name in ["kpi_summary", "store_performance", "top_products_by_store", "hourly_store_revenue"]:
    print(f"\n{name} ({month_start} to {month_end}):")
    print(run_report(schema, name, start_date=month_start, end_date=month_end))

# Whole period, every report
run = run_reports(schema)
for path in write_reports(paths, run):
    print(f"Wrote {path}")
for name, error in run.errors.items():
    print(f"Report {name} failed: {error}")
