"""Example: Build the sales star schema and look at the validation report

This example reads a raw line-level export, builds dim_store, dim_product and
fact_sales, and persists them to the silver layer.

Prerequisites:
- Put a pipe-delimited export in data/a_raw/sales/ (or modify raw_file below)
"""

from pathlib import Path

from pos_star import DataPaths, PipelineError
from pos_star.sales import run_file_pipeline
from pos_star.sales.orders import reconstruct_orders

data_root = Path("data")
raw_file = data_root / "a_raw" / "sales" / "coffee_sales.csv"  # MODIFY AS NEEDED

paths = DataPaths.from_root(data_root)

print(f"Building star schema from {raw_file}...")
try:
    result = run_file_pipeline(paths, source=raw_file)
except PipelineError as e:
    print(f"Pipeline stopped at stage '{e.stage}'")
    print(e.report.summary)
    raise SystemExit(1) from e

schema = result.schema
print(f"dim_store: {len(schema.stores)} rows")
print(f"dim_product: {len(schema.products)} rows")
print(f"fact_sales: {len(schema.facts)} rows")
print(f"Validation: {result.report.summary}")

if not result.clean.rejected.empty:
    print("\nRejected rows:")
    print(result.clean.rejected.head(20))

# Orders are derived on demand, never stored
orders = reconstruct_orders(schema.facts)
print(f"\nReconstructed {len(orders)} orders from {len(schema.facts)} fact lines")
print(orders.head())
