from __future__ import annotations

import argparse
import csv
import os
import re
import yaml
from datetime import datetime
from pathlib import Path

import duckdb

from coverage_calculators.breakeven import compare_break_even
from coverage_calculators.plan_catalog import rows_to_plan_details
from coverage_calculators.table_loader import DEFAULT_PLAN_YEAR


def _get_repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _default_duckdb_path() -> str:
    env_path = os.environ.get("PLAN_CATALOG_DUCKDB_PATH")
    if env_path:
        return env_path
    return str((_get_repo_root() / "plan_catalog.duckdb").resolve())


def _detail_file_name(plan_name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", plan_name).strip("_") or "plan"


def break_even_from_duckdb_to_csv(
    *,
    duckdb_path: str,
    output_csv_path: str,
    baseline_plan: str | None = None,
    plan_year: str = DEFAULT_PLAN_YEAR,
    schema: str = "main",
    table: str = "plan_catalog",
    limit: int | None = None,
    invalid_plan: str = "skip",
) -> int:
    """Read a plan catalog from DuckDB and write break-even comparisons to CSV.

    Every plan is compared against the baseline plan (the first catalog row
    unless ``baseline_plan`` names one). Returns number of rows written.

    Expected input relation: `{schema}.{table}` with columns:
    - name, metal_tier, monthly_premium, deductible, coinsurance, out_of_pocket_max
    """

    con = duckdb.connect(str(Path(duckdb_path).expanduser().resolve()))
    try:
        sql = f"""
        SELECT
            name,
            metal_tier,
            monthly_premium,
            deductible,
            coinsurance,
            out_of_pocket_max
        FROM {schema}.{table}
        """.strip()
        if limit is not None:
            sql += f"\nLIMIT {int(limit)}"

        rows = con.execute(sql).fetchall()
    finally:
        con.close()

    plans, stats = rows_to_plan_details(rows, invalid_plan=invalid_plan)
    if not plans:
        raise ValueError(f"No valid plans found in {schema}.{table}")

    if baseline_plan is None:
        baseline = plans[0]
    else:
        matches = [plan for plan in plans if plan.name == baseline_plan]
        if not matches:
            raise ValueError(f"Baseline plan '{baseline_plan}' not found in {schema}.{table}")
        baseline = matches[0]

    output_path = Path(output_csv_path).expanduser().resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "baseline_plan",
        "plan",
        "plan_year",
        "metal_tier",
        "monthly_premium",
        "deductible",
        "coinsurance",
        "out_of_pocket_max",
        "break_even_point",
        "better_plan_below_breakeven",
        "better_plan_above_breakeven",
        "recommended_plan",
        "confidence",
    ]

    # Create directory for YAML exports
    yaml_dir = output_path.parent / "yaml_details"
    yaml_dir.mkdir(parents=True, exist_ok=True)

    written = 0
    with output_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        for plan in plans:
            if plan is baseline:
                continue

            result = compare_break_even(baseline, plan, plan_year=plan_year)

            if written < 20:
                yaml_data = {
                    "plan_year": plan_year,
                    **result.model_dump(mode="json"),
                }
                with (yaml_dir / f"{_detail_file_name(plan.name)}.yml").open("w", encoding="utf-8") as yf:
                    yaml.dump(yaml_data, yf, sort_keys=False)

            writer.writerow(
                {
                    "baseline_plan": baseline.name,
                    "plan": plan.name,
                    "plan_year": plan_year,
                    "metal_tier": plan.metal_tier,
                    "monthly_premium": plan.monthly_premium,
                    "deductible": plan.deductible,
                    "coinsurance": plan.coinsurance,
                    "out_of_pocket_max": plan.out_of_pocket_max,
                    "break_even_point": result.break_even_point,
                    "better_plan_below_breakeven": result.better_plan_below_breakeven,
                    "better_plan_above_breakeven": result.better_plan_above_breakeven,
                    "recommended_plan": result.analysis.recommended_plan,
                    "confidence": result.analysis.confidence,
                }
            )
            written += 1

    skipped = int(stats.get("skipped", 0))
    if skipped:
        total_rows = len(rows)
        pct = (skipped / total_rows) * 100 if total_rows > 0 else 0
        invalids = stats.get("invalid_plans", {})
        invalids_str = ", ".join(sorted(invalids))
        print(f"Skipped {skipped}/{total_rows} ({pct:.2f}%) rows due to invalid plan values: {invalids_str}")

    return written


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="coverage_calculators.duckdb_to_csv",
        description=(
            "Read a plan catalog from DuckDB, compare every plan against a baseline "
            "plan and write break-even results to CSV."
        ),
    )
    p.add_argument(
        "--duckdb-path",
        default=_default_duckdb_path(),
        help="Path to DuckDB file (default: PLAN_CATALOG_DUCKDB_PATH env var or repo plan_catalog.duckdb)",
    )
    p.add_argument(
        "--output-csv",
        required=False,
        help="Output CSV path. Defaults to tmp_exports/YYYYMMDD_HHMMSSffffff_break_even_out.csv",
    )
    p.add_argument(
        "--baseline-plan",
        default=None,
        help="Name of the plan every other plan is compared against (default: first row)",
    )
    p.add_argument(
        "--plan-year",
        default=DEFAULT_PLAN_YEAR,
        help="Plan year whose policy tables to use (e.g. 2024)",
    )
    p.add_argument(
        "--schema",
        default="main",
        help="DuckDB schema containing the plan catalog",
    )
    p.add_argument(
        "--table",
        default="plan_catalog",
        help="DuckDB table/view name containing the plan catalog",
    )
    p.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Optional row limit for quick smoke tests",
    )
    p.add_argument(
        "--invalid-plan",
        choices=["skip", "error"],
        default="skip",
        help="What to do if a row has out-of-range plan values: skip row or stop with an error",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    output_csv = args.output_csv
    if not output_csv:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S%f")
        output_csv = str(Path(__file__).parent / "tmp_exports" / f"{timestamp}_break_even_out.csv")

    count = break_even_from_duckdb_to_csv(
        duckdb_path=args.duckdb_path,
        output_csv_path=output_csv,
        baseline_plan=args.baseline_plan,
        plan_year=str(args.plan_year),
        schema=str(args.schema),
        table=str(args.table),
        limit=args.limit,
        invalid_plan=str(args.invalid_plan),
    )

    print(f"Wrote {count} rows to {Path(output_csv).expanduser().resolve()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
