from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
import yaml
from pydantic import BaseModel

from coverage_calculators.addons import AddOnPreferences, Household, generate_add_on_recommendations
from coverage_calculators.breakeven import compare_break_even, create_plan_from_tier
from coverage_calculators.charts import cost_curve_chart, histogram_chart, save_chart
from coverage_calculators.cobra import COBRAInput, analyze_cobra
from coverage_calculators.comparison import UserHealthProfile, compare_plans
from coverage_calculators.errors import InvalidInputError
from coverage_calculators.hsa import HSAInput, calculate_hsa_optimization
from coverage_calculators.models import PlanDetails
from coverage_calculators.simulations import MonteCarloInput, generate_monte_carlo_analysis
from coverage_calculators.table_loader import DEFAULT_PLAN_YEAR, available_plan_years
from coverage_calculators.utilization import HealthProfile, UtilizationScorer

app = typer.Typer(no_args_is_help=True, help="Coverage calculators - plan cost comparison and risk tools")

PLAN_YEAR_OPTION = typer.Option(
    DEFAULT_PLAN_YEAR, "--plan-year", envvar="COVERAGE_PLAN_YEAR", help="Policy table plan year"
)
CHART_OPTION = typer.Option(None, "--chart", help="Write an HTML chart to this path")


def _read_yaml(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f)


def _load_plan_pair(path: Path) -> tuple[PlanDetails, PlanDetails]:
    """Read two plans from a YAML list (or a mapping with a ``plans`` list)."""
    data = _read_yaml(path)
    if isinstance(data, dict):
        data = data.get("plans")
    if not isinstance(data, list) or len(data) != 2:
        raise typer.BadParameter(f"{path} must contain a list of exactly two plans")
    if not all(isinstance(entry, dict) for entry in data):
        raise typer.BadParameter(f"{path}: each plan must be a mapping of plan fields")
    return PlanDetails(**data[0]), PlanDetails(**data[1])


def _echo_yaml(model: BaseModel) -> None:
    typer.echo(yaml.safe_dump(model.model_dump(mode="json"), sort_keys=False))


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command(name="break-even")
def break_even(
    plans_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML file with two plans"),
    plan_year: str = PLAN_YEAR_OPTION,
    chart: Optional[Path] = CHART_OPTION,
) -> None:
    """Find the medical expense where two plans cost the same."""
    try:
        plan1, plan2 = _load_plan_pair(plans_file)
        result = compare_break_even(plan1, plan2, plan_year=plan_year)
    except (InvalidInputError, FileNotFoundError) as exc:
        _fail(exc)

    _echo_yaml(result)
    if chart is not None:
        typer.echo(f"Chart written to {save_chart(cost_curve_chart(result), chart)}")


@app.command(name="tier-plan")
def tier_plan(
    name: str = typer.Argument(..., help="Plan name"),
    tier: str = typer.Argument(..., help="Bronze, Silver, Gold, Platinum or HDHP"),
    monthly_premium: float = typer.Argument(..., help="Monthly premium"),
    plan_year: str = PLAN_YEAR_OPTION,
) -> None:
    """Build a plan from the plan year's metal tier defaults."""
    try:
        plan = create_plan_from_tier(name, tier, monthly_premium, plan_year)
    except (InvalidInputError, FileNotFoundError) as exc:
        _fail(exc)

    _echo_yaml(plan)


@app.command()
def utilization(
    profile_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML health profile"),
    plan_year: str = PLAN_YEAR_OPTION,
) -> None:
    """Score expected healthcare utilization from a health profile."""
    try:
        profile = HealthProfile(**(_read_yaml(profile_file) or {}))
        score = UtilizationScorer(plan_year).score(profile)
    except (InvalidInputError, FileNotFoundError) as exc:
        _fail(exc)

    _echo_yaml(score)


@app.command()
def simulate(
    base_cost: float = typer.Option(..., "--base-cost", help="Expected annual medical costs"),
    deductible: float = typer.Option(..., "--deductible"),
    out_of_pocket_max: float = typer.Option(..., "--oop-max"),
    coinsurance: float = typer.Option(0.2, "--coinsurance"),
    iterations: int = typer.Option(1000, "--iterations"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible runs"),
    buckets: int = typer.Option(5, "--buckets", help="Histogram bucket count"),
    plan_year: str = PLAN_YEAR_OPTION,
    chart: Optional[Path] = CHART_OPTION,
) -> None:
    """Run a Monte Carlo simulation of out-of-pocket costs."""
    try:
        sim_input = MonteCarloInput(
            base_cost=base_cost,
            deductible=deductible,
            out_of_pocket_max=out_of_pocket_max,
            coinsurance=coinsurance,
            iterations=iterations,
            seed=seed,
        )
        analysis = generate_monte_carlo_analysis(sim_input, bucket_count=buckets, plan_year=plan_year)
    except (InvalidInputError, FileNotFoundError) as exc:
        _fail(exc)

    _echo_yaml(analysis)
    if chart is not None:
        typer.echo(f"Chart written to {save_chart(histogram_chart(analysis), chart)}")


@app.command()
def compare(
    plans_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML file with two plans"),
    profile_file: Optional[Path] = typer.Option(
        None, "--profile", exists=True, dir_okay=False, help="YAML expected-usage profile"
    ),
) -> None:
    """Compare two plans side by side."""
    try:
        plan_a, plan_b = _load_plan_pair(plans_file)
        profile = None
        if profile_file is not None:
            profile = UserHealthProfile(**(_read_yaml(profile_file) or {}))
        result = compare_plans(plan_a, plan_b, profile)
    except InvalidInputError as exc:
        _fail(exc)

    _echo_yaml(result)


@app.command()
def hsa(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML HSA input"),
    plan_year: str = PLAN_YEAR_OPTION,
) -> None:
    """Project HSA contributions, tax savings and balances."""
    try:
        hsa_input = HSAInput(**(_read_yaml(input_file) or {}))
        analysis = calculate_hsa_optimization(hsa_input, plan_year)
    except (InvalidInputError, FileNotFoundError) as exc:
        _fail(exc)

    _echo_yaml(analysis)


@app.command()
def cobra(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML COBRA situation"),
) -> None:
    """Decide whether to keep COBRA or switch to a marketplace plan."""
    try:
        analysis = analyze_cobra(COBRAInput(**(_read_yaml(input_file) or {})))
    except InvalidInputError as exc:
        _fail(exc)

    _echo_yaml(analysis)


@app.command(name="add-ons")
def add_ons(
    household_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML household"),
    exclude: Optional[list[str]] = typer.Option(None, "--exclude", help="Add-on category to skip (repeatable)"),
    budget: Optional[float] = typer.Option(None, "--budget", help="Maximum monthly add-on spend"),
    plan_year: str = PLAN_YEAR_OPTION,
) -> None:
    """Recommend supplemental insurance for a household."""
    try:
        household = Household(**(_read_yaml(household_file) or {}))
        preferences = AddOnPreferences(exclude_categories=exclude or [], max_monthly_budget=budget)
        analysis = generate_add_on_recommendations(household, preferences, plan_year)
    except (InvalidInputError, FileNotFoundError) as exc:
        _fail(exc)

    _echo_yaml(analysis)


@app.command(name="plan-years")
def plan_years() -> None:
    """List plan years with policy tables."""
    for year in available_plan_years():
        typer.echo(year)


if __name__ == "__main__":
    app()
