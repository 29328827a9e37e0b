"""Load plan-year policy tables.

This module loads the policy constants that change every plan year from:
    policy_tables/cy{plan_year}_policy_tables/

Tables loaded:
    - plan_tiers.csv: Deductible, coinsurance and OOP max defaults per metal tier
    - policy_constants.json: HSA/HDHP thresholds and comparison reference values
    - utilization_tables.json: Utilization score points and expected-claims lookups
    - add_on_products.json: Supplemental insurance catalog, discounts and priority thresholds
"""

import json
import logging
from pathlib import Path
from typing import Any

import polars as pl

from coverage_calculators.models import PolicyConstants

logger = logging.getLogger(__name__)

# Base directory for policy tables
DATA_DIR = Path(__file__).parent / "policy_tables"

DEFAULT_PLAN_YEAR = "2024"

# Cache loaded tables
_CACHE: dict[str, Any] = {}


def _get_tables_dir(plan_year: str) -> Path:
    """Get the directory for a plan year's tables."""
    tables_dir = DATA_DIR / f"cy{plan_year}_policy_tables"
    if not tables_dir.exists():
        raise FileNotFoundError(
            f"Policy tables not found for plan year {plan_year}. Expected directory: {tables_dir}"
        )
    return tables_dir


def available_plan_years() -> list[str]:
    """List plan years that ship policy tables, oldest first."""
    years = []
    for path in DATA_DIR.glob("cy*_policy_tables"):
        year = path.name[2:].split("_", 1)[0]
        if year.isdigit():
            years.append(year)
    return sorted(years)


def load_tier_defaults(plan_year: str = DEFAULT_PLAN_YEAR) -> dict[str, dict[str, float]]:
    """Load metal tier cost-sharing defaults from plan_tiers.csv.

    Args:
        plan_year: Plan year (e.g., "2024")

    Returns:
        Dictionary mapping tier name to its defaults
        e.g., {"Gold": {"deductible": 1500.0, "coinsurance": 0.2, "out_of_pocket_max": 8700.0}}
    """
    cache_key = f"tier_defaults_{plan_year}"
    if cache_key in _CACHE:
        return _CACHE[cache_key]

    tables_dir = _get_tables_dir(plan_year)
    tiers: dict[str, dict[str, float]] = {}

    df = pl.read_csv(tables_dir / "plan_tiers.csv")
    for row in df.iter_rows(named=True):
        tier = str(row["tier"]).strip()
        tiers[tier] = {
            "deductible": float(row["deductible"]),
            "coinsurance": float(row["coinsurance"]),
            "out_of_pocket_max": float(row["out_of_pocket_max"]),
        }

    logger.debug("Loaded %d tier defaults for plan year %s", len(tiers), plan_year)
    _CACHE[cache_key] = tiers
    return tiers


def load_policy_constants(plan_year: str = DEFAULT_PLAN_YEAR) -> PolicyConstants:
    """Load HSA thresholds and comparison reference values from policy_constants.json.

    Args:
        plan_year: Plan year (e.g., "2024")

    Returns:
        PolicyConstants for the plan year
    """
    cache_key = f"policy_constants_{plan_year}"
    if cache_key in _CACHE:
        return _CACHE[cache_key]

    tables_dir = _get_tables_dir(plan_year)
    with open(tables_dir / "policy_constants.json", encoding="utf-8") as f:
        constants = PolicyConstants(**json.load(f))

    _CACHE[cache_key] = constants
    return constants


def load_utilization_tables(plan_year: str = DEFAULT_PLAN_YEAR) -> dict[str, Any]:
    """Load utilization point weights and claims lookups from utilization_tables.json.

    Args:
        plan_year: Plan year (e.g., "2024")

    Returns:
        Dictionary with point maps keyed by usage bucket
        (e.g., ``tables["doctor_visit_points"]["10+"] == 30``), scalar point
        weights, and the ``level_claims``/``medication_claims`` lookups
    """
    cache_key = f"utilization_{plan_year}"
    if cache_key in _CACHE:
        return _CACHE[cache_key]

    tables_dir = _get_tables_dir(plan_year)
    with open(tables_dir / "utilization_tables.json", encoding="utf-8") as f:
        tables = json.load(f)

    _CACHE[cache_key] = tables
    return tables


def load_add_on_tables(plan_year: str = DEFAULT_PLAN_YEAR) -> dict[str, Any]:
    """Load the add-on insurance catalog from add_on_products.json.

    Args:
        plan_year: Plan year (e.g., "2024")

    Returns:
        Dictionary with ``products``, ``cost_adjustments`` and ``priority_thresholds``
    """
    cache_key = f"add_ons_{plan_year}"
    if cache_key in _CACHE:
        return _CACHE[cache_key]

    tables_dir = _get_tables_dir(plan_year)
    with open(tables_dir / "add_on_products.json", encoding="utf-8") as f:
        tables = json.load(f)

    logger.debug("Loaded %d add-on products for plan year %s", len(tables["products"]), plan_year)
    _CACHE[cache_key] = tables
    return tables


def clear_cache() -> None:
    """Clear the table cache."""
    _CACHE.clear()
