from __future__ import annotations

import logging
from typing import Any, Iterable

from coverage_calculators.errors import InvalidPlanParameters
from coverage_calculators.models import PlanDetails

logger = logging.getLogger(__name__)

METAL_TIERS = {"bronze": "Bronze", "silver": "Silver", "gold": "Gold", "platinum": "Platinum", "hdhp": "HDHP"}


def normalize_metal_tier(value: Any) -> str | None:
    """Normalize a metal tier to its canonical spelling, or return None if unknown."""
    if value is None:
        return None
    return METAL_TIERS.get(str(value).strip().lower())


def normalize_coinsurance(value: Any) -> Any:
    """Convert a whole-number percentage (e.g. 20) to a fraction (0.2).

    Values already in [0, 1] and values that are not numbers pass through
    unchanged so validation can report them.
    """
    if value is None:
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    if 1 < number <= 100:
        return number / 100
    return number


def rows_to_plan_details(
    rows: Iterable[tuple[Any, ...]],
    *,
    invalid_plan: str = "skip",
) -> tuple[list[PlanDetails], dict[str, Any]]:
    """
    Convert raw plan catalog rows into PlanDetails objects with validation.

    Expected row format:
    (name, metal_tier, monthly_premium, deductible, coinsurance, out_of_pocket_max)
    """
    plans: list[PlanDetails] = []
    skipped = 0
    invalid_plans: dict[str, str] = {}

    if invalid_plan not in {"skip", "error"}:
        raise ValueError("invalid_plan must be one of: skip, error")

    for (
        name,
        metal_tier,
        monthly_premium,
        deductible,
        coinsurance,
        out_of_pocket_max,
    ) in rows:
        plan_name = "<NULL>" if name is None else str(name)
        try:
            plan = PlanDetails(
                name=plan_name,
                metal_tier=normalize_metal_tier(metal_tier),
                monthly_premium=monthly_premium,
                deductible=deductible,
                coinsurance=normalize_coinsurance(coinsurance),
                out_of_pocket_max=out_of_pocket_max,
            )
        except InvalidPlanParameters as exc:
            if invalid_plan == "error":
                raise
            logger.warning("Skipping plan %s: %s", plan_name, "; ".join(exc.errors))
            invalid_plans[plan_name] = "; ".join(exc.errors)
            skipped += 1
            continue

        plans.append(plan)

    return plans, {"skipped": skipped, "invalid_plans": invalid_plans}
