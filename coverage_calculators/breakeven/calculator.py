"""Break-even calculator.

This module compares two plans across the range of possible medical spending:
1. Prices each plan at a medical-expense level (premium + capped out-of-pocket)
2. Samples the cost difference to bracket the first crossover
3. Bisects the bracket to locate the break-even expense
4. Builds a cost curve and a plain-language analysis

Tier defaults and HSA/typical-spending reference values are read from the
plan-year policy tables in policy_tables/cy{plan_year}_policy_tables/.
"""

import logging

from coverage_calculators.breakeven.models import (
    BetterPlan,
    BreakEvenAnalysis,
    BreakEvenResult,
    CheaperPlan,
    CostAtUtilization,
    PlanStrengths,
)
from coverage_calculators.errors import InvalidPlanParameters
from coverage_calculators.formatting import format_currency, round_currency
from coverage_calculators.models import PlanDetails, PolicyConstants
from coverage_calculators.table_loader import (
    DEFAULT_PLAN_YEAR,
    load_policy_constants,
    load_tier_defaults,
)

logger = logging.getLogger(__name__)

# Sample count used to bracket a crossover (51 points including 0)
NUM_SAMPLES = 50


def out_of_pocket_cost(plan: PlanDetails, medical_expense: float) -> float:
    """Member cost-sharing for a year of medical expenses.

    Expenses up to the deductible are paid in full, coinsurance applies above
    it, and the total is capped at the out-of-pocket maximum. Negative
    expenses are treated as zero.
    """
    expense = max(0.0, medical_expense)
    if expense <= plan.deductible:
        out_of_pocket = expense
    else:
        out_of_pocket = plan.deductible + (expense - plan.deductible) * plan.coinsurance
    return min(out_of_pocket, plan.out_of_pocket_max)


def annual_cost(plan: PlanDetails, medical_expense: float) -> float:
    """Total annual cost of a plan (12 months of premium + out-of-pocket).

    Args:
        plan: Plan cost structure
        medical_expense: Billed medical expenses for the year

    Returns:
        Annual premium plus capped out-of-pocket cost
    """
    return plan.monthly_premium * 12 + out_of_pocket_cost(plan, medical_expense)


def _max_expense(plan1: PlanDetails, plan2: PlanDetails) -> float:
    return max(plan1.out_of_pocket_max, plan2.out_of_pocket_max) * 2


def _cost_difference(plan1: PlanDetails, plan2: PlanDetails, expense: float) -> float:
    return annual_cost(plan1, expense) - annual_cost(plan2, expense)


def find_break_even_point(
    plan1: PlanDetails,
    plan2: PlanDetails,
    precision: float = 100,
) -> int | None:
    """Find the medical expense at which two plans cost the same.

    Samples the cost difference at 51 evenly spaced points over
    [0, 2 x the larger OOP max] and takes the first sign change between
    consecutive nonzero samples. Samples where the plans cost exactly the
    same are stepped over, so a crossover landing on a sample point is still
    bracketed. The bracket is then bisected until it is no wider than
    ``precision``.

    Args:
        plan1: First plan
        plan2: Second plan
        precision: Maximum width of the final bracketing interval

    Returns:
        Break-even expense rounded to a whole currency unit, or None when no
        sign change exists in the sampled range (one plan is never more
        expensive than the other)
    """
    if precision <= 0:
        raise ValueError("precision must be greater than 0")

    max_expense = _max_expense(plan1, plan2)

    previous_expense: float | None = None
    previous_diff = 0.0
    bracket: tuple[float, float] | None = None

    for i in range(NUM_SAMPLES + 1):
        expense = max_expense * i / NUM_SAMPLES
        diff = _cost_difference(plan1, plan2, expense)
        if diff == 0:
            continue

        if previous_expense is not None and previous_diff * diff < 0:
            bracket = (previous_expense, expense)
            break

        previous_expense = expense
        previous_diff = diff

    if bracket is None:
        return None

    low, high = bracket
    logger.debug("Crossover bracketed between %.2f and %.2f", low, high)

    while high - low > precision:
        mid = (low + high) / 2
        if _cost_difference(plan1, plan2, mid) * previous_diff > 0:
            low = mid
        else:
            high = mid

    return round_currency((low + high) / 2)


def _cheaper_plan(cost1: float, cost2: float) -> CheaperPlan:
    if cost1 < cost2:
        return "1"
    if cost1 > cost2:
        return "2"
    return "equal"


def generate_cost_curve(
    plan1: PlanDetails,
    plan2: PlanDetails,
    num_points: int = 10,
) -> list[CostAtUtilization]:
    """Price both plans at evenly spaced expense levels for charting.

    Args:
        plan1: First plan
        plan2: Second plan
        num_points: Number of intervals; the curve has ``num_points + 1`` points starting at 0

    Returns:
        Cost points ordered by medical expense
    """
    if num_points < 1:
        raise ValueError("num_points must be at least 1")

    max_expense = _max_expense(plan1, plan2)
    curve: list[CostAtUtilization] = []

    for i in range(num_points + 1):
        expense = round_currency(max_expense * i / num_points)
        cost1 = round_currency(annual_cost(plan1, expense))
        cost2 = round_currency(annual_cost(plan2, expense))

        curve.append(
            CostAtUtilization(
                medical_expense=expense,
                plan1_total_cost=cost1,
                plan2_total_cost=cost2,
                cheaper_plan=_cheaper_plan(cost1, cost2),
                savings_with_plan1=cost2 - cost1,
            )
        )

    return curve


def _leading_plan(cost_curve: list[CostAtUtilization]) -> CheaperPlan:
    """Cheaper plan at the lowest expense level where the plans differ."""
    for point in cost_curve:
        if point.cheaper_plan != "equal":
            return point.cheaper_plan
    return "equal"


def _low_utilization_plan(
    plan1: PlanDetails,
    plan2: PlanDetails,
    break_even_point: int | None,
    cost_curve: list[CostAtUtilization],
) -> CheaperPlan:
    """Plan that is cheaper before the first crossover (or everywhere, without one)."""
    if break_even_point is not None:
        midpoint = break_even_point / 2
        cheaper = _cheaper_plan(annual_cost(plan1, midpoint), annual_cost(plan2, midpoint))
        if cheaper != "equal":
            return cheaper
    return _leading_plan(cost_curve)


def _is_hsa_candidate(plan: PlanDetails, policy: PolicyConstants) -> bool:
    if plan.metal_tier == "HDHP" or plan.hsa_eligible:
        return True
    return policy.is_hsa_compatible(plan.deductible, plan.out_of_pocket_max)


def analyze_break_even(
    plan1: PlanDetails,
    plan2: PlanDetails,
    break_even_point: int | None,
    cost_curve: list[CostAtUtilization],
    policy: PolicyConstants | None = None,
) -> BreakEvenAnalysis:
    """Explain a break-even result in plain language.

    Args:
        plan1: First plan
        plan2: Second plan
        break_even_point: Output of find_break_even_point
        cost_curve: Output of generate_cost_curve
        policy: Plan-year constants (defaults to the default plan year)

    Returns:
        BreakEvenAnalysis with summary, recommendation, insights and per-plan strengths
    """
    policy = policy or load_policy_constants(DEFAULT_PLAN_YEAR)
    insights: list[str] = []
    strengths = PlanStrengths()

    premium_diff = plan1.monthly_premium - plan2.monthly_premium
    if abs(premium_diff) > policy.premium_difference_threshold:
        if premium_diff < 0:
            insights.append(f"{plan1.name} saves {format_currency(abs(premium_diff))}/month on premiums")
            strengths.plan1.append("Lower monthly premium")
        else:
            insights.append(f"{plan2.name} saves {format_currency(abs(premium_diff))}/month on premiums")
            strengths.plan2.append("Lower monthly premium")

    if plan1.deductible < plan2.deductible:
        strengths.plan1.append("Lower deductible")
        insights.append(
            f"{plan1.name} has a {format_currency(plan2.deductible - plan1.deductible)} lower deductible"
        )
    elif plan2.deductible < plan1.deductible:
        strengths.plan2.append("Lower deductible")
        insights.append(
            f"{plan2.name} has a {format_currency(plan1.deductible - plan2.deductible)} lower deductible"
        )

    if plan1.out_of_pocket_max < plan2.out_of_pocket_max:
        strengths.plan1.append("Lower out-of-pocket maximum")
    elif plan2.out_of_pocket_max < plan1.out_of_pocket_max:
        strengths.plan2.append("Lower out-of-pocket maximum")

    low_plan = _low_utilization_plan(plan1, plan2, break_even_point, cost_curve)

    if break_even_point is None:
        if low_plan == "equal":
            summary = (
                f"{plan1.name} and {plan2.name} cost the same at every level of healthcare utilization."
            )
            recommended_plan = "1"
            confidence = "low"
        elif low_plan == "1":
            summary = f"{plan1.name} is always more cost-effective regardless of healthcare utilization."
            recommended_plan = "1"
            confidence = "high"
        else:
            summary = f"{plan2.name} is always more cost-effective regardless of healthcare utilization."
            recommended_plan = "2"
            confidence = "high"
    else:
        low_is_plan1 = low_plan != "2"
        low_util_name = plan1.name if low_is_plan1 else plan2.name
        high_util_name = plan2.name if low_is_plan1 else plan1.name
        break_even_text = format_currency(break_even_point)

        summary = (
            f"Break-even at {break_even_text}/year in medical expenses. "
            f"{low_util_name} is better for low utilization, {high_util_name} is better for high utilization."
        )
        insights.append(f"Below {break_even_text}/year: Choose {low_util_name}")
        insights.append(f"Above {break_even_text}/year: Choose {high_util_name}")

        confidence = "medium"
        if break_even_point > policy.typical_annual_spending:
            recommended_plan = "1" if low_is_plan1 else "2"
            insights.append("Based on average healthcare spending, the lower-premium plan may be better")
        else:
            recommended_plan = "2" if low_is_plan1 else "1"
            insights.append(
                "Based on average healthcare spending, the higher-coverage plan may be better"
            )

    if _is_hsa_candidate(plan1, policy):
        strengths.plan1.append("HSA eligible (tax advantages)")
    if _is_hsa_candidate(plan2, policy):
        strengths.plan2.append("HSA eligible (tax advantages)")

    return BreakEvenAnalysis(
        summary=summary,
        recommended_plan=recommended_plan,
        confidence=confidence,
        insights=insights,
        plan_strengths=strengths,
    )


def compare_break_even(
    plan1: PlanDetails,
    plan2: PlanDetails,
    plan_year: str = DEFAULT_PLAN_YEAR,
    precision: float = 100,
    num_points: int = 10,
) -> BreakEvenResult:
    """Run the full break-even comparison between two plans.

    Args:
        plan1: First plan
        plan2: Second plan
        plan_year: Plan year whose policy constants drive the analysis
        precision: Bisection precision passed to find_break_even_point
        num_points: Cost curve intervals passed to generate_cost_curve

    Returns:
        BreakEvenResult with break-even point, cost curve and analysis
    """
    break_even_point = find_break_even_point(plan1, plan2, precision)
    cost_curve = generate_cost_curve(plan1, plan2, num_points)
    analysis = analyze_break_even(
        plan1, plan2, break_even_point, cost_curve, load_policy_constants(plan_year)
    )

    low_plan = _low_utilization_plan(plan1, plan2, break_even_point, cost_curve)
    below: BetterPlan
    above: BetterPlan
    if break_even_point is None:
        below = above = "always-2" if low_plan == "2" else "always-1"
    else:
        below = "2" if low_plan == "2" else "1"
        above = "1" if below == "2" else "2"

    logger.debug(
        "Break-even %s vs %s: %s", plan1.name, plan2.name, break_even_point
    )
    return BreakEvenResult(
        plan1=plan1,
        plan2=plan2,
        break_even_point=break_even_point,
        better_plan_below_breakeven=below,
        better_plan_above_breakeven=above,
        cost_curve=cost_curve,
        analysis=analysis,
    )


def create_plan_from_tier(
    name: str,
    tier: str,
    monthly_premium: float,
    plan_year: str = DEFAULT_PLAN_YEAR,
) -> PlanDetails:
    """Build a plan from the plan year's metal tier defaults.

    Args:
        name: Plan display name
        tier: Bronze, Silver, Gold, Platinum or HDHP
        monthly_premium: Monthly premium
        plan_year: Plan year whose tier table to use

    Returns:
        PlanDetails with the tier's deductible, coinsurance and OOP max
    """
    tiers = load_tier_defaults(plan_year)
    if tier not in tiers:
        raise InvalidPlanParameters(
            f"Unknown metal tier '{tier}'. Expected one of: {', '.join(tiers)}",
            [f"tier: unknown value '{tier}'"],
        )

    return PlanDetails(
        name=name,
        monthly_premium=monthly_premium,
        metal_tier=tier,
        **tiers[tier],
    )


def quick_compare(
    tier1: str,
    premium1: float,
    tier2: str,
    premium2: float,
    plan_year: str = DEFAULT_PLAN_YEAR,
) -> BreakEvenResult:
    """Compare two metal tiers at the given monthly premiums."""
    plan1 = create_plan_from_tier(f"{tier1} Plan", tier1, premium1, plan_year)
    plan2 = create_plan_from_tier(f"{tier2} Plan", tier2, premium2, plan_year)
    return compare_break_even(plan1, plan2, plan_year)
