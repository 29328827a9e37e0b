"""Plan comparison engine.

This module compares two plans side by side:
1. Builds weighted metrics (premium, deductible, OOP max, copays, network, quality)
2. Prices fixed usage scenarios, plus the user's expected usage when a profile is given
3. Scores metric and scenario wins to pick an overall winner
4. Writes a recommendation, key differences and a summary
"""

import logging
from collections.abc import Callable
from typing import Literal

from coverage_calculators.breakeven.calculator import out_of_pocket_cost
from coverage_calculators.comparison.models import (
    ComparisonMetric,
    CostScenario,
    MetricCategory,
    OverallWinner,
    PlanAmounts,
    PlanComparisonResult,
    QuickComparison,
    Recommendation,
    ScenarioBreakdown,
    UserHealthProfile,
    Winner,
)
from coverage_calculators.formatting import format_currency, format_percentage
from coverage_calculators.models import PlanDetails

logger = logging.getLogger(__name__)

# Per-service cost assumed when a plan does not list a copay
DEFAULT_PRIMARY_CARE_COPAY = 30
DEFAULT_SPECIALIST_COPAY = 60
DEFAULT_GENERIC_DRUG_COPAY = 15
DEFAULT_EMERGENCY_ROOM_COPAY = 300
DEFAULT_PROCEDURE_COST = 5000

# Claims above the deductible in the major medical event scenario
MAJOR_EVENT_CLAIMS = 10000

# Materiality thresholds for key differences
PREMIUM_DIFFERENCE_THRESHOLD = 50
DEDUCTIBLE_DIFFERENCE_THRESHOLD = 500
OOP_MAX_DIFFERENCE_THRESHOLD = 1000
QUALITY_RATING_DIFFERENCE_THRESHOLD = 1

SCENARIO_WIN_POINTS = 3
USER_SCENARIO_BONUS_POINTS = 5

USER_SCENARIO_NAME = "Your Expected Usage"

# name, description, doctor visits, specialist visits, prescriptions, ER visits
FIXED_SCENARIOS = [
    ("Healthy Year", "2 doctor visits, 3 prescriptions, no major medical events", 2, 0, 3, 0),
    ("Moderate Usage", "6 doctor visits, 2 specialist visits, 12 prescriptions", 6, 2, 12, 0),
    (
        "Chronic Condition",
        "12 doctor visits, 6 specialist visits, monthly prescriptions, 1 ER visit",
        12,
        6,
        36,
        1,
    ),
]


def determine_winner(value_a: float, value_b: float, prefer: Literal["lower", "higher"]) -> Winner:
    if value_a == value_b:
        return "tie"
    if prefer == "lower":
        return "A" if value_a < value_b else "B"
    return "A" if value_a > value_b else "B"


def format_difference(value_a: float, value_b: float, suffix: str = "") -> str:
    """Describe plan A relative to plan B, e.g. ``"$600 less/year"``."""
    diff = value_a - value_b
    if diff == 0:
        return "Same"
    direction = "more" if diff > 0 else "less"
    return f"{format_currency(abs(diff))} {direction}{suffix}"


def _format_coinsurance(coinsurance: float) -> str:
    percent = round(coinsurance * 100, 1)
    return format_percentage(percent, 0 if float(percent).is_integer() else 1)


def _format_flag(value: bool) -> str:
    return "Yes" if value else "No"


def _flag_winner(value_a: bool, value_b: bool) -> Winner:
    if value_a == value_b:
        return "tie"
    return "A" if value_a else "B"


def _numeric_metric(
    name: str,
    category: MetricCategory,
    value_a: float,
    value_b: float,
    importance: int,
    prefer: Literal["lower", "higher"] = "lower",
    formatter: Callable[[float], str] = format_currency,
    difference_suffix: str | None = None,
    tooltip: str | None = None,
) -> ComparisonMetric:
    return ComparisonMetric(
        name=name,
        category=category,
        plan_a_value=formatter(value_a),
        plan_b_value=formatter(value_b),
        plan_a_raw=value_a,
        plan_b_raw=value_b,
        winner=determine_winner(value_a, value_b, prefer),
        difference=(
            format_difference(value_a, value_b, difference_suffix)
            if difference_suffix is not None
            else None
        ),
        importance=importance,
        tooltip=tooltip,
    )


def generate_metrics(plan_a: PlanDetails, plan_b: PlanDetails) -> list[ComparisonMetric]:
    """Build the side-by-side metrics for two plans.

    Optional copay, network, quality and HSA metrics are only included when
    both plans supply the field. The premium-after-subsidy metric is included
    when either plan has a subsidy, falling back to the full premium for the other.

    Args:
        plan_a: First plan
        plan_b: Second plan

    Returns:
        Metrics in display order
    """
    metrics = [
        _numeric_metric(
            "Monthly Premium",
            "cost",
            plan_a.monthly_premium,
            plan_b.monthly_premium,
            importance=5,
            difference_suffix="/month",
            tooltip="The amount you pay each month regardless of healthcare usage",
        )
    ]

    if (
        plan_a.monthly_premium_after_subsidy is not None
        or plan_b.monthly_premium_after_subsidy is not None
    ):
        metrics.append(
            _numeric_metric(
                "Premium After Subsidy",
                "cost",
                plan_a.net_monthly_premium,
                plan_b.net_monthly_premium,
                importance=5,
                tooltip="Your actual monthly cost after premium tax credits",
            )
        )

    metrics.append(
        _numeric_metric(
            "Annual Premium",
            "cost",
            plan_a.annual_premium,
            plan_b.annual_premium,
            importance=4,
            difference_suffix="/year",
        )
    )
    metrics.append(
        _numeric_metric(
            "Deductible",
            "cost",
            plan_a.deductible,
            plan_b.deductible,
            importance=4,
            difference_suffix="",
            tooltip="Amount you pay before insurance kicks in",
        )
    )
    metrics.append(
        _numeric_metric(
            "Out-of-Pocket Maximum",
            "cost",
            plan_a.out_of_pocket_max,
            plan_b.out_of_pocket_max,
            importance=4,
            difference_suffix="",
            tooltip="Maximum amount you pay in a year; insurance covers 100% after this",
        )
    )

    copays = [
        ("Primary Care Copay", "primary_care_copay"),
        ("Specialist Copay", "specialist_copay"),
        ("Generic Drug Copay", "generic_drug_copay"),
    ]
    for name, field in copays:
        value_a = getattr(plan_a, field)
        value_b = getattr(plan_b, field)
        if value_a is not None and value_b is not None:
            metrics.append(_numeric_metric(name, "coverage", value_a, value_b, importance=3))

    metrics.append(
        _numeric_metric(
            "Coinsurance",
            "coverage",
            plan_a.coinsurance,
            plan_b.coinsurance,
            importance=3,
            formatter=_format_coinsurance,
            tooltip="Percentage you pay for covered services after deductible",
        )
    )

    if plan_a.plan_type is not None and plan_b.plan_type is not None:
        metrics.append(
            ComparisonMetric(
                name="Plan Type",
                category="network",
                plan_a_value=plan_a.plan_type,
                plan_b_value=plan_b.plan_type,
                winner="tie",
                importance=3,
                tooltip="HMO: More restrictive network, lower cost. PPO: Flexible network, higher cost.",
            )
        )

    if plan_a.has_national_network is not None and plan_b.has_national_network is not None:
        metrics.append(
            ComparisonMetric(
                name="National Network",
                category="network",
                plan_a_value=_format_flag(plan_a.has_national_network),
                plan_b_value=_format_flag(plan_b.has_national_network),
                winner=_flag_winner(plan_a.has_national_network, plan_b.has_national_network),
                importance=2,
            )
        )

    if plan_a.quality_rating is not None and plan_b.quality_rating is not None:
        metrics.append(
            _numeric_metric(
                "Quality Rating",
                "value",
                plan_a.quality_rating,
                plan_b.quality_rating,
                importance=3,
                prefer="higher",
                formatter=lambda rating: f"{rating:g} stars",
            )
        )

    if plan_a.hsa_eligible is not None and plan_b.hsa_eligible is not None:
        metrics.append(
            ComparisonMetric(
                name="HSA Eligible",
                category="value",
                plan_a_value=_format_flag(plan_a.hsa_eligible),
                plan_b_value=_format_flag(plan_b.hsa_eligible),
                winner=_flag_winner(plan_a.hsa_eligible, plan_b.hsa_eligible),
                importance=3,
                tooltip="HSA-eligible plans allow tax-advantaged savings for medical expenses",
            )
        )

    return metrics


def _prescription_copay(plan: PlanDetails, prescription_tier: int) -> float:
    if prescription_tier > 1 and plan.brand_drug_copay is not None:
        return plan.brand_drug_copay
    if plan.generic_drug_copay is not None:
        return plan.generic_drug_copay
    return DEFAULT_GENERIC_DRUG_COPAY


def calculate_out_of_pocket(
    plan: PlanDetails,
    doctor_visits: int,
    specialist_visits: int,
    prescriptions: int,
    er_visits: int,
    procedure_cost: float = 0,
    prescription_tier: int = 1,
) -> float:
    """Estimate a year of out-of-pocket cost from service counts.

    Visits and prescriptions cost the plan's copay (or a default when the plan
    does not list one). A procedure goes through the deductible and
    coinsurance. The total is capped at the out-of-pocket maximum.

    Args:
        plan: Plan to price
        doctor_visits: Primary care visits
        specialist_visits: Specialist visits
        prescriptions: Prescriptions filled in the year
        er_visits: Emergency room visits
        procedure_cost: Billed cost of procedures
        prescription_tier: Formulary tier; tiers above 1 use the brand copay when listed

    Returns:
        Estimated out-of-pocket cost
    """
    primary_care = plan.primary_care_copay
    specialist = plan.specialist_copay
    emergency_room = plan.emergency_room_copay

    total = doctor_visits * (DEFAULT_PRIMARY_CARE_COPAY if primary_care is None else primary_care)
    total += specialist_visits * (DEFAULT_SPECIALIST_COPAY if specialist is None else specialist)
    total += prescriptions * _prescription_copay(plan, prescription_tier)
    total += er_visits * (DEFAULT_EMERGENCY_ROOM_COPAY if emergency_room is None else emergency_room)

    if procedure_cost > 0:
        total += out_of_pocket_cost(plan, procedure_cost)

    return min(total, plan.out_of_pocket_max)


def _scenario(
    name: str,
    description: str,
    plan_a: PlanDetails,
    plan_b: PlanDetails,
    out_of_pocket_a: float,
    out_of_pocket_b: float,
) -> CostScenario:
    premium_a = plan_a.net_monthly_premium * 12
    premium_b = plan_b.net_monthly_premium * 12
    cost_a = premium_a + out_of_pocket_a
    cost_b = premium_b + out_of_pocket_b

    return CostScenario(
        name=name,
        description=description,
        plan_a_cost=cost_a,
        plan_b_cost=cost_b,
        difference=cost_a - cost_b,
        winner=determine_winner(cost_a, cost_b, "lower"),
        breakdown=ScenarioBreakdown(
            premiums=PlanAmounts(plan_a=premium_a, plan_b=premium_b),
            out_of_pocket=PlanAmounts(plan_a=out_of_pocket_a, plan_b=out_of_pocket_b),
        ),
    )


def calculate_scenarios(
    plan_a: PlanDetails,
    plan_b: PlanDetails,
    user_profile: UserHealthProfile | None = None,
) -> list[CostScenario]:
    """Price both plans under the fixed usage scenarios.

    Premiums use the after-subsidy amount when a plan has one. The
    "Your Expected Usage" scenario is added last when a profile is given.
    """
    scenarios = []

    for name, description, doctor, specialist, prescriptions, er in FIXED_SCENARIOS:
        scenarios.append(
            _scenario(
                name,
                description,
                plan_a,
                plan_b,
                calculate_out_of_pocket(plan_a, doctor, specialist, prescriptions, er),
                calculate_out_of_pocket(plan_b, doctor, specialist, prescriptions, er),
            )
        )

    scenarios.append(
        _scenario(
            "Major Medical Event",
            "Surgery, hospitalization, or serious illness ($50,000+ in charges)",
            plan_a,
            plan_b,
            min(plan_a.out_of_pocket_max, plan_a.deductible + MAJOR_EVENT_CLAIMS),
            min(plan_b.out_of_pocket_max, plan_b.deductible + MAJOR_EVENT_CLAIMS),
        )
    )

    if user_profile is not None:
        procedure_cost = 0.0
        if user_profile.has_planned_procedures:
            procedure_cost = user_profile.planned_procedure_cost or DEFAULT_PROCEDURE_COST

        def user_out_of_pocket(plan: PlanDetails) -> float:
            return calculate_out_of_pocket(
                plan,
                user_profile.expected_doctor_visits,
                user_profile.expected_specialist_visits,
                user_profile.expected_prescriptions * 12,
                user_profile.expected_er_visits,
                procedure_cost,
                user_profile.avg_prescription_tier,
            )

        scenarios.append(
            _scenario(
                USER_SCENARIO_NAME,
                "Based on your health profile and expected needs",
                plan_a,
                plan_b,
                user_out_of_pocket(plan_a),
                user_out_of_pocket(plan_b),
            )
        )

    return scenarios


def _find_scenario(scenarios: list[CostScenario], name: str) -> CostScenario | None:
    for scenario in scenarios:
        if scenario.name == name:
            return scenario
    return None


def determine_overall_winner(
    metrics: list[ComparisonMetric],
    scenarios: list[CostScenario],
    user_profile: UserHealthProfile | None = None,
) -> OverallWinner:
    """Score metric and scenario wins to pick the overall winner.

    Each metric win adds its importance, each scenario win adds 3 points, and
    winning the user's expected-usage scenario adds 5 more. Confidence is high
    for a score gap above 10 and medium above 5.
    """
    scores = {"A": 0, "B": 0}

    for metric in metrics:
        if metric.winner != "tie":
            scores[metric.winner] += metric.importance

    for scenario in scenarios:
        if scenario.winner != "tie":
            scores[scenario.winner] += SCENARIO_WIN_POINTS

    if user_profile is not None:
        user_scenario = _find_scenario(scenarios, USER_SCENARIO_NAME)
        if user_scenario is not None and user_scenario.winner != "tie":
            scores[user_scenario.winner] += USER_SCENARIO_BONUS_POINTS

    gap = abs(scores["A"] - scores["B"])
    if gap > 10:
        confidence = "high"
    elif gap > 5:
        confidence = "medium"
    else:
        confidence = "low"

    if scores["A"] == scores["B"]:
        return OverallWinner(
            plan="tie",
            confidence="low",
            reasoning="Both plans are evenly matched across comparison metrics and cost scenarios.",
        )

    winner = "A" if scores["A"] > scores["B"] else "B"
    metric_wins = sum(1 for metric in metrics if metric.winner == winner)
    scenario_wins = sum(1 for scenario in scenarios if scenario.winner == winner)
    return OverallWinner(
        plan=winner,
        confidence=confidence,
        reasoning=(
            f"Plan {winner} wins {metric_wins} of {len(metrics)} comparison metrics "
            f"and {scenario_wins} of {len(scenarios)} cost scenarios."
        ),
    )


def generate_recommendation(
    plan_a: PlanDetails,
    plan_b: PlanDetails,
    scenarios: list[CostScenario],
    user_profile: UserHealthProfile | None = None,
) -> Recommendation:
    """Recommend the plan that is cheapest for the expected usage.

    Uses the user's expected-usage scenario, or the moderate-usage scenario
    without a profile. When that scenario ties, the plan with the lower
    out-of-pocket maximum is recommended.
    """
    reasons: list[str] = []
    caveats: list[str] = []

    scenario = _find_scenario(scenarios, USER_SCENARIO_NAME) or scenarios[1]
    cheaper_plan = scenario.winner
    lower_premium_plan = determine_winner(plan_a.monthly_premium, plan_b.monthly_premium, "lower")
    lower_oop_plan = "A" if plan_a.out_of_pocket_max < plan_b.out_of_pocket_max else "B"

    if cheaper_plan != "tie":
        cheaper_name = plan_a.name if cheaper_plan == "A" else plan_b.name
        reasons.append(
            f"{cheaper_name} costs {format_currency(abs(scenario.difference))} less annually "
            f"for your expected healthcare usage."
        )

    if user_profile is not None:
        if (
            user_profile.prioritizes_lower_premium
            and "tie" not in (lower_premium_plan, cheaper_plan)
            and lower_premium_plan != cheaper_plan
        ):
            caveats.append(
                "While you prefer lower premiums, the higher-premium plan may cost less overall "
                "given your healthcare needs."
            )

        if user_profile.has_chronic_conditions:
            reasons.append(
                "With a chronic condition, the plan with lower out-of-pocket maximum provides "
                "better protection."
            )

        if user_profile.risk_tolerance == "low":
            reasons.append(
                "Given your low risk tolerance, consider the plan with lower deductible and "
                "out-of-pocket maximum."
            )

    if plan_a.hsa_eligible and not plan_b.hsa_eligible:
        reasons.append(f"{plan_a.name} is HSA-eligible, offering tax advantages for healthcare savings.")
    elif plan_b.hsa_eligible and not plan_a.hsa_eligible:
        reasons.append(f"{plan_b.name} is HSA-eligible, offering tax advantages for healthcare savings.")

    if not reasons:
        reasons.append("Based on overall cost analysis, this plan offers better value.")

    return Recommendation(
        recommended_plan=cheaper_plan if cheaper_plan != "tie" else lower_oop_plan,
        reasons=reasons,
        caveats=caveats,
    )


def identify_key_differences(plan_a: PlanDetails, plan_b: PlanDetails) -> list[str]:
    """List the differences large enough to matter."""
    differences = []

    premium_diff = abs(plan_a.monthly_premium - plan_b.monthly_premium)
    if premium_diff > PREMIUM_DIFFERENCE_THRESHOLD:
        cheaper = plan_a if plan_a.monthly_premium < plan_b.monthly_premium else plan_b
        differences.append(f"{cheaper.name} has a {format_currency(premium_diff)} lower monthly premium.")

    deductible_diff = abs(plan_a.deductible - plan_b.deductible)
    if deductible_diff > DEDUCTIBLE_DIFFERENCE_THRESHOLD:
        lower = plan_a if plan_a.deductible < plan_b.deductible else plan_b
        differences.append(f"{lower.name} has a {format_currency(deductible_diff)} lower deductible.")

    oop_diff = abs(plan_a.out_of_pocket_max - plan_b.out_of_pocket_max)
    if oop_diff > OOP_MAX_DIFFERENCE_THRESHOLD:
        lower = plan_a if plan_a.out_of_pocket_max < plan_b.out_of_pocket_max else plan_b
        differences.append(
            f"{lower.name} has a {format_currency(oop_diff)} lower out-of-pocket maximum."
        )

    if (
        plan_a.plan_type is not None
        and plan_b.plan_type is not None
        and plan_a.plan_type != plan_b.plan_type
    ):
        differences.append(
            f"{plan_a.name} is a {plan_a.plan_type} plan while {plan_b.name} is a "
            f"{plan_b.plan_type} plan."
        )

    if plan_a.quality_rating is not None and plan_b.quality_rating is not None:
        if abs(plan_a.quality_rating - plan_b.quality_rating) >= QUALITY_RATING_DIFFERENCE_THRESHOLD:
            higher, lower = (
                (plan_a, plan_b) if plan_a.quality_rating > plan_b.quality_rating else (plan_b, plan_a)
            )
            differences.append(
                f"{higher.name} has a higher quality rating "
                f"({higher.quality_rating:g} vs {lower.quality_rating:g} stars)."
            )

    return differences


def generate_summary(
    plan_a: PlanDetails,
    plan_b: PlanDetails,
    overall_winner: OverallWinner,
    recommendation: Recommendation,
) -> str:
    if overall_winner.plan == "tie":
        return (
            f"Both {plan_a.name} and {plan_b.name} are closely matched. Your choice should "
            f"depend on your specific healthcare needs and preferences."
        )

    winner, other = (plan_a, plan_b) if overall_winner.plan == "A" else (plan_b, plan_a)
    condition = (
        "you expect minimal healthcare usage"
        if overall_winner.plan == "A"
        else "you prioritize lower monthly costs"
    )
    return (
        f"Based on our analysis, {winner.name} appears to be the better choice with "
        f"{overall_winner.confidence} confidence. {recommendation.reasons[0]} "
        f"However, {other.name} may be preferable if {condition}."
    )


def compare_plans(
    plan_a: PlanDetails,
    plan_b: PlanDetails,
    user_profile: UserHealthProfile | None = None,
) -> PlanComparisonResult:
    """Compare two plans side by side.

    Args:
        plan_a: First plan
        plan_b: Second plan
        user_profile: Optional expected usage; adds a personalized scenario

    Returns:
        PlanComparisonResult with metrics, scenarios, winner and recommendation
    """
    metrics = generate_metrics(plan_a, plan_b)
    scenarios = calculate_scenarios(plan_a, plan_b, user_profile)
    overall_winner = determine_overall_winner(metrics, scenarios, user_profile)
    recommendation = generate_recommendation(plan_a, plan_b, scenarios, user_profile)

    logger.debug(
        "Compared %s vs %s: winner %s (%s)",
        plan_a.name,
        plan_b.name,
        overall_winner.plan,
        overall_winner.confidence,
    )
    return PlanComparisonResult(
        plan_a=plan_a,
        plan_b=plan_b,
        metrics=metrics,
        scenarios=scenarios,
        overall_winner=overall_winner,
        recommendation=recommendation,
        key_differences=identify_key_differences(plan_a, plan_b),
        summary=generate_summary(plan_a, plan_b, overall_winner, recommendation),
    )


def quick_comparison(plan_a: PlanDetails, plan_b: PlanDetails) -> QuickComparison:
    """Condensed comparison: cheaper premium, healthy and sick years, protection."""
    result = compare_plans(plan_a, plan_b)
    healthy = _find_scenario(result.scenarios, "Healthy Year")
    major_event = _find_scenario(result.scenarios, "Major Medical Event")

    return QuickComparison(
        cheaper_monthly=determine_winner(plan_a.monthly_premium, plan_b.monthly_premium, "lower"),
        cheaper_annually_healthy=healthy.winner if healthy else "tie",
        cheaper_annually_sick=major_event.winner if major_event else "tie",
        better_protection=determine_winner(
            plan_a.out_of_pocket_max, plan_b.out_of_pocket_max, "lower"
        ),
        summary=result.summary,
    )
