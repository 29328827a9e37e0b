"""Add-on insurance recommendations.

Scores every product in the plan year's add-on catalog for a household:
1. Groups members into age brackets
2. Takes the highest actuarial probability across members
3. Adjusts it for chronic conditions, children, prescriptions, budget,
   multiple residences and Medicare eligibility
4. Prices the product for the applicable members with family and
   multi-state adjustments
5. Sorts by priority, then score

The catalog, discounts and priority thresholds come from
policy_tables/cy{plan_year}_policy_tables/add_on_products.json.
"""

import logging

from coverage_calculators.addons.actuarial import (
    calculate_household_actuarial_probability,
    get_age_adjusted_cost,
)
from coverage_calculators.addons.models import (
    AddOnAnalysis,
    AddOnCatalog,
    AddOnPreferences,
    AddOnProduct,
    AddOnRecommendation,
    Household,
    HouseholdAgeGroup,
    Priority,
)
from coverage_calculators.formatting import round_currency
from coverage_calculators.table_loader import DEFAULT_PLAN_YEAR, load_add_on_tables

logger = logging.getLogger(__name__)

AGE_BRACKETS = [
    ("Children (0-17)", 0, 17),
    ("Young Adults (18-30)", 18, 30),
    ("Adults (31-40)", 31, 40),
    ("Adults (41-50)", 41, 50),
    ("Pre-Retirement (51-64)", 51, 64),
    ("Seniors (65-74)", 65, 74),
    ("Seniors (75+)", 75, 120),
]

RECOMMENDATION_REASONS = {
    "YOUNG_ADULT": "Young adults benefit from accident protection",
    "FAMILY_PLANNING": "Common need for families planning for the future",
    "MID_CAREER": "Peak earning years require income protection",
    "PRE_RETIREMENT": "Important to secure coverage before retirement",
    "SENIOR_HEALTH": "Higher likelihood of critical health events",
    "MEDICARE_GAPS": "Covers expenses not included in Medicare",
    "CHILDREN_PRESENT": "Recommended for households with children",
    "DEPENDENTS": "Important protection for dependents",
    "PRIMARY_EARNER": "Critical for primary household earners",
    "CHRONIC_CONDITIONS": "Beneficial for those with chronic conditions",
    "PREVENTIVE_CARE": "Essential preventive care coverage",
    "HOSPITAL_RISK": "Higher risk of hospitalization in this age group",
    "INCOME_REPLACEMENT": "Replaces lost income during disability",
    "CATASTROPHIC_PROTECTION": "Protection against catastrophic costs",
    "OUT_OF_POCKET": "Covers out-of-pocket medical expenses",
}

DEFAULT_REASON_CODE = "PREVENTIVE_CARE"

# Midpoint of each monthly budget bucket
BUDGET_MIDPOINTS = {
    "under-300": 250,
    "300-500": 400,
    "500-750": 625,
    "750-1000": 875,
    "over-1000": 1200,
}

TIGHT_BUDGET = 500
EXPENSIVE_ADD_ON = 100

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}

BUNDLE_SIZE = 3


def load_catalog(plan_year: str = DEFAULT_PLAN_YEAR) -> AddOnCatalog:
    return AddOnCatalog(**load_add_on_tables(plan_year))


def analyze_household_age_groups(household: Household) -> list[HouseholdAgeGroup]:
    """Group household members into fixed age brackets, skipping empty ones."""
    groups = []
    for name, min_age, max_age in AGE_BRACKETS:
        ages = [age for age in household.ages if min_age <= age <= max_age]
        if ages:
            groups.append(
                HouseholdAgeGroup(
                    group_name=name,
                    min_age=min_age,
                    max_age=max_age,
                    member_count=len(ages),
                    ages=ages,
                )
            )
    return groups


def calculate_modifiers(product: AddOnProduct, household: Household) -> tuple[int, list[str]]:
    """Score adjustment and reasons from household circumstances."""
    adjustment = 0
    reasons: list[str] = []
    category = product.category

    if household.has_chronic_conditions and category in ("critical-illness", "hospital-indemnity", "disability"):
        adjustment += 10
        reasons.append("Beneficial for those with chronic conditions")

    if household.child_ages and category in ("dental", "vision"):
        adjustment += 10
        reasons.append("Highly recommended for families with children")

    if household.prescription_count == "4-or-more" and category == "critical-illness":
        adjustment += 5
        reasons.append("Additional protection for ongoing medical needs")

    budget = BUDGET_MIDPOINTS.get(household.monthly_budget) if household.monthly_budget else None
    if budget is not None and budget < TIGHT_BUDGET and product.base_cost_per_month > EXPENSIVE_ADD_ON:
        adjustment -= 10
        reasons.append("Consider budget constraints")

    if household.residence_count > 1 and category in ("accident", "hospital-indemnity"):
        adjustment += 5
        reasons.append("Additional protection for frequent travelers")

    if household.has_medicare_eligible and category in ("dental", "vision", "hospital-indemnity"):
        adjustment += 10
        reasons.append("Fills important gaps in Medicare coverage")

    return adjustment, reasons


def count_applicable_members(product: AddOnProduct, household: Household, low_threshold: int) -> int:
    """Members inside a recommended age bracket, never fewer than 1."""
    count = 0
    for age in household.ages:
        if any(
            rec.min_age <= age <= rec.max_age and rec.probability_threshold >= low_threshold
            for rec in product.age_recommendations
        ):
            count += 1
    return max(1, count)


def _reason_code(product: AddOnProduct, household: Household) -> str:
    """Reason code of the strongest age bracket any member falls in."""
    matches = [
        rec
        for rec in product.age_recommendations
        if any(rec.min_age <= age <= rec.max_age for age in household.ages)
    ]
    if not matches:
        return DEFAULT_REASON_CODE
    return max(matches, key=lambda rec: rec.probability_threshold).reason_code


def generate_reasons(
    product: AddOnProduct,
    reason_code: str,
    modifier_reasons: list[str],
    age_groups: list[HouseholdAgeGroup],
    actuarial_reasoning: str | None = None,
) -> list[str]:
    reasons = []
    if actuarial_reasoning:
        reasons.append(actuarial_reasoning)

    base_reason = RECOMMENDATION_REASONS.get(reason_code)
    if base_reason and not (
        actuarial_reasoning and base_reason[:20].lower() in actuarial_reasoning.lower()
    ):
        reasons.append(base_reason)

    if age_groups:
        reasons.append("Household composition: " + ", ".join(group.group_name for group in age_groups))

    reasons.extend(modifier_reasons)

    if product.category in ("dental", "vision"):
        reasons.append("Typically not covered by standard health insurance")

    return reasons


def determine_age_group(age_groups: list[HouseholdAgeGroup], product: AddOnProduct) -> str:
    """Household age group overlapping the product's strongest age bracket."""
    if not age_groups:
        return "All household members"

    top_group = age_groups[0]
    top_score = 0
    for group in age_groups:
        for rec in product.age_recommendations:
            overlaps = rec.min_age <= group.max_age and rec.max_age >= group.min_age
            if overlaps and rec.probability_threshold > top_score:
                top_score = rec.probability_threshold
                top_group = group

    return top_group.group_name


def _priority(score: float, catalog: AddOnCatalog) -> Priority:
    thresholds = catalog.priority_thresholds
    if score >= thresholds.high:
        return "high"
    if score >= thresholds.medium:
        return "medium"
    return "low"


def calculate_recommendation(
    product: AddOnProduct,
    household: Household,
    age_groups: list[HouseholdAgeGroup],
    catalog: AddOnCatalog,
) -> AddOnRecommendation:
    """Score and price one product for the household.

    Args:
        product: Catalog entry
        household: Household members and circumstances
        age_groups: Output of analyze_household_age_groups
        catalog: Discounts and priority thresholds

    Returns:
        AddOnRecommendation with priority, score, costs and reasons
    """
    actuarial = calculate_household_actuarial_probability(household.ages, product.category)
    adjustment, modifier_reasons = calculate_modifiers(product, household)
    final_score = min(100, actuarial.probability_score + adjustment)

    # Price at the oldest member's age
    adjusted_cost = get_age_adjusted_cost(product.base_cost_per_month, max(household.ages), product.category)

    applicable = count_applicable_members(product, household, catalog.priority_thresholds.low)
    household_cost: float = adjusted_cost * applicable
    if applicable >= 2:
        household_cost *= catalog.cost_adjustments.family_discount
    if household.residence_count > 1:
        household_cost *= catalog.cost_adjustments.multi_state_premium

    return AddOnRecommendation(
        product=product,
        priority=_priority(final_score, catalog),
        probability_score=round_currency(final_score),
        adjusted_cost_per_month=adjusted_cost,
        household_cost_per_month=round_currency(household_cost),
        applicable_members=applicable,
        reasons=generate_reasons(
            product,
            _reason_code(product, household),
            modifier_reasons,
            age_groups,
            actuarial.reasoning,
        ),
        age_group=determine_age_group(age_groups, product),
    )


def _sort_key(recommendation: AddOnRecommendation) -> tuple[int, int]:
    return (PRIORITY_ORDER[recommendation.priority], recommendation.probability_score)


def filter_by_budget(recommendations: list[AddOnRecommendation], max_budget: float) -> list[AddOnRecommendation]:
    """Take recommendations in order, skipping any that would exceed the budget."""
    selected = []
    total = 0
    for recommendation in recommendations:
        if total + recommendation.household_cost_per_month <= max_budget:
            selected.append(recommendation)
            total += recommendation.household_cost_per_month
    return selected


def generate_add_on_recommendations(
    household: Household,
    preferences: AddOnPreferences | None = None,
    plan_year: str = DEFAULT_PLAN_YEAR,
) -> AddOnAnalysis:
    """Recommend supplemental insurance for a household.

    Args:
        household: Household members and circumstances
        preferences: Excluded categories and an optional monthly budget
        plan_year: Plan year whose catalog applies

    Returns:
        AddOnAnalysis with recommendations grouped by priority and their totals
    """
    preferences = preferences or AddOnPreferences()
    catalog = load_catalog(plan_year)
    age_groups = analyze_household_age_groups(household)

    all_recommendations = [
        calculate_recommendation(product, household, age_groups, catalog)
        for product in catalog.products
        if product.category not in preferences.exclude_categories
    ]
    all_recommendations.sort(key=_sort_key, reverse=True)

    low_threshold = catalog.priority_thresholds.low
    recommendations = [r for r in all_recommendations if r.probability_score >= low_threshold]
    high_priority = [r for r in recommendations if r.priority == "high"]

    if preferences.max_monthly_budget is None:
        within_budget = list(recommendations)
    else:
        within_budget = filter_by_budget(recommendations, preferences.max_monthly_budget)

    logger.debug(
        "Add-ons for %d members: %d of %d products recommended",
        len(household.ages),
        len(recommendations),
        len(all_recommendations),
    )
    return AddOnAnalysis(
        recommendations=recommendations,
        all_recommendations=all_recommendations,
        high_priority=high_priority,
        medium_priority=[r for r in recommendations if r.priority == "medium"],
        low_priority=[r for r in recommendations if r.priority == "low"],
        total_monthly_high_priority=sum(r.household_cost_per_month for r in high_priority),
        total_monthly_all_recommended=sum(r.household_cost_per_month for r in recommendations),
        within_budget=within_budget,
        household_age_groups=age_groups,
    )


def recommendations_by_priority(analysis: AddOnAnalysis, priority: Priority) -> list[AddOnRecommendation]:
    return [r for r in analysis.recommendations if r.priority == priority]


def calculate_bundle_discount(
    selected: list[AddOnRecommendation], plan_year: str = DEFAULT_PLAN_YEAR
) -> float:
    """Price multiplier for a set of add-ons; three or more earn the bundle discount."""
    if len(selected) >= BUNDLE_SIZE:
        return load_catalog(plan_year).cost_adjustments.bundle_discount
    return 1.0


def calculate_total_add_on_cost(
    selected: list[AddOnRecommendation], plan_year: str = DEFAULT_PLAN_YEAR
) -> int:
    """Monthly household cost of the selected add-ons after any bundle discount."""
    subtotal = sum(r.household_cost_per_month for r in selected)
    return round_currency(subtotal * calculate_bundle_discount(selected, plan_year))
