"""HSA contribution calculator.

Works out contribution room, payroll tax savings, a recommended
contribution and a multi-year balance projection for a Health Savings
Account paired with a high-deductible plan.

Contribution limits, the catch-up amount, HDHP thresholds and the FICA rate
are read from policy_tables/cy{plan_year}_policy_tables/policy_constants.json.
"""

import logging
import math

from coverage_calculators.formatting import format_currency, round_currency
from coverage_calculators.hsa.models import (
    FSAComparison,
    HDHPEligibility,
    HSAAnalysis,
    HSAContributionLimits,
    HSAInput,
    HSAProjection,
    HSATaxSavings,
    RetirementCostEstimate,
)
from coverage_calculators.models import CoverageType, PolicyConstants
from coverage_calculators.table_loader import DEFAULT_PLAN_YEAR, load_policy_constants

logger = logging.getLogger(__name__)

CATCH_UP_AGE = 55

# Share of income assumed affordable for HSA contributions
AFFORDABLE_INCOME_SHARE = 0.1

# Balance to keep in cash before investing
CASH_CUSHION = 5000

ASSUMED_LIFE_EXPECTANCY = 85

HSA_ADVANTAGES = [
    'Funds roll over year to year (no "use it or lose it")',
    "Account stays with you if you change jobs",
    "Can be invested for long-term growth",
    "Triple tax advantage: deduction, growth, and withdrawals",
    "Can be used for Medicare premiums after 65",
    "Catch-up contributions available at age 55",
]

FSA_ADVANTAGES = [
    "Available with any health plan (not just HDHP)",
    "Full amount available on January 1st",
    "Lower deductible plans often available",
    "Good for predictable, high medical expenses",
]


def calculate_contribution_limits(
    hsa_input: HSAInput, policy: PolicyConstants
) -> HSAContributionLimits:
    limits = policy.hsa_contribution_limits
    base_limit = limits[hsa_input.coverage_type]
    catch_up = limits["catch_up"] if hsa_input.age >= CATCH_UP_AGE else 0.0
    total_limit = base_limit + catch_up

    return HSAContributionLimits(
        base_limit=base_limit,
        catch_up_contribution=catch_up,
        total_limit=total_limit,
        employer_contribution=hsa_input.employer_contribution,
        max_employee_contribution=max(0.0, total_limit - hsa_input.employer_contribution),
    )


def calculate_tax_savings(
    hsa_input: HSAInput, contribution: float, fica_rate: float
) -> HSATaxSavings:
    """Tax saved on a payroll-deducted contribution.

    Args:
        hsa_input: Account holder tax rates
        contribution: Annual employee contribution
        fica_rate: Payroll tax rate avoided by payroll contributions

    Returns:
        HSATaxSavings; effective cost per dollar is 1.0 for a zero contribution
    """
    federal = contribution * hsa_input.federal_tax_rate
    state = contribution * hsa_input.state_tax_rate
    fica = contribution * fica_rate
    total = federal + state + fica

    effective_cost = 1 - total / contribution if contribution > 0 else 1.0

    return HSATaxSavings(
        federal_tax_savings=round_currency(federal),
        state_tax_savings=round_currency(state),
        fica_savings=round_currency(fica),
        total_annual_savings=round_currency(total),
        effective_cost_per_dollar=round(effective_cost, 2),
    )


def calculate_recommended_contribution(
    hsa_input: HSAInput, limits: HSAContributionLimits
) -> int:
    """Recommend an employee contribution.

    Maximizes when 10% of income covers the full limit. Otherwise covers the
    larger of expected expenses and the affordable amount, less the employer
    contribution, within the remaining room.
    """
    affordable = hsa_input.annual_income * AFFORDABLE_INCOME_SHARE

    if affordable >= limits.total_limit:
        return round_currency(limits.max_employee_contribution)

    minimum = max(hsa_input.expected_expenses, limits.employer_contribution)
    recommended = min(
        limits.max_employee_contribution,
        max(minimum, affordable) - limits.employer_contribution,
    )
    return round_currency(max(0.0, recommended))


def generate_projections(hsa_input: HSAInput, annual_contribution: float) -> list[HSAProjection]:
    """Project the balance year by year until retirement.

    Growth is earned on the beginning balance. Expenses grow with healthcare
    inflation from the second year and are paid from the account while funds last.
    """
    projections = []
    balance = hsa_input.current_balance
    expenses = hsa_input.expected_expenses
    contribution = annual_contribution + hsa_input.employer_contribution

    for year in range(1, hsa_input.years_to_retirement + 1):
        beginning = balance
        growth = beginning * hsa_input.expected_return
        if year > 1:
            expenses *= 1 + hsa_input.healthcare_inflation

        expenses_paid = max(0.0, min(beginning + contribution + growth, expenses))
        balance = beginning + contribution + growth - expenses_paid

        projections.append(
            HSAProjection(
                year=year,
                age=hsa_input.age + year,
                beginning_balance=round_currency(beginning),
                contribution=round_currency(contribution),
                investment_growth=round_currency(growth),
                expenses_paid=round_currency(expenses_paid),
                ending_balance=round_currency(balance),
            )
        )

    return projections


def generate_recommendations(
    hsa_input: HSAInput,
    limits: HSAContributionLimits,
    tax_savings: HSATaxSavings,
    policy: PolicyConstants,
) -> list[str]:
    recommendations = []
    catch_up = policy.hsa_contribution_limits["catch_up"]
    min_deductible = policy.hsa_min_deductible[hsa_input.coverage_type]

    if hsa_input.annual_income >= 50000:
        recommendations.append(
            f"Maximize your HSA contribution to {format_currency(limits.total_limit)}/year to get "
            f"the full tax benefit of {format_currency(tax_savings.total_annual_savings)} in annual savings."
        )

    if hsa_input.age >= CATCH_UP_AGE:
        recommendations.append(
            f"You're eligible for the {format_currency(catch_up)} catch-up contribution. "
            f"Take advantage of this additional tax-advantaged savings."
        )
    elif hsa_input.age >= 50:
        recommendations.append(
            f"In {CATCH_UP_AGE - hsa_input.age} years, you'll be eligible for an additional "
            f"{format_currency(catch_up)} catch-up contribution."
        )

    if hsa_input.current_balance < CASH_CUSHION:
        recommendations.append(
            f"Consider building your HSA balance to at least {format_currency(CASH_CUSHION)} before "
            f"investing. Keep some cash for near-term expenses."
        )
    else:
        recommendations.append(
            "With a healthy balance, consider investing HSA funds for long-term growth. "
            "HSA investments grow tax-free."
        )

    if hsa_input.deductible < min_deductible:
        recommendations.append(
            f"Warning: Your deductible ({format_currency(hsa_input.deductible)}) is below the HDHP "
            f"minimum ({format_currency(min_deductible)}). Verify your plan qualifies."
        )

    if hsa_input.federal_tax_rate >= 0.24:
        recommendations.append(
            "At your tax bracket, HSA contributions provide significant tax savings. Consider "
            "maximizing contributions before other investment accounts."
        )

    if hsa_input.state_tax_rate == 0:
        recommendations.append(
            "Note: Some states (CA, NJ) do not recognize HSA tax benefits. Check your state tax laws."
        )

    if hsa_input.expected_expenses < limits.total_limit:
        recommendations.append(
            "Consider paying medical expenses out-of-pocket and letting your HSA grow tax-free. "
            "Save receipts to reimburse yourself years later."
        )

    return recommendations


def calculate_hsa_optimization(
    hsa_input: HSAInput, plan_year: str = DEFAULT_PLAN_YEAR
) -> HSAAnalysis:
    """Analyze HSA contributions for the plan year.

    Args:
        hsa_input: Account holder, tax and plan details
        plan_year: Plan year whose limits and HDHP thresholds apply

    Returns:
        HSAAnalysis with limits, tax savings, projections and recommendations
    """
    policy = load_policy_constants(plan_year)

    limits = calculate_contribution_limits(hsa_input, policy)
    tax_savings = calculate_tax_savings(hsa_input, limits.max_employee_contribution, policy.fica_rate)
    recommended = calculate_recommended_contribution(hsa_input, limits)
    projections = generate_projections(hsa_input, recommended)

    if projections:
        retirement_balance = projections[-1].ending_balance
    else:
        retirement_balance = round_currency(hsa_input.current_balance)

    logger.debug(
        "HSA plan year %s: recommended %d, %d projection years",
        plan_year,
        recommended,
        len(projections),
    )
    return HSAAnalysis(
        limits=limits,
        recommended_contribution=recommended,
        tax_savings=tax_savings,
        catch_up_eligible=hsa_input.age >= CATCH_UP_AGE,
        projections=projections,
        retirement_balance=retirement_balance,
        recommendations=generate_recommendations(hsa_input, limits, tax_savings, policy),
        fsa_comparison=FSAComparison(
            hsa_advantage=list(HSA_ADVANTAGES), fsa_advantage=list(FSA_ADVANTAGES)
        ),
    )


def validate_hdhp_eligibility(
    coverage_type: CoverageType,
    deductible: float,
    out_of_pocket_max: float,
    plan_year: str = DEFAULT_PLAN_YEAR,
) -> HDHPEligibility:
    """Check a deductible/OOP pair against the plan year's HDHP rules."""
    policy = load_policy_constants(plan_year)
    min_deductible = policy.hsa_min_deductible[coverage_type]
    max_oop = policy.hsa_max_out_of_pocket[coverage_type]
    issues = []

    if deductible < min_deductible:
        issues.append(
            f"Deductible ({format_currency(deductible)}) is below the HDHP minimum "
            f"({format_currency(min_deductible)})"
        )

    if out_of_pocket_max > max_oop:
        issues.append(
            f"Out-of-pocket maximum ({format_currency(out_of_pocket_max)}) exceeds the HDHP "
            f"limit ({format_currency(max_oop)})"
        )

    return HDHPEligibility(eligible=not issues, issues=issues)


def calculate_paycheck_contribution(annual_contribution: float, pay_periods_per_year: int) -> float:
    """Per-paycheck contribution, rounded up to the cent."""
    if pay_periods_per_year <= 0:
        raise ValueError("pay_periods_per_year must be greater than 0")
    return math.ceil(annual_contribution / pay_periods_per_year * 100) / 100


def estimate_retirement_healthcare_costs(
    current_age: int,
    retirement_age: int,
    current_annual_costs: float,
    healthcare_inflation: float = 0.05,
) -> RetirementCostEstimate:
    """Inflate today's healthcare costs for each year from retirement to age 85.

    Args:
        current_age: Age today
        retirement_age: First retirement year's age
        current_annual_costs: Healthcare costs in today's dollars
        healthcare_inflation: Annual healthcare inflation as a decimal

    Returns:
        RetirementCostEstimate keyed by age
    """
    yearly: dict[int, int] = {}
    total = 0.0

    for age in range(retirement_age, ASSUMED_LIFE_EXPECTANCY + 1):
        cost = current_annual_costs * (1 + healthcare_inflation) ** (age - current_age)
        yearly[age] = round_currency(cost)
        total += cost

    return RetirementCostEstimate(yearly_estimates=yearly, total_lifetime_cost=round_currency(total))


def calculate_tax_equivalent_yield(
    hsa_yield: float, federal_tax_rate: float, state_tax_rate: float = 0
) -> float:
    """Taxable yield that matches a tax-free HSA yield."""
    return hsa_yield / (1 - (federal_tax_rate + state_tax_rate))
