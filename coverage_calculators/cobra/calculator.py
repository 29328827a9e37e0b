"""COBRA continuation analysis.

Helps someone who lost employer coverage decide whether to keep the same
plan through COBRA or move to a marketplace plan:
1. Estimates the COBRA premium (full premium + 2% administrative fee)
2. Applies the short-term, continuity-of-care and price rules
3. Prices the remaining COBRA months against a marketplace plan with the
   plan cost model
4. Works out when to drop COBRA at the next open enrollment
"""

import calendar
import datetime
import logging

from coverage_calculators.breakeven.calculator import out_of_pocket_cost
from coverage_calculators.cobra.models import (
    CheaperCoverage,
    COBRAAnalysis,
    COBRACostComparison,
    COBRADropDate,
    COBRAInput,
    CostRange,
    DecisionStep,
)
from coverage_calculators.formatting import format_currency, round_currency
from coverage_calculators.models import PlanDetails

logger = logging.getLogger(__name__)

COBRA_MONTHS = 18
ADMIN_FEE = 0.02

# Employee share to full premium, used when the full premium is unknown
EMPLOYEE_SHARE_MULTIPLIER = 3.5

ESTIMATE_SPREAD = 0.1

# COBRA must be this much cheaper than the low marketplace estimate
AFFORDABLE_RATIO = 0.8

SHORT_TERM_MONTHS = 3

PROS = [
    "Same coverage and doctors as before",
    "No waiting period or pre-existing condition exclusions",
    "Familiar plan - you know how it works",
    "Good for short-term coverage while job searching",
]

ALTERNATIVES = [
    "ACA Marketplace plans (income-based subsidies available)",
    "Spouse's employer plan (special enrollment period)",
    "Short-term health insurance (limited coverage)",
    "Medicaid (if income qualifies)",
]

DECISION_FLOWCHART = [
    DecisionStep(
        question="Do you have a new job with health insurance starting soon (within 1-3 months)?",
        yes_path="Consider COBRA for short-term continuity",
        no_path="Continue to next question",
    ),
    DecisionStep(
        question="Are you in active treatment for a serious condition?",
        yes_path="COBRA may be worth it to continue current care",
        no_path="Continue to next question",
    ),
    DecisionStep(
        question="Would you qualify for marketplace subsidies (income under $60k individual/$120k family)?",
        yes_path="Marketplace likely cheaper - switch as soon as possible",
        no_path="Continue to next question",
    ),
    DecisionStep(
        question="Can you afford $1,500-2,000/month for COBRA?",
        yes_path="COBRA possible but expensive - compare marketplace plans",
        no_path="COBRA not affordable - explore marketplace and Medicaid",
    ),
]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def months_remaining(months_since_job_loss: int) -> int:
    return max(0, COBRA_MONTHS - months_since_job_loss)


def estimate_cobra_premium(current_monthly_cost: float, full_monthly_premium: float | None = None) -> float:
    """Monthly COBRA premium.

    The full premium plus the administrative fee when it is known, otherwise
    a multiple of the employee share.
    """
    if full_monthly_premium is not None:
        return full_monthly_premium * (1 + ADMIN_FEE)
    return current_monthly_cost * EMPLOYEE_SHARE_MULTIPLIER


def analyze_cobra(cobra_input: COBRAInput) -> COBRAAnalysis:
    """Decide whether COBRA continuation is worth keeping.

    Rules are checked in order: a short remaining window (1-3 months),
    ongoing treatment, then COBRA being well under the marketplace price.
    Otherwise the marketplace is recommended.

    Args:
        cobra_input: Current premium, elapsed months and marketplace price range

    Returns:
        COBRAAnalysis with the recommendation, pros/cons and deadline warnings
    """
    remaining = months_remaining(cobra_input.months_since_job_loss)
    estimate = estimate_cobra_premium(cobra_input.current_monthly_cost, cobra_input.full_monthly_premium)
    estimated_cost = CostRange(low=estimate * (1 - ESTIMATE_SPREAD), high=estimate * (1 + ESTIMATE_SPREAD))
    alternative = cobra_input.alternative_cost

    cons = [
        f"Very expensive - typically {format_currency(round_currency(estimate))}/month or more",
        "No employer contribution - you pay 100% + 2% admin fee",
        f"Only available for {_plural(remaining, 'more month')}",
        "Premiums can increase annually",
    ]
    warnings: list[str] = []

    if 1 <= remaining <= SHORT_TERM_MONTHS:
        is_worth_it = True
        recommendation = (
            f"COBRA may be worth it for {_plural(remaining, 'month')} if you're between jobs or "
            f"waiting for new employer coverage. Short-term is easier than switching plans."
        )
    elif cobra_input.has_preexisting_conditions and remaining > 0:
        is_worth_it = True
        recommendation = (
            "COBRA recommended if you have ongoing treatment or prescriptions that work well with "
            "your current plan. Continuity of care is valuable."
        )
        warnings.append("Consider switching to ACA plan during next Open Enrollment to save money")
    elif remaining > 0 and estimated_cost.high < alternative.low * AFFORDABLE_RATIO:
        is_worth_it = True
        recommendation = (
            "COBRA is unusually affordable compared to alternatives - this is rare but worth "
            "taking advantage of."
        )
    else:
        is_worth_it = False
        monthly_savings = abs(estimate - alternative.midpoint)
        recommendation = (
            f"COBRA is NOT recommended. At ~{format_currency(round_currency(estimate))}/month, you'll "
            f"save {format_currency(round_currency(monthly_savings))}/month by switching to an ACA "
            f"Marketplace plan with similar coverage."
        )
        cons.append(
            f"Could save {format_currency(round_currency(monthly_savings * 12))}/year with marketplace plan"
        )

    if 0 < remaining <= SHORT_TERM_MONTHS:
        warnings.append(
            f"URGENT: Only {_plural(remaining, 'month')} of COBRA remaining - enroll in alternative "
            f"coverage now"
        )
    if remaining == 0:
        warnings.append("COBRA has expired - must find alternative coverage immediately")

    logger.debug("COBRA: %d months remaining, estimate %.2f, worth it %s", remaining, estimate, is_worth_it)
    return COBRAAnalysis(
        is_worth_it=is_worth_it,
        months_remaining=remaining,
        estimated_monthly_cost=estimated_cost,
        pros=list(PROS),
        cons=cons,
        alternatives=list(ALTERNATIVES),
        recommendation=recommendation,
        warnings=warnings,
    )


def cobra_decision_flowchart() -> list[DecisionStep]:
    """Yes/no questions for the keep-or-drop COBRA decision, in order."""
    return [step.model_copy() for step in DECISION_FLOWCHART]


def _add_months(start: datetime.date, months: int) -> datetime.date:
    """Same day ``months`` later, clamped to the end of a shorter month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return datetime.date(year, month, day)


def calculate_cobra_drop_date(
    job_loss_date: datetime.date, next_open_enrollment: datetime.date
) -> COBRADropDate:
    """When to leave COBRA for a marketplace plan.

    Drop at open enrollment if it comes before the 18-month COBRA window
    closes, otherwise stay until COBRA ends and use the special enrollment
    period.
    """
    cobra_end = _add_months(job_loss_date, COBRA_MONTHS)

    if next_open_enrollment < cobra_end:
        return COBRADropDate(
            drop_date=next_open_enrollment,
            reasoning=(
                f"Drop COBRA during Open Enrollment ({next_open_enrollment.isoformat()}) to switch "
                f"to a marketplace plan and save money."
            ),
        )

    return COBRADropDate(
        drop_date=cobra_end,
        reasoning=(
            f"COBRA coverage ends {cobra_end.isoformat()}. You'll have a Special Enrollment "
            f"Period to switch to marketplace coverage at that time."
        ),
    )


def compare_cobra_to_marketplace(
    employer_plan: PlanDetails,
    full_monthly_premium: float,
    marketplace_plan: PlanDetails,
    medical_expense: float,
    months_since_job_loss: int = 0,
) -> COBRACostComparison:
    """Price the rest of the COBRA window against a marketplace plan.

    Each side pays its monthly premium for the remaining COBRA months plus
    its out-of-pocket share of ``medical_expense``. COBRA keeps the employer
    plan's deductible, coinsurance and out-of-pocket maximum. The
    marketplace plan is priced at its net (after-subsidy) premium.

    Args:
        employer_plan: Plan being continued (its premium field is ignored)
        full_monthly_premium: Employer plus employee premium before the fee
        marketplace_plan: Replacement plan
        medical_expense: Billed medical expenses over the remaining months
        months_since_job_loss: Months of COBRA already used

    Returns:
        COBRACostComparison with both totals and the cheaper option

    Raises:
        ValueError: If the COBRA window has ended or the premium is negative
    """
    if full_monthly_premium < 0:
        raise ValueError("full_monthly_premium must not be negative")

    months = months_remaining(months_since_job_loss)
    if months == 0:
        raise ValueError("COBRA coverage has ended; nothing to compare")

    cobra_premium = estimate_cobra_premium(0, full_monthly_premium)
    cobra_cost = cobra_premium * months + out_of_pocket_cost(employer_plan, medical_expense)
    marketplace_cost = marketplace_plan.net_monthly_premium * months + out_of_pocket_cost(
        marketplace_plan, medical_expense
    )

    cheaper: CheaperCoverage
    if cobra_cost < marketplace_cost:
        cheaper = "cobra"
    elif marketplace_cost < cobra_cost:
        cheaper = "marketplace"
    else:
        cheaper = "equal"

    return COBRACostComparison(
        months=months,
        medical_expense=max(0.0, medical_expense),
        cobra_monthly_premium=round(cobra_premium, 2),
        cobra_cost=round_currency(cobra_cost),
        marketplace_cost=round_currency(marketplace_cost),
        cheaper=cheaper,
        savings=round_currency(abs(cobra_cost - marketplace_cost)),
    )
