"""Age-based actuarial curves for add-on insurance.

Each product category maps an age to a probability score (0-100), a risk
band, an expected utilization rate and a cost multiplier. Curves are
piecewise-linear through fixed (age, score) points, or smooth sigmoid and
bell shapes for products whose need rises sharply or peaks in working years.
"""

import math
from typing import Callable

import numpy as np

from coverage_calculators.addons.models import ActuarialResult, AddOnCategory, RiskLevel
from coverage_calculators.formatting import round_currency

MIN_AGE = 0
MAX_AGE = 120

DEFAULT_HOUSEHOLD_AGE = 35

RiskBands = list[tuple[float, RiskLevel]]


def _sigmoid(x: float, midpoint: float, steepness: float) -> float:
    return 1 / (1 + math.exp(-steepness * (x - midpoint)))


def _gaussian(x: float, mean: float, std_dev: float) -> float:
    return math.exp(-((x - mean) ** 2) / (2 * std_dev**2))


def _piecewise(age: float, points: list[tuple[int, int]]) -> float:
    """Linear interpolation through (age, score) points, flat past either end."""
    ages, scores = zip(*points)
    return float(np.interp(age, ages, scores))


def _risk_level(probability: float, bands: RiskBands, floor: RiskLevel) -> RiskLevel:
    for threshold, level in bands:
        if probability >= threshold:
            return level
    return floor


def _result(
    probability: float,
    bands: RiskBands,
    floor: RiskLevel,
    utilization: float,
    cost_multiplier: float,
    reasoning: str,
) -> ActuarialResult:
    return ActuarialResult(
        probability_score=round_currency(probability),
        risk_level=_risk_level(probability, bands, floor),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


def dental_curve(age: float) -> ActuarialResult:
    """High for children (cavities, orthodontics) and seniors, steady in between."""
    probability = _piecewise(
        age, [(0, 85), (5, 95), (12, 98), (18, 75), (30, 70), (50, 75), (65, 90), (80, 95), (120, 95)]
    )

    if age < 18:
        cost_multiplier = 0.8
        reasoning = "High cavity risk and orthodontic needs during childhood development"
    elif age >= 65:
        cost_multiplier = 1.3
        reasoning = "Increased risk of tooth loss, gum disease, and complex dental procedures"
    else:
        cost_multiplier = 1.0
        reasoning = "Regular preventive care and maintenance procedures"

    utilization = 0.8 if age < 18 or age >= 65 else 0.6
    return _result(probability, [(85, "very-high"), (70, "high")], "moderate", utilization, cost_multiplier, reasoning)


def vision_curve(age: float) -> ActuarialResult:
    """Dips in the healthy-vision years, rises from presbyopia onward."""
    probability = _piecewise(
        age, [(0, 60), (8, 75), (18, 55), (30, 45), (40, 60), (50, 75), (60, 85), (70, 95), (120, 95)]
    )

    if age >= 65:
        cost_multiplier = 1.4
    elif age >= 40:
        cost_multiplier = 1.1
    else:
        cost_multiplier = 1.0

    if age < 18:
        reasoning = "Regular vision screening during developmental years"
    elif age >= 65:
        reasoning = "High risk of cataracts, macular degeneration, and glaucoma"
    elif age >= 40:
        reasoning = "Presbyopia and age-related vision changes common after 40"
    else:
        reasoning = "Routine vision correction and eye health monitoring"

    utilization = 0.7 if age >= 40 else 0.4
    return _result(
        probability,
        [(85, "very-high"), (70, "high"), (50, "moderate")],
        "low",
        utilization,
        cost_multiplier,
        reasoning,
    )


def accident_curve(age: float) -> ActuarialResult:
    """Peaks for teens and young drivers, rises again with fall risk."""
    probability = _piecewise(
        age,
        [(0, 70), (3, 85), (10, 90), (16, 95), (25, 88), (35, 60), (50, 55), (65, 70), (75, 85), (90, 95), (120, 95)],
    )

    if age >= 70:
        cost_multiplier = 1.5
    elif 16 <= age <= 25:
        cost_multiplier = 1.2
    else:
        cost_multiplier = 1.0

    if age <= 5:
        reasoning = "High accident risk during early childhood development"
    elif 16 <= age <= 25:
        reasoning = "Peak accident risk from driving, sports, and risky behavior"
    elif age >= 70:
        reasoning = "Increased fall risk and injury severity in older adults"
    else:
        reasoning = "General accident protection for unexpected injuries"

    utilization = 0.15 if age >= 70 or 5 <= age <= 25 else 0.08
    return _result(
        probability,
        [(85, "very-high"), (70, "high"), (55, "moderate")],
        "low",
        utilization,
        cost_multiplier,
        reasoning,
    )


def critical_illness_curve(age: float) -> ActuarialResult:
    """Sigmoid rise around 50 with a boost over the peak-risk years 55-75."""
    probability = _sigmoid(age, 50, 0.08) * 95
    if 55 <= age <= 75:
        probability = min(100, probability + 10)

    if age >= 60:
        cost_multiplier = 2.0
    elif age >= 50:
        cost_multiplier = 1.5
    elif age >= 40:
        cost_multiplier = 1.2
    elif age < 30:
        cost_multiplier = 0.7
    else:
        cost_multiplier = 1.0

    if age < 30:
        reasoning = "Low risk but provides financial protection for rare critical events"
    elif age < 40:
        reasoning = "Early onset critical illness possible; best rates available now"
    elif age < 50:
        reasoning = "Critical illness risk begins to increase significantly after 40"
    elif age < 65:
        reasoning = "High risk period for cancer, heart attack, and stroke"
    else:
        reasoning = "Peak age for critical illness; provides financial security for treatment"

    if age >= 50:
        utilization = 0.03
    elif age >= 40:
        utilization = 0.015
    else:
        utilization = 0.005

    return _result(
        probability,
        [(80, "very-high"), (60, "high"), (35, "moderate"), (15, "low")],
        "very-low",
        utilization,
        cost_multiplier,
        reasoning,
    )


def hospital_indemnity_curve(age: float) -> ActuarialResult:
    probability = _piecewise(
        age, [(0, 55), (5, 40), (18, 35), (40, 40), (50, 55), (60, 70), (70, 85), (80, 95), (120, 98)]
    )

    if age >= 70:
        cost_multiplier = 1.6
    elif age >= 60:
        cost_multiplier = 1.3
    elif age >= 50:
        cost_multiplier = 1.1
    else:
        cost_multiplier = 1.0

    if age >= 70:
        reasoning = "Very high hospitalization risk; provides daily cash benefits"
    elif age >= 50:
        reasoning = "Hospitalization risk increases with chronic conditions"
    elif age < 18:
        reasoning = "Provides coverage for unexpected childhood illnesses and injuries"
    else:
        reasoning = "Supplements health insurance for unexpected hospital stays"

    if age >= 65:
        utilization = 0.25
    elif age >= 50:
        utilization = 0.12
    else:
        utilization = 0.05

    return _result(
        probability,
        [(80, "very-high"), (65, "high"), (45, "moderate")],
        "low",
        utilization,
        cost_multiplier,
        reasoning,
    )


def disability_curve(age: float) -> ActuarialResult:
    """Bell curve over working years; no earned income to protect before 18."""
    if 18 <= age < 65:
        probability = _gaussian(age, 45, 18) * 100
        if 30 <= age <= 55:
            probability = min(100, probability + 15)
    elif age >= 65:
        probability = 15.0
    else:
        probability = 0.0

    if age >= 50:
        cost_multiplier = 1.4
    elif age >= 40:
        cost_multiplier = 1.2
    elif age < 25:
        cost_multiplier = 0.9
    else:
        cost_multiplier = 1.0

    if age < 18:
        reasoning = "Not applicable - no earned income"
    elif age < 25:
        reasoning = "Early career; lower income to protect but good rates available"
    elif age < 40:
        reasoning = "Critical protection during family-building and career-growth years"
    elif age < 55:
        reasoning = "Peak earning years; essential income protection for family"
    elif age < 65:
        reasoning = "Pre-retirement income protection; higher disability risk"
    else:
        reasoning = "Not applicable - retired with no earned income to protect"

    if 40 <= age < 65:
        utilization = 0.04
    elif 25 <= age < 40:
        utilization = 0.02
    else:
        utilization = 0.01

    return _result(
        probability,
        [(80, "very-high"), (60, "high"), (30, "moderate"), (10, "low")],
        "very-low",
        utilization,
        cost_multiplier,
        reasoning,
    )


def long_term_care_curve(age: float) -> ActuarialResult:
    """Sigmoid rise around 60 with a rising floor from 50."""
    probability = _sigmoid(age, 60, 0.10) * 95
    if 50 <= age < 60:
        probability = max(probability, 65 + (age - 50))
    elif 60 <= age < 70:
        probability = max(probability, 75 + (age - 60))
    elif age >= 70:
        probability = max(probability, 85 + min(10, age - 70))

    if age >= 70:
        cost_multiplier = 3.0
    elif age >= 65:
        cost_multiplier = 2.2
    elif age >= 60:
        cost_multiplier = 1.6
    elif age >= 55:
        cost_multiplier = 1.3
    elif age >= 50:
        cost_multiplier = 1.0
    else:
        cost_multiplier = 0.8

    if age < 40:
        reasoning = "Very low need; wait until age 50 for better actuarial fit"
    elif age < 50:
        reasoning = "Planning ahead possible but premiums higher for years before use"
    elif age < 60:
        reasoning = "Optimal age to purchase - balance of cost and future need"
    elif age < 70:
        reasoning = "Important to secure coverage before rates become prohibitive"
    elif age < 80:
        reasoning = "High need but very expensive; may be difficult to qualify"
    else:
        reasoning = "Critical need but likely uninsurable; consider Medicaid planning"

    if age >= 65:
        utilization = 0.7
    elif age >= 50:
        utilization = 0.5
    else:
        utilization = 0.3

    return _result(
        probability,
        [(80, "very-high"), (60, "high"), (40, "moderate"), (15, "low")],
        "very-low",
        utilization,
        cost_multiplier,
        reasoning,
    )


def term_life_curve(age: float) -> ActuarialResult:
    """Bell curve over the family years, cut back once term coverage lapses."""
    probability = _gaussian(age, 40, 15) * 100
    if 30 <= age <= 50:
        probability = min(100, probability + 10)
    if age >= 70:
        probability = max(15, probability - 40)

    if age >= 60:
        cost_multiplier = 2.5
    elif age >= 50:
        cost_multiplier = 1.6
    elif age >= 40:
        cost_multiplier = 1.2
    elif age < 30:
        cost_multiplier = 0.7
    else:
        cost_multiplier = 1.0

    if age < 25:
        reasoning = "Low need unless dependents; excellent rates for future planning"
    elif age < 40:
        reasoning = "Critical protection for growing families and mortgage obligations"
    elif age < 55:
        reasoning = "Essential coverage for family income and college funding"
    elif age < 65:
        reasoning = "Income replacement until retirement; rates increase significantly"
    elif age < 75:
        reasoning = "Limited need post-retirement; consider permanent life if needed"
    else:
        reasoning = "Term insurance typically not cost-effective; consider final expense"

    if age >= 60:
        utilization = 0.015
    elif age >= 50:
        utilization = 0.008
    elif age >= 40:
        utilization = 0.004
    else:
        utilization = 0.001

    return _result(
        probability,
        [(80, "very-high"), (60, "high"), (35, "moderate")],
        "low",
        utilization,
        cost_multiplier,
        reasoning,
    )


CURVES: dict[str, Callable[[float], ActuarialResult]] = {
    "dental": dental_curve,
    "vision": vision_curve,
    "accident": accident_curve,
    "critical-illness": critical_illness_curve,
    "hospital-indemnity": hospital_indemnity_curve,
    "disability": disability_curve,
    "long-term-care": long_term_care_curve,
    "life": term_life_curve,
}


def calculate_actuarial_probability(age: float, category: AddOnCategory) -> ActuarialResult:
    """Score one person's need for a product category.

    Args:
        age: Age in years; clamped to 0-120
        category: Add-on product category

    Returns:
        ActuarialResult for the clamped age
    """
    clamped = max(MIN_AGE, min(MAX_AGE, age))
    return CURVES[category](clamped)


def calculate_household_actuarial_probability(ages: list[int], category: AddOnCategory) -> ActuarialResult:
    """Highest-need member's result (the first one on ties).

    An empty household is scored as a single 35-year-old.
    """
    if not ages:
        return calculate_actuarial_probability(DEFAULT_HOUSEHOLD_AGE, category)

    results = [calculate_actuarial_probability(age, category) for age in ages]
    return max(results, key=lambda result: result.probability_score)


def get_age_adjusted_cost(base_cost: float, age: float, category: AddOnCategory) -> int:
    """Base monthly cost scaled by the category's age multiplier, rounded."""
    multiplier = calculate_actuarial_probability(age, category).cost_multiplier
    return round_currency(base_cost * multiplier)
