"""Supplemental (add-on) insurance recommendations by household age."""

from coverage_calculators.addons.actuarial import (
    calculate_actuarial_probability,
    calculate_household_actuarial_probability,
    get_age_adjusted_cost,
)
from coverage_calculators.addons.models import (
    AddOnAnalysis,
    AddOnPreferences,
    AddOnRecommendation,
    Household,
)
from coverage_calculators.addons.recommender import (
    calculate_bundle_discount,
    calculate_total_add_on_cost,
    filter_by_budget,
    generate_add_on_recommendations,
    load_catalog,
    recommendations_by_priority,
)

__all__ = [
    "AddOnAnalysis",
    "AddOnPreferences",
    "AddOnRecommendation",
    "Household",
    "calculate_actuarial_probability",
    "calculate_bundle_discount",
    "calculate_household_actuarial_probability",
    "calculate_total_add_on_cost",
    "filter_by_budget",
    "generate_add_on_recommendations",
    "get_age_adjusted_cost",
    "load_catalog",
    "recommendations_by_priority",
]
