"""Healthcare utilization scorer.

Turns self-reported usage into a 0-100 score, a utilization level, an
expected-claims estimate and plan-structure recommendations.
"""

from coverage_calculators.utilization.models import HealthProfile, UtilizationScore
from coverage_calculators.utilization.scorer import (
    UtilizationScorer,
    calculate_utilization_score,
    estimate_total_cost_of_care,
    get_recommended_metal_level,
    get_utilization_cost_multiplier,
    get_utilization_level,
)

__all__ = [
    "HealthProfile",
    "UtilizationScore",
    "UtilizationScorer",
    "calculate_utilization_score",
    "estimate_total_cost_of_care",
    "get_recommended_metal_level",
    "get_utilization_cost_multiplier",
    "get_utilization_level",
]
