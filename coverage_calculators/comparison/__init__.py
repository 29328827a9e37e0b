"""Side-by-side plan comparison with usage scenarios and a recommendation."""

from coverage_calculators.comparison.models import (
    ComparisonMetric,
    CostScenario,
    OverallWinner,
    PlanComparisonResult,
    QuickComparison,
    Recommendation,
    UserHealthProfile,
)
from coverage_calculators.comparison.plan_comparison import (
    calculate_out_of_pocket,
    calculate_scenarios,
    compare_plans,
    generate_metrics,
    identify_key_differences,
    quick_comparison,
)

__all__ = [
    "ComparisonMetric",
    "CostScenario",
    "OverallWinner",
    "PlanComparisonResult",
    "QuickComparison",
    "Recommendation",
    "UserHealthProfile",
    "calculate_out_of_pocket",
    "calculate_scenarios",
    "compare_plans",
    "generate_metrics",
    "identify_key_differences",
    "quick_comparison",
]
