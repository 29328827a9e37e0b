"""COBRA continuation coverage analysis."""

from coverage_calculators.cobra.calculator import (
    analyze_cobra,
    calculate_cobra_drop_date,
    cobra_decision_flowchart,
    compare_cobra_to_marketplace,
    estimate_cobra_premium,
)
from coverage_calculators.cobra.models import (
    COBRAAnalysis,
    COBRACostComparison,
    COBRADropDate,
    COBRAInput,
    CostRange,
)

__all__ = [
    "COBRAAnalysis",
    "COBRACostComparison",
    "COBRADropDate",
    "COBRAInput",
    "CostRange",
    "analyze_cobra",
    "calculate_cobra_drop_date",
    "cobra_decision_flowchart",
    "compare_cobra_to_marketplace",
    "estimate_cobra_premium",
]
