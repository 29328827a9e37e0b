"""Break-even calculator.

Prices two plans across the medical-expense range and locates the spending
level where their total annual costs cross.
"""

from coverage_calculators.breakeven.calculator import (
    analyze_break_even,
    annual_cost,
    compare_break_even,
    create_plan_from_tier,
    find_break_even_point,
    generate_cost_curve,
    out_of_pocket_cost,
    quick_compare,
)
from coverage_calculators.breakeven.models import (
    BreakEvenAnalysis,
    BreakEvenResult,
    CostAtUtilization,
    PlanStrengths,
)

__all__ = [
    "BreakEvenAnalysis",
    "BreakEvenResult",
    "CostAtUtilization",
    "PlanStrengths",
    "analyze_break_even",
    "annual_cost",
    "compare_break_even",
    "create_plan_from_tier",
    "find_break_even_point",
    "generate_cost_curve",
    "out_of_pocket_cost",
    "quick_compare",
]
