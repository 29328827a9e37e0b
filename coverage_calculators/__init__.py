"""Coverage calculators.

Health-insurance cost modeling: plan cost and break-even analysis,
utilization scoring, Monte Carlo cost risk, side-by-side plan comparison,
HSA projections, COBRA continuation analysis and add-on insurance
recommendations. Policy-year constants are loaded from
policy_tables/cy{plan_year}_policy_tables/.
"""

from coverage_calculators.errors import (
    InvalidCOBRAInput,
    InvalidHealthProfile,
    InvalidHousehold,
    InvalidInputError,
    InvalidPlanParameters,
    InvalidSimulationInput,
)
from coverage_calculators.models import PlanDetails

__all__ = [
    "InvalidCOBRAInput",
    "InvalidHealthProfile",
    "InvalidHousehold",
    "InvalidInputError",
    "InvalidPlanParameters",
    "InvalidSimulationInput",
    "PlanDetails",
]
