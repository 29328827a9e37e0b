"""HSA contribution and tax benefit projections."""

from coverage_calculators.hsa.calculator import (
    calculate_hsa_optimization,
    calculate_paycheck_contribution,
    calculate_tax_equivalent_yield,
    estimate_retirement_healthcare_costs,
    validate_hdhp_eligibility,
)
from coverage_calculators.hsa.models import HDHPEligibility, HSAAnalysis, HSAInput

__all__ = [
    "HDHPEligibility",
    "HSAAnalysis",
    "HSAInput",
    "calculate_hsa_optimization",
    "calculate_paycheck_contribution",
    "calculate_tax_equivalent_yield",
    "estimate_retirement_healthcare_costs",
    "validate_hdhp_eligibility",
]
