"""Monte Carlo simulation of annual out-of-pocket cost risk."""

from coverage_calculators.simulations.models import (
    HistogramBucket,
    MonteCarloAnalysis,
    MonteCarloInput,
    MonteCarloInterpretation,
    MonteCarloPlanComparison,
    MonteCarloResult,
    Percentiles,
)
from coverage_calculators.simulations.monte_carlo import (
    compare_plans_with_monte_carlo,
    generate_histogram_data,
    generate_monte_carlo_analysis,
    get_risk_level,
    interpret_results,
    run_monte_carlo,
    simulate_plan_costs,
)

__all__ = [
    "HistogramBucket",
    "MonteCarloAnalysis",
    "MonteCarloInput",
    "MonteCarloInterpretation",
    "MonteCarloPlanComparison",
    "MonteCarloResult",
    "Percentiles",
    "compare_plans_with_monte_carlo",
    "generate_histogram_data",
    "generate_monte_carlo_analysis",
    "get_risk_level",
    "interpret_results",
    "run_monte_carlo",
    "simulate_plan_costs",
]
