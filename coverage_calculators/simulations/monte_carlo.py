"""Monte Carlo simulation of one year of medical costs.

This module estimates out-of-pocket cost risk for a plan:
1. Draws annual medical costs from a lognormal distribution whose median is
   the expected cost (mu = ln(base_cost), shape sigma)
2. Applies the plan's deductible, coinsurance and out-of-pocket cap to each draw
3. Summarizes the post-insurance distribution (mean, median, percentiles, risk)
4. Interprets the figures and buckets the draws into a histogram

Every entry point accepts a numpy Generator so runs are reproducible.
Without one, ``numpy.random.default_rng(input.seed)`` is used.
"""

import logging
import math
import time

import numpy as np

from coverage_calculators.breakeven.calculator import find_break_even_point
from coverage_calculators.errors import InvalidPlanParameters
from coverage_calculators.formatting import format_currency, round_currency
from coverage_calculators.models import PlanDetails
from coverage_calculators.simulations.models import (
    HistogramBucket,
    MonteCarloAnalysis,
    MonteCarloInput,
    MonteCarloInterpretation,
    MonteCarloPlanComparison,
    MonteCarloResult,
    Percentiles,
    RiskLevel,
)
from coverage_calculators.table_loader import (
    DEFAULT_PLAN_YEAR,
    load_policy_constants,
    load_tier_defaults,
)

logger = logging.getLogger(__name__)

PERCENTILES = (5, 10, 25, 50, 75, 90, 95, 99)

RISK_DESCRIPTIONS = {
    "low": "Your healthcare cost risk is low.",
    "moderate": "Your healthcare cost risk is moderate.",
    "high": "Your healthcare cost risk is elevated.",
    "very-high": "Your healthcare cost risk is significant.",
}


def _get_rng(sim_input: MonteCarloInput, rng: np.random.Generator | None) -> np.random.Generator:
    if rng is not None:
        return rng
    return np.random.default_rng(sim_input.seed)


def _apply_cost_sharing(medical_costs: np.ndarray, sim_input: MonteCarloInput) -> np.ndarray:
    """Vectorized out-of-pocket cost for an array of annual medical costs."""
    deductible = sim_input.deductible
    out_of_pocket = np.minimum(medical_costs, deductible) + (
        np.maximum(medical_costs - deductible, 0.0) * sim_input.coinsurance
    )
    return np.minimum(out_of_pocket, sim_input.out_of_pocket_max)


def _simulate(
    sim_input: MonteCarloInput, rng: np.random.Generator | None
) -> tuple[np.ndarray, np.ndarray]:
    """Draw medical costs and their post-insurance outcomes."""
    generator = _get_rng(sim_input, rng)
    medical_costs = generator.lognormal(
        mean=math.log(sim_input.base_cost),
        sigma=sim_input.sigma,
        size=sim_input.iterations,
    )
    return medical_costs, _apply_cost_sharing(medical_costs, sim_input)


def _summarize(
    sim_input: MonteCarloInput,
    medical_costs: np.ndarray,
    outcomes: np.ndarray,
    execution_time_ms: float,
) -> MonteCarloResult:
    iterations = len(outcomes)
    values = np.percentile(outcomes, PERCENTILES, method="lower")
    percentiles = Percentiles(
        **{f"p{p}": round_currency(float(value)) for p, value in zip(PERCENTILES, values)}
    )

    exceeds_deductible = int(np.count_nonzero(medical_costs > sim_input.deductible))
    exceeds_oop_max = int(np.count_nonzero(medical_costs > sim_input.out_of_pocket_max))

    return MonteCarloResult(
        median=percentiles.p50,
        mean=round_currency(float(np.mean(outcomes))),
        standard_deviation=round_currency(float(np.std(outcomes))),
        percentiles=percentiles,
        probability_of_exceeding_deductible=round(exceeds_deductible / iterations * 100, 1),
        probability_of_hitting_oop_max=round(exceeds_oop_max / iterations * 100, 1),
        expected_value_at_risk=percentiles.p95,
        simulation_count=iterations,
        execution_time_ms=round(execution_time_ms, 3),
    )


def run_monte_carlo(
    sim_input: MonteCarloInput, rng: np.random.Generator | None = None
) -> MonteCarloResult:
    """Simulate a year of medical costs and summarize out-of-pocket exposure.

    Args:
        sim_input: Simulation parameters
        rng: Random generator (defaults to one seeded from ``sim_input.seed``)

    Returns:
        MonteCarloResult with distribution statistics and probabilities
    """
    start = time.perf_counter()
    medical_costs, outcomes = _simulate(sim_input, rng)
    elapsed_ms = (time.perf_counter() - start) * 1000

    logger.debug("Ran %d Monte Carlo iterations in %.2f ms", sim_input.iterations, elapsed_ms)
    return _summarize(sim_input, medical_costs, outcomes, elapsed_ms)


def get_risk_level(result: MonteCarloResult) -> RiskLevel:
    """Classify cost risk from the out-of-pocket-max and deductible probabilities."""
    if result.probability_of_hitting_oop_max >= 30:
        return "very-high"
    if result.probability_of_hitting_oop_max >= 15:
        return "high"
    if result.probability_of_exceeding_deductible >= 50:
        return "moderate"
    return "low"


def interpret_results(
    result: MonteCarloResult,
    sim_input: MonteCarloInput,
    hsa_min_deductible: float,
) -> MonteCarloInterpretation:
    """Turn simulation statistics into a risk level, summary and advice.

    Args:
        result: Output of run_monte_carlo
        sim_input: Parameters the result was produced from
        hsa_min_deductible: Plan-year minimum HDHP deductible, used for the HSA suggestion

    Returns:
        MonteCarloInterpretation
    """
    risk_level = get_risk_level(result)
    percentiles = result.percentiles
    insights: list[str] = []
    recommendations: list[str] = []

    insights.append(f"Your expected out-of-pocket cost is {format_currency(result.mean)} per year")

    if result.probability_of_exceeding_deductible > 50:
        insights.append(
            f"There's a {result.probability_of_exceeding_deductible:g}% chance you'll exceed your deductible"
        )

    if result.probability_of_hitting_oop_max > 10:
        insights.append(
            f"There's a {result.probability_of_hitting_oop_max:g}% chance of reaching your "
            f"out-of-pocket maximum"
        )

    insights.append(
        f"Your costs could range from {format_currency(percentiles.p10)} to "
        f"{format_currency(percentiles.p90)} in most scenarios (80% confidence)"
    )

    if risk_level in ("very-high", "high"):
        recommendations.append("Consider a plan with a lower out-of-pocket maximum")
        recommendations.append(
            f"Build an emergency health fund of at least {format_currency(percentiles.p95)}"
        )

    if result.probability_of_exceeding_deductible > 70:
        recommendations.append("A higher premium plan with lower deductible may save money overall")

    if result.standard_deviation > result.mean * 0.5:
        recommendations.append("Your costs have high variability - consider supplemental insurance")

    if sim_input.deductible >= hsa_min_deductible:
        recommendations.append("Consider opening an HSA to save pre-tax dollars for healthcare")

    summary = (
        f"{RISK_DESCRIPTIONS[risk_level]} Based on {result.simulation_count:,} simulations, "
        f"you can expect to pay between {format_currency(percentiles.p25)} and "
        f"{format_currency(percentiles.p75)} in out-of-pocket costs (50% confidence), "
        f"with a median of {format_currency(result.median)}. "
        f"There's a {result.probability_of_hitting_oop_max:g}% chance of reaching your "
        f"{format_currency(sim_input.out_of_pocket_max)} out-of-pocket maximum."
    )

    return MonteCarloInterpretation(
        risk_level=risk_level,
        summary=summary,
        insights=insights,
        recommendations=recommendations,
    )


def _largest_remainder_percentages(counts: np.ndarray) -> list[int]:
    """Convert bucket counts to whole percentages that sum to exactly 100."""
    total = int(counts.sum())
    if total == 0:
        return [0] * len(counts)

    shares = counts * 100 / total
    floors = np.floor(shares).astype(int)
    shortfall = 100 - int(floors.sum())

    # Stable sort keeps lower buckets first among equal remainders
    order = np.argsort(-(shares - floors), kind="stable")
    for index in order[:shortfall]:
        floors[index] += 1
    return [int(value) for value in floors]


def generate_histogram_data(
    outcomes: np.ndarray,
    out_of_pocket_max: float,
    bucket_count: int = 5,
) -> list[HistogramBucket]:
    """Bucket simulated out-of-pocket costs over ``[0, out_of_pocket_max]``.

    Args:
        outcomes: Simulated post-insurance costs
        out_of_pocket_max: Upper bound of the last bucket
        bucket_count: Number of equal-width buckets

    Returns:
        Buckets in ascending order with percentages summing to 100
    """
    if bucket_count < 1:
        raise ValueError("bucket_count must be at least 1")

    upper = out_of_pocket_max if out_of_pocket_max > 0 else 1.0
    counts, edges = np.histogram(outcomes, bins=bucket_count, range=(0.0, upper))
    percentages = _largest_remainder_percentages(counts)

    buckets = []
    for i in range(bucket_count):
        low = round_currency(float(edges[i]))
        high = round_currency(float(edges[i + 1]))
        buckets.append(
            HistogramBucket(
                label=f"{format_currency(low)}-{format_currency(high)}",
                min=low,
                max=high,
                percentage=percentages[i],
            )
        )
    return buckets


def generate_monte_carlo_analysis(
    sim_input: MonteCarloInput,
    rng: np.random.Generator | None = None,
    bucket_count: int = 5,
    plan_year: str = DEFAULT_PLAN_YEAR,
) -> MonteCarloAnalysis:
    """Run a simulation and add interpretation and histogram data.

    Args:
        sim_input: Simulation parameters
        rng: Random generator (defaults to one seeded from ``sim_input.seed``)
        bucket_count: Number of histogram buckets
        plan_year: Plan year whose HSA threshold drives the HSA suggestion

    Returns:
        MonteCarloAnalysis
    """
    policy = load_policy_constants(plan_year)

    start = time.perf_counter()
    medical_costs, outcomes = _simulate(sim_input, rng)
    elapsed_ms = (time.perf_counter() - start) * 1000

    result = _summarize(sim_input, medical_costs, outcomes, elapsed_ms)
    interpretation = interpret_results(
        result, sim_input, policy.hsa_min_deductible["individual"]
    )

    return MonteCarloAnalysis(
        result=result,
        interpretation=interpretation,
        histogram_data=generate_histogram_data(outcomes, sim_input.out_of_pocket_max, bucket_count),
        input_parameters=sim_input,
    )


def simulate_plan_costs(
    expected_medical_costs: float,
    tier: str,
    rng: np.random.Generator | None = None,
    iterations: int = 1000,
    plan_year: str = DEFAULT_PLAN_YEAR,
) -> MonteCarloAnalysis:
    """Simulate a metal tier's default cost sharing.

    Args:
        expected_medical_costs: Expected annual medical costs
        tier: Metal tier name (case-insensitive, e.g. "gold" or "Gold")
        rng: Random generator
        iterations: Number of simulated years
        plan_year: Plan year whose tier table to use

    Returns:
        MonteCarloAnalysis for the tier
    """
    tiers = load_tier_defaults(plan_year)
    matches = [name for name in tiers if name.lower() == tier.lower()]
    if not matches:
        raise InvalidPlanParameters(
            f"Unknown metal tier '{tier}'. Expected one of: {', '.join(tiers)}",
            [f"tier: unknown value '{tier}'"],
        )

    defaults = tiers[matches[0]]
    sim_input = MonteCarloInput(
        base_cost=expected_medical_costs,
        deductible=defaults["deductible"],
        out_of_pocket_max=defaults["out_of_pocket_max"],
        coinsurance=defaults["coinsurance"],
        iterations=iterations,
    )
    return generate_monte_carlo_analysis(sim_input, rng, plan_year=plan_year)


def compare_plans_with_monte_carlo(
    expected_medical_costs: float,
    plan1: PlanDetails,
    plan2: PlanDetails,
    rng: np.random.Generator | None = None,
    iterations: int = 1000,
    plan_year: str = DEFAULT_PLAN_YEAR,
) -> MonteCarloPlanComparison:
    """Simulate two plans against the same medical-cost draws.

    Both plans are run from generators seeded identically, so differences come
    from cost sharing alone.

    Args:
        expected_medical_costs: Expected annual medical costs
        plan1: First plan
        plan2: Second plan
        rng: Random generator used to seed both simulations
        iterations: Number of simulated years
        plan_year: Plan year for the interpretation thresholds

    Returns:
        MonteCarloPlanComparison
    """
    generator = rng if rng is not None else np.random.default_rng()
    shared_seed = int(generator.integers(0, 2**63 - 1))

    analyses = []
    for plan in (plan1, plan2):
        sim_input = MonteCarloInput(
            base_cost=expected_medical_costs,
            deductible=plan.deductible,
            out_of_pocket_max=plan.out_of_pocket_max,
            coinsurance=plan.coinsurance,
            iterations=iterations,
            seed=shared_seed,
        )
        analyses.append(generate_monte_carlo_analysis(sim_input, plan_year=plan_year))

    plan1_analysis, plan2_analysis = analyses
    premium1 = plan1.annual_premium
    premium2 = plan2.annual_premium

    def cheaper_at(percentile: str) -> str:
        cost1 = getattr(plan1_analysis.result.percentiles, percentile) + premium1
        cost2 = getattr(plan2_analysis.result.percentiles, percentile) + premium2
        return plan1.name if cost1 < cost2 else plan2.name

    difference = (plan1_analysis.result.mean + premium1) - (plan2_analysis.result.mean + premium2)

    return MonteCarloPlanComparison(
        plan1_analysis=plan1_analysis,
        plan2_analysis=plan2_analysis,
        expected_total_cost_difference=round_currency(difference),
        better_plan_for_low_utilization=cheaper_at("p25"),
        better_plan_for_high_utilization=cheaper_at("p90"),
        break_even_point=find_break_even_point(plan1, plan2),
    )
