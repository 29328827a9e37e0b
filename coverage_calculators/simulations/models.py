"""Data models for Monte Carlo cost simulation."""

from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from coverage_calculators.errors import InvalidInputError, InvalidSimulationInput
from coverage_calculators.models import ValidatedInput

RiskLevel = Literal["low", "moderate", "high", "very-high"]

MAX_ITERATIONS = 100_000


class MonteCarloInput(ValidatedInput):
    """Parameters for one simulated year of medical costs.

    Attributes:
        base_cost: Expected annual medical costs; the median of the simulated distribution
        deductible: Plan deductible
        out_of_pocket_max: Plan out-of-pocket maximum
        coinsurance: Share of cost paid after the deductible
        iterations: Number of simulated years
        sigma: Shape parameter of the lognormal distribution
        seed: Seed for the default generator when no generator is passed in
    """

    error_class: ClassVar[type[InvalidInputError]] = InvalidSimulationInput

    base_cost: float = Field(gt=0)
    deductible: float = Field(ge=0)
    out_of_pocket_max: float = Field(ge=0)
    coinsurance: float = Field(default=0.2, ge=0, le=1)
    iterations: int = Field(default=1000, ge=1, le=MAX_ITERATIONS)
    sigma: float = Field(default=0.5, gt=0)
    seed: int | None = None


class Percentiles(BaseModel):
    p5: int
    p10: int
    p25: int
    p50: int
    p75: int
    p90: int
    p95: int
    p99: int


class MonteCarloResult(BaseModel):
    """Summary statistics of simulated post-insurance costs.

    Currency figures are rounded to whole units. Probabilities are
    percentages from 0 to 100.

    Attributes:
        median: Median out-of-pocket cost
        mean: Mean out-of-pocket cost
        standard_deviation: Population standard deviation of out-of-pocket cost
        percentiles: Out-of-pocket cost percentiles (lower-rank method)
        probability_of_exceeding_deductible: Share of years whose medical costs exceed the deductible
        probability_of_hitting_oop_max: Share of years whose medical costs exceed the out-of-pocket maximum
        expected_value_at_risk: 95th percentile out-of-pocket cost
        simulation_count: Number of simulated years
        execution_time_ms: Wall-clock simulation time
    """

    median: int
    mean: int
    standard_deviation: int
    percentiles: Percentiles
    probability_of_exceeding_deductible: float = Field(ge=0, le=100)
    probability_of_hitting_oop_max: float = Field(ge=0, le=100)
    expected_value_at_risk: int
    simulation_count: int
    execution_time_ms: float


class MonteCarloInterpretation(BaseModel):
    risk_level: RiskLevel
    summary: str
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class HistogramBucket(BaseModel):
    """Share of simulated years with out-of-pocket cost in ``[min, max]``."""

    label: str
    min: int
    max: int
    percentage: int = Field(ge=0, le=100)


class MonteCarloAnalysis(BaseModel):
    result: MonteCarloResult
    interpretation: MonteCarloInterpretation
    histogram_data: list[HistogramBucket]
    input_parameters: MonteCarloInput


class MonteCarloPlanComparison(BaseModel):
    """Two plans simulated against the same medical-cost draws.

    Attributes:
        plan1_analysis: Simulation of the first plan
        plan2_analysis: Simulation of the second plan
        expected_total_cost_difference: Plan 1 minus plan 2 (mean out-of-pocket + annual premium)
        better_plan_for_low_utilization: Plan name with lower total cost at the 25th percentile
        better_plan_for_high_utilization: Plan name with lower total cost at the 90th percentile
        break_even_point: Medical expense where total costs cross, or None
    """

    plan1_analysis: MonteCarloAnalysis
    plan2_analysis: MonteCarloAnalysis
    expected_total_cost_difference: int
    better_plan_for_low_utilization: str
    better_plan_for_high_utilization: str
    break_even_point: int | None
