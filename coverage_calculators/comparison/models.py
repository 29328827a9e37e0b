"""Data models for the plan comparison engine."""

from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from coverage_calculators.errors import InvalidHealthProfile, InvalidInputError
from coverage_calculators.models import PlanDetails, ValidatedInput

Winner = Literal["A", "B", "tie"]
MetricCategory = Literal["cost", "coverage", "network", "value"]


class UserHealthProfile(ValidatedInput):
    """Expected healthcare usage for the coming year.

    Attributes:
        expected_doctor_visits: Primary care visits per year
        expected_specialist_visits: Specialist visits per year
        expected_prescriptions: Prescriptions filled per month
        avg_prescription_tier: Typical formulary tier (1 = generic, 2-4 = brand/specialty)
        expected_er_visits: Emergency room visits per year
        has_planned_procedures: Whether a procedure is planned this year
        planned_procedure_cost: Billed cost of the planned procedure
        risk_tolerance: Comfort with large unexpected bills
        prioritizes_lower_premium: Prefers a lower monthly premium
        needs_specific_providers: Must keep particular doctors
        has_chronic_conditions: Manages one or more chronic conditions
    """

    error_class: ClassVar[type[InvalidInputError]] = InvalidHealthProfile

    expected_doctor_visits: int = Field(default=0, ge=0)
    expected_specialist_visits: int = Field(default=0, ge=0)
    expected_prescriptions: int = Field(default=0, ge=0)
    avg_prescription_tier: int = Field(default=1, ge=1, le=4)
    expected_er_visits: int = Field(default=0, ge=0)
    has_planned_procedures: bool = False
    planned_procedure_cost: float | None = Field(default=None, ge=0)
    risk_tolerance: Literal["low", "medium", "high"] = "medium"
    prioritizes_lower_premium: bool = False
    needs_specific_providers: bool = False
    has_chronic_conditions: bool = False


class ComparisonMetric(BaseModel):
    """One side-by-side metric.

    Attributes:
        name: Metric name
        category: cost, coverage, network or value
        plan_a_value: Display value for plan A
        plan_b_value: Display value for plan B
        plan_a_raw: Numeric value for plan A, when the metric is numeric
        plan_b_raw: Numeric value for plan B, when the metric is numeric
        winner: Plan that is better on this metric
        difference: Plan A relative to plan B (e.g. "$50 more/month")
        importance: Weight used when picking the overall winner
        tooltip: Short explanation of the metric
    """

    name: str
    category: MetricCategory
    plan_a_value: str
    plan_b_value: str
    plan_a_raw: float | None = None
    plan_b_raw: float | None = None
    winner: Winner
    difference: str | None = None
    importance: int = Field(ge=1, le=5)
    tooltip: str | None = None


class PlanAmounts(BaseModel):
    plan_a: float
    plan_b: float


class ScenarioBreakdown(BaseModel):
    premiums: PlanAmounts
    out_of_pocket: PlanAmounts


class CostScenario(BaseModel):
    """Total annual cost of both plans under one usage pattern.

    ``difference`` is plan A minus plan B, so it is positive when plan A costs more.
    """

    name: str
    description: str
    plan_a_cost: float
    plan_b_cost: float
    difference: float
    winner: Winner
    breakdown: ScenarioBreakdown


class OverallWinner(BaseModel):
    plan: Winner
    confidence: Literal["high", "medium", "low"]
    reasoning: str


class Recommendation(BaseModel):
    recommended_plan: Literal["A", "B"]
    reasons: list[str] = Field(default_factory=list)
    caveats: list[str] = Field(default_factory=list)


class PlanComparisonResult(BaseModel):
    plan_a: PlanDetails
    plan_b: PlanDetails
    metrics: list[ComparisonMetric]
    scenarios: list[CostScenario]
    overall_winner: OverallWinner
    recommendation: Recommendation
    key_differences: list[str] = Field(default_factory=list)
    summary: str


class QuickComparison(BaseModel):
    """Condensed comparison.

    Attributes:
        cheaper_monthly: Plan with the lower monthly premium
        cheaper_annually_healthy: Winner of the healthy-year scenario
        cheaper_annually_sick: Winner of the major-medical-event scenario
        better_protection: Plan with the lower out-of-pocket maximum
        summary: Summary of the full comparison
    """

    cheaper_monthly: Winner
    cheaper_annually_healthy: Winner
    cheaper_annually_sick: Winner
    better_protection: Winner
    summary: str
