"""Data models for the break-even calculator."""

from typing import Literal

from pydantic import BaseModel, Field

from coverage_calculators.models import PlanDetails

CheaperPlan = Literal["1", "2", "equal"]
BetterPlan = Literal["1", "2", "always-1", "always-2"]
Confidence = Literal["high", "medium", "low"]


class CostAtUtilization(BaseModel):
    """Both plans' total annual cost at one medical-expense level.

    Attributes:
        medical_expense: Billed medical expenses for the year
        plan1_total_cost: Premium + out-of-pocket for plan 1
        plan2_total_cost: Premium + out-of-pocket for plan 2
        cheaper_plan: '1', '2' or 'equal'
        savings_with_plan1: plan2_total_cost - plan1_total_cost (positive when plan 1 is cheaper)
    """

    medical_expense: int
    plan1_total_cost: int
    plan2_total_cost: int
    cheaper_plan: CheaperPlan
    savings_with_plan1: int


class PlanStrengths(BaseModel):
    plan1: list[str] = Field(default_factory=list)
    plan2: list[str] = Field(default_factory=list)


class BreakEvenAnalysis(BaseModel):
    """Human-readable reading of a break-even comparison."""

    summary: str
    recommended_plan: Literal["1", "2"]
    confidence: Confidence
    insights: list[str] = Field(default_factory=list)
    plan_strengths: PlanStrengths = Field(default_factory=PlanStrengths)


class BreakEvenResult(BaseModel):
    """Output of a full break-even comparison.

    Attributes:
        plan1: First plan compared
        plan2: Second plan compared
        break_even_point: Medical expense where total costs cross, or None if one plan always wins
        better_plan_below_breakeven: Cheaper plan below the crossover ('always-N' when there is none)
        better_plan_above_breakeven: Cheaper plan above the crossover
        cost_curve: Sampled costs for charting
        analysis: Summary, recommendation and insights
    """

    plan1: PlanDetails
    plan2: PlanDetails
    break_even_point: int | None
    better_plan_below_breakeven: BetterPlan
    better_plan_above_breakeven: BetterPlan
    cost_curve: list[CostAtUtilization]
    analysis: BreakEvenAnalysis
