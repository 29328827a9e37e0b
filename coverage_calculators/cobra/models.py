"""Data models for the COBRA continuation analysis."""

import datetime
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, model_validator

from coverage_calculators.errors import InvalidCOBRAInput, InvalidInputError
from coverage_calculators.models import ValidatedInput

CheaperCoverage = Literal["cobra", "marketplace", "equal"]


class CostRange(BaseModel):
    """Low and high estimate of a monthly cost."""

    low: float = Field(ge=0)
    high: float = Field(ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "CostRange":
        if self.low > self.high:
            raise ValueError("low must not exceed high")
        return self

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2


class COBRAInput(ValidatedInput):
    """Coverage situation after losing employer coverage.

    Attributes:
        current_monthly_cost: Employee share of the employer premium before the job loss
        months_since_job_loss: Whole months elapsed since coverage ended
        has_preexisting_conditions: Ongoing treatment or prescriptions under the current plan
        alternative_cost: Monthly premium range of comparable marketplace plans
        full_monthly_premium: Employer plus employee premium, when known. Without it
            the COBRA premium is estimated from the employee share.
    """

    error_class: ClassVar[type[InvalidInputError]] = InvalidCOBRAInput

    current_monthly_cost: float = Field(ge=0)
    months_since_job_loss: int = Field(ge=0)
    has_preexisting_conditions: bool = False
    alternative_cost: CostRange
    full_monthly_premium: float | None = Field(default=None, ge=0)


class COBRAAnalysis(BaseModel):
    """Whether continuing employer coverage through COBRA is worth it.

    Attributes:
        is_worth_it: COBRA is recommended over switching
        months_remaining: COBRA months left out of 18
        estimated_monthly_cost: Estimated COBRA premium range
        pros: Reasons to keep COBRA
        cons: Reasons to drop COBRA
        alternatives: Other coverage options
        recommendation: Plain-language recommendation
        warnings: Deadline and enrollment warnings
    """

    is_worth_it: bool
    months_remaining: int
    estimated_monthly_cost: CostRange
    pros: list[str]
    cons: list[str]
    alternatives: list[str]
    recommendation: str
    warnings: list[str] = Field(default_factory=list)


class DecisionStep(BaseModel):
    question: str
    yes_path: str
    no_path: str


class COBRADropDate(BaseModel):
    drop_date: datetime.date
    reasoning: str


class COBRACostComparison(BaseModel):
    """Cost of the remaining COBRA months against a marketplace plan.

    Attributes:
        months: Months compared (the remaining COBRA months)
        medical_expense: Billed medical expenses assumed over those months
        cobra_monthly_premium: Full premium plus the administrative fee
        cobra_cost: COBRA premiums plus employer-plan out-of-pocket
        marketplace_cost: Marketplace premiums plus marketplace out-of-pocket
        cheaper: Coverage with the lower total
        savings: Absolute difference between the two totals
    """

    months: int
    medical_expense: float
    cobra_monthly_premium: float
    cobra_cost: int
    marketplace_cost: int
    cheaper: CheaperCoverage
    savings: int
