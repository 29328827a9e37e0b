"""Data models for the utilization scorer."""

from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from coverage_calculators.errors import InvalidHealthProfile, InvalidInputError
from coverage_calculators.models import ValidatedInput

DoctorVisits = Literal["0-2", "3-5", "6-10", "10+"]
SpecialistVisits = Literal["none", "1-3", "monthly-or-more"]
ERVisits = Literal["none", "1-2", "3+"]
MedicationCost = Literal["under-50", "50-200", "200-500", "500-1000", "over-1000"]
UtilizationLevel = Literal["minimal", "low", "moderate", "high", "very-high"]


class HealthProfile(ValidatedInput):
    """Self-reported healthcare usage for one household member.

    Every field is optional; a missing answer adds no points.

    Attributes:
        doctor_visits_per_year: Primary care visit bucket
        specialist_visits_per_year: Specialist visit bucket
        er_visits_per_year: Emergency room visit bucket
        has_chronic_conditions: Whether any chronic conditions are managed
        chronic_conditions: Names of the managed conditions
        monthly_medication_cost: Monthly prescription spend bucket
        takes_specialty_meds: Biologics, injectables or other specialty drugs
        planned_procedures: Surgery or procedure planned this year
    """

    error_class: ClassVar[type[InvalidInputError]] = InvalidHealthProfile

    doctor_visits_per_year: DoctorVisits | None = None
    specialist_visits_per_year: SpecialistVisits | None = None
    er_visits_per_year: ERVisits | None = None
    has_chronic_conditions: bool = False
    chronic_conditions: list[str] = Field(default_factory=list)
    monthly_medication_cost: MedicationCost | None = None
    takes_specialty_meds: bool = False
    planned_procedures: bool = False


class UtilizationScore(BaseModel):
    """Output from utilization scoring.

    Attributes:
        score: Additive usage score from 0 to 100
        level: Usage category derived from the score
        expected_annual_claims: Estimated medical spending for the year (excluding premiums)
        recommended_deductible: Deductible level that fits the usage
        recommended_plan_type: Plan structure that fits the usage
        reasoning: Explanation for each scored answer, in scoring order
    """

    score: int = Field(ge=0, le=100)
    level: UtilizationLevel
    expected_annual_claims: float
    recommended_deductible: Literal["high", "medium", "low"]
    recommended_plan_type: Literal["HDHP", "PPO", "HMO"]
    reasoning: list[str] = Field(default_factory=list)
