"""Data models for add-on insurance recommendations."""

from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, Field, model_validator

from coverage_calculators.errors import InvalidHousehold, InvalidInputError
from coverage_calculators.models import ValidatedInput

AddOnCategory = Literal[
    "dental",
    "vision",
    "accident",
    "critical-illness",
    "hospital-indemnity",
    "disability",
    "long-term-care",
    "life",
]
Priority = Literal["high", "medium", "low"]
RiskLevel = Literal["very-low", "low", "moderate", "high", "very-high"]
PrescriptionCount = Literal["none", "1-3", "4-or-more"]
MonthlyBudget = Literal["under-300", "300-500", "500-750", "750-1000", "over-1000"]

Age = Annotated[int, Field(ge=0, le=120)]


class AgeRecommendation(BaseModel):
    min_age: int
    max_age: int
    priority: Priority
    probability_threshold: int
    reason_code: str


class AddOnProduct(BaseModel):
    """One supplemental insurance product from the catalog.

    Attributes:
        id: Stable product key
        category: Product category; selects the actuarial curve
        base_cost_per_month: National average monthly cost for one member
        age_recommendations: Age brackets where the product is recommended
    """

    id: str
    name: str
    short_name: str
    description: str
    category: AddOnCategory
    base_cost_per_month: float
    typical_coverage: str
    benefits: list[str] = Field(default_factory=list)
    best_for: list[str] = Field(default_factory=list)
    age_recommendations: list[AgeRecommendation] = Field(default_factory=list)


class CostAdjustments(BaseModel):
    family_discount: float
    bundle_discount: float
    multi_state_premium: float


class PriorityThresholds(BaseModel):
    high: int
    medium: int
    low: int


class AddOnCatalog(BaseModel):
    """Catalog loaded from ``add_on_products.json``."""

    plan_year: int
    products: list[AddOnProduct]
    cost_adjustments: CostAdjustments
    priority_thresholds: PriorityThresholds


class Household(ValidatedInput):
    """Household members and circumstances that drive add-on recommendations.

    Attributes:
        adult_ages: Ages of adults in the household
        child_ages: Ages of children in the household
        has_chronic_conditions: Any member manages a chronic condition
        prescription_count: Ongoing prescriptions across the household
        monthly_budget: Monthly insurance budget bucket
        residence_count: Number of states the household lives in during the year
        has_medicare_eligible: Any member is eligible for Medicare
    """

    error_class: ClassVar[type[InvalidInputError]] = InvalidHousehold

    adult_ages: list[Age] = Field(default_factory=list)
    child_ages: list[Age] = Field(default_factory=list)
    has_chronic_conditions: bool = False
    prescription_count: PrescriptionCount | None = None
    monthly_budget: MonthlyBudget | None = None
    residence_count: int = Field(default=1, ge=1)
    has_medicare_eligible: bool = False

    @model_validator(mode="after")
    def _check_members(self) -> "Household":
        if not self.adult_ages and not self.child_ages:
            raise ValueError("household must include at least one age")
        return self

    @property
    def ages(self) -> list[int]:
        return [*self.adult_ages, *self.child_ages]


class AddOnPreferences(ValidatedInput):
    error_class: ClassVar[type[InvalidInputError]] = InvalidHousehold

    exclude_categories: list[AddOnCategory] = Field(default_factory=list)
    max_monthly_budget: float | None = Field(default=None, ge=0)


class ActuarialResult(BaseModel):
    """Age-based need for one product category.

    Attributes:
        probability_score: Likelihood the coverage is useful (0-100)
        risk_level: Banded probability score
        utilization_rate: Expected annual use of the coverage
        cost_multiplier: Age adjustment applied to the base monthly cost
        reasoning: Plain-language explanation for the age
    """

    probability_score: int
    risk_level: RiskLevel
    utilization_rate: float
    cost_multiplier: float
    reasoning: str


class HouseholdAgeGroup(BaseModel):
    group_name: str
    min_age: int
    max_age: int
    member_count: int
    ages: list[int]


class AddOnRecommendation(BaseModel):
    """A product scored for one household.

    Attributes:
        product: Catalog entry
        priority: high, medium or low from the adjusted probability score
        probability_score: Actuarial score plus household modifiers, capped at 100
        adjusted_cost_per_month: Age-adjusted monthly cost for one member
        household_cost_per_month: Cost for all applicable members after discounts
        applicable_members: Members inside a recommended age bracket (at least 1)
        reasons: Why the product is recommended
        age_group: Household age group the recommendation targets
    """

    product: AddOnProduct
    priority: Priority
    probability_score: int
    adjusted_cost_per_month: int
    household_cost_per_month: int
    applicable_members: int
    reasons: list[str]
    age_group: str


class AddOnAnalysis(BaseModel):
    """Add-on recommendations for a household.

    Attributes:
        recommendations: Products at or above the low threshold, highest priority first
        all_recommendations: Every scored product in the same order
        high_priority: High-priority recommendations
        medium_priority: Medium-priority recommendations
        low_priority: Low-priority recommendations
        total_monthly_high_priority: Household cost of the high-priority products
        total_monthly_all_recommended: Household cost of every recommendation
        within_budget: Recommendations that fit the preferred monthly budget
        household_age_groups: Household members grouped by age bracket
    """

    recommendations: list[AddOnRecommendation]
    all_recommendations: list[AddOnRecommendation]
    high_priority: list[AddOnRecommendation]
    medium_priority: list[AddOnRecommendation]
    low_priority: list[AddOnRecommendation]
    total_monthly_high_priority: int
    total_monthly_all_recommended: int
    within_budget: list[AddOnRecommendation]
    household_age_groups: list[HouseholdAgeGroup]
