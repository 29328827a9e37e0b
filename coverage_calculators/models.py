"""Shared data models for coverage calculators."""

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from coverage_calculators.errors import InvalidInputError, InvalidPlanParameters

MetalTier = Literal["Bronze", "Silver", "Gold", "Platinum", "HDHP"]
PlanType = Literal["HMO", "PPO", "EPO", "POS", "HDHP"]
CoverageType = Literal["individual", "family"]


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into ``"field: message"`` strings."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


class ValidatedInput(BaseModel):
    """Frozen input model that reports bad values as a typed InvalidInputError.

    Subclasses set ``error_class`` to the error raised when construction fails.
    """

    model_config = ConfigDict(frozen=True)

    error_class: ClassVar[type[InvalidInputError]] = InvalidInputError

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            messages = format_validation_errors(exc)
            raise self.error_class(
                f"Invalid {type(self).__name__}: " + "; ".join(messages), messages
            ) from exc


class PlanDetails(ValidatedInput):
    """Cost structure of one insurance plan.

    The break-even solver only reads the five required cost fields. The
    comparison engine additionally reads the optional copay, network and
    quality fields when both plans supply them.

    Attributes:
        name: Display name
        monthly_premium: Monthly premium before any subsidy
        deductible: Annual individual deductible
        coinsurance: Share of cost paid after the deductible (0.2 = 20%)
        out_of_pocket_max: Annual individual out-of-pocket maximum
        metal_tier: Bronze, Silver, Gold, Platinum or HDHP
        plan_type: Network type (HMO, PPO, EPO, POS, HDHP)
        monthly_premium_after_subsidy: Net premium after premium tax credits
        quality_rating: Star rating from 1 to 5
    """

    error_class: ClassVar[type[InvalidInputError]] = InvalidPlanParameters

    name: str
    monthly_premium: float = Field(ge=0)
    deductible: float = Field(ge=0)
    coinsurance: float = Field(ge=0, le=1)
    out_of_pocket_max: float = Field(ge=0)

    id: str | None = None
    issuer: str | None = None
    metal_tier: MetalTier | None = None
    plan_type: PlanType | None = None
    monthly_premium_after_subsidy: float | None = Field(default=None, ge=0)
    family_deductible: float | None = Field(default=None, ge=0)
    family_out_of_pocket_max: float | None = Field(default=None, ge=0)

    primary_care_copay: float | None = Field(default=None, ge=0)
    specialist_copay: float | None = Field(default=None, ge=0)
    generic_drug_copay: float | None = Field(default=None, ge=0)
    brand_drug_copay: float | None = Field(default=None, ge=0)
    emergency_room_copay: float | None = Field(default=None, ge=0)
    urgent_care_copay: float | None = Field(default=None, ge=0)

    hsa_eligible: bool | None = None
    has_national_network: bool | None = None
    network_size: int | None = Field(default=None, ge=0)
    quality_rating: float | None = Field(default=None, ge=1, le=5)
    additional_benefits: list[str] = Field(default_factory=list)

    @property
    def annual_premium(self) -> float:
        return self.monthly_premium * 12

    @property
    def net_monthly_premium(self) -> float:
        """Premium the member actually pays each month."""
        if self.monthly_premium_after_subsidy is not None:
            return self.monthly_premium_after_subsidy
        return self.monthly_premium


class PolicyConstants(BaseModel):
    """Plan-year policy values loaded from ``policy_constants.json``.

    Attributes:
        plan_year: Calendar year the values apply to
        typical_annual_spending: Reference medical spend used to pick a side of the break-even point
        premium_difference_threshold: Monthly premium gap worth calling out
        hsa_min_deductible: Minimum HDHP deductible by coverage type
        hsa_max_out_of_pocket: Maximum HDHP out-of-pocket by coverage type
        hsa_contribution_limits: Annual HSA limits (individual, family, catch_up)
        fica_rate: Payroll tax rate saved on payroll HSA contributions
    """

    model_config = ConfigDict(frozen=True)

    plan_year: int
    typical_annual_spending: float
    premium_difference_threshold: float
    hsa_min_deductible: dict[str, float]
    hsa_max_out_of_pocket: dict[str, float]
    hsa_contribution_limits: dict[str, float]
    fica_rate: float

    def is_hsa_compatible(
        self,
        deductible: float,
        out_of_pocket_max: float,
        coverage_type: CoverageType = "individual",
    ) -> bool:
        """Whether a deductible/OOP pair satisfies the HDHP rules for HSA eligibility."""
        return (
            deductible >= self.hsa_min_deductible[coverage_type]
            and out_of_pocket_max <= self.hsa_max_out_of_pocket[coverage_type]
        )
