"""Data models for the HSA contribution calculator."""

from pydantic import BaseModel, Field

from coverage_calculators.models import CoverageType, ValidatedInput


class HSAInput(ValidatedInput):
    """Account holder and plan details for HSA planning.

    Attributes:
        coverage_type: individual or family HDHP coverage
        age: Age of the account holder
        current_balance: Current HSA balance
        annual_income: Annual household income
        federal_tax_rate: Marginal federal rate as a decimal (0.22 = 22%)
        state_tax_rate: Marginal state rate as a decimal
        employer_contribution: Annual employer HSA contribution
        expected_expenses: Expected annual healthcare expenses paid from the HSA
        monthly_premium: HDHP monthly premium
        deductible: HDHP deductible
        years_to_retirement: Number of years to project
        expected_return: Annual investment return as a decimal
        healthcare_inflation: Annual growth of healthcare expenses as a decimal
    """

    coverage_type: CoverageType = "individual"
    age: int = Field(ge=0, le=120)
    current_balance: float = Field(default=0, ge=0)
    annual_income: float = Field(ge=0)
    federal_tax_rate: float = Field(ge=0, lt=1)
    state_tax_rate: float = Field(default=0, ge=0, lt=1)
    employer_contribution: float = Field(default=0, ge=0)
    expected_expenses: float = Field(default=0, ge=0)
    monthly_premium: float = Field(default=0, ge=0)
    deductible: float = Field(ge=0)
    years_to_retirement: int = Field(default=20, ge=0, le=80)
    expected_return: float = Field(default=0.07, ge=-1, le=1)
    healthcare_inflation: float = Field(default=0.05, ge=-1, le=1)


class HSAContributionLimits(BaseModel):
    """Annual contribution room.

    Attributes:
        base_limit: Limit for the coverage type
        catch_up_contribution: Extra limit at age 55+
        total_limit: base_limit + catch_up_contribution
        employer_contribution: Portion already used by the employer
        max_employee_contribution: Remaining room for the employee
    """

    base_limit: float
    catch_up_contribution: float
    total_limit: float
    employer_contribution: float
    max_employee_contribution: float


class HSATaxSavings(BaseModel):
    federal_tax_savings: int
    state_tax_savings: int
    fica_savings: int
    total_annual_savings: int
    effective_cost_per_dollar: float


class HSAProjection(BaseModel):
    year: int
    age: int
    beginning_balance: int
    contribution: int
    investment_growth: int
    expenses_paid: int
    ending_balance: int


class FSAComparison(BaseModel):
    hsa_advantage: list[str]
    fsa_advantage: list[str]


class HSAAnalysis(BaseModel):
    """Output from HSA optimization.

    Attributes:
        limits: Contribution limits for the plan year
        recommended_contribution: Suggested annual employee contribution
        tax_savings: Tax savings from contributing the maximum employee amount
        catch_up_eligible: Account holder is 55 or older
        projections: Year-by-year balance projection
        retirement_balance: Balance at the end of the projection
        recommendations: Contribution and investing suggestions
        fsa_comparison: HSA vs FSA trade-offs
    """

    limits: HSAContributionLimits
    recommended_contribution: int
    tax_savings: HSATaxSavings
    catch_up_eligible: bool
    projections: list[HSAProjection]
    retirement_balance: int
    recommendations: list[str]
    fsa_comparison: FSAComparison


class HDHPEligibility(BaseModel):
    eligible: bool
    issues: list[str] = Field(default_factory=list)


class RetirementCostEstimate(BaseModel):
    yearly_estimates: dict[int, int]
    total_lifetime_cost: int
