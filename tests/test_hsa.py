"""Tests for the HSA contribution calculator."""

import pytest

from coverage_calculators import InvalidInputError
from coverage_calculators.hsa import (
    HSAInput,
    calculate_hsa_optimization,
    calculate_paycheck_contribution,
    calculate_tax_equivalent_yield,
    estimate_retirement_healthcare_costs,
    validate_hdhp_eligibility,
)
from coverage_calculators.hsa.calculator import calculate_tax_savings


def make_input(**overrides):
    params = {
        "age": 40,
        "annual_income": 80000,
        "federal_tax_rate": 0.22,
        "state_tax_rate": 0.04,
        "employer_contribution": 500,
        "expected_expenses": 1000,
        "deductible": 3000,
        "years_to_retirement": 3,
    }
    params.update(overrides)
    return HSAInput(**params)


class TestHSAInput:
    """Tests for HSAInput validation."""

    def test_defaults(self):
        """Test default projection assumptions."""
        hsa_input = HSAInput(age=30, annual_income=60000, federal_tax_rate=0.12, deductible=2000)
        assert hsa_input.coverage_type == "individual"
        assert hsa_input.years_to_retirement == 20
        assert hsa_input.expected_return == 0.07

    def test_invalid_tax_rate(self):
        """Test that a tax rate of 100% or more is rejected."""
        with pytest.raises(InvalidInputError):
            make_input(federal_tax_rate=1.5)


class TestHSAOptimization:
    """Tests for calculate_hsa_optimization."""

    def test_limits_and_tax_savings(self):
        """Test contribution room and tax savings for a typical employee."""
        analysis = calculate_hsa_optimization(make_input(), plan_year="2024")

        assert analysis.limits.total_limit == 4150
        assert analysis.limits.max_employee_contribution == 3650
        assert analysis.tax_savings.federal_tax_savings == 803
        assert analysis.tax_savings.state_tax_savings == 146
        assert analysis.tax_savings.fica_savings == 279
        assert analysis.tax_savings.total_annual_savings == 1228
        assert analysis.tax_savings.effective_cost_per_dollar == 0.66
        assert analysis.recommended_contribution == 3650
        assert analysis.catch_up_eligible is False

    def test_projections(self):
        """Test the year-by-year balance projection."""
        analysis = calculate_hsa_optimization(make_input())
        first = analysis.projections[0]

        assert len(analysis.projections) == 3
        assert first.year == 1
        assert first.age == 41
        assert first.beginning_balance == 0
        assert first.contribution == 4150
        assert first.expenses_paid == 1000
        assert first.ending_balance == 3150
        assert analysis.projections[1].beginning_balance == 3150
        assert analysis.projections[1].expenses_paid == 1050
        assert analysis.retirement_balance == analysis.projections[-1].ending_balance

    def test_no_projection_years(self):
        """Test the retirement balance is the current balance with no projection."""
        analysis = calculate_hsa_optimization(make_input(years_to_retirement=0, current_balance=1200))

        assert analysis.projections == []
        assert analysis.retirement_balance == 1200

    def test_catch_up(self):
        """Test the catch-up contribution at age 55 and above."""
        analysis = calculate_hsa_optimization(make_input(age=56))

        assert analysis.catch_up_eligible is True
        assert analysis.limits.catch_up_contribution == 1000
        assert analysis.limits.total_limit == 5150
        assert any("catch-up contribution. Take advantage" in r for r in analysis.recommendations)

    def test_catch_up_countdown(self):
        """Test the countdown message between 50 and 54."""
        analysis = calculate_hsa_optimization(make_input(age=52))
        assert any(r.startswith("In 3 years, you'll be eligible") for r in analysis.recommendations)

    def test_low_deductible_warning(self):
        """Test the warning for a deductible below the HDHP minimum."""
        analysis = calculate_hsa_optimization(make_input(deductible=1000))
        assert any(r.startswith("Warning: Your deductible ($1,000)") for r in analysis.recommendations)

    def test_family_limit_2025(self):
        """Test the plan year selects the family limit."""
        analysis = calculate_hsa_optimization(make_input(coverage_type="family"), plan_year="2025")
        assert analysis.limits.base_limit == 8550

    def test_recommendation_below_limit(self):
        """Test the affordable amount caps the recommendation for lower incomes."""
        analysis = calculate_hsa_optimization(make_input(annual_income=20000, employer_contribution=0))

        assert analysis.recommended_contribution == 2000
        assert not any(r.startswith("Maximize") for r in analysis.recommendations)

    def test_fsa_comparison(self):
        """Test both sides of the HSA vs FSA comparison are present."""
        analysis = calculate_hsa_optimization(make_input())
        assert analysis.fsa_comparison.hsa_advantage
        assert analysis.fsa_comparison.fsa_advantage


class TestHSAHelpers:
    """Tests for standalone HSA helpers."""

    def test_zero_contribution_tax_savings(self):
        """Test a zero contribution has an effective cost of one dollar per dollar."""
        savings = calculate_tax_savings(make_input(), 0, 0.0765)

        assert savings.total_annual_savings == 0
        assert savings.effective_cost_per_dollar == 1.0

    def test_hdhp_eligibility(self):
        """Test HDHP deductible and out-of-pocket checks."""
        assert validate_hdhp_eligibility("individual", 3200, 8050).eligible is True

        result = validate_hdhp_eligibility("individual", 1000, 9000)
        assert result.eligible is False
        assert len(result.issues) == 2

        assert validate_hdhp_eligibility("family", 3200, 16100, plan_year="2024").eligible is True

    def test_paycheck_contribution(self):
        """Test per-paycheck amounts round up to the cent."""
        assert calculate_paycheck_contribution(3650, 26) == pytest.approx(140.39)
        assert calculate_paycheck_contribution(2400, 24) == pytest.approx(100.0)

    def test_paycheck_contribution_invalid_periods(self):
        """Test that zero pay periods are rejected."""
        with pytest.raises(ValueError):
            calculate_paycheck_contribution(3650, 0)

    def test_retirement_costs(self):
        """Test retirement cost estimates run through age 85."""
        estimate = estimate_retirement_healthcare_costs(65, 84, 1000, healthcare_inflation=0.0)

        assert estimate.yearly_estimates == {84: 1000, 85: 1000}
        assert estimate.total_lifetime_cost == 2000

    def test_retirement_costs_inflate(self):
        """Test that costs grow with healthcare inflation."""
        estimate = estimate_retirement_healthcare_costs(64, 65, 1000, healthcare_inflation=0.1)
        assert estimate.yearly_estimates[65] == 1100

    def test_tax_equivalent_yield(self):
        """Test the taxable yield matching a tax-free yield."""
        assert calculate_tax_equivalent_yield(0.07, 0.22, 0.08) == pytest.approx(0.1)
