"""Tests for add-on insurance recommendations."""

import pytest

from coverage_calculators.addons import (
    AddOnPreferences,
    Household,
    calculate_actuarial_probability,
    calculate_household_actuarial_probability,
    calculate_total_add_on_cost,
    generate_add_on_recommendations,
    get_age_adjusted_cost,
    load_catalog,
    recommendations_by_priority,
)
from coverage_calculators.errors import InvalidHousehold


@pytest.fixture
def single_adult():
    """One 40-year-old adult."""
    return Household(adult_ages=[40])


@pytest.fixture
def family():
    """Two adults and a school-age child."""
    return Household(adult_ages=[40, 38], child_ages=[8])


def _by_category(recommendations):
    return {r.product.category: r for r in recommendations}


class TestHousehold:
    """Tests for household validation."""

    def test_requires_a_member(self):
        """Test that a household without ages is rejected."""
        with pytest.raises(InvalidHousehold):
            Household()

    def test_age_out_of_range(self):
        """Test that ages above 120 are rejected."""
        with pytest.raises(InvalidHousehold) as exc_info:
            Household(adult_ages=[130])

        assert any(message.startswith("adult_ages") for message in exc_info.value.errors)

    def test_unknown_category_preference(self):
        """Test that excluding an unknown category is rejected."""
        with pytest.raises(InvalidHousehold):
            AddOnPreferences(exclude_categories=["pet"])


class TestActuarialCurves:
    """Tests for the age curves."""

    def test_dental_interpolates(self):
        """Test the dental curve between its 30 and 50 points."""
        result = calculate_actuarial_probability(40, "dental")

        assert result.probability_score == 73
        assert result.risk_level == "high"
        assert result.cost_multiplier == 1.0

    def test_ages_are_clamped(self):
        """Test that ages outside 0-120 use the nearest bound."""
        assert calculate_actuarial_probability(-5, "vision") == calculate_actuarial_probability(0, "vision")
        assert calculate_actuarial_probability(150, "accident") == calculate_actuarial_probability(120, "accident")

    def test_disability_before_working_age(self):
        """Test that children have no income to protect."""
        result = calculate_actuarial_probability(10, "disability")

        assert result.probability_score == 0
        assert result.risk_level == "very-low"
        assert result.reasoning == "Not applicable - no earned income"

    def test_long_term_care_floor(self):
        """Test the rising floor in the 50s."""
        result = calculate_actuarial_probability(55, "long-term-care")

        assert result.probability_score == 70
        assert result.risk_level == "high"

    def test_term_life_peak(self):
        """Test the family-years peak is capped at 100."""
        assert calculate_actuarial_probability(40, "life").probability_score == 100

    def test_household_takes_highest_need(self):
        """Test that the highest-scoring member drives the household result."""
        result = calculate_household_actuarial_probability([40, 10], "dental")

        assert result.probability_score == 97
        assert result.reasoning.startswith("High cavity risk")

    def test_empty_household_uses_default_age(self):
        """Test that no ages scores a 35-year-old."""
        assert calculate_household_actuarial_probability([], "life") == calculate_actuarial_probability(35, "life")

    def test_age_adjusted_cost(self):
        """Test the long-term care multiplier for a 72-year-old."""
        assert get_age_adjusted_cost(200, 72, "long-term-care") == 600


class TestGenerateRecommendations:
    """Tests for household recommendations."""

    def test_single_adult_order_and_totals(self, single_adult):
        """Test priority ordering, the low-score cutoff and totals."""
        analysis = generate_add_on_recommendations(single_adult)

        assert [r.product.id for r in analysis.recommendations] == [
            "disability",
            "term-life",
            "dental",
            "vision",
            "accident",
            "hospital-indemnity",
            "critical-illness",
        ]
        assert analysis.all_recommendations[-1].product.id == "long-term-care"
        assert [r.priority for r in analysis.high_priority] == ["high", "high"]
        assert analysis.total_monthly_high_priority == 222
        assert analysis.total_monthly_all_recommended == 501
        assert analysis.within_budget == analysis.recommendations
        assert [g.group_name for g in analysis.household_age_groups] == ["Adults (31-40)"]

    def test_single_adult_costs(self, single_adult):
        """Test age-adjusted costs for a single member."""
        by_category = _by_category(generate_add_on_recommendations(single_adult).recommendations)

        assert by_category["disability"].adjusted_cost_per_month == 150
        assert by_category["vision"].adjusted_cost_per_month == 24
        assert by_category["dental"].household_cost_per_month == 45
        assert by_category["dental"].applicable_members == 1

    def test_family_dental(self, family):
        """Test the children boost, family discount and targeted age group."""
        dental = _by_category(generate_add_on_recommendations(family).recommendations)["dental"]

        assert dental.priority == "high"
        assert dental.probability_score == 100
        assert dental.applicable_members == 3
        assert dental.household_cost_per_month == 122
        assert dental.age_group == "Children (0-17)"
        assert dental.reasons == [
            "High cavity risk and orthodontic needs during childhood development",
            "Recommended for households with children",
            "Household composition: Children (0-17), Adults (31-40)",
            "Highly recommended for families with children",
            "Typically not covered by standard health insurance",
        ]

    def test_excluded_categories(self, single_adult):
        """Test that excluded categories are not scored."""
        preferences = AddOnPreferences(exclude_categories=["life", "disability"])
        analysis = generate_add_on_recommendations(single_adult, preferences)

        categories = {r.product.category for r in analysis.all_recommendations}
        assert len(categories) == 6
        assert not categories & {"life", "disability"}

    def test_budget_preference(self, single_adult):
        """Test that recommendations are taken in order until the budget is used."""
        preferences = AddOnPreferences(max_monthly_budget=250)
        analysis = generate_add_on_recommendations(single_adult, preferences)

        assert [r.product.id for r in analysis.within_budget] == ["disability", "term-life", "vision"]

    def test_tight_budget_lowers_expensive_products(self):
        """Test the budget penalty on products over $100/month."""
        household = Household(adult_ages=[40], monthly_budget="under-300")
        disability = _by_category(generate_add_on_recommendations(household).recommendations)["disability"]

        assert disability.probability_score == 90
        assert "Consider budget constraints" in disability.reasons

    def test_multiple_residences(self):
        """Test the travel boost and multi-state price increase."""
        household = Household(adult_ages=[40], residence_count=2)
        accident = _by_category(generate_add_on_recommendations(household).recommendations)["accident"]

        assert accident.probability_score == 63
        assert accident.household_cost_per_month == 37
        assert "Additional protection for frequent travelers" in accident.reasons

    def test_medicare_eligible(self):
        """Test that Medicare gaps raise hospital indemnity."""
        household = Household(adult_ages=[67], has_medicare_eligible=True)
        hospital = _by_category(generate_add_on_recommendations(household).recommendations)["hospital-indemnity"]

        assert hospital.priority == "high"
        assert "Fills important gaps in Medicare coverage" in hospital.reasons

    def test_plan_year_catalog(self):
        """Test that each plan year ships a catalog."""
        assert load_catalog("2025").plan_year == 2025
        assert len(load_catalog("2024").products) == 8


class TestAddOnCosts:
    """Tests for combining selected add-ons."""

    def test_bundle_discount(self, single_adult):
        """Test the bundle discount applies from three add-ons."""
        analysis = generate_add_on_recommendations(single_adult, AddOnPreferences(max_monthly_budget=250))

        assert calculate_total_add_on_cost(analysis.within_budget) == 234
        assert calculate_total_add_on_cost(analysis.within_budget[:2]) == 222

    def test_recommendations_by_priority(self, single_adult):
        """Test filtering recommendations to one priority."""
        analysis = generate_add_on_recommendations(single_adult)

        assert [r.product.id for r in recommendations_by_priority(analysis, "high")] == ["disability", "term-life"]
