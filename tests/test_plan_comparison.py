"""Tests for the plan comparison engine."""

import pytest

from coverage_calculators import InvalidHealthProfile, PlanDetails
from coverage_calculators.comparison import (
    PlanComparisonResult,
    UserHealthProfile,
    calculate_out_of_pocket,
    calculate_scenarios,
    compare_plans,
    generate_metrics,
    identify_key_differences,
    quick_comparison,
)


@pytest.fixture
def silver_hmo():
    """Lower premium HMO with a higher deductible."""
    return PlanDetails(
        name="Silver HMO",
        monthly_premium=400,
        deductible=3000,
        coinsurance=0.2,
        out_of_pocket_max=7000,
        plan_type="HMO",
        primary_care_copay=25,
        specialist_copay=50,
        generic_drug_copay=10,
        quality_rating=4,
        hsa_eligible=False,
        has_national_network=False,
    )


@pytest.fixture
def gold_ppo():
    """Higher premium PPO with a lower deductible."""
    return PlanDetails(
        name="Gold PPO",
        monthly_premium=550,
        deductible=1000,
        coinsurance=0.1,
        out_of_pocket_max=5000,
        plan_type="PPO",
        primary_care_copay=20,
        specialist_copay=40,
        generic_drug_copay=5,
        quality_rating=3,
        hsa_eligible=False,
        has_national_network=True,
    )


@pytest.fixture
def heavy_user():
    """Profile with a planned procedure and chronic care."""
    return UserHealthProfile(
        expected_doctor_visits=4,
        expected_specialist_visits=12,
        expected_prescriptions=2,
        expected_er_visits=1,
        has_planned_procedures=True,
        planned_procedure_cost=20000,
        prioritizes_lower_premium=True,
        has_chronic_conditions=True,
        risk_tolerance="low",
    )


class TestUserHealthProfile:
    """Tests for UserHealthProfile validation."""

    def test_defaults(self):
        """Test an empty profile."""
        profile = UserHealthProfile()
        assert profile.expected_doctor_visits == 0
        assert profile.avg_prescription_tier == 1
        assert profile.risk_tolerance == "medium"

    def test_invalid_prescription_tier(self):
        """Test that tiers outside 1-4 are rejected."""
        with pytest.raises(InvalidHealthProfile):
            UserHealthProfile(avg_prescription_tier=5)

    def test_negative_visits(self):
        """Test that negative counts are rejected."""
        with pytest.raises(InvalidHealthProfile):
            UserHealthProfile(expected_er_visits=-1)


class TestGenerateMetrics:
    """Tests for side-by-side metrics."""

    def test_metric_order_and_winners(self, silver_hmo, gold_ppo):
        """Test the full metric list for two fully described plans."""
        metrics = generate_metrics(silver_hmo, gold_ppo)

        assert [(m.name, m.winner) for m in metrics] == [
            ("Monthly Premium", "A"),
            ("Annual Premium", "A"),
            ("Deductible", "B"),
            ("Out-of-Pocket Maximum", "B"),
            ("Primary Care Copay", "B"),
            ("Specialist Copay", "B"),
            ("Generic Drug Copay", "B"),
            ("Coinsurance", "B"),
            ("Plan Type", "tie"),
            ("National Network", "B"),
            ("Quality Rating", "A"),
            ("HSA Eligible", "tie"),
        ]

    def test_display_values(self, silver_hmo, gold_ppo):
        """Test formatting of display values and differences."""
        metrics = {m.name: m for m in generate_metrics(silver_hmo, gold_ppo)}

        assert metrics["Monthly Premium"].plan_a_value == "$400"
        assert metrics["Monthly Premium"].difference == "$150 less/month"
        assert metrics["Annual Premium"].difference == "$1,800 less/year"
        assert metrics["Deductible"].difference == "$2,000 more"
        assert metrics["Coinsurance"].plan_a_value == "20%"
        assert metrics["Coinsurance"].plan_b_value == "10%"
        assert metrics["Quality Rating"].plan_a_value == "4 stars"
        assert metrics["National Network"].plan_b_value == "Yes"

    def test_optional_metrics_need_both_plans(self, silver_hmo):
        """Test that copay and network metrics are omitted when one plan lacks them."""
        bare = PlanDetails(name="Bare", monthly_premium=300, deductible=4000, coinsurance=0.3, out_of_pocket_max=8000)
        names = [m.name for m in generate_metrics(silver_hmo, bare)]

        assert names == [
            "Monthly Premium",
            "Annual Premium",
            "Deductible",
            "Out-of-Pocket Maximum",
            "Coinsurance",
        ]

    def test_subsidy_metric(self, silver_hmo, gold_ppo):
        """Test that the after-subsidy premium appears when either plan has one."""
        subsidized = gold_ppo.model_copy(update={"monthly_premium_after_subsidy": 150})
        metrics = generate_metrics(silver_hmo, subsidized)

        assert metrics[1].name == "Premium After Subsidy"
        assert metrics[1].plan_a_raw == 400
        assert metrics[1].plan_b_raw == 150
        assert metrics[1].winner == "B"


class TestScenarios:
    """Tests for usage scenario pricing."""

    def test_fixed_scenarios(self, silver_hmo, gold_ppo):
        """Test the four fixed scenarios."""
        scenarios = calculate_scenarios(silver_hmo, gold_ppo)

        assert [(s.name, s.plan_a_cost, s.plan_b_cost, s.winner) for s in scenarios] == [
            ("Healthy Year", 4880, 6655, "A"),
            ("Moderate Usage", 5170, 6860, "A"),
            ("Chronic Condition", 6060, 7560, "A"),
            ("Major Medical Event", 11800, 11600, "B"),
        ]
        assert scenarios[0].difference == 4880 - 6655
        assert scenarios[0].breakdown.premiums.plan_a == 4800
        assert scenarios[0].breakdown.out_of_pocket.plan_b == 55

    def test_user_scenario(self, silver_hmo, gold_ppo, heavy_user):
        """Test the personalized scenario is appended last."""
        scenarios = calculate_scenarios(silver_hmo, gold_ppo, heavy_user)
        user = scenarios[-1]

        assert len(scenarios) == 5
        assert user.name == "Your Expected Usage"
        # Plan A hits its out-of-pocket maximum
        assert user.plan_a_cost == 4800 + 7000
        assert user.plan_b_cost == 6600 + 980 + 2900
        assert user.winner == "B"

    def test_default_copays(self):
        """Test that plans without copays use the default per-service costs."""
        plan = PlanDetails(name="Plain", monthly_premium=300, deductible=4000, coinsurance=0.3, out_of_pocket_max=8000)
        assert calculate_out_of_pocket(plan, 2, 0, 3, 0) == 2 * 30 + 3 * 15
        assert calculate_out_of_pocket(plan, 0, 1, 0, 1) == 60 + 300

    def test_brand_copay_for_higher_tiers(self):
        """Test that prescription tiers above 1 use the brand copay."""
        plan = PlanDetails(
            name="Brand",
            monthly_premium=300,
            deductible=4000,
            coinsurance=0.3,
            out_of_pocket_max=8000,
            generic_drug_copay=10,
            brand_drug_copay=40,
        )
        assert calculate_out_of_pocket(plan, 0, 0, 12, 0, prescription_tier=2) == 480
        assert calculate_out_of_pocket(plan, 0, 0, 12, 0, prescription_tier=1) == 120

    def test_out_of_pocket_capped(self, gold_ppo):
        """Test that service costs never exceed the out-of-pocket maximum."""
        assert calculate_out_of_pocket(gold_ppo, 0, 0, 0, 100) == 5000


class TestComparePlans:
    """Tests for the full comparison."""

    def test_overall_winner(self, silver_hmo, gold_ppo):
        """Test metric and scenario scoring picks the overall winner."""
        result = compare_plans(silver_hmo, gold_ppo)

        assert isinstance(result, PlanComparisonResult)
        assert result.overall_winner.plan == "B"
        assert result.overall_winner.confidence == "low"
        assert result.overall_winner.reasoning == (
            "Plan B wins 7 of 12 comparison metrics and 1 of 4 cost scenarios."
        )

    def test_recommendation_without_profile(self, silver_hmo, gold_ppo):
        """Test the moderate-usage scenario drives the default recommendation."""
        result = compare_plans(silver_hmo, gold_ppo)

        assert result.recommendation.recommended_plan == "A"
        assert result.recommendation.reasons[0] == (
            "Silver HMO costs $1,690 less annually for your expected healthcare usage."
        )
        assert result.recommendation.caveats == []
        assert result.summary.startswith("Based on our analysis, Gold PPO appears to be the better choice")

    def test_key_differences(self, silver_hmo, gold_ppo):
        """Test that material differences are listed."""
        differences = identify_key_differences(silver_hmo, gold_ppo)

        assert differences == [
            "Silver HMO has a $150 lower monthly premium.",
            "Gold PPO has a $2,000 lower deductible.",
            "Gold PPO has a $2,000 lower out-of-pocket maximum.",
            "Silver HMO is a HMO plan while Gold PPO is a PPO plan.",
            "Silver HMO has a higher quality rating (4 vs 3 stars).",
        ]

    def test_with_profile(self, silver_hmo, gold_ppo, heavy_user):
        """Test that the expected-usage scenario adds bonus points and caveats."""
        result = compare_plans(silver_hmo, gold_ppo, heavy_user)

        assert result.overall_winner.plan == "B"
        assert result.overall_winner.confidence == "high"
        assert result.recommendation.recommended_plan == "B"
        assert result.recommendation.reasons[0] == (
            "Gold PPO costs $1,320 less annually for your expected healthcare usage."
        )
        assert len(result.recommendation.caveats) == 1
        assert any("chronic condition" in reason for reason in result.recommendation.reasons)
        assert any("low risk tolerance" in reason for reason in result.recommendation.reasons)

    def test_identical_plans_tie(self, silver_hmo):
        """Test that identical plans tie on every metric and scenario."""
        result = compare_plans(silver_hmo, silver_hmo)

        assert all(metric.winner == "tie" for metric in result.metrics)
        assert all(scenario.winner == "tie" for scenario in result.scenarios)
        assert result.overall_winner.plan == "tie"
        assert result.overall_winner.confidence == "low"
        assert result.key_differences == []
        assert result.summary.startswith("Both Silver HMO and Silver HMO are closely matched.")

    def test_no_premium_caveat_for_equal_premiums(self, silver_hmo, heavy_user):
        """Test that the lower-premium caveat is skipped when premiums match."""
        basic = silver_hmo.model_copy(update={"name": "Silver Basic", "deductible": 6000, "out_of_pocket_max": 9000})
        result = compare_plans(silver_hmo, basic, heavy_user)

        assert result.scenarios[-1].winner == "A"
        assert result.recommendation.caveats == []

    def test_no_premium_caveat_for_tied_usage(self, silver_hmo):
        """Test that the lower-premium caveat is skipped when expected usage ties."""
        profile = UserHealthProfile(prioritizes_lower_premium=True)
        result = compare_plans(silver_hmo, silver_hmo, profile)

        assert result.scenarios[-1].winner == "tie"
        assert result.recommendation.caveats == []

    def test_hsa_reason(self, silver_hmo, gold_ppo):
        """Test that an HSA-eligible plan is called out."""
        hsa_plan = silver_hmo.model_copy(update={"hsa_eligible": True})
        result = compare_plans(hsa_plan, gold_ppo)

        assert "Silver HMO is HSA-eligible, offering tax advantages for healthcare savings." in (
            result.recommendation.reasons
        )


class TestQuickComparison:
    """Tests for the condensed comparison."""

    def test_quick_comparison(self, silver_hmo, gold_ppo):
        """Test the four headline answers."""
        result = quick_comparison(silver_hmo, gold_ppo)

        assert result.cheaper_monthly == "A"
        assert result.cheaper_annually_healthy == "A"
        assert result.cheaper_annually_sick == "B"
        assert result.better_protection == "B"
        assert result.summary == compare_plans(silver_hmo, gold_ppo).summary
