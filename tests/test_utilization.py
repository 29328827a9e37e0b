"""Tests for the utilization scorer."""

import itertools

import pytest

from coverage_calculators import InvalidHealthProfile
from coverage_calculators.utilization import (
    HealthProfile,
    UtilizationScore,
    UtilizationScorer,
    calculate_utilization_score,
    estimate_total_cost_of_care,
    get_recommended_metal_level,
    get_utilization_cost_multiplier,
    get_utilization_level,
)


@pytest.fixture
def scorer():
    """Create scorer instance."""
    return UtilizationScorer(plan_year="2024")


class TestHealthProfile:
    """Tests for HealthProfile model."""

    def test_default_values(self):
        """Test that every answer is optional."""
        profile = HealthProfile()
        assert profile.doctor_visits_per_year is None
        assert profile.chronic_conditions == []
        assert profile.planned_procedures is False

    def test_unknown_bucket(self):
        """Test that an unknown usage bucket raises InvalidHealthProfile."""
        with pytest.raises(InvalidHealthProfile):
            HealthProfile(doctor_visits_per_year="20+")


class TestUtilizationScorer:
    """Tests for UtilizationScorer."""

    def test_very_high_usage_is_capped(self, scorer):
        """Test that heavy usage scores 100 and recommends a PPO."""
        profile = HealthProfile(
            doctor_visits_per_year="10+",
            specialist_visits_per_year="monthly-or-more",
            er_visits_per_year="3+",
            has_chronic_conditions=True,
            chronic_conditions=["diabetes", "asthma"],
            monthly_medication_cost="over-1000",
        )
        result = scorer.score(profile)

        assert result.score == 100
        assert result.level == "very-high"
        assert result.recommended_plan_type == "PPO"
        assert result.recommended_deductible == "low"
        assert result.expected_annual_claims == 15000 + 12000
        assert "Managing 2 chronic condition(s)" in result.reasoning

    def test_minimal_usage(self, scorer):
        """Test that light usage scores 0 and recommends an HDHP."""
        profile = HealthProfile(
            doctor_visits_per_year="0-2",
            specialist_visits_per_year="none",
            er_visits_per_year="none",
            has_chronic_conditions=False,
            monthly_medication_cost="under-50",
        )
        result = scorer.score(profile)

        assert result.score == 0
        assert result.level == "minimal"
        assert result.recommended_plan_type == "HDHP"
        assert result.recommended_deductible == "high"
        assert result.expected_annual_claims == 500 + 300
        assert result.reasoning == ["Minimal doctor visits (0-2/year)"]

    def test_empty_profile(self, scorer):
        """Test that missing answers add no points."""
        result = scorer.score(HealthProfile())

        assert result.score == 0
        assert result.level == "minimal"
        assert result.expected_annual_claims == 500
        assert result.reasoning == []

    @pytest.mark.parametrize(
        "answers,expected_score,expected_level",
        [
            ({"doctor_visits_per_year": "3-5"}, 10, "low"),
            ({"specialist_visits_per_year": "monthly-or-more"}, 25, "moderate"),
            ({"doctor_visits_per_year": "10+", "er_visits_per_year": "3+"}, 50, "high"),
            (
                {
                    "doctor_visits_per_year": "10+",
                    "specialist_visits_per_year": "monthly-or-more",
                    "er_visits_per_year": "3+",
                },
                75,
                "very-high",
            ),
        ],
    )
    def test_level_boundaries(self, scorer, answers, expected_score, expected_level):
        """Test that scores exactly at a threshold take the higher level."""
        result = scorer.score(HealthProfile(**answers))

        assert result.score == expected_score
        assert result.level == expected_level

    def test_planned_procedure(self, scorer):
        """Test that a planned procedure lowers the recommended deductible."""
        result = scorer.score(HealthProfile(planned_procedures=True))

        assert result.score == 15
        assert result.level == "low"
        assert result.recommended_deductible == "low"
        assert result.recommended_plan_type == "HMO"

    def test_chronic_conditions_capped(self, scorer):
        """Test chronic condition points are capped at 15."""
        profile = HealthProfile(
            has_chronic_conditions=True,
            chronic_conditions=["a", "b", "c", "d", "e"],
        )
        assert scorer.score(profile).score == 15

    def test_chronic_list_without_flag(self, scorer):
        """Test that conditions only count when the chronic flag is set."""
        profile = HealthProfile(has_chronic_conditions=False, chronic_conditions=["asthma"])
        result = scorer.score(profile)

        assert result.score == 0
        assert result.recommended_plan_type == "HDHP"

    def test_chronic_flag_recommends_ppo(self, scorer):
        """Test that the chronic flag alone recommends a PPO."""
        result = scorer.score(HealthProfile(has_chronic_conditions=True))

        assert result.score == 0
        assert result.recommended_plan_type == "PPO"

    def test_score_within_bounds(self, scorer):
        """Test that every combination of answers stays within 0-100."""
        for doctor, specialist, er, medication, specialty, procedures in itertools.product(
            ["0-2", "3-5", "6-10", "10+"],
            ["none", "1-3", "monthly-or-more"],
            ["none", "1-2", "3+"],
            ["under-50", "50-200", "200-500", "500-1000", "over-1000"],
            [False, True],
            [False, True],
        ):
            profile = HealthProfile(
                doctor_visits_per_year=doctor,
                specialist_visits_per_year=specialist,
                er_visits_per_year=er,
                has_chronic_conditions=True,
                chronic_conditions=["a", "b", "c"],
                monthly_medication_cost=medication,
                takes_specialty_meds=specialty,
                planned_procedures=procedures,
            )
            result = scorer.score(profile)
            assert 0 <= result.score <= 100
            assert result.level == get_utilization_level(result.score)

    def test_batch_scoring(self, scorer):
        """Test batch scoring keeps input order."""
        profiles = [
            HealthProfile(doctor_visits_per_year="0-2"),
            HealthProfile(doctor_visits_per_year="10+"),
            HealthProfile(doctor_visits_per_year="3-5"),
        ]
        results = scorer.score_batch(profiles)

        assert [r.score for r in results] == [0, 30, 10]
        assert all(isinstance(r, UtilizationScore) for r in results)

    def test_functional_entry_point(self):
        """Test calculate_utilization_score matches the scorer."""
        profile = HealthProfile(monthly_medication_cost="200-500", takes_specialty_meds=True)
        result = calculate_utilization_score(profile)

        assert result.score == 20
        assert result.expected_annual_claims == 1500 + 4200


class TestUtilizationHelpers:
    """Tests for level-based helpers."""

    @pytest.mark.parametrize(
        "score,level",
        [(100, "very-high"), (75, "very-high"), (74, "high"), (50, "high"), (49, "moderate"),
         (25, "moderate"), (24, "low"), (10, "low"), (9, "minimal"), (0, "minimal")],
    )
    def test_level_thresholds(self, score, level):
        """Test the documented level thresholds at their boundaries."""
        assert get_utilization_level(score) == level

    def test_cost_multiplier_and_metal_level(self, scorer):
        """Test multipliers and metal levels by utilization level."""
        heavy = scorer.score(HealthProfile(doctor_visits_per_year="10+", er_visits_per_year="3+"))
        light = scorer.score(HealthProfile())

        assert get_utilization_cost_multiplier(heavy) == 1.3
        assert get_recommended_metal_level(heavy) == "Gold"
        assert get_utilization_cost_multiplier(light) == 0.8
        assert get_recommended_metal_level(light) == "Bronze (HDHP)"

    def test_total_cost_of_care(self):
        """Test the simplified premium + out-of-pocket estimate."""
        above = estimate_total_cost_of_care(400, 2000, 5000)
        assert above["annual_premium"] == 4800
        assert above["expected_out_of_pocket"] == pytest.approx(2600)
        assert above["total_cost"] == pytest.approx(7400)

        below = estimate_total_cost_of_care(100, 2000, 1000)
        assert below["expected_out_of_pocket"] == 1000
