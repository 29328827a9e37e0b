"""Healthcare utilization scorer.

This module implements the scorer class that:
1. Adds points for each self-reported usage answer
2. Caps the total at 100 and maps it to a utilization level
3. Estimates annual claims from the level and medication spend
4. Recommends a deductible level and plan structure

Point weights and claims lookups are loaded from:
    policy_tables/cy{plan_year}_policy_tables/utilization_tables.json
"""

import logging

from coverage_calculators.table_loader import DEFAULT_PLAN_YEAR, load_utilization_tables
from coverage_calculators.utilization.models import HealthProfile, UtilizationLevel, UtilizationScore

logger = logging.getLogger(__name__)

MAX_SCORE = 100

# Minimum score for each level, highest first
LEVEL_THRESHOLDS: list[tuple[int, UtilizationLevel]] = [
    (75, "very-high"),
    (50, "high"),
    (25, "moderate"),
    (10, "low"),
]

DOCTOR_VISIT_REASONS = {
    "10+": "Frequent doctor visits (10+/year) indicate high utilization",
    "6-10": "Regular doctor visits (6-10/year) indicate moderate utilization",
    "3-5": "Occasional doctor visits (3-5/year)",
    "0-2": "Minimal doctor visits (0-2/year)",
}

SPECIALIST_VISIT_REASONS = {
    "monthly-or-more": "Regular specialist care indicates complex health needs",
    "1-3": "Occasional specialist visits",
}

ER_VISIT_REASONS = {
    "3+": "Multiple ER visits indicate high acute care needs",
    "1-2": "Some emergency care usage",
}

MEDICATION_COST_REASONS = {
    "over-1000": "Very high medication costs (>$1,000/month)",
    "500-1000": "High medication costs ($500-$1,000/month)",
    "200-500": "Moderate medication costs ($200-$500/month)",
    "50-200": "Low medication costs ($50-$200/month)",
}

COST_MULTIPLIERS: dict[UtilizationLevel, float] = {
    "very-high": 1.5,
    "high": 1.3,
    "moderate": 1.0,
    "low": 0.9,
    "minimal": 0.8,
}

METAL_LEVELS: dict[UtilizationLevel, str] = {
    "very-high": "Gold or Platinum",
    "high": "Gold",
    "moderate": "Silver",
    "low": "Bronze",
    "minimal": "Bronze (HDHP)",
}

# Coinsurance assumed by estimate_total_cost_of_care
SIMPLIFIED_COINSURANCE = 0.2


def get_utilization_level(score: int) -> UtilizationLevel:
    """Map a utilization score to its level."""
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return "minimal"


class UtilizationScorer:
    """Scores expected healthcare utilization from a health profile.

    Example:
        >>> scorer = UtilizationScorer(plan_year="2024")
        >>> profile = HealthProfile(doctor_visits_per_year="3-5", monthly_medication_cost="50-200")
        >>> result = scorer.score(profile)
        >>> print(result.score, result.level)
        15 low
    """

    def __init__(self, plan_year: str = DEFAULT_PLAN_YEAR):
        """Initialize scorer with plan year.

        Args:
            plan_year: Plan year (e.g., "2024"). Must have a utilization table in
                policy_tables/cy{plan_year}_policy_tables/
        """
        self.plan_year = plan_year
        self._tables = load_utilization_tables(plan_year)

    def _bucket_points(
        self,
        table_name: str,
        bucket: str | None,
        reasons: dict[str, str],
        reasoning: list[str],
    ) -> int:
        if bucket is None:
            return 0
        if bucket in reasons:
            reasoning.append(reasons[bucket])
        return int(self._tables[table_name].get(bucket, 0))

    def _chronic_condition_points(self, profile: HealthProfile, reasoning: list[str]) -> int:
        if not profile.has_chronic_conditions:
            return 0

        condition_count = len(profile.chronic_conditions)
        if condition_count > 0:
            reasoning.append(f"Managing {condition_count} chronic condition(s)")
        return min(
            int(self._tables["chronic_condition_cap"]),
            condition_count * int(self._tables["chronic_condition_points"]),
        )

    def _expected_annual_claims(self, level: UtilizationLevel, profile: HealthProfile) -> float:
        claims = float(self._tables["level_claims"][level])
        if profile.monthly_medication_cost is not None:
            claims += float(self._tables["medication_claims"].get(profile.monthly_medication_cost, 0))
        return claims

    def score(self, profile: HealthProfile) -> UtilizationScore:
        """Calculate the utilization score for a health profile.

        Args:
            profile: Self-reported healthcare usage

        Returns:
            UtilizationScore with level, claims estimate and recommendations
        """
        reasoning: list[str] = []
        score = 0

        score += self._bucket_points(
            "doctor_visit_points", profile.doctor_visits_per_year, DOCTOR_VISIT_REASONS, reasoning
        )
        score += self._bucket_points(
            "specialist_visit_points",
            profile.specialist_visits_per_year,
            SPECIALIST_VISIT_REASONS,
            reasoning,
        )
        score += self._bucket_points(
            "er_visit_points", profile.er_visits_per_year, ER_VISIT_REASONS, reasoning
        )
        score += self._chronic_condition_points(profile, reasoning)
        score += self._bucket_points(
            "medication_cost_points",
            profile.monthly_medication_cost,
            MEDICATION_COST_REASONS,
            reasoning,
        )

        if profile.takes_specialty_meds:
            score += int(self._tables["specialty_medication_points"])
            reasoning.append("Takes specialty medications (biologics/injectables)")

        if profile.planned_procedures:
            score += int(self._tables["planned_procedure_points"])
            reasoning.append("Has planned surgeries/procedures this year")

        score = min(MAX_SCORE, score)
        level = get_utilization_level(score)

        if score >= 50 or profile.planned_procedures:
            recommended_deductible = "low"
        elif score >= 25:
            recommended_deductible = "medium"
        else:
            recommended_deductible = "high"

        if profile.specialist_visits_per_year == "monthly-or-more" or profile.has_chronic_conditions:
            recommended_plan_type = "PPO"
        elif score < 20 and not profile.planned_procedures:
            recommended_plan_type = "HDHP"
        else:
            recommended_plan_type = "HMO"

        logger.debug("Utilization score %d (%s)", score, level)
        return UtilizationScore(
            score=score,
            level=level,
            expected_annual_claims=self._expected_annual_claims(level, profile),
            recommended_deductible=recommended_deductible,
            recommended_plan_type=recommended_plan_type,
            reasoning=reasoning,
        )

    def score_batch(self, profiles: list[HealthProfile]) -> list[UtilizationScore]:
        """Score multiple profiles.

        Args:
            profiles: List of health profiles

        Returns:
            List of scores in same order as inputs
        """
        return [self.score(profile) for profile in profiles]


def calculate_utilization_score(
    profile: HealthProfile, plan_year: str = DEFAULT_PLAN_YEAR
) -> UtilizationScore:
    """Score a single profile with the plan year's utilization table."""
    return UtilizationScorer(plan_year).score(profile)


def get_utilization_cost_multiplier(utilization: UtilizationScore) -> float:
    """Premium multiplier (0.8 to 1.5) reflecting how much coverage the usage calls for."""
    return COST_MULTIPLIERS[utilization.level]


def get_recommended_metal_level(utilization: UtilizationScore) -> str:
    return METAL_LEVELS[utilization.level]


def estimate_total_cost_of_care(
    monthly_premium: float,
    deductible: float,
    expected_annual_claims: float,
) -> dict[str, float]:
    """Estimate premium plus out-of-pocket cost for expected claims.

    Uses a simplified cost-sharing model: claims up to the deductible are paid
    in full, then 20% coinsurance with no out-of-pocket cap.

    Args:
        monthly_premium: Monthly premium
        deductible: Annual deductible
        expected_annual_claims: Expected medical spending

    Returns:
        Dictionary with annual_premium, expected_out_of_pocket and total_cost
    """
    annual_premium = monthly_premium * 12

    if expected_annual_claims > deductible:
        expected_out_of_pocket = (
            deductible + (expected_annual_claims - deductible) * SIMPLIFIED_COINSURANCE
        )
    else:
        expected_out_of_pocket = expected_annual_claims

    return {
        "annual_premium": annual_premium,
        "expected_out_of_pocket": expected_out_of_pocket,
        "total_cost": annual_premium + expected_out_of_pocket,
    }
