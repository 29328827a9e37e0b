"""Tests for Monte Carlo cost simulation."""

import math

import numpy as np
import pytest

from coverage_calculators import InvalidPlanParameters, InvalidSimulationInput, PlanDetails
from coverage_calculators.breakeven import find_break_even_point
from coverage_calculators.formatting import round_currency
from coverage_calculators.simulations import (
    MonteCarloInput,
    compare_plans_with_monte_carlo,
    generate_histogram_data,
    generate_monte_carlo_analysis,
    run_monte_carlo,
    simulate_plan_costs,
)

PERCENTILE_KEYS = ["p5", "p10", "p25", "p50", "p75", "p90", "p95", "p99"]


def _without_timing(result):
    return result.model_dump(exclude={"execution_time_ms"})


@pytest.fixture
def sim_input():
    """Typical Silver-like plan with moderate expected costs."""
    return MonteCarloInput(base_cost=4000, deductible=2000, out_of_pocket_max=8000)


class TestMonteCarloInput:
    """Tests for MonteCarloInput validation."""

    def test_defaults(self, sim_input):
        """Test default simulation settings."""
        assert sim_input.iterations == 1000
        assert sim_input.sigma == 0.5
        assert sim_input.coinsurance == 0.2
        assert sim_input.seed is None

    @pytest.mark.parametrize(
        "overrides",
        [{"base_cost": 0}, {"iterations": 0}, {"iterations": 100001}, {"sigma": 0}, {"deductible": -1}],
    )
    def test_invalid_values(self, overrides):
        """Test out-of-range parameters raise InvalidSimulationInput."""
        params = {"base_cost": 4000, "deductible": 2000, "out_of_pocket_max": 8000, **overrides}
        with pytest.raises(InvalidSimulationInput):
            MonteCarloInput(**params)


class TestRunMonteCarlo:
    """Tests for run_monte_carlo."""

    def test_reproducible_with_injected_rng(self, sim_input):
        """Test that equal generator seeds give identical results."""
        first = run_monte_carlo(sim_input, rng=np.random.default_rng(42))
        second = run_monte_carlo(sim_input, rng=np.random.default_rng(42))

        assert _without_timing(first) == _without_timing(second)

    def test_seed_field_used_without_rng(self):
        """Test that the input seed drives the default generator."""
        seeded = MonteCarloInput(base_cost=4000, deductible=2000, out_of_pocket_max=8000, seed=2)

        from_seed = run_monte_carlo(seeded)
        from_rng = run_monte_carlo(seeded.model_copy(update={"seed": 1}), rng=np.random.default_rng(2))

        assert _without_timing(from_seed) == _without_timing(from_rng)

    def test_percentiles_non_decreasing(self, sim_input):
        """Test p5 <= p10 <= ... <= p99."""
        result = run_monte_carlo(sim_input, rng=np.random.default_rng(7))
        values = [getattr(result.percentiles, key) for key in PERCENTILE_KEYS]

        assert values == sorted(values)
        assert result.median == result.percentiles.p50
        assert result.expected_value_at_risk == result.percentiles.p95

    def test_percentiles_use_lower_rank(self, sim_input):
        """Test percentiles pick the sample at floor(p/100 * (n - 1))."""
        result = run_monte_carlo(sim_input, rng=np.random.default_rng(11))

        rng = np.random.default_rng(11)
        costs = rng.lognormal(mean=math.log(4000), sigma=0.5, size=1000)
        outcomes = np.minimum(
            np.minimum(costs, 2000) + np.maximum(costs - 2000, 0) * 0.2,
            8000,
        )
        ordered = np.sort(outcomes)

        for key in PERCENTILE_KEYS:
            p = int(key[1:])
            expected = round_currency(float(ordered[int(math.floor(p / 100 * 999))]))
            assert getattr(result.percentiles, key) == expected

    def test_statistics_shape(self, sim_input):
        """Test probabilities and counts are in range."""
        result = run_monte_carlo(sim_input, rng=np.random.default_rng(3))

        assert result.simulation_count == 1000
        assert 0 <= result.probability_of_exceeding_deductible <= 100
        assert 0 <= result.probability_of_hitting_oop_max <= 100
        assert 0 <= result.percentiles.p5 <= result.mean <= 8000
        assert result.execution_time_ms >= 0

    def test_costs_always_above_out_of_pocket_max(self):
        """Test a huge expected cost pins every year at the OOP max."""
        sim_input = MonteCarloInput(base_cost=1_000_000, deductible=1000, out_of_pocket_max=5000)
        result = run_monte_carlo(sim_input, rng=np.random.default_rng(5))

        assert result.mean == 5000
        assert result.standard_deviation == 0
        assert result.probability_of_exceeding_deductible == 100
        assert result.probability_of_hitting_oop_max == 100

    def test_costs_never_reach_deductible(self):
        """Test a tiny expected cost never exceeds the deductible."""
        sim_input = MonteCarloInput(base_cost=1, deductible=5000, out_of_pocket_max=8000)
        result = run_monte_carlo(sim_input, rng=np.random.default_rng(5))

        assert result.probability_of_exceeding_deductible == 0
        assert result.probability_of_hitting_oop_max == 0
        assert result.percentiles.p99 < 10


class TestMonteCarloAnalysis:
    """Tests for interpretation and histogram output."""

    def test_histogram_sums_to_100(self, sim_input):
        """Test histogram buckets cover [0, OOP max] and sum to 100%."""
        analysis = generate_monte_carlo_analysis(sim_input, rng=np.random.default_rng(9))
        buckets = analysis.histogram_data

        assert len(buckets) == 5
        assert sum(b.percentage for b in buckets) == 100
        assert buckets[0].min == 0
        assert buckets[-1].max == 8000
        assert buckets[0].label == "$0-$1,600"

    def test_custom_bucket_count(self, sim_input):
        """Test a different number of buckets."""
        analysis = generate_monte_carlo_analysis(sim_input, rng=np.random.default_rng(9), bucket_count=8)

        assert len(analysis.histogram_data) == 8
        assert sum(b.percentage for b in analysis.histogram_data) == 100

    def test_largest_remainder_rounding(self):
        """Test three equal buckets round to 34/33/33."""
        buckets = generate_histogram_data(np.array([100.0, 500.0, 900.0]), 900, bucket_count=3)

        assert [b.percentage for b in buckets] == [34, 33, 33]

    def test_very_high_risk(self):
        """Test interpretation when every year hits the OOP max."""
        sim_input = MonteCarloInput(base_cost=1_000_000, deductible=2000, out_of_pocket_max=5000)
        analysis = generate_monte_carlo_analysis(sim_input, rng=np.random.default_rng(1))
        interpretation = analysis.interpretation

        assert interpretation.risk_level == "very-high"
        assert interpretation.summary.startswith("Your healthcare cost risk is significant.")
        assert "Consider a plan with a lower out-of-pocket maximum" in interpretation.recommendations
        assert "Consider opening an HSA to save pre-tax dollars for healthcare" in interpretation.recommendations
        assert analysis.histogram_data[-1].percentage == 100

    def test_low_risk(self):
        """Test interpretation when costs stay under the deductible."""
        sim_input = MonteCarloInput(base_cost=200, deductible=1000, out_of_pocket_max=4000)
        analysis = generate_monte_carlo_analysis(sim_input, rng=np.random.default_rng(1))

        assert analysis.interpretation.risk_level == "low"
        assert analysis.interpretation.insights[0].startswith("Your expected out-of-pocket cost is $")
        assert not any("HSA" in text for text in analysis.interpretation.recommendations)
        assert analysis.input_parameters == sim_input


class TestConvenienceFunctions:
    """Tests for tier and two-plan simulations."""

    def test_simulate_plan_costs(self):
        """Test that tier defaults feed the simulation."""
        analysis = simulate_plan_costs(4000, "gold", rng=np.random.default_rng(4))

        assert analysis.input_parameters.deductible == 1500
        assert analysis.input_parameters.out_of_pocket_max == 8700
        assert analysis.input_parameters.coinsurance == 0.2

    def test_simulate_unknown_tier(self):
        """Test that an unknown tier raises InvalidPlanParameters."""
        with pytest.raises(InvalidPlanParameters):
            simulate_plan_costs(4000, "titanium")

    def test_identical_plans_compare_evenly(self):
        """Test that identical plans see the same draws."""
        plan = PlanDetails(name="Silver", monthly_premium=400, deductible=5000, coinsurance=0.3, out_of_pocket_max=9450)
        comparison = compare_plans_with_monte_carlo(6000, plan, plan, rng=np.random.default_rng(8))

        assert comparison.expected_total_cost_difference == 0
        assert _without_timing(comparison.plan1_analysis.result) == _without_timing(
            comparison.plan2_analysis.result
        )
        assert comparison.break_even_point is None

    def test_compare_bronze_and_gold(self):
        """Test the two-plan comparison against the break-even solver."""
        bronze = PlanDetails(name="Bronze", monthly_premium=250, deductible=7000, coinsurance=0.4, out_of_pocket_max=9450)
        gold = PlanDetails(name="Gold", monthly_premium=500, deductible=1500, coinsurance=0.2, out_of_pocket_max=8700)

        comparison = compare_plans_with_monte_carlo(500, bronze, gold, rng=np.random.default_rng(8))

        assert comparison.break_even_point == find_break_even_point(bronze, gold)
        # Low expected costs favor the low-premium plan
        assert comparison.better_plan_for_low_utilization == "Bronze"
        assert comparison.expected_total_cost_difference < 0
