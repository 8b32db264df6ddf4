"""
Tests for the rolling glide ratio calculator and the glide ratio smoother.
"""

import numpy as np
import pytest

from glideratio.computer.glide_ratio import (
    GlideRatioCalculator,
    limit_gr,
    low_pass_filter,
    update_gr,
)
from glideratio.core.config import GlideComputerConfig
from glideratio.core.models import (
    INVALID_GR,
    RECORD_CAPACITY,
    AverageEffTime,
    BufferState,
    EffAltitudeSource,
    is_valid_gr,
)


def make_calculator(period=AverageEffTime.SECONDS_15):
    return GlideRatioCalculator(GlideComputerConfig(average_eff_time=period))


def make_small_calculator():
    """A calculator with the minimum window of three samples."""
    calculator = make_calculator()
    calculator.initialize(None)
    assert calculator.size == 3
    return calculator


# =============================================================================
# Initialization
# =============================================================================


class TestInitialize:
    @pytest.mark.parametrize("period", list(AverageEffTime))
    def test_window_size_follows_period(self, period):
        calculator = make_calculator(period)
        assert calculator.size == period.value
        assert 3 <= calculator.size <= RECORD_CAPACITY

    def test_unknown_period_falls_back_to_minimum(self):
        calculator = make_calculator()
        calculator.initialize("forever")
        assert calculator.size == 3
        assert calculator.config.average_eff_time == AverageEffTime.SECONDS_15

    def test_reinitialize_leaves_shared_config_alone(self):
        config = GlideComputerConfig(average_eff_time=AverageEffTime.SECONDS_15)
        calculator = GlideRatioCalculator(config)
        calculator.initialize(AverageEffTime.MINUTES_2)

        assert calculator.config.average_eff_time == AverageEffTime.MINUTES_2
        assert config.average_eff_time == AverageEffTime.SECONDS_15

    def test_default_config(self):
        calculator = GlideRatioCalculator()
        assert calculator.size == 90

    def test_initial_state(self):
        calculator = make_calculator()
        assert calculator.state == BufferState.EMPTY
        assert calculator.start == -1
        assert not calculator.valid
        assert calculator.total_distance == 0
        assert calculator.records == []

    def test_reinitialize_resets_state(self):
        calculator = make_calculator()
        for i in range(20):
            calculator.add(30, 1000 - i, 1000 - i)
        assert calculator.valid

        calculator.initialize(AverageEffTime.SECONDS_30)
        assert calculator.size == 30
        assert calculator.config.average_eff_time == AverageEffTime.SECONDS_30
        assert calculator.state == BufferState.EMPTY
        assert calculator.start == -1
        assert calculator.total_distance == 0
        assert calculator.calculate() == 0


# =============================================================================
# Adding samples
# =============================================================================


class TestAdd:
    def test_three_samples_fill_minimum_window(self):
        calculator = make_small_calculator()
        calculator.add(10, 100, 100)
        calculator.add(10, 90, 90)
        calculator.add(10, 80, 80)

        assert calculator.valid
        assert calculator.state == BufferState.FULL
        assert calculator.total_distance == 30
        assert calculator.calculate(True) == pytest.approx(1.5)

    def test_filling_state_before_full_window(self):
        calculator = make_small_calculator()
        calculator.add(10, 100, 100)
        assert calculator.state == BufferState.FILLING
        assert calculator.start == 0
        calculator.add(10, 90, 90)
        assert calculator.state == BufferState.FILLING
        assert calculator.start == 1
        assert not calculator.valid

    @pytest.mark.parametrize("distance", [0, 2, 151, 200])
    def test_out_of_range_distance_is_ignored(self, distance):
        calculator = make_small_calculator()
        for _ in range(5):
            calculator.add(distance, 100, 100)

        assert calculator.start == -1
        assert calculator.total_distance == 0
        assert calculator.state == BufferState.EMPTY
        assert calculator.calculate() == 0

    def test_rejection_does_not_disturb_window(self):
        calculator = make_small_calculator()
        calculator.add(10, 100, 100)
        calculator.add(10, 90, 90)
        before = calculator.records

        calculator.add(200, 50, 50)
        calculator.add(1, 50, 50)

        assert calculator.records == before
        assert calculator.start == 1
        assert calculator.total_distance == 20

    @pytest.mark.parametrize("distance", [3, 150])
    def test_boundary_distances_are_accepted(self, distance):
        calculator = make_small_calculator()
        calculator.add(distance, 100, 100)
        assert calculator.total_distance == distance

    def test_error_counter_restarts_after_a_run_of_rejects(self):
        calculator = make_small_calculator()
        for _ in range(3):
            calculator.add(500, 100, 100)
        assert calculator.rejected_in_row == 3
        calculator.add(500, 100, 100)
        assert calculator.rejected_in_row == 0

        calculator.add(500, 100, 100)
        calculator.add(20, 100, 100)
        assert calculator.rejected_in_row == 0
        assert calculator.total_distance == 20

    def test_rejects_are_counted_per_calculator(self):
        first = make_small_calculator()
        second = make_small_calculator()

        first.add(500, 100, 100)
        first.add(500, 100, 100)
        second.add(500, 100, 100)
        assert first.rejected_in_row == 2
        assert second.rejected_in_row == 1

        second.add(20, 100, 100)
        assert second.rejected_in_row == 0
        assert first.rejected_in_row == 2
        first.add(500, 100, 100)
        assert first.rejected_in_row == 3
        assert second.total_distance == 20
        assert first.state == BufferState.EMPTY

    def test_wraparound_recycles_oldest_slot(self):
        calculator = make_small_calculator()
        for altitude in (100, 90, 80, 70):
            calculator.add(10, altitude, altitude)

        assert calculator.start == 0
        assert calculator.total_distance == 30
        assert [r.altitude for r in calculator.records] == [90, 80, 70]
        assert calculator.calculate() == pytest.approx(1.5)

    def test_rolling_sum_matches_window(self):
        calculator = make_calculator(AverageEffTime.SECONDS_15)
        rng = np.random.default_rng(7)
        distances = rng.integers(3, 151, size=100)

        for i, distance in enumerate(distances):
            calculator.add(int(distance), 2000 - i, 2000 - i)
            expected = distances[max(0, i - 14) : i + 1]
            assert calculator.total_distance == expected.sum()
            assert [r.distance for r in calculator.records] == list(expected)


# =============================================================================
# Calculating
# =============================================================================


class TestCalculate:
    def test_unavailable_is_a_float(self):
        calculator = make_small_calculator()
        assert isinstance(calculator.calculate(), float)
        calculator.add(10, 100, 100)
        assert isinstance(calculator.calculate(), float)

    def test_single_sample_is_unavailable(self):
        calculator = make_small_calculator()
        calculator.add(10, 100, 100)
        assert calculator.calculate() == 0

    def test_partial_window_uses_first_sample(self):
        calculator = make_calculator(AverageEffTime.SECONDS_15)
        for altitude in (500, 495, 490):
            calculator.add(50, altitude, altitude)
        assert calculator.calculate() == pytest.approx(150 / 10)

    def test_zero_altitude_change_is_invalid(self):
        calculator = make_small_calculator()
        for _ in range(5):
            calculator.add(40, 300, 300)
        assert calculator.calculate(True) == INVALID_GR
        assert calculator.calculate(False) == INVALID_GR

    def test_ratio_above_display_ceiling_is_invalid(self):
        calculator = make_small_calculator()
        calculator.add(150, 1002, 1002)
        calculator.add(150, 1001, 1001)
        calculator.add(150, 1000, 1000)
        # 450 m for 2 m lost
        assert calculator.calculate() == INVALID_GR

    def test_climb_gives_negative_ratio(self):
        calculator = make_small_calculator()
        for altitude in (100, 110, 120):
            calculator.add(10, altitude, altitude)
        assert calculator.calculate() == pytest.approx(-1.5)

    def test_steep_climb_beyond_ceiling_is_invalid(self):
        calculator = make_small_calculator()
        calculator.add(150, 1000, 1000)
        calculator.add(150, 1000, 1000)
        calculator.add(150, 1001, 1001)
        assert calculator.calculate() == INVALID_GR

    def test_total_energy_flag_selects_altitude_path(self):
        calculator = make_small_calculator()
        calculator.add(10, 100, 120)
        calculator.add(10, 90, 100)
        calculator.add(10, 80, 80)

        assert calculator.calculate(True) == pytest.approx(30 / 20)
        assert calculator.calculate(False) == pytest.approx(30 / 40)

    def test_missing_te_altitude_falls_back(self):
        calculator = make_small_calculator()
        calculator.add(10, 100, 0)
        calculator.add(10, 90, 100)
        calculator.add(10, 80, 60)

        # te_altitude of the oldest sample is not positive
        assert calculator.calculate(True) == pytest.approx(30 / (0 - 60))

    def test_default_follows_configured_altitude_source(self):
        config = GlideComputerConfig(
            average_eff_time=AverageEffTime.SECONDS_15,
            eff_altitude=EffAltitudeSource.NAV_ALTITUDE,
        )
        calculator = GlideRatioCalculator(config)
        calculator.add(10, 100, 120)
        calculator.add(10, 90, 80)
        assert calculator.calculate() == pytest.approx(20 / 40)


# =============================================================================
# Smoother
# =============================================================================


def test_low_pass_filter():
    assert low_pass_filter(10.0, 20.0, 0.25) == pytest.approx(12.5)
    assert low_pass_filter(10.0, 20.0, 0.0) == 10.0


def test_limit_gr():
    assert limit_gr(0.5) == 1
    assert limit_gr(0) == 1
    assert limit_gr(-0.5) == -1
    assert limit_gr(35.0) == 35.0
    assert limit_gr(-12.0) == -12.0
    assert limit_gr(5000.0) == INVALID_GR
    assert limit_gr(-5000.0) == INVALID_GR
    assert isinstance(limit_gr(0.5), float)
    assert isinstance(limit_gr(-0.5), float)


class TestUpdateGR:
    @pytest.mark.parametrize("gr", [INVALID_GR, 37.5, -4.0])
    @pytest.mark.parametrize("leg_distance", [0, -0.0, -100.0])
    def test_no_leg_is_a_no_op(self, gr, leg_distance):
        assert update_gr(gr, leg_distance, 50.0, 0.5) is gr

    def test_first_observation_is_taken_as_is(self):
        assert update_gr(INVALID_GR, 1000.0, 25.0, 0.5) == pytest.approx(40.0)

    def test_filtering_happens_on_glide_angle(self):
        # angles 1/40 and 1/20 average to 0.0375
        result = update_gr(40.0, 1000.0, 50.0, 0.5)
        assert result == pytest.approx(1 / 0.0375)

    def test_larger_factor_follows_new_value(self):
        slow = update_gr(40.0, 1000.0, 50.0, 0.1)
        fast = update_gr(40.0, 1000.0, 50.0, 0.9)
        assert abs(fast - 20.0) < abs(slow - 20.0)

    def test_shallow_angle_is_invalid(self):
        assert update_gr(INVALID_GR, 1000.0, 1.0, 0.5) == INVALID_GR
        assert update_gr(INVALID_GR, 1000.0, 0.0, 0.5) == INVALID_GR

    def test_steep_angle_is_clamped(self):
        assert update_gr(INVALID_GR, 100.0, 200.0, 0.5) == 1
        assert update_gr(INVALID_GR, 100.0, -200.0, 0.5) == -1

    def test_climb_gives_negative_ratio(self):
        assert update_gr(INVALID_GR, 1000.0, -25.0, 0.5) == pytest.approx(-40.0)

    def test_unavailable_previous_is_ignored(self):
        assert update_gr(0, 1000.0, 25.0, 0.5) == pytest.approx(40.0)

    def test_results_are_bounded(self):
        rng = np.random.default_rng(42)
        gr = INVALID_GR
        for _ in range(500):
            leg = float(rng.uniform(-10, 2000))
            height = float(rng.uniform(-100, 100))
            gr = update_gr(gr, leg, height, 0.3)
            assert gr == INVALID_GR or abs(gr) >= 1
            assert np.isfinite(gr)


def test_is_valid_gr():
    assert is_valid_gr(25.0)
    assert is_valid_gr(-3.0)
    assert not is_valid_gr(0)
    assert not is_valid_gr(INVALID_GR)
    assert not is_valid_gr(float("nan"))
