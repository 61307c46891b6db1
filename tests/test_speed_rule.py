"""
Tests for the speed rule evaluator.

Tests cover:
- Equivalence classes: each surface, day period, precipitation type and wind band
- Boundary value analysis: wind threshold (40 km/h), half-way rounding at 5 km/h
- Weather gating: neutral weather changes nothing, weather factors only with a snapshot
- Degenerate inputs: values are not validated, results stay consistent
"""

import pytest

from safespeed.road import Surface
from safespeed.rounding import round_to_nearest
from safespeed.speed_rule import (
    DAY_PERIOD_FACTORS,
    PRECIPITATION_FACTORS,
    SURFACE_FACTORS,
    day_period_factor,
    evaluate,
    factor_breakdown,
    precipitation_factor,
    surface_factor,
    wind_factor,
)
from safespeed.weather import DayPeriod, Precipitation


class TestEvaluateWithoutWeather:
    """Test suite for evaluate() with surface and day period only."""

    # ==================== Equivalence Classes ====================

    @pytest.mark.parametrize("surface, expected", [
        (Surface.ASPHALT, 100),
        (Surface.GRAVEL, 80),
        (Surface.DIRT, 70),
    ])
    def test_surface_factor_applied(self, surface, expected):
        """Each surface scales the base limit by its factor."""
        assert evaluate(100, surface, DayPeriod.DAY) == expected

    def test_night_factor_applied(self):
        """Night reduces the base limit by 10%."""
        assert evaluate(100, Surface.ASPHALT, DayPeriod.NIGHT) == 90

    def test_gravel_at_night(self):
        """100 * 0.8 * 0.9 = 72 rounds down to 70."""
        assert evaluate(100, Surface.GRAVEL, DayPeriod.NIGHT) == 70

    @pytest.mark.parametrize("speed, expected", [
        (1, 0),
        (2, 0),
        (3, 5),
        (7, 5),
        (47, 45),
        (48, 50),
        (63, 65),
        (99, 100),
        (120, 120),
        (200, 200),
    ])
    def test_identity_factors_round_to_nearest_five(self, speed, expected):
        """Asphalt by day only rounds the base limit to a multiple of 5."""
        assert evaluate(speed, Surface.ASPHALT, DayPeriod.DAY) == expected

    def test_result_is_int(self):
        """The recommendation is a whole number of km/h."""
        assert isinstance(evaluate(87.3, Surface.DIRT, DayPeriod.NIGHT), int)

    # ==================== Boundary Value Analysis ====================

    @pytest.mark.parametrize("speed, expected", [
        (12.5, 15),
        (42.5, 45),
        (47.5, 50),
        (52.5, 55),
    ])
    def test_half_way_rounds_up(self, speed, expected):
        """Raw values exactly half-way between steps round up, not to even."""
        assert evaluate(speed, Surface.ASPHALT, DayPeriod.DAY) == expected

    def test_half_way_differs_from_builtin_round(self):
        """42.5 / 5 = 8.5: banker's rounding would give 40."""
        assert round(42.5 / 5) * 5 == 40
        assert evaluate(42.5, Surface.ASPHALT, DayPeriod.DAY) == 45

    # ==================== Degenerate Inputs ====================

    def test_zero_speed(self):
        assert evaluate(0, Surface.GRAVEL, DayPeriod.NIGHT) == 0

    def test_negative_speed_not_rejected(self):
        """Negative input is not validated; the result is consistent arithmetic."""
        assert evaluate(-100, Surface.ASPHALT, DayPeriod.DAY) == -100
        assert evaluate(-47.5, Surface.ASPHALT, DayPeriod.DAY) == -50

    def test_deterministic(self):
        """Repeated calls with the same inputs give the same result."""
        results = {evaluate(83.7, Surface.GRAVEL, DayPeriod.NIGHT) for _ in range(50)}
        assert len(results) == 1


class TestEvaluateWithWeather:
    """Test suite for evaluate() with a weather snapshot."""

    # ==================== Weather Gating ====================

    @pytest.mark.parametrize("surface", list(Surface))
    @pytest.mark.parametrize("day_period", list(DayPeriod))
    @pytest.mark.parametrize("speed", [30, 47, 52.5, 100, 130])
    def test_neutral_weather_changes_nothing(self, make_weather, speed, surface, day_period):
        """No precipitation and wind <= 40 km/h leave the result unchanged."""
        weather = make_weather(Precipitation.NONE, wind_kph=40)
        assert evaluate(speed, surface, day_period, weather) == evaluate(speed, surface, day_period)

    def test_no_weather_ignores_conditions(self):
        """Without a snapshot only surface and day period matter."""
        assert evaluate(100, Surface.ASPHALT, DayPeriod.DAY, None) == 100

    # ==================== Equivalence Classes ====================

    @pytest.mark.parametrize("precipitation, expected", [
        (Precipitation.NONE, 100),
        (Precipitation.RAIN, 85),
        (Precipitation.SNOW, 70),
    ])
    def test_precipitation_factor_applied(self, make_weather, precipitation, expected):
        weather = make_weather(precipitation, wind_kph=10)
        assert evaluate(100, Surface.ASPHALT, DayPeriod.DAY, weather) == expected

    def test_strong_wind_factor_applied(self, make_weather):
        weather = make_weather(Precipitation.NONE, wind_kph=60)
        assert evaluate(100, Surface.ASPHALT, DayPeriod.DAY, weather) == 90

    def test_combined_worst_case(self, make_weather):
        """100 * 0.7 * 0.9 * 0.7 * 0.9 = 39.69, rounded to 40."""
        weather = make_weather(Precipitation.SNOW, wind_kph=50)
        assert evaluate(100, Surface.DIRT, DayPeriod.NIGHT, weather) == 40

    # ==================== Boundary Value Analysis ====================

    def test_wind_exactly_40_is_calm(self, make_weather):
        weather = make_weather(Precipitation.NONE, wind_kph=40)
        assert evaluate(100, Surface.ASPHALT, DayPeriod.DAY, weather) == 100

    def test_wind_just_above_40_is_strong(self, make_weather):
        weather = make_weather(Precipitation.NONE, wind_kph=40.1)
        assert evaluate(100, Surface.ASPHALT, DayPeriod.DAY, weather) == 90


class TestFactors:
    """Test suite for the factor lookups and breakdown."""

    def test_factor_tables_cover_every_member(self):
        """Lookups are exhaustive: every enum member has a factor."""
        assert set(SURFACE_FACTORS) == set(Surface)
        assert set(DAY_PERIOD_FACTORS) == set(DayPeriod)
        assert set(PRECIPITATION_FACTORS) == set(Precipitation)

    def test_factor_values(self):
        assert surface_factor(Surface.GRAVEL) == 0.8
        assert day_period_factor(DayPeriod.NIGHT) == 0.9
        assert precipitation_factor(Precipitation.RAIN) == 0.85
        assert wind_factor(40) == 1.0
        assert wind_factor(41) == 0.9

    def test_breakdown_without_weather(self):
        factors = factor_breakdown(Surface.DIRT, DayPeriod.NIGHT)
        assert factors == {"surface": 0.7, "day_period": 0.9}

    def test_breakdown_with_weather_in_application_order(self, make_weather):
        weather = make_weather(Precipitation.SNOW, wind_kph=50)
        factors = factor_breakdown(Surface.ASPHALT, DayPeriod.DAY, weather)
        assert list(factors) == ["surface", "day_period", "precipitation", "wind"]
        assert factors["precipitation"] == 0.7
        assert factors["wind"] == 0.9


class TestRoundToNearest:
    """Test suite for the rounding helper."""

    @pytest.mark.parametrize("value, step, expected", [
        (47, 5, 45),
        (48, 5, 50),
        (47.5, 5, 50),
        (42.5, 5, 45),
        (47.8, 0.5, 48.0),
        (-47.5, 5, -50),
    ])
    def test_round_to_nearest(self, value, step, expected):
        assert round_to_nearest(value, step) == expected


def test_evaluate_exported_from_package():
    import safespeed

    assert safespeed.evaluate is evaluate
