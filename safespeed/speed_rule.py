"""
Speed rule module for the SafeSpeed system.

This module holds the speed-rule evaluator: a pure function that multiplies a
base speed limit by independent safety factors and rounds the result to the
nearest 5 km/h. Factors are applied in a fixed order: surface, day period and
then, only when a weather snapshot is given, precipitation and wind.

The evaluator performs no validation and no I/O. Callers are responsible for
range checks (see speed_config.parse_config_form) and for deciding whether
weather should be taken into account.
"""

from typing import Optional

from .road import Surface
from .rounding import round_to_nearest
from .weather import DayPeriod, Precipitation, WeatherSnapshot

SPEED_STEP_KPH = 5

# Wind above this speed (km/h) reduces the safe speed
STRONG_WIND_KPH = 40

SURFACE_FACTORS: dict[Surface, float] = {
    Surface.ASPHALT: 1.0,
    Surface.GRAVEL: 0.8,
    Surface.DIRT: 0.7,
}

DAY_PERIOD_FACTORS: dict[DayPeriod, float] = {
    DayPeriod.DAY: 1.0,
    DayPeriod.NIGHT: 0.9,
}

PRECIPITATION_FACTORS: dict[Precipitation, float] = {
    Precipitation.NONE: 1.0,
    Precipitation.RAIN: 0.85,
    Precipitation.SNOW: 0.7,
}

STRONG_WIND_FACTOR = 0.9


def surface_factor(surface: Surface) -> float:
    return SURFACE_FACTORS[surface]


def day_period_factor(day_period: DayPeriod) -> float:
    return DAY_PERIOD_FACTORS[day_period]


def precipitation_factor(precipitation: Precipitation) -> float:
    return PRECIPITATION_FACTORS[precipitation]


def wind_factor(wind_kph: float) -> float:
    """Strong winds (> 40 km/h) reduce the safe speed by 10%."""
    return STRONG_WIND_FACTOR if wind_kph > STRONG_WIND_KPH else 1.0


def factor_breakdown(
    surface: Surface,
    day_period: DayPeriod,
    weather: Optional[WeatherSnapshot] = None
) -> dict[str, float]:
    """
    Lists the factors the evaluator applies, in application order.

    Weather factors appear only when a snapshot is given, mirroring the
    gating in evaluate().

    Args:
        surface: Road surface type
        day_period: Time of day
        weather: Optional weather snapshot

    Returns:
        An ordered mapping of factor name ("surface", "day_period",
        "precipitation", "wind") to multiplier
    """
    factors = {
        "surface": surface_factor(surface),
        "day_period": day_period_factor(day_period),
    }
    if weather is not None:
        factors["precipitation"] = precipitation_factor(weather.precipitation_type)
        factors["wind"] = wind_factor(weather.wind_kph)
    return factors


def evaluate(
    base_speed_limit: float,
    surface: Surface,
    day_period: DayPeriod,
    weather: Optional[WeatherSnapshot] = None
) -> int:
    """
    Computes the maximum safe speed for the given conditions.

    The base limit is multiplied by the surface and day period factors and,
    if a weather snapshot is supplied, by the precipitation and wind factors.
    The product is rounded to the nearest multiple of 5 km/h with halves
    rounding up.

    Out-of-range inputs are not rejected: a negative base limit gives a
    mathematically consistent but meaningless result.

    Args:
        base_speed_limit: Base speed limit in km/h
        surface: Road surface type
        day_period: Time of day
        weather: Optional weather snapshot enabling precipitation and wind factors

    Returns:
        Maximum safe speed in km/h, a multiple of 5
    """
    speed = base_speed_limit
    for factor in factor_breakdown(surface, day_period, weather).values():
        speed *= factor
    return round_to_nearest(speed, SPEED_STEP_KPH)
