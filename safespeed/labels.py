"""
Label helpers for the SafeSpeed system.

Maps the domain enumerations to the human-readable labels shown in the
dashboard.
"""

from typing import Union

from .road import Surface
from .weather import DayPeriod, Precipitation

_SURFACE_LABELS = {
    Surface.ASPHALT: "Asphalt",
    Surface.GRAVEL: "Gravel",
    Surface.DIRT: "Dirt",
}

_DAY_PERIOD_LABELS = {
    DayPeriod.DAY: "Day",
    DayPeriod.NIGHT: "Night",
}

_PRECIPITATION_LABELS = {
    Precipitation.NONE: "None",
    Precipitation.RAIN: "Rain",
    Precipitation.SNOW: "Snow",
}


def surface_label(surface: Surface) -> str:
    return _SURFACE_LABELS[surface]


def day_period_label(day_period: DayPeriod) -> str:
    return _DAY_PERIOD_LABELS[day_period]


def precipitation_label(precipitation: Union[Precipitation, str]) -> str:
    """
    Returns the label for a precipitation type.

    Accepts the enum or its raw string value, as found in stored history.
    Unknown strings are returned unchanged.
    """
    try:
        return _PRECIPITATION_LABELS[Precipitation(precipitation)]
    except ValueError:
        return str(precipitation)
