"""
Weather module for the SafeSpeed system.

This module defines the weather-related value types: the day period, the
precipitation type, and the WeatherSnapshot dataclass which captures a
point-in-time weather reading used as optional input to the speed rule.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DayPeriod(str, Enum):
    """Time of day used by the speed rule."""

    DAY = "day"
    NIGHT = "night"


class Precipitation(str, Enum):
    """Precipitation type derived from a weather reading."""

    NONE = "none"
    RAIN = "rain"
    SNOW = "snow"


@dataclass(frozen=True)
class WeatherSnapshot:
    """
    Represents a weather reading at a single point in time.

    Snapshots are produced by the weather client or reconstructed from the
    calculation history. They are immutable once captured.

    Attributes:
        temp_c: Air temperature in degrees Celsius
        precipitation_mm: Precipitation amount in millimeters (>= 0)
        precipitation_type: Derived precipitation type (none, rain or snow)
        wind_kph: Wind speed in km/h (>= 0)
        time_iso: ISO-8601 time of the reading as reported by the provider
    """

    temp_c: float
    precipitation_mm: float
    precipitation_type: Precipitation
    wind_kph: float
    time_iso: str

    def to_dict(self) -> dict[str, Any]:
        """
        Converts the snapshot to a JSON-serializable dictionary.

        Keys use the camelCase names of the stored history format.

        Returns:
            A dictionary representation of the snapshot
        """
        return {
            "tempC": self.temp_c,
            "precipitationMm": self.precipitation_mm,
            "precipitationType": self.precipitation_type.value,
            "windKph": self.wind_kph,
            "timeISO": self.time_iso,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeatherSnapshot":
        """
        Builds a snapshot from its stored dictionary form.

        Raises:
            KeyError: If a required key is missing
            ValueError: If precipitationType is not a known value
        """
        return cls(
            temp_c=float(data["tempC"]),
            precipitation_mm=float(data["precipitationMm"]),
            precipitation_type=Precipitation(data["precipitationType"]),
            wind_kph=float(data["windKph"]),
            time_iso=str(data["timeISO"]),
        )
