"""
Speed configuration module for the SafeSpeed system.

This module defines the SpeedConfig dataclass which holds the administrator-set
policy (base speed limit, road surface, day period and the external weather
switch), together with the parsing and validation used by the admin settings
form.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .road import Surface
from .weather import DayPeriod


@dataclass(frozen=True)
class Location:
    """Geographic coordinates in decimal degrees."""

    lat: float
    lon: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        return cls(lat=float(data["lat"]), lon=float(data["lon"]))


@dataclass(frozen=True)
class SpeedConfig:
    """
    Administrator-set policy used to compute safe speed recommendations.

    There is a single SpeedConfig record; saving a new one replaces the
    previous one. Driver views read it on every recalculation.

    Attributes:
        base_speed_limit: Nominal maximum speed in km/h (must be > 0 and <= 200)
        surface: Road surface type
        day_period: Time of day (day or night)
        enable_external_weather: Whether drivers may apply live weather factors
        default_location: Optional coordinates used for weather lookups
    """

    base_speed_limit: float
    surface: Surface
    day_period: DayPeriod
    enable_external_weather: bool
    default_location: Optional[Location] = None

    MIN_SPEED_LIMIT = 0
    MAX_SPEED_LIMIT = 200

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Validates the configuration against the accepted ranges.

        Returns:
            A tuple containing:
            - bool: True if the configuration is usable, False otherwise
            - Optional[str]: None if valid, or a descriptive error message
        """
        if not self.MIN_SPEED_LIMIT < self.base_speed_limit <= self.MAX_SPEED_LIMIT:
            return (False, SPEED_LIMIT_ERROR)
        return (True, None)

    def to_dict(self) -> dict[str, Any]:
        """
        Converts the configuration to its stored dictionary form.

        Returns:
            A JSON-serializable dictionary with camelCase keys
        """
        data: dict[str, Any] = {
            "baseSpeedLimit": self.base_speed_limit,
            "surface": self.surface.value,
            "dayPeriod": self.day_period.value,
            "enableExternalWeather": self.enable_external_weather,
        }
        if self.default_location is not None:
            data["defaultLocation"] = self.default_location.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeedConfig":
        """
        Builds a configuration from its stored dictionary form.

        Raises:
            KeyError: If a required key is missing
            ValueError: If a value cannot be converted
        """
        location = data.get("defaultLocation")
        return cls(
            base_speed_limit=float(data["baseSpeedLimit"]),
            surface=Surface(data["surface"]),
            day_period=DayPeriod(data["dayPeriod"]),
            enable_external_weather=bool(data.get("enableExternalWeather", False)),
            default_location=Location.from_dict(location) if location else None,
        )


SPEED_LIMIT_ERROR = "Speed limit must be a number between 1 and 200 km/h"

DEFAULT_CONFIG = SpeedConfig(
    base_speed_limit=50,
    surface=Surface.ASPHALT,
    day_period=DayPeriod.DAY,
    enable_external_weather=True,
)


def parse_config_form(
    base_speed_limit: str,
    surface: str,
    day_period: str,
    enable_external_weather: bool,
    default_location: Optional[Location] = None,
) -> tuple[Optional[SpeedConfig], dict[str, str]]:
    """
    Parses raw admin form values into a SpeedConfig.

    Each invalid field is reported separately so the form can show the error
    next to the field that caused it.

    Args:
        base_speed_limit: Speed limit as typed by the administrator
        surface: Surface value ("asphalt", "gravel" or "dirt")
        day_period: Day period value ("day" or "night")
        enable_external_weather: State of the external weather checkbox
        default_location: Optional coordinates for weather lookups

    Returns:
        A tuple containing:
        - Optional[SpeedConfig]: The parsed configuration, or None on errors
        - dict[str, str]: Field name to error message, empty when valid
    """
    errors: dict[str, str] = {}

    try:
        speed = float(base_speed_limit)
    except (TypeError, ValueError):
        speed = None
    # NaN fails both comparisons and is rejected here too
    if speed is None or not 0 < speed <= SpeedConfig.MAX_SPEED_LIMIT:
        errors["base_speed_limit"] = SPEED_LIMIT_ERROR

    try:
        surface_value = Surface(surface)
    except ValueError:
        errors["surface"] = f"Unknown surface: {surface}"

    try:
        day_period_value = DayPeriod(day_period)
    except ValueError:
        errors["day_period"] = f"Unknown day period: {day_period}"

    if errors:
        return (None, errors)

    config = SpeedConfig(
        base_speed_limit=speed,
        surface=surface_value,
        day_period=day_period_value,
        enable_external_weather=bool(enable_external_weather),
        default_location=default_location,
    )
    return (config, errors)
