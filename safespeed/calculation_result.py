"""
Calculation result module for the SafeSpeed system.

This module defines the CalculationResult dataclass returned by the
SpeedCalculator for one recalculation: the recommended speed, the factors
that produced it, and where the weather input came from.
"""

from dataclasses import dataclass, field
from typing import Optional

from .history import SpeedHistoryEntry
from .weather import WeatherSnapshot

# Weather sources
WEATHER_LIVE = "live"
WEATHER_OFFLINE = "offline"
WEATHER_NONE = "none"


@dataclass(frozen=True)
class CalculationResult:
    """
    Outcome of one safe speed calculation.

    Attributes:
        max_safe_speed: Recommended maximum speed in km/h (multiple of 5)
        factors: Applied factors in order ("surface", "day_period", and
                 "precipitation"/"wind" when weather was used)
        weather: The weather snapshot that was applied, if any
        weather_source: "live" (fresh from the provider), "offline" (last
                        known weather from history) or "none"
        weather_error: Message shown to the driver when weather was
                       requested but could not be used
        history_entry: The entry recorded for this calculation
        history_saved: False if the history could not be persisted
    """

    max_safe_speed: int
    factors: dict[str, float] = field(default_factory=dict)
    weather: Optional[WeatherSnapshot] = None
    weather_source: str = WEATHER_NONE
    weather_error: Optional[str] = None
    history_entry: Optional[SpeedHistoryEntry] = None
    history_saved: bool = True

    @property
    def uses_weather(self) -> bool:
        return self.weather is not None
