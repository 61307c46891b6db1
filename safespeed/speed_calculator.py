"""
Speed calculator module for the SafeSpeed system.

This module contains the SpeedCalculator class, which coordinates one safe
speed recalculation: it loads the stored configuration, resolves the weather
input (live, last known, or none), calls the speed rule evaluator, records
the result in the history and writes a calculation log line.

The evaluator itself stays pure; every I/O and fallback decision lives here.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from .calculation_result import (
    WEATHER_LIVE,
    WEATHER_NONE,
    WEATHER_OFFLINE,
    CalculationResult,
)
from .exceptions import WeatherApiError, WeatherUnavailableError
from .history import SpeedHistory, SpeedHistoryEntry
from .logging_config import log_calculation
from .speed_config import Location, SpeedConfig
from .speed_rule import evaluate, factor_breakdown
from .storage import KeyValueStore, StorageKeys
from .weather import WeatherSnapshot
from .weather_client import OpenMeteoClient

logger = logging.getLogger(__name__)


class SpeedCalculator:
    """
    Orchestrates safe speed calculations for the driver dashboard.

    Weather is only applied when the driver asks for it and the administrator
    has enabled external weather. If the provider is unreachable, the last
    weather recorded in the history is used instead; if it answers with an
    error, the calculation proceeds without weather and reports the error.
    """

    def __init__(self, store: KeyValueStore, weather_client: OpenMeteoClient) -> None:
        """
        Initialize the calculator.

        Args:
            store: Key-value store holding the configuration and history
            weather_client: Client used for live weather lookups
        """
        self.store = store
        self.weather_client = weather_client
        self.history = SpeedHistory(store)

    def load_config(self) -> Optional[SpeedConfig]:
        """
        Loads the stored configuration.

        Returns:
            The configuration, or None if none is stored or it is unusable
        """
        raw = self.store.get(StorageKeys.SAFE_SPEED_CONFIG)
        if raw is None:
            return None

        try:
            config = SpeedConfig.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Stored speed configuration is malformed: %s", e)
            return None

        valid, reason = config.validate()
        if not valid:
            logger.warning("Stored speed configuration is invalid: %s", reason)
            return None
        return config

    def save_config(self, config: SpeedConfig) -> bool:
        saved = self.store.set(StorageKeys.SAFE_SPEED_CONFIG, config.to_dict())
        if saved:
            logger.info("Saved speed configuration: %s", config.to_dict())
        return saved

    def resolve_weather(
        self,
        config: SpeedConfig,
        use_external_weather: bool,
        location: Optional[Location] = None
    ) -> tuple[Optional[WeatherSnapshot], str, Optional[str]]:
        """
        Decides which weather snapshot, if any, feeds the evaluator.

        Args:
            config: The configuration in effect
            use_external_weather: The driver's weather toggle
            location: Coordinates to query; defaults to config.default_location

        Returns:
            A tuple containing:
            - Optional[WeatherSnapshot]: The weather to apply, or None
            - str: Weather source ("live", "offline" or "none")
            - Optional[str]: Error message for the driver, or None
        """
        if not (use_external_weather and config.enable_external_weather):
            return (None, WEATHER_NONE, None)

        location = location or config.default_location
        if location is None:
            return (None, WEATHER_NONE, "No location available for weather lookup")

        try:
            snapshot = self.weather_client.get_current_weather(location.lat, location.lon)
            return (snapshot, WEATHER_LIVE, None)
        except WeatherUnavailableError as e:
            logger.warning("Weather provider unavailable, using last known weather: %s", e)
            cached = self.history.last_known_weather()
            if cached is None:
                return (None, WEATHER_NONE, f"Weather unavailable and no previous reading: {e}")
            return (cached, WEATHER_OFFLINE, None)
        except WeatherApiError as e:
            logger.error("Weather provider error: %s", e)
            return (None, WEATHER_NONE, e.message)

    def recalculate(
        self,
        use_external_weather: bool = False,
        location: Optional[Location] = None
    ) -> Optional[CalculationResult]:
        """
        Computes the current safe speed and records it in the history.

        Args:
            use_external_weather: The driver's weather toggle
            location: Optional coordinates for the weather lookup

        Returns:
            The calculation result, or None if no configuration is stored
        """
        config = self.load_config()
        if config is None:
            return None

        weather, source, error = self.resolve_weather(config, use_external_weather, location)
        computed_max = evaluate(config.base_speed_limit, config.surface, config.day_period, weather)

        entry = SpeedHistoryEntry(
            timestamp_iso=datetime.now(timezone.utc).isoformat(),
            config_snapshot=config,
            computed_max=computed_max,
            weather_snapshot=weather,
        )
        saved = self.history.record(entry)
        log_calculation(computed_max, config, weather, source)

        return CalculationResult(
            max_safe_speed=computed_max,
            factors=factor_breakdown(config.surface, config.day_period, weather),
            weather=weather,
            weather_source=source,
            weather_error=error,
            history_entry=entry,
            history_saved=saved,
        )
