"""
Weather client module for the SafeSpeed system.

This module contains the OpenMeteoClient class which fetches current weather
from the Open-Meteo forecast API over httpx, and the mapping from the
provider's response to a WeatherSnapshot.

Transport failures are raised as WeatherConnectionError or WeatherTimeoutError
(both WeatherUnavailableError), so callers can fall back to cached weather.
Error responses and unusable bodies are raised as WeatherApiError.
"""

import logging
from typing import Any

import httpx

from .exceptions import (
    WeatherApiError,
    WeatherConnectionError,
    WeatherTimeoutError,
)
from .weather import Precipitation, WeatherSnapshot

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_TIMEOUT = 10.0

CURRENT_FIELDS = "temperature_2m,precipitation,weather_code,wind_speed_10m"

# Precipitation below this amount (mm) counts as none
MIN_PRECIPITATION_MM = 0.1

# WMO weather codes reported for snowfall, snow grains and snow showers
SNOW_WEATHER_CODES = frozenset({71, 72, 73, 74, 75, 76, 77, 85, 86})


def derive_precipitation_type(precipitation_mm: float, temp_c: float, weather_code: int) -> Precipitation:
    """
    Derives the precipitation type from amount, temperature and weather code.

    - Less than 0.1 mm: none
    - At or below 0 °C, or a snow weather code: snow
    - Otherwise: rain
    """
    if precipitation_mm < MIN_PRECIPITATION_MM:
        return Precipitation.NONE
    if temp_c <= 0 or weather_code in SNOW_WEATHER_CODES:
        return Precipitation.SNOW
    return Precipitation.RAIN


def map_to_weather_snapshot(payload: dict[str, Any]) -> WeatherSnapshot:
    """
    Converts an Open-Meteo response body to a WeatherSnapshot.

    Args:
        payload: Parsed JSON body containing a "current" object

    Returns:
        The mapped WeatherSnapshot

    Raises:
        WeatherApiError: If the "current" block or one of its fields is
                         missing or not numeric
    """
    current = payload.get("current") if isinstance(payload, dict) else None
    if not isinstance(current, dict):
        raise WeatherApiError("Invalid response format: missing current weather data")

    try:
        temp_c = float(current["temperature_2m"])
        precipitation_mm = float(current["precipitation"])
        weather_code = int(current["weather_code"])
        wind_kph = float(current["wind_speed_10m"])
        time_iso = str(current["time"])
    except (KeyError, TypeError, ValueError) as e:
        raise WeatherApiError(f"Invalid response format: {e!r}") from e

    return WeatherSnapshot(
        temp_c=temp_c,
        precipitation_mm=precipitation_mm,
        precipitation_type=derive_precipitation_type(precipitation_mm, temp_c, weather_code),
        wind_kph=wind_kph,
        time_iso=time_iso,
    )


class OpenMeteoClient:
    """
    Synchronous client for current weather from Open-Meteo.

    Owns an httpx.Client; call close() or use the client as a context manager
    to release it. No retries are attempted.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url
        self._client = httpx.Client(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def get_current_weather(self, lat: float, lon: float) -> WeatherSnapshot:
        """
        Fetches current weather for the given coordinates.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees

        Returns:
            Current weather mapped to a WeatherSnapshot

        Raises:
            WeatherConnectionError: If the provider cannot be reached
            WeatherTimeoutError: If the request times out
            WeatherApiError: If the provider answers with status >= 400 or an
                             unusable body, or the request fails in any
                             other way (bad URL, undecodable content)
        """
        params = {
            "latitude": str(lat),
            "longitude": str(lon),
            "current": CURRENT_FIELDS,
            "wind_speed_unit": "kmh",
            "precipitation_unit": "mm",
            "timezone": "auto",
        }
        try:
            response = self._client.get(self.base_url, params=params)
        except httpx.TimeoutException as exc:
            raise WeatherTimeoutError(f"Weather request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise WeatherConnectionError(f"Failed to fetch weather data: {exc}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise WeatherApiError(f"Weather request failed: {exc}") from exc

        if response.status_code >= 400:
            raise WeatherApiError(
                f"Open-Meteo API request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise WeatherApiError("Invalid response format: body is not JSON") from exc

        snapshot = map_to_weather_snapshot(payload)
        logger.debug("Fetched weather for (%s, %s): %s", lat, lon, snapshot)
        return snapshot

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OpenMeteoClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
