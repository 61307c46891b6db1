"""Exceptions raised by the SafeSpeed weather client."""

from typing import Optional


class WeatherError(Exception):
    """Base exception for all weather client errors."""


class WeatherUnavailableError(WeatherError):
    """Raised when the weather provider cannot be reached (offline or transient)."""


class WeatherConnectionError(WeatherUnavailableError):
    """Raised when the client cannot connect to the weather provider."""


class WeatherTimeoutError(WeatherUnavailableError):
    """Raised when a request to the weather provider times out."""


class WeatherApiError(WeatherError):
    """Raised when the provider returns an error response or an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)
