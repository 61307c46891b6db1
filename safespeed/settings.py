"""
Settings module for the SafeSpeed system.

Reads configuration from environment variables. A .env file in the working
directory is loaded first when present, so local overrides do not need to be
exported by hand.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .speed_config import Location

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "data/safespeed_store.json"
DEFAULT_LOG_DIR = "logs"
DEFAULT_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_WEATHER_TIMEOUT = 10.0
DEFAULT_LOCATION = Location(lat=45.5017, lon=-73.5673)


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the dashboard and its collaborators.

    Attributes:
        data_file: Path of the JSON key-value store
        log_dir: Directory for the application log file
        weather_url: Open-Meteo forecast endpoint
        weather_timeout: HTTP timeout for weather requests, in seconds
        default_location: Coordinates pre-filled in the driver weather form
    """

    data_file: Path
    log_dir: Path
    weather_url: str
    weather_timeout: float
    default_location: Location


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def load_settings(dotenv: bool = True) -> Settings:
    """
    Builds Settings from the environment.

    Args:
        dotenv: If True, load a .env file before reading variables. Existing
                environment variables are not overridden by the file.

    Returns:
        The resolved Settings
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    return Settings(
        data_file=Path(os.getenv("SAFESPEED_DATA_FILE") or DEFAULT_DATA_FILE),
        log_dir=Path(os.getenv("SAFESPEED_LOG_DIR") or DEFAULT_LOG_DIR),
        weather_url=os.getenv("SAFESPEED_WEATHER_URL") or DEFAULT_WEATHER_URL,
        weather_timeout=_float_env("SAFESPEED_WEATHER_TIMEOUT", DEFAULT_WEATHER_TIMEOUT),
        default_location=Location(
            lat=_float_env("SAFESPEED_DEFAULT_LAT", DEFAULT_LOCATION.lat),
            lon=_float_env("SAFESPEED_DEFAULT_LON", DEFAULT_LOCATION.lon),
        ),
    )
