"""
Logging setup for the SafeSpeed system.

Module loggers live under the "safespeed" namespace and propagate to a single
file handler attached by configure_logging(). Each speed calculation is also
written as one human-readable line so the log doubles as an audit trail.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from .labels import day_period_label, precipitation_label, surface_label
from .speed_config import SpeedConfig
from .weather import WeatherSnapshot

LOGGER_NAME = "safespeed"
LOG_FILE_NAME = "safespeed.log"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

_configure_lock = threading.Lock()

calculation_logger = logging.getLogger(f"{LOGGER_NAME}.calculations")


def configure_logging(log_dir: Union[str, Path], level: int = logging.INFO) -> logging.Logger:
    """
    Attaches the application file handler to the "safespeed" logger.

    Safe to call repeatedly (Streamlit re-runs the script on every
    interaction): the handler is only added once per log file.

    Args:
        log_dir: Directory for the log file, created if missing
        level: Minimum level written to the file

    Returns:
        The configured "safespeed" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    log_path = Path(log_dir) / LOG_FILE_NAME

    with _configure_lock:
        logger.setLevel(level)
        for handler in logger.handlers:
            if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path.absolute():
                return logger

        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


def format_calculation(
    computed_max: int,
    config: SpeedConfig,
    weather: Optional[WeatherSnapshot],
    weather_source: str
) -> str:
    """
    Formats one calculation as a fixed-width log line.

    Format: SPEED(km/h) | SURFACE | PERIOD | WEATHER | SOURCE
    """
    if weather is not None:
        weather_str = (
            f"{precipitation_label(weather.precipitation_type)}, "
            f"{weather.wind_kph:g} km/h wind"
        )
    else:
        weather_str = "None"

    return (
        f"{computed_max:3d} km/h | "
        f"{surface_label(config.surface):7s} | "
        f"{day_period_label(config.day_period):5s} | "
        f"Weather: {weather_str:20s} | "
        f"{weather_source}"
    )


def log_calculation(
    computed_max: int,
    config: SpeedConfig,
    weather: Optional[WeatherSnapshot],
    weather_source: str
) -> None:
    calculation_logger.info(format_calculation(computed_max, config, weather, weather_source))
