"""
Pytest configuration for SafeSpeed tests.

Registers custom markers and provides shared fixtures.
"""

import pytest

from safespeed.road import Surface
from safespeed.speed_config import SpeedConfig
from safespeed.storage import KeyValueStore
from safespeed.weather import DayPeriod, Precipitation, WeatherSnapshot


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def store(tmp_path):
    """Fixture providing an empty KeyValueStore in a temporary directory."""
    return KeyValueStore(tmp_path / "store.json")


@pytest.fixture
def config():
    """Fixture providing a typical configuration: 100 km/h on asphalt by day."""
    return SpeedConfig(
        base_speed_limit=100,
        surface=Surface.ASPHALT,
        day_period=DayPeriod.DAY,
        enable_external_weather=True,
    )


@pytest.fixture
def make_weather():
    """Fixture providing a WeatherSnapshot factory with neutral defaults."""
    def _make(precipitation_type=Precipitation.NONE, wind_kph=10.0, temp_c=15.0,
              precipitation_mm=0.0, time_iso="2025-01-15T10:00"):
        return WeatherSnapshot(
            temp_c=temp_c,
            precipitation_mm=precipitation_mm,
            precipitation_type=precipitation_type,
            wind_kph=wind_kph,
            time_iso=time_iso,
        )
    return _make
