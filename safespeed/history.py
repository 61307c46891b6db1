"""
History module for the SafeSpeed system.

This module defines the SpeedHistoryEntry dataclass, one record per speed
calculation, and the SpeedHistory class which keeps the newest-first log of
entries in the key-value store. Entries capture everything the evaluator was
given, so any entry can be re-evaluated to check its recorded result.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from .labels import day_period_label, precipitation_label, surface_label
from .speed_config import SpeedConfig
from .speed_rule import evaluate
from .storage import KeyValueStore, StorageKeys
from .weather import WeatherSnapshot

logger = logging.getLogger(__name__)

# Speed compared against the recommendation when no live speed is known
DEFAULT_CURRENT_SPEED = 45

HISTORY_COLUMNS = [
    "Timestamp",
    "Max speed (km/h)",
    "Base limit (km/h)",
    "Surface",
    "Period",
    "Precipitation",
    "Wind (km/h)",
    "Status",
]


@dataclass(frozen=True)
class SpeedHistoryEntry:
    """
    Represents a single speed calculation.

    Attributes:
        timestamp_iso: When the calculation ran (ISO-8601, UTC)
        config_snapshot: The configuration in effect at that time
        weather_snapshot: The weather applied, or None if weather was not used
        computed_max: The recommended maximum speed in km/h
    """

    timestamp_iso: str
    config_snapshot: SpeedConfig
    computed_max: int
    weather_snapshot: Optional[WeatherSnapshot] = None

    def replays_consistently(self) -> bool:
        """
        Checks that re-evaluating the recorded inputs gives computed_max.

        Returns:
            True if the entry's result matches its own snapshots
        """
        recomputed = evaluate(
            self.config_snapshot.base_speed_limit,
            self.config_snapshot.surface,
            self.config_snapshot.day_period,
            self.weather_snapshot,
        )
        return recomputed == self.computed_max

    def safety_status(self, current_speed: float = DEFAULT_CURRENT_SPEED) -> str:
        """
        Classifies a driving speed against this entry's recommendation.

        Returns:
            "safe" if current_speed does not exceed computed_max, else "caution"
        """
        return "safe" if current_speed <= self.computed_max else "caution"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestampISO": self.timestamp_iso,
            "configSnapshot": self.config_snapshot.to_dict(),
            "computedMax": self.computed_max,
        }
        if self.weather_snapshot is not None:
            data["weatherSnapshot"] = self.weather_snapshot.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeedHistoryEntry":
        """
        Builds an entry from its stored dictionary form.

        Raises:
            KeyError: If a required key is missing
            ValueError: If a value cannot be converted
        """
        weather = data.get("weatherSnapshot")
        return cls(
            timestamp_iso=str(data["timestampISO"]),
            config_snapshot=SpeedConfig.from_dict(data["configSnapshot"]),
            computed_max=int(data["computedMax"]),
            weather_snapshot=WeatherSnapshot.from_dict(weather) if weather else None,
        )


class SpeedHistory:
    """
    Newest-first log of speed calculations kept in a KeyValueStore.

    The log is append-only apart from clear(), which drops every entry.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def entries(self) -> list[SpeedHistoryEntry]:
        """
        Loads all entries, newest first.

        Malformed stored entries are skipped and logged rather than failing
        the whole history.
        """
        raw_entries = self.store.get(StorageKeys.SAFE_SPEED_HISTORY) or []
        if not isinstance(raw_entries, list):
            logger.warning("Ignoring history stored as %s", type(raw_entries).__name__)
            return []

        entries = []
        for raw in raw_entries:
            try:
                entries.append(SpeedHistoryEntry.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed history entry: %s", e)
        return entries

    def record(self, entry: SpeedHistoryEntry) -> bool:
        """
        Prepends an entry to the stored history.

        Returns:
            True if the history was persisted, False otherwise
        """
        def prepend(raw_entries: Any) -> list[dict[str, Any]]:
            if not isinstance(raw_entries, list):
                raw_entries = []
            return [entry.to_dict()] + raw_entries

        return self.store.update(StorageKeys.SAFE_SPEED_HISTORY, prepend, default=[])

    def clear(self) -> bool:
        return self.store.update(StorageKeys.SAFE_SPEED_HISTORY, lambda _: [])

    def last_known_weather(self) -> Optional[WeatherSnapshot]:
        """
        Returns the most recently recorded weather snapshot.

        Used as a fallback when the weather provider is unreachable.
        """
        for entry in self.entries():
            if entry.weather_snapshot is not None:
                return entry.weather_snapshot
        return None

    def to_dataframe(self, current_speed: float = DEFAULT_CURRENT_SPEED) -> pd.DataFrame:
        """
        Converts the history to a table for display.

        Args:
            current_speed: Speed used to compute each row's safety status

        Returns:
            DataFrame with one row per entry (newest first) and HISTORY_COLUMNS
        """
        rows = []
        for entry in self.entries():
            config = entry.config_snapshot
            weather = entry.weather_snapshot
            rows.append({
                "Timestamp": pd.to_datetime(entry.timestamp_iso, errors="coerce"),
                "Max speed (km/h)": entry.computed_max,
                "Base limit (km/h)": config.base_speed_limit,
                "Surface": surface_label(config.surface),
                "Period": day_period_label(config.day_period),
                "Precipitation": precipitation_label(weather.precipitation_type) if weather else "-",
                "Wind (km/h)": weather.wind_kph if weather else None,
                "Status": entry.safety_status(current_speed),
            })
        return pd.DataFrame(rows, columns=HISTORY_COLUMNS)
