"""Weather records shared between the app and its widgets.

The shared container is a single JSON file that several processes read and
write. The store owns one key inside it and keeps the day -> weather table
there as one blob. Last writer wins; there is no locking.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from calendar_logic import parse_date

logger = logging.getLogger(__name__)

DEFAULT_KEY = "SharedWeatherData"

# WMO weather code -> (icon, color, condition)
WEATHER_CODES: dict[int, tuple[str, str, str]] = {
    0:  ("sun.max.fill",         "orange", "Clear"),
    1:  ("sun.max.fill",         "orange", "Mainly Clear"),
    2:  ("cloud.sun.fill",       "yellow", "Partly Cloudy"),
    3:  ("cloud.fill",           "gray",   "Overcast"),
    45: ("cloud.fog.fill",       "gray",   "Foggy"),
    48: ("cloud.fog.fill",       "gray",   "Rime Fog"),
    51: ("cloud.drizzle.fill",   "blue",   "Light Drizzle"),
    53: ("cloud.drizzle.fill",   "blue",   "Drizzle"),
    55: ("cloud.drizzle.fill",   "blue",   "Heavy Drizzle"),
    56: ("cloud.sleet.fill",     "cyan",   "Freezing Drizzle"),
    57: ("cloud.sleet.fill",     "cyan",   "Heavy Freezing Drizzle"),
    61: ("cloud.rain.fill",      "blue",   "Light Rain"),
    63: ("cloud.rain.fill",      "blue",   "Rain"),
    65: ("cloud.heavyrain.fill", "blue",   "Heavy Rain"),
    66: ("cloud.sleet.fill",     "cyan",   "Freezing Rain"),
    67: ("cloud.sleet.fill",     "cyan",   "Heavy Freezing Rain"),
    71: ("cloud.snow.fill",      "cyan",   "Light Snow"),
    73: ("cloud.snow.fill",      "cyan",   "Snow"),
    75: ("cloud.snow.fill",      "cyan",   "Heavy Snow"),
    77: ("cloud.snow.fill",      "cyan",   "Snow Grains"),
    80: ("cloud.sun.rain.fill",  "blue",   "Light Rain Showers"),
    81: ("cloud.rain.fill",      "blue",   "Rain Showers"),
    82: ("cloud.heavyrain.fill", "blue",   "Heavy Rain Showers"),
    85: ("cloud.snow.fill",      "cyan",   "Light Snow Showers"),
    86: ("cloud.snow.fill",      "cyan",   "Heavy Snow Showers"),
    95: ("cloud.bolt.rain.fill", "purple", "Thunderstorm"),
    96: ("cloud.bolt.rain.fill", "purple", "Thunderstorm with Hail"),
    99: ("cloud.bolt.rain.fill", "purple", "Heavy Thunderstorm"),
}

UNKNOWN_WEATHER = ("questionmark.circle.fill", "secondary", "Unknown")


def describe_weather_code(code: int) -> tuple[str, str, str]:
    """Return (icon, color, condition) for a weather code."""
    return WEATHER_CODES.get(code, UNKNOWN_WEATHER)


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing "Z" for UTC."""
    if isinstance(text, str) and text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class WeatherInfo:
    weather_code: int
    temperature: float
    min_temp: float
    max_temp: float
    humidity: float
    wind_speed: float
    date: datetime

    @property
    def icon(self) -> str:
        return describe_weather_code(self.weather_code)[0]

    @property
    def color(self) -> str:
        return describe_weather_code(self.weather_code)[1]

    @property
    def condition(self) -> str:
        return describe_weather_code(self.weather_code)[2]

    def as_dict(self) -> dict[str, Any]:
        return {
            "weatherCode": self.weather_code,
            "temperature": self.temperature,
            "minTemp": self.min_temp,
            "maxTemp": self.max_temp,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> WeatherInfo:
        """Decode one record. Raises KeyError, TypeError or ValueError if malformed."""
        return cls(
            weather_code=int(raw["weatherCode"]),
            temperature=float(raw["temperature"]),
            min_temp=float(raw["minTemp"]),
            max_temp=float(raw["maxTemp"]),
            humidity=float(raw["humidity"]),
            wind_speed=float(raw["windSpeed"]),
            date=parse_timestamp(raw["date"]),
        )


def date_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


class SharedWeatherStore:
    """The day -> WeatherInfo table kept under one key of a shared container."""

    def __init__(self, container_path: str | os.PathLike, key: str = DEFAULT_KEY) -> None:
        self.container_path = Path(container_path)
        self.key = key

    def _read_container(self) -> dict[str, Any]:
        try:
            with open(self.container_path, "r", encoding="utf-8") as f:
                container = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as ex:
            logger.warning("Shared container %s is unreadable: %s", self.container_path, ex)
            return {}
        if not isinstance(container, dict):
            logger.warning("Shared container %s does not hold an object", self.container_path)
            return {}
        return container

    def _write_container(self, container: dict[str, Any]) -> bool:
        try:
            self.container_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".shared-", suffix=".json",
                                            dir=str(self.container_path.parent))
        except OSError as ex:
            logger.error("Failed to write shared container %s: %s", self.container_path, ex)
            return False
        try:
            try:
                f = os.fdopen(fd, "w", encoding="utf-8")
            except OSError:
                os.close(fd)
                raise
            with f:
                json.dump(container, f, indent=2)
                f.write("\n")
            os.replace(tmp_name, self.container_path)
            return True
        except OSError as ex:
            logger.error("Failed to write shared container %s: %s", self.container_path, ex)
            return False
        finally:
            if os.path.exists(tmp_name):
                try:
                    os.remove(tmp_name)
                except OSError:
                    pass

    def save(self, table: dict[str, WeatherInfo]) -> bool:
        """Replace the stored table. Returns False if the container could not be written."""
        container = self._read_container()
        container[self.key] = {k: info.as_dict() for k, info in table.items()}
        if not self._write_container(container):
            return False
        logger.info("Saved %d weather entries to %s", len(table), self.container_path)
        return True

    def load(self) -> dict[str, WeatherInfo]:
        """Return the stored table, or {} if it is absent or cannot be decoded."""
        blob = self._read_container().get(self.key)
        if blob is None:
            logger.debug("No weather data under %r in %s", self.key, self.container_path)
            return {}
        if not isinstance(blob, dict):
            logger.warning("Weather data under %r is not an object", self.key)
            return {}
        try:
            table = {str(k): WeatherInfo.from_dict(v) for k, v in blob.items()}
        except (KeyError, TypeError, ValueError) as ex:
            logger.warning("Failed to decode weather data under %r: %s", self.key, ex)
            return {}
        logger.debug("Loaded %d weather entries from %s", len(table), self.container_path)
        return table

    def weather_for_date(self, d: date | str) -> WeatherInfo | None:
        """Return the record for a day (date or YYYY-MM-DD text), if stored."""
        if isinstance(d, str):
            d = parse_date(d)
        return self.load().get(date_key(d))

    def clear(self) -> bool:
        """Remove the table; other keys in the container are left untouched."""
        container = self._read_container()
        if self.key not in container:
            return True
        del container[self.key]
        if not self._write_container(container):
            return False
        logger.info("Cleared weather data from %s", self.container_path)
        return True
