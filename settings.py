"""JSON-based settings persistence for the calendar widgets."""

import json
import logging
import os

from calendar_logic import parse_weekday
from clock import CalendarClock, resolve_tz
from weather_store import SharedWeatherStore

_SETTINGS_PATH = os.environ.get(
    "KALENDAR_SETTINGS",
    os.path.join(os.path.expanduser("~"), ".kalendar-settings.json"),
)

_DEFAULTS = {
    "week_start": "monday",
    "timezone": "local",
    "shared_container": os.path.join(os.path.expanduser("~"), ".kalendar-shared.json"),
    "log_level": "WARNING",
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _valid_week_start(value) -> bool:
    try:
        parse_weekday(value)
    except ValueError:
        return False
    return True


def _valid_timezone(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        resolve_tz(value)
    except ValueError:
        return False
    return True


def load_settings(path: str | None = None) -> dict:
    """Load settings from disk, returning defaults for missing or invalid keys."""
    settings = dict(_DEFAULTS)
    try:
        with open(path or _SETTINGS_PATH, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return settings
    if not isinstance(stored, dict):
        return settings

    if "week_start" in stored and isinstance(stored["week_start"], (int, str)) \
            and _valid_week_start(stored["week_start"]):
        settings["week_start"] = stored["week_start"]
    if "timezone" in stored and _valid_timezone(stored["timezone"]):
        settings["timezone"] = stored["timezone"]
    if "shared_container" in stored and isinstance(stored["shared_container"], str) \
            and stored["shared_container"].strip():
        settings["shared_container"] = os.path.expanduser(stored["shared_container"])
    if "log_level" in stored and isinstance(stored["log_level"], str) \
            and stored["log_level"].upper() in _LOG_LEVELS:
        settings["log_level"] = stored["log_level"].upper()
    return settings


def save_settings(settings: dict, path: str | None = None) -> None:
    """Persist settings to disk."""
    with open(path or _SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)


def week_start_from(settings: dict) -> int:
    """Return the configured week start as a weekday index (0=Monday)."""
    return parse_weekday(settings["week_start"])


def clock_from(settings: dict) -> CalendarClock:
    """Return a CalendarClock for the configured time zone."""
    return CalendarClock.from_name(settings["timezone"])


def weather_store_from(settings: dict) -> SharedWeatherStore:
    """Return the weather store kept in the configured shared container."""
    return SharedWeatherStore(settings["shared_container"])


def configure_logging(settings: dict) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=getattr(logging, settings["log_level"]),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
