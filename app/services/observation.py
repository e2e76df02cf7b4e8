"""
Weather observation normalizer.

Turns a raw OpenWeatherMap "current weather" record into the WeatherObservation
the advisory engine evaluates. Only four fields matter:

    name                    → location_name (optional, defaults to "")
    main.temp               → temperature_celsius
    main.humidity           → humidity_percent (0–100)
    weather[0].description  → condition_description (lower-cased)

Anything missing or malformed among the required three raises
IncompleteObservation. No defaults are guessed for them.
"""
import logging
import math
from collections.abc import Mapping
from typing import Any

from app.schemas.weather import WeatherObservation

logger = logging.getLogger(__name__)


class IncompleteObservation(ValueError):
    """Raised when a provider record lacks a field the advisory engine needs."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


def _number(value: Any, field: str) -> float:
    # bool is an int subclass — reject it explicitly
    if value is None:
        raise IncompleteObservation(field, "missing")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise IncompleteObservation(field, f"not numeric ({value!r})")
    try:
        number = float(value)
    except OverflowError:
        raise IncompleteObservation(field, "out of range (too large for a float)")
    if not math.isfinite(number):
        raise IncompleteObservation(field, f"not finite ({value!r})")
    return number


def _condition(raw: Mapping) -> str:
    entries = raw.get("weather")
    if not isinstance(entries, list) or not entries:
        raise IncompleteObservation("weather", "no condition entries")

    first = entries[0]
    if not isinstance(first, Mapping):
        raise IncompleteObservation("weather[0]", "not an object")

    description = first.get("description")
    if not isinstance(description, str) or not description.strip():
        raise IncompleteObservation("weather[0].description", "missing")
    return description.strip().lower()


def normalize_observation(raw: Mapping) -> WeatherObservation:
    """Map a raw provider record to a WeatherObservation or raise IncompleteObservation."""
    if not isinstance(raw, Mapping):
        raise IncompleteObservation("record", "not an object")

    main = raw.get("main")
    if not isinstance(main, Mapping):
        raise IncompleteObservation("main", "missing")

    temperature = _number(main.get("temp"), "main.temp")
    humidity = _number(main.get("humidity"), "main.humidity")
    if not 0 <= humidity <= 100:
        raise IncompleteObservation("main.humidity", f"out of range ({humidity})")

    condition = _condition(raw)

    name = raw.get("name")
    location_name = "" if name is None else str(name)

    observation = WeatherObservation(
        location_name=location_name,
        temperature_celsius=temperature,
        humidity_percent=math.floor(humidity + 0.5),  # halves round up
        condition_description=condition,
    )
    logger.debug(
        "normalized observation: %s %.1f°C %d%% %s",
        observation.location_name or "<unnamed>",
        observation.temperature_celsius,
        observation.humidity_percent,
        observation.condition_description,
    )
    return observation
