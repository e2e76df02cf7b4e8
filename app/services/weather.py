"""
OpenWeatherMap current-weather service.

Fetch current conditions for a lat/lon or a city name and hand back the raw
JSON record. get_advisory_for_coords / get_advisory_for_city chain the lookup
through the observation normalizer and the advisory engine.

Single-shot requests: no caching, no retries. A 404 from the provider means the
city (or location) is unknown and raises LocationNotFound; any other failure
raises WeatherServiceError.
"""
import logging

import httpx

from app.core.config import settings
from app.schemas.advisory import AdvisoryResult
from app.schemas.weather import WeatherObservation
from app.services.advisory import evaluate
from app.services.observation import normalize_observation

logger = logging.getLogger(__name__)


class WeatherServiceError(Exception):
    """Raised when the weather provider cannot be reached or returns an error."""


class LocationNotFound(WeatherServiceError):
    """Raised when the provider does not know the requested location."""


def _build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.WEATHER_TIMEOUT_SECONDS)


async def _fetch_current(params: dict) -> dict:
    """Raw HTTP call to OpenWeatherMap /weather. Returns parsed JSON."""
    if not settings.OPENWEATHER_API_KEY:
        raise WeatherServiceError("OPENWEATHER_API_KEY is not configured")

    url = f"{settings.OPENWEATHER_BASE_URL}/weather"
    query = {**params, "appid": settings.OPENWEATHER_API_KEY, "units": settings.WEATHER_UNITS}

    try:
        async with _build_client() as client:
            logger.debug("GET %s %s", url, params)
            resp = await client.get(url, params=query)
    except httpx.HTTPError as exc:
        logger.warning("weather fetch failed for %s: %s", params, exc)
        raise WeatherServiceError(f"weather provider unreachable: {exc}") from exc

    if resp.status_code == 404:
        raise LocationNotFound(f"no weather for {params}")
    if resp.status_code != 200:
        logger.warning("weather fetch returned %d for %s", resp.status_code, params)
        raise WeatherServiceError(f"weather provider returned HTTP {resp.status_code}")

    try:
        return resp.json()
    except ValueError as exc:
        raise WeatherServiceError("weather provider returned invalid JSON") from exc


async def fetch_weather_by_coords(lat: float, lon: float) -> dict:
    return await _fetch_current({"lat": lat, "lon": lon})


async def fetch_weather_by_city(city: str) -> dict:
    city = city.strip()
    if not city:
        raise ValueError("city name is empty")
    return await _fetch_current({"q": city})


async def get_advisory_for_coords(lat: float, lon: float) -> tuple[WeatherObservation, AdvisoryResult]:
    """Fetch weather for lat/lon, normalize it, and evaluate the advisory rules."""
    raw = await fetch_weather_by_coords(lat, lon)
    observation = normalize_observation(raw)
    return observation, evaluate(observation)


async def get_advisory_for_city(city: str) -> tuple[WeatherObservation, AdvisoryResult]:
    """Fetch weather for a city name, normalize it, and evaluate the advisory rules."""
    raw = await fetch_weather_by_city(city)
    observation = normalize_observation(raw)
    return observation, evaluate(observation)
