from fastapi import APIRouter, HTTPException, Query

from app.schemas.weather import WeatherObservation, WeatherRead
from app.services.observation import IncompleteObservation, normalize_observation
from app.services.weather import (
    LocationNotFound,
    WeatherServiceError,
    fetch_weather_by_city,
    fetch_weather_by_coords,
)

router = APIRouter(prefix="/weather", tags=["weather"])

CITY_ERROR = "City not found or weather data unavailable"
LOCATION_ERROR = "Failed to get weather for current location"
INCOMPLETE_ERROR = "Weather data unavailable"


async def observe_coords(lat: float, lon: float) -> WeatherObservation:
    """Fetch + normalize for a location, translating failures to HTTP errors."""
    try:
        raw = await fetch_weather_by_coords(lat, lon)
    except LocationNotFound:
        raise HTTPException(status_code=404, detail=LOCATION_ERROR)
    except WeatherServiceError:
        raise HTTPException(status_code=502, detail=LOCATION_ERROR)

    try:
        return normalize_observation(raw)
    except IncompleteObservation:
        raise HTTPException(status_code=502, detail=INCOMPLETE_ERROR)


async def observe_city(name: str) -> WeatherObservation:
    """Fetch + normalize for a city name, translating failures to HTTP errors."""
    if not name.strip():
        raise HTTPException(status_code=422, detail="City name must not be blank")

    try:
        raw = await fetch_weather_by_city(name)
    except LocationNotFound:
        raise HTTPException(status_code=404, detail=CITY_ERROR)
    except WeatherServiceError:
        raise HTTPException(status_code=502, detail=CITY_ERROR)

    try:
        return normalize_observation(raw)
    except IncompleteObservation:
        raise HTTPException(status_code=502, detail=INCOMPLETE_ERROR)


@router.get("/current", response_model=WeatherRead)
async def get_current_weather(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
):
    observation = await observe_coords(lat, lon)
    return WeatherRead(**observation.model_dump())


@router.get("/city", response_model=WeatherRead)
async def get_city_weather(name: str = Query(..., min_length=1)):
    observation = await observe_city(name)
    return WeatherRead(**observation.model_dump())
