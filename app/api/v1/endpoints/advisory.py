from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query

from app.api.v1.endpoints.weather import observe_city, observe_coords
from app.core.deps import Rules
from app.schemas.advisory import AdvisoryRead, AdvisoryResult, AdvisoryRuleRead
from app.schemas.weather import WeatherObservation, WeatherRead
from app.services.advisory import RuleSet
from app.services.observation import IncompleteObservation, normalize_observation

router = APIRouter(prefix="/advisory", tags=["advisory"])


def _read(observation: WeatherObservation, rules: RuleSet) -> AdvisoryRead:
    return AdvisoryRead(
        weather=WeatherRead(**observation.model_dump()),
        advisory=rules.evaluate(observation),
    )


@router.get("/current", response_model=AdvisoryRead)
async def current_location_advisory(
    rules: Rules,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
):
    """Weather and planting/pesticide advice for a lat/lon."""
    observation = await observe_coords(lat, lon)
    return _read(observation, rules)


@router.get("/city", response_model=AdvisoryRead)
async def city_advisory(rules: Rules, name: str = Query(..., min_length=1)):
    """Weather and planting/pesticide advice for a city name."""
    observation = await observe_city(name)
    return _read(observation, rules)


@router.post("/evaluate", response_model=AdvisoryRead)
async def evaluate_provider_record(rules: Rules, raw: dict[str, Any] = Body(...)):
    """Normalize a raw provider record supplied by the caller and evaluate it. No network access."""
    try:
        observation = normalize_observation(raw)
    except IncompleteObservation as exc:
        raise HTTPException(
            status_code=422,
            detail=f"Incomplete observation — {exc.field}: {exc.reason}",
        )
    return _read(observation, rules)


@router.post("/observation", response_model=AdvisoryResult)
async def evaluate_observation(observation: WeatherObservation, rules: Rules):
    return rules.evaluate(observation)


@router.get("/rules", response_model=list[AdvisoryRuleRead])
async def list_rules(rules: Rules):
    """The active rule set in evaluation order."""
    return rules.describe()
