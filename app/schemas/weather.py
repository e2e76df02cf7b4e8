from pydantic import BaseModel, ConfigDict, Field


class WeatherObservation(BaseModel):
    """Normalized weather snapshot the advisory engine evaluates."""

    model_config = ConfigDict(frozen=True)

    location_name: str = ""
    temperature_celsius: float
    humidity_percent: int = Field(ge=0, le=100)
    condition_description: str


class WeatherRead(BaseModel):
    location_name: str
    temperature_celsius: float
    humidity_percent: int
    condition_description: str
