from typing import Optional

from pydantic import BaseModel

from app.schemas.weather import WeatherRead


class AdvisoryResult(BaseModel):
    planting: Optional[str] = None
    pesticide: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.planting is None and self.pesticide is None


class AdvisoryRead(BaseModel):
    weather: WeatherRead
    advisory: AdvisoryResult


class AdvisoryRuleRead(BaseModel):
    name: str
    priority: int
    predicate: str
    planting: Optional[str] = None
    pesticide: Optional[str] = None
