import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.core.config import settings
from app.core.deps import get_rules
from app.main import app
from app.services import weather
from app.services.advisory import RuleSet
from app.services.advisory_rules import AdvisoryRule, RuleCondition


def owm_record(
    name="Testville",
    temp=25,
    humidity=60,
    description="clear sky",
) -> dict:
    """A trimmed OpenWeatherMap /weather response."""
    return {
        "coord": {"lon": 36.82, "lat": -1.29},
        "weather": [{"id": 800, "main": "Clear", "description": description, "icon": "01d"}],
        "main": {"temp": temp, "feels_like": temp, "pressure": 1015, "humidity": humidity},
        "name": name,
        "cod": 200,
    }


@pytest.fixture
def make_record():
    return owm_record


@pytest.fixture
def rule_set() -> RuleSet:
    return RuleSet([
        AdvisoryRule(
            "maize_window",
            RuleCondition(temp_min=20, temp_max=30, conditions=("clear",)),
            planting="Ideal for sowing maize",
            priority=1,
        ),
        AdvisoryRule(
            "fungal_watch",
            RuleCondition(humidity_min=80),
            pesticide="Apply preventive fungicide",
            priority=2,
        ),
    ])


class FakeProvider:
    """Stands in for OpenWeatherMap: city name / rounded coords → (status, body)."""

    def __init__(self):
        self.cities: dict[str, dict] = {}
        self.coords: dict[tuple[float, float], dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"cod": self.fail_with, "message": "boom"})

        params = request.url.params
        if "q" in params:
            body = self.cities.get(params["q"].lower())
        else:
            body = self.coords.get((round(float(params["lat"]), 2), round(float(params["lon"]), 2)))

        if body is None:
            return httpx.Response(404, json={"cod": "404", "message": "city not found"})
        return httpx.Response(200, json=body)


@pytest.fixture
def provider(monkeypatch) -> FakeProvider:
    fake = FakeProvider()
    monkeypatch.setattr(settings, "OPENWEATHER_API_KEY", "test-key")
    monkeypatch.setattr(
        weather,
        "_build_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(fake.handler)),
    )
    return fake


@pytest_asyncio.fixture
async def client(rule_set: RuleSet):
    async def override_get_rules():
        return rule_set

    app.dependency_overrides[get_rules] = override_get_rules

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
