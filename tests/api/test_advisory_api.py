import json

from httpx import AsyncClient


async def test_city_advisory(client: AsyncClient, provider, make_record):
    provider.cities["testville"] = make_record(name="Testville", temp=25, humidity=60, description="clear sky")

    res = await client.get("/api/v1/advisory/city", params={"name": "Testville"})

    assert res.status_code == 200
    data = res.json()
    assert data["weather"] == {
        "location_name": "Testville",
        "temperature_celsius": 25.0,
        "humidity_percent": 60,
        "condition_description": "clear sky",
    }
    assert data["advisory"] == {"planting": "Ideal for sowing maize", "pesticide": None}


async def test_city_advisory_unknown_city(client: AsyncClient, provider):
    res = await client.get("/api/v1/advisory/city", params={"name": "Atlantis"})
    assert res.status_code == 404
    assert res.json()["detail"] == "City not found or weather data unavailable"


async def test_city_advisory_blank_name(client: AsyncClient, provider):
    res = await client.get("/api/v1/advisory/city", params={"name": "   "})
    assert res.status_code == 422
    assert provider.requests == []


async def test_current_location_advisory_no_match(client: AsyncClient, provider, make_record):
    provider.coords[(-1.29, 36.82)] = make_record(name="Nairobi", temp=18, humidity=70, description="heavy rain")

    res = await client.get("/api/v1/advisory/current", params={"lat": -1.29, "lon": 36.82})

    assert res.status_code == 200
    assert res.json()["advisory"] == {"planting": None, "pesticide": None}


async def test_current_location_provider_failure(client: AsyncClient, provider):
    provider.fail_with = 503
    res = await client.get("/api/v1/advisory/current", params={"lat": 0, "lon": 0})
    assert res.status_code == 502
    assert res.json()["detail"] == "Failed to get weather for current location"


async def test_current_location_incomplete_provider_data(client: AsyncClient, provider, make_record):
    raw = make_record()
    raw["weather"] = []
    provider.coords[(1.0, 2.0)] = raw

    res = await client.get("/api/v1/advisory/current", params={"lat": 1, "lon": 2})

    assert res.status_code == 502
    assert res.json()["detail"] == "Weather data unavailable"


async def test_current_location_rejects_bad_latitude(client: AsyncClient, provider):
    res = await client.get("/api/v1/advisory/current", params={"lat": 91, "lon": 0})
    assert res.status_code == 422
    assert provider.requests == []


async def test_evaluate_raw_record(client: AsyncClient, make_record):
    res = await client.post(
        "/api/v1/advisory/evaluate",
        json=make_record(name="Testville", temp=22, humidity=85, description="Clear Sky"),
    )
    assert res.status_code == 200
    data = res.json()
    assert data["weather"]["condition_description"] == "clear sky"
    assert data["advisory"] == {
        "planting": "Ideal for sowing maize",
        "pesticide": "Apply preventive fungicide",
    }


async def test_evaluate_raw_record_missing_humidity(client: AsyncClient, make_record):
    raw = make_record()
    del raw["main"]["humidity"]
    res = await client.post("/api/v1/advisory/evaluate", json=raw)
    assert res.status_code == 422
    assert "main.humidity" in res.json()["detail"]


async def test_evaluate_raw_record_missing_name(client: AsyncClient, make_record):
    raw = make_record()
    del raw["name"]
    res = await client.post("/api/v1/advisory/evaluate", json=raw)
    assert res.status_code == 200
    assert res.json()["weather"]["location_name"] == ""


async def test_evaluate_observation(client: AsyncClient):
    res = await client.post("/api/v1/advisory/observation", json={
        "location_name": "Testville",
        "temperature_celsius": 25,
        "humidity_percent": 60,
        "condition_description": "clear sky",
    })
    assert res.status_code == 200
    assert res.json() == {"planting": "Ideal for sowing maize", "pesticide": None}


async def test_evaluate_observation_rejects_bad_humidity(client: AsyncClient):
    res = await client.post("/api/v1/advisory/observation", json={
        "temperature_celsius": 25,
        "humidity_percent": 140,
        "condition_description": "clear sky",
    })
    assert res.status_code == 422


async def test_list_rules(client: AsyncClient):
    res = await client.get("/api/v1/advisory/rules")
    assert res.status_code == 200
    rules = res.json()
    assert [r["name"] for r in rules] == ["maize_window", "fungal_watch"]
    assert rules[0]["predicate"] == "20 <= temp <= 30 and condition contains 'clear'"
    assert rules[1]["pesticide"] == "Apply preventive fungicide"


async def test_evaluate_raw_record_huge_temperature(client: AsyncClient, make_record):
    body = make_record()
    body["main"]["temp"] = 10**400
    res = await client.post(
        "/api/v1/advisory/evaluate",
        content=json.dumps(body),
        headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 422
    assert "main.temp" in res.json()["detail"]
