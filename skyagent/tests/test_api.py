import httpx
import pytest
from fastapi.testclient import TestClient

from skyagent.app.api import create_app, get_http_client, get_settings
from skyagent.app.config import Settings


@pytest.fixture
def api(settings, upstream):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = lambda: upstream
    return TestClient(app)


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_weather_by_city(api):
    resp = api.get("/api/weather", params={"city": "Paris"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["place"]["name"] == "Paris"
    assert body["place"]["country"] == "France"
    assert len(body["hourly"]["time"]) == len(body["hourly"]["windspeed"]) == 3
    assert set(body["current"]) >= {"index", "time", "temperature", "pressure"}
    assert body["daily"][0]["date"] == "2024-01-01"


def test_weather_requires_location(api):
    resp = api.get("/api/weather")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please enter a city or a latitude/longitude pair."


def test_weather_city_not_found(settings, mock_client):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = lambda: mock_client(
        lambda request: httpx.Response(200, json={"generationtime_ms": 0.1})
    )
    resp = TestClient(app).get("/api/weather", params={"city": "Atlantis"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "City not found."


def test_weather_upstream_failure(settings, mock_client):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = lambda: mock_client(
        lambda request: httpx.Response(500, text="boom")
    )
    resp = TestClient(app).get("/api/weather", params={"city": "Paris"})
    assert resp.status_code == 502


def test_weather_meteomatics_without_credentials(settings, upstream):
    meteo = Settings(_env_file=None, provider="meteomatics", meteomatics_username="", meteomatics_password="")
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: meteo
    app.dependency_overrides[get_http_client] = lambda: upstream
    resp = TestClient(app).get("/api/weather", params={"lat": 1.0, "lon": 2.0})
    assert resp.status_code == 500
    assert upstream.seen == []
