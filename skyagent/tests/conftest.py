import json

import httpx
import pytest

from skyagent.app.config import Settings


@pytest.fixture
def open_meteo_doc():
    return {
        "latitude": 48.86,
        "longitude": 2.34,
        "generationtime_ms": 0.4,
        "utc_offset_seconds": 0,
        "timezone": "GMT",
        "timezone_abbreviation": "GMT",
        "elevation": 43.0,
        "hourly_units": {"time": "iso8601", "temperature_2m": "°C"},
        "hourly": {
            "time": ["2024-01-01T10:00", "2024-01-01T11:00", "2024-01-02T10:00"],
            "temperature_2m": [10.0, 20.0, 15.0],
            "apparent_temperature": [8.0, 18.0, 13.0],
            "precipitation": [0.1, 0.2, None],
            "weathercode": [3, 61, 0],
            "windspeed_10m": [4.2, 5.0, 3.3],
            "relativehumidity_2m": [80, 75, 70],
            "pressure_msl": [1013.2, 1012.8, 1015.0],
        },
    }


@pytest.fixture
def geocoding_doc():
    return {
        "results": [
            {"name": "Paris", "country": "France", "latitude": 48.85341, "longitude": 2.3488,
             "timezone": "Europe/Paris"},
            {"name": "Paris", "country": "United States", "latitude": 33.66094, "longitude": -95.55551,
             "timezone": "America/Chicago"},
        ],
        "generationtime_ms": 0.9,
    }


@pytest.fixture
def mock_client():
    """Build an httpx.Client whose requests are answered by `handler(request)`."""
    def build(handler):
        return httpx.Client(transport=httpx.MockTransport(handler))
    return build


@pytest.fixture
def upstream(geocoding_doc, open_meteo_doc, mock_client):
    """Client serving canned geocoding and Open-Meteo responses; records requests."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.host == "geocoding-api.open-meteo.com":
            return httpx.Response(200, content=json.dumps(geocoding_doc))
        if request.url.host == "api.open-meteo.com":
            return httpx.Response(200, content=json.dumps(open_meteo_doc))
        return httpx.Response(404, text="unexpected host")

    client = mock_client(handler)
    client.seen = seen
    return client


@pytest.fixture
def settings():
    return Settings(_env_file=None, provider="open_meteo", http_timeout=5.0)
