from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import httpx
import structlog

from .errors import UpstreamUnavailable

DEFAULT_TIMEOUT = 10.0  # seconds
USER_AGENT = "skyagent/0.1 (+https://example.local)"

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
METEOMATICS_URL = "https://api.meteomatics.com"

OPEN_METEO_HOURLY = (
    "temperature_2m,apparent_temperature,precipitation,weathercode,"
    "windspeed_10m,relativehumidity_2m,pressure_msl"
)
METEOMATICS_PARAMETERS = (
    "t_2m:C,t_apparent:C,wind_speed_10m:ms,msl_pressure:hPa,"
    "precip_1h:mm,relative_humidity_2m:p"
)

log = structlog.get_logger()


def get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    auth: Optional[Tuple[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> Any:
    """
    Issue one GET and return the parsed JSON body. No retries.
    Raises UpstreamUnavailable on transport errors, timeouts, non-2xx or malformed JSON.
    """
    headers = {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    try:
        if client is None:
            with httpx.Client(timeout=timeout, headers=headers) as own:
                resp = own.get(url, params=params, auth=auth)
        else:
            resp = client.get(url, params=params, auth=auth, headers=headers, timeout=timeout)
    except httpx.HTTPError as e:
        log.warning("upstream_request_failed", url=url, error=str(e))
        raise UpstreamUnavailable(f"Request to {url} failed: {e}") from e

    if resp.status_code // 100 != 2:
        log.warning("upstream_request_failed", url=url, status_code=resp.status_code)
        raise UpstreamUnavailable(
            f"Upstream error: {resp.status_code}",
            status_code=resp.status_code,
            body=resp.text,
        )
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamUnavailable(
            f"Failed to parse JSON: {e}", status_code=resp.status_code, body=resp.text
        ) from e


def fetch_geocoding(
    name: str,
    count: int = 5,
    base_url: str = GEOCODING_URL,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> Any:
    params = {"name": name, "count": count, "language": "en", "format": "json"}
    return get_json(base_url, params=params, timeout=timeout, client=client)


def fetch_open_meteo(
    latitude: float,
    longitude: float,
    hourly: str = OPEN_METEO_HOURLY,
    forecast_days: int = 4,
    tz: str = "auto",
    base_url: str = OPEN_METEO_URL,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> Any:
    """Fetch the Open-Meteo hourly forecast; returns parsed JSON."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": hourly,
        "forecast_days": forecast_days,
        "timezone": tz,
    }
    return get_json(base_url, params=params, timeout=timeout, client=client)


def meteomatics_url(
    latitude: float,
    longitude: float,
    start: datetime,
    hours: int,
    parameters: str = METEOMATICS_PARAMETERS,
    base_url: str = METEOMATICS_URL,
) -> str:
    """
    Build the Meteomatics time-series URL:
    <base>/<start>--<end>:PT1H/<parameters>/<lat>,<lon>/json
    """
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    start = start.astimezone(timezone.utc).replace(microsecond=0)
    end = start + timedelta(hours=hours)
    fmt = "%Y-%m-%dT%H:%M:%SZ"
    return (
        f"{base_url.rstrip('/')}/{start.strftime(fmt)}--{end.strftime(fmt)}:PT1H/"
        f"{parameters}/{latitude},{longitude}/json"
    )


def fetch_meteomatics(
    latitude: float,
    longitude: float,
    username: str,
    password: str,
    start: datetime,
    hours: int = 72,
    parameters: str = METEOMATICS_PARAMETERS,
    base_url: str = METEOMATICS_URL,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> Any:
    """Fetch a Meteomatics hourly series with basic-auth credentials injected server-side."""
    url = meteomatics_url(latitude, longitude, start, hours, parameters, base_url)
    return get_json(url, auth=(username, password), timeout=timeout, client=client)
