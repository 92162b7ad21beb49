from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from .config import ProviderName, Settings
from .errors import IncompleteUpstreamData, SkyAgentError, UpstreamUnavailable
from .fetch import fetch_meteomatics, fetch_open_meteo
from .geocode import resolve
from .models import Dashboard, Place, RawForecast
from .schemas.meteomatics import MeteomaticsResponse
from .schemas.open_meteo import OpenMeteoResponse
from .transform import normalize

log = structlog.get_logger()


def parse_forecast(doc: Any, provider: ProviderName) -> RawForecast:
    """Validate a provider payload and convert it to the provider-neutral raw model."""
    schema = MeteomaticsResponse if provider == "meteomatics" else OpenMeteoResponse
    try:
        return schema.model_validate(doc).to_raw()
    except ValidationError as ve:
        log.error("schema_validation_failed", provider=provider, errors=ve.errors())
        raise IncompleteUpstreamData(f"{provider} payload does not match the expected schema") from ve


def fetch_forecast(
    place: Place,
    settings: Settings,
    reference: datetime,
    client: Optional[httpx.Client] = None,
) -> Any:
    if settings.provider == "meteomatics":
        if not settings.meteomatics_username or not settings.meteomatics_password:
            raise UpstreamUnavailable("Meteomatics credentials not set")
        return fetch_meteomatics(
            latitude=place.latitude,
            longitude=place.longitude,
            username=settings.meteomatics_username,
            password=settings.meteomatics_password,
            start=reference,
            hours=settings.forecast_hours,
            base_url=settings.meteomatics_url,
            timeout=settings.http_timeout,
            client=client,
        )
    return fetch_open_meteo(
        latitude=place.latitude,
        longitude=place.longitude,
        forecast_days=settings.forecast_days,
        base_url=settings.open_meteo_url,
        timeout=settings.http_timeout,
        client=client,
    )


def build_dashboard(
    settings: Settings,
    query: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    reference: Optional[datetime] = None,
    client: Optional[httpx.Client] = None,
) -> Dashboard:
    """
    Resolve the place, fetch its forecast and normalize it.
    Either returns a complete Dashboard or raises a SkyAgentError.
    """
    reference = reference or datetime.now(timezone.utc)
    start_ts = time.perf_counter()
    try:
        place = resolve(
            query,
            latitude=latitude,
            longitude=longitude,
            base_url=settings.geocoding_url,
            timeout=settings.http_timeout,
            client=client,
        )
        doc = fetch_forecast(place, settings, reference, client=client)
        log.info("forecast_fetched", provider=settings.provider, name=place.name)
        forecast = normalize(parse_forecast(doc, settings.provider), reference)
    except SkyAgentError as e:
        log.warning("dashboard_failed", error_type=e.__class__.__name__, error=str(e))
        raise

    log.info(
        "dashboard_built",
        name=place.name,
        hours=len(forecast.hourly.time),
        days=len(forecast.daily),
        duration_seconds=time.perf_counter() - start_ts,
    )
    return Dashboard(
        place=place,
        hourly=forecast.hourly,
        current=forecast.current,
        daily=forecast.daily,
    )
