from __future__ import annotations

from typing import Optional

import httpx
import structlog
from pydantic import ValidationError

from .errors import MissingLocation, PlaceNotFound, UpstreamUnavailable
from .fetch import DEFAULT_TIMEOUT, GEOCODING_URL, fetch_geocoding
from .models import Place
from .schemas.geocoding import GeocodingResponse

CANDIDATE_COUNT = 5

log = structlog.get_logger()


def coordinates_place(latitude: float, longitude: float, name: Optional[str] = None) -> Place:
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        raise MissingLocation(f"coordinates out of range: {latitude}, {longitude}")
    return Place(
        name=name or f"{latitude:.4f}, {longitude:.4f}",
        latitude=latitude,
        longitude=longitude,
    )


def resolve(
    query: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    base_url: str = GEOCODING_URL,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> Place:
    """
    Resolve a place name, or pass explicit coordinates straight through.

    The geocoder is asked for several candidates and the first one is taken
    as-is; its relevance ordering is trusted.
    """
    if latitude is not None and longitude is not None:
        return coordinates_place(latitude, longitude)

    name = (query or "").strip()
    if not name:
        raise MissingLocation()

    doc = fetch_geocoding(name, count=CANDIDATE_COUNT, base_url=base_url, timeout=timeout, client=client)
    try:
        parsed = GeocodingResponse.model_validate(doc)
    except ValidationError as ve:
        log.error("geocoding_schema_invalid", query=name, errors=ve.errors())
        raise UpstreamUnavailable(f"Unexpected geocoding response: {ve}") from ve

    if not parsed.results:
        raise PlaceNotFound(f"no match for '{name}'")

    place = parsed.results[0].to_place()
    log.info("place_resolved", query=name, name=place.name, country=place.country)
    return place
