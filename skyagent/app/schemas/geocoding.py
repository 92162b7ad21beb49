from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ..models import Place


class GeocodingCandidate(BaseModel):
    name: str
    country: Optional[str] = None
    latitude: float
    longitude: float
    timezone: Optional[str] = None

    def to_place(self) -> Place:
        return Place(
            name=self.name,
            country=self.country or "",
            latitude=self.latitude,
            longitude=self.longitude,
            timezone=self.timezone or "UTC",
        )


class GeocodingResponse(BaseModel):
    # Open-Meteo omits `results` entirely when nothing matches
    results: Optional[List[GeocodingCandidate]] = None
    generationtime_ms: Optional[float] = None
