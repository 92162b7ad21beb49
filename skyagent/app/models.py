from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict

CANONICAL_FIELDS: Tuple[str, ...] = (
    "temperature",
    "apparent_temperature",
    "pressure",
    "precipitation",
    "windspeed",
    "humidity",
    "weathercode",
)


class Place(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    country: str = ""
    latitude: float
    longitude: float
    timezone: str = "UTC"


class RawSeriesPoint(BaseModel):
    timestamp: str
    value: Optional[float] = None


class RawForecast(BaseModel):
    """Provider-neutral forecast payload, keyed by upstream parameter name."""

    series: Dict[str, List[RawSeriesPoint]]
    # offset applied to timestamps that carry no zone designator
    utc_offset_seconds: int = 0


class CanonicalHourlySeries(BaseModel):
    time: List[str] = []
    temperature: List[Optional[float]] = []
    apparent_temperature: List[Optional[float]] = []
    pressure: List[Optional[float]] = []
    precipitation: List[Optional[float]] = []
    windspeed: List[Optional[float]] = []
    humidity: List[Optional[float]] = []
    weathercode: List[Optional[int]] = []

    def pairs(self, field: str) -> List[Tuple[str, Optional[float]]]:
        """Return ``(timestamp, value)`` pairs for one canonical field."""
        return list(zip(self.time, getattr(self, field)))

    def to_frame(self) -> pd.DataFrame:
        """
        Tidy hourly DataFrame, one row per timestamp:
        columns: time (str ISO), date (YYYY-MM-DD prefix), one column per canonical field.
        """
        data = {"time": self.time, "date": [t[:10] for t in self.time]}
        for field in CANONICAL_FIELDS:
            data[field] = pd.Series(getattr(self, field), dtype="float64")
        return pd.DataFrame(data)


class CurrentSample(BaseModel):
    index: Optional[int] = None
    time: Optional[str] = None
    temperature: Optional[float] = None
    apparent_temperature: Optional[float] = None
    pressure: Optional[float] = None
    precipitation: Optional[float] = None
    windspeed: Optional[float] = None
    humidity: Optional[float] = None
    weathercode: Optional[int] = None


class DailySummary(BaseModel):
    date: str
    max_temp: Optional[float] = None
    min_temp: Optional[float] = None
    total_precip: float = 0.0
    representative_weather_code: int = 0


class NormalizedForecast(BaseModel):
    hourly: CanonicalHourlySeries
    current: CurrentSample
    daily: List[DailySummary]


class Dashboard(BaseModel):
    place: Place
    hourly: CanonicalHourlySeries
    current: CurrentSample
    daily: List[DailySummary]
