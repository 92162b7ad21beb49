from __future__ import annotations

import math
from typing import Dict, List, Optional

from pydantic import BaseModel

from ..models import RawForecast, RawSeriesPoint

# Meteomatics reports "no data" with this sentinel instead of null
MISSING_VALUE = -999.0


def _clean(value: Optional[float]) -> Optional[float]:
    if value is None or value == MISSING_VALUE or not math.isfinite(value):
        return None
    return value


class DateValue(BaseModel):
    date: str
    value: Optional[float] = None


class Coordinate(BaseModel):
    lat: Optional[float] = None
    lon: Optional[float] = None
    dates: List[DateValue] = []


class ParameterBlock(BaseModel):
    parameter: str
    coordinates: List[Coordinate] = []


class MeteomaticsResponse(BaseModel):
    version: Optional[str] = None
    user: Optional[str] = None
    dateGenerated: Optional[str] = None
    status: Optional[str] = None
    data: List[ParameterBlock]

    def to_raw(self) -> RawForecast:
        """Take the first coordinate of every parameter block; one point was requested."""
        series: Dict[str, List[RawSeriesPoint]] = {}
        for block in self.data:
            if not block.coordinates:
                series[block.parameter] = []
                continue
            series[block.parameter] = [
                RawSeriesPoint(
                    timestamp=d.date,
                    value=_clean(d.value),
                )
                for d in block.coordinates[0].dates
            ]
        return RawForecast(series=series)
