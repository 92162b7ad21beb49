from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..models import RawForecast, RawSeriesPoint


def to_float(value: Any) -> Optional[float]:
    try:
        if value is None or isinstance(value, bool):
            return None
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


class Hourly(BaseModel):
    # every key besides `time` is a parameter array aligned with `time`
    model_config = ConfigDict(extra="allow")

    time: List[str]


class OpenMeteoResponse(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    generationtime_ms: Optional[float] = None
    utc_offset_seconds: int = 0
    timezone: Optional[str] = None
    timezone_abbreviation: Optional[str] = None
    elevation: Optional[float] = None
    hourly_units: Dict[str, str] = {}
    hourly: Hourly

    def to_raw(self) -> RawForecast:
        times = self.hourly.time
        series: Dict[str, List[RawSeriesPoint]] = {}
        for name, values in (self.hourly.model_extra or {}).items():
            if not isinstance(values, list):
                continue
            series[name] = [
                RawSeriesPoint(timestamp=ts, value=to_float(v))
                for ts, v in zip(times, values)
            ]
        return RawForecast(series=series, utc_offset_seconds=self.utc_offset_seconds)
