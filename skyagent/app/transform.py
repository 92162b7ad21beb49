from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd
import structlog

from .errors import IncompleteUpstreamData
from .models import (
    CANONICAL_FIELDS,
    CanonicalHourlySeries,
    CurrentSample,
    DailySummary,
    NormalizedForecast,
    RawForecast,
    RawSeriesPoint,
)

ANCHOR_FIELD = "temperature"
DAILY_HORIZON = 4

# upstream parameter name -> canonical field
PARAMETER_ALIASES: Dict[str, str] = {
    # Open-Meteo (legacy and current spellings)
    "temperature_2m": "temperature",
    "apparent_temperature": "apparent_temperature",
    "pressure_msl": "pressure",
    "precipitation": "precipitation",
    "windspeed_10m": "windspeed",
    "wind_speed_10m": "windspeed",
    "relativehumidity_2m": "humidity",
    "relative_humidity_2m": "humidity",
    "weathercode": "weathercode",
    "weather_code": "weathercode",
    # Meteomatics
    "t_2m:C": "temperature",
    "t_apparent:C": "apparent_temperature",
    "msl_pressure:hPa": "pressure",
    "precip_1h:mm": "precipitation",
    "wind_speed_10m:ms": "windspeed",
    "relative_humidity_2m:p": "humidity",
}

log = structlog.get_logger()


def round1(value: Optional[float]) -> Optional[float]:
    """Round half up to one decimal place, as the dashboard displays numbers."""
    if value is None or not math.isfinite(value):
        return None
    return math.floor(value * 10 + 0.5) / 10


def parse_timestamp(raw: str, utc_offset_seconds: int = 0) -> Optional[datetime]:
    candidate = raw
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone(timedelta(seconds=utc_offset_seconds)))
    return parsed


def extract_series(
    raw: RawForecast, aliases: Mapping[str, str] = PARAMETER_ALIASES
) -> Dict[str, List[RawSeriesPoint]]:
    """Pick one raw series per canonical field; the first alias seen in the payload wins."""
    picked: Dict[str, List[RawSeriesPoint]] = {}
    for name, points in raw.series.items():
        field = aliases.get(name)
        if field is None:
            continue
        if field in picked:
            log.debug("duplicate_parameter_ignored", parameter=name, field=field)
            continue
        picked[field] = points
    return picked


def _align(points: Sequence[RawSeriesPoint], length: int) -> List[Optional[float]]:
    # NaN and infinities count as missing
    values = [p.value if p.value is not None and math.isfinite(p.value) else None for p in points[:length]]
    values.extend([None] * (length - len(values)))
    return values


def build_hourly(
    raw: RawForecast, aliases: Mapping[str, str] = PARAMETER_ALIASES
) -> CanonicalHourlySeries:
    picked = extract_series(raw, aliases)
    anchor = picked.get(ANCHOR_FIELD)
    if anchor is None:
        raise IncompleteUpstreamData(
            f"anchor series '{ANCHOR_FIELD}' missing from upstream payload"
        )

    times = [p.timestamp for p in anchor]
    columns: Dict[str, list] = {"time": times}
    for field in CANONICAL_FIELDS:
        values = _align(picked.get(field, []), len(times))
        if field == "weathercode":
            columns[field] = [None if v is None else int(v) for v in values]
        else:
            columns[field] = [round1(v) for v in values]
    return CanonicalHourlySeries(**columns)


def nearest_index(
    times: Sequence[str], reference: datetime, utc_offset_seconds: int = 0
) -> Optional[int]:
    """
    Index of the timestamp closest to `reference` (first one wins on a tie).
    Unparsable timestamps are skipped; if none parse, index 0 is returned.
    Returns None only for an empty sequence.
    """
    if not times:
        return None
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    closest = 0
    best: Optional[float] = None
    for i, raw in enumerate(times):
        ts = parse_timestamp(raw, utc_offset_seconds)
        if ts is None:
            continue
        diff_ms = abs((ts - reference).total_seconds()) * 1000
        if best is None or diff_ms < best:
            best = diff_ms
            closest = i
    return closest


def current_sample(hourly: CanonicalHourlySeries, index: Optional[int]) -> CurrentSample:
    if index is None:
        return CurrentSample()
    values = {field: getattr(hourly, field)[index] for field in CANONICAL_FIELDS}
    return CurrentSample(index=index, time=hourly.time[index], **values)


def _mode(codes: pd.Series) -> int:
    modes = codes.dropna().mode()
    if modes.empty:
        return 0
    # Series.mode() is sorted ascending, so the smallest code wins a tie
    return int(modes.iloc[0])


def aggregate_daily(hourly: CanonicalHourlySeries, horizon: int = DAILY_HORIZON) -> List[DailySummary]:
    frame = hourly.to_frame()
    if frame.empty:
        return []

    days: List[DailySummary] = []
    for day, group in frame.groupby("date", sort=False):
        temps = group["temperature"].dropna()
        precip = group["precipitation"].dropna()
        days.append(
            DailySummary(
                date=str(day),
                max_temp=round1(float(temps.max())) if not temps.empty else None,
                min_temp=round1(float(temps.min())) if not temps.empty else None,
                total_precip=round1(float(precip.sum())) or 0.0,
                representative_weather_code=_mode(group["weathercode"]),
            )
        )
        if len(days) == horizon:
            break
    return days


def normalize(
    raw: RawForecast,
    reference: datetime,
    aliases: Mapping[str, str] = PARAMETER_ALIASES,
) -> NormalizedForecast:
    """
    Convert a provider-neutral forecast payload into the canonical view model:
    index-aligned hourly series, the sample nearest to `reference`, and up to
    four daily summaries.

    Raises IncompleteUpstreamData when the temperature series is absent;
    every other gap degrades to null.
    """
    hourly = build_hourly(raw, aliases)
    index = nearest_index(hourly.time, reference, raw.utc_offset_seconds)
    return NormalizedForecast(
        hourly=hourly,
        current=current_sample(hourly, index),
        daily=aggregate_daily(hourly),
    )
