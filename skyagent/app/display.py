from __future__ import annotations

import json
import math
from datetime import date
from pathlib import Path
from typing import Dict, List, Literal, Optional

import structlog
from pydantic import BaseModel, ValidationError

from .models import CanonicalHourlySeries, Dashboard
from .transform import parse_timestamp, round1

DEFAULT_SETTINGS_PATH = Path.home() / ".skyagent" / "settings.json"
CHART_MAX_POINTS = 48
FORECAST_CARDS = 3
PLACEHOLDER = "—"

WEATHER_LABELS: Dict[int, str] = {
    0: "Clear",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    80: "Showers",
    95: "Thunderstorm",
}

log = structlog.get_logger()


class DisplaySettings(BaseModel):
    unit: Literal["C", "F"] = "C"
    time_format: Literal[12, 24] = 24
    last_query: Optional[str] = None


class ChartSeries(BaseModel):
    labels: List[str]
    temperature: List[Optional[float]]
    windspeed: List[Optional[float]]
    pressure: List[Optional[float]]


def load_display_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> DisplaySettings:
    """Read saved preferences; a missing or unreadable file yields the defaults."""
    fp = Path(path)
    if not fp.exists():
        return DisplaySettings()
    try:
        return DisplaySettings.model_validate(json.loads(fp.read_text(encoding="utf-8")))
    except (OSError, ValueError, ValidationError) as e:
        log.warning("display_settings_unreadable", path=str(fp), error=str(e))
        return DisplaySettings()


def save_display_settings(settings: DisplaySettings, path: str | Path = DEFAULT_SETTINGS_PATH) -> str:
    fp = Path(path)
    fp.parent.mkdir(parents=True, exist_ok=True)
    with open(fp, "w", encoding="utf-8") as f:
        json.dump(settings.model_dump(), f, indent=2)
    return str(fp)


def convert_temp(celsius: Optional[float], unit: str = "C") -> Optional[float]:
    if celsius is None:
        return None
    return celsius if unit == "C" else celsius * 9 / 5 + 32


def format_temp(celsius: Optional[float], unit: str = "C") -> str:
    value = convert_temp(celsius, unit)
    if value is None:
        return PLACEHOLDER
    return f"{math.floor(value + 0.5)}°{unit}"


def weather_label(code: Optional[int]) -> str:
    if code is None:
        return "Weather"
    return WEATHER_LABELS.get(code, "Weather")


def hour_label(timestamp: str, time_format: int = 24) -> str:
    ts = parse_timestamp(timestamp)
    if ts is None:
        return timestamp
    if time_format == 12:
        return f"{ts.hour % 12 or 12} {'AM' if ts.hour < 12 else 'PM'}"
    return f"{ts.hour:02d}"


def chart_series(
    hourly: CanonicalHourlySeries,
    settings: DisplaySettings,
    max_points: int = CHART_MAX_POINTS,
) -> ChartSeries:
    n = min(len(hourly.time), max_points)
    return ChartSeries(
        labels=[hour_label(t, settings.time_format) for t in hourly.time[:n]],
        temperature=[round1(convert_temp(v, settings.unit)) for v in hourly.temperature[:n]],
        windspeed=[round1(v) for v in hourly.windspeed[:n]],
        pressure=[round1(v) for v in hourly.pressure[:n]],
    )


def _fmt(value: Optional[float], suffix: str, whole: bool = False) -> str:
    if value is None:
        return PLACEHOLDER
    if whole:
        return f"{math.floor(value + 0.5)}{suffix}"
    return f"{value}{suffix}"


def _day_name(day: str) -> str:
    try:
        return date.fromisoformat(day).strftime("%a")
    except ValueError:
        return day


def render_text(dashboard: Dashboard, settings: DisplaySettings) -> str:
    place = dashboard.place
    current = dashboard.current
    title = f"{place.name}, {place.country}" if place.country else place.name

    lines = [
        title,
        f"{format_temp(current.temperature, settings.unit)}  {weather_label(current.weathercode)}",
        "  ".join(
            [
                f"Wind {_fmt(current.windspeed, ' m/s', whole=True)}",
                f"Precip {_fmt(current.precipitation, ' mm')}",
                f"Humidity {_fmt(current.humidity, '%', whole=True)}",
                f"Pressure {_fmt(current.pressure, ' hPa', whole=True)}",
            ]
        ),
    ]
    if dashboard.daily:
        lines.append("")
    for day in dashboard.daily[:FORECAST_CARDS]:
        lines.append(
            f"{_day_name(day.date)}  "
            f"{format_temp(day.max_temp, settings.unit)} / {format_temp(day.min_temp, settings.unit)}  "
            f"{weather_label(day.representative_weather_code)}  "
            f"Precip: {day.total_precip} mm"
        )
    return "\n".join(lines)
