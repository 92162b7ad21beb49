from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from typing import Optional

from .config import Settings, build_logger
from .display import (
    DEFAULT_SETTINGS_PATH,
    chart_series,
    load_display_settings,
    render_text,
    save_display_settings,
)
from .errors import MissingLocation, SkyAgentError
from .service import build_dashboard


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Geocode a place and show its weather forecast")
    # Location
    parser.add_argument("query", nargs="?", default=None, help="Place name (e.g., Beirut)")
    parser.add_argument("--lat", type=float, default=None, help="Latitude, bypasses geocoding")
    parser.add_argument("--lon", type=float, default=None, help="Longitude, bypasses geocoding")

    # Upstream
    parser.add_argument("--provider", choices=["open_meteo", "meteomatics"], default=None,
                        help="Forecast provider (default from PROVIDER env)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--reference", default=None,
                        help="ISO instant treated as 'now' when picking current conditions")

    # Output
    parser.add_argument("--format", choices=["text", "json", "csv"], default="text", help="Output format")
    parser.add_argument("--unit", choices=["C", "F"], default=None, help="Temperature unit")
    parser.add_argument("--time-format", type=int, choices=[12, 24], default=None, help="Clock format")
    parser.add_argument("--settings-file", default=str(DEFAULT_SETTINGS_PATH),
                        help="Display preferences file")
    parser.add_argument("--save-settings", action="store_true",
                        help="Persist --unit/--time-format and the query to --settings-file")

    return parser.parse_args(argv)


def main(argv: Optional[list] = None):
    args = parse_args(argv)
    settings = Settings()
    log = build_logger(settings.log_level)

    overrides = {}
    if args.provider:
        overrides["provider"] = args.provider
    if args.timeout is not None:
        overrides["http_timeout"] = args.timeout
    if overrides:
        settings = settings.model_copy(update=overrides)

    display = load_display_settings(args.settings_file)
    updates = {}
    if args.unit:
        updates["unit"] = args.unit
    if args.time_format:
        updates["time_format"] = args.time_format
    if updates:
        display = display.model_copy(update=updates)

    if (args.lat is None) != (args.lon is None):
        print(f"ERROR: {MissingLocation.message} (--lat and --lon go together)", file=sys.stderr)
        sys.exit(2)

    query = args.query
    if query is None and args.lat is None:
        query = display.last_query

    reference = None
    if args.reference:
        try:
            reference = datetime.fromisoformat(args.reference.replace("Z", "+00:00"))
        except ValueError:
            print(f"ERROR: --reference is not an ISO-8601 instant: {args.reference}", file=sys.stderr)
            sys.exit(2)

    try:
        dashboard = build_dashboard(
            settings,
            query=query,
            latitude=args.lat,
            longitude=args.lon,
            reference=reference,
        )
    except MissingLocation as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        sys.exit(2)
    except SkyAgentError as e:
        log.error("lookup_failed", error_type=e.__class__.__name__, error=str(e))
        print(f"ERROR: {e.message}", file=sys.stderr)
        sys.exit(1)

    if args.save_settings:
        if query:
            display = display.model_copy(update={"last_query": query.strip()})
        path = save_display_settings(display, args.settings_file)
        log.info("display_settings_saved", path=path)

    if args.format == "json":
        doc = dashboard.model_dump()
        doc["chart"] = chart_series(dashboard.hourly, display).model_dump()
        print(json.dumps(doc, indent=2, ensure_ascii=False))
    elif args.format == "csv":
        sys.stdout.write(dashboard.hourly.to_frame().to_csv(index=False))
    else:
        print(render_text(dashboard, display))


if __name__ == "__main__":
    main()
