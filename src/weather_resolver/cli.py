"""CLI: resolve current weather for an address or coordinates."""

from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime

from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import CacheError, ConfigError, GeocodingError, RecordStoreError
from .freshness import describe_age
from .geocoding import NominatimGeocoder, build_location
from .log_setup import setup_logger
from .models import Location, ResolutionResult
from .resolver import WeatherResolver
from .stores import JsonFileRecordStore, build_cache
from .upstream import WeatherAPIClient


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse weather CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Resolve current weather, preferring stored and cached observations.",
        epilog=(
            "Stored records persist in RECORD_STORE_DIR across runs. The shared cache "
            "defaults to CACHE_BACKEND=memory, which lives only for one invocation; set "
            "CACHE_BACKEND=redis and REDIS_URL to share cached observations between runs "
            "and processes."
        ),
    )
    parser.add_argument("--address", type=str, default=None, help="Address to geocode.")
    parser.add_argument("--lat", type=float, default=None, help="Latitude (skips geocoding).")
    parser.add_argument("--lon", type=float, default=None, help="Longitude (skips geocoding).")
    parser.add_argument("--zipcode", type=str, default=None, help="Postal code for --lat/--lon.")
    parser.add_argument(
        "--location-id",
        type=str,
        default=None,
        help="Stable location identifier; defaults to the address or coordinates.",
    )
    parser.add_argument(
        "--forget",
        action="store_true",
        help="Delete the stored weather record for the location and exit.",
    )
    return parser.parse_args(argv)


def _default_location_id(args: argparse.Namespace) -> str:
    if args.location_id:
        return args.location_id.strip()
    if args.address:
        return " ".join(args.address.split()).lower()
    return f"{args.lat!r},{args.lon!r}"


def _validate_cli_input(args: argparse.Namespace) -> None:
    if args.address and (args.lat is not None or args.lon is not None):
        raise GeocodingError("Use either --address or --lat/--lon, not both.")
    if args.address:
        if not args.address.strip():
            raise GeocodingError("--address must not be empty.")
        return
    if args.lat is None or args.lon is None:
        raise GeocodingError("Missing location input: pass --address, or both --lat and --lon.")
    if not (-90 <= args.lat <= 90):
        raise GeocodingError(f"Invalid latitude {args.lat}; expected between -90 and 90.")
    if not (-180 <= args.lon <= 180):
        raise GeocodingError(f"Invalid longitude {args.lon}; expected between -180 and 180.")


def build_cli_location(
    args: argparse.Namespace, geocoder: NominatimGeocoder | None
) -> Location:
    """Build the Location for this invocation, geocoding `--address` when given."""
    _validate_cli_input(args)
    location_id = _default_location_id(args)
    if args.address:
        if geocoder is None:
            raise GeocodingError("A geocoder is required to resolve --address.")
        result = geocoder.geocode(args.address)
        return build_location(location_id, args.address, result)
    return Location(
        location_id=location_id,
        latitude=args.lat,
        longitude=args.lon,
        postal_code=args.zipcode,
    )


def _format_temp(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.1f}°F"


def _print_result(
    console: Console, location: Location, result: ResolutionResult, now: datetime
) -> None:
    record = result.record
    if record is None:
        return
    source = "stored/cached" if result.served_from_cache else "live"
    table = Table(title=f"Weather for {location.display_name}")
    table.add_column("Current")
    table.add_column("High")
    table.add_column("Low")
    table.add_column("Conditions", overflow="fold")
    table.add_column("Updated")
    table.add_column("Source")
    table.add_row(
        _format_temp(record.current_temp),
        _format_temp(record.high_temp),
        _format_temp(record.low_temp),
        record.conditions or "-",
        describe_age(record.forecast_timestamp, now),
        source,
    )
    console.print(table)


def _run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    logger = setup_logger(level=settings.log_level)
    logger.info("Starting weather resolution with config %s", settings.safe_summary())
    record_store = JsonFileRecordStore(settings.record_store_dir)

    try:
        if args.address:
            with NominatimGeocoder(settings=settings, logger=logger) as geocoder:
                location = build_cli_location(args, geocoder)
        else:
            location = build_cli_location(args, None)
    except GeocodingError as exc:
        logger.error("Location resolution failure: %s", exc)
        console.print(f"Could not resolve location: {exc}")
        return 3

    if args.forget:
        removed = record_store.delete_record_for(location.location_id)
        console.print(
            f"Removed stored weather for {location.location_id}."
            if removed
            else f"No stored weather for {location.location_id}."
        )
        return 0

    cache = build_cache(settings, logger)
    with WeatherAPIClient(settings=settings, logger=logger) as upstream:
        resolver = WeatherResolver(
            upstream=upstream,
            record_store=record_store,
            cache=cache,
            logger=logger,
        )
        result = resolver.resolve(location)

    if not result.ok:
        logger.error("Weather resolution failure (%s): %s", result.error, result.message)
        console.print(f"Unable to fetch weather: {result.message}")
        return 4

    _print_result(console, location, result, datetime.now(UTC))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run one weather resolution from the command line."""
    args = parse_args(argv)
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        setup_logger().error("Configuration failure: %s", exc)
        return 2

    try:
        return _run(args, settings, console)
    except (RecordStoreError, CacheError) as exc:
        setup_logger().error("Storage failure: %s", exc)
        console.print(f"Unable to fetch weather: {exc}")
        return 4


if __name__ == "__main__":
    sys.exit(main())
