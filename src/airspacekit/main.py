"""airspacekit - OpenAir airspace processing from the command line.

Parses, validates and queries OpenAir airspace files.

Typical usage:
    airspacekit validate data/allusa.txt
    airspacekit parse data/allusa.txt --source US --routes --json out.json
    airspacekit query upload.txt --lat 40.0 --lon -100.0 --radius-km 10
"""

import argparse
import json
import logging
import sys
from collections import Counter
from collections.abc import Sequence
from pathlib import Path

from airspacekit.airspaces.cache import CacheStore, JsonFileCacheStore, MemoryCacheStore
from airspacekit.airspaces.consolidation import consolidate_similar_airspaces
from airspacekit.airspaces.model import AirspaceRecord, AirspaceSource
from airspacekit.airspaces.routes import consolidate_rnav_routes
from airspacekit.core.config import DEFAULT_SETTINGS, AirspaceSettings, ConfigLoader
from airspacekit.core.logging_system import initialize_logging
from airspacekit.geometry.coordinates import Coordinate
from airspacekit.openair.validator import validate_openair_file
from airspacekit.pipeline.database import AirspaceDatabase
from airspacekit.pipeline.loader import AirspaceLoader

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments without the program name (defaults to ``sys.argv``).

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="airspacekit - OpenAir airspace tools")
    parser.add_argument("--config", type=Path, help="Settings YAML file (airspace: section)")
    parser.add_argument("--log-config", type=Path, help="Logging YAML file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse an OpenAir file into records")
    parse_cmd.add_argument("file", type=Path, help="OpenAir file")
    parse_cmd.add_argument(
        "--source",
        choices=[s.value for s in AirspaceSource],
        default=AirspaceSource.USER.value,
        help="Source the records are attributed to",
    )
    parse_cmd.add_argument("--consolidate", action="store_true", help="Merge near-duplicate airspaces")
    parse_cmd.add_argument("--routes", action="store_true", help="Merge segmented RNAV routes")
    parse_cmd.add_argument(
        "--cache", action="store_true", help="Persist route groups under the configured cache_dir"
    )
    parse_cmd.add_argument("--json", type=Path, dest="json_out", help="Write records as JSON")

    validate_cmd = subparsers.add_parser("validate", help="Check an OpenAir file for problems")
    validate_cmd.add_argument("file", type=Path, help="OpenAir file")

    query_cmd = subparsers.add_parser("query", help="Find airspaces at or near a point")
    query_cmd.add_argument("file", type=Path, help="OpenAir file")
    query_cmd.add_argument("--lat", type=float, required=True, help="Latitude in degrees")
    query_cmd.add_argument("--lon", type=float, required=True, help="Longitude in degrees")
    query_cmd.add_argument("--radius-km", type=float, default=0.0, help="Search radius in km")

    return parser.parse_args(argv)


def load_settings(config_path: Path | None) -> AirspaceSettings:
    """Settings from a YAML file, or the defaults."""
    if config_path is None:
        return DEFAULT_SETTINGS
    return AirspaceSettings.from_config(ConfigLoader.load(config_path))


def _read_text(path: Path) -> str:
    if not path.exists():
        raise FileNotFoundError(f"OpenAir file not found: {path}")
    return path.read_text(encoding="utf-8", errors="replace")


def _describe(record: AirspaceRecord) -> str:
    altitude = record.altitude
    band = f"{altitude.floor}-{altitude.ceiling} ft" if altitude else "unknown altitude"
    return f"{record.id}\t{record.type}\t{record.name}\t{band}"


def run_parse(args: argparse.Namespace, settings: AirspaceSettings) -> int:
    """Parse a file, optionally consolidate, and report or export the records."""
    loader = AirspaceLoader(settings=settings)
    records = loader.process_openair_text(_read_text(args.file), args.source)

    if args.consolidate:
        records = consolidate_similar_airspaces(records, settings)
    if args.routes:
        store: CacheStore = JsonFileCacheStore(settings.cache_dir) if args.cache else MemoryCacheStore()
        records = consolidate_rnav_routes(records, store, settings)

    if args.json_out:
        with open(args.json_out, "w", encoding="utf-8") as f:
            json.dump([record.with_bounds().to_dict() for record in records], f, indent=2)
        logger.info("Wrote %d records to %s", len(records), args.json_out)

    print(f"{len(records)} airspaces")
    for airspace_type, count in sorted(Counter(r.type for r in records).items()):
        print(f"  {airspace_type}: {count}")
    return 0


def run_validate(args: argparse.Namespace) -> int:
    """Validate a file and print its errors and warnings."""
    result = validate_openair_file(_read_text(args.file))
    for error in result.errors:
        print(f"ERROR: {error}")
    for warning in result.warnings:
        print(f"WARNING: {warning}")
    status = "valid" if result.is_valid else "invalid"
    print(f"{args.file}: {status} ({result.airspace_count} airspaces)")
    return 0 if result.is_valid else 1


def run_query(args: argparse.Namespace, settings: AirspaceSettings) -> int:
    """Load a file and print the airspaces at or near a point."""
    point = Coordinate(args.lat, args.lon)
    if not point.is_valid():
        print(f"Invalid coordinate: {args.lat}, {args.lon}")
        return 2

    db = AirspaceDatabase(AirspaceLoader(settings=settings))
    db.load_openair_file(args.file)
    hits = db.find_nearby(point, args.radius_km)
    for record in hits:
        print(_describe(record))
    print(f"{len(hits)} of {len(db)} airspaces match")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    try:
        args = parse_args(argv)
        initialize_logging(args.log_config)
        settings = load_settings(args.config)

        if args.command == "parse":
            return run_parse(args, settings)
        if args.command == "validate":
            return run_validate(args)
        return run_query(args, settings)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
