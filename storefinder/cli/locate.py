"""
CLI for querying a store finder data set without a GUI.

Runs the view and panel controllers against a headless map, so the ranking
matches what the map application would list for the same viewport.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List

from PySide6.QtCore import QCoreApplication

from storefinder.app.panel_controller import PanelController
from storefinder.app.view_controller import ViewController
from storefinder.cli.utils import validate_data_path
from storefinder.core.config import SETTINGS_APP, SETTINGS_ORG, load_options
from storefinder.core.exceptions import StoreFinderError
from storefinder.core.geo import LatLng
from storefinder.core.location import Location
from storefinder.core.logging_config import setup_logging, shutdown_logging
from storefinder.services.headless_map import HeadlessMap
from storefinder.services.ingestion import RecordDataSource

logger = logging.getLogger(__name__)


def _location_row(location: Location, origin: LatLng) -> Dict[str, Any]:
    return {
        "id": location.id,
        "title": location.title,
        "lat": location.coordinates.lat,
        "lng": location.coordinates.lng,
        "distance_km": round(location.distance_to(origin), 3),
        "features": location.attributes.ids(),
    }


def search_locations(args: argparse.Namespace) -> int:
    """List the locations nearest to a point, optionally filtered."""
    from PySide6.QtCore import QSettings

    try:
        source = RecordDataSource.from_file(args.data)
    except StoreFinderError as e:
        logger.error(f"Failed to load records: {e}")
        print(f"✗ Error: {e}")
        return 1

    app = QCoreApplication.instance() or QCoreApplication([])  # noqa: F841

    settings = QSettings(SETTINGS_ORG, SETTINGS_APP)
    view_options, panel_options = load_options(settings)
    view_options.features = source.get_features()
    view_options.geolocation = False
    view_options.update_on_pan = False

    origin = LatLng(args.lat, args.lng)
    map_platform = HeadlessMap(center=origin, zoom=args.zoom, auto_idle=False)
    view = ViewController(map_platform, source, view_options)
    panel = PanelController(view, panel_options)

    for feature_id in args.feature or []:
        feature = view.get_feature_by_id(feature_id)
        if feature is None:
            known = ", ".join(source.get_features().ids()) or "none"
            print(f"✗ Error: Unknown feature '{feature_id}' (known: {known})")
            return 1
        view.toggle_feature(feature)
    view.refresh_view()

    locations: List[Location] = (view.get_locations() or [])[: args.limit]
    rows = [_location_row(location, origin) for location in locations]

    if args.json:
        print(json.dumps(rows, indent=2))
    else:
        print(f"\nFound {len(rows)} location(s) near {origin.lat}, {origin.lng}:\n")
        if panel.placeholders:
            print("  (none inside the current view, nearest shown)\n")
        for rank, row in enumerate(rows, start=1):
            print(f"{rank}. {row['title'] or row['id']}")
            print(f"  ID: {row['id']}")
            print(f"  Distance: {row['distance_km']:.2f} km")
            if row["features"]:
                print(f"  Features: {', '.join(row['features'])}")
            print()

    if source.skipped:
        logger.info(f"{len(source.skipped)} record(s) were skipped while loading")
    return 0


def list_features(args: argparse.Namespace) -> int:
    """List the attributes used by a data set."""
    try:
        source = RecordDataSource.from_file(args.data)
    except StoreFinderError as e:
        logger.error(f"Failed to load records: {e}")
        print(f"✗ Error: {e}")
        return 1

    features = source.get_features().as_list()
    if args.json:
        print(json.dumps([{"id": f.id, "display_name": f.display_name} for f in features], indent=2))
    else:
        print(f"\nFound {len(features)} feature(s):\n")
        for feature in features:
            print(f"- {feature.id}")
    return 0


def main() -> None:
    """Main entry point for the store finder CLI tool."""
    parser = argparse.ArgumentParser(description="Query store finder data sets")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # Search
    search_p = subparsers.add_parser("search", help="List locations near a point")
    search_p.add_argument("--data", "-d", required=True, help="JSON record file")
    search_p.add_argument("--lat", type=float, required=True)
    search_p.add_argument("--lng", type=float, required=True)
    search_p.add_argument("--zoom", "-z", type=int, default=11)
    search_p.add_argument(
        "--feature", "-f", action="append", help="Required feature id (repeatable)"
    )
    search_p.add_argument("--limit", "-n", type=int, default=10)
    search_p.add_argument("--json", action="store_true")
    search_p.set_defaults(func=search_locations)

    # Features
    features_p = subparsers.add_parser("features", help="List feature ids")
    features_p.add_argument("--data", "-d", required=True, help="JSON record file")
    features_p.add_argument("--json", action="store_true")
    features_p.set_defaults(func=list_features)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(debug_mode=args.verbose, log_to_console=args.verbose)

    if not validate_data_path(args.data):
        shutdown_logging()
        sys.exit(1)

    try:
        code = args.func(args)
    finally:
        shutdown_logging()
    sys.exit(code)


if __name__ == "__main__":
    main()
