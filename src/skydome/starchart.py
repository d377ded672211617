"""CLI entry point for rendering one frame of the sky dome to a PNG.

Example:
    uv run skydome-chart --lat 44.06 --lon -121.32 --when "2024-08-12 23:30" --az 45 --alt 40
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

from skydome.camera import CameraState
from skydome.catalog import CatalogUnavailableError, load_hyg_catalog
from skydome.constellations import ConstellationDataError, load_constellation_figures
from skydome.frame import build_frame
from skydome.grid import GridOptions
from skydome.models import GeoLocation, HorizontalCoords, Viewport
from skydome.observer import TimezoneLookupError, resolve_instant
from skydome.renderers.static import save_static_chart
from skydome.settings import Settings

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render the night sky for a place and time.")
    parser.add_argument("--lat", type=float, required=True, help="Latitude, degrees north")
    parser.add_argument("--lon", type=float, required=True, help="Longitude, degrees east")
    when = parser.add_mutually_exclusive_group()
    when.add_argument("--when", help='Local time at the location, "YYYY-MM-DD HH:MM"')
    when.add_argument("--utc", help='UTC time, "YYYY-MM-DD HH:MM" (default: now)')
    parser.add_argument("--az", type=float, default=180.0, help="View azimuth, degrees")
    parser.add_argument("--alt", type=float, default=45.0, help="View altitude, degrees")
    parser.add_argument("--fov", type=float, default=settings.fov_deg)
    parser.add_argument("--width", type=int, default=1200)
    parser.add_argument("--height", type=int, default=800)
    parser.add_argument("--max-magnitude", type=float, default=settings.max_magnitude)
    parser.add_argument("--catalog", type=Path, default=settings.catalog_path)
    parser.add_argument("--constellations", type=Path, default=settings.constellations_path)
    parser.add_argument("--alt-az-grid", action="store_true")
    parser.add_argument("--equatorial-grid", action="store_true")
    parser.add_argument("--light", action="store_true", help="Light background")
    parser.add_argument("--output", type=Path, default=None)
    return parser.parse_args(argv)


def _parse_utc(value: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d %H:%M").replace(tzinfo=timezone.utc)
    except ValueError as exc:
        raise TimezoneLookupError(f"Invalid time {value!r}: expected YYYY-MM-DD HH:MM") from exc


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _parse_args(argv, settings)

    location = GeoLocation(lat=args.lat, lon=args.lon)
    try:
        if args.when:
            instant = resolve_instant(args.when, location)
        elif args.utc:
            instant = _parse_utc(args.utc)
        else:
            instant = datetime.now(timezone.utc)
        catalog = load_hyg_catalog(args.catalog, args.max_magnitude)
        figures = ()
        if args.constellations.exists():
            figures = load_constellation_figures(args.constellations)
        else:
            logger.warning("No constellation file at %s; drawing stars only", args.constellations)
    except (TimezoneLookupError, CatalogUnavailableError, ConstellationDataError) as exc:
        logger.error("%s", exc)
        return 1

    camera = CameraState()
    camera.look_at(HorizontalCoords(alt=args.alt, az=args.az))
    frame = build_frame(location, instant, camera, Viewport(args.width, args.height), args.fov)
    options = GridOptions(
        show_alt_az_grid=args.alt_az_grid,
        show_equatorial_grid=args.equatorial_grid,
        show_constellations=bool(figures),
        light_mode=args.light,
    )
    path = save_static_chart(frame, catalog, args.output, figures, options)
    print(f"Saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
