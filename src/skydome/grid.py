"""Coordinate grid geometry. Alt/Az and equatorial reference lines as polylines."""

from dataclasses import dataclass
from typing import Literal

import numpy as np

from skydome.astronomy import equatorial_to_cartesian, horizontal_to_cartesian

Frame = Literal["observer", "celestial"]

ALTITUDE_RINGS = (0, 15, 30, 45, 60, 75)
AZIMUTH_SPOKES = (0, 45, 90, 135, 180, 225, 270, 315)
DECLINATION_RINGS = (-60, -30, 0, 30, 60)
HOUR_CIRCLES = (0, 3, 6, 9, 12, 15, 18, 21)
CARDINAL_AZIMUTHS = {"N": 0.0, "E": 90.0, "S": 180.0, "W": 270.0}


@dataclass(frozen=True)
class GridOptions:
    """Overlay toggles from the toolbar."""

    show_alt_az_grid: bool = False
    show_equatorial_grid: bool = False
    show_constellations: bool = False
    show_horizon: bool = True
    show_cardinals: bool = True
    light_mode: bool = False


@dataclass(frozen=True)
class GridLine:
    """One polyline. Observer-frame lines are drawn as-is; celestial-frame
    lines go through the celestial rotation first."""

    kind: str  # "altitude", "azimuth", "horizon", "declination", "hour"
    frame: Frame
    points: np.ndarray  # (M, 3) unit vectors


def altitude_circle(alt_deg: float, segments: int = 72) -> np.ndarray:
    """Closed ring of constant altitude, observer frame."""
    az = np.linspace(0.0, 360.0, segments + 1)
    return horizontal_to_cartesian(np.full_like(az, alt_deg), az)


def azimuth_arc(az_deg: float, segments: int = 36) -> np.ndarray:
    """Arc from the horizon to the zenith at a fixed azimuth, observer frame."""
    alt = np.linspace(0.0, 90.0, segments + 1)
    return horizontal_to_cartesian(alt, np.full_like(alt, az_deg))


def declination_circle(dec_deg: float, segments: int = 72) -> np.ndarray:
    """Closed ring of constant declination, catalog frame."""
    ra = np.linspace(0.0, 24.0, segments + 1)
    return equatorial_to_cartesian(ra, np.full_like(ra, dec_deg))


def hour_circle(ra_hours: float, segments: int = 72) -> np.ndarray:
    """Pole-to-pole meridian at a fixed right ascension, catalog frame."""
    dec = np.linspace(-90.0, 90.0, segments + 1)
    return equatorial_to_cartesian(np.full_like(dec, ra_hours), dec)


def build_grid_lines(options: GridOptions) -> list[GridLine]:
    """All polylines enabled by the options, in draw order."""
    lines: list[GridLine] = []
    if options.show_alt_az_grid:
        lines += [GridLine("altitude", "observer", altitude_circle(a)) for a in ALTITUDE_RINGS]
        lines += [GridLine("azimuth", "observer", azimuth_arc(a)) for a in AZIMUTH_SPOKES]
    if options.show_horizon:
        lines.append(GridLine("horizon", "observer", altitude_circle(0.0, segments=144)))
    if options.show_equatorial_grid:
        lines += [
            GridLine("declination", "celestial", declination_circle(d))
            for d in DECLINATION_RINGS
        ]
        lines += [GridLine("hour", "celestial", hour_circle(h)) for h in HOUR_CIRCLES]
    return lines


def cardinal_points() -> dict[str, np.ndarray]:
    """Observer-frame unit vectors for the N/E/S/W horizon markers."""
    return {
        label: horizontal_to_cartesian(0.0, az) for label, az in CARDINAL_AZIMUTHS.items()
    }
