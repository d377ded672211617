"""Constellation stick figures, label anchors, and on-screen labels."""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from skydome.astronomy import equatorial_to_cartesian
from skydome.camera import project_points
from skydome.models import Viewport

logger = logging.getLogger(__name__)

LABEL_OFFSET_PX = (15.0, 20.0)
LABEL_MARGIN_PX = 50.0
MAX_LABEL_DISTANCE = 1.8  # from the viewport centre, 1.0 = edge
FADE_START = 0.35
FADE_END = 0.9

# IAU abbreviation → full name
CONSTELLATION_NAMES: dict[str, str] = {
    "And": "Andromeda",
    "Ant": "Antlia",
    "Aps": "Apus",
    "Aqr": "Aquarius",
    "Aql": "Aquila",
    "Ara": "Ara",
    "Ari": "Aries",
    "Aur": "Auriga",
    "Boo": "Boötes",
    "Cae": "Caelum",
    "Cam": "Camelopardalis",
    "Cnc": "Cancer",
    "CVn": "Canes Venatici",
    "CMa": "Canis Major",
    "CMi": "Canis Minor",
    "Cap": "Capricornus",
    "Car": "Carina",
    "Cas": "Cassiopeia",
    "Cen": "Centaurus",
    "Cep": "Cepheus",
    "Cet": "Cetus",
    "Cha": "Chamaeleon",
    "Cir": "Circinus",
    "Col": "Columba",
    "Com": "Coma Berenices",
    "CrA": "Corona Australis",
    "CrB": "Corona Borealis",
    "Crv": "Corvus",
    "Crt": "Crater",
    "Cru": "Crux",
    "Cyg": "Cygnus",
    "Del": "Delphinus",
    "Dor": "Dorado",
    "Dra": "Draco",
    "Equ": "Equuleus",
    "Eri": "Eridanus",
    "For": "Fornax",
    "Gem": "Gemini",
    "Gru": "Grus",
    "Her": "Hercules",
    "Hor": "Horologium",
    "Hya": "Hydra",
    "Hyi": "Hydrus",
    "Ind": "Indus",
    "Lac": "Lacerta",
    "Leo": "Leo",
    "LMi": "Leo Minor",
    "Lep": "Lepus",
    "Lib": "Libra",
    "Lup": "Lupus",
    "Lyn": "Lynx",
    "Lyr": "Lyra",
    "Men": "Mensa",
    "Mic": "Microscopium",
    "Mon": "Monoceros",
    "Mus": "Musca",
    "Nor": "Norma",
    "Oct": "Octans",
    "Oph": "Ophiuchus",
    "Ori": "Orion",
    "Pav": "Pavo",
    "Peg": "Pegasus",
    "Per": "Perseus",
    "Phe": "Phoenix",
    "Pic": "Pictor",
    "Psc": "Pisces",
    "PsA": "Piscis Austrinus",
    "Pup": "Puppis",
    "Pyx": "Pyxis",
    "Ret": "Reticulum",
    "Sge": "Sagitta",
    "Sgr": "Sagittarius",
    "Sco": "Scorpius",
    "Scl": "Sculptor",
    "Sct": "Scutum",
    "Ser": "Serpens",
    "Sex": "Sextans",
    "Tau": "Taurus",
    "Tel": "Telescopium",
    "Tri": "Triangulum",
    "TrA": "Triangulum Australe",
    "Tuc": "Tucana",
    "UMa": "Ursa Major",
    "UMi": "Ursa Minor",
    "Vel": "Vela",
    "Vir": "Virgo",
    "Vol": "Volans",
    "Vul": "Vulpecula",
}


class ConstellationDataError(Exception):
    """Constellation line file missing or malformed."""


@dataclass(frozen=True)
class ConstellationFigure:
    """Stick figure of one constellation."""

    id: str  # IAU abbreviation ("Ori")
    name: str  # Full name ("Orion")
    lines: tuple[np.ndarray, ...]  # (M, 3) polylines, catalog frame
    vertices: tuple[tuple[float, float], ...]  # (ra_hours, dec_deg) of every vertex


@dataclass(frozen=True)
class ConstellationCenter:
    """Label anchor for a constellation."""

    id: str
    name: str
    ra: float  # hours
    dec: float  # degrees
    position: np.ndarray  # (3,) unit vector, catalog frame


@dataclass(frozen=True)
class ConstellationLabel:
    """A label placed on screen for this frame."""

    name: str
    x: float  # pixels, already offset from the anchor
    y: float
    distance: float  # anchor distance from viewport centre (1.0 = edge)


def load_constellation_figures(path: Path | str) -> tuple[ConstellationFigure, ...]:
    """Parse a d3-celestial style constellation lines GeoJSON file.

    Each feature has an IAU ``id`` and a ``MultiLineString`` geometry whose
    coordinates are ``[ra_deg, dec_deg]`` with RA in -180..180.

    Raises:
        ConstellationDataError: File missing, not JSON, without features, or
            with a feature that does not parse.
    """
    try:
        with Path(path).open(encoding="utf-8") as f:
            data = json.load(f)
        features = data["features"]
    except (OSError, ValueError, KeyError, TypeError) as exc:
        raise ConstellationDataError(f"Cannot read constellation lines {path}: {exc}") from exc

    try:
        figures = _parse_features(features)
    except (AttributeError, TypeError, IndexError, ValueError) as exc:
        raise ConstellationDataError(f"Malformed constellation lines {path}: {exc}") from exc

    logger.info(
        "Loaded %d constellations, %d line segments",
        len(figures),
        sum(len(f.lines) for f in figures),
    )
    return tuple(figures)


def _parse_features(features) -> list[ConstellationFigure]:
    figures: list[ConstellationFigure] = []
    for feature in features:
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "MultiLineString":
            continue
        cid = str(feature.get("id", ""))
        lines: list[np.ndarray] = []
        vertices: list[tuple[float, float]] = []
        for line_coords in geometry.get("coordinates", []):
            ra_hours = np.array([c[0] for c in line_coords], dtype=np.float64) / 15.0 % 24.0
            dec = np.array([c[1] for c in line_coords], dtype=np.float64)
            if len(ra_hours) < 2:
                continue
            lines.append(equatorial_to_cartesian(ra_hours, dec))
            vertices.extend(zip(ra_hours.tolist(), dec.tolist()))
        if lines:
            figures.append(
                ConstellationFigure(
                    id=cid,
                    name=CONSTELLATION_NAMES.get(cid, cid),
                    lines=tuple(lines),
                    vertices=tuple(vertices),
                )
            )
    return figures


def constellation_centers(
    figures: tuple[ConstellationFigure, ...],
) -> tuple[ConstellationCenter, ...]:
    """Label anchor per constellation: mean Dec and circular mean RA.

    RA uses a circular mean (sin/cos components) to handle the 0h/24h wrap.
    Figures sharing an id (e.g. the two halves of Serpens) are merged.
    """
    grouped: dict[str, list[tuple[float, float]]] = {}
    names: dict[str, str] = {}
    for figure in figures:
        grouped.setdefault(figure.id, []).extend(figure.vertices)
        names[figure.id] = figure.name

    centers: list[ConstellationCenter] = []
    for cid, vertices in grouped.items():
        if not vertices:
            continue
        angles = [math.radians(ra * 15.0) for ra, _ in vertices]
        sin_mean = sum(math.sin(a) for a in angles) / len(angles)
        cos_mean = sum(math.cos(a) for a in angles) / len(angles)
        ra = math.degrees(math.atan2(sin_mean, cos_mean)) / 15.0 % 24.0
        dec = sum(d for _, d in vertices) / len(vertices)
        centers.append(
            ConstellationCenter(
                id=cid,
                name=names[cid],
                ra=ra,
                dec=dec,
                position=equatorial_to_cartesian(ra, dec),
            )
        )
    return tuple(centers)


def constellation_labels(
    centers: tuple[ConstellationCenter, ...],
    mvp: np.ndarray,
    viewport: Viewport,
    max_labels: int = 10,
) -> list[ConstellationLabel]:
    """Labels for the constellations nearest the view centre.

    Anchors behind the camera, far outside the canvas, or further than
    MAX_LABEL_DISTANCE from the centre are skipped.
    """
    if not centers:
        return []

    points = np.array([c.position for c in centers])
    screen, w = project_points(points, mvp, viewport)
    half_w = viewport.width / 2
    half_h = viewport.height / 2

    labels: list[ConstellationLabel] = []
    for center, (x, y), depth in zip(centers, screen, w):
        if not depth > 0.01:
            continue
        distance = math.hypot((x - half_w) / half_w, (y - half_h) / half_h)
        label_x = x + LABEL_OFFSET_PX[0]
        label_y = y + LABEL_OFFSET_PX[1]
        on_canvas = (
            -LABEL_MARGIN_PX <= label_x <= viewport.width + LABEL_MARGIN_PX
            and -LABEL_MARGIN_PX <= label_y <= viewport.height + LABEL_MARGIN_PX
        )
        if on_canvas and distance < MAX_LABEL_DISTANCE:
            labels.append(
                ConstellationLabel(
                    name=center.name, x=float(label_x), y=float(label_y), distance=distance
                )
            )

    labels.sort(key=lambda label: label.distance)
    return labels[:max_labels]


def label_opacity(distance: float) -> float:
    """1 near the centre, fading linearly to 0 toward the edge."""
    if distance <= FADE_START:
        return 1.0
    if distance >= FADE_END:
        return 0.0
    return 1.0 - (distance - FADE_START) / (FADE_END - FADE_START)
