"""Star catalog model — record filtering, derived geometry and color, and file loaders."""

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd
from skyfield.data import hipparcos

from skydome.astronomy import equatorial_to_cartesian
from skydome.models import Star

logger = logging.getLogger(__name__)

DEFAULT_MAX_MAGNITUDE = 6.0

# HYG column → record field
_HYG_COLUMNS = {
    "id": "id",
    "ra": "ra",
    "dec": "dec",
    "mag": "mag",
    "ci": "color_index",
    "proper": "proper_name",
    "bayer": "designation",
    "con": "constellation",
}
_REQUIRED_HYG_COLUMNS = ("ra", "dec", "mag")


class CatalogUnavailableError(Exception):
    """Star catalog source missing, unreadable, or lacking required columns."""


def color_index_to_rgb(color_index) -> np.ndarray:
    """Approximate black-body RGB (0..1) from a B-V color index.

    B-V is clamped to [-0.4, 2.0], converted to a temperature with
    Ballesteros' formula, then mapped onto fixed spectral bands. Accepts a
    scalar or an array; the result has a trailing axis of 3.
    """
    bv = np.clip(np.asarray(color_index, dtype=np.float64), -0.4, 2.0)
    temp = 4600.0 * (1.0 / (0.92 * bv + 1.7) + 1.0 / (0.92 * bv + 0.62))

    # Hot stars shade from pale blue-white toward deeper blue
    heat = np.clip((temp - 10000.0) / 20000.0, 0.0, 1.0)
    bands = [temp >= 10000.0, temp >= 7500.0, temp >= 6000.0, temp >= 5000.0, temp >= 3500.0]
    r = np.select(bands, [0.8 - 0.1 * heat, 1.0, 1.0, 1.0, 1.0], default=1.0)
    g = np.select(bands, [0.8 - 0.15 * heat, 1.0, 0.95, 0.9, 0.7], default=0.5)
    b = np.select(bands, [np.ones_like(temp), 1.0, 0.85, 0.7, 0.4], default=0.3)
    return np.stack([r, g, b], axis=-1)


@dataclass(frozen=True)
class StarCatalog:
    """Immutable star collection, sorted by magnitude (brightest first).

    The parallel arrays share the order of ``stars`` and are read-only.
    """

    stars: tuple[Star, ...]
    positions: np.ndarray  # (N, 3) unit vectors, catalog frame
    magnitudes: np.ndarray  # (N,)
    colors: np.ndarray  # (N, 3) RGB 0..1

    def __len__(self) -> int:
        return len(self.stars)

    def __iter__(self) -> Iterator[Star]:
        return iter(self.stars)

    def __getitem__(self, index: int) -> Star:
        return self.stars[index]

    @property
    def count(self) -> int:
        return len(self.stars)

    @property
    def flat_positions(self) -> np.ndarray:
        """Interleaved [x, y, z, x, y, z, ...] float32 buffer."""
        return self.positions.astype(np.float32).ravel()

    @property
    def flat_colors(self) -> np.ndarray:
        """Interleaved [r, g, b, ...] float32 buffer."""
        return self.colors.astype(np.float32).ravel()

    def find_near(self, point, radius: float = 0.1) -> list[Star]:
        """Stars whose unit vector lies within a chord distance of point."""
        if not self.stars:
            return []
        dist_sq = np.sum((self.positions - np.asarray(point, dtype=np.float64)) ** 2, axis=1)
        return [self.stars[i] for i in np.flatnonzero(dist_sq < radius * radius)]

    def search(self, query: str, limit: int = 20) -> list[Star]:
        """Case-insensitive name search. Prefix matches first, then by brightness.

        Proper names and designations also match on a substring; the
        constellation abbreviation only matches as a prefix.
        """
        q = query.strip().lower()
        if not q:
            return []
        prefix: list[Star] = []
        contains: list[Star] = []
        for star in self.stars:
            names = [n.lower() for n in (star.proper_name, star.designation) if n]
            constellation = (star.constellation or "").lower()
            if constellation.startswith(q) or any(n.startswith(q) for n in names):
                prefix.append(star)
            elif any(q in n for n in names):
                contains.append(star)
        return (prefix + contains)[:limit]


def build_catalog(
    records: Iterable[Mapping[str, object]],
    max_magnitude: float | None = None,
) -> StarCatalog:
    """Filter raw records, derive geometry and color, and sort by magnitude.

    Records whose ra/dec/mag are missing or unparseable are dropped silently.
    A missing color index is treated as 0.0 (white).

    Args:
        records: Mappings with keys id, ra (hours), dec (degrees), mag, and
            optionally color_index, proper_name, designation, constellation.
        max_magnitude: Drop stars fainter than this. None keeps everything.

    Returns:
        StarCatalog sorted ascending by magnitude (stable for equal values).
    """
    parsed: list[tuple[int, float, float, float, float, dict[str, str | None]]] = []
    dropped = 0
    for row_number, record in enumerate(records, start=1):
        ra = _parse_float(record.get("ra"))
        dec = _parse_float(record.get("dec"))
        mag = _parse_float(record.get("mag"))
        if ra is None or dec is None or mag is None:
            dropped += 1
            continue
        if max_magnitude is not None and mag > max_magnitude:
            continue
        star_id = _parse_int(record.get("id"))
        ci = _parse_float(record.get("color_index"))
        labels = {
            key: _parse_label(record.get(key))
            for key in ("proper_name", "designation", "constellation")
        }
        parsed.append(
            (
                star_id if star_id is not None else row_number,
                ra,
                dec,
                mag,
                ci if ci is not None else 0.0,
                labels,
            )
        )

    if dropped:
        logger.debug("Dropped %d malformed catalog records", dropped)

    parsed.sort(key=lambda p: p[3])

    ra_arr = np.array([p[1] for p in parsed], dtype=np.float64)
    dec_arr = np.array([p[2] for p in parsed], dtype=np.float64)
    positions = equatorial_to_cartesian(ra_arr, dec_arr).reshape(-1, 3)
    magnitudes = np.array([p[3] for p in parsed], dtype=np.float64)
    colors = color_index_to_rgb(np.array([p[4] for p in parsed], dtype=np.float64)).reshape(-1, 3)

    stars = tuple(
        Star(
            id=star_id,
            ra=ra,
            dec=dec,
            mag=mag,
            color_index=ci,
            x=float(positions[i, 0]),
            y=float(positions[i, 1]),
            z=float(positions[i, 2]),
            color=(float(colors[i, 0]), float(colors[i, 1]), float(colors[i, 2])),
            **labels,
        )
        for i, (star_id, ra, dec, mag, ci, labels) in enumerate(parsed)
    )

    for arr in (positions, magnitudes, colors):
        arr.flags.writeable = False

    return StarCatalog(stars=stars, positions=positions, magnitudes=magnitudes, colors=colors)


def load_hyg_catalog(
    path: Path | str, max_magnitude: float | None = DEFAULT_MAX_MAGNITUDE
) -> StarCatalog:
    """Load the HYG database CSV (columns id, ra, dec, mag, ci, proper, bayer, con).

    Raises:
        CatalogUnavailableError: File missing or unreadable, or a required
            column (ra, dec, mag) is absent.
    """
    try:
        df = pd.read_csv(
            path,
            usecols=lambda c: c in _HYG_COLUMNS,
            dtype=str,
            keep_default_na=False,
        )
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise CatalogUnavailableError(f"Cannot read star catalog {path}: {exc}") from exc

    missing = [c for c in _REQUIRED_HYG_COLUMNS if c not in df.columns]
    if missing:
        raise CatalogUnavailableError(f"Star catalog {path} lacks columns: {', '.join(missing)}")

    df = df.rename(columns=_HYG_COLUMNS)
    catalog = build_catalog(df.to_dict("records"), max_magnitude)
    logger.info("Loaded %d stars from %s (magnitude <= %s)", len(catalog), path, max_magnitude)
    return catalog


def load_hipparcos_catalog(
    path: Path | str, max_magnitude: float | None = DEFAULT_MAX_MAGNITUDE
) -> StarCatalog:
    """Load a Hipparcos ``hip_main.dat`` file via skyfield.

    The Hipparcos main table as parsed by skyfield carries no B-V column, so
    every star gets color index 0.

    Raises:
        CatalogUnavailableError: File missing or unreadable.
    """
    try:
        with open(path, "rb") as f:
            stars_df = hipparcos.load_dataframe(f)
    except (OSError, ValueError, pd.errors.ParserError) as exc:
        raise CatalogUnavailableError(f"Cannot read Hipparcos catalog {path}: {exc}") from exc

    stars_df = stars_df.dropna(subset=["ra_degrees", "dec_degrees"])
    records = (
        {"id": int(hip), "ra": ra_deg / 15.0, "dec": dec_deg, "mag": mag}
        for hip, ra_deg, dec_deg, mag in zip(
            stars_df.index,
            stars_df["ra_degrees"],
            stars_df["dec_degrees"],
            stars_df["magnitude"],
        )
    )
    catalog = build_catalog(records, max_magnitude)
    logger.info("Loaded %d Hipparcos stars from %s", len(catalog), path)
    return catalog


def _parse_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _parse_int(value: object) -> int | None:
    number = _parse_float(value)
    return int(number) if number is not None else None


def _parse_label(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None
