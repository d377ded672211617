"""Data model definitions — explicit boundaries between catalog, sky math, and presentation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeoLocation:
    """Observer position on Earth. Supplied by the UI, read every frame."""

    lat: float  # Latitude (decimal degrees, -90..90, + north)
    lon: float  # Longitude (decimal degrees, -180..180, + east)


@dataclass(frozen=True)
class EquatorialCoords:
    """Fixed position on the celestial sphere, independent of the observer."""

    ra: float  # Right ascension (hours, 0..24)
    dec: float  # Declination (degrees, -90..90)


@dataclass(frozen=True)
class HorizontalCoords:
    """Observer-relative direction. Derived per frame, never stored."""

    alt: float  # Altitude (degrees, -90..90, negative = below horizon)
    az: float  # Azimuth (degrees, 0..360, 0=N, 90=E)


@dataclass(frozen=True)
class Star:
    """A single catalog entry with geometry and color derived at load time."""

    id: int  # Catalog id (HYG id or Hipparcos number)
    ra: float  # Right ascension (hours)
    dec: float  # Declination (degrees)
    mag: float  # Apparent visual magnitude
    color_index: float  # B-V color index
    x: float  # Unit-sphere position, catalog frame
    y: float  # Unit-sphere position, catalog frame (celestial pole axis)
    z: float  # Unit-sphere position, catalog frame
    color: tuple[float, float, float]  # RGB in 0..1 derived from B-V
    proper_name: str | None = None  # "Sirius"
    designation: str | None = None  # Bayer designation ("Alp CMa")
    constellation: str | None = None  # IAU abbreviation ("CMa")

    @property
    def display_name(self) -> str:
        return self.proper_name or self.designation or f"Star {self.id}"


@dataclass(frozen=True)
class Viewport:
    """Canvas size in device pixels."""

    width: float
    height: float

    @property
    def aspect(self) -> float:
        if self.height <= 0:
            return float("nan")
        return self.width / self.height

    def contains(self, x: float, y: float) -> bool:
        """True when the pixel lies on the canvas (NaN is never inside)."""
        return 0 <= x < self.width and 0 <= y < self.height


@dataclass(frozen=True)
class ScreenPoint:
    """A projected point in pixel coordinates (origin top-left, y down)."""

    x: float  # Pixels from the left edge
    y: float  # Pixels from the top edge
    depth: float  # Clip-space w; distance in front of the camera
