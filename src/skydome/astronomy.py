"""Astronomy computation layer — Julian dates, sidereal time, and sky coordinate transforms.

Coordinate frames:
  Catalog frame:  unit sphere fixed to the stars. x → (RA 0h, Dec 0°),
                  y → north celestial pole, z → (RA 6h, Dec 0°).
  Observer frame: x = East, y = Zenith (up), z = North.

The celestial rotation maps catalog-frame vectors into the observer frame in a
single matrix multiply, so per-star trigonometry is only needed for read-outs.
"""

import math
from datetime import datetime, timezone

import numpy as np

from skydome.models import EquatorialCoords, GeoLocation, HorizontalCoords

J2000_JD = 2451545.0  # Julian Date of epoch J2000.0 (2000-01-01 12:00 TT)
_HOURS_TO_RAD = math.pi / 12.0
_CARDINALS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def date_to_julian_date(instant: datetime) -> float:
    """Convert a calendar date-time to a Julian Date (Gregorian calendar).

    Args:
        instant: Date-time. Naive values are taken as UTC; aware values are
            converted to UTC first.

    Returns:
        Julian Date as a float (days).
    """
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)

    y = instant.year
    m = instant.month
    if m <= 2:
        y -= 1
        m += 12

    a = math.floor(y / 100)
    b = 2 - a + math.floor(a / 4)

    day_fraction = (
        instant.hour
        + instant.minute / 60.0
        + (instant.second + instant.microsecond / 1e6) / 3600.0
    ) / 24.0

    return (
        math.floor(365.25 * (y + 4716))
        + math.floor(30.6001 * (m + 1))
        + instant.day
        + b
        - 1524.5
        + day_fraction
    )


def julian_date_to_gmst(jd: float) -> float:
    """Greenwich Mean Sidereal Time for a Julian Date.

    Polynomial approximation referenced to J2000.0 (Meeus, eq. 12.4).

    Args:
        jd: Julian Date.

    Returns:
        GMST in hours, 0 <= gmst < 24. NaN input gives NaN.
    """
    d = jd - J2000_JD
    t = d / 36525.0
    gmst_deg = (
        280.46061837 + 360.98564736629 * d + 0.000387933 * t * t - t * t * t / 38710000.0
    )
    return _wrap(gmst_deg, 360.0) / 15.0


def local_sidereal_time(instant: datetime, longitude_deg: float) -> float:
    """Local Sidereal Time in hours (0 <= lst < 24) at a longitude (+ east)."""
    gmst = julian_date_to_gmst(date_to_julian_date(instant))
    return _wrap(gmst + longitude_deg / 15.0, 24.0)


def equatorial_to_horizontal(
    eq: EquatorialCoords, location: GeoLocation, instant: datetime
) -> HorizontalCoords:
    """Convert RA/Dec to altitude/azimuth for an observer.

    Azimuth uses atan2 of its east and north components so the quadrant is
    always right. At the zenith and nadir both components vanish and the
    azimuth is arbitrary (0 is returned). Non-finite RA or Dec gives NaN
    coordinates.

    Args:
        eq: Equatorial coordinates (RA hours, Dec degrees).
        location: Observer latitude/longitude.
        instant: Observation time.

    Returns:
        HorizontalCoords with alt in [-90, 90] and az in [0, 360).
    """
    if not (math.isfinite(eq.ra) and math.isfinite(eq.dec)):
        return HorizontalCoords(alt=math.nan, az=math.nan)

    lst = local_sidereal_time(instant, location.lon)
    ha = (lst - eq.ra) * _HOURS_TO_RAD
    dec = math.radians(eq.dec)
    lat = _latitude_rad(location)

    sin_alt = math.sin(dec) * math.sin(lat) + math.cos(dec) * math.cos(lat) * math.cos(ha)
    east = -math.cos(dec) * math.sin(ha)
    north = math.sin(dec) * math.cos(lat) - math.cos(dec) * math.sin(lat) * math.cos(ha)

    # hypot(east, north) is cos(alt)
    alt = math.degrees(math.atan2(sin_alt, math.hypot(east, north)))
    az = _wrap(math.degrees(math.atan2(east, north)), 360.0)

    return HorizontalCoords(alt=alt, az=az)


def equatorial_to_cartesian(ra_hours, dec_deg) -> np.ndarray:
    """Unit-sphere position in the catalog frame.

    Accepts scalars or numpy arrays; the result has a trailing axis of 3.
    """
    ra = np.asarray(ra_hours, dtype=np.float64) * _HOURS_TO_RAD
    dec = np.radians(np.asarray(dec_deg, dtype=np.float64))
    cos_dec = np.cos(dec)
    return np.stack([cos_dec * np.cos(ra), np.sin(dec), cos_dec * np.sin(ra)], axis=-1)


def horizontal_to_cartesian(alt_deg, az_deg) -> np.ndarray:
    """Unit vector in the observer frame (x = East, y = Up, z = North).

    Azimuth 0 points to +z (North), 90 to +x (East).
    """
    alt = np.radians(np.asarray(alt_deg, dtype=np.float64))
    az = np.radians(np.asarray(az_deg, dtype=np.float64))
    cos_alt = np.cos(alt)
    return np.stack([cos_alt * np.sin(az), np.sin(alt), cos_alt * np.cos(az)], axis=-1)


def cartesian_to_horizontal(vector) -> HorizontalCoords:
    """Inverse of horizontal_to_cartesian for a single observer-frame vector."""
    x, y, z = (float(c) for c in vector)
    alt = math.degrees(math.atan2(y, math.hypot(x, z)))
    az = _wrap(math.degrees(math.atan2(x, z)), 360.0)
    return HorizontalCoords(alt=alt, az=az)


def cartesian_to_equatorial(vector) -> EquatorialCoords:
    """Inverse of equatorial_to_cartesian for a single catalog-frame vector."""
    x, y, z = (float(c) for c in vector)
    dec = math.degrees(math.atan2(y, math.hypot(x, z)))
    ra = _wrap(math.degrees(math.atan2(z, x)) / 15.0, 24.0)
    return EquatorialCoords(ra=ra, dec=dec)


def celestial_rotation(location: GeoLocation, instant: datetime) -> np.ndarray:
    """4x4 rotation from the catalog frame to the observer frame.

    R = Rx(90° - lat) · Ry(LST + 90°): spin the sky about the polar axis by the
    local sidereal time, then tilt the pole down from the zenith by the
    colatitude. The quarter-turn offset puts RA = LST on the meridian.

    The matrix is orthogonal, so its inverse is its transpose. Callers rely on
    this; extending the chain with scale or shear breaks that assumption.
    It changes with time; never cache it across frames.
    """
    lst_rad = local_sidereal_time(instant, location.lon) * _HOURS_TO_RAD
    spin = _rotation_y(lst_rad + math.pi / 2)
    tilt = _rotation_x(math.pi / 2 - _latitude_rad(location))
    matrix = np.eye(4)
    matrix[:3, :3] = tilt @ spin
    return matrix


def celestial_rotation_matrix(location: GeoLocation, instant: datetime) -> np.ndarray:
    """celestial_rotation flattened column-major (16 float32) for GPU uniforms."""
    return np.asarray(celestial_rotation(location, instant), dtype=np.float32).ravel(order="F")


def azimuth_to_cardinal(az_deg: float) -> str:
    """8-point compass label for an azimuth in degrees."""
    return _CARDINALS[round(_wrap(az_deg, 360.0) / 45.0) % 8]


def _rotation_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def _rotation_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def _latitude_rad(location: GeoLocation) -> float:
    return math.radians(_clamp(location.lat, -90.0, 90.0))


def _wrap(value: float, period: float) -> float:
    """value mod period in [0, period); NaN passes through."""
    wrapped = value % period
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if wrapped >= period else wrapped


def _clamp(value: float, lo: float, hi: float) -> float:
    if math.isnan(value):
        return value
    return lo if value < lo else hi if value > hi else value
