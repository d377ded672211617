"""Turn a local wall-clock time at a location into a UTC instant."""

from datetime import datetime

from pytz import timezone, utc
from pytz.exceptions import AmbiguousTimeError, NonExistentTimeError
from timezonefinder import TimezoneFinder

from skydome.models import GeoLocation

_tf = TimezoneFinder()


class TimezoneLookupError(Exception):
    """Local time could not be resolved for the location."""


def resolve_instant(when: str, location: GeoLocation) -> datetime:
    """Resolve a local time string at a location to an aware UTC datetime.

    Args:
        when: Local time string in "YYYY-MM-DD HH:MM" format.
        location: Observer latitude/longitude, used to find the time zone.

    Returns:
        UTC datetime (tzinfo=utc).

    Raises:
        TimezoneLookupError: Unparseable string, an out-of-range location, no
            time zone at the location, or a local time that is skipped or
            repeated by a DST change.
    """
    try:
        dt = datetime.strptime(when, "%Y-%m-%d %H:%M")
    except ValueError as exc:
        raise TimezoneLookupError(f"Invalid time {when!r}: expected YYYY-MM-DD HH:MM") from exc

    try:
        tz_str = _tf.timezone_at(lat=location.lat, lng=location.lon)
    except ValueError as exc:
        raise TimezoneLookupError(f"Invalid location: {exc}") from exc
    if tz_str is None:
        raise TimezoneLookupError(f"Timezone not found: lat={location.lat}, lng={location.lon}")
    local_tz = timezone(tz_str)
    try:
        return local_tz.localize(dt, is_dst=None).astimezone(utc)
    except (AmbiguousTimeError, NonExistentTimeError) as exc:
        raise TimezoneLookupError(f"{when} is ambiguous or skipped in {tz_str}") from exc
