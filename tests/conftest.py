"""Shared fixtures: a fixed observer, a fixed instant, and a small catalog
laid out around that observer's meridian."""

import json
from datetime import datetime, timezone

import matplotlib
import pytest

matplotlib.use("Agg")

from skydome.astronomy import local_sidereal_time  # noqa: E402
from skydome.catalog import build_catalog  # noqa: E402
from skydome.models import GeoLocation, Viewport  # noqa: E402

HYG_CSV = """id,hip,ra,dec,mag,ci,proper,bayer,con
32263,32349,6.752481,-16.716116,-1.44,0.009,Sirius,Alp,CMa
91262,91262,18.615649,38.783692,0.03,-0.001,Vega,Alp,Lyr
27919,27989,5.919529,7.407063,0.45,1.500,Betelgeuse,Alp,Ori
11734,11767,2.529750,89.264109,1.97,0.636,Polaris,Alp,UMi
99999,,not-a-number,10.0,3.0,0.1,Broken,,
100000,,12.0,,3.0,0.1,NoDec,,
24378,24436,5.242298,-8.201640,0.18,-0.030,"Rigel, the foot",Bet,Ori
50000,,1.0,1.0,7.5,,,,
"""


@pytest.fixture
def location() -> GeoLocation:
    return GeoLocation(lat=40.0, lon=-75.0)


@pytest.fixture
def instant() -> datetime:
    return datetime(2024, 3, 15, 3, 0, tzinfo=timezone.utc)


@pytest.fixture
def viewport() -> Viewport:
    return Viewport(width=800, height=600)


@pytest.fixture
def lst(location, instant) -> float:
    return local_sidereal_time(instant, location.lon)


@pytest.fixture
def sky_catalog(lst):
    """Stars positioned relative to the local meridian at the fixture instant.

    From latitude 40°N:
      Meridian   (H=0, dec 20)  → alt 70, az 180
      Twin       same place as Meridian, fainter
      Northeast  (H=-2h, dec 40) → high in the east
      Low South  (H=0, dec -60) → alt -10, az 180 (below the horizon)
      Underfoot  (H=12h, dec -60) → deep below the horizon
    """
    records = [
        {"id": 5, "ra": lst, "dec": 20.0, "mag": 4.0, "proper_name": "Twin"},
        {"id": 1, "ra": lst, "dec": 20.0, "mag": 0.5, "proper_name": "Meridian"},
        {"id": 2, "ra": (lst + 2.0) % 24.0, "dec": 40.0, "mag": 3.0, "proper_name": "Northeast"},
        {"id": 4, "ra": lst, "dec": -60.0, "mag": 2.0, "proper_name": "Low South"},
        {"id": 3, "ra": (lst + 12.0) % 24.0, "dec": -60.0, "mag": 1.0, "proper_name": "Underfoot"},
        {"id": 6, "ra": "bad", "dec": 0.0, "mag": 1.0},
    ]
    return build_catalog(records)


@pytest.fixture
def hyg_csv(tmp_path):
    path = tmp_path / "hyg.csv"
    path.write_text(HYG_CSV, encoding="utf-8")
    return path


@pytest.fixture
def constellations_json(tmp_path):
    """Two small figures; Psc straddles RA 0h/24h (GeoJSON longitude 0°)."""
    data = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": "Ori",
                "geometry": {
                    "type": "MultiLineString",
                    "coordinates": [
                        [[88.79, 7.41], [81.28, 6.35], [78.63, -8.20]],
                        [[83.00, -0.30], [84.05, -1.20], [85.19, -1.94]],
                    ],
                },
            },
            {
                "type": "Feature",
                "id": "Psc",
                "geometry": {
                    "type": "MultiLineString",
                    "coordinates": [
                        [[-2.0, 5.0], [2.0, 7.0]],
                        [[-4.0, 9.0], [4.0, 11.0]],
                        [[10.0, 0.0]],
                    ],
                },
            },
            {"type": "Feature", "id": "Xxx", "geometry": {"type": "Point", "coordinates": [0, 0]}},
        ],
    }
    path = tmp_path / "constellations.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
