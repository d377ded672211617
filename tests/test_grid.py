"""Unit tests for grid polylines and cardinal markers."""

import numpy as np

from skydome.grid import (
    GridOptions,
    altitude_circle,
    azimuth_arc,
    build_grid_lines,
    cardinal_points,
    declination_circle,
    hour_circle,
)


class TestGeometry:
    def test_altitude_circle_is_closed_and_level(self):
        ring = altitude_circle(30.0, segments=36)
        assert ring.shape == (37, 3)
        np.testing.assert_allclose(ring[0], ring[-1], atol=1e-12)
        np.testing.assert_allclose(ring[:, 1], np.sin(np.radians(30.0)))

    def test_azimuth_arc_reaches_zenith(self):
        arc = azimuth_arc(90.0)
        np.testing.assert_allclose(arc[0], [1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(arc[-1], [0.0, 1.0, 0.0], atol=1e-12)

    def test_declination_circle(self):
        ring = declination_circle(-30.0)
        np.testing.assert_allclose(ring[:, 1], np.sin(np.radians(-30.0)))
        np.testing.assert_allclose(np.linalg.norm(ring, axis=1), 1.0)

    def test_hour_circle_pole_to_pole(self):
        meridian = hour_circle(6.0)
        np.testing.assert_allclose(meridian[0], [0.0, -1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(meridian[-1], [0.0, 1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(meridian[:, 0], 0.0, atol=1e-12)


class TestBuildGridLines:
    def test_defaults_draw_horizon_only(self):
        lines = build_grid_lines(GridOptions())
        assert [line.kind for line in lines] == ["horizon"]
        assert lines[0].frame == "observer"
        assert lines[0].points.shape == (145, 3)

    def test_everything(self):
        options = GridOptions(show_alt_az_grid=True, show_equatorial_grid=True)
        lines = build_grid_lines(options)
        kinds = [line.kind for line in lines]
        assert len(lines) == 28
        assert kinds.count("altitude") == 6
        assert kinds.count("azimuth") == 8
        assert kinds.count("declination") == 5
        assert kinds.count("hour") == 8
        assert {line.frame for line in lines if line.kind in ("declination", "hour")} == {
            "celestial"
        }

    def test_nothing(self):
        assert build_grid_lines(GridOptions(show_horizon=False)) == []


def test_cardinal_points():
    points = cardinal_points()
    assert list(points) == ["N", "E", "S", "W"]
    np.testing.assert_allclose(points["N"], [0.0, 0.0, 1.0], atol=1e-12)
    np.testing.assert_allclose(points["E"], [1.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(points["W"], [-1.0, 0.0, 0.0], atol=1e-12)
