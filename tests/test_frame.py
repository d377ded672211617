"""Unit tests for per-frame evaluation and the interactive session."""

from datetime import timedelta

import numpy as np
import pytest

from skydome.camera import CameraState
from skydome.clock import PlaybackClock
from skydome.frame import SkySession, build_frame
from skydome.models import HorizontalCoords


def _facing_meridian() -> CameraState:
    camera = CameraState()
    camera.look_at(HorizontalCoords(alt=70.0, az=180.0))
    return camera


@pytest.fixture
def session(sky_catalog, location, viewport, instant):
    return SkySession(
        catalog=sky_catalog,
        location=location,
        viewport=viewport,
        clock=PlaybackClock(instant=instant, speed=0, realtime=False),
        camera=_facing_meridian(),
    )


class TestBuildFrame:
    def test_mvp_is_product(self, location, instant, viewport):
        frame = build_frame(location, instant, _facing_meridian(), viewport)
        np.testing.assert_allclose(frame.mvp, frame.projection @ frame.view @ frame.rotation)

    def test_camera_snapshot(self, location, instant, viewport):
        """Dragging the live camera after the frame is built does not change the frame."""
        camera = _facing_meridian()
        frame = build_frame(location, instant, camera, viewport)
        camera.drag(300, 0)
        assert frame.camera.yaw != camera.yaw
        assert frame.view_direction.az == pytest.approx(180.0)

    def test_rotation_changes_with_time(self, location, instant, viewport):
        camera = _facing_meridian()
        a = build_frame(location, instant, camera, viewport)
        b = build_frame(location, instant + timedelta(minutes=10), camera, viewport)
        assert not np.allclose(a.rotation, b.rotation)
        np.testing.assert_allclose(a.view, b.view)

    def test_project_catalog(self, sky_catalog, location, instant, viewport):
        """Only above-horizon, on-canvas stars are visible."""
        frame = build_frame(location, instant, _facing_meridian(), viewport)
        projected = frame.project_catalog(sky_catalog)
        visible = {s.proper_name for s, v in zip(sky_catalog, projected.visible) if v}
        assert {"Meridian", "Twin", "Northeast"} == visible
        assert projected.screen.shape == (len(sky_catalog), 2)
        assert tuple(projected.screen[0]) == pytest.approx((400.0, 300.0))

    def test_project_single_point(self, sky_catalog, location, instant, viewport):
        frame = build_frame(location, instant, _facing_meridian(), viewport)
        meridian = sky_catalog[0]
        sp = frame.project([meridian.x, meridian.y, meridian.z], above_horizon_only=True)
        assert (sp.x, sp.y) == pytest.approx((400.0, 300.0))

    def test_pick(self, sky_catalog, location, instant, viewport):
        frame = build_frame(location, instant, _facing_meridian(), viewport)
        assert frame.pick(sky_catalog, (400.0, 300.0)).proper_name == "Meridian"
        assert frame.pick(sky_catalog, (10.0, 10.0)) is None


class TestSession:
    def test_hover_resolved_on_tick(self, session):
        session.hover(400.0, 300.0)
        result = session.tick(0.016)
        assert result.hovered_star is not None
        assert result.hovered_star.proper_name == "Meridian"

    def test_hover_persists_between_moves(self, session):
        """Without a new pointer event the last pick is kept."""
        session.hover(400.0, 300.0)
        session.tick(0.016)
        assert session.tick(0.016).hovered_star.proper_name == "Meridian"

    def test_drag_clears_hover(self, session):
        session.hover(400.0, 300.0)
        session.tick(0.016)
        session.drag(40, 0)
        assert session.tick(0.016).hovered_star is None

    def test_hover_ignored_while_dragging(self, session):
        session.drag(0, 0)
        session.hover(400.0, 300.0)
        assert session.tick(0.016).hovered_star is None
        session.release()
        session.hover(400.0, 300.0)
        assert session.tick(0.016).hovered_star is not None

    def test_leave_clears(self, session):
        session.hover(400.0, 300.0)
        session.tick(0.016)
        session.leave()
        assert session.tick(0.016).hovered_star is None

    def test_drag_moves_view(self, session):
        before = session.tick(0.016).frame.view_direction
        session.drag(-100, 0)
        after = session.tick(0.016).frame.view_direction
        assert after.az == pytest.approx(before.az + np.degrees(0.5))

    def test_resize(self, session):
        session.resize(1600, 600)
        frame = session.tick(0.016).frame
        assert frame.viewport.width == 1600
        assert frame.projection[0, 0] == pytest.approx(frame.projection[1, 1] / (1600 / 600))

    def test_tick_advances_clock(self, session, instant):
        session.clock.speed = 3600
        frame = session.tick(1.0).frame
        assert frame.instant == instant + timedelta(hours=1)

    def test_realtime_uses_wall_clock(self, sky_catalog, location, viewport, instant):
        session = SkySession(catalog=sky_catalog, location=location, viewport=viewport)
        wall = instant + timedelta(days=3)
        assert session.tick(0.016, wall_clock=wall).frame.instant == wall
