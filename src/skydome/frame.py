"""Per-frame evaluation — one tick builds every matrix, then resolves picking.

Nothing here is cached across frames: the celestial rotation depends on the
instant and the view on the camera, so both are rebuilt on each tick.
"""

from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

from skydome.astronomy import celestial_rotation
from skydome.camera import (
    DEFAULT_FOV_DEG,
    CameraState,
    perspective_matrix,
    project_point,
    project_points,
    view_direction,
    view_matrix,
)
from skydome.catalog import StarCatalog
from skydome.clock import PlaybackClock
from skydome.models import GeoLocation, HorizontalCoords, ScreenPoint, Star, Viewport
from skydome.picking import pick_nearest


@dataclass(frozen=True)
class ProjectedStars:
    """Screen positions for a whole catalog, in catalog order."""

    screen: np.ndarray  # (N, 2) pixels
    visible: np.ndarray  # (N,) above horizon, in front, and on the canvas


@dataclass(frozen=True)
class SkyFrame:
    """Immutable snapshot of every transform needed to draw or hit-test a frame."""

    location: GeoLocation
    instant: datetime
    camera: CameraState  # private copy; mutating the live camera does not affect it
    viewport: Viewport
    fov_deg: float
    rotation: np.ndarray  # catalog → observer
    view: np.ndarray  # observer → view space
    projection: np.ndarray  # view → clip
    mvp: np.ndarray  # projection · view · rotation

    def project(self, point, above_horizon_only: bool = False) -> ScreenPoint | None:
        return project_point(
            point, self.camera, self.rotation, self.viewport, self.fov_deg, above_horizon_only
        )

    def project_catalog(self, catalog: StarCatalog) -> ProjectedStars:
        """Project every star at once. Below-horizon stars are never visible."""
        screen, w = project_points(catalog.positions, self.mvp, self.viewport)
        up = catalog.positions @ self.rotation[1, :3]
        with np.errstate(invalid="ignore"):
            visible = (
                (up >= 0)
                & (w > 0)
                & (screen[:, 0] >= 0)
                & (screen[:, 0] < self.viewport.width)
                & (screen[:, 1] >= 0)
                & (screen[:, 1] < self.viewport.height)
            )
        return ProjectedStars(screen=screen, visible=visible)

    def pick(self, catalog: StarCatalog, cursor: tuple[float, float], **kwargs) -> Star | None:
        return pick_nearest(
            catalog,
            self.camera,
            self.rotation,
            self.viewport,
            cursor,
            fov_deg=self.fov_deg,
            **kwargs,
        )

    @property
    def view_direction(self) -> HorizontalCoords:
        return view_direction(self.camera)


def build_frame(
    location: GeoLocation,
    instant: datetime,
    camera: CameraState,
    viewport: Viewport,
    fov_deg: float = DEFAULT_FOV_DEG,
) -> SkyFrame:
    """Compute all matrices for one frame."""
    rotation = celestial_rotation(location, instant)
    view = view_matrix(camera)
    projection = perspective_matrix(fov_deg, viewport.aspect)
    return SkyFrame(
        location=location,
        instant=instant,
        camera=camera.copy(),
        viewport=viewport,
        fov_deg=fov_deg,
        rotation=rotation,
        view=view,
        projection=projection,
        mvp=projection @ view @ rotation,
    )


@dataclass(frozen=True)
class FrameResult:
    frame: SkyFrame
    hovered_star: Star | None


@dataclass
class SkySession:
    """Single-threaded owner of the interactive sky state.

    The drag handler is the only writer of the camera; tick() is the only
    reader, once per frame.
    """

    catalog: StarCatalog
    location: GeoLocation
    viewport: Viewport
    clock: PlaybackClock = field(default_factory=PlaybackClock)
    camera: CameraState = field(default_factory=CameraState)
    fov_deg: float = DEFAULT_FOV_DEG
    _pending_cursor: tuple[float, float] | None = field(default=None, repr=False)
    _hovered: Star | None = field(default=None, repr=False)
    _dragging: bool = field(default=False, repr=False)

    def drag(self, dx: float, dy: float) -> None:
        """Rotate the view; hover is cleared while dragging."""
        self.camera.drag(dx, dy)
        self._dragging = True
        self._pending_cursor = None
        self._hovered = None

    def release(self) -> None:
        self._dragging = False

    def hover(self, x: float, y: float) -> None:
        """Queue a pick for the next tick."""
        if not self._dragging:
            self._pending_cursor = (x, y)

    def leave(self) -> None:
        """Pointer left the canvas."""
        self._dragging = False
        self._pending_cursor = None
        self._hovered = None

    def resize(self, width: float, height: float) -> None:
        self.viewport = Viewport(width=width, height=height)

    def tick(self, elapsed_seconds: float, wall_clock: datetime | None = None) -> FrameResult:
        """Advance time, rebuild the frame, then resolve any pending pick."""
        instant = self.clock.tick(elapsed_seconds, wall_clock)
        frame = build_frame(self.location, instant, self.camera, self.viewport, self.fov_deg)
        if self._pending_cursor is not None:
            self._hovered = frame.pick(self.catalog, self._pending_cursor)
            self._pending_cursor = None
        return FrameResult(frame=frame, hovered_star=self._hovered)
