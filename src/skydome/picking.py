"""Pointer picking: find the star under a cursor or nearest to a direction.

Two strategies, expected to agree:
  projection: forward-project every candidate star and compare pixel
              distances against a magnitude-dependent hit radius. This is
              what pick_nearest uses for cursors.
  ray:        cast the cursor back through the inverse view and inverse
              celestial rotation (both transposes) and scan for the nearest
              unit vector on the catalog sphere. Kept as a cross-check.
"""

import numpy as np

from skydome.camera import (
    DEFAULT_FOV_DEG,
    CameraState,
    model_view_projection,
    project_points,
    screen_to_ray,
)
from skydome.catalog import StarCatalog
from skydome.models import Star, Viewport

# Chord distance on the unit sphere; 0.02 ≈ 1.15°. Tunable per call.
DEFAULT_RAY_THRESHOLD = 0.02
MIN_HIT_RADIUS_PX = 4.0  # faint stars (mag >= 6)
MAX_HIT_RADIUS_PX = 14.0  # brightest stars (mag <= -1)


def hit_radius(mag, scale: float = 1.0):
    """Pixel hit radius for a magnitude; brighter stars get larger targets.

    Follows the rendered point-size curve: linear between mag 6 and mag -1,
    flat outside that range. Accepts scalars or arrays.
    """
    mag_norm = np.clip((6.0 - np.asarray(mag, dtype=np.float64)) / 7.0, 0.0, 1.0)
    return scale * (MIN_HIT_RADIUS_PX + (MAX_HIT_RADIUS_PX - MIN_HIT_RADIUS_PX) * mag_norm)


def pick_by_ray(
    catalog: StarCatalog,
    direction,
    threshold: float = DEFAULT_RAY_THRESHOLD,
) -> Star | None:
    """Nearest star to a catalog-frame direction, within a chord distance.

    Ties go to the first star in catalog order (the brightest).
    """
    if len(catalog) == 0:
        return None
    d = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(d)
    if not norm > 0:
        return None
    dist_sq = np.sum((catalog.positions - d / norm) ** 2, axis=1)
    best = int(np.argmin(dist_sq))
    if not dist_sq[best] < threshold * threshold:
        return None
    return catalog[best]


def pick_by_screen_ray(
    catalog: StarCatalog,
    cursor: tuple[float, float],
    camera: CameraState,
    rotation: np.ndarray,
    viewport: Viewport,
    fov_deg: float = DEFAULT_FOV_DEG,
    threshold: float = DEFAULT_RAY_THRESHOLD,
) -> Star | None:
    """Inverse-ray picking: pixel → view ray → observer frame → catalog frame."""
    if len(catalog) == 0 or not viewport.contains(*cursor):
        return None
    ray = screen_to_ray(cursor[0], cursor[1], camera, viewport, fov_deg)
    # Orthogonal rotation: transpose is the inverse
    return pick_by_ray(catalog, rotation[:3, :3].T @ ray, threshold)


def pick_by_projection(
    catalog: StarCatalog,
    cursor: tuple[float, float],
    camera: CameraState,
    rotation: np.ndarray,
    viewport: Viewport,
    fov_deg: float = DEFAULT_FOV_DEG,
    include_below_horizon: bool = False,
    radius_scale: float = 1.0,
) -> Star | None:
    """Forward-projection picking.

    A candidate must be above the horizon (unless include_below_horizon) and
    in front of the camera before its pixel distance to the cursor is compared
    with its hit radius. The closest hit wins; ties go to catalog order.
    """
    if len(catalog) == 0 or not viewport.contains(*cursor):
        return None

    observer = catalog.positions @ rotation[:3, :3].T
    visible = np.ones(len(catalog), dtype=bool)
    if not include_below_horizon:
        visible &= observer[:, 1] >= 0
    if not visible.any():
        return None

    mvp = model_view_projection(camera, rotation, fov_deg, viewport.aspect)
    screen, w = project_points(catalog.positions, mvp, viewport)
    visible &= w > 0

    dist = np.hypot(screen[:, 0] - cursor[0], screen[:, 1] - cursor[1])
    hits = visible & (dist < hit_radius(catalog.magnitudes, radius_scale))
    if not hits.any():
        return None
    best = int(np.argmin(np.where(hits, dist, np.inf)))
    return catalog[best]


def pick_nearest(
    catalog: StarCatalog,
    camera: CameraState,
    rotation: np.ndarray,
    viewport: Viewport,
    cursor: tuple[float, float] | None = None,
    *,
    direction=None,
    fov_deg: float = DEFAULT_FOV_DEG,
    threshold: float = DEFAULT_RAY_THRESHOLD,
    include_below_horizon: bool = False,
) -> Star | None:
    """Find the star under a cursor, or nearest to a known catalog-frame direction.

    Cursor queries use forward projection. pick_by_screen_ray answers the same
    question by inverse ray and is kept for cross-checking.

    Args:
        catalog: Stars sorted brightest first.
        camera: Current camera orientation (read only).
        rotation: Celestial rotation for this frame.
        viewport: Canvas size in pixels.
        cursor: Pixel position (x right, y down). Ignored when direction is set.
        direction: Catalog-frame vector to match instead of a cursor.
        fov_deg: Vertical field of view used for rendering.
        threshold: Chord-distance radius for direction matching.
        include_below_horizon: Let cursor queries hit stars below the horizon.

    Returns:
        The matching Star, or None if nothing is close enough, the catalog is
        empty, or the cursor is off the canvas.
    """
    if direction is not None:
        return pick_by_ray(catalog, direction, threshold)
    if cursor is None:
        raise ValueError("pick_nearest needs a cursor or a direction")
    return pick_by_projection(
        catalog, cursor, camera, rotation, viewport, fov_deg, include_below_horizon
    )
