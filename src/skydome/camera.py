"""Orbital camera and perspective projection for the sky dome.

The camera sits at the centre of the unit sphere in the observer frame
(x = East, y = Up, z = North). Yaw is the azimuth it faces (0 = North,
increasing toward East), pitch the altitude. View space follows the OpenGL
convention: x right, y up, looking down -z.

Every point drawn or hit-tested goes through the same chain:

    clip = projection · view · celestial_rotation · point
"""

import math
from dataclasses import dataclass, replace

import numpy as np

from skydome.models import HorizontalCoords, ScreenPoint, Viewport

DEFAULT_FOV_DEG = 60.0
NEAR_PLANE = 0.1
FAR_PLANE = 10.0
DRAG_SENSITIVITY = 0.005  # radians per pixel of pointer motion
PITCH_LIMIT = math.pi / 2 - 0.01  # keeps the view basis defined at the poles


def clamp_pitch(pitch: float) -> float:
    return max(-PITCH_LIMIT, min(PITCH_LIMIT, pitch))


@dataclass
class CameraState:
    """Mutable view orientation, owned by the interaction handler.

    Projection and picking receive it as an argument each frame and never
    modify it.
    """

    yaw: float = 0.0  # radians, azimuth faced (0 = North, + toward East)
    pitch: float = math.pi / 4  # radians, altitude faced

    def __post_init__(self) -> None:
        self.pitch = clamp_pitch(self.pitch)

    def drag(self, dx: float, dy: float, sensitivity: float = DRAG_SENSITIVITY) -> None:
        """Apply a pointer drag in pixels. Dragging right turns the view left,
        dragging down raises it. No inertia; only pitch is clamped."""
        self.yaw -= dx * sensitivity
        self.pitch = clamp_pitch(self.pitch + dy * sensitivity)

    def look_at(self, coords: HorizontalCoords) -> None:
        """Face a horizontal direction (pitch still clamped near the zenith)."""
        self.yaw = math.radians(coords.az)
        self.pitch = clamp_pitch(math.radians(coords.alt))

    def copy(self) -> "CameraState":
        return replace(self)


def perspective_matrix(
    fov_deg: float,
    aspect: float,
    near: float = NEAR_PLANE,
    far: float = FAR_PLANE,
) -> np.ndarray:
    """Right-handed perspective projection into OpenGL clip space.

    A field of view outside (0, 180) or a non-positive aspect ratio produces
    NaN entries, so everything projected with it is reported as not visible.
    """
    f = 1.0 / math.tan(math.radians(fov_deg) / 2) if 0 < fov_deg < 180 else math.nan
    sx = f / aspect if aspect > 0 else math.nan
    range_inv = 1.0 / (near - far)
    return np.array(
        [
            [sx, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (near + far) * range_inv, 2.0 * near * far * range_inv],
            [0.0, 0.0, -1.0, 0.0],
        ]
    )


def camera_basis(camera: CameraState) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(right, up, forward) unit vectors of the camera in the observer frame."""
    cy, sy = math.cos(camera.yaw), math.sin(camera.yaw)
    cp, sp = math.cos(camera.pitch), math.sin(camera.pitch)
    forward = np.array([cp * sy, sp, cp * cy])
    right = np.array([cy, 0.0, -sy])
    up = np.array([-sp * sy, cp, -sp * cy])
    return right, up, forward


def view_matrix(camera: CameraState) -> np.ndarray:
    """Observer frame → view space. Orthonormal, so its inverse is its transpose."""
    right, up, forward = camera_basis(camera)
    matrix = np.eye(4)
    matrix[0, :3] = right
    matrix[1, :3] = up
    matrix[2, :3] = -forward
    return matrix


def model_view_projection(
    camera: CameraState,
    rotation: np.ndarray,
    fov_deg: float = DEFAULT_FOV_DEG,
    aspect: float = 1.0,
) -> np.ndarray:
    """projection · view · rotation, always in that order."""
    return perspective_matrix(fov_deg, aspect) @ view_matrix(camera) @ rotation


def project_points(
    points: np.ndarray, mvp: np.ndarray, viewport: Viewport
) -> tuple[np.ndarray, np.ndarray]:
    """Project an (N, 3) array of points to pixels.

    Returns:
        (screen, w): screen is (N, 2) pixel coordinates (NaN or garbage where
        w <= 0), w is the clip-space depth; positive means in front.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    clip = pts @ mvp[:, :3].T + mvp[:, 3]
    w = clip[:, 3]
    with np.errstate(divide="ignore", invalid="ignore"):
        ndc_x = clip[:, 0] / w
        ndc_y = clip[:, 1] / w
    screen = np.column_stack(
        [(ndc_x + 1.0) * 0.5 * viewport.width, (1.0 - ndc_y) * 0.5 * viewport.height]
    )
    return screen, w


def project_point(
    point,
    camera: CameraState,
    rotation: np.ndarray,
    viewport: Viewport,
    fov_deg: float = DEFAULT_FOV_DEG,
    above_horizon_only: bool = False,
) -> ScreenPoint | None:
    """Project one catalog-frame point to the screen.

    Returns:
        ScreenPoint, or None when the point is behind the camera, off-screen,
        numerically undefined, or (with above_horizon_only) below the horizon.
    """
    p = np.asarray(point, dtype=np.float64)
    if above_horizon_only and not (rotation[1, :3] @ p >= 0):
        return None
    mvp = model_view_projection(camera, rotation, fov_deg, viewport.aspect)
    screen, w = project_points(p, mvp, viewport)
    x, y, depth = float(screen[0, 0]), float(screen[0, 1]), float(w[0])
    if not depth > 0 or not viewport.contains(x, y):
        return None
    return ScreenPoint(x=x, y=y, depth=depth)


def screen_to_ray(
    x: float,
    y: float,
    camera: CameraState,
    viewport: Viewport,
    fov_deg: float = DEFAULT_FOV_DEG,
) -> np.ndarray:
    """Unit direction in the observer frame seen through pixel (x, y)."""
    ndc_x = x / viewport.width * 2.0 - 1.0
    ndc_y = 1.0 - y / viewport.height * 2.0
    tan_half = math.tan(math.radians(fov_deg) / 2)
    ray_view = np.array([ndc_x * tan_half * viewport.aspect, ndc_y * tan_half, -1.0])
    ray = view_matrix(camera)[:3, :3].T @ ray_view
    return ray / np.linalg.norm(ray)


def view_direction(camera: CameraState) -> HorizontalCoords:
    """Altitude/azimuth of the view centre, for the compass read-out."""
    return HorizontalCoords(
        alt=math.degrees(camera.pitch), az=math.degrees(camera.yaw) % 360.0
    )


def column_major(matrix: np.ndarray) -> np.ndarray:
    """Flatten a 4x4 matrix to 16 float32 values in column-major order."""
    return np.asarray(matrix, dtype=np.float32).ravel(order="F")
