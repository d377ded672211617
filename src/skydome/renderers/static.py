"""Matplotlib static PNG renderer for one sky frame."""

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from skydome.camera import project_points
from skydome.catalog import StarCatalog
from skydome.constellations import (
    ConstellationFigure,
    constellation_centers,
    constellation_labels,
    label_opacity,
)
from skydome.frame import SkyFrame
from skydome.grid import GridOptions, build_grid_lines, cardinal_points

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).parent.parent.parent.parent
_DPI = 100

# (dark, light) RGBA per overlay
_COLORS = {
    "background": ((0.02, 0.02, 0.08, 1.0), (0.95, 0.95, 0.92, 1.0)),
    "altitude": ((0.3, 0.5, 0.8, 0.4), (0.2, 0.4, 0.7, 0.5)),
    "azimuth": ((0.3, 0.5, 0.8, 0.3), (0.2, 0.4, 0.7, 0.35)),
    "horizon": ((0.8, 0.4, 0.2, 0.7), (0.6, 0.3, 0.1, 0.8)),
    "declination": ((0.6, 0.3, 0.6, 0.3), (0.5, 0.2, 0.5, 0.4)),
    "hour": ((0.6, 0.3, 0.6, 0.25), (0.5, 0.2, 0.5, 0.3)),
    "constellation": ((0.4, 0.6, 0.8, 0.5), (0.3, 0.3, 0.5, 0.6)),
    "label": ((0.85, 0.85, 0.95, 1.0), (0.2, 0.2, 0.3, 1.0)),
}


def _color(key: str, light_mode: bool) -> tuple[float, float, float, float]:
    return _COLORS[key][1 if light_mode else 0]


def _observer_polyline(points: np.ndarray, frame: SkyFrame, celestial: bool) -> np.ndarray:
    """Project a polyline to pixels, with NaN breaks where it goes behind the camera."""
    if celestial:
        points = points @ frame.rotation[:3, :3].T
    screen, w = project_points(points, frame.projection @ frame.view, frame.viewport)
    screen[~(w > 0)] = np.nan
    return screen


def render_static_chart(
    frame: SkyFrame,
    catalog: StarCatalog,
    figures: tuple[ConstellationFigure, ...] = (),
    options: GridOptions = GridOptions(),
) -> Figure:
    """Render one frame as a matplotlib image in pixel coordinates.

    Args:
        frame: Matrices for the frame being drawn.
        catalog: Stars to draw (only visible ones are plotted).
        figures: Constellation stick figures, drawn when enabled in options.
        options: Overlay toggles.

    Returns:
        matplotlib Figure object.
    """
    width, height = frame.viewport.width, frame.viewport.height
    light = options.light_mode

    fig = plt.figure(figsize=(width / _DPI, height / _DPI), dpi=_DPI)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    fig.patch.set_facecolor(_color("background", light))
    ax.set_facecolor(_color("background", light))

    for line in build_grid_lines(options):
        screen = _observer_polyline(line.points, frame, line.frame == "celestial")
        ax.plot(
            screen[:, 0],
            screen[:, 1],
            color=_color(line.kind, light),
            linewidth=1.2 if line.kind == "horizon" else 0.6,
            zorder=1,
        )

    if options.show_constellations:
        for figure in figures:
            for points in figure.lines:
                screen = _observer_polyline(points, frame, celestial=True)
                ax.plot(
                    screen[:, 0],
                    screen[:, 1],
                    color=_color("constellation", light),
                    linewidth=0.8,
                    zorder=1,
                )
        centers = constellation_centers(figures)
        for label in constellation_labels(centers, frame.mvp, frame.viewport):
            opacity = label_opacity(label.distance)
            if opacity > 0.05:
                ax.text(
                    label.x,
                    label.y,
                    label.name,
                    color=_color("label", light),
                    alpha=opacity,
                    fontsize=8,
                    zorder=3,
                )

    if options.show_cardinals:
        cardinals = cardinal_points()
        points = np.array(list(cardinals.values()))
        screen, w = project_points(points, frame.projection @ frame.view, frame.viewport)
        for label, (x, y), depth in zip(cardinals, screen, w):
            if depth > 0 and frame.viewport.contains(x, y):
                ax.text(x, y, label, color=_color("horizon", light), fontsize=12, zorder=3)

    projected = frame.project_catalog(catalog)
    visible = projected.visible
    if visible.any():
        mags = catalog.magnitudes[visible]
        marker_size = np.clip(100 * 10 ** (mags / -2.5), 0.5, 200.0)
        colors = catalog.colors[visible] * (0.4 if light else 1.0)
        ax.scatter(
            projected.screen[visible, 0],
            projected.screen[visible, 1],
            s=marker_size,
            c=colors,
            marker=".",
            linewidths=0,
            zorder=2,
        )

    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.axis("off")

    return fig


def save_static_chart(
    frame: SkyFrame,
    catalog: StarCatalog,
    output_path: Path | None = None,
    figures: tuple[ConstellationFigure, ...] = (),
    options: GridOptions = GridOptions(),
) -> Path:
    """Save a rendered frame as a PNG file.

    Args:
        frame: Matrices for the frame being drawn.
        catalog: Stars to draw.
        output_path: Destination path. Auto-generated under results/ if None.
        figures: Constellation stick figures.
        options: Overlay toggles.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        loc = frame.location
        when_str = frame.instant.strftime("%Y_%m_%d_%H_%M")
        filename = f"{loc.lat:.2f}_{loc.lon:.2f}__{when_str}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(frame, catalog, figures, options)
    fig.savefig(output_path, facecolor=fig.get_facecolor(), dpi=_DPI)
    plt.close(fig)
    logger.info("Saved chart to %s", output_path)
    return output_path
