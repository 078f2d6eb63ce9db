"""
Frame Rendering
===============
Turns the current height field into three RGBA images:

1. Height map: luminance clip(h * 100 + 128), optionally colour mapped.
2. Cross-section: silhouette of the middle grid row.
3. Refraction: a background image seen through the wavy surface. Each output
   pixel samples the grid at twice its own coordinate, bends the view ray by
   the local gradient, darkens steep slopes and adds a flat highlight on
   slopes facing +x.

All renderers only read the height field.
"""
import cv2
import numpy as np

from ripplebox.core.config import EdgeMode
from ripplebox.core.state import FrameOutput
from ripplebox.modules.color_maps import ColorMapManager

OVERLAY_COLOR = (255, 0, 0, 255)
SILHOUETTE_COLOR = (0, 0, 0, 255)

# Below this squared gradient the surface counts as flat, (1/40)^2
FLAT_THRESHOLD = 0.000625
REFRACTION_STRENGTH = 20.0
SPECULAR_BOOST = 30


def height_to_luminance(h):
    """Maps heights linearly to bytes: clip(h * 100 + 128, 0, 255)."""
    lum = np.nan_to_num(h * 100.0 + 128.0, nan=128.0)
    return np.clip(lum, 0, 255).astype(np.uint8)


def _rgba(rgb):
    out = np.empty(rgb.shape[:2] + (4,), dtype=np.uint8)
    out[..., :3] = rgb
    out[..., 3] = 255
    return out


def render_height_map(h, cmap_manager=None):
    lum = height_to_luminance(h)
    if cmap_manager is None:
        rgb = np.repeat(lum[:, :, None], 3, axis=2)
    else:
        rgb = cmap_manager.apply(lum)
    return _rgba(rgb)


def render_cross_section(h, size):
    """
    Silhouette of the row at H // 2 on a transparent canvas.
    size: (width, height) of the output image
    """
    width, height = size
    out = np.zeros((height, width, 4), dtype=np.uint8)

    row = np.nan_to_num(h[h.shape[0] // 2].astype(np.float64))
    n = min(row.shape[0], width)
    d = np.clip(height * (0.5 - row[:n] * 0.2), 0, height - 1).astype(np.intp)

    filled = np.arange(height)[:, None] >= d[None, :]
    out[:, :n][filled] = SILHOUETTE_COLOR
    return out


def render_refraction(h, background):
    """
    Composites ``background`` through the surface ``h``.

    Output pixel (x, y) looks at grid cell (2x, 2y), so the refraction image
    must be at most about half the grid resolution. A larger one is a setup
    bug and raises instead of being clamped.
    """
    grid_h, grid_w = h.shape
    if background.source.shape[:2] != (grid_h, grid_w):
        raise ValueError(f"Background source is {background.source.shape[:2]}, "
                         f"grid is {(grid_h, grid_w)}")

    out = _rgba(background.base)
    out_h, out_w = out.shape[:2]
    if out_h < 3 or out_w < 3:
        return out

    ys = np.arange(1, out_h - 1) * 2
    xs = np.arange(1, out_w - 1) * 2
    if ys[-1] + 1 > grid_h - 1 or xs[-1] + 1 > grid_w - 1:
        raise ValueError(f"Refraction output {out_w}x{out_h} samples outside the "
                         f"{grid_w}x{grid_h} grid")
    yy = ys[:, None]
    xx = xs[None, :]

    # Central difference gradient
    dx = h[yy, xx + 1].astype(np.float64) - h[yy, xx - 1]
    dy = h[yy + 1, xx].astype(np.float64) - h[yy - 1, xx]
    dist = dx * dx + dy * dy
    # Diverged cells (inf or nan) are left showing the base layer
    with np.errstate(invalid="ignore"):
        active = np.isfinite(dist) & (dist >= FLAT_THRESHOLD)
    if not np.any(active):
        return out

    yy_a = np.broadcast_to(yy, active.shape)[active]
    xx_a = np.broadcast_to(xx, active.shape)[active]
    dx = dx[active]
    dy = dy[active]
    norm = np.sqrt(dist[active] + 1.0)
    scale = REFRACTION_STRENGTH / norm
    dx *= scale
    dy *= scale

    # Round half up, then clamp into the grid
    src_x = np.clip(np.floor(xx_a + dx + 0.5), 0, grid_w - 1).astype(np.intp)
    src_y = np.clip(np.floor(yy_a + dy + 0.5), 0, grid_h - 1).astype(np.intp)
    rgb = background.source[src_y, src_x].astype(np.float64)

    factor = 1.0 - np.minimum(0.5, 3.0 * (norm - 1.0))
    rgb = np.rint(rgb * factor[:, None])
    rgb[dx > 1] += SPECULAR_BOOST
    rgb = np.clip(rgb, 0, 255).astype(np.uint8)

    interior = out[1:-1, 1:-1, :3]
    interior[active] = rgb
    return out


def draw_boundary_overlay(image, boundary, thickness=2):
    """
    Marks reflecting edges: a bar on every edge that is not matched, or the
    circle outline when the circular mask is on.
    """
    rows, cols = image.shape[:2]
    if boundary.circular:
        cv2.circle(image, (cols // 2, rows // 2), rows // 2, OVERLAY_COLOR, 1, cv2.LINE_AA)
        return image

    edges = boundary.edges()
    if edges["top"] != EdgeMode.MATCHED:
        image[:thickness, :] = OVERLAY_COLOR
    if edges["bottom"] != EdgeMode.MATCHED:
        image[rows - thickness:, :] = OVERLAY_COLOR
    if edges["left"] != EdgeMode.MATCHED:
        image[:, :thickness] = OVERLAY_COLOR
    if edges["right"] != EdgeMode.MATCHED:
        image[:, cols - thickness:] = OVERLAY_COLOR
    return image


def draw_fps(image, fps):
    cv2.putText(image, f"{fps:.0f}", (5, 12), cv2.FONT_HERSHEY_SIMPLEX, 0.4,
                OVERLAY_COLOR, 1, cv2.LINE_AA)
    return image


class Renderer:
    def __init__(self, slice_size=(320, 120), cmap_manager=None):
        self.slice_size = slice_size
        self.cmap_manager = cmap_manager if cmap_manager is not None else ColorMapManager()

    def render(self, grid, boundary, background=None, fps=0.0):
        h = grid.h

        height_map = render_height_map(h, self.cmap_manager)
        draw_boundary_overlay(height_map, boundary, thickness=2)
        draw_fps(height_map, fps)

        cross_section = render_cross_section(h, self.slice_size)

        refraction = None
        if background is not None:
            refraction = render_refraction(h, background)
            draw_boundary_overlay(refraction, boundary, thickness=1)

        return FrameOutput(height_map=height_map, cross_section=cross_section,
                           refraction=refraction, fps=fps)
