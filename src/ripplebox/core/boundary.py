"""
Boundary policies applied around every stencil pass.

The pre-stencil pass seeds the border of ``h`` (free / closed edges, or the
circular mask). The post-stencil pass writes matched (absorbing) edges into
``hn`` using the pre-stencil ``h`` as reference. Corner cells are not handled
specially; whichever edge runs last wins.
"""
import numpy as np

from ripplebox.core.config import EdgeMode


_EDGE_ORDER = ("left", "right", "top", "bottom")


def circular_mask(shape):
    """Boolean mask of the cells outside the circle of radius H/2 around the grid centre."""
    height, width = shape
    y, x = np.ogrid[:height, :width]
    dist2 = (x - width * 0.5) ** 2 + (y - height * 0.5) ** 2
    return dist2 >= (height / 2) ** 2


def apply_circular_mask(grid, mask=None):
    if mask is None:
        mask = circular_mask(grid.shape)
    grid.h[mask] = 0
    grid.u[mask] = 0


def _apply_free(h, edge):
    if edge == "left":
        h[1:-1, 0] = h[1:-1, 1]
    elif edge == "right":
        h[1:-1, -1] = h[1:-1, -2]
    elif edge == "top":
        h[0, :] = h[1, :]
    elif edge == "bottom":
        h[-1, :] = h[-2, :]


def _apply_closed(h, edge):
    if edge == "left":
        h[1:-1, 0] = 0
    elif edge == "right":
        h[1:-1, -1] = 0
    elif edge == "top":
        h[0, :] = 0
    elif edge == "bottom":
        h[-1, :] = 0


def apply_pre_stencil(grid, boundary, mask=None):
    """Seeds the border of ``grid.h`` for the coming stencil pass."""
    if boundary.circular:
        apply_circular_mask(grid, mask)
        return

    edges = boundary.edges()
    h = grid.h
    # All free edges first, then all closed edges
    for edge in _EDGE_ORDER:
        if edges[edge] == EdgeMode.FREE:
            _apply_free(h, edge)
    for edge in _EDGE_ORDER:
        if edges[edge] == EdgeMode.CLOSED:
            _apply_closed(h, edge)


def apply_post_stencil(grid, boundary, ratio):
    """
    Writes matched edges of ``grid.hn`` from the pre-stencil ``grid.h``.

    hn_edge = (h_edge + ratio * h_adjacent) / (1 + ratio)

    A one-way, empirically tuned absorbing condition. Closed edges of
    ``grid.hn`` are zeroed too, so an edge switched to closed mid-run reads 0
    right after the swap. Must run before :meth:`Grid.swap`.
    """
    if boundary.circular:
        return

    edges = boundary.edges()
    h, hn = grid.h, grid.hn
    for edge in _EDGE_ORDER:
        if edges[edge] == EdgeMode.CLOSED:
            _apply_closed(hn, edge)

    vdiv = 1.0 / (1.0 + ratio)
    if edges["left"] == EdgeMode.MATCHED:
        hn[1:-1, 0] = (h[1:-1, 0] + ratio * h[1:-1, 1]) * vdiv
    if edges["right"] == EdgeMode.MATCHED:
        hn[1:-1, -1] = (h[1:-1, -1] + ratio * h[1:-1, -2]) * vdiv
    if edges["top"] == EdgeMode.MATCHED:
        hn[0, 1:-1] = (h[0, 1:-1] + ratio * h[1, 1:-1]) * vdiv
    if edges["bottom"] == EdgeMode.MATCHED:
        hn[-1, 1:-1] = (h[-1, 1:-1] + ratio * h[-2, 1:-1]) * vdiv
