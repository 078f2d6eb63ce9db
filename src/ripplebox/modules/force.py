import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


def _round_half_up(v):
    return int(math.floor(v + 0.5))


def paint_circular_bump(field, cx, cy, radius, magnitude):
    """
    Adds ``magnitude`` to every cell of ``field`` strictly inside the circle of
    ``radius`` around (cx, cy). The footprint is clamped to the interior so
    border cells owned by the boundary policy are never touched.
    Returns the number of cells painted.
    """
    height, width = field.shape
    x1 = max(_round_half_up(cx - radius), 1)
    x2 = min(_round_half_up(cx + radius), width - 2)
    y1 = max(_round_half_up(cy - radius), 1)
    y2 = min(_round_half_up(cy + radius), height - 2)
    if x1 > x2 or y1 > y2:
        return 0

    y, x = np.ogrid[y1:y2 + 1, x1:x2 + 1]
    inside = (x - cx) ** 2 + (y - cy) ** 2 < radius * radius
    field[y1:y2 + 1, x1:x2 + 1][inside] += magnitude
    return int(np.count_nonzero(inside))


class ForceInjector:
    def __init__(self, rain_enabled=True, brush_radius=5.0, brush_magnitude=0.3,
                 rain_radius=3.0, rain_magnitude=1.0, rain_interval=60, rng=None):
        """
        rng: numpy Generator used for rain drops; pass a seeded one for reproducible runs
        """
        self.rain_enabled = rain_enabled
        self.brush_radius = brush_radius
        self.brush_magnitude = brush_magnitude
        self.rain_radius = rain_radius
        self.rain_magnitude = rain_magnitude
        self.rain_interval = rain_interval
        self.rng = rng if rng is not None else np.random.default_rng()
        self.counter = 0  # sub-steps seen so far

    def set_rain(self, enabled):
        self.rain_enabled = enabled

    def apply(self, grid, brush):
        """Called once per sub-step, after the buffer swap. Paints into ``grid.h``."""
        self.counter += 1
        if brush.pressed:
            paint_circular_bump(grid.h, brush.x, brush.y, self.brush_radius, self.brush_magnitude)
        elif self.rain_enabled and self.counter % self.rain_interval == 0:
            self.rain(grid)

    def rain(self, grid):
        """Drops 0-2 impulsive bumps at uniformly random interior positions."""
        height, width = grid.shape
        count = int(self.rng.random() * 2.9)
        for _ in range(count):
            tx = self.rng.random() * (width - 2) + 1
            ty = self.rng.random() * (height - 2) + 1
            paint_circular_bump(grid.h, tx, ty, self.rain_radius, self.rain_magnitude)
            logger.debug(f"Rain drop at ({tx:.1f}, {ty:.1f})")
        return count
