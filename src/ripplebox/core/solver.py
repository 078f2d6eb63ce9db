import numpy as np

from ripplebox.core import boundary as bc


class StencilSolver:
    def __init__(self, velocity=0.7, damping=0.997, matched_ratio_scale=4.0):
        """
        velocity: wave speed in cells per sub-step, stable only for 0 < velocity < 1
        damping: leaky-integrator decay applied to both u and h every sub-step
        matched_ratio_scale: matched edges use ratio = velocity * matched_ratio_scale
        """
        self.velocity = velocity
        self.damping = damping
        self.matched_ratio_scale = matched_ratio_scale

    @property
    def matched_ratio(self):
        return self.velocity * self.matched_ratio_scale

    def stencil(self, grid):
        """Computes the interior of ``grid.hn`` from ``grid.h`` and updates ``grid.u``."""
        h = grid.h
        centre = grid.interior(h)
        u = grid.interior(grid.u)
        hn = grid.interior(grid.hn)

        # 4-neighbour Laplacian on interior cells
        delta = (self.velocity * self.velocity) * (
            h[:-2, 1:-1] +
            h[1:-1, :-2] +
            h[1:-1, 2:] +
            h[2:, 1:-1] -
            centre * 4)

        u *= self.damping
        u += delta
        np.multiply(centre, self.damping, out=hn)
        hn += u

    def step(self, grid, boundary, mask=None):
        """
        Advances the grid by one sub-step:
        boundary (pre) -> stencil -> boundary (post, matched) -> swap
        """
        bc.apply_pre_stencil(grid, boundary, mask)
        self.stencil(grid)
        bc.apply_post_stencil(grid, boundary, self.matched_ratio)
        grid.swap()
