"""
Simulation Context
==================
Owns everything one running wave toy needs: grid buffers, boundary and
simulation settings, the brush, the force injector, frame timing, the
renderer and the (optional) refraction background.

The host calls :meth:`WaveSimulation.advance` once per display frame. It runs
``sub_steps_per_frame`` solver sub-steps and then renders, strictly in that
order.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

import numpy as np

from ripplebox.core import boundary as bc
from ripplebox.core.config import SimConfig
from ripplebox.core.grid import Grid
from ripplebox.core.solver import StencilSolver
from ripplebox.core.state import BrushState, FrameInput, FrameOutput, RefractionBackground
from ripplebox.core.timing import FrameTimer
from ripplebox.modules.force import ForceInjector
from ripplebox.modules.renderer import Renderer

logger = logging.getLogger(__name__)


class WaveSimulation:
    def __init__(self, config: Optional[SimConfig] = None, rng: Optional[np.random.Generator] = None):
        self.config = config if config is not None else SimConfig()
        self.boundary = self.config.boundary

        self.grid = Grid(self.config.width, self.config.height)
        self.solver = StencilSolver(velocity=self.config.velocity,
                                    damping=self.config.damping,
                                    matched_ratio_scale=self.config.matched_ratio_scale)
        self.brush = BrushState()
        self.injector = ForceInjector(
            rain_enabled=self.config.rain_enabled,
            brush_radius=self.config.brush_radius,
            brush_magnitude=self.config.brush_magnitude,
            rain_radius=self.config.rain_radius,
            rain_magnitude=self.config.rain_magnitude,
            rain_interval=self.config.rain_interval,
            rng=rng if rng is not None else np.random.default_rng(self.config.seed),
        )
        self.timer = FrameTimer()
        self.renderer = Renderer(slice_size=self.config.slice_size)
        self.background: Optional[RefractionBackground] = None

        self._circle_mask = bc.circular_mask(self.grid.shape)

    @property
    def rain_enabled(self) -> bool:
        return self.injector.rain_enabled

    def set_rain(self, enabled: bool) -> None:
        self.config.rain_enabled = enabled
        self.injector.set_rain(enabled)

    def set_background(self, background: RefractionBackground) -> None:
        """Publishes the refraction background. Allowed exactly once."""
        if self.background is not None:
            raise RuntimeError("Refraction background has already been set")
        if background.grid_size != self.config.grid_size:
            raise ValueError(f"Background source is {background.grid_size}, "
                             f"grid is {self.config.grid_size}")
        self.background = background
        logger.info(f"Refraction background published at {background.output_size}")

    def reset(self) -> None:
        self.grid.reset()
        logger.info("Water calmed.")

    def energy(self) -> float:
        """Sum of h^2 over the grid."""
        h = self.grid.h.astype(np.float64)
        return float(np.sum(h * h))

    def step(self) -> None:
        """One sub-step: boundary -> stencil -> matched edges -> swap -> forcing."""
        self.solver.step(self.grid, self.boundary, self._circle_mask)
        self.injector.apply(self.grid, self.brush)
        if self.boundary.circular:
            # Forcing may paint outside the circle; keep it dry
            bc.apply_circular_mask(self.grid, self._circle_mask)

    def advance(self, frame_input: Optional[FrameInput] = None) -> FrameOutput:
        if frame_input is None:
            frame_input = FrameInput()
        self.brush = replace(frame_input.brush)

        for _ in range(self.config.sub_steps_per_frame):
            self.step()

        fps = self.timer.tick(frame_input.elapsed)
        return self.renderer.render(self.grid, self.boundary, self.background, fps)
