"""
Per-frame values exchanged between the host driver and the simulation.

BrushState and FrameInput flow in, FrameOutput flows out. RefractionBackground
is published once when the background image has loaded and never changes
afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass
class BrushState:
    pressed: bool = False
    # Grid coordinates, may be fractional or outside the grid
    x: float = 0.0
    y: float = 0.0


@dataclass
class FrameInput:
    brush: BrushState = field(default_factory=BrushState)
    # Seconds since the previous frame, None on the first one
    elapsed: Optional[float] = None


@dataclass
class FrameOutput:
    height_map: np.ndarray
    cross_section: np.ndarray
    # None while no background has been published
    refraction: Optional[np.ndarray] = None
    fps: float = 0.0


@dataclass(frozen=True, eq=False)
class RefractionBackground:
    """
    source: (H, W, 3) uint8 RGB at grid resolution, sampled through the surface
    base:   (ch, cw, 3) uint8 RGB at refraction resolution, the undistorted layer
    """
    source: np.ndarray
    base: np.ndarray

    def __post_init__(self):
        for name in ("source", "base"):
            arr = getattr(self, name)
            if arr.ndim != 3 or arr.shape[2] != 3 or arr.dtype != np.uint8:
                raise ValueError(f"{name} must be an (rows, cols, 3) uint8 array, got "
                                 f"{arr.shape} {arr.dtype}")
            arr = np.array(arr, copy=True)
            arr.flags.writeable = False
            object.__setattr__(self, name, arr)

    @property
    def grid_size(self):
        return self.source.shape[1], self.source.shape[0]

    @property
    def output_size(self):
        return self.base.shape[1], self.base.shape[0]
