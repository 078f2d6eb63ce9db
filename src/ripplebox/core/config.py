"""
Simulation Configuration
========================
Static configuration consumed by the solver, the force injector and the
renderer, plus a small JSON-backed manager for persisting it between runs.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

CONFIG_FILE = "assets/config/ripplebox.json"


class EdgeMode(StrEnum):
    FREE = "free"
    CLOSED = "closed"
    MATCHED = "matched"


@dataclass
class BoundaryConfig:
    top: EdgeMode = EdgeMode.MATCHED
    bottom: EdgeMode = EdgeMode.MATCHED
    left: EdgeMode = EdgeMode.FREE
    right: EdgeMode = EdgeMode.FREE
    # Overrides every edge mode with a radial mask of radius H/2
    circular: bool = False

    def __post_init__(self):
        for name in ("top", "bottom", "left", "right"):
            value = getattr(self, name)
            try:
                setattr(self, name, EdgeMode(value))
            except ValueError:
                raise ValueError(f"Unknown boundary mode for {name} edge: {value!r}") from None

    def edges(self) -> Dict[str, EdgeMode]:
        return {"top": self.top, "bottom": self.bottom, "left": self.left, "right": self.right}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> BoundaryConfig:
        return BoundaryConfig(
            top=data.get("top", EdgeMode.MATCHED),
            bottom=data.get("bottom", EdgeMode.MATCHED),
            left=data.get("left", EdgeMode.FREE),
            right=data.get("right", EdgeMode.FREE),
            circular=bool(data.get("circular", False)),
        )


@dataclass
class SimConfig:
    """
    Parameters of a wave simulation.

    ``velocity`` is the propagation speed in cells per sub-step. It must stay
    inside (0, 1) for the stencil to be stable; larger values are not rejected
    and simply make the field diverge.
    """
    width: int = 320
    height: int = 240
    velocity: float = 0.7
    damping: float = 0.997
    sub_steps_per_frame: int = 3
    rain_enabled: bool = True
    # Matched edges use ratio = velocity * matched_ratio_scale
    matched_ratio_scale: float = 4.0

    brush_radius: float = 5.0
    brush_magnitude: float = 0.3
    rain_radius: float = 3.0
    rain_magnitude: float = 1.0
    rain_interval: int = 60
    seed: Optional[int] = None

    slice_size: Tuple[int, int] = (320, 120)       # (width, height)
    refraction_size: Tuple[int, int] = (160, 120)  # (width, height)

    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)

    def __post_init__(self):
        if self.width < 3 or self.height < 3:
            raise ValueError(f"Grid must be at least 3x3, got {self.width}x{self.height}")
        if self.sub_steps_per_frame < 1:
            raise ValueError("sub_steps_per_frame must be >= 1")
        if self.rain_interval < 1:
            raise ValueError("rain_interval must be >= 1")
        self.slice_size = tuple(self.slice_size)
        self.refraction_size = tuple(self.refraction_size)
        if isinstance(self.boundary, dict):
            self.boundary = BoundaryConfig.from_dict(self.boundary)

    @property
    def grid_size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def matched_ratio(self) -> float:
        return self.velocity * self.matched_ratio_scale

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["slice_size"] = list(self.slice_size)
        d["refraction_size"] = list(self.refraction_size)
        d["boundary"] = {k: str(v) for k, v in self.boundary.edges().items()}
        d["boundary"]["circular"] = self.boundary.circular
        return d

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> SimConfig:
        known = SimConfig.__dataclass_fields__.keys()
        unknown = set(data) - set(known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return SimConfig(**{k: v for k, v in data.items() if k in known})


class ConfigManager:
    """Loads and saves a :class:`SimConfig` as JSON."""

    def __init__(self, path: str = CONFIG_FILE):
        self.path = path
        self.default_config = SimConfig()

    def load(self) -> SimConfig:
        if not os.path.exists(self.path):
            logger.info(f"No config at {self.path}, using defaults.")
            return SimConfig()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read config {self.path}: {e}. Using defaults.")
            return SimConfig()

        merged = self.default_config.to_dict()
        merged.update({k: v for k, v in data.items() if k != "boundary"})
        merged["boundary"].update(data.get("boundary", {}))
        config = SimConfig.from_dict(merged)
        logger.info(f"Loaded config from {self.path}")
        return config

    def save(self, config: SimConfig) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=4)
        logger.info(f"Saved config to {self.path}")
