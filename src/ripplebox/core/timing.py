from dataclasses import dataclass
from typing import Optional


@dataclass
class FrameTimingState:
    last_timestamp: Optional[float] = None
    fps_smooth: float = 0.0


class FrameTimer:
    """Exponentially smoothed FPS estimate for the on-screen readout."""

    def __init__(self, smoothing=0.9):
        self.smoothing = smoothing
        self.state = FrameTimingState()

    @property
    def fps(self):
        return self.state.fps_smooth

    def tick(self, elapsed: Optional[float]) -> float:
        """
        Folds one frame into the estimate.
        elapsed: seconds since the previous frame, None (or <= 0) for the first frame
        """
        fps = 1.0 / elapsed if elapsed and elapsed > 0 else 0.0
        # An unset (zero) estimate is seeded with the first real reading
        previous = self.state.fps_smooth or fps
        self.state.fps_smooth = previous * self.smoothing + fps * (1.0 - self.smoothing)
        return self.state.fps_smooth

    def update(self, timestamp: float) -> float:
        """Same as :meth:`tick`, driven by absolute timestamps in seconds."""
        last = self.state.last_timestamp
        self.state.last_timestamp = timestamp
        return self.tick(None if last is None else timestamp - last)
