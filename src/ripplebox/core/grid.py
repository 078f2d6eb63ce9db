import numpy as np


class Grid:
    """
    Height field state for the wave solver.

    Holds three equally sized float32 buffers: ``h`` (current height), ``u``
    (velocity accumulator) and ``hn`` (next height, scratch). ``h`` and ``hn``
    live in a two-slot list and :meth:`swap` only flips which slot is current,
    so the two are always distinct arrays and nothing is copied.
    """

    def __init__(self, width=320, height=240):
        if width < 3 or height < 3:
            raise ValueError(f"Grid must be at least 3x3, got {width}x{height}")
        self.width, self.height = width, height

        self._heights = [np.zeros((height, width), dtype=np.float32),
                         np.zeros((height, width), dtype=np.float32)]
        self._current = 0
        self.u = np.zeros((height, width), dtype=np.float32)

    @property
    def shape(self):
        return self.height, self.width

    @property
    def h(self):
        return self._heights[self._current]

    @property
    def hn(self):
        return self._heights[1 - self._current]

    def swap(self):
        """Makes the scratch buffer current. O(1)."""
        self._current = 1 - self._current

    def reset(self):
        """Calms the water: zeroes every buffer in place."""
        for buf in self._heights:
            buf.fill(0)
        self.u.fill(0)

    def interior(self, field):
        """View of the cells the stencil updates."""
        return field[1:-1, 1:-1]
