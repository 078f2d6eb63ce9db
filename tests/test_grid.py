import numpy as np
import pytest

from ripplebox.core.grid import Grid


def test_buffers_share_shape():
    grid = Grid(width=7, height=5)
    assert grid.shape == (5, 7)
    for field in (grid.h, grid.u, grid.hn):
        assert field.shape == (5, 7)
        assert field.dtype == np.float32


def test_swap_exchanges_roles_without_copying():
    grid = Grid(6, 4)
    h, hn = grid.h, grid.hn
    assert h is not hn

    grid.swap()
    assert grid.h is hn
    assert grid.hn is h


def test_swap_twice_is_identity():
    grid = Grid(6, 4)
    h, hn = grid.h, grid.hn
    grid.swap()
    grid.swap()
    assert grid.h is h
    assert grid.hn is hn


def test_buffers_stay_distinct_after_many_swaps():
    grid = Grid(6, 4)
    for _ in range(11):
        grid.swap()
        assert grid.h is not grid.hn
        assert not np.shares_memory(grid.h, grid.hn)


def test_reset_zeroes_in_place():
    grid = Grid(5, 5)
    h, u = grid.h, grid.u
    grid.h[2, 2] = 1.5
    grid.hn[1, 1] = -3.0
    grid.u[3, 3] = 0.25

    grid.reset()
    assert grid.h is h and grid.u is u
    assert not grid.h.any() and not grid.hn.any() and not grid.u.any()


@pytest.mark.parametrize("size", [(2, 10), (10, 2), (0, 0)])
def test_rejects_grids_without_interior(size):
    with pytest.raises(ValueError):
        Grid(*size)
