import numpy as np
import pytest

from ripplebox.core.config import BoundaryConfig
from ripplebox.core.grid import Grid
from ripplebox.core.solver import StencilSolver

CLOSED = BoundaryConfig(top="closed", bottom="closed", left="closed", right="closed")
MATCHED = BoundaryConfig(top="matched", bottom="matched", left="matched", right="matched")


def test_single_impulse_stencil():
    grid = Grid(7, 7)
    grid.h[3, 3] = 1.0
    solver = StencilSolver(velocity=0.5, damping=0.99)

    solver.stencil(grid)

    v2 = 0.25
    assert grid.u[3, 3] == pytest.approx(-4 * v2, abs=1e-6)
    assert grid.hn[3, 3] == pytest.approx(0.99 - 4 * v2, abs=1e-6)
    for y, x in [(2, 3), (4, 3), (3, 2), (3, 4)]:
        assert grid.u[y, x] == pytest.approx(v2, abs=1e-6)
        assert grid.hn[y, x] == pytest.approx(v2, abs=1e-6)
    # diagonal neighbours see nothing yet
    assert grid.hn[2, 2] == 0
    # current field is read only
    assert grid.h[3, 3] == 1.0 and grid.h.sum() == 1.0


def test_stencil_writes_interior_only():
    grid = Grid(6, 5)
    grid.h[...] = np.arange(30, dtype=np.float32).reshape(5, 6)
    grid.hn[...] = -7.0
    StencilSolver().stencil(grid)

    hn = grid.hn
    assert np.all(hn[0, :] == -7) and np.all(hn[-1, :] == -7)
    assert np.all(hn[:, 0] == -7) and np.all(hn[:, -1] == -7)
    assert np.all(hn[1:-1, 1:-1] != -7)


def test_step_swaps_buffers():
    grid = Grid(8, 8)
    h, hn = grid.h, grid.hn
    StencilSolver().step(grid, MATCHED)
    assert grid.h is hn and grid.hn is h


def test_zero_field_stays_zero():
    grid = Grid(32, 24)
    solver = StencilSolver(velocity=0.7, damping=0.997)
    for boundary in (CLOSED, MATCHED, BoundaryConfig(), BoundaryConfig(circular=True)):
        for _ in range(20):
            solver.step(grid, boundary)
        assert not grid.h.any()
        assert not grid.u.any()


def test_constant_field_only_decays():
    grid = Grid(10, 10)
    grid.h[...] = 1.0
    StencilSolver(velocity=0.7, damping=0.997).stencil(grid)
    np.testing.assert_allclose(grid.hn[1:-1, 1:-1], 0.997, rtol=1e-6)
    assert not grid.u.any()


def test_energy_dissipates_without_forcing():
    size = 64
    grid = Grid(size, size)
    y, x = np.mgrid[:size, :size]
    grid.h[...] = np.exp(-((x - 32) ** 2 + (y - 32) ** 2) / (2 * 3.0 ** 2))
    solver = StencilSolver(velocity=0.5, damping=0.98)

    def energy():
        return float(np.sum(grid.h.astype(np.float64) ** 2))

    energies = [energy()]
    for _ in range(8):
        for _ in range(25):
            solver.step(grid, CLOSED)
        energies.append(energy())

    assert all(later <= earlier for earlier, later in zip(energies, energies[1:]))
    assert energies[-1] < 0.01 * energies[0]


def test_closed_edges_zero_after_every_step():
    grid = Grid(40, 30)
    grid.h[1:-1, 1] = 1.0
    grid.h[1, 1:-1] = 1.0
    solver = StencilSolver(velocity=0.7, damping=0.997)

    for _ in range(50):
        solver.step(grid, CLOSED)
        h = grid.h
        assert not h[0, :].any() and not h[-1, :].any()
        assert not h[:, 0].any() and not h[:, -1].any()


def test_matched_edges_absorb_better_than_closed():
    def residual(boundary):
        grid = Grid(80, 80)
        grid.h[38:43, 38:43] = 1.0
        solver = StencilSolver(velocity=0.7, damping=0.999)
        for _ in range(150):
            solver.step(grid, boundary)
        return float(np.sum(grid.h.astype(np.float64) ** 2))

    assert residual(MATCHED) < residual(CLOSED)


def test_matched_ratio_scale():
    assert StencilSolver(velocity=0.7).matched_ratio == pytest.approx(2.8)
    assert StencilSolver(velocity=0.7, matched_ratio_scale=1.0).matched_ratio == pytest.approx(0.7)
