import numpy as np
import pytest

from ripplebox.core import boundary as bc
from ripplebox.core.config import BoundaryConfig, SimConfig
from ripplebox.core.simulation import WaveSimulation
from ripplebox.core.state import BrushState, FrameInput, RefractionBackground


def matched_config(**kwargs):
    params = dict(velocity=0.7, damping=0.997, rain_enabled=False,
                  boundary=BoundaryConfig(top="matched", bottom="matched",
                                          left="matched", right="matched"))
    params.update(kwargs)
    return SimConfig(**params)


def flat_background(config, value=90):
    width, height = config.grid_size
    cw, ch = config.refraction_size
    return RefractionBackground(source=np.full((height, width, 3), value, np.uint8),
                                base=np.full((ch, cw, 3), value, np.uint8))


def test_quiet_pool_stays_flat():
    sim = WaveSimulation(SimConfig(rain_enabled=False))
    for _ in range(10):
        sim.advance(FrameInput())
    assert not sim.grid.h.any()
    assert sim.energy() == 0.0


def test_brush_press_makes_symmetric_bump():
    sim = WaveSimulation(matched_config(sub_steps_per_frame=3))
    sim.advance(FrameInput(brush=BrushState(pressed=True, x=160, y=120)))
    h = sim.grid.h

    centre = h[120, 160]
    assert 0.3 < centre <= 0.9
    assert centre == pytest.approx(0.3 * (1 + 0.997 + 0.997 ** 2), rel=1e-5)

    patch = h[110:131, 150:171]
    assert (patch > 0).sum() > 50
    np.testing.assert_allclose(patch, np.flipud(patch), atol=1e-6)
    np.testing.assert_allclose(patch, np.fliplr(patch), atol=1e-6)
    np.testing.assert_allclose(patch, patch.T, atol=1e-6)

    # the wave has not reached the edges yet
    for edge in (h[0, :], h[-1, :], h[:, 0], h[:, -1]):
        assert np.abs(edge).max() < 0.01
    assert not h[:100, :].any()


def test_circular_pool_stays_dry_outside():
    config = matched_config(rain_enabled=True, rain_interval=1, seed=3,
                            boundary=BoundaryConfig(circular=True))
    sim = WaveSimulation(config)
    outside = bc.circular_mask(sim.grid.shape)

    # stir right on the rim, then let it rain everywhere
    for frame in range(20):
        pressed = frame < 10
        sim.advance(FrameInput(brush=BrushState(pressed=pressed, x=160, y=3)))
        assert not sim.grid.h[outside].any()
        assert not sim.grid.u[outside].any()

    assert sim.grid.h[~outside].any()


def test_advance_renders_all_views():
    config = SimConfig(rain_enabled=False, slice_size=(200, 80), refraction_size=(160, 120))
    sim = WaveSimulation(config)

    frame = sim.advance(FrameInput())
    assert frame.height_map.shape == (240, 320, 4)
    assert frame.cross_section.shape == (80, 200, 4)
    assert frame.refraction is None

    sim.set_background(flat_background(config))
    frame = sim.advance(FrameInput(elapsed=1 / 60))
    assert frame.refraction.shape == (120, 160, 4)
    assert frame.fps > 0


def test_background_publishes_once():
    config = SimConfig()
    sim = WaveSimulation(config)
    sim.set_background(flat_background(config))
    with pytest.raises(RuntimeError):
        sim.set_background(flat_background(config, value=10))
    assert sim.background.source[0, 0, 0] == 90


def test_background_must_match_grid():
    sim = WaveSimulation(SimConfig(width=100, height=80, refraction_size=(40, 30)))
    wrong = flat_background(SimConfig(refraction_size=(40, 30)))
    with pytest.raises(ValueError):
        sim.set_background(wrong)
    assert sim.background is None


def test_brush_state_is_copied_per_frame():
    sim = WaveSimulation(matched_config())
    brush = BrushState(pressed=True, x=50, y=50)
    sim.advance(FrameInput(brush=brush))
    brush.pressed = False
    assert sim.brush.pressed


def test_sub_steps_per_frame():
    sim = WaveSimulation(matched_config(sub_steps_per_frame=5))
    sim.advance(FrameInput())
    sim.advance(FrameInput())
    assert sim.injector.counter == 10


def test_seeded_runs_match():
    def run():
        sim = WaveSimulation(SimConfig(rain_enabled=True, rain_interval=2, seed=11))
        for _ in range(40):
            sim.advance(FrameInput())
        return sim.grid.h.copy()

    first, second = run(), run()
    assert first.any()
    np.testing.assert_array_equal(first, second)


def test_toggle_rain_and_reset():
    sim = WaveSimulation(SimConfig(rain_enabled=False, rain_interval=1, seed=5))
    sim.set_rain(True)
    assert sim.rain_enabled and sim.config.rain_enabled
    for _ in range(10):
        sim.advance(FrameInput())
    assert sim.energy() > 0

    sim.reset()
    assert sim.energy() == 0.0
    assert not sim.grid.u.any()


def test_unstable_velocity_diverges_without_raising():
    config = matched_config(width=64, height=48, velocity=1.5, refraction_size=(30, 22))
    sim = WaveSimulation(config)
    sim.set_background(flat_background(config))

    sim.advance(FrameInput(brush=BrushState(pressed=True, x=32, y=24)))
    with np.errstate(all="ignore"):
        for _ in range(400):
            output = sim.advance(FrameInput())

    assert not np.isfinite(sim.grid.h).all()
    assert output.refraction.shape == (22, 30, 4)
    assert output.height_map.shape == (48, 64, 4)


def test_edge_switched_to_closed_reads_zero_after_one_step():
    config = matched_config(width=40, height=30,
                            boundary=BoundaryConfig(top="free", bottom="free",
                                                    left="free", right="free"))
    sim = WaveSimulation(config)
    for _ in range(40):
        sim.advance(FrameInput(brush=BrushState(pressed=True, x=3, y=15)))
    assert sim.grid.h[1:-1, 0].any()

    sim.boundary.left = "closed"
    sim.step()
    assert not sim.grid.h[1:-1, 0].any()
