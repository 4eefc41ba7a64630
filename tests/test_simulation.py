import numpy as np
import pytest

import fluid2d
from fluid2d import (
    PROJECTION_PASSES,
    FluidGrid,
    FluidSimulation,
    SimulationConfig,
    SimulationStateError,
    StepFailedError,
)
from fluid2d import simulation


def test_still_fluid_stays_still():
    g = FluidGrid(8, 7, diffusion_rate=0.0, viscosity=0.0, time_step=0.1)
    for _ in range(3):
        fluid2d.step(g)
    assert not g.density.any()
    assert not g.velocity_x.any()
    assert not g.velocity_y.any()


def test_empty_grid_with_coefficients_stays_empty():
    g = FluidGrid(8, 8, diffusion_rate=0.5, viscosity=0.5, time_step=0.2)
    fluid2d.step(g)
    assert not g.density.any()


def test_single_cell_without_diffusion_or_flow(still_grid):
    still_grid.add_density(2, 2, 10.0)
    fluid2d.step(still_grid)
    assert still_grid.density_at(2, 2) == 10.0
    for y in range(5):
        for x in range(5):
            if (x, y) != (2, 2):
                assert still_grid.density_at(x, y) == 0.0


def test_impulse_diffuses_one_step(diffusing_grid):
    g = diffusing_grid
    g.add_density(5, 5, 100.0)
    fluid2d.step(g)
    assert g.density_at(5, 5) < 100.0
    for x, y in ((4, 5), (6, 5), (5, 4), (5, 6)):
        assert g.density_at(x, y) > 0.0
    assert g.density.sum() <= 100.0


def test_impulse_peak_and_total_decay_over_steps():
    g = FluidGrid(12, 12, diffusion_rate=0.1, viscosity=0.0, time_step=0.1)
    g.add_density(6, 6, 1.0)
    peak, total = g.density_at(6, 6), g.density.sum()
    for _ in range(5):
        fluid2d.step(g)
        assert g.density_at(6, 6) < peak
        assert g.density.sum() <= total + 1e-12
        peak, total = g.density_at(6, 6), g.density.sum()


def test_velocity_is_stepped_before_density(monkeypatch):
    order = []
    monkeypatch.setattr(simulation, "velocity_step", lambda g: order.append("velocity"))
    monkeypatch.setattr(simulation, "density_step", lambda g: order.append("density"))
    fluid2d.step(FluidGrid(5, 5))
    assert order == ["velocity", "density"]


def _swirl(grid):
    grid.add_velocity(3, 3, 2.0, 0.0)
    grid.add_velocity(4, 3, 0.0, 2.0)
    grid.add_velocity(4, 4, -2.0, 0.0)
    grid.add_density(3, 4, 5.0)


def test_second_projection_sees_advected_velocity(monkeypatch):
    projected, advected = [], []
    real_project, real_advect = simulation.project, simulation.advect

    def spy_project(vx, vy, w, h):
        projected.append((vx.copy(), vy.copy()))
        return real_project(vx, vy, w, h)

    def spy_advect(b, d0, u, v, dt, w, h):
        out = real_advect(b, d0, u, v, dt, w, h)
        advected.append((b, out.copy(), u.copy(), v.copy()))
        return out

    monkeypatch.setattr(simulation, "project", spy_project)
    monkeypatch.setattr(simulation, "advect", spy_advect)

    g = FluidGrid(8, 8, diffusion_rate=0.01, viscosity=0.01, time_step=0.1)
    _swirl(g)
    fluid2d.step(g)

    assert len(projected) == PROJECTION_PASSES == 2
    (bx, adv_x, _, _), (by, adv_y, _, _), (bd, _, u_d, v_d) = advected
    assert (bx, by, bd) == (1, 2, 0)
    np.testing.assert_array_equal(projected[1][0], adv_x)
    np.testing.assert_array_equal(projected[1][1], adv_y)
    # Density rides the final velocity
    np.testing.assert_array_equal(u_d, g.velocity_x)
    np.testing.assert_array_equal(v_d, g.velocity_y)


def test_velocity_components_advected_by_same_field(monkeypatch):
    calls = []
    real_advect = simulation.advect

    def spy_advect(b, d0, u, v, dt, w, h):
        calls.append((u.copy(), v.copy()))
        return real_advect(b, d0, u, v, dt, w, h)

    monkeypatch.setattr(simulation, "advect", spy_advect)
    g = FluidGrid(8, 8, viscosity=0.0, time_step=0.1)
    _swirl(g)
    simulation.velocity_step(g)
    np.testing.assert_array_equal(calls[0][0], calls[1][0])
    np.testing.assert_array_equal(calls[0][1], calls[1][1])


def test_failed_step_marks_grid_unusable(monkeypatch):
    def out_of_memory(*args, **kwargs):
        raise MemoryError

    g = FluidGrid(6, 6)
    monkeypatch.setattr(simulation, "advect", out_of_memory)
    with pytest.raises(StepFailedError) as info:
        fluid2d.step(g)
    assert isinstance(info.value.__cause__, MemoryError)
    assert g.failed

    monkeypatch.undo()
    with pytest.raises(SimulationStateError):
        fluid2d.step(g)

    g.reset()
    fluid2d.step(g)


def test_simulation_metrics():
    sim = FluidSimulation(width=10, height=10, diffusion=0.01, viscosity=0.0, dt=0.1)
    sim.add_source(5, 5, amount=3.0, velocity=(0.1, 0.0))
    m1 = sim.step()
    m2 = sim.step()
    assert (m1["frame"], m2["frame"]) == (1, 2)
    assert len(sim.perf_log) == 2
    for key in ("total_ms", "fps", "velocity_step_ms", "density_step_ms",
                "divergence_max", "divergence_mean", "density_total"):
        assert key in m2
    assert m2["density_total"] == pytest.approx(sim.grid.density.sum())


def test_simulation_step_failure_is_surfaced(monkeypatch):
    sim = FluidSimulation(width=6, height=6)

    def out_of_memory(grid):
        raise MemoryError

    monkeypatch.setattr(simulation, "density_step", out_of_memory)
    with pytest.raises(StepFailedError):
        sim.step()
    assert sim.frame == 0
    with pytest.raises(SimulationStateError):
        sim.step()


def test_from_config():
    config = SimulationConfig(grid_size=16, diffusion=0.2, viscosity=0.3, time_step=0.05)
    sim = FluidSimulation.from_config(config)
    g = sim.grid
    assert (g.width, g.height) == (16, 16)
    assert (g.diffusion_rate, g.viscosity, g.time_step) == (0.2, 0.3, 0.05)


def test_print_status(capsys):
    sim = FluidSimulation(width=6, height=6)
    sim.step()
    sim.print_status()
    assert "Frame: 1" in capsys.readouterr().out


def test_guarded_step_marks_failure_once_for_both_entry_points():
    g = FluidGrid(5, 5)
    with pytest.raises(StepFailedError):
        with simulation.guarded_step(g):
            raise MemoryError
    assert g.failed
    with pytest.raises(SimulationStateError):
        with simulation.guarded_step(g):
            pass
    with pytest.raises(SimulationStateError):
        fluid2d.step(g)

    sim = FluidSimulation(width=5, height=5)
    sim.grid.mark_failed()
    with pytest.raises(SimulationStateError):
        sim.step()
    assert sim.frame == 0 and sim.perf_log == []


def test_guarded_step_lets_other_errors_through():
    g = FluidGrid(5, 5)
    with pytest.raises(ZeroDivisionError):
        with simulation.guarded_step(g):
            1 / 0
    assert not g.failed
