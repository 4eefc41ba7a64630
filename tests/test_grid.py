import numpy as np
import pytest

import fluid2d
from fluid2d import (
    CoordinateOutOfRangeError,
    FluidError,
    FluidGrid,
    GridTooSmallError,
)


def test_create_allocates_zero_fields():
    g = fluid2d.create(8, 6, 0.1, 0.2, 0.3)
    assert (g.width, g.height) == (8, 6)
    assert (g.diffusion_rate, g.viscosity, g.time_step) == (0.1, 0.2, 0.3)
    for field in (g.density, g.velocity_x, g.velocity_y):
        assert field.shape == (48,)
        assert not field.any()
    assert not g.failed


@pytest.mark.parametrize("w,h", [(2, 5), (5, 2), (0, 0), (1, 10)])
def test_grid_too_small(w, h):
    with pytest.raises(GridTooSmallError):
        FluidGrid(w, h)


def test_grid_too_small_is_a_value_error():
    with pytest.raises(ValueError):
        FluidGrid(2, 2)


def test_negative_coefficients_rejected():
    with pytest.raises(ValueError):
        FluidGrid(5, 5, diffusion_rate=-1.0)
    with pytest.raises(ValueError):
        FluidGrid(5, 5, time_step=-0.1)


def test_add_density_accumulates_row_major():
    g = FluidGrid(6, 4)
    g.add_density(2, 3, 1.5)
    g.add_density(2, 3, 1.0)
    assert g.density[2 + 3 * 6] == 2.5
    assert g.density_at(2, 3) == 2.5
    assert g.density.sum() == 2.5


def test_add_velocity_accumulates_both_components():
    g = FluidGrid(5, 5)
    g.add_velocity(1, 2, 0.5, -0.25)
    g.add_velocity(1, 2, 0.5, 0.0)
    assert g.velocity_x_at(1, 2) == 1.0
    assert g.velocity_y_at(1, 2) == -0.25


@pytest.mark.parametrize("x,y", [(5, 0), (0, 4), (-1, 0), (0, -1), (10, 10)])
def test_out_of_range_coordinates_rejected(x, y):
    g = FluidGrid(5, 4)
    with pytest.raises(CoordinateOutOfRangeError):
        g.add_density(x, y, 1.0)
    with pytest.raises(CoordinateOutOfRangeError):
        g.add_velocity(x, y, 1.0, 1.0)
    with pytest.raises(IndexError):
        g.density_at(x, y)
    with pytest.raises(FluidError):
        g.velocity_x_at(x, y)
    assert not g.density.any()


def test_non_integer_coordinates_rejected():
    g = FluidGrid(5, 5)
    with pytest.raises(TypeError):
        g.add_density(1.5, 2, 1.0)


def test_numpy_integer_coordinates_accepted():
    g = FluidGrid(5, 5)
    g.add_density(np.int64(2), np.int32(1), 3.0)
    assert g.density_at(2, 1) == 3.0


def test_density_view_is_read_only():
    g = FluidGrid(4, 4)
    g.add_density(1, 1, 2.0)
    view = g.density_view()
    assert view[1 + 4] == 2.0
    with pytest.raises(ValueError):
        view[0] = 1.0
    g.add_density(1, 1, 1.0)
    assert view[1 + 4] == 3.0


def test_commit_copies_into_owned_buffers():
    g = FluidGrid(4, 4)
    owned = g.density
    g.commit(density=np.ones(16))
    assert g.density is owned
    assert g.density.sum() == 16.0
    with pytest.raises(ValueError):
        g.commit(velocity_x=np.ones(15))


def test_snapshot_and_reset():
    g = FluidGrid(5, 3)
    g.add_density(4, 2, 1.0)
    g.add_velocity(0, 0, 1.0, 2.0)
    snap = g.snapshot()
    assert snap["density"].shape == (3, 5)
    assert snap["density"][2, 4] == 1.0
    assert snap["velocity_y"][0, 0] == 2.0

    g.mark_failed()
    g.reset()
    assert not g.failed
    assert not g.density.any() and not g.velocity_x.any()
    assert snap["density"][2, 4] == 1.0


def test_repr_reports_state():
    assert "FluidGrid(5x5" in repr(FluidGrid(5, 5))


@pytest.mark.parametrize("x,y", [(True, 1), (1, False), (np.bool_(True), 1)])
def test_boolean_coordinates_rejected(x, y):
    g = FluidGrid(5, 5)
    with pytest.raises(TypeError):
        g.add_density(x, y, 1.0)
    with pytest.raises(TypeError):
        g.density_at(x, y)
    assert not g.density.any()
