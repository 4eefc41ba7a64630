import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from fluid2d import FluidGrid


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def still_grid():
    """5x5 grid where nothing diffuses, flows or moves."""
    return FluidGrid(5, 5, diffusion_rate=0.0, viscosity=0.0, time_step=0.0)


@pytest.fixture
def diffusing_grid():
    return FluidGrid(10, 10, diffusion_rate=0.1, viscosity=0.0, time_step=0.1)
