"""
fluid2d/ — 2D Stable Fluids
============================
Exports the interfaces a host application uses.

Renderers read: FluidGrid.density_view(), width, height
Drivers call:   create(), step(), add_density(), add_velocity()
"""

from .boundary import (
    BOUNDARY_SCALAR,
    BOUNDARY_VELOCITY_X,
    BOUNDARY_VELOCITY_Y,
    set_boundary,
)
from .config import SimulationConfig
from .errors import (
    CoordinateOutOfRangeError,
    FluidError,
    GridTooSmallError,
    SimulationStateError,
    StepFailedError,
)
from .grid import MIN_GRID_SIZE, FluidGrid, create
from .simulation import (
    PROJECTION_PASSES,
    FluidSimulation,
    density_step,
    step,
    velocity_step,
)
from .solver import RELAXATION_ITERATIONS

__all__ = [
    "FluidGrid", "FluidSimulation", "SimulationConfig",
    "create", "step", "velocity_step", "density_step", "set_boundary",
    "BOUNDARY_SCALAR", "BOUNDARY_VELOCITY_X", "BOUNDARY_VELOCITY_Y",
    "MIN_GRID_SIZE", "PROJECTION_PASSES", "RELAXATION_ITERATIONS",
    "FluidError", "GridTooSmallError", "CoordinateOutOfRangeError",
    "StepFailedError", "SimulationStateError",
]
