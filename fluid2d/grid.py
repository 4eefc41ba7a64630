"""
grid.py — Collocated 2D Simulation Grid
========================================
The foundation of the entire simulation.

All three fields live at CELL CENTERS and are stored flat, row-major:

  index = x + y * width        (x: column, y: row, y grows downward)

  - density     : transported, diffusing quantity (dye, smoke)
  - velocity_x  : horizontal flow component
  - velocity_y  : vertical flow component

The outermost ring of cells is the wall. Wall values are never solved for;
the boundary pass rewrites them from their interior neighbours, so the grid
needs at least one interior row and column (3 x 3 minimum).
"""

import logging
import operator

import numpy as np

from .errors import CoordinateOutOfRangeError, GridTooSmallError
from .solver import compute_divergence


logger = logging.getLogger(__name__)

MIN_GRID_SIZE = 3


class FluidGrid:
    """
    width x height grid storing all simulation state.
    This is the single source of truth passed between all physics steps.
    """

    def __init__(self, width: int, height: int, diffusion_rate: float = 0.0001,
                 viscosity: float = 0.0000001, time_step: float = 0.2):
        """
        Args:
            width          : Cells per row (>= 3)
            height         : Rows (>= 3)
            diffusion_rate : How fast density spreads (0 = no spreading)
            viscosity      : Fluid thickness (0 = inviscid)
            time_step      : dt per step
        """
        width = operator.index(width)
        height = operator.index(height)
        if width < MIN_GRID_SIZE or height < MIN_GRID_SIZE:
            raise GridTooSmallError(
                f"Grid too small: {width}x{height}. Both dimensions must be "
                f">= {MIN_GRID_SIZE} to leave an interior cell."
            )
        for name, value in (("diffusion_rate", diffusion_rate),
                            ("viscosity", viscosity),
                            ("time_step", time_step)):
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        self._width = width
        self._height = height
        self._diffusion_rate = float(diffusion_rate)
        self._viscosity = float(viscosity)
        self._time_step = float(time_step)
        self._failed = False

        size = width * height
        self.density    = np.zeros(size, dtype=np.float64)
        self.velocity_x = np.zeros(size, dtype=np.float64)
        self.velocity_y = np.zeros(size, dtype=np.float64)

        logger.debug("Created %dx%d grid (diff=%g, visc=%g, dt=%g)",
                     width, height, self._diffusion_rate, self._viscosity,
                     self._time_step)

    # ── Fixed parameters ──────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> int:
        return self._width * self._height

    @property
    def diffusion_rate(self) -> float:
        return self._diffusion_rate

    @property
    def viscosity(self) -> float:
        return self._viscosity

    @property
    def time_step(self) -> float:
        return self._time_step

    @property
    def failed(self) -> bool:
        """True once a step has aborted part-way through."""
        return self._failed

    # ── Indexing ──────────────────────────────────────────────────────────

    def index(self, x: int, y: int) -> int:
        """
        Flat index of cell (x, y). Out-of-range cells are an error, never
        clamped or wrapped: a bad coordinate is a caller bug.
        """
        if isinstance(x, (bool, np.bool_)) or isinstance(y, (bool, np.bool_)):
            raise TypeError(f"Cell coordinates must be integers, got ({x!r}, {y!r})")
        x = operator.index(x)
        y = operator.index(y)
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise CoordinateOutOfRangeError(
                f"Cell ({x}, {y}) outside {self._width}x{self._height} grid"
            )
        return x + y * self._width

    # ── Sources ───────────────────────────────────────────────────────────

    def add_density(self, x: int, y: int, amount: float):
        """Accumulate `amount` of density into cell (x, y)."""
        self.density[self.index(x, y)] += amount

    def add_velocity(self, x: int, y: int, dx: float, dy: float):
        """Accumulate a velocity impulse (dx, dy) into cell (x, y)."""
        idx = self.index(x, y)
        self.velocity_x[idx] += dx
        self.velocity_y[idx] += dy

    # ── Read access (what a renderer consumes) ────────────────────────────

    def density_at(self, x: int, y: int) -> float:
        return float(self.density[self.index(x, y)])

    def velocity_x_at(self, x: int, y: int) -> float:
        return float(self.velocity_x[self.index(x, y)])

    def velocity_y_at(self, x: int, y: int) -> float:
        return float(self.velocity_y[self.index(x, y)])

    def density_view(self) -> np.ndarray:
        """
        Read-only flat view of the density field, row-major.
        Reshape with (height, width) to get image rows.
        """
        view = self.density.view()
        view.flags.writeable = False
        return view

    # ── State management ──────────────────────────────────────────────────

    def commit(self, density=None, velocity_x=None, velocity_y=None):
        """
        Install the result of a pipeline stage as the live state.
        Buffers are copied into the owned arrays, which are never resized.
        """
        for name, new in (("density", density),
                          ("velocity_x", velocity_x),
                          ("velocity_y", velocity_y)):
            if new is None:
                continue
            current = getattr(self, name)
            if new.shape != current.shape:
                raise ValueError(
                    f"{name} buffer has shape {new.shape}, expected {current.shape}"
                )
            np.copyto(current, new)

    def mark_failed(self):
        self._failed = True

    def compute_divergence(self) -> np.ndarray:
        """
        Divergence of the current velocity field (flat, walls at 0).
        High divergence = broken simulation.
        """
        return compute_divergence(self.velocity_x, self.velocity_y,
                                  self._width, self._height)

    def snapshot(self) -> dict:
        """Copies of all three fields, each shaped (height, width)."""
        shape = (self._height, self._width)
        return {
            "density":    self.density.reshape(shape).copy(),
            "velocity_x": self.velocity_x.reshape(shape).copy(),
            "velocity_y": self.velocity_y.reshape(shape).copy(),
        }

    def reset(self):
        """Zero out all fields and clear the failed flag."""
        for arr in (self.density, self.velocity_x, self.velocity_y):
            arr[:] = 0.0
        self._failed = False

    def __repr__(self):
        max_div = np.abs(self.compute_divergence()).max()
        max_vel = max(np.abs(self.velocity_x).max(), np.abs(self.velocity_y).max())
        return (
            f"FluidGrid({self._width}x{self._height}, dt={self._time_step})\n"
            f"  density  : max={self.density.max():.4f}, sum={self.density.sum():.2f}\n"
            f"  velocity : max_component={max_vel:.4f}\n"
            f"  divergence: max={max_div:.6f} (target: ~0)"
        )


def create(width: int, height: int, diffusion_rate: float,
           viscosity: float, time_step: float) -> FluidGrid:
    """Allocate a zero-filled grid."""
    return FluidGrid(width, height, diffusion_rate=diffusion_rate,
                     viscosity=viscosity, time_step=time_step)
