"""
simulation.py — Master Physics Loop
====================================
One call to `step()` advances the fluid by one time step.

Physics pipeline per frame:
  1. Diffuse velocity (viscosity)
  2. Project velocity (enforce incompressibility)
  3. Advect velocity (self-advection)
  4. Project again (clean up after advection)
  5. Diffuse density
  6. Advect density through the velocity from steps 1–4

Each stage reads the grid's committed fields, builds new buffers, and the
result is committed back before the next stage starts. So the second
projection always sees the post-advection field, and density always moves
with the already-updated velocity.

This follows the "Stable Fluids" paper by Jos Stam.
"""

import logging
import time
from contextlib import contextmanager

import numpy as np

from .advect import advect
from .boundary import BOUNDARY_SCALAR, BOUNDARY_VELOCITY_X, BOUNDARY_VELOCITY_Y
from .diffuse import diffuse
from .errors import SimulationStateError, StepFailedError
from .forces import add_source, apply_decay
from .grid import FluidGrid
from .solver import project


logger = logging.getLogger(__name__)

# Projections per velocity step: the first runs before advection, the
# rest after it.
PROJECTION_PASSES = 2


def velocity_step(grid: FluidGrid):
    """Diffuse → project → advect → project the velocity field, in place."""
    w, h, dt = grid.width, grid.height, grid.time_step

    # ── Diffuse (viscosity) ───────────────────────────────────────────────
    vx = diffuse(BOUNDARY_VELOCITY_X, grid.velocity_x, grid.viscosity, dt, w, h)
    vy = diffuse(BOUNDARY_VELOCITY_Y, grid.velocity_y, grid.viscosity, dt, w, h)

    # ── Project the diffused field ────────────────────────────────────────
    vx, vy = project(vx, vy, w, h)
    grid.commit(velocity_x=vx, velocity_y=vy)

    # ── Self-advection: both components ride the same committed field ─────
    u, v = grid.velocity_x, grid.velocity_y
    vx = advect(BOUNDARY_VELOCITY_X, u, u, v, dt, w, h)
    vy = advect(BOUNDARY_VELOCITY_Y, v, u, v, dt, w, h)
    grid.commit(velocity_x=vx, velocity_y=vy)

    # ── Project the post-advection field ──────────────────────────────────
    for _ in range(PROJECTION_PASSES - 1):
        vx, vy = project(grid.velocity_x, grid.velocity_y, w, h)
        grid.commit(velocity_x=vx, velocity_y=vy)


def density_step(grid: FluidGrid):
    """Diffuse then advect density with the current velocity, in place."""
    w, h, dt = grid.width, grid.height, grid.time_step

    d = diffuse(BOUNDARY_SCALAR, grid.density, grid.diffusion_rate, dt, w, h)
    grid.commit(density=d)

    d = advect(BOUNDARY_SCALAR, grid.density, grid.velocity_x, grid.velocity_y,
               dt, w, h)
    grid.commit(density=d)


@contextmanager
def guarded_step(grid: FluidGrid):
    """
    Wrap one step of `grid`: refuse a grid that already failed, and turn an
    allocation failure inside the block into StepFailedError, leaving the
    grid marked failed.
    """
    if grid.failed:
        raise SimulationStateError(
            "Grid is in a partially updated state after a failed step; "
            "create a new grid (or reset() this one) before stepping again."
        )
    try:
        yield
    except MemoryError as exc:
        grid.mark_failed()
        logger.error("Step failed on %dx%d grid: out of memory",
                     grid.width, grid.height)
        raise StepFailedError(
            "Out of memory during step; grid state is inconsistent"
        ) from exc


def step(grid: FluidGrid):
    """
    Advance the grid by one tick: velocity first, then density.

    Raises:
        SimulationStateError : the grid already failed a step
        StepFailedError      : a buffer allocation failed mid-step; the grid
                               is left partially updated and marked failed
    """
    with guarded_step(grid):
        velocity_step(grid)
        density_step(grid)


class FluidSimulation:
    """
    The complete 2D fluid simulation, with per-frame timing.

    Usage:
        sim = FluidSimulation(width=64, height=64)
        sim.add_source(32, 60, amount=5.0, velocity=(0.0, -1.0))
        for frame in range(100):
            sim.step()
            density = sim.grid.density_view()   # Hand to the renderer
    """

    def __init__(self, width: int = 100, height: int = 100,
                 diffusion: float = 0.0001, viscosity: float = 0.0000001,
                 dt: float = 0.2):
        """
        Args:
            width, height : Grid resolution
            diffusion     : Density spreading rate
            viscosity     : Fluid thickness
            dt            : Timestep per frame
        """
        self.grid = FluidGrid(width, height, diffusion_rate=diffusion,
                              viscosity=viscosity, time_step=dt)
        self.frame = 0
        self.perf_log = []   # stores timing data per frame

    @classmethod
    def from_config(cls, config) -> "FluidSimulation":
        """Build a square simulation from a SimulationConfig."""
        return cls(width=config.grid_size, height=config.grid_size,
                   diffusion=config.diffusion, viscosity=config.viscosity,
                   dt=config.time_step)

    def add_source(self, x: int, y: int, amount: float = 5.0,
                   velocity: tuple = (0.0, 0.0)):
        """Inject density and a velocity impulse into one cell."""
        add_source(self.grid, x, y, amount, velocity)

    def apply_decay(self, density_decay: float, velocity_decay: float):
        apply_decay(self.grid, density_decay, velocity_decay)

    def step(self) -> dict:
        """
        Advance simulation by one timestep.

        Returns performance metrics dict for benchmarking.
        """
        g = self.grid
        t_total_start = time.perf_counter()

        with guarded_step(g):
            t0 = time.perf_counter()
            velocity_step(g)
            t_velocity = (time.perf_counter() - t0) * 1000

            t0 = time.perf_counter()
            density_step(g)
            t_density = (time.perf_counter() - t0) * 1000

        # ── Frame bookkeeping ──────────────────────────────────────────────
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000
        div = np.abs(g.compute_divergence())

        metrics = {
            "frame"            : self.frame,
            "total_ms"         : t_total,
            "fps"              : 1000.0 / t_total if t_total > 0 else 0,
            "velocity_step_ms" : t_velocity,
            "density_step_ms"  : t_density,
            "divergence_max"   : float(div.max()),
            "divergence_mean"  : float(div.mean()),
            "density_total"    : float(g.density.sum()),
        }
        self.perf_log.append(metrics)
        logger.debug("Frame %d: %.1fms, density=%.3f", self.frame,
                     t_total, metrics["density_total"])
        return metrics

    def print_status(self):
        """Pretty-print current simulation state."""
        g = self.grid
        div = np.abs(g.compute_divergence())
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  Grid: {g.width}x{g.height}")
        print(f"  Density   : max={g.density.max():.4f}, total={g.density.sum():.2f}")
        print(f"  Velocity  : max_x={np.abs(g.velocity_x).max():.4f}, "
              f"max_y={np.abs(g.velocity_y).max():.4f}")
        print(f"  Divergence: max={div.max():.6f}, mean={div.mean():.8f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")
