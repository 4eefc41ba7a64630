"""
forces.py — External Sources and Damping
=========================================
Everything that changes the fields from outside the solver: injecting dye
and momentum where the user drags, and fading both out over time so an
interactive session does not saturate.
"""

from .grid import FluidGrid


def add_source(grid: FluidGrid, x: int, y: int, amount: float,
               velocity: tuple = (0.0, 0.0)):
    """
    Inject density and a velocity impulse into cell (x, y).

    Args:
        x, y     : Cell indices
        amount   : Density to add
        velocity : (dx, dy) impulse to add
    """
    dx, dy = velocity
    grid.add_density(x, y, amount)
    grid.add_velocity(x, y, dx, dy)


def apply_decay(grid: FluidGrid, density_decay: float, velocity_decay: float):
    """
    Scale every cell's density and velocity by a constant factor.

    Args:
        density_decay  : 1.0 = no decay, 0.9 = fast decay
        velocity_decay : Same, for both velocity components
    """
    for name, factor in (("density_decay", density_decay),
                         ("velocity_decay", velocity_decay)):
        if not 0.0 <= factor <= 1.0:
            raise ValueError(f"{name} must be in [0, 1], got {factor}")

    if density_decay != 1.0:
        grid.density *= density_decay
    if velocity_decay != 1.0:
        grid.velocity_x *= velocity_decay
        grid.velocity_y *= velocity_decay
