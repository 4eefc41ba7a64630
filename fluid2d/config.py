"""
config.py — Interactive Defaults
=================================
Parameters for a live session: the solver coefficients plus how pointer
input and rendering behave. The solver's own tuning constants live next to
the algorithms (RELAXATION_ITERATIONS, PROJECTION_PASSES).
"""

from dataclasses import dataclass


@dataclass
class SimulationConfig:
    # Grid and simulation settings
    grid_size: int = 100             # higher = more detail, slower
    diffusion: float = 0.0001        # how quickly density spreads
    viscosity: float = 0.0000001     # fluid thickness
    time_step: float = 0.2           # higher = faster but less accurate

    # Interaction settings
    density_amount: float = 5.0      # density added per pointer event
    velocity_scale: float = 0.05     # pointer movement → velocity
    max_drag_pixels: float = 10.0    # pointer deltas are clamped to ±this

    # Fluid decay (1.0 = none)
    density_decay: float = 0.999
    velocity_decay: float = 0.99

    # Visual settings
    fluid_color: tuple = (0, 100, 255)
    background_color: tuple = (0, 0, 0)
    color_intensity: float = 0.5
    show_velocity: bool = False      # overlay every 5th velocity vector

    # Performance settings
    frame_skip: int = 0              # skip N frames between physics steps
