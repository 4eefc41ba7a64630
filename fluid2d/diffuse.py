"""
diffuse.py — Implicit Diffusion
================================
Diffusion makes quantities spread out over time.
  - High diffusion  → density spreads fast (watercolor bleed)
  - Low diffusion   → density stays tight
  - High viscosity  → thick fluid (honey)
  - Low viscosity   → thin fluid (air, water)

The math: solve the implicit heat equation

  (I - a·∇²) x_new = x_old,   a = dt * rate * (W-2) * (H-2)

Implicit diffusion stays stable for any dt, where the explicit version
blows up once dt is too large. The (W-2)*(H-2) factor is the interior cell
count, so the rate means the same thing at every resolution.
"""

from typing import Optional

import numpy as np

from .solver import lin_solve


def diffuse(b: int, x0: np.ndarray, rate: float, time_step: float,
            width: int, height: int,
            out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Diffuse a flat field by one time step.

    Args:
        b         : Boundary tag of the field
        x0        : Field at the start of the step (read only)
        rate      : Diffusion rate (or viscosity for velocity components)
        time_step : dt
        width     : Grid width
        height    : Grid height
        out       : Initial guess, overwritten with the result. A fresh
                    zero buffer when omitted.

    Returns:
        The diffused field (`out`).
    """
    if out is None:
        out = np.zeros_like(x0, dtype=np.float64)

    a = time_step * rate * (width - 2) * (height - 2)
    return lin_solve(b, out, x0, a, 1.0 + 4.0 * a, width, height)
