"""
boundary.py — Wall Boundary Conditions
=======================================
Every relaxation sweep and every advection pass ends here. The walls are the
outermost ring of cells; they are never solved for, only derived from the
first interior ring:

  - Scalars (density, divergence, pressure): copy the interior neighbour.
  - Horizontal velocity: negated at the left/right walls (no penetration).
  - Vertical velocity: negated at the top/bottom walls.
  - Corners: average of the two adjacent wall cells, taken after the walls
    above have been written.

Without this, whatever reaches the walls leaks out of the box.
"""

import numpy as np


BOUNDARY_SCALAR     = 0
BOUNDARY_VELOCITY_X = 1
BOUNDARY_VELOCITY_Y = 2

BOUNDARY_TAGS = (BOUNDARY_SCALAR, BOUNDARY_VELOCITY_X, BOUNDARY_VELOCITY_Y)


def set_boundary(b: int, x: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Enforce the wall conditions on a flat row-major field, in place.

    Args:
        b      : Boundary tag (BOUNDARY_SCALAR, BOUNDARY_VELOCITY_X or
                 BOUNDARY_VELOCITY_Y)
        x      : Field of length width*height
        width  : Grid width (cells per row)
        height : Grid height (rows)

    Returns:
        The same array, for chaining.
    """
    if b not in BOUNDARY_TAGS:
        raise ValueError(f"Unknown boundary tag: {b}. Use 0, 1 or 2.")

    g = x.reshape(height, width)   # g[y, x]
    sign_x = -1.0 if b == BOUNDARY_VELOCITY_X else 1.0
    sign_y = -1.0 if b == BOUNDARY_VELOCITY_Y else 1.0

    # ── Left / right walls (corners excluded) ──────────────────────────────
    g[1:-1, 0]  = sign_x * g[1:-1, 1]
    g[1:-1, -1] = sign_x * g[1:-1, -2]

    # ── Top / bottom walls (corners excluded) ──────────────────────────────
    g[0,  1:-1] = sign_y * g[1,  1:-1]
    g[-1, 1:-1] = sign_y * g[-2, 1:-1]

    # ── Corners: mean of the two neighbouring wall cells ───────────────────
    g[0,   0] = 0.5 * (g[0,   1] + g[1,   0])
    g[0,  -1] = 0.5 * (g[0,  -2] + g[1,  -1])
    g[-1,  0] = 0.5 * (g[-1,  1] + g[-2,  0])
    g[-1, -1] = 0.5 * (g[-1, -2] + g[-2, -1])

    return x
