"""
solver.py — Gauss-Seidel Relaxation and Pressure Projection
============================================================
Two pieces live here because the second is built on the first.

lin_solve()
  Relaxes  x[i] = (x0[i] + a * sum_of_4_neighbours(x)) / c  over the
  interior. Diffusion uses it with a = dt*rate*(W-2)*(H-2), c = 1 + 4a;
  the pressure solve uses it with a = 1, c = 4.

  This is Gauss-Seidel, not Jacobi: each update immediately sees the
  neighbours already updated earlier in the same sweep. That makes the
  sweep a chain of dependencies down every column, so it runs as a plain
  loop instead of a numpy slice expression. The sweep count is fixed at
  RELAXATION_ITERATIONS with no residual check: the cost per frame is
  bounded and predictable, the answer is approximate.

project()
  Enforces INCOMPRESSIBILITY on the velocity field:
    1. Compute the divergence of the current velocity field
    2. Solve the Poisson equation  lap(p) = div  for pressure
    3. Subtract the pressure gradient:  v = v - grad(p)
  This is the Helmholtz-Hodge decomposition: keep the divergence-free part.
"""

import numpy as np

from .boundary import (
    BOUNDARY_SCALAR,
    BOUNDARY_VELOCITY_X,
    BOUNDARY_VELOCITY_Y,
    set_boundary,
)


# Stability/cost tuning constants of the method.
RELAXATION_ITERATIONS = 4
PRESSURE_A = 1.0
PRESSURE_C = 4.0


def lin_solve(b: int, x: np.ndarray, x0: np.ndarray, a: float, c: float,
              width: int, height: int,
              iterations: int = RELAXATION_ITERATIONS) -> np.ndarray:
    """
    Gauss-Seidel relaxation of the 5-point system, in place on `x`.

    Args:
        b          : Boundary tag applied after every sweep
        x          : Unknowns, pre-seeded with the initial guess (modified)
        x0         : Right-hand side (read only)
        a, c       : Neighbour weight and normalization
        width      : Grid width
        height     : Grid height
        iterations : Number of full sweeps

    Returns:
        `x`, for chaining.
    """
    src = x0.tolist()

    for _ in range(iterations):
        cur = x.tolist()
        # Column-major sweep: x outer, y inner. Neighbour reads pick up the
        # values written earlier in this same sweep.
        for i in range(1, width - 1):
            for j in range(1, height - 1):
                idx = i + j * width
                cur[idx] = (src[idx] + a * (
                    cur[idx - 1] + cur[idx + 1] +
                    cur[idx - width] + cur[idx + width]
                )) / c
        x[:] = cur
        set_boundary(b, x, width, height)

    return x


def compute_divergence(vx: np.ndarray, vy: np.ndarray,
                       width: int, height: int) -> np.ndarray:
    """
    Scaled negative divergence at every interior cell (walls left at 0).

      div = -0.5 * ((u[right] - u[left]) + (v[below] - v[above])) / W

    This is the right-hand side of the pressure solve; for an incompressible
    field it should be ~0 everywhere.
    """
    u = vx.reshape(height, width)
    v = vy.reshape(height, width)
    div = np.zeros(width * height, dtype=np.float64)
    d = div.reshape(height, width)
    d[1:-1, 1:-1] = -0.5 * (
        (u[1:-1, 2:] - u[1:-1, :-2]) +
        (v[2:, 1:-1] - v[:-2, 1:-1])
    ) / width
    return div


def project(vx: np.ndarray, vy: np.ndarray,
            width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Pressure projection: make the velocity field (nearly) divergence-free.

    The inputs are not modified; the projected pair is returned as new
    buffers. Pass the live velocity: projecting a stale copy would throw
    away whatever happened to the field since the copy was taken.

    Args:
        vx, vy : Flat velocity components
        width  : Grid width
        height : Grid height

    Returns:
        (vx, vy) after subtracting the pressure gradient.
    """
    # Step 1: divergence of the incoming field
    div = compute_divergence(vx, vy, width, height)
    pressure = np.zeros(width * height, dtype=np.float64)
    set_boundary(BOUNDARY_SCALAR, div, width, height)
    set_boundary(BOUNDARY_SCALAR, pressure, width, height)

    # Step 2: Poisson solve, zero initial guess
    lin_solve(BOUNDARY_SCALAR, pressure, div, PRESSURE_A, PRESSURE_C,
              width, height)

    # Step 3: subtract the central-difference pressure gradient
    new_vx = vx.astype(np.float64, copy=True)
    new_vy = vy.astype(np.float64, copy=True)
    p = pressure.reshape(height, width)
    u = new_vx.reshape(height, width)
    v = new_vy.reshape(height, width)
    u[1:-1, 1:-1] -= 0.5 * (p[1:-1, 2:] - p[1:-1, :-2]) * width
    v[1:-1, 1:-1] -= 0.5 * (p[2:, 1:-1] - p[:-2, 1:-1]) * width

    set_boundary(BOUNDARY_VELOCITY_X, new_vx, width, height)
    set_boundary(BOUNDARY_VELOCITY_Y, new_vy, width, height)

    return new_vx, new_vy
