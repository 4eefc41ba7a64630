"""
errors.py — Exception Types
============================
Everything the solver raises on purpose derives from FluidError, and each
class also subclasses the builtin a caller would naturally catch
(ValueError for bad construction arguments, IndexError for bad cells).
"""


class FluidError(Exception):
    """Base class for all fluid2d errors."""


class GridTooSmallError(FluidError, ValueError):
    """Width or height leaves no interior cell to relax, project or advect."""


class CoordinateOutOfRangeError(FluidError, IndexError):
    """A cell coordinate outside [0, width) x [0, height)."""


class StepFailedError(FluidError, RuntimeError):
    """A step aborted part-way; the grid holds a partially updated state."""


class SimulationStateError(FluidError, RuntimeError):
    """The grid cannot be stepped (a previous step failed)."""
