"""
Shared compute infrastructure for pyalgebra.

This module contains shared NUMERIC infrastructure: timing, tolerances,
precision constants and the linear algebra kernels that the decomposers
delegate to.

Submodules:
    timing: Execution timing utilities
    tolerances: Default thresholds and comparison tolerance tiers
    precision: Numerical precision constants and utilities
    linalg: Linear algebra kernels (LU, Householder QR, Cholesky, SVD)
"""

from pyalgebra.core.compute.timing import Timer, timed
from pyalgebra.core.compute.precision import EPSILON_64

__all__ = [
    # Timing
    "Timer",
    "timed",
    # Precision
    "EPSILON_64",
]
