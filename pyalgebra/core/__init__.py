"""
Core infrastructure for pyalgebra.

This module provides shared abstractions and utilities used by the matrix,
decomposition, norm and statistics submodules.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances, precision and linear algebra kernels
"""

from pyalgebra.core.result import Result
from pyalgebra.core.exceptions import (
    PyAlgebraError,
    ValidationError,
    DimensionError,
    NotReadyError,
    NotAvailableError,
    LockedError,
    NumericalError,
    SingularMatrixError,
    RankDeficientMatrixError,
    NotPositiveDefiniteError,
    ConvergenceError,
    InvalidCovarianceMatrixError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyAlgebraError",
    "ValidationError",
    "DimensionError",
    "NotReadyError",
    "NotAvailableError",
    "LockedError",
    "NumericalError",
    "SingularMatrixError",
    "RankDeficientMatrixError",
    "NotPositiveDefiniteError",
    "ConvergenceError",
    "InvalidCovarianceMatrixError",
]
