"""
Cholesky decomposition.

Row-oriented Cholesky-Banachiewicz factorization that never raises on
non-SPD input. Instead it records whether the input passed the SPD test
(exact symmetry and a strictly positive pivot on every row), which lets
callers check covariance matrices without exception handling.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import NotPositiveDefiniteError, DimensionError


@dataclass(frozen=True)
class CholeskyResult:
    """
    Result of Cholesky decomposition.

    Attributes:
        L: Lower triangular factor (n x n). Only meaningful when is_spd.
        is_spd: Whether the input is symmetric positive definite
        min_pivot: Smallest squared pivot encountered (<= 0 when not SPD)
    """
    L: NDArray[np.floating[Any]]
    is_spd: bool
    min_pivot: float


def cholesky_cpu(A: NDArray[np.floating[Any]]) -> CholeskyResult:
    """
    Compute L with A = L @ Lᵗ.

    Args:
        A: Square matrix (n x n)

    Returns:
        CholeskyResult with L and the SPD flag

    Raises:
        DimensionError: If A is not square
    """
    m, n = A.shape
    if m != n:
        raise DimensionError(
            f"Cholesky decomposition requires a square matrix, got {m}x{n}"
        )

    L = np.zeros((n, n), order='F')
    is_spd = True
    min_pivot = np.inf

    # Zero pivots propagate inf/nan into L; is_spd already records the failure
    with np.errstate(divide='ignore', invalid='ignore'):
        for j in range(n):
            d = 0.0
            for k in range(j):
                s = (A[j, k] - L[k, :k] @ L[j, :k]) / L[k, k]
                L[j, k] = s
                d += s * s
                is_spd = is_spd and A[k, j] == A[j, k]

            d = A[j, j] - d
            min_pivot = min(min_pivot, d)
            is_spd = is_spd and d > 0.0
            L[j, j] = np.sqrt(max(d, 0.0))

    return CholeskyResult(L=L, is_spd=bool(is_spd), min_pivot=float(min_pivot))


def cholesky_solve_cpu(
    result: CholeskyResult,
    B: NDArray[np.floating[Any]]
) -> NDArray[np.floating[Any]]:
    """
    Solve A @ X = B using the Cholesky factor of A.

    Args:
        result: Factorization of A
        B: Right-hand side (n x k)

    Returns:
        Solution X (n x k)

    Raises:
        DimensionError: If B row count differs from A
        NotPositiveDefiniteError: If A was not symmetric positive definite
    """
    n = result.L.shape[0]
    if B.shape[0] != n:
        raise DimensionError(f"b: expected {n} rows, got {B.shape[0]}")

    if not result.is_spd:
        raise NotPositiveDefiniteError(
            f"Matrix is not symmetric positive definite (min pivot {result.min_pivot})",
            matrix_name='A',
            min_pivot=result.min_pivot
        )

    Y = solve_triangular(result.L, B, lower=True)
    return solve_triangular(result.L, Y, lower=True, trans='T')
