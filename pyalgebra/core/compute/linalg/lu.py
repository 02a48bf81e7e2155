"""
LU decomposition with partial pivoting.

Right-looking Gaussian elimination on a scratch copy of the input. The
combined storage keeps the unit lower factor's multipliers below the
diagonal and U on and above it, with rows in pivoted order.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import SingularMatrixError, DimensionError


@dataclass(frozen=True)
class LUResult:
    """
    Result of LU decomposition.

    Attributes:
        lu: Combined storage (rows x columns). Strictly lower part holds the
            multipliers of L, upper part holds U. Rows are in pivoted order.
        pivot: Row permutation (length rows). Row i of the combined storage
            came from row pivot[i] of the input.
        pivot_sign: +1 or -1, parity of the permutation
    """
    lu: NDArray[np.floating[Any]]
    pivot: NDArray[np.intp]
    pivot_sign: int

    @property
    def diagonal(self) -> NDArray[np.floating[Any]]:
        return np.diag(self.lu).copy()


def lu_cpu(A: NDArray[np.floating[Any]]) -> LUResult:
    """
    Factor A (rows >= columns) as A[pivot, :] = L @ U.

    Args:
        A: Matrix to decompose (m x n), m >= n

    Returns:
        LUResult with combined storage, pivot vector and permutation sign

    Raises:
        DimensionError: If A has fewer rows than columns
    """
    m, n = A.shape
    if m < n:
        raise DimensionError(
            f"LU decomposition requires rows >= columns, got {m}x{n}"
        )

    lu = np.array(A, dtype=np.float64, order='F', copy=True)
    pivot = np.arange(m)
    pivot_sign = 1

    for k in range(n):
        p = k + int(np.argmax(np.abs(lu[k:, k])))
        if p != k:
            lu[[p, k], :] = lu[[k, p], :]
            pivot[[p, k]] = pivot[[k, p]]
            pivot_sign = -pivot_sign

        # Zero pivot leaves the column as is; is_singular reports it
        if lu[k, k] != 0.0:
            lu[k + 1:, k] /= lu[k, k]
            lu[k + 1:, k + 1:] -= np.outer(lu[k + 1:, k], lu[k, k + 1:])

    return LUResult(lu=lu, pivot=pivot, pivot_sign=pivot_sign)


def lu_pivoted_l(result: LUResult) -> NDArray[np.floating[Any]]:
    """Unit lower trapezoidal factor in pivoted row order (rows x columns)."""
    m, n = result.lu.shape
    return np.tril(result.lu, -1) + np.eye(m, n)


def lu_l(result: LUResult) -> NDArray[np.floating[Any]]:
    """Lower factor with rows restored to input order, so that L @ U = A."""
    pivoted = lu_pivoted_l(result)
    L = np.empty_like(pivoted)
    L[result.pivot, :] = pivoted
    return L


def lu_u(result: LUResult) -> NDArray[np.floating[Any]]:
    """Upper triangular factor (columns x columns)."""
    n = result.lu.shape[1]
    return np.triu(result.lu[:n, :])


def lu_determinant(result: LUResult) -> float:
    """Determinant of a square factored matrix."""
    return float(result.pivot_sign * np.prod(np.diag(result.lu)))


def lu_solve_cpu(
    result: LUResult,
    B: NDArray[np.floating[Any]],
    threshold: float
) -> NDArray[np.floating[Any]]:
    """
    Solve A @ X = B from an LU factorization of square A.

    The caller guarantees A is square.

    Args:
        result: Factorization of A
        B: Right-hand side (n x k)
        threshold: Pivot magnitude at or below which A is considered singular

    Returns:
        Solution X (n x k)

    Raises:
        DimensionError: If B row count differs
        SingularMatrixError: If any pivot magnitude is <= threshold
    """
    n = result.lu.shape[0]
    if B.shape[0] != n:
        raise DimensionError(
            f"b: expected {n} rows, got {B.shape[0]}"
        )

    diag = np.abs(np.diag(result.lu))
    if np.any(diag <= threshold):
        rank = int(np.sum(diag > threshold))
        raise SingularMatrixError(
            f"Matrix is singular at threshold {threshold}: "
            f"{n - rank} pivot(s) with magnitude <= threshold",
            matrix_name='A',
            rank=rank,
            expected_rank=n
        )

    # Forward substitution with unit L, then back substitution with U
    X = B[result.pivot, :]
    Y = solve_triangular(result.lu, X, lower=True, unit_diagonal=True)
    return solve_triangular(result.lu, Y, lower=False)
