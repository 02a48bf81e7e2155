"""
Gauss-Jordan elimination with full pivoting.

Reduces A to the identity while applying the same row operations to a
right-hand side, so one pass yields both A⁻¹ and the solution of
A @ X = B. The inverse is built in place of A; column swaps introduced by
the pivoting are undone at the end.

References:
    Press, W. H. et al. (2007). Numerical Recipes, 3rd ed., section 2.1.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import SingularMatrixError, DimensionError


@dataclass(frozen=True)
class GaussJordanResult:
    """
    Result of Gauss-Jordan elimination.

    Attributes:
        inverse: Inverse of A (n x n)
        solution: Solution X of A @ X = B (n x k), None when no B was given
    """
    inverse: NDArray[np.floating[Any]]
    solution: NDArray[np.floating[Any]] | None


def gauss_jordan_cpu(
    A: NDArray[np.floating[Any]],
    B: NDArray[np.floating[Any]] | None,
    threshold: float
) -> GaussJordanResult:
    """
    Invert A and solve A @ X = B by Gauss-Jordan elimination.

    Args:
        A: Square matrix (n x n)
        B: Right-hand side (n x k), or None to only invert
        threshold: Pivot magnitude at or below which A is considered singular

    Returns:
        GaussJordanResult with the inverse and, if B was given, the solution

    Raises:
        DimensionError: If A is not square or B row count differs
        SingularMatrixError: If no pivot larger than threshold remains
    """
    m, n = A.shape
    if m != n:
        raise DimensionError(
            f"Gauss-Jordan elimination requires a square matrix, got {m}x{n}"
        )
    if B is not None and B.shape[0] != n:
        raise DimensionError(f"b: expected {n} rows, got {B.shape[0]}")

    a = np.array(A, dtype=np.float64, order='F', copy=True)
    b = np.zeros((n, 0)) if B is None else np.array(B, dtype=np.float64, copy=True)

    used = np.zeros(n, dtype=bool)
    pivot_rows = np.empty(n, dtype=np.intp)
    pivot_columns = np.empty(n, dtype=np.intp)

    for i in range(n):
        free = np.flatnonzero(~used)
        block = np.abs(a[np.ix_(free, free)])
        r, c = np.unravel_index(int(np.argmax(block)), block.shape)
        if block[r, c] <= threshold:
            raise SingularMatrixError(
                f"Matrix is singular at threshold {threshold}: "
                f"no usable pivot after {i} of {n} eliminations",
                matrix_name='A',
                rank=i,
                expected_rank=n
            )
        row, column = free[r], free[c]
        used[column] = True

        # Move the pivot onto the diagonal
        if row != column:
            a[[row, column], :] = a[[column, row], :]
            b[[row, column], :] = b[[column, row], :]
        pivot_rows[i] = row
        pivot_columns[i] = column

        pivot_inverse = 1.0 / a[column, column]
        a[column, column] = 1.0
        a[column, :] *= pivot_inverse
        b[column, :] *= pivot_inverse

        factors = a[:, column].copy()
        factors[column] = 0.0
        a[:, column] = np.where(np.arange(n) == column, a[:, column], 0.0)
        a -= np.outer(factors, a[column, :])
        b -= np.outer(factors, b[column, :])

    for i in reversed(range(n)):
        if pivot_rows[i] != pivot_columns[i]:
            a[:, [pivot_rows[i], pivot_columns[i]]] = a[:, [pivot_columns[i], pivot_rows[i]]]

    return GaussJordanResult(inverse=a, solution=None if B is None else b)
