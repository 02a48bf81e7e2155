"""
LU decomposition with partial pivoting.

For an m x n input with m >= n computes a unit lower trapezoidal L
(m x n) and an upper triangular U (n x n) with A = L @ U, where L carries
the row permutation. Determinant, singularity test and solve are only
defined for square input.
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.result import Result
from pyalgebra.core.exceptions import DimensionError
from pyalgebra.core.validation import check_threshold
from pyalgebra.core.compute.timing import Timer
from pyalgebra.core.compute.tolerances import DEFAULT_ROUND_ERROR
from pyalgebra.core.compute.linalg.lu import (
    LUResult,
    lu_cpu,
    lu_l,
    lu_pivoted_l,
    lu_u,
    lu_determinant,
    lu_solve_cpu,
)
from pyalgebra.decomposition._base import (
    Decomposer,
    DecomposerType,
    as_rhs,
    as_solution,
)
from pyalgebra.matrix import Matrix


class LUDecomposer(Decomposer[LUResult]):
    """
    Gaussian elimination with partial (row) pivoting.

    Examples:
        >>> decomposer = LUDecomposer(Matrix.from_numpy([[4., 3.], [6., 3.]]))
        >>> _ = decomposer.decompose()
        >>> decomposer.determinant()
        -6.0
    """

    @property
    def decomposer_type(self) -> DecomposerType:
        return DecomposerType.LU

    def _decompose(self, A: NDArray[np.floating[Any]]) -> Result[LUResult]:
        m, n = A.shape

        timer = Timer()
        timer.start()

        with timer.section('elimination'):
            factors = lu_cpu(A)

        timer.stop()

        warnings: tuple[str, ...] = ()
        if np.any(np.abs(factors.diagonal) <= DEFAULT_ROUND_ERROR):
            warnings = (
                f"matrix is singular at threshold {DEFAULT_ROUND_ERROR}",
            )

        info: dict[str, Any] = {
            'method': 'lu',
            'shape': (m, n),
            'pivot_sign': factors.pivot_sign,
        }

        return Result(
            params=factors,
            info=info,
            timing=timer.result(),
            backend_name='cpu_lu',
            warnings=warnings,
        )

    # === Factors ===

    def get_l(self) -> Matrix:
        """Unit lower factor (rows x columns) in input row order: A = L @ U."""
        return Matrix.from_numpy(lu_l(self._factors()))

    def get_pivotted_l(self) -> Matrix:
        """Unit lower factor before undoing the pivoting: A[pivot] = L @ U."""
        return Matrix.from_numpy(lu_pivoted_l(self._factors()))

    def get_u(self) -> Matrix:
        """Upper triangular factor (columns x columns)."""
        return Matrix.from_numpy(lu_u(self._factors()))

    def get_pivot(self) -> NDArray[np.intp]:
        """Row permutation: row i of the pivoted system is input row pivot[i]."""
        return self._factors().pivot.copy()

    # === Derived quantities ===

    def _check_square(self, operation: str) -> LUResult:
        factors = self._factors()
        m, n = factors.lu.shape
        if m != n:
            raise DimensionError(
                f"{operation} requires a square matrix, got {m}x{n}"
            )
        return factors

    def is_singular(self, threshold: float = DEFAULT_ROUND_ERROR) -> bool:
        """
        True if any pivot has magnitude at or below threshold.

        Raises:
            ValidationError: If threshold is negative
            DimensionError: If the input is not square
        """
        check_threshold(threshold)
        factors = self._check_square('is_singular')
        return bool(np.any(np.abs(factors.diagonal) <= threshold))

    def determinant(self) -> float:
        """
        Determinant of the input matrix.

        Raises:
            DimensionError: If the input is not square
        """
        return lu_determinant(self._check_square('determinant'))

    def solve(
        self,
        b: Matrix | ArrayLike,
        threshold: float = DEFAULT_ROUND_ERROR
    ) -> Matrix | NDArray[np.floating[Any]]:
        """
        Solve A @ X = b.

        Args:
            b: Right-hand side with as many rows as A. A 1-D array returns a
                1-D solution, anything else a Matrix.
            threshold: Pivot magnitude at or below which A is singular

        Returns:
            Solution X

        Raises:
            ValidationError: If threshold is negative
            DimensionError: If A is not square or b has the wrong row count
            SingularMatrixError: If A is singular at threshold
        """
        check_threshold(threshold)
        factors = self._check_square('solve')
        B, is_vector = as_rhs(b)
        return as_solution(lu_solve_cpu(factors, B, threshold), is_vector)
