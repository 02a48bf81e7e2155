"""
Cholesky decomposition of symmetric positive definite matrices.

Decomposing a matrix that is not SPD is not an error: the outcome is
reported through is_spd(), which the statistics layer uses to validate
covariance matrices. Only solve() refuses non-SPD input.
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.result import Result
from pyalgebra.core.compute.timing import Timer
from pyalgebra.core.compute.linalg.cholesky import (
    CholeskyResult,
    cholesky_cpu,
    cholesky_solve_cpu,
)
from pyalgebra.decomposition._base import (
    Decomposer,
    DecomposerType,
    as_rhs,
    as_solution,
)
from pyalgebra.matrix import Matrix


class CholeskyDecomposer(Decomposer[CholeskyResult]):
    """
    Cholesky decomposition A = L @ Lᵗ (square input only).

    Examples:
        >>> decomposer = CholeskyDecomposer(Matrix.from_numpy([[4., 2.], [2., 3.]]))
        >>> _ = decomposer.decompose()
        >>> decomposer.is_spd()
        True
    """

    @property
    def decomposer_type(self) -> DecomposerType:
        return DecomposerType.CHOLESKY

    def _decompose(self, A: NDArray[np.floating[Any]]) -> Result[CholeskyResult]:
        timer = Timer()
        timer.start()

        with timer.section('factorization'):
            factors = cholesky_cpu(A)

        timer.stop()

        warnings: tuple[str, ...] = ()
        if not factors.is_spd:
            warnings = ("matrix is not symmetric positive definite",)

        return Result(
            params=factors,
            info={'method': 'cholesky', 'shape': A.shape, 'is_spd': factors.is_spd},
            timing=timer.result(),
            backend_name='cpu_cholesky',
            warnings=warnings,
        )

    def is_spd(self) -> bool:
        """Whether the decomposed matrix is symmetric positive definite."""
        return self._factors().is_spd

    def get_l(self) -> Matrix:
        """Lower triangular factor."""
        return Matrix.from_numpy(self._factors().L)

    def get_r(self) -> Matrix:
        """Upper triangular factor R = Lᵗ, so that A = Rᵗ @ R."""
        return Matrix.from_numpy(self._factors().L.T)

    def solve(self, b: Matrix | ArrayLike) -> Matrix | NDArray[np.floating[Any]]:
        """
        Solve A @ X = b.

        Raises:
            DimensionError: If b has the wrong row count
            NotPositiveDefiniteError: If A is not symmetric positive definite
        """
        factors = self._factors()
        B, is_vector = as_rhs(b)
        return as_solution(cholesky_solve_cpu(factors, B), is_vector)
