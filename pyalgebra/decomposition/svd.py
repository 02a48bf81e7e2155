"""
Singular value decomposition.

Computes A = U @ diag(w) @ Vᵗ for any rectangular input with the
Golub-Reinsch algorithm. From the singular values the decomposer derives
rank, nullity, condition number, 2-norm and orthonormal bases of the range
and null space, and solves possibly rank-deficient or non-square systems
in the least squares, minimum norm sense.

Singular values at or below a threshold are treated as zero. Unless one
is supplied, the threshold is

    0.5 * sqrt(rows + columns + 1) * w_max * eps
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.result import Result
from pyalgebra.core.exceptions import (
    DimensionError,
    LockedError,
    NotAvailableError,
)
from pyalgebra.core.validation import check_threshold, check_positive_int
from pyalgebra.core.compute.timing import Timer
from pyalgebra.core.compute.tolerances import DEFAULT_MAX_ITERATIONS
from pyalgebra.core.compute.precision import svd_default_threshold
from pyalgebra.core.compute.linalg.svd import SVDResult, golub_reinsch_cpu
from pyalgebra.decomposition._base import (
    Decomposer,
    DecomposerType,
    as_rhs,
    as_solution,
)
from pyalgebra.matrix import Matrix


class SingularValueDecomposer(Decomposer[SVDResult]):
    """
    Golub-Reinsch singular value decomposition.

    Args:
        input_matrix: Optional Matrix (or 2-D array-like) to decompose
        max_iterations: Implicit-shift QR sweeps allowed per singular value

    Raises:
        ValidationError: If max_iterations is not a positive integer

    Examples:
        >>> decomposer = SingularValueDecomposer(Matrix.from_numpy([[3., 0.], [0., 4.]]))
        >>> _ = decomposer.decompose()
        >>> decomposer.get_singular_values()
        array([4., 3.])
    """

    def __init__(
        self,
        input_matrix: Matrix | ArrayLike | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS
    ):
        check_positive_int(max_iterations, 'max_iterations')
        super().__init__(input_matrix)
        self._max_iterations = max_iterations

    @property
    def decomposer_type(self) -> DecomposerType:
        return DecomposerType.SINGULAR_VALUE

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        if self.is_locked:
            raise LockedError(
                "SingularValueDecomposer: cannot change max_iterations while decomposing"
            )
        check_positive_int(value, 'max_iterations')
        self._max_iterations = value

    def _decompose(self, A: NDArray[np.floating[Any]]) -> Result[SVDResult]:
        m, n = A.shape

        timer = Timer()
        timer.start()

        with timer.section('golub_reinsch'):
            factors = golub_reinsch_cpu(A, self._max_iterations)

        timer.stop()

        w = factors.singular_values
        threshold = svd_default_threshold(m, n, w[0])
        rank = int(np.sum(w > threshold))

        warnings: tuple[str, ...] = ()
        if rank < min(m, n):
            warnings = (
                f"matrix is rank deficient: rank={rank}, expected={min(m, n)}",
            )

        info: dict[str, Any] = {
            'method': 'svd',
            'shape': (m, n),
            'rank': rank,
            'iterations': factors.iterations,
        }

        return Result(
            params=factors,
            info=info,
            timing=timer.result(),
            backend_name='cpu_golub_reinsch',
            warnings=warnings,
        )

    # === Factors ===

    def get_u(self) -> Matrix:
        """Left singular vectors (rows x columns)."""
        return Matrix.from_numpy(self._factors().U)

    def get_v(self) -> Matrix:
        """Right singular vectors (columns x columns)."""
        return Matrix.from_numpy(self._factors().V)

    def get_w(self) -> Matrix:
        """Singular values as a diagonal matrix (columns x columns)."""
        return Matrix.diagonal(self._factors().singular_values)

    def get_singular_values(self) -> NDArray[np.floating[Any]]:
        """Singular values in descending order."""
        return self._factors().singular_values.copy()

    # === Derived quantities ===

    def get_norm2(self) -> float:
        """Largest singular value."""
        return float(self._factors().singular_values[0])

    def get_condition_number(self) -> float:
        """Ratio of the largest to the smallest singular value (inf if singular)."""
        w = self._factors().singular_values
        if w[-1] == 0.0:
            return float('inf')
        return float(w[0] / w[-1])

    def get_reciprocal_condition_number(self) -> float:
        """Ratio of the smallest to the largest singular value (0 if singular)."""
        w = self._factors().singular_values
        if w[0] <= 0.0 or w[-1] <= 0.0:
            return 0.0
        return float(w[-1] / w[0])

    def get_default_threshold(self) -> float:
        """Singular values at or below this value count as zero by default."""
        factors = self._factors()
        m, n = factors.U.shape
        return float(svd_default_threshold(m, n, factors.singular_values[0]))

    def _threshold(self, threshold: float | None) -> float:
        if threshold is None:
            return self.get_default_threshold()
        check_threshold(threshold)
        return threshold

    def get_rank(self, threshold: float | None = None) -> int:
        """Number of singular values above threshold."""
        tsh = self._threshold(threshold)
        return int(np.sum(self._factors().singular_values > tsh))

    def get_nullity(self, threshold: float | None = None) -> int:
        """Number of singular values at or below threshold."""
        tsh = self._threshold(threshold)
        return int(np.sum(self._factors().singular_values <= tsh))

    def get_range(self, threshold: float | None = None) -> Matrix:
        """
        Orthonormal basis of the range of A (rows x rank).

        Raises:
            NotAvailableError: If the rank is zero
        """
        tsh = self._threshold(threshold)
        factors = self._factors()
        mask = factors.singular_values > tsh
        if not np.any(mask):
            raise NotAvailableError("range is empty: matrix has rank 0")
        return Matrix.from_numpy(factors.U[:, mask])

    def get_nullspace(self, threshold: float | None = None) -> Matrix:
        """
        Orthonormal basis of the null space of A (columns x nullity).

        Raises:
            NotAvailableError: If the nullity is zero
        """
        tsh = self._threshold(threshold)
        factors = self._factors()
        mask = factors.singular_values <= tsh
        if not np.any(mask):
            raise NotAvailableError("null space is empty: matrix has full column rank")
        return Matrix.from_numpy(factors.V[:, mask])

    def solve(
        self,
        b: Matrix | ArrayLike,
        threshold: float | None = None
    ) -> Matrix | NDArray[np.floating[Any]]:
        """
        Pseudo-inverse solution X = V @ diag(1/w) @ Uᵗ @ b.

        Singular values at or below threshold contribute nothing, so
        rank-deficient systems get the minimum norm least squares solution
        instead of an error.

        Args:
            b: Right-hand side with as many rows as A. A 1-D array returns a
                1-D solution, anything else a Matrix.
            threshold: Zero cutoff for singular values (default threshold
                if None)

        Returns:
            Solution X (columns x b.columns)

        Raises:
            ValidationError: If threshold is negative
            DimensionError: If b has the wrong row count
        """
        tsh = self._threshold(threshold)
        factors = self._factors()
        B, is_vector = as_rhs(b)

        m = factors.U.shape[0]
        if B.shape[0] != m:
            raise DimensionError(f"b: expected {m} rows, got {B.shape[0]}")

        w = factors.singular_values
        w_inv = np.zeros_like(w)
        keep = w > tsh
        w_inv[keep] = 1.0 / w[keep]

        X = factors.V @ (w_inv[:, None] * (factors.U.T @ B))
        return as_solution(X, is_vector)
