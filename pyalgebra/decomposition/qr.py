"""
QR decomposition through Householder reflections.

QRDecomposer yields the full factorization (Q: rows x rows orthogonal,
R: rows x columns upper triangular). EconomyQRDecomposer yields the reduced
one (Q: rows x columns with orthonormal columns, R: columns x columns).
Both share the same compact kernel and support least squares solves.
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.result import Result
from pyalgebra.core.exceptions import DimensionError
from pyalgebra.core.validation import check_threshold
from pyalgebra.core.compute.timing import Timer
from pyalgebra.core.compute.tolerances import DEFAULT_ROUND_ERROR
from pyalgebra.core.compute.linalg.householder import (
    HouseholderResult,
    householder_qr_cpu,
    householder_q,
    householder_r,
    householder_vectors,
    householder_solve_cpu,
)
from pyalgebra.decomposition._base import (
    Decomposer,
    DecomposerType,
    as_rhs,
    as_solution,
)
from pyalgebra.matrix import Matrix


class _HouseholderDecomposer(Decomposer[HouseholderResult]):
    """Common machinery of the full and economy QR decomposers."""

    _economy: bool = False

    def _check_shape(self, A: NDArray[np.floating[Any]]) -> None:
        """Reject shapes this variant cannot decompose."""

    def _decompose(self, A: NDArray[np.floating[Any]]) -> Result[HouseholderResult]:
        self._check_shape(A)
        m, n = A.shape

        timer = Timer()
        timer.start()

        with timer.section('householder'):
            factors = householder_qr_cpu(A)

        timer.stop()

        rank = factors.rank(DEFAULT_ROUND_ERROR)
        warnings: tuple[str, ...] = ()
        if rank < min(m, n):
            warnings = (
                f"matrix is rank deficient at threshold {DEFAULT_ROUND_ERROR}: "
                f"rank={rank}, expected={min(m, n)}",
            )

        info: dict[str, Any] = {
            'method': 'economy_qr' if self._economy else 'qr',
            'shape': (m, n),
            'rank': rank,
        }

        return Result(
            params=factors,
            info=info,
            timing=timer.result(),
            backend_name='cpu_householder_qr',
            warnings=warnings,
        )

    def _tall_factors(self, operation: str) -> HouseholderResult:
        factors = self._factors()
        m, n = factors.shape
        if m < n:
            raise DimensionError(
                f"{operation} requires rows >= columns, got {m}x{n}"
            )
        return factors

    def get_q(self) -> Matrix:
        """Orthogonal factor."""
        return Matrix.from_numpy(
            householder_q(self._tall_factors('get_q'), economy=self._economy)
        )

    def get_r(self) -> Matrix:
        """Upper triangular factor."""
        return Matrix.from_numpy(
            householder_r(self._tall_factors('get_r'), economy=self._economy)
        )

    def get_h(self) -> Matrix:
        """Householder vectors as a lower trapezoidal matrix (rows x columns)."""
        return Matrix.from_numpy(householder_vectors(self._factors()))

    def is_full_rank(self, threshold: float = DEFAULT_ROUND_ERROR) -> bool:
        """
        True if every diagonal entry of R has magnitude above threshold.

        Raises:
            ValidationError: If threshold is negative
        """
        check_threshold(threshold)
        return self._tall_factors('is_full_rank').is_full_rank(threshold)

    def solve(
        self,
        b: Matrix | ArrayLike,
        threshold: float = DEFAULT_ROUND_ERROR
    ) -> Matrix | NDArray[np.floating[Any]]:
        """
        Least squares solution of A @ X = b.

        For square A this is the exact solution; for rows > columns it
        minimizes ||A @ X - b||.

        Args:
            b: Right-hand side with as many rows as A. A 1-D array returns a
                1-D solution, anything else a Matrix.
            threshold: R diagonal magnitude at or below which A is rank
                deficient

        Returns:
            Solution X (columns x b.columns)

        Raises:
            ValidationError: If threshold is negative
            DimensionError: If rows < columns or b has the wrong row count
            RankDeficientMatrixError: If A is rank deficient at threshold
        """
        check_threshold(threshold)
        factors = self._tall_factors('solve')
        B, is_vector = as_rhs(b)
        return as_solution(householder_solve_cpu(factors, B, threshold), is_vector)


class QRDecomposer(_HouseholderDecomposer):
    """
    Full QR decomposition (rows >= columns).

    Examples:
        >>> m = Matrix.from_numpy([[1., 2., 3.], [4., 5., 6.], [6., 5., 4.], [3., 2., 1.]])
        >>> decomposer = QRDecomposer(m)
        >>> _ = decomposer.decompose()
        >>> q, r = decomposer.get_q(), decomposer.get_r()
        >>> q.multiply_and_return_new(r).equals(m, 1e-6)
        True
    """

    _economy = False

    @property
    def decomposer_type(self) -> DecomposerType:
        return DecomposerType.QR

    def _check_shape(self, A: NDArray[np.floating[Any]]) -> None:
        m, n = A.shape
        if m < n:
            raise DimensionError(
                f"QR decomposition requires rows >= columns, got {m}x{n}"
            )


class EconomyQRDecomposer(_HouseholderDecomposer):
    """
    Economy (reduced) QR decomposition.

    Any shape can be decomposed, but Q, R, the rank test and solve are only
    defined for rows >= columns.
    """

    _economy = True

    @property
    def decomposer_type(self) -> DecomposerType:
        return DecomposerType.ECONOMY_QR
