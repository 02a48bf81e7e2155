"""
RQ decomposition.

For an m x n input with m <= n, computes an upper triangular R (m x n) and
an orthogonal Q (n x n) with A = R @ Q.

With P_k the k x k exchange matrix (ones on the anti-diagonal), the
Householder QR of the n x m matrix (P_m A P_n)ᵗ = Q' R' gives

    A = (P_m R'ᵗ P_n) @ (P_n Q'ᵗ P_n)

and both bracketed factors have the required structure. Multiplying by an
exchange matrix only reverses rows or columns, so no products are formed.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.result import Result
from pyalgebra.core.exceptions import DimensionError
from pyalgebra.core.compute.timing import Timer
from pyalgebra.core.compute.tolerances import DEFAULT_ROUND_ERROR
from pyalgebra.core.compute.linalg.householder import (
    householder_qr_cpu,
    householder_q,
    householder_r,
)
from pyalgebra.decomposition._base import Decomposer, DecomposerType
from pyalgebra.matrix import Matrix


@dataclass(frozen=True)
class RQFactors:
    """
    Factor payload for RQ decomposition.

    Attributes:
        R: Upper triangular factor (m x n); entry (i, j) is zero for j < i + n - m
        Q: Orthogonal factor (n x n)
    """
    R: NDArray[np.floating[Any]]
    Q: NDArray[np.floating[Any]]


class RQDecomposer(Decomposer[RQFactors]):
    """RQ decomposition (rows <= columns)."""

    @property
    def decomposer_type(self) -> DecomposerType:
        return DecomposerType.RQ

    def _decompose(self, A: NDArray[np.floating[Any]]) -> Result[RQFactors]:
        m, n = A.shape
        if m > n:
            raise DimensionError(
                f"RQ decomposition requires rows <= columns, got {m}x{n}"
            )

        timer = Timer()
        timer.start()

        with timer.section('householder'):
            reversed_t = A[::-1, ::-1].T
            qr = householder_qr_cpu(reversed_t)

        with timer.section('assemble'):
            R = householder_r(qr, economy=False).T[::-1, ::-1]
            Q = householder_q(qr, economy=False).T[::-1, ::-1]

        timer.stop()

        rank = qr.rank(DEFAULT_ROUND_ERROR)
        warnings: tuple[str, ...] = ()
        if rank < m:
            warnings = (
                f"matrix is rank deficient at threshold {DEFAULT_ROUND_ERROR}: "
                f"rank={rank}, expected={m}",
            )

        return Result(
            params=RQFactors(R=np.ascontiguousarray(R), Q=np.ascontiguousarray(Q)),
            info={'method': 'rq', 'shape': (m, n), 'rank': rank},
            timing=timer.result(),
            backend_name='cpu_householder_rq',
            warnings=warnings,
        )

    def get_r(self) -> Matrix:
        """Upper triangular factor (rows x columns)."""
        return Matrix.from_numpy(self._factors().R)

    def get_q(self) -> Matrix:
        """Orthogonal factor (columns x columns)."""
        return Matrix.from_numpy(self._factors().Q)
