"""
QR decomposition through Householder reflections.

One kernel serves the full, economy and RQ decomposers. The factorization
is kept in compact form: reflector vectors on and below the diagonal, the
strictly upper part of R above it, and R's diagonal stored separately.
Q and R are assembled on request.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import RankDeficientMatrixError, DimensionError


@dataclass(frozen=True)
class HouseholderResult:
    """
    Compact Householder QR factorization.

    Attributes:
        qr: Compact storage (m x n). Column k below and on the diagonal holds
            the k-th reflector vector; strictly above the diagonal holds R.
        r_diag: Diagonal of R (length n)
    """
    qr: NDArray[np.floating[Any]]
    r_diag: NDArray[np.floating[Any]]

    @property
    def shape(self) -> tuple[int, int]:
        return self.qr.shape

    def rank(self, threshold: float) -> int:
        """Number of R diagonal entries with magnitude above threshold."""
        return int(np.sum(np.abs(self.r_diag) > threshold))

    def is_full_rank(self, threshold: float) -> bool:
        return bool(np.all(np.abs(self.r_diag) > threshold))


def householder_qr_cpu(A: NDArray[np.floating[Any]]) -> HouseholderResult:
    """
    Compute the compact Householder QR factorization of A.

    Columns beyond the row count (m < n) produce zero reflectors, so any
    shape is accepted here; callers decide which shapes are meaningful.

    Args:
        A: Matrix to decompose (m x n)

    Returns:
        HouseholderResult in compact form
    """
    qr = np.array(A, dtype=np.float64, order='F', copy=True)
    m, n = qr.shape
    r_diag = np.zeros(n)

    for k in range(n):
        v = qr[k:, k]
        nrm = float(np.linalg.norm(v))

        if nrm != 0.0:
            # Reflect onto -sign(a_kk) * e_k to avoid cancellation
            if qr[k, k] < 0:
                nrm = -nrm
            v /= nrm
            qr[k, k] += 1.0

            s = -(v @ qr[k:, k + 1:]) / qr[k, k]
            qr[k:, k + 1:] += np.outer(v, s)

        r_diag[k] = -nrm

    return HouseholderResult(qr=qr, r_diag=r_diag)


def householder_vectors(result: HouseholderResult) -> NDArray[np.floating[Any]]:
    """Reflector vectors as a lower trapezoidal matrix (m x n)."""
    return np.tril(result.qr)


def householder_r(result: HouseholderResult, economy: bool) -> NDArray[np.floating[Any]]:
    """
    Assemble R.

    Args:
        result: Compact factorization with m >= n
        economy: If True return the n x n triangle, else the m x n matrix
            padded with zero rows
    """
    m, n = result.shape
    R = np.triu(result.qr[:n, :], 1)
    R[np.diag_indices(n)] = result.r_diag
    if economy:
        return R

    full = np.zeros((m, n))
    full[:n, :] = R
    return full


def householder_q(result: HouseholderResult, economy: bool) -> NDArray[np.floating[Any]]:
    """
    Assemble Q by applying the reflectors to the identity in reverse order.

    Args:
        result: Compact factorization with m >= n
        economy: If True return the m x n matrix with orthonormal columns,
            else the full m x m orthogonal matrix
    """
    m, n = result.shape
    qr = result.qr
    Q = np.eye(m, n if economy else m)

    for k in range(n - 1, -1, -1):
        if qr[k, k] != 0.0:
            v = qr[k:, k]
            s = -(v @ Q[k:, k:]) / qr[k, k]
            Q[k:, k:] += np.outer(v, s)

    return Q


def householder_solve_cpu(
    result: HouseholderResult,
    B: NDArray[np.floating[Any]],
    threshold: float
) -> NDArray[np.floating[Any]]:
    """
    Least squares solve of A @ X = B from a compact factorization.

    Computes X = R⁻¹ (Qᵗ B)[:n]. For square A this is the exact solution.

    Args:
        result: Compact factorization of A (m x n), m >= n
        B: Right-hand side (m x k)
        threshold: R diagonal magnitude at or below which A is rank deficient

    Returns:
        Solution X (n x k)

    Raises:
        DimensionError: If B row count differs from A
        RankDeficientMatrixError: If A is rank deficient at threshold
    """
    m, n = result.shape
    if B.shape[0] != m:
        raise DimensionError(f"b: expected {m} rows, got {B.shape[0]}")

    if not result.is_full_rank(threshold):
        rank = result.rank(threshold)
        raise RankDeficientMatrixError(
            f"Matrix is rank deficient at threshold {threshold}: "
            f"rank={rank}, expected={n}",
            matrix_name='A',
            rank=rank,
            expected_rank=n
        )

    qr = result.qr
    X = np.array(B, dtype=np.float64, copy=True)

    # X <- Qᵗ B
    for k in range(n):
        v = qr[k:, k]
        s = -(v @ X[k:, :]) / qr[k, k]
        X[k:, :] += np.outer(v, s)

    R = householder_r(result, economy=True)
    return solve_triangular(R, X[:n, :], lower=False)
