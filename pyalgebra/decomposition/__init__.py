"""
Matrix decomposers.

Public API:
    Decomposer: Shared state machine (input, lock, availability)
    DecomposerType: LU, QR, ECONOMY_QR, RQ, CHOLESKY, SINGULAR_VALUE
    LUDecomposer: Gaussian elimination with partial pivoting
    QRDecomposer, EconomyQRDecomposer: Householder QR, full and reduced
    RQDecomposer: RQ decomposition for rows <= columns
    CholeskyDecomposer: L @ Lᵗ factorization with non-throwing SPD test
    SingularValueDecomposer: Golub-Reinsch SVD
    create_decomposer: Decomposer instance for a DecomposerType
"""

from pyalgebra.decomposition._base import Decomposer, DecomposerState, DecomposerType
from pyalgebra.decomposition.lu import LUDecomposer
from pyalgebra.decomposition.qr import QRDecomposer, EconomyQRDecomposer
from pyalgebra.decomposition.rq import RQDecomposer, RQFactors
from pyalgebra.decomposition.cholesky import CholeskyDecomposer
from pyalgebra.decomposition.svd import SingularValueDecomposer


_DECOMPOSER_CLASSES: dict[DecomposerType, type[Decomposer]] = {
    DecomposerType.LU: LUDecomposer,
    DecomposerType.QR: QRDecomposer,
    DecomposerType.ECONOMY_QR: EconomyQRDecomposer,
    DecomposerType.RQ: RQDecomposer,
    DecomposerType.CHOLESKY: CholeskyDecomposer,
    DecomposerType.SINGULAR_VALUE: SingularValueDecomposer,
}


def create_decomposer(decomposer_type: DecomposerType, input_matrix=None) -> Decomposer:
    """Decomposer instance for the given type, optionally with an input matrix."""
    return _DECOMPOSER_CLASSES[decomposer_type](input_matrix)


__all__ = [
    "Decomposer",
    "DecomposerState",
    "DecomposerType",
    "LUDecomposer",
    "QRDecomposer",
    "EconomyQRDecomposer",
    "RQDecomposer",
    "RQFactors",
    "CholeskyDecomposer",
    "SingularValueDecomposer",
    "create_decomposer",
]
