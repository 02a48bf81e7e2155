"""
PyAlgebra: dense linear algebra for Python.

Matrix storage, decompositions and the numerical utilities built on them,
with every factorization reported through the same Result envelope.

Submodules:
    matrix: Column-major dense Matrix
    decomposition: LU, QR, RQ, Cholesky and singular value decomposers
    norms: Frobenius, one and infinity norm computers
    utils: Stateless helpers (det, inverse, solve, rank, Schur complement,
        dot and cross products with Jacobians)
    stats: Multivariate normal distribution and Gaussian randomizer
"""

__version__ = "0.1.0"

from pyalgebra import matrix
from pyalgebra import decomposition
from pyalgebra import norms
from pyalgebra import utils
from pyalgebra import stats
from pyalgebra.matrix import Matrix

__all__ = [
    "__version__",
    "matrix",
    "decomposition",
    "norms",
    "utils",
    "stats",
    "Matrix",
]
