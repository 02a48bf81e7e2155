"""
Linear algebra kernels for pyalgebra.

Pure functions over NumPy arrays that the stateful decomposers delegate to.

All functions follow these conventions:
    - Inputs are float64 NumPy arrays already validated by the caller
    - Factorizations return a frozen result dataclass
    - Triangular solves go through scipy.linalg.solve_triangular
    - Errors are raised immediately with clear messages

Submodules:
    lu: Gaussian elimination with partial pivoting
    gauss_jordan: Gauss-Jordan elimination with full pivoting
    householder: Householder QR (full, economy, and the basis of RQ)
    cholesky: Cholesky factorization with a non-throwing SPD flag
    svd: Golub-Reinsch singular value decomposition
"""

from pyalgebra.core.compute.linalg.lu import (
    LUResult,
    lu_cpu,
    lu_l,
    lu_pivoted_l,
    lu_u,
    lu_determinant,
    lu_solve_cpu,
)
from pyalgebra.core.compute.linalg.gauss_jordan import (
    GaussJordanResult,
    gauss_jordan_cpu,
)
from pyalgebra.core.compute.linalg.householder import (
    HouseholderResult,
    householder_qr_cpu,
    householder_q,
    householder_r,
    householder_vectors,
    householder_solve_cpu,
)
from pyalgebra.core.compute.linalg.cholesky import (
    CholeskyResult,
    cholesky_cpu,
    cholesky_solve_cpu,
)
from pyalgebra.core.compute.linalg.svd import (
    SVDResult,
    golub_reinsch_cpu,
)

__all__ = [
    # LU
    "LUResult",
    "lu_cpu",
    "lu_l",
    "lu_pivoted_l",
    "lu_u",
    "lu_determinant",
    "lu_solve_cpu",
    # Gauss-Jordan
    "GaussJordanResult",
    "gauss_jordan_cpu",
    # Householder QR
    "HouseholderResult",
    "householder_qr_cpu",
    "householder_q",
    "householder_r",
    "householder_vectors",
    "householder_solve_cpu",
    # Cholesky
    "CholeskyResult",
    "cholesky_cpu",
    "cholesky_solve_cpu",
    # SVD
    "SVDResult",
    "golub_reinsch_cpu",
]
