"""
Dense matrix storage.

Public API:
    Matrix: Column-major dense matrix with in-place and return-new arithmetic
    as_matrix: Convert array-likes to Matrix at API boundaries
    DEFAULT_USE_COLUMN_ORDER: Default linear ordering for flat arrays
"""

from pyalgebra.matrix.matrix import Matrix, as_matrix, DEFAULT_USE_COLUMN_ORDER

__all__ = [
    "Matrix",
    "as_matrix",
    "DEFAULT_USE_COLUMN_ORDER",
]
