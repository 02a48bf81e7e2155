"""
Matrix and vector norm computers.

Each NormComputer defines:
- The matrix norm ||M|| of a Matrix (or 2-D array)
- The vector norm ||x|| of a 1-D array
- The 1 x N Jacobian d||x||/dx of the vector norm

Available norms:
- Frobenius: sqrt of the sum of squared entries (Euclidean norm for vectors)
- One: maximum absolute column sum (sum of magnitudes for vectors)
- Infinity: maximum absolute row sum (largest magnitude for vectors)

References:
    Golub, G. H., & Van Loan, C. F. (2013). Matrix Computations (4th ed.),
    section 2.3.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.validation import check_array, check_1d, check_2d
from pyalgebra.core.exceptions import DimensionError
from pyalgebra.matrix import Matrix


class NormType(Enum):
    FROBENIUS = 'frobenius'
    ONE = 'one'
    INFINITY = 'infinity'


DEFAULT_NORM_TYPE = NormType.FROBENIUS


def _as_2d(m: Matrix | ArrayLike) -> NDArray:
    if isinstance(m, Matrix):
        return m.to_numpy()
    arr = check_array(m, 'm')
    check_2d(arr, 'm')
    return arr


def _as_vector(array: ArrayLike) -> NDArray:
    arr = check_array(array, 'array')
    check_1d(arr, 'array')
    if arr.shape[0] == 0:
        raise DimensionError("array: must contain at least one element")
    return arr


# =====================================================================
# Norm computers
# =====================================================================

class NormComputer(ABC):
    """Abstract norm computer, used as a pluggable strategy."""

    @property
    @abstractmethod
    def norm_type(self) -> NormType:
        ...

    @abstractmethod
    def _matrix_norm(self, m: NDArray) -> float:
        ...

    @abstractmethod
    def _vector_norm(self, x: NDArray) -> float:
        ...

    @abstractmethod
    def _vector_jacobian(self, x: NDArray, norm: float) -> NDArray:
        """Gradient of the vector norm at x (length N)."""
        ...

    def get_norm(self, value: Matrix | ArrayLike) -> float:
        """
        Norm of a Matrix, a 2-D array, or a 1-D array.

        1-D input is treated as a vector, not as a column matrix, so the
        one-norm of an array is the sum of magnitudes.
        """
        if not isinstance(value, Matrix):
            arr = check_array(value, 'value')
            if arr.ndim == 1:
                return self._vector_norm(_as_vector(arr))
        return self._matrix_norm(_as_2d(value))

    def get_norm_with_jacobian(self, array: ArrayLike) -> tuple[float, Matrix]:
        """
        Vector norm and its 1 x N Jacobian.

        Returns:
            Tuple (norm, jacobian) with jacobian a 1 x N Matrix
        """
        x = _as_vector(array)
        norm = self._vector_norm(x)
        jacobian = Matrix.new_from_array(self._vector_jacobian(x, norm), column_order=False)
        return norm, jacobian

    @staticmethod
    def create(norm_type: NormType = DEFAULT_NORM_TYPE) -> NormComputer:
        """Norm computer instance for the given type."""
        return _NORM_CLASSES[norm_type]()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class FrobeniusNormComputer(NormComputer):
    """sqrt(sum of squares). For vectors this is the Euclidean norm."""

    @property
    def norm_type(self) -> NormType:
        return NormType.FROBENIUS

    def _matrix_norm(self, m: NDArray) -> float:
        return float(np.sqrt(np.sum(m * m)))

    def _vector_norm(self, x: NDArray) -> float:
        return float(np.sqrt(x @ x))

    def _vector_jacobian(self, x: NDArray, norm: float) -> NDArray:
        # Not differentiable at the origin; report an unbounded slope
        if norm == 0.0:
            return np.full_like(x, np.finfo(np.float64).max)
        return x / norm


class OneNormComputer(NormComputer):
    """Maximum absolute column sum. For vectors, the sum of magnitudes."""

    @property
    def norm_type(self) -> NormType:
        return NormType.ONE

    def _matrix_norm(self, m: NDArray) -> float:
        return float(np.max(np.sum(np.abs(m), axis=0)))

    def _vector_norm(self, x: NDArray) -> float:
        return float(np.sum(np.abs(x)))

    def _vector_jacobian(self, x: NDArray, norm: float) -> NDArray:
        return np.sign(x)


class InfinityNormComputer(NormComputer):
    """Maximum absolute row sum. For vectors, the largest magnitude."""

    @property
    def norm_type(self) -> NormType:
        return NormType.INFINITY

    def _matrix_norm(self, m: NDArray) -> float:
        return float(np.max(np.sum(np.abs(m), axis=1)))

    def _vector_norm(self, x: NDArray) -> float:
        return float(np.max(np.abs(x)))

    def _vector_jacobian(self, x: NDArray, norm: float) -> NDArray:
        jacobian = np.zeros_like(x)
        k = int(np.argmax(np.abs(x)))
        jacobian[k] = np.sign(x[k])
        return jacobian


# =====================================================================
# Norm type → class mapping
# =====================================================================

_NORM_CLASSES: dict[NormType, type[NormComputer]] = {
    NormType.FROBENIUS: FrobeniusNormComputer,
    NormType.ONE: OneNormComputer,
    NormType.INFINITY: InfinityNormComputer,
}
