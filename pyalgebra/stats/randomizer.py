"""
Multivariate Gaussian sample generation.

Samples are mean + L @ z where covariance = L @ Lᵗ is the Cholesky
factorization and z is a vector of independent standard normal draws.
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import DimensionError, InvalidCovarianceMatrixError
from pyalgebra.core.validation import check_array, check_1d, check_finite, check_positive_int
from pyalgebra.matrix import Matrix, as_matrix
from pyalgebra.decomposition import CholeskyDecomposer


class MultivariateGaussianRandomizer:
    """
    Random vectors drawn from N(mean, covariance).

    Args:
        mean: Mean vector (defaults to [0.0])
        covariance: Symmetric positive definite covariance (defaults to
            the 1x1 identity)
        rng: numpy Generator; a fresh default_rng() if None

    Raises:
        DimensionError: If mean and covariance sizes differ
        InvalidCovarianceMatrixError: If covariance is not SPD

    Examples:
        >>> randomizer = MultivariateGaussianRandomizer(
        ...     [1.0, 2.0], [[1.0, 0.0], [0.0, 1.0]], rng=np.random.default_rng(0))
        >>> randomizer.next().shape
        (2,)
    """

    def __init__(
        self,
        mean: ArrayLike | None = None,
        covariance: Matrix | ArrayLike | None = None,
        rng: np.random.Generator | None = None
    ):
        self._rng = rng if rng is not None else np.random.default_rng()
        if mean is None:
            mean = np.zeros(1)
        if covariance is None:
            covariance = Matrix.identity(1, 1)
        self.set_mean_and_covariance(mean, covariance)

    @property
    def mean(self) -> NDArray[np.floating[Any]]:
        return self._mean.copy()

    @property
    def covariance(self) -> Matrix:
        return self._cov.copy()

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    @rng.setter
    def rng(self, value: np.random.Generator) -> None:
        self._rng = value

    def set_mean_and_covariance(
        self,
        mean: ArrayLike,
        covariance: Matrix | ArrayLike
    ) -> None:
        """
        Replace the distribution parameters.

        Raises:
            DimensionError: If covariance is not square or its size differs
                from the mean length
            InvalidCovarianceMatrixError: If covariance is not SPD
        """
        mu = check_array(mean, 'mean')
        check_1d(mu, 'mean')
        check_finite(mu, 'mean')
        cov = as_matrix(covariance, 'covariance')

        n = mu.shape[0]
        if cov.rows != n or cov.columns != n:
            raise DimensionError(
                f"covariance: expected {n}x{n} to match mean, got {cov.rows}x{cov.columns}"
            )

        decomposer = CholeskyDecomposer(cov)
        decomposer.decompose()
        if not decomposer.is_spd():
            raise InvalidCovarianceMatrixError(
                "covariance: must be symmetric positive definite"
            )

        self._mean = mu.copy()
        self._cov = cov.copy()
        self._L = decomposer.get_l().to_numpy()

    def next(self) -> NDArray[np.floating[Any]]:
        """One sample vector."""
        z = self._rng.standard_normal(self._mean.shape[0])
        return self._mean + self._L @ z

    def sample(self, size: int) -> NDArray[np.floating[Any]]:
        """
        Several independent samples.

        Returns:
            Array of shape (size, len(mean)), one sample per row
        """
        check_positive_int(size, 'size')
        Z = self._rng.standard_normal((size, self._mean.shape[0]))
        return self._mean + Z @ self._L.T

    def __repr__(self) -> str:
        return f"MultivariateGaussianRandomizer(dims={self._mean.shape[0]})"
