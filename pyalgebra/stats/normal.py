"""
Multivariate normal distribution.

Consumes the decomposition layer in three ways:
- CholeskyDecomposer.is_spd() validates covariance matrices
- utils.det and utils.inverse give the density and Mahalanobis distance
- SingularValueDecomposer.get_v() and get_singular_values() give a basis of
  independent directions along which the covariance is diagonal, which the
  CDF and inverse CDF factor over

References:
    Bishop, C. M. (2006). Pattern Recognition and Machine Learning,
    section 2.3.
"""

from __future__ import annotations

import warnings
from typing import Any, Protocol, runtime_checkable
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import ndtr, ndtri

from pyalgebra.core.exceptions import (
    DimensionError,
    InvalidCovarianceMatrixError,
    NotReadyError,
    ValidationError,
)
from pyalgebra.core.validation import (
    check_array,
    check_1d,
    check_finite,
    check_length,
    check_probability,
)
from pyalgebra.matrix import Matrix, as_matrix
from pyalgebra.decomposition import CholeskyDecomposer, SingularValueDecomposer
from pyalgebra import utils


@runtime_checkable
class JacobianEvaluator(Protocol):
    """
    Differentiable function used for covariance propagation.

    evaluate(x) returns the function value y (length M) and its Jacobian
    dy/dx (M x N) at x (length N).
    """

    def evaluate(
        self,
        x: NDArray[np.floating[Any]]
    ) -> tuple[NDArray[np.floating[Any]], Matrix | NDArray[np.floating[Any]]]:
        ...


def _as_vector(value: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    arr = check_array(value, name)
    check_1d(arr, name)
    if arr.shape[0] == 0:
        raise ValidationError(f"{name}: must contain at least one element")
    check_finite(arr, name)
    return arr.copy()


def _is_spd(covariance: Matrix) -> bool:
    if covariance.rows != covariance.columns:
        return False
    decomposer = CholeskyDecomposer(covariance)
    decomposer.decompose()
    return decomposer.is_spd()


class MultivariateNormalDist:
    """
    Multivariate normal distribution N(mean, covariance).

    Args:
        mean: Mean vector. If omitted together with covariance, the
            distribution is standard normal in `dims` dimensions.
        covariance: Covariance matrix (dims x dims)
        dims: Dimensionality when mean and covariance are omitted
        validate: Whether to check that covariance is symmetric positive
            definite

    Raises:
        ValidationError: If dims is not positive or only one of mean and
            covariance is given
        InvalidCovarianceMatrixError: If validation is requested and the
            covariance is not SPD

    Examples:
        >>> dist = MultivariateNormalDist([0.0, 0.0], [[1.0, 0.0], [0.0, 4.0]])
        >>> round(dist.cdf([0.0, 0.0]), 6)
        0.25
    """

    def __init__(
        self,
        mean: ArrayLike | None = None,
        covariance: Matrix | ArrayLike | None = None,
        dims: int = 1,
        validate: bool = True
    ):
        self._cov_basis: NDArray[np.floating[Any]] | None = None
        self._variances: NDArray[np.floating[Any]] | None = None

        if mean is None and covariance is None:
            if dims <= 0:
                raise ValidationError(f"dims: must be greater than zero, got {dims}")
            self._mean = np.zeros(dims)
            self._cov = Matrix.identity(dims, dims)
        elif mean is None or covariance is None:
            raise ValidationError("mean and covariance must be provided together")
        else:
            self.set_mean_and_covariance(mean, covariance, validate)

    # === Parameters ===

    @property
    def mean(self) -> NDArray[np.floating[Any]]:
        return self._mean.copy()

    @mean.setter
    def mean(self, value: ArrayLike) -> None:
        self._mean = _as_vector(value, 'mean')

    @property
    def covariance(self) -> Matrix:
        return self._cov.copy()

    @covariance.setter
    def covariance(self, value: Matrix | ArrayLike) -> None:
        self.set_covariance(value)

    def set_covariance(self, covariance: Matrix | ArrayLike, validate: bool = True) -> None:
        """
        Set the covariance matrix.

        Raises:
            InvalidCovarianceMatrixError: If covariance is not square, or if
                validate is True and it is not symmetric positive definite
        """
        cov = as_matrix(covariance, 'covariance')
        if cov.rows != cov.columns:
            raise InvalidCovarianceMatrixError(
                f"covariance: must be square, got {cov.rows}x{cov.columns}"
            )
        if validate and not _is_spd(cov):
            raise InvalidCovarianceMatrixError(
                "covariance: must be symmetric positive definite (non singular)"
            )
        self._cov = cov.copy()
        self._cov_basis = None
        self._variances = None

    def set_mean_and_covariance(
        self,
        mean: ArrayLike,
        covariance: Matrix | ArrayLike,
        validate: bool = True
    ) -> None:
        """
        Set both parameters at once.

        Raises:
            DimensionError: If the mean length differs from the covariance size
            InvalidCovarianceMatrixError: If the covariance is invalid
        """
        mu = _as_vector(mean, 'mean')
        cov = as_matrix(covariance, 'covariance')
        if mu.shape[0] != cov.rows:
            raise DimensionError(
                f"mean: length {mu.shape[0]} differs from covariance rows {cov.rows}"
            )
        self.set_covariance(cov, validate)
        self._mean = mu

    @staticmethod
    def is_valid_covariance(covariance: Matrix | ArrayLike) -> bool:
        """True if covariance is square, symmetric and positive definite."""
        return _is_spd(as_matrix(covariance, 'covariance'))

    @property
    def is_ready(self) -> bool:
        return self._mean.shape[0] == self._cov.rows

    @property
    def covariance_basis(self) -> Matrix | None:
        """Orthonormal directions of independent variation, once processed."""
        return None if self._cov_basis is None else Matrix.from_numpy(self._cov_basis)

    @property
    def variances(self) -> NDArray[np.floating[Any]] | None:
        """Variance along each covariance_basis direction, once processed."""
        return None if self._variances is None else self._variances.copy()

    def _check_point(self, x: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
        if not self.is_ready:
            raise NotReadyError("mean and covariance sizes do not match")
        point = _as_vector(x, name)
        check_length(point, self._mean.shape[0], name)
        return point

    # === Density ===

    def p(self, x: ArrayLike) -> float:
        """
        Probability density at x.

        Raises:
            NotReadyError: If mean and covariance sizes differ
            DimensionError: If x has the wrong length
            RankDeficientMatrixError: If the covariance is singular
        """
        point = self._check_point(x, 'x')
        k = point.shape[0]

        det_cov = utils.det(self._cov)
        if det_cov <= 0.0:
            warnings.warn(
                f"Covariance determinant is {det_cov}; density is undefined. "
                f"Was the covariance set without validation?",
                RuntimeWarning,
                stacklevel=2,
            )
            return float('nan')

        factor = 1.0 / np.sqrt((2.0 * np.pi) ** k * det_cov)
        return float(factor * np.exp(-0.5 * self.squared_mahalanobis_distance(point)))

    def squared_mahalanobis_distance(self, x: ArrayLike) -> float:
        """(x - mean)ᵗ @ covariance⁻¹ @ (x - mean)."""
        point = self._check_point(x, 'x')
        diff = point - self._mean
        inv_cov = utils.inverse(self._cov).to_numpy()
        return float(diff @ inv_cov @ diff)

    def mahalanobis_distance(self, x: ArrayLike) -> float:
        return float(np.sqrt(self.squared_mahalanobis_distance(x)))

    # === Independent basis ===

    def process_covariance(self) -> None:
        """
        Diagonalize the covariance once.

        For symmetric positive definite covariance the SVD coincides with the
        eigendecomposition, so covariance = V @ diag(w) @ Vᵗ: the columns of V
        are independent directions and w the variances along them.

        Each direction is oriented so that its largest magnitude component
        is positive; for a diagonal covariance the basis is then made of the
        coordinate axes.
        """
        if self._cov_basis is not None and self._variances is not None:
            return
        decomposer = SingularValueDecomposer(self._cov)
        decomposer.decompose()
        basis = decomposer.get_v().to_numpy()

        dominant = basis[np.argmax(np.abs(basis), axis=0), np.arange(basis.shape[1])]
        basis[:, dominant < 0.0] *= -1.0

        self._cov_basis = basis
        self._variances = decomposer.get_singular_values()

    def cdf(self, x: ArrayLike) -> float:
        """
        Cumulative probability at x, evaluated along the independent basis.

        Returns:
            Product of the univariate normal CDFs of the projections of x
        """
        point = self._check_point(x, 'x')
        self.process_covariance()

        coord_x = point @ self._cov_basis
        coord_mu = self._mean @ self._cov_basis
        z = (coord_x - coord_mu) / np.sqrt(self._variances)
        return float(np.prod(ndtr(z)))

    @staticmethod
    def joint_probability(ps: ArrayLike) -> float:
        """Product of independent probabilities."""
        return float(np.prod(check_array(ps, 'ps')))

    def invcdf(self, p: float | ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Point whose cumulative probability along each basis direction is p.

        Args:
            p: Either one probability per basis direction, or a scalar joint
                probability in (0, 1) spread evenly as p**(1/k) over all k
                directions

        Returns:
            Point x (length k)

        Raises:
            ValidationError: If a probability is outside its valid range
            DimensionError: If p has the wrong length
        """
        if not self.is_ready:
            raise NotReadyError("mean and covariance sizes do not match")
        k = self._mean.shape[0]

        if np.ndim(p) == 0:
            joint = float(p)
            if not 0.0 < joint < 1.0:
                raise ValidationError(
                    f"p: joint probability must be between 0.0 and 1.0 exclusive, got {joint}"
                )
            probs = np.full(k, joint ** (1.0 / k))
        else:
            probs = check_array(p, 'p')
            check_1d(probs, 'p')
            check_length(probs, k, 'p')
            for i, value in enumerate(probs):
                check_probability(float(value), f"p[{i}]")

        self.process_covariance()
        coords = np.sqrt(self._variances) * ndtri(probs)
        return self._mean + self._cov_basis @ coords

    # === Propagation ===

    @staticmethod
    def propagate(
        evaluator: JacobianEvaluator,
        mean: ArrayLike,
        covariance: Matrix | ArrayLike
    ) -> MultivariateNormalDist:
        """
        First-order propagation of N(mean, covariance) through a function.

        With y, J = evaluator.evaluate(mean), the result is
        N(y, J @ covariance @ Jᵗ), symmetrized and accepted without SPD
        validation.

        Raises:
            DimensionError: If the Jacobian shape does not match
        """
        mu = _as_vector(mean, 'mean')
        cov = as_matrix(covariance, 'covariance').to_numpy()
        if cov.shape != (mu.shape[0], mu.shape[0]):
            raise DimensionError(
                f"covariance: expected {mu.shape[0]}x{mu.shape[0]}, got {cov.shape[0]}x{cov.shape[1]}"
            )

        y, jacobian = evaluator.evaluate(mu.copy())
        y = _as_vector(y, 'y')
        J = as_matrix(jacobian, 'jacobian').to_numpy()
        if J.shape != (y.shape[0], mu.shape[0]):
            raise DimensionError(
                f"jacobian: expected {y.shape[0]}x{mu.shape[0]}, got {J.shape[0]}x{J.shape[1]}"
            )

        propagated = Matrix.from_numpy(J @ cov @ J.T)
        propagated.symmetrize()

        result = MultivariateNormalDist(dims=y.shape[0])
        result.set_mean_and_covariance(y, propagated, validate=False)
        return result

    def propagate_this_distribution(self, evaluator: JacobianEvaluator) -> MultivariateNormalDist:
        return MultivariateNormalDist.propagate(evaluator, self._mean, self._cov)

    def __repr__(self) -> str:
        return f"MultivariateNormalDist(dims={self._mean.shape[0]})"
