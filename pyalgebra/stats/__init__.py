"""
Multivariate normal statistics on top of the decomposition layer.

Public API:
    MultivariateNormalDist: Density, CDF, inverse CDF, Mahalanobis
        distance and first-order covariance propagation
    JacobianEvaluator: Protocol for functions propagated through a
        distribution
    MultivariateGaussianRandomizer: Sampling via the Cholesky factor
"""

from pyalgebra.stats.normal import MultivariateNormalDist, JacobianEvaluator
from pyalgebra.stats.randomizer import MultivariateGaussianRandomizer

__all__ = [
    "MultivariateNormalDist",
    "JacobianEvaluator",
    "MultivariateGaussianRandomizer",
]
