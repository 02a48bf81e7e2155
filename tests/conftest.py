"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def tall_matrix():
    """4 x 3 matrix of rank 2 (third column is 2 * second - first)."""
    return np.array([
        [1.0, 2.0, 3.0],
        [4.0, 5.0, 6.0],
        [6.0, 5.0, 4.0],
        [3.0, 2.0, 1.0],
    ])


@pytest.fixture
def nonsingular_matrix(rng):
    """Well conditioned random square matrix (diagonally dominant)."""
    n = 5
    A = rng.uniform(-1.0, 1.0, size=(n, n))
    return A + n * np.eye(n)


@pytest.fixture
def singular_matrix():
    """3 x 3 matrix with two identical rows."""
    return np.array([
        [1.0, 2.0, 3.0],
        [4.0, 5.0, 6.0],
        [1.0, 2.0, 3.0],
    ])


@pytest.fixture
def spd_matrix(rng):
    """Symmetric positive definite matrix built as Xᵗ @ X + I."""
    X = rng.standard_normal((8, 4))
    A = X.T @ X + np.eye(4)
    return 0.5 * (A + A.T)


@pytest.fixture
def orthonormal_matrix(rng):
    """Random orthonormal matrix from a QR of a Gaussian matrix."""
    Q, _ = np.linalg.qr(rng.standard_normal((4, 4)))
    return Q
