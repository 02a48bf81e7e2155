"""
Tests for the norm computers.

Validates:
    - Matrix norms against numpy.linalg.norm
    - Vector norms for 1-D input
    - Jacobians of the vector norms (including the zero vector)
    - Factory dispatch by NormType
"""

import numpy as np
import pytest

from pyalgebra.core.exceptions import DimensionError
from pyalgebra.matrix import Matrix
from pyalgebra.norms import (
    DEFAULT_NORM_TYPE,
    FrobeniusNormComputer,
    InfinityNormComputer,
    NormComputer,
    NormType,
    OneNormComputer,
)


NORM_ORDS = [
    (FrobeniusNormComputer, 'fro'),
    (OneNormComputer, 1),
    (InfinityNormComputer, np.inf),
]


# ═══════════════════════════════════════════════════════════════════════
# Matrix and vector norms
# ═══════════════════════════════════════════════════════════════════════


class TestMatrixNorms:

    @pytest.mark.parametrize("computer_cls, ord_", NORM_ORDS)
    def test_matches_numpy(self, rng, computer_cls, ord_):
        A = rng.standard_normal((5, 3))
        expected = np.linalg.norm(A, ord_)
        assert computer_cls().get_norm(Matrix.from_numpy(A)) == pytest.approx(expected)
        assert computer_cls().get_norm(A) == pytest.approx(expected)

    def test_identity(self):
        eye = Matrix.identity(3, 3)
        assert FrobeniusNormComputer().get_norm(eye) == pytest.approx(np.sqrt(3.0))
        assert OneNormComputer().get_norm(eye) == 1.0
        assert InfinityNormComputer().get_norm(eye) == 1.0


class TestVectorNorms:

    def test_values(self):
        x = np.array([3.0, -4.0, 1.0])
        assert FrobeniusNormComputer().get_norm(x) == pytest.approx(np.sqrt(26.0))
        assert OneNormComputer().get_norm(x) == 8.0
        assert InfinityNormComputer().get_norm(x) == 4.0

    def test_column_matrix_uses_matrix_norm(self):
        x = Matrix.from_numpy([3.0, -4.0])
        # one-norm of a column is the column sum; inf-norm is the largest row
        assert OneNormComputer().get_norm(x) == 7.0
        assert InfinityNormComputer().get_norm(x) == 4.0

    def test_empty_vector(self):
        with pytest.raises(DimensionError):
            OneNormComputer().get_norm(np.array([]))


# ═══════════════════════════════════════════════════════════════════════
# Jacobians
# ═══════════════════════════════════════════════════════════════════════


class TestJacobians:

    def test_frobenius(self):
        norm, jac = FrobeniusNormComputer().get_norm_with_jacobian([3.0, 4.0])
        assert norm == pytest.approx(5.0)
        assert jac.shape == (1, 2)
        np.testing.assert_allclose(jac.to_numpy(), [[0.6, 0.8]])

    def test_frobenius_at_zero(self):
        norm, jac = FrobeniusNormComputer().get_norm_with_jacobian([0.0, 0.0])
        assert norm == 0.0
        assert np.all(jac.to_numpy() == np.finfo(np.float64).max)

    def test_one(self):
        norm, jac = OneNormComputer().get_norm_with_jacobian([1.0, -2.0, 0.0])
        assert norm == 3.0
        np.testing.assert_array_equal(jac.to_numpy(), [[1.0, -1.0, 0.0]])

    def test_infinity(self):
        norm, jac = InfinityNormComputer().get_norm_with_jacobian([1.0, -5.0, 2.0])
        assert norm == 5.0
        np.testing.assert_array_equal(jac.to_numpy(), [[0.0, -1.0, 0.0]])

    def test_frobenius_matches_finite_difference(self, rng):
        x = rng.standard_normal(4)
        computer = FrobeniusNormComputer()
        _, jac = computer.get_norm_with_jacobian(x)
        h = 1e-7
        numeric = [
            (computer.get_norm(x + h * e) - computer.get_norm(x - h * e)) / (2 * h)
            for e in np.eye(4)
        ]
        np.testing.assert_allclose(jac.to_numpy()[0], numeric, rtol=1e-6)

    def test_requires_vector(self):
        with pytest.raises(DimensionError):
            OneNormComputer().get_norm_with_jacobian(np.ones((2, 2)))


# ═══════════════════════════════════════════════════════════════════════
# Factory
# ═══════════════════════════════════════════════════════════════════════


class TestFactory:

    @pytest.mark.parametrize("norm_type, cls", [
        (NormType.FROBENIUS, FrobeniusNormComputer),
        (NormType.ONE, OneNormComputer),
        (NormType.INFINITY, InfinityNormComputer),
    ])
    def test_create(self, norm_type, cls):
        computer = NormComputer.create(norm_type)
        assert isinstance(computer, cls)
        assert computer.norm_type is norm_type

    def test_default(self):
        assert DEFAULT_NORM_TYPE is NormType.FROBENIUS
        assert isinstance(NormComputer.create(), FrobeniusNormComputer)
