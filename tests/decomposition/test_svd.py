"""
Tests for Golub-Reinsch singular value decomposition.

Validates:
    - Singular values against numpy for tall, square and wide input
    - Reconstruction A = U @ diag(w) @ Vᵗ and orthonormal factors
    - Rank, nullity, range and null space
    - Condition numbers and 2-norm
    - Pseudo-inverse solves of rank-deficient systems
    - Iteration limit
"""

import numpy as np
import pytest

from pyalgebra.core.compute.tolerances import STRICT
from pyalgebra.core.exceptions import (
    ConvergenceError,
    DimensionError,
    NotAvailableError,
    ValidationError,
)
from pyalgebra.decomposition import SingularValueDecomposer
from pyalgebra.matrix import Matrix


def _decomposed(A, **kwargs):
    decomposer = SingularValueDecomposer(A, **kwargs)
    decomposer.decompose()
    return decomposer


# ═══════════════════════════════════════════════════════════════════════
# Factors
# ═══════════════════════════════════════════════════════════════════════


class TestFactors:

    @pytest.mark.parametrize("shape", [(6, 4), (4, 4), (3, 5)])
    def test_singular_values_match_numpy(self, rng, shape):
        A = rng.standard_normal(shape)
        w = _decomposed(A).get_singular_values()
        expected = np.linalg.svd(A, compute_uv=False)
        assert w.shape == (shape[1],)
        np.testing.assert_allclose(w[:len(expected)], expected, atol=1e-12)
        np.testing.assert_allclose(w[len(expected):], 0.0, atol=1e-12)

    @pytest.mark.parametrize("shape", [(6, 4), (4, 4), (3, 5)])
    def test_reconstruction(self, rng, shape):
        A = rng.standard_normal(shape)
        decomposer = _decomposed(A)
        U = decomposer.get_u().to_numpy()
        W = decomposer.get_w().to_numpy()
        V = decomposer.get_v().to_numpy()
        assert U.shape == (shape[0], shape[1])
        assert V.shape == (shape[1], shape[1])
        np.testing.assert_allclose(U @ W @ V.T, A, atol=1e-12)

    def test_orthonormal_factors(self, rng):
        decomposer = _decomposed(rng.standard_normal((7, 4)))
        U = decomposer.get_u().to_numpy()
        V = decomposer.get_v().to_numpy()
        np.testing.assert_allclose(U.T @ U, np.eye(4), atol=STRICT.atol)
        np.testing.assert_allclose(V.T @ V, np.eye(4), atol=STRICT.atol)

    def test_descending(self, rng):
        w = _decomposed(rng.standard_normal((5, 5))).get_singular_values()
        assert np.all(np.diff(w) <= 0.0)
        assert np.all(w >= 0.0)

    def test_diagonal_input(self):
        decomposer = _decomposed(np.diag([3.0, -4.0]))
        np.testing.assert_allclose(decomposer.get_singular_values(), [4.0, 3.0])

    def test_result_info(self, rng):
        result = SingularValueDecomposer(rng.standard_normal((4, 3))).decompose()
        assert result.backend_name == 'cpu_golub_reinsch'
        assert result.info['iterations'] >= 1
        assert result.info['rank'] == 3


# ═══════════════════════════════════════════════════════════════════════
# Rank, range and null space
# ═══════════════════════════════════════════════════════════════════════


class TestSubspaces:

    def test_rank_and_nullity(self, tall_matrix):
        decomposer = _decomposed(tall_matrix)
        assert decomposer.get_rank(threshold=1e-10) == 2
        assert decomposer.get_nullity(threshold=1e-10) == 1

    def test_exact_zero_singular_value(self):
        A = np.array([[1.0, 2.0, 0.0], [3.0, 4.0, 0.0], [5.0, 6.0, 0.0], [7.0, 8.0, 0.0]])
        decomposer = _decomposed(A)
        assert decomposer.get_singular_values()[-1] == 0.0
        assert decomposer.get_rank() == 2
        assert decomposer.get_nullity() == 1
        assert decomposer.last_result.has_warning("rank deficient")

    def test_nullspace(self, tall_matrix):
        N = _decomposed(tall_matrix).get_nullspace(threshold=1e-10).to_numpy()
        assert N.shape == (3, 1)
        np.testing.assert_allclose(tall_matrix @ N, 0.0, atol=1e-12)
        assert np.linalg.norm(N) == pytest.approx(1.0)

    def test_range(self, tall_matrix):
        R = _decomposed(tall_matrix).get_range(threshold=1e-10).to_numpy()
        assert R.shape == (4, 2)
        # columns of A lie in the range
        projection = R @ (R.T @ tall_matrix)
        np.testing.assert_allclose(projection, tall_matrix, atol=1e-12)

    def test_explicit_threshold(self):
        decomposer = _decomposed(np.diag([1.0, 1e-3, 1e-6]))
        assert decomposer.get_rank() == 3
        assert decomposer.get_rank(threshold=1e-4) == 2
        assert decomposer.get_nullity(threshold=1e-2) == 2

    def test_negative_threshold(self, tall_matrix):
        with pytest.raises(ValidationError):
            _decomposed(tall_matrix).get_rank(threshold=-1.0)

    def test_empty_nullspace(self, nonsingular_matrix):
        with pytest.raises(NotAvailableError, match="null space"):
            _decomposed(nonsingular_matrix).get_nullspace()

    def test_empty_range(self):
        with pytest.raises(NotAvailableError, match="range"):
            _decomposed(np.zeros((3, 2))).get_range()

    def test_default_threshold(self, tall_matrix):
        decomposer = _decomposed(tall_matrix)
        w_max = decomposer.get_norm2()
        expected = 0.5 * np.sqrt(4 + 3 + 1) * w_max * np.finfo(np.float64).eps
        assert decomposer.get_default_threshold() == pytest.approx(expected)


# ═══════════════════════════════════════════════════════════════════════
# Norms and conditioning
# ═══════════════════════════════════════════════════════════════════════


class TestConditioning:

    def test_norm2(self, rng):
        A = rng.standard_normal((5, 3))
        assert _decomposed(A).get_norm2() == pytest.approx(np.linalg.norm(A, 2))

    def test_condition_number(self):
        decomposer = _decomposed(np.diag([10.0, 2.0, 0.5]))
        assert decomposer.get_condition_number() == pytest.approx(20.0)
        assert decomposer.get_reciprocal_condition_number() == pytest.approx(0.05)

    def test_zero_matrix(self):
        decomposer = _decomposed(np.zeros((2, 2)))
        assert decomposer.get_condition_number() == float('inf')
        assert decomposer.get_reciprocal_condition_number() == 0.0


# ═══════════════════════════════════════════════════════════════════════
# Solve
# ═══════════════════════════════════════════════════════════════════════


class TestSolve:

    def test_full_rank_least_squares(self, rng):
        A = rng.standard_normal((8, 3))
        b = rng.standard_normal(8)
        x = _decomposed(A).solve(b)
        expected, *_ = np.linalg.lstsq(A, b, rcond=None)
        np.testing.assert_allclose(x, expected, atol=1e-10)

    def test_rank_deficient_minimum_norm(self, tall_matrix):
        b = np.array([1.0, 2.0, 3.0, 4.0])
        x = _decomposed(tall_matrix).solve(b, threshold=1e-10)
        expected = np.linalg.pinv(tall_matrix, rcond=1e-10) @ b
        np.testing.assert_allclose(x, expected, atol=1e-10)

    def test_wide_system(self, rng):
        A = rng.standard_normal((2, 4))
        B = rng.standard_normal((2, 3))
        X = _decomposed(A).solve(Matrix.from_numpy(B))
        assert isinstance(X, Matrix)
        assert X.shape == (4, 3)
        np.testing.assert_allclose(A @ X.to_numpy(), B, atol=1e-10)

    def test_wrong_rhs_rows(self, tall_matrix):
        with pytest.raises(DimensionError):
            _decomposed(tall_matrix).solve(np.ones(3))


# ═══════════════════════════════════════════════════════════════════════
# Iteration limit
# ═══════════════════════════════════════════════════════════════════════


class TestIterations:

    def test_iterations_exhausted(self, rng):
        decomposer = SingularValueDecomposer(rng.standard_normal((6, 6)), max_iterations=1)
        with pytest.raises(ConvergenceError) as exc_info:
            decomposer.decompose()
        assert exc_info.value.reason == 'max_iterations'
        assert not decomposer.is_decomposition_available

    @pytest.mark.parametrize("value", [0, -1, 2.5])
    def test_invalid_max_iterations(self, value):
        with pytest.raises(ValidationError, match="max_iterations"):
            SingularValueDecomposer(max_iterations=value)

    def test_setter(self):
        decomposer = SingularValueDecomposer()
        decomposer.max_iterations = 50
        assert decomposer.max_iterations == 50
