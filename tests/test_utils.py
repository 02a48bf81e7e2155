"""
Tests for the stateless utilities.

Validates:
    - Scalar properties (trace, det, rank, cond, norms)
    - solve, inverse and pseudo-inverse for square, tall and singular input
    - In-place Gauss-Jordan elimination against solve and inverse
    - Symmetry and orthogonality predicates
    - Dot, cross and skew products and their Jacobians
    - Schur complement and its square root
"""

import numpy as np
import pytest

from pyalgebra import utils
from pyalgebra.core.exceptions import (
    DimensionError,
    NotPositiveDefiniteError,
    NumericalError,
    RankDeficientMatrixError,
    SingularMatrixError,
    ValidationError,
)
from pyalgebra.core.compute.tolerances import ILL_CONDITIONED, select_tolerance
from pyalgebra.matrix import Matrix


# ═══════════════════════════════════════════════════════════════════════
# Scalar properties
# ═══════════════════════════════════════════════════════════════════════


class TestScalarProperties:

    def test_trace(self, tall_matrix):
        assert utils.trace(tall_matrix) == 1.0 + 5.0 + 4.0

    def test_det(self, nonsingular_matrix):
        assert utils.det(nonsingular_matrix) == pytest.approx(np.linalg.det(nonsingular_matrix))

    def test_det_singular(self, singular_matrix):
        assert utils.det(singular_matrix) == 0.0

    def test_det_requires_square(self, tall_matrix):
        with pytest.raises(DimensionError, match="square"):
            utils.det(tall_matrix)

    def test_rank(self, nonsingular_matrix):
        zero_column = np.array([[1.0, 2.0, 0.0], [3.0, 4.0, 0.0], [5.0, 6.0, 0.0]])
        assert utils.rank(zero_column) == 2
        assert utils.rank(Matrix.from_numpy(nonsingular_matrix)) == 5

    def test_cond(self):
        assert utils.cond(np.diag([4.0, 2.0, 1.0])) == pytest.approx(4.0)

    def test_norms_of_identity(self):
        eye = Matrix.identity(4, 4)
        assert utils.norm_f(eye) == pytest.approx(2.0)
        assert utils.norm_1(eye) == 1.0
        assert utils.norm_inf(eye) == 1.0
        assert utils.norm_2(eye) == pytest.approx(1.0)

    @pytest.mark.parametrize("fn, ord_", [
        (utils.norm_f, 'fro'),
        (utils.norm_1, 1),
        (utils.norm_inf, np.inf),
        (utils.norm_2, 2),
    ])
    def test_norms_match_numpy(self, rng, fn, ord_):
        A = rng.standard_normal((4, 6))
        assert fn(A) == pytest.approx(np.linalg.norm(A, ord_))


# ═══════════════════════════════════════════════════════════════════════
# Solves and inverses
# ═══════════════════════════════════════════════════════════════════════


class TestSolve:

    def test_square(self, nonsingular_matrix, rng):
        b = rng.standard_normal(5)
        x = utils.solve(nonsingular_matrix, b)
        np.testing.assert_allclose(nonsingular_matrix @ x, b, atol=1e-10)

    def test_tall_least_squares(self, rng):
        A = rng.standard_normal((10, 3))
        b = rng.standard_normal((10, 2))
        X = utils.solve(Matrix.from_numpy(A), b)
        assert isinstance(X, Matrix)
        expected, *_ = np.linalg.lstsq(A, b, rcond=None)
        np.testing.assert_allclose(X.to_numpy(), expected, atol=1e-10)

    def test_ill_conditioned(self):
        n = 4
        i, j = np.indices((n, n))
        hilbert = 1.0 / (i + j + 1.0)
        tol = select_tolerance(utils.cond(hilbert))
        assert tol is ILL_CONDITIONED
        x = utils.solve(hilbert, hilbert @ np.ones(n))
        np.testing.assert_allclose(x, np.ones(n), rtol=tol.rtol, atol=tol.atol)

    def test_singular(self, singular_matrix):
        with pytest.raises(RankDeficientMatrixError) as exc_info:
            utils.solve(singular_matrix, np.ones(3))
        assert exc_info.value.expected_rank == 3

    def test_wide_rejected(self):
        with pytest.raises(DimensionError, match="rows >= columns"):
            utils.solve(np.ones((2, 3)), np.ones(2))


class TestInverse:

    def test_square(self, nonsingular_matrix):
        inv = utils.inverse(nonsingular_matrix).to_numpy()
        np.testing.assert_allclose(inv @ nonsingular_matrix, np.eye(5), atol=1e-10)

    def test_singular(self, singular_matrix):
        with pytest.raises(RankDeficientMatrixError):
            utils.inverse(singular_matrix)

    def test_tall_left_inverse(self, rng):
        A = rng.standard_normal((6, 3))
        X = utils.inverse(A)
        assert X.shape == (3, 6)
        np.testing.assert_allclose(X.to_numpy() @ A, np.eye(3), atol=1e-10)

    def test_tall_rank_deficient(self, tall_matrix):
        with pytest.raises(RankDeficientMatrixError):
            utils.inverse(tall_matrix)

    def test_wide_rejected(self):
        with pytest.raises(DimensionError):
            utils.inverse(np.ones((2, 3)))

    def test_pseudo_inverse(self, rng):
        A = rng.standard_normal((4, 3))
        P = utils.pseudo_inverse(A)
        assert P.shape == (3, 4)
        np.testing.assert_allclose(P.to_numpy(), np.linalg.pinv(A), atol=1e-10)

    def test_pseudo_inverse_singular(self):
        A = np.diag([2.0, 0.0])
        np.testing.assert_allclose(utils.pseudo_inverse(A).to_numpy(), np.diag([0.5, 0.0]))

    def test_pseudo_inverse_wide(self, rng):
        A = rng.standard_normal((2, 5))
        np.testing.assert_allclose(utils.pseudo_inverse(A).to_numpy(), np.linalg.pinv(A), atol=1e-10)


# ═══════════════════════════════════════════════════════════════════════
# Gauss-Jordan elimination
# ═══════════════════════════════════════════════════════════════════════


class TestGaussJordanElimination:

    def test_matrix_rhs(self, nonsingular_matrix, rng):
        B = rng.uniform(0.0, 50.0, size=(5, 3))
        a = Matrix.from_numpy(nonsingular_matrix)
        b = Matrix.from_numpy(B)
        utils.gauss_jordan_elimination(a, b)
        np.testing.assert_allclose(a.to_numpy(), utils.inverse(nonsingular_matrix).to_numpy(),
                                   atol=1e-10)
        np.testing.assert_allclose(b.to_numpy(), utils.solve(nonsingular_matrix, B).to_numpy(),
                                   atol=1e-10)

    def test_array_rhs(self, nonsingular_matrix, rng):
        b = rng.uniform(0.0, 50.0, size=5)
        expected = utils.solve(nonsingular_matrix, b)
        a = Matrix.from_numpy(nonsingular_matrix)
        utils.gauss_jordan_elimination(a, b)
        np.testing.assert_allclose(b, expected, atol=1e-10)
        np.testing.assert_allclose(a.to_numpy(), np.linalg.inv(nonsingular_matrix), atol=1e-10)

    def test_off_diagonal_pivots(self):
        # Largest entries off the diagonal force row and column swaps
        A = np.array([
            [0.0, 1.0, 4.0],
            [2.0, 0.0, 1.0],
            [1.0, 5.0, 0.0],
        ])
        a = Matrix.from_numpy(A)
        b = np.array([1.0, 2.0, 3.0])
        utils.gauss_jordan_elimination(a, b)
        np.testing.assert_allclose(a.to_numpy(), np.linalg.inv(A), atol=1e-12)
        np.testing.assert_allclose(A @ b, [1.0, 2.0, 3.0], atol=1e-12)

    def test_non_square(self):
        with pytest.raises(DimensionError, match="square"):
            utils.gauss_jordan_elimination(Matrix(4, 5), Matrix(4, 2))

    @pytest.mark.parametrize("b", [Matrix(5, 2), np.zeros(5)])
    def test_wrong_rhs_rows(self, b):
        with pytest.raises(DimensionError, match="expected 4 rows, got 5"):
            utils.gauss_jordan_elimination(Matrix.identity(4, 4), b)

    def test_singular_leaves_arguments_untouched(self, rng):
        a = Matrix(4, 4)
        b = rng.uniform(0.0, 50.0, size=4)
        before = b.copy()
        with pytest.raises(SingularMatrixError) as exc_info:
            utils.gauss_jordan_elimination(a, b)
        assert exc_info.value.rank == 0
        assert exc_info.value.expected_rank == 4
        np.testing.assert_array_equal(b, before)
        assert a == Matrix(4, 4)

    def test_rank_deficient(self, singular_matrix):
        with pytest.raises(SingularMatrixError) as exc_info:
            utils.gauss_jordan_inverse(Matrix.from_numpy(singular_matrix))
        assert exc_info.value.rank == 2

    def test_requires_matrix_to_overwrite(self):
        with pytest.raises(ValidationError, match="in place"):
            utils.gauss_jordan_elimination(np.eye(2), np.ones(2))
        with pytest.raises(ValidationError, match="in place"):
            utils.gauss_jordan_elimination(Matrix.identity(2, 2), np.ones(2, dtype=int))

    def test_non_finite(self):
        a = Matrix.from_numpy([[1.0, np.nan], [0.0, 1.0]])
        with pytest.raises(NumericalError):
            utils.gauss_jordan_inverse(a)


class TestGaussJordanInverse:

    def test_matches_inverse(self, nonsingular_matrix):
        a = Matrix.from_numpy(nonsingular_matrix)
        utils.gauss_jordan_inverse(a)
        np.testing.assert_allclose(a.to_numpy(), utils.inverse(nonsingular_matrix).to_numpy(),
                                   atol=1e-10)

    def test_non_square(self):
        with pytest.raises(DimensionError):
            utils.gauss_jordan_inverse(Matrix(4, 5))

    def test_singular(self):
        with pytest.raises(SingularMatrixError):
            utils.gauss_jordan_inverse(Matrix(4, 4))


# ═══════════════════════════════════════════════════════════════════════
# Predicates
# ═══════════════════════════════════════════════════════════════════════


class TestPredicates:

    def test_symmetric(self, spd_matrix):
        assert utils.is_symmetric(spd_matrix)
        perturbed = spd_matrix.copy()
        perturbed[0, 1] += 1e-6
        assert not utils.is_symmetric(perturbed)
        assert utils.is_symmetric(perturbed, threshold=1e-5)

    def test_non_square_never_symmetric(self):
        assert not utils.is_symmetric(np.zeros((2, 3)))

    def test_orthonormal(self, orthonormal_matrix):
        assert utils.is_orthonormal(orthonormal_matrix, threshold=1e-10)
        assert utils.is_orthogonal(orthonormal_matrix, threshold=1e-10)

    def test_orthogonal_but_not_orthonormal(self):
        scaled = np.diag([2.0, 3.0])
        assert utils.is_orthogonal(scaled)
        assert not utils.is_orthonormal(scaled)

    def test_zero_column_not_orthogonal(self):
        assert not utils.is_orthogonal(np.diag([1.0, 0.0]))

    def test_not_orthogonal(self, nonsingular_matrix):
        assert not utils.is_orthogonal(nonsingular_matrix)
        assert not utils.is_orthonormal(nonsingular_matrix)

    def test_negative_threshold(self):
        with pytest.raises(ValidationError):
            utils.is_orthonormal(np.eye(2), threshold=-1.0)


# ═══════════════════════════════════════════════════════════════════════
# Vector algebra
# ═══════════════════════════════════════════════════════════════════════


class TestDotProduct:

    def test_value(self):
        assert utils.dot_product([1.0, 2.0, 3.0], [4.0, 5.0, 6.0]) == 32.0

    def test_row_times_column(self):
        a = Matrix.new_from_array([1.0, 2.0], column_order=False)
        b = Matrix.new_from_array([3.0, 4.0])
        assert utils.dot_product(a, b) == 11.0

    def test_length_mismatch(self):
        with pytest.raises(DimensionError, match="lengths differ"):
            utils.dot_product([1.0, 2.0], [1.0, 2.0, 3.0])

    def test_jacobians(self):
        value, jac_a, jac_b = utils.dot_product_with_jacobians([1.0, 2.0], [3.0, 4.0])
        assert value == 11.0
        np.testing.assert_array_equal(jac_a.to_numpy(), [[3.0, 4.0]])
        np.testing.assert_array_equal(jac_b.to_numpy(), [[1.0, 2.0]])


class TestCrossProduct:

    def test_value(self):
        np.testing.assert_array_equal(
            utils.cross_product([1.0, 4.0, 2.0], [4.0, 2.0, 3.0]), [8.0, 5.0, -14.0]
        )

    def test_column_wise(self):
        b = Matrix.from_numpy(np.array([
            [4.0, 2.0, 3.0],
            [-3.0, 5.0, 3.0],
            [5.0, 1.0, 6.0],
        ]).T)
        result = utils.cross_product([1.0, 4.0, 2.0], b)
        assert isinstance(result, Matrix)
        expected = np.column_stack([
            np.cross([1.0, 4.0, 2.0], b.to_numpy()[:, j]) for j in range(3)
        ])
        np.testing.assert_allclose(result.to_numpy(), expected)
        np.testing.assert_allclose(result.to_numpy()[:, 0], [8.0, 5.0, -14.0])

    def test_matches_numpy(self, rng):
        a, b = rng.standard_normal(3), rng.standard_normal(3)
        np.testing.assert_allclose(utils.cross_product(a, b), np.cross(a, b))

    def test_wrong_length(self):
        with pytest.raises(DimensionError, match="expected 3 elements"):
            utils.cross_product([1.0, 2.0], [1.0, 2.0, 3.0])

    def test_wrong_matrix_rows(self):
        with pytest.raises(DimensionError, match="expected 3 rows"):
            utils.cross_product([1.0, 2.0, 3.0], Matrix(4, 2))

    def test_jacobians_match_finite_differences(self, rng):
        a, b = rng.standard_normal(3), rng.standard_normal(3)
        value, jac_a, jac_b = utils.cross_product_with_jacobians(a, b)
        np.testing.assert_allclose(value, np.cross(a, b))
        h = 1e-6
        numeric_a = np.column_stack([
            (np.cross(a + h * e, b) - np.cross(a - h * e, b)) / (2 * h) for e in np.eye(3)
        ])
        numeric_b = np.column_stack([
            (np.cross(a, b + h * e) - np.cross(a, b - h * e)) / (2 * h) for e in np.eye(3)
        ])
        np.testing.assert_allclose(jac_a.to_numpy(), numeric_a, atol=1e-8)
        np.testing.assert_allclose(jac_b.to_numpy(), numeric_b, atol=1e-8)


class TestSkewMatrix:

    def test_matches_cross_product(self, rng):
        v, u = rng.standard_normal(3), rng.standard_normal(3)
        S = utils.skew_matrix(v).to_numpy()
        np.testing.assert_allclose(S @ u, np.cross(v, u))
        np.testing.assert_allclose(S, -S.T)

    def test_jacobian(self):
        v = np.array([1.0, 2.0, 3.0])
        S, J = utils.skew_matrix_with_jacobian(v)
        assert J.shape == (9, 3)
        np.testing.assert_allclose(J.to_numpy() @ v, S.to_array())

    def test_wrong_length(self):
        with pytest.raises(DimensionError):
            utils.skew_matrix([1.0, 2.0, 3.0, 4.0])


# ═══════════════════════════════════════════════════════════════════════
# Schur complement
# ═══════════════════════════════════════════════════════════════════════


class TestSchurComplement:

    def test_from_start(self, spd_matrix):
        complement, inv_a = utils.schurc(spd_matrix, 2)
        A, B = spd_matrix[:2, :2], spd_matrix[:2, 2:]
        C, D = spd_matrix[2:, :2], spd_matrix[2:, 2:]
        np.testing.assert_allclose(inv_a.to_numpy(), np.linalg.inv(A), atol=1e-10)
        np.testing.assert_allclose(complement.to_numpy(), D - C @ np.linalg.inv(A) @ B, atol=1e-10)

    def test_from_end(self, spd_matrix):
        complement, inv_d = utils.schurc(spd_matrix, 1, from_start=False)
        A, B = spd_matrix[:1, :1], spd_matrix[:1, 1:]
        C, D = spd_matrix[1:, :1], spd_matrix[1:, 1:]
        assert complement.shape == (1, 1)
        assert inv_d.shape == (3, 3)
        np.testing.assert_allclose(complement.to_numpy(), A - B @ np.linalg.inv(D) @ C, atol=1e-10)

    def test_determinant_identity(self, spd_matrix):
        # det(M) = det(A) * det(M / A)
        complement, _ = utils.schurc(spd_matrix, 2)
        expected = np.linalg.det(spd_matrix[:2, :2]) * np.linalg.det(complement.to_numpy())
        assert utils.det(spd_matrix) == pytest.approx(expected)

    def test_sqrt(self, spd_matrix):
        complement, _ = utils.schurc(spd_matrix, 2)
        root, _ = utils.schurc(spd_matrix, 2, sqrt=True)
        R = root.to_numpy()
        assert np.all(np.tril(R, -1) == 0.0)
        np.testing.assert_allclose(R.T @ R, complement.to_numpy(), atol=1e-10)

    def test_sqrt_not_positive_definite(self):
        m = np.array([
            [1.0, 0.0, 2.0],
            [0.0, 1.0, 0.0],
            [2.0, 0.0, 1.0],
        ])
        with pytest.raises(NotPositiveDefiniteError) as exc_info:
            utils.schurc(m, 1, sqrt=True)
        assert exc_info.value.min_pivot == -3.0

    def test_singular_block(self):
        m = np.array([
            [0.0, 0.0, 1.0],
            [0.0, 0.0, 1.0],
            [1.0, 1.0, 1.0],
        ])
        with pytest.raises(RankDeficientMatrixError):
            utils.schurc(m, 2)

    @pytest.mark.parametrize("pos", [0, 4])
    def test_pos_out_of_range(self, spd_matrix, pos):
        with pytest.raises(ValidationError, match="pos"):
            utils.schurc(spd_matrix, pos)

    def test_non_square(self):
        with pytest.raises(ValidationError, match="square"):
            utils.schurc(np.ones((2, 3)), 1)
