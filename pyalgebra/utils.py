"""
Stateless convenience functions built on the decomposers.

Each function constructs the cheapest decomposer that answers the
question, runs it, and returns plain values or new matrices:

- det: LU (square only)
- solve, inverse: LU for square input, economy QR for rows > columns
- pseudo_inverse, rank, cond, norm_2: SVD
- gauss_jordan_elimination, gauss_jordan_inverse: in-place Gauss-Jordan
  elimination with full pivoting
- schurc: block elimination through inverse and, for the square root
  form, Cholesky

Arguments accept a Matrix or any array-like, except for the in-place
Gauss-Jordan functions, which overwrite their Matrix arguments. Vector helpers (dot and cross
products, skew matrices) optionally return Jacobians through their
``*_with_jacobian(s)`` variants, which share the numeric core.
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import (
    DimensionError,
    ValidationError,
    SingularMatrixError,
    RankDeficientMatrixError,
    NotPositiveDefiniteError,
    NumericalError,
)
from pyalgebra.core.validation import check_array, check_threshold
from pyalgebra.core.compute.tolerances import (
    DEFAULT_ROUND_ERROR,
    DEFAULT_SYMMETRIC_THRESHOLD,
    DEFAULT_ORTHOGONAL_THRESHOLD,
)
from pyalgebra.core.compute.linalg.gauss_jordan import GaussJordanResult, gauss_jordan_cpu
from pyalgebra.matrix import Matrix, as_matrix
from pyalgebra.norms import FrobeniusNormComputer, OneNormComputer, InfinityNormComputer
from pyalgebra.decomposition import (
    LUDecomposer,
    EconomyQRDecomposer,
    CholeskyDecomposer,
    SingularValueDecomposer,
)


def _svd(m: Matrix | ArrayLike) -> SingularValueDecomposer:
    decomposer = SingularValueDecomposer(as_matrix(m, 'm'))
    decomposer.decompose()
    return decomposer


def _rank_deficient(error: SingularMatrixError) -> RankDeficientMatrixError:
    return RankDeficientMatrixError(
        str(error),
        matrix_name=error.matrix_name,
        condition_number=error.condition_number,
        rank=error.rank,
        expected_rank=error.expected_rank,
    )


# =====================================================================
# Scalar properties
# =====================================================================

def trace(m: Matrix | ArrayLike) -> float:
    """Sum of the main diagonal (any shape)."""
    return float(np.trace(as_matrix(m, 'm').to_numpy()))


def det(m: Matrix | ArrayLike) -> float:
    """
    Determinant via LU decomposition.

    Raises:
        DimensionError: If m is not square
    """
    matrix = as_matrix(m, 'm')
    if matrix.rows != matrix.columns:
        raise DimensionError(
            f"det requires a square matrix, got {matrix.rows}x{matrix.columns}"
        )
    decomposer = LUDecomposer(matrix)
    decomposer.decompose()
    return decomposer.determinant()


def rank(m: Matrix | ArrayLike) -> int:
    """Numerical rank at the default SVD threshold."""
    return _svd(m).get_rank()


def cond(m: Matrix | ArrayLike) -> float:
    """Condition number (largest over smallest singular value)."""
    return _svd(m).get_condition_number()


def norm_f(m: Matrix | ArrayLike) -> float:
    """Frobenius norm of a matrix, Euclidean norm of a 1-D array."""
    return FrobeniusNormComputer().get_norm(m)


def norm_1(m: Matrix | ArrayLike) -> float:
    """One norm (maximum absolute column sum)."""
    return OneNormComputer().get_norm(m)


def norm_inf(m: Matrix | ArrayLike) -> float:
    """Infinity norm (maximum absolute row sum)."""
    return InfinityNormComputer().get_norm(m)


def norm_2(m: Matrix | ArrayLike) -> float:
    """Spectral norm (largest singular value)."""
    return _svd(m).get_norm2()


# =====================================================================
# Solves and inverses
# =====================================================================

def solve(
    m: Matrix | ArrayLike,
    b: Matrix | ArrayLike
) -> Matrix | NDArray[np.floating[Any]]:
    """
    Solve m @ x = b.

    Square m is solved exactly through LU; rows > columns in the least
    squares sense through economy QR.

    Args:
        m: Coefficient matrix
        b: Right-hand side with as many rows as m. A 1-D array returns a 1-D
            solution, anything else a Matrix.

    Raises:
        DimensionError: If m has fewer rows than columns or b has the wrong
            row count
        RankDeficientMatrixError: If m is singular or rank deficient
    """
    matrix = as_matrix(m, 'm')
    rows, columns = matrix.shape

    if rows == columns:
        decomposer = LUDecomposer(matrix)
        decomposer.decompose()
        try:
            return decomposer.solve(b)
        except SingularMatrixError as e:
            raise _rank_deficient(e) from e

    if rows > columns:
        decomposer = EconomyQRDecomposer(matrix)
        decomposer.decompose()
        return decomposer.solve(b)

    raise DimensionError(
        f"solve requires rows >= columns, got {rows}x{columns}"
    )


def inverse(m: Matrix | ArrayLike) -> Matrix:
    """
    Inverse of a square matrix, or least squares left inverse when
    rows > columns (a columns x rows matrix X with X @ m = I).

    A 1-D array is treated as a column vector.

    Raises:
        DimensionError: If m has fewer rows than columns
        RankDeficientMatrixError: If m is singular or rank deficient
    """
    matrix = as_matrix(m, 'm')
    rows, columns = matrix.shape
    identity = Matrix.identity(rows, rows)

    if rows == columns:
        decomposer = LUDecomposer(matrix)
        decomposer.decompose()
        try:
            return decomposer.solve(identity)
        except SingularMatrixError as e:
            raise _rank_deficient(e) from e

    if rows > columns:
        decomposer = EconomyQRDecomposer(matrix)
        decomposer.decompose()
        return decomposer.solve(identity)

    raise DimensionError(
        f"inverse requires rows >= columns, got {rows}x{columns}"
    )


def pseudo_inverse(m: Matrix | ArrayLike) -> Matrix:
    """
    Moore-Penrose pseudo-inverse V @ diag(1/w) @ Uᵗ (columns x rows).

    Never fails for singular or non-square input; singular values at or
    below the default SVD threshold are dropped.
    """
    decomposer = _svd(m)
    rows = decomposer.input_matrix.rows
    return decomposer.solve(Matrix.identity(rows, rows))


# =====================================================================
# Gauss-Jordan elimination
# =====================================================================

def _gauss_jordan(a: Matrix, b: Any, threshold: float) -> GaussJordanResult:
    if not isinstance(a, Matrix):
        raise ValidationError(
            f"a: must be a Matrix to be overwritten in place, got {type(a).__name__}"
        )
    check_threshold(threshold)
    A = a.to_numpy()
    if not np.all(np.isfinite(A)):
        raise NumericalError("a: contains NaN or Inf values")

    if b is None:
        return gauss_jordan_cpu(A, None, threshold)

    if isinstance(b, Matrix):
        B = b.to_numpy()
    elif isinstance(b, np.ndarray) and b.ndim == 1 and np.issubdtype(b.dtype, np.floating):
        if not b.flags.writeable:
            raise ValidationError("b: array must be writeable")
        B = b.reshape(-1, 1)
    else:
        raise ValidationError(
            "b: must be a Matrix or a 1-D floating point array to be overwritten in place"
        )
    if not np.all(np.isfinite(B)):
        raise NumericalError("b: contains NaN or Inf values")
    return gauss_jordan_cpu(A, B, threshold)


def gauss_jordan_elimination(
    a: Matrix,
    b: Matrix | NDArray[np.floating[Any]],
    threshold: float = DEFAULT_ROUND_ERROR
) -> None:
    """
    Invert a and solve a @ x = b in place by Gauss-Jordan elimination.

    On return a holds a⁻¹ and b holds the solution. Neither is modified
    when an error is raised.

    Args:
        a: Square coefficient matrix, replaced by its inverse
        b: Right-hand side with as many rows as a, replaced by the solution.
            Either a Matrix or a 1-D floating point array.
        threshold: Pivot magnitude at or below which a is singular

    Raises:
        ValidationError: If a or b cannot be overwritten in place, or
            threshold is negative
        NumericalError: If a or b contains NaN or Inf
        DimensionError: If a is not square or b has the wrong row count
        SingularMatrixError: If a is singular at threshold

    Examples:
        >>> a = Matrix.from_numpy([[2.0, 0.0], [0.0, 4.0]])
        >>> b = np.array([2.0, 2.0])
        >>> gauss_jordan_elimination(a, b)
        >>> b
        array([1. , 0.5])
    """
    result = _gauss_jordan(a, b, threshold)
    a.copy_from(Matrix.from_numpy(result.inverse))
    if isinstance(b, Matrix):
        b.copy_from(Matrix.from_numpy(result.solution))
    else:
        b[:] = result.solution[:, 0]


def gauss_jordan_inverse(a: Matrix, threshold: float = DEFAULT_ROUND_ERROR) -> None:
    """
    Replace a by its inverse, computed by Gauss-Jordan elimination.

    Raises:
        ValidationError: If a is not a Matrix or threshold is negative
        NumericalError: If a contains NaN or Inf
        DimensionError: If a is not square
        SingularMatrixError: If a is singular at threshold
    """
    result = _gauss_jordan(a, None, threshold)
    a.copy_from(Matrix.from_numpy(result.inverse))


# =====================================================================
# Predicates
# =====================================================================

def is_symmetric(
    m: Matrix | ArrayLike,
    threshold: float = DEFAULT_SYMMETRIC_THRESHOLD
) -> bool:
    """
    True if m is square and |m[i, j] - m[j, i]| <= threshold everywhere.

    Raises:
        ValidationError: If threshold is negative
    """
    check_threshold(threshold)
    a = as_matrix(m, 'm').to_numpy()
    if a.shape[0] != a.shape[1]:
        return False
    return bool(np.all(np.abs(a - a.T) <= threshold))


def is_orthogonal(
    m: Matrix | ArrayLike,
    threshold: float = DEFAULT_ORTHOGONAL_THRESHOLD
) -> bool:
    """
    True if m is square and its columns are mutually orthogonal and
    non-zero: mᵗ @ m is diagonal within threshold with diagonal entries
    above threshold.

    Raises:
        ValidationError: If threshold is negative
    """
    check_threshold(threshold)
    a = as_matrix(m, 'm').to_numpy()
    if a.shape[0] != a.shape[1]:
        return False
    gram = a.T @ a
    diag = np.diag(gram)
    off_diag = gram - np.diag(diag)
    return bool(np.all(np.abs(off_diag) <= threshold) and np.all(diag > threshold))


def is_orthonormal(
    m: Matrix | ArrayLike,
    threshold: float = DEFAULT_ORTHOGONAL_THRESHOLD
) -> bool:
    """
    True if m is square and mᵗ @ m equals the identity within threshold.

    Raises:
        ValidationError: If threshold is negative
    """
    check_threshold(threshold)
    a = as_matrix(m, 'm').to_numpy()
    if a.shape[0] != a.shape[1]:
        return False
    gram = a.T @ a
    return bool(np.all(np.abs(gram - np.eye(a.shape[0])) <= threshold))


# =====================================================================
# Vector algebra
# =====================================================================

def _as_vector(value: Matrix | ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    if isinstance(value, Matrix):
        return value.to_array()
    arr = check_array(value, name)
    if arr.ndim != 1:
        arr = arr.ravel(order='F')
    return arr


def _as_3_vector(value: Matrix | ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    v = _as_vector(value, name)
    if v.shape[0] != 3:
        raise DimensionError(f"{name}: expected 3 elements, got {v.shape[0]}")
    return v


def _skew(v: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0],
    ])


def _dot(a: Matrix | ArrayLike, b: Matrix | ArrayLike) -> tuple[NDArray, NDArray, float]:
    x = _as_vector(a, 'a')
    y = _as_vector(b, 'b')
    if x.shape[0] != y.shape[0]:
        raise DimensionError(
            f"dot_product: lengths differ, {x.shape[0]} vs {y.shape[0]}"
        )
    return x, y, float(x @ y)


def dot_product(a: Matrix | ArrayLike, b: Matrix | ArrayLike) -> float:
    """
    Dot product of two equal-length vectors.

    Matrices are flattened in column order, so a row vector times a column
    vector works directly.

    Raises:
        DimensionError: If the lengths differ
    """
    return _dot(a, b)[2]


def dot_product_with_jacobians(
    a: Matrix | ArrayLike,
    b: Matrix | ArrayLike
) -> tuple[float, Matrix, Matrix]:
    """
    Dot product and its 1 x N Jacobians with respect to a and b.

    Returns:
        Tuple (a·b, d(a·b)/da = bᵗ, d(a·b)/db = aᵗ)
    """
    x, y, result = _dot(a, b)
    return (
        result,
        Matrix.new_from_array(y, column_order=False),
        Matrix.new_from_array(x, column_order=False),
    )


def skew_matrix(v: Matrix | ArrayLike) -> Matrix:
    """
    Skew-symmetric matrix [v]x with [v]x @ u = v x u for any 3-vector u.

    Raises:
        DimensionError: If v does not have exactly 3 elements
    """
    return Matrix.from_numpy(_skew(_as_3_vector(v, 'v')))


def skew_matrix_with_jacobian(v: Matrix | ArrayLike) -> tuple[Matrix, Matrix]:
    """
    Skew matrix and the 9 x 3 Jacobian of its column-order flattening
    with respect to v.
    """
    skew = _skew(_as_3_vector(v, 'v'))
    jacobian = np.zeros((9, 3))
    for k in range(3):
        e = np.zeros(3)
        e[k] = 1.0
        jacobian[:, k] = _skew(e).ravel(order='F')
    return Matrix.from_numpy(skew), Matrix.from_numpy(jacobian)


def cross_product(
    a: Matrix | ArrayLike,
    b: Matrix | ArrayLike
) -> Matrix | NDArray[np.floating[Any]]:
    """
    Cross product a x b.

    Args:
        a: 3-vector
        b: 3-vector, or a 3 x N Matrix whose columns are crossed one by one

    Returns:
        A 3-element array for a vector b, a 3 x N Matrix for a Matrix b

    Raises:
        DimensionError: If a is not a 3-vector or b has no 3 rows
    """
    skew = _skew(_as_3_vector(a, 'a'))
    if isinstance(b, Matrix) and b.columns != 1:
        if b.rows != 3:
            raise DimensionError(
                f"b: expected 3 rows, got {b.rows}x{b.columns}"
            )
        return Matrix.from_numpy(skew @ b.to_numpy())
    return skew @ _as_3_vector(b, 'b')


def cross_product_with_jacobians(
    a: Matrix | ArrayLike,
    b: Matrix | ArrayLike
) -> tuple[NDArray[np.floating[Any]], Matrix, Matrix]:
    """
    Cross product of two 3-vectors and its 3 x 3 Jacobians.

    Returns:
        Tuple (a x b, d(a x b)/da = -[b]x, d(a x b)/db = [a]x)
    """
    x = _as_3_vector(a, 'a')
    y = _as_3_vector(b, 'b')
    skew_a = _skew(x)
    return (
        skew_a @ y,
        Matrix.from_numpy(-_skew(y)),
        Matrix.from_numpy(skew_a),
    )


# =====================================================================
# Schur complement
# =====================================================================

def schurc(
    m: Matrix | ArrayLike,
    pos: int,
    from_start: bool = True,
    sqrt: bool = False
) -> tuple[Matrix, Matrix]:
    """
    Schur complement of a square block matrix.

    With m partitioned at pos as [[A, B], [C, D]] (A is pos x pos):

    - from_start=True eliminates A: complement = D - C @ A⁻¹ @ B
    - from_start=False eliminates D: complement = A - B @ D⁻¹ @ C

    Args:
        m: Square matrix
        pos: Partition index, 1 <= pos <= size - 1
        from_start: Which diagonal block to eliminate
        sqrt: If True return upper triangular R with Rᵗ @ R = complement
            instead of the complement itself

    Returns:
        Tuple (complement or its square root, inverse of the eliminated block)

    Raises:
        ValidationError: If m is not square or pos is out of range
        RankDeficientMatrixError: If the eliminated block is singular
        NotPositiveDefiniteError: If sqrt is requested and the complement is
            not positive definite
    """
    matrix = as_matrix(m, 'm')
    size = matrix.rows
    if matrix.columns != size:
        raise ValidationError(
            f"m: schurc requires a square matrix, got {matrix.rows}x{matrix.columns}"
        )
    if not 1 <= pos <= size - 1:
        raise ValidationError(f"pos: must be between 1 and {size - 1}, got {pos}")

    a = matrix.to_numpy()
    A, B = a[:pos, :pos], a[:pos, pos:]
    C, D = a[pos:, :pos], a[pos:, pos:]

    if from_start:
        eliminated_inverse = inverse(A).to_numpy()
        complement = D - C @ eliminated_inverse @ B
    else:
        eliminated_inverse = inverse(D).to_numpy()
        complement = A - B @ eliminated_inverse @ C

    if sqrt:
        decomposer = CholeskyDecomposer(Matrix.from_numpy(complement).symmetrize_and_return_new())
        decomposer.decompose()
        if not decomposer.is_spd():
            raise NotPositiveDefiniteError(
                "Schur complement is not positive definite, square root undefined",
                matrix_name='complement',
                min_pivot=decomposer.last_result.params.min_pivot
            )
        return decomposer.get_r(), Matrix.from_numpy(eliminated_inverse)

    return Matrix.from_numpy(complement), Matrix.from_numpy(eliminated_inverse)
