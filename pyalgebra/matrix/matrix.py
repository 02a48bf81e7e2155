"""
Dense matrix of double precision values.

Matrix owns a 2-D float64 NumPy array kept in Fortran (column-major) order,
so the flat buffer seen through `buffer` follows the linear index
convention ``index = column * rows + row``.

Design principles:
    - Every arithmetic operation has an in-place form and an
      ``*_and_return_new`` form backed by the same kernel
    - Dimensions are validated before anything is mutated
    - Submatrix extraction always copies; only `buffer` exposes a view
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import DimensionError, ValidationError
from pyalgebra.core.validation import check_array, check_1d, check_2d


DEFAULT_USE_COLUMN_ORDER = True


def _check_size(rows: int, columns: int) -> None:
    if rows < 1 or columns < 1:
        raise DimensionError(
            f"Matrix dimensions must be at least 1x1, got {rows}x{columns}"
        )


def _order(column_order: bool) -> str:
    return 'F' if column_order else 'C'


class Matrix:
    """
    Dense rows x columns matrix.

    Args:
        rows: Number of rows (>= 1)
        columns: Number of columns (>= 1)

    Raises:
        DimensionError: If either dimension is less than 1

    Examples:
        >>> m = Matrix(2, 3)
        >>> m.set_element_at(1, 2, 5.0)
        >>> m.get_element_at_index(m.get_index(1, 2))
        5.0
    """

    __hash__ = None  # mutable

    def __init__(self, rows: int, columns: int):
        _check_size(rows, columns)
        self._data = np.zeros((rows, columns), dtype=np.float64, order='F')

    # === Construction ===

    @classmethod
    def from_numpy(cls, array: ArrayLike) -> 'Matrix':
        """
        Create a matrix holding a copy of a 2-D array.

        A 1-D array becomes a column vector.
        """
        arr = check_array(array, 'array')
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        check_2d(arr, 'array')
        _check_size(*arr.shape)

        m = cls.__new__(cls)
        m._data = np.array(arr, dtype=np.float64, order='F', copy=True)
        return m

    @classmethod
    def new_from_array(
        cls,
        values: ArrayLike,
        column_order: bool = DEFAULT_USE_COLUMN_ORDER
    ) -> 'Matrix':
        """
        Create a vector from a 1-D array.

        Args:
            values: Vector values
            column_order: If True build a column vector (n x 1), otherwise a
                row vector (1 x n)
        """
        arr = check_array(values, 'values')
        check_1d(arr, 'values')
        n = arr.shape[0]
        m = cls(n, 1) if column_order else cls(1, n)
        m.from_array(arr)
        return m

    @classmethod
    def _wrap(cls, data: NDArray[np.floating[Any]]) -> 'Matrix':
        m = cls.__new__(cls)
        m._data = np.array(data, dtype=np.float64, order='F', copy=True)
        return m

    def copy(self) -> 'Matrix':
        """Deep copy."""
        return Matrix._wrap(self._data)

    def __copy__(self) -> 'Matrix':
        return self.copy()

    def __deepcopy__(self, memo: dict) -> 'Matrix':
        return self.copy()

    def copy_to(self, output: 'Matrix') -> None:
        """Copy this matrix into output, resizing output when needed."""
        output._data = self._data.copy(order='F')

    def copy_from(self, source: 'Matrix') -> None:
        """Copy source into this matrix, resizing when needed."""
        self._data = source._data.copy(order='F')

    # === Shape and storage ===

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def columns(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape

    @property
    def buffer(self) -> NDArray[np.floating[Any]]:
        """Flat column-major view of the storage. Writes go through."""
        return self._data.reshape(-1, order='F')

    def to_numpy(self) -> NDArray[np.floating[Any]]:
        """Copy of the contents as a 2-D array."""
        return self._data.copy()

    def __array__(self, dtype=None, copy=None) -> NDArray[np.floating[Any]]:
        if dtype is None:
            return self._data.copy()
        return self._data.astype(dtype)

    def __repr__(self) -> str:
        return f"Matrix({self.rows}x{self.columns},\n{self._data!r})"

    # === Element access ===

    def _check_position(self, row: int, column: int) -> None:
        if not (0 <= row < self.rows and 0 <= column < self.columns):
            raise ValidationError(
                f"position ({row}, {column}) outside {self.rows}x{self.columns} matrix"
            )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self._data.size:
            raise ValidationError(
                f"index {index} outside buffer of length {self._data.size}"
            )

    def get_element_at(self, row: int, column: int) -> float:
        self._check_position(row, column)
        return float(self._data[row, column])

    def set_element_at(self, row: int, column: int, value: float) -> None:
        self._check_position(row, column)
        self._data[row, column] = value

    def get_index(self, row: int, column: int) -> int:
        """Column-major linear index of (row, column)."""
        return column * self.rows + row

    def get_element_at_index(
        self,
        index: int,
        column_order: bool = DEFAULT_USE_COLUMN_ORDER
    ) -> float:
        self._check_index(index)
        return float(self._data.reshape(-1, order=_order(column_order))[index])

    def set_element_at_index(
        self,
        index: int,
        value: float,
        column_order: bool = DEFAULT_USE_COLUMN_ORDER
    ) -> None:
        self._check_index(index)
        if column_order:
            row, column = index % self.rows, index // self.rows
        else:
            row, column = index // self.columns, index % self.columns
        self._data[row, column] = value

    # === Arithmetic ===

    def _check_same_shape(self, other: 'Matrix', operation: str) -> None:
        if self.shape != other.shape:
            raise DimensionError(
                f"{operation}: shapes differ, {self.rows}x{self.columns} "
                f"vs {other.rows}x{other.columns}"
            )

    def _add(self, other: 'Matrix') -> NDArray[np.floating[Any]]:
        self._check_same_shape(other, 'add')
        return self._data + other._data

    def _subtract(self, other: 'Matrix') -> NDArray[np.floating[Any]]:
        self._check_same_shape(other, 'subtract')
        return self._data - other._data

    def _multiply(self, other: 'Matrix') -> NDArray[np.floating[Any]]:
        if self.columns != other.rows:
            raise DimensionError(
                f"multiply: inner dimensions differ, {self.rows}x{self.columns} "
                f"times {other.rows}x{other.columns}"
            )
        return self._data @ other._data

    def _element_by_element_product(self, other: 'Matrix') -> NDArray[np.floating[Any]]:
        self._check_same_shape(other, 'element_by_element_product')
        return self._data * other._data

    def _symmetrize(self) -> NDArray[np.floating[Any]]:
        if self.rows != self.columns:
            raise DimensionError(
                f"symmetrize requires a square matrix, got {self.rows}x{self.columns}"
            )
        return 0.5 * (self._data + self._data.T)

    def add(self, other: 'Matrix') -> None:
        self._data = np.asfortranarray(self._add(other))

    def add_and_return_new(self, other: 'Matrix') -> 'Matrix':
        return Matrix._wrap(self._add(other))

    def subtract(self, other: 'Matrix') -> None:
        self._data = np.asfortranarray(self._subtract(other))

    def subtract_and_return_new(self, other: 'Matrix') -> 'Matrix':
        return Matrix._wrap(self._subtract(other))

    def multiply(self, other: 'Matrix') -> None:
        """Replace this matrix with self @ other (may change the column count)."""
        self._data = np.asfortranarray(self._multiply(other))

    def multiply_and_return_new(self, other: 'Matrix') -> 'Matrix':
        return Matrix._wrap(self._multiply(other))

    def multiply_kronecker(self, other: 'Matrix') -> None:
        self._data = np.asfortranarray(np.kron(self._data, other._data))

    def multiply_kronecker_and_return_new(self, other: 'Matrix') -> 'Matrix':
        return Matrix._wrap(np.kron(self._data, other._data))

    def multiply_by_scalar(self, scalar: float) -> None:
        self._data *= scalar

    def multiply_by_scalar_and_return_new(self, scalar: float) -> 'Matrix':
        return Matrix._wrap(self._data * scalar)

    def element_by_element_product(self, other: 'Matrix') -> None:
        self._data = np.asfortranarray(self._element_by_element_product(other))

    def element_by_element_product_and_return_new(self, other: 'Matrix') -> 'Matrix':
        return Matrix._wrap(self._element_by_element_product(other))

    def transpose(self) -> None:
        self._data = np.asfortranarray(self._data.T)

    def transpose_and_return_new(self) -> 'Matrix':
        return Matrix._wrap(self._data.T)

    def symmetrize(self) -> None:
        """Replace this matrix with 0.5 * (M + Mᵗ)."""
        self._data = np.asfortranarray(self._symmetrize())

    def symmetrize_and_return_new(self) -> 'Matrix':
        return Matrix._wrap(self._symmetrize())

    # === Comparison ===

    def equals(self, other: 'Matrix', threshold: float = 0.0) -> bool:
        """
        Element-wise comparison within an absolute threshold.

        Matrices of different shapes are never equal.
        """
        if not isinstance(other, Matrix) or self.shape != other.shape:
            return False
        return bool(np.all(np.abs(self._data - other._data) <= threshold))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.equals(other)

    # === Bulk content ===

    def initialize(self, value: float) -> None:
        """Set every element to value."""
        self._data.fill(value)

    def resize(self, rows: int, columns: int) -> None:
        """Reallocate storage. Contents are reset to zero."""
        _check_size(rows, columns)
        self._data = np.zeros((rows, columns), dtype=np.float64, order='F')

    def reset(self, rows: int, columns: int, value: float) -> None:
        """Reallocate storage and set every element to value."""
        self.resize(rows, columns)
        self.initialize(value)

    def to_array(self, column_order: bool = DEFAULT_USE_COLUMN_ORDER) -> NDArray[np.floating[Any]]:
        """Contents as a new 1-D array in the requested linear order."""
        return self._data.ravel(order=_order(column_order)).copy()

    def from_array(
        self,
        values: ArrayLike,
        column_order: bool = DEFAULT_USE_COLUMN_ORDER
    ) -> None:
        """
        Overwrite contents from a 1-D array of length rows * columns.

        Raises:
            DimensionError: If the array length differs from rows * columns
        """
        arr = check_array(values, 'values').ravel()
        if arr.shape[0] != self._data.size:
            raise DimensionError(
                f"values: expected length {self._data.size}, got {arr.shape[0]}"
            )
        self._data[:, :] = arr.reshape(self.shape, order=_order(column_order))

    # === Submatrices ===

    def _check_region(
        self,
        top_left_row: int,
        top_left_column: int,
        bottom_right_row: int,
        bottom_right_column: int
    ) -> None:
        if not (0 <= top_left_row <= bottom_right_row < self.rows
                and 0 <= top_left_column <= bottom_right_column < self.columns):
            raise ValidationError(
                f"region ({top_left_row}, {top_left_column})-"
                f"({bottom_right_row}, {bottom_right_column}) is not a valid "
                f"region of a {self.rows}x{self.columns} matrix"
            )

    def get_submatrix(
        self,
        top_left_row: int,
        top_left_column: int,
        bottom_right_row: int,
        bottom_right_column: int
    ) -> 'Matrix':
        """
        Copy of the region between two corners, both inclusive.

        Raises:
            ValidationError: If the corners are outside the matrix or the
                top-left corner lies below or right of the bottom-right one
        """
        self._check_region(top_left_row, top_left_column, bottom_right_row, bottom_right_column)
        return Matrix._wrap(
            self._data[top_left_row:bottom_right_row + 1,
                       top_left_column:bottom_right_column + 1]
        )

    def get_submatrix_as_array(
        self,
        top_left_row: int,
        top_left_column: int,
        bottom_right_row: int,
        bottom_right_column: int,
        column_order: bool = DEFAULT_USE_COLUMN_ORDER
    ) -> NDArray[np.floating[Any]]:
        """Region between two inclusive corners as a flat array."""
        return self.get_submatrix(
            top_left_row, top_left_column, bottom_right_row, bottom_right_column
        ).to_array(column_order)

    def set_submatrix(
        self,
        top_left_row: int,
        top_left_column: int,
        bottom_right_row: int,
        bottom_right_column: int,
        values: 'Matrix | ArrayLike | float',
        column_order: bool = DEFAULT_USE_COLUMN_ORDER
    ) -> None:
        """
        Overwrite the region between two inclusive corners.

        Args:
            top_left_row, top_left_column: First corner
            bottom_right_row, bottom_right_column: Second corner
            values: A Matrix with the region's shape, a scalar to fill the
                region with, or a flat array with one value per element
            column_order: Linear order used when values is a flat array

        Raises:
            ValidationError: If the region is invalid or values does not
                match its size
        """
        self._check_region(top_left_row, top_left_column, bottom_right_row, bottom_right_column)
        region = (slice(top_left_row, bottom_right_row + 1),
                  slice(top_left_column, bottom_right_column + 1))
        region_shape = (bottom_right_row - top_left_row + 1,
                        bottom_right_column - top_left_column + 1)

        if isinstance(values, Matrix):
            if values.shape != region_shape:
                raise ValidationError(
                    f"values: expected {region_shape[0]}x{region_shape[1]} matrix, "
                    f"got {values.rows}x{values.columns}"
                )
            self._data[region] = values._data
            return

        if np.isscalar(values):
            self._data[region] = values
            return

        arr = check_array(values, 'values').ravel()
        size = region_shape[0] * region_shape[1]
        if arr.shape[0] != size:
            raise ValidationError(
                f"values: expected {size} elements, got {arr.shape[0]}"
            )
        self._data[region] = arr.reshape(region_shape, order=_order(column_order))

    # === Factories ===

    @staticmethod
    def identity(rows: int, columns: int) -> 'Matrix':
        """Matrix with ones on the main diagonal and zeros elsewhere."""
        _check_size(rows, columns)
        return Matrix._wrap(np.eye(rows, columns))

    @staticmethod
    def set_identity(m: 'Matrix') -> None:
        """Overwrite m with the identity pattern of its own shape."""
        m._data = np.asfortranarray(np.eye(m.rows, m.columns))

    @staticmethod
    def diagonal(values: ArrayLike) -> 'Matrix':
        """Square matrix with values on the main diagonal."""
        arr = check_array(values, 'values')
        check_1d(arr, 'values')
        _check_size(arr.shape[0], arr.shape[0])
        return Matrix._wrap(np.diag(arr))

    @staticmethod
    def fill_with_uniform_random_values(
        min_value: float,
        max_value: float,
        result: 'Matrix',
        rng: np.random.Generator | None = None
    ) -> None:
        """
        Fill result with values drawn uniformly from [min_value, max_value).

        Raises:
            ValidationError: If min_value >= max_value
        """
        if min_value >= max_value:
            raise ValidationError(
                f"min_value must be less than max_value, got {min_value} >= {max_value}"
            )
        rng = np.random.default_rng() if rng is None else rng
        result._data[:, :] = rng.uniform(min_value, max_value, size=result.shape)

    @staticmethod
    def create_with_uniform_random_values(
        rows: int,
        columns: int,
        min_value: float,
        max_value: float,
        rng: np.random.Generator | None = None
    ) -> 'Matrix':
        m = Matrix(rows, columns)
        Matrix.fill_with_uniform_random_values(min_value, max_value, m, rng)
        return m

    @staticmethod
    def fill_with_gaussian_random_values(
        mean: float,
        standard_deviation: float,
        result: 'Matrix',
        rng: np.random.Generator | None = None
    ) -> None:
        """
        Fill result with normally distributed values.

        Raises:
            ValidationError: If standard_deviation is not positive
        """
        if not standard_deviation > 0.0:
            raise ValidationError(
                f"standard_deviation must be positive, got {standard_deviation}"
            )
        rng = np.random.default_rng() if rng is None else rng
        result._data[:, :] = rng.normal(mean, standard_deviation, size=result.shape)

    @staticmethod
    def create_with_gaussian_random_values(
        rows: int,
        columns: int,
        mean: float,
        standard_deviation: float,
        rng: np.random.Generator | None = None
    ) -> 'Matrix':
        m = Matrix(rows, columns)
        Matrix.fill_with_gaussian_random_values(mean, standard_deviation, m, rng)
        return m


def as_matrix(value: 'Matrix | ArrayLike', name: str) -> Matrix:
    """
    Accept a Matrix or any 1-D/2-D array-like at an API boundary.

    Matrices are returned as is. Arrays are copied into a new Matrix, with
    1-D input becoming a column vector.

    Raises:
        ValidationError: If value is not numeric
        DimensionError: If value has more than two dimensions or is empty
    """
    if isinstance(value, Matrix):
        return value
    arr = check_array(value, name)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    check_2d(arr, name)
    if arr.size == 0:
        raise DimensionError(f"{name}: empty array with shape {arr.shape}")
    return Matrix.from_numpy(arr)
