"""
Exception hierarchy for pyalgebra.

All exceptions inherit from PyAlgebraError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyAlgebraError(Exception):
    """Base exception for all pyalgebra errors."""
    pass


class ValidationError(PyAlgebraError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks: negative
    thresholds, non-positive iteration caps, out-of-range indices or
    probabilities.
    """
    pass


class DimensionError(ValidationError):
    """
    Matrix or array dimensions are incorrect or inconsistent.

    Raised when operand sizes are incompatible for the requested operation
    (adding differently-sized matrices, multiplying with mismatched inner
    dimensions, decomposing a matrix whose row/column relationship the
    algorithm does not support).
    """
    pass


class NotReadyError(PyAlgebraError):
    """
    An operation requiring a configured input was invoked before one was set.

    Raised by decomposers when decompose() is called without an input
    matrix, and by distributions evaluated before mean and covariance exist.
    """
    pass


class NotAvailableError(PyAlgebraError):
    """
    A result was requested before it has been computed.

    Raised when decomposition outputs are queried before decompose() has
    completed for the current input matrix, or when the requested output
    would be empty (e.g. the null space of a full-rank matrix).
    """
    pass


class LockedError(PyAlgebraError):
    """
    Object is busy computing and cannot be modified or re-entered.

    Raised when decompose() or set_input_matrix() is called on a decomposer
    whose decompose() is still in progress.
    """
    pass


class NumericalError(PyAlgebraError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation,
    including non-finite (NaN/Inf) inputs that prevent a decomposition.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when a matrix operation requires invertibility but the matrix
    is singular at the requested numerical threshold.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(rows, columns))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class RankDeficientMatrixError(SingularMatrixError):
    """
    Matrix is numerically rank-deficient.

    Raised by least-squares solves and inverses (QR, Schur complement,
    facade functions) when exact solution is impossible because the
    effective rank is below min(rows, columns).
    """
    pass


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Raised when an operation requires a symmetric positive definite matrix
    (e.g. solving through a Cholesky factor) but the matrix fails this
    requirement.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
        min_pivot: Smallest squared pivot of a failed Cholesky factorization
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None,
        min_pivot: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue
        self.min_pivot = min_pivot


class ConvergenceError(PyAlgebraError):
    """
    Iterative algorithm failed to converge.

    Raised when the implicit-shift QR iteration of the singular value
    decomposition exceeds its iteration limit.

    Attributes:
        iterations: Number of iterations completed
        final_change: Magnitude of the last off-diagonal element, if known
        reason: Why convergence failed (e.g. 'max_iterations')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold


class InvalidCovarianceMatrixError(ValidationError):
    """
    Covariance matrix is not square, symmetric and positive definite.

    Raised by the statistics layer when a covariance fails the Cholesky
    SPD check.
    """
    pass
