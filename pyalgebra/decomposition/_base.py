"""
Shared state machine for all decomposers.

Every decomposer moves through the same states:

    Created --set_input_matrix--> Ready --decompose--> Decomposing --> Available
                                    ^                                     |
                                    +----------set_input_matrix-----------+

The state lives in a DecomposerState record owned by each decomposer
instance. Concrete decomposers only supply the numerical step
(`_decompose`) and their output getters.

Design principles:
    - decompose() returns an immutable Result that never goes stale
    - Stateful getters raise NotAvailableError until decompose() succeeds
      for the current input matrix
    - A per-instance lock guards decompose(); re-entry and input changes
      during a decomposition raise LockedError instead of blocking
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.result import Result
from pyalgebra.core.exceptions import (
    NotReadyError,
    NotAvailableError,
    LockedError,
    NumericalError,
)
from pyalgebra.core.validation import check_array
from pyalgebra.matrix import Matrix, as_matrix

P = TypeVar('P')


class DecomposerType(Enum):
    LU = 'lu'
    QR = 'qr'
    ECONOMY_QR = 'economy_qr'
    RQ = 'rq'
    CHOLESKY = 'cholesky'
    SINGULAR_VALUE = 'singular_value'


@dataclass
class DecomposerState:
    """
    Mutable state shared by every decomposer.

    Attributes:
        input_matrix: Matrix to decompose (referenced, not copied)
        lock: Held for the duration of decompose()
        available: True once decompose() succeeded for input_matrix
        result: Result of the last successful decompose(), if still current
    """
    input_matrix: Matrix | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)
    available: bool = False
    result: Result[Any] | None = None

    def invalidate(self) -> None:
        self.available = False
        self.result = None


class Decomposer(ABC, Generic[P]):
    """
    Base class for stateful matrix decomposers.

    Args:
        input_matrix: Optional Matrix (or 2-D array-like) to decompose
    """

    def __init__(self, input_matrix: Matrix | ArrayLike | None = None):
        self._state = DecomposerState()
        if input_matrix is not None:
            self.set_input_matrix(input_matrix)

    @property
    @abstractmethod
    def decomposer_type(self) -> DecomposerType:
        ...

    @abstractmethod
    def _decompose(self, A: NDArray[np.floating[Any]]) -> Result[P]:
        """Run the factorization on a private copy of the input."""
        ...

    # === State ===

    @property
    def input_matrix(self) -> Matrix | None:
        return self._state.input_matrix

    @input_matrix.setter
    def input_matrix(self, value: Matrix | ArrayLike) -> None:
        self.set_input_matrix(value)

    def set_input_matrix(self, input_matrix: Matrix | ArrayLike) -> None:
        """
        Set the matrix to decompose. Any previous decomposition becomes stale.

        Raises:
            LockedError: If a decomposition is in progress
        """
        if self.is_locked:
            raise LockedError(
                f"{type(self).__name__}: cannot change input matrix while decomposing"
            )
        self._state.input_matrix = as_matrix(input_matrix, 'input_matrix')
        self._state.invalidate()

    @property
    def is_ready(self) -> bool:
        return self._state.input_matrix is not None

    @property
    def is_locked(self) -> bool:
        return self._state.lock.locked()

    @property
    def is_decomposition_available(self) -> bool:
        return self._state.available

    @property
    def last_result(self) -> Result[P] | None:
        """Result of the last successful decompose() for the current input."""
        return self._state.result

    # === Decomposition ===

    def decompose(self) -> Result[P]:
        """
        Decompose the current input matrix.

        Returns:
            Result envelope holding the factorization

        Raises:
            NotReadyError: If no input matrix has been set
            LockedError: If another decompose() on this instance is running
            NumericalError: If the input contains NaN or Inf
        """
        if not self.is_ready:
            raise NotReadyError(
                f"{type(self).__name__}: input matrix must be set before decompose()"
            )
        if not self._state.lock.acquire(blocking=False):
            raise LockedError(f"{type(self).__name__}: decomposition already in progress")

        try:
            self._state.invalidate()
            A = self._state.input_matrix.to_numpy()
            if not np.all(np.isfinite(A)):
                raise NumericalError(
                    f"{type(self).__name__}: input matrix contains NaN or Inf values"
                )

            result = self._decompose(A)
            self._state.result = result
            self._state.available = True
            return result
        finally:
            self._state.lock.release()

    def _factors(self) -> P:
        """Factor payload of the current decomposition."""
        if not self._state.available:
            raise NotAvailableError(
                f"{type(self).__name__}: decompose() has not completed for the current input"
            )
        return self._state.result.params

    def __repr__(self) -> str:
        shape = None if self.input_matrix is None else self.input_matrix.shape
        return (
            f"{type(self).__name__}(input_shape={shape}, "
            f"available={self.is_decomposition_available})"
        )


def as_rhs(b: Matrix | ArrayLike) -> tuple[NDArray[np.floating[Any]], bool]:
    """
    Normalize a right-hand side to a 2-D array.

    Returns:
        Tuple (B, is_vector) where is_vector records a 1-D input
    """
    if isinstance(b, Matrix):
        return b.to_numpy(), False
    arr = check_array(b, 'b')
    if arr.ndim == 1:
        return arr.reshape(-1, 1), True
    return as_matrix(arr, 'b').to_numpy(), False


def as_solution(
    X: NDArray[np.floating[Any]],
    is_vector: bool
) -> Matrix | NDArray[np.floating[Any]]:
    """A 1-D right-hand side yields a 1-D array, anything else a Matrix."""
    if is_vector:
        return X[:, 0].copy()
    return Matrix.from_numpy(X)
