"""
Generic result container for all pyalgebra decompositions.

The Result class provides a standardized envelope that every decomposer
returns from decompose(). This enables shared tooling for timing, warnings
and reproducibility while allowing each factorization to define its own
factor payload.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, shape, rank, iterations)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) so a result never goes stale when the
      decomposer that produced it receives a new input matrix
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Factor payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for a decomposition.

    Type Parameters:
        P: The factorization-specific payload type

    Attributes:
        params: Factorization payload (LU factors, Householder vectors, ...)
        info: Structured metadata (method, shape, rank, iterations)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the kernel that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=LUFactors(lu=lu, pivot=pivot, pivot_sign=1),
        ...     info={'method': 'lu', 'shape': (4, 4)},
        ...     timing={'total_seconds': 0.001},
        ...     backend_name='cpu_lu'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
