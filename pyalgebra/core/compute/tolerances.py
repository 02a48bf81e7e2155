"""
Tolerance tiers and default thresholds for numerical checks.

Two kinds of constants live here:
- Default thresholds used by decomposers and facade predicates when the
  caller does not provide one (singularity, rank, symmetry, orthogonality).
- Tolerance tiers used to compare reconstructed factorizations against
  their inputs (by the test suite and by callers validating results).
"""

from dataclasses import dataclass


# Pivot / diagonal magnitude at or below which LU and QR consider a matrix
# singular or rank deficient.
DEFAULT_ROUND_ERROR = 1e-8

# Absolute element-wise threshold for Utils.is_symmetric
DEFAULT_SYMMETRIC_THRESHOLD = 1e-12

# Absolute element-wise threshold for Utils.is_orthogonal / is_orthonormal
DEFAULT_ORTHOGONAL_THRESHOLD = 1e-12

# Implicit-shift QR sweeps allowed per singular value before giving up
DEFAULT_MAX_ITERATIONS = 30


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Orthogonality and exact-arithmetic identities (Qᵗ·Q = I)
STRICT = ToleranceTier(
    rtol=1e-10,
    atol=1e-10,
    name='strict',
    description='Double precision identities on well-scaled factors',
)

# Reconstruction of a well-conditioned input from its factors
ROUND_TRIP = ToleranceTier(
    rtol=1e-8,
    atol=1e-6,
    name='round_trip',
    description='Factor products reproduce the input matrix',
)

# Solves and inverses of ill-conditioned inputs (cond > 1e4)
ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-3,
    name='ill_conditioned',
    description='Solves against ill-conditioned matrices',
)

# Condition number above which a matrix is considered ill-conditioned
ILL_CONDITIONED_THRESHOLD = 1e4


def select_tolerance(condition_number: float | None = None) -> ToleranceTier:
    """Select the round-trip tolerance tier for a matrix of given conditioning."""
    if condition_number is not None and condition_number > ILL_CONDITIONED_THRESHOLD:
        return ILL_CONDITIONED
    return ROUND_TRIP
