"""
Numerical precision constants and utilities.

Machine epsilon and the default singular value threshold used by the
decomposition kernels.
"""

import numpy as np


# Machine epsilon for float64
EPSILON_64: float = np.finfo(np.float64).eps  # ~2.22e-16


def svd_default_threshold(rows: int, columns: int, largest_singular_value: float) -> float:
    """
    Default threshold below which a singular value is treated as zero.

    Scales machine epsilon by the matrix size and its largest singular
    value: 0.5 * sqrt(rows + columns + 1) * sigma_max * eps.
    """
    return 0.5 * np.sqrt(rows + columns + 1.0) * largest_singular_value * EPSILON_64
