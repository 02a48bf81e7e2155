"""
Norm computers.

Public API:
    NormType: FROBENIUS, ONE, INFINITY
    NormComputer: Abstract strategy; NormComputer.create(norm_type)
    FrobeniusNormComputer, OneNormComputer, InfinityNormComputer
"""

from pyalgebra.norms.computers import (
    NormType,
    DEFAULT_NORM_TYPE,
    NormComputer,
    FrobeniusNormComputer,
    OneNormComputer,
    InfinityNormComputer,
)

__all__ = [
    "NormType",
    "DEFAULT_NORM_TYPE",
    "NormComputer",
    "FrobeniusNormComputer",
    "OneNormComputer",
    "InfinityNormComputer",
]
