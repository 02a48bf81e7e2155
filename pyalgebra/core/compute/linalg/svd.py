"""
Golub-Reinsch singular value decomposition.

Computes A = U @ diag(w) @ Vᵗ for any m x n matrix in two phases:

1. Householder bidiagonalization, accumulating the right and then the left
   transformations into V and U.
2. Implicit-shift QR sweeps on the bidiagonal form, chasing the bulge with
   Givens rotations until every superdiagonal element is negligible
   relative to the norm of the bidiagonal.

Singular values are then sorted in descending order and the sign of each
singular vector pair is chosen so that most of its entries are positive.

U is m x n, w has length n and V is n x n for every shape. When m < n the
trailing n - m singular values are exactly zero.
"""

import math
from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import ConvergenceError
from pyalgebra.core.compute.precision import EPSILON_64


@dataclass(frozen=True)
class SVDResult:
    """
    Result of singular value decomposition.

    Attributes:
        U: Left singular vectors (m x n)
        singular_values: Singular values sorted descending (length n)
        V: Right singular vectors (n x n)
        iterations: Total implicit-shift QR sweeps performed
    """
    U: NDArray[np.floating[Any]]
    singular_values: NDArray[np.floating[Any]]
    V: NDArray[np.floating[Any]]
    iterations: int


def _sign(a: float, b: float) -> float:
    """Magnitude of a with the sign of b."""
    return abs(a) if b >= 0.0 else -abs(a)


def _rotate(M: NDArray[np.floating[Any]], i: int, j: int, c: float, s: float) -> None:
    """Apply a Givens rotation to columns i and j of M in place."""
    y = M[:, i].copy()
    z = M[:, j]
    M[:, i] = y * c + z * s
    M[:, j] = z * c - y * s


def _bidiagonalize(
    u: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]],
    rv1: NDArray[np.floating[Any]]
) -> float:
    """
    Reduce u to bidiagonal form in place.

    On return w holds the diagonal, rv1 the superdiagonal (rv1[0] = 0) and
    u the left and right reflectors. Returns the norm used for the
    negligibility tests.
    """
    m, n = u.shape
    g = scale = anorm = 0.0

    for i in range(n):
        l = i + 1
        rv1[i] = scale * g
        g = s = scale = 0.0

        # Left reflector annihilating u[i+1:, i]
        if i < m:
            scale = float(np.sum(np.abs(u[i:, i])))
            if scale != 0.0:
                u[i:, i] /= scale
                s = float(u[i:, i] @ u[i:, i])
                f = u[i, i]
                g = -_sign(math.sqrt(s), f)
                h = f * g - s
                u[i, i] = f - g
                fs = (u[i:, i] @ u[i:, l:]) / h
                u[i:, l:] += np.outer(u[i:, i], fs)
                u[i:, i] *= scale

        w[i] = scale * g
        g = s = scale = 0.0

        # Right reflector annihilating u[i, i+2:]
        if i < m and i != n - 1:
            scale = float(np.sum(np.abs(u[i, l:])))
            if scale != 0.0:
                u[i, l:] /= scale
                s = float(u[i, l:] @ u[i, l:])
                f = u[i, l]
                g = -_sign(math.sqrt(s), f)
                h = f * g - s
                u[i, l] = f - g
                rv1[l:] = u[i, l:] / h
                ss = u[l:, l:] @ u[i, l:]
                u[l:, l:] += np.outer(ss, rv1[l:])
                u[i, l:] *= scale

        anorm = max(anorm, abs(w[i]) + abs(rv1[i]))

    return anorm


def _accumulate_right(
    u: NDArray[np.floating[Any]],
    v: NDArray[np.floating[Any]],
    rv1: NDArray[np.floating[Any]]
) -> None:
    """Build V from the right reflectors stored in the rows of u."""
    n = v.shape[0]
    g = 0.0
    l = n

    for i in range(n - 1, -1, -1):
        if i < n - 1:
            if g != 0.0:
                # Double division avoids possible underflow
                v[l:, i] = (u[i, l:] / u[i, l]) / g
                ss = u[i, l:] @ v[l:, l:]
                v[l:, l:] += np.outer(v[l:, i], ss)
            v[i, l:] = 0.0
            v[l:, i] = 0.0
        v[i, i] = 1.0
        g = rv1[i]
        l = i


def _accumulate_left(
    u: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]]
) -> None:
    """Overwrite u with the left transformations."""
    m, n = u.shape

    for i in range(min(m, n) - 1, -1, -1):
        l = i + 1
        g = w[i]
        u[i, l:] = 0.0
        if g != 0.0:
            g = 1.0 / g
            ss = u[l:, i] @ u[l:, l:]
            fs = (ss / u[i, i]) * g
            u[i:, l:] += np.outer(u[i:, i], fs)
            u[i:, i] *= g
        else:
            u[i:, i] = 0.0
        u[i, i] += 1.0


def _diagonalize(
    u: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]],
    v: NDArray[np.floating[Any]],
    rv1: NDArray[np.floating[Any]],
    anorm: float,
    max_iterations: int
) -> int:
    """
    Implicit-shift QR sweeps on the bidiagonal form.

    Returns the total number of sweeps.

    Raises:
        ConvergenceError: If a singular value needs more than max_iterations
            sweeps
    """
    n = w.shape[0]
    tol = EPSILON_64 * anorm
    total = 0

    for k in range(n - 1, -1, -1):
        for its in range(max_iterations):
            total += 1

            # Test for splitting
            flag = True
            for l in range(k, -1, -1):
                nm = l - 1
                if l == 0 or abs(rv1[l]) <= tol:
                    flag = False
                    break
                if abs(w[nm]) <= tol:
                    break

            # Cancellation of rv1[l] when w[l-1] is negligible
            if flag:
                c = 0.0
                s = 1.0
                for i in range(l, k + 1):
                    f = s * rv1[i]
                    rv1[i] = c * rv1[i]
                    if abs(f) <= tol:
                        break
                    g = w[i]
                    h = math.hypot(f, g)
                    w[i] = h
                    h = 1.0 / h
                    c = g * h
                    s = -f * h
                    _rotate(u, nm, i, c, s)

            z = w[k]
            if l == k:
                # Converged; make the singular value non-negative
                if z < 0.0:
                    w[k] = -z
                    v[:, k] = -v[:, k]
                break

            if its == max_iterations - 1:
                raise ConvergenceError(
                    f"Singular value decomposition did not converge in "
                    f"{max_iterations} iterations for singular value {k}",
                    iterations=its + 1,
                    final_change=float(abs(rv1[k])),
                    reason='max_iterations',
                    threshold=float(tol)
                )

            # Shift from the bottom 2x2 minor
            x = w[l]
            nm = k - 1
            y = w[nm]
            g = rv1[nm]
            h = rv1[k]
            f = ((y - z) * (y + z) + (g - h) * (g + h)) / (2.0 * h * y)
            g = math.hypot(f, 1.0)
            f = ((x - z) * (x + z) + h * ((y / (f + _sign(g, f))) - h)) / x

            # Next QR transformation
            c = s = 1.0
            for j in range(l, nm + 1):
                i = j + 1
                g = rv1[i]
                y = w[i]
                h = s * g
                g = c * g
                z = math.hypot(f, h)
                rv1[j] = z
                c = f / z
                s = h / z
                f = x * c + g * s
                g = g * c - x * s
                h = y * s
                y *= c
                _rotate(v, j, i, c, s)

                z = math.hypot(f, h)
                w[j] = z
                # Rotation can be arbitrary if z = 0
                if z != 0.0:
                    z = 1.0 / z
                    c = f * z
                    s = h * z
                f = c * g + s * y
                x = c * y - s * g
                _rotate(u, j, i, c, s)

            rv1[l] = 0.0
            rv1[k] = f
            w[k] = x

    return total


def _reorder(
    u: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]],
    v: NDArray[np.floating[Any]]
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """Sort singular values descending and normalize singular vector signs."""
    m, n = u.shape
    order = np.argsort(-w, kind='stable')
    u = u[:, order]
    w = w[order]
    v = v[:, order]

    negatives = np.sum(u < 0.0, axis=0) + np.sum(v < 0.0, axis=0)
    flip = negatives > (m + n) // 2
    u[:, flip] = -u[:, flip]
    v[:, flip] = -v[:, flip]

    return u, w, v


def golub_reinsch_cpu(
    A: NDArray[np.floating[Any]],
    max_iterations: int
) -> SVDResult:
    """
    Singular value decomposition of A.

    Args:
        A: Matrix to decompose (m x n), any shape
        max_iterations: Sweep limit per singular value

    Returns:
        SVDResult with U (m x n), descending singular values (n) and V (n x n)

    Raises:
        ConvergenceError: If the sweep limit is exhausted
    """
    m, n = A.shape
    u = np.array(A, dtype=np.float64, copy=True)
    w = np.zeros(n)
    v = np.zeros((n, n))
    rv1 = np.zeros(n)

    anorm = _bidiagonalize(u, w, rv1)
    _accumulate_right(u, v, rv1)
    _accumulate_left(u, w)
    iterations = _diagonalize(u, w, v, rv1, anorm, max_iterations)
    u, w, v = _reorder(u, w, v)

    return SVDResult(U=u, singular_values=w, V=v, iterations=iterations)
