from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np
from .errors import DimensionMismatchError, SingularMatrixError

log = logging.getLogger(__name__)

EPS = np.finfo(np.float64).eps

@dataclass(frozen=True)
class LUFactors:
    """
    Result of one pivoted elimination of a square matrix.
    lu holds the unit-lower multipliers below the diagonal and U on and above it;
    perm[i] is the original row that ended up in row i.
    """
    lu: np.ndarray
    perm: np.ndarray

    @property
    def n(self) -> int:
        return self.lu.shape[0]

def pivot_tolerance(A: np.ndarray) -> np.ndarray:
    # per column; the [1, x, y] border is far smaller than the kernel block
    if not A.size:
        return np.zeros(A.shape[1])
    return A.shape[0] * EPS * np.max(np.abs(A), axis=0)

def lu_factor(A, tol: Optional[float]=None) -> LUFactors:
    """
    Gaussian elimination with partial pivoting on a private copy of A.
    For each column the row with the largest |value| at or below the diagonal
    becomes the pivot; a pivot magnitude not above the tolerance raises
    SingularMatrixError carrying the column index. `tol` applies to every
    column; None scales it to each column of A (n*eps*max|A[:, j]|).
    """
    lu = np.array(A, dtype=np.float64)  # copy; caller's matrix is never touched
    if lu.ndim != 2 or lu.shape[0] != lu.shape[1]:
        raise DimensionMismatchError(f"expected a square matrix, got shape {lu.shape}")
    n = lu.shape[0]
    tols = pivot_tolerance(lu) if tol is None else np.full(n, float(tol))
    log.debug("lu_factor n=%d pivot_tol<=%.3g", n, float(np.max(tols)) if n else 0.0)
    perm = np.arange(n)
    for i in range(n):
        p = i + int(np.argmax(np.abs(lu[i:, i])))
        piv = abs(lu[p, i])
        if not piv > tols[i]:  # also catches NaN
            raise SingularMatrixError(f"no usable pivot in column {i} (|pivot|={piv:.3g})", column=i)
        if p != i:
            lu[[i, p]] = lu[[p, i]]
            perm[[i, p]] = perm[[p, i]]
        lu[i+1:, i] /= lu[i, i]
        lu[i+1:, i+1:] -= np.outer(lu[i+1:, i], lu[i, i+1:])
    return LUFactors(lu=lu, perm=perm)

def lu_solve(factors: LUFactors, b) -> np.ndarray:
    """Solve against stored factors; b is (n,) or (n,k)."""
    lu, n = factors.lu, factors.n
    x = np.asarray(b, dtype=np.float64)
    if x.ndim not in (1, 2) or x.shape[0] != n:
        raise DimensionMismatchError(f"right-hand side of shape {x.shape} does not match a {n}x{n} system")
    x = x[factors.perm]  # fancy indexing copies
    with np.errstate(over="ignore", invalid="ignore"):  # checked below
        # forward: apply the recorded row operations
        for i in range(1, n):
            x[i] -= lu[i, :i] @ x[:i]
        # back substitution
        for i in range(n-1, -1, -1):
            x[i] = (x[i] - lu[i, i+1:] @ x[i+1:]) / lu[i, i]
    if not np.all(np.isfinite(x)):
        raise SingularMatrixError("solution contains NaN or Infinity")
    return x

def solve(A, b, tol: Optional[float]=None) -> np.ndarray:
    """Solve the square system A.x = b. Neither A nor b is modified."""
    return lu_solve(lu_factor(A, tol=tol), b)
