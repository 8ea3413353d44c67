from __future__ import annotations
import numpy as np

def U2(r2):
    """
    TPS radial basis on a squared distance: r2*ln(r2), 0 at r2 == 0.
    Used for both system assembly and evaluation so the two stay consistent.
    """
    r2 = np.asarray(r2, dtype=np.float64)
    safe = np.where(r2 == 0, 1.0, r2)  # ln(1) == 0 keeps U2(0) == 0
    out = r2 * np.log(safe)
    return float(out) if out.ndim == 0 else out

def U(r):
    return U2(np.asarray(r, dtype=np.float64) ** 2)

def pairwise_sq_dist(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """(m,2),(n,2) -> (m,n) squared euclidean distances."""
    d = a[:, None, :] - b[None, :, :]
    return (d ** 2).sum(-1)
