from __future__ import annotations
import logging, time
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional
import numpy as np
from .errors import DimensionMismatchError, InsufficientPointsError, InvalidPointsError, SingularMatrixError
from .kernel import U2, pairwise_sq_dist
from .solver import lu_factor, lu_solve
from .system import build_system, kernel_matrix

log = logging.getLogger(__name__)

MIN_POINTS = 3

class Point2D(NamedTuple):
    x: float
    y: float

def _frozen(a, shape_name: str, rows: Optional[int]=None) -> np.ndarray:
    try:
        arr = np.array(a, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DimensionMismatchError(f"{shape_name} must be a numeric (N, 2) array") from e
    if arr.ndim != 2 or arr.shape[1] != 2 or (rows is not None and arr.shape[0] != rows):
        want = f"({rows}, 2)" if rows is not None else "(N, 2)"
        raise DimensionMismatchError(f"{shape_name} must have shape {want}, got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidPointsError(f"{shape_name} holds NaN or infinite values")
    arr.flags.writeable = False
    return arr

@dataclass(frozen=True)
class TPSModel:
    """
    Fitted thin plate spline.
    src:     (N,2) source control points, needed for distances at evaluation
    linear:  (3,2) affine part; rows = constant, x, y; columns = output x, y
    weights: (N,2) non-linear weight per control point and output dimension
    Arrays are private read-only copies.
    """
    src: np.ndarray
    linear: np.ndarray
    weights: np.ndarray

    def __post_init__(self):
        src = _frozen(self.src, "src")
        if src.shape[0] < MIN_POINTS:
            raise InsufficientPointsError(f"a model needs at least {MIN_POINTS} control points, got {src.shape[0]}")
        object.__setattr__(self, "src", src)
        object.__setattr__(self, "linear", _frozen(self.linear, "linear", rows=3))
        object.__setattr__(self, "weights", _frozen(self.weights, "weights", rows=src.shape[0]))

    @property
    def n(self) -> int:
        return self.src.shape[0]

    def bending_energy(self) -> float:
        W = self.weights
        return float(np.trace(W.T @ kernel_matrix(self.src) @ W))

    def to_dict(self) -> Dict[str, Any]:
        return {"src": self.src.tolist(), "linear": self.linear.tolist(), "weights": self.weights.tolist()}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TPSModel":
        try:
            return cls(src=d["src"], linear=d["linear"], weights=d["weights"])
        except KeyError as e:
            raise DimensionMismatchError(f"model is missing the {e.args[0]!r} entry") from e

def _control_points(src, dst):
    src = np.array(src, dtype=np.float64); dst = np.array(dst, dtype=np.float64)
    for name, a in (("src", src), ("dst", dst)):
        if a.ndim != 2 or a.shape[1] != 2:
            raise DimensionMismatchError(f"{name} must be a sequence of (x, y) pairs, got shape {a.shape}")
    if src.shape[0] != dst.shape[0]:
        raise DimensionMismatchError(f"src has {src.shape[0]} points but dst has {dst.shape[0]}")
    if src.shape[0] < MIN_POINTS:
        raise InsufficientPointsError(f"need at least {MIN_POINTS} control points, got {src.shape[0]}")
    if not (np.all(np.isfinite(src)) and np.all(np.isfinite(dst))):
        raise InvalidPointsError("control points must have finite coordinates")
    return src, dst

def generate(src, dst, tol: Optional[float]=None) -> TPSModel:
    """
    Fit the spline mapping src[i] -> dst[i] exactly.
    src, dst: (N,2) with N >= 3; tol is the solver pivot tolerance (None = scaled default).
    L is factored once and both coordinate right-hand sides are solved against it.
    """
    src, dst = _control_points(src, dst)
    N = src.shape[0]
    t0 = time.perf_counter()
    L, Vx, Vy = build_system(src, dst)
    try:
        W = lu_solve(lu_factor(L, tol=tol), np.stack([Vx, Vy], axis=1))
    except SingularMatrixError as e:
        raise SingularMatrixError(f"TPS fit is singular/degenerate: {e}", column=e.column) from e
    log.debug("generate: fitted %d control points in %.2f ms", N, (time.perf_counter()-t0)*1000)
    return TPSModel(src=src, linear=W[N:], weights=W[:N])

def project(model: TPSModel, x: float, y: float) -> Point2D:
    """Evaluate the fitted spline at (x, y)."""
    a = model.linear
    # Linear part: [1, x, y] . linear
    p = a[0] + x*a[1] + y*a[2]
    # Non-linear part: U2(|src_i - (x,y)|^2) . weights
    d = model.src - (x, y)
    dist = U2((d**2).sum(-1))
    p = p + dist @ model.weights
    return Point2D(float(p[0]), float(p[1]))

def project_many(model: TPSModel, pts) -> np.ndarray:
    """(M,2) query points -> (M,2) projected points; same result as project() per row."""
    pts = np.asarray(pts, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise DimensionMismatchError(f"query points must have shape (M, 2), got {pts.shape}")
    P = np.concatenate([np.ones((pts.shape[0],1)), pts], axis=1)
    K = U2(pairwise_sq_dist(pts, model.src))
    return P @ model.linear + K @ model.weights
