from __future__ import annotations
from typing import Optional
import numpy as np

class TPSError(Exception):
    """Base class for every failure raised by thinplatekit."""

class DimensionMismatchError(TPSError, ValueError):
    pass

class InsufficientPointsError(TPSError, ValueError):
    pass

class InvalidPointsError(TPSError, ValueError):
    """Control point coordinates are NaN or infinite."""

class SingularMatrixError(TPSError, np.linalg.LinAlgError):
    """
    Raised when elimination finds no usable pivot, or when the solved vector
    holds NaN/Infinity. `column` is the pivot column, None for the latter case.
    """
    def __init__(self, msg: str, column: Optional[int]=None):
        super().__init__(msg)
        self.column = column
