from __future__ import annotations
from typing import Tuple
import numpy as np
from .kernel import U2, pairwise_sq_dist

def kernel_matrix(src: np.ndarray) -> np.ndarray:
    """K[i,j] = U2(|src_i - src_j|^2); symmetric with a zero diagonal."""
    return U2(pairwise_sq_dist(src, src))

def build_system(src: np.ndarray, dst: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    src, dst: (N,2) control points
    returns (L, Vx, Vy) with L the (N+3)x(N+3) bordered matrix
        [[K,   P],
         [P.T, 0]]   with P = [1, x, y]
    and Vx/Vy the destination coordinates padded with three zeros
    (side conditions: weights sum to zero and are orthogonal to x and y).
    """
    N = src.shape[0]
    K = kernel_matrix(src)
    P = np.concatenate([np.ones((N,1)), src], axis=1)
    O = np.zeros((3,3))
    L = np.block([[K, P],
                  [P.T, O]])
    Vx = np.concatenate([dst[:,0], np.zeros(3)])
    Vy = np.concatenate([dst[:,1], np.zeros(3)])
    return L, Vx, Vy
