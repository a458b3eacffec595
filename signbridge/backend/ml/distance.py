import math
from typing import Optional, Sequence

import numpy as np

from .config import DEFAULTS

DEFAULT_WEIGHTS = np.asarray(DEFAULTS["matcher"]["weights"], dtype=np.float64)


def as_array(hand) -> np.ndarray:
    """(x,y,z) sequence -> float array of shape (N, 3)."""
    arr = np.asarray(hand, dtype=np.float64)
    if arr.size == 0:
        return arr.reshape(0, 3)
    return arr


def normalize(hand) -> np.ndarray:
    """
    Center on the wrist (index 0) and scale by the largest joint distance
    from it. Translation and scale invariant, not rotation invariant.
    An all-zero hand stays zero instead of becoming NaN.
    """
    arr = as_array(hand)
    if len(arr) == 0:
        return arr
    centered = arr - arr[0]
    max_dist = float(np.max(np.linalg.norm(centered, axis=1)))
    return centered / (max_dist or 1.0)


def mirror(hand) -> np.ndarray:
    """Negate X: the same pose made with the other hand."""
    arr = as_array(hand).copy()
    if len(arr):
        arr[:, 0] = -arr[:, 0]
    return arr


def weighted_distance(norm_user: np.ndarray, norm_sample: np.ndarray,
                      weights: Optional[np.ndarray] = None) -> float:
    """Sum of per-joint weighted euclidean distances, direct vs mirrored, min."""
    if len(norm_user) == 0 or len(norm_sample) == 0:
        return math.inf
    w = DEFAULT_WEIGHTS if weights is None else weights

    direct = float(np.sum(w * np.linalg.norm(norm_user - norm_sample, axis=1)))

    flipped = norm_user * np.array([-1.0, 1.0, 1.0])
    mirrored = float(np.sum(w * np.linalg.norm(flipped - norm_sample, axis=1)))

    return min(direct, mirrored)


def distance(user, sample, weights: Optional[Sequence[float]] = None) -> float:
    """Weighted landmark distance, invariant to left/right chirality of `user`."""
    w = None if weights is None else np.asarray(weights, dtype=np.float64)
    return weighted_distance(normalize(user), normalize(sample), w)
