from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

from src.access.errors import InvalidEmbeddingError

VectorLike = Union[Sequence[float], np.ndarray]

# Norms outside this range are rescaled so dot products and norm products stay finite.
_SAFE_NORM_MIN = 1e-150
_SAFE_NORM_MAX = 1e150


def as_vector(vec: VectorLike) -> np.ndarray:
    """Convert to a 1D float64 array, rejecting empty, non-finite or all-zero input."""
    try:
        arr = np.asarray(vec, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidEmbeddingError(f"embedding is not numeric: {e}") from e
    if arr.size == 0:
        raise InvalidEmbeddingError("embedding is empty")
    if not np.all(np.isfinite(arr)):
        raise InvalidEmbeddingError("embedding contains NaN or inf")
    if not np.any(arr):
        raise InvalidEmbeddingError("embedding has zero magnitude")
    return arr


def scaled_with_norm(arr: np.ndarray) -> Tuple[np.ndarray, float]:
    """Return (vector, norm) with the norm in a range where cosine arithmetic cannot overflow.

    Cosine similarity is scale invariant, so very large or very small vectors are
    divided by their largest absolute component first. Other vectors are returned as is.
    """
    n = float(np.linalg.norm(arr))
    if np.isfinite(n) and _SAFE_NORM_MIN <= n <= _SAFE_NORM_MAX:
        return arr, n
    arr = arr / float(np.max(np.abs(arr)))
    return arr, float(np.linalg.norm(arr))


def cosine_of(va: np.ndarray, na: float, vb: np.ndarray, nb: float) -> float:
    """Cosine of two vectors already passed through `scaled_with_norm`."""
    sim = float(np.dot(va, vb) / (na * nb))
    if not np.isfinite(sim):
        raise InvalidEmbeddingError("similarity is not finite")
    return min(1.0, max(-1.0, sim))


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """Cosine similarity for 1D vectors of equal length.

    Unlike a plain dot/norm division this never yields NaN: invalid input raises
    `InvalidEmbeddingError`.
    """
    va = as_vector(a)
    vb = as_vector(b)
    if va.shape[0] != vb.shape[0]:
        raise InvalidEmbeddingError(f"dimension mismatch: {va.shape[0]} != {vb.shape[0]}")
    va, na = scaled_with_norm(va)
    vb, nb = scaled_with_norm(vb)
    return cosine_of(va, na, vb, nb)
