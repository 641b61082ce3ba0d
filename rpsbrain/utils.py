from __future__ import annotations

import numpy as np

N_MOVES = 3

# Probability floor used wherever a log or a loss is taken
EPS = 1e-6


def uniform() -> np.ndarray:
    return np.ones(N_MOVES, dtype=np.float64) / float(N_MOVES)


def normalize(p: np.ndarray) -> np.ndarray:
    p = np.asarray(p, dtype=np.float64)
    s = float(np.sum(p))
    if s <= 0 or not np.isfinite(s):
        return uniform()
    return p / s


def from_counts(counts: np.ndarray, alpha: float = 1.0) -> np.ndarray:
    """Dirichlet (add-alpha) smoothed distribution from raw counts."""
    return normalize(np.asarray(counts, dtype=np.float64) + float(alpha))


def one_hot(i: int, n: int = N_MOVES) -> np.ndarray:
    v = np.zeros(n, dtype=np.float64)
    if 0 <= i < n:
        v[i] = 1.0
    return v


def softmax(x: np.ndarray, temperature: float = 1.0) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64) / max(1e-6, temperature)
    x = x - np.max(x)
    ex = np.exp(x)
    return ex / np.sum(ex)


def entropy(p: np.ndarray) -> float:
    p = np.asarray(p, dtype=np.float64)
    p = np.clip(p, 1e-8, 1.0)
    p = p / np.sum(p)
    return float(-np.sum(p * np.log(p)))
