"""Influence ranking of strategies from a tournament score matrix.

A PageRank-style power iteration: a strategy's weight grows when it
scores well against opponents that already carry a high weight. Unlike
PageRank the raw scores are used as edge weights, not transition
probabilities.
"""

import logging
from typing import Iterator, Optional

import numpy as np

from .config import RANK_ITERATIONS, ALPHA

logger = logging.getLogger(__name__)


def _as_matrix(scores) -> np.ndarray:
    matrix = np.asarray(scores, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Score matrix must be square, got shape {matrix.shape}")
    if matrix.shape[0] == 0:
        raise ValueError("Score matrix must not be empty")
    return matrix


def _unnormalized(matrix: np.ndarray, weights: np.ndarray, alpha: float) -> np.ndarray:
    return weights * ((matrix * weights[np.newaxis, :]) ** alpha).sum(axis=1)


def _normalize(unnorm: np.ndarray) -> tuple[np.ndarray, bool]:
    """Scale to sum 1; returns (weights, fell_back_to_uniform)."""
    total = unnorm.sum()
    if total <= 0.0 or not np.isfinite(total):
        return np.full(len(unnorm), 1.0 / len(unnorm)), True
    return unnorm / total, False


def rank_step(matrix: np.ndarray, weights: np.ndarray, alpha: float = ALPHA) -> np.ndarray:
    """One normalized iteration.

    ``next_i = w_i * sum_j (scores[i, j] * w_j) ** alpha``, divided by the
    total so the result sums to 1. A zero total falls back to uniform
    weights.
    """
    return _normalize(_unnormalized(matrix, weights, alpha))[0]


def power_iterations(scores, alpha: float = ALPHA) -> Iterator[np.ndarray]:
    """Yield the normalized weight vector after each iteration, forever.

    Weights start at 1 for every strategy and are first normalized by
    the first step.
    """
    matrix = _as_matrix(scores)
    weights = np.ones(matrix.shape[0])
    warned = False
    while True:
        weights, fell_back = _normalize(_unnormalized(matrix, weights, alpha))
        if fell_back and not warned:
            logger.warning("Rank weights summed to zero; falling back to uniform weights")
            warned = True
        yield weights


def page_rank(
    scores,
    iterations: int = RANK_ITERATIONS,
    alpha: float = ALPHA,
    tolerance: Optional[float] = None,
) -> np.ndarray:
    """Rank strategies by iterating ``rank_step`` a fixed number of times.

    Args:
        scores: Square matrix, ``scores[i][j]`` = i's score against j.
        iterations: Maximum number of iterations.
        alpha: Sharpness exponent on each ``score * weight`` term.
        tolerance: If set, stop early once the L1 change between two
                   iterations drops below it. ``None`` always runs the
                   full ``iterations``.
    """
    if iterations < 1:
        raise ValueError(f"iterations must be at least 1, got {iterations!r}")

    previous = None
    weights = None
    for step, weights in enumerate(power_iterations(scores, alpha), 1):
        if tolerance is not None and previous is not None:
            if np.abs(weights - previous).sum() < tolerance:
                logger.debug("Ranking converged after %d iterations", step)
                break
        if step >= iterations:
            break
        previous = weights
    return weights


def average_scores(scores) -> np.ndarray:
    """Mean score of each strategy across all opponents (row means)."""
    return _as_matrix(scores).mean(axis=1)
