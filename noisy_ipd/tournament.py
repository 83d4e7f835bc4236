"""All-pairs tournament driver producing the score matrix.

Supports parallel execution via ProcessPoolExecutor for multi-core speedup.
Supports optional on_match_done callback for live progress tracking.
"""

import os
import random
from dataclasses import dataclass, field
from typing import Optional, Callable
from concurrent.futures import ProcessPoolExecutor, as_completed

import numpy as np

from .config import ROUND_LENGTH, NUM_ROUNDS, MAX_NOISE
from .engine import run_match, MatchResult
from .strategies import Strategy


@dataclass
class TournamentResult:
    """Score matrix of one tournament plus the matches that filled it.

    ``scores[i, j]`` is strategy i's total score against strategy j.
    """
    names: list[str]
    scores: np.ndarray
    matches: list[MatchResult] = field(default_factory=list)

    def score(self, a: str, b: str) -> int:
        return int(self.scores[self.names.index(a), self.names.index(b)])


# ---------------------------------------------------------------------------
# Worker function for parallel execution (must be top-level for pickling)
# ---------------------------------------------------------------------------

def _run_match_worker(
    strategy_a: Strategy,
    strategy_b: Strategy,
    rounds: int,
    round_length: int,
    max_noise: float,
    seed: Optional[int],
) -> MatchResult:
    """Run a single match in a worker process with its own RNG."""
    return run_match(
        strategy_a, strategy_b,
        rounds=rounds, round_length=round_length,
        max_noise=max_noise, seed=seed,
    )


def pair_indices(n: int) -> list[tuple[int, int]]:
    """Unordered pairs (i, j) with j <= i, self-play included: n(n+1)/2 of them."""
    return [(i, j) for i in range(n) for j in range(i + 1)]


def play_all_pairs(
    strategies: list[Strategy],
    rounds: int = NUM_ROUNDS,
    round_length: int = ROUND_LENGTH,
    max_noise: float = MAX_NOISE,
    seed: Optional[int] = None,
    parallel: bool = False,
    on_match_done: Optional[Callable[[int, int, MatchResult], None]] = None,
) -> TournamentResult:
    """Play every unordered pair once and mirror each result into the matrix.

    One match between i and j yields both ``scores[i, j]`` and
    ``scores[j, i]``. For self-play the second player's score lands on the
    diagonal.

    Args:
        seed: Master seed. Each match gets its own seed drawn from it, so
              results are identical in sequential and parallel mode.
        parallel: If True, run matches across multiple CPU cores.
        on_match_done: Optional callback(completed, total, result) called
                       after each match finishes. Used for progress tracking.
    """
    if not strategies:
        raise ValueError("Tournament needs at least one strategy")

    n = len(strategies)
    pairs = pair_indices(n)

    # Per-match seeds; None lets every match seed itself from the OS
    if seed is not None:
        master_rng = random.Random(seed)
        match_seeds = [master_rng.randint(0, 2**31) for _ in pairs]
    else:
        match_seeds = [None] * len(pairs)

    jobs = [
        (strategies[i], strategies[j], rounds, round_length, max_noise, ms)
        for (i, j), ms in zip(pairs, match_seeds)
    ]

    if parallel and len(jobs) > 1:
        results = _run_parallel(jobs, on_match_done=on_match_done)
    else:
        # Sequential fallback
        results = []
        for k, job in enumerate(jobs):
            result = _run_match_worker(*job)
            results.append(result)
            if on_match_done:
                on_match_done(k + 1, len(jobs), result)

    scores = np.zeros((n, n), dtype=np.int64)
    for (i, j), result in zip(pairs, results):
        scores[i, j] = result.a_score
        scores[j, i] = result.b_score

    return TournamentResult(
        names=[s.name for s in strategies],
        scores=scores,
        matches=results,
    )


# ---------------------------------------------------------------------------
# Parallel execution helper
# ---------------------------------------------------------------------------

def _run_parallel(
    jobs: list[tuple],
    on_match_done: Optional[Callable[[int, int, MatchResult], None]] = None,
) -> list[MatchResult]:
    """Run a batch of matches in parallel using ProcessPoolExecutor.

    Results are returned in job order. Calls
    on_match_done(completed_count, total, result) as each future completes.
    """
    max_workers = min(os.cpu_count() or 4, len(jobs))
    total = len(jobs)

    results: list[Optional[MatchResult]] = [None] * total
    completed = 0

    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        future_to_idx = {}
        for idx, job in enumerate(jobs):
            future = executor.submit(_run_match_worker, *job)
            future_to_idx[future] = idx

        for future in as_completed(future_to_idx):
            idx = future_to_idx[future]
            result = future.result()
            results[idx] = result
            completed += 1

            if on_match_done:
                on_match_done(completed, total, result)

    return results  # type: ignore[return-value]
