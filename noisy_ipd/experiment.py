"""Repeated tournament + ranking trials, summed into a final ranking.

Per-round noise levels and the Constant strategies' coin flips make a
single tournament noisy; summing the weight vectors of several
independent trials dampens that variance.
"""

import os
import random
import logging
from dataclasses import dataclass
from typing import Optional, Callable
from concurrent.futures import ProcessPoolExecutor, as_completed

import numpy as np

from .config import ExperimentConfig
from .ranking import page_rank, average_scores
from .strategies import Strategy
from .tournament import play_all_pairs

logger = logging.getLogger(__name__)


@dataclass
class RankedEntry:
    """One strategy's aggregated result across all trials."""
    name: str
    weight: float
    avg_score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "weight": round(self.weight, 6),
            "avg_score": round(self.avg_score, 2),
        }


@dataclass
class TrialResult:
    weights: np.ndarray
    avg_scores: np.ndarray


def run_trial(
    strategies: list[Strategy],
    config: ExperimentConfig,
    seed: Optional[int] = None,
    parallel: bool = False,
) -> TrialResult:
    """One full tournament followed by the ranking of its score matrix."""
    tournament = play_all_pairs(
        strategies,
        rounds=config.num_rounds,
        round_length=config.round_length,
        max_noise=config.max_noise,
        seed=seed,
        parallel=parallel,
    )
    weights = page_rank(
        tournament.scores,
        iterations=config.iterations,
        alpha=config.alpha,
        tolerance=config.tolerance,
    )
    return TrialResult(weights=weights, avg_scores=average_scores(tournament.scores))


def run_experiment(
    strategies: list[Strategy],
    config: Optional[ExperimentConfig] = None,
    seed: Optional[int] = None,
    parallel: bool = False,
    on_trial_done: Optional[Callable[[int, int], None]] = None,
) -> list[RankedEntry]:
    """Run ``config.trials`` independent trials and sum their weight vectors.

    The summed weights are not re-normalized. Entries are sorted by
    descending weight; ties keep roster order.

    Args:
        seed: Master seed for per-trial seeds. None draws fresh entropy.
        parallel: If True, run trials across multiple CPU cores. Each
                  trial's tournament then runs sequentially in its worker.
        on_trial_done: Optional callback(completed, total).
    """
    if not strategies:
        raise ValueError("Experiment needs at least one strategy")
    if config is None:
        config = ExperimentConfig()

    if seed is not None:
        master_rng = random.Random(seed)
        trial_seeds = [master_rng.randint(0, 2**31) for _ in range(config.trials)]
    else:
        trial_seeds = [None] * config.trials

    n = len(strategies)
    overall = np.zeros(n)
    score_sums = np.zeros(n)
    total = config.trials

    logger.debug("Running %d trials over %d strategies", total, n)

    if parallel and total > 1:
        max_workers = min(os.cpu_count() or 4, total)
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(run_trial, strategies, config, ts)
                for ts in trial_seeds
            ]
            for completed, future in enumerate(as_completed(futures), 1):
                future.result()
                if on_trial_done:
                    on_trial_done(completed, total)
        # Sum in trial order so parallel and sequential runs agree exactly
        for future in futures:
            trial = future.result()
            overall += trial.weights
            score_sums += trial.avg_scores
    else:
        for completed, ts in enumerate(trial_seeds, 1):
            trial = run_trial(strategies, config, ts)
            overall += trial.weights
            score_sums += trial.avg_scores
            if on_trial_done:
                on_trial_done(completed, total)

    entries = [
        RankedEntry(name=s.name, weight=float(w), avg_score=float(a) / total)
        for s, w, a in zip(strategies, overall, score_sums)
    ]
    return sorted(entries, key=lambda e: -e.weight)
