"""Pretty-printing for matches, score matrices and rankings."""

import numpy as np

from .engine import MatchResult
from .experiment import RankedEntry


def format_ranking(ranking: list[RankedEntry]) -> list[str]:
    """One ``name: weight`` line per strategy, weight to 6 decimals."""
    return [f"{e.name}: {e.weight:.6f}" for e in ranking]


def print_ranking(ranking: list[RankedEntry]):
    """Print the plain ranking lines."""
    for line in format_ranking(ranking):
        print(line)


def print_ranking_table(ranking: list[RankedEntry], trials: int):
    """Print a formatted ranking table with the raw-score baseline."""
    print()
    print("=" * 60)
    print(f"  {'#':>3s}  {'Strategy':<22s} {'Weight':>10s} {'Avg Score':>12s}")
    print("-" * 60)
    for i, e in enumerate(ranking, 1):
        print(f"  {i:>3d}  {e.name:<22s} {e.weight:>10.6f} {e.avg_score:>12.1f}")
    print("=" * 60)
    print(f"  Weight = summed influence rank over {trials} trials")
    print(f"  Avg Score = mean match score per opponent, averaged over trials")
    print()


def print_match_summary(result: MatchResult):
    """Print a detailed summary of a single pairwise match."""
    print("=" * 60)
    print(f"  {result.strategy_a_name}  vs  {result.strategy_b_name}")
    print(f"  Rounds: {result.rounds} x {result.round_length} turns"
          f"  |  mean noise {result.mean_noise:.3f}")
    print("=" * 60)
    print(f"  {'':20s} {'A':>10s} {'B':>10s}")
    print(f"  {'Total score':20s} {result.a_score:>10d} {result.b_score:>10d}")
    print(f"  {'Per turn':20s} {result.a_avg_per_turn:>10.3f} {result.b_avg_per_turn:>10.3f}")

    if result.a_score > result.b_score:
        leader = result.strategy_a_name
    elif result.b_score > result.a_score:
        leader = result.strategy_b_name
    else:
        leader = "TIE"
    print(f"\n  ★ Higher score: {leader}")
    print("=" * 60)


def print_score_matrix(scores: np.ndarray, names: list[str]):
    """Print the score matrix, rows scoring against columns."""
    abbrs = [f"{i+1:>2d}" for i in range(len(names))]

    print()
    print("Score Matrix (row's total score against column):")
    print()

    for i, n in enumerate(names):
        print(f"  {i+1:>2d} = {n}")
    print()

    header = f"  {'':>22s} " + " ".join(f"{a:>6s}" for a in abbrs)
    print(header)
    print("  " + "-" * (22 + 1 + 7 * len(names)))

    for i, name in enumerate(names):
        row = f"  {name:>22s} "
        row += " ".join(f"{int(s):>6d}" for s in scores[i])
        print(row)
    print()
