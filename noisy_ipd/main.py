"""CLI entry point for the noisy IPD influence-ranking experiment."""

import argparse
import logging
import sys

from .config import (
    ExperimentConfig,
    ROUND_LENGTH,
    NUM_ROUNDS,
    PLAYS,
    RANK_ITERATIONS,
    ALPHA,
    MAX_NOISE,
)
from .engine import run_match
from .strategies import default_roster, parse_strategy, get_strategy_by_name, STRATEGY_KINDS
from .tournament import play_all_pairs
from .ranking import page_rank, average_scores
from .experiment import run_experiment, RankedEntry
from .stats import (
    print_ranking,
    print_ranking_table,
    print_match_summary,
    print_score_matrix,
)


def list_strategies():
    """Print the default roster and the accepted spec formats."""
    print("\nDefault Roster:")
    print("-" * 40)
    for i, s in enumerate(default_roster(), 1):
        print(f"  {i:>2d}. {s.name}")
    print()
    print(f"Strategy kinds for --strategy: {', '.join(sorted(STRATEGY_KINDS))}")
    print("  e.g. constant:0.25  tft:C:2  threshold:10:0.7")
    print()


def _roster(args):
    if args.strategy:
        return [parse_strategy(spec) for spec in args.strategy]
    return default_roster()


def _config(args) -> ExperimentConfig:
    return ExperimentConfig(
        round_length=args.round_length,
        num_rounds=args.rounds,
        trials=getattr(args, "trials", PLAYS),
        iterations=args.iterations,
        alpha=args.alpha,
        tolerance=args.tolerance,
        max_noise=args.max_noise,
    )


def cmd_rank(args):
    """Run the full multi-trial experiment and print the ranking."""
    roster = _roster(args)
    config = _config(args)
    total_matches = len(roster) * (len(roster) + 1) // 2

    if args.table:
        print(f"\n🏆 Influence Ranking")
        print(f"  {len(roster)} strategies  |  {total_matches} matches/trial  |  "
              f"{config.trials} trials  |  {config.num_rounds}x{config.round_length} turns"
              + (f"  |  seed={args.seed}" if args.seed is not None else ""))

    def on_trial_done(completed, total):
        if args.progress:
            print(f"  trial {completed}/{total}", file=sys.stderr, flush=True)

    ranking = run_experiment(
        roster, config, seed=args.seed, parallel=args.parallel,
        on_trial_done=on_trial_done,
    )

    if args.table:
        print_ranking_table(ranking, config.trials)
    else:
        print_ranking(ranking)


def cmd_matrix(args):
    """Run a single tournament, print its score matrix and ranking."""
    roster = _roster(args)
    config = _config(args)
    total_matches = len(roster) * (len(roster) + 1) // 2
    print(f"\n📊 Single Tournament")
    print(f"  {len(roster)} strategies  |  {total_matches} matches  |  "
          f"{config.num_rounds}x{config.round_length} turns each"
          + (f"  |  seed={args.seed}" if args.seed is not None else ""))
    print(f"  Running...", end="", flush=True)

    result = play_all_pairs(
        roster,
        rounds=config.num_rounds,
        round_length=config.round_length,
        max_noise=config.max_noise,
        seed=args.seed,
        parallel=args.parallel,
    )
    print(f" done! ({len(result.matches)} matches played)")

    print_score_matrix(result.scores, result.names)

    weights = page_rank(
        result.scores,
        iterations=config.iterations,
        alpha=config.alpha,
        tolerance=config.tolerance,
    )
    avgs = average_scores(result.scores)
    ranking = sorted(
        (RankedEntry(name, float(w), float(a)) for name, w, a in zip(result.names, weights, avgs)),
        key=lambda e: -e.weight,
    )
    print_ranking_table(ranking, 1)


def cmd_match(args):
    """Run one pairwise match and print its summary."""
    roster = default_roster()
    strategy_a = get_strategy_by_name(args.strategy_a, roster)
    strategy_b = get_strategy_by_name(args.strategy_b, roster)
    print(f"\n⚔️  Pairwise Match")
    print(f"  {strategy_a.name} vs {strategy_b.name}  |  {args.rounds} rounds"
          + (f"  |  seed={args.seed}" if args.seed is not None else ""))

    result = run_match(
        strategy_a, strategy_b,
        rounds=args.rounds,
        round_length=args.round_length,
        max_noise=args.max_noise,
        seed=args.seed,
    )
    print_match_summary(result)


def _add_game_args(p):
    p.add_argument("--rounds", type=int, default=NUM_ROUNDS,
                   help=f"Rounds per pairwise match (default: {NUM_ROUNDS})")
    p.add_argument("--round-length", type=int, default=ROUND_LENGTH,
                   help=f"Turns per round (default: {ROUND_LENGTH})")
    p.add_argument("--max-noise", type=float, default=MAX_NOISE,
                   help=f"Upper bound of the per-round noise level (default: {MAX_NOISE})")
    p.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")


def _add_rank_args(p):
    p.add_argument("--strategy", action="append", metavar="SPEC",
                   help="Roster entry, e.g. constant:0.5 or tft:C:2 (repeatable; "
                        "default: built-in roster)")
    p.add_argument("--iterations", type=int, default=RANK_ITERATIONS,
                   help=f"Ranking iterations (default: {RANK_ITERATIONS})")
    p.add_argument("--alpha", type=float, default=ALPHA,
                   help=f"Ranking exponent (default: {ALPHA})")
    p.add_argument("--tolerance", type=float, default=None,
                   help="Stop ranking early once the weight change drops below this")
    p.add_argument("--parallel", action="store_true", help="Use all CPU cores")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="noisy_ipd",
        description="Noisy iterated Prisoner's Dilemma tournament with influence ranking",
    )
    parser.add_argument("--list", action="store_true", help="List the default roster")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # rank
    rnk = subparsers.add_parser("rank", help="Run the multi-trial experiment (default)")
    _add_game_args(rnk)
    _add_rank_args(rnk)
    rnk.add_argument("--trials", "--plays", type=int, default=PLAYS,
                     help=f"Independent trials (default: {PLAYS})")
    rnk.add_argument("--table", action="store_true", help="Print a formatted table")
    rnk.add_argument("--progress", action="store_true", help="Report trial progress on stderr")

    # matrix
    mtx = subparsers.add_parser("matrix", help="One tournament: score matrix and ranking")
    _add_game_args(mtx)
    _add_rank_args(mtx)

    # match
    mch = subparsers.add_parser("match", help="One pairwise match between two strategies")
    mch.add_argument("--strategy-a", required=True, help="Strategy name or spec")
    mch.add_argument("--strategy-b", required=True, help="Strategy name or spec")
    _add_game_args(mch)

    return parser


def main(argv=None):
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        list_strategies()
        return

    if args.command is None:
        args = parser.parse_args([*argv, "rank"])

    try:
        if args.command == "rank":
            cmd_rank(args)
        elif args.command == "matrix":
            cmd_matrix(args)
        elif args.command == "match":
            cmd_match(args)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
