"""Core game engine for noisy iterated Prisoner's Dilemma matches."""

from enum import Enum
from dataclasses import dataclass, field
import random
from typing import Optional

from .config import ROUND_LENGTH, NUM_ROUNDS, MAX_NOISE


class Move(Enum):
    COOPERATE = "C"
    DEFECT = "D"

    def opposite(self) -> "Move":
        return _OPPOSITE[self]


_OPPOSITE = {
    Move.COOPERATE: Move.DEFECT,
    Move.DEFECT: Move.COOPERATE,
}


def opposite(move: Move) -> Move:
    """Return the other move."""
    return _OPPOSITE[move]


# Pre-computed payoff table: (move_a, move_b) → (score_a, score_b)
_PAYOFF_TABLE = {
    (Move.COOPERATE, Move.COOPERATE): (2, 2),
    (Move.COOPERATE, Move.DEFECT): (0, 3),
    (Move.DEFECT, Move.COOPERATE): (3, 0),
    (Move.DEFECT, Move.DEFECT): (1, 1),
}


def payoff(move_a: Move, move_b: Move) -> tuple[int, int]:
    """Return the (A, B) scores for a single encounter."""
    return _PAYOFF_TABLE[move_a, move_b]


def flip(move: Move, prob: float, rng: random.Random) -> Move:
    """Corrupt a move with probability ``prob``.

    ``prob`` must lie in [0, 0.5]; noise may never be more likely than
    fidelity.
    """
    if not 0.0 <= prob <= 0.5:
        raise ValueError(f"Noise probability must be in [0, 0.5], got {prob!r}")
    if rng.random() < prob:
        return _OPPOSITE[move]
    return move


class _FrozenHistory:
    """O(1) immutable view of a move history list.

    Wraps a reference to the engine's internal history list without
    copying.  Supports the read operations strategies use (indexing,
    slicing, iteration, len, ``in``, bool) but has no append / pop /
    insert methods.

    Created once per round and reused every turn; the view sees new
    moves as the underlying list grows.
    """
    __slots__ = ('_data',)

    def __init__(self, data: list):
        self._data = data

    def __getitem__(self, key):
        return self._data[key]

    def __len__(self):
        return len(self._data)

    def __iter__(self):
        return iter(self._data)

    def __contains__(self, item):
        return item in self._data

    def __bool__(self):
        return bool(self._data)

    def count(self, item) -> int:
        return self._data.count(item)

    def __repr__(self):
        return f"FrozenHistory({self._data!r})"


@dataclass
class RoundResult:
    """Outcome of one fixed-length round under a single noise level."""
    noise: float
    a_score: int = 0
    b_score: int = 0
    a_moves: list = field(default_factory=list)
    b_moves: list = field(default_factory=list)
    a_noisy: list = field(default_factory=list)
    b_noisy: list = field(default_factory=list)


@dataclass
class MatchResult:
    """Summed scores of a pairwise match between two strategies."""
    strategy_a_name: str
    strategy_b_name: str
    rounds: int
    round_length: int
    a_score: int = 0
    b_score: int = 0
    noise_levels: list = field(default_factory=list)

    @property
    def turns(self) -> int:
        return self.rounds * self.round_length

    @property
    def a_avg_per_turn(self) -> float:
        return (self.a_score / self.turns) if self.turns else 0.0

    @property
    def b_avg_per_turn(self) -> float:
        return (self.b_score / self.turns) if self.turns else 0.0

    @property
    def mean_noise(self) -> float:
        if not self.noise_levels:
            return 0.0
        return sum(self.noise_levels) / len(self.noise_levels)

    def to_dict(self) -> dict:
        return {
            "strategy_a": self.strategy_a_name,
            "strategy_b": self.strategy_b_name,
            "rounds": self.rounds,
            "round_length": self.round_length,
            "a_score": self.a_score,
            "b_score": self.b_score,
            "a_avg_per_turn": round(self.a_avg_per_turn, 4),
            "b_avg_per_turn": round(self.b_avg_per_turn, 4),
            "mean_noise": round(self.mean_noise, 4),
        }


def play_round(
    strategy_a,
    strategy_b,
    noise: float,
    rng: random.Random,
    round_length: int = ROUND_LENGTH,
    record_moves: bool = False,
) -> RoundResult:
    """Play one round of ``round_length`` turns under a shared noise level.

    Each side decides from its own clean history and the opponent's noisy
    history. Both decisions are flipped independently and the payoff is
    scored on the noisy moves.
    """
    result = RoundResult(noise=noise)

    # Internal mutable lists — only the engine appends to these
    a_clean: list[Move] = []
    b_clean: list[Move] = []
    a_noisy: list[Move] = []
    b_noisy: list[Move] = []

    a_clean_view = _FrozenHistory(a_clean)
    b_clean_view = _FrozenHistory(b_clean)
    a_noisy_view = _FrozenHistory(a_noisy)
    b_noisy_view = _FrozenHistory(b_noisy)

    # Local references for the hot loop
    payoff_table = _PAYOFF_TABLE
    a_choose = strategy_a.choose
    b_choose = strategy_b.choose
    a_score = 0
    b_score = 0

    for turn in range(round_length):
        move_a = a_choose(turn, a_clean_view, b_noisy_view, rng)
        move_b = b_choose(turn, b_clean_view, a_noisy_view, rng)
        seen_a = flip(move_a, noise, rng)
        seen_b = flip(move_b, noise, rng)

        sa, sb = payoff_table[seen_a, seen_b]
        a_score += sa
        b_score += sb

        a_clean.append(move_a)
        b_clean.append(move_b)
        a_noisy.append(seen_a)
        b_noisy.append(seen_b)

    result.a_score = a_score
    result.b_score = b_score
    if record_moves:
        result.a_moves = a_clean
        result.b_moves = b_clean
        result.a_noisy = a_noisy
        result.b_noisy = b_noisy
    return result


def run_match(
    strategy_a,
    strategy_b,
    rounds: int = NUM_ROUNDS,
    round_length: int = ROUND_LENGTH,
    max_noise: float = MAX_NOISE,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> MatchResult:
    """Run ``rounds`` independent rounds between one ordered pair.

    Every round draws a fresh noise level uniformly in [0, max_noise).
    Pass either a ``seed`` or an existing ``rng``, not both; with neither,
    the match uses a fresh OS-seeded generator.
    """
    if seed is not None and rng is not None:
        raise ValueError("Pass either seed or rng to run_match, not both")
    if rng is None:
        rng = random.Random(seed)

    result = MatchResult(
        strategy_a_name=strategy_a.name,
        strategy_b_name=strategy_b.name,
        rounds=rounds,
        round_length=round_length,
    )

    a_total = 0
    b_total = 0
    for _ in range(rounds):
        noise = rng.random() * max_noise
        rr = play_round(strategy_a, strategy_b, noise, rng, round_length=round_length)
        a_total += rr.a_score
        b_total += rr.b_score
        result.noise_levels.append(noise)

    result.a_score = a_total
    result.b_score = b_total
    return result
