"""Prisoner's Dilemma strategies: Constant, Tit-for-Tat and Threshold."""

from abc import ABC, abstractmethod
import random
from .engine import Move


class Strategy(ABC):
    """Base class for IPD strategies.

    Configuration is fixed at construction. ``choose`` must be a pure
    function of the two histories; any randomness comes from the ``rng``
    the engine passes in.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def choose(
        self,
        round_num: int,
        my_history: list[Move],
        opp_history: list[Move],
        rng: random.Random,
    ) -> Move:
        """Return the next move.

        Args:
            round_num: Current turn index, equal to ``len(my_history)``.
            my_history: This strategy's own clean (intended) moves.
            opp_history: The opponent's moves as observed, after noise.
            rng: Random source for stochastic strategies.
        """
        ...

    def __repr__(self):
        return f"<{self.name}>"


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

_MOVE_ALIASES = {
    "c": Move.COOPERATE,
    "cooperate": Move.COOPERATE,
    "d": Move.DEFECT,
    "defect": Move.DEFECT,
}


def parse_move(text: str) -> Move:
    """Parse ``C``/``D`` (or the full word) into a Move."""
    try:
        return _MOVE_ALIASES[text.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown move: '{text}'. Use C or D.") from None


# ---------------------------------------------------------------------------
# Constant (Bernoulli) strategy
# ---------------------------------------------------------------------------

class Constant(Strategy):
    """Cooperates with a fixed probability, ignoring both histories.

    ``Constant(1.0)`` is Always Cooperate, ``Constant(0.0)`` is Always
    Defect; anything in between is an independent coin flip every turn.

    **Type**: Baseline
    """
    kind = "constant"

    def __init__(self, cooperate_prob: float):
        if not 0.0 <= cooperate_prob <= 1.0:
            raise ValueError(f"cooperate_prob must be in [0, 1], got {cooperate_prob!r}")
        self.cooperate_prob = float(cooperate_prob)

    @property
    def name(self) -> str:
        return f"Constant({self.cooperate_prob:g})"

    def choose(self, round_num, my_history, opp_history, rng):
        if rng.random() < self.cooperate_prob:
            return Move.COOPERATE
        return Move.DEFECT


# ---------------------------------------------------------------------------
# Tit-for-Tat with a baseline move and a lag window
# ---------------------------------------------------------------------------

class TitForTat(Strategy):
    """Plays ``default`` unless the opponent has matched it for ``delay`` turns.

    For the first ``delay`` turns it plays ``default``. After that it looks
    at the last ``delay`` observed opponent moves: if every one of them
    equals ``default`` it plays the opposite, otherwise ``default``.

    The baseline makes it "nice" (``C``) or "nasty" (``D``); ``delay`` is
    how long the opponent must keep matching it before the response flips.

    **Type**: Reactive
    """
    kind = "tft"

    def __init__(self, default: Move = Move.COOPERATE, delay: int = 1):
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay!r}")
        self.default = default
        self.delay = delay

    @property
    def name(self) -> str:
        return f"TitForTat({self.default.value}, {self.delay})"

    def choose(self, round_num, my_history, opp_history, rng):
        if len(opp_history) < self.delay:
            return self.default
        default = self.default
        # delay 0 looks at an empty window and always flips
        window = opp_history[len(opp_history) - self.delay:]
        if any(m != default for m in window):
            return default
        return default.opposite()


# ---------------------------------------------------------------------------
# Threshold on observed cooperation frequency
# ---------------------------------------------------------------------------

class Threshold(Strategy):
    """Cooperates while the opponent's observed cooperation rate is high enough.

    Unconditionally cooperates for the first ``start`` turns, then
    cooperates iff the fraction of cooperations in the opponent's whole
    noisy history is at least ``coop_thresh``.

    **Type**: Frequency
    """
    kind = "threshold"

    def __init__(self, start: int = 10, coop_thresh: float = 0.5):
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start!r}")
        self.start = start
        self.coop_thresh = float(coop_thresh)

    @property
    def name(self) -> str:
        return f"Threshold({self.start}, {self.coop_thresh:g})"

    def choose(self, round_num, my_history, opp_history, rng):
        n = len(opp_history)
        if n < self.start:
            return Move.COOPERATE
        if n == 0:
            # No observed frequency yet
            return Move.DEFECT
        freq = opp_history.count(Move.COOPERATE) / n
        if freq >= self.coop_thresh:
            return Move.COOPERATE
        return Move.DEFECT


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

ALL_STRATEGY_CLASSES = [Constant, TitForTat, Threshold]

STRATEGY_KINDS = {cls.kind: cls for cls in ALL_STRATEGY_CLASSES}
STRATEGY_KINDS["titfortat"] = TitForTat


def parse_strategy(spec: str) -> Strategy:
    """Build a strategy from a compact spec string.

    Formats::

        constant:<cooperate_prob>         constant:0.25
        tft:<C|D>:<delay>                 tft:C:2
        threshold:<start>:<coop_thresh>   threshold:10:0.7
    """
    kind, *params = [p.strip() for p in spec.split(":")]
    cls = STRATEGY_KINDS.get(kind.lower())
    if cls is None:
        available = ", ".join(sorted(STRATEGY_KINDS))
        raise ValueError(f"Unknown strategy kind: '{kind}'. Available: {available}")

    try:
        if cls is Constant and len(params) == 1:
            return Constant(float(params[0]))
        if cls is TitForTat and len(params) == 2:
            return TitForTat(parse_move(params[0]), int(params[1]))
        if cls is Threshold and len(params) == 2:
            return Threshold(int(params[0]), float(params[1]))
    except ValueError as exc:
        raise ValueError(f"Invalid strategy spec '{spec}': {exc}") from exc
    raise ValueError(f"Invalid strategy spec '{spec}': wrong number of parameters")


def default_roster() -> list[Strategy]:
    """Return the standard 13-strategy roster."""
    return [
        Constant(0.0),
        Constant(0.125),
        Constant(0.25),
        Constant(0.5),
        Constant(1.0),
        TitForTat(Move.COOPERATE, 1),
        TitForTat(Move.COOPERATE, 2),
        TitForTat(Move.DEFECT, 1),
        TitForTat(Move.DEFECT, 2),
        Threshold(10, 0.5),
        Threshold(10, 0.7),
        Threshold(20, 0.5),
        Threshold(20, 0.7),
    ]


def get_strategy_by_name(name: str, roster=None) -> Strategy:
    """Find a strategy by display name (case-insensitive) or parse it as a spec."""
    if roster is None:
        roster = default_roster()
    name_lower = name.lower()
    for strategy in roster:
        if strategy.name.lower() == name_lower:
            return strategy
    if ":" in name:
        return parse_strategy(name)
    available = ", ".join(s.name for s in roster)
    raise ValueError(f"Unknown strategy: '{name}'. Available: {available}")
