"""Experiment parameters for the noisy IPD ranking."""

from dataclasses import dataclass, asdict
from typing import Optional

# Turns in one round
ROUND_LENGTH = 100
# Independent rounds (fresh noise level each) per pairwise match
NUM_ROUNDS = 100
# Independent tournament + ranking trials per experiment
PLAYS = 20
# Power-iteration steps of the ranking
RANK_ITERATIONS = 5000
# Sharpness exponent applied to score * weight
ALPHA = 1.0
# Noise levels are drawn uniformly in [0, MAX_NOISE)
MAX_NOISE = 0.5


@dataclass(frozen=True)
class ExperimentConfig:
    round_length: int = ROUND_LENGTH
    num_rounds: int = NUM_ROUNDS
    trials: int = PLAYS
    iterations: int = RANK_ITERATIONS
    alpha: float = ALPHA
    tolerance: Optional[float] = None
    max_noise: float = MAX_NOISE

    def __post_init__(self):
        for name in ("round_length", "num_rounds", "trials", "iterations"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.alpha <= 0:
            raise ValueError(f"alpha must be positive, got {self.alpha!r}")
        if self.tolerance is not None and self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive or None, got {self.tolerance!r}")
        if not 0.0 <= self.max_noise <= 0.5:
            raise ValueError(f"max_noise must be in [0, 0.5], got {self.max_noise!r}")

    def to_dict(self) -> dict:
        return asdict(self)
