"""Shared pytest fixtures for all tests."""

import random

import pytest

from noisy_ipd.config import ExperimentConfig
from noisy_ipd.engine import Move
from noisy_ipd.strategies import Strategy, Constant, TitForTat, Threshold


class RecordingStrategy(Strategy):
    """Always cooperates and records what the engine showed it each turn."""

    def __init__(self, label="Recorder"):
        self.label = label
        self.calls = []

    @property
    def name(self):
        return self.label

    def choose(self, round_num, my_history, opp_history, rng):
        self.calls.append((round_num, list(my_history), list(opp_history)))
        return Move.COOPERATE


@pytest.fixture
def rng():
    """Deterministic random source."""
    return random.Random(12345)


@pytest.fixture
def cooperator():
    return Constant(1.0)


@pytest.fixture
def defector():
    return Constant(0.0)


@pytest.fixture
def small_roster():
    """Four strategies, one of each kind plus a defector."""
    return [
        Constant(0.0),
        Constant(1.0),
        TitForTat(Move.COOPERATE, 1),
        Threshold(5, 0.5),
    ]


@pytest.fixture
def quick_config():
    """Tiny experiment parameters so tests stay fast."""
    return ExperimentConfig(
        round_length=10,
        num_rounds=5,
        trials=3,
        iterations=200,
    )


@pytest.fixture
def make_recorder():
    """Factory for strategies that capture the histories they were shown."""
    return RecordingStrategy
