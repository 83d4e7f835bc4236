"""Unit tests for engine.py.

Tests cover:
1. Move - opposite() involution
2. payoff - the fixed table and its swap symmetry
3. flip - validation, identity at zero noise, fair coin at 0.5
4. play_round - zero-noise scores, clean own history, scoring on noisy moves
5. run_match - per-round noise levels, summing, seeding
"""

import random

import pytest

from noisy_ipd.engine import (
    Move,
    MatchResult,
    opposite,
    payoff,
    flip,
    play_round,
    run_match,
    _FrozenHistory,
)
from noisy_ipd.strategies import Constant, TitForTat, Threshold


C = Move.COOPERATE
D = Move.DEFECT


# =============================================================================
# Move & payoff
# =============================================================================


class TestMove:

    @pytest.mark.parametrize("move", list(Move))
    def test_opposite_is_involution(self, move):
        assert opposite(opposite(move)) == move
        assert move.opposite().opposite() is move

    def test_opposite_swaps_symbols(self):
        assert opposite(C) is D
        assert opposite(D) is C


class TestPayoff:

    def test_payoff_table(self):
        assert payoff(C, C) == (2, 2)
        assert payoff(C, D) == (0, 3)
        assert payoff(D, C) == (3, 0)
        assert payoff(D, D) == (1, 1)

    @pytest.mark.parametrize("m1", list(Move))
    @pytest.mark.parametrize("m2", list(Move))
    def test_payoff_swap_symmetry(self, m1, m2):
        s1, s2 = payoff(m1, m2)
        assert payoff(m2, m1) == (s2, s1)

    def test_prisoners_dilemma_ordering(self):
        # Temptation > reward > punishment > sucker
        assert payoff(D, C)[0] > payoff(C, C)[0] > payoff(D, D)[0] > payoff(C, D)[0]


# =============================================================================
# Noise model
# =============================================================================


class TestFlip:

    @pytest.mark.parametrize("prob", [-0.01, 0.51, 1.0])
    def test_out_of_range_probability_raises(self, prob, rng):
        with pytest.raises(ValueError):
            flip(C, prob, rng)

    @pytest.mark.parametrize("prob", [0.0, 0.25, 0.5])
    def test_boundary_probabilities_accepted(self, prob, rng):
        assert flip(C, prob, rng) in (C, D)

    @pytest.mark.parametrize("move", list(Move))
    def test_zero_noise_is_identity(self, move, rng):
        assert all(flip(move, 0.0, rng) is move for _ in range(1000))

    @pytest.mark.parametrize("move", list(Move))
    def test_half_noise_is_fair_coin(self, move):
        rng = random.Random(2024)
        draws = 20000
        flipped = sum(flip(move, 0.5, rng) is not move for _ in range(draws))
        assert 0.48 < flipped / draws < 0.52

    def test_each_call_draws_once(self):
        a = random.Random(9)
        b = random.Random(9)
        flip(C, 0.3, a)
        b.random()
        assert a.random() == b.random()


class TestFrozenHistory:

    def test_read_only_view_tracks_list(self):
        data = [C]
        view = _FrozenHistory(data)
        data.append(D)
        assert len(view) == 2
        assert view[-1] is D
        assert list(view[-2:]) == [C, D]
        assert view.count(C) == 1
        assert D in view
        assert not hasattr(view, "append")


# =============================================================================
# Round simulator
# =============================================================================


class TestPlayRound:

    def test_mutual_cooperation_without_noise(self, cooperator, rng):
        result = play_round(cooperator, Constant(1.0), 0.0, rng, round_length=100)
        assert (result.a_score, result.b_score) == (200, 200)

    def test_mutual_defection_without_noise(self, defector, rng):
        result = play_round(defector, Constant(0.0), 0.0, rng, round_length=100)
        assert (result.a_score, result.b_score) == (100, 100)

    def test_sucker_payoff_without_noise(self, cooperator, defector, rng):
        result = play_round(cooperator, defector, 0.0, rng, round_length=100)
        assert (result.a_score, result.b_score) == (0, 300)

    def test_round_length_controls_turns(self, cooperator, rng):
        result = play_round(cooperator, cooperator, 0.0, rng, round_length=7, record_moves=True)
        assert len(result.a_moves) == len(result.b_noisy) == 7
        assert result.a_score == 14

    def test_strategies_see_clean_own_and_noisy_opponent_history(self, make_recorder, rng):
        a = make_recorder("A")
        b = make_recorder("B")
        result = play_round(a, b, 0.5, rng, round_length=50, record_moves=True)

        for turn, (round_num, mine, theirs) in enumerate(a.calls):
            assert round_num == turn
            assert len(mine) == len(theirs) == turn
            assert all(m is C for m in mine)

        _, a_mine, a_theirs = a.calls[-1]
        _, b_mine, b_theirs = b.calls[-1]
        assert a_mine == result.a_moves[:49]
        assert a_theirs == result.b_noisy[:49]
        assert b_theirs == result.a_noisy[:49]
        # At 0.5 noise some cooperations must have been corrupted
        assert D in result.a_noisy

    def test_payoff_scored_on_noisy_moves(self, rng):
        result = play_round(
            Constant(0.5), TitForTat(C, 1), 0.3, rng, round_length=100, record_moves=True,
        )
        expected_a = sum(payoff(x, y)[0] for x, y in zip(result.a_noisy, result.b_noisy))
        expected_b = sum(payoff(x, y)[1] for x, y in zip(result.a_noisy, result.b_noisy))
        assert (result.a_score, result.b_score) == (expected_a, expected_b)

    def test_noise_changes_cooperative_score(self, cooperator):
        result = play_round(cooperator, Constant(1.0), 0.5, random.Random(3), round_length=100)
        assert (result.a_score, result.b_score) != (200, 200)


# =============================================================================
# Pairwise match runner
# =============================================================================


class TestRunMatch:

    def test_zero_max_noise_sums_rounds(self, cooperator, defector):
        result = run_match(cooperator, defector, rounds=3, round_length=10, max_noise=0.0, seed=1)
        assert isinstance(result, MatchResult)
        assert result.a_score == 0
        assert result.b_score == 90
        assert result.noise_levels == [0.0, 0.0, 0.0]

    def test_fresh_noise_level_each_round(self, cooperator):
        result = run_match(cooperator, Constant(1.0), rounds=100, round_length=5, seed=11)
        assert len(result.noise_levels) == 100
        assert all(0.0 <= p < 0.5 for p in result.noise_levels)
        assert len(set(result.noise_levels)) > 90

    def test_seed_reproducible(self):
        a = Constant(0.5)
        b = Threshold(3, 0.6)
        r1 = run_match(a, b, rounds=10, round_length=20, seed=42)
        r2 = run_match(a, b, rounds=10, round_length=20, seed=42)
        assert (r1.a_score, r1.b_score) == (r2.a_score, r2.b_score)
        assert r1.noise_levels == r2.noise_levels

    def test_explicit_rng_used(self):
        a = Constant(0.5)
        r1 = run_match(a, a, rounds=5, round_length=10, rng=random.Random(5))
        r2 = run_match(a, a, rounds=5, round_length=10, rng=random.Random(5))
        assert r1.to_dict() == r2.to_dict()

    def test_seed_and_rng_together_rejected(self, cooperator):
        with pytest.raises(ValueError):
            run_match(cooperator, cooperator, rounds=1, round_length=1,
                      seed=1, rng=random.Random(1))

    def test_result_properties(self, cooperator):
        result = run_match(cooperator, Constant(1.0), rounds=2, round_length=10, max_noise=0.0)
        assert result.turns == 20
        assert result.a_avg_per_turn == 2.0
        assert result.to_dict()["strategy_a"] == "Constant(1)"
