import random

import numpy as np

from rpsbrain import Aggression, Move, choose_counter, sharpen

R, P, S = Move.ROCK, Move.PAPER, Move.SCISSORS


def test_fair_is_uniform():
    rng = random.Random(1234)
    peaked = np.array([0.98, 0.01, 0.01])
    picks = [choose_counter(peaked, Aggression.FAIR, rng) for _ in range(1000)]
    for m in (R, P, S):
        assert abs(picks.count(m) / 1000.0 - 1.0 / 3.0) < 0.05


def test_ruthless_always_counters():
    rng = random.Random(7)
    dist = np.array([0.9, 0.05, 0.05])
    assert all(choose_counter(dist, Aggression.RUTHLESS, rng) == P for _ in range(500))


def test_normal_explores_a_little():
    rng = random.Random(7)
    dist = np.array([0.05, 0.05, 0.9])
    picks = [choose_counter(dist, Aggression.NORMAL, rng) for _ in range(2000)]
    off = sum(1 for m in picks if m != R)
    # 5% exploration, two thirds of which land on another move
    assert 0 < off < 150


def test_ties_go_to_first_listed_move():
    rng = random.Random(0)
    assert choose_counter(np.ones(3) / 3.0, Aggression.RUTHLESS, rng) == P
    assert choose_counter(np.array([0.1, 0.45, 0.45]), Aggression.RUTHLESS, rng) == S


def test_sharpen_is_a_distribution_and_sharper():
    p = np.array([0.5, 0.3, 0.2])
    normal = sharpen(p, Aggression.NORMAL)
    ruthless = sharpen(p, Aggression.RUTHLESS)
    for q in (normal, ruthless):
        assert abs(float(np.sum(q)) - 1.0) < 1e-9
        assert np.all(q >= 0)
    assert ruthless[0] > normal[0] > p[0]
    assert np.allclose(sharpen(p, Aggression.FAIR), np.ones(3) / 3.0)
    # lambda=2 squares and renormalizes
    assert np.allclose(normal, p ** 2 / np.sum(p ** 2))


def test_accepts_string_aggression():
    rng = random.Random(0)
    assert choose_counter(np.array([0.9, 0.05, 0.05]), "ruthless", rng) == P
