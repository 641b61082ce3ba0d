import itertools

import pytest

from rpsbrain import MOVES, Move, Outcome, counter_move, most_frequent_move, resolve
from rpsbrain.moves import parse_move, parse_outcome


def test_resolve_all_pairs():
    cases = [
        (Move.ROCK, Move.ROCK, Outcome.TIE),
        (Move.ROCK, Move.PAPER, Outcome.LOSE),
        (Move.ROCK, Move.SCISSORS, Outcome.WIN),
        (Move.PAPER, Move.ROCK, Outcome.WIN),
        (Move.PAPER, Move.PAPER, Outcome.TIE),
        (Move.PAPER, Move.SCISSORS, Outcome.LOSE),
        (Move.SCISSORS, Move.ROCK, Outcome.LOSE),
        (Move.SCISSORS, Move.PAPER, Outcome.WIN),
        (Move.SCISSORS, Move.SCISSORS, Outcome.TIE),
    ]
    for player, ai, expected in cases:
        assert resolve(player, ai) == expected


def test_resolve_antisymmetric():
    for a, b in itertools.permutations(MOVES, 2):
        assert (resolve(a, b) == Outcome.WIN) == (resolve(b, a) == Outcome.LOSE)
        assert resolve(a, b) != Outcome.TIE


def test_counter_move_cycle():
    assert counter_move(Move.ROCK) == Move.PAPER
    assert counter_move(Move.PAPER) == Move.SCISSORS
    assert counter_move(Move.SCISSORS) == Move.ROCK
    for m in MOVES:
        assert counter_move(counter_move(counter_move(m))) == m
        assert resolve(counter_move(m), m) == Outcome.WIN


def test_most_frequent_move():
    assert most_frequent_move([Move.ROCK, Move.ROCK, Move.PAPER]) == Move.ROCK
    assert most_frequent_move([Move.SCISSORS, Move.PAPER]) == Move.PAPER
    assert most_frequent_move([]) is None


def test_parse_move_and_outcome():
    assert parse_move("Rock") == Move.ROCK
    assert parse_move(2) == Move.SCISSORS
    assert parse_move("1") == Move.PAPER
    assert parse_outcome("TIE") == Outcome.TIE
    with pytest.raises(ValueError):
        parse_move("lizard")
    with pytest.raises(ValueError):
        parse_move(3)
    with pytest.raises(ValueError):
        parse_move(True)
    with pytest.raises(ValueError):
        parse_outcome("draw")
