from __future__ import annotations

from enum import Enum, IntEnum
from typing import Iterable, Optional, Union

import numpy as np


class Move(IntEnum):
    # Move encoding: 0=Rock, 1=Paper, 2=Scissors
    ROCK = 0
    PAPER = 1
    SCISSORS = 2

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def pretty(self) -> str:
        return self.name.capitalize()


class Outcome(str, Enum):
    """Result of a round from the human player's point of view."""

    WIN = "win"
    LOSE = "lose"
    TIE = "tie"

    def __str__(self) -> str:
        return self.value


MOVES = (Move.ROCK, Move.PAPER, Move.SCISSORS)


def counter_move(m: Move) -> Move:
    """The move that beats ``m`` (Paper beats Rock, Scissors beats Paper, Rock beats Scissors)."""
    return Move((int(m) + 1) % 3)


def beats(a: Move, b: Move) -> bool:
    return counter_move(b) == a


def resolve(player: Move, ai: Move) -> Outcome:
    if player == ai:
        return Outcome.TIE
    if beats(player, ai):
        return Outcome.WIN
    return Outcome.LOSE


def most_frequent_move(moves: Iterable[Move]) -> Optional[Move]:
    counts = np.zeros(3, dtype=np.int64)
    seen = False
    for m in moves:
        counts[int(m)] += 1
        seen = True
    if not seen:
        return None
    return Move(int(np.argmax(counts)))


def parse_move(value: Union[Move, int, str]) -> Move:
    """Coerce a raw wire value (0-2 or a move name) into a Move."""
    if isinstance(value, Move):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid move: {value!r}")
    if isinstance(value, int):
        if 0 <= value <= 2:
            return Move(value)
        raise ValueError(f"invalid move: {value!r}")
    if isinstance(value, str):
        key = value.strip().upper()
        if key in Move.__members__:
            return Move[key]
        if key.isdigit():
            return parse_move(int(key))
    raise ValueError(f"invalid move: {value!r}")


def parse_outcome(value: Union[Outcome, str]) -> Outcome:
    if isinstance(value, Outcome):
        return value
    try:
        return Outcome(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"invalid outcome: {value!r}") from None
