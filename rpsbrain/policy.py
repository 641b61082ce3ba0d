from __future__ import annotations

import random
from enum import Enum

import numpy as np

from .moves import MOVES, Move, counter_move
from .utils import EPS, softmax

# Sharpening strength and exploration rate per aggression level
TEMPERATURE_LAMBDA = {"normal": 2.0, "ruthless": 4.0}
EXPLORATION = {"normal": 0.05, "ruthless": 0.0}


class Aggression(str, Enum):
    FAIR = "fair"
    NORMAL = "normal"
    RUTHLESS = "ruthless"

    def __str__(self) -> str:
        return self.value


def random_move(rng: random.Random) -> Move:
    return MOVES[rng.randrange(3)]


def sharpen(p: np.ndarray, aggression: Aggression) -> np.ndarray:
    """Temperature-sharpened copy of ``p``: softmax(log(max(eps, p)) * lambda)."""
    aggression = Aggression(aggression)
    if aggression is Aggression.FAIR:
        return np.ones(3, dtype=np.float64) / 3.0
    lam = TEMPERATURE_LAMBDA[aggression.value]
    logits = np.log(np.maximum(EPS, np.asarray(p, dtype=np.float64))) * lam
    return softmax(logits)


def likely_player_move(p: np.ndarray, aggression: Aggression) -> Move:
    # np.argmax keeps the first listed move on ties
    return Move(int(np.argmax(sharpen(p, aggression))))


def choose_counter(p: np.ndarray, aggression: Aggression, rng: random.Random) -> Move:
    """Map a distribution over the player's next move to the AI's move."""
    aggression = Aggression(aggression)
    if aggression is Aggression.FAIR:
        return random_move(rng)
    move = counter_move(likely_player_move(p, aggression))
    epsilon = EXPLORATION[aggression.value]
    if epsilon > 0 and rng.random() < epsilon:
        move = random_move(rng)
    return move

