from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .moves import Move

# Light heuristics kept as a safety net for when the ensemble is gated or has
# nothing to go on yet.

MARKOV_TRUSTED = 0.6


@dataclass
class HeuristicPrediction:
    move: Optional[Move]
    confidence: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "predicted": str(self.move) if self.move is not None else None,
            "conf": self.confidence,
            "reason": self.reason,
        }


def transition_counts(moves: Sequence[Move]) -> np.ndarray:
    # 3x3 transition of player moves, rows = previous move
    M = np.zeros((3, 3), dtype=np.float64)
    for prev, nxt in zip(moves, moves[1:]):
        M[int(prev), int(nxt)] += 1.0
    return M


def markov_next(moves: Sequence[Move]) -> Tuple[Optional[Move], float]:
    """First-order Markov guess for the next move and its confidence (max_count / row_total)."""
    if len(moves) < 2:
        return None, 0.0
    row = transition_counts(moves)[int(moves[-1])]
    total = float(np.sum(row))
    if total <= 0:
        return None, 0.0
    best = int(np.argmax(row))
    return Move(best), float(row[best]) / total


def detect_pattern_next(moves: Sequence[Move]) -> Tuple[Optional[Move], Optional[str]]:
    """Explicit short-pattern detectors, checked in priority order."""
    n = len(moves)
    if n >= 3 and moves[-1] == moves[-2] == moves[-3]:
        return moves[-1], "Recent triple repeat detected"
    if n >= 6 and tuple(moves[n - 6:n - 3]) == tuple(moves[n - 3:]):
        return moves[n - 3], "Repeating three-beat pattern spotted"
    if n >= 4:
        a, b, c, d = moves[n - 4:]
        if a == c and b == d and a != b:
            return a, "Alternating two-step pattern detected"
    return None, None


def predict_next(
    moves: Sequence[Move],
    rng: random.Random,
    pattern_bias: float = 0.6,
) -> HeuristicPrediction:
    """Combine the Markov guess and the pattern detectors into one prediction.

    When both fire, disagree and the Markov row is trustworthy, the pattern
    wins with probability ``pattern_bias`` so the AI does not become
    predictable itself.
    """
    mk_move, mk_conf = markov_next(moves)
    pat, pat_reason = detect_pattern_next(moves)
    pattern_reason = pat_reason or "Pattern repetition heuristic"

    if mk_move is not None and pat is not None and mk_move == pat:
        return HeuristicPrediction(mk_move, max(0.8, mk_conf), "Markov and pattern consensus")
    if pat is not None and (mk_move is None or mk_conf < MARKOV_TRUSTED):
        return HeuristicPrediction(pat, 0.75, pattern_reason)
    if mk_move is not None and pat is not None:
        if rng.random() < pattern_bias:
            return HeuristicPrediction(pat, 0.7, pattern_reason)
        return HeuristicPrediction(mk_move, 0.7, "Markov transition preference")
    if mk_move is not None:
        return HeuristicPrediction(mk_move, mk_conf * 0.65, "Markov transition heuristic")
    if pat is not None:
        return HeuristicPrediction(pat, 0.6, pattern_reason)
    return HeuristicPrediction(None, 0.0, "Insufficient signal")
