from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

import numpy as np

from .history import HistoryView
from .moves import Move, Outcome
from .utils import from_counts, normalize, uniform

# Move encoding: 0=Rock, 1=Paper, 2=Scissors


class Expert(ABC):
    """Predicts the player's next move from the shared round history."""

    name: str = "Expert"

    @abstractmethod
    def predict(self, ctx: HistoryView) -> np.ndarray:
        ...

    def update(self, ctx: HistoryView, actual: Move) -> None:
        """Advance internal state once the player's move for ``ctx`` is known."""

    def reset(self) -> None:
        """Drop everything learned so far."""

    def __repr__(self) -> str:
        return f"<{self.name}>"


class FrequencyExpert(Expert):
    """Dirichlet-smoothed frequency of player moves over a sliding window."""

    name = "FrequencyExpert"

    def __init__(self, window: int = 20, alpha: float = 1.0):
        if window < 1:
            raise ValueError("window must be >= 1")
        self.window = int(window)
        self.alpha = float(alpha)

    def predict(self, ctx: HistoryView) -> np.ndarray:
        counts = np.zeros(3, dtype=np.float64)
        for m in ctx.player_moves[-self.window:]:
            counts[int(m)] += 1.0
        return from_counts(counts, self.alpha)


class RecencyExpert(Expert):
    """Exponentially decayed frequency over the whole history (lower gamma = more recency)."""

    name = "RecencyExpert"

    def __init__(self, gamma: float = 0.85, alpha: float = 1.0):
        if not 0.0 < gamma < 1.0:
            raise ValueError("gamma must be in (0, 1)")
        self.gamma = float(gamma)
        self.alpha = float(alpha)

    def predict(self, ctx: HistoryView) -> np.ndarray:
        n = len(ctx.player_moves)
        counts = np.zeros(3, dtype=np.float64)
        for i, m in enumerate(ctx.player_moves):
            counts[int(m)] += self.gamma ** (n - 1 - i)
        return from_counts(counts, self.alpha)


class MarkovExpert(Expert):
    """Order-k n-gram model of the player's moves with back-off to lower orders.

    The table maps the tuple of the last k player moves to the counts of the
    move that followed. Prediction looks up orders k down to 1 and uses the
    first key present.
    """

    def __init__(self, k: int = 1, alpha: float = 1.0):
        if k < 1:
            raise ValueError("k must be >= 1")
        self.k = int(k)
        self.alpha = float(alpha)
        self.name = f"MarkovExpert(k={self.k})"
        self.table: Dict[Tuple[Move, ...], np.ndarray] = {}

    def _key(self, ctx: HistoryView, order: int) -> Tuple[Move, ...]:
        return tuple(ctx.player_moves[len(ctx.player_moves) - order:])

    def predict(self, ctx: HistoryView) -> np.ndarray:
        n = len(ctx.player_moves)
        for order in range(self.k, 0, -1):
            if n < order:
                continue
            counts = self.table.get(self._key(ctx, order))
            if counts is not None:
                return from_counts(counts, self.alpha)
        return uniform()

    def update(self, ctx: HistoryView, actual: Move) -> None:
        if len(ctx.player_moves) < self.k:
            return
        counts = self.table.setdefault(self._key(ctx, self.k), np.zeros(3, dtype=np.float64))
        counts[int(actual)] += 1.0

    def reset(self) -> None:
        self.table = {}


class OutcomeExpert(Expert):
    """What the player tends to play after a win, a loss or a tie."""

    name = "OutcomeExpert"

    def __init__(self, alpha: float = 1.0):
        self.alpha = float(alpha)
        self.reset()

    def predict(self, ctx: HistoryView) -> np.ndarray:
        last = ctx.last_outcome
        if last is None:
            return uniform()
        return from_counts(self.by_outcome[last], self.alpha)

    def update(self, ctx: HistoryView, actual: Move) -> None:
        last = ctx.last_outcome
        if last is None:
            return
        self.by_outcome[last][int(actual)] += 1.0

    def reset(self) -> None:
        self.by_outcome: Dict[Outcome, np.ndarray] = {o: np.zeros(3, dtype=np.float64) for o in Outcome}


class WinStayLoseShiftExpert(Expert):
    """Counts keyed by (last outcome, last player move)."""

    name = "WinStayLoseShiftExpert"

    def __init__(self, alpha: float = 1.0):
        self.alpha = float(alpha)
        self.table: Dict[Tuple[Outcome, Move], np.ndarray] = {}

    def _key(self, ctx: HistoryView):
        if ctx.last_outcome is None or ctx.last_player_move is None:
            return None
        return (ctx.last_outcome, ctx.last_player_move)

    def predict(self, ctx: HistoryView) -> np.ndarray:
        key = self._key(ctx)
        counts = self.table.get(key) if key is not None else None
        if counts is None:
            return uniform()
        return from_counts(counts, self.alpha)

    def update(self, ctx: HistoryView, actual: Move) -> None:
        key = self._key(ctx)
        if key is None:
            return
        counts = self.table.setdefault(key, np.zeros(3, dtype=np.float64))
        counts[int(actual)] += 1.0

    def reset(self) -> None:
        self.table = {}


class PeriodicExpert(Expert):
    """Detect short cycles (period min_period..max_period) and project the next move."""

    name = "PeriodicExpert"

    def __init__(
        self,
        max_period: int = 5,
        min_period: int = 2,
        window: int = 18,
        confidence_threshold: float = 0.65,
    ):
        if window < 1:
            raise ValueError("window must be >= 1")
        self.max_period = int(max_period)
        self.min_period = int(min_period)
        self.window = int(window)
        self.confidence_threshold = float(confidence_threshold)

    def best_period(self, moves: Tuple[Move, ...]) -> Tuple[int, float]:
        """Return (period, match ratio) of the best lag, or (-1, 0.0)."""
        n = len(moves)
        best_p, best_score = -1, 0.0
        for p in range(self.min_period, self.max_period + 1):
            total = n - p
            if total <= 0:
                continue
            matches = sum(1 for i in range(p, n) if moves[i] == moves[i - p])
            score = matches / total
            if score > best_score:
                best_p, best_score = p, score
        return best_p, best_score

    def predict(self, ctx: HistoryView) -> np.ndarray:
        arr = ctx.player_moves[-self.window:]
        n = len(arr)
        if n < self.min_period + 1:
            return uniform()
        best_p, best_score = self.best_period(arr)
        if best_p < 0 or best_score < self.confidence_threshold:
            return uniform()
        guess = arr[n - best_p]
        p = np.zeros(3, dtype=np.float64)
        p[int(guess)] = 0.9
        # residual mass on every move, then renormalize (sums to 1.05 before)
        return normalize(p + 0.05)


class BaitResponseExpert(Expert):
    """How the player responds to the AI's previous move."""

    name = "BaitResponseExpert"

    def __init__(self, alpha: float = 1.0):
        self.alpha = float(alpha)
        self.reset()

    def predict(self, ctx: HistoryView) -> np.ndarray:
        last_ai = ctx.last_ai_move
        if last_ai is None:
            return uniform()
        return from_counts(self.table[int(last_ai)], self.alpha)

    def update(self, ctx: HistoryView, actual: Move) -> None:
        last_ai = ctx.last_ai_move
        if last_ai is None:
            return
        self.table[int(last_ai), int(actual)] += 1.0

    def reset(self) -> None:
        # rows: AI's previous move, columns: player's next move
        self.table = np.zeros((3, 3), dtype=np.float64)


EXPERT_REGISTRY = (
    "FrequencyExpert",
    "RecencyExpert",
    "MarkovExpert(k=1)",
    "MarkovExpert(k=2)",
    "OutcomeExpert",
    "WinStayLoseShiftExpert",
    "PeriodicExpert",
    "BaitResponseExpert",
)


def build_default_experts() -> List[Expert]:
    """Return a fresh instance of the standard eight-expert pool."""
    experts: List[Expert] = [
        FrequencyExpert(window=20, alpha=1.0),
        RecencyExpert(gamma=0.85, alpha=1.0),
        MarkovExpert(k=1, alpha=1.0),
        MarkovExpert(k=2, alpha=1.0),
        OutcomeExpert(alpha=1.0),
        WinStayLoseShiftExpert(alpha=1.0),
        PeriodicExpert(max_period=5, min_period=2, window=18, confidence_threshold=0.65),
        BaitResponseExpert(alpha=1.0),
    ]
    return experts
