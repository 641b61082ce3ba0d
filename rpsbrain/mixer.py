from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .experts import Expert
from .history import HistoryView
from .moves import Move
from .utils import EPS, normalize, uniform


@dataclass
class ExpertSnapshot:
    name: str
    weight: float  # normalized, w_i / sum(w)
    dist: np.ndarray

    def to_dict(self) -> dict:
        return {"name": self.name, "weight": self.weight, "dist": self.dist.tolist()}


@dataclass
class MixerSnapshot:
    dist: np.ndarray
    experts: List[ExpertSnapshot]

    def to_dict(self) -> dict:
        return {"dist": self.dist.tolist(), "experts": [e.to_dict() for e in self.experts]}


class HedgeMixer:
    """Multiplicative-weights (Hedge) mixture over a fixed pool of experts.

    - ``predict`` queries every expert and caches the predictions together
      with the context they were computed from
    - ``update`` charges each expert ``1 - p_i[actual]`` and scales its weight
      by ``exp(-eta * loss)``, then lets the experts advance their own tables
    - weights are never renormalized; only the ratios ``w_i / sum(w)`` matter

    Callers must run predict then update exactly once per round on the same
    HistoryView object.
    """

    def __init__(self, experts: Sequence[Expert], eta: float = 1.6):
        if not experts:
            raise ValueError("HedgeMixer needs at least one expert")
        self.experts: List[Expert] = list(experts)
        self.eta = float(eta)
        self.w = np.ones(len(self.experts), dtype=np.float64)
        self._last_ctx: Optional[HistoryView] = None
        self._last_preds: List[np.ndarray] = []
        self._last_mix: np.ndarray = uniform()

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.experts]

    def normalized_weights(self) -> np.ndarray:
        total = float(np.sum(self.w))
        if total <= 0 or not np.isfinite(total):
            return uniform_weights(len(self.w))
        return self.w / total

    def predict(self, ctx: HistoryView) -> np.ndarray:
        preds = [normalize(e.predict(ctx)) for e in self.experts]
        w_bar = self.normalized_weights()
        mix = np.zeros(3, dtype=np.float64)
        for wi, pi in zip(w_bar, preds):
            mix += float(wi) * pi
        self._last_ctx = ctx
        self._last_preds = preds
        self._last_mix = normalize(mix)
        return self._last_mix.copy()

    def update(self, ctx: HistoryView, actual: Move) -> np.ndarray:
        """Apply one Hedge step for the round described by ``ctx``; returns the losses."""
        if self._last_ctx is ctx and len(self._last_preds) == len(self.experts):
            preds = self._last_preds
        else:
            # the mixer was not consulted this round (fallback path)
            preds = [normalize(e.predict(ctx)) for e in self.experts]
        a = int(actual)
        losses = np.array([1.0 - max(EPS, float(p[a])) for p in preds], dtype=np.float64)
        self.w = self.w * np.exp(-self.eta * losses)
        for e in self.experts:
            e.update(ctx, actual)
        self._last_ctx = None
        return losses

    def snapshot(self) -> MixerSnapshot:
        w_bar = self.normalized_weights()
        experts = []
        for i, e in enumerate(self.experts):
            dist = self._last_preds[i] if i < len(self._last_preds) else uniform()
            experts.append(ExpertSnapshot(name=e.name, weight=float(w_bar[i]), dist=dist.copy()))
        return MixerSnapshot(dist=self._last_mix.copy(), experts=experts)

    def reset(self) -> None:
        for e in self.experts:
            e.reset()
        self.w = np.ones(len(self.experts), dtype=np.float64)
        self._last_ctx = None
        self._last_preds = []
        self._last_mix = uniform()


def uniform_weights(n: int) -> np.ndarray:
    return np.ones(n, dtype=np.float64) / float(max(1, n))
