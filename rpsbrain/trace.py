from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .heuristics import HeuristicPrediction
from .history import HistoryView
from .mixer import MixerSnapshot
from .moves import MOVES, Move, Outcome
from .policy import Aggression

POLICY_MIXER = "mixer"
POLICY_HEURISTIC = "heuristic"

LOW_CONFIDENCE_REASON = "Low confidence – random choice"

_EXPERT_PHRASES = {
    "FrequencyExpert": "Frequency expert estimated {pct}% chance you play {move}.",
    "RecencyExpert": "Recency expert weighted {pct}% toward {move} from your latest moves.",
    "MarkovExpert(k=1)": "Markov order-1 expert projected {move} ({pct}%).",
    "MarkovExpert(k=2)": "Markov order-2 expert leaned {pct}% toward {move}.",
    "OutcomeExpert": "Outcome expert saw {pct}% likelihood after that result for {move}.",
    "WinStayLoseShiftExpert": "Win/Stay-Lose/Switch expert assigned {pct}% to {move}.",
    "PeriodicExpert": "Periodic expert detected a loop pointing {pct}% to {move}.",
    "BaitResponseExpert": "Bait response expert predicted {move} with {pct}% weight.",
}

_FRIENDLY_NAMES = {
    "FrequencyExpert": "Frequency expert",
    "RecencyExpert": "Recency expert",
    "MarkovExpert(k=1)": "Markov expert(k=1)",
    "MarkovExpert(k=2)": "Markov expert(k=2)",
    "OutcomeExpert": "Outcome expert",
    "WinStayLoseShiftExpert": "Win/Stay-Lose/Switch expert",
    "PeriodicExpert": "Periodic expert",
    "BaitResponseExpert": "Bait response expert",
}


def _dist_dict(p: np.ndarray) -> Dict[str, float]:
    return {str(m): float(p[int(m)]) for m in MOVES}


@dataclass
class ExpertSample:
    name: str
    weight: float
    p_actual: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "weight": self.weight, "p_actual": self.p_actual}


@dataclass
class PendingDecision:
    """Everything known about a round before the player's move is revealed."""

    policy: str
    move: Move
    confidence: float
    history: HistoryView
    aggression: Aggression = Aggression.NORMAL
    mixer: Optional[MixerSnapshot] = None
    heuristic: Optional[HeuristicPrediction] = None
    committed: bool = False

    @property
    def dist(self) -> Optional[np.ndarray]:
        return self.mixer.dist if self.mixer is not None else None

    def insight_chips(self, limit: int = 2) -> List[Dict[str, str]]:
        """Short labels for a live "why" panel, most relevant first."""
        chips: List[Dict[str, str]] = []
        h = self.heuristic
        if h is not None and h.reason:
            label = h.reason if len(h.reason) <= 52 else h.reason[:49] + "…"
            chips.append({"id": "heuristic-reason", "label": label, "detail": h.reason})
        if h is not None and h.move is not None:
            pct = round(h.confidence * 100)
            chips.append({
                "id": "heuristic-prediction",
                "label": f"Expecting {h.move.pretty}",
                "detail": f"Heuristic expected {h.move.pretty} about {pct}% of the time and picked the counter move.",
            })
        if self.mixer is not None:
            ranked = sorted(self.mixer.experts, key=lambda e: e.weight, reverse=True)
            for i, e in enumerate(ranked[:2]):
                top = Move(int(np.argmax(e.dist)))
                name = _FRIENDLY_NAMES.get(e.name, e.name)
                chips.append({
                    "id": f"expert-{i}-{e.name}",
                    "label": f"{name}: {top.pretty}",
                    "detail": (
                        f"{name} leaned {round(float(e.dist[int(top)]) * 100)}% toward {top.pretty}, "
                        f"contributing {round(e.weight * 100)}% of the mix."
                    ),
                })
        return chips[:limit]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": self.policy,
            "ai_move": str(self.move),
            "aggression": str(self.aggression),
            "confidence": self.confidence,
            "mixer": {
                "dist": _dist_dict(self.mixer.dist),
                "experts": [
                    {"name": e.name, "weight": e.weight, "dist": _dist_dict(e.dist)}
                    for e in self.mixer.experts
                ],
            } if self.mixer is not None else None,
            "heuristic": self.heuristic.to_dict() if self.heuristic is not None else None,
            "insights": self.insight_chips(),
        }


@dataclass
class DecisionTrace:
    """Completed per-round record handed to the external logger."""

    policy: str
    ai_move: Move
    player_move: Move
    outcome: Outcome
    confidence: float
    confidence_bucket: str
    reason: str
    round_index: int
    dist: Optional[np.ndarray] = None
    top_experts: List[ExpertSample] = field(default_factory=list)
    heuristic: Optional[HeuristicPrediction] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round_index,
            "policy": self.policy,
            "player": str(self.player_move),
            "ai": str(self.ai_move),
            "outcome": str(self.outcome),
            "confidence": self.confidence,
            "confidence_bucket": self.confidence_bucket,
            "reason": self.reason,
            "mixer": {
                "dist": _dist_dict(self.dist),
                "counter": str(self.ai_move),
                "top_experts": [e.to_dict() for e in self.top_experts],
            } if self.dist is not None else None,
            "heuristic": self.heuristic.to_dict() if self.heuristic is not None else None,
        }


def confidence_bucket(value: float) -> str:
    if value >= 0.7:
        return "high"
    if value >= 0.45:
        return "medium"
    return "low"


def expert_reason_text(name: str, move: Move, probability: float) -> str:
    pct = round(probability * 100)
    template = _EXPERT_PHRASES.get(name, name + " estimated {pct}% on {move}.")
    return template.format(pct=pct, move=move.pretty)


def describe_decision(
    policy: str,
    top_experts: List[ExpertSample],
    heuristic: Optional[HeuristicPrediction],
    player: Move,
    ai: Move,
) -> str:
    if policy == POLICY_MIXER:
        if top_experts:
            top = top_experts[0]
            return expert_reason_text(top.name, player, top.p_actual) + f" AI played {ai.pretty} to counter."
        return f"Mixer blended experts and countered {player.pretty} with {ai.pretty}."
    if heuristic is not None:
        parts = []
        if heuristic.reason:
            parts.append(heuristic.reason + ("" if heuristic.reason.endswith(".") else "."))
        if heuristic.move is not None:
            parts.append(f"Predicted {heuristic.move.pretty} ({round(heuristic.confidence * 100)}%).")
        parts.append(f"Countered with {ai.pretty}.")
        return " ".join(parts)
    return f"AI played {ai.pretty} against {player.pretty}."


def finalize(pending: PendingDecision, player: Move, outcome: Outcome, top_k: int = 3) -> DecisionTrace:
    """Fill in the post-hoc fields of ``pending`` now that ``player`` is known."""
    top: List[ExpertSample] = []
    if pending.mixer is not None:
        samples = [
            ExpertSample(name=e.name, weight=e.weight, p_actual=float(e.dist[int(player)]))
            for e in pending.mixer.experts
        ]
        top = sorted(samples, key=lambda s: s.weight, reverse=True)[:top_k]
    return DecisionTrace(
        policy=pending.policy,
        ai_move=pending.move,
        player_move=player,
        outcome=outcome,
        confidence=pending.confidence,
        confidence_bucket=confidence_bucket(pending.confidence),
        reason=describe_decision(pending.policy, top, pending.heuristic, player, pending.move),
        round_index=len(pending.history) + 1,
        dist=pending.dist,
        top_experts=top,
        heuristic=pending.heuristic,
    )
