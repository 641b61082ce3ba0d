from __future__ import annotations

import threading
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .dataset import TraceLogger
from .experts import Expert, build_default_experts
from .heuristics import HeuristicPrediction, predict_next
from .history import HistoryView
from .mixer import HedgeMixer
from .moves import Move, parse_move, resolve
from .policy import Aggression, choose_counter, random_move
from .trace import (
    LOW_CONFIDENCE_REASON,
    POLICY_HEURISTIC,
    POLICY_MIXER,
    DecisionTrace,
    PendingDecision,
    finalize,
)
from .utils import one_hot

STATE_IDLE = "idle"
STATE_PREDICTING = "predicting"
STATE_DECIDED = "decided"


class DecisionEngine:
    """
    Adaptive Rock-Paper-Scissors opponent for one game session / profile.

    - Predicts the player's next-move distribution with a Hedge mixture of experts
    - Falls back to a Markov + pattern heuristic while the ensemble is gated
      (exploit disabled, fair mode, or not enough history)
    - Turns the distribution into a counter-move according to the aggression level
    - Emits a decision trace per round; the finished trace goes to the caller
      and, when configured, to a JSONL trace logger

    One round at a time: ``decide`` then ``commit``. A new ``decide`` before
    ``commit`` abandons the pending round.
    """

    def __init__(
        self,
        experts: Optional[Sequence[Expert]] = None,
        eta: float = 1.6,
        heuristic_floor: float = 0.34,
        min_history: int = 1,
        learn_in_fallback: bool = True,
        pattern_bias: float = 0.6,
        trace_logger: Optional[TraceLogger] = None,
        session_id: str = "default",
    ):
        self.mixer = HedgeMixer(list(experts) if experts is not None else build_default_experts(), eta=eta)
        self.heuristic_floor = float(heuristic_floor)
        self.min_history = int(min_history)
        self.learn_in_fallback = learn_in_fallback
        self.pattern_bias = float(pattern_bias)
        self.trace_logger = trace_logger
        self.session_id = session_id

        self.state = STATE_IDLE
        self.rounds_committed = 0
        self._pending: Optional[PendingDecision] = None
        # guards mixer weights, expert tables and the pending slot
        self._lock = threading.Lock()

    # ---------------------- Public API ----------------------
    def decide(
        self,
        history: HistoryView,
        aggression: Aggression = Aggression.NORMAL,
        exploit_enabled: bool = True,
    ) -> Tuple[Move, PendingDecision]:
        aggression = Aggression(aggression)
        with self._lock:
            self._pending = None
            self.state = STATE_PREDICTING
            use_mix = (
                exploit_enabled
                and aggression is not Aggression.FAIR
                and len(history) >= self.min_history
            )
            if use_mix:
                pending = self._decide_mixer(history, aggression)
            else:
                pending = self._decide_fallback(history, aggression)
            self._pending = pending
            self.state = STATE_DECIDED
            return pending.move, pending

    def commit(self, pending: PendingDecision, actual_player_move: Move) -> DecisionTrace:
        """Close the round: learn from the revealed move and return the final trace."""
        actual = parse_move(actual_player_move)
        with self._lock:
            if pending.committed:
                raise RuntimeError("decision was already committed")
            if pending is not self._pending:
                raise RuntimeError("commit() without a matching decide()")

            if self._should_learn(pending):
                self.mixer.update(pending.history, actual)

            trace = finalize(pending, actual, resolve(actual, pending.move))
            pending.committed = True
            self._pending = None
            self.rounds_committed += 1
            self.state = STATE_IDLE

        if self.trace_logger is not None:
            self.trace_logger.log(self.session_id, trace.to_dict())
        return trace

    def reset(self) -> None:
        """Start a new training cycle: fresh experts, uniform weights, nothing pending."""
        with self._lock:
            self.mixer.reset()
            self._pending = None
            self.rounds_committed = 0
            self.state = STATE_IDLE

    def weights(self) -> List[Tuple[str, float]]:
        return list(zip(self.mixer.names, self.mixer.normalized_weights().tolist()))

    @property
    def pending(self) -> Optional[PendingDecision]:
        return self._pending

    # ---------------------- Internals ----------------------
    def _decide_mixer(self, history: HistoryView, aggression: Aggression) -> PendingDecision:
        dist = self.mixer.predict(history)
        snapshot = self.mixer.snapshot()
        move = choose_counter(dist, aggression, history.rng)
        return PendingDecision(
            policy=POLICY_MIXER,
            move=move,
            confidence=float(np.max(dist)),
            history=history,
            aggression=aggression,
            mixer=snapshot,
        )

    def _decide_fallback(self, history: HistoryView, aggression: Aggression) -> PendingDecision:
        rng = history.rng
        heur = predict_next(history.player_moves, rng, pattern_bias=self.pattern_bias)
        if heur.move is None or heur.confidence < self.heuristic_floor:
            return PendingDecision(
                policy=POLICY_HEURISTIC,
                move=random_move(rng),
                confidence=heur.confidence,
                history=history,
                aggression=aggression,
                heuristic=HeuristicPrediction(heur.move, heur.confidence, LOW_CONFIDENCE_REASON),
            )
        move = choose_counter(one_hot(int(heur.move)), aggression, rng)
        return PendingDecision(
            policy=POLICY_HEURISTIC,
            move=move,
            confidence=heur.confidence,
            history=history,
            aggression=aggression,
            heuristic=heur,
        )

    def _should_learn(self, pending: PendingDecision) -> bool:
        if pending.policy == POLICY_MIXER:
            return True
        return self.learn_in_fallback and pending.aggression is not Aggression.FAIR
