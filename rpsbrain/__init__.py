from .core import DecisionEngine
from .dataset import TraceLogger
from .experts import (
    EXPERT_REGISTRY,
    BaitResponseExpert,
    Expert,
    FrequencyExpert,
    MarkovExpert,
    OutcomeExpert,
    PeriodicExpert,
    RecencyExpert,
    WinStayLoseShiftExpert,
    build_default_experts,
)
from .heuristics import HeuristicPrediction, detect_pattern_next, markov_next, predict_next
from .history import HistoryView
from .mixer import HedgeMixer
from .moves import MOVES, Move, Outcome, counter_move, most_frequent_move, resolve
from .policy import Aggression, choose_counter, sharpen
from .trace import DecisionTrace, PendingDecision

__all__ = [
    "Aggression",
    "BaitResponseExpert",
    "DecisionEngine",
    "DecisionTrace",
    "EXPERT_REGISTRY",
    "Expert",
    "FrequencyExpert",
    "HedgeMixer",
    "HeuristicPrediction",
    "HistoryView",
    "MOVES",
    "MarkovExpert",
    "Move",
    "Outcome",
    "OutcomeExpert",
    "PendingDecision",
    "PeriodicExpert",
    "RecencyExpert",
    "TraceLogger",
    "WinStayLoseShiftExpert",
    "build_default_experts",
    "choose_counter",
    "counter_move",
    "detect_pattern_next",
    "markov_next",
    "most_frequent_move",
    "predict_next",
    "resolve",
    "sharpen",
]
