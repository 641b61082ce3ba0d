import random

import numpy as np
import pytest

from rpsbrain import (
    EXPERT_REGISTRY,
    Aggression,
    DecisionEngine,
    HistoryView,
    Move,
    Outcome,
    TraceLogger,
    resolve,
)
from rpsbrain.core import STATE_DECIDED, STATE_IDLE

R, P, S = Move.ROCK, Move.PAPER, Move.SCISSORS


def play(engine, moves, aggression=Aggression.NORMAL, exploit_enabled=True, seed=42):
    """Drive ``engine`` through a scripted player; returns the final history and traces."""
    history = HistoryView(rng=random.Random(seed))
    traces = []
    for m in moves:
        ai, pending = engine.decide(history, aggression, exploit_enabled)
        traces.append(engine.commit(pending, m))
        history = history.advance(m, ai)
    return history, traces


def test_rock_spammer_gets_paper():
    engine = DecisionEngine()
    history = HistoryView(
        player_moves=(R,) * 5,
        ai_moves=(P,) * 5,
        outcomes=(Outcome.LOSE,) * 5,
        rng=random.Random(42),
    )
    move, pending = engine.decide(history, Aggression.RUTHLESS, exploit_enabled=True)
    assert pending.policy == "mixer"
    assert int(np.argmax(pending.dist)) == R
    assert move == P
    assert engine.state == STATE_DECIDED


def test_rock_spammer_after_learning():
    engine = DecisionEngine()
    history, _ = play(engine, [R] * 12, Aggression.RUTHLESS)
    move, pending = engine.decide(history, Aggression.RUTHLESS, True)
    assert move == P
    assert pending.confidence > 0.75


def test_decide_is_deterministic_across_instances():
    moves = [R, P, P, S, R, R, P, S, S, R]
    results = []
    for _ in range(2):
        engine = DecisionEngine()
        history, traces = play(engine, moves, Aggression.NORMAL, seed=9)
        history = HistoryView(history.player_moves, history.ai_moves, history.outcomes, rng=random.Random(77))
        move, pending = engine.decide(history, Aggression.NORMAL, True)
        results.append((move, pending.dist.tolist(), [t.ai_move for t in traces]))
    assert results[0] == results[1]


def test_repeated_decide_same_input_same_answer():
    engine = DecisionEngine()
    history, _ = play(engine, [R, P, S, R, P, S, R])
    a = engine.decide(HistoryView(history.player_moves, history.ai_moves, history.outcomes, rng=random.Random(5)), "normal", True)
    b = engine.decide(HistoryView(history.player_moves, history.ai_moves, history.outcomes, rng=random.Random(5)), "normal", True)
    assert a[0] == b[0]
    assert np.allclose(a[1].dist, b[1].dist)


def test_fallback_when_exploit_disabled():
    engine = DecisionEngine()
    move, pending = engine.decide(HistoryView(), Aggression.NORMAL, exploit_enabled=False)
    assert pending.policy == "heuristic"
    assert pending.heuristic.reason == "Low confidence – random choice"
    assert pending.mixer is None
    assert move in (R, P, S)


def test_fallback_counters_clear_pattern():
    engine = DecisionEngine()
    history = HistoryView.from_rounds([(R, S), (R, S), (R, S)])
    move, pending = engine.decide(history, Aggression.RUTHLESS, exploit_enabled=False)
    assert pending.policy == "heuristic"
    assert pending.heuristic.move == R
    assert pending.heuristic.reason == "Markov and pattern consensus"
    assert move == P


def test_fair_mode_never_uses_mixer():
    engine = DecisionEngine()
    _, traces = play(engine, [R] * 8, Aggression.FAIR)
    assert all(t.policy == "heuristic" for t in traces)
    # fair rounds do not train the experts
    assert engine.mixer.experts[2].table == {}
    assert np.allclose(engine.mixer.w, 1.0)


def test_experts_learn_while_ensemble_is_gated():
    engine = DecisionEngine()
    play(engine, [R, P, R, P], Aggression.NORMAL, exploit_enabled=False)
    assert engine.mixer.experts[2].table
    quiet = DecisionEngine(learn_in_fallback=False)
    play(quiet, [R, P, R, P], Aggression.NORMAL, exploit_enabled=False)
    assert quiet.mixer.experts[2].table == {}


def test_first_round_needs_history_for_mixer():
    engine = DecisionEngine()
    _, pending = engine.decide(HistoryView(), Aggression.RUTHLESS, exploit_enabled=True)
    assert pending.policy == "heuristic"


def test_commit_builds_final_trace():
    engine = DecisionEngine()
    history, _ = play(engine, [R, R, P, R, R, P])
    ai, pending = engine.decide(history, Aggression.NORMAL, True)
    assert pending.policy == "mixer"
    assert pending.confidence == pytest.approx(float(np.max(pending.dist)))
    trace = engine.commit(pending, R)
    assert trace.player_move == R
    assert trace.ai_move == ai
    assert trace.outcome == resolve(R, ai)
    assert trace.round_index == 7
    assert len(trace.top_experts) == 3
    weights = [e.weight for e in trace.top_experts]
    assert weights == sorted(weights, reverse=True)
    by_name = {e.name: e for e in pending.mixer.experts}
    for sample in trace.top_experts:
        assert sample.name in EXPERT_REGISTRY
        assert sample.p_actual == pytest.approx(float(by_name[sample.name].dist[R]))
    assert "AI played" in trace.reason
    assert trace.confidence_bucket in ("low", "medium", "high")
    d = trace.to_dict()
    assert d["player"] == "rock"
    assert d["mixer"]["counter"] == str(ai)
    assert engine.state == STATE_IDLE
    assert engine.pending is None


def test_heuristic_trace_reason():
    engine = DecisionEngine()
    history = HistoryView.from_rounds([(P, R), (P, R), (P, R)])
    ai, pending = engine.decide(history, Aggression.RUTHLESS, exploit_enabled=False)
    trace = engine.commit(pending, P)
    assert trace.policy == "heuristic"
    assert trace.dist is None
    assert trace.reason == "Markov and pattern consensus. Predicted Paper (100%). Countered with Scissors."
    assert trace.confidence_bucket == "high"


def test_commit_contract_violations():
    engine = DecisionEngine()
    history = HistoryView()
    _, stale = engine.decide(history, Aggression.NORMAL, True)
    _, pending = engine.decide(history, Aggression.NORMAL, True)
    with pytest.raises(RuntimeError):
        engine.commit(stale, R)
    engine.commit(pending, R)
    with pytest.raises(RuntimeError):
        engine.commit(pending, R)


def test_reset_restores_initial_state():
    engine = DecisionEngine()
    play(engine, [R, R, P, S, R, R, R, P])
    assert not np.allclose(engine.mixer.w, 1.0)
    engine.decide(HistoryView(), Aggression.NORMAL, True)
    engine.reset()
    assert np.allclose(engine.mixer.w, 1.0)
    assert engine.mixer.experts[2].table == {}
    assert engine.pending is None
    assert engine.rounds_committed == 0
    assert [n for n, _ in engine.weights()] == list(EXPERT_REGISTRY)


def test_unequal_history_rejected():
    with pytest.raises(ValueError):
        HistoryView(player_moves=(R, P), ai_moves=(R,), outcomes=(Outcome.TIE,))


def test_trace_logger_receives_final_traces(tmp_path):
    logger = TraceLogger(str(tmp_path))
    engine = DecisionEngine(trace_logger=logger, session_id="match-1")
    play(engine, [R, P, S])
    records = logger.read("match-1")
    assert [r["round"] for r in records] == [1, 2, 3]
    assert all(r["session_id"] == "match-1" for r in records)
    assert records[0]["player"] == "rock"
    assert "ts" in records[0]


def test_mixture_stays_a_distribution_over_random_play():
    engine = DecisionEngine()
    rng = random.Random(2024)
    history = HistoryView(rng=random.Random(5))
    mixer_rounds = 0
    for _ in range(80):
        ai, pending = engine.decide(history, Aggression.NORMAL, True)
        if pending.dist is not None:
            mixer_rounds += 1
            assert len(pending.mixer.experts) == len(EXPERT_REGISTRY)
            assert np.all(pending.dist >= 0)
            assert abs(float(np.sum(pending.dist)) - 1.0) < 1e-9
        player = Move(rng.randrange(3))
        engine.commit(pending, player)
        history = history.advance(player, ai)
    assert mixer_rounds == 79
